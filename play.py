# Launcher for the terminal Snake game.
from __future__ import annotations

import argparse
import curses
import locale

try:
    from .game_logic import GameConfig, SnakeGame
    from .game_runner import GameRunner
    from .sound import make_sound
    from .terminal_gui import CursesScreen
except ImportError:
    from game_logic import GameConfig, SnakeGame
    from game_runner import GameRunner
    from sound import make_sound
    from terminal_gui import CursesScreen


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Snake in the terminal")
    parser.add_argument("--silent", action="store_true", help="Do not play sounds")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    # Audio is set up before curses takes over the terminal so warnings stay readable.
    sound = make_sound(args.silent)
    game = SnakeGame(GameConfig(), sound=sound)

    try:
        screen = CursesScreen()
    except (curses.error, locale.Error) as exc:
        sound.close()
        raise SystemExit(f"Could not initialise the terminal: {exc}")

    try:
        score = GameRunner(game, screen, sound).run()
    except KeyboardInterrupt:
        score = game.score
    print(f"Final score: {score}")


if __name__ == "__main__":
    main()
