# Curses presentation layer: render sink, keyboard events, and frame drawing.
from __future__ import annotations

import curses
import locale
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union

try:
    from .game_logic import Phase, Snapshot
except ImportError:
    from game_logic import Phase, Snapshot


class Key(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESCAPE = "escape"
    INTERRUPT = "interrupt"
    QUIT = "quit"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    key: Key


@dataclass(frozen=True)
class ResizeEvent:
    pass


Event = Union[KeyEvent, ResizeEvent]


class Style(Enum):
    BORDER = 1
    SNAKE_HEAD = 2
    SNAKE_BODY = 3
    APPLE = 4
    TEXT = 5
    ALERT = 6


class RenderSink(Protocol):
    def clear(self) -> None: ...

    def set_cell(self, x: int, y: int, symbol: str, style: Style) -> None: ...

    def present(self) -> None: ...

    def sync(self) -> None: ...

    def poll_event(self, timeout: float) -> Event | None: ...

    def close(self) -> None: ...


KEY_CODES = {
    curses.KEY_UP: Key.UP,
    curses.KEY_DOWN: Key.DOWN,
    curses.KEY_LEFT: Key.LEFT,
    curses.KEY_RIGHT: Key.RIGHT,
    ord("w"): Key.UP,
    ord("s"): Key.DOWN,
    ord("a"): Key.LEFT,
    ord("d"): Key.RIGHT,
    ord("W"): Key.UP,
    ord("S"): Key.DOWN,
    ord("A"): Key.LEFT,
    ord("D"): Key.RIGHT,
    curses.KEY_ENTER: Key.ENTER,
    10: Key.ENTER,
    13: Key.ENTER,
    27: Key.ESCAPE,
    3: Key.INTERRUPT,  # Ctrl+C arrives as a byte in raw mode
    ord("q"): Key.QUIT,
    ord("Q"): Key.QUIT,
}


def translate_key(code: int) -> Event | None:
    """Map a curses getch() code to an event; -1 means no input."""
    if code == -1:
        return None
    if code == curses.KEY_RESIZE:
        return ResizeEvent()
    return KeyEvent(KEY_CODES.get(code, Key.OTHER))


class CursesScreen:
    """Render sink backed by curses; all curses calls are serialized by one lock."""
    # style -> (foreground, background, glyph attributes)
    PALETTE = {
        Style.BORDER: (curses.COLOR_CYAN, -1, 0),
        Style.SNAKE_HEAD: (curses.COLOR_GREEN, -1, curses.A_BOLD),
        Style.SNAKE_BODY: (curses.COLOR_GREEN, -1, 0),
        Style.APPLE: (curses.COLOR_RED, -1, curses.A_BOLD),
        Style.TEXT: (curses.COLOR_YELLOW, -1, 0),
        Style.ALERT: (curses.COLOR_RED, -1, curses.A_BOLD | curses.A_REVERSE),
    }
    POLL_STEP = 0.01
    # A lone ESC is reported after this many ms instead of the ncurses default second.
    ESC_DELAY_MS = 25

    def __init__(self) -> None:
        # Box-drawing glyphs need the user's locale before initscr().
        locale.setlocale(locale.LC_ALL, "")
        self.lock = threading.Lock()
        self.stdscr = curses.initscr()
        try:
            curses.set_escdelay(self.ESC_DELAY_MS)
            curses.noecho()
            curses.raw()
            self.stdscr.keypad(True)
            self.stdscr.nodelay(True)
            try:
                curses.curs_set(0)
            except curses.error:
                pass  # terminal cannot hide the cursor
            self.attrs = self._init_colors()
        except curses.error:
            self._restore()
            raise

    def _init_colors(self) -> dict[Style, int]:
        attrs = {style: extra for style, (_, _, extra) in self.PALETTE.items()}
        if not curses.has_colors():
            return attrs
        curses.start_color()
        try:
            curses.use_default_colors()
            background_ok = True
        except curses.error:
            background_ok = False
        for style, (fg, bg, extra) in self.PALETTE.items():
            if bg == -1 and not background_ok:
                bg = curses.COLOR_BLACK
            curses.init_pair(style.value, fg, bg)
            attrs[style] = curses.color_pair(style.value) | extra
        return attrs

    def clear(self) -> None:
        with self.lock:
            self.stdscr.erase()

    def set_cell(self, x: int, y: int, symbol: str, style: Style) -> None:
        with self.lock:
            rows, cols = self.stdscr.getmaxyx()
            if not (0 <= x < cols and 0 <= y < rows):
                return
            try:
                self.stdscr.addstr(y, x, symbol, self.attrs[style])
            except curses.error:
                # Writing the bottom-right cell moves the cursor off-screen.
                pass

    def present(self) -> None:
        with self.lock:
            self.stdscr.refresh()

    def sync(self) -> None:
        """Re-layout after the terminal was resized."""
        with self.lock:
            curses.update_lines_cols()
            self.stdscr.clear()

    def poll_event(self, timeout: float) -> Event | None:
        deadline = time.monotonic() + timeout
        while True:
            with self.lock:
                code = self.stdscr.getch()
            event = translate_key(code)
            if event is not None or time.monotonic() >= deadline:
                return event
            time.sleep(self.POLL_STEP)

    def close(self) -> None:
        with self.lock:
            self._restore()

    def _restore(self) -> None:
        self.stdscr.keypad(False)
        curses.noraw()
        curses.echo()
        curses.endwin()


# --- frame drawing -------------------------------------------------------

SNAKE_HEAD_GLYPH = "█"
SNAKE_BODY_GLYPH = "▒"
APPLE_GLYPH = "●"

LOADING_MESSAGE = "PRESS <ENTER> TO START THE GAME"
GAME_OVER_MESSAGE = "You lost :("
BOARD_CLEARED_MESSAGE = "Board cleared, you win!"
HELP_LINES = (
    "Press ESC or Ctrl+C to quit",
    "Use the arrow keys (or WASD) to steer the snake",
)


def draw_text(screen: RenderSink, x: int, y: int, text: str, style: Style = Style.TEXT) -> None:
    for offset, char in enumerate(text):
        screen.set_cell(x + offset, y, char, style)


def draw_board(screen: RenderSink, snapshot: Snapshot) -> None:
    """Border around the interior, then score and help lines under it."""
    width, height = snapshot.board.width, snapshot.board.height
    screen.set_cell(0, 0, "┌", Style.BORDER)
    screen.set_cell(width, 0, "┐", Style.BORDER)
    screen.set_cell(0, height, "└", Style.BORDER)
    screen.set_cell(width, height, "┘", Style.BORDER)
    for x in range(1, width):
        screen.set_cell(x, 0, "─", Style.BORDER)
        screen.set_cell(x, height, "─", Style.BORDER)
    for y in range(1, height):
        screen.set_cell(0, y, "│", Style.BORDER)
        screen.set_cell(width, y, "│", Style.BORDER)

    draw_text(screen, 1, height + 1, f"Score: {snapshot.score}")
    for row, line in enumerate(HELP_LINES):
        draw_text(screen, 1, height + 3 + row, line)


def draw_snake(screen: RenderSink, snapshot: Snapshot) -> None:
    for idx, position in enumerate(snapshot.body):
        if idx == 0:
            screen.set_cell(position.x, position.y, SNAKE_HEAD_GLYPH, Style.SNAKE_HEAD)
        else:
            screen.set_cell(position.x, position.y, SNAKE_BODY_GLYPH, Style.SNAKE_BODY)


def draw_centered(screen: RenderSink, snapshot: Snapshot, message: str, style: Style) -> None:
    x = max(1, (snapshot.board.width - len(message)) // 2)
    draw_text(screen, x, snapshot.board.height // 2, message, style)


def draw_frame(screen: RenderSink, snapshot: Snapshot) -> None:
    """Render one full frame: board, apple, snake, and the loading/ending overlay."""
    screen.clear()
    draw_board(screen, snapshot)
    if snapshot.apple is not None:
        apple = snapshot.apple.position
        screen.set_cell(apple.x, apple.y, APPLE_GLYPH, Style.APPLE)
    draw_snake(screen, snapshot)

    if snapshot.phase is Phase.LOADING:
        draw_centered(screen, snapshot, LOADING_MESSAGE, Style.TEXT)
    elif snapshot.phase is Phase.OVER:
        message = BOARD_CLEARED_MESSAGE if snapshot.won else GAME_OVER_MESSAGE
        draw_centered(screen, snapshot, message, Style.ALERT)
    screen.present()
