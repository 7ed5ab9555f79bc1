# Threaded game loop: fixed-interval ticker, keyboard listener, shared shutdown event.
from __future__ import annotations

import queue
import threading
import time
from typing import Callable, Protocol

try:
    from .game_logic import Direction, SnakeGame
    from .terminal_gui import Event, Key, KeyEvent, RenderSink, ResizeEvent, draw_frame
except ImportError:
    from game_logic import Direction, SnakeGame
    from terminal_gui import Event, Key, KeyEvent, RenderSink, ResizeEvent, draw_frame


KEY_DIRECTIONS = {
    Key.UP: Direction.UP,
    Key.DOWN: Direction.DOWN,
    Key.LEFT: Direction.LEFT,
    Key.RIGHT: Direction.RIGHT,
}
QUIT_KEYS = {Key.ESCAPE, Key.INTERRUPT, Key.QUIT}


class Closeable(Protocol):
    def close(self) -> None: ...


class GameRunner:
    """
    Runs one game until the player quits.

    Two worker threads share the game:
    - ticker: every `interval` seconds drains queued directions, advances the
      game if it is running and renders a frame (the only mutator of the snake);
    - listener: polls the render sink for key/resize events, feeds direction
      keys into a bounded queue and handles start/quit directly.
    Both stop when `stop_event` is set; run() then releases the screen and sound.
    """
    def __init__(
        self,
        game: SnakeGame,
        screen: RenderSink,
        sound: Closeable | None = None,
        interval: float | None = None,
        queue_size: int | None = None,
    ) -> None:
        self.game = game
        self.screen = screen
        self.sound = sound
        self.interval = game.config.interval if interval is None else interval
        size = game.config.queue_size if queue_size is None else queue_size
        self.directions: queue.Queue[Direction] = queue.Queue(maxsize=size)
        self.stop_event = threading.Event()
        self.errors: queue.Queue[BaseException] = queue.Queue()
        self.workers: list[threading.Thread] = []

    # --- single steps (also used directly by tests) ---------------------

    def render(self) -> None:
        draw_frame(self.screen, self.game.snapshot())

    def drain_directions(self) -> list[Direction]:
        pending: list[Direction] = []
        try:
            while True:
                pending.append(self.directions.get_nowait())
        except queue.Empty:
            pass
        return pending

    def step(self) -> None:
        """One tick: apply queued input, move if running, then redraw."""
        pending = self.drain_directions()
        if pending:
            self.game.steer(pending)
        if self.game.should_continue():
            self.game.tick()
        self.render()

    def handle_event(self, event: Event) -> None:
        if isinstance(event, ResizeEvent):
            self.screen.sync()
            return
        if not isinstance(event, KeyEvent):
            return

        if event.key in QUIT_KEYS:
            self.stop()
        elif event.key is Key.ENTER:
            self.game.start()
        elif event.key in KEY_DIRECTIONS and not self.game.has_ended():
            self.enqueue_direction(KEY_DIRECTIONS[event.key])

    def enqueue_direction(self, direction: Direction) -> bool:
        """Queue a direction for the next tick; a queue that stays full drops it."""
        try:
            self.directions.put(direction, timeout=self.interval)
        except queue.Full:
            return False
        return True

    def stop(self) -> None:
        self.stop_event.set()

    # --- worker loops -------------------------------------------------------

    def _tick_loop(self) -> None:
        next_at = time.monotonic()
        while not self.stop_event.is_set():
            next_at += self.interval
            now = time.monotonic()
            if next_at < now:
                # Periods missed during a slow frame are dropped, not replayed.
                next_at = now
            if self.stop_event.wait(next_at - now):
                break
            self.step()

    def _listen_loop(self) -> None:
        while not self.stop_event.is_set():
            event = self.screen.poll_event(self.interval / 2)
            if event is not None:
                self.handle_event(event)

    def _guarded(self, fn: Callable[[], None]) -> Callable[[], None]:
        def worker() -> None:
            try:
                fn()
            except Exception as exc:
                self.errors.put(exc)
                self.stop()

        return worker

    def _launch_worker(self, fn: Callable[[], None], name: str) -> None:
        thread = threading.Thread(target=self._guarded(fn), name=name, daemon=True)
        self.workers.append(thread)
        thread.start()

    def run(self) -> int:
        """Block until quit; returns the final score. Worker errors are re-raised."""
        try:
            self.render()
            self._launch_worker(self._tick_loop, "snake-ticker")
            self._launch_worker(self._listen_loop, "snake-input")
            while not self.stop_event.wait(self.interval):
                pass
        finally:
            self.stop()
            for thread in self.workers:
                thread.join()
            self.screen.close()
            if self.sound is not None:
                self.sound.close()

        if not self.errors.empty():
            raise self.errors.get_nowait()
        return self.game.score
