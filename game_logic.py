# Core Snake game state and rules, independent from terminal/audio code.
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
import random
import threading
from typing import Iterable, Protocol


DEFAULT_WIDTH = 70
DEFAULT_HEIGHT = 20
DEFAULT_TICK_MS = 100
SCORE_PER_APPLE = 5
DIRECTION_QUEUE_SIZE = 10


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def moved(self, direction: Direction) -> Position:
        dx, dy = direction.delta
        return Position(self.x + dx, self.y + dy)


class Direction(Enum):
    UP = (0, -1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)
    DOWN = (0, 1)

    @property
    def delta(self) -> tuple[int, int]:
        return self.value

    @property
    def opposite(self) -> Direction:
        dx, dy = self.value
        return Direction((-dx, -dy))


INITIAL_BODY = (
    Position(9, 7),
    Position(9, 8),
    Position(9, 9),
    Position(9, 10),
    Position(9, 11),
)


@dataclass
class GameConfig:
    """Runtime settings shared between the engine, scheduler and launcher."""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    tick_ms: int = DEFAULT_TICK_MS
    score_per_apple: int = SCORE_PER_APPLE
    queue_size: int = DIRECTION_QUEUE_SIZE
    initial_body: tuple[Position, ...] = INITIAL_BODY
    initial_direction: Direction = Direction.UP

    @property
    def interval(self) -> float:
        return self.tick_ms / 1000.0


class BoardFullError(RuntimeError):
    """Raised when there is no free interior cell left for an apple."""


class Board:
    """Fixed grid; border at x=0, x=width, y=0, y=height, interior in between."""
    def __init__(self, width: int, height: int) -> None:
        if width < 2 or height < 2:
            raise ValueError(f"Board needs at least one interior cell, got {width}x{height}.")
        self.width = width
        self.height = height
        self.area: tuple[Position, ...] = tuple(
            Position(x, y) for x in range(1, width) for y in range(1, height)
        )
        self._cells = frozenset(self.area)

    def contains(self, position: Position) -> bool:
        return position in self._cells

    def __repr__(self) -> str:
        return f"<Board {self.width}x{self.height}>"


@dataclass(frozen=True)
class Apple:
    position: Position


class Snake:
    """Ordered body, head at index 0; growth is an explicit flag consumed by move()."""
    def __init__(self, body: Iterable[Position]) -> None:
        self.body: deque[Position] = deque(body)
        if not self.body:
            raise ValueError("Snake needs at least one segment.")
        if len(set(self.body)) != len(self.body):
            raise ValueError("Snake segments must not overlap.")
        self.grow_pending = False

    @property
    def head(self) -> Position:
        return self.body[0]

    @property
    def segments(self) -> tuple[Position, ...]:
        return tuple(self.body)

    def __len__(self) -> int:
        return len(self.body)

    def contains(self, position: Position) -> bool:
        return position in self.body

    def next_head_position(self, direction: Direction) -> Position:
        return self.head.moved(direction)

    def can_move(self, board: Board, direction: Direction) -> bool:
        """False when the next head hits the body or leaves the board interior."""
        position = self.next_head_position(direction)
        if self.contains(position):
            return False
        return board.contains(position)

    def move(self, direction: Direction) -> None:
        self.body.appendleft(self.next_head_position(direction))
        if self.grow_pending:
            # Keep the tail exactly once after an apple.
            self.grow_pending = False
        else:
            self.body.pop()

    def can_eat(self, apple: Apple | None) -> bool:
        return apple is not None and self.head == apple.position

    def eat(self, apple: Apple) -> None:
        """Swallow the apple: the next move keeps the tail."""
        self.grow_pending = True


class RandomLike(Protocol):
    def choice(self, seq): ...


def spawn_apple(board: Board, snake: Snake, rng: RandomLike = random) -> Apple:
    """Pick an apple cell uniformly among interior cells not covered by the snake."""
    free = [position for position in board.area if not snake.contains(position)]
    if not free:
        raise BoardFullError(f"No free cell left on {board!r}.")
    return Apple(rng.choice(free))


class SoundLike(Protocol):
    def on_eat(self) -> None: ...

    def on_game_over(self) -> None: ...


class Phase(Enum):
    LOADING = "loading"
    RUNNING = "running"
    OVER = "over"


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of one consistent game state, used for rendering."""
    board: Board
    body: tuple[Position, ...]
    apple: Apple | None
    direction: Direction
    score: int
    phase: Phase
    won: bool = False


class SnakeGame:
    """Game state + rules; every public method runs under one lock."""
    def __init__(
        self,
        config: GameConfig | None = None,
        sound: SoundLike | None = None,
        rng: RandomLike = random,
    ) -> None:
        self.config = config or GameConfig()
        self.sound = sound
        self.rng = rng
        self.lock = threading.Lock()
        self.board = Board(self.config.width, self.config.height)
        self.snake = Snake(self.config.initial_body)
        self._direction = self.config.initial_direction
        self._started = False
        self._over = False
        self._won = False
        self._score = 0
        self.apple: Apple | None = spawn_apple(self.board, self.snake, self.rng)

    # --- state accessors -------------------------------------------------

    @property
    def direction(self) -> Direction:
        with self.lock:
            return self._direction

    @property
    def score(self) -> int:
        with self.lock:
            return self._score

    @property
    def won(self) -> bool:
        with self.lock:
            return self._won

    @property
    def phase(self) -> Phase:
        with self.lock:
            return self._phase()

    def _phase(self) -> Phase:
        if self._over:
            return Phase.OVER
        if self._started:
            return Phase.RUNNING
        return Phase.LOADING

    def has_started(self) -> bool:
        with self.lock:
            return self._started

    def has_ended(self) -> bool:
        with self.lock:
            return self._over

    def should_continue(self) -> bool:
        with self.lock:
            return self._started and not self._over

    def snapshot(self) -> Snapshot:
        with self.lock:
            return Snapshot(
                board=self.board,
                body=self.snake.segments,
                apple=self.apple,
                direction=self._direction,
                score=self._score,
                phase=self._phase(),
                won=self._won,
            )

    # --- commands -------------------------------------------------------

    def start(self) -> None:
        """Leave the loading screen; no-op once started or over."""
        with self.lock:
            if not self._over:
                self._started = True

    def _accepts(self, direction: Direction) -> bool:
        if self._over or direction == self._direction:
            return False
        # Reversing into the neck is only possible with a body behind the head.
        if len(self.snake) > 1 and direction == self._direction.opposite:
            return False
        return True

    def change_direction(self, direction: Direction) -> bool:
        """Apply one direction if it is neither a no-op nor a 180-degree turn."""
        with self.lock:
            if not self._accepts(direction):
                return False
            self._direction = direction
            return True

    def steer(self, directions: Iterable[Direction]) -> bool:
        """Apply the latest acceptable direction from a batch queued between ticks."""
        with self.lock:
            chosen = None
            for direction in directions:
                if self._accepts(direction):
                    chosen = direction
            if chosen is None:
                return False
            self._direction = chosen
            return True

    def tick(self) -> bool:
        """Advance one step while running. Returns False once the game is over."""
        with self.lock:
            if self._over:
                return False
            if not self._started:
                return True

            if not self.snake.can_move(self.board, self._direction):
                self._end()
                return False

            next_head = self.snake.next_head_position(self._direction)
            if self.apple is not None and next_head == self.apple.position:
                self.snake.eat(self.apple)
            self.snake.move(self._direction)

            if self.snake.can_eat(self.apple):
                if self.sound is not None:
                    self.sound.on_eat()
                self._score += self.config.score_per_apple
                try:
                    self.apple = spawn_apple(self.board, self.snake, self.rng)
                except BoardFullError:
                    self.apple = None
                    self._won = True
                    self._end()
                    return False
            return True

    def _end(self) -> None:
        # Caller holds the lock; the game-over sound plays once on entry.
        if self._over:
            return
        self._over = True
        if self.sound is not None:
            self.sound.on_game_over()
