"""Shared test doubles for the render sink and the audio backend."""

import time
from collections import deque

import pytest


class FakeScreen:
    """In-memory render sink that replays a scripted list of events."""

    def __init__(self, events=()):
        self.cells = {}
        self.events = deque(events)
        self.frames = 0
        self.syncs = 0
        self.closed = False

    def clear(self):
        self.cells = {}

    def set_cell(self, x, y, symbol, style):
        self.cells[(x, y)] = (symbol, style)

    def present(self):
        self.frames += 1

    def sync(self):
        self.syncs += 1

    def poll_event(self, timeout):
        if self.events:
            return self.events.popleft()
        time.sleep(min(timeout, 0.01))
        return None

    def close(self):
        self.closed = True

    def symbol_at(self, x, y):
        return self.cells.get((x, y), (" ", None))[0]

    def row_text(self, y):
        xs = [x for (x, row) in self.cells if row == y]
        if not xs:
            return ""
        return "".join(self.symbol_at(x, y) for x in range(max(xs) + 1))


class RecordingSound:
    """Counts audio signals instead of playing them."""

    def __init__(self):
        self.eats = 0
        self.game_overs = 0
        self.closed = False

    def on_eat(self):
        self.eats += 1

    def on_game_over(self):
        self.game_overs += 1

    def close(self):
        self.closed = True


@pytest.fixture
def make_screen():
    return FakeScreen


@pytest.fixture
def sound():
    return RecordingSound()
