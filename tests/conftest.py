"""
Pytest fixtures: a fake clock that advances instead of sleeping, and a
resizable terminal size stub.
"""

import io

import pytest


class FakeClock:
    """Clock plus input source for TickScheduler.

    ``keys`` is a list of (time, data) pairs delivered once the clock reaches them.
    """

    def __init__(self, keys=None):
        self.now = 0.0
        self.keys = list(keys or [])

    def __call__(self):
        return self.now

    def wait(self, timeout):
        if self.keys and self.keys[0][0] <= self.now + timeout:
            at, data = self.keys.pop(0)
            self.now = max(self.now, at)
            return data
        self.now += timeout
        return ""


class FakeSize:
    def __init__(self, cols=80, rows=24):
        self.cols, self.rows = cols, rows

    def __call__(self):
        return self.cols, self.rows


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def term_size():
    return FakeSize()


@pytest.fixture
def out():
    return io.StringIO()
