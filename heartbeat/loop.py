# loop.py
# Single-threaded tick source and the controller that owns the animation state.

import logging
import os
import select
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .renderer import Renderer
from .terminal import PAUSE_KEYS, QUIT_KEYS, QuitRequested

log = logging.getLogger(__name__)

Clock = Callable[[], float]
Wait = Callable[[float], str]


def make_input_wait(fd: Optional[int], wake_fd: Optional[int] = None) -> Wait:
    """Block up to ``timeout`` seconds for keys on fd; return what arrived ('' otherwise).

    A byte on ``wake_fd`` (a resize) ends the wait early with ''.
    """
    watched = [f for f in (fd, wake_fd) if f is not None]

    def wait(timeout: float) -> str:
        if not watched:
            time.sleep(timeout)
            return ""
        ready, _, _ = select.select(watched, [], [], timeout)
        if wake_fd is not None and wake_fd in ready:
            os.read(wake_fd, 64)
        if fd is not None and fd in ready:
            return os.read(fd, 32).decode("utf-8", errors="ignore")
        return ""
    return wait


class TickScheduler:
    """Fixed-rate ticks interleaved with input events, one callback at a time.

    ``clock`` and ``wait`` are injectable; tests pass a fake clock whose wait
    advances time instead of sleeping. ``on_wake`` runs every time a wait ends,
    so a resize can be handled before the next tick is due.
    """

    def __init__(self, interval: float, on_tick: Callable[[], None],
                 on_input: Optional[Callable[[str], None]] = None,
                 clock: Optional[Clock] = None, wait: Optional[Wait] = None,
                 on_wake: Optional[Callable[[], object]] = None):
        self.interval = interval
        self.on_tick = on_tick
        self.on_input = on_input
        self.on_wake = on_wake
        self.clock = clock or time.monotonic
        self.wait = wait or make_input_wait(None)
        self.running = False

    def stop(self):
        self.running = False

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Run until stop(), an exception, or ``max_ticks`` ticks; return ticks fired."""
        self.running = True
        next_at = self.clock() + self.interval
        fired = 0
        while self.running and (max_ticks is None or fired < max_ticks):
            remaining = next_at - self.clock()
            if remaining > 0:
                data = self.wait(remaining)
                if data and self.on_input is not None:
                    self.on_input(data)
                if self.on_wake is not None:
                    self.on_wake()
                continue
            self.on_tick()
            fired += 1
            next_at += self.interval
            now = self.clock()
            if next_at <= now:  # fell behind, skip the missed ticks
                next_at = now + self.interval
        self.running = False
        return fired


@dataclass
class LoopState:
    t: int = 0
    paused: bool = False
    last_size: Optional[Tuple[int, int]] = None


class HeartApp:
    """Tick and input handlers for the heart; all mutable state lives in ``self.state``."""

    def __init__(self, renderer: Renderer, state: Optional[LoopState] = None):
        self.renderer = renderer
        self.state = state or LoopState()
        if self.state.last_size is None:
            self.state.last_size = renderer.size()

    def tick(self):
        s = self.state
        if not s.paused:
            self.renderer.draw(s.t)
            s.t += 1
        self.check_resize()

    def check_resize(self) -> bool:
        """Redraw the current frame, without advancing it, if the terminal size changed."""
        s = self.state
        size = self.renderer.size()
        if size == s.last_size:
            return False
        log.debug("terminal resized %s -> %s", s.last_size, size)
        s.last_size = size
        self.renderer.draw(s.t, clear=True)
        return True

    def handle_input(self, data: str):
        for ch in data:
            if ch in QUIT_KEYS:
                raise QuitRequested(0)
            if ch in PAUSE_KEYS:
                self.state.paused = not self.state.paused
                log.debug("paused=%s at t=%d", self.state.paused, self.state.t)
