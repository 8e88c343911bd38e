# terminal.py
# Full-screen terminal session: alternate screen, hidden cursor, raw keyboard input,
# and a restore step that runs exactly once however the process ends.

import atexit
import ctypes
import logging
import os
import signal
import sys
from typing import Callable, List, Optional, TextIO

if os.name == "nt":  # no termios: keys have no effect
    termios = None
else:
    import termios

from .ansi import ALT_OFF, ALT_ON, CLEAR, HIDE, HOME, RESET, SHOW

log = logging.getLogger(__name__)

QUIT_KEYS = ("q", "Q", "\x03")
PAUSE_KEYS = (" ", "\r")


class QuitRequested(SystemExit):
    """Raised from the input handler to leave the render loop with a clean exit code."""

    def __init__(self, code: int = 0):
        super().__init__(code)


class ShutdownHook:
    """Runs the wrapped callbacks once; later calls are no-ops."""

    def __init__(self):
        self._callbacks: List[Callable[[], None]] = []
        self.fired = False

    def add(self, fn: Callable[[], None]):
        self._callbacks.append(fn)
        return fn

    def __call__(self):
        if self.fired:
            return
        self.fired = True
        # last acquired, first released
        for fn in reversed(self._callbacks):
            fn()


def enable_vt_mode(kernel32=None) -> bool:
    """Turn on ANSI/VT escape processing for the Windows console; no-op elsewhere."""
    if kernel32 is None:
        if os.name != "nt":
            return False
        kernel32 = ctypes.windll.kernel32
    h = kernel32.GetStdHandle(-11)  # STD_OUTPUT_HANDLE
    mode = ctypes.c_uint32()
    if not kernel32.GetConsoleMode(h, ctypes.byref(mode)):
        return False
    kernel32.SetConsoleMode(h, mode.value | 0x0004)  # ENABLE_VIRTUAL_TERMINAL_PROCESSING
    return True


def enable_raw_mode(fd: int) -> Optional[list]:
    """Switch fd to raw input; return the previous attributes or None if it is not a TTY.

    Output post-processing is left alone so newlines still return the carriage.
    """
    if termios is None or not os.isatty(fd):
        return None
    try:
        old = termios.tcgetattr(fd)
    except termios.error as e:
        log.debug("raw mode unavailable: %s", e)
        return None
    new = list(old)
    new[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    new[2] |= termios.CS8
    new[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    new[6] = list(old[6])
    new[6][termios.VMIN] = 1
    new[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSAFLUSH, new)
    return old


def restore_mode(fd: int, old: Optional[list]):
    if old is not None and termios is not None:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


class TerminalSession:
    """Context manager pairing the screen setup with its restore.

    Restore runs on normal exit, on SIGTERM/SIGHUP, on an exception escaping the
    ``with`` body, and from ``atexit`` as a last resort, but only once.
    """

    def __init__(self, out: Optional[TextIO] = None, stdin: Optional[TextIO] = None,
                 install_signals: bool = True):
        self.out = out if out is not None else sys.stdout
        self.stdin = stdin if stdin is not None else sys.stdin
        self.install_signals = install_signals
        self.shutdown = ShutdownHook()
        self.interactive = False
        self._fd: Optional[int] = None
        self._saved_mode = None
        self._saved_handlers = {}
        self._wake_pipe = ()
        self._saved_wakeup = -1

    def _write(self, data: str):
        self.out.write(data)
        self.out.flush()

    def _restore_screen(self):
        self._write(RESET + SHOW + ALT_OFF)

    def _restore_input(self):
        restore_mode(self._fd, self._saved_mode)

    def _restore_signals(self):
        for sig, handler in self._saved_handlers.items():
            signal.signal(sig, handler)

    def _restore_wakeup(self):
        signal.set_wakeup_fd(self._saved_wakeup)
        for fd in self._wake_pipe:
            os.close(fd)
        self._wake_pipe = ()

    @staticmethod
    def _on_signal(signum, frame):
        raise QuitRequested(0)

    @staticmethod
    def _on_resize(signum, frame):
        # the wake pipe carries the event; the loop re-reads the size itself
        pass

    def _install_resize_wakeup(self):
        sig = getattr(signal, "SIGWINCH", None)
        if sig is None:
            return
        r, w = os.pipe()
        os.set_blocking(r, False)
        os.set_blocking(w, False)
        self._wake_pipe = (r, w)
        self._saved_wakeup = signal.set_wakeup_fd(w)
        self.shutdown.add(self._restore_wakeup)
        self._saved_handlers[sig] = signal.signal(sig, self._on_resize)

    def __enter__(self):
        if enable_vt_mode():
            log.debug("enabled VT processing on the Windows console")
        self._write(ALT_ON + HIDE + CLEAR + HOME)
        self.shutdown.add(self._restore_screen)

        try:
            self._fd = self.stdin.fileno()
        except (AttributeError, OSError, ValueError):
            self._fd = None
        if self._fd is not None:
            self._saved_mode = enable_raw_mode(self._fd)
        self.interactive = self._saved_mode is not None
        if self.interactive:
            self.shutdown.add(self._restore_input)
        else:
            log.debug("stdin is not a terminal; keyboard input disabled")

        if self.install_signals:
            for name in ("SIGTERM", "SIGHUP"):
                sig = getattr(signal, name, None)
                if sig is not None:
                    self._saved_handlers[sig] = signal.signal(sig, self._on_signal)
            self.shutdown.add(self._restore_signals)
            self._install_resize_wakeup()

        atexit.register(self.shutdown)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        atexit.unregister(self.shutdown)
        return False

    @property
    def input_fd(self) -> Optional[int]:
        """File descriptor to poll for keys, or None when input is not attached."""
        return self._fd if self.interactive else None

    @property
    def wake_fd(self) -> Optional[int]:
        """Read end of the pipe that becomes readable when the terminal is resized."""
        return self._wake_pipe[0] if self._wake_pipe else None
