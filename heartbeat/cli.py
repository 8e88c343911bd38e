# cli.py
# Entry point: set up the terminal, run the loop, map every exit path to a code.

import logging
import sys
from typing import Callable, Optional, TextIO, Tuple

from rich.console import Console
from rich.logging import RichHandler

from .config import HeartConfig
from .loop import Clock, HeartApp, TickScheduler, Wait, make_input_wait
from .renderer import Renderer, get_term_size
from .terminal import QuitRequested, TerminalSession

err_console = Console(stderr=True, highlight=False, soft_wrap=False)


def setup_logging(level: int = logging.WARNING):
    """Route log records to stderr through rich; stdout carries only frames."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def run(cfg: Optional[HeartConfig] = None, out: Optional[TextIO] = None,
        stdin: Optional[TextIO] = None,
        size: Callable[[], Tuple[int, int]] = get_term_size,
        clock: Optional[Clock] = None, wait: Optional[Wait] = None,
        install_signals: bool = True, max_ticks: Optional[int] = None) -> int:
    """Animate until quit; return the process exit code."""
    cfg = (cfg or HeartConfig()).clamp()
    try:
        with TerminalSession(out=out, stdin=stdin, install_signals=install_signals) as session:
            renderer = Renderer(cfg, out=session.out, size=size)
            app = HeartApp(renderer)
            scheduler = TickScheduler(
                cfg.interval, app.tick, app.handle_input, on_wake=app.check_resize,
                clock=clock, wait=wait or make_input_wait(session.input_fd, session.wake_fd),
            )
            scheduler.run(max_ticks=max_ticks)
    except QuitRequested as e:
        return e.code
    except KeyboardInterrupt:
        return 0
    except Exception:
        # terminal is already restored by the session
        err_console.print_exception()
        return 1
    return 0


def main():
    setup_logging()
    sys.exit(run())


if __name__ == "__main__":
    main()
