# renderer.py
# Implicit-curve heart with a vertical gradient, edge glow, a drifting shine band
# and a phrase centred on the widest inside run of its row.

import math
import shutil
import sys
from typing import Callable, List, NamedTuple, Optional, Sequence, TextIO, Tuple

from rich.color_triplet import ColorTriplet

from .ansi import CLEAR, HOME, RESET, bg, brighten, clamp, fg, lerp_rgb, luminance
from .config import HeartConfig

EDGE_GLOW = (80, 60, 60)
SHINE_GLOW = (70, 40, 40)

# ---------- Curve ----------
def heart_f(x: float, y: float) -> float:
    """(x²+y²-1)³ - x²y³; non-positive inside the heart."""
    x2, y2 = x * x, y * y
    return (x2 + y2 - 1) ** 3 - x2 * y * y2

def pulse_at(t: int, cfg: HeartConfig) -> float:
    return 1 + cfg.pulse_amplitude * math.sin((t / cfg.fps) * cfg.omega)

def cell_xy(c: int, r: int, cols: int, rows: int, pulse: float, cfg: HeartConfig) -> Tuple[float, float]:
    x0 = ((c - cols / 2 + 0.5) / (cols / 2)) * cfg.x_span
    y0 = -((r - rows / 2 + 0.5) / (rows / 2)) * cfg.y_span
    return x0 / pulse, y0 / (pulse * cfg.y_squash)

# ---------- Viewport ----------
class Viewport(NamedTuple):
    term_cols: int
    term_rows: int
    cols: int
    rows: int
    left_pad: int
    top_pad: int

def get_term_size() -> Tuple[int, int]:
    size = shutil.get_terminal_size(fallback=(80, 24))
    return size.columns, size.lines

def compute_viewport(term_cols: int, term_rows: int, cfg: HeartConfig) -> Viewport:
    """Clamp the drawing area to the configured bounds and centre it in the terminal."""
    cols = clamp(term_cols, cfg.min_cols, cfg.max_cols)
    rows = clamp(min(term_rows, math.floor(cols * 0.4)), cfg.min_rows, cfg.max_rows)
    left_pad = max(0, (term_cols - cols) // 2)
    top_pad = max(0, (term_rows - rows) // 2)
    return Viewport(term_cols, term_rows, cols, rows, left_pad, top_pad)

# ---------- Text placement ----------
def pick_text_rows(cols: int, rows: int, cfg: HeartConfig) -> List[Tuple[int, str]]:
    if cols >= len(cfg.message_single) + 4:
        return [(math.floor(rows * 0.52), cfg.message_single)]
    picks = [math.floor(rows * 0.46), math.floor(rows * 0.6)]
    return list(zip(picks, cfg.message_split))

def longest_run(inside: Sequence[bool]) -> Tuple[int, int]:
    """(start, length) of the first longest run of True; (0, 0) when there is none."""
    best_start, best_len = 0, 0
    cur = -1
    for c, flag in enumerate(inside):
        if flag:
            if cur < 0: cur = c
        elif cur >= 0:
            if c - cur > best_len: best_start, best_len = cur, c - cur
            cur = -1
    if cur >= 0 and len(inside) - cur > best_len:
        best_start, best_len = cur, len(inside) - cur
    return best_start, best_len

def text_start(run_start: int, run_len: int, cols: int, text: str) -> Optional[int]:
    n = len(text)
    if run_len >= n + 2:
        return run_start + (run_len - n) // 2
    if cols >= n + 2:
        return (cols - n) // 2
    return None

# ---------- Shading ----------
def shade(x: float, y: float, f: float, t: int, cfg: HeartConfig) -> ColorTriplet:
    gv = clamp((y + cfg.y_span) / (2 * cfg.y_span))
    color = lerp_rgb(cfg.top_color, cfg.bottom_color, gv)

    edge = clamp(0.6 - abs(f) * 3, 0, 0.6)  # stronger near boundary
    color = brighten(color, EDGE_GLOW, edge)

    phase = (t / cfg.fps) * cfg.shine_drift
    band = math.sin((x + y) * 2 + phase) * 0.5 + 0.5
    shine = clamp(band - 0.35, 0, 1) ** 1.8
    return brighten(color, SHINE_GLOW, shine)

def text_color(back: Tuple[int, int, int], cfg: HeartConfig) -> ColorTriplet:
    return cfg.text_dark if luminance(back) > cfg.luminance_threshold else cfg.text_light

# ---------- Frame ----------
def render_frame(t: int, vp: Viewport, cfg: HeartConfig) -> str:
    cols, rows = vp.cols, vp.rows
    pulse = pulse_at(t, cfg)

    field: List[List[Tuple[float, float, float]]] = []
    for r in range(rows):
        row = []
        for c in range(cols):
            x, y = cell_xy(c, r, cols, rows, pulse, cfg)
            row.append((x, y, heart_f(x, y)))
        field.append(row)

    placed = {}
    for r, text in pick_text_rows(cols, rows, cfg):
        start, length = longest_run([f <= 0 for _, _, f in field[r]])
        at = text_start(start, length, cols, text)
        if at is not None:
            placed[r] = (at, text)

    out = [HOME, "\n" * vp.top_pad]
    pad = " " * vp.left_pad
    for r, row in enumerate(field):
        out.append(pad)
        at, text = placed.get(r, (-1, ""))
        for c, (x, y, f) in enumerate(row):
            if f > 0:
                out.append(RESET + " ")
                continue
            back = shade(x, y, f, t, cfg)
            if at <= c < at + len(text):
                out.append(bg(back) + fg(text_color(back, cfg)) + text[c - at])
            else:
                out.append(bg(back) + " ")
        out.append(RESET + "\n")
    return "".join(out)

# ---------- Flicker-free renderer ----------
class Renderer:
    """Writes whole frames in a single write so the terminal never shows a half-drawn heart."""

    def __init__(self, cfg: Optional[HeartConfig] = None, out: Optional[TextIO] = None,
                 size: Callable[[], Tuple[int, int]] = get_term_size):
        self.cfg = cfg or HeartConfig()
        self.out = out if out is not None else sys.stdout
        self.size = size

    def viewport(self) -> Viewport:
        return compute_viewport(*self.size(), self.cfg)

    def write(self, data: str):
        self.out.write(data)
        self.out.flush()

    def draw(self, t: int, clear: bool = False) -> Viewport:
        """Compose frame ``t`` for the current terminal size and emit it.

        ``clear`` wipes the screen first, in the same write, so a shrink leaves no stale cells.
        """
        vp = self.viewport()
        self.write((CLEAR if clear else "") + render_frame(t, vp, self.cfg))
        return vp
