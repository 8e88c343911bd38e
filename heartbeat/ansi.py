# ansi.py
# ANSI/VT escapes and the small color math shared by the renderer.

import math
from typing import Tuple

from rich.color_triplet import ColorTriplet

# ---------- ANSI helpers ----------
CSI = "\x1b["
RESET = CSI + "0m"
HIDE = CSI + "?25l"; SHOW = CSI + "?25h"
ALT_ON = CSI + "?1049h"; ALT_OFF = CSI + "?1049l"
HOME = CSI + "H"; CLEAR = CSI + "2J"

def fg(c: Tuple[int, int, int]) -> str: return f"{CSI}38;2;{c[0]};{c[1]};{c[2]}m"
def bg(c: Tuple[int, int, int]) -> str: return f"{CSI}48;2;{c[0]};{c[1]};{c[2]}m"

# ---------- Utils / Color ----------
def clamp(v, lo=0.0, hi=1.0): return lo if v < lo else hi if v > hi else v
def lerp(a, b, t): return a + (b - a) * t
def round_half_up(v: float) -> int: return math.floor(v + 0.5)

def lerp_rgb(c1: ColorTriplet, c2: ColorTriplet, t: float) -> ColorTriplet:
    return ColorTriplet(*(round_half_up(lerp(a, b, t)) for a, b in zip(c1, c2)))

def luminance(c: Tuple[int, int, int]) -> float:
    """Relative luminance (Rec. 709 weights) on the 0..255 scale."""
    r, g, b = c
    return 0.2126 * r + 0.7152 * g + 0.0722 * b

def brighten(c: ColorTriplet, amount: Tuple[int, int, int], k: float) -> ColorTriplet:
    """Add amount*k (rounded half up) to each channel, clamped to 0..255."""
    return ColorTriplet(*(int(clamp(v + round_half_up(a * k), 0, 255)) for v, a in zip(c, amount)))
