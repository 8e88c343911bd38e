# config.py
# Fixed animation constants. Nothing here is read from disk or the command line.

import math
from dataclasses import dataclass, replace
from typing import Tuple

from rich.color_triplet import ColorTriplet

from .ansi import clamp

@dataclass
class HeartConfig:
    # Timing
    fps: int = 28
    pulse_hz: float = 0.9
    pulse_amplitude: float = 0.06
    shine_drift: float = 0.7          # radians per second
    # Geometry
    x_span: float = 1.6
    y_span: float = 1.25              # vertical squash to counter char aspect
    y_squash: float = 0.95
    min_cols: int = 48; max_cols: int = 80
    min_rows: int = 24; max_rows: int = 30
    # Colors
    top_color: ColorTriplet = ColorTriplet(255, 45, 85)       # cherry
    bottom_color: ColorTriplet = ColorTriplet(255, 142, 163)  # soft pink
    text_dark: ColorTriplet = ColorTriplet(20, 20, 20)
    text_light: ColorTriplet = ColorTriplet(255, 255, 255)
    luminance_threshold: float = 155.0
    # Text
    message_single: str = "happy birthday"
    message_split: Tuple[str, ...] = ("happy", "birthday")

    @property
    def omega(self) -> float:
        return 2 * math.pi * self.pulse_hz

    @property
    def interval(self) -> float:
        """Tick interval in seconds (whole milliseconds)."""
        return round(1000 / self.fps) / 1000.0

    def clamp(self) -> "HeartConfig":
        """Return a copy with out-of-range values pulled back; ``self`` is left untouched."""
        min_cols = max(1, self.min_cols)
        min_rows = max(1, self.min_rows)
        return replace(
            self,
            fps=clamp(self.fps, 1, 120),
            pulse_amplitude=clamp(self.pulse_amplitude, 0.0, 0.5),
            min_cols=min_cols, max_cols=max(min_cols, self.max_cols),
            min_rows=min_rows, max_rows=max(min_rows, self.max_rows),
            luminance_threshold=clamp(self.luminance_threshold, 0.0, 255.0),
        )
