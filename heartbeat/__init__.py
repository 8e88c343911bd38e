"""Animated true-color ASCII heart for the terminal."""

from .config import HeartConfig
from .renderer import Renderer, compute_viewport, heart_f, render_frame

__all__ = ["HeartConfig", "Renderer", "compute_viewport", "heart_f", "render_frame"]
__version__ = "0.1.0"
