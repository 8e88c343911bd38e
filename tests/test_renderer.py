"""
Tests for the heart curve, viewport, text placement, shading and frame composition.
"""

import random
import re

import pytest
from rich.color_triplet import ColorTriplet

from heartbeat.ansi import HOME, RESET, brighten, lerp_rgb, round_half_up
from heartbeat.config import HeartConfig
from heartbeat.renderer import (
    Renderer,
    compute_viewport,
    heart_f,
    longest_run,
    pick_text_rows,
    pulse_at,
    render_frame,
    shade,
    text_color,
    text_start,
)

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
LONG_MESSAGE = "happy birthday to the most wonderful person ever"


def strip_ansi(s: str) -> str:
    return ANSI_RE.sub("", s)


def test_origin_is_inside() -> None:
    assert heart_f(0.0, 0.0) == -1
    assert heart_f(0.0, 0.0) <= 0


@pytest.mark.parametrize("x,y", [(2, 0), (0, 2), (-2, 0), (0, -2), (1.5, 1.5), (-3, 4), (10, -10)])
def test_far_points_are_outside(x, y) -> None:
    assert x * x + y * y >= 4
    assert heart_f(x, y) > 0


def test_pulse_is_one_at_start() -> None:
    assert pulse_at(0, HeartConfig()) == 1


@pytest.mark.parametrize("cols,rows", [(20, 10), (500, 200), (80, 24), (48, 24), (1, 1), (64, 100)])
def test_viewport_is_clamped(cols, rows) -> None:
    vp = compute_viewport(cols, rows, HeartConfig())
    assert 48 <= vp.cols <= 80
    assert 24 <= vp.rows <= 30
    assert vp.left_pad >= 0 and vp.top_pad >= 0


def test_viewport_is_centered() -> None:
    vp = compute_viewport(500, 200, HeartConfig())
    assert (vp.cols, vp.rows) == (80, 30)
    assert vp.left_pad == 210
    assert vp.top_pad == 85
    assert compute_viewport(500, 200, HeartConfig()) == vp


def test_tiny_terminal_has_no_padding() -> None:
    vp = compute_viewport(20, 10, HeartConfig())
    assert (vp.cols, vp.rows, vp.left_pad, vp.top_pad) == (48, 24, 0, 0)


def test_shading_channels_are_clamped_ints() -> None:
    cfg = HeartConfig()
    rnd = random.Random(7)
    for _ in range(500):
        x, y = rnd.uniform(-3, 3), rnd.uniform(-3, 3)
        f = rnd.choice([heart_f(x, y), 0.0, -1.0, -1e6, 1e6])
        t = rnd.randint(0, 100000)
        color = shade(x, y, f, t, cfg)
        assert all(isinstance(v, int) for v in color)
        assert all(0 <= v <= 255 for v in color)


def test_text_color_contrasts_with_background() -> None:
    cfg = HeartConfig()
    assert text_color(ColorTriplet(255, 255, 255), cfg) == cfg.text_dark
    assert text_color(ColorTriplet(255, 45, 85), cfg) == cfg.text_light


def test_wide_viewport_uses_one_text_row() -> None:
    cfg = HeartConfig()
    picks = pick_text_rows(48, 24, cfg)
    assert picks == [(12, "happy birthday")]


def test_narrow_viewport_splits_phrase() -> None:
    cfg = HeartConfig(message_single=LONG_MESSAGE)
    picks = pick_text_rows(48, 24, cfg)
    assert len(picks) == 2
    assert [text for _, text in picks] == ["happy", "birthday"]
    assert picks[0][0] < picks[1][0]


def test_longest_run_prefers_first_longest() -> None:
    row = [False, True, True, False, True, True, False]
    assert longest_run(row) == (1, 2)


def test_longest_run_reaching_last_column() -> None:
    row = [True, False, True, True, True]
    assert longest_run(row) == (2, 3)


def test_longest_run_empty() -> None:
    assert longest_run([False] * 5) == (0, 0)


def test_text_centered_in_run() -> None:
    assert text_start(10, 20, 48, "birthday") == 16


def test_text_falls_back_to_row_center() -> None:
    assert text_start(20, 3, 48, "birthday") == 20


def test_no_text_when_nothing_fits() -> None:
    assert text_start(2, 3, 9, "birthday") is None


def test_frame_layout() -> None:
    cfg = HeartConfig()
    vp = compute_viewport(100, 40, cfg)
    frame = render_frame(0, vp, cfg)
    assert frame.startswith(HOME + "\n" * vp.top_pad)
    rows = frame[len(HOME) + vp.top_pad:].split("\n")
    assert rows[-1] == ""
    rows = rows[:-1]
    assert len(rows) == vp.rows
    for line in rows:
        assert line.startswith(" " * vp.left_pad)
        assert line.endswith(RESET)
        assert len(strip_ansi(line)) == vp.left_pad + vp.cols
    assert "48;2;" in frame


def test_frame_carries_full_phrase() -> None:
    cfg = HeartConfig()
    vp = compute_viewport(80, 30, cfg)
    lines = strip_ansi(render_frame(0, vp, cfg)).split("\n")
    assert "happy birthday" in lines[15]
    assert sum("happy" in line for line in lines) == 1


def test_frame_carries_split_phrase() -> None:
    cfg = HeartConfig(message_single=LONG_MESSAGE)
    vp = compute_viewport(48, 24, cfg)
    lines = strip_ansi(render_frame(3, vp, cfg)).split("\n")
    assert "happy" in lines[11] and "birthday" not in lines[11]
    assert "birthday" in lines[14]
    assert not any(LONG_MESSAGE in line for line in lines)


def test_renderer_writes_one_frame_per_draw(out, term_size) -> None:
    renderer = Renderer(HeartConfig(), out=out, size=term_size)
    vp = renderer.draw(0)
    assert vp.cols == 80
    assert out.getvalue().count(HOME) == 1
    renderer.draw(1, clear=True)
    assert out.getvalue().count(HOME) == 2
    assert "\x1b[2J" + HOME in out.getvalue()


@pytest.mark.parametrize("v,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (160.5, 161), (-0.5, 0), (3.49, 3)])
def test_round_half_up(v, expected) -> None:
    assert round_half_up(v) == expected


def test_color_math_rounds_ties_up() -> None:
    c = lerp_rgb(ColorTriplet(0, 0, 0), ColorTriplet(1, 3, 5), 0.5)
    assert c == ColorTriplet(1, 2, 3)
    assert brighten(ColorTriplet(0, 0, 0), (1, 3, 5), 0.5) == ColorTriplet(1, 2, 3)


def test_known_cell_color() -> None:
    cfg = HeartConfig()
    vp = compute_viewport(48, 24, cfg)
    rows = render_frame(0, vp, cfg)[len(HOME):].split("\n")
    assert "\x1b[48;2;255;138;161m " in rows[2]


def test_config_clamp_returns_copy() -> None:
    cfg = HeartConfig(fps=500, min_cols=90, max_cols=10)
    fixed = cfg.clamp()
    assert (fixed.fps, fixed.min_cols, fixed.max_cols) == (120, 90, 90)
    assert (cfg.fps, cfg.min_cols, cfg.max_cols) == (500, 90, 10)
    assert fixed is not cfg
