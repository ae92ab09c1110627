# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
Deterministic synthetic test patterns rendered straight into rasters.

Simple patterns (solids, ramps, bars, steps) are fully determined by their
size. Sample scenes (landscape, sunset, neon, city, fire, ocean) place
clouds, lines, buildings and foam at random, drawn from a seeded generator,
so the same seed always gives the same image.
"""

from __future__ import annotations

import colorsys
import math
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Final

import numpy as np
from numpy.typing import NDArray

from .errors import ValidationError
from .raster import Raster

__all__: Final[list[str]] = [
    "Pattern",
    "COLOR_BARS",
    "generate_pattern",
]

DEFAULT_WIDTH: Final[int] = 800
DEFAULT_HEIGHT: Final[int] = 600
GRAY_STEPS: Final[int] = 10

# White, yellow, cyan, green, magenta, red, blue, black
COLOR_BARS: Final[tuple[tuple[int, int, int], ...]] = (
    (255, 255, 255),
    (255, 255, 0),
    (0, 255, 255),
    (0, 255, 0),
    (255, 0, 255),
    (255, 0, 0),
    (0, 0, 255),
    (0, 0, 0),
)


class Pattern(StrEnum):
    """Available synthetic patterns."""

    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    WHITE = "white"
    BLACK = "black"
    GRADIENT = "gradient"
    RADIAL_GRADIENT = "radial_gradient"
    COLOR_BARS = "color_bars"
    GRAY_STEPS = "gray_steps"
    LANDSCAPE = "landscape"
    SUNSET = "sunset"
    NEON = "neon"
    CITY = "city"
    FIRE = "fire"
    OCEAN = "ocean"


type _Renderer = Callable[[int, int], NDArray[np.uint8]]


def _solid(rgb: tuple[int, int, int]) -> _Renderer:
    def render(width: int, height: int) -> NDArray[np.uint8]:
        pixels = np.empty((height, width, 3), dtype=np.uint8)
        pixels[:, :] = rgb
        return pixels

    return render


def _gray(levels: NDArray[np.float64]) -> NDArray[np.uint8]:
    codes = np.clip(np.round(levels * 255.0), 0, 255).astype(np.uint8)
    return np.repeat(codes[:, :, np.newaxis], 3, axis=2)


def _gradient(width: int, height: int) -> NDArray[np.uint8]:
    """Horizontal black-to-white ramp."""
    ramp = np.linspace(0.0, 1.0, width) if width > 1 else np.zeros(width)
    return _gray(np.broadcast_to(ramp, (height, width)))


def _radial_gradient(width: int, height: int) -> NDArray[np.uint8]:
    """White at the center fading to black at min(width, height) / 2."""
    radius = max(min(width, height) / 2, 1.0)
    ys, xs = np.mgrid[0:height, 0:width]
    distance = np.hypot(xs + 0.5 - width / 2, ys + 0.5 - height / 2)
    return _gray(np.clip(1.0 - distance / radius, 0.0, 1.0))


def _color_bars(width: int, height: int) -> NDArray[np.uint8]:
    bars = np.asarray(COLOR_BARS, dtype=np.uint8)
    index = np.minimum(np.arange(width) * len(COLOR_BARS) // max(width, 1), len(COLOR_BARS) - 1)
    return np.broadcast_to(bars[index], (height, width, 3)).copy()


def _gray_steps(width: int, height: int) -> NDArray[np.uint8]:
    """Ten equal-width gray patches from black to white."""
    step = np.minimum(np.arange(width) * GRAY_STEPS // max(width, 1), GRAY_STEPS - 1)
    return _gray(np.broadcast_to(step / (GRAY_STEPS - 1), (height, width)))


_RENDERERS: Final[dict[Pattern, _Renderer]] = {
    Pattern.RED: _solid((255, 0, 0)),
    Pattern.GREEN: _solid((0, 255, 0)),
    Pattern.BLUE: _solid((0, 0, 255)),
    Pattern.WHITE: _solid((255, 255, 255)),
    Pattern.BLACK: _solid((0, 0, 0)),
    Pattern.GRADIENT: _gradient,
    Pattern.RADIAL_GRADIENT: _radial_gradient,
    Pattern.COLOR_BARS: _color_bars,
    Pattern.GRAY_STEPS: _gray_steps,
}


# =============================================================================
# Sample scenes
# =============================================================================
#
# Scenes paint on a float (H, W, 3) canvas in 0..255. Shapes are tested
# against pixel centers, translucent fills blend once per shape.

type _Color = tuple[float, float, float]
type _Stops = Sequence[tuple[float, str]]
type _Canvas = NDArray[np.float64]
type _Mask = NDArray[np.bool_]
type _SceneRenderer = Callable[[int, int, np.random.Generator], NDArray[np.uint8]]


def _hex(code: str) -> _Color:
    code = code.lstrip("#")
    return (int(code[0:2], 16), int(code[2:4], 16), int(code[4:6], 16))


def _hsl(hue: float, saturation: float, lightness: float) -> _Color:
    r, g, b = colorsys.hls_to_rgb(hue / 360.0, lightness, saturation)
    return (r * 255.0, g * 255.0, b * 255.0)


def _centers(width: int, height: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    ys, xs = np.mgrid[0:height, 0:width]
    return xs + 0.5, ys + 0.5


def _ramp(t: NDArray[np.float64], stops: _Stops) -> _Canvas:
    """Piecewise-linear color ramp, clamped to the end stops."""
    offsets = [offset for offset, _ in stops]
    colors = np.array([_hex(code) for _, code in stops], dtype=np.float64)
    t = np.clip(t, 0.0, 1.0)
    return np.stack([np.interp(t, offsets, colors[:, ch]) for ch in range(3)], axis=-1)


def _to_codes(canvas: _Canvas) -> NDArray[np.uint8]:
    return np.clip(np.round(canvas), 0, 255).astype(np.uint8)


def _blend(canvas: _Canvas, mask: _Mask, color: _Color, alpha: float = 1.0) -> None:
    canvas[mask] = canvas[mask] * (1.0 - alpha) + np.asarray(color) * alpha


def _disc(
    xs: NDArray[np.float64], ys: NDArray[np.float64], cx: float, cy: float, r: float
) -> _Mask:
    return np.hypot(xs - cx, ys - cy) <= r


def _ring(
    xs: NDArray[np.float64], ys: NDArray[np.float64], cx: float, cy: float, r: float, width: float
) -> _Mask:
    return np.abs(np.hypot(xs - cx, ys - cy) - r) <= width / 2


def _segment(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    start: tuple[float, float],
    end: tuple[float, float],
    width: float,
) -> _Mask:
    (x0, y0), (x1, y1) = start, end
    dx, dy = x1 - x0, y1 - y0
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return _disc(xs, ys, x0, y0, width / 2)
    t = np.clip(((xs - x0) * dx + (ys - y0) * dy) / length_sq, 0.0, 1.0)
    return np.hypot(xs - (x0 + t * dx), ys - (y0 + t * dy)) <= width / 2


def _triangle(
    xs: NDArray[np.float64], ys: NDArray[np.float64], *corners: tuple[float, float]
) -> _Mask:
    def edge(p: tuple[float, float], q: tuple[float, float]) -> NDArray[np.float64]:
        return (q[0] - p[0]) * (ys - p[1]) - (q[1] - p[1]) * (xs - p[0])

    a, b, c = corners
    e1, e2, e3 = edge(a, b), edge(b, c), edge(c, a)
    return ((e1 >= 0) & (e2 >= 0) & (e3 >= 0)) | ((e1 <= 0) & (e2 <= 0) & (e3 <= 0))


def _fill_rect(
    canvas: _Canvas, x: float, y: float, w: float, h: float, color: _Color
) -> None:
    height, width = canvas.shape[:2]
    c0, c1 = max(math.ceil(x - 0.5), 0), min(math.ceil(x + w - 0.5), width)
    r0, r1 = max(math.ceil(y - 0.5), 0), min(math.ceil(y + h - 0.5), height)
    if c0 < c1 and r0 < r1:
        canvas[r0:r1, c0:c1] = color


def _glow_stroke(canvas: _Canvas, core: _Mask, halo: _Mask, color: _Color) -> None:
    _blend(canvas, halo & ~core, color, 0.35)
    _blend(canvas, core, color)


def _landscape(width: int, height: int, rng: np.random.Generator) -> NDArray[np.uint8]:
    """Sky gradient, ground, sun and two mountains."""
    xs, ys = _centers(width, height)
    horizon = height * 0.7
    canvas = _ramp(ys / horizon, [(0.0, "#87CEEB"), (1.0, "#FFE4B5")])
    _blend(canvas, ys >= horizon, _hex("#228B22"))
    _blend(canvas, _disc(xs, ys, width * 0.8, height * 0.3, 40), _hex("#FFD700"))
    mountain = _hex("#654321")
    _blend(
        canvas,
        _triangle(xs, ys, (0, horizon), (width * 0.3, height * 0.4), (width * 0.5, horizon)),
        mountain,
    )
    _blend(
        canvas,
        _triangle(xs, ys, (width * 0.4, horizon), (width * 0.7, height * 0.35), (width, horizon)),
        mountain,
    )
    return _to_codes(canvas)


def _sunset(width: int, height: int, rng: np.random.Generator) -> NDArray[np.uint8]:
    """Orange-to-indigo sky, low sun and five translucent clouds."""
    xs, ys = _centers(width, height)
    canvas = _ramp(
        ys / height,
        [(0.0, "#FF6B35"), (0.3, "#F77737"), (0.6, "#FFA500"), (1.0, "#4B0082")],
    )
    _blend(canvas, _disc(xs, ys, width / 2, height * 0.7, 60), _hex("#FFD700"))
    for _ in range(5):
        x, y = rng.random() * width, rng.random() * height * 0.5
        cloud = (
            _disc(xs, ys, x, y, 30) | _disc(xs, ys, x + 20, y, 35) | _disc(xs, ys, x + 40, y, 30)
        )
        _blend(canvas, cloud, (255.0, 255.0, 255.0), 0.3)
    return _to_codes(canvas)


def _neon(width: int, height: int, rng: np.random.Generator) -> NDArray[np.uint8]:
    """Glowing cyan and magenta lines and yellow rings on near black."""
    xs, ys = _centers(width, height)
    canvas = np.empty((height, width, 3), dtype=np.float64)
    canvas[:, :] = _hex("#0a0a0a")
    for code in ("#00ffff", "#ff00ff"):
        for _ in range(5):
            start = (rng.random() * width, rng.random() * height)
            end = (rng.random() * width, rng.random() * height)
            _glow_stroke(
                canvas,
                _segment(xs, ys, start, end, 4),
                _segment(xs, ys, start, end, 4 + 20),
                _hex(code),
            )
    for _ in range(3):
        cx, cy = rng.random() * width, rng.random() * height
        r = rng.random() * 50 + 20
        _glow_stroke(
            canvas,
            _ring(xs, ys, cx, cy, r, 2),
            _ring(xs, ys, cx, cy, r, 2 + 30),
            _hex("#ffff00"),
        )
    return _to_codes(canvas)


def _city(width: int, height: int, rng: np.random.Generator) -> NDArray[np.uint8]:
    """Night skyline: stars, fifteen buildings and lit windows."""
    canvas = np.empty((height, width, 3), dtype=np.float64)
    canvas[:, :] = _hex("#1a1a2e")
    for _ in range(50):
        x, y = rng.random() * width, rng.random() * height * 0.5
        _fill_rect(canvas, x, y, 1, 1, (255.0, 255.0, 255.0))

    window = _hex("#ffff99")
    for _ in range(15):
        b_width = rng.random() * 60 + 30
        b_height = rng.random() * height * 0.6 + height * 0.2
        x = rng.random() * (width - b_width)
        top = height - b_height
        _fill_rect(canvas, x, top, b_width, b_height, _hsl(rng.random() * 60 + 200, 0.3, 0.2))
        for row in range(int(b_height // 20)):
            for col in range(int(b_width // 15)):
                if rng.random() > 0.3:
                    _fill_rect(canvas, x + col * 15 + 3, top + row * 20 + 5, 8, 10, window)
    return _to_codes(canvas)


def _fire(width: int, height: int, rng: np.random.Generator) -> NDArray[np.uint8]:
    """Radial yellow-to-dark-red glow with drifting smoke."""
    xs, ys = _centers(width, height)
    cx, cy = width / 2, height * 0.8
    canvas = _ramp(
        np.hypot(xs - cx, ys - cy) / (width / 2),
        [(0.0, "#ffff00"), (0.3, "#ff8800"), (0.6, "#ff0000"), (1.0, "#330000")],
    )
    for _ in range(10):
        x = width / 2 + (rng.random() - 0.5) * 200
        y = height * 0.2 + rng.random() * 100
        _blend(canvas, _disc(xs, ys, x, y, rng.random() * 40 + 20), (50.0, 50.0, 50.0), 0.3)
    return _to_codes(canvas)


def _ocean(width: int, height: int, rng: np.random.Generator) -> NDArray[np.uint8]:
    """Deep-to-light blue water with ten wave lines and foam."""
    xs, ys = _centers(width, height)
    canvas = _ramp(ys / height, [(0.0, "#001f3f"), (0.5, "#003d7a"), (1.0, "#007acc")])
    white = (255.0, 255.0, 255.0)
    for i in range(10):
        crest = height * 0.3 + i * 20 + np.sin(xs / 50 + i) * 10
        _blend(canvas, np.abs(ys - crest) <= 1.0, white, 0.3)
    for _ in range(20):
        x = rng.random() * width
        y = height * 0.3 + rng.random() * height * 0.4
        _blend(canvas, _disc(xs, ys, x, y, rng.random() * 3 + 1), white, 0.5)
    return _to_codes(canvas)


_SCENES: Final[dict[Pattern, _SceneRenderer]] = {
    Pattern.LANDSCAPE: _landscape,
    Pattern.SUNSET: _sunset,
    Pattern.NEON: _neon,
    Pattern.CITY: _city,
    Pattern.FIRE: _fire,
    Pattern.OCEAN: _ocean,
}


def generate_pattern(
    name: Pattern | str,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    *,
    seed: int = 0,
) -> Raster:
    """Render a named test pattern as an opaque RGBA raster.

    `seed` only affects the sample scenes.
    """
    try:
        pattern = Pattern(name)
    except ValueError as exc:
        choices = ", ".join(p.value for p in Pattern)
        raise ValidationError(f"unknown pattern {name!r} (choose from {choices})") from exc
    if width < 1 or height < 1:
        raise ValidationError(f"pattern size must be at least 1x1, got {width}x{height}")
    if pattern in _SCENES:
        pixels = _SCENES[pattern](width, height, np.random.default_rng(seed))
    else:
        pixels = _RENDERERS[pattern](width, height)
    return Raster.from_array(pixels)
