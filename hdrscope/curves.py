# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
Curve samples and hover highlights for the charting layer.

OETF view: x is linear light, y is the encoded signal.
EOTF view: x is the signal in [0, 1], y is display light in nits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import TransferMode, ViewSettings
from .errors import ConfigurationError
from .raster import PixelSample, PixelTriplet
from .transfer import (
    DEFAULT_SYSTEM_GAMMA,
    HLG,
    PQ,
    SRGB,
    TransferFunctionKind,
    get_transfer_function,
    relative_to_nits,
)

__all__: Final[list[str]] = [
    "OETF_DOMAINS",
    "CurveSample",
    "HighlightPoints",
    "linear_grid",
    "log_grid",
    "sample_oetf",
    "sample_eotf",
    "sample_curves",
    "highlight_pixel",
]

logger = logging.getLogger(__name__)

# Default linear input range of each curve in the OETF view
OETF_DOMAINS: Final[dict[TransferFunctionKind, tuple[float, float]]] = {
    TransferFunctionKind.SRGB: (0.0, 1.0),
    TransferFunctionKind.PQ: (0.0, 100.0),  # up to 10,000 nits
    TransferFunctionKind.HLG: (0.0, 1.0),  # up to nominal peak
}


@dataclass(frozen=True, slots=True)
class CurveSample:
    """Ordered (x, y) points of one curve."""

    kind: TransferFunctionKind
    mode: TransferMode
    x: NDArray[np.float64]
    y: NDArray[np.float64]

    @property
    def name(self) -> str:
        return get_transfer_function(self.kind).name

    def points(self) -> list[tuple[float, float]]:
        return list(zip(self.x.tolist(), self.y.tolist()))


@dataclass(frozen=True, slots=True)
class HighlightPoints:
    """Where one hovered pixel sits on one curve, per channel."""

    kind: TransferFunctionKind
    x: PixelTriplet
    y: PixelTriplet


def linear_grid(points: int, start: float = 0.0, stop: float = 1.0) -> NDArray[np.float64]:
    """Evenly spaced grid including both ends."""
    if points < 2:
        raise ConfigurationError(f"a grid needs at least 2 points, got {points}")
    return np.linspace(start, stop, points)


def log_grid(points: int, start: float, stop: float) -> NDArray[np.float64]:
    """Logarithmically spaced grid including both ends; both ends must be > 0."""
    if points < 2:
        raise ConfigurationError(f"a grid needs at least 2 points, got {points}")
    if start <= 0 or stop <= 0:
        raise ConfigurationError(f"log grid bounds must be > 0, got {start}..{stop}")
    return np.geomspace(start, stop, points)


def sample_oetf(kind: TransferFunctionKind | str, grid: ArrayLike) -> CurveSample:
    """Encode every grid value (linear light) with one transfer function."""
    tf = get_transfer_function(kind)
    x = np.asarray(grid, dtype=np.float64)
    return CurveSample(kind=tf.kind, mode=TransferMode.OETF, x=x, y=tf.encode_array(x))


def sample_eotf(
    kind: TransferFunctionKind | str,
    grid: ArrayLike,
    peak_nits: float,
    system_gamma: float = DEFAULT_SYSTEM_GAMMA,
) -> CurveSample:
    """Display light in nits for every grid value (signal).

    sRGB is fixed at 100 nits and PQ is absolute, so only HLG uses the
    display peak and system gamma.
    """
    tf = get_transfer_function(kind)
    x = np.asarray(grid, dtype=np.float64)
    match tf.kind:
        case TransferFunctionKind.SRGB:
            y = relative_to_nits(SRGB.decode_array(x))
        case TransferFunctionKind.PQ:
            y = relative_to_nits(PQ.decode_array(x))
        case TransferFunctionKind.HLG:
            y = HLG.signal_to_nits_array(x, peak_nits, system_gamma)
    return CurveSample(kind=tf.kind, mode=TransferMode.EOTF, x=x, y=y)


def sample_curves(settings: ViewSettings) -> list[CurveSample]:
    """All three curves for the active view mode."""
    curves: list[CurveSample] = []
    for kind in TransferFunctionKind:
        if settings.transfer_mode is TransferMode.OETF:
            start, stop = OETF_DOMAINS[kind]
            curves.append(sample_oetf(kind, linear_grid(settings.curve_points, start, stop)))
        else:
            curves.append(
                sample_eotf(
                    kind,
                    linear_grid(settings.curve_points),
                    settings.peak_nits,
                    settings.system_gamma,
                )
            )
    logger.debug(
        "Sampled %d curves, %d points each, mode=%s",
        len(curves), settings.curve_points, settings.transfer_mode,
    )
    return curves


def highlight_pixel(pixel: PixelSample, settings: ViewSettings) -> list[HighlightPoints]:
    """Place a hovered pixel on each curve of the active view mode."""
    highlights: list[HighlightPoints] = []
    if settings.transfer_mode is TransferMode.OETF:
        linear = pixel.linear
        for kind in TransferFunctionKind:
            tf = get_transfer_function(kind)
            highlights.append(
                HighlightPoints(
                    kind=kind,
                    x=linear,
                    y=PixelTriplet(tf.encode(linear.r), tf.encode(linear.g), tf.encode(linear.b)),
                )
            )
        return highlights

    encoded = pixel.encoded
    gamma = settings.system_gamma
    peak = settings.peak_nits
    highlights.append(
        HighlightPoints(
            kind=TransferFunctionKind.SRGB,
            x=encoded,
            y=PixelTriplet(*(relative_to_nits(v) for v in pixel.linear)),
        )
    )
    highlights.append(
        HighlightPoints(
            kind=TransferFunctionKind.PQ,
            x=encoded,
            y=PixelTriplet(*(PQ.signal_to_nits(v) for v in encoded)),
        )
    )
    highlights.append(
        HighlightPoints(
            kind=TransferFunctionKind.HLG,
            x=encoded,
            y=PixelTriplet(*(HLG.signal_to_nits(v, peak, gamma) for v in encoded)),
        )
    )
    return highlights
