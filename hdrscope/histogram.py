# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
Linear-light histograms of sRGB rasters.

Pixels are decoded to linear light with the sRGB EOTF before binning, so the
bins line up with the linear axis of the OETF view. Luminance uses the BT.709
weights, which sum to 1.0 and keep luminance inside [0, 1].
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.interpolate import PchipInterpolator

from .config import DEFAULT_BINS, HistogramScale
from .errors import ConfigurationError, EmptyInputError
from .raster import Raster
from .transfer import SRGB

__all__: Final[list[str]] = [
    "BT709_LUMA",
    "Histogram",
    "calculate_histogram",
    "bin_centers",
    "scale_bins",
    "smooth_bins",
    "dominant_bin",
]

logger = logging.getLogger(__name__)

# BT.709 luminance coefficients
BT709_LUMA: Final[NDArray[np.float64]] = np.array([0.2126, 0.7152, 0.0722])

type Series = Literal["r", "g", "b", "luminance"]


def _frozen(values: NDArray[np.float64]) -> NDArray[np.float64]:
    values.flags.writeable = False
    return values


@dataclass(frozen=True, slots=True)
class Histogram:
    """Per-channel and luminance bin percentages of one image.

    Each series holds `bins` values that sum to 100 (percent of pixels).
    The arrays are read-only; a new image gets a new Histogram.
    """

    r: NDArray[np.float64]
    g: NDArray[np.float64]
    b: NDArray[np.float64]
    luminance: NDArray[np.float64]
    bins: int
    bin_width: float
    pixel_count: int

    def series(self, name: Series) -> NDArray[np.float64]:
        """Look up a series by name."""
        if name not in ("r", "g", "b", "luminance"):
            raise ConfigurationError(f"unknown histogram series {name!r}")
        return getattr(self, name)

    def non_zero_bins(self, name: Series = "luminance") -> NDArray[np.intp]:
        """Indices of the occupied bins of a series, ascending."""
        return np.flatnonzero(self.series(name))


def _bin_indices(values: NDArray[np.float64], bins: int) -> NDArray[np.intp]:
    # Top bin is inclusive: 1.0 lands in bins - 1
    return np.clip(np.floor(values * bins), 0, bins - 1).astype(np.intp)


def _percentages(indices: NDArray[np.intp], bins: int, total: int) -> NDArray[np.float64]:
    counts = np.bincount(indices, minlength=bins)
    return _frozen(counts.astype(np.float64) * (100.0 / total))


def calculate_histogram(raster: Raster, bins: int = DEFAULT_BINS) -> Histogram:
    """Bin the linear R, G, B and luminance of every pixel.

    Raises EmptyInputError for a raster without pixels. Bins are equal width
    over linear [0, 1].
    """
    if bins < 1:
        raise ConfigurationError(f"bins must be >= 1, got {bins}")
    total = raster.pixel_count
    if total == 0:
        raise EmptyInputError(
            f"cannot build a histogram of an empty {raster.width}x{raster.height} raster"
        )

    linear = SRGB.decode_array(raster.encoded_channels())
    luminance = linear @ BT709_LUMA

    histogram = Histogram(
        r=_percentages(_bin_indices(linear[:, 0], bins), bins, total),
        g=_percentages(_bin_indices(linear[:, 1], bins), bins, total),
        b=_percentages(_bin_indices(linear[:, 2], bins), bins, total),
        luminance=_percentages(_bin_indices(luminance, bins), bins, total),
        bins=bins,
        bin_width=1.0 / bins,
        pixel_count=total,
    )
    logger.debug(
        "Histogram of %dx%d raster: %d bins, %d occupied luminance bins",
        raster.width, raster.height, bins, np.count_nonzero(histogram.luminance),
    )
    return histogram


def bin_centers(histogram: Histogram) -> NDArray[np.float64]:
    """Linear-light x position of each bin center."""
    return (np.arange(histogram.bins) + 0.5) * histogram.bin_width


def scale_bins(
    values: ArrayLike,
    scale: HistogramScale | str = HistogramScale.LINEAR,
) -> NDArray[np.float64]:
    """Normalize a bin series to its maximum and apply a display scale.

    linear : v
    sqrt   : sqrt(v)
    log    : log10(1 + 99 v) / 2, empty bins stay at 0

    All three map [0, 1] onto [0, 1]. An all-zero series comes back as zeros.
    """
    try:
        scale = HistogramScale(scale)
    except ValueError as exc:
        raise ConfigurationError(f"unknown histogram scale {scale!r}") from exc

    v = np.asarray(values, dtype=np.float64)
    peak = v.max(initial=0.0)
    if peak <= 0:
        return np.zeros_like(v)
    v = v / peak

    if scale is HistogramScale.SQRT:
        return np.sqrt(v)
    if scale is HistogramScale.LOG:
        return np.where(v > 0, np.log10(1 + v * 99) / 2, 0.0)
    return v


def smooth_bins(
    histogram: Histogram,
    values: ArrayLike,
    points: int = 200,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Interpolate a bin series into a smooth curve over linear [0, 1].

    Uses PCHIP through the bin centers, which is shape-preserving and does
    not overshoot into negative values between bins.
    """
    if points < 2:
        raise ConfigurationError(f"points must be >= 2, got {points}")
    v = np.asarray(values, dtype=np.float64)
    if v.shape != (histogram.bins,):
        raise ConfigurationError(
            f"expected {histogram.bins} bin values, got shape {v.shape}"
        )

    x = np.linspace(0.0, 1.0, points)
    if histogram.bins < 2:
        return x, np.full(points, v[0] if v.size else 0.0)

    centers = bin_centers(histogram)
    interpolator = PchipInterpolator(centers, v)
    # Flat beyond the outermost bin centers
    y = interpolator(np.clip(x, centers[0], centers[-1]))
    return x, np.maximum(y, 0.0)


def dominant_bin(values: ArrayLike) -> int:
    """Index of the most populated bin (lowest index on ties)."""
    v = np.asarray(values)
    if v.size == 0:
        raise EmptyInputError("no bins to search")
    return int(np.argmax(v))
