# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
Raster buffers and pixel sampling.

A Raster wraps an 8-bit RGBA buffer of shape (height, width, 4). It is what
the histogram engine consumes and what the hover readout reads single pixels from.
Rasters come from PNG or PPM files, from synthetic patterns, or from any caller
holding raw RGBA bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final, NamedTuple, Self

import numpy as np
import png
from numpy.typing import NDArray

from .errors import ValidationError
from .transfer import SRGB

__all__: Final[list[str]] = [
    "PixelTriplet",
    "PixelSample",
    "Raster",
    "read_ppm",
    "write_ppm",
    "read_png",
    "write_png",
    "read_image",
    "sample_pixel",
]

CHANNELS: Final[int] = 4
MAX_CODE: Final[float] = 255.0


class PixelTriplet(NamedTuple):
    """Three channel values, encoded or linear depending on context."""

    r: float
    g: float
    b: float


@dataclass(frozen=True, slots=True)
class PixelSample:
    """One sampled pixel: position, encoded sRGB values and their linear light."""

    x: int
    y: int
    encoded: PixelTriplet
    linear: PixelTriplet


@dataclass(frozen=True, slots=True)
class Raster:
    """Read-only 8-bit RGBA image buffer."""

    width: int
    height: int
    data: NDArray[np.uint8]

    def __post_init__(self) -> None:
        expected = (self.height, self.width, CHANNELS)
        if self.data.dtype != np.uint8:
            raise ValidationError(f"raster data must be uint8, got {self.data.dtype}")
        if self.data.shape != expected:
            raise ValidationError(
                f"raster data has shape {self.data.shape}, expected {expected}"
            )
        if self.data.flags.writeable:
            data = self.data.copy()
            data.flags.writeable = False
            object.__setattr__(self, "data", data)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @classmethod
    def from_rgba_bytes(cls, width: int, height: int, data: bytes | bytearray | memoryview) -> Self:
        """Wrap a flat RGBA byte buffer, as handed over by a canvas or decoder."""
        if width < 0 or height < 0:
            raise ValidationError(f"raster dimensions must be non-negative, got {width}x{height}")
        buffer = np.frombuffer(bytes(data), dtype=np.uint8)
        if buffer.size != width * height * CHANNELS:
            raise ValidationError(
                f"expected {width * height * CHANNELS} bytes for {width}x{height} RGBA, "
                f"got {buffer.size}"
            )
        return cls(width=width, height=height, data=buffer.reshape(height, width, CHANNELS))

    @classmethod
    def from_array(cls, pixels: NDArray[np.uint8]) -> Self:
        """Wrap an (H, W, 3) RGB or (H, W, 4) RGBA uint8 array.

        RGB input gets an opaque alpha channel.
        """
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, CHANNELS):
            raise ValidationError(f"expected an (H, W, 3|4) array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValidationError(f"expected uint8 pixels, got {pixels.dtype}")
        height, width = pixels.shape[:2]
        if pixels.shape[2] == 3:
            alpha = np.full((height, width, 1), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels, alpha], axis=2)
        return cls(width=width, height=height, data=pixels)

    def encoded_channels(self) -> NDArray[np.float64]:
        """All pixels as an (N, 3) array of encoded values in [0, 1]."""
        return self.data[:, :, :3].reshape(-1, 3).astype(np.float64) / MAX_CODE

    def rgb_at(self, x: int, y: int) -> tuple[int, int, int]:
        """Raw 8-bit RGB code values at (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValidationError(
                f"pixel ({x}, {y}) is outside the {self.width}x{self.height} raster"
            )
        r, g, b = self.data[y, x, :3].tolist()
        return r, g, b


def sample_pixel(raster: Raster, x: int, y: int) -> PixelSample:
    """Read one pixel for the hover readout.

    Plain floats and the scalar sRGB decode only, so this stays cheap enough
    to call on every pointer move.
    """
    r, g, b = raster.rgb_at(x, y)
    encoded = PixelTriplet(r / MAX_CODE, g / MAX_CODE, b / MAX_CODE)
    linear = PixelTriplet(
        SRGB.decode(encoded.r),
        SRGB.decode(encoded.g),
        SRGB.decode(encoded.b),
    )
    return PixelSample(x=x, y=y, encoded=encoded, linear=linear)


# =============================================================================
# PPM I/O
# =============================================================================


def _read_header_token(f) -> bytes:
    """Read one whitespace-delimited header token, skipping # comments."""
    token = b""
    while True:
        char = f.read(1)
        if not char:
            return token
        if char == b"#":
            f.readline()
            if token:
                return token
            continue
        if char.isspace():
            if token:
                return token
            continue
        token += char


def read_ppm(path: Path) -> Raster:
    """Read a binary PPM (P6) or PGM (P5) file as an RGBA raster.

    16-bit files (maxval 65535) are reduced to 8 bits. Grayscale is
    replicated across R, G and B.
    """
    try:
        with open(path, "rb") as f:
            magic = _read_header_token(f).decode("ascii", errors="replace")
            if magic not in ("P5", "P6"):
                raise ValidationError(f"Unsupported PNM format: {magic}")
            try:
                width = int(_read_header_token(f))
                height = int(_read_header_token(f))
                maxval = int(_read_header_token(f))
            except ValueError as exc:
                raise ValidationError(f"Malformed PNM header in {path}") from exc
            data = f.read()
    except OSError as exc:
        raise ValidationError(f"Cannot read {path}: {exc}") from exc

    if maxval == 65535:
        # 16-bit big-endian
        dtype = np.dtype(">u2")
    elif maxval == 255:
        dtype = np.dtype(np.uint8)
    else:
        raise ValidationError(f"Unsupported maxval: {maxval}")

    samples = 3 if magic == "P6" else 1
    expected = width * height * samples
    pixels = np.frombuffer(data, dtype=dtype, count=min(expected, len(data) // dtype.itemsize))
    if pixels.size != expected:
        raise ValidationError(
            f"{path} holds {pixels.size} samples, expected {expected} for {width}x{height}"
        )

    if maxval == 65535:
        pixels = np.round(pixels.astype(np.float64) * (255.0 / 65535.0)).astype(np.uint8)

    pixels = pixels.reshape(height, width, samples)
    if samples == 1:
        pixels = np.repeat(pixels, 3, axis=2)
    return Raster.from_array(pixels)


def write_ppm(path: Path, raster: Raster) -> None:
    """Write the RGB channels of a raster as an 8-bit binary PPM."""
    with open(path, "wb") as f:
        f.write(f"P6\n{raster.width} {raster.height}\n255\n".encode("ascii"))
        f.write(np.ascontiguousarray(raster.data[:, :, :3]).tobytes())


# =============================================================================
# PNG I/O
# =============================================================================


def read_png(path: Path) -> Raster:
    """Read a PNG of any bit depth and color type as an 8-bit RGBA raster."""
    try:
        width, height, rows, _info = png.Reader(filename=str(path)).asRGBA8()
        pixels = np.array([np.asarray(row, dtype=np.uint8) for row in rows], dtype=np.uint8)
    except OSError as exc:
        raise ValidationError(f"Cannot read {path}: {exc}") from exc
    except png.Error as exc:
        raise ValidationError(f"Malformed PNG {path}: {exc}") from exc
    return Raster.from_array(pixels.reshape(height, width, CHANNELS))


def write_png(path: Path, raster: Raster) -> None:
    """Write a raster as an 8-bit RGBA PNG using pypng."""
    writer = png.Writer(
        width=raster.width, height=raster.height, bitdepth=8, greyscale=False, alpha=True
    )
    # pypng expects rows as (H, W*4)
    rows = raster.data.reshape(raster.height, raster.width * CHANNELS)
    with open(path, "wb") as f:
        writer.write(f, rows)


def read_image(path: Path) -> Raster:
    """Read a PNG or binary PPM/PGM, chosen by file extension."""
    if Path(path).suffix.lower() == ".png":
        return read_png(path)
    return read_ppm(path)
