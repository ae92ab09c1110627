# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
hdrscope: sRGB, PQ and HLG transfer functions and linear-light histograms.

References:
    - IEC 61966-2-1:1999: sRGB
    - SMPTE ST 2084:2014: Perceptual Quantizer
    - ITU-R BT.2100-3, Table 5: Hybrid Log-Gamma
        https://www.itu.int/rec/R-REC-BT.2100
"""

from __future__ import annotations

from typing import Final

__version__: Final[str] = "1.0.0"

from .config import HistogramScale, TransferMode, ViewSettings  # noqa: E402
from .errors import (  # noqa: E402
    ConfigurationError,
    DomainError,
    EmptyInputError,
    HdrScopeError,
    ValidationError,
)
from .histogram import Histogram, calculate_histogram  # noqa: E402
from .raster import PixelSample, PixelTriplet, Raster, read_image, sample_pixel  # noqa: E402
from .transfer import (  # noqa: E402
    HLG,
    PQ,
    SRGB,
    SystemGamma,
    TransferFunction,
    TransferFunctionKind,
    get_transfer_function,
)

__all__: Final[list[str]] = [
    "__version__",
    "SRGB",
    "PQ",
    "HLG",
    "TransferFunction",
    "TransferFunctionKind",
    "SystemGamma",
    "get_transfer_function",
    "Raster",
    "PixelTriplet",
    "PixelSample",
    "read_image",
    "sample_pixel",
    "Histogram",
    "calculate_histogram",
    "ViewSettings",
    "TransferMode",
    "HistogramScale",
    "HdrScopeError",
    "DomainError",
    "ConfigurationError",
    "EmptyInputError",
    "ValidationError",
]
