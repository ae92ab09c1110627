# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
Transfer functions for sRGB, PQ and HLG.

Three standards, one capability contract:

    sRGB : IEC 61966-2-1, relative light, 1.0 = 100 nits SDR reference white
    PQ   : SMPTE ST 2084, absolute light referenced to 10,000 nits
    HLG  : ITU-R BT.2100 / ARIB STD-B67, relative scene light plus an OOTF

Every variant exposes scalar ``encode``/``decode`` (plain ``math`` on floats,
used by the pointer-hover path) and ``encode_array``/``decode_array`` (numpy,
used for curve sampling and histograms).

Linear scales:
    sRGB and PQ take and return *relative* light where 1.0 = 100 nits.
    PQ converts to its native 10,000-nit scale in exactly one place,
    ``relative_to_pq`` / ``pq_to_relative``.

    HLG takes normalized scene light E where 1.0 = nominal peak (signal 1.0)
    and 1/12 = signal 0.5, per BT.2100 Table 5. Values up to E = 12 are
    accepted (super-white, signal ~1.448). Display light comes only from
    ``signal_to_nits`` / ``nits_to_signal``, which add system gamma and
    display peak on top of ``decode`` / ``encode``.

Out-of-range input never produces NaN: sRGB extends its segments, PQ and HLG
raise DomainError. Non-finite input and results that would overflow raise
DomainError for all three.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum, auto
from functools import lru_cache
from typing import Final, Protocol, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .errors import ConfigurationError, DomainError

__all__: Final[list[str]] = [
    "SDR_REFERENCE_NITS",
    "PQ_PEAK_NITS",
    "PEAK_BRIGHTNESS_PRESETS",
    "DEFAULT_SYSTEM_GAMMA",
    "TransferFunctionKind",
    "SystemGamma",
    "TransferFunction",
    "SRGBSpec",
    "PQSpec",
    "HLGSpec",
    "SRGBTransferFunction",
    "PQTransferFunction",
    "HLGTransferFunction",
    "SRGB",
    "PQ",
    "HLG",
    "relative_to_nits",
    "nits_to_relative",
    "relative_to_pq",
    "pq_to_relative",
    "validate_peak_nits",
    "validate_system_gamma",
    "system_gamma_for",
    "clip_signal",
    "get_transfer_function",
]

logger = logging.getLogger(__name__)

# SDR reference white: relative linear 1.0
SDR_REFERENCE_NITS: Final[float] = 100.0

# PQ absolute scale: Y = 1.0
PQ_PEAK_NITS: Final[float] = 10000.0

# Peak brightness settings offered to the user (nits)
PEAK_BRIGHTNESS_PRESETS: Final[tuple[int, ...]] = (
    100, 200, 400, 600, 1000, 2000, 4000, 10000,
)
RECOGNIZED_PEAK_RANGE: Final[tuple[float, float]] = (100.0, 10000.0)

DEFAULT_SYSTEM_GAMMA: Final[float] = 1.2


# =============================================================================
# Enumerations
# =============================================================================


class TransferFunctionKind(StrEnum):
    """The closed set of supported transfer functions."""

    SRGB = auto()
    PQ = auto()
    HLG = auto()


class SystemGamma(StrEnum):
    """How the HLG system gamma is chosen.

    FIXED uses 1.2 regardless of display. PEAK_ADAPTIVE follows BT.2100
    Note 5f and must be asked for explicitly.
    """

    FIXED = auto()
    PEAK_ADAPTIVE = auto()


# =============================================================================
# Constant sets
# =============================================================================


@dataclass(frozen=True, slots=True)
class SRGBSpec:
    """IEC 61966-2-1 constants."""

    linear_threshold: float = 0.0031308
    encoded_threshold: float = 0.04045
    slope: float = 12.92
    scale: float = 1.055
    offset: float = 0.055
    exponent: float = 2.4
    peak_nits: float = SDR_REFERENCE_NITS


@dataclass(frozen=True, slots=True)
class PQSpec:
    """SMPTE ST 2084 constants."""

    m1: float = 0.1593017578125  # 2610 / 16384
    m2: float = 78.84375  # 2523 / 4096 * 128
    c1: float = 0.8359375  # 3424 / 4096
    c2: float = 18.8515625  # 2413 / 4096 * 32
    c3: float = 18.6875  # 2392 / 4096 * 32
    peak_nits: float = PQ_PEAK_NITS


@dataclass(frozen=True, slots=True)
class HLGSpec:
    """ITU-R BT.2100 Table 5 constants."""

    a: float = 0.17883277
    b: float = 1 - 4 * 0.17883277  # 0.28466892
    c: float = 0.5 - 0.17883277 * math.log(4 * 0.17883277)  # 0.55991073
    scene_threshold: float = 1 / 12
    signal_threshold: float = 0.5
    system_gamma: float = DEFAULT_SYSTEM_GAMMA


# =============================================================================
# Scale conversions
# =============================================================================


def relative_to_nits(linear: float) -> float:
    """Relative light (1.0 = SDR reference white) to absolute nits."""
    return linear * SDR_REFERENCE_NITS


def nits_to_relative(nits: float) -> float:
    """Absolute nits to relative light (1.0 = SDR reference white)."""
    return nits / SDR_REFERENCE_NITS


def relative_to_pq(linear: float) -> float:
    """Relative light to PQ's normalized luminance Y (1.0 = 10,000 nits).

    This is the only place the 100-nit and 10,000-nit scales meet.
    Works unchanged on numpy arrays.
    """
    return linear * (SDR_REFERENCE_NITS / PQ_PEAK_NITS)


def pq_to_relative(y: float) -> float:
    """PQ normalized luminance Y back to relative light."""
    return y * (PQ_PEAK_NITS / SDR_REFERENCE_NITS)


# =============================================================================
# Parameter validation
# =============================================================================


@lru_cache(maxsize=32)
def _warn_unrecognized_peak(peak: float) -> None:
    """Log an out-of-range peak the first time each value is seen."""
    low, high = RECOGNIZED_PEAK_RANGE
    logger.warning(
        "Peak brightness %.1f nits is outside the recognized %g-%g nit range",
        peak, low, high,
    )


def validate_peak_nits(peak_nits: float) -> float:
    """Check a display peak brightness and return it as float.

    Raises ConfigurationError for non-finite or non-positive values. Values
    outside 100-10000 nits are accepted; the first use of each such value
    is logged.
    """
    try:
        peak = float(peak_nits)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"peak brightness must be a number, got {peak_nits!r}") from exc
    if not math.isfinite(peak) or peak <= 0:
        raise ConfigurationError(f"peak brightness must be > 0 nits, got {peak_nits!r}")
    low, high = RECOGNIZED_PEAK_RANGE
    if not low <= peak <= high:
        _warn_unrecognized_peak(peak)
    return peak


def validate_system_gamma(system_gamma: float) -> float:
    """Check an HLG system gamma and return it as float."""
    try:
        gamma = float(system_gamma)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"system gamma must be a number, got {system_gamma!r}") from exc
    if not math.isfinite(gamma) or gamma <= 0:
        raise ConfigurationError(f"system gamma must be > 0, got {system_gamma!r}")
    return gamma


def system_gamma_for(
    peak_nits: float,
    mode: SystemGamma = SystemGamma.FIXED,
) -> float:
    """System gamma for a display peak.

    FIXED always returns 1.2. PEAK_ADAPTIVE applies BT.2100 Note 5f:
        400 <= Lw <= 2000 : 1.2 + 0.42 * log10(Lw / 1000)
        otherwise         : 1.2 * 1.111 ** log2(Lw / 1000)
    Both agree at 1000 nits. Surround adjustment is not applied.
    """
    peak = validate_peak_nits(peak_nits)
    try:
        mode = SystemGamma(mode)
    except ValueError as exc:
        raise ConfigurationError(f"unknown system gamma mode {mode!r}") from exc

    if mode is SystemGamma.FIXED:
        return DEFAULT_SYSTEM_GAMMA
    if 400 <= peak <= 2000:
        return DEFAULT_SYSTEM_GAMMA + 0.42 * math.log10(peak / 1000)
    return DEFAULT_SYSTEM_GAMMA * 1.111 ** math.log2(peak / 1000)


def clip_signal(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clip a value for display. The transfer functions never do this themselves."""
    return min(max(value, lower), upper)


def _as_float_array(values: ArrayLike) -> NDArray[np.float64]:
    return np.asarray(values, dtype=np.float64)


def _require_finite(value: float, what: str) -> float:
    if not math.isfinite(value):
        raise DomainError(f"{what} needs a finite value, got {value!r}", value=value)
    return value


def _finite_array(values: ArrayLike, what: str) -> NDArray[np.float64]:
    x = _as_float_array(values)
    bad = ~np.isfinite(x)
    if np.any(bad):
        raise DomainError(f"{what} needs finite values", value=float(x[bad].flat[0]))
    return x


def _no_overflow(
    result: NDArray[np.float64],
    source: NDArray[np.float64],
    what: str,
) -> NDArray[np.float64]:
    """Raise instead of handing back inf where a finite input overflowed."""
    overflowed = ~np.isfinite(result)
    if np.any(overflowed):
        raise DomainError(
            f"{what} overflows for input {float(source[overflowed].flat[0])!r}",
            value=float(source[overflowed].flat[0]),
        )
    return result


# =============================================================================
# Capability contract
# =============================================================================


@runtime_checkable
class TransferFunction(Protocol):
    """What every transfer function variant provides."""

    kind: TransferFunctionKind
    name: str
    standard: str

    def encode(self, linear: float, /) -> float: ...

    def decode(self, signal: float, /) -> float: ...

    def encode_array(self, linear: ArrayLike, /) -> NDArray[np.float64]: ...

    def decode_array(self, signal: ArrayLike, /) -> NDArray[np.float64]: ...


# =============================================================================
# sRGB
# =============================================================================


@dataclass(frozen=True, slots=True)
class SRGBTransferFunction:
    """sRGB piecewise curve, fixed to the 100-nit SDR reference.

    Nothing is clamped. Negative input stays on the linear segment and
    input above 1.0 continues the power segment; callers clip for display.
    Non-finite input and signals so large that decode overflows raise
    DomainError.
    """

    spec: SRGBSpec = SRGBSpec()
    kind: TransferFunctionKind = TransferFunctionKind.SRGB
    name: str = "sRGB"
    standard: str = "IEC 61966-2-1:1999"

    def encode(self, linear: float, /) -> float:
        s = self.spec
        _require_finite(linear, "sRGB encode")
        if linear <= s.linear_threshold:
            return s.slope * linear
        return s.scale * linear ** (1 / s.exponent) - s.offset

    def decode(self, signal: float, /) -> float:
        s = self.spec
        _require_finite(signal, "sRGB decode")
        if signal <= s.encoded_threshold:
            return signal / s.slope
        try:
            return ((signal + s.offset) / s.scale) ** s.exponent
        except OverflowError as exc:
            raise DomainError(f"sRGB decode overflows for signal {signal!r}", value=signal) from exc

    def encode_array(self, linear: ArrayLike, /) -> NDArray[np.float64]:
        s = self.spec
        x = _finite_array(linear, "sRGB encode")
        return np.where(
            x <= s.linear_threshold,
            x * s.slope,
            s.scale * np.power(np.maximum(x, s.linear_threshold), 1 / s.exponent) - s.offset,
        )

    def decode_array(self, signal: ArrayLike, /) -> NDArray[np.float64]:
        s = self.spec
        v = _finite_array(signal, "sRGB decode")
        with np.errstate(over="ignore"):
            decoded = np.where(
                v <= s.encoded_threshold,
                v / s.slope,
                np.power((np.maximum(v, s.encoded_threshold) + s.offset) / s.scale, s.exponent),
            )
        return _no_overflow(decoded, v, "sRGB decode")


# =============================================================================
# PQ
# =============================================================================


@dataclass(frozen=True, slots=True)
class PQTransferFunction:
    """SMPTE ST 2084 Perceptual Quantizer on the relative (100-nit) scale.

    encode(1.0) is 100 nits (~0.508), encode(100.0) is 10,000 nits (1.0).
    Linear values above 100 encode above 1.0; nothing is clamped.

    Black encodes to exactly 0. The bare formula gives c1**m2 (~7.3e-7,
    below one 12-bit code value) at Y = 0, and decode maps that back to 0.
    """

    spec: PQSpec = PQSpec()
    kind: TransferFunctionKind = TransferFunctionKind.PQ
    name: str = "PQ (Perceptual Quantizer)"
    standard: str = "SMPTE ST 2084:2014"

    def encode(self, linear: float, /) -> float:
        _require_finite(linear, "PQ encode")
        if linear < 0:
            raise DomainError(f"PQ encode needs non-negative light, got {linear!r}", value=linear)
        if linear == 0:
            return 0.0
        s = self.spec
        y_m1 = relative_to_pq(linear) ** s.m1
        return ((s.c1 + s.c2 * y_m1) / (1 + s.c3 * y_m1)) ** s.m2

    def decode(self, signal: float, /) -> float:
        _require_finite(signal, "PQ decode")
        if signal < 0:
            raise DomainError(
                f"PQ decode needs a non-negative signal, got {signal!r}", value=signal
            )
        s = self.spec
        e_m2 = signal ** (1 / s.m2)
        denominator = s.c2 - s.c3 * e_m2
        if denominator <= 0:
            raise DomainError(
                f"PQ signal {signal!r} is beyond the decodable range", value=signal
            )
        y = (max(e_m2 - s.c1, 0.0) / denominator) ** (1 / s.m1)
        return pq_to_relative(y)

    def encode_array(self, linear: ArrayLike, /) -> NDArray[np.float64]:
        x = _finite_array(linear, "PQ encode")
        if np.any(x < 0):
            raise DomainError("PQ encode needs non-negative light", value=float(x.min()))
        s = self.spec
        y_m1 = np.power(relative_to_pq(x), s.m1)
        encoded = np.power((s.c1 + s.c2 * y_m1) / (1 + s.c3 * y_m1), s.m2)
        return np.where(x == 0, 0.0, encoded)

    def decode_array(self, signal: ArrayLike, /) -> NDArray[np.float64]:
        v = _finite_array(signal, "PQ decode")
        if np.any(v < 0):
            raise DomainError("PQ decode needs non-negative signal", value=float(v.min()))
        s = self.spec
        e_m2 = np.power(v, 1 / s.m2)
        denominator = s.c2 - s.c3 * e_m2
        if np.any(denominator <= 0):
            raise DomainError(
                "PQ signal is beyond the decodable range", value=float(v.max())
            )
        y = np.power(np.maximum(e_m2 - s.c1, 0.0) / denominator, 1 / s.m1)
        return pq_to_relative(y)

    def signal_to_nits(self, signal: float, /) -> float:
        """PQ signal to absolute display luminance in nits."""
        return relative_to_nits(self.decode(signal))

    def nits_to_signal(self, nits: float, /) -> float:
        """Absolute luminance in nits to PQ signal."""
        return self.encode(nits_to_relative(nits))


# =============================================================================
# HLG
# =============================================================================


@dataclass(frozen=True, slots=True)
class HLGTransferFunction:
    """BT.2100 Hybrid Log-Gamma.

    encode/decode are the OETF and its exact inverse on normalized scene
    light E (1.0 = nominal peak). They never depend on the display.
    signal_to_nits/nits_to_signal compose them with the OOTF
    (system gamma, then display peak).
    """

    spec: HLGSpec = HLGSpec()
    kind: TransferFunctionKind = TransferFunctionKind.HLG
    name: str = "HLG (Hybrid Log-Gamma)"
    standard: str = "ITU-R BT.2100 / ARIB STD-B67"

    def encode(self, scene: float, /) -> float:
        _require_finite(scene, "HLG encode")
        if scene < 0:
            raise DomainError(f"HLG encode needs non-negative light, got {scene!r}", value=scene)
        s = self.spec
        if scene <= s.scene_threshold:
            return math.sqrt(3 * scene)
        # 12E - b > 1 - b = 4a > 0 here, so the log argument is always positive
        return s.a * math.log(12 * scene - s.b) + s.c

    def decode(self, signal: float, /) -> float:
        _require_finite(signal, "HLG decode")
        if signal < 0:
            raise DomainError(
                f"HLG decode needs a non-negative signal, got {signal!r}", value=signal
            )
        s = self.spec
        if signal <= s.signal_threshold:
            return signal * signal / 3
        try:
            return (math.exp((signal - s.c) / s.a) + s.b) / 12
        except OverflowError as exc:
            raise DomainError(f"HLG decode overflows for signal {signal!r}", value=signal) from exc

    def encode_array(self, scene: ArrayLike, /) -> NDArray[np.float64]:
        e = _finite_array(scene, "HLG encode")
        if np.any(e < 0):
            raise DomainError("HLG encode needs non-negative light", value=float(e.min()))
        s = self.spec
        return np.where(
            e <= s.scene_threshold,
            np.sqrt(3 * e),
            s.a * np.log(12 * np.maximum(e, s.scene_threshold) - s.b) + s.c,
        )

    def decode_array(self, signal: ArrayLike, /) -> NDArray[np.float64]:
        v = _finite_array(signal, "HLG decode")
        if np.any(v < 0):
            raise DomainError("HLG decode needs non-negative signal", value=float(v.min()))
        s = self.spec
        with np.errstate(over="ignore"):
            decoded = np.where(
                v <= s.signal_threshold,
                v * v / 3,
                (np.exp((np.maximum(v, s.signal_threshold) - s.c) / s.a) + s.b) / 12,
            )
        return _no_overflow(decoded, v, "HLG decode")

    def signal_to_nits(
        self,
        signal: float,
        peak_nits: float,
        system_gamma: float = DEFAULT_SYSTEM_GAMMA,
    ) -> float:
        """HLG EOTF: signal to display light in nits (OOTF after inverse OETF)."""
        peak = validate_peak_nits(peak_nits)
        gamma = validate_system_gamma(system_gamma)
        try:
            return peak * self.decode(signal) ** gamma
        except OverflowError as exc:
            raise DomainError(
                f"HLG display light overflows for signal {signal!r}", value=signal
            ) from exc

    def nits_to_signal(
        self,
        nits: float,
        peak_nits: float,
        system_gamma: float = DEFAULT_SYSTEM_GAMMA,
    ) -> float:
        """Inverse HLG EOTF: display light in nits to signal."""
        peak = validate_peak_nits(peak_nits)
        gamma = validate_system_gamma(system_gamma)
        _require_finite(nits, "HLG nits_to_signal")
        if nits < 0:
            raise DomainError(f"display light must be non-negative, got {nits!r}", value=nits)
        try:
            scene = (nits / peak) ** (1 / gamma)
        except OverflowError as exc:
            raise DomainError(f"scene light overflows for {nits!r} nits", value=nits) from exc
        return self.encode(scene)

    def signal_to_nits_array(
        self,
        signal: ArrayLike,
        peak_nits: float,
        system_gamma: float = DEFAULT_SYSTEM_GAMMA,
    ) -> NDArray[np.float64]:
        peak = validate_peak_nits(peak_nits)
        gamma = validate_system_gamma(system_gamma)
        v = _as_float_array(signal)
        with np.errstate(over="ignore"):
            nits = peak * np.power(self.decode_array(v), gamma)
        return _no_overflow(nits, v, "HLG display light")


# =============================================================================
# Canonical instances
# =============================================================================

SRGB: Final[SRGBTransferFunction] = SRGBTransferFunction()
PQ: Final[PQTransferFunction] = PQTransferFunction()
HLG: Final[HLGTransferFunction] = HLGTransferFunction()

_BY_KIND: Final[dict[TransferFunctionKind, TransferFunction]] = {
    TransferFunctionKind.SRGB: SRGB,
    TransferFunctionKind.PQ: PQ,
    TransferFunctionKind.HLG: HLG,
}


def get_transfer_function(kind: TransferFunctionKind | str) -> TransferFunction:
    """Look up the canonical transfer function for a kind."""
    try:
        return _BY_KIND[TransferFunctionKind(kind)]
    except ValueError as exc:
        choices = ", ".join(k.value for k in TransferFunctionKind)
        raise ConfigurationError(
            f"unknown transfer function {kind!r} (choose from {choices})"
        ) from exc
