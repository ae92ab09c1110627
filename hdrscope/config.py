# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""View settings passed explicitly into curve sampling and histogram calls."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Final, Self

from .errors import ConfigurationError
from .transfer import (
    PEAK_BRIGHTNESS_PRESETS,
    SystemGamma,
    system_gamma_for,
    validate_peak_nits,
)

__all__: Final[list[str]] = [
    "TransferMode",
    "HistogramScale",
    "ViewSettings",
    "DEFAULT_PEAK_NITS",
    "DEFAULT_BINS",
    "DEFAULT_CURVE_POINTS",
]

DEFAULT_PEAK_NITS: Final[float] = 1000.0
DEFAULT_BINS: Final[int] = 100
DEFAULT_CURVE_POINTS: Final[int] = 100

# Environment variable names
ENV_PEAK_NITS: Final[str] = "HDRSCOPE_PEAK_NITS"
ENV_TRANSFER_MODE: Final[str] = "HDRSCOPE_TRANSFER_MODE"
ENV_HISTOGRAM_SCALE: Final[str] = "HDRSCOPE_HISTOGRAM_SCALE"


class TransferMode(StrEnum):
    """Which direction the curves are drawn in."""

    OETF = auto()  # linear light -> signal
    EOTF = auto()  # signal -> display light


class HistogramScale(StrEnum):
    """Vertical scale applied to histogram bins for display."""

    LINEAR = auto()
    LOG = auto()
    SQRT = auto()


def _get_env_float(var_name: str, /) -> float | None:
    """Get a float from environment variable, or None if not set/empty."""
    value = os.environ.get(var_name, "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{var_name} must be a number, got {value!r}") from exc


def _get_env_str(var_name: str, /) -> str | None:
    value = os.environ.get(var_name, "").strip().lower()
    return value or None


def _coerce[E: StrEnum](enum_type: type[E], value: E | str, what: str) -> E:
    try:
        return enum_type(value)
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_type)
        raise ConfigurationError(f"unknown {what} {value!r} (choose from {choices})") from exc


@dataclass(frozen=True, slots=True, kw_only=True)
class ViewSettings:
    """Enumerated settings of the visualization layer."""

    peak_nits: float = DEFAULT_PEAK_NITS
    transfer_mode: TransferMode = TransferMode.EOTF
    histogram_scale: HistogramScale = HistogramScale.LOG
    system_gamma_mode: SystemGamma = SystemGamma.FIXED
    bins: int = DEFAULT_BINS
    curve_points: int = DEFAULT_CURVE_POINTS
    _system_gamma: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate and normalize settings."""
        object.__setattr__(self, "peak_nits", validate_peak_nits(self.peak_nits))
        object.__setattr__(
            self, "transfer_mode", _coerce(TransferMode, self.transfer_mode, "transfer mode")
        )
        object.__setattr__(
            self,
            "histogram_scale",
            _coerce(HistogramScale, self.histogram_scale, "histogram scale"),
        )
        object.__setattr__(
            self,
            "system_gamma_mode",
            _coerce(SystemGamma, self.system_gamma_mode, "system gamma mode"),
        )
        if self.bins < 1:
            msg = f"bins must be >= 1, got {self.bins}"
            raise ConfigurationError(msg)
        if self.curve_points < 2:
            msg = f"curve_points must be >= 2, got {self.curve_points}"
            raise ConfigurationError(msg)
        object.__setattr__(
            self, "_system_gamma", system_gamma_for(self.peak_nits, self.system_gamma_mode)
        )

    @property
    def system_gamma(self) -> float:
        """HLG system gamma for the configured display peak."""
        return self._system_gamma

    @property
    def is_preset_peak(self) -> bool:
        """Whether peak_nits is one of the offered presets."""
        return self.peak_nits in PEAK_BRIGHTNESS_PRESETS

    @classmethod
    def create(
        cls,
        *,
        peak_nits: float | None = None,
        transfer_mode: TransferMode | str | None = None,
        histogram_scale: HistogramScale | str | None = None,
        system_gamma_mode: SystemGamma | str = SystemGamma.FIXED,
        bins: int | None = None,
        curve_points: int | None = None,
    ) -> Self:
        """Create settings from arguments with environment variable fallbacks."""
        if peak_nits is None:
            peak_nits = _get_env_float(ENV_PEAK_NITS)
        return cls(
            peak_nits=peak_nits if peak_nits is not None else DEFAULT_PEAK_NITS,
            transfer_mode=(
                transfer_mode
                or _get_env_str(ENV_TRANSFER_MODE)
                or TransferMode.EOTF
            ),
            histogram_scale=(
                histogram_scale
                or _get_env_str(ENV_HISTOGRAM_SCALE)
                or HistogramScale.LOG
            ),
            system_gamma_mode=system_gamma_mode,
            bins=bins if bins is not None else DEFAULT_BINS,
            curve_points=curve_points if curve_points is not None else DEFAULT_CURVE_POINTS,
        )
