# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Exception hierarchy shared by the transfer functions, histogram and CLI."""

from __future__ import annotations

from typing import Final

__all__: Final[list[str]] = [
    "HdrScopeError",
    "DomainError",
    "ConfigurationError",
    "EmptyInputError",
    "ValidationError",
]


class HdrScopeError(Exception):
    """Base exception for hdrscope errors."""

    pass


class DomainError(HdrScopeError, ValueError):
    """Input lies outside the valid domain of a transfer function branch."""

    def __init__(self, message: str, *, value: float | None = None) -> None:
        super().__init__(message)
        self.value = value


class ConfigurationError(HdrScopeError, ValueError):
    """Peak brightness, system gamma or another setting is invalid."""

    pass


class EmptyInputError(HdrScopeError, ValueError):
    """A histogram was requested over zero pixels."""

    pass


class ValidationError(HdrScopeError, ValueError):
    """Raster buffer, image file or pattern name failed validation."""

    pass
