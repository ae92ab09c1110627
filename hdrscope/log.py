# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Colored stderr logging for the hdrscope command line."""

from __future__ import annotations

import logging
import sys
from enum import StrEnum
from typing import ClassVar, Final, override

__all__: Final[list[str]] = [
    "LOGGER_NAME",
    "configure_logging",
]

LOGGER_NAME: Final[str] = "hdrscope"


class _AnsiColor(StrEnum):
    """ANSI color codes for terminal output."""

    GREEN = "\033[0;32m"
    YELLOW = "\033[1;33m"
    RED = "\033[0;31m"
    GRAY = "\033[0;37m"
    RESET = "\033[0m"


class _ColoredFormatter(logging.Formatter):
    """Logging formatter with colored level names."""

    _LEVEL_COLORS: ClassVar[dict[int, str]] = {
        logging.DEBUG: _AnsiColor.GRAY,
        logging.INFO: _AnsiColor.GREEN,
        logging.WARNING: _AnsiColor.YELLOW,
        logging.ERROR: _AnsiColor.RED,
    }

    @override
    def format(self, record: logging.LogRecord) -> str:
        color = self._LEVEL_COLORS.get(record.levelno, _AnsiColor.RESET)
        return (
            f"{color}[{record.levelname}]{_AnsiColor.RESET} "
            f"{record.name}: {record.getMessage()}"
        )


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a colored stderr handler to the package logger.

    Safe to call more than once; the handler is only installed the first time,
    later calls just adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_ColoredFormatter())
        logger.addHandler(handler)

    return logger
