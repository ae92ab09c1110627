# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Aryan Ameri
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
Command-line host for the transfer function engine.

Prints curve samples, histograms and single pixel readouts as tables so the numbers
that the charting layer would draw can be inspected directly.

Usage examples:
    hdrscope curves --mode eotf --peak 1000 --points 11
    hdrscope histogram photo.png --scale log --top 10
    hdrscope histogram --pattern gray_steps
    hdrscope pixel --pattern gradient 400 300 --mode oetf
    hdrscope convert hlg encode 0.0833333 1.0 12
    hdrscope convert pq to-nits 0.508078
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Final

import numpy as np
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import HistogramScale, TransferMode, ViewSettings
from .curves import highlight_pixel, sample_curves
from .errors import ConfigurationError, HdrScopeError
from .histogram import bin_centers, calculate_histogram, dominant_bin, scale_bins
from .log import configure_logging
from .patterns import Pattern, generate_pattern
from .raster import Raster, read_image, sample_pixel
from .transfer import (
    HLG,
    PEAK_BRIGHTNESS_PRESETS,
    PQ,
    SystemGamma,
    TransferFunctionKind,
    get_transfer_function,
)

__all__: Final[list[str]] = [
    "main",
]

logger = logging.getLogger(__name__)

# Console for rich output
console = Console()

CONVERSIONS: Final[tuple[str, ...]] = ("encode", "decode", "to-nits", "from-nits")


# =============================================================================
# Argument parsing
# =============================================================================


def _add_view_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode",
        choices=[m.value for m in TransferMode],
        default=None,
        help="View mode (default: $HDRSCOPE_TRANSFER_MODE or eotf)",
    )
    parser.add_argument(
        "--peak",
        type=float,
        default=None,
        metavar="NITS",
        help=(
            "Display peak brightness for HLG "
            f"(presets: {', '.join(map(str, PEAK_BRIGHTNESS_PRESETS))}; "
            "default: $HDRSCOPE_PEAK_NITS or 1000)"
        ),
    )
    parser.add_argument(
        "--gamma",
        choices=[g.value for g in SystemGamma],
        default=SystemGamma.FIXED.value,
        help="HLG system gamma: fixed 1.2 or BT.2100 peak adaptive (default: fixed)",
    )


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "image",
        type=Path,
        nargs="?",
        default=None,
        help="PNG or binary PPM/PGM image (omit when using --pattern)",
    )
    parser.add_argument(
        "--pattern",
        choices=[p.value for p in Pattern],
        default=None,
        help="Use a synthetic test pattern instead of an image",
    )
    parser.add_argument(
        "--size",
        type=int,
        nargs=2,
        default=(800, 600),
        metavar=("W", "H"),
        help="Test pattern size (default: 800 600)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for the sample scenes (default: 0)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hdrscope",
        description="Inspect sRGB, PQ and HLG transfer curves and image histograms.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables:
  HDRSCOPE_PEAK_NITS        Default display peak brightness in nits
  HDRSCOPE_TRANSFER_MODE    Default view mode (oetf or eotf)
  HDRSCOPE_HISTOGRAM_SCALE  Default histogram scale (linear, log, sqrt)
""",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    curves = subparsers.add_parser("curves", help="Sample all three transfer curves")
    _add_view_arguments(curves)
    curves.add_argument(
        "--points",
        type=int,
        default=11,
        metavar="N",
        help="Samples per curve (default: 11)",
    )

    histogram = subparsers.add_parser("histogram", help="Linear-light histogram of an image")
    _add_source_arguments(histogram)
    histogram.add_argument(
        "--bins",
        type=int,
        default=None,
        metavar="N",
        help="Number of bins (default: 100)",
    )
    histogram.add_argument(
        "--scale",
        choices=[s.value for s in HistogramScale],
        default=None,
        help="Display scale of the bar column (default: $HDRSCOPE_HISTOGRAM_SCALE or log)",
    )
    histogram.add_argument(
        "--top",
        type=int,
        default=None,
        metavar="N",
        help="Only show the N most populated luminance bins",
    )

    pixel = subparsers.add_parser("pixel", help="Place one pixel on all three curves")
    _add_source_arguments(pixel)
    pixel.add_argument("x", type=int, help="Pixel column")
    pixel.add_argument("y", type=int, help="Pixel row")
    _add_view_arguments(pixel)

    convert = subparsers.add_parser("convert", help="Evaluate a transfer function directly")
    convert.add_argument("kind", choices=[k.value for k in TransferFunctionKind])
    convert.add_argument("operation", choices=CONVERSIONS)
    convert.add_argument("values", type=float, nargs="+", metavar="VALUE")
    convert.add_argument(
        "--peak",
        type=float,
        default=1000.0,
        metavar="NITS",
        help="Display peak brightness for HLG to-nits/from-nits (default: 1000)",
    )

    return parser


# =============================================================================
# Commands
# =============================================================================


def _load_raster(args: argparse.Namespace) -> Raster:
    if args.pattern and args.image:
        raise ConfigurationError("give either an image or --pattern, not both")
    if args.pattern:
        width, height = args.size
        logger.debug("Generating %s pattern at %dx%d", args.pattern, width, height)
        return generate_pattern(args.pattern, width, height, seed=args.seed)
    if args.image is None:
        raise ConfigurationError("an image path or --pattern is required")
    logger.debug("Reading %s", args.image)
    return read_image(args.image)


def _settings_from(args: argparse.Namespace, **overrides: object) -> ViewSettings:
    return ViewSettings.create(
        peak_nits=getattr(args, "peak", None),
        transfer_mode=getattr(args, "mode", None),
        system_gamma_mode=getattr(args, "gamma", SystemGamma.FIXED),
        **overrides,
    )


def cmd_curves(args: argparse.Namespace) -> None:
    settings = _settings_from(args, curve_points=args.points)
    curves = sample_curves(settings)

    if settings.transfer_mode is TransferMode.OETF:
        title = "OETF: linear light → signal"
        x_label, y_format = "Linear", "{:.6f}"
    else:
        title = (
            f"EOTF: signal → nits (HLG peak {settings.peak_nits:g} nits, "
            f"γ {settings.system_gamma:.3f})"
        )
        x_label, y_format = "Signal", "{:.3f}"

    table = Table(title=title)
    for curve in curves:
        table.add_column(f"{curve.name} {x_label}", justify="right", style="dim")
        table.add_column(curve.name, justify="right")

    for row in range(settings.curve_points):
        cells: list[str] = []
        for curve in curves:
            cells.append(f"{curve.x[row]:.4f}")
            cells.append(y_format.format(curve.y[row]))
        table.add_row(*cells)

    console.print(table)


def cmd_histogram(args: argparse.Namespace) -> None:
    settings = ViewSettings.create(histogram_scale=args.scale, bins=args.bins)
    if args.top is not None and args.top < 1:
        raise ConfigurationError(f"--top must be >= 1, got {args.top}")
    raster = _load_raster(args)
    histogram = calculate_histogram(raster, settings.bins)

    centers = bin_centers(histogram)
    bars = scale_bins(histogram.luminance, settings.histogram_scale)
    indices = histogram.non_zero_bins("luminance")
    if args.top:
        order = np.argsort(histogram.luminance[indices], kind="stable")[::-1]
        indices = np.sort(indices[order[: args.top]])

    table = Table(
        title=(
            f"Linear-light histogram ({raster.width}x{raster.height}, "
            f"{histogram.bins} bins, {settings.histogram_scale} scale)"
        )
    )
    table.add_column("Bin", justify="right")
    table.add_column("Linear", justify="right", style="dim")
    for label in ("R %", "G %", "B %", "Luma %"):
        table.add_column(label, justify="right")
    table.add_column("", justify="left")

    for index in indices.tolist():
        table.add_row(
            str(index),
            f"{centers[index]:.3f}",
            f"{histogram.r[index]:.2f}",
            f"{histogram.g[index]:.2f}",
            f"{histogram.b[index]:.2f}",
            f"{histogram.luminance[index]:.2f}",
            "█" * max(1, int(round(float(bars[index]) * 30))),
        )

    console.print(table)
    peak_bin = dominant_bin(histogram.luminance)
    console.print(
        f"Most populated luminance bin: [bold]{peak_bin}[/bold] "
        f"({histogram.luminance[peak_bin]:.2f}% of {histogram.pixel_count} pixels)"
    )


def cmd_pixel(args: argparse.Namespace) -> None:
    settings = _settings_from(args)
    raster = _load_raster(args)
    pixel = sample_pixel(raster, args.x, args.y)

    console.print(
        f"Pixel ({pixel.x}, {pixel.y}): "
        f"encoded R={pixel.encoded.r:.4f} G={pixel.encoded.g:.4f} B={pixel.encoded.b:.4f}, "
        f"linear R={pixel.linear.r:.4f} G={pixel.linear.g:.4f} B={pixel.linear.b:.4f}"
    )

    unit = "signal" if settings.transfer_mode is TransferMode.OETF else "nits"
    table = Table(title=f"{settings.transfer_mode.upper()} highlight ({unit})")
    table.add_column("Curve")
    for channel in ("R", "G", "B"):
        table.add_column(f"{channel} x", justify="right", style="dim")
        table.add_column(f"{channel} y", justify="right")

    for points in highlight_pixel(pixel, settings):
        cells = [get_transfer_function(points.kind).name]
        for x, y in zip(points.x, points.y):
            cells.extend((f"{x:.4f}", f"{y:.4f}"))
        table.add_row(*cells)

    console.print(table)


def cmd_convert(args: argparse.Namespace) -> None:
    kind = TransferFunctionKind(args.kind)
    tf = get_transfer_function(kind)

    def convert(value: float) -> float:
        match args.operation:
            case "encode":
                return tf.encode(value)
            case "decode":
                return tf.decode(value)
            case "to-nits" if kind is TransferFunctionKind.HLG:
                return HLG.signal_to_nits(value, args.peak)
            case "from-nits" if kind is TransferFunctionKind.HLG:
                return HLG.nits_to_signal(value, args.peak)
            case "to-nits" if kind is TransferFunctionKind.PQ:
                return PQ.signal_to_nits(value)
            case "from-nits" if kind is TransferFunctionKind.PQ:
                return PQ.nits_to_signal(value)
            case _:
                raise ConfigurationError(
                    f"{args.operation} is only defined for pq and hlg"
                )

    table = Table(title=f"{tf.name} {args.operation}")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    for value in args.values:
        table.add_row(f"{value:g}", f"{convert(value):.9f}")
    console.print(table)


COMMANDS: Final = {
    "curves": cmd_curves,
    "histogram": cmd_histogram,
    "pixel": cmd_pixel,
    "convert": cmd_convert,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point."""
    args = _build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        COMMANDS[args.command](args)
    except HdrScopeError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
