"""
Create an RGBA volume whose alpha channel is the occlusion spectrum.

Usage:
    occspec-rgba <gray volume> <rgb volume> <output rgba volume>
    occspec-rgba-lum <rgb volume> <output rgba volume>

The second form derives the gray volume from the RGB luminance.
Input formats supported: MHD, NRRD/NHDR, VTK.
"""

import argparse
import sys
from typing import List, Optional

import warp as wp
from loguru import logger

from occspec.core.api import compute_alpha_channel
from occspec.core.config import BOUNDARY_MODES, OcclusionConfig
from occspec.core.errors import OcclusionError
from occspec.core.spectrum import OcclusionMapType
from occspec.io import (
    check_matching_dimensions,
    compose_rgba,
    read_gray_volume,
    read_rgb_volume,
    rgb_to_luminance,
    write_volume,
)
from occspec.io.volume import format_dimensions


def configure_logging(debug: bool = False) -> None:
    """Single stderr sink for progress lines."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "INFO", format="{message}")


def degenerate_alpha_arg(value: str) -> Optional[int]:
    """Parse --degenerate-alpha: a byte value, or "raise" to fail on a flat map."""
    if value == "raise":
        return None
    try:
        alpha = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer in [0, 255] or 'raise', got {value!r}")
    if not 0 <= alpha <= 255:
        raise argparse.ArgumentTypeError(f"alpha must lie in [0, 255], got {alpha}")
    return alpha


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--map",
        choices=[m.value for m in OcclusionMapType],
        default=OcclusionMapType.LINEAR.value,
        help="Kernel weighting inside the sphere (default: linear)",
    )
    parser.add_argument(
        "--boundary",
        choices=BOUNDARY_MODES,
        default="zero",
        help="Padding beyond the volume faces (default: zero)",
    )
    parser.add_argument(
        "--degenerate-alpha",
        type=degenerate_alpha_arg,
        default=0,
        metavar="{0..255,raise}",
        help="Alpha written when the occlusion map is flat, or 'raise' to fail (default: 0)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="occspec-rgba",
        description="Compose an RGB volume with an occlusion-spectrum alpha channel computed from a gray volume",
    )
    parser.add_argument("gray", help="Input gray volume file")
    parser.add_argument("rgb", help="Input RGB volume file")
    parser.add_argument("output", help="Output RGBA volume file")
    _add_common_arguments(parser)
    return parser


def build_luminance_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="occspec-rgba-lum",
        description="Compose an RGB volume with an occlusion-spectrum alpha channel computed from its luminance",
    )
    parser.add_argument("rgb", help="Input RGB volume file")
    parser.add_argument("output", help="Output RGBA volume file")
    _add_common_arguments(parser)
    return parser


def _run(args: argparse.Namespace, gray_path: Optional[str]) -> int:
    configure_logging(args.debug)
    config = OcclusionConfig(boundary=args.boundary, degenerate_alpha=args.degenerate_alpha)
    map_type = OcclusionMapType(args.map)

    wp.init()

    try:
        logger.info("Reading input images...")
        rgb = read_rgb_volume(args.rgb)
        if gray_path is None:
            gray = rgb_to_luminance(rgb)
        else:
            gray = read_gray_volume(gray_path)
            check_matching_dimensions(gray, rgb)
        logger.info(f"Volume size: {format_dimensions(rgb.dimensions)}")

        logger.info("Computing occlusion alpha channel...")
        alpha = compute_alpha_channel(gray, map_type, config)
        rgba = compose_rgba(rgb, alpha)

        logger.info(f"Saving RGBA volume to {args.output}...")
        write_volume(rgba, args.output)
    except (OcclusionError, FileNotFoundError) as exc:
        logger.error(f"{exc}. Exiting...")
        return 1

    logger.info("done.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return _run(args, args.gray)


def main_luminance(argv: Optional[List[str]] = None) -> int:
    args = build_luminance_parser().parse_args(argv)
    return _run(args, None)


if __name__ == "__main__":
    sys.exit(main())
