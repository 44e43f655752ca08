"""
Volume container, SimpleITK file I/O and RGBA composition.

The occlusion engine itself only sees numpy arrays; this package moves
volumes between files and those arrays and merges the alpha channel with
the RGB data.
"""

from occspec.io.volume import (
    Volume,
    check_matching_dimensions,
    compose_rgba,
    rgb_to_luminance,
)
from occspec.io.volume_io import (
    SUPPORTED_EXTENSIONS,
    read_gray_volume,
    read_rgb_volume,
    read_volume,
    write_volume,
)

__all__ = [
    "Volume",
    "check_matching_dimensions",
    "compose_rgba",
    "rgb_to_luminance",
    "SUPPORTED_EXTENSIONS",
    "read_gray_volume",
    "read_rgb_volume",
    "read_volume",
    "write_volume",
]
