"""
In-memory volume container and per-voxel channel operations.

Arrays follow SimpleITK's layout: shape (nz, ny, nx) for scalar volumes and
(nz, ny, nx, C) for multi-component ones. Spacing, origin and direction are
kept in ITK (x, y, z) order and only travel with the data for I/O.
"""

from dataclasses import dataclass, replace
from typing import Tuple, Union

import numpy as np

from occspec.core.errors import DimensionMismatchError, InvalidVolumeError

# itk::RGBPixel::GetLuminance weights
LUMINANCE_WEIGHTS = (0.30, 0.59, 0.11)

IDENTITY_DIRECTION = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)


@dataclass
class Volume:
    """
    uint8 volume with ITK geometry.

    Attributes:
        array: Voxel data, shape (nz, ny, nx) or (nz, ny, nx, C)
        spacing: Voxel spacing (x, y, z)
        origin: Physical origin (x, y, z)
        direction: Row-major 3x3 direction cosines
    """

    array: np.ndarray
    spacing: Tuple[float, ...] = (1.0, 1.0, 1.0)
    origin: Tuple[float, ...] = (0.0, 0.0, 0.0)
    direction: Tuple[float, ...] = IDENTITY_DIRECTION

    def __post_init__(self):
        self.array = np.asarray(self.array)
        if self.array.ndim not in (3, 4):
            raise InvalidVolumeError(f"Expected a 3-D volume, got array of shape {self.array.shape}")
        if 0 in self.array.shape:
            raise InvalidVolumeError(f"Volume has a zero dimension: {self.array.shape}")
        if self.array.dtype != np.uint8:
            raise InvalidVolumeError(f"Expected uint8 voxels, got {self.array.dtype}")

    @property
    def dimensions(self) -> Tuple[int, int, int]:
        """Size as (nx, ny, nz)."""
        nz, ny, nx = self.array.shape[:3]
        return nx, ny, nz

    @property
    def components(self) -> int:
        """Number of components per voxel (1 for gray, 3 for RGB, 4 for RGBA)."""
        return 1 if self.array.ndim == 3 else self.array.shape[3]

    def with_array(self, array: np.ndarray) -> "Volume":
        """New volume with the same geometry and different voxels."""
        return replace(self, array=array)


def format_dimensions(dimensions: Tuple[int, int, int]) -> str:
    return " x ".join(str(n) for n in dimensions)


def check_matching_dimensions(a: Volume, b: Volume) -> None:
    """Raise DimensionMismatchError unless a and b share (nx, ny, nz)."""
    if a.dimensions != b.dimensions:
        raise DimensionMismatchError(
            f"Input volume sizes do not match: {format_dimensions(a.dimensions)}"
            f" vs {format_dimensions(b.dimensions)}"
        )


def rgb_to_luminance(rgb: Volume) -> Volume:
    """
    Gray volume from an RGB volume.

    Math:
        Y = 0.30 R + 0.59 G + 0.11 B, rounded to the nearest byte
    """
    if rgb.components != 3:
        raise InvalidVolumeError(f"Expected 3 components per voxel, got {rgb.components}")

    weights = np.asarray(LUMINANCE_WEIGHTS, dtype=np.float64)
    luminance = rgb.array.astype(np.float64) @ weights
    gray = np.clip(np.floor(luminance + 0.5), 0, 255).astype(np.uint8)
    return rgb.with_array(gray)


def compose_rgba(rgb: Volume, alpha: Union[Volume, np.ndarray]) -> Volume:
    """
    Append an alpha channel to an RGB volume.

    Args:
        rgb: RGB volume, shape (nz, ny, nx, 3)
        alpha: Alpha volume or array, shape (nz, ny, nx)

    Returns:
        RGBA volume with the RGB volume's geometry

    Raises:
        DimensionMismatchError: if rgb and alpha sizes differ
    """
    if not isinstance(alpha, Volume):
        alpha = rgb.with_array(np.asarray(alpha))
    if rgb.components != 3:
        raise InvalidVolumeError(f"Expected 3 components per voxel, got {rgb.components}")
    if alpha.components != 1:
        raise InvalidVolumeError(f"Alpha must have a single component, got {alpha.components}")
    check_matching_dimensions(rgb, alpha)

    rgba = np.empty(rgb.array.shape[:3] + (4,), dtype=np.uint8)
    rgba[..., :3] = rgb.array
    rgba[..., 3] = alpha.array
    return rgb.with_array(rgba)
