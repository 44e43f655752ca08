from typing import Optional, Union

import numpy as np

from occspec.core.config import OcclusionConfig
from occspec.core.spectrum import OcclusionMapType, OcclusionSpectrum
from occspec.io.volume import Volume, check_matching_dimensions, compose_rgba, rgb_to_luminance


def compute_alpha_channel(
    gray: Union[Volume, np.ndarray],
    map_type: OcclusionMapType = OcclusionMapType.LINEAR,
    config: Optional[OcclusionConfig] = None,
) -> np.ndarray:
    """
    Alpha channel of a gray volume from its occlusion spectrum.

    Args:
        gray: uint8 volume, or its array of shape (nz, ny, nx)
        map_type: Kernel weighting (default linear)
        config: Engine configuration (default OcclusionConfig())

    Returns:
        uint8 alpha array of shape (nz, ny, nx)

    Example:
        >>> alpha = compute_alpha_channel(read_gray_volume("head.mhd"))
    """
    array = gray.array if isinstance(gray, Volume) else gray
    return OcclusionSpectrum(array, config).compute_alpha_channel(map_type)


def create_rgba(
    gray: Volume,
    rgb: Volume,
    map_type: OcclusionMapType = OcclusionMapType.LINEAR,
    config: Optional[OcclusionConfig] = None,
) -> Volume:
    """
    RGBA volume whose alpha is the occlusion spectrum of a separate gray volume.

    The gray and RGB volumes must have the same size; the result keeps the
    RGB volume's geometry.

    Raises:
        DimensionMismatchError: gray and rgb sizes differ
    """
    check_matching_dimensions(gray, rgb)
    alpha = compute_alpha_channel(gray, map_type, config)
    return compose_rgba(rgb, alpha)


def create_rgba_from_rgb(
    rgb: Volume,
    map_type: OcclusionMapType = OcclusionMapType.LINEAR,
    config: Optional[OcclusionConfig] = None,
) -> Volume:
    """RGBA volume whose alpha is the occlusion spectrum of the RGB luminance."""
    gray = rgb_to_luminance(rgb)
    return create_rgba(gray, rgb, map_type, config)
