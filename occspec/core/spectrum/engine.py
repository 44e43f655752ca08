"""
Occlusion spectrum of a scalar volume.

The occlusion of a voxel is the spherical-kernel average of the volume
around it, computed for every voxel at once as a linear 3-D convolution:

Math:
    O(x) = Σ_y K(y) · V(x - y)

    r = round(0.1 · (nx + ny + nz) / 3)

The convolution is evaluated in the frequency domain (scipy.signal.fftconvolve),
which matches direct spatial convolution up to floating-point round-off.
The occlusion map is then stretched to the byte range to form an alpha channel:

    α(x) = round((O(x) - O_min) · 255 / (O_max - O_min))

Boundary handling:
    "zero":    voxels outside the volume are 0 (direct convolution result)
    "nearest": the volume is edge-replicated by r voxels before a "valid"
               convolution, so a flat volume stays flat up to its faces
"""

import math
from typing import Optional, Tuple

import numpy as np
from loguru import logger
from scipy.signal import fftconvolve

from occspec.core.config import OcclusionConfig
from occspec.core.errors import ConvolutionError, DegenerateRangeError, InvalidVolumeError
from occspec.core.spectrum.kernel import OcclusionMapType, SphericalKernel, build_spherical_kernel

# Relative span below which the occlusion field counts as flat. FFT round-off
# on a constant volume is ~1e-13 relative.
DEGENERATE_RTOL = 1e-9


# =============================================================================
# Helpers
# =============================================================================


def compute_radius(dimensions: Tuple[int, int, int], scale: float = 0.1) -> int:
    """
    Kernel radius for a volume of size (nx, ny, nz).

    Rounds half away from zero, so round(0.5) == 1.
    """
    mean_extent = sum(int(n) for n in dimensions) / 3.0
    return int(math.floor(scale * mean_extent + 0.5))


def check_volume(volume: np.ndarray) -> np.ndarray:
    """Validate a single-channel uint8 volume laid out as (z, y, x)."""
    volume = np.asarray(volume)
    if volume.ndim != 3:
        raise InvalidVolumeError(f"Expected a 3-D volume, got shape {volume.shape}")
    if volume.dtype != np.uint8:
        raise InvalidVolumeError(f"Expected uint8 voxels, got {volume.dtype}")
    if 0 in volume.shape:
        raise InvalidVolumeError(f"Volume has a zero dimension: {volume.shape}")
    return volume


def convolve_volume(volume: np.ndarray, kernel: SphericalKernel, boundary: str = "zero") -> np.ndarray:
    """
    Linear 3-D convolution of a float volume with a spherical kernel.

    Args:
        volume: Float volume, shape (nz, ny, nx)
        kernel: Kernel from build_spherical_kernel
        boundary: "zero" or "nearest"

    Returns:
        Occlusion map, same shape as volume

    Raises:
        ConvolutionError: if the FFT buffers cannot be allocated or computed
    """
    if kernel.radius == 0:
        # Single-cell kernel: exact scaling, no transform needed
        return volume * kernel.weights[0, 0, 0]

    try:
        if boundary == "nearest":
            padded = np.pad(volume, kernel.radius, mode="edge")
            result = fftconvolve(padded, kernel.weights, mode="valid")
        else:
            result = fftconvolve(volume, kernel.weights, mode="same")
    except (MemoryError, ValueError) as exc:
        raise ConvolutionError(
            f"FFT convolution of {volume.shape} volume with {kernel.weights.shape} kernel failed: {exc}"
        ) from exc

    if result.shape != volume.shape:
        raise ConvolutionError(f"Convolution returned shape {result.shape}, expected {volume.shape}")
    if not np.all(np.isfinite(result)):
        raise ConvolutionError("Convolution produced non-finite values")

    return result


def normalize_to_alpha(occlusion: np.ndarray, degenerate_alpha: Optional[int] = 0) -> np.ndarray:
    """
    Stretch an occlusion map to uint8 alpha.

    Args:
        occlusion: Float occlusion map
        degenerate_alpha: Constant alpha for a flat map; None raises instead

    Returns:
        Alpha map (uint8), min 0 and max 255 unless the map is flat

    Raises:
        DegenerateRangeError: flat map and degenerate_alpha is None
    """
    occ_min = float(occlusion.min())
    occ_max = float(occlusion.max())
    logger.info(f"Occlusion: (Min = {occ_min:f}, Max = {occ_max:f})")

    span = occ_max - occ_min
    if span <= DEGENERATE_RTOL * max(abs(occ_min), abs(occ_max), 1.0):
        if degenerate_alpha is None:
            raise DegenerateRangeError(f"Occlusion map is flat at {occ_min:f}; alpha is undefined")
        logger.warning(f"Occlusion map is flat, filling alpha with {degenerate_alpha}")
        return np.full(occlusion.shape, degenerate_alpha, dtype=np.uint8)

    factor = 255.0 / span
    scaled = np.floor((occlusion - occ_min) * factor + 0.5)
    return np.clip(scaled, 0, 255).astype(np.uint8)


# =============================================================================
# Engine
# =============================================================================


class OcclusionSpectrum:
    """
    Occlusion engine bound to one uint8 volume.

    The volume is borrowed, never copied or modified. Each call to
    compute_occlusion_map / compute_alpha_channel starts from scratch; the
    engine is not reentrant.

    Example:
        >>> engine = OcclusionSpectrum(gray)
        >>> alpha = engine.compute_alpha_channel()
    """

    def __init__(self, volume: np.ndarray, config: Optional[OcclusionConfig] = None):
        self._config = config or OcclusionConfig()
        self._image = check_volume(volume)
        self._occlusion: Optional[np.ndarray] = None
        self.radius = compute_radius(self.dimensions, self._config.radius_scale)
        logger.debug(f"Occlusion radius {self.radius} for volume {self.dimensions}")

    @property
    def dimensions(self) -> Tuple[int, int, int]:
        """Volume size as (nx, ny, nz)."""
        nz, ny, nx = self._image.shape
        return nx, ny, nz

    @property
    def config(self) -> OcclusionConfig:
        return self._config

    @property
    def occlusion(self) -> Optional[np.ndarray]:
        """Occlusion map from the last compute_occlusion_map call, None otherwise."""
        return self._occlusion

    def compute_occlusion_map(self, map_type: OcclusionMapType = OcclusionMapType.LINEAR) -> np.ndarray:
        """Convolve the volume with the spherical kernel and keep the result."""
        self._occlusion = None

        kernel = build_spherical_kernel(self.radius, map_type, device=self._config.device)
        logger.debug(f"Spherical kernel: size {kernel.size}, {kernel.count} cells, {map_type.value} map")

        try:
            volume = self._image.astype(np.float64)
        except MemoryError as exc:
            raise ConvolutionError(f"Cannot allocate float copy of {self._image.shape} volume") from exc

        self._occlusion = convolve_volume(volume, kernel, self._config.boundary)
        return self._occlusion

    def compute_alpha_channel(self, map_type: OcclusionMapType = OcclusionMapType.LINEAR) -> np.ndarray:
        """
        Compute the occlusion map and normalize it to a uint8 alpha map.

        The occlusion map is released once the alpha map exists, so
        ``occlusion`` is None after this call returns or raises.
        """
        try:
            occlusion = self.compute_occlusion_map(map_type)
            return normalize_to_alpha(occlusion, self._config.degenerate_alpha)
        finally:
            self._occlusion = None
