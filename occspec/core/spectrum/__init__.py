"""
Occlusion spectrum of a 3-D scalar volume.

Each voxel's occlusion is the average of the volume over a sphere centred on
it, which is a convolution with a normalized spherical kernel:

1. Derive the radius from the volume size: r = round(0.1 · (nx+ny+nz) / 3)
2. Build the spherical kernel of edge 2r + 1 (linear or exponential weights)
3. Convolve the float volume with the kernel in the frequency domain
4. Stretch the occlusion map to [0, 255] to form an alpha channel
"""

from occspec.core.spectrum.kernel import OcclusionMapType, SphericalKernel, build_spherical_kernel
from occspec.core.spectrum.engine import (
    OcclusionSpectrum,
    compute_radius,
    convolve_volume,
    normalize_to_alpha,
)

__all__ = [
    "OcclusionMapType",
    "SphericalKernel",
    "build_spherical_kernel",
    "OcclusionSpectrum",
    "compute_radius",
    "convolve_volume",
    "normalize_to_alpha",
]
