"""
Spherical averaging kernel construction.

The occlusion of a voxel is the weighted mean of the volume inside a ball
centred on it. The ball is discretized on a cube of edge 2r + 1:

Math:
    d²(i, j, k) = (i - r)² + (j - r)² + (k - r)²

    w(i, j, k) = 0              if d² > r²
               = 1 / N          (linear)
               = exp(-d²) / N   (exponential)

where N is the number of cells with d² ≤ r². The exponential map is divided
by the cell count, not by the sum of its weights, so its total is below 1.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np
import warp as wp


class OcclusionMapType(Enum):
    """Weighting applied to cells inside the sphere."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class SphericalKernel:
    """
    Normalized spherical convolution kernel.

    Attributes:
        weights: Kernel weights, shape (2r+1, 2r+1, 2r+1)
        radius: Sphere radius r in voxels
        map_type: Weighting used inside the sphere
        count: Number of cells with d² ≤ r²
    """

    weights: np.ndarray  # (S, S, S)
    radius: int
    map_type: OcclusionMapType
    count: int

    @property
    def size(self) -> int:
        """Edge length 2r + 1."""
        return 2 * self.radius + 1

    @property
    def inside(self) -> np.ndarray:
        """Boolean mask of the cells inside the sphere."""
        offsets = np.arange(self.size) - self.radius
        d2 = (
            offsets[:, None, None] ** 2
            + offsets[None, :, None] ** 2
            + offsets[None, None, :] ** 2
        )
        return d2 <= self.radius * self.radius


# =============================================================================
# Weight kernel
# =============================================================================


@wp.kernel
def spherical_weights_kernel(
    radius: int,
    exponential: int,
    weights: wp.array3d(dtype=wp.float64),
    count: wp.array(dtype=wp.int32),
):
    """
    Fill one kernel cell per thread and count the cells inside the sphere.

    Launch dim: (2r+1, 2r+1, 2r+1)
    """
    i, j, k = wp.tid()

    ii = i - radius
    jj = j - radius
    kk = k - radius
    d2 = ii * ii + jj * jj + kk * kk

    if d2 > radius * radius:
        weights[i, j, k] = wp.float64(0.0)
        return

    if exponential != 0:
        weights[i, j, k] = wp.exp(-wp.float64(d2))
    else:
        weights[i, j, k] = wp.float64(1.0)

    wp.atomic_add(count, 0, 1)


# =============================================================================
# High-level API
# =============================================================================


def build_spherical_kernel(
    radius: int,
    map_type: OcclusionMapType = OcclusionMapType.LINEAR,
    device: str = "cpu",
) -> SphericalKernel:
    """
    Build a normalized spherical kernel.

    Args:
        radius: Sphere radius in voxels, >= 0
        map_type: Linear (flat) or exponential (exp(-d²)) weighting
        device: Warp device used to evaluate the weights

    Returns:
        SphericalKernel with weights of shape (2r+1,)*3

    Example:
        >>> kernel = build_spherical_kernel(1)
        >>> kernel.count, kernel.weights[1, 1, 1]
        (7, 0.14285714285714285)
    """
    radius = int(radius)
    if radius < 0:
        raise ValueError(f"Kernel radius must be non-negative, got {radius}")

    size = 2 * radius + 1
    exponential = 1 if map_type == OcclusionMapType.EXPONENTIAL else 0

    weights_wp = wp.zeros(shape=(size, size, size), dtype=wp.float64, device=device)
    count_wp = wp.zeros(1, dtype=wp.int32, device=device)

    wp.launch(
        kernel=spherical_weights_kernel,
        dim=(size, size, size),
        inputs=[radius, exponential],
        outputs=[weights_wp, count_wp],
        device=device,
    )

    count = int(count_wp.numpy()[0])

    # Normalize by cell count (never zero: the centre is always inside)
    weights = weights_wp.numpy() / float(count)
    weights.setflags(write=False)

    return SphericalKernel(weights=weights, radius=radius, map_type=map_type, count=count)
