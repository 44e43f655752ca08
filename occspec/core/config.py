"""
Engine configuration.

``OcclusionConfig`` groups the knobs that are not part of the occlusion
formula itself: how the radius scales with the volume, how the convolution
treats voxels beyond the volume faces, what a flat occlusion field turns into,
and where warp evaluates the kernel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

BOUNDARY_MODES = ("zero", "nearest")


@dataclass
class OcclusionConfig:
    """Basic knobs for :class:`OcclusionSpectrum`."""

    radius_scale: float = 0.1
    boundary: str = "zero"
    degenerate_alpha: Optional[int] = 0
    device: str = "cpu"

    def __post_init__(self) -> None:
        if self.boundary not in BOUNDARY_MODES:
            raise ValueError(
                f"Unknown boundary mode {self.boundary!r}, expected one of {BOUNDARY_MODES}"
            )
        if self.degenerate_alpha is not None and not 0 <= self.degenerate_alpha <= 255:
            raise ValueError(f"degenerate_alpha must lie in [0, 255], got {self.degenerate_alpha}")
        if self.radius_scale < 0:
            raise ValueError(f"radius_scale must be non-negative, got {self.radius_scale}")
