from occspec.core.config import OcclusionConfig
from occspec.core.errors import (
    ConvolutionError,
    DegenerateRangeError,
    DimensionMismatchError,
    InvalidVolumeError,
    OcclusionError,
    UnsupportedFormatError,
)

__all__ = [
    "OcclusionConfig",
    "OcclusionError",
    "InvalidVolumeError",
    "DimensionMismatchError",
    "ConvolutionError",
    "DegenerateRangeError",
    "UnsupportedFormatError",
]
