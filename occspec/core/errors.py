"""Exception hierarchy for occlusion-spectrum computation and volume I/O."""


class OcclusionError(Exception):
    """Base class for every error raised by occspec."""


class InvalidVolumeError(OcclusionError):
    """Volume is not a non-empty 3-D uint8 array."""


class DimensionMismatchError(OcclusionError):
    """Volumes combined together do not share (nx, ny, nz)."""


class ConvolutionError(OcclusionError):
    """The frequency-domain convolution could not be carried out."""


class DegenerateRangeError(OcclusionError):
    """Occlusion map is flat, so min/max normalization is undefined."""


class UnsupportedFormatError(OcclusionError):
    """Volume file extension is not one of the supported containers."""
