"""
Volume file reading and writing through SimpleITK.

Supported containers (by extension): MHD/MHA, NRRD/NHDR, VTK.
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np
import SimpleITK as sitk
from loguru import logger

from occspec.core.errors import InvalidVolumeError, UnsupportedFormatError
from occspec.io.volume import Volume

SUPPORTED_EXTENSIONS = (".mhd", ".mha", ".nrrd", ".nhdr", ".vtk")

PathLike = Union[str, Path]


def check_extension(path: PathLike) -> Path:
    """Return path as a Path, or raise UnsupportedFormatError."""
    path = Path(path)
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(
            f"Unsupported volume format {path.suffix!r} for {path}; "
            f"expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    return path


def read_volume(path: PathLike, components: Optional[int] = None) -> Volume:
    """
    Read a 3-D uint8 volume.

    Args:
        path: Volume file
        components: Required components per voxel; None accepts any

    Returns:
        Volume with array in (z, y, x[, c]) order

    Raises:
        FileNotFoundError: path does not exist
        UnsupportedFormatError: unknown extension
        InvalidVolumeError: not 3-D, not uint8, or wrong component count
    """
    path = check_extension(path)
    if not path.exists():
        raise FileNotFoundError(f"Volume file not found: {path}")

    try:
        image = sitk.ReadImage(str(path))
    except RuntimeError as exc:
        raise InvalidVolumeError(f"Cannot read volume {path}: {exc}") from exc

    if image.GetDimension() != 3:
        raise InvalidVolumeError(f"{path} is {image.GetDimension()}-D, expected 3-D")
    if image.GetPixelID() not in (sitk.sitkUInt8, sitk.sitkVectorUInt8):
        raise InvalidVolumeError(f"{path} has {image.GetPixelIDTypeAsString()} voxels, expected 8-bit unsigned")

    n_comp = image.GetNumberOfComponentsPerPixel()
    if components is not None and n_comp != components:
        raise InvalidVolumeError(f"{path} has {n_comp} components per voxel, expected {components}")

    array = sitk.GetArrayFromImage(image)
    if n_comp == 1 and array.ndim == 4:
        array = array[..., 0]

    volume = Volume(
        array=array,
        spacing=tuple(image.GetSpacing()),
        origin=tuple(image.GetOrigin()),
        direction=tuple(image.GetDirection()),
    )
    logger.debug(f"Read {path}: size {volume.dimensions}, {n_comp} component(s)")
    return volume


def read_gray_volume(path: PathLike) -> Volume:
    return read_volume(path, components=1)


def read_rgb_volume(path: PathLike) -> Volume:
    return read_volume(path, components=3)


def write_volume(volume: Volume, path: PathLike) -> Path:
    """Write a volume, keeping its spacing, origin and direction."""
    path = check_extension(path)

    image = sitk.GetImageFromArray(np.ascontiguousarray(volume.array), isVector=volume.components > 1)
    image.SetSpacing(volume.spacing)
    image.SetOrigin(volume.origin)
    image.SetDirection(volume.direction)

    try:
        sitk.WriteImage(image, str(path))
    except RuntimeError as exc:
        raise InvalidVolumeError(f"Cannot write volume {path}: {exc}") from exc

    logger.debug(f"Wrote {path}: size {volume.dimensions}, {volume.components} component(s)")
    return path
