"""Image decode/encode for the chipper.

TIFF files go through tifffile. Every other format goes through Pillow.
Decoded images are always returned as ``(height, width, 4)`` uint8 RGBA
arrays.
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np
import tifffile
from PIL import Image, UnidentifiedImageError

from .errors import MemoryBudgetError, SourceLoadError, TileWriteError

# The memory budget below replaces Pillow's decompression-bomb guard.
Image.MAX_IMAGE_PIXELS = None

TIFF_EXTENSIONS = (".tif", ".tiff")
JPEG_EXTENSIONS = (".jpg", ".jpeg")
BYTES_PER_PIXEL = 4
MEGABYTE = 1024 * 1024


def check_memory_budget(
    nbytes: int,
    max_memory_mb: Optional[int],
    what: str = "buffer",
) -> None:
    """Fail fast if ``nbytes`` exceeds the memory budget.

    Args:
        nbytes: Number of bytes that would be resident
        max_memory_mb: Budget in megabytes, or None for no limit
        what: Description used in the error message

    Raises:
        MemoryBudgetError: If the budget is exceeded
    """
    if max_memory_mb is None:
        return

    limit = max_memory_mb * MEGABYTE
    if nbytes > limit:
        raise MemoryBudgetError(
            f"{what} needs {nbytes / MEGABYTE:.1f} MB, "
            f"exceeding the {max_memory_mb} MB memory budget"
        )


def _is_tiff(path: Path) -> bool:
    return path.suffix.lower() in TIFF_EXTENSIONS


def _tiff_to_rgba(data: np.ndarray, path: Path) -> np.ndarray:
    if data.dtype != np.uint8:
        raise SourceLoadError(
            f"Unsupported TIFF sample type {data.dtype} in {path} (expected uint8)"
        )

    if data.ndim == 2:
        data = data[:, :, np.newaxis]
    elif data.ndim != 3:
        raise SourceLoadError(f"Unexpected array dimensions in {path}: {data.ndim}")

    height, width, n_channels = data.shape
    rgba = np.full((height, width, BYTES_PER_PIXEL), 255, dtype=np.uint8)

    if n_channels == 1:
        rgba[:, :, :3] = data
    elif n_channels in (3, 4):
        rgba[:, :, :n_channels] = data
    else:
        raise SourceLoadError(
            f"Unsupported channel count in {path}: {n_channels} (expected 1, 3 or 4)"
        )

    return rgba


def _decode_tiff(path: Path, max_memory_mb: Optional[int]) -> np.ndarray:
    with tifffile.TiffFile(str(path)) as tif:
        if not tif.series:
            raise SourceLoadError(f"No image series found in {path}")
        series = tif.series[0]
        shape = series.shape
        planar = False
        if len(shape) == 2:
            height, width = shape
        elif len(shape) == 3 and shape[-1] in (1, 3, 4):
            height, width = shape[0], shape[1]
        elif len(shape) == 3 and shape[0] in (3, 4):
            # planar (C, H, W) storage
            planar = True
            height, width = shape[1], shape[2]
        else:
            raise SourceLoadError(
                f"Unsupported TIFF series shape {tuple(shape)} in {path} "
                f"(expected a single 2D image with 1, 3 or 4 samples)"
            )
        check_memory_budget(
            height * width * BYTES_PER_PIXEL, max_memory_mb, f"Source image {path.name}"
        )
        data = series.asarray()

    if planar:
        data = np.moveaxis(data, 0, -1)

    return _tiff_to_rgba(data, path)


def _decode_pillow(path: Path, max_memory_mb: Optional[int]) -> np.ndarray:
    with Image.open(path) as img:
        width, height = img.size
        check_memory_budget(
            height * width * BYTES_PER_PIXEL, max_memory_mb, f"Source image {path.name}"
        )
        rgba = img.convert("RGBA")
        return np.array(rgba, dtype=np.uint8)


def decode_image(
    path: Union[str, Path],
    max_memory_mb: Optional[int] = None,
) -> np.ndarray:
    """Load an image file into an RGBA pixel buffer.

    Args:
        path: Image file to read
        max_memory_mb: Upper bound for the decoded buffer, or None for no limit

    Returns:
        Array of shape (height, width, 4) and dtype uint8

    Raises:
        SourceLoadError: If the file is missing or cannot be decoded
        MemoryBudgetError: If the decoded image would exceed the budget
    """
    path = Path(path)

    if not path.exists():
        raise SourceLoadError(f"Image file not found: {path}")
    if not path.is_file():
        raise SourceLoadError(f"Path is not a file: {path}")

    try:
        if _is_tiff(path):
            return _decode_tiff(path, max_memory_mb)
        return _decode_pillow(path, max_memory_mb)
    except (SourceLoadError, MemoryBudgetError):
        raise
    except MemoryError as e:
        raise MemoryBudgetError(f"Out of memory while decoding {path}") from e
    except (UnidentifiedImageError, tifffile.TiffFileError) as e:
        raise SourceLoadError(f"Unrecognized image format: {path}") from e
    except (OSError, ValueError) as e:
        raise SourceLoadError(f"Failed to decode {path}: {e}") from e


def encode_image(
    tile: np.ndarray,
    path: Union[str, Path],
    row: Optional[int] = None,
    col: Optional[int] = None,
) -> Path:
    """Write a pixel buffer to ``path``; the format follows the extension.

    Args:
        tile: Array of shape (height, width) or (height, width, C)
        path: Destination file
        row: Tile row, reported in errors
        col: Tile column, reported in errors

    Returns:
        Path of the written file

    Raises:
        TileWriteError: If the tile cannot be encoded or written
    """
    path = Path(path)
    suffix = path.suffix.lower()

    try:
        if suffix in TIFF_EXTENSIONS:
            photometric = "rgb" if tile.ndim == 3 and tile.shape[-1] in (3, 4) else "minisblack"
            tifffile.imwrite(str(path), tile, photometric=photometric)
        else:
            if suffix in JPEG_EXTENSIONS and tile.ndim == 3 and tile.shape[-1] == 4:
                # JPEG has no alpha channel
                tile = tile[:, :, :3]
            Image.fromarray(np.ascontiguousarray(tile)).save(path)
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise TileWriteError(
            f"Failed to write tile to {path}: {e}", path=path, row=row, col=col
        ) from e

    return path
