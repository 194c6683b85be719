"""Tile extraction and emission.

Tiles are produced in row-major order (row varies slowest), either written
to disk one at a time or handed to the caller through a lazy iterator.
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np
from tqdm import tqdm

from .errors import InvalidArgumentError, OutputDirectoryError
from .grid import (
    GridSpec,
    TileInfo,
    compute_tile_grid,
    plan_by_tile_count,
    plan_by_tile_size,
    tile_at,
)
from .io import check_memory_budget, decode_image, encode_image
from .naming import DEFAULT_EXTENSION, NamingContext


def _log(message: str, verbose: bool) -> None:
    if verbose:
        print(message)


def extract_region(source: np.ndarray, tile: TileInfo) -> np.ndarray:
    """Copy one tile's rectangle out of the source image.

    The rectangle must lie inside the source bounds, which ``tile_at``
    guarantees.

    Args:
        source: Source image array (2D or channels-last 3D)
        tile: TileInfo describing the rectangle

    Returns:
        Newly allocated array of shape (tile.height, tile.width, ...)
    """
    return source[tile.y_start : tile.y_end, tile.x_start : tile.x_end].copy()


def _check_source(source: np.ndarray, grid: GridSpec) -> None:
    if source.ndim not in (2, 3):
        raise InvalidArgumentError(f"Expected 2D or 3D image, got {source.ndim}D")
    if source.shape[:2] != grid.image_shape:
        raise InvalidArgumentError(
            f"Image shape {source.shape[:2]} does not match grid image shape "
            f"{grid.image_shape}"
        )


def _tile_nbytes(source: np.ndarray, grid: GridSpec) -> int:
    pixel_bytes = source.itemsize * (source.shape[2] if source.ndim == 3 else 1)
    return grid.tile_width * grid.tile_height * pixel_bytes


class TileIterator:
    """Lazy row-major cursor over the tiles of a grid.

    Each call to ``next()`` extracts the tile at the cursor and advances it
    by one. The iterator is finite and cannot be restarted; build a new one
    to enumerate again. ``last_tile`` holds the TileInfo of the most recently
    returned tile.
    """

    def __init__(self, source: np.ndarray, grid: GridSpec):
        _check_source(source, grid)
        self._source = source
        self._grid = grid
        self._row = 0
        self._col = 0
        self.last_tile: Optional[TileInfo] = None

    @property
    def grid(self) -> GridSpec:
        return self._grid

    @property
    def remaining(self) -> int:
        """Number of tiles not yet produced."""
        if self._source is None:
            return 0
        return self._grid.n_tiles - (self._row * self._grid.columns + self._col)

    def __iter__(self) -> "TileIterator":
        return self

    def __next__(self) -> np.ndarray:
        if self._source is None or self._row >= self._grid.rows or self._grid.columns == 0:
            raise StopIteration

        info = tile_at(self._grid, self._row, self._col)

        self._col += 1
        if self._col >= self._grid.columns:
            self._col = 0
            self._row += 1

        self.last_tile = info
        return extract_region(self._source, info)

    def close(self) -> None:
        """Release the source image and end the sequence."""
        self._source = None

    def __enter__(self) -> "TileIterator":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def chip_to_sequence(source: np.ndarray, grid: GridSpec) -> TileIterator:
    """Lazily yield every tile of ``source`` in row-major order.

    Args:
        source: Source image array
        grid: Planned grid matching the source shape

    Returns:
        TileIterator producing ``grid.n_tiles`` independent arrays
    """
    return TileIterator(source, grid)


def _prepare_output_dir(output_dir: Union[str, Path]) -> Path:
    output_dir = Path(output_dir)

    if output_dir.exists() and not output_dir.is_dir():
        raise OutputDirectoryError(f"Output path is not a directory: {output_dir}")

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(
            f"Cannot create output directory {output_dir}: {e}"
        ) from e

    return output_dir


def chip_to_files(
    source: np.ndarray,
    grid: GridSpec,
    output_dir: Union[str, Path],
    naming: Optional[NamingContext] = None,
    max_memory_mb: Optional[int] = None,
    verbose: bool = False,
    progress: bool = False,
) -> list[Path]:
    """Write every tile of ``source`` to ``output_dir``.

    Tiles are written one at a time in row-major order as
    ``{prefix}{row}_{col}{suffix}{extension}``. A failure stops the loop;
    tiles written before it are left in place.

    Args:
        source: Source image array
        grid: Planned grid matching the source shape
        output_dir: Directory for the tiles, created if missing
        naming: Filename settings (default: no prefix/suffix, .bmp)
        max_memory_mb: Budget for the source plus one tile, or None
        verbose: Print progress messages
        progress: Show progress bar

    Returns:
        List of paths to the written tiles, in row-major order

    Raises:
        InvalidArgumentError: If the source does not match the grid
        MemoryBudgetError: If the source plus one tile exceed the budget
        OutputDirectoryError: If the output directory cannot be created
        TileWriteError: If a tile cannot be written
    """
    _check_source(source, grid)
    check_memory_budget(
        source.nbytes + _tile_nbytes(source, grid),
        max_memory_mb,
        "Source image plus one tile",
    )

    if naming is None:
        naming = NamingContext.for_grid(grid)

    _log(
        f"Chipping original into {grid.rows} rows, {grid.columns} columns for a "
        f"total of {grid.n_tiles} images with dimensions "
        f"{grid.tile_width}x{grid.tile_height}.",
        verbose,
    )

    output_dir = _prepare_output_dir(output_dir)

    tiles = compute_tile_grid(grid)
    if progress:
        iterator = tqdm(tiles, total=len(tiles), desc="Chipping")
    else:
        iterator = tiles

    outputs = []

    for info in iterator:
        filename = naming.filename(info.row, info.col)
        _log(
            f"Chipping row {info.row}, col {info.col} of size "
            f"{info.width}x{info.height} to {filename}",
            verbose,
        )
        tile = extract_region(source, info)
        _log("\tSaving image", verbose)
        outputs.append(encode_image(tile, output_dir / filename, row=info.row, col=info.col))

    return outputs


class ImageChipper:
    """Load an image once and chip it in several ways.

    Attributes:
        filename: Path of the loaded image
        prefix: Prefix for output filenames
        suffix: Suffix for output filenames
        hex_mode: Use uppercase hexadecimal tile indices
        verbose: Print progress messages
        max_memory_mb: Memory budget forwarded to decode and chipping
    """

    def __init__(
        self,
        filename: Union[str, Path],
        max_memory_mb: Optional[int] = None,
        verbose: bool = False,
        prefix: str = "",
        suffix: str = "",
        hex_mode: bool = False,
    ):
        self.filename = Path(filename)
        self.max_memory_mb = max_memory_mb
        self.verbose = verbose
        self.prefix = prefix
        self.suffix = suffix
        self.hex_mode = hex_mode

        _log(f"Loading original image: {self.filename}", verbose)
        self._image: Optional[np.ndarray] = decode_image(self.filename, max_memory_mb)

    @property
    def image(self) -> np.ndarray:
        if self._image is None:
            raise ValueError(f"Image {self.filename} has been released")
        return self._image

    @property
    def width(self) -> int:
        return self.image.shape[1]

    @property
    def height(self) -> int:
        return self.image.shape[0]

    def plan_by_dimensions(self, tile_width: int, tile_height: int) -> GridSpec:
        return plan_by_tile_size(self.width, self.height, tile_width, tile_height)

    def plan_by_count(self, columns: int, rows: int) -> GridSpec:
        return plan_by_tile_count(self.width, self.height, columns, rows)

    def chip(
        self,
        grid: GridSpec,
        output_dir: Union[str, Path],
        extension: str = DEFAULT_EXTENSION,
        progress: bool = False,
    ) -> list[Path]:
        """Write the tiles of ``grid`` to ``output_dir``."""
        naming = NamingContext.for_grid(
            grid,
            prefix=self.prefix,
            suffix=self.suffix,
            extension=extension,
            hex_mode=self.hex_mode,
        )
        return chip_to_files(
            self.image,
            grid,
            output_dir,
            naming,
            max_memory_mb=self.max_memory_mb,
            verbose=self.verbose,
            progress=progress,
        )

    def chip_by_dimensions(
        self,
        output_dir: Union[str, Path],
        tile_width: int,
        tile_height: int,
        extension: str = DEFAULT_EXTENSION,
    ) -> list[Path]:
        """Write tiles of a fixed size to ``output_dir``."""
        return self.chip(self.plan_by_dimensions(tile_width, tile_height), output_dir, extension)

    def chip_by_count(
        self,
        output_dir: Union[str, Path],
        columns: int,
        rows: int,
        extension: str = DEFAULT_EXTENSION,
    ) -> list[Path]:
        """Write a ``columns`` x ``rows`` grid of tiles to ``output_dir``."""
        return self.chip(self.plan_by_count(columns, rows), output_dir, extension)

    def get_chips_by_dimensions(self, tile_width: int, tile_height: int) -> TileIterator:
        return chip_to_sequence(self.image, self.plan_by_dimensions(tile_width, tile_height))

    def get_chips_by_count(self, columns: int, rows: int) -> TileIterator:
        return chip_to_sequence(self.image, self.plan_by_count(columns, rows))

    def close(self) -> None:
        """Release the source image."""
        self._image = None

    def __enter__(self) -> "ImageChipper":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
