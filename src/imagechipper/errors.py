"""Error types raised by the tiling pipeline."""

from pathlib import Path
from typing import Optional, Union


class ChipperError(Exception):
    """Base class for all imagechipper failures.

    Attributes:
        kind: Short machine-readable name of the failure category
    """

    kind = "ChipperError"


class InvalidArgumentError(ChipperError, ValueError):
    """Bad or missing grid parameters."""

    kind = "InvalidArgument"


class SourceLoadError(ChipperError):
    """The source image could not be found or decoded."""

    kind = "SourceLoadError"


class OutputDirectoryError(ChipperError, OSError):
    """The output directory could not be created or is not a directory."""

    kind = "OutputDirectoryError"


class TileWriteError(ChipperError, OSError):
    """Encoding or writing a single tile failed.

    Attributes:
        path: Destination the tile was being written to
        row: Tile row index, if known
        col: Tile column index, if known
    """

    kind = "TileWriteError"

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        row: Optional[int] = None,
        col: Optional[int] = None,
    ):
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.row = row
        self.col = col


class MemoryBudgetError(ChipperError, MemoryError):
    """A buffer would exceed the configured memory budget."""

    kind = "OutOfMemory"
