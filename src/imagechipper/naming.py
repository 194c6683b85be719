"""Tile filename construction."""

import math
from dataclasses import dataclass

from .grid import GridSpec

DEFAULT_EXTENSION = ".bmp"


def normalize_extension(extension: str) -> str:
    """Return ``extension`` with a leading dot, or the default when empty."""
    if not extension:
        return DEFAULT_EXTENSION
    if not extension.startswith("."):
        return "." + extension
    return extension


def compute_pad_width(columns: int, rows: int) -> int:
    """Number of digits used for row and column indices.

    ``max(ceil(log10(columns)), ceil(log10(rows)))``, so indices of both axes
    line up and sort together. A 1x1 grid gives 0.
    """
    return max(
        math.ceil(math.log10(columns)) if columns > 0 else 0,
        math.ceil(math.log10(rows)) if rows > 0 else 0,
    )


def format_index(index: int, pad_width: int, hex_mode: bool = False) -> str:
    """Zero-pad an index to ``pad_width`` digits (uppercase hex if requested)."""
    width = max(pad_width, 1)
    return format(index, f"0{width}{'X' if hex_mode else 'd'}")


@dataclass
class NamingContext:
    """How tile filenames are built.

    Attributes:
        prefix: Text placed before the row index
        suffix: Text placed after the column index
        extension: File extension, normalized to start with a dot
        pad_width: Number of digits for row and column indices
        hex_mode: Render indices as uppercase hexadecimal
    """

    prefix: str = ""
    suffix: str = ""
    extension: str = DEFAULT_EXTENSION
    pad_width: int = 1
    hex_mode: bool = False

    def __post_init__(self):
        self.extension = normalize_extension(self.extension)

    @classmethod
    def for_grid(
        cls,
        grid: GridSpec,
        prefix: str = "",
        suffix: str = "",
        extension: str = DEFAULT_EXTENSION,
        hex_mode: bool = False,
    ) -> "NamingContext":
        """Build a context whose pad width fits the grid."""
        return cls(
            prefix=prefix or "",
            suffix=suffix or "",
            extension=extension,
            pad_width=compute_pad_width(grid.columns, grid.rows),
            hex_mode=hex_mode,
        )

    def filename(self, row: int, col: int) -> str:
        """Filename ``{prefix}{row}_{col}{suffix}{extension}`` for one tile."""
        row_str = format_index(row, self.pad_width, self.hex_mode)
        col_str = format_index(col, self.pad_width, self.hex_mode)
        return f"{self.prefix}{row_str}_{col_str}{self.suffix}{self.extension}"
