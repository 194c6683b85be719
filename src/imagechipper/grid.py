"""Tile grid planning for row-major image chipping."""

from dataclasses import dataclass, asdict
from numbers import Integral

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class GridSpec:
    """Tile grid covering an image.

    Attributes:
        image_width: Source image width in pixels
        image_height: Source image height in pixels
        columns: Number of tiles in the horizontal direction
        rows: Number of tiles in the vertical direction
        tile_width: Nominal tile width in pixels
        tile_height: Nominal tile height in pixels
    """

    image_width: int
    image_height: int
    columns: int
    rows: int
    tile_width: int
    tile_height: int

    @property
    def n_tiles(self) -> int:
        """Total number of tiles in the grid."""
        return self.columns * self.rows

    @property
    def image_shape(self) -> tuple[int, int]:
        """Source image shape (height, width)."""
        return (self.image_height, self.image_width)


@dataclass
class TileInfo:
    """Source rectangle of a single tile.

    Attributes:
        row: Tile row index in the grid
        col: Tile column index in the grid
        x_start: Start X coordinate in original image
        y_start: Start Y coordinate in original image
        width: Tile width in pixels (clipped at the right edge)
        height: Tile height in pixels (clipped at the bottom edge)
    """

    row: int
    col: int
    x_start: int
    y_start: int
    width: int
    height: int

    @property
    def x_end(self) -> int:
        """End X coordinate in original image (exclusive)."""
        return self.x_start + self.width

    @property
    def y_end(self) -> int:
        """End Y coordinate in original image (exclusive)."""
        return self.y_start + self.height

    @property
    def shape(self) -> tuple[int, int]:
        """Tile shape (height, width)."""
        return (self.height, self.width)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "TileInfo":
        """Create TileInfo from dictionary."""
        return cls(**d)


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def require_positive(**values: int) -> None:
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, Integral):
            raise InvalidArgumentError(
                f"{name} must be an integer, got {type(value).__name__}"
            )
        if value <= 0:
            raise InvalidArgumentError(f"{name} must be greater than 0, got {value}")


def plan_by_tile_size(
    image_width: int,
    image_height: int,
    tile_width: int,
    tile_height: int,
) -> GridSpec:
    """Plan a grid from a nominal tile size.

    Args:
        image_width: Source image width in pixels
        image_height: Source image height in pixels
        tile_width: Desired tile width in pixels
        tile_height: Desired tile height in pixels

    Returns:
        GridSpec with enough columns and rows to cover the whole image

    Raises:
        InvalidArgumentError: If any argument is not a positive integer
    """
    require_positive(
        image_width=image_width,
        image_height=image_height,
        tile_width=tile_width,
        tile_height=tile_height,
    )

    return GridSpec(
        image_width=int(image_width),
        image_height=int(image_height),
        columns=int(_ceil_div(image_width, tile_width)),
        rows=int(_ceil_div(image_height, tile_height)),
        tile_width=int(tile_width),
        tile_height=int(tile_height),
    )


def plan_by_tile_count(
    image_width: int,
    image_height: int,
    columns: int,
    rows: int,
) -> GridSpec:
    """Plan a grid from a desired number of columns and rows.

    The nominal tile size is the ceiling of the image size over the count.
    Columns and rows are then re-derived from that size, so a count that
    cannot be met exactly (10 px into 6 columns) shrinks to the number of
    non-empty tiles instead of producing zero-width edge tiles.

    Args:
        image_width: Source image width in pixels
        image_height: Source image height in pixels
        columns: Desired number of tiles horizontally
        rows: Desired number of tiles vertically

    Returns:
        GridSpec covering the whole image

    Raises:
        InvalidArgumentError: If any argument is not a positive integer
    """
    require_positive(
        image_width=image_width,
        image_height=image_height,
        columns=columns,
        rows=rows,
    )

    tile_width = _ceil_div(image_width, columns)
    tile_height = _ceil_div(image_height, rows)

    return plan_by_tile_size(image_width, image_height, tile_width, tile_height)


def tile_at(grid: GridSpec, row: int, col: int) -> TileInfo:
    """Compute the clipped source rectangle of one tile.

    Args:
        grid: Grid the tile belongs to
        row: Tile row index
        col: Tile column index

    Returns:
        TileInfo whose rectangle lies inside the image bounds
    """
    x_start = col * grid.tile_width
    y_start = row * grid.tile_height

    return TileInfo(
        row=row,
        col=col,
        x_start=x_start,
        y_start=y_start,
        width=min(grid.image_width - x_start, grid.tile_width),
        height=min(grid.image_height - y_start, grid.tile_height),
    )


def compute_tile_grid(grid: GridSpec) -> list[TileInfo]:
    """List every tile of a grid in row-major order.

    Args:
        grid: Planned grid

    Returns:
        List of TileInfo objects, row varying slowest
    """
    tiles = []

    for row in range(grid.rows):
        for col in range(grid.columns):
            tiles.append(tile_at(grid, row, col))

    return tiles
