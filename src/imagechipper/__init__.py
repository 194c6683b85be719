"""Split large raster images into grids of tiles.

This package provides tools for:
- Planning a tile grid from a tile size or a tile count
- Extracting edge-clipped tiles in row-major order
- Writing tiles to disk under zero-padded row/column names
- Iterating tiles lazily in memory
"""

from .errors import (
    ChipperError,
    InvalidArgumentError,
    MemoryBudgetError,
    OutputDirectoryError,
    SourceLoadError,
    TileWriteError,
)
from .grid import (
    GridSpec,
    TileInfo,
    compute_tile_grid,
    plan_by_tile_count,
    plan_by_tile_size,
    require_positive,
    tile_at,
)
from .naming import NamingContext, compute_pad_width, format_index, normalize_extension
from .io import check_memory_budget, decode_image, encode_image
from .chipper import (
    ImageChipper,
    TileIterator,
    chip_to_files,
    chip_to_sequence,
    extract_region,
)
from .config import ChipConfig, load_config, save_config
from .manifest import load_tile_info, save_tile_info

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ChipperError",
    "InvalidArgumentError",
    "MemoryBudgetError",
    "OutputDirectoryError",
    "SourceLoadError",
    "TileWriteError",
    # Grid planning
    "GridSpec",
    "TileInfo",
    "compute_tile_grid",
    "plan_by_tile_count",
    "plan_by_tile_size",
    "require_positive",
    "tile_at",
    # Naming
    "NamingContext",
    "compute_pad_width",
    "format_index",
    "normalize_extension",
    # Codec
    "check_memory_budget",
    "decode_image",
    "encode_image",
    # Chipping
    "ImageChipper",
    "TileIterator",
    "chip_to_files",
    "chip_to_sequence",
    "extract_region",
    # Presets and manifests
    "ChipConfig",
    "load_config",
    "save_config",
    "load_tile_info",
    "save_tile_info",
]
