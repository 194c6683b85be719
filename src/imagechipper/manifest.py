"""JSON manifest describing the tiles of a chipping run."""

import json
from pathlib import Path
from typing import Optional, Union

from .grid import GridSpec, TileInfo


def save_tile_info(
    tile_infos: list[TileInfo],
    output_path: Union[str, Path],
    grid: Optional[GridSpec] = None,
    filenames: Optional[list[Union[str, Path]]] = None,
    source: Optional[Union[str, Path]] = None,
) -> Path:
    """Save tile metadata to JSON file.

    Args:
        tile_infos: List of TileInfo objects
        output_path: Path to save JSON file
        grid: Grid used for chipping
        filenames: Written tile files, parallel to ``tile_infos``
        source: Path of the source image

    Returns:
        Path to saved file
    """
    output_path = Path(output_path)

    if filenames is not None and len(filenames) != len(tile_infos):
        raise ValueError(
            f"Number of filenames ({len(filenames)}) must match "
            f"number of tiles ({len(tile_infos)})"
        )

    if tile_infos:
        n_rows = max(t.row for t in tile_infos) + 1
        n_cols = max(t.col for t in tile_infos) + 1
    else:
        n_rows = n_cols = 0

    tiles = []
    for i, info in enumerate(tile_infos):
        entry = info.to_dict()
        if filenames is not None:
            entry["filename"] = Path(filenames[i]).name
        tiles.append(entry)

    data = {
        "n_rows": n_rows,
        "n_cols": n_cols,
        "n_tiles": len(tile_infos),
    }

    if grid is not None:
        data["tile_width"] = grid.tile_width
        data["tile_height"] = grid.tile_height
        data["image_shape"] = list(grid.image_shape)
    if source is not None:
        data["source"] = str(source)

    data["tiles"] = tiles

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    return output_path


def load_tile_info(input_path: Union[str, Path]) -> tuple[list[TileInfo], dict]:
    """Load tile metadata from JSON file.

    Args:
        input_path: Path to tile_info.json file

    Returns:
        Tuple of:
        - List of TileInfo objects
        - Dict with metadata (n_rows, n_cols, image_shape, filenames, etc.)
    """
    input_path = Path(input_path)

    with open(input_path) as f:
        data = json.load(f)

    tile_infos = []
    filenames = []
    for t in data["tiles"]:
        t = dict(t)
        filename = t.pop("filename", None)
        if filename is not None:
            filenames.append(filename)
        tile_infos.append(TileInfo.from_dict(t))

    metadata = {k: v for k, v in data.items() if k != "tiles"}
    if filenames:
        metadata["filenames"] = filenames

    return tile_infos, metadata
