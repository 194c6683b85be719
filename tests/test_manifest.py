"""Tests for the tile manifest."""

from __future__ import annotations

import json

import pytest

from imagechipper.grid import compute_tile_grid, plan_by_tile_size
from imagechipper.manifest import load_tile_info, save_tile_info


def test_manifest_round_trip(tmp_path) -> None:
    grid = plan_by_tile_size(100, 60, 40, 40)
    tiles = compute_tile_grid(grid)
    names = [f"{t.row}_{t.col}.bmp" for t in tiles]

    path = save_tile_info(tiles, tmp_path / "tile_info.json", grid=grid, filenames=names, source="big.png")

    data = json.loads(path.read_text())
    assert (data["n_rows"], data["n_cols"], data["n_tiles"]) == (2, 3, 6)
    assert data["image_shape"] == [60, 100]
    assert data["tiles"][5]["filename"] == "1_2.bmp"

    loaded, metadata = load_tile_info(path)
    assert loaded == tiles
    assert metadata["filenames"] == names
    assert metadata["source"] == "big.png"


def test_manifest_filename_count_must_match(tmp_path) -> None:
    tiles = compute_tile_grid(plan_by_tile_size(10, 10, 5, 5))

    with pytest.raises(ValueError):
        save_tile_info(tiles, tmp_path / "tile_info.json", filenames=["0_0.bmp"])
