"""Tests for tile filename construction."""

from __future__ import annotations

import pytest

from imagechipper.grid import plan_by_tile_count, plan_by_tile_size
from imagechipper.naming import (
    NamingContext,
    compute_pad_width,
    format_index,
    normalize_extension,
)


@pytest.mark.parametrize(
    "extension,expected",
    [("", ".bmp"), ("png", ".png"), (".png", ".png"), ("tif", ".tif")],
)
def test_normalize_extension(extension, expected) -> None:
    assert normalize_extension(extension) == expected


@pytest.mark.parametrize(
    "columns,rows,expected",
    [(1, 1, 0), (3, 3, 1), (10, 10, 1), (11, 3, 2), (3, 100, 2), (101, 1, 3)],
)
def test_compute_pad_width(columns, rows, expected) -> None:
    assert compute_pad_width(columns, rows) == expected


def test_format_index_pads_with_zeros() -> None:
    assert format_index(7, 3) == "007"
    assert format_index(0, 0) == "0"


def test_format_index_hex_is_uppercase() -> None:
    assert format_index(255, 2, hex_mode=True) == "FF"
    assert format_index(10, 2, hex_mode=True) == "0A"


def test_filenames_for_three_by_three_grid() -> None:
    grid = plan_by_tile_size(100, 100, 40, 40)
    naming = NamingContext.for_grid(grid, prefix="a_", extension="png")

    names = [naming.filename(row, col) for row in range(3) for col in range(3)]

    assert names[0] == "a_0_0.png"
    assert names[-1] == "a_2_2.png"
    assert len(set(names)) == 9


def test_filename_puts_row_before_column() -> None:
    naming = NamingContext(prefix="p", suffix="-s", extension=".tif", pad_width=2)

    assert naming.filename(3, 12) == "p03_12-s.tif"


def test_filenames_sort_in_row_major_order() -> None:
    grid = plan_by_tile_count(1200, 1200, 12, 12)
    naming = NamingContext.for_grid(grid)

    names = [naming.filename(row, col) for row in range(grid.rows) for col in range(grid.columns)]

    assert names == sorted(names)
    assert names[0] == "00_00.bmp"


def test_default_extension_is_bmp() -> None:
    assert NamingContext(extension="").extension == ".bmp"
