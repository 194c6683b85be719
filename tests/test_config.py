"""Tests for YAML chipping presets."""

from __future__ import annotations

import pytest
import yaml

from imagechipper.config import ChipConfig, load_config, save_config


def test_save_and_load_config(tmp_path) -> None:
    config = ChipConfig(tile_width=256, tile_height=128, prefix="sat_", extension="png")

    path = save_config(config, tmp_path / "presets" / "sat.yaml", description="satellite")

    with open(path) as f:
        raw = yaml.safe_load(f)
    assert raw["name"] == "sat"
    assert raw["description"] == "satellite"
    assert "columns" not in raw

    loaded = load_config(path)
    assert loaded == config


def test_load_config_missing(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_load_config_not_a_mapping(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")

    with pytest.raises(ValueError):
        load_config(path)


def test_load_config_unknown_key(tmp_path) -> None:
    path = tmp_path / "typo.yaml"
    path.write_text("tile_widht: 10\n")

    with pytest.raises(ValueError, match="tile_widht"):
        load_config(path)


@pytest.mark.parametrize(
    "text",
    ['hex_mode: "no"\n', "tile_width: 10.5\n", "max_memory_mb: true\n", "prefix: [a, b]\n"],
)
def test_load_config_rejects_wrong_types(tmp_path, text) -> None:
    path = tmp_path / "typed.yaml"
    path.write_text(text)

    with pytest.raises(ValueError, match="must be"):
        load_config(path)


def test_load_config_accepts_yaml_booleans(tmp_path) -> None:
    path = tmp_path / "hex.yaml"
    path.write_text("columns: 4\nrows: 4\nhex_mode: no\noutput_dir: null\n")

    config = load_config(path)

    assert config.hex_mode is False
    assert config.output_dir is None
