"""Save/load chipping presets as YAML."""

from dataclasses import dataclass, asdict, fields
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import yaml

from .naming import DEFAULT_EXTENSION

METADATA_KEYS = ("name", "description", "created")

FIELD_TYPES = {
    "tile_width": int,
    "tile_height": int,
    "columns": int,
    "rows": int,
    "prefix": str,
    "suffix": str,
    "extension": str,
    "hex_mode": bool,
    "max_memory_mb": int,
    "output_dir": str,
}
OPTIONAL_KEYS = ("tile_width", "tile_height", "columns", "rows", "max_memory_mb", "output_dir")


def _check_value(key: str, value) -> None:
    if value is None and key in OPTIONAL_KEYS:
        return

    expected = FIELD_TYPES[key]
    # bool is a subclass of int
    if expected is int and isinstance(value, bool):
        valid = False
    else:
        valid = isinstance(value, expected)

    if not valid:
        raise ValueError(
            f"Config key '{key}' must be {expected.__name__}, "
            f"got {type(value).__name__} ({value!r})"
        )


@dataclass
class ChipConfig:
    """Chipping settings that can be stored in a preset.

    Either ``tile_width``/``tile_height`` or ``columns``/``rows`` should be
    set; the command line validates the pair.
    """

    tile_width: Optional[int] = None
    tile_height: Optional[int] = None
    columns: Optional[int] = None
    rows: Optional[int] = None
    prefix: str = ""
    suffix: str = ""
    extension: str = DEFAULT_EXTENSION
    hex_mode: bool = False
    max_memory_mb: Optional[int] = None
    output_dir: Optional[str] = None

    def to_dict(self) -> dict:
        """Settings that differ from None, for YAML serialization."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, d: dict) -> "ChipConfig":
        """Create ChipConfig from dictionary, ignoring preset metadata."""
        known = {f.name for f in fields(cls)}
        settings = {k: v for k, v in d.items() if k not in METADATA_KEYS}

        unknown = set(settings) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        for key, value in settings.items():
            _check_value(key, value)

        return cls(**settings)


def save_config(
    config: ChipConfig,
    output_path: Union[str, Path],
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Path:
    """Save chipping settings to YAML file.

    Args:
        config: Settings to store
        output_path: Path for output YAML file
        name: Optional name for the preset
        description: Optional description

    Returns:
        Path to saved config file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "name": name or output_path.stem,
        "description": description or "",
        "created": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    }
    data.update(config.to_dict())

    with open(output_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    return output_path


def load_config(config_path: Union[str, Path]) -> ChipConfig:
    """Load chipping settings from YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        ChipConfig with the stored settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config format in {config_path}")

    return ChipConfig.from_dict(data)
