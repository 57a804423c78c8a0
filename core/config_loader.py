"""YAML configuration loader utility."""

from pathlib import Path
from typing import Any

import yaml


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Dictionary containing the parsed configuration.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the top-level YAML node is not a mapping.
        yaml.YAMLError: If the file contains invalid YAML.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(
            f"Config file {path} must contain a mapping, got {type(config).__name__}"
        )
    return config


def load_section(path: str | Path, section: str) -> dict[str, Any]:
    """
    Load one named top-level section of a YAML configuration file.

    A file without the section yields an empty dict, so a shared config
    file can carry settings for several tools.

    Args:
        path: Path to the YAML file.
        section: Top-level key to extract.

    Returns:
        The section mapping, or an empty dict.

    Raises:
        ValueError: If the section exists but is not a mapping.
    """
    config = load_config(path)
    value = config.get(section)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(
            f"Config section '{section}' in {path} must be a mapping, "
            f"got {type(value).__name__}"
        )
    return value
