"""Configuration loader from YAML."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .schema import GeyserConfig

CONFIG_ENV_VAR = "GEYSER_CONFIG"
DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def resolve_config_path(yaml_path: Optional[str] = None) -> Path:
    """
    Pick the configuration file to load.

    Order: explicit path, then $GEYSER_CONFIG, then the packaged defaults.
    """
    if yaml_path is not None:
        return Path(yaml_path)
    from_env = os.getenv(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return DEFAULTS_PATH


def load_config(yaml_path: Optional[str] = None) -> GeyserConfig:
    """
    Load configuration from YAML file.

    Args:
        yaml_path: Path to YAML file (defaults to $GEYSER_CONFIG, then defaults.yaml)

    Returns:
        GeyserConfig object

    Raises:
        ValueError: If the document is not a mapping or names unknown sections
    """
    path = resolve_config_path(yaml_path)
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return config_from_dict(data)


def config_from_dict(data: Dict[str, Any]) -> GeyserConfig:
    """
    Create config from dictionary.

    Unknown top-level sections are rejected so a misspelt section name does
    not silently fall back to defaults.

    Args:
        data: Configuration dictionary

    Returns:
        GeyserConfig object
    """
    unknown = sorted(set(data) - set(GeyserConfig.model_fields))
    if unknown:
        raise ValueError(f"Unknown configuration sections: {', '.join(unknown)}")
    return GeyserConfig.from_dict(data)
