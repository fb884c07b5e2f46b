"""Configuration loader with YAML and environment variable support.

Reads ~/.config/blockclip/config.yaml (if present) and applies
environment variable overrides using the BLOCKCLIP_* prefix.

Environment variables:
- BLOCKCLIP_PLACEMENT_MODE: Override placement.mode ("relative" or "absolute")
- BLOCKCLIP_SYMBOLS_MARKERS: Override symbols.markers (comma separated)
- BLOCKCLIP_SYMBOLS_COPY_SUFFIX: Override symbols.copy_suffix
- BLOCKCLIP_CLIPBOARD_BACKEND: Override clipboard.backend ("system" or "memory")
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from blockclip.models.config import Config
from blockclip.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "blockclip" / "config.yaml"

# (section, key, env var, is_list)
_ENV_OVERRIDES = [
    ("placement", "mode", "BLOCKCLIP_PLACEMENT_MODE", False),
    ("symbols", "markers", "BLOCKCLIP_SYMBOLS_MARKERS", True),
    ("symbols", "copy_suffix", "BLOCKCLIP_SYMBOLS_COPY_SUFFIX", False),
    ("clipboard", "backend", "BLOCKCLIP_CLIPBOARD_BACKEND", False),
]


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    A missing file is not an error: defaults (plus overrides) apply.

    Args:
        config_path: Path to config file. If None, uses ~/.config/blockclip/config.yaml

    Returns:
        Validated Config object

    Raises:
        ValueError: If the file or an override is invalid
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if config_path.exists():
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("config_yaml_invalid", path=str(config_path), error=str(e))
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")
        logger.info("config_loading", path=str(config_path))
    else:
        data = {}

    data = _apply_env_overrides(data)

    try:
        return Config(**data)
    except ValidationError as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Environment variables use the format: BLOCKCLIP_SECTION_KEY
    For example: BLOCKCLIP_PLACEMENT_MODE sets data['placement']['mode']

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    for section, key, env_var, is_list in _ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if value is None:
            continue
        section_data = data.setdefault(section, {})
        if not isinstance(section_data, dict):
            raise ValueError(f"Configuration section '{section}' must be a mapping")
        section_data[key] = [part.strip() for part in value.split(",")] if is_list else value

    return data
