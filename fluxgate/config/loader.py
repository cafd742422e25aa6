# fluxgate/config/loader.py
"""
Layered configuration loading.

Merge strategy:
    1. Package defaults (fluxgate/config/default.yaml) - always loaded
    2. Project config (<root>/fluxgate.yaml, or an explicit path) - overrides

The merged result is validated by GateConfig, so callers never need
fallback logic.

Usage:
    from fluxgate.config.loader import load_gate_config

    config = load_gate_config(project_root)
    config.units_dir           # always set
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from fluxgate.config.schema import GateConfig
from fluxgate.core.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from fluxgate.core.paths import ProjectPaths
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import CONFIG

logger = get_logger(__name__)

CONFIG_ROOT_KEY = "fluxgate"


def _get_defaults_path() -> Path:
    return Path(__file__).parent / "default.yaml"


# =============================================================================
# YAML helpers
# =============================================================================


def load_yaml(path: Union[str, Path]) -> dict[str, Any]:
    """
    Load a YAML file as a dictionary.

    Raises:
        ConfigNotFoundError: If file doesn't exist
        ConfigParseError: If YAML is invalid or the root isn't a mapping
    """
    p = Path(path)

    if not p.exists():
        raise ConfigNotFoundError("Config file not found", path=p)

    if p.is_dir():
        raise ConfigError("Config path is a directory, not a file", path=p)

    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML syntax: {e}", path=p) from e
    except OSError as e:
        raise ConfigParseError(f"Failed to read config: {e}", path=p) from e

    if not isinstance(data, dict):
        raise ConfigParseError("Config root must be a mapping (dict)", path=p)

    logger.debug(f"{CONFIG} Loaded {p}")
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Values from `override` win. Nested dicts merge recursively; lists are
    replaced entirely.

    Examples:
        >>> deep_merge({"a": 1, "b": {"c": 2, "d": 3}}, {"b": {"c": 10}})
        {'a': 1, 'b': {'c': 10, 'd': 3}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _unwrap(raw: dict[str, Any]) -> dict[str, Any]:
    # Files may nest everything under `fluxgate:` or be flat.
    if CONFIG_ROOT_KEY in raw and isinstance(raw[CONFIG_ROOT_KEY], dict):
        return raw[CONFIG_ROOT_KEY]
    return raw


# =============================================================================
# Loading
# =============================================================================


def load_defaults() -> dict[str, Any]:
    """Load package defaults (unwrapped from the `fluxgate` key)."""
    return _unwrap(load_yaml(_get_defaults_path()))


def load_gate_config(
    project_root: Optional[Union[str, Path]] = None,
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> GateConfig:
    """
    Load the complete configuration for a project.

    Args:
        project_root: Project directory; <root>/fluxgate.yaml is used if present
        config_path: Explicit config file; must exist when given
        overrides: Final overrides (e.g. from CLI flags), applied last

    Raises:
        ConfigNotFoundError: config_path given but missing
        ConfigParseError: invalid YAML
        ConfigValidationError: merged config doesn't match GateConfig
    """
    merged = load_defaults()
    source = "package defaults"

    if config_path is not None:
        user_path: Optional[Path] = Path(config_path)
    else:
        candidate = ProjectPaths(project_root).config()
        user_path = candidate if candidate.exists() else None

    if user_path is not None:
        merged = deep_merge(merged, _unwrap(load_yaml(user_path)))
        source = f"{user_path} (overriding defaults)"

    if overrides:
        merged = deep_merge(merged, overrides)

    try:
        config = GateConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration: {e}", path=user_path) from e

    logger.debug(f"{CONFIG} Using {source}")
    return config


__all__ = ["load_yaml", "deep_merge", "load_defaults", "load_gate_config"]
