# fluxgate/core/__init__.py
"""Shared building blocks: exceptions and project paths."""

from fluxgate.core.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    ContractDeclarationError,
    ContractEnforcementError,
    FluxgateError,
    LoadError,
    StructuralError,
    UnitsRootNotFoundError,
)
from fluxgate.core.paths import CONFIG_FILENAME, ProjectPaths

__all__ = [
    "FluxgateError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
    "StructuralError",
    "ContractDeclarationError",
    "LoadError",
    "UnitsRootNotFoundError",
    "ContractEnforcementError",
    "ProjectPaths",
    "CONFIG_FILENAME",
]
