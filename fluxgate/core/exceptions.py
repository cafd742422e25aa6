# fluxgate/core/exceptions.py
"""
All exceptions raised by fluxgate.

Hierarchy:
    FluxgateError
    ├── ConfigError - configuration loading failures
    │   ├── ConfigNotFoundError
    │   ├── ConfigParseError
    │   └── ConfigValidationError
    ├── StructuralError - a unit's entry file or contract is unusable
    │   ├── LoadError - entry file could not be loaded
    │   └── ContractDeclarationError - malformed contract declaration
    ├── UnitsRootNotFoundError - the units directory is missing (aborts a run)
    └── ContractEnforcementError - aggregated validation failure

Contract mismatches, graph problems and unknown platform services are never
raised one at a time. They are collected as findings and surface together
through ContractEnforcementError.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from fluxgate.validation.findings import Finding


class FluxgateError(Exception):
    """Base exception for everything fluxgate raises."""

    pass


# =============================================================================
# Config Errors
# =============================================================================


class ConfigError(FluxgateError):
    """Base error for configuration issues."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        if path:
            message = f"{message} (file: {path})"
        super().__init__(message)


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file doesn't exist."""

    pass


class ConfigParseError(ConfigError):
    """Raised when YAML parsing fails."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when config doesn't match the schema."""

    pass


# =============================================================================
# Structural Errors
# =============================================================================


class StructuralError(FluxgateError):
    """A unit's entry file or contract declaration cannot be used."""

    pass


class ContractDeclarationError(StructuralError):
    """
    A contract was declared with an unknown category or malformed item.

    Examples:
        >>> create_contract().provides("widgets", ["x"])
        Traceback (most recent call last):
        ContractDeclarationError: Unknown provides category 'widgets' ...
    """

    pass


class LoadError(StructuralError):
    """
    An entry file could not be loaded.

    Attributes:
        path: The entry file that failed
        category: One of syntax_error, missing_file, unresolved_module,
            invalid_export, declaration_error, unknown
        suggestions: Actionable hints for the user
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path,
        category: str = "unknown",
        suggestions: Sequence[str] = (),
    ):
        self.path = path
        self.category = category
        self.suggestions = tuple(suggestions)
        super().__init__(message)


class UnitsRootNotFoundError(FluxgateError):
    """The project's units directory does not exist; the run cannot proceed."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Units directory not found: {path}")


# =============================================================================
# Enforcement
# =============================================================================


class ContractEnforcementError(FluxgateError):
    """
    Raised once by the enforcement gate when any unit has error findings.

    Carries every error from the run, sorted by unit then category, so the
    whole defect list is visible in one pass.
    """

    def __init__(self, errors: Sequence["Finding"], warnings: Sequence["Finding"] = ()):
        self.errors = tuple(errors)
        self.warnings = tuple(warnings)
        super().__init__(self._format())

    @property
    def units(self) -> list[str]:
        return sorted({f.unit for f in self.errors})

    def _format(self) -> str:
        lines = [
            f"Contract enforcement failed: {len(self.errors)} error(s) "
            f"in {len(self.units)} unit(s). Startup blocked until contracts are valid."
        ]
        for i, finding in enumerate(self.errors, 1):
            lines.append(f"  {i}. {finding.describe()}")
            if finding.hint:
                lines.append(f"     hint: {finding.hint}")
        return "\n".join(lines)


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
]
