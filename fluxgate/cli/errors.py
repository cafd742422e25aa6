# fluxgate/cli/errors.py
"""
Friendly error handling for the fluxgate CLI.

Turns configuration and I/O failures into actionable messages instead of
raw tracebacks. Set FLUXGATE_DEBUG=1 to also see the original error.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel

from fluxgate.core.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    FluxgateError,
    UnitsRootNotFoundError,
)

console = Console(stderr=True)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_CONFIG = 2

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class ErrorFix:
    """A suggested fix for an error."""

    title: str
    description: str
    commands: List[str] = field(default_factory=list)


@dataclass
class ErrorHelp:
    title: str
    description: str
    fixes: List[ErrorFix] = field(default_factory=list)


def help_for(error: FluxgateError) -> ErrorHelp:
    """Map a fluxgate error to a title, description and fixes."""
    if isinstance(error, UnitsRootNotFoundError):
        return ErrorHelp(
            "Units Directory Not Found",
            f"No units directory at {error.path}.",
            [
                ErrorFix("Check the project root", "Run from the project root or pass it explicitly:", ["fluxgate validate ./my-app"]),
                ErrorFix("Configure the location", "Set units_dir in fluxgate.yaml:", ["units_dir: src/features"]),
            ],
        )
    if isinstance(error, ConfigNotFoundError):
        return ErrorHelp(
            "Config File Not Found",
            str(error),
            [ErrorFix("Check the path", "Pass an existing file to --config, or omit it to use defaults.")],
        )
    if isinstance(error, ConfigParseError):
        return ErrorHelp(
            "Invalid Config File",
            str(error),
            [ErrorFix("Fix the YAML", "The file must be a YAML mapping, optionally nested under `fluxgate:`.")],
        )
    if isinstance(error, ConfigValidationError):
        return ErrorHelp(
            "Invalid Configuration",
            str(error),
            [ErrorFix("Check the keys", "Unknown keys are rejected; see fluxgate/config/default.yaml for the schema.")],
        )
    if isinstance(error, ConfigError):
        return ErrorHelp("Configuration Error", str(error))
    return ErrorHelp("fluxgate Error", str(error))


def display_error(error_help: ErrorHelp, original_error: Optional[str] = None) -> None:
    """Display an error panel on stderr."""
    lines = [error_help.description, ""]

    if error_help.fixes:
        lines.append("[bold]How to fix:[/bold]")
        lines.append("")
        for i, fix in enumerate(error_help.fixes, 1):
            lines.append(f"[bold]{i}. {fix.title}[/bold]")
            lines.append(f"   {fix.description}")
            for cmd in fix.commands:
                lines.append(f"   [dim]$[/dim] [cyan]{cmd}[/cyan]")

    console.print(Panel("\n".join(lines), title=f"✗ {error_help.title}", border_style="red", expand=False))

    if original_error and os.getenv("FLUXGATE_DEBUG"):
        console.print(f"\n[dim]Original error: {original_error}[/dim]")


def friendly_errors(func: F) -> F:
    """
    Decorator for commands: configuration and I/O failures exit with code 2.

    typer.Exit passes through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except FluxgateError as e:
            display_error(help_for(e), repr(e))
            raise typer.Exit(code=EXIT_CONFIG) from e
        except OSError as e:
            display_error(ErrorHelp("File Error", str(e)), repr(e))
            raise typer.Exit(code=EXIT_CONFIG) from e

    return wrapper  # type: ignore[return-value]


__all__ = [
    "EXIT_OK",
    "EXIT_INVALID",
    "EXIT_CONFIG",
    "ErrorFix",
    "ErrorHelp",
    "help_for",
    "display_error",
    "friendly_errors",
]
