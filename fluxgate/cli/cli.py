# fluxgate/cli/cli.py
"""
fluxgate CLI - Main application.

Commands:
    fluxgate validate    Validate every unit's contract (exit 1 on errors)
    fluxgate features    List discovered units
    fluxgate graph       Show service providers and dependencies

NOTE: Commands import their implementation only when invoked.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from fluxgate.cli.errors import friendly_errors

app = typer.Typer(
    name="fluxgate",
    help="fluxgate - contract validation and startup enforcement for feature units.",
    no_args_is_help=True,
    add_completion=False,
)


ROOT_ARG = typer.Argument(None, help="Project root (default: current directory).")
CONFIG_OPT = typer.Option(None, "--config", "-c", help="Config file (default: <root>/fluxgate.yaml).")
STATIC_OPT = typer.Option(False, "--static", help="Read entry files without executing them.")
VERBOSE_OPT = typer.Option(False, "--verbose", "-v", help="Debug logging.")


@app.command("validate")
@friendly_errors
def validate(
    root: Optional[Path] = ROOT_ARG,
    config: Optional[Path] = CONFIG_OPT,
    static: bool = STATIC_OPT,
    json_output: bool = typer.Option(
        False, "--json", help="Print the full JSON summary (per-unit results and findings) instead of the table."
    ),
    summary: Optional[Path] = typer.Option(None, "--summary", help="Write the JSON summary to a file."),
    verbose: bool = VERBOSE_OPT,
) -> None:
    """Validate contracts against sources. Exit 0 valid, 1 errors, 2 config/IO failure."""
    from fluxgate.cli.commands import validate as mod

    mod.command(
        root=root,
        config_path=config,
        static=static,
        json_output=json_output,
        summary_path=summary,
        verbose=verbose,
    )


@app.command("features")
@friendly_errors
def features(
    root: Optional[Path] = ROOT_ARG,
    config: Optional[Path] = CONFIG_OPT,
    static: bool = STATIC_OPT,
    verbose: bool = VERBOSE_OPT,
) -> None:
    """List enabled and disabled units."""
    from fluxgate.cli.commands import features as mod

    mod.command(root=root, config_path=config, static=static, verbose=verbose)


@app.command("graph")
@friendly_errors
def graph(
    root: Optional[Path] = ROOT_ARG,
    config: Optional[Path] = CONFIG_OPT,
    static: bool = STATIC_OPT,
    json_output: bool = typer.Option(False, "--json", help="Print the graph as JSON."),
    verbose: bool = VERBOSE_OPT,
) -> None:
    """Show service providers, dependency edges and cycles."""
    from fluxgate.cli.commands import graph as mod

    mod.command(root=root, config_path=config, static=static, json_output=json_output, verbose=verbose)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
