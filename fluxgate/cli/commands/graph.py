# fluxgate/cli/commands/graph.py
"""
Show the service dependency graph.

Usage:
    fluxgate graph
    fluxgate graph --json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from fluxgate.cli.context import CLIContext
from fluxgate.cli.ui import ui
from fluxgate.discovery.discovery import discover_units
from fluxgate.validation.graph import build_dependency_graph


def command(
    root: Optional[Path] = None,
    config_path: Optional[Path] = None,
    static: bool = False,
    json_output: bool = False,
    verbose: bool = False,
) -> None:
    ctx = CLIContext.load(root, config_path, static=static, verbose=verbose)
    discovery = discover_units(ctx.root, ctx.config)
    graph = build_dependency_graph(discovery.units, ctx.config.default_prefix)

    if json_output:
        typer.echo(json.dumps(graph.to_dict(), indent=2))
        return

    ui.header("fluxgate graph", ctx.paths.relative(ctx.units_root))

    ui.table(
        "Providers",
        ("Service", "Provided by"),
        [(service, ", ".join(units)) for service, units in graph.providers.items()],
    )
    ui.table(
        "Dependencies",
        ("Consumer", "Service", "Provider"),
        [(e.consumer, e.service, e.provider) for e in graph.edges],
    )

    for need in graph.unresolved:
        detail = f"candidates: {', '.join(need.candidates)}" if need.candidates else "no provider"
        ui.warning(f"{need.consumer} needs {need.service}", detail)

    for cycle in graph.find_cycles():
        ui.warning(f"Cycle: {' -> '.join(cycle + (cycle[0],))}")
