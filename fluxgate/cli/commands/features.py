# fluxgate/cli/commands/features.py
"""
List discovered units.

Usage:
    fluxgate features
    fluxgate features ./my-app --static
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fluxgate.cli.context import CLIContext
from fluxgate.cli.ui import ui
from fluxgate.discovery.discovery import discover_units


def command(
    root: Optional[Path] = None,
    config_path: Optional[Path] = None,
    static: bool = False,
    verbose: bool = False,
) -> None:
    ctx = CLIContext.load(root, config_path, static=static, verbose=verbose)
    result = discover_units(ctx.root, ctx.config)

    ui.header("fluxgate features", ctx.paths.relative(ctx.units_root))

    rows = []
    for unit in result.units:
        contract = unit.contract
        description = unit.meta.description if unit.meta and unit.meta.description else ""
        rows.append(
            (
                unit.name,
                str(len(contract.provides.routes)),
                ", ".join(contract.provides.services) or "-",
                ", ".join(contract.needs.services) or "-",
                description,
            )
        )
    ui.table("Units", ("Unit", "Routes", "Provides", "Needs", "Description"), rows)

    if result.skipped:
        ui.section("Disabled")
        for name in result.skipped:
            ui.info(f"  - {name}")

    if result.findings:
        ui.section("Discovery problems")
        for finding in result.findings:
            if finding.is_error:
                ui.error(f"{finding.unit}: {finding.message}")
            else:
                ui.warning(f"{finding.unit}: {finding.message}")
