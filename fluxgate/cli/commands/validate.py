# fluxgate/cli/commands/validate.py
"""
Validate every unit's contract.

Usage:
    fluxgate validate                      # current directory
    fluxgate validate ./my-app --static    # don't execute entry files
    fluxgate validate --json               # full JSON summary only, no table
    fluxgate validate --summary out.json   # table + full summary file

Without --json the table is followed by a one-line `summary: {...}` with
the validity flag and finding counts.

Exit codes:
    0  all contracts valid (warnings allowed)
    1  one or more errors
    2  configuration or I/O failure
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from fluxgate.cli.context import CLIContext
from fluxgate.cli.errors import EXIT_INVALID
from fluxgate.cli.ui import ui
from fluxgate.gate.startup import run_validation
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import CLI

logger = get_logger(__name__)


def command(
    root: Optional[Path] = None,
    config_path: Optional[Path] = None,
    static: bool = False,
    json_output: bool = False,
    summary_path: Optional[Path] = None,
    verbose: bool = False,
) -> None:
    ctx = CLIContext.load(root, config_path, static=static, verbose=verbose)
    run = run_validation(ctx.root, ctx.config)
    report = run.report
    summary = report.summary()

    if summary_path is not None:
        summary_path.write_text(json.dumps(summary, indent=2) + "\n", encoding="utf-8")
        logger.debug(f"{CLI} Summary written to {summary_path}")

    if json_output:
        typer.echo(json.dumps(summary, indent=2))
        if not report.valid:
            raise typer.Exit(code=EXIT_INVALID)
        return

    ui.header("fluxgate validate", ctx.paths.relative(ctx.units_root))

    for name in report.units:
        result = report.result_for(name)
        errors = len(result.errors) if result else 0
        warnings = len(result.warnings) if result else 0
        detail = f"{errors} errors, {warnings} warnings" if errors or warnings else ""
        ui.status(name, errors == 0, detail)
    for name in report.skipped:
        ui.info(f"  - {name} (disabled)")

    findings = report.all_findings
    if findings:
        ui.findings_table(findings)

    counts = summary["counts"]
    typer.echo("summary: " + json.dumps({"valid": summary["valid"], "counts": counts}, sort_keys=True))

    if report.valid:
        ui.success(
            f"All contracts valid: {counts['units']} units, {counts['warnings']} warnings"
        )
        return

    ui.error(
        f"Contract validation failed: {counts['errors']} errors, "
        f"{counts['warnings']} warnings in {counts['units']} units"
    )
    raise typer.Exit(code=EXIT_INVALID)
