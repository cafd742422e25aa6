# fluxgate/cli/ui.py
"""
Shared UI helpers for CLI commands.

Usage:
    from fluxgate.cli.ui import ui, console

    ui.header("fluxgate validate", "src/features")
    ui.success("All contracts valid")
"""

from __future__ import annotations

from typing import Iterable, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fluxgate.validation.findings import Finding, Severity

console = Console()


class UI:
    """Consistent styling for every command."""

    def print(self, msg: str, style: str = "") -> None:
        if style:
            console.print(f"[{style}]{msg}[/{style}]")
        else:
            console.print(msg)

    def header(self, title: str, subtitle: str = "") -> None:
        if subtitle:
            content = f"[bold]{title}[/bold]\n[dim]{subtitle}[/dim]"
        else:
            content = f"[bold]{title}[/bold]"
        console.print(Panel.fit(content, border_style="blue"))

    def section(self, title: str) -> None:
        console.print(f"\n[bold cyan]{title}[/bold cyan]")

    def success(self, msg: str) -> None:
        console.print(f"[green]✓[/green] {msg}")

    def error(self, msg: str) -> None:
        console.print(f"[red]✗[/red] {msg}")

    def warning(self, msg: str, detail: str = "") -> None:
        detail_str = f" [dim]({detail})[/dim]" if detail else ""
        console.print(f"[yellow]⚠[/yellow] {msg}{detail_str}")

    def info(self, msg: str) -> None:
        console.print(f"[dim]{msg}[/dim]")

    def status(self, name: str, ok: bool, detail: str = "") -> None:
        icon = "✓" if ok else "✗"
        color = "green" if ok else "red"
        detail_str = f" [dim]({detail})[/dim]" if detail else ""
        console.print(f"  [{color}]{icon}[/{color}] {name}{detail_str}")

    def table(self, title: str, columns: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
        table = Table(title=title, show_lines=False)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*row)
        console.print(table)

    def findings_table(self, findings: Sequence[Finding], title: str = "Findings") -> None:
        """Diagnostic table: one row per finding, hint included."""
        table = Table(title=title, show_lines=True)
        table.add_column("Unit", style="bold")
        table.add_column("Severity")
        table.add_column("Category")
        table.add_column("Kind")
        table.add_column("Symbols")
        table.add_column("Message")
        table.add_column("Hint", style="dim")

        for f in findings:
            severity = (
                "[red]error[/red]" if f.severity == Severity.ERROR else "[yellow]warning[/yellow]"
            )
            table.add_row(
                f.unit,
                severity,
                f.category,
                f.kind.value,
                ", ".join(f.symbols),
                f.message if not f.file else f"{f.message} ({f.file})",
                f.hint or "",
            )
        console.print(table)


ui = UI()

__all__ = ["UI", "ui", "console"]
