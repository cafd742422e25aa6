# fluxgate/extraction/conventions.py
"""
File and export naming conventions.

A category (routes, services, models) is only looked for in files that
follow its convention, and only exports whose name carries the category
keyword are counted. This trades recall for precision: a helper called
`format_total` in a service file is never mistaken for a service.

    routes/    routes.py, todo_route.py, todo_routes.py     exports: *route*
    services/  services.py, todo_service.py, ...            exports: *service*
    models/    models.py, todo_model.py, ...                exports: *model*
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from fluxgate.config.schema import CategoryConvention, ConventionsConfig
from fluxgate.extraction.records import ExportKind

EXCLUDED_DIRS = {"__pycache__", ".git", ".venv", ".mypy_cache", ".pytest_cache", ".ruff_cache"}


@dataclass(frozen=True)
class FileConvention:
    """Convention for one export category."""

    kind: ExportKind
    directory: str
    keyword: str

    @classmethod
    def from_config(cls, kind: ExportKind, cfg: CategoryConvention) -> "FileConvention":
        return cls(kind=kind, directory=cfg.directory, keyword=cfg.keyword.lower())

    def matches_file(self, filename: str) -> bool:
        """
        Check a file name against the convention.

        Examples:
            >>> FileConvention(ExportKind.SERVICE, "services", "service").matches_file("todo_service.py")
            True
            >>> FileConvention(ExportKind.SERVICE, "services", "service").matches_file("helpers.py")
            False
        """
        if not filename.endswith(".py"):
            return False
        stem = filename[: -len(".py")].lower()
        kw = self.keyword
        return stem in (kw, f"{kw}s") or stem.endswith((f"_{kw}", f"_{kw}s"))

    def matches_export(self, name: str) -> bool:
        """Public names containing the keyword, singular or plural, any case."""
        return not name.startswith("_") and self.keyword in name.lower()

    def files(self, unit_path: Path) -> List[Path]:
        """Convention-matching files in the category directory, sorted."""
        directory = unit_path / self.directory
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.iterdir() if p.is_file() and self.matches_file(p.name))


@dataclass(frozen=True)
class Conventions:
    routes: FileConvention
    services: FileConvention
    models: FileConvention

    @classmethod
    def from_config(cls, cfg: ConventionsConfig) -> "Conventions":
        return cls(
            routes=FileConvention.from_config(ExportKind.ROUTE, cfg.routes),
            services=FileConvention.from_config(ExportKind.SERVICE, cfg.services),
            models=FileConvention.from_config(ExportKind.MODEL, cfg.models),
        )

    @classmethod
    def default(cls) -> "Conventions":
        return cls.from_config(ConventionsConfig())


def iter_source_files(unit_path: Path) -> List[Path]:
    """All .py files of a unit, recursively, sorted."""
    files = []
    for p in unit_path.rglob("*.py"):
        rel = p.relative_to(unit_path)
        if any(part in EXCLUDED_DIRS for part in rel.parts):
            continue
        files.append(p)
    return sorted(files)


__all__ = ["EXCLUDED_DIRS", "FileConvention", "Conventions", "iter_source_files"]
