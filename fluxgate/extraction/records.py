# fluxgate/extraction/records.py
"""Facts extracted from a unit's source files. Recomputed on every run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from fluxgate.contracts.models import RouteSpec


class ExportKind(str, Enum):
    ROUTE = "route"
    SERVICE = "service"
    MODEL = "model"


@dataclass(frozen=True)
class ExportRecord:
    """
    One exported symbol.

    For routes `name` is the rendered route ("GET /todos") and `route` holds
    the parsed RouteSpec. `file` is relative to the unit directory.
    """

    kind: ExportKind
    name: str
    file: str
    line: int
    route: Optional[RouteSpec] = None


@dataclass(frozen=True)
class ImportRecord:
    """
    One imported module.

    `module` is the raw specifier, relative dots included
    ("..todo.services.todo_service"). `names` are the imported names for
    `from X import a, b`, empty for `import X`.
    """

    module: str
    names: Tuple[str, ...]
    file: str
    line: int

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(p for p in self.module.split(".") if p)


@dataclass(frozen=True)
class ParseFailure:
    file: str
    error: str


@dataclass
class UnitExtraction:
    """Everything the extractor found in one unit."""

    unit: str
    routes: List[ExportRecord] = field(default_factory=list)
    services: List[ExportRecord] = field(default_factory=list)
    models: List[ExportRecord] = field(default_factory=list)
    imports: List[ImportRecord] = field(default_factory=list)
    failures: List[ParseFailure] = field(default_factory=list)

    @property
    def route_specs(self) -> List[RouteSpec]:
        return [r.route for r in self.routes if r.route is not None]

    @property
    def service_names(self) -> List[str]:
        return [r.name for r in self.services]

    @property
    def model_names(self) -> List[str]:
        return [r.name for r in self.models]


__all__ = ["ExportKind", "ExportRecord", "ImportRecord", "ParseFailure", "UnitExtraction"]
