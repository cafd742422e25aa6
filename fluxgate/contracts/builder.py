# fluxgate/contracts/builder.py
"""
Fluent contract builder.

Usage:
    from fluxgate.contracts.builder import create_contract

    contract = (
        create_contract()
        .provides("routes", ["GET /todos", "POST /todos"])
        .provides("services", ["todo_service"])
        .internal("models", ["TodoModel", "CreateTodoModel"])
        .imports("platform", ["logging", "database"])
        .needs("services", ["user_service"])
        .build()
    )
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Sequence

from fluxgate.contracts.models import Contract, Imports, Internal, Needs, Provided, RouteSpec
from fluxgate.core.exceptions import ContractDeclarationError

PROVIDES_CATEGORIES = ("routes", "services", "models")
INTERNAL_CATEGORIES = ("services", "models")
INTERNAL_EXTRA_CATEGORIES = ("validators", "middlewares", "configs", "helpers")
IMPORT_SOURCES = ("platform", "external")
NEEDS_CATEGORIES = ("services",)


def _as_items(verb: str, category: str, items: Sequence[str]) -> List[str]:
    if isinstance(items, str) or not isinstance(items, (list, tuple)):
        raise ContractDeclarationError(
            f".{verb}('{category}', ...) expects a list of names, got {items!r}"
        )
    bad = [i for i in items if not isinstance(i, str) or not i.strip()]
    if bad:
        raise ContractDeclarationError(
            f".{verb}('{category}', ...) contains invalid entries: {bad!r}"
        )
    return [i.strip() for i in items]


def _check_category(verb: str, category: str, allowed: Sequence[str]) -> None:
    if category not in allowed:
        raise ContractDeclarationError(
            f"Unknown {verb} category '{category}'. Expected one of: {', '.join(allowed)}"
        )


class ContractBuilder:
    """
    Builds an immutable Contract.

    `build()` snapshots the current declarations; calling builder methods
    afterwards never changes contracts that were already built.
    """

    def __init__(self) -> None:
        self._provides: Dict[str, List] = {c: [] for c in PROVIDES_CATEGORIES}
        self._internal: Dict[str, List[str]] = {
            c: [] for c in INTERNAL_CATEGORIES + INTERNAL_EXTRA_CATEGORIES
        }
        self._imports: Dict[str, List[str]] = {s: [] for s in IMPORT_SOURCES}
        self._needs: Dict[str, List[str]] = {c: [] for c in NEEDS_CATEGORIES}

    def provides(self, category: str, items: Sequence[str]) -> "ContractBuilder":
        """
        Public API offered to other units.

        category: routes | services. Declaring models here is recorded and
        always reported as an error: models stay internal.
        """
        _check_category("provides", category, PROVIDES_CATEGORIES)
        values = _as_items("provides", category, items)
        if category == "routes":
            self._provides["routes"].extend(RouteSpec.parse(v) for v in values)
        else:
            self._provides[category].extend(values)
        return self

    def internal(self, category: str, items: Sequence[str]) -> "ContractBuilder":
        """Private implementation. category: services | models (validated), or a documentation-only category."""
        _check_category("internal", category, INTERNAL_CATEGORIES + INTERNAL_EXTRA_CATEGORIES)
        self._internal[category].extend(_as_items("internal", category, items))
        return self

    def imports(self, source: str, items: Sequence[str]) -> "ContractBuilder":
        """Platform services (validated) and external libraries (documentation only)."""
        _check_category("imports", source, IMPORT_SOURCES)
        self._imports[source].extend(_as_items("imports", source, items))
        return self

    def needs(self, category: str, items: Sequence[str]) -> "ContractBuilder":
        """Services required from other units."""
        _check_category("needs", category, NEEDS_CATEGORIES)
        self._needs[category].extend(_as_items("needs", category, items))
        return self

    def build(self) -> Contract:
        extras = {c: tuple(self._internal[c]) for c in INTERNAL_EXTRA_CATEGORIES if self._internal[c]}
        return Contract(
            provides=Provided(
                routes=tuple(self._provides["routes"]),
                services=tuple(self._provides["services"]),
                models=tuple(self._provides["models"]),
            ),
            internal=Internal(
                services=tuple(self._internal["services"]),
                models=tuple(self._internal["models"]),
                extras=MappingProxyType(extras),
            ),
            imports=Imports(
                platform=tuple(self._imports["platform"]),
                external=tuple(self._imports["external"]),
            ),
            needs=Needs(services=tuple(self._needs["services"])),
        )


def create_contract() -> ContractBuilder:
    """Start a contract declaration."""
    return ContractBuilder()


__all__ = [
    "ContractBuilder",
    "create_contract",
    "PROVIDES_CATEGORIES",
    "INTERNAL_CATEGORIES",
    "INTERNAL_EXTRA_CATEGORIES",
    "IMPORT_SOURCES",
    "NEEDS_CATEGORIES",
]
