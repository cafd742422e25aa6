# fluxgate/validation/graph.py
"""
Dependency Graph Resolver.

Aggregates every unit's `provides.services` and `needs.services` into one
project-wide graph:

    nodes   units
    edges   (consumer, service, provider) for each need that resolves to
            exactly one other unit

The graph is built only after every unit has been discovered and loaded:
needs resolution requires all providers to be known first.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from fluxgate.contracts.models import RouteSpec, Unit
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import GRAPH
from fluxgate.validation.findings import Finding, FindingKind, sort_findings

logger = get_logger(__name__)


@dataclass(frozen=True, order=True)
class DependencyEdge:
    consumer: str
    service: str
    provider: str


@dataclass(frozen=True, order=True)
class UnresolvedNeed:
    """A need with no provider (candidates empty) or several."""

    consumer: str
    service: str
    candidates: Tuple[str, ...] = ()


class DependencyGraph:
    """
    Resolved provider/consumer relationships for one run.

    Usage:
        graph = build_dependency_graph(units, default_prefix="/api")
        graph.provider_of("user_service")   # "users"
        graph.dependencies_of("orders")     # ["users"]
    """

    def __init__(
        self,
        units: Sequence[str],
        providers: Dict[str, Tuple[str, ...]],
        edges: Sequence[DependencyEdge],
        unresolved: Sequence[UnresolvedNeed],
        findings: Sequence[Finding] = (),
    ):
        self.units = tuple(sorted(units))
        self.providers = dict(sorted(providers.items()))
        self.edges = tuple(sorted(edges))
        self.unresolved = tuple(sorted(unresolved))
        self._findings = list(findings)

    @property
    def findings(self) -> List[Finding]:
        return sort_findings(self._findings + self._cycle_findings())

    def findings_for(self, unit: str) -> List[Finding]:
        return [f for f in self.findings if f.unit == unit]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def provider_of(self, service: str) -> Optional[str]:
        """The unique provider of a service, or None (missing or ambiguous)."""
        candidates = self.providers.get(service, ())
        return candidates[0] if len(candidates) == 1 else None

    def resolved_provider(self, consumer: str, service: str) -> Optional[str]:
        for edge in self.edges:
            if edge.consumer == consumer and edge.service == service:
                return edge.provider
        return None

    def dependencies_of(self, unit: str) -> List[str]:
        """Units that `unit` needs services from."""
        return sorted({e.provider for e in self.edges if e.consumer == unit})

    def dependents_of(self, unit: str) -> List[str]:
        """Units that need services from `unit`."""
        return sorted({e.consumer for e in self.edges if e.provider == unit})

    def find_cycles(self) -> List[Tuple[str, ...]]:
        """
        Strongly connected groups of units that depend on each other.

        Each cycle is returned as a sorted tuple of unit names; the list is
        sorted too, so output is deterministic.
        """
        adjacency: Dict[str, List[str]] = defaultdict(list)
        for edge in self.edges:
            adjacency[edge.consumer].append(edge.provider)

        index: Dict[str, int] = {}
        low: Dict[str, int] = {}
        stack: List[str] = []
        on_stack = set()
        cycles: List[Tuple[str, ...]] = []
        counter = [0]

        def visit(node: str) -> None:
            index[node] = low[node] = counter[0]
            counter[0] += 1
            stack.append(node)
            on_stack.add(node)

            for succ in sorted(adjacency.get(node, ())):
                if succ not in index:
                    visit(succ)
                    low[node] = min(low[node], low[succ])
                elif succ in on_stack:
                    low[node] = min(low[node], index[succ])

            if low[node] == index[node]:
                group = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    group.append(member)
                    if member == node:
                        break
                if len(group) > 1:
                    cycles.append(tuple(sorted(group)))

        for unit in self.units:
            if unit not in index:
                visit(unit)

        return sorted(cycles)

    def _cycle_findings(self) -> List[Finding]:
        findings = []
        for cycle in self.find_cycles():
            path = " -> ".join(cycle + (cycle[0],))
            for unit in cycle:
                findings.append(
                    Finding(
                        kind=FindingKind.DEPENDENCY_CYCLE,
                        unit=unit,
                        category="needs.services",
                        symbols=cycle,
                        message=f"Circular service dependency between units: {path}",
                        related_units=cycle,
                    )
                )
        return findings

    def to_dict(self) -> dict:
        return {
            "units": list(self.units),
            "providers": {s: list(u) for s, u in self.providers.items()},
            "edges": [
                {"consumer": e.consumer, "service": e.service, "provider": e.provider}
                for e in self.edges
            ],
            "unresolved": [
                {"consumer": u.consumer, "service": u.service, "candidates": list(u.candidates)}
                for u in self.unresolved
            ],
            "cycles": [list(c) for c in self.find_cycles()],
        }


# =============================================================================
# Building
# =============================================================================


def _collect_providers(units: Sequence[Unit]) -> Dict[str, Tuple[str, ...]]:
    providers: Dict[str, set] = defaultdict(set)
    for unit in units:
        for service in unit.contract.provides.services:
            providers[service].add(unit.name)
    return {service: tuple(sorted(names)) for service, names in providers.items()}


def _duplicate_providers(providers: Dict[str, Tuple[str, ...]]) -> List[Finding]:
    findings = []
    for service, names in providers.items():
        if len(names) < 2:
            continue
        for unit in names:
            findings.append(
                Finding(
                    kind=FindingKind.DUPLICATE_PROVIDER,
                    unit=unit,
                    category="provides.services",
                    symbols=(service,),
                    message=f"Service '{service}' is provided by multiple units: {', '.join(names)}",
                    related_units=names,
                )
            )
    return findings


def _duplicate_routes(units: Sequence[Unit], default_prefix: str) -> List[Finding]:
    """
    Same method and same mounted path (prefix + path) in more than one unit.

    Routes that only share a path under different prefixes never collide, so
    they are not reported.
    """
    owners: Dict[RouteSpec, set] = defaultdict(set)
    for unit in units:
        prefix = unit.mount_prefix(default_prefix)
        for route in unit.contract.provides.routes:
            owners[route.mounted(prefix)].add(unit.name)

    findings = []
    for mounted, names in owners.items():
        if len(names) < 2:
            continue
        ordered = tuple(sorted(names))
        for unit in ordered:
            others = ", ".join(n for n in ordered if n != unit)
            findings.append(
                Finding(
                    kind=FindingKind.DUPLICATE_ROUTE,
                    unit=unit,
                    category="provides.routes",
                    symbols=(str(mounted),),
                    message=f"Route '{mounted}' is also declared by: {others}",
                    related_units=ordered,
                )
            )
    return findings


def _resolve_needs(
    units: Sequence[Unit], providers: Dict[str, Tuple[str, ...]]
) -> Tuple[List[DependencyEdge], List[UnresolvedNeed], List[Finding]]:
    edges: List[DependencyEdge] = []
    unresolved: List[UnresolvedNeed] = []
    findings: List[Finding] = []

    for unit in units:
        for service in dict.fromkeys(unit.contract.needs.services):
            candidates = tuple(n for n in providers.get(service, ()) if n != unit.name)

            if len(candidates) == 1:
                edges.append(DependencyEdge(unit.name, service, candidates[0]))
                continue

            unresolved.append(UnresolvedNeed(unit.name, service, candidates))
            if candidates:
                message = (
                    f"Needed service '{service}' has {len(candidates)} providers "
                    f"({', '.join(candidates)}); expected exactly one"
                )
            else:
                message = f"Needed service '{service}' is not provided by any other unit"
            findings.append(
                Finding(
                    kind=FindingKind.UNRESOLVED_DEPENDENCY,
                    unit=unit.name,
                    category="needs.services",
                    symbols=(service,),
                    message=message,
                    related_units=candidates,
                )
            )

    return edges, unresolved, findings


def build_dependency_graph(units: Iterable[Unit], default_prefix: str = "/api") -> DependencyGraph:
    """Build the project-wide graph from every unit's contract."""
    units = sorted(units, key=lambda u: u.name)
    providers = _collect_providers(units)
    edges, unresolved, need_findings = _resolve_needs(units, providers)

    findings = _duplicate_providers(providers) + _duplicate_routes(units, default_prefix) + need_findings

    logger.debug(
        f"{GRAPH} {len(units)} units, {len(providers)} provided services, "
        f"{len(edges)} edges, {len(unresolved)} unresolved"
    )
    return DependencyGraph(
        units=[u.name for u in units],
        providers=providers,
        edges=edges,
        unresolved=unresolved,
        findings=findings,
    )


__all__ = ["DependencyEdge", "UnresolvedNeed", "DependencyGraph", "build_dependency_graph"]
