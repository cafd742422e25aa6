"""Contract Validator: findings, dependency graph, rules and the validator itself."""

from fluxgate.validation.findings import (
    Finding,
    FindingFamily,
    FindingKind,
    Severity,
    UnitResult,
    ValidationReport,
    sort_findings,
)
from fluxgate.validation.graph import (
    DependencyEdge,
    DependencyGraph,
    UnresolvedNeed,
    build_dependency_graph,
)
from fluxgate.validation.validator import ContractValidator, validate_units

__all__ = [
    "ContractValidator",
    "validate_units",
    "Finding",
    "FindingFamily",
    "FindingKind",
    "Severity",
    "UnitResult",
    "ValidationReport",
    "sort_findings",
    "DependencyGraph",
    "DependencyEdge",
    "UnresolvedNeed",
    "build_dependency_graph",
]
