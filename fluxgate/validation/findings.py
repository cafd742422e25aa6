# fluxgate/validation/findings.py
"""
Typed validation findings and the run-level report.

Every problem a run detects becomes a Finding. Findings are collected, never
raised at first occurrence, so one run surfaces the complete defect list.

Families (error taxonomy):
    STRUCTURAL          entry file or source file unusable
    CONTRACT_MISMATCH   declared contract disagrees with source
    GRAPH               cross-unit dependency problems
    UNKNOWN_SERVICE     platform import not in the registry
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class FindingFamily(str, Enum):
    STRUCTURAL = "StructuralError"
    CONTRACT_MISMATCH = "ContractMismatch"
    GRAPH = "GraphError"
    UNKNOWN_SERVICE = "UnknownServiceError"


class FindingKind(str, Enum):
    # Contract mismatches (the five rules)
    MISSING_IMPLEMENTATION = "MissingImplementation"
    UNDECLARED_EXPORT = "UndeclaredExport"
    COUNT_MISMATCH = "CountMismatch"
    MODEL_EXPOSED = "ModelExposed"
    UNUSED_DEPENDENCY = "UnusedDependency"
    # Declaration hygiene
    DUPLICATE_DECLARATION = "DuplicateDeclaration"
    CONFLICTING_DECLARATION = "ConflictingDeclaration"
    # Graph
    DUPLICATE_PROVIDER = "DuplicateProvider"
    UNRESOLVED_DEPENDENCY = "UnresolvedDependency"
    DUPLICATE_ROUTE = "DuplicateRoute"
    DEPENDENCY_CYCLE = "DependencyCycle"
    # Platform
    UNKNOWN_PLATFORM_SERVICE = "UnknownPlatformService"
    # Structural
    PARSE_FAILURE = "ParseFailure"
    LOAD_FAILURE = "LoadFailure"
    MISSING_ENTRY = "MissingEntry"
    MISSING_NAME = "MissingName"
    MISSING_CONTRACT = "MissingContract"
    NAME_MISMATCH = "NameMismatch"


_FAMILY: Dict[FindingKind, FindingFamily] = {
    FindingKind.MISSING_IMPLEMENTATION: FindingFamily.CONTRACT_MISMATCH,
    FindingKind.UNDECLARED_EXPORT: FindingFamily.CONTRACT_MISMATCH,
    FindingKind.COUNT_MISMATCH: FindingFamily.CONTRACT_MISMATCH,
    FindingKind.MODEL_EXPOSED: FindingFamily.CONTRACT_MISMATCH,
    FindingKind.UNUSED_DEPENDENCY: FindingFamily.CONTRACT_MISMATCH,
    FindingKind.DUPLICATE_DECLARATION: FindingFamily.CONTRACT_MISMATCH,
    FindingKind.CONFLICTING_DECLARATION: FindingFamily.CONTRACT_MISMATCH,
    FindingKind.DUPLICATE_PROVIDER: FindingFamily.GRAPH,
    FindingKind.UNRESOLVED_DEPENDENCY: FindingFamily.GRAPH,
    FindingKind.DUPLICATE_ROUTE: FindingFamily.GRAPH,
    FindingKind.DEPENDENCY_CYCLE: FindingFamily.GRAPH,
    FindingKind.UNKNOWN_PLATFORM_SERVICE: FindingFamily.UNKNOWN_SERVICE,
    FindingKind.PARSE_FAILURE: FindingFamily.STRUCTURAL,
    FindingKind.LOAD_FAILURE: FindingFamily.STRUCTURAL,
    FindingKind.MISSING_ENTRY: FindingFamily.STRUCTURAL,
    FindingKind.MISSING_NAME: FindingFamily.STRUCTURAL,
    FindingKind.MISSING_CONTRACT: FindingFamily.STRUCTURAL,
    FindingKind.NAME_MISMATCH: FindingFamily.STRUCTURAL,
}

_WARNING_KINDS = {
    FindingKind.DUPLICATE_ROUTE,
    FindingKind.DEPENDENCY_CYCLE,
    FindingKind.NAME_MISMATCH,
}

# Remediation hints, keyed by (kind, category). "*" matches any category.
_HINTS: Dict[Tuple[FindingKind, str], str] = {
    (FindingKind.MISSING_IMPLEMENTATION, "provides.routes"): (
        "implement the route in a routes/*_routes.py file, or remove it from .provides('routes', [...])"
    ),
    (FindingKind.UNDECLARED_EXPORT, "provides.routes"): "add it to .provides('routes', [...])",
    (FindingKind.MISSING_IMPLEMENTATION, "services"): (
        "export it from a services/*_service.py file, or remove the declaration"
    ),
    (FindingKind.UNDECLARED_EXPORT, "services"): (
        "add to .provides('services', [...]) if other units use it, otherwise .internal('services', [...])"
    ),
    (FindingKind.COUNT_MISMATCH, "services"): (
        "every service export must be declared exactly once under provides or internal"
    ),
    (FindingKind.MISSING_IMPLEMENTATION, "internal.models"): (
        "export it from a models/*_model.py file, or remove it from .internal('models', [...])"
    ),
    (FindingKind.UNDECLARED_EXPORT, "internal.models"): "add to .internal('models', [...])",
    (FindingKind.COUNT_MISMATCH, "internal.models"): (
        "every model export must be declared exactly once under .internal('models', [...])"
    ),
    (FindingKind.MODEL_EXPOSED, "*"): (
        "models are always private: move it to .internal('models', [...]) and expose a service instead"
    ),
    (FindingKind.MISSING_IMPLEMENTATION, "imports.platform"): (
        "import the platform module, or remove it from .imports('platform', [...])"
    ),
    (FindingKind.UNDECLARED_EXPORT, "imports.platform"): "add to .imports('platform', [...])",
    (FindingKind.UNKNOWN_PLATFORM_SERVICE, "*"): "use one of the registered platform services",
    (FindingKind.UNUSED_DEPENDENCY, "*"): (
        "import the service from the provider's services package, or remove it from .needs('services', [...])"
    ),
    (FindingKind.UNRESOLVED_DEPENDENCY, "*"): (
        "have exactly one other unit .provides('services', [...]) it, or remove the need"
    ),
    (FindingKind.DUPLICATE_PROVIDER, "*"): "keep the service in one unit's provides; others should .needs() it",
    (FindingKind.DUPLICATE_DECLARATION, "*"): "declare each name once per category",
    (FindingKind.CONFLICTING_DECLARATION, "*"): "a name belongs in exactly one place in the contract",
    (FindingKind.DUPLICATE_ROUTE, "*"): "give the units different mount prefixes or paths",
    (FindingKind.DEPENDENCY_CYCLE, "*"): "break the cycle by moving shared logic into one unit",
    (FindingKind.PARSE_FAILURE, "*"): "fix the syntax error in the file",
    (FindingKind.LOAD_FAILURE, "*"): "fix the entry file so it imports cleanly",
    (FindingKind.MISSING_ENTRY, "*"): "create the entry file, or prefix the directory to disable the unit",
    (FindingKind.MISSING_NAME, "*"): "set name=... on the FeatureConfig",
    (FindingKind.MISSING_CONTRACT, "*"): "add contract=create_contract()...build() to the FeatureConfig",
    (FindingKind.NAME_MISMATCH, "*"): "rename the directory or the FeatureConfig name so they match",
}


def family_of(kind: FindingKind) -> FindingFamily:
    return _FAMILY[kind]


def default_severity(kind: FindingKind) -> Severity:
    return Severity.WARNING if kind in _WARNING_KINDS else Severity.ERROR


def hint_for(kind: FindingKind, category: str) -> Optional[str]:
    return _HINTS.get((kind, category)) or _HINTS.get((kind, "*"))


# =============================================================================
# Finding
# =============================================================================


@dataclass(frozen=True)
class Finding:
    """
    One validation problem.

    Attributes:
        kind: What went wrong
        unit: Unit the finding belongs to
        category: Contract category ("provides.routes", "services", ...)
        symbols: Offending symbol(s)
        message: Human readable description
        severity: Defaults from the kind
        related_units: Other units involved (e.g. all providers of a service)
        file: Source file, relative to the unit, when the finding is file-scoped
    """

    kind: FindingKind
    unit: str
    category: str
    symbols: Tuple[str, ...]
    message: str
    severity: Severity = None  # type: ignore[assignment]
    related_units: Tuple[str, ...] = ()
    file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.severity is None:
            object.__setattr__(self, "severity", default_severity(self.kind))
        object.__setattr__(self, "symbols", tuple(self.symbols))
        object.__setattr__(self, "related_units", tuple(self.related_units))

    @property
    def family(self) -> FindingFamily:
        return family_of(self.kind)

    @property
    def hint(self) -> Optional[str]:
        return hint_for(self.kind, self.category)

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    @property
    def sort_key(self) -> Tuple[str, str, str, Tuple[str, ...], str]:
        return (self.unit, self.category, self.kind.value, self.symbols, self.message)

    def describe(self) -> str:
        where = f" ({self.file})" if self.file else ""
        return f"[{self.unit}] {self.category}: {self.kind.value}: {self.message}{where}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unit": self.unit,
            "category": self.category,
            "kind": self.kind.value,
            "family": self.family.value,
            "severity": self.severity.value,
            "symbols": list(self.symbols),
            "related_units": list(self.related_units),
            "file": self.file,
            "message": self.message,
            "hint": self.hint,
        }


def sort_findings(findings: Sequence[Finding]) -> List[Finding]:
    """Deterministic order: unit, then category, then kind and symbols."""
    unique = {f: None for f in findings}
    return sorted(unique, key=lambda f: f.sort_key)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class UnitResult:
    unit: str
    findings: Tuple[Finding, ...] = ()

    @property
    def errors(self) -> List[Finding]:
        return [f for f in self.findings if f.is_error]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self.findings if not f.is_error]

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ValidationReport:
    """
    Run-level validation report.

    `unit_results` holds per-unit findings; `run_findings` holds findings
    that surfaced before a unit could be validated (discovery problems).
    A report is valid when nothing anywhere is an error.
    """

    units: Tuple[str, ...]
    unit_results: Tuple[UnitResult, ...] = ()
    run_findings: Tuple[Finding, ...] = ()
    skipped: Tuple[str, ...] = ()

    @property
    def all_findings(self) -> List[Finding]:
        findings: List[Finding] = list(self.run_findings)
        for result in self.unit_results:
            findings.extend(result.findings)
        return sort_findings(findings)

    @property
    def errors(self) -> List[Finding]:
        return [f for f in self.all_findings if f.is_error]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self.all_findings if not f.is_error]

    @property
    def valid(self) -> bool:
        return not self.errors

    def result_for(self, unit: str) -> Optional[UnitResult]:
        for result in self.unit_results:
            if result.unit == unit:
                return result
        return None

    def summary(self) -> Dict[str, Any]:
        """JSON-serialisable summary for machines (CI, editors)."""
        findings = self.all_findings
        by_kind: Dict[str, int] = {}
        for f in findings:
            by_kind[f.kind.value] = by_kind.get(f.kind.value, 0) + 1

        units: Dict[str, Dict[str, Any]] = {}
        for name in sorted(set(self.units) | {f.unit for f in findings}):
            unit_findings = [f for f in findings if f.unit == name]
            errors = sum(1 for f in unit_findings if f.is_error)
            units[name] = {
                "valid": errors == 0,
                "errors": errors,
                "warnings": len(unit_findings) - errors,
            }

        errors = sum(1 for f in findings if f.is_error)
        return {
            "valid": errors == 0,
            "units": units,
            "skipped": list(self.skipped),
            "counts": {
                "units": len(self.units),
                "errors": errors,
                "warnings": len(findings) - errors,
                "by_kind": dict(sorted(by_kind.items())),
            },
            "findings": [f.to_dict() for f in findings],
        }


__all__ = [
    "Severity",
    "FindingFamily",
    "FindingKind",
    "Finding",
    "UnitResult",
    "ValidationReport",
    "family_of",
    "default_severity",
    "hint_for",
    "sort_findings",
]
