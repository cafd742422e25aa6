# fluxgate/validation/rules.py
"""
Per-unit validation rules.

Each rule is a pure function: declared contract + extracted facts in,
findings out. Nothing is raised; the validator collects every finding.

    check_declarations  duplicates and conflicts inside the contract itself
    check_routes        rule 1: declared routes == extracted routes
    check_services      rule 2: exact count, then both set differences
    check_models        rule 3: same as services, all models internal
    check_platform      rule 4: declared platform imports == actual imports
    check_needs         rule 5: resolved provider is actually imported
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from fluxgate.contracts.models import Unit
from fluxgate.contracts.platform import is_platform_service, platform_module, resolve_platform_services
from fluxgate.extraction.records import ExportRecord, ImportRecord, UnitExtraction
from fluxgate.validation.findings import Finding, FindingKind
from fluxgate.validation.graph import DependencyGraph


def _first_files(records: Iterable[ExportRecord]) -> Dict[str, str]:
    files: Dict[str, str] = {}
    for r in records:
        files.setdefault(r.name, r.file)
    return files


def _set_difference_findings(
    unit: str,
    category: str,
    declared: Sequence[str],
    extracted: Sequence[ExportRecord],
    noun: str,
) -> List[Finding]:
    findings = []
    found = _first_files(extracted)
    declared_set = set(declared)

    for name in sorted(declared_set - set(found)):
        findings.append(
            Finding(
                kind=FindingKind.MISSING_IMPLEMENTATION,
                unit=unit,
                category=category,
                symbols=(name,),
                message=f"{noun} '{name}' is declared but not found in source",
            )
        )

    for name in sorted(set(found) - declared_set):
        findings.append(
            Finding(
                kind=FindingKind.UNDECLARED_EXPORT,
                unit=unit,
                category=category,
                symbols=(name,),
                message=f"{noun} '{name}' is exported but not declared",
                file=found[name],
            )
        )

    return findings


def _count_finding(
    unit: str, category: str, declared: int, found: int, noun: str
) -> List[Finding]:
    if declared == found:
        return []
    return [
        Finding(
            kind=FindingKind.COUNT_MISMATCH,
            unit=unit,
            category=category,
            symbols=(),
            message=f"{noun} count mismatch: declared {declared}, found {found}",
        )
    ]


# =============================================================================
# Declarations
# =============================================================================


def check_declarations(
    unit: Unit, known_models: Set[str] = frozenset(), model_keyword: str = "model"
) -> List[Finding]:
    """
    Problems visible from the contract alone.

    - the same name twice in one category
    - a service both provided and internal
    - a need the unit provides itself
    - a need naming a model (models are private to their unit)
    """
    contract = unit.contract
    findings: List[Finding] = []

    categories: List[Tuple[str, Sequence[str]]] = [
        ("provides.routes", [str(r) for r in contract.provides.routes]),
        ("provides.services", contract.provides.services),
        ("provides.models", contract.provides.models),
        ("internal.services", contract.internal.services),
        ("internal.models", contract.internal.models),
        ("imports.platform", contract.imports.platform),
        ("imports.external", contract.imports.external),
        ("needs.services", contract.needs.services),
    ]
    categories.extend((f"internal.{k}", v) for k, v in sorted(contract.internal.extras.items()))

    for category, items in categories:
        for name, count in sorted(Counter(items).items()):
            if count > 1:
                findings.append(
                    Finding(
                        kind=FindingKind.DUPLICATE_DECLARATION,
                        unit=unit.name,
                        category=category,
                        symbols=(name,),
                        message=f"'{name}' is declared {count} times",
                    )
                )

    for name in sorted(set(contract.provides.services) & set(contract.internal.services)):
        findings.append(
            Finding(
                kind=FindingKind.CONFLICTING_DECLARATION,
                unit=unit.name,
                category="services",
                symbols=(name,),
                message=f"Service '{name}' is declared both provided and internal",
            )
        )

    own = set(contract.provides.services) | set(contract.internal.services)
    for name in sorted(set(contract.needs.services)):
        if name in own:
            findings.append(
                Finding(
                    kind=FindingKind.CONFLICTING_DECLARATION,
                    unit=unit.name,
                    category="needs.services",
                    symbols=(name,),
                    message=f"Needed service '{name}' is declared by the unit itself",
                )
            )
        if name in known_models or model_keyword in name.lower():
            findings.append(
                Finding(
                    kind=FindingKind.CONFLICTING_DECLARATION,
                    unit=unit.name,
                    category="needs.services",
                    symbols=(name,),
                    message=f"'{name}' is a model; models can never be needed from another unit",
                )
            )

    return findings


# =============================================================================
# Rules 1-3: exports
# =============================================================================


def check_routes(unit: Unit, extraction: UnitExtraction) -> List[Finding]:
    """Rule 1: every declared route is implemented and every implemented route is declared."""
    declared = [str(r) for r in unit.contract.provides.routes]
    return _set_difference_findings(
        unit.name, "provides.routes", declared, extraction.routes, "Route"
    )


def check_services(unit: Unit, extraction: UnitExtraction) -> List[Finding]:
    """Rule 2: |provides| + |internal| equals the extracted count, then names match."""
    declared = unit.contract.declared_services
    findings = _count_finding(
        unit.name, "services", len(declared), len(extraction.services), "Service"
    )
    findings.extend(
        _set_difference_findings(unit.name, "services", declared, extraction.services, "Service")
    )
    return findings


def check_models(unit: Unit, extraction: UnitExtraction) -> List[Finding]:
    """Rule 3: models are never provided; internal models match extraction exactly."""
    findings = [
        Finding(
            kind=FindingKind.MODEL_EXPOSED,
            unit=unit.name,
            category="provides.models",
            symbols=(name,),
            message=f"Model '{name}' is declared under provides; models are always internal",
        )
        for name in sorted(set(unit.contract.provides.models))
    ]

    declared = unit.contract.internal.models
    findings.extend(
        _count_finding(unit.name, "internal.models", len(declared), len(extraction.models), "Model")
    )
    findings.extend(
        _set_difference_findings(unit.name, "internal.models", declared, extraction.models, "Model")
    )
    return findings


# =============================================================================
# Rule 4: platform imports
# =============================================================================


def imported_platform_services(
    imports: Iterable[ImportRecord], package: str
) -> Dict[str, str]:
    """Platform service -> first file importing it."""
    used: Dict[str, str] = {}
    for record in imports:
        for service in resolve_platform_services(record.module, record.names, package):
            used.setdefault(service, record.file)
    return used


def check_platform(unit: Unit, extraction: UnitExtraction, package: str) -> List[Finding]:
    """Rule 4: declared platform services must be known, imported, and complete."""
    findings: List[Finding] = []
    declared = set(unit.contract.imports.platform)

    for name in sorted(n for n in declared if not is_platform_service(n)):
        findings.append(
            Finding(
                kind=FindingKind.UNKNOWN_PLATFORM_SERVICE,
                unit=unit.name,
                category="imports.platform",
                symbols=(name,),
                message=f"'{name}' is not a registered platform service",
            )
        )

    used = imported_platform_services(extraction.imports, package)
    known = {n for n in declared if is_platform_service(n)}

    for name in sorted(known - set(used)):
        findings.append(
            Finding(
                kind=FindingKind.MISSING_IMPLEMENTATION,
                unit=unit.name,
                category="imports.platform",
                symbols=(name,),
                message=(
                    f"Platform service '{name}' is declared but never imported "
                    f"from {platform_module(name, package)}"
                ),
            )
        )

    for name in sorted(set(used) - declared):
        findings.append(
            Finding(
                kind=FindingKind.UNDECLARED_EXPORT,
                unit=unit.name,
                category="imports.platform",
                symbols=(name,),
                message=f"Platform service '{name}' is imported but not declared",
                file=used[name],
            )
        )

    return findings


# =============================================================================
# Rule 5: needed services
# =============================================================================


def imports_service(
    imports: Iterable[ImportRecord], provider: str, service: str, services_dir: str
) -> bool:
    """
    True if some import targets `service` in the provider's services package.

    Matches any import whose module path contains `<provider>.<services_dir>`
    and that names the service, as a module segment or an imported name:

        from ..users.services.user_service import user_service
        from src.features.users.services import user_service
    """
    for record in imports:
        segments = record.segments
        in_provider = any(
            segments[i] == provider and segments[i + 1] == services_dir
            for i in range(len(segments) - 1)
        )
        if in_provider and (service in record.names or service in segments):
            return True
    return False


def check_needs(
    unit: Unit, extraction: UnitExtraction, graph: DependencyGraph, services_dir: str
) -> List[Finding]:
    """
    Rule 5 (usage half): a resolved need must be imported from its provider.

    Provider resolution failures come from the graph.
    """
    findings = []
    for service in sorted(set(unit.contract.needs.services)):
        provider = graph.resolved_provider(unit.name, service)
        if provider is None:
            continue
        if not imports_service(extraction.imports, provider, service, services_dir):
            findings.append(
                Finding(
                    kind=FindingKind.UNUSED_DEPENDENCY,
                    unit=unit.name,
                    category="needs.services",
                    symbols=(service,),
                    message=(
                        f"Needed service '{service}' is never imported from "
                        f"{provider}.{services_dir}"
                    ),
                    related_units=(provider,),
                )
            )
    return findings


# =============================================================================
# Parse failures
# =============================================================================


def parse_failure_findings(extraction: UnitExtraction) -> List[Finding]:
    return [
        Finding(
            kind=FindingKind.PARSE_FAILURE,
            unit=extraction.unit,
            category="source",
            symbols=(failure.file,),
            message=f"Could not parse source file: {failure.error}",
            file=failure.file,
        )
        for failure in extraction.failures
    ]


__all__ = [
    "check_declarations",
    "check_routes",
    "check_services",
    "check_models",
    "check_platform",
    "check_needs",
    "imported_platform_services",
    "imports_service",
    "parse_failure_findings",
]
