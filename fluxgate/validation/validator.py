# fluxgate/validation/validator.py
"""
Contract Validator - applies the five rules to every unit.

Run order:
    1. Extraction, all units concurrently
    2. Dependency graph (barrier: needs every unit's provides)
    3. Declaration checks and rules 1-5, per unit
    4. Findings sorted into a ValidationReport

Validation is a pure function of the current sources; running it twice on
unchanged files yields identical reports.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from fluxgate.config.schema import GateConfig
from fluxgate.contracts.models import Unit
from fluxgate.extraction.conventions import Conventions
from fluxgate.extraction.extractor import SourceExtractor
from fluxgate.extraction.records import UnitExtraction
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import VALIDATION
from fluxgate.validation import rules
from fluxgate.validation.findings import Finding, UnitResult, ValidationReport, sort_findings
from fluxgate.validation.graph import DependencyGraph, build_dependency_graph

logger = get_logger(__name__)


class ContractValidator:
    """
    Validates units against their declared contracts.

    Usage:
        validator = ContractValidator(config)
        report = validator.validate(discovery.units)
        if not report.valid:
            ...
    """

    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()
        self.conventions = Conventions.from_config(self.config.conventions)
        self.graph: Optional[DependencyGraph] = None

    def validate(
        self,
        units: Iterable[Unit],
        extraction: Optional[Dict[str, UnitExtraction]] = None,
        *,
        run_findings: Sequence[Finding] = (),
        skipped: Sequence[str] = (),
    ) -> ValidationReport:
        """
        Validate every unit.

        Args:
            units: Discovered units
            extraction: Pre-computed extraction results keyed by unit name;
                extracted here when omitted
            run_findings: Findings raised before validation (discovery)
            skipped: Disabled unit names, carried into the report
        """
        units = sorted(units, key=lambda u: u.name)

        if extraction is None:
            extractor = SourceExtractor(self.conventions, max_workers=self.config.max_workers)
            extraction = extractor.extract_all(units)

        self.graph = build_dependency_graph(units, self.config.default_prefix)
        known_models = {
            m for u in units for m in u.contract.internal.models + u.contract.provides.models
        }

        results: List[UnitResult] = []
        for unit in units:
            unit_extraction = extraction.get(unit.name) or UnitExtraction(unit=unit.name)
            findings = self._validate_unit(unit, unit_extraction, self.graph, known_models)
            results.append(UnitResult(unit=unit.name, findings=tuple(sort_findings(findings))))

        report = ValidationReport(
            units=tuple(u.name for u in units),
            unit_results=tuple(results),
            run_findings=tuple(sort_findings(run_findings)),
            skipped=tuple(sorted(skipped)),
        )

        logger.info(
            f"{VALIDATION} {len(report.units)} units validated: "
            f"{len(report.errors)} errors, {len(report.warnings)} warnings"
        )
        return report

    def _validate_unit(
        self,
        unit: Unit,
        extraction: UnitExtraction,
        graph: DependencyGraph,
        known_models: set,
    ) -> List[Finding]:
        findings: List[Finding] = []
        findings += rules.check_declarations(unit, known_models, self.conventions.models.keyword)
        findings += rules.check_routes(unit, extraction)
        findings += rules.check_services(unit, extraction)
        findings += rules.check_models(unit, extraction)
        findings += rules.check_platform(unit, extraction, self.config.platform.package)
        findings += rules.check_needs(unit, extraction, graph, self.conventions.services.directory)
        findings += graph.findings_for(unit.name)
        findings += rules.parse_failure_findings(extraction)

        logger.debug(f"{VALIDATION} {unit.name}: {len(findings)} findings")
        return findings


def validate_units(units: Iterable[Unit], config: Optional[GateConfig] = None) -> ValidationReport:
    """Convenience wrapper: one-shot validation with a fresh validator."""
    return ContractValidator(config).validate(units)


__all__ = ["ContractValidator", "validate_units"]
