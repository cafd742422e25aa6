# fluxgate/gate/startup.py
"""
Startup checks: the full pipeline in one call.

    config -> discovery -> extraction -> graph + rules -> gate -> registrar

Call it from the application's startup code before serving requests:

    from fluxgate.gate.startup import run_startup_checks

    result = run_startup_checks(project_root, registrar=app_registrar)

Any error raises ContractEnforcementError, so the process never starts with
an invalid contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from fluxgate.config.loader import load_gate_config
from fluxgate.config.schema import GateConfig
from fluxgate.discovery.discovery import DiscoveryResult, discover_units
from fluxgate.discovery.loader import Loader
from fluxgate.extraction.conventions import Conventions
from fluxgate.extraction.extractor import SourceExtractor
from fluxgate.extraction.records import UnitExtraction
from fluxgate.gate.enforcement import GateResult, RouteRegistrar, enforce, hand_off
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import GATE
from fluxgate.validation.findings import ValidationReport
from fluxgate.validation.graph import DependencyGraph
from fluxgate.validation.validator import ContractValidator

logger = get_logger(__name__)


@dataclass
class PipelineRun:
    """Everything one validation run produced, gate not yet applied."""

    config: GateConfig
    discovery: DiscoveryResult
    extraction: Dict[str, UnitExtraction]
    report: ValidationReport
    graph: DependencyGraph


def run_validation(
    project_root: Union[str, Path, None] = None,
    config: Optional[GateConfig] = None,
    loader: Optional[Loader] = None,
) -> PipelineRun:
    """Discover and validate, without enforcing. Used by the CLI and the gate."""
    config = config or load_gate_config(project_root)
    discovery = discover_units(project_root, config, loader)

    extractor = SourceExtractor(
        Conventions.from_config(config.conventions), max_workers=config.max_workers
    )
    extraction = extractor.extract_all(discovery.units)

    validator = ContractValidator(config)
    report = validator.validate(
        discovery.units,
        extraction,
        run_findings=discovery.findings,
        skipped=discovery.skipped,
    )
    return PipelineRun(
        config=config,
        discovery=discovery,
        extraction=extraction,
        report=report,
        graph=validator.graph,
    )


def run_startup_checks(
    project_root: Union[str, Path, None] = None,
    registrar: Optional[RouteRegistrar] = None,
    config: Optional[GateConfig] = None,
    loader: Optional[Loader] = None,
) -> GateResult:
    """
    Validate the project and block startup on any error.

    Raises:
        UnitsRootNotFoundError: units directory missing
        ConfigError: invalid configuration
        ContractEnforcementError: any validation error
    """
    run = run_validation(project_root, config, loader)
    result = enforce(run.report, run.discovery.units, run.extraction, run.config)

    if registrar is not None:
        hand_off(result, registrar)

    logger.info(f"{GATE} Startup checks passed for {len(result.units)} units")
    return result


__all__ = ["PipelineRun", "run_validation", "run_startup_checks"]
