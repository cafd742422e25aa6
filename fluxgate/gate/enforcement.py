# fluxgate/gate/enforcement.py
"""
Enforcement Gate.

Turns a ValidationReport into either a GateResult (startup may proceed) or a
single ContractEnforcementError carrying every error of the run. There are
no retries: validation is a pure function of the sources, so the caller
re-runs after editing them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from fluxgate.config.schema import GateConfig
from fluxgate.contracts.models import RouteSpec, Unit
from fluxgate.core.exceptions import ContractEnforcementError
from fluxgate.extraction.records import UnitExtraction
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import GATE
from fluxgate.validation.findings import Finding, ValidationReport

logger = get_logger(__name__)


@dataclass(frozen=True)
class RouteBinding:
    """
    What the web runtime needs to bind one route file of one unit.

    Example:
        RouteBinding(unit="todo", prefix="/api", file="routes/todo_routes.py",
                     routes=(RouteSpec("GET", "/todos"),))
    """

    unit: str
    prefix: str
    file: str
    routes: Tuple[RouteSpec, ...]

    @property
    def mounted_routes(self) -> List[RouteSpec]:
        return [r.mounted(self.prefix) for r in self.routes]


@dataclass(frozen=True)
class GateResult:
    units: Tuple[Unit, ...]
    bindings: Tuple[RouteBinding, ...]
    warnings: Tuple[Finding, ...] = ()

    @property
    def names(self) -> List[str]:
        return [u.name for u in self.units]


class RouteRegistrar(Protocol):
    """The external web runtime: binds validated routes under their prefix."""

    def register(self, binding: RouteBinding) -> None:
        ...


def route_bindings(
    units: Sequence[Unit],
    extraction: Dict[str, UnitExtraction],
    default_prefix: str = "/api",
) -> List[RouteBinding]:
    """
    One binding per (unit, route file), routes sorted.

    The prefix comes from the RouteMount naming the file, else the unit's
    first mount prefix, else the default.
    """
    bindings: List[RouteBinding] = []
    for unit in sorted(units, key=lambda u: u.name):
        records = extraction.get(unit.name)
        if records is None:
            continue

        by_file: Dict[str, set] = {}
        for record in records.routes:
            if record.route is not None:
                by_file.setdefault(record.file, set()).add(record.route)

        for file, routes in sorted(by_file.items()):
            bindings.append(
                RouteBinding(
                    unit=unit.name,
                    prefix=unit.prefix_for_file(file, default_prefix),
                    file=file,
                    routes=tuple(sorted(routes)),
                )
            )
    return bindings


def enforce(
    report: ValidationReport,
    units: Sequence[Unit] = (),
    extraction: Optional[Dict[str, UnitExtraction]] = None,
    config: Optional[GateConfig] = None,
) -> GateResult:
    """
    Block on any error; otherwise return what may be handed to the runtime.

    Raises:
        ContractEnforcementError: with every error, sorted by unit then category
    """
    errors = report.errors
    warnings = report.warnings

    for warning in warnings:
        logger.warning(f"{GATE} {warning.describe()}")

    if errors:
        logger.error(
            f"{GATE} Startup blocked: {len(errors)} contract error(s) "
            f"in {len({e.unit for e in errors})} unit(s)"
        )
        raise ContractEnforcementError(errors, warnings)

    config = config or GateConfig()
    validated = tuple(sorted(units, key=lambda u: u.name))
    bindings = route_bindings(validated, extraction or {}, config.default_prefix)

    logger.info(f"{GATE} All contracts valid: {len(validated)} units, {len(bindings)} route files")
    return GateResult(units=validated, bindings=tuple(bindings), warnings=tuple(warnings))


def hand_off(result: GateResult, registrar: RouteRegistrar) -> None:
    """Pass every binding to the registrar, in order."""
    for binding in result.bindings:
        logger.debug(f"{GATE} Registering {binding.unit} {binding.file} under {binding.prefix}")
        registrar.register(binding)


__all__ = [
    "RouteBinding",
    "GateResult",
    "RouteRegistrar",
    "route_bindings",
    "enforce",
    "hand_off",
]
