# fluxgate/__init__.py
"""
fluxgate - contract validation and startup enforcement for feature units.

Entry files declare contracts:

    from fluxgate import FeatureConfig, RouteMount, create_contract

    feature = FeatureConfig(
        name="todo",
        contract=(
            create_contract()
            .provides("routes", ["GET /todos"])
            .provides("services", ["todo_service"])
            .build()
        ),
        routes=[RouteMount(file="routes/todo_routes.py", prefix="/api")],
    )

Applications gate startup on them:

    from fluxgate import run_startup_checks

    result = run_startup_checks(project_root, registrar=my_registrar)
"""

from fluxgate.contracts.builder import ContractBuilder, create_contract
from fluxgate.contracts.models import (
    Contract,
    FeatureConfig,
    FeatureMeta,
    RouteMount,
    RouteSpec,
    Unit,
)
from fluxgate.core.exceptions import (
    ConfigError,
    ContractDeclarationError,
    ContractEnforcementError,
    FluxgateError,
    LoadError,
    StructuralError,
    UnitsRootNotFoundError,
)
from fluxgate.gate.enforcement import GateResult, RouteBinding, RouteRegistrar, enforce
from fluxgate.gate.startup import run_startup_checks, run_validation
from fluxgate.validation.findings import Finding, FindingKind, Severity, ValidationReport
from fluxgate.validation.validator import ContractValidator

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Declaring
    "create_contract",
    "ContractBuilder",
    "Contract",
    "FeatureConfig",
    "FeatureMeta",
    "RouteMount",
    "RouteSpec",
    "Unit",
    # Validating
    "ContractValidator",
    "ValidationReport",
    "Finding",
    "FindingKind",
    "Severity",
    # Gating
    "enforce",
    "run_validation",
    "run_startup_checks",
    "GateResult",
    "RouteBinding",
    "RouteRegistrar",
    # Errors
    "FluxgateError",
    "ConfigError",
    "StructuralError",
    "LoadError",
    "ContractDeclarationError",
    "UnitsRootNotFoundError",
    "ContractEnforcementError",
]
