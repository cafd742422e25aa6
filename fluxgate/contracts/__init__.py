# fluxgate/contracts/__init__.py
"""Contract model, declaration builder and platform service registry."""

from fluxgate.contracts.builder import ContractBuilder, create_contract
from fluxgate.contracts.models import (
    HTTP_METHODS,
    Contract,
    FeatureConfig,
    FeatureMeta,
    Imports,
    Internal,
    Needs,
    Provided,
    RouteMount,
    RouteSpec,
    Unit,
)
from fluxgate.contracts.platform import (
    PLATFORM_SERVICES,
    is_platform_service,
    platform_module,
    resolve_platform_services,
)

__all__ = [
    "Contract",
    "ContractBuilder",
    "create_contract",
    "Provided",
    "Internal",
    "Imports",
    "Needs",
    "RouteSpec",
    "RouteMount",
    "FeatureMeta",
    "FeatureConfig",
    "Unit",
    "HTTP_METHODS",
    "PLATFORM_SERVICES",
    "is_platform_service",
    "platform_module",
    "resolve_platform_services",
]
