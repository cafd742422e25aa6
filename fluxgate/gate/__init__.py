"""Enforcement Gate: block startup on contract errors, hand routes to the runtime."""

from fluxgate.gate.enforcement import (
    GateResult,
    RouteBinding,
    RouteRegistrar,
    enforce,
    hand_off,
    route_bindings,
)
from fluxgate.gate.startup import PipelineRun, run_startup_checks, run_validation

__all__ = [
    "RouteBinding",
    "GateResult",
    "RouteRegistrar",
    "route_bindings",
    "enforce",
    "hand_off",
    "PipelineRun",
    "run_validation",
    "run_startup_checks",
]
