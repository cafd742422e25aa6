# fluxgate/config/__init__.py
from fluxgate.config.loader import deep_merge, load_defaults, load_gate_config, load_yaml
from fluxgate.config.schema import (
    CategoryConvention,
    ConventionsConfig,
    GateConfig,
    PlatformConfig,
)

__all__ = [
    "GateConfig",
    "PlatformConfig",
    "ConventionsConfig",
    "CategoryConvention",
    "load_gate_config",
    "load_defaults",
    "load_yaml",
    "deep_merge",
]
