"""Feature Discovery: units on disk, loaded through a pluggable Loader."""

from fluxgate.discovery.discovery import DiscoveryResult, discover_units
from fluxgate.discovery.loader import Loader, ModuleLoader, StaticLoader, get_loader

__all__ = [
    "DiscoveryResult",
    "discover_units",
    "Loader",
    "ModuleLoader",
    "StaticLoader",
    "get_loader",
]
