# fluxgate/contracts/platform.py
"""
Registry of platform services.

Platform services are utility modules supplied by the platform package
(default: `appkit`). A unit declares the ones it uses with
`.imports("platform", [...])`; the validator checks the declarations against
this fixed registry and against the unit's actual import statements.
"""

from __future__ import annotations

from typing import Iterable, Optional

PLATFORM_SERVICES: frozenset[str] = frozenset(
    {
        "database",
        "auth",
        "logging",
        "config",
        "security",
        "error",
        "storage",
        "cache",
        "email",
        "event",
        "queue",
        "utils",
    }
)


def is_platform_service(name: str) -> bool:
    """Check if a name is a registered platform service."""
    return name in PLATFORM_SERVICES


def platform_module(service: str, package: str) -> str:
    """
    Import path of a platform service.

    Examples:
        >>> platform_module("logging", "appkit")
        'appkit.logging'
    """
    return f"{package}.{service}"


def resolve_platform_services(module: str, names: Iterable[str], package: str) -> list[str]:
    """
    Map one import statement to the platform services it pulls in.

    Handles both forms:
        from appkit.logging import logger      -> ["logging"]
        import appkit.database                 -> ["database"]
        from appkit import auth, cache         -> ["auth", "cache"]

    The package may itself be dotted (`myapp.platform`); the service is the
    first segment after it. Relative imports never resolve to platform
    services.
    """
    if module.startswith("."):
        return []

    if module == package:
        return sorted({n for n in names if is_platform_service(n)})

    if not module.startswith(package + "."):
        return []

    service = _registered(module[len(package) + 1 :].split(".")[0])
    return [service] if service else []


def _registered(name: str) -> Optional[str]:
    return name if is_platform_service(name) else None


__all__ = [
    "PLATFORM_SERVICES",
    "is_platform_service",
    "platform_module",
    "resolve_platform_services",
]
