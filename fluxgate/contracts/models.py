# fluxgate/contracts/models.py
"""
Contract model types.

A unit declares its contract in four sections:

    provides  - public surface other units may use (routes, services)
    internal  - private implementation symbols (services, models)
    imports   - platform services and external libraries consumed
    needs     - services required from other units

All types here are immutable. Sections keep declaration order and any
duplicates, because a duplicate declaration is itself a validation error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from fluxgate.core.exceptions import ContractDeclarationError

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"})


# =============================================================================
# Routes
# =============================================================================


@dataclass(frozen=True, order=True)
class RouteSpec:
    """
    An (HTTP method, path template) pair.

    The method is normalised to upper case, so equality is case-insensitive
    on the method and exact on the path.

    Examples:
        >>> RouteSpec.parse("get /todos/:id") == RouteSpec("GET", "/todos/:id")
        True
        >>> str(RouteSpec("post", "/todos"))
        'POST /todos'
    """

    method: str
    path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())

    @classmethod
    def parse(cls, declaration: str) -> "RouteSpec":
        """Parse a 'METHOD /path' declaration."""
        if not isinstance(declaration, str):
            raise ContractDeclarationError(
                f"Route declaration must be a string, got {declaration!r}"
            )

        parts = declaration.split()
        if len(parts) != 2:
            raise ContractDeclarationError(
                f"Route '{declaration}' must be in format 'METHOD /path'"
            )

        method, path = parts
        if method.upper() not in HTTP_METHODS:
            raise ContractDeclarationError(
                f"Route '{declaration}' uses unsupported HTTP method '{method}'"
            )
        if not path.startswith("/"):
            raise ContractDeclarationError(f"Route '{declaration}' path must start with '/'")

        return cls(method, path)

    def mounted(self, prefix: str) -> "RouteSpec":
        """The same route as seen under a mount prefix."""
        prefix = prefix.rstrip("/")
        return RouteSpec(self.method, f"{prefix}{self.path}" if prefix else self.path)

    def __str__(self) -> str:
        return f"{self.method} {self.path}"


# =============================================================================
# Contract Sections
# =============================================================================


@dataclass(frozen=True)
class Provided:
    routes: Tuple[RouteSpec, ...] = ()
    services: Tuple[str, ...] = ()
    # Models are always private. Recorded only so validation can reject them.
    models: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Internal:
    services: Tuple[str, ...] = ()
    models: Tuple[str, ...] = ()
    # Documentation-only categories (validators, middlewares, configs, helpers)
    extras: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class Imports:
    platform: Tuple[str, ...] = ()
    # Documentation only, never validated
    external: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Needs:
    services: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Contract:
    """
    A unit's complete declared contract.

    Build one with fluxgate.contracts.builder.create_contract().
    """

    provides: Provided = field(default_factory=Provided)
    internal: Internal = field(default_factory=Internal)
    imports: Imports = field(default_factory=Imports)
    needs: Needs = field(default_factory=Needs)

    @property
    def declared_services(self) -> Tuple[str, ...]:
        """Provided and internal services, in declaration order."""
        return self.provides.services + self.internal.services

    def to_dict(self) -> dict:
        return {
            "provides": {
                "routes": [str(r) for r in self.provides.routes],
                "services": list(self.provides.services),
                "models": list(self.provides.models),
            },
            "internal": {
                "services": list(self.internal.services),
                "models": list(self.internal.models),
                **{k: list(v) for k, v in sorted(self.internal.extras.items())},
            },
            "imports": {
                "platform": list(self.imports.platform),
                "external": list(self.imports.external),
            },
            "needs": {"services": list(self.needs.services)},
        }


# =============================================================================
# Feature Configuration
# =============================================================================


@dataclass(frozen=True)
class RouteMount:
    """
    Mounts one route file under a prefix.

    Example:
        >>> RouteMount(file="routes/todo_routes.py", prefix="/api")
    """

    file: str
    prefix: Optional[str] = None


@dataclass(frozen=True)
class FeatureMeta:
    """Descriptive metadata. Every field is optional."""

    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    author: Optional[str] = None
    capabilities: Tuple[str, ...] = ()
    notes: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "capabilities", tuple(self.capabilities))
        object.__setattr__(self, "notes", tuple(self.notes))


@dataclass(frozen=True)
class FeatureConfig:
    """
    What a unit's entry file exports.

    Example (src/features/todo/feature.py):
        from fluxgate import FeatureConfig, RouteMount, create_contract

        feature = FeatureConfig(
            name="todo",
            contract=(
                create_contract()
                .provides("routes", ["GET /todos", "POST /todos"])
                .provides("services", ["todo_service"])
                .internal("models", ["TodoModel"])
                .imports("platform", ["logging", "database"])
                .build()
            ),
            routes=[RouteMount(file="routes/todo_routes.py", prefix="/api")],
        )
    """

    name: str
    contract: Optional[Contract] = None
    routes: Tuple[RouteMount, ...] = ()
    meta: Optional[FeatureMeta] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "routes", tuple(self.routes))


@dataclass(frozen=True)
class Unit:
    """
    A discovered, enabled unit.

    `name` is always the directory name; the declared name is kept on
    `config.name`.
    """

    name: str
    path: Path
    config: FeatureConfig
    entry_file: Path

    @property
    def contract(self) -> Contract:
        return self.config.contract if self.config.contract is not None else Contract()

    @property
    def meta(self) -> Optional[FeatureMeta]:
        return self.config.meta

    def mount_prefix(self, default: str) -> str:
        """Prefix of the unit's first route mount, or the default."""
        for mount in self.config.routes:
            if mount.prefix is not None:
                return mount.prefix.rstrip("/")
        return default

    def prefix_for_file(self, rel_file: str, default: str) -> str:
        """Prefix for a specific route file (path relative to the unit)."""
        for mount in self.config.routes:
            if Path(mount.file).as_posix() == rel_file and mount.prefix is not None:
                return mount.prefix.rstrip("/")
        return self.mount_prefix(default)


__all__ = [
    "HTTP_METHODS",
    "RouteSpec",
    "Provided",
    "Internal",
    "Imports",
    "Needs",
    "Contract",
    "RouteMount",
    "FeatureMeta",
    "FeatureConfig",
    "Unit",
]
