# fluxgate/discovery/loader.py
"""
Entry file loaders.

A loader turns a unit's entry file into a FeatureConfig, or raises LoadError
with a category and suggestions so discovery can report something more
useful than a traceback.

    ModuleLoader  imports the entry file (default)
    StaticLoader  reads the entry file without executing it

Entry file shape:
    from fluxgate import FeatureConfig, RouteMount, create_contract

    feature = FeatureConfig(
        name="todo",
        contract=create_contract().provides("services", ["todo_service"]).build(),
        routes=[RouteMount(file="routes/todo_routes.py", prefix="/api")],
    )
"""

from __future__ import annotations

import ast
import hashlib
import importlib.util
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from fluxgate.contracts.builder import ContractBuilder, create_contract
from fluxgate.contracts.models import Contract, FeatureConfig, FeatureMeta, RouteMount
from fluxgate.core.exceptions import ContractDeclarationError, LoadError
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import DISCOVERY

logger = get_logger(__name__)

SUGGESTIONS: Dict[str, Tuple[str, ...]] = {
    "syntax_error": (
        "There is a syntax error in the entry file",
        "Run `python -m py_compile <entry file>` to locate it",
    ),
    "missing_file": (
        "Check that the entry file exists and is readable",
        "A file referenced from the entry file may be missing",
    ),
    "unresolved_module": (
        "A module imported by the entry file could not be found",
        "Check import paths and that dependencies are installed",
    ),
    "invalid_export": (
        "The entry file must define a module-level FeatureConfig",
        "Example: feature = FeatureConfig(name='todo', contract=...)",
    ),
    "declaration_error": (
        "Fix the contract declaration: check category names and item lists",
    ),
    "unknown": ("Run with --verbose to see the full error",),
}


def load_error(message: str, path: Path, category: str) -> LoadError:
    return LoadError(message, path=path, category=category, suggestions=SUGGESTIONS[category])


class Loader(Protocol):
    """Loads a unit's FeatureConfig from its entry file."""

    def load(self, path: Path) -> FeatureConfig:
        ...


# =============================================================================
# Module loader
# =============================================================================


class ModuleLoader:
    """
    Imports the entry file under a private module name.

    The module is removed from sys.modules after loading, so a second run in
    the same process sees edited sources.
    """

    def __init__(self, attribute: str = "feature"):
        self.attribute = attribute

    def load(self, path: Path) -> FeatureConfig:
        path = Path(path)
        if not path.is_file():
            raise load_error(f"Entry file not found: {path}", path, "missing_file")

        digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
        module_name = f"_fluxgate_unit_{path.parent.name}_{digest}"

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise load_error(f"Cannot create an import spec for {path}", path, "unknown")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except SyntaxError as e:
            raise load_error(f"SyntaxError: {e}", path, "syntax_error") from e
        except ModuleNotFoundError as e:
            raise load_error(f"ModuleNotFoundError: {e}", path, "unresolved_module") from e
        except ImportError as e:
            raise load_error(f"ImportError: {e}", path, "unresolved_module") from e
        except FileNotFoundError as e:
            raise load_error(f"FileNotFoundError: {e}", path, "missing_file") from e
        except ContractDeclarationError as e:
            raise load_error(str(e), path, "declaration_error") from e
        except Exception as e:
            raise load_error(f"{type(e).__name__}: {e}", path, "unknown") from e
        finally:
            sys.modules.pop(module_name, None)

        value = getattr(module, self.attribute, None)
        if not isinstance(value, FeatureConfig):
            found = "nothing" if value is None else type(value).__name__
            raise load_error(
                f"Entry file must define `{self.attribute} = FeatureConfig(...)`, found {found}",
                path,
                "invalid_export",
            )

        logger.debug(f"{DISCOVERY} Loaded {path}")
        return value


# =============================================================================
# Static loader
# =============================================================================


class _NotStatic(Exception):
    """An expression that can't be evaluated without running code."""

    def __init__(self, node: ast.AST, what: str):
        self.line = getattr(node, "lineno", 0)
        super().__init__(f"{what} is not a literal (line {self.line})")


def _call_name(node: ast.AST) -> Optional[str]:
    if isinstance(node, ast.Call):
        func = node.func
        if isinstance(func, ast.Name):
            return func.id
        if isinstance(func, ast.Attribute):
            return func.attr
    return None


def _literal(node: ast.AST, what: str) -> Any:
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError) as e:
        raise _NotStatic(node, what) from e


class StaticLoader:
    """
    Reads the entry file without executing it.

    Understands the documented entry file shape: a module-level
    `FeatureConfig(...)` call whose arguments are literals, a
    `create_contract()...build()` chain (inline or bound to a module-level
    name), `RouteMount(...)` lists and `FeatureMeta(...)`. Anything else is
    an invalid_export.
    """

    def __init__(self, attribute: str = "feature"):
        self.attribute = attribute

    def load(self, path: Path) -> FeatureConfig:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise load_error(f"Entry file not found: {path}", path, "missing_file") from e
        except (OSError, UnicodeDecodeError) as e:
            raise load_error(f"{type(e).__name__}: {e}", path, "unknown") from e

        try:
            tree = ast.parse(text, filename=str(path))
        except SyntaxError as e:
            raise load_error(f"SyntaxError: {e}", path, "syntax_error") from e

        bindings = self._module_bindings(tree)
        node = bindings.get(self.attribute)
        if node is None or _call_name(node) != "FeatureConfig":
            raise load_error(
                f"Entry file must define `{self.attribute} = FeatureConfig(...)`",
                path,
                "invalid_export",
            )

        try:
            config = self._feature_config(node, bindings)
        except _NotStatic as e:
            raise load_error(f"Cannot read entry file statically: {e}", path, "invalid_export") from e
        except ContractDeclarationError as e:
            raise load_error(str(e), path, "declaration_error") from e

        logger.debug(f"{DISCOVERY} Statically read {path}")
        return config

    @staticmethod
    def _module_bindings(tree: ast.Module) -> Dict[str, ast.AST]:
        bindings: Dict[str, ast.AST] = {}
        for stmt in tree.body:
            if isinstance(stmt, ast.Assign):
                for target in stmt.targets:
                    if isinstance(target, ast.Name):
                        bindings[target.id] = stmt.value
            elif isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
                if stmt.value is not None:
                    bindings[stmt.target.id] = stmt.value
        return bindings

    def _feature_config(self, node: ast.Call, bindings: Dict[str, ast.AST]) -> FeatureConfig:
        args = self._arguments(node, ("name", "contract", "routes", "meta"))

        name = _literal(args["name"], "FeatureConfig name") if "name" in args else ""

        contract = None
        if "contract" in args:
            contract = self._contract(self._deref(args["contract"], bindings))

        routes: List[RouteMount] = []
        if "routes" in args:
            routes_node = self._deref(args["routes"], bindings)
            if not isinstance(routes_node, (ast.List, ast.Tuple)):
                raise _NotStatic(routes_node, "FeatureConfig routes")
            routes = [self._route_mount(el) for el in routes_node.elts]

        meta = None
        if "meta" in args:
            meta = self._meta(self._deref(args["meta"], bindings))

        return FeatureConfig(name=name, contract=contract, routes=routes, meta=meta)

    @staticmethod
    def _deref(node: ast.AST, bindings: Dict[str, ast.AST]) -> ast.AST:
        seen = set()
        while isinstance(node, ast.Name) and node.id in bindings and node.id not in seen:
            seen.add(node.id)
            node = bindings[node.id]
        return node

    @staticmethod
    def _arguments(node: ast.Call, positional: Tuple[str, ...]) -> Dict[str, ast.AST]:
        args: Dict[str, ast.AST] = {}
        for key, value in zip(positional, node.args):
            args[key] = value
        for kw in node.keywords:
            if kw.arg is None:
                raise _NotStatic(kw.value, "**kwargs")
            args[kw.arg] = kw.value
        return args

    def _contract(self, node: ast.AST) -> Optional[Contract]:
        if isinstance(node, ast.Constant) and node.value is None:
            return None

        # Unwind create_contract().a(...).b(...).build() into [a, b, build]
        calls: List[Tuple[str, ast.Call]] = []
        current = node
        while isinstance(current, ast.Call) and isinstance(current.func, ast.Attribute):
            calls.append((current.func.attr, current))
            current = current.func.value

        if _call_name(current) != "create_contract" or not calls or calls[0][0] != "build":
            raise _NotStatic(node, "contract (expected create_contract()...build())")

        builder: ContractBuilder = create_contract()
        for method, call in reversed(calls[1:]):
            if method not in ("provides", "internal", "imports", "needs"):
                raise _NotStatic(call, f"contract method .{method}()")
            values = [_literal(a, f".{method}() argument") for a in call.args]
            values += [_literal(kw.value, f".{method}() argument") for kw in call.keywords]
            if len(values) != 2:
                raise ContractDeclarationError(
                    f".{method}() expects (category, items), got {len(values)} argument(s)"
                )
            getattr(builder, method)(*values)
        return builder.build()

    def _route_mount(self, node: ast.AST) -> RouteMount:
        if _call_name(node) != "RouteMount":
            raise _NotStatic(node, "routes entry (expected RouteMount(...))")
        args = self._arguments(node, ("file", "prefix"))
        if "file" not in args:
            raise _NotStatic(node, "RouteMount file")
        prefix = _literal(args["prefix"], "RouteMount prefix") if "prefix" in args else None
        return RouteMount(file=_literal(args["file"], "RouteMount file"), prefix=prefix)

    def _meta(self, node: ast.AST) -> Optional[FeatureMeta]:
        if isinstance(node, ast.Constant) and node.value is None:
            return None
        if _call_name(node) != "FeatureMeta":
            raise _NotStatic(node, "meta (expected FeatureMeta(...))")
        fields = ("name", "description", "version", "author", "capabilities", "notes")
        args = self._arguments(node, fields)
        unknown = set(args) - set(fields)
        if unknown:
            raise _NotStatic(node, f"FeatureMeta argument(s) {sorted(unknown)}")
        return FeatureMeta(**{k: _literal(v, f"FeatureMeta {k}") for k, v in args.items()})


def get_loader(kind: str, attribute: str = "feature") -> Loader:
    """Loader for a config value: "module" or "static"."""
    if kind == "static":
        return StaticLoader(attribute)
    if kind == "module":
        return ModuleLoader(attribute)
    raise ValueError(f"Unknown loader: {kind!r}")


__all__ = ["Loader", "ModuleLoader", "StaticLoader", "SUGGESTIONS", "get_loader", "load_error"]
