# tests/test_contract_builder.py
"""
Tests for the contract model and the fluent declaration builder.
"""

from __future__ import annotations

import pytest

from fluxgate.contracts.builder import create_contract
from fluxgate.contracts.models import Contract, FeatureConfig, FeatureMeta, RouteMount, RouteSpec
from fluxgate.contracts.platform import (
    PLATFORM_SERVICES,
    is_platform_service,
    platform_module,
    resolve_platform_services,
)
from fluxgate.core.exceptions import ContractDeclarationError, StructuralError

from tests.helpers import make_unit


class TestRouteSpec:
    def test_parse(self):
        spec = RouteSpec.parse("GET /todos/:id")

        assert spec.method == "GET"
        assert spec.path == "/todos/:id"
        assert str(spec) == "GET /todos/:id"

    def test_method_is_case_insensitive(self):
        assert RouteSpec.parse("get /todos") == RouteSpec("GET", "/todos")
        assert RouteSpec("Post", "/x") == RouteSpec("POST", "/x")

    def test_path_is_exact(self):
        assert RouteSpec("GET", "/todos") != RouteSpec("GET", "/todos/")
        assert RouteSpec("GET", "/Todos") != RouteSpec("GET", "/todos")

    @pytest.mark.parametrize(
        "declaration",
        ["GET", "GET /a /b", "FETCH /todos", "GET todos", ""],
    )
    def test_malformed_declarations_are_rejected(self, declaration):
        with pytest.raises(ContractDeclarationError):
            RouteSpec.parse(declaration)

    def test_mounted(self):
        assert RouteSpec("GET", "/todos").mounted("/api/") == RouteSpec("GET", "/api/todos")
        assert RouteSpec("GET", "/todos").mounted("") == RouteSpec("GET", "/todos")


class TestContractBuilder:
    def test_full_declaration(self):
        contract = (
            create_contract()
            .provides("routes", ["GET /todos", "POST /todos"])
            .provides("services", ["todo_service"])
            .internal("services", ["audit_service"])
            .internal("models", ["TodoModel", "CreateTodoModel"])
            .internal("helpers", ["format_due_date"])
            .imports("platform", ["logging", "database"])
            .imports("external", ["fastapi"])
            .needs("services", ["user_service"])
            .build()
        )

        assert contract.provides.routes == (RouteSpec("GET", "/todos"), RouteSpec("POST", "/todos"))
        assert contract.provides.services == ("todo_service",)
        assert contract.internal.services == ("audit_service",)
        assert contract.internal.models == ("TodoModel", "CreateTodoModel")
        assert contract.internal.extras["helpers"] == ("format_due_date",)
        assert contract.imports.platform == ("logging", "database")
        assert contract.imports.external == ("fastapi",)
        assert contract.needs.services == ("user_service",)
        assert contract.declared_services == ("todo_service", "audit_service")

    def test_empty_contract(self):
        contract = create_contract().build()

        assert contract == Contract()
        assert contract.provides.routes == ()

    def test_duplicates_are_kept_for_validation(self):
        contract = create_contract().provides("services", ["a_service", "a_service"]).build()

        assert contract.provides.services == ("a_service", "a_service")

    def test_provided_models_are_recorded(self):
        contract = create_contract().provides("models", ["TodoModel"]).build()

        assert contract.provides.models == ("TodoModel",)

    @pytest.mark.parametrize(
        "verb, category",
        [
            ("provides", "widgets"),
            ("internal", "routes"),
            ("imports", "internal"),
            ("needs", "models"),
        ],
    )
    def test_unknown_category_raises(self, verb, category):
        builder = create_contract()

        with pytest.raises(ContractDeclarationError) as exc:
            getattr(builder, verb)(category, ["x"])

        assert category in str(exc.value)

    def test_declaration_errors_are_structural(self):
        with pytest.raises(StructuralError):
            create_contract().provides("routes", ["nonsense"])

    def test_bare_string_is_rejected(self):
        with pytest.raises(ContractDeclarationError):
            create_contract().provides("services", "todo_service")

    def test_empty_names_are_rejected(self):
        with pytest.raises(ContractDeclarationError):
            create_contract().internal("models", ["TodoModel", "  "])

    def test_build_snapshots(self):
        builder = create_contract().provides("services", ["a_service"])
        first = builder.build()

        builder.provides("services", ["b_service"])
        second = builder.build()

        assert first.provides.services == ("a_service",)
        assert second.provides.services == ("a_service", "b_service")

    def test_to_dict(self):
        contract = (
            create_contract()
            .provides("routes", ["get /todos"])
            .internal("validators", ["todo_validator"])
            .build()
        )

        data = contract.to_dict()

        assert data["provides"]["routes"] == ["GET /todos"]
        assert data["internal"]["validators"] == ["todo_validator"]
        assert data["needs"] == {"services": []}


class TestFeatureConfig:
    def test_routes_coerced_to_tuple(self):
        config = FeatureConfig(name="todo", routes=[RouteMount(file="routes/todo_routes.py")])

        assert isinstance(config.routes, tuple)

    def test_meta_lists_coerced(self):
        meta = FeatureMeta(description="Todos", capabilities=["crud"])

        assert meta.capabilities == ("crud",)

    def test_unit_without_contract_has_empty_contract(self):
        unit = make_unit("todo")

        assert unit.contract == Contract()

    def test_mount_prefix(self):
        unit = make_unit(
            "todo",
            routes=[
                {"file": "routes/todo_routes.py", "prefix": "/api/"},
                {"file": "routes/admin_routes.py", "prefix": "/admin"},
            ],
        )

        assert unit.mount_prefix("/default") == "/api"
        assert unit.prefix_for_file("routes/admin_routes.py", "/default") == "/admin"
        assert unit.prefix_for_file("routes/other_routes.py", "/default") == "/api"
        assert make_unit("bare").mount_prefix("/default") == "/default"


class TestPlatformRegistry:
    def test_registry_contents(self):
        assert len(PLATFORM_SERVICES) == 12
        assert is_platform_service("logging")
        assert not is_platform_service("payments")

    def test_platform_module(self):
        assert platform_module("cache", "appkit") == "appkit.cache"

    @pytest.mark.parametrize(
        "module, names, expected",
        [
            ("appkit.logging", ("logger",), ["logging"]),
            ("appkit.database.session", (), ["database"]),
            ("appkit", ("auth", "cache", "not_a_service"), ["auth", "cache"]),
            ("appkit.payments", (), []),
            ("fastapi", ("APIRouter",), []),
            (".appkit.logging", (), []),
            ("appkitx.logging", (), []),
        ],
    )
    def test_resolve(self, module, names, expected):
        assert resolve_platform_services(module, names, "appkit") == expected

    def test_resolve_custom_package(self):
        assert resolve_platform_services("core.auth", (), "core") == ["auth"]
        assert resolve_platform_services("appkit.auth", (), "core") == []

    @pytest.mark.parametrize(
        "module, names, expected",
        [
            ("myapp.platform.logging", ("logger",), ["logging"]),
            ("myapp.platform", ("auth", "cache"), ["auth", "cache"]),
            ("myapp.logging", (), []),
            ("myapp", ("platform",), []),
            ("myapp.platformx.logging", (), []),
        ],
    )
    def test_resolve_dotted_package(self, module, names, expected):
        assert resolve_platform_services(module, names, "myapp.platform") == expected
