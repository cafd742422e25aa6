# tests/test_loaders.py
"""
Tests for entry file loaders: module import and static reading.
"""

from __future__ import annotations

import sys

import pytest

from fluxgate.contracts.models import FeatureConfig, RouteMount, RouteSpec
from fluxgate.core.exceptions import LoadError
from fluxgate.discovery.loader import ModuleLoader, StaticLoader, get_loader

from tests.helpers import ORDERS_CONTRACT, write

LOADERS = [ModuleLoader, StaticLoader]

GOOD_ENTRY = f"""
from fluxgate import FeatureConfig, FeatureMeta, RouteMount, create_contract

feature = FeatureConfig(
    name="orders",
    contract={ORDERS_CONTRACT},
    routes=[RouteMount(file="routes/order_routes.py", prefix="/api")],
    meta=FeatureMeta(description="Order management", capabilities=["crud"]),
)
"""


@pytest.mark.parametrize("loader_cls", LOADERS)
class TestBothLoaders:
    def test_loads_feature_config(self, tmp_path, loader_cls):
        entry = write(tmp_path / "orders" / "feature.py", GOOD_ENTRY)

        config = loader_cls().load(entry)

        assert isinstance(config, FeatureConfig)
        assert config.name == "orders"
        assert config.contract.provides.routes == (
            RouteSpec("GET", "/orders"),
            RouteSpec("POST", "/orders"),
        )
        assert config.contract.needs.services == ("user_service",)
        assert config.contract.imports.external == ("fastapi",)
        assert config.routes == (RouteMount(file="routes/order_routes.py", prefix="/api"),)
        assert config.meta.description == "Order management"
        assert config.meta.capabilities == ("crud",)

    def test_missing_file(self, tmp_path, loader_cls):
        with pytest.raises(LoadError) as exc:
            loader_cls().load(tmp_path / "nope" / "feature.py")

        assert exc.value.category == "missing_file"
        assert exc.value.suggestions

    def test_syntax_error(self, tmp_path, loader_cls):
        entry = write(tmp_path / "bad" / "feature.py", "feature = FeatureConfig(name='bad'\n")

        with pytest.raises(LoadError) as exc:
            loader_cls().load(entry)

        assert exc.value.category == "syntax_error"
        assert exc.value.path == entry

    def test_missing_export(self, tmp_path, loader_cls):
        entry = write(tmp_path / "empty" / "feature.py", "something_else = 1\n")

        with pytest.raises(LoadError) as exc:
            loader_cls().load(entry)

        assert exc.value.category == "invalid_export"

    def test_declaration_error(self, tmp_path, loader_cls):
        entry = write(
            tmp_path / "odd" / "feature.py",
            """
            from fluxgate import FeatureConfig, create_contract

            feature = FeatureConfig(
                name="odd",
                contract=create_contract().provides("widgets", ["x"]).build(),
            )
            """,
        )

        with pytest.raises(LoadError) as exc:
            loader_cls().load(entry)

        assert exc.value.category == "declaration_error"
        assert "widgets" in str(exc.value)

    def test_custom_attribute(self, tmp_path, loader_cls):
        entry = write(
            tmp_path / "x" / "feature.py",
            """
            from fluxgate import FeatureConfig, create_contract

            config = FeatureConfig(name="x", contract=create_contract().build())
            """,
        )

        assert loader_cls(attribute="config").load(entry).name == "x"

    def test_contract_bound_to_a_name(self, tmp_path, loader_cls):
        entry = write(
            tmp_path / "x" / "feature.py",
            """
            from fluxgate import FeatureConfig, create_contract

            contract = create_contract().provides("services", ["x_service"]).build()

            feature = FeatureConfig(name="x", contract=contract)
            """,
        )

        assert loader_cls().load(entry).contract.provides.services == ("x_service",)


class TestModuleLoader:
    def test_unresolved_module(self, tmp_path):
        entry = write(tmp_path / "x" / "feature.py", "import fluxgate_no_such_module\n")

        with pytest.raises(LoadError) as exc:
            ModuleLoader().load(entry)

        assert exc.value.category == "unresolved_module"

    def test_runtime_error_is_unknown(self, tmp_path):
        entry = write(tmp_path / "x" / "feature.py", "raise RuntimeError('boom')\n")

        with pytest.raises(LoadError) as exc:
            ModuleLoader().load(entry)

        assert exc.value.category == "unknown"
        assert "boom" in str(exc.value)

    def test_module_is_not_left_in_sys_modules(self, tmp_path):
        entry = write(tmp_path / "orders" / "feature.py", GOOD_ENTRY)
        before = set(sys.modules)

        ModuleLoader().load(entry)

        assert not [m for m in set(sys.modules) - before if m.startswith("_fluxgate_unit_")]

    def test_reload_sees_edits(self, tmp_path):
        entry = write(
            tmp_path / "x" / "feature.py",
            "from fluxgate import FeatureConfig\nfeature = FeatureConfig(name='first')\n",
        )
        loader = ModuleLoader()
        assert loader.load(entry).name == "first"

        write(entry, "from fluxgate import FeatureConfig\nfeature = FeatureConfig(name='second')\n")

        assert loader.load(entry).name == "second"


class TestStaticLoader:
    def test_does_not_execute(self, tmp_path):
        entry = write(
            tmp_path / "x" / "feature.py",
            """
            from fluxgate import FeatureConfig, create_contract

            feature = FeatureConfig(name="x", contract=create_contract().build())

            raise RuntimeError("must not run")
            """,
        )

        assert StaticLoader().load(entry).name == "x"

    def test_non_literal_arguments_are_rejected(self, tmp_path):
        entry = write(
            tmp_path / "x" / "feature.py",
            """
            from fluxgate import FeatureConfig, create_contract

            SERVICES = compute()

            feature = FeatureConfig(
                name="x",
                contract=create_contract().provides("services", SERVICES).build(),
            )
            """,
        )

        with pytest.raises(LoadError) as exc:
            StaticLoader().load(entry)

        assert exc.value.category == "invalid_export"

    def test_missing_name_reads_as_empty(self, tmp_path):
        entry = write(
            tmp_path / "x" / "feature.py",
            "feature = FeatureConfig(contract=create_contract().build())\n",
        )

        assert StaticLoader().load(entry).name == ""

    def test_contract_none(self, tmp_path):
        entry = write(tmp_path / "x" / "feature.py", "feature = FeatureConfig(name='x', contract=None)\n")

        assert StaticLoader().load(entry).contract is None


class TestGetLoader:
    def test_kinds(self):
        assert isinstance(get_loader("module"), ModuleLoader)
        assert isinstance(get_loader("static", "cfg"), StaticLoader)
        assert get_loader("static", "cfg").attribute == "cfg"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            get_loader("magic")
