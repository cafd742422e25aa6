# tests/helpers.py
"""Helpers for building throwaway projects and in-memory units."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Dict, Optional

from fluxgate.contracts.builder import create_contract
from fluxgate.contracts.models import Contract, FeatureConfig, RouteMount, Unit

ENTRY_TEMPLATE = """\
from fluxgate import FeatureConfig, FeatureMeta, RouteMount, create_contract

feature = FeatureConfig(
    name={name!r},
    contract={contract},
    routes=[{routes}],
)
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
    return path


class ProjectBuilder:
    """Writes units under <root>/src/features."""

    def __init__(self, root: Path):
        self.root = root
        self.units_root = root / "src" / "features"
        self.units_root.mkdir(parents=True, exist_ok=True)

    def unit(
        self,
        name: str,
        contract: str = "create_contract().build()",
        *,
        declared_name: Optional[str] = None,
        routes: str = "",
        files: Optional[Dict[str, str]] = None,
    ) -> Path:
        directory = self.units_root / name
        directory.mkdir(parents=True, exist_ok=True)
        write(
            directory / "feature.py",
            ENTRY_TEMPLATE.format(
                name=name if declared_name is None else declared_name,
                contract=contract,
                routes=routes,
            ),
        )
        for rel, text in (files or {}).items():
            write(directory / rel, text)
        return directory

    def raw_unit(self, name: str, entry: Optional[str], files: Optional[Dict[str, str]] = None) -> Path:
        """A unit with a hand-written entry file (or none)."""
        directory = self.units_root / name
        directory.mkdir(parents=True, exist_ok=True)
        if entry is not None:
            write(directory / "feature.py", entry)
        for rel, text in (files or {}).items():
            write(directory / rel, text)
        return directory


def make_unit(
    name: str,
    contract: Optional[Contract] = None,
    routes=(),
    path: Optional[Path] = None,
) -> Unit:
    """An in-memory Unit, for graph and rule tests that need no files."""
    path = path or Path("/nonexistent") / name
    config = FeatureConfig(
        name=name,
        contract=contract if contract is not None else create_contract().build(),
        routes=[RouteMount(**r) if isinstance(r, dict) else r for r in routes],
    )
    return Unit(name=name, path=path, config=config, entry_file=path / "feature.py")


# =============================================================================
# A small valid project: orders needs user_service from users
# =============================================================================

ORDERS_CONTRACT = """(
        create_contract()
        .provides("routes", ["GET /orders", "POST /orders"])
        .provides("services", ["order_service"])
        .internal("models", ["OrderModel"])
        .imports("platform", ["logging"])
        .imports("external", ["fastapi"])
        .needs("services", ["user_service"])
        .build()
    )"""

ORDERS_FILES = {
    "routes/order_routes.py": '''
        """Order HTTP routes."""
        from fastapi import APIRouter

        from appkit.logging import logger

        from ..services.order_service import order_service

        router = APIRouter()


        @router.get("/orders")
        def list_orders():
            logger.info("listing orders")
            return order_service.list()


        @router.post("/orders")
        def create_order(payload: dict):
            return order_service.create(payload)
        ''',
    "services/order_service.py": """
        from ...users.services.user_service import user_service
        from ..models.order_model import OrderModel


        class _OrderService:
            def list(self):
                return []

            def create(self, payload):
                user_service.get(payload["user_id"])
                return OrderModel(id=1, user_id=payload["user_id"])


        order_service = _OrderService()
        """,
    "models/order_model.py": """
        from dataclasses import dataclass


        @dataclass
        class OrderModel:
            id: int
            user_id: int
        """,
}

USERS_CONTRACT = """(
        create_contract()
        .provides("routes", ["GET /users/:id"])
        .provides("services", ["user_service"])
        .internal("models", ["UserModel"])
        .imports("platform", ["database"])
        .build()
    )"""

USERS_FILES = {
    "routes/user_routes.py": """
        from fastapi import APIRouter

        from ..services.user_service import user_service

        user_router = APIRouter()


        @user_router.get("/users/:id")
        def get_user(id: int):
            return user_service.get(id)
        """,
    "services/user_service.py": """
        from appkit.database import db

        from ..models.user_model import UserModel


        def _row_to_user(row):
            return UserModel(**row)


        class _UserService:
            def get(self, user_id):
                return _row_to_user(db.fetch_one("users", user_id))


        user_service = _UserService()
        """,
    "models/user_model.py": """
        from dataclasses import dataclass


        @dataclass
        class UserModel:
            id: int
            email: str
        """,
}


