# tests/conftest.py
"""
Shared fixtures: throwaway projects built under tmp_path.

Usage:
    def test_something(project):
        project.unit("orders", contract=ORDERS_CONTRACT, files={...})
        result = discover_units(project.root)
"""

from __future__ import annotations

import pytest

from tests.helpers import (
    ORDERS_CONTRACT,
    ORDERS_FILES,
    USERS_CONTRACT,
    USERS_FILES,
    ProjectBuilder,
)


@pytest.fixture
def project(tmp_path) -> ProjectBuilder:
    return ProjectBuilder(tmp_path)


@pytest.fixture
def shop(project) -> ProjectBuilder:
    """Valid two-unit project plus one disabled unit."""
    project.unit(
        "orders",
        ORDERS_CONTRACT,
        routes='RouteMount(file="routes/order_routes.py", prefix="/api")',
        files=ORDERS_FILES,
    )
    project.unit(
        "users",
        USERS_CONTRACT,
        routes='RouteMount(file="routes/user_routes.py", prefix="/api/v1")',
        files=USERS_FILES,
    )
    project.raw_unit("_legacy", entry=None)
    return project
