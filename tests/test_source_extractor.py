# tests/test_source_extractor.py
"""
Tests for source cleaning, naming conventions and per-unit extraction.
"""

from __future__ import annotations

import pytest

from fluxgate.config.schema import CategoryConvention, ConventionsConfig
from fluxgate.contracts.models import RouteSpec
from fluxgate.extraction.conventions import Conventions, FileConvention, iter_source_files
from fluxgate.extraction.extractor import SourceExtractor
from fluxgate.extraction.records import ExportKind
from fluxgate.extraction.source import (
    SourceError,
    clean_source,
    find_exports,
    find_imports,
    find_route_calls,
)

from tests.helpers import make_unit, write


def exports(text: str):
    return [name for name, _ in find_exports(clean_source(text))]


class TestCleanSource:
    def test_comments_are_blanked(self):
        clean = clean_source("x = 1  # router.get('/hidden')\n")

        assert "hidden" not in clean.code
        assert "hidden" not in clean.skeleton
        assert len(clean.code) == len("x = 1  # router.get('/hidden')\n")

    def test_docstrings_blanked_in_code_only_strings_in_skeleton(self):
        source = '"""Module doc: router.get("/doc")."""\nPATH = "/live"\n'
        clean = clean_source(source)

        assert "/doc" not in clean.code
        assert '"/live"' in clean.code
        assert "/live" not in clean.skeleton

    def test_line_numbers_survive(self):
        source = '"""\nline two\n"""\n\ndef todo_service():\n    pass\n'
        clean = clean_source(source)

        assert find_exports(clean) == [("todo_service", 5)]

    def test_unbalanced_source_raises(self):
        with pytest.raises(SourceError):
            clean_source("todo_service = (\n    1,\n")


class TestFindExports:
    def test_module_level_bindings(self):
        source = """
def todo_service(): ...
async def async_service(): ...
class TodoModel: ...
count: int = 0
total = 1
"""
        assert exports(source) == ["todo_service", "async_service", "TodoModel", "count", "total"]

    def test_private_and_nested_names_are_ignored(self):
        source = """
_helper = 1

def outer():
    inner_service = 2
    return inner_service

class _Private:
    field_service = 3
"""
        assert exports(source) == ["outer"]

    def test_comparison_is_not_assignment(self):
        assert exports("if x == 1:\n    pass\n") == []

    def test_commented_out_definitions_are_ignored(self):
        source = """
# def old_service(): ...
'''
def older_service(): ...
'''
new_service = 1
"""
        assert exports(source) == ["new_service"]

    def test_dunder_all_limits_exports(self):
        source = """
__all__ = ["todo_service"]

todo_service = 1
helper_service = 2
"""
        assert exports(source) == ["todo_service"]

    def test_first_binding_wins(self):
        assert find_exports(clean_source("a = 1\na = 2\n")) == [("a", 1)]

    def test_tuple_targets_bind_every_name(self):
        source = """
user_service, order_service = make()
(cart_service, _internal) = make_pair()
left, right == pair
"""
        assert find_exports(clean_source(source)) == [
            ("order_service", 2),
            ("user_service", 2),
            ("cart_service", 3),
        ]


class TestFindRouteCalls:
    def test_decorators_and_calls(self):
        source = """
@router.get("/todos")
def list_todos(): ...

@router.POST('/todos')
def create_todo(): ...

todo_routes.delete("/todos/:id", handler)
"""
        calls = find_route_calls(clean_source(source), "route")

        assert [(m, p) for m, p, _ in calls] == [
            ("GET", "/todos"),
            ("POST", "/todos"),
            ("DELETE", "/todos/:id"),
        ]

    def test_receiver_must_contain_keyword(self):
        source = 'cache.get("/todos")\nrequests.post("/todos")\n'

        assert find_route_calls(clean_source(source), "route") == []

    def test_commented_routes_are_ignored(self):
        source = '# @router.get("/old")\n@router.get("/new")\ndef f(): ...\n'

        calls = find_route_calls(clean_source(source), "route")

        assert [(m, p, line) for m, p, line in calls] == [("GET", "/new", 2)]

    def test_routes_inside_string_literals_are_ignored(self):
        source = """HELP = "call router.get('/secret')"
@router.get("/public")
def f(): ...
"""
        calls = find_route_calls(clean_source(source), "route")

        assert calls == [("GET", "/public", 2)]


class TestFindImports:
    def test_import_forms(self):
        source = """
import os, appkit.logging as log
from appkit.database import db
from ..users.services import (
    user_service,
    other_service as alias,
)
"""
        found = find_imports(clean_source(source))

        assert ("os", (), 2) in found
        assert ("appkit.logging", (), 2) in found
        assert ("appkit.database", ("db",), 3) in found
        assert ("..users.services", ("user_service", "other_service"), 4) in found

    def test_imports_inside_strings_are_ignored(self):
        source = 'HELP = """\nfrom appkit.auth import x\n"""\n'

        assert find_imports(clean_source(source)) == []

    def test_nested_imports_are_found(self):
        source = "def f():\n    from appkit.cache import cache\n"

        assert find_imports(clean_source(source)) == [("appkit.cache", ("cache",), 2)]


class TestFileConvention:
    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("services.py", True),
            ("service.py", True),
            ("todo_service.py", True),
            ("todo_services.py", True),
            ("Todo_Service.py", True),
            ("todoservice.py", False),
            ("helpers.py", False),
            ("todo_service.txt", False),
        ],
    )
    def test_matches_file(self, filename, expected):
        convention = FileConvention(ExportKind.SERVICE, "services", "service")

        assert convention.matches_file(filename) is expected

    def test_matches_export(self):
        convention = FileConvention(ExportKind.MODEL, "models", "model")

        assert convention.matches_export("CreateTodoModel")
        assert convention.matches_export("todo_models")
        assert not convention.matches_export("Todo")
        assert not convention.matches_export("_TodoModel")

    def test_only_convention_files_are_listed(self, tmp_path):
        write(tmp_path / "services" / "todo_service.py", "todo_service = 1\n")
        write(tmp_path / "services" / "helpers.py", "helper_service = 1\n")
        write(tmp_path / "todo_service.py", "misplaced_service = 1\n")

        files = Conventions.default().services.files(tmp_path)

        assert [f.name for f in files] == ["todo_service.py"]

    def test_iter_source_files_skips_caches(self, tmp_path):
        write(tmp_path / "a.py", "")
        write(tmp_path / "sub" / "b.py", "")
        write(tmp_path / "__pycache__" / "c.py", "")

        names = [p.relative_to(tmp_path).as_posix() for p in iter_source_files(tmp_path)]

        assert names == ["a.py", "sub/b.py"]


class TestSourceExtractor:
    def test_extracts_each_category(self, tmp_path):
        write(
            tmp_path / "routes" / "todo_routes.py",
            """
            from fastapi import APIRouter
            from appkit.logging import logger

            router = APIRouter()

            @router.get("/todos")
            def list_todos(): ...
            """,
        )
        write(tmp_path / "services" / "todo_service.py", "def format_title(t): ...\ntodo_service = object()\n")
        write(tmp_path / "models" / "todo_model.py", "class TodoModel: ...\nclass CreateTodoModel: ...\n")

        result = SourceExtractor().extract("todo", tmp_path)

        assert result.route_specs == [RouteSpec("GET", "/todos")]
        assert result.routes[0].file == "routes/todo_routes.py"
        assert result.service_names == ["todo_service"]
        assert result.model_names == ["TodoModel", "CreateTodoModel"]
        assert [i.module for i in result.imports] == ["fastapi", "appkit.logging"]
        assert result.failures == []

    def test_route_file_without_route_export_is_ignored(self, tmp_path):
        write(
            tmp_path / "routes" / "todo_routes.py",
            '@router.get("/todos")\ndef list_todos(): ...\n',
        )

        assert SourceExtractor().extract("todo", tmp_path).routes == []

    def test_parse_failure_is_recorded_and_extraction_continues(self, tmp_path):
        write(tmp_path / "services" / "broken_service.py", "broken_service = (\n")
        write(tmp_path / "services" / "todo_service.py", "todo_service = 1\n")

        result = SourceExtractor().extract("todo", tmp_path)

        assert result.service_names == ["todo_service"]
        assert [f.file for f in result.failures] == ["services/broken_service.py"]

    def test_undecodable_file_is_a_parse_failure(self, tmp_path):
        path = tmp_path / "models" / "todo_model.py"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"\xff\xfe\x00bad")

        result = SourceExtractor().extract("todo", tmp_path)

        assert result.models == []
        assert len(result.failures) == 1

    def test_failures_are_reported_once_per_file(self, tmp_path):
        write(tmp_path / "services" / "todo_service.py", "todo_service = (\n")

        result = SourceExtractor().extract("todo", tmp_path)

        assert len(result.failures) == 1

    def test_custom_conventions(self, tmp_path):
        cfg = ConventionsConfig(services=CategoryConvention(directory="logic", keyword="handler"))
        write(tmp_path / "logic" / "todo_handler.py", "todo_handler = 1\ntodo_service = 2\n")

        result = SourceExtractor(Conventions.from_config(cfg)).extract("todo", tmp_path)

        assert result.service_names == ["todo_handler"]

    def test_extract_all_keys_by_unit(self, tmp_path):
        units = []
        for name in ("a", "b", "c"):
            write(tmp_path / name / "services" / f"{name}_service.py", f"{name}_service = 1\n")
            units.append(make_unit(name, path=tmp_path / name))

        results = SourceExtractor(max_workers=3).extract_all(units)

        assert sorted(results) == ["a", "b", "c"]
        assert results["b"].service_names == ["b_service"]

    def test_extract_all_empty(self):
        assert SourceExtractor().extract_all([]) == {}
