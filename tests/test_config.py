# tests/test_config.py
"""
Tests for layered config loading: package defaults + project overrides.
"""

from __future__ import annotations

import pytest

from fluxgate.config.loader import deep_merge, load_defaults, load_gate_config, load_yaml
from fluxgate.config.schema import GateConfig
from fluxgate.core.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)


class TestDefaults:
    def test_package_defaults_match_schema_defaults(self):
        assert GateConfig.model_validate(load_defaults()) == GateConfig()

    def test_no_project_config(self, tmp_path):
        config = load_gate_config(tmp_path)

        assert config.units_dir == "src/features"
        assert config.entry_file == "feature.py"
        assert config.disabled_prefix == "_"
        assert config.loader == "module"
        assert config.platform.package == "appkit"
        assert config.conventions.services.keyword == "service"


class TestProjectConfig:
    def test_project_file_overrides_defaults(self, tmp_path):
        (tmp_path / "fluxgate.yaml").write_text(
            "fluxgate:\n"
            "  units_dir: app/modules\n"
            "  platform:\n"
            "    package: core\n"
            "  conventions:\n"
            "    services:\n"
            "      keyword: handler\n"
        )

        config = load_gate_config(tmp_path)

        assert config.units_dir == "app/modules"
        assert config.platform.package == "core"
        assert config.conventions.services.keyword == "handler"
        assert config.conventions.services.directory == "services"

    def test_dotted_platform_package(self, tmp_path):
        (tmp_path / "fluxgate.yaml").write_text("fluxgate:\n  platform:\n    package: myapp.platform\n")

        assert load_gate_config(tmp_path).platform.package == "myapp.platform"

    def test_flat_file_without_root_key(self, tmp_path):
        (tmp_path / "fluxgate.yaml").write_text("default_prefix: /v1/\n")

        assert load_gate_config(tmp_path).default_prefix == "/v1"

    def test_explicit_path_and_overrides(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("fluxgate:\n  loader: module\n  max_workers: 2\n")

        config = load_gate_config(tmp_path, config_path=path, overrides={"loader": "static"})

        assert config.loader == "static"
        assert config.max_workers == 2


class TestErrors:
    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigNotFoundError):
            load_gate_config(tmp_path, config_path=tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "fluxgate.yaml").write_text("fluxgate: [unclosed\n")

        with pytest.raises(ConfigParseError):
            load_gate_config(tmp_path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigParseError):
            load_yaml(path)

    def test_directory_is_rejected(self, tmp_path):
        with pytest.raises(ConfigError):
            load_yaml(tmp_path)

    @pytest.mark.parametrize(
        "body",
        [
            "fluxgate:\n  unknown_key: 1\n",
            "fluxgate:\n  loader: dynamic\n",
            "fluxgate:\n  entry_file: feature.ts\n",
            "fluxgate:\n  default_prefix: api\n",
            "fluxgate:\n  max_workers: 0\n",
            "fluxgate:\n  conventions:\n    models:\n      keyword: not-an-identifier\n",
            "fluxgate:\n  conventions:\n    services:\n      directory: api/services\n",
            "fluxgate:\n  conventions:\n    routes:\n      directory: http.routes\n",
            "fluxgate:\n  platform:\n    package: .appkit\n",
        ],
    )
    def test_schema_violations(self, tmp_path, body):
        (tmp_path / "fluxgate.yaml").write_text(body)

        with pytest.raises(ConfigValidationError) as exc:
            load_gate_config(tmp_path)

        assert exc.value.path == tmp_path / "fluxgate.yaml"


class TestDeepMerge:
    def test_nested_dicts_merge_and_lists_replace(self):
        base = {"a": 1, "b": {"c": 2, "d": 3}, "e": [1, 2]}

        merged = deep_merge(base, {"b": {"c": 10}, "e": [3]})

        assert merged == {"a": 1, "b": {"c": 10, "d": 3}, "e": [3]}
        assert base["b"]["c"] == 2
