"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- load_config() precedence: kwargs > env > yaml > defaults
"""

from __future__ import annotations

from pathlib import Path

import pytest

from declfeat.config.loader import CONFIG_FILENAME, _load_yaml, load_config
from declfeat.config.models import ExpansionConfig
from declfeat.core.errors import ConfigError, ErrorCode


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("logging:\n  level: DEBUG\n")
        assert _load_yaml(yaml_file) == {"logging": {"level": "DEBUG"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        assert _load_yaml(yaml_file) == {}

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("expansion: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_non_mapping_raises_config_error(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.expansion == ExpansionConfig()
        assert config.resolution.inherit_features is True

    def test_reads_project_yaml(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(
            "expansion:\n  compact_default_args: true\n  wrapper_prefix: _py_\n"
        )
        config = load_config(tmp_path)
        assert config.expansion.compact_default_args is True
        assert config.expansion.wrapper_prefix == "_py_"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("resolution:\n  inherit_features: true\n")
        monkeypatch.setenv("DECLFEAT__RESOLUTION__INHERIT_FEATURES", "false")
        config = load_config(tmp_path)
        assert config.resolution.inherit_features is False

    def test_kwargs_override_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECLFEAT__LOGGING__LEVEL", "ERROR")
        config = load_config(tmp_path, logging={"level": "DEBUG"})
        assert config.logging.level == "DEBUG"

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(
            "expansion:\n  overload_suffix_template: plain\n"
        )
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "expansion" in exc_info.value.details["field"]

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("logging:\n  level: INFO\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().logging.level == "INFO"

    def test_explicit_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("expansion:\n  wrapper_prefix: _lua_\n")
        (tmp_path / CONFIG_FILENAME).write_text("expansion:\n  wrapper_prefix: _py_\n")

        config = load_config(tmp_path, config_file=config_file)

        assert config.expansion.wrapper_prefix == "_lua_"

    def test_missing_explicit_config_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path, config_file=tmp_path / "missing.yaml")
        assert exc_info.value.code == ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_unknown_sections_ignored(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("server:\n  port: 80\nlogging:\n  level: ERROR\n")
        config = load_config(tmp_path)
        assert config.logging.level == "ERROR"
