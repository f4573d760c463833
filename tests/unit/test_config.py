"""
Unit tests for the configuration system.
"""

import json

import pytest
import yaml

from loom.utils.config import LoomConfig, get_config, load_config, set_config
from loom.utils.exceptions import ConfigurationError


class TestDefaults:
    """Test the default configuration."""

    def test_defaults(self, config):
        assert config.config_file is None
        assert config.template.default_language == "Python"
        assert config.template.namespace_name == "loom.inline_scripting"
        assert config.template.class_name == "DocumentScripts"
        assert config.template.trim_control_lines is True
        assert config.compilation.include_source_references is True
        assert config.compilation.additional_modules == []
        assert config.output.trim is False
        assert config.logging.level == "WARNING"
        assert not config.is_debug_enabled()

    def test_missing_file_gives_defaults(self, tmp_path):
        config = LoomConfig(str(tmp_path / "absent.yaml"))
        assert config.template.class_name == "DocumentScripts"


class TestLoading:
    """Test loading configuration files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "loom.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "template": {"class_name": "Page", "trim_control_lines": False},
                    "compilation": {"additional_modules": ["json"], "include_source_references": False},
                    "output": {"trim": True},
                }
            ),
            encoding="utf-8",
        )

        config = load_config(str(path))
        assert config.template.class_name == "Page"
        assert config.template.trim_control_lines is False
        assert config.template.namespace_name == "loom.inline_scripting"
        assert config.compilation.additional_modules == ["json"]
        assert config.compilation.include_source_references is False
        assert config.output.trim is True

    def test_json(self, tmp_path):
        path = tmp_path / "loom.json"
        path.write_text(json.dumps({"debug": {"enabled": True, "artifacts_dir": "out"}}), encoding="utf-8")

        config = LoomConfig(str(path))
        assert config.is_debug_enabled()
        assert config.debug.artifacts_dir == "out"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "loom.yaml"
        path.write_text("", encoding="utf-8")
        assert LoomConfig(str(path)).output.trim is False

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "loom.yaml"
        path.write_text("template: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            LoomConfig(str(path))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "loom.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            LoomConfig(str(path))

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "loom.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            LoomConfig(str(path))

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "loom.yaml"
        path.write_text("output: true\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="output"):
            LoomConfig(str(path))


class TestEnvironment:
    """Test environment variable overrides."""

    def test_config_file_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("template:\n  class_name: FromEnv\n", encoding="utf-8")
        monkeypatch.setenv("LOOM_CONFIG", str(path))

        assert LoomConfig().template.class_name == "FromEnv"

    @pytest.mark.parametrize("value, enabled", [("1", True), ("true", True), ("YES", True), ("0", False), ("", False)])
    def test_debug_from_environment(self, monkeypatch, value, enabled):
        monkeypatch.setenv("LOOM_DEBUG", value)
        assert LoomConfig().is_debug_enabled() is enabled


class TestSaving:
    """Test writing configuration back to disk."""

    def test_yaml_round_trip(self, tmp_path):
        source = tmp_path / "loom.yaml"
        source.write_text("output:\n  trim: true\n", encoding="utf-8")
        config = LoomConfig(str(source))

        target = config.save_config(str(tmp_path / "saved.yaml"))
        assert LoomConfig(str(target)).to_dict() == config.to_dict()

    def test_json_output(self, config, tmp_path):
        target = config.save_config(str(tmp_path / "saved.json"))
        assert json.loads(target.read_text(encoding="utf-8"))["template"]["class_name"] == "DocumentScripts"

    def test_no_destination(self, config):
        with pytest.raises(ConfigurationError):
            config.save_config()


class TestGlobalConfig:
    """Test the global configuration accessors."""

    def test_created_on_first_use(self):
        config = get_config()
        assert get_config() is config

    def test_set_config(self, config):
        set_config(config)
        assert get_config() is config
