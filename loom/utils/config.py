"""
Configuration System for loom.

This module provides a unified configuration interface for template
parsing, code generation, compilation and output handling. Configuration is
read from a YAML or JSON file, with a few environment variable overrides.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .constants import DEFAULT_CLASS_NAME, DEFAULT_LANGUAGE_IDENTIFIER, DEFAULT_NAMESPACE_NAME
from .exceptions import ConfigurationError
from .logging import get_logger, setup_logging

logger = get_logger(__name__)

_TRUTHY = ("1", "true", "yes")


@dataclass
class TemplateConfig:
    """Template parsing configuration."""

    default_language: str = DEFAULT_LANGUAGE_IDENTIFIER
    namespace_name: str = DEFAULT_NAMESPACE_NAME
    class_name: str = DEFAULT_CLASS_NAME
    encoding: str = "utf-8"
    trim_control_lines: bool = True


@dataclass
class CompilationConfig:
    """Compilation configuration."""

    include_source_references: bool = True
    debug_mode: bool = False
    staging_dir: Optional[str] = None
    additional_modules: List[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    """Output configuration."""

    trim: bool = False


@dataclass
class DebugConfig:
    """Debug artifact configuration."""

    enabled: bool = False
    artifacts_dir: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    enable_file_logging: bool = False
    log_file: str = "loom.log"


class LoomConfig:
    """
    Unified configuration manager for loom.

    All options are read from a single YAML or JSON file; sections that are
    absent fall back to their defaults.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file. If None, ``LOOM_CONFIG``
                is consulted and otherwise defaults are used.
        """
        self.config_file = self._get_config_file_path(config_file)
        self._config_data = self._load_config()

        self.template = self._create_template_config()
        self.compilation = self._create_compilation_config()
        self.output = self._create_output_config()
        self.debug = self._create_debug_config()
        self.logging = self._create_logging_config()

    def _get_config_file_path(self, config_file: Optional[str]) -> Optional[Path]:
        """Get the configuration file path."""
        if config_file:
            return Path(config_file)

        env_file = os.environ.get("LOOM_CONFIG")
        if env_file:
            return Path(env_file)

        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if self.config_file is None:
            return {}

        if not self.config_file.exists():
            logger.debug(f"Configuration file {self.config_file} not found, using defaults")
            return {}

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                if self.config_file.suffix.lower() in (".yaml", ".yml"):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to parse configuration file {self.config_file}: {e}"
            ) from e

        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigurationError(
                f"Configuration file {self.config_file} must contain a mapping at the root"
            )

        logger.info(f"Loaded configuration from {self.config_file}")
        return config_data

    def _section(self, name: str) -> Dict[str, Any]:
        data = self._config_data.get(name) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
        return data

    def _create_template_config(self) -> TemplateConfig:
        """Create template configuration from loaded data."""
        data = self._section("template")

        return TemplateConfig(
            default_language=data.get("default_language", DEFAULT_LANGUAGE_IDENTIFIER),
            namespace_name=data.get("namespace_name", DEFAULT_NAMESPACE_NAME),
            class_name=data.get("class_name", DEFAULT_CLASS_NAME),
            encoding=data.get("encoding", "utf-8"),
            trim_control_lines=data.get("trim_control_lines", True),
        )

    def _create_compilation_config(self) -> CompilationConfig:
        """Create compilation configuration from loaded data."""
        data = self._section("compilation")

        return CompilationConfig(
            include_source_references=data.get("include_source_references", True),
            debug_mode=data.get("debug_mode", False),
            staging_dir=data.get("staging_dir"),
            additional_modules=list(data.get("additional_modules") or []),
        )

    def _create_output_config(self) -> OutputConfig:
        """Create output configuration from loaded data."""
        data = self._section("output")

        return OutputConfig(trim=data.get("trim", False))

    def _create_debug_config(self) -> DebugConfig:
        """Create debug configuration from loaded data."""
        data = self._section("debug")

        # Check environment variable override
        env_enabled = os.getenv("LOOM_DEBUG", "").lower() in _TRUTHY
        enabled = env_enabled or data.get("enabled", False)

        return DebugConfig(
            enabled=enabled,
            artifacts_dir=data.get("artifacts_dir"),
        )

    def _create_logging_config(self) -> LoggingConfig:
        """Create logging configuration from loaded data."""
        data = self._section("logging")

        return LoggingConfig(
            level=data.get("level", "WARNING"),
            enable_file_logging=data.get("enable_file_logging", False),
            log_file=data.get("log_file", "loom.log"),
        )

    def is_debug_enabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self.debug.enabled

    def apply_logging(self) -> None:
        """Reconfigure the ``loom`` logger from the logging section."""
        log_file = self.logging.log_file if self.logging.enable_file_logging else None
        setup_logging(level=self.logging.level, log_file=log_file)

    def to_dict(self) -> Dict[str, Any]:
        """Return the effective configuration as plain data."""
        return {
            "template": {
                "default_language": self.template.default_language,
                "namespace_name": self.template.namespace_name,
                "class_name": self.template.class_name,
                "encoding": self.template.encoding,
                "trim_control_lines": self.template.trim_control_lines,
            },
            "compilation": {
                "include_source_references": self.compilation.include_source_references,
                "debug_mode": self.compilation.debug_mode,
                "staging_dir": self.compilation.staging_dir,
                "additional_modules": list(self.compilation.additional_modules),
            },
            "output": {"trim": self.output.trim},
            "debug": {
                "enabled": self.debug.enabled,
                "artifacts_dir": self.debug.artifacts_dir,
            },
            "logging": {
                "level": self.logging.level,
                "enable_file_logging": self.logging.enable_file_logging,
                "log_file": self.logging.log_file,
            },
        }

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to file.

        Args:
            path: Destination; defaults to the file this configuration was loaded from

        Returns:
            Path the configuration was written to
        """
        target = Path(path) if path else self.config_file
        if target is None:
            raise ConfigurationError("No configuration file path to save to")

        with open(target, "w", encoding="utf-8") as f:
            if target.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {target}")
        return target


# Global configuration instance
_global_config: Optional[LoomConfig] = None


def get_config() -> LoomConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = LoomConfig()
    return _global_config


def set_config(config: Optional[LoomConfig]) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def load_config(config_file: str) -> LoomConfig:
    """Load configuration from a specific file."""
    return LoomConfig(config_file)
