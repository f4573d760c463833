"""
Utils package for loom.

This module provides the exception hierarchy, constants, configuration,
logging, the source registry and debug artifact handling.
"""

# Core utilities
from .exceptions import (
    LoomError,
    ConfigurationError,
    TemplateParseError,
    TemplateFailure,
    TemplateExecutionError,
    CaptureStateError,
    TransformerStateError,
    SourceReference,
)
from .constants import *

# Configuration and system utilities
from .config import (
    LoomConfig,
    TemplateConfig,
    CompilationConfig,
    OutputConfig,
    DebugConfig,
    LoggingConfig,
    get_config,
    set_config,
    load_config,
)

from .source_registry import (
    SourceRegistry,
    get_source_registry,
    set_source_registry,
    is_local_path,
)

from .debug_artifacts import DebugArtifactManager
from .logging import get_logger, setup_logging, LoomLogger

__all__ = [
    # Core exceptions
    "LoomError",
    "ConfigurationError",
    "TemplateParseError",
    "TemplateFailure",
    "TemplateExecutionError",
    "CaptureStateError",
    "TransformerStateError",
    "SourceReference",

    # Constants (exported via *)

    # Configuration
    "LoomConfig",
    "TemplateConfig",
    "CompilationConfig",
    "OutputConfig",
    "DebugConfig",
    "LoggingConfig",
    "get_config",
    "set_config",
    "load_config",

    # Source registry
    "SourceRegistry",
    "get_source_registry",
    "set_source_registry",
    "is_local_path",

    # Debug artifacts
    "DebugArtifactManager",

    # Logging
    "get_logger",
    "setup_logging",
    "LoomLogger",
]
