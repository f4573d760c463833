"""
loom: Runtime Text Template Engine

Transforms templates that mix literal markup with embedded Python script
fragments into text. Each template is compiled into a Python module whose
main method writes the output, with errors reported against the lines of
the original template files.

Key Features:
- T4 style syntax: <# script #>, <#= expression #>, <#+ member #>, <#@ directive #>
- Includes, namespace imports and positionally bound properties
- Diagnostics and runtime errors mapped back to template lines
- Pluggable compilation backends

Usage:
    import loom

    transformer = loom.TextTemplateTransformer()
    text = transformer.transform_text('Hello <#= "World" #>!', "greeting.tt")
"""

__version__ = "0.1.0"
__author__ = "loom Team"
__email__ = "loom@example.com"

# Public API exports
from .transformer import (
    TextTemplateTransformer,
    InlineTransformer,
    TransformState,
    ParseContext,
)

from .compiler import Backend, CompileResult, Diagnostic, PythonBackend
from .runtime import TemplateOutputWriter

from .utils import (
    get_config,
    LoomConfig,
    LoomError,
    ConfigurationError,
    TemplateParseError,
    TemplateFailure,
    TemplateExecutionError,
    CaptureStateError,
    TransformerStateError,
    SourceReference,
    SourceRegistry,
    get_source_registry,
    set_source_registry,
)

__all__ = [
    "TextTemplateTransformer",
    "InlineTransformer",
    "TransformState",
    "ParseContext",
    "Backend",
    "CompileResult",
    "Diagnostic",
    "PythonBackend",
    "TemplateOutputWriter",
    "get_config",
    "LoomConfig",
    "LoomError",
    "ConfigurationError",
    "TemplateParseError",
    "TemplateFailure",
    "TemplateExecutionError",
    "CaptureStateError",
    "TransformerStateError",
    "SourceReference",
    "SourceRegistry",
    "get_source_registry",
    "set_source_registry",
]
