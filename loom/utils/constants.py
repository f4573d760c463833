"""
Constants for the loom template engine.

This module consolidates the template syntax markers and the names used in
generated compilation units, providing a single source of truth for both the
parser and the code emitters.
"""

# =============================================================================
# Template Syntax
# =============================================================================

SCRIPT_START_MARKER = "<#"
SCRIPT_END_MARKER = "#>"
REMARK_MARKER = "--"
AUTO_WRITE_MARKER = "="
CLASS_BODY_MARKER = "+"
DIRECTIVE_MARKER = "@"

TEMPLATE_KEYWORD = "template"
INCLUDE_KEYWORD = "include"
IMPORT_KEYWORD = "import"
PROPERTY_KEYWORD = "property"

LANGUAGE_ATTRIBUTE = "language"
FILE_ATTRIBUTE = "file"
NAMESPACE_ATTRIBUTE = "namespace"
NAME_ATTRIBUTE = "name"
TYPE_ATTRIBUTE = "type"

# Character written over the visible content of remark spans
REMARK_PLACEHOLDER = " "

# =============================================================================
# Generated Unit
# =============================================================================

DEFAULT_NAMESPACE_NAME = "loom.inline_scripting"
DEFAULT_CLASS_NAME = "DocumentScripts"

INITIALIZATION_METHOD_NAME = "_initialize"
PROPERTY_INITIALIZATION_METHOD_NAME = "_initialize_properties"
MAIN_METHOD_NAME = "_main"

CONTEXT_FIELD_NAME = "Context"
OUTPUT_FIELD_NAME = "Output"
TRANSFORMER_FIELD_NAME = "Transformer"

OUTPUT_WRITER_TYPE_NAME = "loom.runtime.output.TemplateOutputWriter"
TRANSFORMER_TYPE_NAME = "loom.transformer.InlineTransformer"

RESERVED_MEMBER_NAMES = frozenset(
    {
        CONTEXT_FIELD_NAME,
        OUTPUT_FIELD_NAME,
        TRANSFORMER_FIELD_NAME,
        INITIALIZATION_METHOD_NAME,
        PROPERTY_INITIALIZATION_METHOD_NAME,
        MAIN_METHOD_NAME,
    }
)

# Provenance markers: `# line <n> "<path>"` and `# line default`
LINE_MARKER_PREFIX = "# line"
LINE_MARKER_RESET = "default"

# Pseudo filename the backend compiles generated units under
GENERATED_FILENAME_PREFIX = "<loom-unit"

# =============================================================================
# Languages
# =============================================================================

PYTHON_LANGUAGE_IDENTIFIER = "Python"
DEFAULT_LANGUAGE_IDENTIFIER = PYTHON_LANGUAGE_IDENTIFIER

# Generated units use variable annotations and postponed evaluation of them
MINIMUM_PYTHON_MINOR = 7

GENERATED_FILE_REMARK = "This file was generated by loom. Changes will be lost when it is regenerated."
