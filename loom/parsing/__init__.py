"""
Template parsing.

Turns template text into classified fragments: remarks are suppressed,
spans are scanned and classified, and directive fragments are resolved
into typed directives.
"""

from .fragments import Fragment, FragmentKind, NamespaceReference, PropertyDeclaration
from .line_index import CharacterRange, LineIndex
from .remarks import RemarkSuppressor
from .statements import block_header_line, opens_block
from .scanner import CLASSIFICATION_RULES, FragmentScanner, classify
from .directives import (
    DirectiveResolver,
    IncludeDirective,
    TemplateDirective,
    extract_attribute,
)

__all__ = [
    "Fragment",
    "FragmentKind",
    "NamespaceReference",
    "PropertyDeclaration",
    "CharacterRange",
    "LineIndex",
    "RemarkSuppressor",
    "block_header_line",
    "opens_block",
    "CLASSIFICATION_RULES",
    "FragmentScanner",
    "classify",
    "DirectiveResolver",
    "IncludeDirective",
    "TemplateDirective",
    "extract_attribute",
]
