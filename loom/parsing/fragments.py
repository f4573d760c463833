"""
Core data structures for template fragments.

A template is split into fragments: literal markup interleaved with script
blocks and directives. Fragments are immutable once produced by the scanner.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class FragmentKind(Enum):
    """Classification of a scanned template span."""

    MARKUP = "markup"
    SCRIPT = "script"
    AUTO_WRITE_SCRIPT = "auto_write_script"
    CLASS_BODY = "class_body"
    TEMPLATE_DIRECTIVE = "template_directive"
    INCLUDE_DIRECTIVE = "include_directive"
    NAMESPACE_IMPORT_DIRECTIVE = "namespace_import_directive"
    PROPERTY_DIRECTIVE = "property_directive"

    @property
    def is_directive(self) -> bool:
        return self in _DIRECTIVE_KINDS


_DIRECTIVE_KINDS = frozenset(
    {
        FragmentKind.TEMPLATE_DIRECTIVE,
        FragmentKind.INCLUDE_DIRECTIVE,
        FragmentKind.NAMESPACE_IMPORT_DIRECTIVE,
        FragmentKind.PROPERTY_DIRECTIVE,
    }
)


@dataclass(frozen=True)
class Fragment:
    """A classified, contiguous span of template text."""

    kind: FragmentKind
    text: str                   # Markup verbatim; otherwise markers stripped and trimmed
    start_line: int             # 1-based line in source_path
    source_path: str
    offset: int = 0             # Absolute offset of the span in the scanned buffer

    def __repr__(self) -> str:
        return f"Fragment({self.kind.name}, {self.text!r}, L{self.start_line})"


@dataclass(frozen=True)
class NamespaceReference:
    """
    A namespace (module) the generated unit imports.

    References compare by namespace only; the location of the declaring
    directive is kept for diagnostics and is None for references added by
    the transformer itself.
    """

    namespace: str
    source_path: Optional[str] = field(default=None, compare=False)
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class PropertyDeclaration:
    """A value passed positionally into the template when it runs."""

    name: str
    type_name: str
