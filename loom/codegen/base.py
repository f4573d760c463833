"""
Base classes for code emitters.

Code emission is hierarchical: a unit emitter owns the scaffolding of the
generated compilation unit (namespace, class, fields, initialization and
property binding methods, class-body members) and delegates the body of the
main method to a statement emitter. Host languages implement both halves.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple

from ..parsing.fragments import NamespaceReference, PropertyDeclaration
from ..utils.logging import get_logger
from ..utils.source_registry import SourceRegistry, get_source_registry, is_local_path
from .factory import LanguageSelection

logger = get_logger(__name__)

MarkerFactory = Callable[[str, int], Optional[str]]


class StatementEmitter(ABC):
    """
    Accumulates the statements of the main method.

    Every operation that emits template-derived code asks the owning unit
    emitter for a provenance marker first, so backend diagnostics can be
    traced back to the template line.
    """

    def __init__(self, marker_factory: MarkerFactory):
        """
        Initialize the statement emitter.

        Args:
            marker_factory: Returns the provenance marker line for a
                ``(path, line)`` pair, or None when markers are disabled
        """
        self._marker_factory = marker_factory

    @abstractmethod
    def emit_literal_write(self, text: str, line: int = 0, path: Optional[str] = None) -> None:
        """Append statements writing ``text`` verbatim to the output."""
        pass

    @abstractmethod
    def emit_write_line(self) -> None:
        """Append a statement writing a single line break."""
        pass

    @abstractmethod
    def emit_expression_write(self, expression: str, line: int, path: str) -> None:
        """Append a statement writing the string form of ``expression``."""
        pass

    @abstractmethod
    def emit_raw_fragment(self, text: str, line: int, path: str) -> None:
        """Append script text verbatim as statements."""
        pass

    @property
    @abstractmethod
    def is_empty(self) -> bool:
        """Whether no statement has been emitted yet."""
        pass

    @abstractmethod
    def statements(self) -> List[str]:
        """Return the rendered statement lines, without base indentation."""
        pass

    def _marker(self, path: Optional[str], line: int) -> Optional[str]:
        if not path and not line:
            return None
        return self._marker_factory(path or "", line)


class UnitEmitter(ABC):
    """
    Composes a complete compilation unit.

    Subclasses render the host-language syntax; this class keeps the
    accumulated state and the provenance path substitution shared by every
    language.
    """

    def __init__(
        self,
        language: LanguageSelection,
        namespace_name: str,
        class_name: str,
        registry: Optional[SourceRegistry] = None,
        include_source_references: bool = True,
    ):
        """
        Initialize the unit emitter.

        Args:
            language: Resolved host language this emitter renders
            namespace_name: Namespace the generated class is declared in
            class_name: Name of the generated class
            registry: Registry used to tokenize non-local source paths
            include_source_references: Whether to emit provenance markers
        """
        self.language = language
        self.namespace_name = namespace_name
        self.class_name = class_name
        self.registry = registry if registry is not None else get_source_registry()
        self.include_source_references = include_source_references

        self._namespace_references: List[NamespaceReference] = []
        self._properties: Tuple[PropertyDeclaration, ...] = ()
        self._context_type: Optional[str] = None
        self._members: List[str] = []

        self.body = self._create_statement_emitter()

    @abstractmethod
    def _create_statement_emitter(self) -> StatementEmitter:
        """Create the statement emitter for the main method."""
        pass

    @abstractmethod
    def format_marker(self, path: str, line: int) -> str:
        """Render a provenance marker line for ``(path, line)``."""
        pass

    @abstractmethod
    def format_marker_reset(self) -> str:
        """Render the marker that ends template line mapping."""
        pass

    @abstractmethod
    def emit_class_member(self, text: str, line: int, path: str) -> None:
        """Append class-body member code outside the main method."""
        pass

    @abstractmethod
    def compose(self) -> str:
        """
        Render the compilation unit from the accumulated state.

        Rendering is pure: calling it repeatedly without emitting anything
        in between returns identical text.
        """
        pass

    @abstractmethod
    def as_remark(self, text: str) -> str:
        """Render ``text`` as a host-language comment."""
        pass

    def emit_provenance_marker(self, path: str, line: int) -> Optional[str]:
        """
        Return the marker mapping the following lines to ``(path, line)``.

        Non-local paths are replaced by their registry token; registering
        the path stages a readable local copy of the source.

        Returns:
            The marker line, or None if markers are disabled
        """
        if not self.include_source_references:
            return None
        return self.format_marker(self.marker_path(path), line)

    def marker_path(self, path: str) -> str:
        """Return the path written into markers for ``path``."""
        if is_local_path(path):
            return path
        return self.registry.register(path)

    def add_namespace_reference(self, reference: NamespaceReference) -> None:
        """Append a namespace reference; order is kept and duplicates are allowed."""
        self._namespace_references.append(reference)

    @property
    def namespace_references(self) -> Tuple[NamespaceReference, ...]:
        return tuple(self._namespace_references)

    def emit_property_binding_method(self, properties: Sequence[PropertyDeclaration]) -> None:
        """Set the properties bound positionally by the binding method."""
        self._properties = tuple(properties)

    @property
    def properties(self) -> Tuple[PropertyDeclaration, ...]:
        return self._properties

    def set_context_type(self, type_name: Optional[str]) -> None:
        """Set the declared type of the context field."""
        self._context_type = type_name

    @property
    def is_pristine(self) -> bool:
        """Whether nothing has been emitted into the unit yet."""
        return self.body.is_empty and not self._members
