"""
Template transformation pipeline.

This module drives a template from text to output: remarks are suppressed,
fragments are scanned and routed into a unit emitter, the composed unit is
compiled by a backend, and its main method runs while output is captured.
"""

import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

from .codegen import LanguageSelection, UnitEmitter, create_emitter, resolve_language
from .compiler import Backend, Diagnostic, PythonBackend
from .parsing import (
    DirectiveResolver,
    Fragment,
    FragmentKind,
    FragmentScanner,
    IncludeDirective,
    LineIndex,
    NamespaceReference,
    PropertyDeclaration,
    RemarkSuppressor,
    TemplateDirective,
)
from .runtime import TemplateOutputWriter
from .utils.config import LoomConfig, get_config
from .utils.constants import (
    GENERATED_FILE_REMARK,
    GENERATED_FILENAME_PREFIX,
    INITIALIZATION_METHOD_NAME,
    MAIN_METHOD_NAME,
    PROPERTY_INITIALIZATION_METHOD_NAME,
)
from .utils.debug_artifacts import DebugArtifactManager
from .utils.exceptions import (
    ConfigurationError,
    LoomError,
    SourceReference,
    TemplateExecutionError,
    TemplateFailure,
    TemplateParseError,
    TransformerStateError,
)
from .utils.logging import LoomLogger, get_logger
from .utils.source_registry import SourceRegistry, get_source_registry, is_local_path

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]


class TransformState(Enum):
    """Lifecycle of a transformer instance."""

    CREATED = "created"
    PARSING = "parsing"
    PARSED = "parsed"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ParseContext:
    """A template file being parsed; includes push a new context."""

    source_path: str
    script_directory: Path


class InlineTransformer(ABC):
    """Transformer operations available to template code as ``Transformer``."""

    @abstractmethod
    def transform_relative_file(self, relative_path: str, *property_values: Any) -> str:
        """Transform a template located relative to the running template."""
        pass


class TextTemplateTransformer(InlineTransformer):
    """
    Transforms one template into text.

    Instances are single-use: each parses and executes exactly one template.
    The source registry is the only state shared with other instances.

    Example:
        >>> transformer = TextTemplateTransformer()
        >>> transformer.transform_text('Hello <#= "World" #>!', "")
        'Hello World!'
    """

    def __init__(
        self,
        context: Any = None,
        base_directory: Optional[PathLike] = None,
        additional_modules: Optional[Iterable[str]] = None,
        *,
        registry: Optional[SourceRegistry] = None,
        backend: Optional[Backend] = None,
        config: Optional[LoomConfig] = None,
    ):
        """
        Initialize the transformer.

        Args:
            context: Object exposed to template code as ``Context``
            base_directory: Directory relative template paths resolve
                against (default: current working directory)
            additional_modules: Modules the backend makes available to the
                generated unit
            registry: Source registry (default: the process-wide registry)
            backend: Compilation backend (default: ``PythonBackend``)
            config: Configuration (default: the global configuration)

        Raises:
            ConfigurationError: If ``base_directory`` is empty or the type
                of ``context`` cannot be imported by generated code
        """
        self.config = config if config is not None else get_config()

        if base_directory is None:
            base_directory = os.getcwd()
        elif not str(base_directory).strip():
            raise ConfigurationError("base_directory must not be empty or whitespace")

        self.base_directory = Path(base_directory)
        self.context = context
        self.registry = registry if registry is not None else get_source_registry()
        self.backend = backend if backend is not None else self._create_default_backend()
        self.include_source_references = self.config.compilation.include_source_references
        self.debug_mode = self.config.compilation.debug_mode or self.config.is_debug_enabled()

        self._explicit_modules = list(additional_modules or [])
        self.additional_modules = list(self.config.compilation.additional_modules) + self._explicit_modules

        self.state = TransformState.CREATED
        self.warnings: List[Diagnostic] = []
        self.generated_source: Optional[str] = None
        self.source_path = ""

        self._namespace_references: List[NamespaceReference] = []
        self._properties: List[PropertyDeclaration] = []
        self._context_type: Optional[str] = None
        self._contexts: List[ParseContext] = []
        self._script_directory = self.base_directory

        self._suppressor = RemarkSuppressor()
        self._scanner = FragmentScanner(trim_control_lines=self.config.template.trim_control_lines)
        self._resolver = DirectiveResolver()
        self._language = resolve_language(self.config.template.default_language)
        self._emitter = self._create_emitter(self._language)
        self._logger = LoomLogger(__name__)
        self._parse_time = 0.0

        if context is not None:
            self._bind_context_type(type(context))

    @property
    def language(self) -> LanguageSelection:
        """Host language selected for the generated unit."""
        return self._language

    @property
    def namespace_references(self) -> List[NamespaceReference]:
        return list(self._namespace_references)

    @property
    def properties(self) -> List[PropertyDeclaration]:
        return list(self._properties)

    @property
    def parse_contexts(self) -> List[ParseContext]:
        """Stack of templates being parsed, outermost first."""
        return list(self._contexts)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def transform_file(self, path: PathLike, *property_values: Any) -> str:
        """
        Transform a template file.

        Args:
            path: Template path, relative to the base directory unless absolute
            *property_values: Values bound to the declared properties, in
                declaration order

        Returns:
            The text written by the template

        Raises:
            FileNotFoundError: If the template or an include does not exist
        """
        resolved = self._resolve_path(path)
        return self.transform_text(self._read(resolved), str(resolved), *property_values)

    def transform_text(self, text: str, source_path: Optional[str], *property_values: Any) -> str:
        """
        Transform template text.

        Line breaks are normalized to ``\\n`` before parsing, so markup is
        returned unchanged except that ``\\r\\n`` comes back as ``\\n``.

        Args:
            text: Template text
            source_path: Path reported in diagnostics and used to resolve
                includes; may be empty
            *property_values: Values bound to the declared properties

        Returns:
            The text written by the template
        """
        self.generate_text(text, source_path)
        return self.execute(*property_values)

    def generate_text(self, text: str, source_path: Optional[str] = None) -> str:
        """
        Parse template text and return the generated unit without running it.

        Raises:
            TransformerStateError: If this instance has already been used
        """
        self._require_state(TransformState.CREATED, "parse")
        self.state = TransformState.PARSING
        self.source_path = source_path or ""
        self._logger.log_transform_start(self.source_path, len(text))

        start_time = time.time()
        try:
            script_directory = self._directory_of(self.source_path)
            self._script_directory = script_directory
            self._parse(text, self.source_path, script_directory)
            self._finalize()
        except Exception:
            self.state = TransformState.FAILED
            raise

        self._parse_time = time.time() - start_time
        self.state = TransformState.PARSED
        return self.generated_source

    def generate_file(self, path: PathLike) -> str:
        """Parse a template file and return the generated unit."""
        resolved = self._resolve_path(path)
        return self.generate_text(self._read(resolved), str(resolved))

    def execute(self, *property_values: Any) -> str:
        """
        Compile and run the generated unit.

        Args:
            *property_values: Values bound to the declared properties

        Returns:
            The text written while the main method ran

        Raises:
            TemplateFailure: If the backend reports an error
            TemplateExecutionError: If template code raises
            ConfigurationError: If the number of values does not match the
                declared properties
        """
        self._require_state(TransformState.PARSED, "execute")
        self.state = TransformState.EXECUTING

        try:
            text = self._execute(property_values)
        except Exception:
            self.state = TransformState.FAILED
            raise

        self.state = TransformState.COMPLETED
        return text

    def save_generated_source(self, path: PathLike) -> Path:
        """
        Write the generated unit to ``path`` under a generated-file remark.

        Raises:
            TransformerStateError: If no unit has been generated yet
        """
        if self.generated_source is None:
            raise TransformerStateError("No generated source to save", self.state.value)

        target = Path(path)
        header = self._emitter.as_remark(GENERATED_FILE_REMARK)
        target.write_text(f"{header}\n\n{self.generated_source}", encoding=self.config.template.encoding)

        logger.info(f"Generated source saved to {target}")
        return target

    def transform_relative_file(self, relative_path: str, *property_values: Any) -> str:
        """
        Transform a template relative to the directory of this template.

        A fresh transformer runs the nested template; it shares this
        transformer's registry, backend and configuration.

        Raises:
            ConfigurationError: If ``relative_path`` is empty
        """
        if not relative_path or not str(relative_path).strip():
            raise ConfigurationError("relative_path must not be empty or whitespace")

        nested = TextTemplateTransformer(
            base_directory=self._script_directory,
            additional_modules=self._explicit_modules,
            registry=self.registry,
            backend=self.backend,
            config=self.config,
        )
        return nested.transform_file(relative_path, *property_values)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _parse(self, text: str, source_path: str, script_directory: Path) -> None:
        if any(self._same_source(source_path, context.source_path) for context in self._contexts):
            current = self._contexts[-1]
            raise TemplateParseError(
                f"Circular include of {source_path}",
                SourceReference(current.source_path or None, 0),
            )

        text = text.replace("\r\n", "\n")
        if source_path and not is_local_path(source_path):
            self.registry.register(source_path, text)

        self._contexts.append(ParseContext(source_path, script_directory))
        try:
            suppressed = self._suppressor.suppress(text)
            fragments = self._scanner.scan(suppressed, source_path, LineIndex(suppressed))
            self._logger.log_fragments(source_path, len(fragments))

            for fragment in fragments:
                self._route(fragment)
        finally:
            self._contexts.pop()

    def _route(self, fragment: Fragment) -> None:
        body = self._emitter.body

        if fragment.kind is FragmentKind.MARKUP:
            text = fragment.text
            leading = len(text) - len(text.lstrip("\n"))
            for _ in range(leading):
                body.emit_write_line()
            body.emit_literal_write(text[leading:], fragment.start_line + leading, fragment.source_path)
        elif fragment.kind is FragmentKind.SCRIPT:
            body.emit_raw_fragment(fragment.text, fragment.start_line, fragment.source_path)
        elif fragment.kind is FragmentKind.AUTO_WRITE_SCRIPT:
            body.emit_expression_write(fragment.text, fragment.start_line, fragment.source_path)
        elif fragment.kind is FragmentKind.CLASS_BODY:
            self._emitter.emit_class_member(fragment.text, fragment.start_line, fragment.source_path)
        elif fragment.kind.is_directive:
            self._apply_directive(fragment)

    def _apply_directive(self, fragment: Fragment) -> None:
        directive = self._resolver.resolve(fragment, self._contexts[-1].script_directory)

        if isinstance(directive, TemplateDirective):
            self._select_language(directive.language, fragment)
        elif isinstance(directive, IncludeDirective):
            self._include(directive.path, fragment)
        elif isinstance(directive, NamespaceReference):
            self._namespace_references.append(directive)
        elif isinstance(directive, PropertyDeclaration):
            if any(prop.name == directive.name for prop in self._properties):
                raise TemplateParseError(
                    f"Property '{directive.name}' is declared more than once",
                    SourceReference(fragment.source_path or None, fragment.start_line),
                )
            self._properties.append(directive)

    def _select_language(self, language: LanguageSelection, fragment: Fragment) -> None:
        if language.identifier != self._language.identifier:
            if not self._emitter.is_pristine:
                raise TemplateParseError(
                    f"Template language cannot change to {language.identifier} after output was emitted",
                    SourceReference(fragment.source_path or None, fragment.start_line),
                )
            self._emitter = self._create_emitter(language)

        logger.debug(f"Template language set to {language}")
        self._language = language

    def _include(self, path: Path, fragment: Fragment) -> None:
        self._logger.log_include(fragment.source_path, str(path))
        self._parse(self._read(path), str(path), path.parent)

    def _finalize(self) -> None:
        for reference in self._namespace_references:
            self._emitter.add_namespace_reference(reference)
        self._emitter.set_context_type(self._context_type)
        self._emitter.emit_property_binding_method(self._properties)
        self.generated_source = self._emitter.compose()

        if self.debug_mode:
            manager = DebugArtifactManager(self.config.debug.artifacts_dir)
            manager.save_generated_source(self.source_path or "template", self.generated_source)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _execute(self, property_values: Sequence[Any]) -> str:
        start_time = time.time()
        result = self.backend.compile(
            self.generated_source,
            self._language.identifier,
            self._language.version,
            self.additional_modules,
        )
        compile_time = time.time() - start_time

        self._translate_diagnostics(result.diagnostics)
        if result.artifact is None:
            raise TemplateFailure(f"Backend '{self.backend.name}' produced no artifact", diagnostics=result.diagnostics)

        start_time = time.time()
        instance = self.backend.instantiate(result.artifact)

        if len(property_values) != len(self._properties):
            raise ConfigurationError(
                f"Expected {len(self._properties)} property values, got {len(property_values)}",
                {"properties": ", ".join(prop.name for prop in self._properties) or "none"},
            )

        output = TemplateOutputWriter(trim=self.config.output.trim)
        self.backend.invoke(instance, PROPERTY_INITIALIZATION_METHOD_NAME, tuple(property_values))
        self.backend.invoke(instance, INITIALIZATION_METHOD_NAME, (output, self.context, self))

        output.start_capture()
        try:
            self.backend.invoke(instance, MAIN_METHOD_NAME, ())
        except LoomError:
            raise
        except Exception as e:
            raise self._execution_error(result.artifact, e) from e
        text = output.end_capture()

        self._logger.log_performance_metrics(self._parse_time, compile_time, time.time() - start_time)
        return text

    def _translate_diagnostics(self, diagnostics: Sequence[Diagnostic]) -> None:
        """
        Log warnings and raise ``TemplateFailure`` for the first error, in line order.

        Diagnostics still pointing into the generated unit have no template
        location and are reported with an empty source reference.
        """
        for diagnostic in sorted(diagnostics, key=lambda d: d.line):
            path = self.registry.translate(diagnostic.filename)
            self._logger.log_diagnostic(path, diagnostic.line, diagnostic.code, diagnostic.message, diagnostic.is_error)

            if diagnostic.is_error:
                reference = SourceReference(path or None, diagnostic.line)
                if path.startswith(GENERATED_FILENAME_PREFIX):
                    reference = SourceReference.EMPTY
                raise TemplateFailure(diagnostic.message, reference, diagnostics)
            self.warnings.append(diagnostic)

    def _execution_error(self, artifact: Any, error: Exception) -> TemplateExecutionError:
        location = self.backend.locate(artifact, error)
        reference = SourceReference.EMPTY
        if location is not None:
            path, line = location
            reference = SourceReference(self.registry.translate(path) or None, line)

        logger.error(f"Template raised {type(error).__name__} at {reference}: {error}")
        return TemplateExecutionError(f"{type(error).__name__}: {error}", reference)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _bind_context_type(self, context_type: type) -> None:
        qualname = context_type.__qualname__
        if "<locals>" in qualname:
            raise ConfigurationError(
                f"Context type {qualname} is defined in a local scope and cannot be referenced by generated code"
            )

        module = context_type.__module__
        if module == "builtins":
            self._context_type = qualname
            return

        self._namespace_references.append(NamespaceReference(module))
        self._context_type = f"{module}.{qualname}"

    def _create_emitter(self, language: LanguageSelection) -> UnitEmitter:
        return create_emitter(
            language,
            namespace_name=self.config.template.namespace_name,
            class_name=self.config.template.class_name,
            registry=self.registry,
            include_source_references=self.include_source_references,
        )

    def _create_default_backend(self) -> Backend:
        return PythonBackend(optimize=0 if self.config.compilation.debug_mode else -1)

    def _require_state(self, expected: TransformState, operation: str) -> None:
        if self.state is not expected:
            raise TransformerStateError(
                f"Cannot {operation} in state {self.state.value}; transformer instances are single-use",
                self.state.value,
            )

    def _resolve_path(self, path: PathLike) -> Path:
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = self.base_directory / resolved
        return resolved

    def _directory_of(self, source_path: str) -> Path:
        if not source_path or not is_local_path(source_path):
            return self.base_directory
        return self._resolve_path(source_path).parent

    def _read(self, path: Path) -> str:
        return path.read_text(encoding=self.config.template.encoding)

    def _same_source(self, first: str, second: str) -> bool:
        if not first or not second:
            return False
        if is_local_path(first) and is_local_path(second):
            return _normalized(self._resolve_path(first)) == _normalized(self._resolve_path(second))
        return first.casefold() == second.casefold()


def _normalized(path: Path) -> str:
    return os.path.normcase(os.path.abspath(path))

