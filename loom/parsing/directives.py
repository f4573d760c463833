"""
Directive resolution.

Directives configure a transformation instead of producing output. This
module extracts their ``name="value"`` attributes and turns each directive
fragment into a typed value the transformer can apply.
"""

import keyword
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..codegen.factory import LanguageSelection, resolve_language
from ..utils.constants import (
    FILE_ATTRIBUTE,
    LANGUAGE_ATTRIBUTE,
    NAME_ATTRIBUTE,
    NAMESPACE_ATTRIBUTE,
    RESERVED_MEMBER_NAMES,
    TYPE_ATTRIBUTE,
)
from ..utils.exceptions import SourceReference, TemplateParseError
from .fragments import Fragment, FragmentKind, NamespaceReference, PropertyDeclaration


@dataclass(frozen=True)
class TemplateDirective:
    """Selection of the host language made by a ``template`` directive."""

    language: LanguageSelection


@dataclass(frozen=True)
class IncludeDirective:
    """A template file to be parsed in place of the directive."""

    path: Path


Directive = Union[TemplateDirective, IncludeDirective, NamespaceReference, PropertyDeclaration]


def extract_attribute(text: str, name: str) -> Optional[str]:
    """
    Extract the value of ``name="value"`` from directive text.

    Matching is case-insensitive on the attribute name. Quotes are required,
    the value may be empty, and the first closing quote ends the value.

    Returns:
        The attribute value, or None if the attribute is absent
    """
    pattern = re.compile(
        r"\b" + re.escape(name) + r'\s*=\s*"(?P<value>[^"]*)"',
        re.IGNORECASE | re.DOTALL,
    )
    match = pattern.search(text)
    return match.group("value") if match else None


class DirectiveResolver:
    """Resolves directive fragments into typed directive values."""

    def __init__(self):
        self._handlers: Dict[FragmentKind, Callable[[Fragment, Path], Directive]] = {
            FragmentKind.TEMPLATE_DIRECTIVE: self._resolve_template,
            FragmentKind.INCLUDE_DIRECTIVE: self._resolve_include,
            FragmentKind.NAMESPACE_IMPORT_DIRECTIVE: self._resolve_namespace,
            FragmentKind.PROPERTY_DIRECTIVE: self._resolve_property,
        }

    def resolve(self, fragment: Fragment, script_directory: Path) -> Directive:
        """
        Resolve a directive fragment.

        Args:
            fragment: Fragment of a directive kind
            script_directory: Directory include paths are relative to

        Returns:
            The typed directive

        Raises:
            TemplateParseError: If a required attribute is missing or invalid
            ConfigurationError: If a template directive names an unknown language
        """
        handler = self._handlers.get(fragment.kind)
        if handler is None:
            raise ValueError(f"{fragment.kind.name} is not a directive")
        return handler(fragment, script_directory)

    def require_attribute(self, fragment: Fragment, name: str) -> str:
        """Return a required attribute or raise ``TemplateParseError``."""
        value = extract_attribute(fragment.text, name)
        if value is None:
            raise TemplateParseError(
                f"Directive is missing required attribute '{name}'",
                _reference(fragment),
            )
        return value

    def _resolve_template(self, fragment: Fragment, script_directory: Path) -> TemplateDirective:
        return TemplateDirective(language=resolve_language(self.require_attribute(fragment, LANGUAGE_ATTRIBUTE)))

    def _resolve_include(self, fragment: Fragment, script_directory: Path) -> IncludeDirective:
        file_name = self.require_attribute(fragment, FILE_ATTRIBUTE).strip()
        if not file_name:
            raise TemplateParseError("Include directive has an empty 'file' attribute", _reference(fragment))
        return IncludeDirective(path=script_directory / file_name)

    def _resolve_namespace(self, fragment: Fragment, script_directory: Path) -> NamespaceReference:
        namespace = self.require_attribute(fragment, NAMESPACE_ATTRIBUTE).strip()
        if not all(part.isidentifier() for part in namespace.split(".")):
            raise TemplateParseError(f"Invalid namespace '{namespace}'", _reference(fragment))
        return NamespaceReference(namespace, fragment.source_path, fragment.start_line)

    def _resolve_property(self, fragment: Fragment, script_directory: Path) -> PropertyDeclaration:
        name = self.require_attribute(fragment, NAME_ATTRIBUTE).strip()
        type_name = self.require_attribute(fragment, TYPE_ATTRIBUTE).strip()

        if not name.isidentifier() or keyword.iskeyword(name):
            raise TemplateParseError(f"Invalid property name '{name}'", _reference(fragment))
        if name in RESERVED_MEMBER_NAMES:
            raise TemplateParseError(f"Property name '{name}' is reserved", _reference(fragment))
        if not type_name:
            raise TemplateParseError(f"Property '{name}' has an empty type", _reference(fragment))

        return PropertyDeclaration(name=name, type_name=type_name)


def _reference(fragment: Fragment) -> SourceReference:
    return SourceReference(fragment.source_path or None, fragment.start_line)
