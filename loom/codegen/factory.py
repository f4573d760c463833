"""
Emitter registration and language resolution.

Each host language registers the unit emitter class that synthesizes its
compilation units. Template directives name a language as
``<Identifier>[version]``; the identifier selects the emitter and the
optional version is handed to the backend.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Type, Union

from ..utils.exceptions import ConfigurationError
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .base import UnitEmitter

logger = get_logger(__name__)

_VERSION_PATTERN = re.compile(r"^[vV]?(?P<version>\d+(?:\.\d+)?)$")

# Registered emitters, keyed by language identifier
_emitters: Dict[str, Type["UnitEmitter"]] = {}


@dataclass(frozen=True)
class LanguageSelection:
    """A resolved host language and optional language version."""

    identifier: str
    version: Optional[str] = None

    def __str__(self) -> str:
        return self.identifier if self.version is None else f"{self.identifier}{self.version}"


def register_emitter(identifier: str, emitter_class: Type["UnitEmitter"]) -> None:
    """
    Register the unit emitter for a host language.

    Args:
        identifier: Language identifier as written in template directives
        emitter_class: Unit emitter class for the language
    """
    if identifier in _emitters and _emitters[identifier] is not emitter_class:
        logger.warning(f"Replacing emitter registered for language '{identifier}'")
    _emitters[identifier] = emitter_class
    logger.debug(f"Registered emitter {emitter_class.__name__} for language '{identifier}'")


def is_language_registered(identifier: str) -> bool:
    """Check if an emitter is registered for a language identifier."""
    return identifier in _emitters


def list_languages() -> List[str]:
    """Return the registered language identifiers, sorted."""
    return sorted(_emitters)


def resolve_language(value: str) -> LanguageSelection:
    """
    Resolve a ``language`` attribute value.

    The registered identifier is matched as a case-sensitive prefix; the
    longest match wins. The rest of the value, if any, is the version
    (``3``, ``3.11`` or ``v3.11``).

    Args:
        value: Attribute value such as ``Python`` or ``Python3.11``

    Returns:
        The resolved language selection

    Raises:
        ConfigurationError: If no registered identifier matches or the
            version is malformed
    """
    value = value.strip()
    matches = [identifier for identifier in _emitters if value.startswith(identifier)]
    if not matches:
        raise ConfigurationError(
            f"Unrecognized language identifier '{value}'",
            {"registered": ", ".join(list_languages()) or "none"},
        )

    identifier = max(matches, key=len)
    remainder = value[len(identifier):].strip()
    if not remainder:
        return LanguageSelection(identifier)

    match = _VERSION_PATTERN.match(remainder)
    if match is None:
        raise ConfigurationError(f"Malformed language version '{remainder}' in '{value}'")
    return LanguageSelection(identifier, match.group("version"))


def create_emitter(language: Union[str, LanguageSelection], **kwargs) -> "UnitEmitter":
    """
    Create a unit emitter for a language.

    Args:
        language: Language identifier or resolved selection
        **kwargs: Passed to the emitter constructor

    Returns:
        A fresh unit emitter
    """
    selection = language if isinstance(language, LanguageSelection) else resolve_language(language)
    emitter_class = _emitters[selection.identifier]
    return emitter_class(language=selection, **kwargs)
