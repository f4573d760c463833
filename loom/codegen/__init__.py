"""
Code generation for template compilation units.

Unit emitters are registered per host language in the emitter factory;
importing this package registers the Python emitter.
"""

from .factory import (
    LanguageSelection,
    create_emitter,
    is_language_registered,
    list_languages,
    register_emitter,
    resolve_language,
)
from .base import StatementEmitter, UnitEmitter
from .python_emitter import PythonStatementEmitter, PythonUnitEmitter

__all__ = [
    # Language factory
    "LanguageSelection",
    "create_emitter",
    "is_language_registered",
    "list_languages",
    "register_emitter",
    "resolve_language",
    # Emitters
    "StatementEmitter",
    "UnitEmitter",
    "PythonStatementEmitter",
    "PythonUnitEmitter",
]
