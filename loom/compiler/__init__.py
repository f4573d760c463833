"""
Compilation backends for generated units.

The transformer talks to backends through the ``Backend`` interface;
``PythonBackend`` compiles and loads generated Python modules in-process.
"""

from .backend import Backend, CompileResult, Diagnostic
from .line_map import LineDirectiveMap
from .loader import CompiledArtifact
from .python_backend import PythonBackend

__all__ = [
    "Backend",
    "CompileResult",
    "Diagnostic",
    "LineDirectiveMap",
    "CompiledArtifact",
    "PythonBackend",
]
