"""
Python backend.

Compiles generated units with the built-in ``compile`` and executes them in
a fresh module object. Compiler errors and warnings, failed imports and
errors raised while the module body runs are all reported as diagnostics
positioned through the unit's provenance markers.
"""

import ast
import importlib
import itertools
import linecache
import time
import traceback
import types
import warnings
from typing import Any, List, Optional, Sequence, Tuple

from ..utils.constants import (
    GENERATED_FILENAME_PREFIX,
    MAIN_METHOD_NAME,
    MINIMUM_PYTHON_MINOR,
    PYTHON_LANGUAGE_IDENTIFIER,
)
from ..utils.logging import get_logger
from .backend import Backend, CompileResult, Diagnostic
from .line_map import LineDirectiveMap
from .loader import CompiledArtifact

logger = get_logger(__name__)

_unit_counter = itertools.count(1)


class PythonBackend(Backend):
    """
    Backend compiling generated units as Python modules.

    Each compiled unit gets a unique pseudo filename whose source is
    registered with ``linecache``, so tracebacks through template code show
    the generated lines.
    """

    name = "python"

    def __init__(self, optimize: int = -1):
        """
        Initialize the backend.

        Args:
            optimize: Optimization level passed to ``compile`` (-1 uses the
                interpreter's level)
        """
        self.optimize = optimize

    def compile(
        self,
        source_text: str,
        language: str = PYTHON_LANGUAGE_IDENTIFIER,
        language_version: Optional[str] = None,
        referenced_modules: Sequence[str] = (),
    ) -> CompileResult:
        filename = f"{GENERATED_FILENAME_PREFIX}-{next(_unit_counter)}>"
        line_map = LineDirectiveMap.from_source(source_text)
        start_time = time.time()

        if language != PYTHON_LANGUAGE_IDENTIFIER:
            return CompileResult(
                None, [Diagnostic(True, filename, 0, "L0001", f"Unsupported language '{language}'")]
            )

        feature_version, diagnostic = self._feature_version(filename, language_version)
        if diagnostic is not None:
            return CompileResult(None, [diagnostic])

        diagnostics: List[Diagnostic] = []
        module = types.ModuleType(filename.strip("<>").replace("-", "_"))
        module.__file__ = filename

        for module_name in referenced_modules:
            try:
                importlib.import_module(module_name)
                top_level = module_name.partition(".")[0]
                module.__dict__[top_level] = importlib.import_module(top_level)
            except ImportError as e:
                diagnostics.append(
                    Diagnostic(True, filename, 0, "E0401", f"Cannot import referenced module '{module_name}': {e}")
                )
        if diagnostics:
            return CompileResult(None, diagnostics)

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                tree = ast.parse(source_text, filename=filename, feature_version=feature_version)
                code = compile(tree, filename, "exec", optimize=self.optimize, dont_inherit=True)
            except SyntaxError as e:
                diagnostics.append(self._diagnostic(True, line_map, filename, e.lineno or 0, type(e).__name__, e.msg))
                code = None

        for warning in caught:
            diagnostics.append(
                self._diagnostic(
                    False, line_map, filename, warning.lineno, warning.category.__name__, str(warning.message)
                )
            )

        if code is None:
            return CompileResult(None, diagnostics)

        linecache.cache[filename] = (len(source_text), None, source_text.splitlines(True), filename)

        try:
            exec(code, module.__dict__)
        except Exception as e:
            line = self._traceback_line(filename, e)
            diagnostics.append(self._diagnostic(True, line_map, filename, line, type(e).__name__, str(e)))
            return CompileResult(None, diagnostics)

        entry_point = self._find_entry_point(module, filename)
        if entry_point is None:
            diagnostics.append(Diagnostic(True, filename, 0, "E0002", "Generated unit defines no template class"))
            return CompileResult(None, diagnostics)

        artifact = CompiledArtifact(
            filename=filename,
            artifact_type="module",
            entry_point=entry_point,
            module=module,
            line_map=line_map,
            metadata={
                "language_version": language_version,
                "referenced_modules": list(referenced_modules),
                "compile_time": time.time() - start_time,
            },
        )
        logger.debug(f"Compiled {filename} ({len(line_map)} mapped lines)")
        return CompileResult(artifact, diagnostics)

    def instantiate(self, artifact: CompiledArtifact) -> Any:
        return artifact.get_entry_class()()

    def locate(self, artifact: CompiledArtifact, error: BaseException) -> Optional[Tuple[str, int]]:
        line = self._traceback_line(artifact.filename, error)
        if not line:
            return None
        return artifact.line_map.lookup(line)

    @staticmethod
    def _feature_version(
        filename: str, language_version: Optional[str]
    ) -> Tuple[Optional[Tuple[int, int]], Optional[Diagnostic]]:
        if not language_version:
            return None, None

        major, _, minor = language_version.partition(".")
        if int(major) != 3 or (minor and int(minor) < MINIMUM_PYTHON_MINOR):
            return None, Diagnostic(True, filename, 0, "L0002", f"Unsupported Python version '{language_version}'")
        if not minor:
            return None, None
        return (3, int(minor)), None

    @staticmethod
    def _find_entry_point(module: types.ModuleType, filename: str) -> Optional[str]:
        """Return the name of the first class whose main method was compiled from ``filename``."""
        for name, value in vars(module).items():
            if not isinstance(value, type):
                continue
            main = value.__dict__.get(MAIN_METHOD_NAME)
            if isinstance(main, types.FunctionType) and main.__code__.co_filename == filename:
                return name
        return None

    @staticmethod
    def _traceback_line(filename: str, error: BaseException) -> int:
        """Return the innermost line of ``filename`` in the error's traceback."""
        line = 0
        for frame in traceback.extract_tb(error.__traceback__):
            if frame.filename == filename:
                line = frame.lineno or 0
        return line

    @staticmethod
    def _diagnostic(
        is_error: bool, line_map: LineDirectiveMap, filename: str, line: int, code: str, message: str
    ) -> Diagnostic:
        location = line_map.lookup(line)
        if location is None:
            return Diagnostic(is_error, filename, line, code, message)
        path, template_line = location
        return Diagnostic(is_error, path, template_line, code, message)
