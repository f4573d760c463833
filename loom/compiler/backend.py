"""
Backend interface.

A backend turns generated source text into a loaded artifact, or reports
why it could not. The transformer depends only on this interface, so any
compiler can be plugged in.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Diagnostic:
    """A message reported by a backend while compiling a generated unit."""

    is_error: bool
    filename: str
    line: int
    code: str
    message: str

    def __str__(self) -> str:
        severity = "error" if self.is_error else "warning"
        return f"{self.filename}({self.line}): {severity} {self.code}: {self.message}"


@dataclass
class CompileResult:
    """Outcome of compiling a generated unit."""

    artifact: Optional[Any]
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def succeeded(self) -> bool:
        return self.artifact is not None and not self.errors


class Backend(ABC):
    """Compiles, loads and invokes generated compilation units."""

    name = "backend"

    @abstractmethod
    def compile(
        self,
        source_text: str,
        language: str,
        language_version: Optional[str] = None,
        referenced_modules: Sequence[str] = (),
    ) -> CompileResult:
        """
        Compile a generated unit.

        Args:
            source_text: Generated unit text
            language: Host language identifier
            language_version: Optional language version
            referenced_modules: Modules made available to the unit

        Returns:
            The artifact, or the diagnostics explaining its absence
        """
        pass

    @abstractmethod
    def instantiate(self, artifact: Any) -> Any:
        """Create an instance of the generated class held by ``artifact``."""
        pass

    def invoke(self, instance: Any, method_name: str, args: Sequence[Any] = ()) -> Any:
        """Call ``method_name`` on ``instance`` with positional ``args``."""
        return getattr(instance, method_name)(*args)

    def locate(self, artifact: Any, error: BaseException) -> Optional[Tuple[str, int]]:
        """
        Map an exception raised by generated code to a template location.

        Returns:
            ``(path, line)`` or None if the location is unknown
        """
        return None
