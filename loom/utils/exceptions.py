"""
Custom exception definitions.

This module defines the exception hierarchy for loom-specific errors and
the source reference attached to failures that can be traced back to a
line of an original template file.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Sequence, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..compiler.backend import Diagnostic


@dataclass(frozen=True)
class SourceReference:
    """A reference to a line in an original (non-generated) template file."""

    path: Optional[str] = None
    line: int = 0

    EMPTY: ClassVar["SourceReference"]

    @property
    def is_empty(self) -> bool:
        return self.path is None and self.line == 0

    def __str__(self) -> str:
        if self.is_empty:
            return "<unknown>"
        return f"{self.path or '<text>'}({self.line})"


SourceReference.EMPTY = SourceReference()


class LoomError(Exception):
    """
    Base exception for all loom-related errors.

    This is the root exception class for all loom-specific errors,
    providing common functionality and error handling.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize loom error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(LoomError):
    """
    Raised for invalid construction arguments or template configuration.

    Covers empty base directories, unusable context types, unrecognized
    language identifiers and unreadable configuration files.
    """


class TemplateParseError(ConfigurationError):
    """
    Raised when a template fragment is malformed.

    Examples are directives missing a required attribute, a block ``end``
    without an open block, or a circular include.
    """

    def __init__(self, message: str, source_reference: SourceReference = SourceReference.EMPTY):
        """
        Initialize parse error.

        Args:
            message: Error description
            source_reference: Template line the error was found on
        """
        details = {}
        if not source_reference.is_empty:
            details["source"] = str(source_reference)

        super().__init__(message, details)
        self.source_reference = source_reference


class TemplateFailure(LoomError):
    """
    Raised when the generated unit fails to compile.

    The source reference points at the original template line the
    backend diagnostic was translated to.
    """

    def __init__(
        self,
        message: str,
        source_reference: SourceReference = SourceReference.EMPTY,
        diagnostics: Sequence["Diagnostic"] = (),
    ):
        """
        Initialize template failure.

        Args:
            message: Error description
            source_reference: Translated location of the failure
            diagnostics: Backend diagnostics reported alongside the failure
        """
        super().__init__(message)
        self.source_reference = source_reference
        self.diagnostics: Tuple["Diagnostic", ...] = tuple(diagnostics)


class TemplateExecutionError(TemplateFailure):
    """Raised when template code fails while the generated unit runs."""


class CaptureStateError(LoomError):
    """Raised when output capture is ended without having been started."""


class TransformerStateError(LoomError):
    """
    Raised when a transformer is driven out of order.

    Transformers are single-use: each instance parses and executes
    exactly one template.
    """

    def __init__(self, message: str, state: Optional[str] = None):
        details = {}
        if state is not None:
            details["state"] = state

        super().__init__(message, details)
        self.state = state
