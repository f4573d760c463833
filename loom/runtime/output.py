"""
Template output writer.

Generated units write their output through a ``TemplateOutputWriter``
handle. The transformer captures only the text written while the main
method runs.
"""

from typing import Any, List, Optional

from ..utils.exceptions import CaptureStateError


class TemplateOutputWriter:
    """
    Accumulates the text produced by a template.

    Attributes:
        trim: Strip leading and trailing whitespace from the returned text
    """

    def __init__(self, trim: bool = False):
        self._chunks: List[str] = []
        self._length = 0
        self._capturing = False
        self._capture_offset = 0
        self.trim = trim

    @property
    def is_capturing(self) -> bool:
        return self._capturing

    def write(self, value: Any) -> None:
        """
        Write the string form of ``value``.

        Raises:
            TypeError: If ``value`` is None
        """
        if value is None:
            raise TypeError("Cannot write None to template output")
        self._append(str(value))

    def write_format(self, format_string: str, *args: Any, **kwargs: Any) -> None:
        """Write ``format_string.format(*args, **kwargs)``."""
        if format_string is None:
            raise TypeError("format_string must not be None")
        self._append(format_string.format(*args, **kwargs))

    def write_line(self, text: Optional[str] = None) -> None:
        """Write ``text`` (if given) followed by a line break."""
        if text is not None:
            self._append(str(text))
        self._append("\n")

    def start_capture(self) -> None:
        """Start capturing; text already written is excluded from the capture."""
        self._capturing = True
        self._capture_offset = self._length

    def end_capture(self) -> str:
        """
        Stop capturing and return the text written since ``start_capture``.

        Raises:
            CaptureStateError: If no capture is in progress
        """
        if not self._capturing:
            raise CaptureStateError("Output capture was not started")

        self._capturing = False
        result = self._text()[self._capture_offset:]
        return result.strip() if self.trim else result

    def __str__(self) -> str:
        text = self._text()
        return text.strip() if self.trim else text

    def _append(self, text: str) -> None:
        self._chunks.append(text)
        self._length += len(text)

    def _text(self) -> str:
        if len(self._chunks) > 1:
            self._chunks = ["".join(self._chunks)]
        return self._chunks[0] if self._chunks else ""
