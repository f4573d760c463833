"""
Provenance marker map.

Python has no ``#line`` directive, so generated units carry comment markers
instead:

    # line 12 "templates/page.tt"
    Output.write('<h1>\\n')
    # line default

Lines after a marker map to consecutive template lines starting at the
marker's line number; ``# line default`` ends the mapping.
"""

import re
from typing import Dict, Optional, Tuple

from ..utils.constants import LINE_MARKER_PREFIX, LINE_MARKER_RESET

_MARKER_PATTERN = re.compile(
    r"^\s*"
    + re.escape(LINE_MARKER_PREFIX)
    + r'\s+(?:(?P<line>\d+)\s+"(?P<path>(?:[^"\\]|\\.)*)"|'
    + re.escape(LINE_MARKER_RESET)
    + r")\s*$"
)
_ESCAPE_PATTERN = re.compile(r"\\(.)")


class LineDirectiveMap:
    """Maps generated source lines to ``(path, line)`` in template files."""

    def __init__(self, entries: Optional[Dict[int, Tuple[str, int]]] = None):
        self._entries: Dict[int, Tuple[str, int]] = dict(entries or {})

    @classmethod
    def from_source(cls, source: str) -> "LineDirectiveMap":
        """Build the map by scanning ``source`` for provenance markers."""
        entries: Dict[int, Tuple[str, int]] = {}
        active: Optional[Tuple[str, int, int]] = None

        for number, text in enumerate(source.split("\n"), start=1):
            match = _MARKER_PATTERN.match(text)
            if match:
                if match.group("line") is None:
                    active = None
                else:
                    path = _ESCAPE_PATTERN.sub(r"\1", match.group("path"))
                    active = (path, int(match.group("line")), number)
                continue

            if active is not None:
                path, first_line, marker_line = active
                entries[number] = (path, first_line + number - marker_line - 1)

        return cls(entries)

    def lookup(self, generated_line: int) -> Optional[Tuple[str, int]]:
        """Return the template location of a generated line, or None."""
        return self._entries.get(generated_line)

    def __len__(self) -> int:
        return len(self._entries)
