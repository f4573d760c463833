"""
Fragment scanning.

Splits (remark-suppressed) template text into alternating markup and script
spans and classifies each script span by its leading marker. Classification
is an ordered rule list evaluated top to bottom; the order matters because
the markers share the ``<#`` prefix.
"""

import re
import textwrap
from dataclasses import dataclass
from typing import Iterator, List, Optional, Pattern, Tuple

from ..utils.constants import (
    AUTO_WRITE_MARKER,
    CLASS_BODY_MARKER,
    DIRECTIVE_MARKER,
    IMPORT_KEYWORD,
    INCLUDE_KEYWORD,
    PROPERTY_KEYWORD,
    SCRIPT_END_MARKER,
    SCRIPT_START_MARKER,
    TEMPLATE_KEYWORD,
)
from ..utils.logging import get_logger
from .fragments import Fragment, FragmentKind
from .line_index import LineIndex
from .statements import opens_block

logger = get_logger(__name__)

_START = re.escape(SCRIPT_START_MARKER)


def _directive_rule(keyword: str) -> Pattern[str]:
    return re.compile(_START + r"\s*" + re.escape(DIRECTIVE_MARKER) + r"\s*" + re.escape(keyword) + r"\b")


# Specific to general; the first matching prefix wins.
CLASSIFICATION_RULES: Tuple[Tuple[Pattern[str], FragmentKind], ...] = (
    (re.compile(_START + re.escape(AUTO_WRITE_MARKER)), FragmentKind.AUTO_WRITE_SCRIPT),
    (re.compile(_START + re.escape(CLASS_BODY_MARKER)), FragmentKind.CLASS_BODY),
    (_directive_rule(INCLUDE_KEYWORD), FragmentKind.INCLUDE_DIRECTIVE),
    (_directive_rule(TEMPLATE_KEYWORD), FragmentKind.TEMPLATE_DIRECTIVE),
    (_directive_rule(IMPORT_KEYWORD), FragmentKind.NAMESPACE_IMPORT_DIRECTIVE),
    (_directive_rule(PROPERTY_KEYWORD), FragmentKind.PROPERTY_DIRECTIVE),
)

_CONTROL_LINE_EXEMPT = (FragmentKind.MARKUP, FragmentKind.AUTO_WRITE_SCRIPT)


@dataclass
class _Span:
    """Working span; boundaries move while control lines are trimmed."""

    kind: FragmentKind
    start: int
    end: int
    prefix_length: int = 0


def classify(span_text: str) -> Tuple[FragmentKind, int]:
    """
    Classify a ``<# ... #>`` span.

    Returns:
        The fragment kind and the length of the matched start prefix
    """
    for pattern, kind in CLASSIFICATION_RULES:
        match = pattern.match(span_text)
        if match:
            return kind, match.end()
    return FragmentKind.SCRIPT, len(SCRIPT_START_MARKER)


class FragmentScanner:
    """Splits template text into classified fragments."""

    _span_pattern = re.compile(_START + r".*?" + re.escape(SCRIPT_END_MARKER), re.DOTALL)

    def __init__(self, trim_control_lines: bool = True):
        """
        Initialize the scanner.

        Args:
            trim_control_lines: Drop the indentation and line break of lines
                holding nothing but one script or directive fragment
        """
        self.trim_control_lines = trim_control_lines

    def scan(self, text: str, source_path: str, line_index: Optional[LineIndex] = None) -> List[Fragment]:
        """
        Scan ``text`` into fragments in document order.

        Args:
            text: Remark-suppressed template text
            source_path: Path reported on every fragment
            line_index: Index over ``text``; built when omitted

        Returns:
            Fragments with zero-length spans dropped
        """
        index = line_index if line_index is not None else LineIndex(text)
        spans = list(self._split(text))

        if self.trim_control_lines:
            self._trim_control_lines(text, spans)

        fragments = []
        for span in spans:
            fragment = self._build_fragment(text, span, index, source_path)
            if fragment is not None:
                fragments.append(fragment)

        logger.debug(f"Scanned {len(fragments)} fragments from {source_path or '<text>'}")
        return fragments

    def _split(self, text: str) -> Iterator[_Span]:
        position = 0
        for match in self._span_pattern.finditer(text):
            if match.start() > position:
                yield _Span(FragmentKind.MARKUP, position, match.start())
            kind, prefix_length = classify(match.group())
            yield _Span(kind, match.start(), match.end(), prefix_length)
            position = match.end()

        if position < len(text):
            yield _Span(FragmentKind.MARKUP, position, len(text))

    def _trim_control_lines(self, text: str, spans: List[_Span]) -> None:
        for i, span in enumerate(spans):
            if span.kind in _CONTROL_LINE_EXEMPT:
                continue

            line_start = text.rfind("\n", 0, span.start) + 1
            line_end = text.find("\n", span.end)
            if line_end == -1:
                line_end = len(text)

            if text[line_start:span.start].strip(" \t") or text[span.end:line_end].strip(" \t"):
                continue

            if line_start < span.start and i > 0:
                previous = spans[i - 1]
                previous.end = max(previous.start, line_start)

            if i + 1 < len(spans) and spans[i + 1].kind is FragmentKind.MARKUP:
                following = spans[i + 1]
                following.start = min(following.end, line_end + 1)

    def _build_fragment(
        self, text: str, span: _Span, index: LineIndex, source_path: str
    ) -> Optional[Fragment]:
        if span.kind is FragmentKind.MARKUP:
            if span.start >= span.end:
                return None
            return Fragment(
                kind=span.kind,
                text=text[span.start:span.end],
                start_line=index.line_of(span.start),
                source_path=source_path,
                offset=span.start,
            )

        body_start = span.start + span.prefix_length
        body = text[body_start:span.end - len(SCRIPT_END_MARKER)]
        content = body.strip()
        if not content:
            return None

        content_start = body_start + (len(body) - len(body.lstrip()))
        return Fragment(
            kind=span.kind,
            text=_normalize_indentation(text, content_start, content, index),
            start_line=index.line_of(content_start),
            source_path=source_path,
            offset=span.start,
        )


def _normalize_indentation(text: str, content_start: int, content: str, index: LineIndex) -> str:
    """
    Remove the indentation shared by all lines of a script fragment.

    The first line is measured at its column in the source line, so code
    continuing on later lines keeps its indentation relative to it. When a
    later line sits left of that column, a first line opening a block is
    placed at the indentation of its source line instead, and any other
    first line is aligned with the shallowest later line.
    """
    if "\n" not in content:
        return content

    line_start = index.line_start(content_start)
    first, rest = content.split("\n", 1)
    prefix = text[line_start:content_start]
    shallowest = min(
        (_leading_whitespace(line) for line in rest.split("\n") if line.strip()),
        key=len,
        default=prefix,
    )

    if len(shallowest) >= len(prefix):
        padding = "".join(char if char == "\t" else " " for char in prefix)
    elif opens_block(first):
        padding = _leading_whitespace(text[line_start:])
    else:
        padding = shallowest
    return textwrap.dedent(padding + content).strip()


def _leading_whitespace(line: str) -> str:
    return line[:len(line) - len(line.lstrip())]
