"""
Python code emitter.

Renders templates as Python modules. Because Python blocks are delimited by
indentation, a block may be opened in one script fragment and closed in a
later one:

    <# for item in items: #>
    - <#= item #>
    <# end #>

A script fragment whose last significant token is ``:`` opens a block,
``end`` (optionally followed by one word) closes it, and a fragment starting
with ``elif``, ``else``, ``except`` or ``finally`` closes the current block
and opens its continuation. Markup and scripts between them are emitted
inside the block.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from ..parsing.statements import block_header_line
from ..utils.constants import (
    CONTEXT_FIELD_NAME,
    INITIALIZATION_METHOD_NAME,
    LINE_MARKER_PREFIX,
    LINE_MARKER_RESET,
    MAIN_METHOD_NAME,
    OUTPUT_FIELD_NAME,
    OUTPUT_WRITER_TYPE_NAME,
    PROPERTY_INITIALIZATION_METHOD_NAME,
    PYTHON_LANGUAGE_IDENTIFIER,
    TRANSFORMER_FIELD_NAME,
    TRANSFORMER_TYPE_NAME,
)
from ..utils.exceptions import SourceReference, TemplateParseError
from .base import MarkerFactory, StatementEmitter, UnitEmitter
from .factory import register_emitter

INDENT = "    "

_BLOCK_END = re.compile(r"^end(?:\s+\w+)?$")
_CONTINUATION = re.compile(r"^(?:elif|else|except|finally)\b")


@dataclass
class _Block:
    """An indentation block left open across fragments."""

    header_indent: str
    body_indent: str
    opened_at: SourceReference
    has_body: bool = False


def _leading_whitespace(line: str) -> str:
    return line[:len(line) - len(line.lstrip())]


class PythonStatementEmitter(StatementEmitter):
    """Emits the statements of the ``_main`` method."""

    def __init__(self, marker_factory: MarkerFactory):
        super().__init__(marker_factory)
        self._lines: List[str] = []
        self._blocks: List[_Block] = []
        self._has_statements = False

    @property
    def indent(self) -> str:
        """Indentation of code emitted at the current position."""
        return self._blocks[-1].body_indent if self._blocks else ""

    @property
    def depth(self) -> int:
        """Number of blocks currently open."""
        return len(self._blocks)

    @property
    def is_empty(self) -> bool:
        return not self._has_statements

    def emit_literal_write(self, text: str, line: int = 0, path: Optional[str] = None) -> None:
        """
        Write ``text`` verbatim, one write call per line.

        Each call writes the line with its terminating line break, as a
        Python string literal produced by ``repr``.
        """
        if not text:
            return

        self._append_marker(path, line)
        segments = text.split("\n")
        for i, segment in enumerate(segments):
            chunk = segment + "\n" if i < len(segments) - 1 else segment
            if chunk:
                self._append_statement(f"{OUTPUT_FIELD_NAME}.write({chunk!r})")

    def emit_write_line(self) -> None:
        self._append_statement(f"{OUTPUT_FIELD_NAME}.write_line()")

    def emit_expression_write(self, expression: str, line: int, path: str) -> None:
        """
        Write the string form of ``expression``.

        Multi-line expressions are wrapped in the call's parentheses; the
        closing parenthesis moves to its own line when the last line may
        end in a comment.
        """
        self._append_marker(path, line)
        lines = expression.split("\n")
        if len(lines) == 1 and "#" not in expression:
            self._append_statement(f"{OUTPUT_FIELD_NAME}.write({expression})")
            return

        lines[0] = f"{OUTPUT_FIELD_NAME}.write({lines[0]}"
        if "#" in lines[-1]:
            lines.append(")")
        else:
            lines[-1] += ")"
        self._append_code(lines, self.indent)

    def emit_raw_fragment(self, text: str, line: int, path: str) -> None:
        """
        Append script code, tracking blocks opened and closed by it.

        Raises:
            TemplateParseError: If ``end`` or a continuation clause appears
                without an open block
        """
        reference = SourceReference(path or None, line)
        stripped = text.strip()

        if _BLOCK_END.match(stripped):
            self._close_block(reference, stripped)
            return

        indent = self.indent
        if _CONTINUATION.match(stripped):
            indent = self._close_block(reference, stripped.split(None, 1)[0].rstrip(":")).header_indent

        lines = text.split("\n")
        self._append_marker(path, line)
        self._append_code(lines, indent)

        header = block_header_line(text)
        if header is not None:
            body_indent = indent + _leading_whitespace(lines[header]) + INDENT
            self._blocks.append(_Block(indent, body_indent, reference))

    def statements(self) -> List[str]:
        """
        Render the accumulated statements.

        Blocks still open are closed implicitly; an empty innermost block
        receives ``pass``.
        """
        lines = list(self._lines)
        if self._blocks and not self._blocks[-1].has_body:
            lines.append(self._blocks[-1].body_indent + "pass")
        return lines

    def _close_block(self, reference: SourceReference, keyword: str) -> _Block:
        if not self._blocks:
            raise TemplateParseError(f"'{keyword}' without an open block", reference)

        block = self._blocks.pop()
        if not block.has_body:
            self._lines.append(block.body_indent + "pass")
        return block

    def _append_marker(self, path: Optional[str], line: int) -> None:
        marker = self._marker(path, line)
        if marker is not None:
            self._lines.append(self.indent + marker)

    def _append_statement(self, statement: str) -> None:
        self._append_code([statement], self.indent)

    def _append_code(self, lines: List[str], indent: str) -> None:
        for line in lines:
            self._lines.append(indent + line if line.strip() else "")
        if self._blocks:
            self._blocks[-1].has_body = True
        self._has_statements = True


class PythonUnitEmitter(UnitEmitter):
    """
    Composes a Python module holding the generated template class.

    The unit is laid out as future import, namespace imports, namespace
    declaration and the class with its field annotations, ``_initialize``,
    ``_initialize_properties``, class-body members and ``_main``.
    """

    def _create_statement_emitter(self) -> PythonStatementEmitter:
        return PythonStatementEmitter(self.emit_provenance_marker)

    def format_marker(self, path: str, line: int) -> str:
        escaped = path.replace("\\", "\\\\").replace('"', '\\"')
        return f'{LINE_MARKER_PREFIX} {line} "{escaped}"'

    def format_marker_reset(self) -> str:
        return f"{LINE_MARKER_PREFIX} {LINE_MARKER_RESET}"

    def emit_class_member(self, text: str, line: int, path: str) -> None:
        marker = self.emit_provenance_marker(path, line)
        if marker is not None:
            self._members.append(marker)
        self._members.extend(line_text if line_text.strip() else "" for line_text in text.split("\n"))
        self._members.append("")

    def as_remark(self, text: str) -> str:
        return "\n".join(f"# {line}" if line else "#" for line in text.split("\n"))

    def compose(self) -> str:
        lines = ["from __future__ import annotations", ""]

        if self._namespace_references:
            lines.extend(self._import_lines())
            lines.append("")

        lines.append(f"__name__ = {self.namespace_name!r}")
        lines.extend(["", ""])
        lines.append(f"class {self.class_name}:")
        lines.extend(_indented(self._class_body()))
        return "\n".join(lines) + "\n"

    def _import_lines(self) -> List[str]:
        """Import each referenced namespace, mapped to its declaring directive."""
        lines = []
        mapped = False
        for reference in self._namespace_references:
            marker = None
            if reference.source_path is not None:
                marker = self.emit_provenance_marker(reference.source_path, reference.line)
            if marker is not None:
                lines.append(marker)
                mapped = True
            elif mapped:
                lines.append(self.format_marker_reset())
                mapped = False
            lines.append(f"import {reference.namespace}")

        if mapped:
            lines.append(self.format_marker_reset())
        return lines

    def _class_body(self) -> List[str]:
        body = [
            f"{CONTEXT_FIELD_NAME}: {self._context_type or 'object'}",
            f"{OUTPUT_FIELD_NAME}: {OUTPUT_WRITER_TYPE_NAME}",
            f"{TRANSFORMER_FIELD_NAME}: {TRANSFORMER_TYPE_NAME}",
        ]
        body.extend(f"{prop.name}: {prop.type_name}" for prop in self._properties)
        body.append("")

        body.append(f"def {INITIALIZATION_METHOD_NAME}(self, output, context, transformer):")
        body.extend(
            _indented(
                [
                    f"self.{OUTPUT_FIELD_NAME} = output",
                    f"self.{CONTEXT_FIELD_NAME} = context",
                    f"self.{TRANSFORMER_FIELD_NAME} = transformer",
                ]
            )
        )
        body.append("")

        parameters = ", ".join(["self"] + [prop.name for prop in self._properties])
        body.append(f"def {PROPERTY_INITIALIZATION_METHOD_NAME}({parameters}):")
        assignments = [f"self.{prop.name} = {prop.name}" for prop in self._properties]
        body.extend(_indented(assignments or ["pass"]))
        body.append("")

        if self._members:
            body.extend(self._members)
            if self.include_source_references:
                body.append(self.format_marker_reset())
                body.append("")

        body.append(f"def {MAIN_METHOD_NAME}(self):")
        aliases = [OUTPUT_FIELD_NAME, CONTEXT_FIELD_NAME, TRANSFORMER_FIELD_NAME]
        aliases.extend(prop.name for prop in self._properties)
        main = [f"{name} = self.{name}" for name in aliases]
        main.extend(self.body.statements())
        body.extend(_indented(main))
        return body


def _indented(lines: List[str]) -> List[str]:
    return [INDENT + line if line else "" for line in lines]


register_emitter(PYTHON_LANGUAGE_IDENTIFIER, PythonUnitEmitter)
