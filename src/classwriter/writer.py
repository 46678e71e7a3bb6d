"""Insert generated methods and interface names into PHP class source."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

from classwriter.analyser import ClassFileAnalyser
from classwriter.cache import TokenStream
from classwriter.errors import ClassNotFoundInSource
from classwriter.lines import (
    insert_after_line,
    insert_before_line,
    newline_of,
    split_ending,
    split_lines,
    trim_snippet,
)
from classwriter.tokens import Token, TokenType

_CLASS_KEYWORD_RE = re.compile(r"\bclass\b", re.IGNORECASE)

_WRITE_POINTS = frozenset({TokenType.NEWLINE, TokenType.COMMENT, TokenType.DOC_COMMENT})


class AnchorMode(Enum):
    BEFORE = auto()
    AFTER = auto()


@dataclass(frozen=True, slots=True)
class InsertionAnchor:
    """Where and how a snippet is spliced into the source."""

    line: int
    mode: AnchorMode
    leading_newline: bool


class AppendStrategy(Enum):
    LINE = auto()  # the class body has a line break to insert after
    INLINE = auto()  # single-line body: splice right after the opening brace


class _ScanState(Enum):
    NORMAL = auto()
    INSIDE_STRING = auto()


@dataclass(frozen=True, slots=True)
class AppendPoint:
    """Result of scanning backward from the class's closing brace."""

    strategy: AppendStrategy
    token: Token


def find_append_point(tokens: TokenStream) -> AppendPoint | None:
    """Locate where a method is appended to a class body.

    Scans backward from the end of input. The first ``}`` outside a
    double-quoted string is the class's closing brace; the first line break
    or comment before it gives a LINE point, while reaching the opening ``{``
    first gives an INLINE point. Returns None if there is no closing brace.
    """
    state = _ScanState.NORMAL
    searching = False

    for tok in reversed(tokens):
        if tok.type == TokenType.QUOTE:
            if state is _ScanState.NORMAL:
                state = _ScanState.INSIDE_STRING
            else:
                state = _ScanState.NORMAL
            continue

        if state is _ScanState.INSIDE_STRING:
            continue

        if tok.type == TokenType.RBRACE:
            searching = True
            continue

        if not searching:
            continue

        if tok.type in _WRITE_POINTS:
            return AppendPoint(AppendStrategy.LINE, tok)

        if tok.type == TokenType.LBRACE:
            return AppendPoint(AppendStrategy.INLINE, tok)

    return None


class TokenizedCodeWriter:
    """Insert snippets into class source at anchors found by ClassFileAnalyser.

    All operations take the full class source and return the full new source;
    they either succeed or raise before producing anything.
    """

    def __init__(self, analyser: ClassFileAnalyser | None = None, indent: str = "    ") -> None:
        self._analyser = analyser if analyser is not None else ClassFileAnalyser()
        self._indent = indent

    @property
    def analyser(self) -> ClassFileAnalyser:
        return self._analyser

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def insert_method_first_in_class(self, source: str, method: str) -> str:
        if not self._analyser.class_has_methods(source):
            return self._write_at_end_of_class(source, method)

        line = self._analyser.get_start_line_of_first_method(source)
        return self._splice(source, method, InsertionAnchor(line, AnchorMode.BEFORE, False))

    def insert_method_last_in_class(self, source: str, method: str) -> str:
        if self._analyser.class_has_methods(source):
            line = self._analyser.get_end_line_of_last_method(source)
            return self._splice(source, method, InsertionAnchor(line, AnchorMode.AFTER, True))

        return self._write_at_end_of_class(source, method)

    def insert_after_method(self, source: str, method_name: str, method: str) -> str:
        line = self._analyser.get_end_line_of_named_method(source, method_name)
        return self._splice(source, method, InsertionAnchor(line, AnchorMode.AFTER, True))

    # ------------------------------------------------------------------
    # Interfaces
    # ------------------------------------------------------------------

    def insert_implements_in_class(self, source: str, interface: str) -> str:
        """Add interface to the class's implements clause, importing it if needed."""
        analyser = self._analyser
        nl = newline_of(source)
        lines = split_lines(source)

        interface = interface.lstrip("\\")
        interface_namespace = _namespace_of(interface)
        class_namespace = analyser.get_class_namespace(source)
        header_line = analyser.get_last_line_of_class_declaration(source)

        if class_namespace == interface_namespace:
            interface_name = interface[len(class_namespace) :].lstrip("\\")
        else:
            interface_name = _short_name_of(interface)
            use_statement = f"use {interface};{nl}"

            last_use_line = analyser.get_last_line_of_use_statements(source)
            if last_use_line is not None:
                lines.insert(last_use_line, use_statement)
                header_line += 1
            else:
                anchor = analyser.get_line_of_namespace_declaration(source)
                if anchor is None:
                    anchor = analyser.get_line_of_open_tag(source)
                if anchor is None:
                    lines[0:0] = [use_statement, nl]
                else:
                    lines[anchor:anchor] = [nl, use_statement]
                header_line += 2

        header, ending = split_ending(lines[header_line - 1])
        if _CLASS_KEYWORD_RE.search(header):
            separator = " "
        else:
            separator = nl + self._indent

        if analyser.class_implements_any_interface(source):
            addition = f",{separator}{interface_name}"
        else:
            addition = f" implements {interface_name}"

        lines[header_line - 1] = _append_to_header(header, addition) + ending
        return "".join(lines)

    # ------------------------------------------------------------------
    # Splicing
    # ------------------------------------------------------------------

    def _splice(self, source: str, method: str, anchor: InsertionAnchor) -> str:
        if anchor.mode is AnchorMode.BEFORE:
            return insert_before_line(source, method, anchor.line)
        return insert_after_line(source, method, anchor.line, anchor.leading_newline)

    def _write_at_end_of_class(self, source: str, method: str) -> str:
        point = find_append_point(self._analyser.get_tokens(source))
        if point is None:
            raise ClassNotFoundInSource(source)

        if point.strategy is AppendStrategy.LINE:
            leading = point.token.type != TokenType.NEWLINE
            return self._splice(source, method, InsertionAnchor(point.token.line, AnchorMode.AFTER, leading))

        nl = newline_of(source)
        offset = point.token.offset + 1
        return source[:offset] + nl + trim_snippet(method, nl) + nl + source[offset:]


def _namespace_of(fqn: str) -> str:
    if "\\" not in fqn:
        return ""
    return fqn.rsplit("\\", 1)[0]


def _short_name_of(fqn: str) -> str:
    return fqn.rsplit("\\", 1)[-1]


def _append_to_header(header: str, addition: str) -> str:
    """Append to a class header line, before the opening brace if it is on that line."""
    brace = header.find("{")
    if brace < 0:
        return header + addition
    head = header[:brace].rstrip()
    return f"{head}{addition} {header[brace:]}"
