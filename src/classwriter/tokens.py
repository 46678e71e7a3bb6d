"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Outside PHP code
    INLINE_HTML = auto()  # text before <?php
    OPEN_TAG = auto()  # <?php or <?=
    CLOSE_TAG = auto()  # ?>

    # Whitespace and comments
    WS = auto()  # horizontal whitespace (spaces/tabs)
    NEWLINE = auto()  # \n, \r\n or \r
    COMMENT = auto()  # // ..., # ..., /* ... */
    DOC_COMMENT = auto()  # /** ... */

    # Keywords the analyser cares about
    FUNCTION = auto()
    CLASS = auto()
    NAMESPACE = auto()
    USE = auto()
    IMPLEMENTS = auto()
    EXTENDS = auto()

    # Member modifiers
    FINAL = auto()
    ABSTRACT = auto()
    PUBLIC = auto()
    PRIVATE = auto()
    PROTECTED = auto()
    STATIC = auto()

    # Content
    IDENTIFIER = auto()  # names, including any keyword we do not track
    VARIABLE = auto()  # $name
    NUMBER = auto()
    STRING = auto()  # non-interpolating string literal, heredoc, nowdoc
    NS_SEPARATOR = auto()  # \
    ATTRIBUTE = auto()  # #[
    PUNCT = auto()  # any other single character

    # Structural punctuation
    LBRACE = auto()  # {
    RBRACE = auto()  # }

    # Interpolated string sub-tokens
    QUOTE = auto()  # opening or closing " of an interpolated string
    ENCAPSED = auto()  # literal text segment within an interpolated string
    CURLY_OPEN = auto()  # the { of {$expr}
    DOLLAR_OPEN_CURLY_BRACES = auto()  # ${


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token: type, literal source text, 1-based start line, 0-based offset."""

    type: TokenType
    text: str
    line: int
    offset: int


KEYWORDS: dict[str, TokenType] = {
    "function": TokenType.FUNCTION,
    "class": TokenType.CLASS,
    "namespace": TokenType.NAMESPACE,
    "use": TokenType.USE,
    "implements": TokenType.IMPLEMENTS,
    "extends": TokenType.EXTENDS,
    "final": TokenType.FINAL,
    "abstract": TokenType.ABSTRACT,
    "public": TokenType.PUBLIC,
    "private": TokenType.PRIVATE,
    "protected": TokenType.PROTECTED,
    "static": TokenType.STATIC,
}

MODIFIERS = frozenset(
    {
        TokenType.FINAL,
        TokenType.ABSTRACT,
        TokenType.PUBLIC,
        TokenType.PRIVATE,
        TokenType.PROTECTED,
        TokenType.STATIC,
    }
)


def is_name_start(ch: str) -> bool:
    """Return True if ch may start a PHP name."""
    return ch.isalpha() or ch == "_" or (ch != "" and ord(ch) >= 0x80)


def is_name_char(ch: str) -> bool:
    """Return True if ch may continue a PHP name."""
    return is_name_start(ch) or ch.isdigit()
