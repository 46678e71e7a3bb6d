"""PHP lexer — converts class source text into a flat token stream.

Only as much of PHP is recognised as the analyser needs to find braces,
keywords and line numbers reliably: comments, strings (so their contents never
look like code), interpolation braces and names. Everything else becomes
single-character PUNCT tokens. The lexer never fails; unterminated comments and
strings simply run to the end of the input.
"""

from __future__ import annotations

from enum import Enum, auto

from classwriter.tokens import KEYWORDS, Token, TokenType, is_name_char, is_name_start

_TRIVIA = frozenset({TokenType.WS, TokenType.NEWLINE, TokenType.COMMENT, TokenType.DOC_COMMENT})

# Operators after which a name is always a plain identifier ($x->class, Foo::class)
_MEMBER_ACCESS = frozenset({"->", "?->", "::"})


class _State(Enum):
    HTML = auto()
    CODE = auto()
    DOUBLE_QUOTED = auto()
    INTERPOLATION = auto()


class Lexer:
    """Tokenize PHP source text into a stream of Token objects."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._tokens: list[Token] = []
        self._state_stack: list[tuple[_State, int]] = []  # (state, brace_depth)
        self._state = _State.HTML if _has_open_tag(source) else _State.CODE
        self._brace_depth = 0
        self._prev: Token | None = None  # last non-trivia token
        self._prev2: Token | None = None

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            if self._state == _State.HTML:
                self._lex_html()
            elif self._state == _State.DOUBLE_QUOTED:
                self._lex_double_quoted()
            else:
                self._lex_code()
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _startswith(self, text: str) -> bool:
        return self._source.startswith(text, self._pos)

    def _advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self._pos >= len(self._source):
                return
            ch = self._source[self._pos]
            self._pos += 1
            if ch == "\n" or (ch == "\r" and self._peek() != "\n"):
                self._line += 1

    def _advance_to(self, end: int) -> None:
        self._advance(min(end, len(self._source)) - self._pos)

    def _emit(self, tt: TokenType, start: int, line: int) -> Token:
        tok = Token(tt, self._source[start : self._pos], line, start)
        self._tokens.append(tok)
        if tt not in _TRIVIA:
            self._prev2 = self._prev
            self._prev = tok
        return tok

    # ------------------------------------------------------------------
    # State management
    # ------------------------------------------------------------------

    def _push_state(self, state: _State, brace_depth: int = 0) -> None:
        self._state_stack.append((self._state, self._brace_depth))
        self._state = state
        self._brace_depth = brace_depth

    def _pop_state(self) -> None:
        if self._state_stack:
            self._state, self._brace_depth = self._state_stack.pop()
        else:
            self._state, self._brace_depth = _State.CODE, 0

    # ------------------------------------------------------------------
    # Inline HTML and tags
    # ------------------------------------------------------------------

    def _lex_html(self) -> None:
        start, line = self._pos, self._line
        idx = _find_open_tag(self._source, self._pos)
        if idx != self._pos:
            self._advance_to(len(self._source) if idx < 0 else idx)
            self._emit(TokenType.INLINE_HTML, start, line)
            return

        start, line = self._pos, self._line
        self._advance(5 if self._startswith("<?php") else 3)
        self._emit(TokenType.OPEN_TAG, start, line)
        self._state = _State.CODE

    # ------------------------------------------------------------------
    # Code mode (also used inside {$...} interpolation)
    # ------------------------------------------------------------------

    def _lex_code(self) -> None:
        ch = self._peek()
        start, line = self._pos, self._line

        if ch == "\n" or ch == "\r":
            self._advance(2 if self._startswith("\r\n") else 1)
            self._emit(TokenType.NEWLINE, start, line)
            return

        if ch in " \t\f\v":
            while self._peek() in (" ", "\t", "\f", "\v"):
                self._advance()
            self._emit(TokenType.WS, start, line)
            return

        if self._state == _State.CODE and self._startswith("?>"):
            self._advance(2)
            self._emit(TokenType.CLOSE_TAG, start, line)
            self._state = _State.HTML
            return

        if self._startswith("#["):
            self._advance(2)
            self._emit(TokenType.ATTRIBUTE, start, line)
            return

        if ch == "#" or self._startswith("//"):
            self._lex_line_comment()
            return

        if self._startswith("/*"):
            self._lex_block_comment()
            return

        if ch == "$" and is_name_start(self._peek(1)):
            self._advance()
            self._lex_name_chars()
            self._emit(TokenType.VARIABLE, start, line)
            return

        if is_name_start(ch):
            self._lex_name()
            return

        if ch.isdigit():
            while is_name_char(self._peek()):
                self._advance()
            self._emit(TokenType.NUMBER, start, line)
            return

        if ch == "'" or ch == "`":
            self._lex_quoted_literal(ch)
            return

        if ch == '"':
            self._lex_double_quote_open()
            return

        if self._startswith("<<<") and self._lex_heredoc():
            return

        if ch == "{":
            self._advance()
            if self._state == _State.INTERPOLATION:
                self._brace_depth += 1
            self._emit(TokenType.LBRACE, start, line)
            return

        if ch == "}":
            self._advance()
            self._emit(TokenType.RBRACE, start, line)
            if self._state == _State.INTERPOLATION:
                self._brace_depth -= 1
                if self._brace_depth == 0:
                    self._pop_state()
            return

        if ch == "\\":
            self._advance()
            self._emit(TokenType.NS_SEPARATOR, start, line)
            return

        for op in ("?->", "->", "::"):
            if self._startswith(op):
                self._advance(len(op))
                self._emit(TokenType.PUNCT, start, line)
                return

        self._advance()
        self._emit(TokenType.PUNCT, start, line)

    def _lex_name_chars(self) -> None:
        while is_name_char(self._peek()):
            self._advance()

    def _lex_name(self) -> None:
        start, line = self._pos, self._line
        self._lex_name_chars()
        word = self._source[start : self._pos].lower()
        tt = KEYWORDS.get(word, TokenType.IDENTIFIER)
        if tt is not TokenType.IDENTIFIER and (self._peek() == "\\" or self._forces_identifier(tt)):
            # Leading segment of a qualified name (namespace Public\Api)
            tt = TokenType.IDENTIFIER
        self._emit(tt, start, line)

    def _forces_identifier(self, tt: TokenType) -> bool:
        """Return True if a keyword in the current position is really a name."""
        prev = self._prev
        if prev is None:
            return False
        if prev.type == TokenType.PUNCT and prev.text in _MEMBER_ACCESS:
            return True
        if prev.type in (TokenType.NS_SEPARATOR, TokenType.FUNCTION):
            return True
        # function &name()
        if prev.text == "&" and self._prev2 is not None and self._prev2.type == TokenType.FUNCTION:
            return True
        # use function Foo\bar;
        return prev.type == TokenType.USE and tt == TokenType.FUNCTION

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _lex_line_comment(self) -> None:
        start, line = self._pos, self._line
        while self._pos < len(self._source):
            if self._peek() in ("\n", "\r") or self._startswith("?>"):
                break
            self._advance()
        self._emit(TokenType.COMMENT, start, line)

    def _lex_block_comment(self) -> None:
        start, line = self._pos, self._line
        is_doc = self._startswith("/**") and self._peek(3) in (" ", "\t", "\n", "\r")
        end = self._source.find("*/", self._pos + 2)
        self._advance_to(len(self._source) if end < 0 else end + 2)
        self._emit(TokenType.DOC_COMMENT if is_doc else TokenType.COMMENT, start, line)

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    def _lex_quoted_literal(self, quote: str) -> None:
        """Single-quoted and backtick strings are emitted as one opaque token."""
        start, line = self._pos, self._line
        self._advance()
        while self._pos < len(self._source):
            ch = self._peek()
            if ch == "\\":
                self._advance(2)
                continue
            self._advance()
            if ch == quote:
                break
        self._emit(TokenType.STRING, start, line)

    def _lex_double_quote_open(self) -> None:
        start, line = self._pos, self._line
        end, interpolated = _scan_double_quoted(self._source, self._pos)
        if not interpolated:
            self._advance_to(end)
            self._emit(TokenType.STRING, start, line)
            return

        self._advance()
        self._emit(TokenType.QUOTE, start, line)
        self._push_state(_State.DOUBLE_QUOTED)

    def _lex_double_quoted(self) -> None:
        start, line = self._pos, self._line
        ch = self._peek()

        if ch == '"':
            self._advance()
            self._emit(TokenType.QUOTE, start, line)
            self._pop_state()
            return

        if ch == "$" and is_name_start(self._peek(1)):
            self._advance()
            self._lex_name_chars()
            self._emit(TokenType.VARIABLE, start, line)
            return

        if self._startswith("{$"):
            self._advance()
            self._emit(TokenType.CURLY_OPEN, start, line)
            self._push_state(_State.INTERPOLATION, 1)
            return

        if self._startswith("${"):
            self._advance(2)
            self._emit(TokenType.DOLLAR_OPEN_CURLY_BRACES, start, line)
            self._push_state(_State.INTERPOLATION, 1)
            return

        # Accumulate literal text up to the next quote or interpolation
        while self._pos < len(self._source):
            c = self._peek()
            if c == "\\":
                self._advance(2)
                continue
            if c == '"' or self._startswith("{$") or self._startswith("${"):
                break
            if c == "$" and is_name_start(self._peek(1)):
                break
            self._advance()
        self._emit(TokenType.ENCAPSED, start, line)

    def _lex_heredoc(self) -> bool:
        """Lex a heredoc or nowdoc as a single STRING token.

        Returns False (consuming nothing) if the text is not a heredoc opener.
        """
        start, line = self._pos, self._line
        i = self._pos + 3
        src = self._source
        while i < len(src) and src[i] in " \t":
            i += 1
        quote = src[i] if i < len(src) and src[i] in "'\"" else ""
        if quote:
            i += 1
        label_start = i
        while i < len(src) and is_name_char(src[i]):
            i += 1
        label = src[label_start:i]
        if not label or not is_name_start(label[0]):
            return False
        if quote:
            if i >= len(src) or src[i] != quote:
                return False
            i += 1
        if i < len(src) and src[i] not in "\r\n":
            return False

        end = _find_heredoc_end(src, i, label)
        self._advance_to(end)
        self._emit(TokenType.STRING, start, line)
        return True


def _has_open_tag(source: str) -> bool:
    return _find_open_tag(source, 0) >= 0


def _find_open_tag(source: str, pos: int) -> int:
    """Return the offset of the next <?php or <?= tag at or after pos, or -1."""
    candidates = [i for i in (source.find("<?php", pos), source.find("<?=", pos)) if i >= 0]
    return min(candidates) if candidates else -1


def _scan_double_quoted(source: str, pos: int) -> tuple[int, bool]:
    """Scan a double-quoted string starting at pos.

    Returns (end offset after the closing quote, whether it interpolates).
    """
    i = pos + 1
    interpolated = False
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return i + 1, interpolated
        nxt = source[i + 1] if i + 1 < len(source) else ""
        if ch == "$" and (is_name_start(nxt) or nxt == "{"):
            interpolated = True
        elif ch == "{" and nxt == "$":
            interpolated = True
        i += 1
    return len(source), interpolated


def _find_heredoc_end(source: str, pos: int, label: str) -> int:
    """Return the offset just past the closing label of a heredoc body."""
    i = pos
    while i < len(source):
        nl = source.find("\n", i)
        if nl < 0:
            return len(source)
        i = nl + 1
        j = i
        while j < len(source) and source[j] in " \t":
            j += 1
        if source.startswith(label, j):
            k = j + len(label)
            if k >= len(source) or not is_name_char(source[k]):
                return k
    return len(source)


def tokenize(source: str) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source).tokenize()
