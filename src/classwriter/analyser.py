"""Structural queries over the token stream of a single PHP class file.

Every query answers a "where is X" question with a 1-based line number that
the writer uses directly as an insertion anchor. Boundaries are inferred from
the flat token stream by brace-depth counting and forward/backward scans; no
syntax tree is built.

Limitation: the source must contain exactly one class. This is not checked.
With several classes, or with malformed code, queries return a best-effort
answer (usually about the first class) rather than failing.
"""

from __future__ import annotations

from classwriter.cache import TokenCache, TokenStream
from classwriter.errors import ClassNotFoundInSource, NamedMethodNotFoundException, NoMethodFoundInClass
from classwriter.tokens import MODIFIERS, Token, TokenType

# Tokens allowed between a doc comment and the function keyword it documents
_DOCBLOCK_GAP = MODIFIERS | {TokenType.WS, TokenType.NEWLINE}

_SKIPPABLE = frozenset({TokenType.WS, TokenType.NEWLINE, TokenType.COMMENT, TokenType.DOC_COMMENT})


def _opens_brace(tok: Token) -> bool:
    # Match on literal text: the { of "{$x}" counts as much as a plain one.
    return tok.text == "{" or tok.type == TokenType.DOLLAR_OPEN_CURLY_BRACES


def _closes_brace(tok: Token) -> bool:
    return tok.text == "}"


class ClassFileAnalyser:
    """Read-only structural queries on PHP class source text."""

    def __init__(self, cache: TokenCache | None = None) -> None:
        self._cache = cache if cache is not None else TokenCache()

    @property
    def cache(self) -> TokenCache:
        return self._cache

    def get_tokens(self, source: str) -> TokenStream:
        """Return the (cached) token stream for source."""
        return self._cache.get_tokens(source)

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def class_has_methods(self, source: str) -> bool:
        return any(tok.type == TokenType.FUNCTION for tok in self.get_tokens(source))

    def get_start_line_of_first_method(self, source: str) -> int:
        """Line of the first method, or of the doc comment directly above it."""
        tokens = self.get_tokens(source)
        index = self._find_index_of_first_method(tokens, source)
        return tokens[self._offset_for_docblock(tokens, index)].line

    def get_end_line_of_last_method(self, source: str) -> int:
        """Anchor line after which a new last method is inserted.

        This is the line of the token following the last ``}`` before the
        class's own closing brace.
        """
        tokens = self.get_tokens(source)
        class_index = self._find_index_of_class(tokens, source)
        class_end = self._find_index_of_block_end(tokens, class_index)

        for i in range(class_end - 1, 0, -1):
            if _closes_brace(tokens[i]):
                return _line_after(tokens, i)

        raise NoMethodFoundInClass(source, tokens[class_index].line)

    def get_end_line_of_named_method(self, source: str, method_name: str) -> int:
        """Anchor line after which a method following method_name is inserted."""
        tokens = self.get_tokens(source)
        index = self._find_index_of_named_method(tokens, method_name, source)
        end = self._find_index_of_block_end(tokens, index)
        return _line_after(tokens, end)

    # ------------------------------------------------------------------
    # Class header, namespace and imports
    # ------------------------------------------------------------------

    def class_implements_any_interface(self, source: str) -> bool:
        return any(tok.type == TokenType.IMPLEMENTS for tok in self.get_tokens(source))

    def get_class_namespace(self, source: str) -> str:
        """Namespace of the class, e.g. ``App\\Model``, or ``""`` if none."""
        tokens = self.get_tokens(source)
        for i, tok in enumerate(tokens):
            if tok.type != TokenType.NAMESPACE:
                continue
            parts: list[str] = []
            for part in tokens[i + 1 :]:
                if part.line != tok.line:
                    break
                if part.type == TokenType.IDENTIFIER:
                    parts.append(part.text)
            return "\\".join(parts)
        return ""

    def get_last_line_of_use_statements(self, source: str) -> int | None:
        """Line of the last ``use`` keyword before the class keyword."""
        last_line: int | None = None
        for tok in self.get_tokens(source):
            if tok.type == TokenType.USE:
                last_line = tok.line
            elif tok.type == TokenType.CLASS:
                return last_line
        return last_line

    def get_line_of_namespace_declaration(self, source: str) -> int | None:
        for tok in self.get_tokens(source):
            if tok.type == TokenType.NAMESPACE:
                return tok.line
        return None

    def get_line_of_open_tag(self, source: str) -> int | None:
        for tok in self.get_tokens(source):
            if tok.type == TokenType.OPEN_TAG:
                return tok.line
        return None

    def get_last_line_of_class_declaration(self, source: str) -> int:
        """Last line of the class header.

        With an implements clause this is the line of the last interface name
        before the opening brace; otherwise the class keyword's line.
        """
        tokens = self.get_tokens(source)
        index = self._find_index_of_implements_end(tokens)
        if index is None:
            index = self._find_index_of_class(tokens, source)
        return tokens[index].line

    def get_class_name(self, source: str) -> str:
        tokens = self.get_tokens(source)
        index = self._find_index_of_class(tokens, source)
        for tok in tokens[index + 1 :]:
            if tok.type in _SKIPPABLE:
                continue
            return tok.text if tok.type == TokenType.IDENTIFIER else ""
        return ""

    # ------------------------------------------------------------------
    # Token scans
    # ------------------------------------------------------------------

    def _find_index_of_first_method(self, tokens: TokenStream, source: str) -> int:
        for i, tok in enumerate(tokens):
            if tok.type == TokenType.FUNCTION:
                return i
        raise NoMethodFoundInClass(source)

    def _offset_for_docblock(self, tokens: TokenStream, index: int) -> int:
        for i in range(index - 1, -1, -1):
            tok = tokens[i]
            if tok.type in _DOCBLOCK_GAP:
                continue
            if tok.type == TokenType.DOC_COMMENT:
                return i
            break
        return index

    def _find_index_of_named_method(self, tokens: TokenStream, method_name: str, source: str) -> int:
        # The first identifier after "function" is taken as the method name; if
        # it does not match, the search waits for the next "function" keyword.
        searching = False
        for i, tok in enumerate(tokens):
            if tok.type == TokenType.FUNCTION:
                searching = True
                continue
            if searching and tok.type == TokenType.IDENTIFIER:
                if tok.text == method_name:
                    return i
                searching = False
        raise NamedMethodNotFoundException(method_name, source)

    def _find_index_of_block_end(self, tokens: TokenStream, start: int) -> int:
        """Index of the ``}`` closing the first block opened at or after start."""
        depth = 0
        for i in range(start, len(tokens)):
            tok = tokens[i]
            if _opens_brace(tok):
                depth += 1
            elif _closes_brace(tok):
                depth -= 1
                if depth == 0:
                    return i
        # Unterminated block: best effort, treat the end of input as its end
        return len(tokens) - 1

    def _find_index_of_class(self, tokens: TokenStream, source: str) -> int:
        for i, tok in enumerate(tokens):
            if tok.type == TokenType.CLASS:
                return i
        raise ClassNotFoundInSource(source)

    def _find_index_of_implements_end(self, tokens: TokenStream) -> int | None:
        for i, tok in enumerate(tokens):
            if tok.type != TokenType.IMPLEMENTS:
                continue
            for j in range(i + 1, len(tokens)):
                if tokens[j].type == TokenType.LBRACE:
                    return self._skip_back_over_trivia(tokens, j - 1, i)
            return None
        return None

    def _skip_back_over_trivia(self, tokens: TokenStream, index: int, floor: int) -> int:
        # The last interface name, not the blank lines or indent before the brace
        while index > floor and tokens[index].type in _SKIPPABLE:
            index -= 1
        return index


def _line_after(tokens: TokenStream, index: int) -> int:
    """Line of the token following index (the brace's own line at end of input)."""
    if index + 1 < len(tokens):
        return tokens[index + 1].line
    return tokens[index].line
