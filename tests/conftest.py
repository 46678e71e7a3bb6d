"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from classwriter.analyser import ClassFileAnalyser
from classwriter.cache import TokenCache
from classwriter.lexer import tokenize
from classwriter.tokens import Token, TokenType
from classwriter.writer import TokenizedCodeWriter

USER_CLASS = """\
<?php

namespace Acme\\Model;

use Acme\\Contract\\Foo;
use Acme\\Contract\\Bar;

final class User implements Foo
{
    private $name;

    /**
     * Returns the name.
     */
    public function getName()
    {
        return $this->name;
    }

    public static function create($name)
    {
        $user = new self();
        $user->name = "{$name}";

        return $user;
    }
}
"""

EMPTY_CLASS = "class Foo\n{\n}\n"


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns all tokens."""

    def _lex(source: str) -> list[Token]:
        return tokenize(source)

    return _lex


@pytest.fixture
def lex_code():
    """Return a helper that tokenizes source and drops whitespace and newlines."""

    def _lex(source: str) -> list[Token]:
        return [t for t in tokenize(source) if t.type not in (TokenType.WS, TokenType.NEWLINE)]

    return _lex


@pytest.fixture
def cache() -> TokenCache:
    return TokenCache()


@pytest.fixture
def analyser(cache: TokenCache) -> ClassFileAnalyser:
    return ClassFileAnalyser(cache)


@pytest.fixture
def writer(analyser: ClassFileAnalyser) -> TokenizedCodeWriter:
    return TokenizedCodeWriter(analyser)


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token texts match the expected list."""
    actual = [t.text for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
