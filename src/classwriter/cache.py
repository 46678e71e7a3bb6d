"""Memoized token streams, keyed by exact source text."""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field

from classwriter.lexer import tokenize
from classwriter.tokens import Token

TokenStream = tuple[Token, ...]

DEFAULT_MAXSIZE = 128


@dataclass
class TokenCache:
    """LRU cache of token streams.

    ``maxsize`` bounds the number of distinct sources retained; ``None`` keeps
    every entry. Reads of cached entries are safe from several threads; a miss
    racing another miss may lex the same text twice, which is harmless since
    lexing is deterministic.
    """

    maxsize: int | None = DEFAULT_MAXSIZE
    hits: int = field(default=0, init=False)
    misses: int = field(default=0, init=False)
    _entries: OrderedDict[str, TokenStream] = field(default_factory=OrderedDict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def get_tokens(self, source: str) -> TokenStream:
        """Return the token stream for source, lexing it at most once while cached."""
        with self._lock:
            tokens = self._entries.get(source)
            if tokens is not None:
                self._entries.move_to_end(source)
                self.hits += 1
                return tokens

        tokens = tuple(tokenize(source))

        with self._lock:
            self.misses += 1
            self._entries[source] = tokens
            self._entries.move_to_end(source)
            if self.maxsize is not None:
                while len(self._entries) > self.maxsize:
                    self._entries.popitem(last=False)
        return tokens

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, source: object) -> bool:
        return source in self._entries
