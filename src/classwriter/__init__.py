"""Token-driven insertion of generated code into PHP class source."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from classwriter.writer import TokenizedCodeWriter

__version__ = "0.1.0"

_default_writer: TokenizedCodeWriter | None = None


def default_writer() -> TokenizedCodeWriter:
    """Return a process-wide writer sharing one token cache."""
    global _default_writer
    if _default_writer is None:
        from classwriter.writer import TokenizedCodeWriter

        _default_writer = TokenizedCodeWriter()
    return _default_writer


def insert_method(source: str, method: str, *, first: bool = False, after: str | None = None) -> str:
    """Insert a method last in the class (or first, or after method ``after``)."""
    writer = default_writer()
    if after is not None:
        return writer.insert_after_method(source, after, method)
    if first:
        return writer.insert_method_first_in_class(source, method)
    return writer.insert_method_last_in_class(source, method)


def insert_implements(source: str, interface: str) -> str:
    """Add interface to the class's implements clause, importing it if needed."""
    return default_writer().insert_implements_in_class(source, interface)
