"""Line-based splicing of snippets into source text.

Line numbers are 1-based and count ``\\n``, ``\\r\\n`` and a lone ``\\r`` as
line breaks, the same way the lexer numbers token lines. Every original line
keeps its own ending; inserted text uses the document's dominant ending.
"""

from __future__ import annotations


def newline_of(text: str) -> str:
    """Return the line ending used by text: ``\\r\\n`` if present, else ``\\n``."""
    return "\r\n" if "\r\n" in text else "\n"


def split_lines(text: str) -> list[str]:
    """Split text into lines, each keeping its own line ending."""
    lines: list[str] = []
    start = i = 0
    while i < len(text):
        if text[i] in "\r\n":
            end = i + 2 if text.startswith("\r\n", i) else i + 1
            lines.append(text[start:end])
            start = i = end
            continue
        i += 1
    if start < len(text):
        lines.append(text[start:])
    return lines


def split_ending(line: str) -> tuple[str, str]:
    """Split one line from split_lines into (content, line ending)."""
    content = line.rstrip("\r\n")
    return content, line[len(content) :]


def trim_snippet(snippet: str, newline: str = "\n") -> str:
    """Strip leading/trailing line breaks and convert line endings to newline."""
    body = snippet.strip("\r\n").replace("\r\n", "\n")
    if newline != "\n":
        body = body.replace("\n", newline)
    return body


def _is_terminated(head: str) -> bool:
    return not head or head.endswith(("\n", "\r"))


def insert_after_line(text: str, insert_text: str, line: int, leading_newline: bool = True) -> str:
    """Insert insert_text after 1-based line, optionally preceded by an empty line.

    The rest of the document is left byte-for-byte unchanged.
    """
    nl = newline_of(text)
    lines = split_lines(text)
    line = max(line, 0)
    head, tail = "".join(lines[:line]), "".join(lines[line:])

    snippet = trim_snippet(insert_text, nl)
    if leading_newline:
        snippet = nl + snippet

    if not _is_terminated(head):
        # Appending after an unterminated last line
        return head + nl + snippet
    return head + snippet + nl + tail


def insert_before_line(text: str, insert_text: str, line: int) -> str:
    """Insert insert_text before 1-based line, followed by an empty line."""
    nl = newline_of(text)
    lines = split_lines(text)
    idx = max(line - 1, 0)
    head, tail = "".join(lines[:idx]), "".join(lines[idx:])

    snippet = trim_snippet(insert_text, nl)

    if not _is_terminated(head):
        return head + nl + snippet + nl
    return head + snippet + nl + nl + tail
