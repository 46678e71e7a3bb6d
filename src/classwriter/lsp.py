"""Minimal LSP server for classwriter — insertion commands only."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from lsprotocol.types import (
    ApplyWorkspaceEditParams,
    MessageType,
    Position,
    Range,
    ShowMessageParams,
    TextDocumentSyncKind,
    TextEdit,
    WorkspaceEdit,
)
from pygls.lsp.server import LanguageServer

from classwriter.errors import ClassWriterError
from classwriter.writer import TokenizedCodeWriter

CMD_INSERT_METHOD_FIRST = "classwriter.insertMethodFirst"
CMD_INSERT_METHOD_LAST = "classwriter.insertMethodLast"
CMD_INSERT_AFTER_METHOD = "classwriter.insertAfterMethod"
CMD_INSERT_IMPLEMENTS = "classwriter.insertImplements"

server = LanguageServer("classwriter-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)

_writer = TokenizedCodeWriter()


def _full_range(source: str) -> Range:
    end_line = len(source.splitlines(keepends=True))
    return Range(start=Position(line=0, character=0), end=Position(line=end_line, character=0))


def _apply(ls: LanguageServer, uri: str, transform: Callable[[str], str], label: str) -> bool:
    """Rewrite the document at uri with transform and send it as a workspace edit.

    Returns False (after showing the error to the user) if the writer fails.
    """
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri

    try:
        result = transform(source)
        class_name = _writer.analyser.get_class_name(source)
    except ClassWriterError as exc:
        ls.window_show_message(ShowMessageParams(type=MessageType.Error, message=exc.format(filename)))
        return False

    edit = WorkspaceEdit(changes={uri: [TextEdit(range=_full_range(source), new_text=result)]})
    ls.workspace_apply_edit(ApplyWorkspaceEditParams(edit=edit, label=f"{class_name}: {label}"))
    return True


def _arguments(args: tuple[Any, ...]) -> list[Any]:
    # Arguments may arrive unpacked or as a single JSON array
    if len(args) == 1 and isinstance(args[0], list):
        return list(args[0])
    return list(args)


def insert_method_first(ls: LanguageServer, uri: str, method: str) -> bool:
    return _apply(ls, uri, lambda src: _writer.insert_method_first_in_class(src, method), "Insert method")


def insert_method_last(ls: LanguageServer, uri: str, method: str) -> bool:
    return _apply(ls, uri, lambda src: _writer.insert_method_last_in_class(src, method), "Insert method")


def insert_after_method(ls: LanguageServer, uri: str, method_name: str, method: str) -> bool:
    return _apply(
        ls,
        uri,
        lambda src: _writer.insert_after_method(src, method_name, method),
        f"Insert method after {method_name}",
    )


def insert_implements(ls: LanguageServer, uri: str, interface: str) -> bool:
    return _apply(
        ls,
        uri,
        lambda src: _writer.insert_implements_in_class(src, interface),
        f"Implement {interface}",
    )


@server.command(CMD_INSERT_METHOD_FIRST)
def cmd_insert_method_first(ls: LanguageServer, *args: Any) -> bool:
    uri, method = _arguments(args)
    return insert_method_first(ls, uri, method)


@server.command(CMD_INSERT_METHOD_LAST)
def cmd_insert_method_last(ls: LanguageServer, *args: Any) -> bool:
    uri, method = _arguments(args)
    return insert_method_last(ls, uri, method)


@server.command(CMD_INSERT_AFTER_METHOD)
def cmd_insert_after_method(ls: LanguageServer, *args: Any) -> bool:
    uri, method_name, method = _arguments(args)
    return insert_after_method(ls, uri, method_name, method)


@server.command(CMD_INSERT_IMPLEMENTS)
def cmd_insert_implements(ls: LanguageServer, *args: Any) -> bool:
    uri, interface = _arguments(args)
    return insert_implements(ls, uri, interface)


def main() -> None:
    server.start_io()
