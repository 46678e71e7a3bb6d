"""Tests for the CLI module: arg parsing, exit codes, end-to-end."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from classwriter.cli import CliOptions, Operation, apply_operation, build_parser, main, resolve_options

EMPTY = "<?php\n\nclass Foo\n{\n}\n"
WITH_METHOD = "<?php\n\nclass Foo\n{\n    public function a()\n    {\n    }\n}\n"
METHOD = "    public function bar()\n    {\n    }\n"


def _options(tmp_path: Path, operation: Operation, **kwargs) -> CliOptions:
    defaults = dict(
        input_file=tmp_path / "Foo.php",
        output_file=None,
        in_place=False,
        operation=operation,
        method_name=None,
        interface=None,
        snippet_file=None,
        indent="    ",
        cache_maxsize=None,
        debug=False,
    )
    defaults.update(kwargs)
    return CliOptions(**defaults)


# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_first(self) -> None:
        ns = build_parser().parse_args(["Foo.php", "--first"])
        assert ns.input == "Foo.php"
        assert ns.first is True
        assert ns.output is None

    def test_after(self) -> None:
        ns = build_parser().parse_args(["Foo.php", "--after", "getName"])
        assert ns.after == "getName"

    def test_operation_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["Foo.php"])

    def test_operations_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["Foo.php", "--first", "--last"])

    def test_output_and_in_place_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["Foo.php", "--last", "-o", "x.php", "--in-place"])

    def test_resolve_operation(self, tmp_path: Path) -> None:
        doc = tmp_path / "Foo.php"
        ns = build_parser().parse_args([str(doc), "--implements", "Acme\\Baz"])
        opts = resolve_options(ns)
        assert opts.operation is Operation.IMPLEMENTS
        assert opts.interface == "Acme\\Baz"
        assert opts.indent == "    "


# ---------------------------------------------------------------------------
# apply_operation
# ---------------------------------------------------------------------------


class TestApplyOperation:
    def test_first(self, tmp_path: Path) -> None:
        result = apply_operation(_options(tmp_path, Operation.FIRST), EMPTY, METHOD)
        assert result == "<?php\n\nclass Foo\n{\n" + METHOD + "}\n"

    def test_after(self, tmp_path: Path) -> None:
        opts = _options(tmp_path, Operation.AFTER, method_name="a")
        result = apply_operation(opts, WITH_METHOD, METHOD)
        assert result.endswith("    {\n    }\n\n" + METHOD + "}\n")

    def test_implements(self, tmp_path: Path) -> None:
        opts = _options(tmp_path, Operation.IMPLEMENTS, interface="Baz")
        assert "class Foo implements Baz\n" in apply_operation(opts, EMPTY)

    def test_debug_dumps_tokens(self, tmp_path: Path, capsys) -> None:
        apply_operation(_options(tmp_path, Operation.LAST, debug=True), EMPTY, METHOD)
        err = capsys.readouterr().err
        assert "CLASS" in err
        assert "'Foo'" in err


# ---------------------------------------------------------------------------
# End-to-end via main()
# ---------------------------------------------------------------------------


class TestMain:
    def test_snippet_file_to_output(self, tmp_path: Path) -> None:
        src = tmp_path / "Foo.php"
        src.write_text(EMPTY)
        snippet = tmp_path / "method.txt"
        snippet.write_text(METHOD)
        out = tmp_path / "out.php"
        assert main([str(src), "--last", "-s", str(snippet), "-o", str(out)]) == 0
        assert out.read_text() == "<?php\n\nclass Foo\n{\n" + METHOD + "}\n"
        assert src.read_text() == EMPTY

    def test_snippet_from_stdin(self, tmp_path: Path, monkeypatch, capsys) -> None:
        src = tmp_path / "Foo.php"
        src.write_text(EMPTY)
        monkeypatch.setattr("sys.stdin", io.StringIO(METHOD))
        assert main([str(src), "--first"]) == 0
        assert capsys.readouterr().out == "<?php\n\nclass Foo\n{\n" + METHOD + "}\n"

    def test_in_place(self, tmp_path: Path) -> None:
        src = tmp_path / "Foo.php"
        src.write_text(EMPTY)
        assert main([str(src), "--implements", "Other\\Baz", "--in-place"]) == 0
        assert src.read_text() == "<?php\n\nuse Other\\Baz;\n\nclass Foo implements Baz\n{\n}\n"

    def test_crlf_preserved(self, tmp_path: Path) -> None:
        src = tmp_path / "Foo.php"
        src.write_bytes(b"class Foo\r\n{\r\n}\r\n")
        assert main([str(src), "--implements", "Baz", "-i"]) == 0
        assert src.read_bytes() == b"class Foo implements Baz\r\n{\r\n}\r\n"

    def test_missing_method_exit_1(self, tmp_path: Path, monkeypatch, capsys) -> None:
        src = tmp_path / "Foo.php"
        src.write_text(WITH_METHOD)
        monkeypatch.setattr("sys.stdin", io.StringIO(METHOD))
        assert main([str(src), "--after", "missing"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("error: target method 'missing' not found")
        assert "Foo.php" in err

    def test_missing_input_exit_2(self, tmp_path: Path, capsys) -> None:
        assert main([str(tmp_path / "nope.php"), "--implements", "Baz"]) == 2
        assert "error:" in capsys.readouterr().err
