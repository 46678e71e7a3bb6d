"""Tests for TOML config file loading."""

from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from classwriter.cli import build_parser, load_config, main, resolve_options


def _resolve(doc: Path, *extra: str):
    ns = build_parser().parse_args([str(doc), "--implements", "Baz", *extra])
    return resolve_options(ns)


class TestLoadConfig:
    def test_missing_config_returns_empty(self, tmp_path: Path) -> None:
        assert load_config(None, tmp_path) == {}

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text('[writer]\nindent = "  "\n')
        result = load_config(cfg, tmp_path)
        assert result["writer"] == {"indent": "  "}

    def test_auto_discover_classwriter_toml(self, tmp_path: Path) -> None:
        cfg = tmp_path / "classwriter.toml"
        cfg.write_text("[cache]\nmaxsize = 8\n")
        result = load_config(None, tmp_path)
        assert result["cache"] == {"maxsize": 8}


class TestConfigMerge:
    def test_defaults(self, tmp_path: Path) -> None:
        opts = _resolve(tmp_path / "Foo.php")
        assert opts.indent == "    "
        assert opts.cache_maxsize == 128

    def test_config_indent(self, tmp_path: Path) -> None:
        (tmp_path / "classwriter.toml").write_text('[writer]\nindent = "\\t"\n')
        opts = _resolve(tmp_path / "Foo.php")
        assert opts.indent == "\t"

    def test_cli_overrides_config_indent(self, tmp_path: Path) -> None:
        (tmp_path / "classwriter.toml").write_text('[writer]\nindent = "\\t"\n')
        opts = _resolve(tmp_path / "Foo.php", "--indent", "  ")
        assert opts.indent == "  "

    def test_explicit_config_flag(self, tmp_path: Path) -> None:
        cfg = tmp_path / "other.toml"
        cfg.write_text("[cache]\nmaxsize = 4\n")
        opts = _resolve(tmp_path / "Foo.php", "--config", str(cfg))
        assert opts.cache_maxsize == 4

    def test_zero_maxsize_is_unbounded(self, tmp_path: Path) -> None:
        (tmp_path / "classwriter.toml").write_text("[cache]\nmaxsize = 0\n")
        assert _resolve(tmp_path / "Foo.php").cache_maxsize is None

    def test_invalid_maxsize(self, tmp_path: Path) -> None:
        (tmp_path / "classwriter.toml").write_text('[cache]\nmaxsize = "big"\n')
        with pytest.raises(argparse.ArgumentTypeError):
            _resolve(tmp_path / "Foo.php")

    def test_invalid_indent(self, tmp_path: Path) -> None:
        (tmp_path / "classwriter.toml").write_text("[writer]\nindent = 4\n")
        with pytest.raises(argparse.ArgumentTypeError):
            _resolve(tmp_path / "Foo.php")


class TestConfigErrors:
    def test_invalid_value_exit_2(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "classwriter.toml").write_text("[cache]\nmaxsize = -1\n")
        doc = tmp_path / "Foo.php"
        doc.write_text("class Foo\n{\n}\n")
        assert main([str(doc), "--implements", "Baz"]) == 2
        assert "maxsize" in capsys.readouterr().err

    def test_malformed_toml_exit_2(self, tmp_path: Path) -> None:
        (tmp_path / "classwriter.toml").write_text("[writer\n")
        doc = tmp_path / "Foo.php"
        doc.write_text("class Foo\n{\n}\n")
        assert main([str(doc), "--implements", "Baz"]) == 2

    def test_config_indent_used_end_to_end(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "classwriter.toml").write_text('[writer]\nindent = "\\t"\n')
        doc = tmp_path / "Foo.php"
        doc.write_text("class Foo implements\n\tBar\n{\n}\n")
        assert main([str(doc), "--implements", "Baz"]) == 0
        assert capsys.readouterr().out == "class Foo implements\n\tBar,\n\tBaz\n{\n}\n"
