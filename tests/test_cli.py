"""Tests for the CLI module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from revbuild.cli import main

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_JSON = FIXTURE_DIR / "ch01.json"


class TestCLIMain:
    """Test the main() entry point."""

    def test_list_builders(self, capsys):
        ret = main(["--list-builders"])
        assert ret == 0
        out = capsys.readouterr().out
        assert "html" in out
        assert "latex" in out
        assert "top" in out

    def test_missing_input(self):
        with pytest.raises(SystemExit):
            main([])

    def test_unknown_builder(self):
        with pytest.raises(SystemExit):
            main([str(SAMPLE_JSON), "-b", "docx"])

    def test_file_not_found(self, capsys):
        ret = main(["nonexistent.json"])
        assert ret == 1
        err = capsys.readouterr().err
        assert "not found" in err

    def test_convert_sample(self, tmp_path, capsys):
        out = tmp_path / "output.html"
        ret = main([str(SAMPLE_JSON), "-o", str(out)])
        assert ret == 0
        assert "リスト1.1: Hello" in out.read_text(encoding="utf-8")

    def test_verbose_flag(self, tmp_path, capsys):
        out = tmp_path / "output.tex"
        ret = main([str(SAMPLE_JSON), "-o", str(out), "-b", "latex", "-v"])
        assert ret == 0
        stdout = capsys.readouterr().out
        assert "Input:" in stdout
        assert "Builder: latex" in stdout
        assert "Done." in stdout

    def test_default_output_name(self, tmp_path, capsys):
        src = tmp_path / "mychapter.json"
        src.write_text(SAMPLE_JSON.read_text(encoding="utf-8"), encoding="utf-8")
        ret = main([str(src), "-b", "latex"])
        assert ret == 0
        assert (tmp_path / "mychapter.tex").exists()

    def test_output_encoding(self, tmp_path, capsys):
        out = tmp_path / "output.txt"
        ret = main([str(SAMPLE_JSON), "-o", str(out), "-b", "top", "--outencoding", "SJIS"])
        assert ret == 0
        assert out.read_bytes().decode("cp932").startswith("■H1■第1章　Getting Started")

    def test_secnolevel(self, tmp_path, capsys):
        out = tmp_path / "output.html"
        ret = main([str(SAMPLE_JSON), "-o", str(out), "--secnolevel", "0"])
        assert ret == 0
        assert "リスト1: Hello" in out.read_text(encoding="utf-8")

    def test_invalid_config(self, capsys):
        ret = main([str(SAMPLE_JSON), "--outencoding", "ebcdic"])
        assert ret == 1
        assert "Unknown output encoding" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        src = tmp_path / "broken.json"
        src.write_text("{not json", encoding="utf-8")
        ret = main([str(src)])
        assert ret == 1
        assert "Error:" in capsys.readouterr().err

    def test_fatal_error(self, tmp_path, capsys):
        src = tmp_path / "bad.json"
        src.write_text(json.dumps({
            "chapter": {"id": "bad"},
            "commands": [{"name": "bogus", "lineno": 2}],
        }), encoding="utf-8")
        ret = main([str(src), "-o", str(tmp_path / "bad.html")])
        assert ret == 1
        assert "bad.json:2: error: unknown command: //bogus" in capsys.readouterr().err
        assert not (tmp_path / "bad.html").exists()

    def test_recoverable_errors_reported(self, tmp_path, capsys):
        src = tmp_path / "partial.json"
        src.write_text(json.dumps({
            "chapter": {"id": "partial", "number": 1},
            "commands": [{"name": "footnote", "caption": "orphan"}],
        }), encoding="utf-8")
        out = tmp_path / "partial.html"
        ret = main([str(src), "-o", str(out)])
        assert ret == 1
        assert out.exists()
        assert "1 error(s) reported" in capsys.readouterr().err
