"""Tests for command dispatch."""

from __future__ import annotations

import pytest

from revbuild.book import Chapter
from revbuild.compiler import Command, Compiler
from revbuild.exceptions import ApplicationError
from revbuild.htmlbuilder import HTMLBuilder


@pytest.fixture
def compiler():
    builder = HTMLBuilder()
    builder.bind(Chapter("chap1", 1, "-"))
    return Compiler(builder)


class TestCommand:
    def test_from_dict(self):
        command = Command.from_dict({"name": "list", "id": "l1", "lines": ("a",), "extra": 1})
        assert command == Command("list", ["a"], id="l1")

    def test_from_dict_without_lines(self):
        assert Command.from_dict({"name": "noindent"}).lines == []


class TestCompiler:
    def test_paragraph_lines_are_inline_compiled(self, compiler):
        out = compiler.compile([Command("paragraph", ["a<b ", "@<b>{c}"])])
        assert out == "<p>a&lt;b <b>c</b></p>\n"

    def test_code_lines_are_verbatim(self, compiler):
        out = compiler.compile([Command("emlist", ["@<b>{c} < d"])])
        assert '<pre class="emlist">\n@&lt;b&gt;{c} &lt; d\n</pre>' in out

    def test_table_cells_are_inline_compiled(self, compiler):
        out = compiler.compile([Command("table", ["@<b>{A}\t<", "============", "1\t2"])])
        assert "<tr><th><b>A</b></th><th>&lt;</th></tr>" in out

    def test_noindent_applies_to_next_paragraph(self, compiler):
        out = compiler.compile([
            Command("noindent"),
            Command("paragraph", ["a"]),
            Command("paragraph", ["b"]),
        ])
        assert out == '<p class="noindent">a</p>\n<p>b</p>\n'

    def test_raw_lines(self, compiler):
        out = compiler.compile([Command("raw", ["<hr />\\n", "|latex|\\clearpage"])])
        assert out == "<hr />\n"

    def test_heading(self, compiler):
        out = compiler.compile([Command("heading", level=2, id="s", caption="Sec")])
        assert out == '\n<h2 id="s"><a id="h1-1" />1.1　Sec</h2>\n'

    def test_unknown_command_is_fatal(self, compiler):
        with pytest.raises(ApplicationError, match=r"chap1:7: error: unknown command: //bogus"):
            compiler.compile([Command("bogus", lineno=7)])

    def test_location_follows_commands(self, compiler):
        compiler.compile([Command("paragraph", ["@<list>{nope}"], lineno=3)])
        assert compiler.builder.warnings == ["chap1:3: warning: unknown list: nope"]

    def test_commands(self, compiler):
        assert "table" in compiler.commands
        assert "footnote" in compiler.commands
