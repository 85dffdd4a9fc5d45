"""Tests for the plain-text backend."""

from __future__ import annotations

import pytest

from revbuild.book import Chapter
from revbuild.topbuilder import TOPBuilder


@pytest.fixture
def chapter() -> Chapter:
    return Chapter("chap1", 1, "-")


@pytest.fixture
def builder(chapter: Chapter) -> TOPBuilder:
    b = TOPBuilder()
    b.bind(chapter)
    return b


class TestBlocks:
    def test_headlines(self, builder: TOPBuilder) -> None:
        builder.heading(1, None, "Intro")
        builder.heading(2, None, "Sec")
        assert builder.raw_result() == "■H1■第1章　Intro\n\n■H2■1.1　Sec\n"

    def test_nothing_is_escaped(self, builder: TOPBuilder) -> None:
        builder.paragraph([builder.compile_inline("<&> @<b>{x}")])
        assert builder.raw_result() == "<&> ★x☆\n"

    def test_table(self, builder: TOPBuilder) -> None:
        builder.table(["A\tB", "------------", "1\t2"])
        assert builder.raw_result() == (
            "◆→開始:表←◆\n★A☆\t★B☆\n1\t2\n◆→終了:表←◆\n"
        )

    def test_list(self, builder: TOPBuilder, chapter: Chapter) -> None:
        chapter.lists.register("sample")
        builder.list(["a"], "sample", "cap")
        assert builder.raw_result() == (
            "◆→開始:リスト←◆\nリスト1.1　cap\n\na\n◆→終了:リスト←◆\n"
        )

    def test_footnote(self, builder: TOPBuilder, chapter: Chapter) -> None:
        chapter.footnotes.register("fn1", content="note")
        builder.footnote("fn1", "note")
        assert builder.raw_result() == "◆→開始:脚注←◆\n【注1】note\n◆→終了:脚注←◆\n"
        assert builder.compile_inline("@<fn>{fn1}") == "【注1】"

    def test_blocks_separated_by_blank_line(self, builder: TOPBuilder) -> None:
        builder.ul(["a"])
        builder.ol(["b"])
        assert builder.raw_result() == (
            "◆→開始:箇条書き←◆\n●\ta\n◆→終了:箇条書き←◆\n"
            "\n"
            "◆→開始:番号付き箇条書き←◆\n1\tb\n◆→終了:番号付き箇条書き←◆\n"
        )


class TestInline:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ("@<i>{x}", "▲x☆"),
            ("@<tt>{x}", "△x☆"),
            ("@<href>{http://a.com, A}", "A（△http://a.com☆）"),
            ("@<href>{http://a.com}", "△http://a.com☆"),
            ("@<kw>{API, interface}", "★API☆（interface）"),
            ("@<uchar>{41}", "A"),
        ],
    )
    def test_compile_inline(self, builder: TOPBuilder, source: str, expected: str) -> None:
        assert builder.compile_inline(source) == expected
