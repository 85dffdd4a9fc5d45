"""Tests for configuration, chapters and image resolution."""

from __future__ import annotations

import pytest

from revbuild.book import Book, BookConfig, Chapter, StaticImageResolver
from revbuild.encoding import OutputEncoding, transcode
from revbuild.exceptions import ConfigError, DuplicateIdError


class TestBookConfig:
    def test_defaults(self) -> None:
        config = BookConfig()
        assert config.secnolevel == 2
        assert config.outencoding is OutputEncoding.UTF8
        assert config.stylesheet is None

    def test_from_mapping_ignores_unknown_keys(self) -> None:
        config = BookConfig.from_mapping({"secnolevel": 3, "inencoding": "UTF-8"})
        assert config.secnolevel == 3

    def test_from_mapping_skips_none(self) -> None:
        config = BookConfig.from_mapping({"secnolevel": None, "outencoding": "sjis"})
        assert config.secnolevel == 2
        assert config.outencoding is OutputEncoding.SJIS

    @pytest.mark.parametrize("value", [-1, "2", 1.5, True])
    def test_invalid_secnolevel(self, value) -> None:
        with pytest.raises(ConfigError):
            BookConfig(secnolevel=value)

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            BookConfig.from_mapping({"outencoding": "latin-1"})


class TestOutputEncoding:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("UTF-8", OutputEncoding.UTF8),
            ("utf8", OutputEncoding.UTF8),
            ("euc-jp", OutputEncoding.EUC),
            ("Shift_JIS", OutputEncoding.SJIS),
            ("JIS", OutputEncoding.JIS),
            (None, OutputEncoding.UTF8),
        ],
    )
    def test_parse(self, name, expected) -> None:
        assert OutputEncoding.parse(name) is expected

    def test_unknown(self) -> None:
        with pytest.raises(ConfigError, match="Unknown output encoding"):
            OutputEncoding.parse("ebcdic")

    @pytest.mark.parametrize(
        "encoding, codec",
        [
            (OutputEncoding.EUC, "euc_jp"),
            (OutputEncoding.SJIS, "cp932"),
            (OutputEncoding.JIS, "iso2022_jp"),
        ],
    )
    def test_transcode(self, encoding, codec) -> None:
        assert transcode("第1章　日本語", encoding) == "第1章　日本語".encode(codec)

    def test_unencodable_replaced(self) -> None:
        assert transcode("a\U0001F600", OutputEncoding.EUC) == b"a?"


class TestImageResolver:
    def test_ranked_by_extension(self) -> None:
        resolver = StaticImageResolver({"fig": ["fig.png", "fig.eps", "fig.xyz"]})
        binding = resolver.resolve("fig")
        assert binding.bound
        assert binding.paths == ("fig.eps", "fig.png", "fig.xyz")
        assert binding.path == "fig.eps"

    def test_custom_image_types(self) -> None:
        resolver = StaticImageResolver({"fig": ["fig.eps", "fig.png"]}, image_types=[".png"])
        assert resolver.resolve("fig").path == "fig.png"

    def test_unknown_id(self) -> None:
        binding = StaticImageResolver().resolve("nope")
        assert not binding.bound
        assert binding.path is None

    def test_chapter_requires_index_entry(self) -> None:
        chapter = Chapter("ch", 1, image_resolver=StaticImageResolver({"fig": ["fig.png"]}))
        assert not chapter.resolve_image("fig").bound
        assert chapter.resolve_image("fig", indexed=False).bound
        chapter.images.register("fig")
        assert chapter.resolve_image("fig").bound

    def test_entries_flat_layout(self) -> None:
        resolver = StaticImageResolver.from_entries(
            ["ch01-fig.png", "ch01-fig.eps", "ch02-fig.png", "ch01-notes.txt", "ch01-.png"],
            "ch01",
        )
        assert resolver.resolve("fig").paths == ("images/ch01-fig.eps", "images/ch01-fig.png")
        assert not resolver.resolve("notes").bound
        assert not resolver.resolve("").bound

    def test_entries_subdir_layout(self) -> None:
        resolver = StaticImageResolver.from_entries(
            ["fig.png", "chart.JPG", "readme.md"], "ch01", subdirmode=True
        )
        assert resolver.resolve("fig").path == "images/ch01/fig.png"
        assert resolver.resolve("chart").path == "images/ch01/chart.JPG"
        assert not resolver.resolve("readme").bound


class TestBook:
    def test_chapters_registered(self) -> None:
        book = Book([Chapter("ch01", 1, "One"), Chapter("appendix", None, "Extra")])
        assert book.chapter("ch01").book is book
        assert book.chapter_index.number("ch01") == "第1章"
        assert [c.id for c in book] == ["ch01", "appendix"]
        assert book.chapter("missing") is None

    def test_duplicate_chapter(self) -> None:
        book = Book([Chapter("ch01", 1)])
        with pytest.raises(DuplicateIdError):
            book.add_chapter(Chapter("ch01", 2))
