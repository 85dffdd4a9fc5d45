"""Book, chapter and configuration objects consumed by the builders.

The configuration is an explicit :class:`BookConfig` value handed to every
render pass; nothing here is process-global.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional, Protocol, Sequence

from revbuild.encoding import OutputEncoding
from revbuild.exceptions import ConfigError
from revbuild.index import ChapterIndex, HeadlineIndex, Index

# Preferred order when several files exist for one image id
IMAGE_TYPES = (
    ".ai", ".eps", ".pdf", ".tif", ".tiff", ".png",
    ".bmp", ".jpg", ".jpeg", ".gif", ".svg",
)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class BookConfig:
    """Parameters read by the builders.

    Usage::

        config = BookConfig(secnolevel=3, outencoding="SJIS")
        config = BookConfig.from_mapping({"secnolevel": 0})
    """

    secnolevel: int = 2
    outencoding: OutputEncoding = OutputEncoding.UTF8
    subdirmode: Optional[bool] = None
    stylesheet: Optional[str] = None
    image_types: tuple = IMAGE_TYPES

    def __post_init__(self) -> None:
        if isinstance(self.secnolevel, bool) or not isinstance(self.secnolevel, int):
            raise ConfigError(f"secnolevel must be an integer, got {self.secnolevel!r}")
        if self.secnolevel < 0:
            raise ConfigError(f"secnolevel must not be negative, got {self.secnolevel}")
        self.outencoding = OutputEncoding.parse(self.outencoding)
        self.image_types = tuple(t.lower() for t in self.image_types)

    @classmethod
    def from_mapping(cls, params: Optional[Mapping[str, Any]]) -> BookConfig:
        """Build a config from a plain mapping, ignoring unrelated keys."""
        params = dict(params or {})
        kwargs: dict[str, Any] = {}
        for name in ("secnolevel", "outencoding", "subdirmode", "stylesheet", "image_types"):
            if params.get(name) is not None:
                kwargs[name] = params[name]
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Image resolution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageBinding:
    bound: bool
    paths: tuple = ()

    @property
    def path(self) -> Optional[str]:
        return self.paths[0] if self.paths else None


class ImageResolver(Protocol):
    """Maps an image id to the files that can render it."""

    def resolve(self, id: str) -> ImageBinding:
        ...


class StaticImageResolver:
    """In-memory resolver fed with already-discovered file paths.

    Paths for one id are ranked by the position of their extension in
    *image_types*; unknown extensions sort last.
    """

    def __init__(
        self,
        paths: Optional[Mapping[str, Iterable[str]]] = None,
        image_types: Sequence[str] = IMAGE_TYPES,
    ) -> None:
        self.image_types = [t.lower() for t in image_types]
        self._paths: dict[str, tuple] = {}
        for id, candidates in (paths or {}).items():
            self.add(id, *candidates)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[str],
        chapter_name: str,
        *,
        subdirmode: Optional[bool] = None,
        image_dir: str = "images",
        image_types: Sequence[str] = IMAGE_TYPES,
    ) -> StaticImageResolver:
        """Group the file names of an image directory by image id.

        The flat layout keeps ``<chapter>-<id><ext>`` in *image_dir*; with
        *subdirmode* each chapter has ``<image_dir>/<chapter>/<id><ext>``.
        Files whose extension is not in *image_types* are ignored.
        """
        resolver = cls(image_types=image_types)
        prefix = "" if subdirmode else f"{chapter_name}-"
        directory = f"{image_dir}/{chapter_name}" if subdirmode else image_dir
        for entry in entries:
            stem, ext = os.path.splitext(entry)
            if ext.lower() not in resolver.image_types:
                continue
            if not stem.startswith(prefix) or stem == prefix:
                continue
            resolver.add(stem[len(prefix):], f"{directory}/{entry}")
        return resolver

    def add(self, id: str, *paths: str) -> None:
        merged = list(self._paths.get(id, ())) + list(paths)
        self._paths[id] = tuple(sorted(merged, key=self._rank))

    def _rank(self, path: str) -> int:
        ext = os.path.splitext(path)[1].lower()
        try:
            return self.image_types.index(ext)
        except ValueError:
            return len(self.image_types)

    def resolve(self, id: str) -> ImageBinding:
        paths = self._paths.get(id, ())
        return ImageBinding(bool(paths), paths)


_UNBOUND = ImageBinding(False)


# ---------------------------------------------------------------------------
# Chapters
# ---------------------------------------------------------------------------

class Chapter:
    """One document section and the indices local to it."""

    def __init__(
        self,
        id: str,
        number: Optional[int] = None,
        title: Optional[str] = None,
        *,
        name: Optional[str] = None,
        image_resolver: Optional[ImageResolver] = None,
    ) -> None:
        self.id = id
        self.number = number
        self.title = title
        self.name = name or id
        self.image_resolver = image_resolver
        self.book: Optional[Book] = None

        self.lists = Index("list")
        self.tables = Index("table")
        self.images = Index("image")
        self.footnotes = Index("footnote")
        self.bibpapers = Index("bibpaper")
        self.headlines = HeadlineIndex()

    @property
    def has_number(self) -> bool:
        return self.number is not None and str(self.number) != ""

    def resolve_image(self, id: str, indexed: bool = True) -> ImageBinding:
        """Binding for *id*; unresolvable images are unbound.

        With *indexed* the id must also be registered in the image index,
        which numbered images are and icons or independent images are not.
        """
        if self.image_resolver is None or (indexed and id not in self.images):
            return _UNBOUND
        return self.image_resolver.resolve(id)

    def __repr__(self) -> str:
        return f"Chapter(id={self.id!r}, number={self.number!r})"


@dataclass
class Book:
    """Ordered chapters plus the book-wide chapter index."""

    chapters: list = field(default_factory=list)
    chapter_index: ChapterIndex = field(default_factory=ChapterIndex)

    def __post_init__(self) -> None:
        initial, self.chapters = self.chapters, []
        for chapter in initial:
            self.add_chapter(chapter)

    def add_chapter(self, chapter: Chapter) -> Chapter:
        self.chapter_index.register_chapter(chapter.id, chapter.number, chapter.title)
        chapter.book = self
        self.chapters.append(chapter)
        return chapter

    def chapter(self, id: str) -> Optional[Chapter]:
        for chapter in self.chapters:
            if chapter.id == id:
                return chapter
        return None

    def __iter__(self) -> Iterator[Chapter]:
        return iter(self.chapters)
