"""Append-only id registries used to resolve cross-references.

Every chapter owns one :class:`Index` per kind of numbered element (lists,
tables, images, footnotes, bibliography entries, headlines); the book owns a
:class:`ChapterIndex`.  Entries are numbered 1, 2, 3, ... in registration
order.  Nothing is ever removed, so a number is never handed out twice.

Builders query indices through :meth:`Index.find`, which returns a
:class:`Found` or :class:`NotFound` value instead of raising, so that a
missing reference can be turned into a placeholder right at the call site.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from revbuild.exceptions import DuplicateIdError, UnknownIdError

Number = Union[int, tuple]


@dataclass(frozen=True)
class IndexEntry:
    id: str
    number: Optional[Number]
    display_title: Optional[str] = None
    content: Optional[str] = None

    @property
    def number_string(self) -> str:
        """Dotted form of the number (``"1.0.2"`` for headline paths)."""
        if self.number is None:
            return ""
        if isinstance(self.number, tuple):
            return ".".join(str(n) for n in self.number)
        return str(self.number)


@dataclass(frozen=True)
class Found:
    entry: IndexEntry


@dataclass(frozen=True)
class NotFound:
    kind: str
    id: str


LookupResult = Union[Found, NotFound]


class Index:
    """Registry of one kind of numbered element."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._entries: dict[str, IndexEntry] = {}
        self._counter = 0

    def register(
        self,
        id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        *,
        number: Optional[Number] = None,
    ) -> IndexEntry:
        """Add *id*; numbers come from the running counter unless given."""
        if id in self._entries:
            raise DuplicateIdError(self.kind, id)
        if number is None:
            self._counter += 1
            number = self._counter
        entry = IndexEntry(id, number, title, content)
        self._entries[id] = entry
        return entry

    def find(self, id: str) -> LookupResult:
        entry = self._entries.get(id)
        if entry is None:
            return NotFound(self.kind, id)
        return Found(entry)

    def lookup(self, id: str) -> IndexEntry:
        try:
            return self._entries[id]
        except KeyError:
            raise UnknownIdError(self.kind, id) from None

    def number_of(self, id: str) -> Optional[Number]:
        return self.lookup(id).number

    def title_of(self, id: str) -> Optional[str]:
        return self.lookup(id).display_title

    def content_of(self, id: str) -> Optional[str]:
        return self.lookup(id).content

    def __contains__(self, id: object) -> bool:
        return id in self._entries

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


class HeadlineIndex(Index):
    """Headlines are keyed by id and numbered by their section path."""

    def __init__(self) -> None:
        super().__init__("headline")

    def register(
        self,
        id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        *,
        number: Optional[Number] = None,
    ) -> IndexEntry:
        if number is None:
            raise ValueError(f"headline {id!r} needs a section path")
        return super().register(id, title, content, number=tuple(number))


class ChapterIndex(Index):
    """Book-level registry of chapters.

    Unlike the other indices the number is the chapter's own (possibly
    absent) number, not a registration counter.
    """

    def __init__(self) -> None:
        super().__init__("chapter")

    def register_chapter(
        self, id: str, number: Optional[int], title: Optional[str]
    ) -> IndexEntry:
        if id in self._entries:
            raise DuplicateIdError(self.kind, id)
        entry = IndexEntry(id, number, title)
        self._entries[id] = entry
        return entry

    def register(self, id, title=None, content=None, *, number=None):
        return self.register_chapter(id, number, title)

    @staticmethod
    def format_number(entry: IndexEntry) -> str:
        if entry.number is None:
            return entry.display_title or ""
        return f"第{entry.number}章"

    @staticmethod
    def format_display(entry: IndexEntry) -> str:
        title = entry.display_title or ""
        if entry.number is None:
            return f"「{title}」"
        return f"第{entry.number}章「{title}」"

    def number(self, id: str) -> str:
        return self.format_number(self.lookup(id))

    def title(self, id: str) -> str:
        return self.lookup(id).display_title or ""

    def display_string(self, id: str) -> str:
        return self.format_display(self.lookup(id))
