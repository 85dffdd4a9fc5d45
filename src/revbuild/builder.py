"""Backend-neutral builder contract.

A builder receives block commands (``heading``, ``list``, ``table`` ...) and
inline directives (``inline_b``, ``inline_chapref`` ...) and writes
backend-specific text into an in-memory buffer.  :class:`Builder` holds the
logic every backend shares - table parsing, cross-reference lookup,
heading counters, diagnostics and output encoding - and leaves the actual
markup to the hook methods implemented by subclasses.

One builder instance renders one chapter at a time: :meth:`Builder.bind`
resets the buffer and all per-chapter state.
"""

from __future__ import annotations

import io
import logging
import re
from abc import ABC, abstractmethod
from typing import NoReturn, Optional, Sequence

from revbuild.book import BookConfig, Chapter, ImageBinding
from revbuild.encoding import transcode
from revbuild.exceptions import ApplicationError, UnknownInlineTagError
from revbuild.index import ChapterIndex, Index, IndexEntry, NotFound
from revbuild.inline import InlineResolver
from revbuild.location import Location
from revbuild.table_handler import TableShape, parse_table

logger = logging.getLogger(__name__)

MAX_HEADING_LEVEL = 6

# Caption labels used in numbered references ("リスト1.2", "図1.3", ...)
LABELS = {
    "list": "リスト",
    "image": "図",
    "table": "表",
}

_CHAPTER_REF_RE = re.compile(r"\A(\w+)\|(.+)", re.DOTALL)
_RAW_TARGET_RE = re.compile(r"\A\|(.*?)\|(.*)", re.DOTALL)
_HREF_PART_RE = re.compile(r"(?:(?:(?:\\\\)*\\,)|[^,\\]+)+")


def new_sections() -> list:
    return [0] * (MAX_HEADING_LEVEL - 1)


def advance_sections(sections: list, level: int) -> tuple:
    """Bump the counter for *level* in place and return the path below chapter level.

    Counters of deeper levels restart, so the first subsection after a new
    section is numbered 1 again.
    """
    if level == 1:
        sections[:] = new_sections()
        return ()
    sections[level - 2] += 1
    for i in range(level - 1, len(sections)):
        sections[i] = 0
    return tuple(sections[: level - 1])


class Builder(ABC):
    """Abstract base for output backends.

    Subclasses must define:
        name:    str - short backend name used by ``@<raw>{|name|...}``
        extension: str - conventional file extension of the output
        and the abstract hook methods below.
    """

    name: str = ""
    extension: str = ""

    # Tags whose argument may itself contain inline directives.  The
    # resolver hands these methods already-rendered markup.
    NESTED_INLINE_TAGS = frozenset({
        "b", "strong", "i", "em", "tt", "tti", "ttb", "u",
        "ami", "bou", "sup", "sub", "del", "ins",
    })

    # Error handler used when the output encoding cannot represent a char
    ENCODE_ERRORS = "replace"

    def __init__(self, config: Optional[BookConfig] = None, strict: bool = False) -> None:
        self.config = config or BookConfig()
        self.strict = strict
        self._resolver = InlineResolver(self)
        self._chapter: Optional[Chapter] = None
        self._location = Location()
        self._output = io.StringIO()
        self._sections = new_sections()
        self.warnings: list[str] = []
        self.errors: list[str] = []

    # ======================================================================
    # Render pass
    # ======================================================================

    def bind(self, chapter: Chapter, location: Optional[Location] = None) -> None:
        """Start rendering *chapter* with an empty buffer."""
        self._chapter = chapter
        self._location = location or Location(chapter.name)
        self._output = io.StringIO()
        self._sections = new_sections()
        self.warnings = []
        self.errors = []
        self.builder_init_file()

    def builder_init_file(self) -> None:
        """Hook for per-chapter backend state."""

    @property
    def chapter(self) -> Chapter:
        if self._chapter is None:
            raise ApplicationError("builder is not bound to a chapter")
        return self._chapter

    @property
    def location(self) -> Location:
        return self._location

    @location.setter
    def location(self, value: Location) -> None:
        self._location = value

    def result(self) -> str:
        return self._output.getvalue()

    raw_result = result

    def render(self) -> bytes:
        """The finished buffer, encoded for ``config.outencoding``."""
        return transcode(self.result(), self.config.outencoding, self.ENCODE_ERRORS)

    def write(self, s: str) -> None:
        self._output.write(s)

    def puts(self, s: str = "") -> None:
        self._output.write(s if s.endswith("\n") else s + "\n")

    # ======================================================================
    # Diagnostics
    # ======================================================================

    def warn(self, msg: str) -> None:
        message = f"{self._location}: warning: {msg}"
        logger.warning(message)
        self.warnings.append(message)

    def report_error(self, msg: str) -> None:
        """Record an error that spoils one construct but not the document."""
        message = f"{self._location}: error: {msg}"
        logger.error(message)
        self.errors.append(message)

    def error(self, msg: str) -> NoReturn:
        raise ApplicationError(f"{self._location}: error: {msg}")

    # ======================================================================
    # Text helpers
    # ======================================================================

    def escape(self, s: str) -> str:
        return s

    def nofunc_text(self, s: str) -> str:
        return self.escape(s)

    def text(self, s: str) -> str:
        return s

    def compile_inline(self, s: str) -> str:
        return self._resolver.resolve(s)

    def split_paragraph(self, lines: Sequence[str]) -> list:
        """Join runs of non-blank lines; blank lines end a paragraph."""
        paragraphs: list[str] = []
        current: list[str] = []
        for line in lines:
            if line.strip():
                current.append(line)
            elif current:
                paragraphs.append("".join(current))
                current = []
        if current:
            paragraphs.append("".join(current))
        return paragraphs

    def _select_raw(self, s: str) -> Optional[str]:
        """Content of ``|targets|content`` for this backend, ``None`` if not ours."""
        m = _RAW_TARGET_RE.match(s)
        if not m:
            return s
        targets = [t.strip() for t in m.group(1).split(",")]
        return m.group(2) if self.name in targets else None

    # ======================================================================
    # Numbering
    # ======================================================================

    def chapter_prefix(self, chapter: Optional[Chapter] = None) -> str:
        """``"1."`` for numbered chapters when numbering is on, else ``""``."""
        chapter = chapter or self.chapter
        if self.config.secnolevel > 0 and chapter.has_number:
            return f"{chapter.number}."
        return ""

    def _number_label(self, index: Index, id: Optional[str]) -> Optional[str]:
        result = index.find(id) if id is not None else NotFound(index.kind, "")
        if isinstance(result, NotFound):
            return None
        return f"{self.chapter_prefix()}{result.entry.number}"

    def headline_prefix(self, level: int, sections: tuple) -> str:
        """Section number shown before a caption, or ``""`` when suppressed."""
        chapter = self.chapter
        if level > self.config.secnolevel or not chapter.has_number:
            return ""
        if level == 1:
            if str(chapter.number).isdigit():
                return f"第{chapter.number}章　"
            return f"{chapter.number}　"
        return ".".join(str(n) for n in (chapter.number,) + sections) + "　"

    # ======================================================================
    # Block contract
    # ======================================================================

    def heading(self, level: int, id: Optional[str], caption: str) -> None:
        if not 1 <= level <= MAX_HEADING_LEVEL:
            self.error(f"invalid heading level: {level}")
        sections = advance_sections(self._sections, level)
        chapter = self.chapter
        if id and id not in chapter.headlines:
            chapter.headlines.register(id, caption, number=(chapter.number or 0,) + sections)
        self.headline(level, id, caption, sections)

    @abstractmethod
    def headline(self, level: int, id: Optional[str], caption: str, sections: tuple) -> None:
        """Emit a heading; *sections* holds the counters below chapter level."""

    @abstractmethod
    def paragraph(self, lines: Sequence[str]) -> None:
        ...

    def noindent(self) -> None:
        """Mark the next paragraph as not indented (backends may ignore)."""

    @abstractmethod
    def quote(self, lines: Sequence[str]) -> None:
        ...

    @abstractmethod
    def flushright(self, lines: Sequence[str]) -> None:
        ...

    @abstractmethod
    def column(self, lines: Sequence[str], caption: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def memo(self, lines: Sequence[str], caption: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def ul(self, items: Sequence[str]) -> None:
        ...

    @abstractmethod
    def ol(self, items: Sequence[str]) -> None:
        ...

    @abstractmethod
    def label(self, id: str) -> None:
        ...

    def raw(self, s: str) -> None:
        content = self._select_raw(s)
        if content is not None:
            self.write(content.replace("\\n", "\n"))

    # -- code lists ---------------------------------------------------------

    def list(self, lines: Sequence[str], id: Optional[str], caption: Optional[str]) -> None:
        self._list_block(lines, id, caption, self.list_body)

    def listnum(self, lines: Sequence[str], id: Optional[str], caption: Optional[str]) -> None:
        self._list_block(lines, id, caption, self.listnum_body)

    def _list_block(self, lines, id, caption, body) -> None:
        self.list_begin()
        number = self._number_label(self.chapter.lists, id)
        if number is None:
            self.report_error(f"no such list: {id}")
        else:
            self.list_header(id, number, caption)
        body(lines)
        self.list_end()

    def list_begin(self) -> None:
        pass

    def list_end(self) -> None:
        pass

    @abstractmethod
    def list_header(self, id: str, number: str, caption: Optional[str]) -> None:
        ...

    @abstractmethod
    def list_body(self, lines: Sequence[str]) -> None:
        ...

    def listnum_body(self, lines: Sequence[str]) -> None:
        width = len(str(len(lines)))
        self.list_body([f"{i:>{width}}: {line}" for i, line in enumerate(lines, 1)])

    def source(self, lines: Sequence[str], caption: Optional[str] = None) -> None:
        self.source_header(caption)
        self.source_body(lines)

    @abstractmethod
    def source_header(self, caption: Optional[str]) -> None:
        ...

    @abstractmethod
    def source_body(self, lines: Sequence[str]) -> None:
        ...

    @abstractmethod
    def emlist(self, lines: Sequence[str], caption: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def cmd(self, lines: Sequence[str], caption: Optional[str] = None) -> None:
        ...

    # -- images -------------------------------------------------------------

    def image(
        self,
        lines: Sequence[str],
        id: str,
        caption: Optional[str],
        metric: Optional[str] = None,
    ) -> None:
        if self.chapter.resolve_image(id).bound:
            self.image_image(id, caption, metric)
        else:
            if self.strict:
                self.warn(f"image not bound: {id}")
            self.image_dummy(id, caption, lines)

    def image_binding(self, id: str, indexed: bool = True) -> ImageBinding:
        return self.chapter.resolve_image(id, indexed)

    def image_number(self, id: str) -> Optional[str]:
        return self._number_label(self.chapter.images, id)

    @abstractmethod
    def image_image(self, id: str, caption: Optional[str], metric: Optional[str]) -> None:
        ...

    @abstractmethod
    def image_dummy(self, id: str, caption: Optional[str], lines: Sequence[str]) -> None:
        ...

    @abstractmethod
    def indepimage(self, id: str, caption: Optional[str] = None, metric: Optional[str] = None) -> None:
        ...

    # -- tables -------------------------------------------------------------

    def table(
        self,
        lines: Sequence[str],
        id: Optional[str] = None,
        caption: Optional[str] = None,
    ) -> None:
        shape = parse_table(lines)
        self.table_open()
        if caption is not None:
            number = self._number_label(self.chapter.tables, id)
            if number is None:
                self.report_error(f"no such table: {id}")
            else:
                self.table_header(id, number, caption)
        if shape.rows:
            self.table_begin(shape.n_cols)
            self._table_rows(shape)
            self.table_end()
        self.table_close()

    def _table_rows(self, shape: TableShape) -> None:
        if shape.header_rows is not None:
            for cols in shape.head:
                self.tr([self.th(s) for s in cols])
            for cols in shape.body:
                self.tr([self.td(s) for s in cols])
        else:
            # no separator: the first cell of every row is its header
            for cols in shape.rows:
                head, *rest = cols
                self.tr([self.th(head)] + [self.td(s) for s in rest])

    def table_open(self) -> None:
        pass

    def table_close(self) -> None:
        pass

    @abstractmethod
    def table_header(self, id: str, number: str, caption: str) -> None:
        ...

    @abstractmethod
    def table_begin(self, ncols: int) -> None:
        ...

    @abstractmethod
    def tr(self, cells: Sequence[str]) -> None:
        ...

    @abstractmethod
    def th(self, s: str) -> str:
        ...

    @abstractmethod
    def td(self, s: str) -> str:
        ...

    @abstractmethod
    def table_end(self) -> None:
        ...

    # -- footnotes and bibliography -----------------------------------------

    @abstractmethod
    def footnote(self, id: str, content: str) -> None:
        ...

    def bibpaper(self, lines: Sequence[str], id: str, caption: Optional[str]) -> None:
        self.bibpaper_header(id, caption)
        if lines:
            self.puts()
            self.bibpaper_bibpaper(id, caption, lines)
        self.puts()

    def bib_number(self, id: str) -> str:
        result = self.chapter.bibpapers.find(id)
        if isinstance(result, NotFound):
            self.report_error(f"no such bibpaper: {id}")
            return "?"
        return str(result.entry.number)

    @abstractmethod
    def bibpaper_header(self, id: str, caption: Optional[str]) -> None:
        ...

    @abstractmethod
    def bibpaper_bibpaper(self, id: str, caption: Optional[str], lines: Sequence[str]) -> None:
        ...

    # ======================================================================
    # Inline contract
    # ======================================================================

    def inline(self, tag: str, argument: str) -> str:
        handler = getattr(self, f"inline_{tag}", None)
        if handler is None:
            raise UnknownInlineTagError(tag)
        return handler(argument)

    def _unknown(self, result: NotFound) -> str:
        self.warn(f"unknown {result.kind}: {result.id}")
        return self.nofunc_text(f"[Unknown{result.kind.capitalize()}:{result.id}]")

    def _chapter_index(self) -> ChapterIndex:
        book = self.chapter.book
        return book.chapter_index if book is not None else ChapterIndex()

    def _find(self, index: Index, id: str):
        result = index.find(id)
        if isinstance(result, NotFound):
            return None, self._unknown(result)
        return result.entry, None

    # -- cross references ---------------------------------------------------

    def inline_chapref(self, id: str) -> str:
        entry, placeholder = self._find(self._chapter_index(), id)
        if entry is None:
            return placeholder
        return self.nofunc_text(ChapterIndex.format_display(entry))

    def inline_chap(self, id: str) -> str:
        entry, placeholder = self._find(self._chapter_index(), id)
        if entry is None:
            return placeholder
        return self.nofunc_text(ChapterIndex.format_number(entry))

    def inline_title(self, id: str) -> str:
        entry, placeholder = self._find(self._chapter_index(), id)
        if entry is None:
            return placeholder
        return self.nofunc_text(entry.display_title or "")

    def inline_list(self, id: str) -> str:
        entry, placeholder = self._find(self.chapter.lists, id)
        if entry is None:
            return placeholder
        return self.nofunc_text(f"{LABELS['list']}{self.chapter_prefix()}{entry.number}")

    def inline_img(self, id: str) -> str:
        entry, placeholder = self._find(self.chapter.images, id)
        if entry is None:
            return placeholder
        return self.nofunc_text(f"{LABELS['image']}{self.chapter_prefix()}{entry.number}")

    def inline_table(self, id: str) -> str:
        entry, placeholder = self._find(self.chapter.tables, id)
        if entry is None:
            return placeholder
        return self.nofunc_text(f"{LABELS['table']}{self.chapter_prefix()}{entry.number}")

    def inline_fn(self, id: str) -> str:
        entry, placeholder = self._find(self.chapter.footnotes, id)
        if entry is None:
            return placeholder
        return self.footnote_ref(id, entry)

    def footnote_ref(self, id: str, entry: IndexEntry) -> str:
        return self.compile_inline(entry.content or "")

    def inline_bib(self, id: str) -> str:
        entry, placeholder = self._find(self.chapter.bibpapers, id)
        if entry is None:
            return placeholder
        return self.nofunc_text(f"[{entry.number}]")

    def inline_hd(self, arg: str) -> str:
        chapter, id = self.chapter, arg
        m = _CHAPTER_REF_RE.match(arg)
        if m and self.chapter.book is not None:
            other = self.chapter.book.chapter(m.group(1))
            if other is not None:
                chapter, id = other, m.group(2)
        entry, placeholder = self._find(chapter.headlines, id)
        if entry is None:
            return placeholder
        return self._hd_chap_text(chapter, entry)

    def _hd_chap_text(self, chapter: Chapter, entry: IndexEntry) -> str:
        caption = self.compile_inline(entry.display_title or "")
        level = len(entry.number)
        if chapter.has_number and level <= self.config.secnolevel:
            return f"「{entry.number_string}　{caption}」"
        return f"「{caption}」"

    # -- argument splitting -------------------------------------------------

    def inline_ruby(self, arg: str) -> str:
        base, _, ruby = arg.partition(",")
        return self.compile_ruby(base, ruby)

    def inline_kw(self, arg: str) -> str:
        word, sep, alt = arg.partition(",")
        return self.compile_kw(word, alt if sep else None)

    def inline_href(self, arg: str) -> str:
        parts = [p.lstrip() for p in _HREF_PART_RE.findall(arg)]
        if not parts:
            return self.compile_href("", None)
        url = parts[0].replace("\\,", ",").strip()
        label = parts[1] if len(parts) > 1 else None
        return self.compile_href(url, label)

    @abstractmethod
    def compile_ruby(self, base: str, ruby: str) -> str:
        ...

    @abstractmethod
    def compile_kw(self, word: str, alt: Optional[str]) -> str:
        ...

    @abstractmethod
    def compile_href(self, url: str, label: Optional[str]) -> str:
        ...

    # -- misc ---------------------------------------------------------------

    def inline_bou(self, s: str) -> str:
        return self.text(s)

    def inline_raw(self, arg: str) -> str:
        m = _RAW_TARGET_RE.match(arg)
        if not m:
            return self.nofunc_text(arg)
        content = self._select_raw(arg)
        return "" if content is None else content.replace("\\n", "\n")

    def inline_comment(self, s: str) -> str:
        return ""

    def inline_uchar(self, code: str) -> str:
        try:
            return self.text(chr(int(code, 16)))
        except ValueError:
            self.warn(f"invalid uchar: {code}")
            return self.nofunc_text(code)
