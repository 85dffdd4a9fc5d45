"""High-level chapter conversion orchestrator.

Ties together the indices, the command compiler and a builder backend into
a single public API.  Rendering a chapter takes two passes over its command
stream: the indexing pass registers every numbered element so that forward
references resolve, the render pass feeds the commands to the builder.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from revbuild.book import Book, BookConfig, Chapter, StaticImageResolver
from revbuild.builder import Builder, advance_sections, new_sections
from revbuild.compiler import Command, Compiler
from revbuild.exceptions import DuplicateIdError
from revbuild.htmlbuilder import HTMLBuilder
from revbuild.latexbuilder import LATEXBuilder
from revbuild.location import Location
from revbuild.topbuilder import TOPBuilder

logger = logging.getLogger(__name__)

# Commands whose id is registered in a chapter index, by index attribute
_INDEXED_COMMANDS = {
    "list": "lists",
    "listnum": "lists",
    "table": "tables",
    "image": "images",
    "bibpaper": "bibpapers",
}


class Converter:
    """Convert command streams to one backend's output.

    Usage::

        converter = Converter(builder="latex", config=BookConfig(secnolevel=3))
        text = converter.convert(chapter, commands)

        # encoded for config.outencoding
        data = converter.convert_bytes(chapter, commands)
    """

    BUILDERS: dict[str, type[Builder]] = {
        "html": HTMLBuilder,
        "latex": LATEXBuilder,
        "top": TOPBuilder,
    }

    def __init__(
        self,
        builder: str = "html",
        config: Optional[BookConfig] = None,
        strict: bool = False,
    ) -> None:
        if builder not in self.BUILDERS:
            raise ValueError(
                f"Unknown builder '{builder}'. Choose from: {', '.join(self.BUILDERS)}"
            )
        self.config = config if config is not None else BookConfig()
        self.builder = self.BUILDERS[builder](self.config, strict=strict)
        self.compiler = Compiler(self.builder)

    @property
    def warnings(self) -> list:
        return self.builder.warnings

    @property
    def errors(self) -> list:
        return self.builder.errors

    def index(self, chapter: Chapter, commands: Iterable[Command]) -> list:
        """Register the ids defined by *commands* in *chapter*'s indices.

        Ids that are already registered are reported and skipped; the
        messages are returned so a later render pass can surface them.
        """
        messages: list[str] = []
        sections = new_sections()
        for command in commands:
            try:
                self._index_command(chapter, command, sections)
            except DuplicateIdError as exc:
                message = f"{Location(chapter.name, command.lineno)}: warning: {exc}"
                logger.warning(message)
                messages.append(message)
        return messages

    def _index_command(self, chapter: Chapter, command: Command, sections: list) -> None:
        if command.name == "heading":
            path = advance_sections(sections, command.level)
            if command.id:
                chapter.headlines.register(
                    command.id, command.caption, number=(chapter.number or 0,) + path
                )
        elif command.name == "footnote":
            if command.id:
                chapter.footnotes.register(command.id, content=command.caption or "")
        elif command.name in _INDEXED_COMMANDS and command.id:
            index = getattr(chapter, _INDEXED_COMMANDS[command.name])
            index.register(command.id, command.caption)

    def convert(
        self,
        chapter: Chapter,
        commands: Iterable[Command],
        *,
        filename: Optional[str] = None,
        index: bool = True,
    ) -> str:
        """Render *chapter* and return the backend text.

        Args:
            chapter: Chapter whose indices receive the registered ids.
            commands: Block commands in document order.
            filename: Name used in diagnostics; defaults to the chapter name.
            index: Run the indexing pass first.  Pass ``False`` when the
                indices were populated beforehand (see :meth:`convert_book`).
        """
        commands = list(commands)
        messages = self.index(chapter, commands) if index else []
        self.builder.bind(chapter, Location(filename or chapter.name))
        self.builder.warnings.extend(messages)
        return self.compiler.compile(commands)

    def convert_bytes(self, chapter: Chapter, commands: Iterable[Command], **kwargs: Any) -> bytes:
        """Like :meth:`convert`, encoded for ``config.outencoding``."""
        self.convert(chapter, commands, **kwargs)
        return self.builder.render()

    def convert_book(self, book: Book, documents: Mapping[str, Iterable[Command]]) -> dict:
        """Render every chapter of *book* that has commands in *documents*.

        All chapters are indexed before the first one is rendered, so
        ``@<hd>{chap|id}`` may point forward.  Returns ``{chapter_id: text}``.
        """
        streams = {id: list(commands) for id, commands in documents.items()}
        pending: dict[str, list] = {}
        for chapter in book:
            if chapter.id in streams:
                pending[chapter.id] = self.index(chapter, streams[chapter.id])
        results: dict[str, str] = {}
        for chapter in book:
            if chapter.id not in streams:
                continue
            self.builder.bind(chapter, Location(chapter.name))
            self.builder.warnings.extend(pending[chapter.id])
            results[chapter.id] = self.compiler.compile(streams[chapter.id])
        return results


def load_document(data: Mapping[str, Any], config: Optional[BookConfig] = None) -> tuple:
    """Build ``(chapter, commands)`` from a JSON-like document.

    The document looks like::

        {
            "chapter": {"id": "ch01", "number": 1, "title": "Intro"},
            "images": {"fig1": ["images/ch01/fig1.png"]},
            "image_entries": ["ch01-fig2.png", "ch01-fig2.eps"],
            "commands": [{"name": "paragraph", "lines": ["Hello"]}]
        }

    ``image_entries`` lists file names found in the image directory; they
    are matched to ids following ``config.subdirmode``.
    """
    info = dict(data.get("chapter") or {})
    if "id" not in info:
        raise ValueError("document chapter needs an 'id'")
    config = config if config is not None else BookConfig()
    name = info.get("name") or info["id"]
    resolver = StaticImageResolver.from_entries(
        data.get("image_entries") or [],
        name,
        subdirmode=config.subdirmode,
        image_types=config.image_types,
    )
    for id, paths in (data.get("images") or {}).items():
        resolver.add(id, *paths)
    chapter = Chapter(
        info["id"],
        info.get("number"),
        info.get("title"),
        name=name,
        image_resolver=resolver,
    )
    commands = [Command.from_dict(c) for c in data.get("commands") or []]
    return chapter, commands
