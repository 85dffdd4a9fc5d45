"""Dispatch of block commands onto a builder.

The block lexer that turns source text into commands lives outside this
package; it hands over :class:`Command` values in document order and this
module routes each one to the matching builder operation.  Lines of
text-bearing blocks (paragraphs, quotes, tables, columns, list items) are
inline-compiled here, before the builder sees them; code blocks are passed
through verbatim and escaped by the builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional

from revbuild.builder import Builder


@dataclass
class Command:
    """One block construct as delivered by the block lexer."""

    name: str
    lines: list = field(default_factory=list)
    id: Optional[str] = None
    caption: Optional[str] = None
    level: int = 1
    metric: Optional[str] = None
    lineno: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> Command:
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        known["lines"] = list(known.get("lines") or [])
        return cls(**known)


class Compiler:
    """Feed commands to a bound builder."""

    # Commands whose lines are author text rather than code
    INLINE_BLOCKS = frozenset({
        "paragraph", "quote", "flushright", "table", "column", "memo", "ul", "ol",
    })

    def __init__(self, builder: Builder) -> None:
        self.builder = builder
        self._handlers: dict[str, Callable[[Command], None]] = {
            "heading": lambda c: builder.heading(c.level, c.id, c.caption or ""),
            "paragraph": lambda c: builder.paragraph(c.lines),
            "noindent": lambda c: builder.noindent(),
            "quote": lambda c: builder.quote(c.lines),
            "flushright": lambda c: builder.flushright(c.lines),
            "column": lambda c: builder.column(c.lines, c.caption),
            "memo": lambda c: builder.memo(c.lines, c.caption),
            "ul": lambda c: builder.ul(c.lines),
            "ol": lambda c: builder.ol(c.lines),
            "label": lambda c: builder.label(c.id or ""),
            "raw": self._raw,
            "list": lambda c: builder.list(c.lines, c.id, c.caption),
            "listnum": lambda c: builder.listnum(c.lines, c.id, c.caption),
            "source": lambda c: builder.source(c.lines, c.caption),
            "emlist": lambda c: builder.emlist(c.lines, c.caption),
            "cmd": lambda c: builder.cmd(c.lines, c.caption),
            "image": lambda c: builder.image(c.lines, c.id or "", c.caption, c.metric),
            "indepimage": lambda c: builder.indepimage(c.id or "", c.caption, c.metric),
            "table": lambda c: builder.table(c.lines, c.id, c.caption),
            "footnote": lambda c: builder.footnote(c.id or "", c.caption or ""),
            "bibpaper": lambda c: builder.bibpaper(c.lines, c.id or "", c.caption),
        }

    def _raw(self, command: Command) -> None:
        for line in command.lines:
            self.builder.raw(line)

    @property
    def commands(self) -> list:
        return sorted(self._handlers)

    def text(self, s: str) -> str:
        return self.builder.compile_inline(s)

    def compile_command(self, command: Command) -> None:
        handler = self._handlers.get(command.name)
        builder = self.builder
        builder.location = builder.location.moved_to(command.lineno)
        if handler is None:
            builder.error(f"unknown command: //{command.name}")
        if command.name in self.INLINE_BLOCKS:
            command = replace(command, lines=[self.text(line) for line in command.lines])
        handler(command)

    def compile(self, commands: Iterable[Command]) -> str:
        """Run every command through the builder and return its buffer."""
        for command in commands:
            self.compile_command(command)
        return self.builder.result()

