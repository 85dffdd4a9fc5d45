"""Inline directive parsing and resolution.

Inline markup has a small grammar::

    run       := (text | directive)*
    directive := "@<" TAG ">{" argument "}"
    argument  := (escape | directive | any char except "}")*
    escape    := "\\" any char

Inside an argument ``\\}`` stands for a literal closing brace; every other
backslash pair is kept as written.  Nested directives are always parsed so
that their braces balance, but they are only *resolved* for tags listed in
the builder's ``NESTED_INLINE_TAGS``; all other tags receive the argument
source text.

:class:`InlineParser` turns a string into :class:`Directive` nodes and plain
strings; :class:`InlineResolver` walks those nodes and calls back into a
builder for every directive.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from revbuild.exceptions import InlineSyntaxError, UnknownInlineTagError

if TYPE_CHECKING:
    from revbuild.builder import Builder

MAX_DEPTH = 32

_OPENER_RE = re.compile(r"@<(\w+)>\{")


@dataclass
class Directive:
    tag: str
    argument: str
    children: list = field(default_factory=list)
    too_deep: bool = field(default=False, compare=False, repr=False)

    @property
    def nested(self) -> bool:
        return any(isinstance(child, Directive) for child in self.children)


Node = Union[str, Directive]


class InlineParser:
    """Recursive-descent parser for one run of inline text."""

    def __init__(self, source: str, max_depth: int = MAX_DEPTH) -> None:
        self.source = source
        self.max_depth = max_depth
        self.pos = 0
        self.warnings: list[str] = []
        self._memo: dict = {}

    def parse(self) -> list:
        nodes, _closed, _raw = self._parse_nodes(depth=0, in_argument=False)
        return nodes

    # -- grammar ------------------------------------------------------------

    def _parse_nodes(self, depth: int, in_argument: bool) -> tuple:
        """Parse until end of input or, inside an argument, the closing brace.

        Returns ``(nodes, closed, raw)`` where *raw* is the argument text with
        ``\\}`` unescaped.
        """
        src = self.source
        nodes: list = []
        text: list[str] = []
        raw: list[str] = []

        def flush() -> None:
            if text:
                nodes.append("".join(text))
                text.clear()

        while self.pos < len(src):
            ch = src[self.pos]
            if in_argument and ch == "\\" and self.pos + 1 < len(src):
                pair = src[self.pos:self.pos + 2]
                literal = "}" if pair == "\\}" else pair
                text.append(literal)
                raw.append(literal)
                self.pos += 2
                continue
            if in_argument and ch == "}":
                self.pos += 1
                flush()
                return nodes, True, "".join(raw)
            match = _OPENER_RE.match(src, self.pos)
            if match:
                start = self.pos
                mark = len(self.warnings)
                directive = self._parse_directive(match, depth + 1)
                if directive is None:
                    del self.warnings[mark:]
                    # unterminated: keep the opener as text and rescan after it
                    self.warnings.append(f"unterminated inline: {match.group(0)}")
                    self.pos = match.end()
                    text.append(match.group(0))
                    raw.append(match.group(0))
                    continue
                flush()
                nodes.append(directive)
                raw.append(src[start:self.pos])
                continue
            text.append(ch)
            raw.append(ch)
            self.pos += 1

        flush()
        return nodes, False, "".join(raw)

    def _parse_directive(self, match: re.Match, depth: int):
        """Parse one directive whose opener is *match*; ``None`` if unterminated.

        Results are cached by opener position: an opener that failed to close
        inside an enclosing argument is met again when the text after the
        enclosing opener is rescanned, and closing does not depend on depth.
        """
        start = match.start()
        if start in self._memo:
            cached = self._memo[start]
            if cached is None:
                return None
            directive, self.pos = cached
            return directive
        self.pos = match.end()
        if depth > self.max_depth:
            # Too deep to build, but the enclosing openers may still turn out
            # to be unterminated; only a closed outermost directive is fatal.
            if not self._skip_argument():
                self._memo[start] = None
                return None
            argument = self.source[match.end():self.pos - 1]
            return Directive(match.group(1), argument, [argument], too_deep=True)
        children, closed, raw = self._parse_nodes(depth, in_argument=True)
        if not closed:
            self._memo[start] = None
            return None
        too_deep = any(isinstance(c, Directive) and c.too_deep for c in children)
        if too_deep and depth == 1:
            raise InlineSyntaxError(
                f"inline directives nested deeper than {self.max_depth}"
            )
        directive = Directive(match.group(1), raw, children, too_deep=too_deep)
        if not too_deep:
            self._memo[start] = (directive, self.pos)
        return directive

    def _skip_argument(self) -> bool:
        """Advance past an argument without building nodes; ``False`` at end of input."""
        src = self.source
        open_braces = 0
        while self.pos < len(src):
            ch = src[self.pos]
            if ch == "\\" and self.pos + 1 < len(src):
                self.pos += 2
                continue
            if ch == "}":
                self.pos += 1
                if open_braces == 0:
                    return True
                open_braces -= 1
                continue
            match = _OPENER_RE.match(src, self.pos)
            if match:
                open_braces += 1
                self.pos = match.end()
                continue
            self.pos += 1
        return False


def parse_inline(source: str, max_depth: int = MAX_DEPTH) -> list:
    return InlineParser(source, max_depth).parse()


class InlineResolver:
    """Resolve inline runs into backend markup through a builder."""

    def __init__(self, builder: Builder, max_depth: int = MAX_DEPTH) -> None:
        self.builder = builder
        self.max_depth = max_depth

    def resolve(self, source: str) -> str:
        parser = InlineParser(source, self.max_depth)
        try:
            nodes = parser.parse()
        except InlineSyntaxError as exc:
            self.builder.error(str(exc))
        for message in parser.warnings:
            self.builder.warn(message)
        return self._render(nodes)

    def _render(self, nodes: list) -> str:
        out: list[str] = []
        for node in nodes:
            if isinstance(node, Directive):
                out.append(self._render_directive(node))
            else:
                out.append(self.builder.nofunc_text(node))
        return "".join(out)

    def _render_directive(self, directive: Directive) -> str:
        if directive.tag in self.builder.NESTED_INLINE_TAGS:
            argument = self._render(directive.children)
        else:
            argument = directive.argument
        try:
            return self.builder.inline(directive.tag, argument)
        except UnknownInlineTagError as exc:
            self.builder.warn(str(exc))
            return self.builder.nofunc_text(f"[UnknownInline:{directive.tag}]")
