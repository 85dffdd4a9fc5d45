"""HTML backend.

Emits XHTML fragments; :meth:`HTMLBuilder.document` wraps the fragment in
a page that links the configured stylesheet.
"""

from __future__ import annotations

from typing import Optional, Sequence

from revbuild.builder import LABELS, Builder
from revbuild.index import IndexEntry, NotFound


def escape_html(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def unescape_html(s: str) -> str:
    return (
        s.replace("&quot;", '"')
        .replace("&gt;", ">")
        .replace("&lt;", "<")
        .replace("&amp;", "&")
    )


def _strip_dot_slash(path: str) -> str:
    return path[2:] if path.startswith("./") else path


class HTMLBuilder(Builder):
    name = "html"
    extension = ".html"
    ENCODE_ERRORS = "xmlcharrefreplace"

    def builder_init_file(self) -> None:
        self._noindent = False

    def escape(self, s: str) -> str:
        return escape_html(s)

    def document(self, title: Optional[str] = None) -> str:
        """The rendered chapter as a standalone XHTML page."""
        title = title or self.chapter.title or self.chapter.id
        head = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<html xmlns="http://www.w3.org/1999/xhtml">',
            "<head>",
            f"<title>{escape_html(title)}</title>",
        ]
        if self.config.stylesheet:
            head.append(
                f'<link rel="stylesheet" type="text/css" '
                f'href="{escape_html(self.config.stylesheet)}" />'
            )
        head += ["</head>", "<body>"]
        return "\n".join(head) + "\n" + self.result() + "</body>\n</html>\n"

    # ======================================================================
    # Blocks
    # ======================================================================

    def headline(self, level, id, caption, sections) -> None:
        chapter = self.chapter
        number = chapter.number if chapter.has_number else ""
        anchor = "h" + "-".join(str(n) for n in (number,) + sections)
        prefix = self.headline_prefix(level, sections)
        if level > 1:
            self.puts()
        id_attr = f' id="{escape_html(id)}"' if id else ""
        self.puts(
            f'<h{level}{id_attr}><a id="{anchor}" />'
            f"{prefix}{self.compile_inline(caption)}</h{level}>"
        )

    def paragraph(self, lines: Sequence[str]) -> None:
        if self._noindent:
            self.puts(f'<p class="noindent">{"".join(lines)}</p>')
            self._noindent = False
        else:
            self.puts(f'<p>{"".join(lines)}</p>')

    def noindent(self) -> None:
        self._noindent = True

    def quote(self, lines: Sequence[str]) -> None:
        body = "\n".join(f"<p>{p}</p>" for p in self.split_paragraph(lines))
        self.puts(f"<blockquote>{body}</blockquote>")

    def flushright(self, lines: Sequence[str]) -> None:
        for p in self.split_paragraph(lines):
            self.puts(f'<p class="flushright">{p}</p>')

    def _captioned_div(self, css: str, lines, caption) -> None:
        self.puts(f'<div class="{css}">')
        if caption:
            self.puts(f'<p class="caption">{self.compile_inline(caption)}</p>')
        for p in self.split_paragraph(lines):
            self.puts(f"<p>{p}</p>")
        self.puts("</div>")

    def column(self, lines, caption=None) -> None:
        self._captioned_div("column", lines, caption)

    def memo(self, lines, caption=None) -> None:
        self._captioned_div("memo", lines, caption)

    def ul(self, items: Sequence[str]) -> None:
        self.puts("<ul>")
        for item in items:
            self.puts(f"<li>{item}</li>")
        self.puts("</ul>")

    def ol(self, items: Sequence[str]) -> None:
        self.puts("<ol>")
        for item in items:
            self.puts(f"<li>{item}</li>")
        self.puts("</ol>")

    def label(self, id: str) -> None:
        self.puts(f'<a id="{escape_html(id)}" />')

    # -- code lists ---------------------------------------------------------

    def _pre(self, css: str, lines: Sequence[str]) -> None:
        self.puts(f'<pre class="{css}">')
        for line in lines:
            self.puts(escape_html(line.expandtabs()))
        self.puts("</pre>")

    def list_begin(self) -> None:
        self.puts('<div class="caption-code">')

    def list_end(self) -> None:
        self.puts("</div>")

    def list_header(self, id, number, caption) -> None:
        self.puts(
            f'<p class="caption">{LABELS["list"]}{number}: '
            f"{self.compile_inline(caption or '')}</p>"
        )

    def list_body(self, lines) -> None:
        self._pre("list", lines)

    def source(self, lines, caption=None) -> None:
        self.puts('<div class="source-code">')
        super().source(lines, caption)
        self.puts("</div>")

    def source_header(self, caption) -> None:
        if caption:
            self.puts(f'<p class="caption">{self.compile_inline(caption)}</p>')

    def source_body(self, lines) -> None:
        self._pre("source", lines)

    def emlist(self, lines, caption=None) -> None:
        self.puts('<div class="emlist-code">')
        if caption:
            self.puts(f'<p class="caption">{self.compile_inline(caption)}</p>')
        self._pre("emlist", lines)
        self.puts("</div>")

    def cmd(self, lines, caption=None) -> None:
        self.puts('<div class="cmd-code">')
        if caption:
            self.puts(f'<p class="caption">{self.compile_inline(caption)}</p>')
        self._pre("cmd", lines)
        self.puts("</div>")

    # -- images -------------------------------------------------------------

    def _image_caption(self, label: str, caption: Optional[str]) -> None:
        self.puts('<p class="caption">')
        self.puts(f"{label}{self.compile_inline(caption or '')}")
        self.puts("</p>")

    def image_header(self, id: str, caption: Optional[str]) -> None:
        if caption is None:
            return
        number = self.image_number(id)
        label = f"{LABELS['image']}{number}: " if number is not None else ""
        self._image_caption(label, caption)

    def image_image(self, id, caption, metric) -> None:
        path = _strip_dot_slash(self.image_binding(id).path or "")
        self.puts('<div class="image">')
        self.puts(f'<img src="{escape_html(path)}" alt="{escape_html(caption or "")}" />')
        self.image_header(id, caption)
        self.puts("</div>")

    def image_dummy(self, id, caption, lines) -> None:
        self.puts('<div class="image">')
        self._pre("dummyimage", lines)
        self.image_header(id, caption)
        self.puts("</div>")

    def indepimage(self, id, caption=None, metric=None) -> None:
        binding = self.image_binding(id, indexed=False)
        self.puts('<div class="image">')
        if binding.bound:
            path = _strip_dot_slash(binding.path)
            self.puts(f'<img src="{escape_html(path)}" alt="{escape_html(caption or "")}" />')
        else:
            if self.strict:
                self.warn(f"image not bound: {id}")
            self._pre("dummyimage", [id])
        if caption:
            self._image_caption(f"{LABELS['image']}: ", caption)
        self.puts("</div>")

    # -- tables -------------------------------------------------------------

    def table_open(self) -> None:
        self.puts('<div class="table">')

    def table_close(self) -> None:
        self.puts("</div>")

    def table_header(self, id, number, caption) -> None:
        self.puts(
            f'<p class="caption">{LABELS["table"]}{number}: '
            f"{self.compile_inline(caption)}</p>"
        )

    def table_begin(self, ncols: int) -> None:
        self.puts("<table>")

    def tr(self, cells) -> None:
        self.puts(f"<tr>{''.join(cells)}</tr>")

    def th(self, s: str) -> str:
        return f"<th>{s}</th>"

    def td(self, s: str) -> str:
        return f"<td>{s}</td>"

    def table_end(self) -> None:
        self.puts("</table>")

    # -- footnotes and bibliography -----------------------------------------

    def footnote(self, id: str, content: str) -> None:
        result = self.chapter.footnotes.find(id)
        if isinstance(result, NotFound):
            self.report_error(f"no such footnote: {id}")
            number = "?"
        else:
            number = str(result.entry.number)
        self.puts(
            f'<div class="footnote"><p class="footnote">'
            f'[<a id="fn-{escape_html(id)}">*{number}</a>] '
            f"{self.compile_inline(content)}</p></div>"
        )

    def footnote_ref(self, id: str, entry: IndexEntry) -> str:
        return f'<a href="#fn-{escape_html(id)}" class="noteref">*{entry.number}</a>'

    def bibpaper_header(self, id, caption) -> None:
        self.write(f'<a id="bib-{escape_html(id)}">[{self.bib_number(id)}]</a>')
        self.puts(f" {self.compile_inline(caption or '')}")

    def bibpaper_bibpaper(self, id, caption, lines) -> None:
        self.puts("".join(f"<p>{p}</p>" for p in self.split_paragraph(lines)))

    # ======================================================================
    # Inline
    # ======================================================================

    def inline_b(self, s: str) -> str:
        return f"<b>{s}</b>"

    def inline_strong(self, s: str) -> str:
        return f"<strong>{s}</strong>"

    def inline_i(self, s: str) -> str:
        return f"<i>{s}</i>"

    def inline_em(self, s: str) -> str:
        return f"<em>{s}</em>"

    def inline_tt(self, s: str) -> str:
        return f"<tt>{s}</tt>"

    def inline_tti(self, s: str) -> str:
        return f"<tt><i>{s}</i></tt>"

    def inline_ttb(self, s: str) -> str:
        return f"<tt><b>{s}</b></tt>"

    def inline_u(self, s: str) -> str:
        return f"<u>{s}</u>"

    def inline_ami(self, s: str) -> str:
        return f'<span class="ami">{s}</span>'

    def inline_bou(self, s: str) -> str:
        return f'<span class="bou">{s}</span>'

    def inline_sup(self, s: str) -> str:
        return f"<sup>{s}</sup>"

    def inline_sub(self, s: str) -> str:
        return f"<sub>{s}</sub>"

    def inline_del(self, s: str) -> str:
        return f"<del>{s}</del>"

    def inline_ins(self, s: str) -> str:
        return f"<ins>{s}</ins>"

    def inline_code(self, s: str) -> str:
        return f'<code class="inline-code">{escape_html(s)}</code>'

    def inline_m(self, s: str) -> str:
        return f'<span class="equation">{escape_html(s)}</span>'

    def inline_br(self, s: str) -> str:
        return "<br />"

    def inline_uchar(self, code: str) -> str:
        try:
            int(code, 16)
        except ValueError:
            return super().inline_uchar(code)
        return f"&#x{code};"

    def inline_bib(self, id: str) -> str:
        result = self.chapter.bibpapers.find(id)
        if isinstance(result, NotFound):
            return self._unknown(result)
        return f'<a href="#bib-{escape_html(id)}">[{result.entry.number}]</a>'

    def inline_icon(self, id: str) -> str:
        binding = self.image_binding(id, indexed=False)
        if not binding.bound:
            self.warn(f"image not bound: {id}")
            return escape_html(f"[{id}]")
        return f'<img src="{escape_html(_strip_dot_slash(binding.path))}" alt="[{escape_html(id)}]" />'

    def compile_ruby(self, base: str, ruby: str) -> str:
        return (
            f"<ruby><rb>{escape_html(base)}</rb><rp>（</rp>"
            f"<rt>{escape_html(ruby)}</rt><rp>）</rp></ruby>"
        )

    def compile_kw(self, word: str, alt: Optional[str]) -> str:
        text = f"{word} ({alt.strip()})" if alt else word
        return f'<b class="kw">{escape_html(text)}</b><!-- IDX:{escape_html(word)} -->'

    def compile_href(self, url: str, label: Optional[str]) -> str:
        return f'<a href="{escape_html(url)}" class="link">{escape_html(label or url)}</a>'
