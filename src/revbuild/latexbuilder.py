"""LaTeX backend.

Section numbers are left to LaTeX itself: headings deeper than
``secnolevel`` use the starred sectioning commands instead of carrying a
textual prefix.  Block environments (``reviewlist``, ``reviewtable`` ...)
are expected to be defined by the book's style file.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from revbuild.builder import LABELS, Builder
from revbuild.index import IndexEntry

_SECTIONS = {
    1: "chapter",
    2: "section",
    3: "subsection",
    4: "subsubsection",
    5: "paragraph",
    6: "subparagraph",
}

_LATEX_ESCAPES = {
    "\\": r"\reviewbackslash{}",
    "{": r"\{",
    "}": r"\}",
    "$": r"\textdollar{}",
    "&": r"\&",
    "#": r"\#",
    "%": r"\%",
    "_": r"\textunderscore{}",
    "^": r"\textasciicircum{}",
    "~": r"\textasciitilde{}",
    "|": r"\textbar{}",
    "<": r"\textless{}",
    ">": r"\textgreater{}",
}
_LATEX_ESCAPE_RE = re.compile("|".join(re.escape(c) for c in _LATEX_ESCAPES))


def escape_latex(s: str) -> str:
    return _LATEX_ESCAPE_RE.sub(lambda m: _LATEX_ESCAPES[m.group(0)], s)


def escape_url(url: str) -> str:
    """\\url and \\href take the address verbatim except for these three."""
    return url.replace("\\", "\\\\").replace("#", "\\#").replace("%", "\\%")


class LATEXBuilder(Builder):
    name = "latex"
    extension = ".tex"

    def builder_init_file(self) -> None:
        self._blank_needed = False

    def escape(self, s: str) -> str:
        return escape_latex(s)

    def _blank(self) -> None:
        if self._blank_needed:
            self.puts()
        self._blank_needed = False

    def _mark_blank(self) -> None:
        self._blank_needed = True

    def _label_id(self, kind: str, id: str) -> str:
        return f"{kind}:{self.chapter.id}:{id}"

    def _env(self, name: str, lines: Sequence[str], caption: Optional[str] = None) -> None:
        self._blank()
        self.puts(f"\\begin{{{name}}}")
        if caption:
            self.puts(f"\\reviewcaption{{{self.compile_inline(caption)}}}")
        for line in lines:
            self.puts(line)
        self.puts(f"\\end{{{name}}}")
        self._mark_blank()

    # ======================================================================
    # Blocks
    # ======================================================================

    def headline(self, level, id, caption, sections) -> None:
        command = _SECTIONS[level]
        star = "*" if level > self.config.secnolevel else ""
        self._blank()
        self.puts(f"\\{command}{star}{{{self.compile_inline(caption)}}}")
        if id:
            self.puts(f"\\label{{{self._label_id('sec', id)}}}")
        self._mark_blank()

    def paragraph(self, lines) -> None:
        self._blank()
        for line in lines:
            self.puts(line)
        self._mark_blank()

    def noindent(self) -> None:
        self.puts("\\noindent")

    def quote(self, lines) -> None:
        self._env("quote", self._paragraph_lines(lines))

    def flushright(self, lines) -> None:
        self._env("flushright", self._paragraph_lines(lines))

    def _paragraph_lines(self, lines: Sequence[str]) -> list:
        return "\n\n".join(self.split_paragraph(lines)).split("\n")

    def column(self, lines, caption=None) -> None:
        self._env("reviewcolumn", self._paragraph_lines(lines), caption)

    def memo(self, lines, caption=None) -> None:
        self._env("reviewminicolumn", self._paragraph_lines(lines), caption)

    def ul(self, items) -> None:
        self._env("itemize", [f"\\item {item}" for item in items])

    def ol(self, items) -> None:
        self._env("enumerate", [f"\\item {item}" for item in items])

    def label(self, id: str) -> None:
        self.puts(f"\\label{{{id}}}")

    # -- code lists ---------------------------------------------------------

    def list_begin(self) -> None:
        self._blank()
        self.puts("\\begin{reviewlistblock}")

    def list_end(self) -> None:
        self.puts("\\end{reviewlistblock}")
        self._mark_blank()

    def list_header(self, id, number, caption) -> None:
        self.puts(
            f"\\reviewlistcaption{{{LABELS['list']}{number}: "
            f"{self.compile_inline(caption or '')}}}"
        )

    def _verbatim(self, env: str, lines: Sequence[str]) -> None:
        self.puts(f"\\begin{{{env}}}")
        for line in lines:
            self.puts(escape_latex(line.expandtabs()))
        self.puts(f"\\end{{{env}}}")

    def list_body(self, lines) -> None:
        self._verbatim("reviewlist", lines)

    def source(self, lines, caption=None) -> None:
        self._blank()
        self.puts("\\begin{reviewlistblock}")
        super().source(lines, caption)
        self.puts("\\end{reviewlistblock}")
        self._mark_blank()

    def source_header(self, caption) -> None:
        if caption:
            self.puts(f"\\reviewsourcecaption{{{self.compile_inline(caption)}}}")

    def source_body(self, lines) -> None:
        self._verbatim("reviewsource", lines)

    def emlist(self, lines, caption=None) -> None:
        self._blank()
        if caption:
            self.puts(f"\\reviewemlistcaption{{{self.compile_inline(caption)}}}")
        self._verbatim("reviewemlist", lines)
        self._mark_blank()

    def cmd(self, lines, caption=None) -> None:
        self._blank()
        if caption:
            self.puts(f"\\reviewcmdcaption{{{self.compile_inline(caption)}}}")
        self._verbatim("reviewcmd", lines)
        self._mark_blank()

    # -- images -------------------------------------------------------------

    def _graphics_options(self, metric: Optional[str]) -> str:
        if not metric:
            return "[width=\\maxwidth]"
        return f"[{metric}]"

    def _image_caption(self, id: str, caption: Optional[str]) -> None:
        if caption:
            self.puts(f"\\caption{{{self.compile_inline(caption)}}}")
        self.puts(f"\\label{{{self._label_id('image', id)}}}")

    def image_image(self, id, caption, metric) -> None:
        path = self.image_binding(id).path
        self._blank()
        self.puts("\\begin{reviewimage}")
        self.puts(f"\\includegraphics{self._graphics_options(metric)}{{{path}}}")
        self._image_caption(id, caption)
        self.puts("\\end{reviewimage}")
        self._mark_blank()

    def image_dummy(self, id, caption, lines) -> None:
        self._blank()
        self.puts("\\begin{reviewdummyimage}")
        for line in lines:
            self.puts(escape_latex(line))
        self._image_caption(id, caption)
        self.puts("\\end{reviewdummyimage}")
        self._mark_blank()

    def indepimage(self, id, caption=None, metric=None) -> None:
        binding = self.image_binding(id, indexed=False)
        self._blank()
        self.puts("\\begin{reviewimage}")
        if binding.bound:
            self.puts(f"\\includegraphics{self._graphics_options(metric)}{{{binding.path}}}")
        else:
            if self.strict:
                self.warn(f"image not bound: {id}")
            self.puts(f"\\reviewdummyimage{{{escape_latex(id)}}}")
        if caption:
            self.puts(f"\\reviewindepimagecaption{{{LABELS['image']}: {self.compile_inline(caption)}}}")
        self.puts("\\end{reviewimage}")
        self._mark_blank()

    # -- tables -------------------------------------------------------------

    def table_open(self) -> None:
        self._blank()

    def table_close(self) -> None:
        self._mark_blank()

    def table_header(self, id, number, caption) -> None:
        self.puts(f"\\reviewtablecaption{{{self.compile_inline(caption)}}}")
        self.puts(f"\\label{{{self._label_id('table', id)}}}")

    def table_begin(self, ncols: int) -> None:
        colspec = "|" + "|".join("l" * ncols) + "|"
        self.puts(f"\\begin{{reviewtable}}{{{colspec}}}")
        self.puts("\\hline")

    def tr(self, cells) -> None:
        self.puts(" & ".join(cells) + " \\\\  \\hline")

    def th(self, s: str) -> str:
        return f"\\reviewth{{{s}}}"

    def td(self, s: str) -> str:
        return s

    def table_end(self) -> None:
        self.puts("\\end{reviewtable}")

    # -- footnotes and bibliography -----------------------------------------

    def footnote(self, id: str, content: str) -> None:
        # the text is emitted in place by @<fn>
        pass

    def footnote_ref(self, id: str, entry: IndexEntry) -> str:
        return f"\\footnote{{{self.compile_inline(entry.content or '')}}}"

    def bibpaper_header(self, id, caption) -> None:
        self.puts(f"[{self.bib_number(id)}] {self.compile_inline(caption or '')}")
        self.puts(f"\\label{{{self._label_id('bib', id)}}}")

    def bibpaper_bibpaper(self, id, caption, lines) -> None:
        self.puts("\n\n".join(self.split_paragraph(lines)))

    # ======================================================================
    # Inline
    # ======================================================================

    def inline_b(self, s: str) -> str:
        return f"\\reviewbold{{{s}}}"

    def inline_strong(self, s: str) -> str:
        return f"\\reviewstrong{{{s}}}"

    def inline_i(self, s: str) -> str:
        return f"\\reviewit{{{s}}}"

    def inline_em(self, s: str) -> str:
        return f"\\reviewem{{{s}}}"

    def inline_tt(self, s: str) -> str:
        return f"\\reviewtt{{{s}}}"

    def inline_tti(self, s: str) -> str:
        return f"\\reviewtti{{{s}}}"

    def inline_ttb(self, s: str) -> str:
        return f"\\reviewttb{{{s}}}"

    def inline_u(self, s: str) -> str:
        return f"\\reviewunderline{{{s}}}"

    def inline_ami(self, s: str) -> str:
        return f"\\reviewami{{{s}}}"

    def inline_bou(self, s: str) -> str:
        return f"\\reviewbou{{{s}}}"

    def inline_sup(self, s: str) -> str:
        return f"\\textsuperscript{{{s}}}"

    def inline_sub(self, s: str) -> str:
        return f"\\textsubscript{{{s}}}"

    def inline_del(self, s: str) -> str:
        return f"\\reviewstrike{{{s}}}"

    def inline_ins(self, s: str) -> str:
        return f"\\reviewinsert{{{s}}}"

    def inline_code(self, s: str) -> str:
        return f"\\reviewcode{{{escape_latex(s)}}}"

    def inline_m(self, s: str) -> str:
        return f"${s}$"

    def inline_br(self, s: str) -> str:
        return "\\\\\n"

    def inline_uchar(self, code: str) -> str:
        return f"\\UTF{{{escape_latex(code)}}}"

    def inline_icon(self, id: str) -> str:
        binding = self.image_binding(id, indexed=False)
        if not binding.bound:
            self.warn(f"image not bound: {id}")
            return escape_latex(f"[{id}]")
        return f"\\includegraphics{{{binding.path}}}"

    def compile_ruby(self, base: str, ruby: str) -> str:
        return f"\\ruby{{{escape_latex(base)}}}{{{escape_latex(ruby)}}}"

    def compile_kw(self, word: str, alt: Optional[str]) -> str:
        text = f"{word}（{alt.strip()}）" if alt else word
        return f"\\reviewkw{{{escape_latex(text)}}}\\index{{{escape_latex(word)}}}"

    def compile_href(self, url: str, label: Optional[str]) -> str:
        if label:
            return f"\\href{{{escape_url(url)}}}{{{escape_latex(label)}}}"
        return f"\\url{{{escape_url(url)}}}"
