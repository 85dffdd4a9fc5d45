"""Plain-text backend with editorial markers.

The output is meant for a DTP operator: block boundaries are marked with
``◆→開始:...←◆`` / ``◆→終了:...←◆`` and inline styles with ``★...☆``
style brackets.  Nothing is escaped.
"""

from __future__ import annotations

from typing import Optional

from revbuild.builder import LABELS, Builder
from revbuild.index import Found, IndexEntry

_HEADLINE_MARKS = {1: "■H1■", 2: "■H2■", 3: "■H3■", 4: "■H4■", 5: "■H5■", 6: "■H6■"}


class TOPBuilder(Builder):
    name = "top"
    extension = ".txt"

    def builder_init_file(self) -> None:
        self._blank_needed = False

    def _blank(self) -> None:
        if self._blank_needed:
            self.puts()
        self._blank_needed = False

    def _begin(self, kind: str) -> None:
        self._blank()
        self.puts(f"◆→開始:{kind}←◆")

    def _end(self, kind: str) -> None:
        self.puts(f"◆→終了:{kind}←◆")
        self._blank_needed = True

    # ======================================================================
    # Blocks
    # ======================================================================

    def headline(self, level, id, caption, sections) -> None:
        self._blank()
        prefix = self.headline_prefix(level, sections)
        self.puts(f"{_HEADLINE_MARKS[level]}{prefix}{self.compile_inline(caption)}")
        self._blank_needed = True

    def paragraph(self, lines) -> None:
        self._blank()
        self.puts("".join(lines))
        self._blank_needed = True

    def quote(self, lines) -> None:
        self._begin("引用")
        self.puts("\n".join(self.split_paragraph(lines)))
        self._end("引用")

    def flushright(self, lines) -> None:
        self._begin("右寄せ")
        self.puts("\n".join(self.split_paragraph(lines)))
        self._end("右寄せ")

    def _boxed(self, kind: str, lines, caption) -> None:
        self._begin(kind)
        if caption:
            self.puts(f"■{self.compile_inline(caption)}")
        self.puts("\n".join(self.split_paragraph(lines)))
        self._end(kind)

    def column(self, lines, caption=None) -> None:
        self._boxed("コラム", lines, caption)

    def memo(self, lines, caption=None) -> None:
        self._boxed("メモ", lines, caption)

    def ul(self, items) -> None:
        self._begin("箇条書き")
        for item in items:
            self.puts(f"●\t{item}")
        self._end("箇条書き")

    def ol(self, items) -> None:
        self._begin("番号付き箇条書き")
        for n, item in enumerate(items, 1):
            self.puts(f"{n}\t{item}")
        self._end("番号付き箇条書き")

    def label(self, id: str) -> None:
        # labels have no visible form in plain text
        pass

    # -- code lists ---------------------------------------------------------

    def list_begin(self) -> None:
        self._begin(LABELS["list"])

    def list_end(self) -> None:
        self._end(LABELS["list"])

    def list_header(self, id, number, caption) -> None:
        self.puts(f"{LABELS['list']}{number}　{self.compile_inline(caption or '')}")
        self.puts()

    def list_body(self, lines) -> None:
        for line in lines:
            self.puts(line.expandtabs())

    def source(self, lines, caption=None) -> None:
        self._begin("ソースコード")
        super().source(lines, caption)
        self._end("ソースコード")

    def source_header(self, caption) -> None:
        if caption:
            self.puts(f"■{self.compile_inline(caption)}")
            self.puts()

    def source_body(self, lines) -> None:
        self.list_body(lines)

    def emlist(self, lines, caption=None) -> None:
        self._begin("インラインリスト")
        self.source_header(caption)
        self.list_body(lines)
        self._end("インラインリスト")

    def cmd(self, lines, caption=None) -> None:
        self._begin("コマンド")
        self.source_header(caption)
        self.list_body(lines)
        self._end("コマンド")

    # -- images -------------------------------------------------------------

    def _image_caption(self, id: str, caption: Optional[str]) -> None:
        number = self.image_number(id)
        label = f"{LABELS['image']}{number}　" if number is not None else ""
        self.puts(f"{label}{self.compile_inline(caption or '')}")
        self.puts()

    def image_image(self, id, caption, metric) -> None:
        self._begin(LABELS["image"])
        self._image_caption(id, caption)
        self.puts(f"◆→{self.image_binding(id).path}←◆")
        self._end(LABELS["image"])

    def image_dummy(self, id, caption, lines) -> None:
        self._begin(LABELS["image"])
        self._image_caption(id, caption)
        for line in lines:
            self.puts(line)
        self._end(LABELS["image"])

    def indepimage(self, id, caption=None, metric=None) -> None:
        binding = self.image_binding(id, indexed=False)
        self._begin(LABELS["image"])
        if caption:
            self.puts(f"{LABELS['image']}　{self.compile_inline(caption)}")
            self.puts()
        if binding.bound:
            self.puts(f"◆→{binding.path}←◆")
        else:
            if self.strict:
                self.warn(f"image not bound: {id}")
            self.puts(f"◆→ダミー画像:{id}←◆")
        self._end(LABELS["image"])

    # -- tables -------------------------------------------------------------

    def table_open(self) -> None:
        self._begin(LABELS["table"])

    def table_close(self) -> None:
        self._end(LABELS["table"])

    def table_header(self, id, number, caption) -> None:
        self.puts(f"{LABELS['table']}{number}　{self.compile_inline(caption)}")
        self.puts()

    def table_begin(self, ncols: int) -> None:
        pass

    def tr(self, cells) -> None:
        self.puts("\t".join(cells))

    def th(self, s: str) -> str:
        return f"★{s}☆"

    def td(self, s: str) -> str:
        return s

    def table_end(self) -> None:
        pass

    # -- footnotes and bibliography -----------------------------------------

    def footnote(self, id: str, content: str) -> None:
        result = self.chapter.footnotes.find(id)
        if isinstance(result, Found):
            number = result.entry.number
        else:
            self.report_error(f"no such footnote: {id}")
            number = "?"
        self._begin("脚注")
        self.puts(f"【注{number}】{self.compile_inline(content)}")
        self._end("脚注")

    def footnote_ref(self, id: str, entry: IndexEntry) -> str:
        return f"【注{entry.number}】"

    def bibpaper_header(self, id, caption) -> None:
        self.puts(f"[{self.bib_number(id)}] {self.compile_inline(caption or '')}")

    def bibpaper_bibpaper(self, id, caption, lines) -> None:
        self.puts("\n".join(self.split_paragraph(lines)))

    # ======================================================================
    # Inline
    # ======================================================================

    def inline_b(self, s: str) -> str:
        return f"★{s}☆"

    def inline_strong(self, s: str) -> str:
        return f"★{s}☆"

    def inline_i(self, s: str) -> str:
        return f"▲{s}☆"

    def inline_em(self, s: str) -> str:
        return f"▲{s}☆"

    def inline_tt(self, s: str) -> str:
        return f"△{s}☆"

    def inline_tti(self, s: str) -> str:
        return f"▲{s}☆◆→等幅フォントイタ←◆"

    def inline_ttb(self, s: str) -> str:
        return f"★{s}☆◆→等幅フォント太字←◆"

    def inline_u(self, s: str) -> str:
        return f"＠{s}＠◆→＠〜＠部分に下線←◆"

    def inline_ami(self, s: str) -> str:
        return f"{s}◆→DTP連絡:「{s}」に網カケ←◆"

    def inline_bou(self, s: str) -> str:
        return f"{s}◆→DTP連絡:「{s}」に傍点←◆"

    def inline_sup(self, s: str) -> str:
        return f"{s}◆→DTP連絡:「{s}」は上付き←◆"

    def inline_sub(self, s: str) -> str:
        return f"{s}◆→DTP連絡:「{s}」は下付き←◆"

    def inline_del(self, s: str) -> str:
        return f"{s}◆→DTP連絡:「{s}」に取り消し線←◆"

    def inline_ins(self, s: str) -> str:
        return f"{s}◆→DTP連絡:「{s}」は挿入←◆"

    def inline_code(self, s: str) -> str:
        return f"△{s}☆"

    def inline_m(self, s: str) -> str:
        return f"◆→TeX式ここから←◆{s}◆→TeX式ここまで←◆"

    def inline_br(self, s: str) -> str:
        return "\n"

    def inline_icon(self, id: str) -> str:
        binding = self.image_binding(id, indexed=False)
        if not binding.bound:
            self.warn(f"image not bound: {id}")
            return f"[{id}]"
        return f"◆→画像 {binding.path}←◆"

    def compile_ruby(self, base: str, ruby: str) -> str:
        return f"{base}◆→DTP連絡:「{base}」に「{ruby}」とルビ←◆"

    def compile_kw(self, word: str, alt: Optional[str]) -> str:
        if alt:
            return f"★{word}☆（{alt.strip()}）"
        return f"★{word}☆"

    def compile_href(self, url: str, label: Optional[str]) -> str:
        if label:
            return f"{label}（△{url}☆）"
        return f"△{url}☆"
