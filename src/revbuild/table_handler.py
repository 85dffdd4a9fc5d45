"""Table source parsing and shape normalization.

Table blocks arrive as raw lines.  Cells are separated by runs of tabs, a
line of twelve or more ``=``/``-`` characters separates header rows from
body rows, and a leading ``.`` marks a cell whose text would otherwise look
like something else (``.------`` is the literal text ``------``).

Authors rarely keep rows the same length, so every table is reshaped into a
rectangle before a builder sees it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

SEPARATOR_RE = re.compile(r"\A[=\-]{12}")
_CELL_SPLIT_RE = re.compile(r"\t+")


@dataclass
class TableShape:
    """Rectangular table data plus the number of header rows.

    ``header_rows`` is ``None`` when the source had no separator line; in
    that case builders treat the first cell of every row as a header cell.
    """

    rows: list = field(default_factory=list)
    header_rows: Optional[int] = None

    @property
    def n_cols(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def head(self) -> list:
        return self.rows[: self.header_rows or 0]

    @property
    def body(self) -> list:
        return self.rows[self.header_rows or 0:]


def table_normalize(rows: list) -> list:
    """Trim trailing blank cells, then pad every row to the widest one.

    Rows are modified in place and also returned.
    """
    for cols in rows:
        while cols and not cols[-1].strip():
            cols.pop()
    if not rows:
        return rows
    n_maxcols = max(len(cols) for cols in rows)
    for cols in rows:
        cols.extend([""] * (n_maxcols - len(cols)))
    return rows


def _split_cells(line: str) -> list:
    cells = _CELL_SPLIT_RE.split(line.strip())
    return [cell[1:] if cell.startswith(".") else cell for cell in cells]


def parse_table(lines: Iterable[str]) -> TableShape:
    """Split raw table *lines* into a normalized :class:`TableShape`."""
    rows: list = []
    sepidx: Optional[int] = None
    for idx, line in enumerate(lines):
        if SEPARATOR_RE.match(line):
            # only the first separator counts; later ones are dropped
            if sepidx is None:
                sepidx = idx
            continue
        rows.append(_split_cells(line))
    return TableShape(table_normalize(rows), sepidx)
