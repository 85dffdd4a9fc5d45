"""Tests for table parsing and normalization."""

from __future__ import annotations

from revbuild.table_handler import parse_table, table_normalize


class TestTableNormalize:
    def test_pads_short_rows(self) -> None:
        assert table_normalize([["a", "b"], ["c"]]) == [["a", "b"], ["c", ""]]

    def test_trims_trailing_blank_cells(self) -> None:
        rows = [["a", "b", "", " "], ["c"]]
        assert table_normalize(rows) == [["a", "b"], ["c", ""]]

    def test_inner_blank_cells_survive(self) -> None:
        assert table_normalize([["a", "", "c"]]) == [["a", "", "c"]]

    def test_modifies_in_place(self) -> None:
        rows = [["a", "b"], ["c"]]
        table_normalize(rows)
        assert rows[1] == ["c", ""]

    def test_empty(self) -> None:
        assert table_normalize([]) == []

    def test_rectangular(self) -> None:
        rows = table_normalize([["1"], ["1", "2", "3"], ["1", "2"]])
        assert {len(r) for r in rows} == {3}


class TestParseTable:
    def test_header_separator(self) -> None:
        shape = parse_table(["A\tB", "============", "1\t2", "3\t4"])
        assert shape.header_rows == 1
        assert shape.head == [["A", "B"]]
        assert shape.body == [["1", "2"], ["3", "4"]]
        assert shape.n_cols == 2

    def test_dash_separator(self) -> None:
        shape = parse_table(["A\tB", "------------", "1\t2"])
        assert shape.header_rows == 1

    def test_short_separator_is_a_row(self) -> None:
        shape = parse_table(["A\tB", "-----", "1\t2"])
        assert shape.header_rows is None
        assert len(shape.rows) == 3

    def test_no_separator(self) -> None:
        shape = parse_table(["A\tB", "1\t2"])
        assert shape.header_rows is None
        assert shape.head == []
        assert shape.body == shape.rows

    def test_tab_runs_split_once(self) -> None:
        shape = parse_table(["a\t\t\tb"])
        assert shape.rows == [["a", "b"]]

    def test_leading_dot_is_stripped(self) -> None:
        shape = parse_table([".------\tx", "..\ty"])
        assert shape.rows == [["------", "x"], [".", "y"]]

    def test_later_separators_dropped(self) -> None:
        shape = parse_table(["A", "============", "1", "============", "2"])
        assert shape.header_rows == 1
        assert shape.rows == [["A"], ["1"], ["2"]]

    def test_ragged_rows_padded(self) -> None:
        shape = parse_table(["A\tB\tC", "1"])
        assert shape.rows == [["A", "B", "C"], ["1", "", ""]]
