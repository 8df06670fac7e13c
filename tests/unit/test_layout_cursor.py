"""
Unit tests for writers/layout_cursor.py - single-pass pagination
"""
from itertools import groupby

import pytest

from config import NAME_WRAP_CHARS
from writers.layout_cursor import (
    BOTTOM_Y,
    ROW_HEIGHTS,
    TOP_Y,
    LayoutCursor,
    RowKind,
    row_kind_for_name,
    split_name,
)


class TestGeometry:
    def test_constants(self):
        assert TOP_Y == pytest.approx(841.89 - 36 - 18)
        assert BOTTOM_Y == 36 + 16

    def test_row_heights(self):
        assert ROW_HEIGHTS[RowKind.SECTION] == 22
        assert ROW_HEIGHTS[RowKind.ROW_WRAP2] == 30
        assert ROW_HEIGHTS[RowKind.SUMMARY_RULE] == 10
        assert set(ROW_HEIGHTS) == set(RowKind)


class TestLayoutCursor:
    @pytest.fixture
    def events(self):
        return []

    @pytest.fixture
    def cursor(self, events):
        return LayoutCursor(
            add_page=lambda: events.append("add_page"),
            render_header=lambda page: events.append(f"header:{page}"),
        )

    def test_initial_state(self, cursor):
        assert cursor.page == 1
        assert cursor.y == TOP_Y
        assert cursor.remaining() == pytest.approx(TOP_Y - BOTTOM_Y)

    def test_no_break_when_space_is_exactly_enough(self, cursor, events):
        cursor.y = BOTTOM_Y + 18
        assert cursor.ensure_space(18) is False
        assert events == []

    def test_break_when_remaining_is_less_than_height(self, cursor, events):
        cursor.y = BOTTOM_Y + 17.5
        assert cursor.ensure_space(18) is True
        assert cursor.page == 2
        assert cursor.y == TOP_Y
        assert events == ["add_page", "header:2"]

    def test_table_header_callback_runs_after_page_header(self, cursor, events):
        cursor.move_down(cursor.remaining() - 1)
        cursor.ensure_space(18, with_table_header=lambda: events.append("table_header"))
        assert events == ["add_page", "header:2", "table_header"]

    def test_table_header_not_called_without_break(self, cursor, events):
        cursor.ensure_space(18, with_table_header=lambda: events.append("table_header"))
        assert events == []

    def test_place_returns_top_and_moves_down(self, cursor):
        top = cursor.place(RowKind.SECTION)
        assert top == TOP_Y
        assert cursor.y == pytest.approx(TOP_Y - 22)
        assert cursor.placements == [(1, TOP_Y, RowKind.SECTION)]

    def test_y_strictly_decreases_within_each_page(self, cursor):
        kinds = [RowKind.ROW, RowKind.ROW_WRAP2, RowKind.GROUP_ROW, RowKind.GAP_SM] * 80
        for kind in kinds:
            cursor.place(kind)

        assert cursor.page > 1
        for _, placements in groupby(cursor.placements, key=lambda p: p[0]):
            ys = [y for _, y, _ in placements]
            assert all(a > b for a, b in zip(ys, ys[1:]))

    def test_break_happens_exactly_when_block_does_not_fit(self, cursor):
        for _ in range(200):
            before_page, before_remaining = cursor.page, cursor.remaining()
            cursor.place(RowKind.ROW_WRAP2)
            broke = cursor.page != before_page
            assert broke == (before_remaining < ROW_HEIGHTS[RowKind.ROW_WRAP2])

    def test_no_block_crosses_the_footer(self, cursor):
        for _ in range(300):
            cursor.place(RowKind.SUMMARY_LINE)
        for _, top, kind in cursor.placements:
            assert top - ROW_HEIGHTS[kind] >= BOTTOM_Y - 1e-9

    def test_headless_cursor(self):
        cursor = LayoutCursor()
        cursor.move_down(cursor.remaining())
        assert cursor.ensure_space(1) is True
        assert cursor.page == 2


class TestNameWrapping:
    def test_short_name_single_row(self):
        assert row_kind_for_name("Ramme 2,0 m") is RowKind.ROW
        assert row_kind_for_name("x" * NAME_WRAP_CHARS) is RowKind.ROW

    def test_long_name_two_line_row(self):
        assert row_kind_for_name("x" * (NAME_WRAP_CHARS + 1)) is RowKind.ROW_WRAP2

    def test_split_short_name(self):
        assert split_name("Ramme") == ("Ramme", "")

    def test_split_within_two_lines_is_not_clipped(self):
        name = "Stillads rammeelement med rækværk og fodliste, variant 7 lang betegnelse"
        first, second = split_name(name)
        assert len(first) <= NAME_WRAP_CHARS
        assert f"{first} {second}" == name
        assert not second.endswith("…")

    def test_split_past_two_lines_is_clipped(self):
        name = " ".join(["ord"] * 60)
        first, second = split_name(name)
        assert len(second) <= NAME_WRAP_CHARS
        assert second.endswith("…")
