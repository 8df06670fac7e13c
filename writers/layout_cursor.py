"""
Single-pass pagination for the akkordseddel PDF.

Every block the document renderer draws has a fixed height (ROW_HEIGHTS), so
layout needs no text measurement: before drawing a block the renderer asks the
cursor for space, and the cursor starts a new page when the block would cross
the footer band.

Coordinates are PDF points with the origin at the bottom-left (reportlab's
convention): `y` starts at TOP_Y and decreases as rows are placed.

    cursor = LayoutCursor(add_page=canvas.showPage, render_header=draw_header)
    y = cursor.place(RowKind.ROW, with_table_header=draw_table_header)
"""

from __future__ import annotations

import textwrap
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from config import NAME_WRAP_CHARS

PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89
MARGIN = 36.0
HEADER_H = 18.0
FOOTER_H = 16.0

TOP_Y = PAGE_HEIGHT - MARGIN - HEADER_H
BOTTOM_Y = MARGIN + FOOTER_H
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN


class RowKind(str, Enum):
    SECTION = "section"
    TABLE_HEADER = "table_header"
    ROW = "row"
    ROW_WRAP2 = "row_wrap2"
    GROUP_ROW = "group_row"
    GAP_SM = "gap_sm"
    GAP_MD = "gap_md"
    SUMMARY_LINE = "summary_line"
    SUMMARY_AUX = "summary_aux"
    SUMMARY_RULE = "summary_rule"


ROW_HEIGHTS: Dict[RowKind, float] = {
    RowKind.SECTION: 22.0,
    RowKind.TABLE_HEADER: 18.0,
    RowKind.ROW: 18.0,
    RowKind.ROW_WRAP2: 30.0,
    RowKind.GROUP_ROW: 18.0,
    RowKind.GAP_SM: 8.0,
    RowKind.GAP_MD: 12.0,
    RowKind.SUMMARY_LINE: 16.0,
    RowKind.SUMMARY_AUX: 12.0,
    RowKind.SUMMARY_RULE: 10.0,
}

Placement = Tuple[int, float, RowKind]


def row_kind_for_name(name: str) -> RowKind:
    """Item names longer than NAME_WRAP_CHARS take a two-line row."""
    return RowKind.ROW_WRAP2 if len((name or "").strip()) > NAME_WRAP_CHARS else RowKind.ROW


def split_name(name: str, width: int = NAME_WRAP_CHARS) -> Tuple[str, str]:
    """
    Split an item name into at most two lines of `width` characters.

    The second line is clipped with an ellipsis only when the name does not fit
    in two lines.
    """
    text = " ".join((name or "").split())
    if len(text) <= width:
        return text, ""

    lines = textwrap.wrap(text, width=width, break_long_words=True)
    first = lines[0]
    rest = " ".join(lines[1:])
    if len(rest) > width:
        rest = rest[: width - 1].rstrip() + "…"
    return first, rest


class LayoutCursor:
    """Vertical cursor over A4 pages. Pagination never fails; it only adds pages."""

    def __init__(
        self,
        add_page: Optional[Callable[[], None]] = None,
        render_header: Optional[Callable[[int], None]] = None,
    ):
        self._add_page = add_page
        self._render_header = render_header
        self.page = 1
        self.y = TOP_Y
        self.placements: List[Placement] = []

    @property
    def x(self) -> float:
        return MARGIN

    def remaining(self) -> float:
        return self.y - BOTTOM_Y

    def move_down(self, height: float) -> float:
        self.y -= height
        return self.y

    def new_page(self) -> None:
        if self._add_page is not None:
            self._add_page()
        self.page += 1
        self.y = TOP_Y
        if self._render_header is not None:
            self._render_header(self.page)

    def ensure_space(self, height: float, with_table_header: Optional[Callable[[], None]] = None) -> bool:
        """Start a new page when fewer than `height` points remain. Returns True on a break."""
        if self.remaining() >= height:
            return False
        self.new_page()
        if with_table_header is not None:
            with_table_header()
        return True

    def place(self, kind: RowKind, with_table_header: Optional[Callable[[], None]] = None) -> float:
        """Reserve one block; returns the block's top y on its (possibly new) page."""
        height = ROW_HEIGHTS[kind]
        self.ensure_space(height, with_table_header=with_table_header)
        top = self.y
        self.placements.append((self.page, top, kind))
        self.move_down(height)
        return top
