"""
PDF WRITER
----------
Draws the akkordseddel on A4 with the reportlab canvas.

Sections, top to bottom:
- Header band on every page (case number, page number) and a footer line.
- Case info (sagsnummer, name, customer, address, date, montør, job type).
- Materials table grouped by system, with a sum row per group.
- Wage table (one row per worker, total row).
- Summary: materials, extras (with one auxiliary line per charge), rule, akkord,
  project, hours.

All vertical positioning goes through LayoutCursor; amounts come from the model's
totals, never recomputed here.
"""

from __future__ import annotations

import io
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import APP_NAME, APP_VERSION
from domain.canonical import CanonicalModel, Item, RenderArtifact
from fields.formatting import format_dkk, format_kr, format_quantity
from fields.naming import with_extension

from .engines import get_pdf_engine
from .layout_cursor import (
    HEADER_H,
    MARGIN,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    ROW_HEIGHTS,
    LayoutCursor,
    RowKind,
    row_kind_for_name,
    split_name,
)

PDF_CONTENT_TYPE = "application/pdf"

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_SIZE = 9
RIGHT_EDGE = PAGE_WIDTH - MARGIN

# (label, x, align) for the materials table
MATERIAL_COLUMNS: List[Tuple[str, float, str]] = [
    ("Varenr", MARGIN, "left"),
    ("Navn", MARGIN + 70, "left"),
    ("Antal", 390, "right"),
    ("Enhed", 398, "left"),
    ("Stk. pris", 490, "right"),
    ("Beløb", RIGHT_EDGE, "right"),
]

WAGE_COLUMNS: List[Tuple[str, float, str]] = [
    ("Medarbejder", MARGIN, "left"),
    ("Timer", 330, "right"),
    ("Sats", 430, "right"),
    ("Beløb", RIGHT_EDGE, "right"),
]


def _group_by_system(items: List[Item]) -> List[Tuple[str, List[Item]]]:
    """Groups in order of first appearance."""
    groups: Dict[str, List[Item]] = {}
    for item in items:
        groups.setdefault(item["system"] or "Øvrige", []).append(item)
    return list(groups.items())


class AkkordDocument:
    """One PDF render: a canvas plus the cursor that paginates it."""

    def __init__(self, model: CanonicalModel):
        canvas_module = get_pdf_engine()
        self.model = model
        self.buffer = io.BytesIO()
        self.canvas = canvas_module.Canvas(self.buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
        self.canvas.setTitle(f"Akkordseddel {model['meta']['caseNumber']}")
        self.canvas.setAuthor(APP_NAME)
        self.cursor = LayoutCursor(add_page=self.canvas.showPage, render_header=self._draw_page_chrome)

    # ------------------------------------------------------------------ drawing
    def _text(self, x: float, y: float, text: Any, align: str = "left", bold: bool = False, size: int = FONT_SIZE):
        self.canvas.setFont(FONT_BOLD if bold else FONT, size)
        value = "" if text is None else str(text)
        if align == "right":
            self.canvas.drawRightString(x, y, value)
        else:
            self.canvas.drawString(x, y, value)

    @staticmethod
    def _baseline(top: float, kind: RowKind) -> float:
        return top - ROW_HEIGHTS[kind] + 5

    def _draw_page_chrome(self, page: int) -> None:
        meta = self.model["meta"]
        band_top = PAGE_HEIGHT - MARGIN
        self.canvas.setFillGray(0.92)
        self.canvas.rect(MARGIN, band_top - HEADER_H, RIGHT_EDGE - MARGIN, HEADER_H, stroke=0, fill=1)
        self.canvas.setFillGray(0)
        self._text(MARGIN + 4, band_top - 13, f"Akkordseddel {meta['caseNumber']}", bold=True, size=10)
        self._text(RIGHT_EDGE - 4, band_top - 13, f"Side {page}", align="right")
        self._text(MARGIN, MARGIN, f"{APP_NAME} {APP_VERSION}", size=7)
        self._text(RIGHT_EDGE, MARGIN, meta["exportedAt"], align="right", size=7)

    def _section(self, title: str) -> None:
        top = self.cursor.place(RowKind.SECTION)
        self._text(MARGIN, self._baseline(top, RowKind.SECTION), title, bold=True, size=12)

    def _table_header(self, columns: List[Tuple[str, float, str]]) -> Callable[[], None]:
        def draw() -> None:
            top = self.cursor.place(RowKind.TABLE_HEADER)
            baseline = self._baseline(top, RowKind.TABLE_HEADER)
            for label, x, align in columns:
                self._text(x, baseline, label, align=align, bold=True)
            rule_y = top - ROW_HEIGHTS[RowKind.TABLE_HEADER] + 2
            self.canvas.line(MARGIN, rule_y, RIGHT_EDGE, rule_y)

        return draw

    # ----------------------------------------------------------------- sections
    def _case_info(self) -> None:
        meta = self.model["meta"]
        self._section("Sagsinfo")
        rows = [
            ("Sagsnummer", meta["caseNumber"]),
            ("Navn", meta["caseName"]),
            ("Kunde", meta["customer"]),
            ("Adresse", meta["address"]),
            ("Dato", meta["date"]),
            ("Montør", meta["montoer"]),
            ("Type", meta["jobType"]),
        ]
        for label, value in rows:
            top = self.cursor.place(RowKind.SUMMARY_LINE)
            baseline = self._baseline(top, RowKind.SUMMARY_LINE)
            self._text(MARGIN, baseline, label, bold=True)
            self._text(MARGIN + 90, baseline, value)

    def _material_row(self, item: Item, header: Callable[[], None]) -> None:
        kind = row_kind_for_name(item["name"])
        top = self.cursor.place(kind, with_table_header=header)
        baseline = top - 13
        first, second = split_name(item["name"])

        self._text(MARGIN, baseline, item["itemNumber"])
        self._text(MARGIN + 70, baseline, first)
        if kind is RowKind.ROW_WRAP2:
            self._text(MARGIN + 70, baseline - 12, second)
        self._text(390, baseline, format_quantity(item["quantity"]), align="right")
        self._text(398, baseline, item["unit"])
        self._text(490, baseline, format_dkk(item["unitPrice"]), align="right")
        self._text(RIGHT_EDGE, baseline, format_dkk(item["lineTotal"]), align="right")

    def _materials(self) -> None:
        self._section("Materialer")
        header = self._table_header(MATERIAL_COLUMNS)
        header()

        for system, items in _group_by_system(self.model["items"]):
            top = self.cursor.place(RowKind.GROUP_ROW, with_table_header=header)
            self._text(MARGIN, self._baseline(top, RowKind.GROUP_ROW), system.upper(), bold=True)

            for item in items:
                self._material_row(item, header)

            group_total = sum(item["lineTotal"] for item in items)
            top = self.cursor.place(RowKind.GROUP_ROW, with_table_header=header)
            baseline = self._baseline(top, RowKind.GROUP_ROW)
            self._text(490, baseline, f"Sum {system}", align="right", bold=True)
            self._text(RIGHT_EDGE, baseline, format_dkk(group_total), align="right", bold=True)

    def _wage(self) -> None:
        wage = self.model["wage"]
        if not wage["workers"]:
            return

        self.cursor.place(RowKind.GAP_MD)
        self._section("Løn")
        header = self._table_header(WAGE_COLUMNS)
        header()

        for worker in wage["workers"]:
            top = self.cursor.place(RowKind.ROW, with_table_header=header)
            baseline = self._baseline(top, RowKind.ROW)
            self._text(MARGIN, baseline, worker["name"])
            self._text(330, baseline, format_quantity(worker["hours"]), align="right")
            self._text(430, baseline, format_dkk(worker["rate"]), align="right")
            self._text(RIGHT_EDGE, baseline, format_dkk(worker["total"]), align="right")

        top = self.cursor.place(RowKind.GROUP_ROW, with_table_header=header)
        baseline = self._baseline(top, RowKind.GROUP_ROW)
        self._text(MARGIN, baseline, "I alt", bold=True)
        self._text(330, baseline, format_quantity(wage["totals"]["hours"]), align="right", bold=True)
        self._text(RIGHT_EDGE, baseline, format_dkk(wage["totals"]["sum"]), align="right", bold=True)

    def _summary_line(self, label: str, value: str, kind: RowKind = RowKind.SUMMARY_LINE) -> None:
        top = self.cursor.place(kind)
        baseline = self._baseline(top, kind)
        aux = kind is RowKind.SUMMARY_AUX
        indent = 16 if aux else 0
        size = FONT_SIZE - 1 if aux else FONT_SIZE + 1
        self._text(MARGIN + 200 + indent, baseline, label, bold=not aux, size=size)
        self._text(RIGHT_EDGE, baseline, value, align="right", bold=not aux, size=size)

    def _aux_lines(self) -> List[Tuple[str, float]]:
        extras = self.model["extras"]
        lines: List[Tuple[str, float]] = []
        if extras["km"]["amount"]:
            lines.append((f"Km ({format_quantity(extras['km']['quantity'])} km)", extras["km"]["amount"]))
        if extras["slaeb"]["amount"]:
            lines.append((f"Slæb ({format_quantity(extras['slaeb']['percent'])} %)", extras["slaeb"]["amount"]))
        if extras["tralle"]["amount"]:
            lines.append((f"Tralleløft ({format_quantity(extras['tralle']['quantity'])})", extras["tralle"]["amount"]))
        for entry in extras["extraWork"]:
            if entry["amount"]:
                lines.append((entry["type"] or "Ekstraarbejde", entry["amount"]))
        return lines

    def _summary(self) -> None:
        totals = self.model["totals"]
        self.cursor.place(RowKind.GAP_MD)
        self._section("Opsummering")

        self._summary_line("Materialer", format_kr(totals["materials"]))
        self._summary_line("Ekstraarbejde", format_kr(totals["extras"]))
        for label, amount in self._aux_lines():
            self._summary_line(label, format_kr(amount), kind=RowKind.SUMMARY_AUX)

        top = self.cursor.place(RowKind.SUMMARY_RULE)
        rule_y = top - ROW_HEIGHTS[RowKind.SUMMARY_RULE] / 2
        self.canvas.line(MARGIN + 200, rule_y, RIGHT_EDGE, rule_y)

        self._summary_line("Akkordsum", format_kr(totals["akkord"]))
        self._summary_line("Projektsum", format_kr(totals["project"]))
        self._summary_line("Timer", format_quantity(self.model["wage"]["totals"]["hours"]))

    def render(self) -> bytes:
        self._draw_page_chrome(self.cursor.page)
        self._case_info()
        self.cursor.place(RowKind.GAP_MD)
        self._materials()
        self._wage()
        self._summary()
        self.canvas.save()
        return self.buffer.getvalue()


def render_pdf(model: CanonicalModel, base_name: str, document: Optional[AkkordDocument] = None) -> RenderArtifact:
    """Render the model as `<base_name>.pdf`."""
    document = document or AkkordDocument(model)
    return RenderArtifact(
        file_name=with_extension(base_name, "pdf"),
        payload=document.render(),
        content_type=PDF_CONTENT_TYPE,
    )
