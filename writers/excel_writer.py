"""
EXCEL WRITER
------------
Writes the CanonicalModel to an .xlsx workbook (openpyxl).

Layout per sheet:
- Meta block (case number, name, customer, address, date, system). Case number and
  date are written as explicit text cells so Excel never turns "2024-05-01" into a
  serial date or "00123" into 123.
- Items table with a sheet total row.
- Totals block (materials, extras, akkord, project, hours).

One sheet per requested system (items filtered by system), or one merged sheet
when no systems are requested. Sheet names are sanitized and unique (max 31 chars).
"""

from __future__ import annotations

import io
import re
from typing import Any, Iterable, List, Optional, Set

from config import MAX_SHEET_NAME_CHARS
from domain.canonical import CanonicalModel, Item, RenderArtifact
from fields.naming import with_extension

from .engines import get_workbook_engine

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

MERGED_SHEET_NAME = "Akkordseddel"
TEXT_FORMAT = "@"
MONEY_FORMAT = "#,##0.00"
QUANTITY_FORMAT = "#,##0.##"

ITEM_HEADERS = ["Linje", "System", "Kategori", "Varenr", "Navn", "Enhed", "Antal", "Stk. pris", "Linjebeløb"]
COLUMN_WIDTHS = [8, 12, 16, 14, 44, 8, 10, 12, 14]

_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def sanitize_sheet_name(name: str, taken: Set[str]) -> str:
    """Excel-safe sheet name, unique (case-insensitive) among `taken`."""
    base = _INVALID_SHEET_CHARS.sub("_", (name or "").strip()).strip("'") or MERGED_SHEET_NAME
    base = base[:MAX_SHEET_NAME_CHARS]

    candidate = base
    counter = 2
    while candidate.lower() in taken:
        suffix = f" ({counter})"
        candidate = base[: MAX_SHEET_NAME_CHARS - len(suffix)] + suffix
        counter += 1

    taken.add(candidate.lower())
    return candidate


def _items_for(model: CanonicalModel, system: Optional[str]) -> List[Item]:
    if system is None:
        return list(model["items"])
    key = system.strip().lower()
    return [item for item in model["items"] if item["system"].strip().lower() == key]


def _text_cell(ws, row: int, column: int, value: Any):
    """String cell stored as text, never as a formula ('=A1' stays '=A1')."""
    cell = ws.cell(row=row, column=column, value=str(value))
    cell.data_type = "s"
    return cell


def _write_sheet(ws, model: CanonicalModel, items: Iterable[Item], system_label: str) -> None:
    from openpyxl.styles import Alignment, Font
    from openpyxl.utils import get_column_letter

    bold = Font(bold=True)
    meta = model["meta"]
    totals = model["totals"]

    ws.cell(row=1, column=1, value="Akkordseddel").font = Font(bold=True, size=14)

    meta_rows = [
        ("Sagsnummer", meta["caseNumber"], True),
        ("Navn", meta["caseName"], False),
        ("Kunde", meta["customer"], False),
        ("Adresse", meta["address"], False),
        ("Dato", meta["date"], True),
        ("System", system_label, False),
    ]
    row = 2
    for label, value, as_text in meta_rows:
        ws.cell(row=row, column=1, value=label).font = bold
        cell = _text_cell(ws, row, 2, value)
        if as_text:
            cell.number_format = TEXT_FORMAT
        row += 1

    row += 1
    for col, header in enumerate(ITEM_HEADERS, start=1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.font = bold
        cell.alignment = Alignment(horizontal="center")

    sheet_total = 0.0
    for item in items:
        row += 1
        values = [
            item["lineNumber"],
            item["system"],
            item["category"],
            item["itemNumber"],
            item["name"],
            item["unit"],
            item["quantity"],
            item["unitPrice"],
            item["lineTotal"],
        ]
        for col, value in enumerate(values, start=1):
            if isinstance(value, str):
                _text_cell(ws, row, col, value)
            else:
                ws.cell(row=row, column=col, value=value)
        ws.cell(row=row, column=7).number_format = QUANTITY_FORMAT
        ws.cell(row=row, column=8).number_format = MONEY_FORMAT
        ws.cell(row=row, column=9).number_format = MONEY_FORMAT
        sheet_total += item["lineTotal"]

    row += 1
    ws.cell(row=row, column=8, value="I alt").font = bold
    total_cell = ws.cell(row=row, column=9, value=round(sheet_total, 2))
    total_cell.font = bold
    total_cell.number_format = MONEY_FORMAT

    row += 2
    summary = [
        ("Materialer", totals["materials"]),
        ("Ekstraarbejde", totals["extras"]),
        ("Akkordsum", totals["akkord"]),
        ("Projektsum", totals["project"]),
        ("Timer", model["wage"]["totals"]["hours"]),
    ]
    for label, value in summary:
        ws.cell(row=row, column=8, value=label).font = bold
        ws.cell(row=row, column=9, value=value).number_format = QUANTITY_FORMAT if label == "Timer" else MONEY_FORMAT
        row += 1

    for col, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(col)].width = width


def render_workbook(
    model: CanonicalModel,
    base_name: str,
    systems: Optional[List[str]] = None,
) -> RenderArtifact:
    """
    Render the model as `<base_name>.xlsx`.

    Args:
        model: CanonicalModel to render.
        base_name: File stem.
        systems: Optional list of systems; one sheet per system. None/empty -> one merged sheet.
    """
    openpyxl = get_workbook_engine()

    wb = openpyxl.Workbook()
    wb.remove(wb.active)

    taken: Set[str] = set()
    requested = [s for s in (systems or []) if s and str(s).strip()]
    if requested:
        for system in requested:
            ws = wb.create_sheet(title=sanitize_sheet_name(str(system), taken))
            _write_sheet(ws, model, _items_for(model, str(system)), str(system))
    else:
        ws = wb.create_sheet(title=sanitize_sheet_name(MERGED_SHEET_NAME, taken))
        _write_sheet(ws, model, _items_for(model, None), ", ".join(model["meta"]["systems"]))

    buffer = io.BytesIO()
    wb.save(buffer)
    wb.close()

    return RenderArtifact(
        file_name=with_extension(base_name, "xlsx"),
        payload=buffer.getvalue(),
        content_type=XLSX_CONTENT_TYPE,
    )
