from .bundle import compose_bundle
from .csv_writer import render_csv
from .excel_writer import render_workbook
from .json_writer import render_json
from .pdf_writer import render_pdf

__all__ = [
    "compose_bundle",
    "render_csv",
    "render_json",
    "render_pdf",
    "render_workbook",
]
