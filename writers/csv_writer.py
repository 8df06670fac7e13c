"""
CSV WRITER
----------
Writes the CanonicalModel as a three-block, semicolon-delimited CSV that opens
cleanly in Danish Excel (UTF-8 with BOM, decimal comma):

1) #META block: one `#META;<field>;<value>` row per case field and total.
2) Materials block: one MATERIAL row per item.
3) Extras block: KM, SLAEB, TRALLE and EKSTRA rows, each only when its amount is non-zero.

Blocks are separated by an empty line. Values are quoted only when they contain
the delimiter, a quote or a line break.
"""

from __future__ import annotations

import csv
import io
from typing import Any, List

from config import CSV_DELIMITER
from domain.canonical import CanonicalModel, RenderArtifact
from fields.formatting import format_dkk, format_quantity
from fields.naming import with_extension

CSV_CONTENT_TYPE = "text/csv;charset=utf-8"

META_HEADER = ["#META", "FELT", "VÆRDI"]
MATERIAL_HEADER = [
    "TYPE", "SAG", "LINJENR", "SYSTEM", "KATEGORI", "VARENR",
    "NAVN", "ENHED", "ANTAL", "STK_PRIS", "LINJE_BELOB",
]
EXTRAS_HEADER = ["TYPE", "SAG", "ART", "ANTAL", "ENHED", "SATS", "BELOB", "BESKRIVELSE"]


def _meta_rows(model: CanonicalModel) -> List[List[Any]]:
    meta = model["meta"]
    totals = model["totals"]
    fields = [
        ("version", model["version"]),
        ("sagsnummer", meta["caseNumber"]),
        ("kunde", meta["customer"]),
        ("adresse", meta["address"]),
        ("beskrivelse", meta["caseName"]),
        ("dato", meta["date"]),
        ("totalMaterialer", format_dkk(totals["materials"])),
        ("totalEkstra", format_dkk(totals["extras"])),
        ("totalAkkord", format_dkk(totals["akkord"])),
        ("totalProjekt", format_dkk(totals["project"])),
    ]
    return [["#META", key, value] for key, value in fields]


def _material_rows(model: CanonicalModel) -> List[List[Any]]:
    case_number = model["meta"]["caseNumber"]
    return [
        [
            "MATERIAL",
            case_number,
            item["lineNumber"],
            item["system"],
            item["category"],
            item["itemNumber"],
            item["name"],
            item["unit"],
            format_quantity(item["quantity"]),
            format_dkk(item["unitPrice"]),
            format_dkk(item["lineTotal"]),
        ]
        for item in model["items"]
    ]


def _extras_rows(model: CanonicalModel) -> List[List[Any]]:
    case_number = model["meta"]["caseNumber"]
    extras = model["extras"]
    rows: List[List[Any]] = []

    km = extras["km"]
    if km["amount"]:
        rows.append([
            "KM", case_number, "Transport km", format_quantity(km["quantity"]), "km",
            format_dkk(km["rate"]), format_dkk(km["amount"]), "Transporttillæg (km)",
        ])

    slaeb = extras["slaeb"]
    if slaeb["amount"]:
        rows.append([
            "SLAEB", case_number, "Slæb (%)", format_quantity(slaeb["percent"]), "%",
            "", format_dkk(slaeb["amount"]), "Slæbt materiale (procenttillæg)",
        ])

    tralle = extras["tralle"]
    if tralle["amount"]:
        rows.append([
            "TRALLE", case_number, "Tralleløft", format_quantity(tralle["quantity"]), "løft",
            format_dkk(tralle["rate"]), format_dkk(tralle["amount"]),
            f"35 cm: {format_quantity(tralle['lifts35'])}, 50 cm: {format_quantity(tralle['lifts50'])}",
        ])

    for entry in extras["extraWork"]:
        if not entry["amount"]:
            continue
        rows.append([
            "EKSTRA", case_number, entry["type"] or "Ekstraarbejde", format_quantity(entry["quantity"]),
            entry["unit"], format_dkk(entry["rate"]), format_dkk(entry["amount"]), entry["description"],
        ])
    return rows


def render_csv_text(model: CanonicalModel) -> str:
    """The CSV body as text (no BOM)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=CSV_DELIMITER, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)

    writer.writerow(META_HEADER)
    writer.writerows(_meta_rows(model))
    writer.writerow([])

    writer.writerow(MATERIAL_HEADER)
    writer.writerows(_material_rows(model))
    writer.writerow([])

    writer.writerow(EXTRAS_HEADER)
    writer.writerows(_extras_rows(model))
    return buffer.getvalue()


def render_csv(model: CanonicalModel, base_name: str) -> RenderArtifact:
    """Render the model as `<base_name>.csv`, UTF-8 with BOM."""
    payload = render_csv_text(model).encode("utf-8-sig")
    return RenderArtifact(
        file_name=with_extension(base_name, "csv"),
        payload=payload,
        content_type=CSV_CONTENT_TYPE,
    )
