"""
Conversion of raw drafts into the CanonicalModel.

A draft is whatever the calculator (or an import) hands us: any generation of
field names, numbers as strings, missing blocks. This module is the single place
where that input becomes the canonical structure every renderer reads.

Core responsibilities:
- Resolve meta, items, extras, wage and totals through the alias tables.
- Coerce every numeric through coerce_finite_or_default (never NaN/inf downstream).
- Derive missing amounts (line totals, extras, totals) and respect explicit overrides.
- Mirror meta into the Danish `info` block and items into the legacy `materials` list.

The builder never raises: absent arrays become empty, absent numerics become 0.
Callers that need line items (exports) validate the result themselves.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from config import DEFAULT_CASE_NUMBER, DEFAULT_JOB_TYPE, DEFAULT_UNIT, MODEL_SOURCE, MODEL_VERSION
from config.logging_config import get_logger
from domain.canonical import (
    CanonicalModel,
    Extras,
    ExtrasBreakdown,
    Info,
    Item,
    MaterialRef,
    Meta,
    RawDraft,
    Totals,
    Wage,
    WageTotals,
    Worker,
)
from fields.extras_math import (
    complete_extra_work,
    complete_km,
    complete_slaeb,
    complete_tralle,
    extra_work_from_counters,
    round2,
)
from fields.normalization import (
    pick,
    pick_list,
    pick_mapping,
    pick_number,
    pick_optional_number,
    pick_text,
    sanitize_date,
    to_int,
)

from . import aliases

logger = get_logger(__name__)


def iso_timestamp(value: Any = None) -> str:
    """Normalize an export timestamp (datetime, string or None -> now, UTC)."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat(timespec="seconds")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _merged_meta_source(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """meta <- info <- sagsinfo: later blocks fill (and override) earlier keys."""
    merged: Dict[str, Any] = {}
    for key in aliases.META_SOURCE_KEYS:
        block = raw.get(key)
        if isinstance(block, Mapping):
            merged.update(block)
    return merged


def _first_nonempty_list(raw: Mapping[str, Any], paths) -> List[Any]:
    for path in paths:
        found = pick_list(raw, (path,))
        if found:
            return found
    return []


def _resolve_systems(sources: Mapping[str, Any], items: List[Item]) -> List[str]:
    systems: List[str] = []
    for value in pick_list(sources, aliases.SYSTEM_LISTS) or []:
        text = str(value).strip() if value is not None else ""
        if text and text not in systems:
            systems.append(text)

    if not systems:
        scalar = pick_text(sources, aliases.SYSTEM_SCALARS)
        if scalar:
            systems.append(scalar)

    if not systems:
        for item in items:
            if item["system"] and item["system"] not in systems:
                systems.append(item["system"])
    return systems


def _build_items(raw: Mapping[str, Any]) -> List[Item]:
    """
    New-style arrays first; legacy arrays only when no new-style entries exist.

    An item's system comes from the entry alone; an entry without one stays
    unassigned rather than inheriting the job's first system.
    """
    entries = _first_nonempty_list(raw, aliases.NEW_STYLE_ITEM_ARRAYS)
    if not entries:
        entries = _first_nonempty_list(raw, aliases.LEGACY_ITEM_ARRAYS)

    table = aliases.ITEM_ALIASES
    items: List[Item] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue

        quantity = pick_number(entry, table["quantity"])
        if quantity == 0:
            continue

        unit_price = pick_number(entry, table["unitPrice"])
        line_total = pick_optional_number(entry, table["lineTotal"])
        if line_total is None:
            line_total = round2(quantity * unit_price)

        items.append(
            Item(
                lineNumber=to_int(pick(entry, table["lineNumber"])) or len(items) + 1,
                system=pick_text(entry, table["system"]),
                category=pick_text(entry, table["category"]),
                itemNumber=pick_text(entry, table["itemNumber"]),
                name=pick_text(entry, table["name"]),
                unit=pick_text(entry, table["unit"]) or DEFAULT_UNIT,
                quantity=quantity,
                unitPrice=unit_price,
                lineTotal=line_total,
            )
        )
    return items


def _build_materials(items: List[Item]) -> List[MaterialRef]:
    return [
        MaterialRef(
            id=item["itemNumber"] or f"line-{item['lineNumber']}",
            name=item["name"],
            qty=item["quantity"],
            unitPrice=item["unitPrice"],
            system=item["system"],
        )
        for item in items
    ]


def _build_extras(raw: Mapping[str, Any], materials_total: float) -> Extras:
    km = complete_km(
        pick_optional_number(raw, aliases.KM_QUANTITY),
        pick_optional_number(raw, aliases.KM_AMOUNT),
        pick_optional_number(raw, aliases.KM_RATE),
    )
    slaeb = complete_slaeb(
        pick_optional_number(raw, aliases.SLAEB_PERCENT),
        pick_optional_number(raw, aliases.SLAEB_AMOUNT),
        materials_total,
    )
    tralle = complete_tralle(
        pick_optional_number(raw, aliases.TRALLE_LIFTS35),
        pick_optional_number(raw, aliases.TRALLE_LIFTS50),
        pick_optional_number(raw, aliases.TRALLE_AMOUNT),
        pick_optional_number(raw, aliases.TRALLE_RATE),
    )

    explicit = pick_list(raw, aliases.EXTRA_WORK_LISTS)
    if explicit is not None:
        extra_work = [
            complete_extra_work(entry, index)
            for index, entry in enumerate(e for e in explicit if isinstance(e, Mapping))
        ]
        extra_work = [e for e in extra_work if e["amount"] or e["quantity"]]
    else:
        extra_work = extra_work_from_counters(
            pick_mapping(raw, ("extraInputs",)),
            other_amount=pick_number(raw, aliases.OTHER_EXTRAS_AMOUNT),
        )

    return Extras(km=km, slaeb=slaeb, tralle=tralle, extraWork=extra_work)


def _build_worker(entry: Mapping[str, Any], index: int) -> Optional[Worker]:
    table = aliases.WORKER_ALIASES
    hours = pick_number(entry, table["hours"])
    rate = pick_number(entry, table["rate"])
    total = pick_optional_number(entry, table["total"])
    if total is None:
        total = round2(hours * rate)

    if hours <= 0 and total <= 0:
        return None

    return Worker(
        id=pick_text(entry, table["id"]) or f"worker-{index + 1}",
        name=pick_text(entry, table["name"]) or f"Medarbejder {index + 1}",
        hours=hours,
        rate=rate,
        total=total,
        allowances={
            "mentortillaeg": pick_number(entry, table["mentortillaeg"]),
            "udd": pick_text(entry, table["udd"]),
        },
    )


def _build_wage(raw: Mapping[str, Any], montoer: str) -> Wage:
    entries = pick_list(raw, aliases.WORKER_LISTS)
    if entries is None:
        # aggregate legacy wage block -> one synthetic worker
        entries = []
        hours = pick_number(raw, aliases.AGGREGATE_WAGE_HOURS)
        if hours > 0:
            entries.append(
                {
                    "name": montoer,
                    "hours": hours,
                    "rate": pick_number(raw, aliases.AGGREGATE_WAGE_RATE),
                }
            )

    workers: List[Worker] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        worker = _build_worker(entry, len(workers))
        if worker is not None:
            workers.append(worker)

    return Wage(
        workers=workers,
        totals=WageTotals(
            hours=round2(sum(w["hours"] for w in workers)),
            sum=round2(sum(w["total"] for w in workers)),
        ),
    )


def _explicit_total(raw: Mapping[str, Any], field: str) -> Optional[float]:
    """An override counts only when present and non-zero."""
    value = pick_optional_number(raw, aliases.TOTALS_OVERRIDES[field])
    return value if value else None


def _build_totals(raw: Mapping[str, Any], materials: float, extras: Extras) -> Totals:
    breakdown = ExtrasBreakdown(
        km=extras["km"]["amount"],
        slaeb=extras["slaeb"]["amount"],
        tralle=extras["tralle"]["amount"],
        extraWork=round2(sum(e["amount"] for e in extras["extraWork"])),
    )

    extras_total = _explicit_total(raw, "extras")
    if extras_total is None:
        extras_total = round2(sum(breakdown.values()))

    akkord = _explicit_total(raw, "akkord")
    if akkord is None:
        akkord = round2(materials + extras_total)

    project = _explicit_total(raw, "project")
    if project is None:
        project = akkord

    return Totals(
        materials=materials,
        extras=extras_total,
        extrasBreakdown=breakdown,
        akkord=akkord,
        project=project,
    )


def _materials_total(raw: Mapping[str, Any], items: List[Item]) -> float:
    explicit = _explicit_total(raw, "materials")
    return explicit if explicit is not None else round2(sum(item["lineTotal"] for item in items))


def build_canonical_model(raw_draft: RawDraft, exported_at: Any = None) -> CanonicalModel:
    """
    Build the CanonicalModel from a raw draft.

    Args:
        raw_draft: Untrusted mapping in any supported generation of field names.
        exported_at: Export timestamp (datetime or ISO string). Defaults to now (UTC).

    Returns:
        A fully populated CanonicalModel. Missing data degrades to defaults.
    """
    raw: Mapping[str, Any] = raw_draft if isinstance(raw_draft, Mapping) else {}
    exported = iso_timestamp(exported_at)

    sources = {"meta": _merged_meta_source(raw), "raw": raw}
    table = aliases.META_ALIASES

    items = _build_items(raw)
    systems = _resolve_systems(sources, items)

    job_type = (pick_text(sources, table["jobType"]) or DEFAULT_JOB_TYPE).lower()
    job_factor = pick_number(sources, table["jobFactor"], 1.0) or 1.0

    meta = Meta(
        version=MODEL_VERSION,
        source=MODEL_SOURCE,
        caseNumber=pick_text(sources, table["caseNumber"]) or DEFAULT_CASE_NUMBER,
        caseName=pick_text(sources, table["caseName"]),
        customer=pick_text(sources, table["customer"]),
        address=pick_text(sources, table["address"]),
        date=sanitize_date(pick(sources, table["date"]), fallback=exported),
        montoer=pick_text(sources, table["montoer"]),
        system=systems[0] if systems else "",
        systems=systems,
        jobType=job_type,
        jobFactor=job_factor,
        createdAt=pick_text(sources, table["createdAt"]) or exported,
        exportedAt=exported,
    )

    info = Info(
        sagsnummer=meta["caseNumber"],
        navn=meta["caseName"],
        adresse=meta["address"],
        kunde=meta["customer"],
        dato=meta["date"],
        montoer=meta["montoer"],
        jobType=meta["jobType"],
    )

    materials = _materials_total(raw, items)
    extras = _build_extras(raw, materials)
    totals = _build_totals(raw, materials, extras)
    wage = _build_wage(raw, meta["montoer"])

    logger.debug(
        "Built canonical model case=%s items=%d extraWork=%d workers=%d akkord=%.2f",
        meta["caseNumber"],
        len(items),
        len(extras["extraWork"]),
        len(wage["workers"]),
        totals["akkord"],
    )

    return CanonicalModel(
        version=MODEL_VERSION,
        source=MODEL_SOURCE,
        meta=meta,
        info=info,
        items=items,
        materials=_build_materials(items),
        extras=extras,
        extraInputs=pick_mapping(raw, ("extraInputs",)),
        wage=wage,
        totals=totals,
    )
