"""
Import reconciliation of interchange payloads.

Four generations of exported jobs are in circulation:

- SNAPSHOT:   {"schemaVersion": "cssmate.job.v1", "job": {...}} (current bundles)
- FLAT_V2:    {"meta": {"caseNumber": ...}, "items": [...], "totals": {...}}
- ITEMS_ONLY: {"items": [...]} with little or no metadata
- LEGACY_V1:  {"version": 1, "info": {...}, "materials": [...]} and Danish variants
              ("materialer", "linjer", "sagsinfo"), possibly nested under "data"

detect_shape() picks the generation (first match in the order above); reconcile()
maps the payload through that generation's alias table into one RawDraft shape
that build_canonical_model() understands. Values are copied as found; numeric
coercion happens in the builder.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping

from config.logging_config import get_logger
from domain.canonical import RawDraft
from domain.errors import ValidationError
from domain.snapshot import is_snapshot, unwrap_snapshot
from fields.normalization import pick, pick_list, pick_mapping, pick_optional_number, pick_text

from . import aliases

logger = get_logger(__name__)

NO_LINE_ITEMS = "no recognizable line items"


class PayloadShape(str, Enum):
    SNAPSHOT = "snapshot"
    FLAT_V2 = "flat_v2"
    ITEMS_ONLY = "items_only"
    LEGACY_V1 = "legacy_v1"


def _has_list(payload: Mapping[str, Any], keys) -> bool:
    return any(isinstance(payload.get(key), list) for key in keys)


def _unwrap_data(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Some v1 files nest everything under "data"; use it when the top level has no materials."""
    nested = payload.get("data")
    if isinstance(nested, Mapping) and not _has_list(payload, aliases.MATERIAL_BEARING_ARRAYS):
        return nested
    return payload


def _require_mapping(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValidationError(f"Import payload must be a JSON object, got {type(payload).__name__}")
    return payload


def detect_shape(payload: Any) -> PayloadShape:
    """
    Classify a payload.

    Raises:
        ValidationError: payload is not a mapping or carries no line-item array.
    """
    payload = _require_mapping(payload)
    if is_snapshot(payload):
        return PayloadShape.SNAPSHOT

    body = _unwrap_data(payload)
    has_items = isinstance(body.get("items"), list)

    if has_items and pick(body, ("meta.caseNumber",)) is not None:
        return PayloadShape.FLAT_V2
    if has_items:
        return PayloadShape.ITEMS_ONLY
    if _has_list(body, aliases.MATERIAL_BEARING_ARRAYS):
        return PayloadShape.LEGACY_V1

    raise ValidationError(NO_LINE_ITEMS)


def _body_for(shape: PayloadShape, payload: Mapping[str, Any]) -> Mapping[str, Any]:
    if shape is PayloadShape.SNAPSHOT:
        return unwrap_snapshot(payload)
    return _unwrap_data(payload)


def _reconcile_lines(body: Mapping[str, Any]) -> List[Dict[str, Any]]:
    entries: List[Any] = []
    for paths in (aliases.NEW_STYLE_ITEM_ARRAYS, aliases.LEGACY_ITEM_ARRAYS):
        for path in paths:
            found = pick_list(body, (path,))
            if found:
                entries = found
                break
        if entries:
            break

    lines: List[Dict[str, Any]] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        line = {key: pick(entry, paths) for key, paths in aliases.ITEM_ALIASES.items()}
        lines.append({key: value for key, value in line.items() if value is not None})
    return lines


def _compact(block: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in block.items() if value is not None}


def _reconcile_extras(body: Mapping[str, Any]) -> Dict[str, Any]:
    extras: Dict[str, Any] = {
        "km": _compact({
            "quantity": pick_optional_number(body, aliases.KM_QUANTITY),
            "amount": pick_optional_number(body, aliases.KM_AMOUNT),
            "rate": pick_optional_number(body, aliases.KM_RATE),
        }),
        "slaeb": _compact({
            "percent": pick_optional_number(body, aliases.SLAEB_PERCENT),
            "amount": pick_optional_number(body, aliases.SLAEB_AMOUNT),
        }),
        "tralle": _compact({
            "lifts35": pick_optional_number(body, aliases.TRALLE_LIFTS35),
            "lifts50": pick_optional_number(body, aliases.TRALLE_LIFTS50),
            "amount": pick_optional_number(body, aliases.TRALLE_AMOUNT),
            "rate": pick_optional_number(body, aliases.TRALLE_RATE),
        }),
    }

    extra_work = pick_list(body, aliases.EXTRA_WORK_LISTS)
    if extra_work is not None:
        extras["extraWork"] = [dict(entry) for entry in extra_work if isinstance(entry, Mapping)]

    other = pick_optional_number(body, aliases.OTHER_EXTRAS_AMOUNT)
    if other:
        extras["oevrige"] = other
    return extras


def _reconcile_wage(body: Mapping[str, Any]) -> Dict[str, Any]:
    wage = pick_mapping(body, ("wage",))
    workers = pick_list(body, aliases.WORKER_LISTS)
    if workers is not None:
        wage["workers"] = [dict(worker) for worker in workers if isinstance(worker, Mapping)]
    return wage


def _reconcile_totals(body: Mapping[str, Any]) -> Dict[str, Any]:
    totals: Dict[str, Any] = {}
    for key in aliases.SHAPE_TOTALS_BLOCKS[::-1]:
        totals.update(pick_mapping(body, (key,)))

    akkord = pick_mapping(body, ("akkord",))
    for key in ("totalMaterialer", "totalAkkord"):
        if key in akkord:
            totals.setdefault(key, akkord[key])
    return totals


def _reconcile_systems(body: Mapping[str, Any]) -> List[str]:
    systems = [str(s).strip() for s in pick_list(body, aliases.SHAPE_SYSTEM_LISTS) or [] if s is not None]
    systems = [s for s in systems if s]
    if not systems:
        scalar = pick_text(body, aliases.SHAPE_SYSTEM_SCALARS)
        if scalar:
            systems = [scalar]
    return systems


def reconcile(payload: Any) -> RawDraft:
    """
    Map any supported payload generation into a RawDraft.

    Raises:
        ValidationError: not a mapping, or no material-bearing array.
        FormatError: snapshot with an unsupported schemaVersion.
    """
    shape = detect_shape(payload)
    body = _body_for(shape, _require_mapping(payload))

    if not _has_list(body, aliases.MATERIAL_BEARING_ARRAYS):
        raise ValidationError(NO_LINE_ITEMS)

    meta = {
        key: pick_text(body, paths)
        for key, paths in aliases.SHAPE_META_ALIASES[shape.value].items()
    }
    meta = {key: value for key, value in meta.items() if value}

    draft: RawDraft = {
        "meta": meta,
        "systems": _reconcile_systems(body),
        "jobType": pick_text(body, aliases.SHAPE_JOB_TYPE),
        "jobFactor": pick_optional_number(body, ("jobFactor", "meta.jobFactor")),
        "lines": _reconcile_lines(body),
        "extras": _reconcile_extras(body),
        "extraInputs": pick_mapping(body, ("extraInputs",)),
        "wage": _reconcile_wage(body),
        "totals": _reconcile_totals(body),
        "excelSystems": pick_list(body, ("excelSystems",)) or [],
        "tralleState": pick_mapping(body, ("tralleState",)),
        "cache": pick_mapping(body, ("cache",)),
        "exportedAt": meta.get("exportedAt", ""),
    }

    logger.info(
        "Reconciled %s payload: case=%s lines=%d",
        shape.value,
        meta.get("caseNumber", "?"),
        len(draft["lines"]),
    )
    return draft
