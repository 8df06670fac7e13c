"""
Pipeline orchestration.

Entry points used by the front-end and by other callers:
- export_draft: raw draft -> CanonicalModel -> ZIP bundle (pdf/json/csv[/excel]).
- build_snapshot: raw draft -> interchange snapshot only.
- import_payload: any supported payload generation -> CanonicalModel.
- process_uploaded_file: upload (file name + bytes) -> re-exported bundle, with
  pipeline errors turned into a message instead of an exception.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from config import DEFAULT_CASE_NUMBER, OUTPUT_ROOT
from config.logging_config import get_logger
from domain.canonical import Bundle, CanonicalModel, RawDraft, Snapshot
from domain.errors import AkkordError, ValidationError
from domain.snapshot import wrap_snapshot
from extraction.reconcile import NO_LINE_ITEMS, reconcile
from extraction.to_canonical import build_canonical_model, iso_timestamp
from fields.naming import build_export_file_base_name, sanitize_filename
from input_readers import read_payload
from writers import compose_bundle

logger = get_logger(__name__)

_JOB_ID_KEYS = ("id", "jobId")


def _validate_for_export(raw_draft: Mapping[str, Any], model: CanonicalModel) -> None:
    for key in _JOB_ID_KEYS:
        if key in raw_draft and not str(raw_draft[key] or "").strip():
            raise ValidationError(f"Cannot export: job id '{key}' is empty")
    if not model["items"]:
        raise ValidationError(f"Cannot export: {NO_LINE_ITEMS}")


def _export_datetime(model: CanonicalModel) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(model["meta"]["exportedAt"].replace("Z", "+00:00"))
    except ValueError:
        return None


def resolve_base_name(model: CanonicalModel, base_name: Optional[str] = None) -> str:
    """Explicit name, else the case number, else a default stamped with the export time."""
    if base_name and base_name.strip():
        return sanitize_filename(base_name)
    case_number = model["meta"]["caseNumber"]
    if case_number and case_number != DEFAULT_CASE_NUMBER:
        return sanitize_filename(case_number)
    return build_export_file_base_name(_export_datetime(model))


def export_draft(
    raw_draft: RawDraft,
    base_name: Optional[str] = None,
    include_spreadsheet: bool = False,
    excel_systems: Optional[list] = None,
    exported_at: Any = None,
) -> Bundle:
    """
    Export a draft as a ZIP bundle.

    Raises:
        ValidationError: the draft has no line items or an empty job id.
        RenderError: the PDF or JSON renderer failed.
    """
    draft: Mapping[str, Any] = raw_draft if isinstance(raw_draft, Mapping) else {}
    exported = iso_timestamp(exported_at)

    model = build_canonical_model(draft, exported_at=exported)
    _validate_for_export(draft, model)

    if excel_systems is None and isinstance(draft.get("excelSystems"), list):
        excel_systems = draft["excelSystems"]

    stem = resolve_base_name(model, base_name)
    logger.info("Exporting case %s as %s", model["meta"]["caseNumber"], stem)

    return compose_bundle(
        model,
        stem,
        include_spreadsheet=include_spreadsheet,
        excel_systems=excel_systems,
        exported_at=exported,
        raw_draft=draft,
    )


def build_snapshot(raw_draft: RawDraft, base_name: Optional[str] = None, exported_at: Any = None) -> Snapshot:
    draft: Mapping[str, Any] = raw_draft if isinstance(raw_draft, Mapping) else {}
    exported = iso_timestamp(exported_at)
    model = build_canonical_model(draft, exported_at=exported)

    tralle_state = draft.get("tralleState")
    cache = draft.get("cache")
    return wrap_snapshot(
        model,
        resolve_base_name(model, base_name),
        exported_at=exported,
        excel_systems=draft.get("excelSystems") if isinstance(draft.get("excelSystems"), list) else None,
        tralle_state=tralle_state if isinstance(tralle_state, Mapping) else None,
        cache=cache if isinstance(cache, Mapping) else None,
    )


def import_payload(payload: Any) -> CanonicalModel:
    """
    Import any supported payload generation into a CanonicalModel.

    Raises:
        ValidationError: not an object, or no recognizable line items.
        FormatError: snapshot with an unsupported schemaVersion.
    """
    draft = reconcile(payload)
    return build_canonical_model(draft, exported_at=draft.get("exportedAt") or None)


def save_bundle(bundle: Bundle, output_dir: Path = OUTPUT_ROOT) -> Path:
    """Write the bundle's archive to `output_dir` and return its path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / bundle.artifact.file_name
    output_path.write_bytes(bundle.artifact.payload)
    return output_path


def process_uploaded_file(
    file_name: str,
    data: bytes,
    include_spreadsheet: bool = False,
) -> Tuple[bool, Optional[Bundle], Optional[CanonicalModel], Optional[str]]:
    """
    Import an uploaded job file and re-export it as a bundle.

    Returns:
        (success, bundle, model, error message)
    """
    try:
        model = import_payload(read_payload(data))
        bundle = export_draft(
            model,
            include_spreadsheet=include_spreadsheet,
            exported_at=model["meta"]["exportedAt"],
        )
    except AkkordError as e:
        logger.warning("Upload %s rejected: %s", file_name, e)
        return False, None, None, str(e)

    logger.info("Processed upload %s -> %s", file_name, bundle.artifact.file_name)
    return True, bundle, model, None
