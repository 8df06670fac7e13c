"""
Bundle composition: every export format in one ZIP archive.

Archive layout (folder per format, one shared file stem):

    pdf/<stem>.pdf
    json/<stem>.json
    csv/<stem>.csv
    excel/<stem>.xlsx      (only when a spreadsheet is requested)

The JSON snapshot and the PDF are required: if either fails the whole export
fails with RenderError. CSV and spreadsheet are best-effort: a failure is logged
and recorded in Bundle.omitted, and the archive is produced without that file.
"""

from __future__ import annotations

import io
import zipfile
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from domain.canonical import Bundle, CanonicalModel, RenderArtifact
from domain.errors import RenderError
from domain.snapshot import wrap_snapshot
from config.logging_config import get_logger
from fields.naming import sanitize_filename, with_extension

from .csv_writer import render_csv
from .excel_writer import render_workbook
from .json_writer import render_json
from .pdf_writer import render_pdf

logger = get_logger(__name__)

ZIP_CONTENT_TYPE = "application/zip"

Renderer = Callable[[], RenderArtifact]


def _run_required(name: str, renderer: Renderer) -> RenderArtifact:
    try:
        return renderer()
    except RenderError:
        raise
    except Exception as e:
        raise RenderError(f"{name} renderer failed: {e}", renderer=name, cause=e) from e


def _run_optional(name: str, renderer: Renderer, omitted: Dict[str, str]) -> Optional[RenderArtifact]:
    try:
        return renderer()
    except Exception as e:
        logger.warning("Skipping %s export: %s", name, e)
        omitted[name] = str(e)
        return None


def compose_bundle(
    model: CanonicalModel,
    base_name: str,
    include_spreadsheet: bool = False,
    excel_systems: Optional[List[str]] = None,
    exported_at: Optional[str] = None,
    raw_draft: Optional[Mapping[str, Any]] = None,
) -> Bundle:
    """
    Render every format and pack them into `<stem>.zip`.

    Args:
        model: CanonicalModel to export.
        base_name: File stem (sanitized again here).
        include_spreadsheet: Add the .xlsx workbook.
        excel_systems: Systems to split the workbook by; also stored in the snapshot.
        exported_at: Snapshot timestamp; defaults to the model's exportedAt.
        raw_draft: Original draft, used only for UI state carried in the snapshot.

    Raises:
        RenderError: JSON or PDF rendering failed.
    """
    stem = sanitize_filename(base_name)
    draft = raw_draft if isinstance(raw_draft, Mapping) else {}

    snapshot = wrap_snapshot(
        model,
        stem,
        exported_at=exported_at,
        excel_systems=excel_systems,
        tralle_state=draft.get("tralleState") if isinstance(draft.get("tralleState"), Mapping) else None,
        cache=draft.get("cache") if isinstance(draft.get("cache"), Mapping) else None,
    )

    omitted: Dict[str, str] = {}
    entries: List[Tuple[str, RenderArtifact]] = [
        ("pdf", _run_required("pdf", lambda: render_pdf(model, stem))),
        ("json", _run_required("json", lambda: render_json(snapshot, stem))),
    ]

    csv_artifact = _run_optional("csv", lambda: render_csv(model, stem), omitted)
    if csv_artifact is not None:
        entries.append(("csv", csv_artifact))

    if include_spreadsheet:
        xlsx_artifact = _run_optional("excel", lambda: render_workbook(model, stem, excel_systems), omitted)
        if xlsx_artifact is not None:
            entries.append(("excel", xlsx_artifact))

    buffer = io.BytesIO()
    manifest: List[str] = []
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for folder, artifact in entries:
            path = f"{folder}/{artifact.file_name}"
            zf.writestr(path, artifact.payload)
            manifest.append(path)

    logger.info("Composed bundle %s.zip with %d files (omitted: %s)", stem, len(manifest), ", ".join(omitted) or "none")

    return Bundle(
        artifact=RenderArtifact(
            file_name=with_extension(stem, "zip"),
            payload=buffer.getvalue(),
            content_type=ZIP_CONTENT_TYPE,
        ),
        manifest=manifest,
        omitted=omitted,
        snapshot=snapshot,
    )
