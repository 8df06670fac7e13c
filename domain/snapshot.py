"""
Versioned interchange snapshot (schema `cssmate.job.v1`).

The snapshot is the JSON document shipped inside every bundle and accepted by the
importer. Its envelope identifies the schema and the producing application; the
`job` body is a superset of the CanonicalModel plus UI state that only the
calculator itself uses (excelSystems, tralleState, cache).

Consumers must check `schemaVersion` before reading anything else.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Optional

from config import APP_NAME, APP_VERSION, SCHEMA_VERSION
from domain.canonical import AppInfo, CanonicalModel, Snapshot
from domain.errors import FormatError


def wrap_snapshot(
    model: CanonicalModel,
    base_name: str,
    exported_at: Optional[str] = None,
    excel_systems: Optional[List[str]] = None,
    tralle_state: Optional[Mapping[str, Any]] = None,
    cache: Optional[Mapping[str, Any]] = None,
    job_factor: Optional[float] = None,
) -> Snapshot:
    """
    Wrap a CanonicalModel in the interchange envelope.

    The job body is a deep copy; later edits to the model do not reach it.
    Without explicit excel_systems the job's own systems are recorded.
    """
    meta = model["meta"]
    exported = exported_at or meta["exportedAt"]

    job: Dict[str, Any] = {
        "id": meta["caseNumber"],
        "jobType": meta["jobType"],
        "version": model["version"],
        "source": model["source"],
        "exportedAt": exported,
        "meta": dict(copy.deepcopy(meta), exportedAt=exported),
        "info": dict(model["info"]),
        "systems": list(meta["systems"]),
        "materials": [dict(m) for m in model["materials"]],
        "items": [dict(i) for i in model["items"]],
        "extras": copy.deepcopy(model["extras"]),
        "extraInputs": copy.deepcopy(model["extraInputs"]),
        "totals": copy.deepcopy(model["totals"]),
        "wage": copy.deepcopy(model["wage"]),
        "jobFactor": meta["jobFactor"] if job_factor is None else job_factor,
        "excelSystems": list(meta["systems"] if excel_systems is None else excel_systems),
        "tralleState": dict(tralle_state or {}),
        "cache": dict(cache or {}),
    }

    return Snapshot(
        schemaVersion=SCHEMA_VERSION,
        exportedAt=exported,
        app=AppInfo(name=APP_NAME, version=APP_VERSION),
        baseName=base_name,
        job=job,
    )


def is_snapshot(payload: Any) -> bool:
    return isinstance(payload, Mapping) and "schemaVersion" in payload


def unwrap_snapshot(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return the job body of a snapshot.

    Raises:
        FormatError: schemaVersion differs from SCHEMA_VERSION, or the job body is missing.
    """
    version = payload.get("schemaVersion") if isinstance(payload, Mapping) else None
    if version != SCHEMA_VERSION:
        raise FormatError(f"Unsupported schemaVersion {version!r}; expected {SCHEMA_VERSION!r}")

    job = payload.get("job")
    if not isinstance(job, Mapping):
        raise FormatError("Snapshot has no 'job' object")
    return dict(job)
