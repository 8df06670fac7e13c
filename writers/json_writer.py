"""Interchange JSON writer: the snapshot, pretty-printed UTF-8."""

from __future__ import annotations

import json
from typing import Optional

from domain.canonical import RenderArtifact, Snapshot
from fields.naming import with_extension

JSON_CONTENT_TYPE = "application/json"


def render_json(snapshot: Snapshot, base_name: Optional[str] = None) -> RenderArtifact:
    payload = json.dumps(snapshot, ensure_ascii=False, indent=2).encode("utf-8")
    return RenderArtifact(
        file_name=with_extension(base_name or snapshot["baseName"], "json"),
        payload=payload,
        content_type=JSON_CONTENT_TYPE,
    )
