"""
JSON PAYLOAD READER
-------------------
Reads an exported job file (.json) into a raw dict with NO transformation.
Shape detection and alias mapping happen in extraction.reconcile.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from domain.errors import ValidationError


def read_payload(source: Union[Path, str, bytes, bytearray]) -> Dict[str, Any]:
    """
    Read a JSON payload from a file path or raw bytes.

    Args:
        source: Path to a .json file, or the file's bytes (e.g. an upload)

    Returns:
        The decoded JSON object

    Raises:
        FileNotFoundError: If a path is given and the file doesn't exist
        ValidationError: If the content is empty, not valid JSON, or not an object
    """
    if isinstance(source, (bytes, bytearray)):
        raw = bytes(source)
        label = "upload"
    else:
        path = Path(source).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(f"JSON file not found: {path}")
        raw = path.read_bytes()
        label = path.name

    # utf-8-sig also accepts files saved with a BOM
    text = raw.decode("utf-8-sig", errors="replace").strip()
    if not text:
        raise ValidationError(f"Import file is empty: {label}")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Import file is not valid JSON ({label}): {e}") from e

    if not isinstance(data, dict):
        raise ValidationError(f"Import file must contain a JSON object ({label})")
    return data
