"""
Export file naming.

Every artifact name is derived from one sanitized stem (case number, or a
timestamped default) plus a fixed per-format extension:

- sanitize_filename("Sag 12/Hø")  -> "Sag_12_Ho"
- build_export_file_base_name(dt) -> "Akkordseddel_2024-05-01_13-45"
- with_extension("sag_1", "pdf")  -> "sag_1.pdf"
"""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime
from typing import Any

from config import DEFAULT_BASE_NAME


_UNSAFE_RUN = re.compile(r"[^A-Za-z0-9\-_]+")
_UNDERSCORES = re.compile(r"_+")

# Letters NFD does not decompose into base + combining mark
_TRANSLITERATE = str.maketrans({"æ": "ae", "Æ": "AE", "ø": "o", "Ø": "O", "ß": "ss"})


def strip_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value.translate(_TRANSLITERATE))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def sanitize_filename(value: Any, fallback: str = DEFAULT_BASE_NAME) -> str:
    """Strip diacritics, collapse non-alphanumeric runs to '_', trim underscores."""
    text = "" if value is None else str(value)
    text = strip_diacritics(text)
    text = _UNSAFE_RUN.sub("_", text)
    text = _UNDERSCORES.sub("_", text).strip("_")
    return text or fallback


def build_export_file_base_name(when: datetime | None = None) -> str:
    """Timestamped default stem used when a draft carries no usable case number."""
    when = when or datetime.now()
    return f"Akkordseddel_{when:%Y-%m-%d_%H-%M}"


def with_extension(stem: str, extension: str) -> str:
    """Append '.<extension>' unless the stem already ends with it (case-insensitive)."""
    ext = extension.lstrip(".")
    suffix = f".{ext}"
    if stem.lower().endswith(suffix.lower()):
        return stem
    return f"{stem}{suffix}"
