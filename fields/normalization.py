"""
Value normalization for untrusted draft data.

Drafts arrive from several generations of the calculator and from hand-edited
files, so every numeric and textual field is coerced through the helpers below:

- coerce_finite_or_default: the single numeric coercion step (non-finite → default).
- to_float / to_int: optional-returning variants when "absent" must stay distinguishable.
- pick / pick_text / pick_number / pick_list: alias resolution over dotted paths,
  first present value wins.
- sanitize_date: ISO date normalization for the handful of date spellings seen in the wild.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional


# "1.500" or "1,234": whole three-digit groups after one kind of separator are thousands
_THOUSANDS_GROUPS = re.compile(r"^-?\d{1,3}(?:[.,]\d{3})+$")

_YMD = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})")
_DMY = re.compile(r"^(\d{1,2})[-/.](\d{1,2})[-/.](\d{4})$")


def _parse_number_text(text: str) -> Optional[float]:
    """Parse '12,5', '1.234,50', '1,234.50', ' 42 ' and friends. Return None if not possible."""
    s = text.strip().replace("\u00a0", "").replace(" ", "").replace("'", "")
    if not s:
        return None

    if "," in s and "." in s:
        # last separator is the decimal one
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif "," in s:
        if _THOUSANDS_GROUPS.match(s):
            s = s.replace(",", "")
        else:
            s = s.replace(",", ".")
    elif _THOUSANDS_GROUPS.match(s):
        s = s.replace(".", "")

    try:
        return float(s)
    except ValueError:
        return None


def coerce_finite_or_default(value: Any, default: float = 0.0) -> float:
    """
    Coerce any draft value to a finite float.

    Numbers pass through, numeric-like strings are parsed, everything else
    (None, booleans, containers, junk text, NaN, ±inf) becomes `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        num = float(value)
        return num if math.isfinite(num) else default
    if isinstance(value, str):
        num = _parse_number_text(value)
        if num is None or not math.isfinite(num):
            return default
        return num
    return default


def to_float(value: Any) -> Optional[float]:
    """Like coerce_finite_or_default, but return None when the value is not a usable number."""
    num = coerce_finite_or_default(value, default=math.nan)
    return None if math.isnan(num) else num


def to_int(value: Any) -> Optional[int]:
    """Convert numeric-like values to int (rounded). Return None if not possible."""
    num = to_float(value)
    if num is None:
        return None
    return int(round(num))


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _walk(root: Mapping[str, Any], path: str) -> Any:
    current: Any = root
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def pick(root: Mapping[str, Any], paths: Iterable[str]) -> Any:
    """
    Return the value at the first dotted path that holds a scalar.

    None, blank strings and containers are skipped, so a legacy scalar alias
    (e.g. `extras.km` holding an amount) never shadows the canonical nested block.
    """
    if not isinstance(root, Mapping):
        return None
    for path in paths:
        value = _walk(root, path)
        if is_blank(value) or isinstance(value, (Mapping, list, tuple)):
            continue
        return value
    return None


def pick_text(root: Mapping[str, Any], paths: Iterable[str], default: str = "") -> str:
    value = pick(root, paths)
    if value is None:
        return default
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def pick_number(root: Mapping[str, Any], paths: Iterable[str], default: float = 0.0) -> float:
    return coerce_finite_or_default(pick(root, paths), default)


def pick_optional_number(root: Mapping[str, Any], paths: Iterable[str]) -> Optional[float]:
    """First present alias as a number, or None when no alias is present or it is junk."""
    return to_float(pick(root, paths))


def pick_list(root: Mapping[str, Any], paths: Iterable[str]) -> Optional[List[Any]]:
    """Return the first list found at one of the paths, or None."""
    if not isinstance(root, Mapping):
        return None
    for path in paths:
        value = _walk(root, path)
        if isinstance(value, list):
            return value
    return None


def pick_mapping(root: Mapping[str, Any], paths: Iterable[str]) -> dict:
    """Return a shallow copy of the first mapping found at one of the paths, or {}."""
    if not isinstance(root, Mapping):
        return {}
    for path in paths:
        value = _walk(root, path)
        if isinstance(value, Mapping):
            return dict(value)
    return {}


def sanitize_date(value: Any, fallback: Any = None) -> str:
    """
    Normalize a date-like value to ISO 'YYYY-MM-DD'.

    Accepts date/datetime objects, ISO strings (with or without time), D-M-YYYY
    with '-', '/' or '.' separators. Empty values use `fallback` (another
    date-like value) or today's UTC date. Unparseable text is cut to 10 chars.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = "" if value is None else str(value).strip()
    if not text:
        if fallback is not None and not is_blank(fallback):
            return sanitize_date(fallback)
        return datetime.now(timezone.utc).date().isoformat()

    match = _YMD.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
    else:
        match = _DMY.match(text)
        if not match:
            return text[:10]
        day, month, year = (int(g) for g in match.groups())

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return text[:10]
