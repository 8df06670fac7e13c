"""Danish number formatting shared by the CSV, spreadsheet and PDF renderers."""

from __future__ import annotations

from typing import Any

from .normalization import coerce_finite_or_default


def format_dkk(value: Any) -> str:
    """Two decimals, '.' thousands separator, ',' decimal separator: 1234.5 -> '1.234,50'."""
    num = round(coerce_finite_or_default(value), 2)
    if num == 0:
        num = 0.0
    text = f"{num:,.2f}"
    return text.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def format_quantity(value: Any) -> str:
    """Integers without decimals ('4'), otherwise up to two decimals ('2,5')."""
    num = coerce_finite_or_default(value)
    if num.is_integer():
        return str(int(num))
    text = f"{num:.2f}".rstrip("0").rstrip(".")
    return text.replace(".", ",")


def format_kr(value: Any) -> str:
    return f"{format_dkk(value)} kr"
