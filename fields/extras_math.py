"""
Add-on charge computations (km, slæb, tralle, extra work).

Each charge is a small triad (quantity, rate, amount) where drafts usually carry
only two of the three. The helpers below complete the missing member:

- amount + quantity -> rate = amount / quantity (quantity non-zero)
- quantity + rate   -> amount = quantity * rate
- explicit values always take precedence (we compute only missing fields)
- derived amounts are rounded to whole øre
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from config import (
    BORING_BETON_RATE,
    BORING_HULLER_RATE,
    KM_RATE,
    LUK_HULLER_RATE,
    OPSKYDELIGT_RATE,
    TRAELLE_RATE35,
    TRAELLE_RATE50,
)
from domain.canonical import ExtraWork, KmCharge, SlaebCharge, TralleCharge

from .normalization import coerce_finite_or_default, pick, pick_text, to_float


def round2(value: float) -> float:
    return round(value, 2)


def _rate_from(amount: float, quantity: float, explicit_rate: Optional[float]) -> float:
    if quantity != 0:
        return amount / quantity
    return explicit_rate or 0.0


def complete_km(
    quantity: Optional[float],
    amount: Optional[float],
    rate: Optional[float] = None,
) -> KmCharge:
    """Distance charge. Only a quantity known -> priced at the explicit rate, else KM_RATE."""
    qty = quantity or 0.0
    if amount is None:
        amount = round2(qty * (rate if rate else KM_RATE)) if qty else 0.0
    return KmCharge(quantity=qty, rate=_rate_from(amount, qty, rate), amount=amount)


def complete_slaeb(
    percent: Optional[float],
    amount: Optional[float],
    materials_total: float,
) -> SlaebCharge:
    """Percentage material-handling surcharge; the amount is a share of the materials sum."""
    pct = percent or 0.0
    if amount is None:
        amount = round2(materials_total * pct / 100) if pct else 0.0
    return SlaebCharge(percent=pct, amount=amount)


def complete_tralle(
    lifts35: Optional[float],
    lifts50: Optional[float],
    amount: Optional[float],
    rate: Optional[float] = None,
) -> TralleCharge:
    """Trolley lifts billed per lift count at the 35/50 tariffs."""
    n35 = lifts35 or 0.0
    n50 = lifts50 or 0.0
    lifts = n35 + n50
    if amount is None:
        amount = round2(n35 * TRAELLE_RATE35 + n50 * TRAELLE_RATE50)
    return TralleCharge(
        lifts35=n35,
        lifts50=n50,
        quantity=lifts,
        rate=_rate_from(amount, lifts, rate),
        amount=amount,
    )


def complete_extra_work(entry: Mapping[str, Any], index: int) -> ExtraWork:
    """Normalize one free-form extra-work entry (current or Danish legacy field names)."""
    quantity = coerce_finite_or_default(pick(entry, ("quantity", "antal", "qty")))
    rate = to_float(pick(entry, ("rate", "sats")))
    amount = to_float(pick(entry, ("amount", "belob", "beloeb")))

    if amount is None:
        amount = round2(quantity * (rate or 0.0))
    if rate is None:
        rate = amount / quantity if quantity else 0.0

    return ExtraWork(
        id=pick_text(entry, ("id",)) or f"extra-{index + 1}",
        type=pick_text(entry, ("type", "art"), "Ekstraarbejde"),
        quantity=quantity,
        unit=pick_text(entry, ("unit", "enhed")),
        rate=rate,
        amount=amount,
        description=pick_text(entry, ("description", "tekst", "note")),
    )


# (input key, label, unit, rate)
_COUNTER_TARIFFS = (
    ("boringHuller", "Boring af huller", "stk", BORING_HULLER_RATE),
    ("lukHuller", "Lukning af huller", "stk", LUK_HULLER_RATE),
    ("boringBeton", "Boring i beton", "stk", BORING_BETON_RATE),
    ("opskydeligt", "Opskydeligt rækværk", "stk", OPSKYDELIGT_RATE),
)


def extra_work_from_counters(extra_inputs: Mapping[str, Any], other_amount: float = 0.0) -> List[ExtraWork]:
    """
    Derive extra-work entries from the calculator's counter inputs.

    Used only when a draft carries no explicit extra-work list. Counters that are
    zero produce no entry.
    """
    entries: List[ExtraWork] = []
    for key, label, unit, rate in _COUNTER_TARIFFS:
        qty = coerce_finite_or_default(extra_inputs.get(key) if isinstance(extra_inputs, Mapping) else None)
        if not qty:
            continue
        entries.append(
            ExtraWork(
                id=f"extra-{len(entries) + 1}",
                type=label,
                quantity=qty,
                unit=unit,
                rate=rate,
                amount=round2(qty * rate),
                description=label,
            )
        )

    if other_amount:
        entries.append(
            ExtraWork(
                id=f"extra-{len(entries) + 1}",
                type="Øvrige",
                quantity=1.0,
                unit="",
                rate=other_amount,
                amount=other_amount,
                description="Øvrige ekstraarbejde",
            )
        )
    return entries
