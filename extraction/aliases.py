"""
Field-alias tables.

Every concept in the canonical model has been spelled several ways over the
calculator's history (English v2 names, Danish v1 names, UI-internal names).
Each table below lists the dotted paths to try, NEWEST NAME FIRST, then each
historical alias in chronological order. The first present value wins.

GLOBAL RULES
- Never guess: a concept absent from every alias resolves to its default.
- Container values are never taken for scalars (see fields.normalization.pick).
- Shape-specific tables (SHAPE_META_ALIASES) are used by the import reconciler;
  the remaining tables are shared by the reconciler and the model builder.
"""

from __future__ import annotations

from typing import Dict, Tuple

Paths = Tuple[str, ...]


# ---------------------------------------------------------------------------
# Canonical model builder: meta
# Paths are resolved against {"meta": <merged meta/info/sagsinfo>, "raw": <draft>}
# ---------------------------------------------------------------------------
META_SOURCE_KEYS: Paths = ("meta", "info", "sagsinfo")

META_ALIASES: Dict[str, Paths] = {
    "caseNumber": ("meta.caseNumber", "meta.sagsnummer", "meta.caseNo", "raw.caseNumber", "raw.jobId"),
    "caseName": ("meta.caseName", "meta.navn", "meta.beskrivelse", "meta.opgave", "raw.jobName"),
    "customer": ("meta.customer", "meta.kunde", "raw.customer"),
    "address": ("meta.address", "meta.adresse", "meta.site", "raw.address"),
    "date": ("meta.date", "meta.dato", "raw.createdAt"),
    "montoer": ("meta.montoer", "meta.montor", "meta.worker"),
    "jobType": ("raw.jobType", "meta.jobType", "raw.type", "raw.extras.jobType"),
    "createdAt": ("raw.createdAt", "meta.createdAt"),
    "jobFactor": ("raw.jobFactor", "meta.jobFactor"),
}

SYSTEM_LISTS: Paths = ("raw.systems", "meta.systems")
SYSTEM_SCALARS: Paths = ("meta.system", "raw.system")


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------
NEW_STYLE_ITEM_ARRAYS: Paths = ("lines", "linjer", "items")
LEGACY_ITEM_ARRAYS: Paths = ("materials", "materialer")
MATERIAL_BEARING_ARRAYS: Paths = ("items", "materials", "materialer", "linjer", "lines")

ITEM_ALIASES: Dict[str, Paths] = {
    "lineNumber": ("lineNumber", "linjeNr"),
    "system": ("system", "systemKey"),
    "category": ("category", "kategori"),
    "itemNumber": ("itemNumber", "varenr", "id"),
    "name": ("name", "navn", "label", "title"),
    "unit": ("unit", "enhed"),
    "quantity": ("quantity", "antal", "qty", "amount"),
    "unitPrice": ("unitPrice", "stkPris", "ackUnitPrice", "baseUnitPrice", "price", "pris"),
    "lineTotal": ("lineTotal", "linjeBelob"),
}


# ---------------------------------------------------------------------------
# Extras (paths resolved against the raw draft)
# ---------------------------------------------------------------------------
KM_QUANTITY: Paths = ("extras.km.quantity", "akkord.km", "extras.kmAntal", "extraInputs.km")
KM_AMOUNT: Paths = ("extras.km.amount", "akkord.kmBelob", "extras.kmBelob", "extras.km")
KM_RATE: Paths = ("extras.km.rate", "akkord.kmSats", "extras.kmSats")

SLAEB_PERCENT: Paths = (
    "extras.slaeb.percent",
    "akkord.slaebProcent",
    "extraInputs.slaebePctInput",
    "extras.slaebePct",
)
SLAEB_AMOUNT: Paths = (
    "extras.slaeb.amount",
    "akkord.slaebBelob",
    "extras.slaebBelob",
    "extras.slaebeBelob",
    "slaebeBelob",
    "extras.slaeb",
)

TRALLE_LIFTS35: Paths = ("extras.tralle.lifts35", "tralleState.n35", "extras.traelle35", "extras.tralle35")
TRALLE_LIFTS50: Paths = ("extras.tralle.lifts50", "tralleState.n50", "extras.traelle50", "extras.tralle50")
TRALLE_AMOUNT: Paths = ("extras.tralle.amount", "tralleSum", "extras.tralleSum", "extras.tralle")
TRALLE_RATE: Paths = ("extras.tralle.rate",)

EXTRA_WORK_LISTS: Paths = ("extras.extraWork", "akkord.ekstraarbejde")
OTHER_EXTRAS_AMOUNT: Paths = ("extras.oevrige",)


# ---------------------------------------------------------------------------
# Wage
# ---------------------------------------------------------------------------
WORKER_LISTS: Paths = ("wage.workers", "laborTotals", "labor", "workers")

WORKER_ALIASES: Dict[str, Paths] = {
    "id": ("id",),
    "name": ("name", "navn", "montor", "montoer"),
    "hours": ("hours", "timer", "time"),
    "rate": ("hourlyWithAllowances", "rate", "sats", "hourlyRate"),
    "total": ("total", "beloeb", "belob"),
    "mentortillaeg": ("allowances.mentortillaeg", "mentortillaeg", "mentorAllowance"),
    "udd": ("allowances.udd", "udd", "education", "educationLevel"),
}

# Legacy v1 files without a worker list carry one aggregate wage block
AGGREGATE_WAGE_HOURS: Paths = ("wage.montageHours", "wage.demontageHours", "wage.totalHours")
AGGREGATE_WAGE_RATE: Paths = ("wage.hourlyRate",)


# ---------------------------------------------------------------------------
# Totals overrides (explicit non-zero value wins, per field)
# ---------------------------------------------------------------------------
TOTALS_OVERRIDES: Dict[str, Paths] = {
    "materials": (
        "totals.materials",
        "totals.totalMaterialer",
        "totals.materialer",
        "totals.materialSum",
        "totals.materialsSum",
        "akkord.totalMaterialer",
    ),
    "extras": ("totals.extras", "totals.ekstraarbejde", "totals.extraSum", "totals.extrasSum"),
    "akkord": (
        "totals.akkord",
        "totals.totalAkkord",
        "totals.samletAkkordsum",
        "totals.akkordsum",
        "akkord.totalAkkord",
    ),
    "project": ("totals.project", "totals.projektsum"),
}


# ---------------------------------------------------------------------------
# Import reconciler: identity per payload shape
# ---------------------------------------------------------------------------
SHAPE_META_ALIASES: Dict[str, Dict[str, Paths]] = {
    "snapshot": {
        "caseNumber": ("meta.caseNumber", "info.sagsnummer", "id"),
        "caseName": ("meta.caseName", "info.navn"),
        "customer": ("meta.customer", "info.kunde"),
        "address": ("meta.address", "info.adresse"),
        "date": ("meta.date", "info.dato"),
        "montoer": ("meta.montoer", "info.montoer"),
        "createdAt": ("meta.createdAt",),
        "exportedAt": ("meta.exportedAt", "exportedAt"),
    },
    "flat_v2": {
        "caseNumber": ("meta.caseNumber", "info.sagsnummer", "meta.sagsnummer", "jobId"),
        "caseName": ("meta.caseName", "info.navn", "meta.navn", "jobName"),
        "customer": ("meta.customer", "info.kunde", "meta.kunde", "customer"),
        "address": ("meta.address", "info.adresse", "meta.adresse", "jobAddress", "address"),
        "date": ("meta.date", "info.dato", "meta.dato", "createdAt"),
        "montoer": ("meta.montoer", "info.montoer"),
        "createdAt": ("meta.createdAt", "createdAt"),
        "exportedAt": ("meta.exportedAt", "exportedAt"),
    },
    "items_only": {
        "caseNumber": ("meta.caseNumber", "meta.sagsnummer", "caseNumber", "sagsnummer", "jobId"),
        "caseName": ("meta.caseName", "meta.navn", "caseName", "name", "title"),
        "customer": ("meta.customer", "meta.kunde", "customer", "kunde"),
        "address": ("meta.address", "meta.adresse", "address", "adresse"),
        "date": ("meta.date", "meta.dato", "date", "createdAt"),
        "montoer": ("meta.montoer",),
        "createdAt": ("createdAt",),
        "exportedAt": ("exportedAt",),
    },
    "legacy_v1": {
        "caseNumber": ("info.sagsnummer", "sagsinfo.sagsnummer", "meta.sagsnummer", "meta.caseNumber", "caseNo", "jobId"),
        "caseName": ("info.navn", "sagsinfo.navn", "meta.navn", "meta.beskrivelse", "jobName", "name", "title"),
        "customer": ("info.kunde", "sagsinfo.kunde", "meta.kunde", "customer", "kunde"),
        "address": ("info.adresse", "sagsinfo.adresse", "meta.adresse", "jobAddress", "address", "site"),
        "date": ("info.dato", "sagsinfo.dato", "meta.dato", "createdAt", "date"),
        "montoer": ("info.montoer", "sagsinfo.montoer", "meta.montoer", "montor", "worker"),
        "createdAt": ("createdAt",),
        "exportedAt": ("exportedAt",),
    },
}

SHAPE_JOB_TYPE: Paths = ("jobType", "meta.jobType", "type", "extras.jobType", "info.jobType")
SHAPE_SYSTEM_LISTS: Paths = ("systems", "meta.systems")
SHAPE_SYSTEM_SCALARS: Paths = ("meta.system", "system")
SHAPE_TOTALS_BLOCKS: Paths = ("totals", "summary")
