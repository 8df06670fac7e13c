"""
CanonicalModel schema definition.

These TypedDicts represent the normalized, shape-agnostic structure used across
the entire export/import pipeline. Every input generation (current drafts,
flat v2 exports, items-only payloads, legacy v1 files) is mapped into this
structure before any renderer (PDF, CSV, spreadsheet, JSON) touches it.

The model is a plain mapping so it serializes to the interchange JSON as-is.
Renderers only read it; it is rebuilt from the raw draft on every export.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TypedDict


RawDraft = Dict[str, Any]


class Meta(TypedDict):
    version: str
    source: str
    caseNumber: str
    caseName: str
    customer: str
    address: str
    date: str
    montoer: str
    system: str
    systems: List[str]
    jobType: str
    jobFactor: float
    createdAt: str
    exportedAt: str


class Info(TypedDict):
    sagsnummer: str
    navn: str
    adresse: str
    kunde: str
    dato: str
    montoer: str
    jobType: str


class Item(TypedDict):
    lineNumber: int
    system: str
    category: str
    itemNumber: str
    name: str
    unit: str
    quantity: float
    unitPrice: float
    lineTotal: float


class MaterialRef(TypedDict):
    id: str
    name: str
    qty: float
    unitPrice: float
    system: str


class KmCharge(TypedDict):
    quantity: float
    rate: float
    amount: float


class SlaebCharge(TypedDict):
    percent: float
    amount: float


class TralleCharge(TypedDict):
    lifts35: float
    lifts50: float
    quantity: float
    rate: float
    amount: float


class ExtraWork(TypedDict):
    id: str
    type: str
    quantity: float
    unit: str
    rate: float
    amount: float
    description: str


class Extras(TypedDict):
    km: KmCharge
    slaeb: SlaebCharge
    tralle: TralleCharge
    extraWork: List[ExtraWork]


class Worker(TypedDict):
    id: str
    name: str
    hours: float
    rate: float
    total: float
    allowances: Dict[str, Any]


class WageTotals(TypedDict):
    hours: float
    sum: float


class Wage(TypedDict):
    workers: List[Worker]
    totals: WageTotals


class ExtrasBreakdown(TypedDict):
    km: float
    slaeb: float
    tralle: float
    extraWork: float


class Totals(TypedDict):
    materials: float
    extras: float
    extrasBreakdown: ExtrasBreakdown
    akkord: float
    project: float


class CanonicalModel(TypedDict):
    version: str
    source: str
    meta: Meta
    info: Info
    items: List[Item]
    materials: List[MaterialRef]
    extras: Extras
    extraInputs: Dict[str, Any]
    wage: Wage
    totals: Totals


class AppInfo(TypedDict):
    name: str
    version: str


class Snapshot(TypedDict):
    schemaVersion: str
    exportedAt: str
    app: AppInfo
    baseName: str
    job: Dict[str, Any]


@dataclass(frozen=True)
class RenderArtifact:
    """One renderer output: file name, bytes and declared content type."""

    file_name: str
    payload: bytes
    content_type: str


@dataclass(frozen=True)
class Bundle:
    """The composed archive plus the paths it contains and the renderers left out."""

    artifact: RenderArtifact
    manifest: List[str] = field(default_factory=list)
    omitted: Dict[str, str] = field(default_factory=dict)
    snapshot: Optional[Snapshot] = None
