"""Montage -> demontage conversion (dismantling sheet prefilled from an assembly job)."""

from __future__ import annotations

import copy
from typing import Any, Dict

from domain.canonical import CanonicalModel

DEMONTAGE = "demontage"


def convert_montage_to_demontage(model: CanonicalModel) -> Dict[str, Any]:
    """
    Re-issue a montage model as a legacy v1 payload with job type "demontage".

    The result is an ordinary import payload (detected as LEGACY_V1), so it goes
    through reconcile() and the builder like any other file.
    """
    meta = dict(model["meta"], jobType=DEMONTAGE, version=1)
    info = dict(model["info"], jobType=DEMONTAGE)

    materials = [
        {
            "id": item["itemNumber"],
            "name": item["name"],
            "qty": item["quantity"],
            "unitPrice": item["unitPrice"],
            "system": item["system"],
        }
        for item in model["items"]
    ]

    return {
        "version": 1,
        "type": DEMONTAGE,
        "jobType": DEMONTAGE,
        "info": info,
        "meta": meta,
        "systems": list(model["meta"]["systems"]),
        "materials": materials,
        "extras": copy.deepcopy(model["extras"]),
        "wage": copy.deepcopy(model["wage"]),
        "totals": copy.deepcopy(model["totals"]),
    }
