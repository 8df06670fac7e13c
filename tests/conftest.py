"""
Pytest configuration and shared fixtures for the akkordseddel pipeline tests.
"""
import copy
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


EXPORTED_AT = "2024-05-01T12:00:00+00:00"


# ============================================================================
# Fixtures: Drafts
# ============================================================================

_SAMPLE_DRAFT = {
    "meta": {
        "caseNumber": "SAG-1042",
        "caseName": "Facade Nørregade",
        "customer": "Byg A/S",
        "address": "Nørregade 7, 1165 København",
        "date": "01.05.2024",
        "montoer": "Jens",
    },
    "jobType": "Montage",
    "systems": ["bosta", "haki"],
    "lines": [
        {"lineNumber": 1, "system": "bosta", "itemNumber": "B-100", "name": "Ramme 2,0 m", "unit": "stk", "quantity": 4, "unitPrice": 25},
        {"lineNumber": 2, "system": "haki", "itemNumber": "H-200", "name": "Dæk 0,7 m", "unit": "stk", "quantity": "2", "unitPrice": "15,00"},
        {"lineNumber": 3, "system": "haki", "itemNumber": "H-300", "name": "Ubrugt", "quantity": 0, "unitPrice": 99},
    ],
    "extras": {"km": {"amount": 50}, "slaeb": {"percent": 10}},
    "wage": {
        "workers": [
            {"name": "Jens", "hours": 7.5, "rate": 250},
            {"name": "Ole", "hours": 0},
        ]
    },
}


@pytest.fixture
def exported_at():
    return EXPORTED_AT


@pytest.fixture
def sample_draft():
    """Two priced lines (4 x 25 + 2 x 15 = 130), km 50, 10 % slæb, one worker."""
    return copy.deepcopy(_SAMPLE_DRAFT)


@pytest.fixture
def sample_model(sample_draft):
    from extraction.to_canonical import build_canonical_model

    return build_canonical_model(sample_draft, exported_at=EXPORTED_AT)


@pytest.fixture
def long_model(sample_draft):
    """Enough lines (some with long names) to span several PDF pages."""
    from extraction.to_canonical import build_canonical_model

    lines = []
    for i in range(120):
        name = f"Spindelfod {i}" if i % 3 else f"Stillads rammeelement med rækværk og fodliste, variant {i} lang betegnelse"
        lines.append({"system": "bosta" if i < 60 else "haki", "itemNumber": f"V-{i}", "name": name, "quantity": 1 + i % 4, "unitPrice": 12.5})
    sample_draft["lines"] = lines
    return build_canonical_model(sample_draft, exported_at=EXPORTED_AT)


@pytest.fixture
def legacy_v1_payload():
    """A v1 file: Danish info block, materials array, aggregate wage."""
    return {
        "version": 1,
        "type": "montage",
        "info": {
            "sagsnummer": "V1-77",
            "navn": "Gammel sag",
            "adresse": "Vestergade 3",
            "kunde": "Kunde ApS",
            "dato": "2023-11-02",
            "montoer": "Bo",
        },
        "materials": [
            {"id": "M1", "name": "Ramme", "qty": 3, "price": 20, "system": "bosta"},
            {"id": "M2", "name": "Plank", "qty": "1,5", "unitPrice": 8},
        ],
        "extras": {"km": 30, "slaebePct": 5},
        "wage": {"montageHours": 4, "hourlyRate": 200},
    }
