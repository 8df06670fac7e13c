"""
Unit tests for extraction/to_canonical.py - canonical model builder
"""
import pytest

from extraction.to_canonical import build_canonical_model


EXPORTED_AT = "2024-05-01T12:00:00+00:00"


class TestTotals:
    """Override-or-derive totals."""

    def test_reference_example(self, sample_model):
        totals = sample_model["totals"]
        assert totals["materials"] == pytest.approx(130.0)
        assert totals["extrasBreakdown"]["km"] == pytest.approx(50.0)
        assert totals["extrasBreakdown"]["slaeb"] == pytest.approx(13.0)
        assert totals["extras"] == pytest.approx(63.0)
        assert totals["akkord"] == pytest.approx(193.0)
        assert totals["project"] == pytest.approx(193.0)

    def test_materials_equals_sum_of_line_totals(self, long_model):
        total = sum(item["lineTotal"] for item in long_model["items"])
        assert long_model["totals"]["materials"] == pytest.approx(round(total, 2))

    def test_materials_override_does_not_suppress_akkord_derivation(self, sample_draft):
        sample_draft["totals"] = {"materials": 200}
        model = build_canonical_model(sample_draft, exported_at=EXPORTED_AT)
        assert model["totals"]["materials"] == 200
        # slæb follows the resolved materials total
        assert model["totals"]["extrasBreakdown"]["slaeb"] == pytest.approx(20.0)
        assert model["totals"]["akkord"] == pytest.approx(200 + 50 + 20)

    def test_zero_override_is_ignored(self, sample_draft):
        sample_draft["totals"] = {"akkord": 0, "totalAkkord": "0,00"}
        model = build_canonical_model(sample_draft, exported_at=EXPORTED_AT)
        assert model["totals"]["akkord"] == pytest.approx(193.0)

    def test_explicit_akkord_override_is_trusted_even_when_inconsistent(self, sample_draft):
        sample_draft["totals"] = {"totalAkkord": 500}
        model = build_canonical_model(sample_draft, exported_at=EXPORTED_AT)
        derived = model["totals"]["materials"] + model["totals"]["extras"]

        assert model["totals"]["akkord"] == 500
        assert derived == pytest.approx(193.0)
        assert model["totals"]["akkord"] != pytest.approx(derived)
        # breakdown is retained, not recomputed from the override
        assert model["totals"]["extrasBreakdown"]["km"] == pytest.approx(50.0)
        assert model["totals"]["project"] == 500

    def test_project_override(self, sample_draft):
        sample_draft["totals"] = {"projektsum": 250}
        model = build_canonical_model(sample_draft, exported_at=EXPORTED_AT)
        assert model["totals"]["project"] == 250
        assert model["totals"]["akkord"] == pytest.approx(193.0)


class TestItems:
    """Line item resolution."""

    def test_zero_quantity_lines_are_dropped(self, sample_model):
        assert [item["itemNumber"] for item in sample_model["items"]] == ["B-100", "H-200"]

    def test_string_numbers_are_coerced(self, sample_model):
        item = sample_model["items"][1]
        assert item["quantity"] == 2.0
        assert item["unitPrice"] == 15.0
        assert item["lineTotal"] == pytest.approx(30.0)

    def test_explicit_line_total_wins(self):
        model = build_canonical_model(
            {"items": [{"name": "Rabat", "quantity": 2, "unitPrice": 10, "lineTotal": 15}]},
            exported_at=EXPORTED_AT,
        )
        assert model["items"][0]["lineTotal"] == 15
        assert model["totals"]["materials"] == 15

    def test_non_finite_line_total_falls_back(self):
        model = build_canonical_model(
            {"items": [{"name": "X", "quantity": 2, "unitPrice": 10, "lineTotal": "NaN"}]},
            exported_at=EXPORTED_AT,
        )
        assert model["items"][0]["lineTotal"] == 20

    def test_line_numbers_default_to_position(self):
        model = build_canonical_model(
            {"items": [{"name": "A", "quantity": 1}, {"name": "B", "quantity": 1}]},
            exported_at=EXPORTED_AT,
        )
        assert [item["lineNumber"] for item in model["items"]] == [1, 2]

    def test_legacy_arrays_used_when_no_new_style_entries(self):
        draft = {
            "lines": [],
            "materialer": [{"varenr": "7", "navn": "Bræt", "antal": "3", "pris": "2,5", "enhed": "m"}],
        }
        model = build_canonical_model(draft, exported_at=EXPORTED_AT)
        item = model["items"][0]
        assert (item["itemNumber"], item["name"], item["unit"]) == ("7", "Bræt", "m")
        assert item["lineTotal"] == pytest.approx(7.5)

    def test_new_style_arrays_take_precedence(self):
        draft = {
            "lines": [{"name": "Ny", "quantity": 1, "unitPrice": 1}],
            "materials": [{"name": "Gammel", "qty": 1, "unitPrice": 1}],
        }
        model = build_canonical_model(draft, exported_at=EXPORTED_AT)
        assert [item["name"] for item in model["items"]] == ["Ny"]

    def test_item_without_system_stays_unassigned(self):
        draft = {
            "meta": {"system": "bosta"},
            "items": [
                {"name": "A", "quantity": 1, "system": "haki"},
                {"name": "B", "quantity": 1},
            ],
        }
        model = build_canonical_model(draft, exported_at=EXPORTED_AT)
        assert [item["system"] for item in model["items"]] == ["haki", ""]
        assert model["meta"]["system"] == "bosta"

        rebuilt = build_canonical_model(model, exported_at=EXPORTED_AT)
        assert rebuilt["items"] == model["items"]

    def test_materials_projection(self, sample_model):
        assert sample_model["materials"][0] == {
            "id": "B-100",
            "name": "Ramme 2,0 m",
            "qty": 4.0,
            "unitPrice": 25.0,
            "system": "bosta",
        }


class TestMeta:
    """Meta alias resolution and defaults."""

    def test_meta_fields(self, sample_model):
        meta = sample_model["meta"]
        assert meta["caseNumber"] == "SAG-1042"
        assert meta["date"] == "2024-05-01"
        assert meta["jobType"] == "montage"
        assert meta["systems"] == ["bosta", "haki"]
        assert meta["system"] == "bosta"
        assert meta["jobFactor"] == 1.0
        assert meta["exportedAt"] == EXPORTED_AT
        assert meta["version"] == "2.0"
        assert meta["source"] == "cssmate"

    def test_info_mirrors_meta(self, sample_model):
        info = sample_model["info"]
        assert info["sagsnummer"] == "SAG-1042"
        assert info["kunde"] == "Byg A/S"
        assert info["dato"] == "2024-05-01"

    def test_defaults_for_empty_draft(self):
        model = build_canonical_model({}, exported_at=EXPORTED_AT)
        assert model["meta"]["caseNumber"] == "UKENDT"
        assert model["meta"]["jobType"] == "montage"
        assert model["meta"]["date"] == "2024-05-01"
        assert model["items"] == []
        assert model["totals"]["akkord"] == 0

    def test_non_mapping_draft_degrades(self):
        model = build_canonical_model(None, exported_at=EXPORTED_AT)
        assert model["items"] == []

    def test_newest_alias_wins(self):
        draft = {"meta": {"sagsnummer": "OLD", "caseNumber": "NEW"}}
        assert build_canonical_model(draft, exported_at=EXPORTED_AT)["meta"]["caseNumber"] == "NEW"

    def test_info_and_sagsinfo_are_merged(self):
        draft = {"info": {"sagsnummer": "I-1"}, "sagsinfo": {"kunde": "K"}}
        meta = build_canonical_model(draft, exported_at=EXPORTED_AT)["meta"]
        assert meta["caseNumber"] == "I-1"
        assert meta["customer"] == "K"

    def test_systems_from_items_when_not_given(self):
        draft = {"items": [{"name": "A", "quantity": 1, "system": "modex"}]}
        assert build_canonical_model(draft, exported_at=EXPORTED_AT)["meta"]["systems"] == ["modex"]


class TestExtras:
    """Extras normalization inside the builder."""

    def test_legacy_scalar_extras(self):
        draft = {
            "items": [{"name": "A", "quantity": 1, "unitPrice": 100}],
            "extras": {"kmBelob": 21.2, "kmAntal": 10, "slaebePct": 5},
        }
        extras = build_canonical_model(draft, exported_at=EXPORTED_AT)["extras"]
        assert extras["km"]["rate"] == pytest.approx(2.12)
        assert extras["slaeb"]["amount"] == pytest.approx(5.0)

    def test_tralle_from_tralle_state(self):
        draft = {"items": [{"name": "A", "quantity": 1}], "tralleState": {"n35": 2, "n50": 0}}
        tralle = build_canonical_model(draft, exported_at=EXPORTED_AT)["extras"]["tralle"]
        assert tralle["lifts35"] == 2
        assert tralle["amount"] == pytest.approx(20.88)

    def test_extra_work_derived_from_counters(self):
        draft = {"items": [{"name": "A", "quantity": 1}], "extraInputs": {"boringBeton": 2}}
        model = build_canonical_model(draft, exported_at=EXPORTED_AT)
        assert model["extras"]["extraWork"][0]["amount"] == pytest.approx(22.98)
        assert model["extraInputs"] == {"boringBeton": 2}
        assert model["totals"]["extras"] == pytest.approx(22.98)

    def test_explicit_extra_work_list_wins_over_counters(self):
        draft = {
            "items": [{"name": "A", "quantity": 1}],
            "extras": {"extraWork": [{"type": "Special", "amount": 10}]},
            "extraInputs": {"boringBeton": 2},
        }
        work = build_canonical_model(draft, exported_at=EXPORTED_AT)["extras"]["extraWork"]
        assert [e["type"] for e in work] == ["Special"]


class TestWage:
    """Worker normalization."""

    def test_workers_without_hours_or_total_are_dropped(self, sample_model):
        workers = sample_model["wage"]["workers"]
        assert [w["name"] for w in workers] == ["Jens"]
        assert workers[0]["total"] == pytest.approx(1875.0)
        assert sample_model["wage"]["totals"] == {"hours": 7.5, "sum": 1875.0}

    def test_worker_aliases(self):
        draft = {"laborTotals": [{"navn": "Bo", "timer": "2", "hourlyWithAllowances": 300, "rate": 1}, {"beloeb": 100}]}
        workers = build_canonical_model(draft, exported_at=EXPORTED_AT)["wage"]["workers"]
        assert workers[0]["rate"] == 300
        assert workers[0]["total"] == 600
        assert workers[1]["name"] == "Medarbejder 2"
        assert workers[1]["total"] == 100

    def test_aggregate_legacy_wage(self):
        draft = {"info": {"montoer": "Bo"}, "wage": {"montageHours": 4, "hourlyRate": 200}}
        workers = build_canonical_model(draft, exported_at=EXPORTED_AT)["wage"]["workers"]
        assert workers == [
            {
                "id": "worker-1",
                "name": "Bo",
                "hours": 4.0,
                "rate": 200.0,
                "total": 800.0,
                "allowances": {"mentortillaeg": 0.0, "udd": ""},
            }
        ]


class TestIdempotence:
    def test_model_rebuilds_to_itself(self, sample_model):
        rebuilt = build_canonical_model(sample_model, exported_at=EXPORTED_AT)
        assert rebuilt == sample_model
