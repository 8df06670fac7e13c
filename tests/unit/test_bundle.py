"""
Unit tests for writers/bundle.py and writers/engines.py
"""
import io
import json
import logging
import zipfile

import pytest

from config import SCHEMA_VERSION
from config.logging_config import ROOT_LOGGER_NAME
from domain.errors import RenderError
from writers import bundle as bundle_module
from writers import engines
from writers.bundle import compose_bundle


EXPORTED_AT = "2024-05-01T12:00:00+00:00"


def _zip(bundle):
    return zipfile.ZipFile(io.BytesIO(bundle.artifact.payload))


class TestComposeBundle:
    def test_default_layout(self, sample_model):
        bundle = compose_bundle(sample_model, "SAG-1042", exported_at=EXPORTED_AT)
        assert bundle.artifact.file_name == "SAG-1042.zip"
        assert bundle.artifact.content_type == "application/zip"
        assert bundle.manifest == ["pdf/SAG-1042.pdf", "json/SAG-1042.json", "csv/SAG-1042.csv"]
        assert _zip(bundle).namelist() == bundle.manifest
        assert bundle.omitted == {}

    def test_spreadsheet_included_on_request(self, sample_model):
        bundle = compose_bundle(sample_model, "SAG-1042", include_spreadsheet=True, excel_systems=["bosta"])
        assert bundle.manifest[-1] == "excel/SAG-1042.xlsx"
        assert bundle.snapshot["job"]["excelSystems"] == ["bosta"]

    def test_base_name_is_sanitized(self, sample_model):
        bundle = compose_bundle(sample_model, "Sag 12/Hø")
        assert bundle.artifact.file_name == "Sag_12_Ho.zip"
        assert "pdf/Sag_12_Ho.pdf" in bundle.manifest

    def test_json_entry_is_the_snapshot(self, sample_model):
        bundle = compose_bundle(sample_model, "SAG-1042", exported_at=EXPORTED_AT, raw_draft={"tralleState": {"n35": 2}})
        data = json.loads(_zip(bundle).read("json/SAG-1042.json").decode("utf-8"))
        assert data["schemaVersion"] == SCHEMA_VERSION
        assert data["baseName"] == "SAG-1042"
        assert data["exportedAt"] == EXPORTED_AT
        assert data["job"]["tralleState"] == {"n35": 2}
        assert data["job"]["totals"]["akkord"] == pytest.approx(193.0)

    def test_csv_entry_matches_renderer(self, sample_model):
        payload = _zip(compose_bundle(sample_model, "SAG-1042")).read("csv/SAG-1042.csv")
        assert payload.startswith(b"\xef\xbb\xbf")


class TestFailurePolicy:
    @staticmethod
    def _boom(*args, **kwargs):
        raise ValueError("boom")

    def test_csv_failure_is_logged_and_omitted(self, sample_model, monkeypatch, caplog):
        monkeypatch.setattr(bundle_module, "render_csv", self._boom)
        with caplog.at_level(logging.WARNING):
            bundle = compose_bundle(sample_model, "SAG-1042")

        assert bundle.omitted == {"csv": "boom"}
        assert bundle.manifest == ["pdf/SAG-1042.pdf", "json/SAG-1042.json"]
        assert any("csv" in record.getMessage() for record in caplog.records)

    def test_spreadsheet_failure_is_omitted(self, sample_model, monkeypatch):
        monkeypatch.setattr(bundle_module, "render_workbook", self._boom)
        bundle = compose_bundle(sample_model, "SAG-1042", include_spreadsheet=True)
        assert "excel" in bundle.omitted
        assert all(not path.startswith("excel/") for path in bundle.manifest)

    def test_pdf_failure_aborts_with_cause(self, sample_model, monkeypatch):
        monkeypatch.setattr(bundle_module, "render_pdf", self._boom)
        with pytest.raises(RenderError) as excinfo:
            compose_bundle(sample_model, "SAG-1042")
        assert excinfo.value.renderer == "pdf"
        assert isinstance(excinfo.value.cause, ValueError)
        assert excinfo.value.__cause__ is excinfo.value.cause

    def test_json_render_error_passes_through(self, sample_model, monkeypatch):
        def fail(*args, **kwargs):
            raise RenderError("json engine down", renderer="json")

        monkeypatch.setattr(bundle_module, "render_json", fail)
        with pytest.raises(RenderError, match="json engine down"):
            compose_bundle(sample_model, "SAG-1042")


class TestRepeatedExports:
    def test_twenty_compositions_reuse_engines_and_handlers(self, sample_model):
        compose_bundle(sample_model, "warmup", include_spreadsheet=True)
        handlers_before = list(logging.getLogger(ROOT_LOGGER_NAME).handlers)
        loads_before = dict(engines.load_counts)
        pdf_engine = engines.get_pdf_engine()

        archives = [
            compose_bundle(sample_model, f"sag-{i}", include_spreadsheet=True).artifact
            for i in range(20)
        ]

        assert len(archives) == 20
        assert len({a.file_name for a in archives}) == 20
        assert all(zipfile.is_zipfile(io.BytesIO(a.payload)) for a in archives)
        assert logging.getLogger(ROOT_LOGGER_NAME).handlers == handlers_before
        assert engines.load_counts == loads_before
        assert all(count <= 1 for count in engines.load_counts.values())
        assert engines.get_pdf_engine() is pdf_engine


class TestEngines:
    def test_load_failure_raises_render_error(self):
        with pytest.raises(RenderError) as excinfo:
            engines._load("no_such_engine_module_xyz", "pdf")
        assert isinstance(excinfo.value.cause, ImportError)
