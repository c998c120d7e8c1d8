"""Tests for cura.mcp.server tools.

Tests the tool functions directly (not via MCP protocol).
"""

import pytest

from cura.sources.base import SourceConfig
from cura.store import InMemoryPatientStore, PatientStore, sample_patients

from conftest import bundle, observation_resource, patient_resource


@pytest.fixture
def srv(monkeypatch):
    import cura.mcp.server as server

    monkeypatch.setattr(server, "_store", InMemoryPatientStore(sample_patients()))
    yield server


class TestListPatients:
    def test_lists_sorted(self, srv):
        rows = srv.list_patients()
        assert [r["full_name"] for r in rows] == ["John Doe", "Sara Ahmed"]
        assert rows[0] == {
            "id": "patient-001",
            "full_name": "John Doe",
            "gender": "male",
            "birth_date": "1980-05-14",
        }


class TestGetPatient:
    def test_found_case_insensitive(self, srv):
        chart = srv.get_patient("PATIENT-002")
        assert chart["full_name"] == "Sara Ahmed"
        assert chart["conditions"] == ["Hypothyroidism"]
        assert chart["observations"][0]["ref_id"] == "FHIR:Observation/790"
        assert chart["observations"][0]["date"].startswith("2025-08-12")

    def test_not_found(self, srv):
        assert srv.get_patient("nobody").startswith("Error:")


class TestGetPatientContext:
    def test_summary_variant(self, srv):
        ctx = srv.get_patient_context("patient-001")
        assert "clinical assistant" in ctx["system"]
        assert "Question: (none)" in ctx["user"]

    def test_question_variant(self, srv):
        ctx = srv.get_patient_context("patient-001", question="Why is BP high?")
        assert "Question: Why is BP high?" in ctx["user"]

    def test_not_found(self, srv):
        assert srv.get_patient_context("nobody").startswith("Error:")


class TestConfigure:
    def test_bundle_backed_store(self, monkeypatch, bundle_dir, write_bundle):
        import cura.mcp.server as server

        write_bundle("p.json", bundle(
            patient_resource(pid="abc", given=("Lee",), family="Park"),
            observation_resource("9", "Hgb", value=13.1, unit="g/dL", date="2025-02-01"),
        ))
        monkeypatch.setattr(server, "_store", None)
        server.configure(PatientStore(SourceConfig(folder=str(bundle_dir))))

        chart = server.get_patient("ABC")
        assert chart["full_name"] == "Lee Park"
        assert chart["observations"][0]["value"] == "13.1 g/dL"
