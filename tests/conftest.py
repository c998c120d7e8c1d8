"""Shared test fixtures for cura tests."""

import json

import pytest


def patient_resource(pid="patient-001", given=("John",), family="Doe", gender="male",
                     birth_date="1975-06-15"):
    res = {"resourceType": "Patient", "id": pid}
    if given is not None or family is not None:
        name = {}
        if given is not None:
            name["given"] = list(given)
        if family is not None:
            name["family"] = family
        res["name"] = [name]
    if gender is not None:
        res["gender"] = gender
    if birth_date is not None:
        res["birthDate"] = birth_date
    return res


def observation_resource(oid, text, value=None, unit=None, value_string=None, date=None):
    res = {"resourceType": "Observation", "id": oid, "code": {"text": text}}
    if value is not None:
        res["valueQuantity"] = {"value": value}
        if unit is not None:
            res["valueQuantity"]["unit"] = unit
    if value_string is not None:
        res["valueString"] = value_string
    if date is not None:
        res["effectiveDateTime"] = date
    return res


def note_resource(div, rtype="DocumentReference"):
    return {"resourceType": rtype, "text": {"status": "generated", "div": div}}


def bundle(*resources):
    return {"resourceType": "Bundle", "type": "collection",
            "entry": [{"resource": r} for r in resources]}


@pytest.fixture
def sample_bundle():
    """A realistic bundle for one patient."""
    return bundle(
        patient_resource(),
        {"resourceType": "Condition", "code": {"text": "Type 2 Diabetes"}},
        {"resourceType": "Condition",
         "code": {"coding": [{"system": "http://snomed.info/sct", "code": "38341003",
                              "display": "Hypertension"}]}},
        {"resourceType": "MedicationRequest",
         "medicationCodeableConcept": {"text": "Metformin 500mg daily"}},
        observation_resource("123", "HbA1c", value=8.2, unit="%", date="2025-08-01"),
        observation_resource("456", "BP", value_string="150/95 mmHg", date="2025-08-15T09:30:00Z"),
        note_resource("<div xmlns=\"http://www.w3.org/1999/xhtml\">Patient reports fatigue.</div>"),
        {"resourceType": "Encounter", "id": "enc-1"},
    )


@pytest.fixture
def bundle_dir(tmp_path):
    """Empty folder for bundle files."""
    d = tmp_path / "bundles"
    d.mkdir()
    return d


@pytest.fixture
def write_bundle(bundle_dir):
    """Write a bundle dict as JSON under the bundle folder; returns the path."""

    def _write(name, data):
        path = bundle_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return _write
