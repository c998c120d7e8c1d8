"""MCP server for cura — read-only patient tools over the bundle store.

Run with: python -m cura serve-mcp
Configure env: CURA_DATA_DIR=/path/to/fhir_bundles (or a cura.toml)
"""

from __future__ import annotations

import os

from mcp.server.fastmcp import FastMCP

from cura.config import load_config
from cura.formatters.markdown import build_patient_prompt
from cura.store import PatientRepository, PatientStore

CONFIG_PATH = os.environ.get("CURA_CONFIG", "cura.toml")

mcp = FastMCP(
    "cura",
    instructions=(
        "Normalized patient charts built from FHIR bundles.\n\n"
        "Key capabilities:\n"
        "- list_patients: Every patient with id, name, gender and birth date\n"
        "- get_patient: Full chart (problems, medications, latest observations, last note)\n"
        "- get_patient_context: Clinician prompt and chart context for summarizing a patient\n\n"
        "Start with list_patients to find ids. Ids are case-insensitive. "
        "Cite observations by their ref_id, e.g. [FHIR:Observation/123]."
    ),
)

_store: PatientRepository | None = None


def configure(store: PatientRepository) -> None:
    """Serve patients from ``store`` instead of the configured bundle folder."""
    global _store
    _store = store


def _get_store() -> PatientRepository:
    global _store
    if _store is None:
        _store = PatientStore(load_config(CONFIG_PATH).source)
    return _store


@mcp.tool()
def list_patients() -> list[dict]:
    """List all patients ordered by name.

    Returns id, full_name, gender and birth_date (YYYY-MM-DD) per patient.
    """
    return [
        {
            "id": p.id,
            "full_name": p.full_name,
            "gender": p.gender,
            "birth_date": p.birth_date.isoformat(),
        }
        for p in _get_store().get_all()
    ]


@mcp.tool()
def get_patient(patient_id: str) -> dict | str:
    """Get one patient's normalized chart by id (case-insensitive).

    Observations are newest first, at most 8, each with a ref_id for citation.
    """
    patient = _get_store().get(patient_id)
    if patient is None:
        return f"Error: Patient {patient_id} not found."
    return patient.to_dict()


@mcp.tool()
def get_patient_context(patient_id: str, question: str = "") -> dict | str:
    """Get the system and user prompts used to summarize a patient.

    Pass a question to get the question-answering variant; leave it empty
    for a chart summary and SOAP draft.
    """
    patient = _get_store().get(patient_id)
    if patient is None:
        return f"Error: Patient {patient_id} not found."
    system, user = build_patient_prompt(patient, question or None)
    return {"system": system, "user": user}


if __name__ == "__main__":
    mcp.run()
