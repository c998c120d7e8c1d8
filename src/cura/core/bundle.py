"""Bundle assembler: one parsed FHIR Bundle in, at most one PatientRecord out."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Any

from cura.core.extractors import extract
from cura.core.resources import decode_resource
from cura.models import (
    MAX_OBSERVATIONS,
    NO_NOTE,
    Condition,
    Demographics,
    Medication,
    Observation,
    PatientRecord,
)


def iter_resources(bundle: Any):
    """Yield the raw resource dict of each bundle entry.

    A root without an ``entry`` list is an empty bundle. Entries lacking a
    ``resource`` object are skipped.
    """
    if not isinstance(bundle, dict):
        return
    entries = bundle.get("entry")
    if not isinstance(entries, list):
        return
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        res = entry.get("resource")
        if isinstance(res, dict):
            yield res


def assemble_patient(bundle: Any, now: datetime | None = None) -> PatientRecord | None:
    """Assemble the PatientRecord described by a parsed bundle.

    Returns None when the bundle has no Patient resource. When several
    Patient resources are present, the last one wins. Only the first
    non-empty DocumentReference/DiagnosticReport narrative becomes the
    record's last note.
    """
    now = now or datetime.now(timezone.utc)

    demographics = None
    conditions = []
    medications = []
    observations = []
    note = ""

    for raw in iter_resources(bundle):
        fragment = extract(decode_resource(raw), now=now)

        if isinstance(fragment, Demographics):
            demographics = fragment
        elif isinstance(fragment, Condition):
            conditions.append(fragment)
        elif isinstance(fragment, Medication):
            medications.append(fragment)
        elif isinstance(fragment, Observation):
            observations.append(fragment)
        elif isinstance(fragment, str) and not note:
            note = fragment

    if demographics is None:
        return None

    # sorted() is stable, so equal dates keep bundle order
    observations = sorted(observations, key=lambda o: o.date, reverse=True)[:MAX_OBSERVATIONS]

    return PatientRecord(
        id=demographics.id,
        full_name=demographics.full_name,
        gender=demographics.gender,
        birth_date=demographics.birth_date,
        conditions=tuple(conditions),
        medications=tuple(medications),
        observations=tuple(observations),
        last_note=note or NO_NOTE,
    )


def summarize_bundle(bundle: Any) -> dict[str, int]:
    """Count resources per declared resourceType ("Unknown" when missing)."""
    counts: Counter[str] = Counter()
    for res in iter_resources(bundle):
        rtype = res.get("resourceType")
        counts[rtype if isinstance(rtype, str) and rtype else "Unknown"] += 1
    return dict(counts)
