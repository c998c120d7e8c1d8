"""Resource extractors: one decoded resource in, one fragment (or None) out.

Extractors are pure. A missing optional field is never an error; it resolves
through the documented defaults or makes the extractor return None.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Union

from cura.core.resources import (
    CodeableConcept,
    ConditionResource,
    MedicationRequestResource,
    NoteResource,
    ObservationResource,
    PatientResource,
    Quantity,
    Resource,
)
from cura.core.utils import is_blank, parse_fhir_date, parse_fhir_datetime, strip_tags
from cura.models import (
    DEFAULT_BIRTH_DATE,
    UNKNOWN_GENDER,
    UNKNOWN_REF,
    Condition,
    Demographics,
    Medication,
    Observation,
)


def concept_text(concept: CodeableConcept | None) -> str | None:
    """Resolve a CodeableConcept to display text.

    Priority: ``text``, then ``coding[0].display``, then ``coding[0].code``.
    Blank strings are skipped at every step. Returns None when nothing usable
    is present.
    """
    if concept is None:
        return None
    if not is_blank(concept.text):
        return concept.text
    if concept.codings:
        first = concept.codings[0]
        if not is_blank(first.display):
            return first.display
        if not is_blank(first.code):
            return first.code
    return None


def extract_demographics(res: PatientResource) -> Demographics:
    rid = res.id or uuid.uuid4().hex

    full_name = ""
    if res.names:
        name = res.names[0]
        full_name = f"{' '.join(name.given)} {name.family or ''}".strip()

    gender = UNKNOWN_GENDER if is_blank(res.gender) else res.gender.strip().lower()
    birth_date = parse_fhir_date(res.birth_date) or DEFAULT_BIRTH_DATE

    return Demographics(
        id=rid,
        full_name=full_name or rid,
        gender=gender,
        birth_date=birth_date,
    )


def extract_condition(res: ConditionResource) -> Condition | None:
    name = concept_text(res.code)
    return Condition(name) if name is not None else None


def extract_medication(res: MedicationRequestResource) -> Medication | None:
    name = concept_text(res.medication)
    return Medication(name) if name is not None else None


def format_quantity(q: Quantity) -> str:
    """Render a Quantity as ``"<value> <unit>"``.

    A blank unit renders the value alone. A missing value still keeps the
    separator, so a unit-only quantity renders as ``" <unit>"``.
    """
    value = "" if q.value is None else str(q.value)
    unit = (q.unit or "").strip()
    if not unit:
        return value
    return f"{value} {unit}"


def observation_value(res: ObservationResource) -> str | None:
    """Resolve an Observation value.

    valueQuantity wins over valueString, which wins over valueCodeableConcept.
    """
    if res.value_quantity is not None:
        return format_quantity(res.value_quantity)
    if res.value_string is not None:
        return res.value_string
    if res.value_concept is not None:
        return concept_text(res.value_concept) or ""
    return None


def extract_observation(res: ObservationResource, now: datetime | None = None) -> Observation | None:
    """Map an Observation; None unless both code and value are non-blank.

    A missing or unparseable effectiveDateTime becomes ``now`` (UTC), so
    undated observations sort as the most recent.
    """
    code = concept_text(res.code)
    value = observation_value(res)
    if is_blank(code) or is_blank(value):
        return None

    date = parse_fhir_datetime(res.effective)
    if date is None:
        date = now or datetime.now(timezone.utc)

    ref_id = f"FHIR:Observation/{res.id}" if res.id else UNKNOWN_REF
    return Observation(code=code, value=value, date=date, ref_id=ref_id)


def extract_note(res: NoteResource) -> str | None:
    """Plain text of the resource narrative, or None when empty."""
    text = strip_tags(res.div or "")
    return text or None


Fragment = Union[Demographics, Condition, Medication, Observation, str]


def extract(res: Resource, now: datetime | None = None) -> Fragment | None:
    """Run the extractor matching a decoded resource.

    Patients yield Demographics, notes yield their plain text, and the other
    clinical kinds yield their model value. Unknown resources yield None.
    """
    if isinstance(res, PatientResource):
        return extract_demographics(res)
    if isinstance(res, ConditionResource):
        return extract_condition(res)
    if isinstance(res, MedicationRequestResource):
        return extract_medication(res)
    if isinstance(res, ObservationResource):
        return extract_observation(res, now=now)
    if isinstance(res, NoteResource):
        return extract_note(res)
    return None
