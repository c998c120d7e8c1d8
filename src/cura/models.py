"""Normalized patient data model.

A PatientRecord is assembled once per bundle and handed to the store. All
dataclasses are frozen and collections are tuples, so a record cannot be
changed after it has been inserted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

DEFAULT_BIRTH_DATE = date(1980, 1, 1)
UNKNOWN_GENDER = "unknown"
NO_NOTE = "—"
MAX_OBSERVATIONS = 8
UNKNOWN_REF = "FHIR:Observation/unknown"


@dataclass(frozen=True)
class Condition:
    """A problem-list entry."""

    name: str


@dataclass(frozen=True)
class Medication:
    """A prescribed medication."""

    name: str


@dataclass(frozen=True)
class Observation:
    """A single observation (lab, vital, etc.)."""

    code: str
    value: str  # display text, unit-suffixed for quantities
    date: datetime  # UTC; "now" when the source had no usable date
    ref_id: str = UNKNOWN_REF  # FHIR:Observation/<id>

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "value": self.value,
            "date": self.date.isoformat(),
            "ref_id": self.ref_id,
        }


@dataclass(frozen=True)
class Demographics:
    """Fragment extracted from a Patient resource."""

    id: str
    full_name: str
    gender: str = UNKNOWN_GENDER
    birth_date: date = DEFAULT_BIRTH_DATE


@dataclass(frozen=True)
class PatientRecord:
    """The normalized aggregate for one patient."""

    id: str
    full_name: str
    gender: str = UNKNOWN_GENDER
    birth_date: date = DEFAULT_BIRTH_DATE
    conditions: tuple[Condition, ...] = field(default_factory=tuple)
    medications: tuple[Medication, ...] = field(default_factory=tuple)
    observations: tuple[Observation, ...] = field(default_factory=tuple)  # newest first, <= 8
    last_note: str = NO_NOTE

    def age(self, today: date | None = None) -> int:
        """Age in whole years as of ``today`` (defaults to the current date)."""
        today = today or date.today()
        years = today.year - self.birth_date.year
        if (today.month, today.day) < (self.birth_date.month, self.birth_date.day):
            years -= 1
        return years

    def to_dict(self) -> dict:
        """JSON-friendly view with ISO date strings."""
        return {
            "id": self.id,
            "full_name": self.full_name,
            "gender": self.gender,
            "birth_date": self.birth_date.isoformat(),
            "conditions": [c.name for c in self.conditions],
            "medications": [m.name for m in self.medications],
            "observations": [o.to_dict() for o in self.observations],
            "last_note": self.last_note,
        }
