"""Typed decoding of raw FHIR resource dicts.

``decode_resource`` is the only place that probes raw JSON. It turns one
resource into a variant of the closed ``Resource`` union, carrying just the
fields the extractors read. Missing or wrongly-shaped optional fields decode
to None or empty tuples; decoding never raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Union

NOTE_TYPES = ("DocumentReference", "DiagnosticReport")


@dataclass(frozen=True)
class Coding:
    display: str | None = None
    code: str | None = None


@dataclass(frozen=True)
class CodeableConcept:
    text: str | None = None
    codings: tuple[Coding, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Quantity:
    value: int | float | Decimal | str | None = None
    unit: str | None = None


@dataclass(frozen=True)
class HumanName:
    given: tuple[str, ...] = field(default_factory=tuple)
    family: str | None = None


@dataclass(frozen=True)
class PatientResource:
    id: str | None = None
    names: tuple[HumanName, ...] = field(default_factory=tuple)
    gender: str | None = None
    birth_date: str | None = None


@dataclass(frozen=True)
class ConditionResource:
    id: str | None = None
    code: CodeableConcept | None = None


@dataclass(frozen=True)
class MedicationRequestResource:
    id: str | None = None
    medication: CodeableConcept | None = None  # medicationCodeableConcept


@dataclass(frozen=True)
class ObservationResource:
    id: str | None = None
    code: CodeableConcept | None = None
    value_quantity: Quantity | None = None
    value_string: str | None = None
    value_concept: CodeableConcept | None = None
    effective: str | None = None  # effectiveDateTime


@dataclass(frozen=True)
class NoteResource:
    """DocumentReference or DiagnosticReport narrative."""

    kind: str
    id: str | None = None
    div: str | None = None  # text.div


@dataclass(frozen=True)
class UnknownResource:
    resource_type: str | None = None


Resource = Union[
    PatientResource,
    ConditionResource,
    MedicationRequestResource,
    ObservationResource,
    NoteResource,
    UnknownResource,
]


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _obj(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _decode_concept(raw: Any) -> CodeableConcept | None:
    raw = _obj(raw)
    if raw is None:
        return None
    codings = tuple(
        Coding(display=_str(c.get("display")), code=_str(c.get("code")))
        if isinstance(c, dict)
        else Coding()
        for c in _list(raw.get("coding"))
    )
    return CodeableConcept(text=_str(raw.get("text")), codings=codings)


def _decode_quantity(raw: Any) -> Quantity | None:
    raw = _obj(raw)
    if raw is None:
        return None
    value = raw.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        value = None
    return Quantity(value=value, unit=_str(raw.get("unit")))


def _decode_name(raw: dict) -> HumanName:
    given = tuple(g for g in _list(raw.get("given")) if isinstance(g, str))
    return HumanName(given=given, family=_str(raw.get("family")))


def decode_resource(raw: Any) -> Resource:
    """Decode one raw resource dict into its typed variant."""
    res = _obj(raw)
    if res is None:
        return UnknownResource()

    rtype = _str(res.get("resourceType"))
    rid = _str(res.get("id"))

    if rtype == "Patient":
        return PatientResource(
            id=rid,
            names=tuple(
                _decode_name(n) if isinstance(n, dict) else HumanName()
                for n in _list(res.get("name"))
            ),
            gender=_str(res.get("gender")),
            birth_date=_str(res.get("birthDate")),
        )
    if rtype == "Condition":
        return ConditionResource(id=rid, code=_decode_concept(res.get("code")))
    if rtype == "MedicationRequest":
        return MedicationRequestResource(
            id=rid, medication=_decode_concept(res.get("medicationCodeableConcept"))
        )
    if rtype == "Observation":
        return ObservationResource(
            id=rid,
            code=_decode_concept(res.get("code")),
            value_quantity=_decode_quantity(res.get("valueQuantity")),
            value_string=_str(res.get("valueString")),
            value_concept=_decode_concept(res.get("valueCodeableConcept")),
            effective=_str(res.get("effectiveDateTime")),
        )
    if rtype in NOTE_TYPES:
        text = _obj(res.get("text")) or {}
        return NoteResource(kind=rtype, id=rid, div=_str(text.get("div")))

    return UnknownResource(resource_type=rtype)
