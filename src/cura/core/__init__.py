"""Core FHIR decoding, extraction and bundle assembly."""

from cura.core.bundle import assemble_patient, iter_resources, summarize_bundle
from cura.core.extractors import (
    concept_text,
    extract,
    extract_condition,
    extract_demographics,
    extract_medication,
    extract_note,
    extract_observation,
)
from cura.core.resources import decode_resource
from cura.core.utils import parse_fhir_date, parse_fhir_datetime, strip_tags
