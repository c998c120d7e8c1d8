"""Seam for the AI summarizer that answers questions about a patient.

The summarizer itself lives outside this package. Anything implementing
``Summarizer`` can be passed to ``ask_about_patient``, which turns every
failure into a result the caller can show; nothing is retried here.
"""

from __future__ import annotations

import logging
from typing import Protocol

from cura.config import ConfigurationError
from cura.models import PatientRecord
from cura.store import PatientRepository

logger = logging.getLogger(__name__)


class SummarizerError(Exception):
    """The summarizer failed to produce an answer."""


class Summarizer(Protocol):
    def summarize(self, patient: PatientRecord, question: str | None = None) -> str:
        """Answer ``question`` about ``patient``, or summarize the chart when None."""
        ...


def ask_about_patient(
    repo: PatientRepository,
    summarizer: Summarizer,
    patient_id: str,
    question: str | None = None,
) -> dict:
    """Ask the summarizer about one patient.

    Returns {"ok": True, "answer": str} on success, otherwise
    {"ok": False, "error": str}. Any failure raised by the summarizer becomes
    the error result. Store load errors are not caught; they propagate like any
    other read.
    """
    patient = repo.get(patient_id)
    if patient is None:
        return {"ok": False, "error": f"Patient {patient_id} not found."}

    try:
        answer = summarizer.summarize(patient, question)
    except (ConfigurationError, SummarizerError) as e:
        logger.warning("Summarizer failed for %s: %s", patient.id, e)
        return {"ok": False, "error": str(e)}
    except Exception as e:
        logger.exception("Unexpected summarizer failure for %s", patient.id)
        return {"ok": False, "error": str(e) or type(e).__name__}

    return {"ok": True, "answer": answer}
