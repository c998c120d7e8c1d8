"""Markdown and prompt formatting for patient records."""

from __future__ import annotations

from cura.models import PatientRecord

PROMPT_OBSERVATIONS = 3

SYSTEM_PROMPT = """\
You are a clinical assistant responding to a licensed physician inside a secure EHR.
Audience: Doctor (assume medical knowledge).
Tone: respectful, collegial, professional; no lay explanations, no fluff, no generic disclaimers.

When a question is present, ANSWER IT FIRST, directly.
Constraints:
- Be concise (≤ 120 words or ≤ 6 bullets).
- Do NOT restate the chart; cite only facts you actually use, e.g., [FHIR:Observation/123].
- If a critical datum is missing, ask at most ONE clarifying question at the end.
- Do not provide medication or place final orders unless the user asked.
- If uncertain, state uncertainty briefly.

If NO question is provided, return:
- A 3-bullet chart summary, then a ≤5-line SOAP draft (concise)."""

TASK_WITH_QUESTION = "Answer the question directly. If a fact from the patient is relevant, cite it once."
TASK_WITHOUT_QUESTION = (
    "No question provided: Return a 3-bullet chart summary and a 5-line SOAP draft (concise)."
)


class MarkdownWriter:
    """Builds markdown output incrementally."""

    def __init__(self):
        self._lines: list[str] = []

    def w(self, line: str = "") -> None:
        self._lines.append(line)

    def heading(self, text: str, level: int = 2) -> None:
        self.w(f"{'#' * level} {text}")
        self.w()

    def bullets(self, items: list[str], empty: str = "(none)") -> None:
        for item in items or [empty]:
            self.w(f"- {item}")
        self.w()

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        self.w("| " + " | ".join(headers) + " |")
        self.w("|" + "|".join("---" for _ in headers) + "|")
        for row in rows:
            self.w("| " + " | ".join(str(c) for c in row) + " |")
        self.w()

    def text(self) -> str:
        return "\n".join(self._lines)


def format_patient(patient: PatientRecord) -> str:
    """Render one patient's chart as markdown."""
    md = MarkdownWriter()
    md.heading(patient.full_name, level=1)
    md.w(f"*ID:* `{patient.id}`  ")
    md.w(f"*Gender:* {patient.gender}  ")
    md.w(f"*DOB:* {patient.birth_date:%Y-%m-%d} (age {patient.age()})")
    md.w()

    md.heading("Problems")
    md.bullets([c.name for c in patient.conditions])

    md.heading("Medications")
    md.bullets([m.name for m in patient.medications])

    md.heading("Recent Observations")
    if patient.observations:
        md.table(
            ["Date", "Code", "Value", "Ref"],
            [
                [f"{o.date:%Y-%m-%d}", o.code, o.value, o.ref_id]
                for o in patient.observations
            ],
        )
    else:
        md.w("(none)")
        md.w()

    md.heading("Last Note")
    md.w(patient.last_note)
    return md.text()


def build_patient_prompt(patient: PatientRecord, question: str | None = None) -> tuple[str, str]:
    """Return the (system, user) prompt pair for summarizing ``patient``.

    The user prompt carries the compact chart context: demographics, problems,
    medications, the latest observations with their reference ids, and the
    last note.
    """
    has_question = bool(question and question.strip())
    recent = sorted(patient.observations, key=lambda o: o.date, reverse=True)[:PROMPT_OBSERVATIONS]

    lines = [
        f"Patient: {patient.full_name} (ID={patient.id})",
        f"Gender: {patient.gender}, DOB: {patient.birth_date:%Y-%m-%d}",
        f"Problems: {', '.join(c.name for c in patient.conditions)}",
        f"Medications: {', '.join(m.name for m in patient.medications)}",
        f"Recent Observations (latest up to {PROMPT_OBSERVATIONS}):",
    ]
    lines += [f"- {o.code}: {o.value} on {o.date:%Y-%m-%d} [{o.ref_id}]" for o in recent]
    lines += [
        f"Last note: {patient.last_note}",
        "",
        f"Task: {TASK_WITH_QUESTION if has_question else TASK_WITHOUT_QUESTION}",
        f"Question: {question.strip() if has_question else '(none)'}",
    ]
    return SYSTEM_PROMPT, "\n".join(lines)
