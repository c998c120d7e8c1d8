"""Patient store: a lazily loaded, read-mostly cache of PatientRecords.

PatientStore scans its bundle folder once, on the first read, and serves
every later read from an immutable snapshot. Concurrent first readers block
on a lock while a single thread performs the load.
"""

from __future__ import annotations

import enum
import logging
import threading
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Protocol

from cura.core.bundle import assemble_patient
from cura.models import Condition, Medication, Observation, PatientRecord
from cura.sources.base import BundleScanner, SourceConfig, scan_bundles

logger = logging.getLogger(__name__)


class PatientRepository(Protocol):
    """Read-only access to normalized patient records."""

    def get_all(self) -> list[PatientRecord]:
        ...

    def get(self, patient_id: str) -> PatientRecord | None:
        ...


class LoadState(enum.Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


def _key(patient_id: str) -> str:
    return patient_id.casefold()


def _index(records: Iterable[PatientRecord]) -> dict[str, PatientRecord]:
    """Key records by case-insensitive id; later records replace earlier ones."""
    index: dict[str, PatientRecord] = {}
    for rec in records:
        index[_key(rec.id)] = rec
    return index


class PatientStore:
    """Bundle-folder backed PatientRepository.

    The first call to ``get_all`` or ``get`` loads every bundle under
    ``config.folder``. A failure during that load propagates to the caller and
    leaves the store unloaded, so the next call scans again from scratch.

    Usage:
        store = PatientStore(SourceConfig(folder="data/fhir_bundles"))
        for patient in store.get_all():
            ...
    """

    def __init__(
        self,
        config: SourceConfig,
        scanner: BundleScanner = scan_bundles,
        assembler: Callable[..., PatientRecord | None] = assemble_patient,
    ):
        self.config = config
        self._scanner = scanner
        self._assembler = assembler
        self._lock = threading.Lock()
        self._state = LoadState.UNLOADED
        self._patients: dict[str, PatientRecord] = {}

    @property
    def state(self) -> LoadState:
        return self._state

    def get_all(self) -> list[PatientRecord]:
        """All patients ordered by full name."""
        self._ensure_loaded()
        return sorted(self._patients.values(), key=lambda p: p.full_name)

    def get(self, patient_id: str) -> PatientRecord | None:
        """Case-insensitive lookup by patient id."""
        self._ensure_loaded()
        return self._patients.get(_key(patient_id))

    def _ensure_loaded(self) -> None:
        if self._state is LoadState.LOADED:
            return
        with self._lock:
            if self._state is LoadState.LOADED:
                return
            self._state = LoadState.LOADING
            try:
                patients = self._load_all()
            except BaseException:
                self._state = LoadState.UNLOADED
                raise
            # Publish the finished map before flipping the flag; readers that
            # skip the lock only ever see a complete snapshot.
            self._patients = patients
            self._state = LoadState.LOADED

    def _load_all(self) -> dict[str, PatientRecord]:
        now = datetime.now(timezone.utc)
        files = 0
        records = []
        for doc in self._scanner(self.config):
            files += 1
            rec = self._assembler(doc.data, now=now)
            if rec is None:
                logger.debug("No Patient resource in %s", doc.path)
                continue
            records.append(rec)

        patients = _index(records)
        logger.info(
            "Loaded %d patient(s) from %d bundle file(s) in %s",
            len(patients), files, self.config.folder,
        )
        return patients


class InMemoryPatientStore:
    """A fixed PatientRepository built from ready-made records."""

    def __init__(self, records: Iterable[PatientRecord]):
        self._patients = _index(records)

    def get_all(self) -> list[PatientRecord]:
        return sorted(self._patients.values(), key=lambda p: p.full_name)

    def get(self, patient_id: str) -> PatientRecord | None:
        return self._patients.get(_key(patient_id))


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def sample_patients() -> list[PatientRecord]:
    """Two demo patients for running without a bundle folder."""
    return [
        PatientRecord(
            id="patient-001",
            full_name="John Doe",
            gender="male",
            birth_date=date(1980, 5, 14),
            conditions=(Condition("Type 2 Diabetes"), Condition("Hypertension")),
            medications=(Medication("Metformin 500mg daily"), Medication("Lisinopril 10mg daily")),
            observations=(
                Observation("BP", "150/95 mmHg", _utc(2025, 8, 15), "FHIR:Observation/456"),
                Observation("HbA1c", "8.2 %", _utc(2025, 8, 1), "FHIR:Observation/123"),
            ),
            last_note="Patient reports fatigue and poor diet control.",
        ),
        PatientRecord(
            id="patient-002",
            full_name="Sara Ahmed",
            gender="female",
            birth_date=date(1992, 11, 3),
            conditions=(Condition("Hypothyroidism"),),
            medications=(Medication("Levothyroxine 50mcg daily"),),
            observations=(
                Observation("BP", "118/72 mmHg", _utc(2025, 8, 12), "FHIR:Observation/790"),
                Observation("TSH", "6.1 mIU/L", _utc(2025, 7, 20), "FHIR:Observation/789"),
            ),
            last_note="Follow-up for thyroid dose adjustment.",
        ),
    ]
