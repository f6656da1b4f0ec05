"""The patient -> doctor selection relation.

Single source of truth for who is assigned to whom. Mutations commit under
the exclusive side of the lock; the snapshot write and the roster signal are
issued only after the lock is released, so a woken subscriber always reads
the committed state.
"""

import logging
from collections.abc import Iterable

from careline.errors import DoctorNotFound, PatientNotFound
from careline.models.people import Patient, Selection
from careline.services.directory import Directory
from careline.services.locks import ReadWriteLock
from careline.services.notifications import NotificationHub
from careline.services.persistence import SelectionSink

logger = logging.getLogger(__name__)


class RelationStore:
    def __init__(
        self,
        directory: Directory,
        hub: NotificationHub,
        sink: SelectionSink | None = None,
    ) -> None:
        self._directory = directory
        self._hub = hub
        self._sink = sink
        self._lock = ReadWriteLock()
        self._selections: dict[int, int] = {}

    def load(self, pairs: Iterable[Selection]) -> int:
        """Merge persisted pairs into the map. No persistence or signals."""
        count = 0
        with self._lock.write_locked():
            for pair in pairs:
                if (
                    self._directory.lookup_patient(pair.patient_id) is None
                    or self._directory.lookup_doctor(pair.doctor_id) is None
                ):
                    logger.warning(
                        "Snapshot pair %s -> %s references an unknown id",
                        pair.patient_id, pair.doctor_id,
                    )
                self._selections[pair.patient_id] = pair.doctor_id
                count += 1
        return count

    def select(self, patient_id: int, doctor_id: int) -> None:
        """Assign ``doctor_id`` to ``patient_id``, replacing any prior choice.

        Only the newly selected doctor is signalled; a previously selected
        doctor is not told the patient left.
        """
        if self._directory.lookup_patient(patient_id) is None:
            raise PatientNotFound(patient_id)
        if self._directory.lookup_doctor(doctor_id) is None:
            raise DoctorNotFound(doctor_id)

        with self._lock.write_locked():
            previous = self._selections.get(patient_id)
            self._selections[patient_id] = doctor_id
            snapshot = dict(self._selections)

        logger.info(
            "Patient %s selected doctor %s (previously %s)", patient_id, doctor_id, previous
        )
        if self._sink is not None:
            self._sink.submit(snapshot)
        self._hub.publish(doctor_id)

    def doctor_for(self, patient_id: int) -> int | None:
        with self._lock.read_locked():
            return self._selections.get(patient_id)

    def patients_of(self, doctor_id: int) -> list[Patient]:
        with self._lock.read_locked():
            patient_ids = [pid for pid, did in self._selections.items() if did == doctor_id]
        patients = []
        for pid in sorted(patient_ids):
            patient = self._directory.lookup_patient(pid)
            if patient is not None:
                patients.append(patient)
        return patients

    def snapshot(self) -> dict[int, int]:
        with self._lock.read_locked():
            return dict(self._selections)
