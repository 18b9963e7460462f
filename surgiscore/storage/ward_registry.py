"""
Ward registry: admission and discharge tracking over record stores.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, List, Optional

from surgiscore.core.decision.discharge_planning import (
    admission_status_after_discharge,
    compute_admission_statistics,
)
from surgiscore.core.exceptions import StorageError
from surgiscore.core.models import (
    Admission,
    AdmissionStatistics,
    AdmissionStatus,
    Discharge,
    WHODischargeScore,
)
from surgiscore.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


class WardRegistry:
    """
    Admissions, discharges and their WHO readiness scores for one unit.

    The registry does no scoring itself; callers score with the discharge
    primitives and hand the results in.
    """

    def __init__(
        self,
        admissions: RecordStore[Admission],
        discharges: RecordStore[Discharge],
        who_scores: Optional[RecordStore[WHODischargeScore]] = None,
    ):
        self.admissions = admissions
        self.discharges = discharges
        self.who_scores = who_scores

    @classmethod
    def from_directory(cls, root: Path) -> "WardRegistry":
        """Build a registry with one collection file per record type under root."""
        root = Path(root)
        return cls(
            admissions=RecordStore(root, "admissions", Admission),
            discharges=RecordStore(root, "discharges", Discharge),
            who_scores=RecordStore(root, "who_discharge_scores", WHODischargeScore),
        )

    # -------------------------------------------------------------- admissions

    def create_admission(self, admission: Admission, now: Optional[datetime] = None) -> Admission:
        now = now or datetime.now()
        stored = self.admissions.add(
            admission.model_copy(update={"created_at": now, "updated_at": now})
        )
        logger.info(f"Admitted {stored.patient_name} to {stored.ward_location} ({stored.id})")
        return stored

    def get_admission(self, admission_id: str) -> Optional[Admission]:
        return self.admissions.get(admission_id)

    def active_admissions(self) -> List[Admission]:
        """Active admissions, most recent admission date first."""
        return self.admissions.sorted(
            key=lambda a: a.admission_date,
            reverse=True,
            predicate=lambda a: a.status == AdmissionStatus.ACTIVE,
        )

    def patient_admissions(self, patient_id: int) -> List[Admission]:
        return self.admissions.sorted(
            key=lambda a: a.admission_date,
            reverse=True,
            predicate=lambda a: a.patient_id == patient_id,
        )

    def admissions_by_ward(self, ward_location: str) -> List[Admission]:
        return [a for a in self.active_admissions() if a.ward_location == ward_location]

    def update_admission(self, admission_id: str, now: Optional[datetime] = None, **changes: Any) -> Admission:
        return self.admissions.update(admission_id, **changes, updated_at=now or datetime.now())

    # -------------------------------------------------------------- discharges

    def create_discharge(self, discharge: Discharge, now: Optional[datetime] = None) -> Discharge:
        """
        Record a discharge and close the linked admission.

        The admission's status follows the discharge type (deceased,
        transferred, otherwise discharged) and takes the discharge date.

        Raises:
            StorageError: If the discharge names an admission that is not on record
        """
        now = now or datetime.now()
        if discharge.admission_id is not None and self.admissions.get(discharge.admission_id) is None:
            raise StorageError(
                f"Admission {discharge.admission_id} not found",
                collection=self.admissions.collection,
                details={"id": discharge.admission_id},
            )

        stored = self.discharges.add(discharge.model_copy(update={"created_at": now}))
        if stored.admission_id is not None:
            try:
                self.update_admission(
                    stored.admission_id,
                    now=now,
                    status=admission_status_after_discharge(stored.discharge_type),
                    discharge_date=stored.discharge_date,
                )
            except StorageError:
                # A discharge is only kept once its admission is closed
                logger.error(f"Closing admission {stored.admission_id} failed; removing discharge {stored.id}")
                self.discharges.delete(stored.id)
                raise
        logger.info(f"Discharged {stored.patient_name} ({stored.discharge_type.value})")
        return stored

    def get_discharge(self, discharge_id: str) -> Optional[Discharge]:
        return self.discharges.get(discharge_id)

    def all_discharges(self) -> List[Discharge]:
        return self.discharges.sorted(key=lambda d: d.discharge_date, reverse=True)

    def patient_discharges(self, patient_id: int) -> List[Discharge]:
        return self.discharges.sorted(
            key=lambda d: d.discharge_date,
            reverse=True,
            predicate=lambda d: d.patient_id == patient_id,
        )

    # -------------------------------------------------------------- WHO scores

    def _require_who_store(self) -> RecordStore[WHODischargeScore]:
        if self.who_scores is None:
            raise StorageError("Registry has no WHO score store", collection="who_discharge_scores")
        return self.who_scores

    def save_who_score(self, score: WHODischargeScore) -> WHODischargeScore:
        return self._require_who_store().add(score)

    def get_who_score(self, admission_id: str) -> Optional[WHODischargeScore]:
        """Latest WHO discharge score recorded against an admission."""
        scores = self._require_who_store().sorted(
            key=lambda s: s.assessment_date or date.min,
            reverse=True,
            predicate=lambda s: s.admission_id == admission_id,
        )
        return scores[0] if scores else None

    # -------------------------------------------------------------- statistics

    def statistics(self, today: Optional[date] = None) -> AdmissionStatistics:
        return compute_admission_statistics(self.admissions.all(), self.discharges.all(), today=today)
