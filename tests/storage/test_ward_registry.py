#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Tests for the ward registry
"""

import tempfile
import unittest
from datetime import date, datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from surgiscore.core.exceptions import StorageError
from surgiscore.core.models import (
    Admission,
    AdmissionRoute,
    AdmissionStatus,
    Discharge,
    DischargeType,
    WHODischargeAssessment,
)
from surgiscore.core.scoring.discharge import calculate_who_discharge_score
from surgiscore.storage.record_store import RecordStore
from surgiscore.storage.ward_registry import WardRegistry

NOW = datetime(2024, 8, 14, 10, 0)


def admission(patient_id=1, admitted=date(2024, 8, 1), ward='Male Surgical'):
    return Admission(
        patient_id=patient_id,
        patient_name='Tunde Bakare',
        hospital_number=f"H-{patient_id}",
        admission_date=admitted,
        ward_location=ward,
        route_of_admission=AdmissionRoute.EMERGENCY,
    )


def discharge(admission_record, discharge_type=DischargeType.NORMAL, discharged=date(2024, 8, 10)):
    return Discharge(
        admission_id=admission_record.id,
        patient_id=admission_record.patient_id,
        patient_name=admission_record.patient_name,
        hospital_number=admission_record.hospital_number,
        admission_date=admission_record.admission_date,
        discharge_date=discharged,
        length_of_stay_days=(discharged - admission_record.admission_date).days,
        admitting_diagnosis='Perforated appendix',
        final_diagnosis='Perforated appendix',
        discharge_readiness_score=28,
        discharge_type=discharge_type,
        discharging_doctor='Dr Adamu',
    )


def who_score(admission_id, assessed_on, vitals=3):
    return calculate_who_discharge_score(WHODischargeAssessment(
        admission_id=admission_id,
        assessment_date=assessed_on,
        vital_signs_stable=vitals, pain_controlled=3, oral_intake_adequate=3, mobility_status=3,
        wound_healing_status=3, self_care_ability=3, medication_understanding=3, follow_up_arranged=3,
        caregiver_available=3, transport_arranged=3, home_environment_safe=3,
    ))


class TestWardRegistry(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.registry = WardRegistry.from_directory(self.root)

    def tearDown(self):
        self._tmp.cleanup()

    def test_create_admission_stamps_times(self):
        stored = self.registry.create_admission(admission(), now=NOW)

        self.assertTrue(stored.id)
        self.assertEqual(stored.created_at, NOW)
        self.assertEqual(self.registry.get_admission(stored.id), stored)
        self.assertTrue((self.root / 'admissions.json').exists())

    def test_active_admissions_newest_first(self):
        older = self.registry.create_admission(admission(1, date(2024, 8, 1)), now=NOW)
        newer = self.registry.create_admission(admission(2, date(2024, 8, 5), ward='Burns Unit'), now=NOW)

        self.assertEqual([a.id for a in self.registry.active_admissions()], [newer.id, older.id])
        self.assertEqual([a.id for a in self.registry.admissions_by_ward('Burns Unit')], [newer.id])
        self.assertEqual([a.id for a in self.registry.patient_admissions(1)], [older.id])

    def test_discharge_closes_admission(self):
        stored = self.registry.create_admission(admission(), now=NOW)
        recorded = self.registry.create_discharge(discharge(stored), now=NOW)

        self.assertEqual(recorded.created_at, NOW)
        closed = self.registry.get_admission(stored.id)
        self.assertEqual(closed.status, AdmissionStatus.DISCHARGED)
        self.assertEqual(closed.discharge_date, date(2024, 8, 10))
        self.assertEqual(closed.updated_at, NOW)
        self.assertEqual(self.registry.active_admissions(), [])
        self.assertEqual(self.registry.patient_discharges(1), [recorded])

    def test_discharge_type_sets_admission_status(self):
        transferred = self.registry.create_admission(admission(1), now=NOW)
        deceased = self.registry.create_admission(admission(2), now=NOW)
        self.registry.create_discharge(discharge(transferred, DischargeType.TRANSFER), now=NOW)
        self.registry.create_discharge(discharge(deceased, DischargeType.DECEASED), now=NOW)

        self.assertEqual(self.registry.get_admission(transferred.id).status, AdmissionStatus.TRANSFERRED)
        self.assertEqual(self.registry.get_admission(deceased.id).status, AdmissionStatus.DECEASED)

    def test_discharge_for_unknown_admission(self):
        orphan = admission().model_copy(update={'id': 'missing'})
        with pytest.raises(StorageError):
            self.registry.create_discharge(discharge(orphan), now=NOW)
        self.assertEqual(self.registry.all_discharges(), [])

    def test_failed_admission_update_keeps_no_discharge(self):
        stored = self.registry.create_admission(admission(), now=NOW)

        with patch.object(self.registry.admissions, 'update', side_effect=StorageError('disk full')):
            with pytest.raises(StorageError):
                self.registry.create_discharge(discharge(stored), now=NOW)

        self.assertEqual(self.registry.all_discharges(), [])
        self.assertEqual(self.registry.get_admission(stored.id).status, AdmissionStatus.ACTIVE)
        self.assertEqual(self.registry.active_admissions(), [stored])

    def test_update_admission_rejects_unknown_field(self):
        stored = self.registry.create_admission(admission(), now=NOW)
        with pytest.raises(StorageError):
            self.registry.update_admission(stored.id, now=NOW, ward='Burns Unit')
        self.assertEqual(self.registry.get_admission(stored.id).ward_location, 'Male Surgical')

    def test_latest_who_score(self):
        stored = self.registry.create_admission(admission(), now=NOW)
        self.registry.save_who_score(who_score(stored.id, date(2024, 8, 8), vitals=1))
        self.registry.save_who_score(who_score(stored.id, date(2024, 8, 9), vitals=3))

        latest = self.registry.get_who_score(stored.id)
        self.assertEqual(latest.assessment_date, date(2024, 8, 9))
        self.assertEqual(latest.total_score, 33)
        self.assertIsNone(self.registry.get_who_score('other'))

    def test_registry_without_who_store(self):
        registry = WardRegistry(
            admissions=RecordStore(self.root, 'admissions', Admission),
            discharges=RecordStore(self.root, 'discharges', Discharge),
        )
        with pytest.raises(StorageError):
            registry.get_who_score('any')

    def test_statistics(self):
        first = self.registry.create_admission(admission(1, date(2024, 8, 1)), now=NOW)
        self.registry.create_admission(admission(2, date(2024, 8, 5)), now=NOW)
        self.registry.create_discharge(discharge(first, discharged=date(2024, 8, 10)), now=NOW)

        stats = self.registry.statistics(today=date(2024, 8, 14))
        self.assertEqual(stats.total_admissions, 2)
        self.assertEqual(stats.active_admissions, 1)
        self.assertEqual(stats.discharges_this_month, 1)
        self.assertEqual(stats.average_length_of_stay, 9.0)
        self.assertEqual(stats.by_route['emergency'], 2)


if __name__ == "__main__":
    unittest.main()
