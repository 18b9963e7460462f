#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Tests for discharge PDF rendering
"""

import tempfile
import unittest
from datetime import date, datetime
from pathlib import Path
from unittest.mock import MagicMock

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from surgiscore.core.models import (
    Admission,
    AdmissionRoute,
    Discharge,
    DischargeMedication,
    DischargeType,
    WHODischargeAssessment,
)
from surgiscore.core.scoring.discharge import calculate_who_discharge_score
from surgiscore.reports.pdf import (
    BOTTOM,
    MARGIN,
    SIGNATURE_TOP,
    _PageWriter,
    discharge_pdf_filename,
    render_discharge_pdf,
    write_discharge_pdf,
)


class TestDischargePdf(unittest.TestCase):

    def setUp(self):
        self.admission = Admission(
            patient_id=7,
            patient_name='Amaka Obi',
            hospital_number='UNTH-0077',
            admission_date=date(2024, 2, 1),
            ward_location='Burns Unit',
            route_of_admission=AdmissionRoute.EMERGENCY,
        )
        self.discharge = Discharge(
            patient_id=7,
            patient_name='Amaka  Chioma Obi',
            hospital_number='UNTH-0077',
            admission_date=date(2024, 2, 1),
            discharge_date=date(2024, 2, 20),
            length_of_stay_days=19,
            admitting_diagnosis='Scald burn 18% TBSA',
            final_diagnosis='Healed partial thickness scald burn',
            procedures_performed=['Split skin graft, left thigh'],
            discharge_readiness_score=29,
            discharge_type=DischargeType.NORMAL,
            hospital_course_summary='Resuscitated per Parkland. Grafted on day 6. ' * 20,
            condition_at_discharge='Good',
            medications_on_discharge=[
                DischargeMedication(medication='Paracetamol', dosage='1g', frequency='8 hourly', duration='5 days'),
            ],
            wound_care_instructions='Moisturise graft site twice daily',
            discharging_doctor='Dr Okeke',
        )

    def test_filename(self):
        self.assertEqual(discharge_pdf_filename(self.discharge), 'Discharge_Amaka_Chioma_Obi_20240220.pdf')

    def test_render_produces_pdf(self):
        content = render_discharge_pdf(self.discharge, self.admission, generated_at=datetime(2024, 2, 20, 14, 0))

        self.assertTrue(content.startswith(b'%PDF'))
        self.assertGreater(len(content), 1000)

    def test_render_with_who_score_and_no_medications(self):
        who_score = calculate_who_discharge_score(WHODischargeAssessment(
            vital_signs_stable=3, pain_controlled=3, oral_intake_adequate=3, mobility_status=2,
            wound_healing_status=3, self_care_ability=2, medication_understanding=3, follow_up_arranged=3,
            caregiver_available=3, transport_arranged=2, home_environment_safe=3,
        ))
        bare = self.discharge.model_copy(update={'medications_on_discharge': []})
        content = render_discharge_pdf(bare, self.admission, who_score=who_score, unit_name='Burns Unit',
                                       hospital_name='Teaching Hospital')

        self.assertTrue(content.startswith(b'%PDF'))

    def test_write_pdf(self):
        with tempfile.TemporaryDirectory() as tmp:
            output_dir = Path(tmp) / 'documents'
            path = write_discharge_pdf(self.discharge, self.admission, output_dir)

            self.assertEqual(path.name, 'Discharge_Amaka_Chioma_Obi_20240220.pdf')
            self.assertTrue(path.exists())
            self.assertTrue(path.read_bytes().startswith(b'%PDF'))

    def test_render_long_medication_instructions(self):
        long_med = DischargeMedication(
            medication='Co-amoxiclav', dosage='625mg', frequency='12 hourly', duration='7 days',
            instructions='Take with food and complete the course even when the wound looks better. ' * 15,
        )
        crowded = self.discharge.model_copy(update={
            'medications_on_discharge': [long_med] * 6,
            'lifestyle_modifications': [f"Advice line {i}" for i in range(60)],
        })
        content = render_discharge_pdf(crowded, self.admission, generated_at=datetime(2024, 2, 20, 14, 0))

        self.assertTrue(content.startswith(b'%PDF'))


class TestPageWriter(unittest.TestCase):

    def setUp(self):
        self.pdf = MagicMock()
        self.page = _PageWriter(self.pdf, 'Unit', 'Hospital')

    def test_signature_moves_to_new_page_when_content_reaches_it(self):
        self.page.y = self.page.height - BOTTOM - 2 * mm
        self.page.signature_block(['Doctor', 'Consultant', 'Date'])

        self.pdf.showPage.assert_called_once()
        first_baseline = self.pdf.drawString.call_args_list[0].args[1]
        self.assertAlmostEqual(first_baseline, SIGNATURE_TOP)

    def test_signature_stays_on_page_with_room(self):
        self.page.y = 100 * mm
        self.page.signature_block(['Doctor'])

        self.pdf.showPage.assert_not_called()
        self.assertAlmostEqual(self.pdf.drawString.call_args.args[1], SIGNATURE_TOP)

    def test_wrapped_lines_fit_the_page(self):
        x = MARGIN + 5 * mm
        self.page.wrapped('Instructions: ' + 'apply the dressing and keep the limb elevated ' * 10, x=x)

        lines = [c.args[2] for c in self.pdf.drawString.call_args_list]
        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertLessEqual(x + stringWidth(line, 'Helvetica', 10), self.page.width - MARGIN)


if __name__ == "__main__":
    unittest.main()
