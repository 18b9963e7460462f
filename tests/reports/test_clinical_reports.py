#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Tests for the limb salvage and burn text reports
"""

import unittest
from datetime import datetime, timedelta

from surgiscore.core.decision.burn_management import assess_burn_severity
from surgiscore.core.models import (
    ArterialDopplerInput,
    DiabeticFootAssessment,
    Gender,
    PatientDemographics,
    SINBADInput,
    WagnerInput,
    WaveformType,
)
from surgiscore.core.scoring.burns import calculate_nutrition_targets, calculate_parkland_formula
from surgiscore.core.scoring.diabetic_foot import (
    calculate_arterial_score,
    calculate_sinbad_score,
    calculate_wagner_score,
)
from surgiscore.reports.clinical_reports import generate_burn_summary, generate_limb_salvage_report


class TestLimbSalvageReport(unittest.TestCase):

    def setUp(self):
        stamp = datetime(2024, 6, 3, 11, 0)
        self.assessment = DiabeticFootAssessment(
            id='dfa-9',
            patient_id='P-31',
            assessment_date=stamp,
            assessed_by='Dr Lawal',
            created_at=stamp,
            updated_at=stamp,
            wagner_grade=calculate_wagner_score(WagnerInput(grade=2)),
            sinbad_score=calculate_sinbad_score(SINBADInput(
                site=0, ischemia=1, neuropathy=1, bacterial_infection=0, area=1, depth=0,
            )),
        )

    def test_report_recomputes_scores(self):
        stale = self.assessment.model_copy(update={'total_score': 999})
        text = generate_limb_salvage_report(stale)

        self.assertIn('Assessment ID: dfa-9', text)
        self.assertIn('Assessment Date: 03 June 2024', text)
        self.assertIn('Wagner Grade: 10', text)
        self.assertIn('TOTAL SCORE: 10', text)
        self.assertNotIn('999', text)
        self.assertIn('RISK CATEGORY: Low Risk - Limb Salvage Likely', text)
        self.assertIn('LIMB SALVAGE PROBABILITY: 90%', text)
        self.assertIn('RECOMMENDED INTERVENTION: Wound Care & Debridement', text)

    def test_missing_components_are_not_zero(self):
        text = generate_limb_salvage_report(self.assessment)

        self.assertIn('Texas Classification: Not assessed', text)
        self.assertIn('Demographics: Not assessed', text)
        self.assertIn('SINBAD (not in total): 3/6 (moderate)', text)
        self.assertIn('Consults: None', text)

    def test_consults_and_interpretation(self):
        arterial = calculate_arterial_score(ArterialDopplerInput(
            abi_right=0.55, abi_left=1.0, affected_side_abi=0.55, waveform_type=WaveformType.MONOPHASIC,
        ))
        demographics = PatientDemographics(age=72, gender=Gender.FEMALE, diabetes_duration=3)
        text = generate_limb_salvage_report(
            self.assessment.model_copy(update={'arterial_doppler': arterial, 'demographics': demographics})
        )

        self.assertIn(f"Arterial interpretation: {arterial.interpretation}", text)
        self.assertIn('Demographics: 15', text)
        self.assertIn('Consults: Vascular surgery', text)


class TestBurnSummary(unittest.TestCase):

    def setUp(self):
        self.severity = assess_burn_severity(45, Gender.FEMALE, 35, True, False)

    def test_severity_only(self):
        text = generate_burn_summary(self.severity)

        self.assertIn('TBSA: 35%', text)
        self.assertIn('Baux Score: 80', text)
        self.assertIn('Predicted Mortality: 30-60% (Guarded prognosis)', text)
        self.assertIn('ABSI: 8 (mortality risk 70-80%)', text)
        self.assertIn('BURN CENTER', text)
        self.assertNotIn('FLUID RESUSCITATION', text)
        self.assertNotIn('NUTRITION', text)

    def test_with_fluid_and_nutrition_plans(self):
        burn_time = datetime(2024, 6, 3, 2, 0)
        plan = calculate_parkland_formula(70, 35, burn_time, burn_time + timedelta(hours=1))
        nutrition = calculate_nutrition_targets(70, 35)
        text = generate_burn_summary(self.severity, plan, nutrition)

        self.assertIn('Protocol: Parkland', text)
        self.assertIn('Fluid: Lactated Ringers', text)
        self.assertIn('Total 24h: 9800 mL', text)
        self.assertIn('First 8h: 4900 mL (until 03/06/2024 10:00)', text)
        self.assertIn('Current Rate: 700 mL/hr', text)
        self.assertIn('Urine Output Target: 0.5-1 mL/kg/hr', text)
        self.assertIn(f"Calories: {nutrition.calories_per_day} kcal/day", text)


if __name__ == "__main__":
    unittest.main()
