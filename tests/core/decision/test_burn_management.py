#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Tests for burn management decision support
"""

import unittest
from datetime import datetime, timedelta

import pytest

from surgiscore.core.decision.burn_management import (
    apply_rate_adjustment,
    assess_burn_severity,
    determine_disposition,
    generate_urine_output_alert,
    generate_vital_alerts,
    has_circumferential_burn,
    has_full_thickness_burn,
    suggest_fluid_rate_adjustment,
)
from surgiscore.core.exceptions import ScoringInputError
from surgiscore.core.models import (
    AlertSeverity,
    AlertStatus,
    AnatomicalRegion,
    BurnAlertType,
    BurnDepth,
    BurnMechanism,
    Disposition,
    FluidRateSuggestion,
    Gender,
    TBSARegion,
    UrineOutput,
    Urgency,
    VitalSign,
)
from surgiscore.core.scoring.burns import calculate_parkland_formula

BURN_TIME = datetime(2024, 5, 10, 6, 0)


class TestFluidRateAdjustment(unittest.TestCase):
    """Fluid titration against hourly urine output"""

    def test_adult_ladder(self):
        cases = [
            (0.2, 1300, Urgency.EMERGENT),
            (0.4, 1200, Urgency.URGENT),
            (0.7, 1000, Urgency.ROUTINE),
            (1.2, 900, Urgency.ROUTINE),
            (1.6, 800, Urgency.ROUTINE),
        ]
        for urine_output, rate, urgency in cases:
            suggestion = suggest_fluid_rate_adjustment(urine_output, 1000)
            self.assertEqual(suggestion.new_rate, rate, urine_output)
            self.assertEqual(suggestion.urgency, urgency, urine_output)

    def test_on_target_message(self):
        suggestion = suggest_fluid_rate_adjustment(0.7, 1000)
        self.assertEqual(suggestion.adjustment, 'On target - maintain current rate')

    def test_child_uses_higher_target(self):
        child = suggest_fluid_rate_adjustment(0.8, 1000, is_child=True)
        adult = suggest_fluid_rate_adjustment(0.8, 1000)

        self.assertEqual(child.urgency, Urgency.URGENT)
        self.assertEqual(child.new_rate, 1200)
        self.assertEqual(adult.new_rate, 1000)

    def test_negative_values_rejected(self):
        with pytest.raises(ScoringInputError):
            suggest_fluid_rate_adjustment(-0.1, 1000)
        with pytest.raises(ScoringInputError):
            suggest_fluid_rate_adjustment(0.5, -1)

    def test_apply_rate_adjustment(self):
        plan = calculate_parkland_formula(70, 40, BURN_TIME, BURN_TIME + timedelta(hours=4))
        self.assertEqual(plan.current_rate, 1400)

        suggestion = FluidRateSuggestion(new_rate=1680, adjustment='Increase rate by 20% - low UO',
                                         urgency=Urgency.URGENT)
        stamp = BURN_TIME + timedelta(hours=5)
        adjusted = apply_rate_adjustment(plan, suggestion, 'Nurse Adeyemi', urine_output=0.4, timestamp=stamp)

        self.assertEqual(adjusted.current_rate, 1680)
        self.assertEqual(len(adjusted.rate_adjustments), 1)
        entry = adjusted.rate_adjustments[0]
        self.assertEqual(entry.previous_rate, 1400)
        self.assertEqual(entry.new_rate, 1680)
        self.assertEqual(entry.adjusted_by, 'Nurse Adeyemi')
        self.assertEqual(entry.urine_output_trigger, 0.4)
        self.assertEqual(entry.timestamp, stamp)

        # Original plan is unchanged
        self.assertEqual(plan.current_rate, 1400)
        self.assertEqual(plan.rate_adjustments, [])


def vitals(**overrides):
    values = dict(
        timestamp=BURN_TIME,
        heart_rate=90,
        systolic_bp=120,
        diastolic_bp=80,
        map=93,
        respiratory_rate=16,
        spo2=98,
        temperature=37.0,
    )
    values.update(overrides)
    return VitalSign(**values)


class TestVitalAlerts(unittest.TestCase):

    def test_normal_vitals_raise_nothing(self):
        self.assertEqual(generate_vital_alerts(vitals(), now=BURN_TIME), [])

    def test_alert_order(self):
        alerts = generate_vital_alerts(
            vitals(heart_rate=130, map=60, spo2=88, temperature=38.5), now=BURN_TIME
        )
        self.assertEqual(
            [a.type for a in alerts],
            [BurnAlertType.TACHYCARDIA, BurnAlertType.HYPOTENSION, BurnAlertType.HYPOXIA, BurnAlertType.FEVER],
        )
        self.assertEqual(alerts[1].severity, AlertSeverity.CRITICAL)
        self.assertTrue(all(a.status == AlertStatus.OPEN for a in alerts))
        self.assertTrue(all(a.created_at == BURN_TIME for a in alerts))
        self.assertEqual(len({a.id for a in alerts}), 4)

    def test_hypothermia(self):
        alerts = generate_vital_alerts(vitals(temperature=35.5), now=BURN_TIME)

        self.assertEqual([a.type for a in alerts], [BurnAlertType.HYPOTHERMIA])
        self.assertEqual(alerts[0].message, 'Hypothermia: Temp 35.5°C')

    def test_thresholds_are_strict(self):
        alerts = generate_vital_alerts(vitals(heart_rate=120, map=65, spo2=90, temperature=38.0), now=BURN_TIME)
        self.assertEqual(alerts, [])


def hourly(*rates):
    return [
        UrineOutput(timestamp=BURN_TIME + timedelta(hours=i), volume_ml=rate * 70, ml_per_kg_per_hr=rate)
        for i, rate in enumerate(rates)
    ]


class TestUrineOutputAlert(unittest.TestCase):

    def test_two_low_hours_warn(self):
        alert = generate_urine_output_alert(hourly(0.6, 0.4, 0.35), 0.5, now=BURN_TIME)

        self.assertIsNotNone(alert)
        self.assertEqual(alert.type, BurnAlertType.LOW_URINE_OUTPUT)
        self.assertEqual(alert.severity, AlertSeverity.WARNING)

    def test_very_low_output_is_critical(self):
        alert = generate_urine_output_alert(hourly(0.2, 0.25), 0.5, now=BURN_TIME)
        self.assertEqual(alert.severity, AlertSeverity.CRITICAL)

    def test_single_low_hour_is_not_enough(self):
        self.assertIsNone(generate_urine_output_alert(hourly(0.4, 0.6), 0.5))
        self.assertIsNone(generate_urine_output_alert(hourly(0.2), 0.5))
        self.assertIsNone(generate_urine_output_alert([], 0.5))


class TestDisposition(unittest.TestCase):
    """Burn centre referral ladder"""

    def test_minor_burn_is_outpatient(self):
        result = determine_disposition(3, False, False, 30, BurnMechanism.SCALD, False)

        self.assertEqual(result.disposition, Disposition.OUTPATIENT)
        self.assertEqual(result.reasons, ['Minor burn - suitable for outpatient management'])

    def test_large_burn_goes_to_burn_center(self):
        result = determine_disposition(12, False, False, 30, BurnMechanism.FLAME, False)

        self.assertEqual(result.disposition, Disposition.BURN_CENTER)
        self.assertEqual(result.reasons, ['TBSA ≥10% (12%)'])

    def test_full_thickness_over_five_percent(self):
        result = determine_disposition(6, False, True, 30, BurnMechanism.FLAME, False)
        self.assertEqual(result.disposition, Disposition.BURN_CENTER)

    def test_inhalation_goes_to_icu(self):
        result = determine_disposition(4, True, False, 30, BurnMechanism.FLAME, False)
        self.assertEqual(result.disposition, Disposition.ICU)

    def test_electrical_does_not_downgrade_icu(self):
        result = determine_disposition(4, True, False, 30, BurnMechanism.ELECTRICAL, False)

        self.assertEqual(result.disposition, Disposition.ICU)
        self.assertIn('Electrical burn mechanism', result.reasons)

    def test_chemical_escalates_outpatient(self):
        result = determine_disposition(2, False, False, 30, BurnMechanism.CHEMICAL, False)
        self.assertEqual(result.disposition, Disposition.BURN_CENTER)

    def test_circumferential_escalates_outpatient(self):
        result = determine_disposition(2, False, False, 30, BurnMechanism.FLAME, True)

        self.assertEqual(result.disposition, Disposition.BURN_CENTER)
        self.assertIn('Circumferential burn - escharotomy may be needed', result.reasons)

    def test_age_extremes_admit_to_ward(self):
        result = determine_disposition(6, False, False, 70, BurnMechanism.SCALD, False)

        self.assertEqual(result.disposition, Disposition.WARD)
        self.assertEqual(result.reasons, ['Age extremes (70 years) with significant burn'])

    def test_moderate_burn_admitted_to_ward(self):
        result = determine_disposition(6, False, False, 30, BurnMechanism.SCALD, False)

        self.assertEqual(result.disposition, Disposition.WARD)
        self.assertEqual(result.reasons, ['TBSA 6% requires inpatient monitoring'])

    def test_invalid_tbsa_rejected(self):
        with pytest.raises(ScoringInputError):
            determine_disposition(120, False, False, 30, BurnMechanism.FLAME, False)

    def test_unknown_mechanism_rejected(self):
        with pytest.raises(ScoringInputError) as excinfo:
            determine_disposition(4, False, False, 30, 'lightning', False)
        self.assertEqual(excinfo.value.parameter, 'mechanism')


class TestRegionFlags(unittest.TestCase):

    def test_flags(self):
        regions = [
            TBSARegion(region=AnatomicalRegion.RIGHT_ARM_ANTERIOR, percent_burned=50, depth=BurnDepth.DEEP_PARTIAL),
            TBSARegion(region=AnatomicalRegion.LEFT_LEG_ANTERIOR, percent_burned=100,
                       depth=BurnDepth.FULL_THICKNESS, is_circumferential=True),
        ]
        self.assertTrue(has_full_thickness_burn(regions))
        self.assertTrue(has_circumferential_burn(regions))
        self.assertFalse(has_full_thickness_burn(regions[:1]))
        self.assertFalse(has_circumferential_burn(regions[:1]))
        self.assertFalse(has_full_thickness_burn([]))


class TestBurnSeverity(unittest.TestCase):

    def test_composite_snapshot(self):
        severity = assess_burn_severity(45, Gender.FEMALE, 35, True, False)

        self.assertEqual(severity.baux_score, 80)
        self.assertEqual(severity.revised_baux_score, 80)
        self.assertEqual(severity.baux_interpretation.mortality, '30-60%')
        self.assertEqual(severity.absi.total_score, 8)
        self.assertEqual(severity.disposition.disposition, Disposition.BURN_CENTER)

    def test_inhalation_adds_revised_baux_points(self):
        severity = assess_burn_severity(45, Gender.FEMALE, 35, True, True)

        self.assertEqual(severity.baux_score, 80)
        self.assertEqual(severity.revised_baux_score, 97)
        self.assertEqual(severity.disposition.disposition, Disposition.ICU)


if __name__ == "__main__":
    unittest.main()
