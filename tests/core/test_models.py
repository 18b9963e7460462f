"""
Unit tests for the core data models in SurgiScore.

Tests ensure proper functionality of:
- Field constraints on ordinal and percentage inputs
- Immutability of records and copy-with-update
- Result records carrying their inputs
- Display lookups covering every enum member
"""

import unittest
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from surgiscore.core.display import (
    DEPTH_INFO,
    INTERVENTION_DISPLAY,
    RISK_CATEGORY_DISPLAY,
    get_depth_info,
    get_intervention_display,
    get_region_display_name,
    get_risk_category_display,
)
from surgiscore.core.models import (
    AnatomicalRegion,
    BurnDepth,
    DiabeticFootAssessment,
    FollowUpAppointment,
    MealPlan,
    RecommendedIntervention,
    RiskCategory,
    TBSARegion,
    VenousDopplerInput,
    WagnerGrade,
    WagnerInput,
    WIfIInput,
)


class TestInputConstraints(unittest.TestCase):
    """Out-of-domain inputs fail at construction."""

    def test_wagner_grade_range(self):
        """Wagner grades run 0-5."""
        self.assertEqual(WagnerInput(grade=5).grade, 5)
        with pytest.raises(ValidationError):
            WagnerInput(grade=6)
        with pytest.raises(ValidationError):
            WagnerInput(grade=-1)

    def test_wifi_components_range(self):
        """Each WIfI component is 0-3."""
        with pytest.raises(ValidationError):
            WIfIInput(wound=4, ischemia=0, foot_infection=0)

    def test_edema_grade_range(self):
        """Edema grade defaults to 0 and is capped at 3."""
        self.assertEqual(VenousDopplerInput().edema_grade, 0)
        with pytest.raises(ValidationError):
            VenousDopplerInput(edema_grade=4)

    def test_region_percent(self):
        """Regional burn percentage is 0-100."""
        with pytest.raises(ValidationError):
            TBSARegion(region=AnatomicalRegion.LEFT_FOOT, percent_burned=120, depth=BurnDepth.SUPERFICIAL)

    def test_assessment_requires_ids(self):
        """Composite assessments need a non-empty id and patient id."""
        now = datetime(2024, 1, 1)
        with pytest.raises(ValidationError):
            DiabeticFootAssessment(id="", patient_id="P-1", assessment_date=now, created_at=now, updated_at=now)


class TestRecordBehaviour(unittest.TestCase):

    def test_records_are_frozen(self):
        """Assigning to a field of a record fails."""
        record = WagnerInput(grade=2)
        with pytest.raises(ValidationError):
            record.grade = 3

    def test_model_copy_leaves_original(self):
        record = WagnerInput(grade=2)
        copy = record.model_copy(update={"grade": 3})
        self.assertEqual(record.grade, 2)
        self.assertEqual(copy.grade, 3)

    def test_result_is_an_input(self):
        """A result record is also an instance of its input record."""
        result = WagnerGrade(grade=2, description="Deep ulcer", score=10)
        self.assertIsInstance(result, WagnerInput)

    def test_meal_plan_days_order(self):
        days = {
            f"day{i}": {
                "breakfast": "b", "mid_morning_snack": "s", "lunch": "l", "afternoon_snack": "a",
                "dinner": "d", "notes": f"Day {i}",
            }
            for i in range(1, 8)
        }
        plan = MealPlan(**days, hydration_goals="2L")
        self.assertEqual([d.notes for d in plan.days()], [f"Day {i}" for i in range(1, 8)])

    def test_follow_up_date_field(self):
        apt = FollowUpAppointment(date=date(2024, 5, 1), clinic="Burns Clinic", purpose="Graft check")
        self.assertEqual(apt.date, date(2024, 5, 1))


class TestDisplayLookups(unittest.TestCase):

    def test_every_risk_category_has_display(self):
        self.assertEqual(set(RISK_CATEGORY_DISPLAY), set(RiskCategory))
        self.assertEqual(
            get_risk_category_display(RiskCategory.CRITICAL_AMPUTATION_RECOMMENDED)["color"], "red"
        )

    def test_every_intervention_has_display(self):
        self.assertEqual(set(INTERVENTION_DISPLAY), set(RecommendedIntervention))
        self.assertEqual(
            get_intervention_display(RecommendedIntervention.RAY_AMPUTATION)["label"], "Ray Amputation"
        )

    def test_every_depth_has_display(self):
        self.assertEqual(set(DEPTH_INFO), set(BurnDepth))
        self.assertEqual(get_depth_info(BurnDepth.FULL_THICKNESS)["name"], "Full Thickness (3rd Degree)")

    def test_region_display_names(self):
        self.assertEqual(get_region_display_name(AnatomicalRegion.RIGHT_LEG_ANTERIOR), "Right Lower Leg (Anterior)")
        self.assertEqual(get_region_display_name(AnatomicalRegion.RIGHT_HAND), "Right Hand")
        self.assertEqual(get_region_display_name(AnatomicalRegion.GENITALIA), "Genitalia/Perineum")
        self.assertEqual(get_region_display_name("left_foot"), "Left Foot")


if __name__ == "__main__":
    unittest.main()
