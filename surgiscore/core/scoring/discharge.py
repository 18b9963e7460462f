#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
WHO Discharge Readiness Score

Implements the WHO-style discharge readiness checklist used on the surgical
ward: eleven ordinal items (0-3) covering clinical stability, functional
readiness and social support, less points for readmission risk factors.

Bands (lower-bound inclusive, evaluated top-down):
    >= 27  fit for discharge
    >= 20  discharge on request
    >= 12  discharge against medical advice
    else   not ready
"""

import logging
from typing import Dict, Tuple

from surgiscore.core.exceptions import ScoringInputError
from surgiscore.core.models import (
    DischargeRecommendation,
    DischargeType,
    WHODischargeAssessment,
    WHODischargeScore,
)
from surgiscore.core.scoring.utils import input_fields, normalize_to_band

logger = logging.getLogger(__name__)

__all__ = [
    'WHO_SCORE_FIELDS',
    'WHO_FIELD_LABELS',
    'WHO_MAX_SCORE',
    'calculate_who_discharge_score',
    'get_discharge_recommendation',
    'get_discharge_type_from_score',
    'get_field_label',
]

WHO_SCORE_FIELDS = (
    'vital_signs_stable',
    'pain_controlled',
    'oral_intake_adequate',
    'mobility_status',
    'wound_healing_status',
    'self_care_ability',
    'medication_understanding',
    'follow_up_arranged',
    'caregiver_available',
    'transport_arranged',
    'home_environment_safe',
)

WHO_MAX_SCORE = 3 * len(WHO_SCORE_FIELDS)

# Risk factor -> points deducted
RISK_FACTOR_PENALTIES = (
    ('high_readmission_risk', 2),
    ('complex_medical_needs', 2),
    ('language_barrier', 1),
)

# Report labels indexed by ordinal value 0..3
WHO_FIELD_LABELS: Dict[str, Tuple[str, str, str, str]] = {
    'vital_signs_stable': ('Unstable', 'Borderline', 'Stable 24h', 'Stable 48h+'),
    'pain_controlled': ('Severe', 'Moderate', 'Mild', 'Minimal/None'),
    'oral_intake_adequate': ('NPO', 'Liquids only', 'Soft diet', 'Regular diet'),
    'mobility_status': ('Bedbound', 'Needs assistance', 'Walks with aid', 'Independent'),
    'wound_healing_status': ('Infected', 'Concerning', 'Healing', 'Well-healed'),
    'self_care_ability': ('Dependent', 'Needs help', 'Minimal help', 'Independent'),
    'medication_understanding': ('None', 'Poor', 'Moderate', 'Good'),
    'follow_up_arranged': ('No', 'Pending', 'Partially', 'Complete'),
    'caregiver_available': ('None', 'Occasionally', 'Most times', 'Always'),
    'transport_arranged': ('No', 'Uncertain', 'Planned', 'Confirmed'),
    'home_environment_safe': ('Unsafe', 'Concerns', 'Acceptable', 'Safe'),
}

RECOMMENDATION_BANDS = (
    (12, DischargeRecommendation.NOT_READY),
    (20, DischargeRecommendation.AGAINST_MEDICAL_ADVICE),
    (27, DischargeRecommendation.DISCHARGE_ON_REQUEST),
)

DISCHARGE_TYPE_BANDS = (
    (12, DischargeType.NOT_READY),
    (20, DischargeType.AGAINST_MEDICAL_ADVICE),
    (27, DischargeType.ON_REQUEST),
)


def get_discharge_recommendation(total_score: int) -> DischargeRecommendation:
    """Band a WHO total score into a discharge recommendation."""
    return normalize_to_band(total_score, RECOMMENDATION_BANDS, DischargeRecommendation.FIT_FOR_DISCHARGE)


def get_discharge_type_from_score(score: int) -> DischargeType:
    """Map a readiness score to the discharge type it supports."""
    return normalize_to_band(score, DISCHARGE_TYPE_BANDS, DischargeType.NORMAL)


def calculate_who_discharge_score(assessment: WHODischargeAssessment) -> WHODischargeScore:
    """
    Calculate the WHO discharge readiness score

    Args:
        assessment: The eleven ordinal items and the three risk factor flags

    Returns:
        WHODischargeScore carrying the input plus total_score and recommendation
    """
    total = sum(getattr(assessment, name) for name in WHO_SCORE_FIELDS)
    for flag, penalty in RISK_FACTOR_PENALTIES:
        if getattr(assessment, flag):
            total -= penalty

    recommendation = get_discharge_recommendation(total)
    logger.debug(f"WHO discharge score {total} -> {recommendation.value}")

    return WHODischargeScore(
        **input_fields(assessment, WHODischargeAssessment),
        total_score=total,
        recommendation=recommendation,
    )


def get_field_label(field: str, value: int) -> str:
    """
    Look up the report label for a WHO ordinal item

    Args:
        field: One of WHO_SCORE_FIELDS
        value: Ordinal value 0-3

    Returns:
        Human-readable label
    """
    labels = WHO_FIELD_LABELS.get(field)
    if labels is None:
        raise ScoringInputError(f"Unknown WHO discharge item: {field}", parameter='field', value=field)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 3:
        raise ScoringInputError(f"{field} must be an integer 0-3", parameter=field, value=value)
    return labels[value]
