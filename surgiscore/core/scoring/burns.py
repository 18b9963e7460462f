#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Burn Severity and Resuscitation Calculators

This module implements the calculators used in acute burn care:

- TBSA estimation (Lund-Browder chart and adult Rule of Nines)
- Baux and revised Baux scores
- Abbreviated Burn Severity Index (ABSI)
- Parkland and Modified Brooke fluid resuscitation plans
- Urine output rate, mean arterial pressure and qSOFA
- Curreri nutrition targets

All functions are pure. Scalar arguments outside their clinical domain
(negative weights, TBSA above 100%, a current time before the burn) raise
ScoringInputError.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional

from surgiscore.core.exceptions import ScoringInputError
from surgiscore.core.models import (
    ABSIScore,
    AnatomicalRegion,
    BauxInterpretation,
    FluidType,
    Gender,
    NutritionTargets,
    QSOFAResult,
    ResuscitationPlan,
    ResuscitationProtocol,
    RuleOfNinesArea,
    RuleOfNinesEntry,
    TBSARegion,
    UrineOutputTarget,
)
from surgiscore.core.scoring.utils import (
    normalize_to_band,
    require_enum,
    require_non_negative,
    require_percent,
    require_positive,
    round_half_up,
)

logger = logging.getLogger(__name__)

__all__ = [
    'LUND_BROWDER_CHART',
    'RULE_OF_NINES_ADULT',
    'get_age_group',
    'calculate_tbsa_lund_browder',
    'calculate_tbsa_rule_of_nines',
    'calculate_baux_score',
    'calculate_revised_baux_score',
    'interpret_baux_score',
    'calculate_absi',
    'calculate_parkland_formula',
    'calculate_modified_brooke_formula',
    'calculate_urine_output_rate',
    'calculate_map',
    'calculate_qsofa',
    'calculate_nutrition_targets',
]

AGE_GROUPS = ('0-1', '1-4', '5-9', '10-14', '15+')


def _by_age(*values):
    return dict(zip(AGE_GROUPS, values))


# Percent of body surface per region, by age group
LUND_BROWDER_CHART: Dict[AnatomicalRegion, Dict[str, float]] = {
    AnatomicalRegion.HEAD_ANTERIOR: _by_age(9.5, 8.5, 6.5, 5.5, 4.5),
    AnatomicalRegion.HEAD_POSTERIOR: _by_age(9.5, 8.5, 6.5, 5.5, 4.5),
    AnatomicalRegion.NECK_ANTERIOR: _by_age(1, 1, 1, 1, 1),
    AnatomicalRegion.NECK_POSTERIOR: _by_age(1, 1, 1, 1, 1),
    AnatomicalRegion.TRUNK_ANTERIOR: _by_age(13, 13, 13, 13, 13),
    AnatomicalRegion.TRUNK_POSTERIOR: _by_age(13, 13, 13, 13, 13),
    AnatomicalRegion.RIGHT_ARM_ANTERIOR: _by_age(2, 2, 2, 2, 2),
    AnatomicalRegion.RIGHT_ARM_POSTERIOR: _by_age(2, 2, 2, 2, 2),
    AnatomicalRegion.LEFT_ARM_ANTERIOR: _by_age(2, 2, 2, 2, 2),
    AnatomicalRegion.LEFT_ARM_POSTERIOR: _by_age(2, 2, 2, 2, 2),
    AnatomicalRegion.RIGHT_HAND: _by_age(1.25, 1.25, 1.25, 1.25, 1.25),
    AnatomicalRegion.LEFT_HAND: _by_age(1.25, 1.25, 1.25, 1.25, 1.25),
    AnatomicalRegion.GENITALIA: _by_age(1, 1, 1, 1, 1),
    AnatomicalRegion.RIGHT_THIGH_ANTERIOR: _by_age(2.75, 3.25, 4, 4.25, 4.75),
    AnatomicalRegion.RIGHT_THIGH_POSTERIOR: _by_age(2.75, 3.25, 4, 4.25, 4.75),
    AnatomicalRegion.LEFT_THIGH_ANTERIOR: _by_age(2.75, 3.25, 4, 4.25, 4.75),
    AnatomicalRegion.LEFT_THIGH_POSTERIOR: _by_age(2.75, 3.25, 4, 4.25, 4.75),
    AnatomicalRegion.RIGHT_LEG_ANTERIOR: _by_age(2.5, 2.5, 2.75, 3, 3.5),
    AnatomicalRegion.RIGHT_LEG_POSTERIOR: _by_age(2.5, 2.5, 2.75, 3, 3.5),
    AnatomicalRegion.LEFT_LEG_ANTERIOR: _by_age(2.5, 2.5, 2.75, 3, 3.5),
    AnatomicalRegion.LEFT_LEG_POSTERIOR: _by_age(2.5, 2.5, 2.75, 3, 3.5),
    AnatomicalRegion.RIGHT_FOOT: _by_age(1.75, 1.75, 1.75, 1.75, 1.75),
    AnatomicalRegion.LEFT_FOOT: _by_age(1.75, 1.75, 1.75, 1.75, 1.75),
}

RULE_OF_NINES_ADULT: Dict[RuleOfNinesArea, float] = {
    RuleOfNinesArea.HEAD_NECK: 9,
    RuleOfNinesArea.ANTERIOR_TRUNK: 18,
    RuleOfNinesArea.POSTERIOR_TRUNK: 18,
    RuleOfNinesArea.EACH_ARM: 9,
    RuleOfNinesArea.EACH_LEG: 18,
    RuleOfNinesArea.GENITALIA: 1,
}

BAUX_BANDS = (
    (50, BauxInterpretation(mortality='<10%', prognosis='Good prognosis')),
    (75, BauxInterpretation(mortality='10-30%', prognosis='Moderate prognosis')),
    (100, BauxInterpretation(mortality='30-60%', prognosis='Guarded prognosis')),
    (130, BauxInterpretation(mortality='60-90%', prognosis='Poor prognosis')),
)
BAUX_VERY_POOR = BauxInterpretation(
    mortality='>90%', prognosis='Very poor prognosis - consider palliative care discussion'
)

REVISED_BAUX_INHALATION_POINTS = 17

ABSI_AGE_BANDS = ((20, 1), (40, 2), (60, 3), (80, 4))

# ABSI total (inclusive upper bound) -> mortality risk
ABSI_MORTALITY_BANDS = (
    (2, '<1%'),
    (3, '2%'),
    (4, '3%'),
    (5, '10-20%'),
    (6, '30-50%'),
    (7, '50-70%'),
    (8, '70-80%'),
    (9, '80-90%'),
)

PARKLAND_ML_PER_KG_PER_PERCENT = 4
FIRST_HALF_HOURS = 8
RESUSCITATION_HOURS = 24
ADULT_URINE_OUTPUT_TARGET = UrineOutputTarget(min=0.5, max=1.0)
CHILD_URINE_OUTPUT_TARGET = UrineOutputTarget(min=1.0, max=1.5)

QSOFA_INTERPRETATIONS = {
    0: 'Low risk - continue routine monitoring',
    1: 'Moderate risk - close monitoring advised',
}
QSOFA_HIGH_RISK = 'High risk of sepsis - consider ICU admission and sepsis workup'


def get_age_group(age: float) -> str:
    """Return the Lund-Browder age group for an age in years."""
    require_non_negative('age', age)
    if age < 1:
        return '0-1'
    if age < 5:
        return '1-4'
    if age < 10:
        return '5-9'
    if age < 15:
        return '10-14'
    return '15+'


def calculate_tbsa_lund_browder(regions: Iterable[TBSARegion], age: float) -> float:
    """
    Calculate TBSA using the Lund-Browder chart

    Args:
        regions: Burned regions, each with the percent of that region affected
        age: Patient age in years, selects the chart column

    Returns:
        TBSA percent rounded to 1 decimal place
    """
    age_group = get_age_group(age)
    total = 0.0
    for region in regions:
        region_max = LUND_BROWDER_CHART[region.region][age_group]
        total += (region.percent_burned / 100) * region_max
    return round_half_up(total, 1)


def calculate_tbsa_rule_of_nines(areas: Iterable[RuleOfNinesEntry]) -> float:
    """Sum Rule of Nines area percents (adults), rounded to 1 dp and capped at 100."""
    total = sum(area.percent for area in areas)
    return min(100.0, round_half_up(total, 1))


def calculate_baux_score(age: float, tbsa: float) -> float:
    """Baux = age + %TBSA"""
    require_non_negative('age', age)
    require_percent('tbsa', tbsa)
    return age + tbsa


def calculate_revised_baux_score(age: float, tbsa: float, inhalation_injury: bool) -> float:
    """Revised Baux = age + %TBSA + 17 if inhalation injury"""
    score = calculate_baux_score(age, tbsa)
    if inhalation_injury:
        score += REVISED_BAUX_INHALATION_POINTS
    return score


def interpret_baux_score(score: float) -> BauxInterpretation:
    """Band a Baux or revised Baux score into mortality and prognosis."""
    return normalize_to_band(score, BAUX_BANDS, BAUX_VERY_POOR)


def calculate_absi(
    age: float,
    gender: Gender,
    tbsa: float,
    has_full_thickness: bool,
    has_inhalation_injury: bool,
) -> ABSIScore:
    """
    Calculate the Abbreviated Burn Severity Index (ABSI)

    Args:
        age: Age in years
        gender: Patient sex; male scores 1 point
        tbsa: Percent TBSA burned
        has_full_thickness: Any full-thickness burn present
        has_inhalation_injury: Inhalation injury present

    Returns:
        ABSIScore with the five point contributions, total and mortality risk
    """
    require_non_negative('age', age)
    require_percent('tbsa', tbsa)
    gender = require_enum('gender', gender, Gender)

    age_points = normalize_to_band(age, ABSI_AGE_BANDS, 5)
    sex_points = 0 if gender == Gender.FEMALE else 1

    # 1 point per 10% TBSA step, 1-10
    tbsa_points = 10
    for step in range(1, 10):
        if tbsa <= step * 10:
            tbsa_points = step
            break

    full_thickness_points = 1 if has_full_thickness else 0
    inhalation_injury_points = 1 if has_inhalation_injury else 0

    total = age_points + sex_points + tbsa_points + full_thickness_points + inhalation_injury_points
    mortality_risk = normalize_to_band(total, ABSI_MORTALITY_BANDS, '>90%', inclusive=True)

    return ABSIScore(
        age_points=age_points,
        sex_points=sex_points,
        tbsa_points=tbsa_points,
        full_thickness_points=full_thickness_points,
        inhalation_injury_points=inhalation_injury_points,
        total_score=total,
        mortality_risk=mortality_risk,
    )


def _hours_between(start: datetime, end: datetime) -> float:
    try:
        delta = end - start
    except TypeError as e:
        raise ScoringInputError(
            "time_of_burn and current_time must both be timezone-aware or both naive",
            parameter='current_time',
            value=str(end),
        ) from e
    return delta.total_seconds() / 3600


def calculate_parkland_formula(
    weight_kg: float,
    tbsa: float,
    time_of_burn: datetime,
    current_time: Optional[datetime] = None,
) -> ResuscitationPlan:
    """
    Calculate a Parkland formula resuscitation plan

    Total 24h fluid = 4 mL x weight (kg) x %TBSA. The first half is given over
    the 8 hours from the time of burn, the second half over the next 16. The
    current rate is the half still due divided by the hours left in its window,
    so it depends on how long after the burn the plan is made.

    Args:
        weight_kg: Patient weight in kg
        tbsa: Percent TBSA burned
        time_of_burn: When the burn occurred (not the time of arrival)
        current_time: Time the plan is computed for; defaults to now

    Returns:
        ResuscitationPlan; volumes and rate are rounded to whole mL
    """
    require_positive('weight_kg', weight_kg)
    require_percent('tbsa', tbsa)
    if current_time is None:
        current_time = datetime.now(time_of_burn.tzinfo)

    hours_elapsed = _hours_between(time_of_burn, current_time)
    if hours_elapsed < 0:
        raise ScoringInputError(
            "current_time is before time_of_burn", parameter='current_time', value=str(current_time)
        )

    total_volume = PARKLAND_ML_PER_KG_PER_PERCENT * weight_kg * tbsa
    first_half = total_volume / 2
    second_half = total_volume / 2

    if hours_elapsed < FIRST_HALF_HOURS:
        current_rate = first_half / (FIRST_HALF_HOURS - hours_elapsed)
    elif hours_elapsed < RESUSCITATION_HOURS:
        current_rate = second_half / (RESUSCITATION_HOURS - hours_elapsed)
    else:
        current_rate = 0

    logger.debug(
        f"Parkland: {weight_kg}kg x {tbsa}% -> {total_volume} mL/24h, "
        f"{hours_elapsed:.2f}h elapsed, rate {current_rate:.1f} mL/hr"
    )

    return ResuscitationPlan(
        protocol=ResuscitationProtocol.PARKLAND,
        fluid_type=FluidType.LACTATED_RINGERS,
        total_volume_24h=round_half_up(total_volume),
        first_half_volume=round_half_up(first_half),
        second_half_volume=round_half_up(second_half),
        current_rate=round_half_up(current_rate),
        hours_elapsed=hours_elapsed,
        volume_given=0,
        remaining_volume=round_half_up(total_volume),
        resuscitation_start_time=time_of_burn,
        first_half_end_time=time_of_burn + timedelta(hours=FIRST_HALF_HOURS),
        resuscitation_end_time=time_of_burn + timedelta(hours=RESUSCITATION_HOURS),
        rate_adjustments=[],
        urine_output_target=ADULT_URINE_OUTPUT_TARGET,
    )


def calculate_modified_brooke_formula(
    weight_kg: float,
    tbsa: float,
    time_of_burn: datetime,
    current_time: Optional[datetime] = None,
) -> ResuscitationPlan:
    """Modified Brooke plan: the Parkland plan at 2 mL/kg/%TBSA, each value halved and rounded."""
    plan = calculate_parkland_formula(weight_kg, tbsa, time_of_burn, current_time)
    total = round_half_up(plan.total_volume_24h / 2)
    return plan.model_copy(update={
        'protocol': ResuscitationProtocol.MODIFIED_BROOKE,
        'total_volume_24h': total,
        'first_half_volume': round_half_up(plan.first_half_volume / 2),
        'second_half_volume': round_half_up(plan.second_half_volume / 2),
        'current_rate': round_half_up(plan.current_rate / 2),
        'remaining_volume': total,
    })


def calculate_urine_output_rate(volume_ml: float, weight_kg: float, hours_elapsed: float = 1) -> float:
    """Urine output in mL/kg/hr, rounded to 2 decimal places."""
    require_non_negative('volume_ml', volume_ml)
    require_positive('weight_kg', weight_kg)
    require_positive('hours_elapsed', hours_elapsed)
    return round_half_up(volume_ml / weight_kg / hours_elapsed, 2)


def calculate_map(systolic: float, diastolic: float) -> int:
    """Mean arterial pressure = DBP + (SBP - DBP) / 3, rounded."""
    require_non_negative('systolic', systolic)
    require_non_negative('diastolic', diastolic)
    return round_half_up(diastolic + (systolic - diastolic) / 3)


def calculate_qsofa(respiratory_rate: float, systolic_bp: float, altered_mentation: bool) -> QSOFAResult:
    """
    Bedside qSOFA for burn patients

    Note the burn unit counts SBP <= 100 mmHg, one point per criterion.
    """
    score = 0
    if respiratory_rate >= 22:
        score += 1
    if systolic_bp <= 100:
        score += 1
    if altered_mentation:
        score += 1

    interpretation = QSOFA_INTERPRETATIONS.get(score, QSOFA_HIGH_RISK)
    return QSOFAResult(score=score, interpretation=interpretation)


def calculate_nutrition_targets(weight_kg: float, tbsa: float) -> NutritionTargets:
    """
    Daily nutrition targets for a burn patient

    Calories use the Curreri formula (25 kcal/kg + 40 kcal per %TBSA);
    protein is 1.5 g/kg to 1 decimal place.
    """
    require_positive('weight_kg', weight_kg)
    require_percent('tbsa', tbsa)
    return NutritionTargets(
        calories_per_day=round_half_up(25 * weight_kg + 40 * tbsa),
        protein_per_day=round_half_up(1.5 * weight_kg, 1),
        formula=f"Curreri: 25×{weight_kg:g}kg + 40×{tbsa:g}%TBSA",
    )
