"""
Discharge planning for the surgical ward.

Covers multidisciplinary (MDT) medication harmonisation, the 7-day meal plan
given to patients on discharge, admission status updates when a patient
leaves, and ward admission statistics.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from surgiscore.core.models import (
    Admission,
    AdmissionRoute,
    AdmissionStatistics,
    AdmissionStatus,
    DayMeals,
    Discharge,
    DischargeMedication,
    DischargeType,
    MealPlan,
    MedicationHarmonization,
)
from surgiscore.core.scoring.utils import round_half_up

logger = logging.getLogger(__name__)

# Matched as substrings of lower-cased medication names
INTERACTION_PAIRS = (
    ('warfarin', 'aspirin'),
    ('ace inhibitor', 'potassium'),
    ('metformin', 'contrast dye'),
    ('nsaid', 'anticoagulant'),
    ('digoxin', 'amiodarone'),
    ('statin', 'fibrate'),
)

POLYPHARMACY_THRESHOLD = 5

PROTEINS = ('grilled fish', 'baked chicken', 'lean beef', 'beans/lentils', 'egg', 'tofu', 'turkey')
GRAINS = ('brown rice', 'whole wheat bread', 'oatmeal', 'millet', 'quinoa')
VEGETABLES = ('spinach', 'carrots', 'broccoli', 'green beans', 'cabbage', 'tomatoes', 'okra')

DEFAULT_HYDRATION = '8-10 glasses (2-2.5L) of water daily'

# (condition names, considerations, foods to avoid, hydration override)
CONDITION_DIETS = (
    (
        ('diabetes', 'diabetic'),
        ('Low glycemic index foods preferred', 'Regular meal timing to maintain blood sugar'),
        ('Refined sugars', 'White bread', 'Sugary drinks', 'Processed snacks'),
        None,
    ),
    (
        ('hypertension', 'high blood pressure'),
        ('Low sodium diet (< 2g sodium/day)', 'DASH diet principles recommended'),
        ('Processed foods', 'Canned foods', 'Salted snacks', 'Pickles'),
        None,
    ),
    (
        ('ckd', 'kidney disease', 'renal'),
        ('Moderate protein intake', 'Low phosphorus and potassium'),
        ('High potassium fruits (bananas, oranges)', 'Nuts', 'Dairy products', 'Processed meats'),
        'As advised by doctor - may need fluid restriction',
    ),
    (
        ('heart failure', 'cardiac'),
        ('Low sodium, low fat diet', 'Small frequent meals'),
        ('Fried foods', 'Red meat', 'Full-fat dairy', 'Alcohol'),
        '1.5-2L daily unless otherwise advised',
    ),
)

WOUND_HEALING_DIAGNOSES = ('burn', 'wound', 'surgery')


def harmonize_mdt_medications(
    medications_by_specialty: Dict[str, Sequence[DischargeMedication]],
) -> MedicationHarmonization:
    """
    Merge discharge medication lists from several specialties

    Medications are de-duplicated by lower-cased name; when a duplicate is
    found the entry with the longer instructions is kept. Known interaction
    pairs are flagged by substring match on the merged names.

    Args:
        medications_by_specialty: Specialty name -> medications it prescribed

    Returns:
        MedicationHarmonization with merged list, duplicates, interactions and
        recommendations
    """
    seen: Dict[str, DischargeMedication] = {}
    duplicates = []

    for specialty, medications in medications_by_specialty.items():
        for med in medications:
            med = med.model_copy(update={'prescribing_specialty': specialty, 'is_mdt_harmonized': True})
            key = med.medication.lower()
            existing = seen.get(key)
            if existing is None:
                seen[key] = med
                continue
            duplicates.append(
                f"{med.medication} prescribed by {specialty} and {existing.prescribing_specialty}"
            )
            if len(med.instructions or '') > len(existing.instructions or ''):
                seen[key] = med

    names = list(seen)
    interactions = [
        f"Potential interaction: {first} and {second} - review required"
        for first, second in INTERACTION_PAIRS
        if any(first in name for name in names) and any(second in name for name in names)
    ]

    recommendations = []
    if duplicates:
        recommendations.append('Duplicate medications detected - please review and consolidate')
    if interactions:
        recommendations.append('Drug interactions detected - consider dose adjustments or alternatives')
    if len(seen) > POLYPHARMACY_THRESHOLD:
        recommendations.append('Multiple medications prescribed - ensure patient understands medication schedule')

    if duplicates or interactions:
        logger.info(f"MDT harmonisation: {len(duplicates)} duplicate(s), {len(interactions)} interaction(s)")

    return MedicationHarmonization(
        harmonized_medications=list(seen.values()),
        duplicates=duplicates,
        interactions=interactions,
        recommendations=recommendations,
    )


def _day_meals(day: int) -> DayMeals:
    protein = PROTEINS[day % len(PROTEINS)]
    grain = GRAINS[day % len(GRAINS)]
    lunch_veg = VEGETABLES[day % len(VEGETABLES)]
    soup_veg = VEGETABLES[(day + 2) % len(VEGETABLES)]
    even = day % 2 == 0

    return DayMeals(
        breakfast=(f"Whole grain {grain} with boiled egg and fresh vegetables" if even
                   else 'Oatmeal porridge with fruits, nuts and honey'),
        mid_morning_snack='Fresh seasonal fruit with herbal tea' if even else 'Vegetable sticks with hummus',
        lunch=f"{protein[0].upper()}{protein[1:]} with {grain} and steamed {lunch_veg}",
        afternoon_snack='Low-fat yogurt with fruits' if even else 'Handful of mixed nuts and seeds',
        dinner=f"Light {soup_veg} soup with {'grilled chicken strips' if even else 'fish fillet'} and salad",
        notes=f"Day {day + 1}: Remember to take medications as prescribed",
    )


def generate_7_day_meal_plan(comorbidities: Iterable[str], diagnosis: str) -> MealPlan:
    """
    Build a 7-day meal plan

    Comorbidities match by exact (case-insensitive) name; the diagnosis matches
    by substring. Meals rotate through fixed protein, grain and vegetable lists.
    """
    conditions = {c.lower() for c in comorbidities}
    diagnosis_lower = diagnosis.lower()

    considerations: List[str] = []
    avoid: List[str] = []
    hydration = DEFAULT_HYDRATION

    for names, notes, foods, hydration_override in CONDITION_DIETS:
        if conditions.intersection(names):
            considerations.extend(notes)
            avoid.extend(foods)
            if hydration_override:
                hydration = hydration_override

    if any(term in diagnosis_lower for term in WOUND_HEALING_DIAGNOSES):
        considerations.extend([
            'High protein diet for wound healing',
            'Vitamin C and Zinc rich foods',
            'Adequate calorie intake',
        ])

    days = {f"day{i + 1}": _day_meals(i) for i in range(7)}
    return MealPlan(
        **days,
        special_considerations=considerations,
        foods_to_avoid=avoid,
        hydration_goals=hydration,
    )


def admission_status_after_discharge(discharge_type: DischargeType) -> AdmissionStatus:
    """Status an admission takes when its discharge is recorded."""
    if discharge_type == DischargeType.DECEASED:
        return AdmissionStatus.DECEASED
    if discharge_type == DischargeType.TRANSFER:
        return AdmissionStatus.TRANSFERRED
    return AdmissionStatus.DISCHARGED


def calculate_length_of_stay(admission_date: date, discharge_date: date) -> int:
    """Whole days between admission and discharge."""
    days = (discharge_date - admission_date).days
    if days < 0:
        raise ValueError("discharge_date is before admission_date")
    return days


def compute_admission_statistics(
    admissions: Sequence[Admission],
    discharges: Sequence[Discharge],
    today: Optional[date] = None,
) -> AdmissionStatistics:
    """
    Summarise ward activity

    Args:
        admissions: All admissions on record
        discharges: All discharges on record
        today: Reference date for the "this month" counts; defaults to today

    Returns:
        AdmissionStatistics; mean length of stay is rounded to 1 dp
    """
    today = today or date.today()
    first_of_month = today.replace(day=1)
    active = [a for a in admissions if a.status == AdmissionStatus.ACTIVE]

    by_ward: Dict[str, int] = {}
    for admission in active:
        by_ward[admission.ward_location] = by_ward.get(admission.ward_location, 0) + 1

    recorded_types = [t for t in DischargeType if t != DischargeType.NOT_READY]

    average_stay = 0.0
    if discharges:
        total_days = sum(d.length_of_stay_days for d in discharges)
        average_stay = round_half_up(total_days / len(discharges), 1)

    return AdmissionStatistics(
        total_admissions=len(admissions),
        active_admissions=len(active),
        admissions_this_month=sum(1 for a in admissions if a.admission_date >= first_of_month),
        discharges_this_month=sum(1 for d in discharges if d.discharge_date >= first_of_month),
        average_length_of_stay=average_stay,
        by_route={route.value: sum(1 for a in admissions if a.route_of_admission == route) for route in AdmissionRoute},
        by_ward=by_ward,
        by_discharge_type={t.value: sum(1 for d in discharges if d.discharge_type == t) for t in recorded_types},
    )
