"""
Plain-text clinical reports for limb salvage and burn assessments.
"""

import logging
from typing import List, Optional

from surgiscore.core.display import get_intervention_display, get_risk_category_display
from surgiscore.core.models import (
    BurnSeverity,
    DiabeticFootAssessment,
    NutritionTargets,
    ResuscitationPlan,
)
from surgiscore.core.scoring.diabetic_foot import calculate_demographics_score
from surgiscore.core.decision.limb_salvage import calculate_total_score, generate_recommendations

logger = logging.getLogger(__name__)

RULE = "=" * 50
SUBRULE = "-" * 30

# (label, attribute) for the component breakdown
COMPONENT_LABELS = (
    ('Wagner Grade', 'wagner_grade'),
    ('Texas Classification', 'texas_classification'),
    ('WIfI Classification', 'wifi_classification'),
    ('Comorbidities', 'comorbidities'),
    ('Renal Status', 'renal_status'),
    ('Sepsis Assessment', 'sepsis_assessment'),
    ('Arterial Doppler', 'arterial_doppler'),
    ('Venous Doppler', 'venous_doppler'),
    ('Osteomyelitis', 'osteomyelitis'),
)


def _section(title: str, items) -> List[str]:
    return [title, SUBRULE, *[f"  • {item}" for item in items], ""]


def generate_limb_salvage_report(assessment: DiabeticFootAssessment) -> str:
    """
    Generate the limb salvage assessment report

    Scores and recommendations are recomputed from the assessment components,
    so the report never shows stale totals. Components not yet assessed are
    listed as such rather than as zero.
    """
    score = calculate_total_score(assessment)
    recommendation = generate_recommendations(assessment)
    risk = get_risk_category_display(score.risk_category)
    intervention = get_intervention_display(recommendation.recommended_intervention)

    lines = ["DIABETIC FOOT LIMB SALVAGE ASSESSMENT", RULE, ""]
    lines.append(f"Assessment ID: {assessment.id}")
    lines.append(f"Patient ID: {assessment.patient_id}")
    lines.append(f"Assessment Date: {assessment.assessment_date.strftime('%d %B %Y')}")
    lines.append(f"Assessed By: {assessment.assessed_by or 'N/A'}")
    lines.append("")

    lines += ["COMPONENT SCORES", SUBRULE]
    for label, attr in COMPONENT_LABELS:
        component = getattr(assessment, attr)
        lines.append(f"{label}: {'Not assessed' if component is None else component.score}")
    if assessment.demographics is not None:
        lines.append(f"Demographics: {calculate_demographics_score(assessment.demographics)}")
    else:
        lines.append("Demographics: Not assessed")
    if assessment.sinbad_score is not None:
        lines.append(
            f"SINBAD (not in total): {assessment.sinbad_score.score}/6 "
            f"({assessment.sinbad_score.risk_category.value})"
        )
    if assessment.arterial_doppler is not None:
        lines.append(f"Arterial interpretation: {assessment.arterial_doppler.interpretation}")
    lines.append("")

    lines.append(f"TOTAL SCORE: {score.total_score}")
    lines.append(f"RISK CATEGORY: {risk['label']}")
    lines.append(f"LIMB SALVAGE PROBABILITY: {score.limb_salvage_probability}%")
    lines.append(f"RECOMMENDED INTERVENTION: {intervention['label']}")
    lines.append(f"  {intervention['description']}")
    lines.append("")

    lines += ["RECOMMENDATIONS", SUBRULE]
    for idx, text in enumerate(recommendation.detailed_recommendations, start=1):
        lines.append(f"{idx}. {text}")
    lines.append("")

    plan = recommendation.monitoring_plan
    lines += ["MONITORING PLAN", SUBRULE, f"Follow-up: {plan.follow_up_frequency}", ""]
    lines += _section("Required Tests", plan.required_tests)
    lines += _section("Wound Care", plan.wound_care_protocol)
    lines += _section("Offloading", plan.offloading_recommendations)
    lines += _section("Nutrition", plan.nutritional_support)
    lines += _section("Glycemic Control", plan.glycemic_control)
    if plan.antibiotic_therapy:
        lines += ["Antibiotic Therapy", SUBRULE, plan.antibiotic_therapy, ""]

    consults = [
        name for name, needed in (
            ('Vascular surgery', plan.vascular_consult),
            ('Infectious disease', plan.infectious_disease_consult),
            ('Nephrology', plan.nephrology_consult),
        ) if needed
    ]
    lines.append(f"Consults: {', '.join(consults) if consults else 'None'}")
    lines.append("")
    lines += _section("Rehabilitation", plan.rehabilitation_plan)

    return "\n".join(lines)


def generate_burn_summary(
    severity: BurnSeverity,
    resuscitation: Optional[ResuscitationPlan] = None,
    nutrition: Optional[NutritionTargets] = None,
) -> str:
    """Generate a burn severity summary with optional fluid and nutrition plans."""
    lines = ["BURN ASSESSMENT SUMMARY", RULE, ""]
    lines.append(f"TBSA: {severity.tbsa:g}%")
    lines.append(f"Baux Score: {severity.baux_score:g}")
    lines.append(f"Revised Baux Score: {severity.revised_baux_score:g}")
    lines.append(
        f"Predicted Mortality: {severity.baux_interpretation.mortality} "
        f"({severity.baux_interpretation.prognosis})"
    )
    lines.append(f"ABSI: {severity.absi.total_score} (mortality risk {severity.absi.mortality_risk})")
    lines.append("")

    lines += ["DISPOSITION", SUBRULE, severity.disposition.disposition.value.replace('_', ' ').upper()]
    lines += [f"  • {reason}" for reason in severity.disposition.reasons]
    lines.append("")

    if resuscitation is not None:
        lines += ["FLUID RESUSCITATION", SUBRULE]
        lines.append(f"Protocol: {resuscitation.protocol.value.replace('_', ' ').title()}")
        lines.append(f"Fluid: {resuscitation.fluid_type.value.replace('_', ' ').title()}")
        lines.append(f"Total 24h: {resuscitation.total_volume_24h} mL")
        lines.append(
            f"First 8h: {resuscitation.first_half_volume} mL "
            f"(until {resuscitation.first_half_end_time.strftime('%d/%m/%Y %H:%M')})"
        )
        lines.append(f"Next 16h: {resuscitation.second_half_volume} mL")
        lines.append(f"Current Rate: {resuscitation.current_rate} mL/hr")
        target = resuscitation.urine_output_target
        lines.append(f"Urine Output Target: {target.min:g}-{target.max:g} mL/kg/hr")
        lines.append("")

    if nutrition is not None:
        lines += ["NUTRITION", SUBRULE]
        lines.append(f"Calories: {nutrition.calories_per_day} kcal/day ({nutrition.formula})")
        lines.append(f"Protein: {nutrition.protein_per_day:g} g/day")
        lines.append("")

    return "\n".join(lines)
