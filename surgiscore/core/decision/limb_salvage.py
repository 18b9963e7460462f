"""
Limb salvage decision engine for diabetic foot assessments.

This module aggregates the component scores of a diabetic foot assessment
into a total score and risk category, derives the recommended intervention
and detailed recommendations from an ordered rule list, and builds the
monitoring plan.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from surgiscore.core.models import (
    AssessmentStatus,
    DiabeticFootAssessment,
    LimbSalvageRecommendation,
    LimbSalvageScore,
    MonitoringPlan,
    OsteomyelitisLikelihood,
    RecommendedIntervention,
    RiskCategory,
    RiskLevel,
    SepsisLikelihood,
    WaveformType,
)
from surgiscore.core.scoring.diabetic_foot import calculate_demographics_score
from surgiscore.core.scoring.utils import normalize_to_band

logger = logging.getLogger(__name__)

# Components summed into the total, in order. SINBAD is recorded but not summed.
SCORED_COMPONENTS = (
    'wagner_grade',
    'texas_classification',
    'wifi_classification',
    'comorbidities',
    'renal_status',
    'sepsis_assessment',
    'arterial_doppler',
    'venous_doppler',
    'osteomyelitis',
)

# Total score upper bound (exclusive) -> (category, limb salvage probability %)
RISK_BANDS = (
    (50, (RiskCategory.LOW_RISK_LIMB_SALVAGE_LIKELY, 90)),
    (100, (RiskCategory.MODERATE_RISK_LIMB_SALVAGE_POSSIBLE, 70)),
    (200, (RiskCategory.HIGH_RISK_CONSIDER_AMPUTATION, 40)),
)
CRITICAL_BAND = (RiskCategory.CRITICAL_AMPUTATION_RECOMMENDED, 15)

FOLLOW_UP_FREQUENCY = {
    RiskCategory.CRITICAL_AMPUTATION_RECOMMENDED: 'Daily until stable, then every 2-3 days',
    RiskCategory.HIGH_RISK_CONSIDER_AMPUTATION: 'Every 2-3 days for first 2 weeks, then weekly',
    RiskCategory.MODERATE_RISK_LIMB_SALVAGE_POSSIBLE: 'Weekly for first month, then bi-weekly',
    RiskCategory.LOW_RISK_LIMB_SALVAGE_LIKELY: 'Bi-weekly for first month, then monthly',
}

LIFESTYLE_RECOMMENDATIONS = (
    'Absolute smoking cessation required - counsel on nicotine replacement therapy',
    'Nutritional optimization: Ensure adequate protein intake (1.5g/kg/day) and micronutrients',
    'Blood glucose optimization: Aim for fasting glucose 80-130 mg/dL',
)

ANTIBIOTIC_THERAPY = 'IV antibiotics per ID recommendations - typical duration 4-6 weeks for osteomyelitis'


def calculate_total_score(assessment: DiabeticFootAssessment) -> LimbSalvageScore:
    """
    Sum the present component scores and band the total

    Absent components contribute nothing. Any stored ``total_score`` on the
    assessment is ignored; the total is always recomputed.

    Args:
        assessment: Composite assessment, possibly partial

    Returns:
        LimbSalvageScore with total, risk category and salvage probability
    """
    total = 0
    for name in SCORED_COMPONENTS:
        component = getattr(assessment, name)
        if component is not None:
            total += component.score

    if assessment.demographics is not None:
        total += calculate_demographics_score(assessment.demographics)

    category, probability = normalize_to_band(total, RISK_BANDS, CRITICAL_BAND)
    return LimbSalvageScore(total_score=total, risk_category=category, limb_salvage_probability=probability)


class _RecommendationState:
    """Intervention and accumulated text while the rules are walked."""

    def __init__(self, risk_category: RiskCategory):
        self.risk_category = risk_category
        self.intervention = RecommendedIntervention.CONSERVATIVE_MANAGEMENT
        self.recommendations: List[str] = []

    def add(self, *lines: str) -> None:
        self.recommendations.extend(lines)

    @property
    def conservative(self) -> bool:
        return self.intervention == RecommendedIntervention.CONSERVATIVE_MANAGEMENT


def _wagner(assessment: DiabeticFootAssessment) -> Optional[int]:
    return assessment.wagner_grade.grade if assessment.wagner_grade is not None else None


def _affected_abi(assessment: DiabeticFootAssessment) -> Optional[float]:
    return assessment.arterial_doppler.affected_side_abi if assessment.arterial_doppler is not None else None


def _sepsis_rule(assessment, state):
    sepsis = assessment.sepsis_assessment
    if sepsis is None:
        return
    if not (sepsis.sepsis_likelihood == SepsisLikelihood.DEFINITE or sepsis.crepitus):
        return

    state.add(
        'URGENT: Systemic sepsis detected - requires immediate surgical intervention',
        'Initiate broad-spectrum IV antibiotics immediately (cover gram-positive, gram-negative, and anaerobes)',
        'Consider emergent debridement or amputation based on extent of necrosis',
    )
    grade = _wagner(assessment)
    if grade == 5:
        state.intervention = RecommendedIntervention.ABOVE_KNEE_AMPUTATION
        state.add('Wagner Grade 5 with sepsis: Consider above-knee amputation for life-saving intervention')
    elif grade == 4:
        state.intervention = RecommendedIntervention.BELOW_KNEE_AMPUTATION
        state.add('Wagner Grade 4 with sepsis: Below-knee amputation recommended')


def _gangrene_rule(assessment, state):
    grade = _wagner(assessment)
    if grade == 5:
        state.intervention = RecommendedIntervention.ABOVE_KNEE_AMPUTATION
        state.add(
            'Wagner Grade 5 (extensive gangrene): Above-knee amputation is typically required',
            'Evaluate for vascular disease to determine amputation level healing potential',
        )
    elif grade == 4:
        abi = _affected_abi(assessment)
        # An ABI of 0 counts as "not measured"
        if abi and abi > 0.5 and assessment.arterial_doppler.waveform_type != WaveformType.ABSENT:
            state.intervention = RecommendedIntervention.TRANSMETATARSAL_AMPUTATION
            state.add(
                'Wagner Grade 4 with preserved arterial flow: Consider transmetatarsal amputation',
                'Aggressive wound care and possible revascularization may preserve more limb length',
            )
        else:
            state.intervention = RecommendedIntervention.BELOW_KNEE_AMPUTATION
            state.add('Wagner Grade 4 with poor arterial flow: Below-knee amputation recommended')


def _osteomyelitis_rule(assessment, state):
    osteo = assessment.osteomyelitis
    if osteo is None or osteo.osteomyelitis_likelihood not in (
        OsteomyelitisLikelihood.CONFIRMED,
        OsteomyelitisLikelihood.PROBABLE,
    ):
        return

    state.add(
        'Osteomyelitis confirmed/probable: 6-week course of targeted IV antibiotics required',
        'Consider bone biopsy for culture and sensitivity if not already done',
    )
    grade = _wagner(assessment)
    # Grade 0 does not qualify
    if osteo.probe_to_bone and grade and grade <= 3:
        if state.conservative:
            state.intervention = RecommendedIntervention.RAY_AMPUTATION
        state.add('Probe-to-bone positive: Ray amputation of affected digit(s) may be required')


def _ischemia_rule(assessment, state):
    abi = _affected_abi(assessment)
    if not (abi and abi < 0.5):
        return

    state.add(
        'Critical limb ischemia detected (ABI < 0.5)',
        'Urgent vascular surgery consultation for revascularization assessment',
        'Consider angiography to evaluate revascularization options',
    )
    wifi = assessment.wifi_classification
    if wifi is not None and wifi.revascularization_benefit == RiskLevel.HIGH:
        state.intervention = RecommendedIntervention.REVASCULARIZATION_FIRST
        state.add('WIfI assessment suggests high benefit from revascularization - prioritize arterial reconstruction')


def _renal_rule(assessment, state):
    if assessment.renal_status is None or not assessment.renal_status.dialysis_dependent:
        return
    state.add(
        'Dialysis-dependent patient: Higher surgical risk, delayed healing expected',
        'Consider aggressive revascularization if feasible - dialysis patients have poor outcomes with major amputation',
        'Coordinate timing with dialysis schedule',
        'Monitor for volume overload and electrolyte abnormalities',
    )


def _conservative_rule(assessment, state):
    if state.risk_category == RiskCategory.LOW_RISK_LIMB_SALVAGE_LIKELY and state.conservative:
        state.add(
            'Low-risk assessment: Conservative management with close monitoring appropriate',
            'Implement total contact casting or offloading device',
            'Weekly wound assessment with standardized photography',
            'Optimize glycemic control (target HbA1c < 7%)',
        )


def _wound_care_rule(assessment, state):
    grade = _wagner(assessment)
    if not (grade and grade >= 2):
        return
    if state.conservative:
        state.intervention = RecommendedIntervention.WOUND_CARE_DEBRIDEMENT
    state.add(
        'Serial debridement of necrotic tissue recommended',
        'Consider negative pressure wound therapy (NPWT) for complex wounds',
        'Advanced wound dressings: Consider collagen matrix, growth factors, or bioengineered skin',
    )


def _lifestyle_rule(assessment, state):
    state.add(*LIFESTYLE_RECOMMENDATIONS)


# Evaluation order matters: a later rule may override the intervention set by
# an earlier one, and recommendation text accumulates in this order.
RECOMMENDATION_RULES: Tuple[Callable[[DiabeticFootAssessment, _RecommendationState], None], ...] = (
    _sepsis_rule,
    _gangrene_rule,
    _osteomyelitis_rule,
    _ischemia_rule,
    _renal_rule,
    _conservative_rule,
    _wound_care_rule,
    _lifestyle_rule,
)


def generate_monitoring_plan(assessment: DiabeticFootAssessment, risk_category: RiskCategory) -> MonitoringPlan:
    """
    Build the monitoring plan for an assessed patient

    Follow-up cadence comes from the risk category. Each consult flag and
    protocol addition is an independent gate on one component.

    Args:
        assessment: The composite assessment
        risk_category: Risk category from calculate_total_score

    Returns:
        MonitoringPlan
    """
    required_tests = [
        'Weekly: CBC, CMP, Glucose',
        'Weekly: CRP/ESR (if infection suspected)',
        'Monthly: HbA1c',
        'As needed: Procalcitonin, Lactate, Blood cultures',
    ]
    nephrology_consult = False
    renal = assessment.renal_status
    if renal is not None and renal.ckd_stage >= 3:
        required_tests.append('Weekly: Renal function panel')
        nephrology_consult = True

    wound_care = [
        'Daily wound assessment and dressing changes',
        'Standardized wound photography weekly',
        'Debridement of necrotic tissue as needed',
        'Moist wound healing environment',
    ]
    grade = _wagner(assessment)
    if grade and grade >= 3:
        wound_care.append('Consider NPWT for deep wounds')
        wound_care.append('Surgical debridement in OR if extensive')

    nutrition = [
        'High protein diet: 1.5g/kg/day minimum',
        'Vitamin C: 500mg twice daily',
        'Zinc: 220mg daily',
        'Consider protein supplements if intake inadequate',
    ]
    comorbidities = assessment.comorbidities
    if comorbidities is not None and comorbidities.malnutrition:
        nutrition.append('Nutrition consult for enteral/parenteral support evaluation')

    glycemic = [
        'Blood glucose monitoring 4 times daily',
        'Target fasting glucose: 80-130 mg/dL',
        'Target HbA1c: < 7%',
        'Avoid hypoglycemia (< 70 mg/dL)',
    ]
    if comorbidities is not None and comorbidities.hba1c > 9:
        glycemic.append('Endocrinology consult for intensive insulin management')

    abi = _affected_abi(assessment)
    vascular_consult = bool(abi and abi < 0.7)

    sepsis = assessment.sepsis_assessment
    osteo = assessment.osteomyelitis
    infectious_disease_consult = (
        (sepsis is not None and sepsis.sepsis_likelihood in (SepsisLikelihood.PROBABLE, SepsisLikelihood.DEFINITE))
        or (osteo is not None and osteo.osteomyelitis_likelihood == OsteomyelitisLikelihood.CONFIRMED)
    )

    return MonitoringPlan(
        follow_up_frequency=FOLLOW_UP_FREQUENCY[risk_category],
        required_tests=required_tests,
        wound_care_protocol=wound_care,
        offloading_recommendations=[
            'Total contact cast or removable cast walker',
            'Custom therapeutic footwear after healing',
            'Avoid weight bearing on affected foot',
            'Wheelchair or crutches for mobility',
        ],
        antibiotic_therapy=ANTIBIOTIC_THERAPY if infectious_disease_consult else None,
        nutritional_support=nutrition,
        glycemic_control=glycemic,
        vascular_consult=vascular_consult,
        infectious_disease_consult=infectious_disease_consult,
        nephrology_consult=nephrology_consult,
        rehabilitation_plan=[
            'Physical therapy for mobility and strength',
            'Occupational therapy for ADL modifications',
            'Prosthetic evaluation if amputation performed',
            'Fall prevention education',
        ],
    )


def generate_recommendations(assessment: DiabeticFootAssessment) -> LimbSalvageRecommendation:
    """
    Derive the recommended intervention, recommendations and monitoring plan

    Rules run in the order of RECOMMENDATION_RULES: sepsis, gangrene,
    osteomyelitis, ischemia, dialysis, conservative fallback, wound care and
    lifestyle. The last rule that sets the intervention wins.

    Args:
        assessment: Composite assessment

    Returns:
        LimbSalvageRecommendation
    """
    score = calculate_total_score(assessment)
    state = _RecommendationState(score.risk_category)

    for rule in RECOMMENDATION_RULES:
        rule(assessment, state)

    logger.info(
        f"Assessment {assessment.id}: total {score.total_score} "
        f"({score.risk_category.value}) -> {state.intervention.value}"
    )

    return LimbSalvageRecommendation(
        recommended_intervention=state.intervention,
        detailed_recommendations=state.recommendations,
        monitoring_plan=generate_monitoring_plan(assessment, score.risk_category),
    )


def create_new_assessment(patient_id: str, assessed_by: str, now: Optional[datetime] = None) -> DiabeticFootAssessment:
    """Start a draft assessment with a fresh id and no components."""
    now = now or datetime.now()
    return DiabeticFootAssessment(
        id=str(uuid.uuid4()),
        patient_id=patient_id,
        assessment_date=now,
        assessed_by=assessed_by,
        status=AssessmentStatus.DRAFT,
        created_at=now,
        updated_at=now,
    )


def complete_assessment(assessment: DiabeticFootAssessment, now: Optional[datetime] = None) -> DiabeticFootAssessment:
    """
    Score an assessment and return a completed copy

    The input record is left untouched.
    """
    score = calculate_total_score(assessment)
    recommendation = generate_recommendations(assessment)
    return assessment.model_copy(update={
        'total_score': score.total_score,
        'risk_category': score.risk_category,
        'limb_salvage_probability': score.limb_salvage_probability,
        'recommended_intervention': recommendation.recommended_intervention,
        'detailed_recommendations': recommendation.detailed_recommendations,
        'monitoring_plan': recommendation.monitoring_plan,
        'status': AssessmentStatus.COMPLETED,
        'updated_at': now or datetime.now(),
    })
