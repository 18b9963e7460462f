#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Diabetic Foot Scoring Systems

This module implements the component scores that make up the diabetic foot
limb salvage assessment: ulcer classifications (Wagner, University of Texas,
WIfI, SINBAD), systemic risk (comorbidities, renal function, sepsis),
vascular studies (arterial and venous Doppler), osteomyelitis and patient
demographics.

Every primitive is a pure function from an input record to a result record
that carries the input plus the derived fields. Each component score is a
fixed weighted sum or lookup; categorical labels come from ordered,
lower-bound-inclusive bands evaluated top-down.
"""

import logging
from typing import Dict, Tuple

from surgiscore.core.models import (
    AmbulatoryStatus,
    AmputationRisk,
    ArterialDopplerFindings,
    ArterialDopplerInput,
    BloodSugarControl,
    ComorbidityInput,
    Comorbidities,
    Gender,
    MRIFinding,
    OsteomyelitisAssessment,
    OsteomyelitisInput,
    OsteomyelitisLikelihood,
    PatientDemographics,
    ProcedureResult,
    PulseStatus,
    RenalInput,
    RenalStatus,
    RiskLevel,
    SepsisAssessment,
    SepsisInput,
    SepsisLikelihood,
    SINBADInput,
    SINBADScore,
    SmokingStatus,
    StenosisSeverity,
    TexasClassification,
    TexasInput,
    TexasStage,
    VenousDopplerFindings,
    VenousDopplerInput,
    WagnerGrade,
    WagnerInput,
    WaveformType,
    WIfIClassification,
    WIfIInput,
    XrayFinding,
)
from surgiscore.core.scoring.utils import input_fields, normalize_to_band, round_half_up

logger = logging.getLogger(__name__)

__all__ = [
    'WAGNER_GRADES',
    'TEXAS_GRADES',
    'TEXAS_STAGES',
    'calculate_wagner_score',
    'calculate_texas_score',
    'calculate_wifi_score',
    'calculate_sinbad_score',
    'calculate_comorbidity_score',
    'calculate_renal_score',
    'calculate_sepsis_score',
    'calculate_arterial_score',
    'calculate_venous_score',
    'calculate_osteomyelitis_score',
    'calculate_demographics_score',
]

# Wagner grade -> (description, score)
WAGNER_GRADES: Dict[int, Tuple[str, int]] = {
    0: ("Pre-ulcerative lesion, healed ulcer, or presence of bony deformity", 0),
    1: ("Superficial ulcer without subcutaneous tissue involvement", 5),
    2: ("Penetrating ulcer through subcutaneous tissue, may expose bone, tendon, ligament, or joint", 10),
    3: ("Osteitis, abscess, or osteomyelitis", 20),
    4: ("Gangrene of forefoot or heel", 30),
    5: ("Gangrene of entire foot", 50),
}

# Texas grade -> (description, base score)
TEXAS_GRADES: Dict[int, Tuple[str, int]] = {
    0: ("Pre or post-ulcerative site, completely epithelialized", 0),
    1: ("Superficial ulcer not involving tendon, capsule, or bone", 5),
    2: ("Ulcer penetrating to tendon or capsule", 10),
    3: ("Ulcer penetrating to bone or joint", 15),
}

# Texas stage -> (description, multiplier)
TEXAS_STAGES: Dict[TexasStage, Tuple[str, float]] = {
    TexasStage.A: ("No infection or ischemia", 1.0),
    TexasStage.B: ("Infection present", 1.5),
    TexasStage.C: ("Ischemia present", 2.0),
    TexasStage.D: ("Infection AND ischemia present", 3.0),
}

# WIfI combined score upper bound -> (clinical stage, amputation risk)
WIFI_STAGE_BANDS = (
    (2, (1, AmputationRisk.VERY_LOW)),
    (4, (2, AmputationRisk.LOW)),
    (6, (3, AmputationRisk.MODERATE)),
    (8, (4, AmputationRisk.HIGH)),
)

SINBAD_RISK_BANDS = (
    (2, RiskLevel.LOW),
    (4, RiskLevel.MODERATE),
)

# Comorbidity flag -> points
COMORBIDITY_POINTS = (
    ('dialysis', 15),
    ('congestive_heart_failure', 10),
    ('coronary_artery_disease', 8),
    ('cerebrovascular_disease', 8),
    ('peripheral_vascular_disease', 10),
    ('previous_amputation', 15),
    ('malignancy', 10),
    ('hiv_aids', 8),
    ('hypertension', 3),
    ('immunosuppression', 8),
    ('malnutrition', 8),
    ('anemia', 5),
    ('retinopathy', 3),
    ('neuropathy', 5),
    ('obesity', 3),
)

BLOOD_SUGAR_CONTROL_POINTS = {
    BloodSugarControl.POOR: 10,
    BloodSugarControl.MODERATE: 5,
    BloodSugarControl.GOOD: 0,
}

# eGFR lower bound -> (CKD stage, points); evaluated top-down
CKD_STAGES = (
    (90, 1, 0),
    (60, 2, 5),
    (30, 3, 15),
    (15, 4, 25),
)

# ABI upper bound (exclusive) -> (points, interpretation)
ABI_BANDS = (
    (0.4, (40, "Severe arterial insufficiency - critical limb ischemia")),
    (0.6, (25, "Moderate-severe arterial insufficiency")),
    (0.8, (15, "Moderate arterial insufficiency")),
    (0.9, (5, "Mild arterial insufficiency")),
)
INCOMPRESSIBLE_ABI = 1.3

WAVEFORM_POINTS = {
    WaveformType.ABSENT: 30,
    WaveformType.MONOPHASIC: 20,
    WaveformType.BIPHASIC: 10,
    WaveformType.TRIPHASIC: 0,
}

PULSE_POINTS = {
    PulseStatus.ABSENT: 10,
    PulseStatus.REDUCED: 5,
    PulseStatus.NORMAL: 0,
}

STENOSIS_POINTS = {
    StenosisSeverity.OCCLUSION: 25,
    StenosisSeverity.SEVERE: 15,
    StenosisSeverity.MODERATE: 10,
    StenosisSeverity.MILD: 5,
}

VENOUS_POINTS = (
    ('dvt_present', 20),
    ('chronic_venous_insufficiency', 10),
    ('venous_reflux', 5),
    ('varicose_veins', 3),
    ('post_phlebitic_syndrome', 15),
)


def calculate_wagner_score(wagner: WagnerInput) -> WagnerGrade:
    """Look up the Wagner grade description and score."""
    description, score = WAGNER_GRADES[wagner.grade]
    return WagnerGrade(grade=wagner.grade, description=description, score=score)


def calculate_texas_score(texas: TexasInput) -> TexasClassification:
    """
    Calculate the University of Texas classification score

    score = round(grade base score x stage multiplier), halves rounding up.
    """
    grade_description, base_score = TEXAS_GRADES[texas.grade]
    stage_description, multiplier = TEXAS_STAGES[texas.stage]
    score = round_half_up(base_score * multiplier)
    stage = texas.stage.value

    return TexasClassification(
        grade=texas.grade,
        stage=texas.stage,
        description=f"Grade {texas.grade}{stage}: {grade_description} with {stage_description.lower()}",
        score=score,
    )


def calculate_wifi_score(wifi: WIfIInput) -> WIfIClassification:
    """
    Calculate the WIfI (Wound, Ischemia, foot Infection) clinical stage

    The combined grade (0-9) sets the clinical stage and amputation risk.
    Revascularization benefit follows the stage, stepping up one level for
    stages 2 and 3 when ischemia grade is 2 or more.

    Returns:
        WIfIClassification with score = combined grade x 5
    """
    combined = wifi.wound + wifi.ischemia + wifi.foot_infection
    stage, risk = normalize_to_band(combined, WIFI_STAGE_BANDS, (5, AmputationRisk.HIGH), inclusive=True)

    ischemic = wifi.ischemia >= 2
    if stage == 1:
        benefit = RiskLevel.LOW
    elif stage == 2:
        benefit = RiskLevel.MODERATE if ischemic else RiskLevel.LOW
    elif stage == 3:
        benefit = RiskLevel.HIGH if ischemic else RiskLevel.MODERATE
    else:
        benefit = RiskLevel.HIGH

    return WIfIClassification(
        **input_fields(wifi, WIfIInput),
        clinical_stage=stage,
        amputation_risk=risk,
        revascularization_benefit=benefit,
        score=combined * 5,
    )


def calculate_sinbad_score(sinbad: SINBADInput) -> SINBADScore:
    """Sum the six SINBAD items and band the total into low/moderate/high."""
    total = (sinbad.site + sinbad.ischemia + sinbad.neuropathy
             + sinbad.bacterial_infection + sinbad.area + sinbad.depth)
    risk = normalize_to_band(total, SINBAD_RISK_BANDS, RiskLevel.HIGH, inclusive=True)
    return SINBADScore(**input_fields(sinbad, SINBADInput), score=total, risk_category=risk)


def calculate_comorbidity_score(comorbidities: ComorbidityInput) -> Comorbidities:
    """
    Calculate the comorbidity burden score

    Args:
        comorbidities: Comorbidity flags, HbA1c and recent glycaemic control

    Returns:
        Comorbidities record with the weighted score
    """
    score = 0
    for flag, points in COMORBIDITY_POINTS:
        if getattr(comorbidities, flag):
            score += points

    # CKD only counts when not already scored as dialysis
    if comorbidities.chronic_kidney_disease and not comorbidities.dialysis:
        score += 5

    if comorbidities.hba1c > 10:
        score += 15
    elif comorbidities.hba1c > 8:
        score += 8
    elif comorbidities.hba1c > 7:
        score += 3

    score += BLOOD_SUGAR_CONTROL_POINTS[comorbidities.recent_blood_sugar_control]

    return Comorbidities(**input_fields(comorbidities, ComorbidityInput), score=score)


def calculate_renal_score(renal: RenalInput) -> RenalStatus:
    """
    Stage CKD by eGFR and score renal risk

    Dialysis dependence adds 20 points, plus 10 for more than 36 months on
    dialysis or 5 for more than 12 months.
    """
    ckd_stage, score = 5, 35
    for lower_bound, stage, points in CKD_STAGES:
        if renal.egfr >= lower_bound:
            ckd_stage, score = stage, points
            break

    if renal.dialysis_dependent:
        score += 20
        vintage = renal.dialysis_vintage or 0
        if vintage > 36:
            score += 10
        elif vintage > 12:
            score += 5

    return RenalStatus(**input_fields(renal, RenalInput), ckd_stage=ckd_stage, score=score)


def calculate_sepsis_score(sepsis: SepsisInput) -> SepsisAssessment:
    """
    Calculate SIRS, qSOFA, sepsis likelihood and the sepsis risk score

    The likelihood is banded from the SIRS and qSOFA counts; the numeric score
    is a separate weighted sum of both counts, local clinical signs and
    laboratory markers. The two outputs are independent.

    Args:
        sepsis: Vital signs, laboratory markers and local signs of infection

    Returns:
        SepsisAssessment with sirs_score, qsofa_score, sepsis_likelihood and score
    """
    sirs = 0
    if sepsis.temperature > 38 or sepsis.temperature < 36:
        sirs += 1
    if sepsis.heart_rate > 90:
        sirs += 1
    if sepsis.respiratory_rate > 20:
        sirs += 1
    if sepsis.wbc > 12 or sepsis.wbc < 4:
        sirs += 1

    qsofa = 0
    if sepsis.altered_mentation:
        qsofa += 1
    if sepsis.systolic_bp < 100:
        qsofa += 1
    if sepsis.respiratory_rate >= 22:
        qsofa += 1

    if sirs >= 2 and qsofa >= 2:
        likelihood = SepsisLikelihood.DEFINITE
    elif sirs >= 2 or qsofa >= 2:
        likelihood = SepsisLikelihood.PROBABLE
    elif sirs == 1 or qsofa == 1:
        likelihood = SepsisLikelihood.POSSIBLE
    else:
        likelihood = SepsisLikelihood.UNLIKELY

    score = sirs * 5 + qsofa * 10

    # Clinical signs; crepitus suggests gas gangrene
    if sepsis.crepitus:
        score += 20
    if sepsis.foul_smell:
        score += 10
    if sepsis.purulent_discharge:
        score += 5
    if sepsis.lymphangitis:
        score += 8
    if sepsis.local_cellulitis:
        score += 5

    if sepsis.crp > 100:
        score += 15
    elif sepsis.crp > 50:
        score += 10
    elif sepsis.crp > 20:
        score += 5

    if sepsis.procalcitonin is not None:
        if sepsis.procalcitonin > 2:
            score += 20
        elif sepsis.procalcitonin > 0.5:
            score += 10

    if sepsis.lactate is not None:
        if sepsis.lactate > 4:
            score += 25
        elif sepsis.lactate > 2:
            score += 15

    logger.debug(f"Sepsis: SIRS={sirs} qSOFA={qsofa} likelihood={likelihood.value} score={score}")

    return SepsisAssessment(
        **input_fields(sepsis, SepsisInput),
        sirs_score=sirs,
        qsofa_score=qsofa,
        sepsis_likelihood=likelihood,
        score=score,
    )


def calculate_arterial_score(arterial: ArterialDopplerInput) -> ArterialDopplerFindings:
    """
    Score arterial Doppler findings

    The interpretation reflects the affected-side ABI band only. The score
    accumulates across every criterion (ABI band, waveform, pedal pulses,
    stenosis, calcification, toe pressure), so two studies with the same
    interpretation can score very differently.

    Args:
        arterial: Doppler study findings

    Returns:
        ArterialDopplerFindings with score and interpretation
    """
    abi = arterial.affected_side_abi
    if abi > INCOMPRESSIBLE_ABI:
        abi_points = 20
        interpretation = "Incompressible vessels - unreliable ABI, consider toe pressures"
    else:
        abi_points, interpretation = normalize_to_band(
            abi, ABI_BANDS, (0, "Normal arterial circulation")
        )

    score = abi_points
    score += WAVEFORM_POINTS[arterial.waveform_type]

    # Peroneal pulse is recorded but not scored
    score += PULSE_POINTS[arterial.dorsalis_pedis]
    score += PULSE_POINTS[arterial.posterior_tibial]

    if arterial.stenosis_present and arterial.stenosis_severity is not None:
        score += STENOSIS_POINTS[arterial.stenosis_severity]

    if arterial.vessel_calcification:
        score += 10
    if arterial.incompressible_vessels:
        score += 15

    if arterial.toe_pressure is not None:
        if arterial.toe_pressure < 30:
            score += 30
        elif arterial.toe_pressure < 50:
            score += 15
        elif arterial.toe_pressure < 70:
            score += 5

    return ArterialDopplerFindings(
        **input_fields(arterial, ArterialDopplerInput),
        score=score,
        interpretation=interpretation,
    )


def calculate_venous_score(venous: VenousDopplerInput) -> VenousDopplerFindings:
    score = sum(points for flag, points in VENOUS_POINTS if getattr(venous, flag))
    score += venous.edema_grade * 3
    return VenousDopplerFindings(**input_fields(venous, VenousDopplerInput), score=score)


def calculate_osteomyelitis_score(osteo: OsteomyelitisInput) -> OsteomyelitisAssessment:
    """
    Score the probability of diabetic foot osteomyelitis

    Likelihood starts at unlikely and is raised to probable by a positive
    probe-to-bone test, visible bone, a definite X-ray or a positive MRI. Bone
    biopsy overrides everything: positive confirms, negative resets to
    unlikely.
    """
    score = 0
    likelihood = OsteomyelitisLikelihood.UNLIKELY

    if osteo.probe_to_bone:
        score += 25
        likelihood = OsteomyelitisLikelihood.PROBABLE
    if osteo.visible_bone:
        score += 30
        likelihood = OsteomyelitisLikelihood.PROBABLE
    if osteo.sausage_toe:
        score += 15

    if osteo.xray_findings == XrayFinding.DEFINITE:
        score += 30
        likelihood = OsteomyelitisLikelihood.PROBABLE
    elif osteo.xray_findings == XrayFinding.SUSPICIOUS:
        score += 15

    if osteo.mri_finding == MRIFinding.POSITIVE:
        score += 40
        likelihood = OsteomyelitisLikelihood.PROBABLE
    elif osteo.mri_finding == MRIFinding.SUSPICIOUS:
        score += 20

    if osteo.bone_scintigraphy_result == ProcedureResult.POSITIVE:
        score += 15

    # Biopsy is the gold standard
    if osteo.bone_biopsy_result == ProcedureResult.POSITIVE:
        score += 50
        likelihood = OsteomyelitisLikelihood.CONFIRMED
    elif osteo.bone_biopsy_result == ProcedureResult.NEGATIVE:
        likelihood = OsteomyelitisLikelihood.UNLIKELY

    if osteo.esr:
        if osteo.esr > 70:
            score += 15
        elif osteo.esr > 40:
            score += 10

    if osteo.crp and osteo.crp > 50:
        score += 10

    if osteo.ulcer_duration > 12:
        score += 15
    elif osteo.ulcer_duration > 6:
        score += 10
    elif osteo.ulcer_duration > 4:
        score += 5

    if osteo.previous_antibiotic_courses > 2:
        score += 10

    return OsteomyelitisAssessment(
        **input_fields(osteo, OsteomyelitisInput),
        osteomyelitis_likelihood=likelihood,
        score=score,
    )


def calculate_demographics_score(demographics: PatientDemographics) -> int:
    """
    Calculate the demographic risk sub-score

    Args:
        demographics: Age, sex, diabetes duration, smoking and ambulatory status

    Returns:
        Integer sub-score (age band + male sex + duration band + smoking + mobility)
    """
    score = 0

    if demographics.age > 80:
        score += 20
    elif demographics.age > 70:
        score += 15
    elif demographics.age > 60:
        score += 10
    elif demographics.age > 50:
        score += 5

    if demographics.gender == Gender.MALE:
        score += 3

    if demographics.diabetes_duration > 20:
        score += 15
    elif demographics.diabetes_duration > 10:
        score += 10
    elif demographics.diabetes_duration > 5:
        score += 5

    if demographics.smoking_status == SmokingStatus.CURRENT:
        score += 20
    elif demographics.smoking_status == SmokingStatus.FORMER:
        score += 10

    if demographics.ambulatory_status == AmbulatoryStatus.NON_AMBULATORY:
        score += 20
    elif demographics.ambulatory_status == AmbulatoryStatus.LIMITED:
        score += 10

    return score
