"""
Burn management decision support.

This module turns burn calculator outputs and bedside observations into
actions: fluid rate titration against urine output, vital sign and urine
output alerts, the ABA-style disposition ladder and the composite severity
snapshot.
"""

import logging
import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from surgiscore.core.models import (
    AlertSeverity,
    AlertStatus,
    BurnAlert,
    BurnAlertType,
    BurnDepth,
    BurnMechanism,
    BurnSeverity,
    Disposition,
    DispositionRecommendation,
    FluidRateAdjustment,
    FluidRateSuggestion,
    Gender,
    ResuscitationPlan,
    TBSARegion,
    UrineOutput,
    Urgency,
    VitalSign,
)
from surgiscore.core.scoring.burns import (
    ADULT_URINE_OUTPUT_TARGET,
    CHILD_URINE_OUTPUT_TARGET,
    calculate_absi,
    calculate_baux_score,
    calculate_revised_baux_score,
    interpret_baux_score,
)
from surgiscore.core.scoring.utils import require_enum, require_non_negative, require_percent, round_half_up

logger = logging.getLogger(__name__)

BURN_ALERT_THRESHOLDS = {
    "vitals": {
        "hr_high": 120,
        "hr_low": 50,
        "map_low": 65,
        "rr_high": 25,
        "rr_low": 8,
        "spo2_low": 90,
        "temp_high": 38.0,
        "temp_low": 36.0,
    },
    "urine_output": {
        "adult_low": ADULT_URINE_OUTPUT_TARGET.min,
        "adult_high": ADULT_URINE_OUTPUT_TARGET.max,
        "child_low": CHILD_URINE_OUTPUT_TARGET.min,
        "child_high": CHILD_URINE_OUTPUT_TARGET.max,
        "consecutive_hours_for_alert": 2,
    },
    "labs": {
        "hb_low": 7.0,  # g/dL
        "creatinine_rise_aki": 0.3,  # mg/dL in 48h
        "k_high": 5.5,  # mmol/L
        "k_low": 3.5,
        "lactate_high": 2.0,  # mmol/L
        "ck_high": 1000,  # U/L, rhabdomyolysis
    },
}


def suggest_fluid_rate_adjustment(
    current_urine_output: float,
    current_rate: float,
    is_child: bool = False,
) -> FluidRateSuggestion:
    """
    Suggest a fluid rate change from the latest hourly urine output

    Args:
        current_urine_output: Urine output in mL/kg/hr
        current_rate: Current infusion rate in mL/hr
        is_child: Use the paediatric target (1.0-1.5 mL/kg/hr)

    Returns:
        FluidRateSuggestion with new rate, adjustment text and urgency
    """
    require_non_negative('current_urine_output', current_urine_output)
    require_non_negative('current_rate', current_rate)
    target = CHILD_URINE_OUTPUT_TARGET if is_child else ADULT_URINE_OUTPUT_TARGET

    if current_urine_output < target.min * 0.6:
        return FluidRateSuggestion(
            new_rate=round_half_up(current_rate * 1.3),
            adjustment='Increase rate by 30% - severely low UO',
            urgency=Urgency.EMERGENT,
        )
    if current_urine_output < target.min:
        return FluidRateSuggestion(
            new_rate=round_half_up(current_rate * 1.2),
            adjustment='Increase rate by 20% - low UO',
            urgency=Urgency.URGENT,
        )
    if current_urine_output > target.max * 1.5:
        return FluidRateSuggestion(
            new_rate=round_half_up(current_rate * 0.8),
            adjustment='Decrease rate by 20% - risk of fluid overload',
            urgency=Urgency.ROUTINE,
        )
    if current_urine_output > target.max:
        return FluidRateSuggestion(
            new_rate=round_half_up(current_rate * 0.9),
            adjustment='Consider decreasing rate by 10% - high UO',
            urgency=Urgency.ROUTINE,
        )
    return FluidRateSuggestion(
        new_rate=round_half_up(current_rate),
        adjustment='On target - maintain current rate',
        urgency=Urgency.ROUTINE,
    )


def apply_rate_adjustment(
    plan: ResuscitationPlan,
    suggestion: FluidRateSuggestion,
    adjusted_by: str,
    urine_output: Optional[float] = None,
    timestamp: Optional[datetime] = None,
) -> ResuscitationPlan:
    """Return a copy of the plan running at the suggested rate, with the change logged."""
    adjustment = FluidRateAdjustment(
        timestamp=timestamp or datetime.now(),
        previous_rate=plan.current_rate,
        new_rate=suggestion.new_rate,
        reason=suggestion.adjustment,
        adjusted_by=adjusted_by,
        urine_output_trigger=urine_output,
    )
    logger.info(f"Fluid rate {plan.current_rate} -> {suggestion.new_rate} mL/hr ({suggestion.adjustment})")
    return plan.model_copy(update={
        'current_rate': suggestion.new_rate,
        'rate_adjustments': [*plan.rate_adjustments, adjustment],
    })


def _alert(alert_type, severity, message, criteria, action, now):
    return BurnAlert(
        id=str(uuid.uuid4()),
        type=alert_type,
        severity=severity,
        message=message,
        criteria=criteria,
        suggested_action=action,
        created_at=now,
        status=AlertStatus.OPEN,
    )


def generate_vital_alerts(vitals: VitalSign, now: Optional[datetime] = None) -> List[BurnAlert]:
    """
    Check a set of vital signs against the burn unit alert thresholds

    Alerts are returned in a fixed order: tachycardia, hypotension, hypoxia,
    fever, hypothermia.
    """
    now = now or datetime.now()
    limits = BURN_ALERT_THRESHOLDS["vitals"]
    alerts = []

    if vitals.heart_rate > limits["hr_high"]:
        alerts.append(_alert(
            BurnAlertType.TACHYCARDIA, AlertSeverity.WARNING,
            f"Tachycardia: HR {vitals.heart_rate:g} bpm",
            f"HR > {limits['hr_high']} bpm",
            'Assess for pain, hypovolemia, fever, or anxiety. Consider ECG if persistent.',
            now,
        ))

    if vitals.map < limits["map_low"]:
        alerts.append(_alert(
            BurnAlertType.HYPOTENSION, AlertSeverity.CRITICAL,
            f"Hypotension: MAP {vitals.map:g} mmHg",
            f"MAP < {limits['map_low']} mmHg",
            'Increase fluid rate. If not responding, consider vasopressors and ICU transfer.',
            now,
        ))

    if vitals.spo2 < limits["spo2_low"]:
        alerts.append(_alert(
            BurnAlertType.HYPOXIA, AlertSeverity.CRITICAL,
            f"Hypoxia: SpO₂ {vitals.spo2:g}%",
            f"SpO₂ < {limits['spo2_low']}%",
            'Increase O₂, check airway, consider ABG, assess for inhalation injury or ARDS.',
            now,
        ))

    if vitals.temperature > limits["temp_high"]:
        alerts.append(_alert(
            BurnAlertType.FEVER, AlertSeverity.WARNING,
            f"Fever: Temp {vitals.temperature:g}°C",
            f"Temp > {limits['temp_high']:g}°C",
            'Consider sepsis workup: blood cultures, wound inspection, CBC, consider antibiotics.',
            now,
        ))

    if vitals.temperature < limits["temp_low"]:
        alerts.append(_alert(
            BurnAlertType.HYPOTHERMIA, AlertSeverity.WARNING,
            f"Hypothermia: Temp {vitals.temperature:g}°C",
            f"Temp < {limits['temp_low']:g}°C",
            'Warm fluids, warming blankets, increase room temperature, limit wound exposure.',
            now,
        ))

    if alerts:
        logger.warning(f"{len(alerts)} vital sign alert(s): {[a.type.value for a in alerts]}")
    return alerts


def generate_urine_output_alert(
    urine_outputs: Sequence[UrineOutput],
    target_min: float,
    now: Optional[datetime] = None,
) -> Optional[BurnAlert]:
    """
    Alert when the last two hourly urine outputs are both below target

    Args:
        urine_outputs: Hourly outputs in chronological order
        target_min: Lower urine output target in mL/kg/hr
        now: Alert creation time; defaults to now

    Returns:
        A critical alert if the mean of the two is below 60% of target, a
        warning otherwise, or None
    """
    hours = BURN_ALERT_THRESHOLDS["urine_output"]["consecutive_hours_for_alert"]
    recent = list(urine_outputs)[-hours:]
    if len(recent) < hours:
        return None
    if not all(uo.ml_per_kg_per_hr < target_min for uo in recent):
        return None

    average = sum(uo.ml_per_kg_per_hr for uo in recent) / len(recent)
    severity = AlertSeverity.CRITICAL if average < target_min * 0.6 else AlertSeverity.WARNING
    return _alert(
        BurnAlertType.LOW_URINE_OUTPUT, severity,
        f"Low urine output: {average:.2f} mL/kg/hr for {hours} consecutive hours",
        f"UO < {target_min:g} mL/kg/hr for {hours} consecutive hours",
        'Increase crystalloid infusion by 20-30%. Reassess in 1 hour. If no improvement, consider vasopressors/ICU.',
        now or datetime.now(),
    )


def has_full_thickness_burn(regions: Iterable[TBSARegion]) -> bool:
    return any(region.depth == BurnDepth.FULL_THICKNESS for region in regions)


def has_circumferential_burn(regions: Iterable[TBSARegion]) -> bool:
    return any(region.is_circumferential for region in regions)


def determine_disposition(
    tbsa: float,
    has_inhalation_injury: bool,
    has_full_thickness: bool,
    age: float,
    mechanism: BurnMechanism,
    has_circumferential_burn: bool,
) -> DispositionRecommendation:
    """
    Recommend where a burn patient should be managed

    Walks the burn centre referral criteria in order. Inhalation injury always
    sends the patient to ICU; electrical or chemical mechanism and
    circumferential burns escalate an outpatient to the burn centre without
    downgrading an existing escalation.

    Args:
        tbsa: Percent TBSA
        has_inhalation_injury: Inhalation injury present
        has_full_thickness: Any full-thickness burn present
        age: Age in years
        mechanism: Burn mechanism
        has_circumferential_burn: Any circumferential burn present

    Returns:
        DispositionRecommendation with the disposition and the reasons for it
    """
    require_percent('tbsa', tbsa)
    require_non_negative('age', age)
    mechanism = require_enum('mechanism', mechanism, BurnMechanism)

    reasons = []
    disposition = Disposition.OUTPATIENT

    if tbsa >= 10:
        disposition = Disposition.BURN_CENTER
        reasons.append(f"TBSA ≥10% ({tbsa:g}%)")

    if has_full_thickness and tbsa >= 5:
        disposition = Disposition.BURN_CENTER
        reasons.append('Full-thickness burns ≥5% TBSA')

    if has_inhalation_injury:
        disposition = Disposition.ICU
        reasons.append('Inhalation injury')

    if mechanism in (BurnMechanism.ELECTRICAL, BurnMechanism.CHEMICAL):
        if disposition == Disposition.OUTPATIENT:
            disposition = Disposition.BURN_CENTER
        reasons.append(f"{mechanism.value.capitalize()} burn mechanism")

    if has_circumferential_burn:
        if disposition == Disposition.OUTPATIENT:
            disposition = Disposition.BURN_CENTER
        reasons.append('Circumferential burn - escharotomy may be needed')

    if (age < 2 or age > 60) and disposition == Disposition.OUTPATIENT and tbsa >= 5:
        disposition = Disposition.WARD
        reasons.append(f"Age extremes ({age:g} years) with significant burn")

    if disposition == Disposition.OUTPATIENT and tbsa < 5 and not has_full_thickness:
        reasons.append('Minor burn - suitable for outpatient management')
    elif disposition == Disposition.OUTPATIENT and tbsa >= 5:
        disposition = Disposition.WARD
        reasons.append(f"TBSA {tbsa:g}% requires inpatient monitoring")

    return DispositionRecommendation(disposition=disposition, reasons=reasons)


def assess_burn_severity(
    age: float,
    gender: Gender,
    tbsa: float,
    has_full_thickness: bool,
    has_inhalation_injury: bool,
    mechanism: BurnMechanism = BurnMechanism.FLAME,
    has_circumferential_burn: bool = False,
) -> BurnSeverity:
    """Compute Baux, revised Baux, ABSI and disposition for one patient."""
    revised_baux = calculate_revised_baux_score(age, tbsa, has_inhalation_injury)
    severity = BurnSeverity(
        tbsa=tbsa,
        baux_score=calculate_baux_score(age, tbsa),
        revised_baux_score=revised_baux,
        baux_interpretation=interpret_baux_score(revised_baux),
        absi=calculate_absi(age, gender, tbsa, has_full_thickness, has_inhalation_injury),
        disposition=determine_disposition(
            tbsa, has_inhalation_injury, has_full_thickness, age, mechanism, has_circumferential_burn
        ),
    )
    logger.info(
        f"Burn severity: TBSA {tbsa:g}%, revised Baux {revised_baux:g}, "
        f"ABSI {severity.absi.total_score}, disposition {severity.disposition.disposition.value}"
    )
    return severity
