#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Discharge Documents

Plain-text discharge summary, medical report of fitness for discharge and
patient discharge instructions.
"""

import logging
from datetime import date
from typing import List, Optional

from surgiscore.core.models import Admission, Discharge, WHODischargeScore
from surgiscore.core.scoring.discharge import WHO_MAX_SCORE, get_field_label

logger = logging.getLogger(__name__)

RULE = "=" * 50
SUBRULE = "-" * 30

DEFAULT_WARNING_SIGNS = (
    'Fever above 38°C (100.4°F)',
    'Increasing pain not controlled by medications',
    'Wound redness, swelling, or discharge',
    'Difficulty breathing',
    'Chest pain',
    'Persistent nausea or vomiting',
    'Confusion or altered consciousness',
)

EMERGENCY_CONTACT = (
    "For emergencies, contact the hospital at +234-XXX-XXX-XXXX\n"
    "or visit the nearest emergency department.\n"
)

# Report sections: (heading, [(label, WHO item)])
FITNESS_SECTIONS = (
    ('Clinical Stability', (
        ('Vital Signs', 'vital_signs_stable'),
        ('Pain Control', 'pain_controlled'),
        ('Oral Intake', 'oral_intake_adequate'),
        ('Mobility', 'mobility_status'),
        ('Wound Status', 'wound_healing_status'),
    )),
    ('Functional Readiness', (
        ('Self-Care', 'self_care_ability'),
        ('Medication Understanding', 'medication_understanding'),
        ('Follow-up Arranged', 'follow_up_arranged'),
    )),
    ('Social Support', (
        ('Caregiver Available', 'caregiver_available'),
        ('Transport', 'transport_arranged'),
        ('Home Environment', 'home_environment_safe'),
    )),
)


def format_long_date(value: date) -> str:
    return value.strftime('%d %B %Y')


def format_enum_label(value) -> str:
    """'against_medical_advice' -> 'AGAINST MEDICAL ADVICE'"""
    return str(getattr(value, 'value', value)).replace('_', ' ').upper()


def _or_na(value) -> str:
    return 'N/A' if value is None or value == '' else str(value)


def _bullets(items) -> List[str]:
    return [f"  • {item}" for item in items]


def generate_discharge_summary(discharge: Discharge, admission: Admission) -> str:
    """
    Generate the plain-text discharge summary

    Args:
        discharge: The discharge record
        admission: The admission it closes (ward, consultant)

    Returns:
        Summary text
    """
    lines = ["DISCHARGE SUMMARY", RULE, ""]

    lines += ["PATIENT INFORMATION", SUBRULE]
    lines.append(f"Name: {discharge.patient_name}")
    lines.append(f"Hospital Number: {discharge.hospital_number}")
    lines.append(f"Age/Gender: {_or_na(discharge.age)} years / {_or_na(discharge.gender)}")
    lines.append("")

    lines += ["ADMISSION DETAILS", SUBRULE]
    lines.append(f"Date of Admission: {format_long_date(discharge.admission_date)}")
    lines.append(f"Date of Discharge: {format_long_date(discharge.discharge_date)}")
    lines.append(f"Length of Stay: {discharge.length_of_stay_days} day(s)")
    lines.append(f"Ward: {admission.ward_location}")
    lines.append(f"Admitting Consultant: {_or_na(admission.admitting_consultant)}")
    lines.append("")

    lines += ["DIAGNOSES", SUBRULE]
    lines.append(f"Admitting Diagnosis: {discharge.admitting_diagnosis}")
    lines.append(f"Final Diagnosis: {discharge.final_diagnosis}")
    if discharge.secondary_diagnoses:
        lines.append("Secondary Diagnoses:")
        lines += _bullets(discharge.secondary_diagnoses)
    lines.append("")

    if discharge.procedures_performed:
        lines += ["PROCEDURES PERFORMED", SUBRULE]
        lines += _bullets(discharge.procedures_performed)
        lines.append("")

    lines += ["HOSPITAL COURSE", SUBRULE, discharge.hospital_course_summary, ""]

    lines += ["CONDITION AT DISCHARGE", SUBRULE, discharge.condition_at_discharge]
    lines.append(f"Discharge Type: {format_enum_label(discharge.discharge_type)}")
    lines.append(f"WHO Discharge Readiness Score: {discharge.discharge_readiness_score}/{WHO_MAX_SCORE}")
    lines.append("")

    if discharge.medications_on_discharge:
        lines += ["DISCHARGE MEDICATIONS", SUBRULE]
        for idx, med in enumerate(discharge.medications_on_discharge, start=1):
            lines.append(f"{idx}. {med.medication} {med.dosage}")
            lines.append(f"   {med.frequency} for {med.duration}")
            if med.instructions:
                lines.append(f"   Note: {med.instructions}")
        lines.append("")

    if discharge.follow_up_appointments:
        lines += ["FOLLOW-UP APPOINTMENTS", SUBRULE]
        for apt in discharge.follow_up_appointments:
            lines.append(f"  • {apt.date.strftime('%d %b %Y')} - {apt.clinic}")
            lines.append(f"    Purpose: {apt.purpose}")
        lines.append("")

    lines += ["DISCHARGING TEAM", SUBRULE]
    lines.append(f"Doctor: {discharge.discharging_doctor}")
    lines.append(f"Consultant: {_or_na(discharge.discharging_consultant)}")

    return "\n".join(lines) + "\n"


def fitness_conclusion(total_score: int) -> str:
    if total_score >= 27:
        return 'FIT FOR DISCHARGE'
    if total_score >= 20:
        return 'CONDITIONALLY FIT - Discharge on Request'
    return 'NOT MEDICALLY FIT FOR DISCHARGE'


def generate_fitness_for_discharge_report(
    discharge: Discharge,
    who_score: WHODischargeScore,
    report_date: Optional[date] = None,
) -> str:
    """
    Generate the medical report certifying fitness for discharge

    Every WHO item is rendered with its ordinal label.
    """
    report_date = report_date or date.today()

    lines = ["MEDICAL REPORT: FITNESS FOR DISCHARGE", RULE, ""]
    lines.append(
        f"This is to certify that {discharge.patient_name} (Hospital No: {discharge.hospital_number}) "
        f"was admitted on {format_long_date(discharge.admission_date)} "
        f"with a diagnosis of {discharge.final_diagnosis}."
    )
    lines.append("")

    lines += ["DISCHARGE READINESS ASSESSMENT (WHO Guidelines)", "-" * 40]
    lines.append(f"Assessment Date: {_or_na(who_score.assessment_date)}")
    lines.append(f"Assessed By: {who_score.assessed_by}")
    lines.append("")

    for heading, items in FITNESS_SECTIONS:
        lines.append(f"{heading}:")
        for label, field in items:
            lines.append(f"  • {label}: {get_field_label(field, getattr(who_score, field))}")
        lines.append("")

    lines.append(f"TOTAL SCORE: {who_score.total_score}/{WHO_MAX_SCORE}")
    lines.append(f"RECOMMENDATION: {format_enum_label(who_score.recommendation)}")
    lines.append("")

    lines += [RULE, f"CONCLUSION: Patient is {fitness_conclusion(who_score.total_score)}", RULE, ""]

    lines.append(f"Date: {format_long_date(report_date)}")
    lines.append(f"Discharging Doctor: {discharge.discharging_doctor}")
    lines.append(f"Consultant: {_or_na(discharge.discharging_consultant)}")

    return "\n".join(lines) + "\n"


def generate_discharge_instructions(discharge: Discharge) -> str:
    """Generate the patient-facing discharge instructions."""
    lines = ["DISCHARGE INSTRUCTIONS", RULE, ""]
    lines.append(f"Patient: {discharge.patient_name}")
    lines.append(f"Date: {format_long_date(discharge.discharge_date)}")
    lines.append("")

    if discharge.medications_on_discharge:
        lines += ["MEDICATIONS", SUBRULE, "Please take the following medications as prescribed:", ""]
        for idx, med in enumerate(discharge.medications_on_discharge, start=1):
            lines.append(f"{idx}. {med.medication}")
            lines.append(f"   Dose: {med.dosage}")
            lines.append(f"   How often: {med.frequency}")
            lines.append(f"   For how long: {med.duration}")
            if med.instructions:
                lines.append(f"   Special instructions: {med.instructions}")
            lines.append("")

    if discharge.wound_care_instructions:
        lines += ["WOUND CARE", SUBRULE, discharge.wound_care_instructions, ""]

    if discharge.activity_restrictions:
        lines += ["ACTIVITY RESTRICTIONS", SUBRULE]
        lines += _bullets(discharge.activity_restrictions)
        lines.append("")

    lines += ["DIET & LIFESTYLE", SUBRULE]
    if discharge.dietary_recommendations:
        lines += [discharge.dietary_recommendations, ""]
    if discharge.lifestyle_modifications:
        lines.append("Lifestyle Changes:")
        lines += _bullets(discharge.lifestyle_modifications)
        lines.append("")

    meal_plan = discharge.meal_plan_7_day
    if meal_plan is not None:
        lines += ["7-DAY MEAL PLAN SUMMARY", SUBRULE, "Special Considerations:"]
        lines += _bullets(meal_plan.special_considerations)
        lines += ["", "Foods to Avoid:"]
        lines += _bullets(meal_plan.foods_to_avoid)
        lines += ["", f"Hydration: {meal_plan.hydration_goals}", ""]

    lines += ["WARNING SIGNS - SEEK MEDICAL ATTENTION IF:", SUBRULE]
    warning_signs = discharge.warning_signs if discharge.warning_signs is not None else DEFAULT_WARNING_SIGNS
    lines += [f"  ! {sign}" for sign in warning_signs]
    lines.append("")

    if discharge.follow_up_appointments:
        lines += ["FOLLOW-UP APPOINTMENTS", SUBRULE]
        for apt in discharge.follow_up_appointments:
            lines.append(apt.date.strftime('%A, %d %B %Y'))
            lines.append(f"   Clinic: {apt.clinic}")
            lines.append(f"   Purpose: {apt.purpose}")
            if apt.special_instructions:
                lines.append(f"   Note: {apt.special_instructions}")
            lines.append("")

    lines += ["EMERGENCY CONTACT", SUBRULE]
    return "\n".join(lines) + "\n" + EMERGENCY_CONTACT
