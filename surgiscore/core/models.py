"""
Defines the Pydantic data models used throughout the application.

These models provide validated, immutable records for the clinical scoring
inputs, the score results derived from them, the composite assessments that
aggregate those results, and the plans/recommendations generated from them.

Ordinal fields carry their domain as field constraints, so an out-of-range
value fails at construction with a ``ValidationError`` rather than being
clamped by a scoring function.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClinicalRecord(BaseModel):
    """Base for all clinical records: frozen once constructed."""

    model_config = ConfigDict(frozen=True)


# ================== SHARED ENUMERATIONS ==================


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class RiskLevel(str, Enum):
    """Three-step qualitative level used by SINBAD and revascularization benefit."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


# ================== WHO DISCHARGE READINESS ==================


class DischargeRecommendation(str, Enum):
    FIT_FOR_DISCHARGE = "fit_for_discharge"
    DISCHARGE_ON_REQUEST = "discharge_on_request"
    AGAINST_MEDICAL_ADVICE = "against_medical_advice"
    NOT_READY = "not_ready"


class DischargeType(str, Enum):
    """Discharge classification; NOT_READY is only produced from a readiness score."""

    NORMAL = "normal"
    ON_REQUEST = "on_request"
    AGAINST_MEDICAL_ADVICE = "against_medical_advice"
    TRANSFER = "transfer"
    DECEASED = "deceased"
    NOT_READY = "not_ready"


class WHODischargeAssessment(ClinicalRecord):
    """Inputs to the WHO discharge readiness score (each ordinal 0-3)."""

    id: Optional[str] = None
    admission_id: Optional[str] = Field(None, description="Admission the assessment belongs to.")
    patient_id: Optional[int] = Field(None, description="Patient identifier.")
    assessment_date: Optional[date] = Field(None, description="Date of assessment.")
    assessed_by: str = Field(default="", description="Clinician performing the assessment.")

    # Clinical stability
    vital_signs_stable: int = Field(..., ge=0, le=3, description="0=Unstable .. 3=Stable 48h+")
    pain_controlled: int = Field(..., ge=0, le=3, description="0=Severe .. 3=Minimal/None")
    oral_intake_adequate: int = Field(..., ge=0, le=3, description="0=NPO .. 3=Regular diet")
    mobility_status: int = Field(..., ge=0, le=3, description="0=Bedbound .. 3=Independent")
    wound_healing_status: int = Field(..., ge=0, le=3, description="0=Infected .. 3=Well-healed")

    # Functional readiness
    self_care_ability: int = Field(..., ge=0, le=3, description="0=Dependent .. 3=Independent")
    medication_understanding: int = Field(..., ge=0, le=3, description="0=None .. 3=Good")
    follow_up_arranged: int = Field(..., ge=0, le=3, description="0=No .. 3=Complete")

    # Social support
    caregiver_available: int = Field(..., ge=0, le=3, description="0=None .. 3=Always")
    transport_arranged: int = Field(..., ge=0, le=3, description="0=No .. 3=Confirmed")
    home_environment_safe: int = Field(..., ge=0, le=3, description="0=Unsafe .. 3=Safe")

    # Risk factors (negative points)
    high_readmission_risk: bool = Field(default=False, description="-2 points")
    complex_medical_needs: bool = Field(default=False, description="-2 points")
    language_barrier: bool = Field(default=False, description="-1 point")

    notes: Optional[str] = None


class WHODischargeScore(WHODischargeAssessment):
    """WHO discharge readiness result."""

    total_score: int = Field(..., description="Sum of ordinals minus risk factor points (max 33).")
    recommendation: DischargeRecommendation


# ================== DIABETIC FOOT ==================


class DiabetesType(str, Enum):
    TYPE1 = "type1"
    TYPE2 = "type2"


class SmokingStatus(str, Enum):
    CURRENT = "current"
    FORMER = "former"
    NEVER = "never"


class AmbulatoryStatus(str, Enum):
    AMBULATORY = "ambulatory"
    LIMITED = "limited"
    NON_AMBULATORY = "non-ambulatory"


class PatientDemographics(ClinicalRecord):
    age: float = Field(..., ge=0, description="Age in years.")
    gender: Gender
    diabetes_type: DiabetesType = DiabetesType.TYPE2
    diabetes_duration: float = Field(..., ge=0, description="Years since diagnosis.")
    smoking_status: SmokingStatus = SmokingStatus.NEVER
    ambulatory_status: AmbulatoryStatus = AmbulatoryStatus.AMBULATORY


class WagnerInput(ClinicalRecord):
    grade: int = Field(..., ge=0, le=5, description="Wagner grade 0-5.")


class WagnerGrade(WagnerInput):
    description: str
    score: int


class TexasStage(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class TexasInput(ClinicalRecord):
    grade: int = Field(..., ge=0, le=3, description="University of Texas grade 0-3.")
    stage: TexasStage


class TexasClassification(TexasInput):
    description: str
    score: int


class AmputationRisk(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class WIfIInput(ClinicalRecord):
    wound: int = Field(..., ge=0, le=3)
    ischemia: int = Field(..., ge=0, le=3)
    foot_infection: int = Field(..., ge=0, le=3)


class WIfIClassification(WIfIInput):
    clinical_stage: int = Field(..., ge=1, le=5)
    amputation_risk: AmputationRisk
    revascularization_benefit: RiskLevel
    score: int


class SINBADInput(ClinicalRecord):
    site: int = Field(..., ge=0, le=1, description="1 = midfoot/hindfoot")
    ischemia: int = Field(..., ge=0, le=1)
    neuropathy: int = Field(..., ge=0, le=1)
    bacterial_infection: int = Field(..., ge=0, le=1)
    area: int = Field(..., ge=0, le=1, description="1 = ulcer area >= 1 cm2")
    depth: int = Field(..., ge=0, le=1, description="1 = reaches muscle/tendon or deeper")


class SINBADScore(SINBADInput):
    score: int = Field(..., ge=0, le=6)
    risk_category: RiskLevel


class BloodSugarControl(str, Enum):
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


class ComorbidityInput(ClinicalRecord):
    hypertension: bool = False
    coronary_artery_disease: bool = False
    congestive_heart_failure: bool = False
    cerebrovascular_disease: bool = False
    peripheral_vascular_disease: bool = False
    chronic_kidney_disease: bool = False
    dialysis: bool = False
    retinopathy: bool = False
    neuropathy: bool = False
    previous_amputation: bool = False
    immunosuppression: bool = False
    malnutrition: bool = False
    obesity: bool = False
    anemia: bool = False
    hiv_aids: bool = False
    malignancy: bool = False

    # Metabolic control
    hba1c: float = Field(..., ge=0, description="HbA1c percentage.")
    recent_blood_sugar_control: BloodSugarControl = BloodSugarControl.GOOD


class Comorbidities(ComorbidityInput):
    score: int


class DialysisType(str, Enum):
    HEMODIALYSIS = "hemodialysis"
    PERITONEAL = "peritoneal"


class RenalInput(ClinicalRecord):
    creatinine: float = Field(..., ge=0, description="mg/dL")
    bun: float = Field(..., ge=0, description="mg/dL")
    egfr: float = Field(..., ge=0, description="mL/min/1.73m2")
    dialysis_dependent: bool = False
    dialysis_type: Optional[DialysisType] = None
    dialysis_vintage: Optional[float] = Field(None, ge=0, description="Months on dialysis.")


class RenalStatus(RenalInput):
    ckd_stage: int = Field(..., ge=1, le=5)
    score: int


class SepsisLikelihood(str, Enum):
    UNLIKELY = "unlikely"
    POSSIBLE = "possible"
    PROBABLE = "probable"
    DEFINITE = "definite"


class SepsisInput(ClinicalRecord):
    # SIRS criteria
    temperature: float = Field(..., description="Celsius")
    heart_rate: float = Field(..., ge=0, description="bpm")
    respiratory_rate: float = Field(..., ge=0, description="breaths/min")
    wbc: float = Field(..., ge=0, description="x10^9/L")

    # qSOFA
    altered_mentation: bool = False
    systolic_bp: float = Field(..., ge=0, description="mmHg")

    # Laboratory markers
    crp: float = Field(..., ge=0, description="mg/L")
    procalcitonin: Optional[float] = Field(None, ge=0, description="ng/mL")
    lactate: Optional[float] = Field(None, ge=0, description="mmol/L")

    # Clinical signs
    fever: bool = False
    chills: bool = False
    local_cellulitis: bool = False
    lymphangitis: bool = False
    purulent_discharge: bool = False
    crepitus: bool = False
    foul_smell: bool = False


class SepsisAssessment(SepsisInput):
    sirs_score: int = Field(..., ge=0, le=4)
    qsofa_score: int = Field(..., ge=0, le=3)
    sepsis_likelihood: SepsisLikelihood
    score: int


class WaveformType(str, Enum):
    TRIPHASIC = "triphasic"
    BIPHASIC = "biphasic"
    MONOPHASIC = "monophasic"
    ABSENT = "absent"


class PulseStatus(str, Enum):
    NORMAL = "normal"
    REDUCED = "reduced"
    ABSENT = "absent"


class StenosisSeverity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    OCCLUSION = "occlusion"


class ArterialDopplerInput(ClinicalRecord):
    abi_right: float = Field(..., ge=0)
    abi_left: float = Field(..., ge=0)
    affected_side_abi: float = Field(..., ge=0)

    toe_pressure: Optional[float] = Field(None, ge=0, description="mmHg")
    toe_brachial_index: Optional[float] = Field(None, ge=0)

    waveform_type: WaveformType

    dorsalis_pedis: PulseStatus = PulseStatus.NORMAL
    posterior_tibial: PulseStatus = PulseStatus.NORMAL
    peroneal: PulseStatus = PulseStatus.NORMAL

    stenosis_present: bool = False
    stenosis_location: Optional[str] = None
    stenosis_severity: Optional[StenosisSeverity] = None

    vessel_calcification: bool = False
    incompressible_vessels: bool = False


class ArterialDopplerFindings(ArterialDopplerInput):
    score: int
    interpretation: str = Field(..., description="Derived from the ABI band only.")


class VenousDopplerInput(ClinicalRecord):
    dvt_present: bool = False
    chronic_venous_insufficiency: bool = False
    venous_reflux: bool = False
    varicose_veins: bool = False
    previous_dvt: bool = False
    post_phlebitic_syndrome: bool = False
    edema_present: bool = False
    edema_grade: int = Field(default=0, ge=0, le=3)


class VenousDopplerFindings(VenousDopplerInput):
    score: int


class XrayFinding(str, Enum):
    NORMAL = "normal"
    SUSPICIOUS = "suspicious"
    DEFINITE = "definite"


class MRIFinding(str, Enum):
    NEGATIVE = "negative"
    SUSPICIOUS = "suspicious"
    POSITIVE = "positive"


class ProcedureResult(str, Enum):
    NEGATIVE = "negative"
    POSITIVE = "positive"


class OsteomyelitisLikelihood(str, Enum):
    UNLIKELY = "unlikely"
    POSSIBLE = "possible"
    PROBABLE = "probable"
    CONFIRMED = "confirmed"


class OsteomyelitisInput(ClinicalRecord):
    # Clinical findings
    probe_to_bone: bool = False
    visible_bone: bool = False
    sausage_toe: bool = False

    # Imaging
    xray_findings: XrayFinding = XrayFinding.NORMAL
    mri_performed: bool = False
    mri_finding: Optional[MRIFinding] = None
    bone_scintigraphy_performed: bool = False
    bone_scintigraphy_result: Optional[ProcedureResult] = None

    # Laboratory
    esr: Optional[float] = Field(None, ge=0, description="mm/hr")
    crp: Optional[float] = Field(None, ge=0, description="mg/L")

    # Biopsy
    bone_biopsy_performed: bool = False
    bone_biopsy_result: Optional[ProcedureResult] = None

    ulcer_duration: float = Field(..., ge=0, description="Weeks.")
    previous_antibiotic_courses: int = Field(default=0, ge=0)


class OsteomyelitisAssessment(OsteomyelitisInput):
    osteomyelitis_likelihood: OsteomyelitisLikelihood
    score: int


class RiskCategory(str, Enum):
    LOW_RISK_LIMB_SALVAGE_LIKELY = "low_risk_limb_salvage_likely"
    MODERATE_RISK_LIMB_SALVAGE_POSSIBLE = "moderate_risk_limb_salvage_possible"
    HIGH_RISK_CONSIDER_AMPUTATION = "high_risk_consider_amputation"
    CRITICAL_AMPUTATION_RECOMMENDED = "critical_amputation_recommended"


class RecommendedIntervention(str, Enum):
    CONSERVATIVE_MANAGEMENT = "conservative_management"
    WOUND_CARE_DEBRIDEMENT = "wound_care_debridement"
    REVASCULARIZATION_FIRST = "revascularization_first"
    RAY_AMPUTATION = "ray_amputation"
    TRANSMETATARSAL_AMPUTATION = "transmetatarsal_amputation"
    BELOW_KNEE_AMPUTATION = "below_knee_amputation"
    ABOVE_KNEE_AMPUTATION = "above_knee_amputation"
    PALLIATIVE_CARE = "palliative_care"


class MonitoringPlan(ClinicalRecord):
    follow_up_frequency: str
    required_tests: List[str] = Field(default_factory=list)
    wound_care_protocol: List[str] = Field(default_factory=list)
    offloading_recommendations: List[str] = Field(default_factory=list)
    antibiotic_therapy: Optional[str] = None
    nutritional_support: List[str] = Field(default_factory=list)
    glycemic_control: List[str] = Field(default_factory=list)
    vascular_consult: bool = False
    infectious_disease_consult: bool = False
    nephrology_consult: bool = False
    rehabilitation_plan: List[str] = Field(default_factory=list)


class LimbSalvageScore(ClinicalRecord):
    total_score: int
    risk_category: RiskCategory
    limb_salvage_probability: int = Field(..., description="Percent; fixed per risk category.")


class LimbSalvageRecommendation(ClinicalRecord):
    recommended_intervention: RecommendedIntervention
    detailed_recommendations: List[str] = Field(default_factory=list)
    monitoring_plan: MonitoringPlan


class AssessmentStatus(str, Enum):
    DRAFT = "draft"
    COMPLETED = "completed"
    REVIEWED = "reviewed"


class DiabeticFootAssessment(ClinicalRecord):
    """
    Composite diabetic foot assessment.

    Every component is optional; an absent component is "not yet assessed" and
    contributes nothing to the total, which is always recomputed from the
    components present rather than read from ``total_score``.
    """

    id: str = Field(..., min_length=1)
    patient_id: str = Field(..., min_length=1)
    assessment_date: datetime
    assessed_by: str = ""

    demographics: Optional[PatientDemographics] = None

    wagner_grade: Optional[WagnerGrade] = None
    texas_classification: Optional[TexasClassification] = None
    wifi_classification: Optional[WIfIClassification] = None
    sinbad_score: Optional[SINBADScore] = None

    comorbidities: Optional[Comorbidities] = None
    renal_status: Optional[RenalStatus] = None
    sepsis_assessment: Optional[SepsisAssessment] = None

    arterial_doppler: Optional[ArterialDopplerFindings] = None
    venous_doppler: Optional[VenousDopplerFindings] = None

    osteomyelitis: Optional[OsteomyelitisAssessment] = None

    # Calculated fields, filled by complete_assessment()
    total_score: Optional[int] = None
    risk_category: Optional[RiskCategory] = None
    limb_salvage_probability: Optional[int] = None
    recommended_intervention: Optional[RecommendedIntervention] = None
    detailed_recommendations: List[str] = Field(default_factory=list)
    monitoring_plan: Optional[MonitoringPlan] = None

    status: AssessmentStatus = AssessmentStatus.DRAFT
    reviewed_by: Optional[str] = None
    review_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ================== BURN CARE ==================


class BurnMechanism(str, Enum):
    FLAME = "flame"
    SCALD = "scald"
    CHEMICAL = "chemical"
    ELECTRICAL = "electrical"
    CONTACT = "contact"
    RADIATION = "radiation"
    FRICTION = "friction"


class BurnDepth(str, Enum):
    SUPERFICIAL = "superficial"
    SUPERFICIAL_PARTIAL = "superficial_partial"
    DEEP_PARTIAL = "deep_partial"
    FULL_THICKNESS = "full_thickness"


class AnatomicalRegion(str, Enum):
    HEAD_ANTERIOR = "head_anterior"
    HEAD_POSTERIOR = "head_posterior"
    NECK_ANTERIOR = "neck_anterior"
    NECK_POSTERIOR = "neck_posterior"
    TRUNK_ANTERIOR = "trunk_anterior"
    TRUNK_POSTERIOR = "trunk_posterior"
    RIGHT_ARM_ANTERIOR = "right_arm_anterior"
    RIGHT_ARM_POSTERIOR = "right_arm_posterior"
    LEFT_ARM_ANTERIOR = "left_arm_anterior"
    LEFT_ARM_POSTERIOR = "left_arm_posterior"
    RIGHT_HAND = "right_hand"
    LEFT_HAND = "left_hand"
    GENITALIA = "genitalia"
    RIGHT_THIGH_ANTERIOR = "right_thigh_anterior"
    RIGHT_THIGH_POSTERIOR = "right_thigh_posterior"
    LEFT_THIGH_ANTERIOR = "left_thigh_anterior"
    LEFT_THIGH_POSTERIOR = "left_thigh_posterior"
    RIGHT_LEG_ANTERIOR = "right_leg_anterior"
    RIGHT_LEG_POSTERIOR = "right_leg_posterior"
    LEFT_LEG_ANTERIOR = "left_leg_anterior"
    LEFT_LEG_POSTERIOR = "left_leg_posterior"
    RIGHT_FOOT = "right_foot"
    LEFT_FOOT = "left_foot"


class RuleOfNinesArea(str, Enum):
    HEAD_NECK = "head_neck"
    ANTERIOR_TRUNK = "anterior_trunk"
    POSTERIOR_TRUNK = "posterior_trunk"
    EACH_ARM = "each_arm"
    EACH_LEG = "each_leg"
    GENITALIA = "genitalia"


class TBSARegion(ClinicalRecord):
    region: AnatomicalRegion
    percent_burned: float = Field(..., ge=0, le=100, description="Percent of this region affected.")
    depth: BurnDepth
    is_circumferential: bool = False


class RuleOfNinesEntry(ClinicalRecord):
    area: RuleOfNinesArea
    percent: float = Field(..., ge=0, le=100, description="Percent of total body surface.")


class ABSIScore(ClinicalRecord):
    age_points: int = Field(..., ge=1, le=5)
    sex_points: int = Field(..., ge=0, le=1)
    tbsa_points: int = Field(..., ge=1, le=10)
    full_thickness_points: int = Field(..., ge=0, le=1)
    inhalation_injury_points: int = Field(..., ge=0, le=1)
    total_score: int
    mortality_risk: str


class BauxInterpretation(ClinicalRecord):
    mortality: str
    prognosis: str


class Disposition(str, Enum):
    WARD = "ward"
    ICU = "icu"
    BURN_CENTER = "burn_center"
    OUTPATIENT = "outpatient"


class DispositionRecommendation(ClinicalRecord):
    disposition: Disposition
    reasons: List[str] = Field(default_factory=list)


class BurnSeverity(ClinicalRecord):
    """Composite burn severity snapshot."""

    tbsa: float
    baux_score: float
    revised_baux_score: float
    baux_interpretation: BauxInterpretation
    absi: ABSIScore
    disposition: DispositionRecommendation


class ResuscitationProtocol(str, Enum):
    PARKLAND = "parkland"
    MODIFIED_BROOKE = "modified_brooke"
    CUSTOM = "custom"


class FluidType(str, Enum):
    LACTATED_RINGERS = "lactated_ringers"
    NORMAL_SALINE = "normal_saline"
    PLASMALYTE = "plasmalyte"


class UrineOutputTarget(ClinicalRecord):
    min: float = Field(..., description="mL/kg/hr")
    max: float = Field(..., description="mL/kg/hr")


class FluidRateAdjustment(ClinicalRecord):
    timestamp: datetime
    previous_rate: int
    new_rate: int
    reason: str
    adjusted_by: str
    urine_output_trigger: Optional[float] = None


class ResuscitationPlan(ClinicalRecord):
    protocol: ResuscitationProtocol
    fluid_type: FluidType = FluidType.LACTATED_RINGERS

    total_volume_24h: int = Field(..., description="mL")
    first_half_volume: int = Field(..., description="mL, first 8 hours from time of burn")
    second_half_volume: int = Field(..., description="mL, next 16 hours")

    current_rate: int = Field(..., description="mL/hr")
    hours_elapsed: float
    volume_given: int = 0
    remaining_volume: int

    resuscitation_start_time: datetime
    first_half_end_time: datetime
    resuscitation_end_time: datetime

    rate_adjustments: List[FluidRateAdjustment] = Field(default_factory=list)
    urine_output_target: UrineOutputTarget


class Urgency(str, Enum):
    ROUTINE = "routine"
    URGENT = "urgent"
    EMERGENT = "emergent"


class FluidRateSuggestion(ClinicalRecord):
    new_rate: int
    adjustment: str
    urgency: Urgency


class QSOFAResult(ClinicalRecord):
    score: int = Field(..., ge=0, le=3)
    interpretation: str


class VitalSign(ClinicalRecord):
    id: Optional[str] = None
    timestamp: datetime
    heart_rate: float = Field(..., ge=0)
    systolic_bp: float = Field(..., ge=0)
    diastolic_bp: float = Field(..., ge=0)
    map: float = Field(..., ge=0)
    respiratory_rate: float = Field(..., ge=0)
    spo2: float = Field(..., ge=0, le=100)
    temperature: float
    gcs: Optional[int] = Field(None, ge=3, le=15)
    recorded_by: str = ""


class UrineColor(str, Enum):
    CLEAR = "clear"
    YELLOW = "yellow"
    DARK_YELLOW = "dark_yellow"
    AMBER = "amber"
    COLA = "cola"
    BLOODY = "bloody"


class UrineOutput(ClinicalRecord):
    id: Optional[str] = None
    timestamp: datetime
    volume_ml: float = Field(..., ge=0)
    ml_per_kg_per_hr: float = Field(..., ge=0)
    color: UrineColor = UrineColor.YELLOW
    recorded_by: str = ""


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    EMERGENCY = "emergency"


class BurnAlertType(str, Enum):
    LOW_URINE_OUTPUT = "low_urine_output"
    HIGH_URINE_OUTPUT = "high_urine_output"
    HYPOTENSION = "hypotension"
    TACHYCARDIA = "tachycardia"
    FEVER = "fever"
    HYPOTHERMIA = "hypothermia"
    HYPOXIA = "hypoxia"
    AKI_RISK = "aki_risk"
    SEPSIS_SUSPECTED = "sepsis_suspected"
    RHABDOMYOLYSIS = "rhabdomyolysis"
    COMPARTMENT_SYNDROME = "compartment_syndrome"
    ANEMIA = "anemia"
    HYPERKALEMIA = "hyperkalemia"
    FLUID_OVERLOAD = "fluid_overload"
    MISSED_DOCUMENTATION = "missed_documentation"


class AlertStatus(str, Enum):
    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class BurnAlert(ClinicalRecord):
    id: str
    type: BurnAlertType
    severity: AlertSeverity
    message: str
    criteria: str
    suggested_action: str
    order_set_id: Optional[str] = None
    created_at: datetime
    acknowledged_at: Optional[datetime] = None
    acknowledged_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    status: AlertStatus = AlertStatus.OPEN


class NutritionTargets(ClinicalRecord):
    calories_per_day: int
    protein_per_day: float
    formula: str


# ================== ADMISSION / DISCHARGE ==================


class AdmissionRoute(str, Enum):
    CLINIC = "clinic"
    EMERGENCY = "emergency"
    CONSULT_TRANSFER = "consult_transfer"


class AdmissionStatus(str, Enum):
    ACTIVE = "active"
    DISCHARGED = "discharged"
    TRANSFERRED = "transferred"
    DECEASED = "deceased"


class DischargeDestination(str, Enum):
    HOME = "home"
    ANOTHER_FACILITY = "another_facility"
    REHABILITATION = "rehabilitation"
    NURSING_HOME = "nursing_home"
    MORTUARY = "mortuary"
    OTHER = "other"


class VitalSigns(ClinicalRecord):
    temperature: Optional[float] = None
    blood_pressure: Optional[str] = None
    pulse: Optional[float] = None
    respiratory_rate: Optional[float] = None
    oxygen_saturation: Optional[float] = None
    pain_score: Optional[int] = Field(None, ge=0, le=10)


class Admission(ClinicalRecord):
    id: Optional[str] = None
    patient_id: int
    patient_name: str = Field(..., min_length=1)
    hospital_number: str
    age: Optional[int] = Field(None, ge=0)
    gender: Optional[str] = None
    admission_date: date
    admission_time: str = ""
    ward_location: str
    bed_number: Optional[str] = None
    route_of_admission: AdmissionRoute
    referring_specialty: Optional[str] = None
    referring_doctor: Optional[str] = None
    reasons_for_admission: str = ""
    presenting_complaint: str = ""
    provisional_diagnosis: str = ""
    admitting_doctor: str = ""
    admitting_consultant: Optional[str] = None
    vital_signs: Optional[VitalSigns] = None
    allergies: Optional[str] = None
    current_medications: Optional[str] = None
    past_medical_history: Optional[str] = None
    comorbidities: List[str] = Field(default_factory=list)
    examination_findings: Optional[str] = None
    initial_management_plan: Optional[str] = None
    status: AdmissionStatus = AdmissionStatus.ACTIVE
    discharge_date: Optional[date] = None
    created_by: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DischargeMedication(ClinicalRecord):
    medication: str = Field(..., min_length=1)
    dosage: str
    frequency: str
    duration: str
    route: str = "oral"
    instructions: Optional[str] = None
    prescribing_specialty: Optional[str] = None
    is_mdt_harmonized: bool = False


class FollowUpAppointment(ClinicalRecord):
    date: date
    time: Optional[str] = None
    clinic: str
    doctor: Optional[str] = None
    purpose: str
    special_instructions: Optional[str] = None


class DayMeals(ClinicalRecord):
    breakfast: str
    mid_morning_snack: str
    lunch: str
    afternoon_snack: str
    dinner: str
    notes: Optional[str] = None


class MealPlan(ClinicalRecord):
    day1: DayMeals
    day2: DayMeals
    day3: DayMeals
    day4: DayMeals
    day5: DayMeals
    day6: DayMeals
    day7: DayMeals
    special_considerations: List[str] = Field(default_factory=list)
    foods_to_avoid: List[str] = Field(default_factory=list)
    hydration_goals: str

    def days(self) -> List[DayMeals]:
        """Return the seven days in order."""
        return [self.day1, self.day2, self.day3, self.day4, self.day5, self.day6, self.day7]


class Discharge(ClinicalRecord):
    id: Optional[str] = None
    admission_id: Optional[str] = None
    patient_id: int
    patient_name: str = Field(..., min_length=1)
    hospital_number: str
    age: Optional[int] = Field(None, ge=0)
    gender: Optional[str] = None
    admission_date: date
    discharge_date: date
    discharge_time: str = ""
    length_of_stay_days: int = Field(..., ge=0)

    admitting_diagnosis: str
    final_diagnosis: str
    secondary_diagnoses: List[str] = Field(default_factory=list)
    procedures_performed: List[str] = Field(default_factory=list)

    who_discharge_score_id: Optional[str] = None
    discharge_readiness_score: int

    discharge_type: DischargeType
    discharge_destination: DischargeDestination = DischargeDestination.HOME

    hospital_course_summary: str = ""
    condition_at_discharge: str = ""

    medications_on_discharge: List[DischargeMedication] = Field(default_factory=list)

    dietary_recommendations: Optional[str] = None
    meal_plan_7_day: Optional[MealPlan] = None
    lifestyle_modifications: List[str] = Field(default_factory=list)
    activity_restrictions: List[str] = Field(default_factory=list)
    wound_care_instructions: Optional[str] = None
    warning_signs: Optional[List[str]] = None

    follow_up_appointments: List[FollowUpAppointment] = Field(default_factory=list)

    discharging_doctor: str
    discharging_consultant: Optional[str] = None
    patient_acknowledged: bool = False
    relative_acknowledged: bool = False

    created_by: str = ""
    created_at: Optional[datetime] = None

    @field_validator("discharge_type")
    @classmethod
    def discharge_type_is_recordable(cls, value: DischargeType) -> DischargeType:
        """A discharge cannot be recorded as 'not_ready'."""
        if value == DischargeType.NOT_READY:
            raise ValueError("A discharge record cannot have discharge_type 'not_ready'")
        return value


class MedicationHarmonization(ClinicalRecord):
    harmonized_medications: List[DischargeMedication] = Field(default_factory=list)
    duplicates: List[str] = Field(default_factory=list)
    interactions: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class AdmissionStatistics(ClinicalRecord):
    total_admissions: int
    active_admissions: int
    admissions_this_month: int
    discharges_this_month: int
    average_length_of_stay: float
    by_route: Dict[str, int]
    by_ward: Dict[str, int]
    by_discharge_type: Dict[str, int]
