"""
PDF rendering of discharge documents using reportlab.

The discharge PDF has a summary page, a medications page when medications
were prescribed, and an instructions page closing with the signature block.
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from surgiscore.config import DEFAULT_HOSPITAL_NAME, DEFAULT_UNIT_NAME
from surgiscore.core.exceptions import DocumentError
from surgiscore.core.models import Admission, Discharge, WHODischargeScore
from surgiscore.core.scoring.discharge import WHO_MAX_SCORE
from surgiscore.reports.discharge_documents import fitness_conclusion, format_enum_label

logger = logging.getLogger(__name__)

MARGIN = 15 * mm
TOP = 20 * mm
BOTTOM = 20 * mm
LINE = 5 * mm
SIGNATURE_TOP = 40 * mm  # measured up from the page foot

PDF_WARNING_SIGNS = ('Fever above 38°C', 'Increasing pain', 'Wound infection signs', 'Difficulty breathing')


def discharge_pdf_filename(discharge: Discharge) -> str:
    """Discharge_<Patient_Name>_<yyyymmdd>.pdf"""
    name = "_".join(discharge.patient_name.split())
    return f"Discharge_{name}_{discharge.discharge_date.strftime('%Y%m%d')}.pdf"


class _PageWriter:
    """Cursor-based writer over a reportlab canvas, top-down in page coordinates."""

    def __init__(self, pdf: canvas.Canvas, unit_name: str, hospital_name: str):
        self.pdf = pdf
        self.width, self.height = A4
        self.unit_name = unit_name
        self.hospital_name = hospital_name
        self.y = 15 * mm

    def _baseline(self) -> float:
        return self.height - self.y

    def new_page(self) -> None:
        self.pdf.showPage()
        self.y = TOP

    def page_break_if_needed(self, needed: float) -> None:
        if self.y + needed > self.height - BOTTOM:
            self.new_page()

    def header(self) -> None:
        self.pdf.setFont("Helvetica-Bold", 12)
        self.pdf.drawCentredString(self.width / 2, self._baseline(), self.unit_name)
        self.y += 6 * mm
        self.pdf.setFont("Helvetica", 10)
        self.pdf.drawCentredString(self.width / 2, self._baseline(), self.hospital_name)
        self.y += 10 * mm

    def title(self, text: str) -> None:
        self.pdf.setFont("Helvetica-Bold", 14)
        self.pdf.drawCentredString(self.width / 2, self._baseline(), text)
        self.y += 10 * mm

    def text(self, text: str, x: float = MARGIN, font: str = "Helvetica", size: int = 10) -> None:
        self.pdf.setFont(font, size)
        self.pdf.drawString(x, self._baseline(), text)

    def wrapped(self, text: str, x: float = MARGIN, font: str = "Helvetica", size: int = 10) -> None:
        for line in simpleSplit(text, font, size, self.width - MARGIN - x) or [""]:
            self.page_break_if_needed(6 * mm)
            self.text(line, x=x, font=font, size=size)
            self.y += LINE

    def section(self, title: str, content: str) -> None:
        self.page_break_if_needed(30 * mm)
        self.text(title, font="Helvetica-Bold", size=11)
        self.y += 6 * mm

        for paragraph in content.split("\n"):
            self.wrapped(paragraph)
        self.y += LINE

    def signature_block(self, lines: Iterable[str]) -> None:
        top = self.height - SIGNATURE_TOP
        if self.y > top - LINE:
            self.new_page()
        self.y = top
        for line in lines:
            self.text(line)
            self.y += 6 * mm

    def patient_box(self, discharge: Discharge, admission: Admission) -> None:
        self.pdf.setStrokeColorRGB(0, 128 / 255, 0)
        box_height = 25 * mm
        self.pdf.rect(MARGIN, self.height - self.y - box_height, self.width - 2 * MARGIN, box_height)
        half = self.width / 2
        rows = (
            (f"Patient: {discharge.patient_name}", f"Hospital No: {discharge.hospital_number}"),
            (f"Age/Gender: {discharge.age if discharge.age is not None else 'N/A'} / {discharge.gender or 'N/A'}",
             f"Ward: {admission.ward_location}"),
            (f"Admission: {discharge.admission_date.strftime('%d/%m/%Y')}",
             f"Discharge: {discharge.discharge_date.strftime('%d/%m/%Y')}"),
            (f"Length of Stay: {discharge.length_of_stay_days} days", ""),
        )
        for left, right in rows:
            self.y += 6 * mm
            self.text(left, x=20 * mm)
            if right:
                self.text(right, x=half)
        self.y += 15 * mm


def _join(items: Iterable[str]) -> str:
    return "\n".join(items)


def render_discharge_pdf(
    discharge: Discharge,
    admission: Admission,
    who_score: Optional[WHODischargeScore] = None,
    unit_name: str = DEFAULT_UNIT_NAME,
    hospital_name: str = DEFAULT_HOSPITAL_NAME,
    generated_at: Optional[datetime] = None,
) -> bytes:
    """
    Render the discharge summary PDF

    Args:
        discharge: Discharge record
        admission: The admission it closes
        who_score: Optional WHO readiness result to include on the summary page
        unit_name: Header line 1
        hospital_name: Header line 2
        generated_at: Timestamp for the signature block; defaults to now

    Returns:
        PDF document bytes

    Raises:
        DocumentError: If reportlab fails to render the document
    """
    generated_at = generated_at or datetime.now()
    buffer = io.BytesIO()

    try:
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(f"Discharge Summary - {discharge.patient_name}")
        page = _PageWriter(pdf, unit_name, hospital_name)

        # Summary page
        page.header()
        page.title("DISCHARGE SUMMARY")
        page.patient_box(discharge, admission)

        page.section("DIAGNOSIS", f"Admitting: {discharge.admitting_diagnosis}\nFinal: {discharge.final_diagnosis}")
        if discharge.procedures_performed:
            page.section("PROCEDURES", _join(discharge.procedures_performed))
        page.section("HOSPITAL COURSE", discharge.hospital_course_summary)
        page.section(
            "CONDITION AT DISCHARGE",
            f"{discharge.condition_at_discharge}\nDischarge Type: {format_enum_label(discharge.discharge_type)}",
        )
        if who_score is not None:
            page.section(
                "DISCHARGE READINESS (WHO)",
                f"Score: {who_score.total_score}/{WHO_MAX_SCORE}\n"
                f"Recommendation: {format_enum_label(who_score.recommendation)}\n"
                f"Conclusion: Patient is {fitness_conclusion(who_score.total_score)}",
            )

        # Medications page
        if discharge.medications_on_discharge:
            page.new_page()
            page.header()
            page.title("DISCHARGE MEDICATIONS")
            for idx, med in enumerate(discharge.medications_on_discharge, start=1):
                page.page_break_if_needed(25 * mm)
                page.wrapped(f"{idx}. {med.medication}", font="Helvetica-Bold")
                page.wrapped(f"Dosage: {med.dosage} | Frequency: {med.frequency} | Duration: {med.duration}",
                             x=MARGIN + 5 * mm)
                if med.instructions:
                    page.wrapped(f"Instructions: {med.instructions}", x=MARGIN + 5 * mm)
                page.y += 3 * mm

        # Instructions page
        page.new_page()
        page.header()
        page.title("DISCHARGE INSTRUCTIONS")
        if discharge.wound_care_instructions:
            page.section("WOUND CARE", discharge.wound_care_instructions)
        if discharge.activity_restrictions:
            page.section("ACTIVITY RESTRICTIONS", _join(discharge.activity_restrictions))
        if discharge.lifestyle_modifications:
            page.section("LIFESTYLE MODIFICATIONS", _join(discharge.lifestyle_modifications))
        warning_signs = discharge.warning_signs if discharge.warning_signs is not None else PDF_WARNING_SIGNS
        page.section("SEEK MEDICAL ATTENTION IF", _join(warning_signs))
        if discharge.follow_up_appointments:
            page.section("FOLLOW-UP APPOINTMENTS", _join(
                f"{apt.date.strftime('%d %b %Y')} - {apt.clinic}: {apt.purpose}"
                for apt in discharge.follow_up_appointments
            ))

        page.signature_block((
            f"Discharging Doctor: {discharge.discharging_doctor}",
            f"Consultant: {discharge.discharging_consultant or 'N/A'}",
            f"Date: {generated_at.strftime('%d/%m/%Y %H:%M')}",
        ))

        pdf.save()
    except Exception as e:
        logger.error(f"Failed to render discharge PDF for {discharge.patient_name}: {e}")
        raise DocumentError("Failed to render discharge PDF", details={"patient": discharge.patient_name}) from e

    return buffer.getvalue()


def write_discharge_pdf(
    discharge: Discharge,
    admission: Admission,
    output_dir: Path,
    who_score: Optional[WHODischargeScore] = None,
    unit_name: str = DEFAULT_UNIT_NAME,
    hospital_name: str = DEFAULT_HOSPITAL_NAME,
) -> Path:
    """Render the discharge PDF into output_dir under its standard filename."""
    content = render_discharge_pdf(discharge, admission, who_score, unit_name, hospital_name)
    path = Path(output_dir) / discharge_pdf_filename(discharge)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    except OSError as e:
        logger.error(f"Failed to write discharge PDF to {path}: {e}")
        raise DocumentError(f"Failed to write discharge PDF to {path}", details={"path": str(path)}) from e

    logger.info(f"Discharge PDF written to {path}")
    return path
