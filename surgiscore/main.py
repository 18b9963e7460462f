import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Type

import typer
from pydantic import BaseModel, ValidationError
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from surgiscore.config import initialize_config
from surgiscore.core.audit import ScoringAuditLogger
from surgiscore.core.decision.burn_management import (
    assess_burn_severity,
    has_circumferential_burn,
    has_full_thickness_burn,
)
from surgiscore.core.decision.limb_salvage import complete_assessment, create_new_assessment
from surgiscore.core.display import (
    get_depth_info,
    get_intervention_display,
    get_region_display_name,
    get_risk_category_display,
)
from surgiscore.core.exceptions import SurgiScoreError
from surgiscore.core.models import (
    Admission,
    ArterialDopplerInput,
    BurnMechanism,
    ComorbidityInput,
    Discharge,
    Gender,
    OsteomyelitisInput,
    PatientDemographics,
    RenalInput,
    SepsisInput,
    SINBADInput,
    TBSARegion,
    TexasInput,
    VenousDopplerInput,
    WagnerInput,
    WHODischargeAssessment,
    WHODischargeScore,
    WIfIInput,
)
from surgiscore.core.scoring import diabetic_foot
from surgiscore.core.scoring.burns import (
    LUND_BROWDER_CHART,
    calculate_modified_brooke_formula,
    calculate_nutrition_targets,
    calculate_parkland_formula,
    calculate_tbsa_lund_browder,
    get_age_group,
)
from surgiscore.core.scoring.discharge import (
    WHO_SCORE_FIELDS,
    calculate_who_discharge_score,
    get_discharge_type_from_score,
    get_field_label,
)
from surgiscore.reports.clinical_reports import generate_burn_summary, generate_limb_salvage_report
from surgiscore.reports.pdf import write_discharge_pdf
from surgiscore.training.library import CMELibrary

app = typer.Typer(help="Surgical unit clinical scoring CLI")
console = Console()

# JSON section -> (input model, calculator, assessment field)
FOOT_COMPONENTS: Dict[str, Tuple[Type[BaseModel], Callable, str]] = {
    "wagner": (WagnerInput, diabetic_foot.calculate_wagner_score, "wagner_grade"),
    "texas": (TexasInput, diabetic_foot.calculate_texas_score, "texas_classification"),
    "wifi": (WIfIInput, diabetic_foot.calculate_wifi_score, "wifi_classification"),
    "sinbad": (SINBADInput, diabetic_foot.calculate_sinbad_score, "sinbad_score"),
    "comorbidities": (ComorbidityInput, diabetic_foot.calculate_comorbidity_score, "comorbidities"),
    "renal": (RenalInput, diabetic_foot.calculate_renal_score, "renal_status"),
    "sepsis": (SepsisInput, diabetic_foot.calculate_sepsis_score, "sepsis_assessment"),
    "arterial_doppler": (ArterialDopplerInput, diabetic_foot.calculate_arterial_score, "arterial_doppler"),
    "venous_doppler": (VenousDopplerInput, diabetic_foot.calculate_venous_score, "venous_doppler"),
    "osteomyelitis": (OsteomyelitisInput, diabetic_foot.calculate_osteomyelitis_score, "osteomyelitis"),
}

RESUSCITATION_FORMULAS = {
    "parkland": calculate_parkland_formula,
    "modified_brooke": calculate_modified_brooke_formula,
}


def _fail(message: str) -> None:
    rprint(f"[bold red]:x: {message}[/bold red]")
    raise typer.Exit(code=1)


def _load_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        _fail(f"Error loading {path}: {e}")


def _audit_logger(ctx: typer.Context, enabled: bool) -> Optional[ScoringAuditLogger]:
    if not enabled:
        return None
    return ScoringAuditLogger(log_dir=ctx.obj["log_dir"])


def _print_json(record: BaseModel) -> None:
    typer.echo(record.model_dump_json(indent=2))


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (defaults to SURGISCORE_LOG_LEVEL or INFO)."
    ),
):
    """
    Score WHO discharge readiness, diabetic foot limb salvage and burns.
    """
    try:
        ctx.obj = initialize_config(log_level=log_level)
    except ValueError as e:
        _fail(str(e))


@app.command(name="who-discharge")
def who_discharge(
    ctx: typer.Context,
    assessment_file: Path = typer.Argument(
        ..., help="WHO discharge assessment JSON file.", exists=True, dir_okay=False, readable=True
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
    audit: bool = typer.Option(False, "--audit/--no-audit", help="Write the calculation to the audit log."),
):
    """
    Score a WHO discharge readiness assessment.
    """
    data = _load_json(assessment_file)
    try:
        assessment = WHODischargeAssessment.model_validate(data)
    except ValidationError as e:
        _fail(f"Invalid WHO discharge assessment: {e}")

    result = calculate_who_discharge_score(assessment)
    discharge_type = get_discharge_type_from_score(result.total_score)

    audit_logger = _audit_logger(ctx, audit)
    if audit_logger:
        audit_logger.log_calculation(
            "who_discharge", assessment, result, metadata={"source": str(assessment_file)}
        )

    if as_json:
        _print_json(result)
        return

    table = Table(title="WHO Discharge Readiness", show_header=True, header_style="bold blue")
    table.add_column("Item", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Finding", style="magenta")
    for field in WHO_SCORE_FIELDS:
        value = getattr(result, field)
        table.add_row(field.replace("_", " ").title(), str(value), get_field_label(field, value))
    console.print(table)

    for flag in ("high_readmission_risk", "complex_medical_needs", "language_barrier"):
        if getattr(result, flag):
            console.print(f"[yellow]Risk factor: {flag.replace('_', ' ')}[/yellow]")

    console.print(f"Total Score: {result.total_score}")
    console.print(f"Recommendation: {result.recommendation.value}")
    console.print(f"Supported Discharge Type: {discharge_type.value}")


@app.command(name="limb-salvage")
def limb_salvage(
    ctx: typer.Context,
    assessment_file: Path = typer.Argument(
        ..., help="Diabetic foot component inputs JSON file.", exists=True, dir_okay=False, readable=True
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the completed assessment as JSON."),
    report: bool = typer.Option(False, "--report", help="Print the full text report."),
    audit: bool = typer.Option(False, "--audit/--no-audit", help="Write the calculation to the audit log."),
):
    """
    Score a diabetic foot assessment and recommend an intervention.

    The file holds patient_id, assessed_by, an optional demographics block and
    one block of raw inputs per component (wagner, texas, wifi, sinbad,
    comorbidities, renal, sepsis, arterial_doppler, venous_doppler,
    osteomyelitis). Omitted components count as not assessed.
    """
    data = _load_json(assessment_file)
    if not isinstance(data, dict) or not data.get("patient_id"):
        _fail("Assessment file must be a JSON object with a patient_id")

    unknown = set(data) - set(FOOT_COMPONENTS) - {"patient_id", "assessed_by", "demographics", "notes"}
    if unknown:
        _fail(f"Unknown assessment sections: {', '.join(sorted(unknown))}")

    try:
        updates: Dict[str, Any] = {"notes": data.get("notes")}
        if data.get("demographics") is not None:
            updates["demographics"] = PatientDemographics.model_validate(data["demographics"])
        for section, (input_model, calculator, field) in FOOT_COMPONENTS.items():
            if data.get(section) is not None:
                updates[field] = calculator(input_model.model_validate(data[section]))
    except ValidationError as e:
        _fail(f"Invalid diabetic foot assessment: {e}")

    draft = create_new_assessment(str(data["patient_id"]), data.get("assessed_by", ""))
    assessment = complete_assessment(draft.model_copy(update=updates))

    audit_logger = _audit_logger(ctx, audit)
    if audit_logger:
        audit_logger.log_calculation(
            "limb_salvage", data, assessment, metadata={"source": str(assessment_file)}
        )

    if as_json:
        _print_json(assessment)
        return
    if report:
        typer.echo(generate_limb_salvage_report(assessment))
        return

    risk = get_risk_category_display(assessment.risk_category)
    intervention = get_intervention_display(assessment.recommended_intervention)
    console.print(
        Panel(
            f"Total Score: {assessment.total_score}\n"
            f"Risk Category: {risk['label']}\n"
            f"Limb Salvage Probability: {assessment.limb_salvage_probability}%\n"
            f"Recommended Intervention: {intervention['label']}",
            title="Limb Salvage Assessment",
            border_style=risk["color"],
        )
    )
    console.print("\n[bold]Recommendations:[/bold]")
    for line in assessment.detailed_recommendations:
        console.print(f"- {line}")
    console.print(f"\nFollow-up: {assessment.monitoring_plan.follow_up_frequency}")


@app.command(name="tbsa")
def tbsa(
    ctx: typer.Context,
    regions_file: Path = typer.Argument(
        ..., help="JSON list of burned regions (region, percent_burned, depth).", exists=True, dir_okay=False
    ),
    age: float = typer.Option(..., "--age", help="Age in years; selects the Lund-Browder column."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    audit: bool = typer.Option(False, "--audit/--no-audit", help="Write the calculation to the audit log."),
):
    """
    Lund-Browder TBSA from a region chart.
    """
    data = _load_json(regions_file)
    if not isinstance(data, list):
        _fail("Regions file must hold a JSON list")

    try:
        regions = [TBSARegion.model_validate(item) for item in data]
        age_group = get_age_group(age)
        total = calculate_tbsa_lund_browder(regions, age)
    except ValidationError as e:
        _fail(f"Invalid burn region: {e}")
    except SurgiScoreError as e:
        _fail(e.message)

    result = {
        "tbsa": total,
        "age_group": age_group,
        "has_full_thickness": has_full_thickness_burn(regions),
        "has_circumferential_burn": has_circumferential_burn(regions),
    }

    audit_logger = _audit_logger(ctx, audit)
    if audit_logger:
        audit_logger.log_calculation("tbsa_lund_browder", {"age": age, "regions": regions}, result)

    if as_json:
        typer.echo(json.dumps(result, indent=2))
        return

    table = Table(title=f"Lund-Browder Chart (age group {age_group})", header_style="bold blue")
    table.add_column("Region", style="cyan")
    table.add_column("Depth")
    table.add_column("% Burned", justify="right")
    table.add_column("% TBSA", justify="right")
    for region in regions:
        contribution = region.percent_burned / 100 * LUND_BROWDER_CHART[region.region][age_group]
        depth = get_depth_info(region.depth)
        name = get_region_display_name(region.region)
        if region.is_circumferential:
            name += " (circumferential)"
        table.add_row(name, depth["name"], f"{region.percent_burned:g}", f"{contribution:.2f}")
    console.print(table)

    console.print(f"TBSA: {total:g}%")
    if result["has_full_thickness"]:
        console.print("[bold]Full-thickness burn present[/bold]")
    if result["has_circumferential_burn"]:
        console.print("[bold red]Circumferential burn - escharotomy may be needed[/bold red]")


@app.command(name="burn-severity")
def burn_severity(
    ctx: typer.Context,
    age: float = typer.Option(..., "--age", help="Age in years."),
    gender: Gender = typer.Option(..., "--gender", help="Patient gender."),
    tbsa: float = typer.Option(..., "--tbsa", help="Percent total body surface area burned."),
    full_thickness: bool = typer.Option(False, "--full-thickness", help="Any full-thickness burn present."),
    inhalation: bool = typer.Option(False, "--inhalation", help="Inhalation injury present."),
    mechanism: BurnMechanism = typer.Option(BurnMechanism.FLAME, "--mechanism", help="Burn mechanism."),
    circumferential: bool = typer.Option(False, "--circumferential", help="Any circumferential burn."),
    weight: Optional[float] = typer.Option(None, "--weight", help="Weight in kg, for nutrition targets."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
    audit: bool = typer.Option(False, "--audit/--no-audit", help="Write the calculation to the audit log."),
):
    """
    Baux, revised Baux, ABSI and disposition for a burn patient.
    """
    try:
        severity = assess_burn_severity(
            age, gender, tbsa, full_thickness, inhalation, mechanism, circumferential
        )
        nutrition = calculate_nutrition_targets(weight, tbsa) if weight is not None else None
    except SurgiScoreError as e:
        _fail(e.message)

    audit_logger = _audit_logger(ctx, audit)
    if audit_logger:
        inputs = {
            "age": age,
            "gender": gender,
            "tbsa": tbsa,
            "has_full_thickness": full_thickness,
            "has_inhalation_injury": inhalation,
            "mechanism": mechanism,
            "has_circumferential_burn": circumferential,
        }
        audit_logger.log_calculation("burn_severity", inputs, severity)

    if as_json:
        _print_json(severity)
        return

    typer.echo(generate_burn_summary(severity, nutrition=nutrition))


@app.command(name="burn-resus")
def burn_resus(
    ctx: typer.Context,
    weight: float = typer.Option(..., "--weight", help="Weight in kg."),
    tbsa: float = typer.Option(..., "--tbsa", help="Percent total body surface area burned."),
    hours_since_burn: float = typer.Option(0.0, "--hours-since-burn", help="Hours elapsed since the burn."),
    protocol: str = typer.Option("parkland", "--protocol", help="parkland or modified_brooke."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw plan as JSON."),
    audit: bool = typer.Option(False, "--audit/--no-audit", help="Write the calculation to the audit log."),
):
    """
    Fluid resuscitation plan from the time of burn.
    """
    formula = RESUSCITATION_FORMULAS.get(protocol)
    if formula is None:
        _fail(f"Unknown protocol '{protocol}'. Choose from: {', '.join(RESUSCITATION_FORMULAS)}")
    if hours_since_burn < 0:
        _fail("--hours-since-burn cannot be negative")

    now = datetime.now()
    try:
        plan = formula(weight, tbsa, now - timedelta(hours=hours_since_burn), current_time=now)
    except SurgiScoreError as e:
        _fail(e.message)

    audit_logger = _audit_logger(ctx, audit)
    if audit_logger:
        audit_logger.log_calculation(
            f"{protocol}_formula",
            {"weight_kg": weight, "tbsa": tbsa, "hours_since_burn": hours_since_burn},
            plan,
        )

    if as_json:
        _print_json(plan)
        return

    table = Table(title=f"Resuscitation Plan ({protocol.replace('_', ' ').title()})", header_style="bold blue")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Fluid", plan.fluid_type.value.replace("_", " "))
    table.add_row("Total 24h", f"{plan.total_volume_24h} mL")
    table.add_row("First 8h", f"{plan.first_half_volume} mL")
    table.add_row("Next 16h", f"{plan.second_half_volume} mL")
    table.add_row("Hours Elapsed", f"{plan.hours_elapsed:.1f}")
    table.add_row(
        "Urine Output Target",
        f"{plan.urine_output_target.min:g}-{plan.urine_output_target.max:g} mL/kg/hr",
    )
    console.print(table)
    console.print(f"Current Rate: {plan.current_rate} mL/hr")


@app.command(name="discharge-pdf")
def discharge_pdf(
    ctx: typer.Context,
    discharge_file: Path = typer.Option(
        ..., "--discharge", help="Discharge record JSON file.", exists=True, dir_okay=False, readable=True
    ),
    admission_file: Path = typer.Option(
        ..., "--admission", help="Admission record JSON file.", exists=True, dir_okay=False, readable=True
    ),
    who_score_file: Optional[Path] = typer.Option(
        None, "--who-score", help="Scored WHO discharge assessment JSON file.", exists=True, dir_okay=False
    ),
    output_dir: Path = typer.Option(Path("."), "--output-dir", "-o", help="Directory for the PDF."),
):
    """
    Render the discharge summary PDF.
    """
    try:
        discharge = Discharge.model_validate(_load_json(discharge_file))
        admission = Admission.model_validate(_load_json(admission_file))
        who_score = None
        if who_score_file is not None:
            who_score = WHODischargeScore.model_validate(_load_json(who_score_file))
    except ValidationError as e:
        _fail(f"Invalid record: {e}")

    try:
        path = write_discharge_pdf(
            discharge,
            admission,
            output_dir,
            who_score=who_score,
            unit_name=ctx.obj["unit_name"],
            hospital_name=ctx.obj["hospital_name"],
        )
    except SurgiScoreError as e:
        _fail(e.message)

    rprint(f"[green]:heavy_check_mark: Discharge summary written to {path}[/green]")


@app.command(name="cme-list")
def cme_list(
    ctx: typer.Context,
    level: Optional[str] = typer.Option(None, "--level", help="Training level id, e.g. house_officer."),
    search: Optional[str] = typer.Option(None, "--search", help="Filter articles by title or overview."),
):
    """
    List CME modules and articles.
    """
    try:
        library = CMELibrary.from_yaml(ctx.obj["cme_library"])
        if search:
            articles = library.search(search, level_id=level)
            table = Table(title=f"CME Articles matching '{search}'", header_style="bold blue")
            table.add_column("ID", style="cyan")
            table.add_column("Title")
            for article in articles:
                table.add_row(article.id, article.title)
            console.print(table)
            return

    except SurgiScoreError as e:
        _fail(e.message)

    levels = library.levels()
    if level is not None:
        levels = [lvl for lvl in levels if lvl.id == level]
        if not levels:
            _fail(f"Unknown training level {level}")

    for lvl in levels:
        table = Table(title=lvl.name, header_style="bold blue")
        table.add_column("Module", style="cyan")
        table.add_column("Article ID")
        table.add_column("Title")
        for module in lvl.modules:
            for article in module.articles:
                table.add_row(module.title, article.id, article.title)
        console.print(table)


@app.command(name="cme-show")
def cme_show(
    ctx: typer.Context,
    article_id: str = typer.Argument(..., help="Article id, e.g. ho-1-1."),
    show_answers: bool = typer.Option(False, "--answers", help="Reveal quiz answers and explanations."),
):
    """
    Show a CME article with its self-assessment.
    """
    try:
        article = CMELibrary.from_yaml(ctx.obj["cme_library"]).get_article(article_id)
    except SurgiScoreError as e:
        _fail(e.message)

    console.print(Panel(article.overview.strip(), title=article.title))
    for section in article.sections:
        console.print(f"\n[bold]{section.heading}[/bold]")
        console.print(section.body.strip())

    if article.key_points:
        console.print("\n[bold]Key Points:[/bold]")
        for point in article.key_points:
            console.print(f"- {point}")

    if article.questions:
        console.print("\n[bold]Self-Assessment:[/bold]")
        for number, question in enumerate(article.questions, start=1):
            console.print(f"\n{number}. {question.question}")
            for letter, option in zip(question.letters(), question.options):
                console.print(f"   {letter}. {option}")
            if show_answers:
                console.print(f"   Answer: {question.answer}. {question.explanation}".rstrip())


if __name__ == "__main__":
    app()
