"""Treatment management commands."""

import click
from dentrack.cli.error_handling import handle_domain_error
from dentrack.cli.parsing import (
    money,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_patient_or_exit,
)
from dentrack.domain.entities import TreatmentStatus
from dentrack.domain.errors import DomainError

STATUS_CHOICE = click.Choice([s.value for s in TreatmentStatus])


@click.group()
def treatment_group():
    """Manage treatments."""
    pass


@treatment_group.command("add")
@click.argument("patient_id")
@click.option("--procedure", help="Procedure name")
@click.option("--template", "template_id", help="Procedure template ID to take name and cost from")
@click.option("--date", "date_str", default="today", show_default=True, help="Treatment date")
@click.option("--cost", help="Cost (defaults to the template's cost)")
@click.option("--paid", default="0", show_default=True, help="Amount paid")
@click.option("--status", type=STATUS_CHOICE, default="completed", show_default=True)
@click.option("--tooth", help="Tooth number")
@click.option("--notes", default="", help="Notes")
@click.pass_context
def add_treatment(
    ctx,
    patient_id: str,
    procedure: str | None,
    template_id: str | None,
    date_str: str,
    cost: str | None,
    paid: str,
    status: str,
    tooth: str | None,
    notes: str,
):
    """Record a treatment for a patient.

    Examples:
        dentrack treatment add PATIENT_ID --procedure "Filling" --cost 120 --tooth 14
        dentrack treatment add PATIENT_ID --template TEMPLATE_ID --paid 50
    """
    repo = ctx.obj["repo"]
    resolve_patient_or_exit(ctx, repo, patient_id)

    treatment_cost = None
    if template_id is not None:
        template = repo.procedures.get_by_id(template_id)
        if template is None:
            click.echo(f"Error: Procedure template {template_id} not found", err=True)
            ctx.exit(1)
        procedure = procedure or template.name
        treatment_cost = template.default_cost

    if not procedure:
        click.echo("Error: Provide --procedure or --template", err=True)
        ctx.exit(1)
    if cost is not None:
        treatment_cost = parse_amount_or_exit(ctx, cost, "cost")
    if treatment_cost is None:
        click.echo("Error: Provide --cost or --template", err=True)
        ctx.exit(1)

    try:
        treatment = repo.treatments.add(
            patient_id=patient_id,
            date=parse_date_or_exit(ctx, date_str),
            procedure=procedure,
            cost=treatment_cost,
            paid=parse_amount_or_exit(ctx, paid, "paid amount"),
            status=status,
            tooth=tooth,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created treatment {treatment.id}")
    click.echo(f"  Procedure: {treatment.procedure}")
    click.echo(f"  Cost: {money(treatment.cost)}")


@treatment_group.command("list")
@click.option("--patient", "patient_id", help="Only treatments of this patient")
@click.option("--status", type=STATUS_CHOICE, help="Only treatments with this status")
@click.pass_context
def list_treatments(ctx, patient_id: str | None, status: str | None):
    """List treatments."""
    repo = ctx.obj["repo"]
    treatments = (
        repo.treatments.get_by_patient(patient_id) if patient_id else repo.treatments.get_all()
    )
    if status:
        treatments = [t for t in treatments if t.status == TreatmentStatus(status)]

    if not treatments:
        click.echo("No treatments found.")
        return

    click.echo(f"\nFound {len(treatments)} treatment(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<34} {'Date':<12} {'Procedure':<24} {'Cost':>10} {'Paid':>10} {'Status':<10}")
    click.echo("-" * 100)
    for t in treatments:
        click.echo(
            f"{t.id:<34} {str(t.date):<12} {t.procedure[:24]:<24} "
            f"{money(t.cost):>10} {money(t.paid):>10} {t.status.value:<10}"
        )


@treatment_group.command("update")
@click.argument("treatment_id")
@click.option("--procedure", help="Procedure name")
@click.option("--date", "date_str", help="Treatment date")
@click.option("--cost", help="Cost")
@click.option("--paid", help="Amount paid")
@click.option("--status", type=STATUS_CHOICE)
@click.option("--tooth", help="Tooth number")
@click.option("--notes", help="Notes")
@click.pass_context
def update_treatment(
    ctx,
    treatment_id: str,
    procedure: str | None,
    date_str: str | None,
    cost: str | None,
    paid: str | None,
    status: str | None,
    tooth: str | None,
    notes: str | None,
):
    """Update a treatment.

    Updates only the fields that are provided.

    Examples:
        dentrack treatment update TREATMENT_ID --paid 120
        dentrack treatment update TREATMENT_ID --status completed
    """
    repo = ctx.obj["repo"]
    if repo.treatments.get_by_id(treatment_id) is None:
        click.echo(f"Error: Treatment {treatment_id} not found", err=True)
        ctx.exit(1)

    updates = {
        key: value
        for key, value in {
            "procedure": procedure,
            "status": status,
            "tooth": tooth,
            "notes": notes,
        }.items()
        if value is not None
    }
    if date_str is not None:
        updates["date"] = parse_date_or_exit(ctx, date_str)
    if cost is not None:
        updates["cost"] = parse_amount_or_exit(ctx, cost, "cost")
    if paid is not None:
        updates["paid"] = parse_amount_or_exit(ctx, paid, "paid amount")

    try:
        repo.treatments.update(treatment_id, **updates)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated treatment {treatment_id}")


@treatment_group.command("delete")
@click.argument("treatment_id")
@click.pass_context
def delete_treatment(ctx, treatment_id: str):
    """Delete a treatment."""
    repo = ctx.obj["repo"]
    try:
        repo.treatments.delete(treatment_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted treatment {treatment_id}")


def register_commands(cli):
    """Register treatment commands with main CLI."""
    cli.add_command(treatment_group, name="treatment")
