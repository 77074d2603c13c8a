"""Payment commands."""

import click
from dentrack.cli.error_handling import handle_domain_error
from dentrack.cli.parsing import (
    money,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_patient_or_exit,
)
from dentrack.domain.entities import PaymentMethod
from dentrack.domain.errors import DomainError


@click.group()
def payment_group():
    """Manage payments."""
    pass


@payment_group.command("add")
@click.argument("patient_id")
@click.option("--amount", required=True, help="Amount received")
@click.option(
    "--method",
    type=click.Choice([m.value for m in PaymentMethod]),
    default="cash",
    show_default=True,
)
@click.option("--date", "date_str", default="today", show_default=True, help="Payment date")
@click.option("--treatment", "treatment_id", help="Treatment this payment is for")
@click.option("--notes", default="", help="Notes")
@click.pass_context
def add_payment(
    ctx,
    patient_id: str,
    amount: str,
    method: str,
    date_str: str,
    treatment_id: str | None,
    notes: str,
):
    """Record a payment from a patient.

    Examples:
        dentrack payment add PATIENT_ID --amount 80
        dentrack payment add PATIENT_ID --amount 250 --method card --treatment TREATMENT_ID
    """
    repo = ctx.obj["repo"]
    resolve_patient_or_exit(ctx, repo, patient_id)

    try:
        payment = repo.payments.add(
            patient_id=patient_id,
            date=parse_date_or_exit(ctx, date_str),
            amount=parse_amount_or_exit(ctx, amount),
            method=method,
            treatment_id=treatment_id,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded payment of {money(payment.amount)} ({payment.method.value}) (ID: {payment.id})")


@payment_group.command("list")
@click.option("--patient", "patient_id", help="Only payments of this patient")
@click.pass_context
def list_payments(ctx, patient_id: str | None):
    """List payments."""
    repo = ctx.obj["repo"]
    payments = repo.payments.get_by_patient(patient_id) if patient_id else repo.payments.get_all()

    if not payments:
        click.echo("No payments found.")
        return

    click.echo(f"\nFound {len(payments)} payment(s):")
    click.echo("-" * 80)
    for p in payments:
        click.echo(f"{p.id:<34} {str(p.date):<12} {money(p.amount):>12} {p.method.value:<10} {p.notes[:20]}")


@payment_group.command("delete")
@click.argument("payment_id")
@click.pass_context
def delete_payment(ctx, payment_id: str):
    """Delete a payment."""
    repo = ctx.obj["repo"]
    try:
        repo.payments.delete(payment_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted payment {payment_id}")


def register_commands(cli):
    """Register payment commands with main CLI."""
    cli.add_command(payment_group, name="payment")
