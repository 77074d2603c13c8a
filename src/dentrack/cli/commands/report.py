"""Dashboard and invoice reports."""

from datetime import date

import click
from dentrack.cli.error_handling import handle_domain_error
from dentrack.cli.parsing import money, parse_date_or_exit, resolve_patient_or_exit
from dentrack.domain.errors import DomainError


@click.command("dashboard")
@click.option("--date", "date_str", help="Reference day (default: today)")
@click.pass_context
def dashboard(ctx, date_str: str | None):
    """Show practice statistics for the current month.

    Revenue figures are hidden when the showRevenue preference is off.
    """
    repo = ctx.obj["repo"]
    today = parse_date_or_exit(ctx, date_str) if date_str else date.today()
    stats = repo.dashboard(today)
    show_revenue = repo.preferences.get().show_revenue

    click.echo(f"\nDashboard for {today:%B %Y}")
    click.echo("=" * 50)
    click.echo(f"Total patients:         {stats.total_patients} (+{stats.new_patients_this_month} this month)")
    click.echo(f"Appointments today:     {stats.today_appointments}")
    if show_revenue:
        growth = stats.revenue_growth
        sign = "+" if growth > 0 else ""
        click.echo(f"Revenue this month:     {money(stats.month_revenue)} ({sign}{growth}% vs last month)")
        click.echo(f"Revenue last month:     {money(stats.last_month_revenue)}")
        click.echo(f"Pending payments:       {money(stats.pending_payments)}")
    else:
        click.echo("Revenue:                hidden")
    click.echo(f"Completed treatments:   {stats.completed_treatments}")


@click.command("invoice")
@click.argument("patient_id")
@click.option("--treatment", "treatment_ids", multiple=True, help="Only bill these treatments")
@click.pass_context
def invoice(ctx, patient_id: str, treatment_ids: tuple[str, ...]):
    """Show invoice totals for a patient."""
    repo = ctx.obj["repo"]
    patient = resolve_patient_or_exit(ctx, repo, patient_id)

    try:
        totals = repo.invoice(patient.id, treatment_ids=treatment_ids or None)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nInvoice for {patient.full_name}")
    click.echo("-" * 40)
    click.echo(f"Subtotal:     {money(totals.subtotal):>14}")
    if totals.tax_rate > 0:
        click.echo(f"Tax ({totals.tax_rate}%): {money(totals.tax):>14}")
    click.echo(f"Total:        {money(totals.total):>14}")
    click.echo(f"Amount paid:  {money(totals.amount_paid):>14}")
    click.echo(f"Balance due:  {money(totals.balance):>14}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(dashboard)
    cli.add_command(invoice)
