"""CLI helpers for parsing option values and resolving records."""

from datetime import date
from decimal import Decimal

import click

from dentrack.domain.entities import Patient
from dentrack.domain.repository import Repository
from dentrack.domain.errors import patient_not_found
from dentrack.utils.amount_parser import parse_amount
from dentrack.utils.date_parser import parse_date, parse_time


def parse_date_or_exit(ctx: click.Context, value: str, label: str = "date") -> date:
    """Parse a date option, exiting with an error message on failure."""
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_time_or_exit(ctx: click.Context, value: str) -> str:
    """Parse a time option, exiting with an error message on failure."""
    try:
        return parse_time(value)
    except ValueError as e:
        click.echo(f"Error: Invalid time: {e}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    """Parse a money option, exiting with an error message on failure."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_patient_or_exit(ctx: click.Context, repo: Repository, patient_id: str) -> Patient:
    """Look up a patient by id, exiting with an error message if missing."""
    patient = repo.patients.get_by_id(patient_id)
    if patient is None:
        click.echo(f"Error: {patient_not_found(patient_id)}", err=True)
        ctx.exit(1)
    return patient


def money(value: Decimal) -> str:
    """Format a money value for display."""
    return f"${value:,.2f}"
