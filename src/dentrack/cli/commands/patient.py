"""Patient management commands."""

import click
from dentrack.cli.error_handling import handle_domain_error
from dentrack.cli.parsing import money, parse_date_or_exit, resolve_patient_or_exit
from dentrack.domain.errors import DomainError

# (option name, field name, help)
OPTIONAL_TEXT_FIELDS = [
    ("--email", "email", "Email address"),
    ("--address", "address", "Postal address"),
    ("--emergency-contact", "emergency_contact", "Emergency contact name"),
    ("--emergency-phone", "emergency_phone", "Emergency contact phone"),
    ("--medical-history", "medical_history", "Medical history notes"),
    ("--allergies", "allergies", "Known allergies"),
    ("--insurance", "insurance", "Insurance provider / policy"),
]


def optional_text_options(func):
    for option, field_name, help_text in reversed(OPTIONAL_TEXT_FIELDS):
        func = click.option(option, field_name, help=help_text)(func)
    return func


@click.group()
def patient_group():
    """Manage patients."""
    pass


@patient_group.command("add")
@click.option("--first-name", required=True, help="First name")
@click.option("--last-name", required=True, help="Last name")
@click.option("--phone", required=True, help="Phone number")
@click.option("--dob", help="Date of birth (YYYY-MM-DD)")
@optional_text_options
@click.pass_context
def add_patient(ctx, first_name: str, last_name: str, phone: str, dob: str | None, **extra):
    """Add a new patient.

    Examples:
        dentrack patient add --first-name Ana --last-name Diaz --phone 555-0101
        dentrack patient add --first-name Bo --last-name Li --phone 555-0102 --allergies Penicillin
    """
    repo = ctx.obj["repo"]

    values = {key: value for key, value in extra.items() if value}
    if dob:
        values["date_of_birth"] = parse_date_or_exit(ctx, dob, "date of birth")

    try:
        patient = repo.patients.add(first_name=first_name, last_name=last_name, phone=phone, **values)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created patient '{patient.full_name}' (ID: {patient.id})")


@patient_group.command("list")
@click.option("--search", help="Filter by name, phone or email")
@click.pass_context
def list_patients(ctx, search: str | None):
    """List patients."""
    repo = ctx.obj["repo"]
    patients = repo.patients.search(search) if search else repo.patients.get_all()

    if not patients:
        click.echo("No patients found.")
        return

    click.echo(f"\nFound {len(patients)} patient(s):")
    click.echo("-" * 90)
    click.echo(f"{'ID':<34} {'Name':<28} {'Phone':<14} {'Last visit':<12}")
    click.echo("-" * 90)
    for p in patients:
        last_visit = p.last_visit.isoformat() if p.last_visit else ""
        click.echo(f"{p.id:<34} {p.full_name[:28]:<28} {p.phone[:14]:<14} {last_visit:<12}")


@patient_group.command("show")
@click.argument("patient_id")
@click.pass_context
def show_patient(ctx, patient_id: str):
    """Show a patient with treatments, appointments and balance."""
    repo = ctx.obj["repo"]
    patient = resolve_patient_or_exit(ctx, repo, patient_id)

    click.echo(f"\n{patient.full_name} (ID: {patient.id})")
    click.echo(f"  Phone: {patient.phone}")
    for label, value in [
        ("Date of birth", patient.date_of_birth),
        ("Email", patient.email),
        ("Address", patient.address),
        ("Emergency contact", patient.emergency_contact),
        ("Emergency phone", patient.emergency_phone),
        ("Medical history", patient.medical_history),
        ("Allergies", patient.allergies),
        ("Insurance", patient.insurance),
    ]:
        if value:
            click.echo(f"  {label}: {value}")
    click.echo(f"  Registered: {patient.created_at:%Y-%m-%d}")

    treatments = repo.treatments.get_by_patient(patient.id)
    appointments = repo.appointments.get_by_patient(patient.id)
    balance = repo.patient_balance(patient.id)

    click.echo(f"\nTreatments ({len(treatments)}):")
    for t in treatments:
        tooth = f" #{t.tooth}" if t.tooth else ""
        click.echo(
            f"  {t.date}  {t.procedure}{tooth}  {money(t.cost)} (paid {money(t.paid)})  [{t.status.value}]"
        )

    click.echo(f"\nAppointments ({len(appointments)}):")
    for a in appointments:
        click.echo(f"  {a.date} {a.time}  {a.type}  {a.duration} min  [{a.status.value}]")

    click.echo("\nBalance:")
    click.echo(f"  Total treatment cost: {money(balance.total_cost)}")
    click.echo(f"  Paid on treatments:   {money(balance.total_paid)}")
    click.echo(f"  Balance:              {money(balance.balance)}")
    click.echo(f"  Recorded payments:    {money(repo.patient_payments_total(patient.id))}")


@patient_group.command("update")
@click.argument("patient_id")
@click.option("--first-name", help="First name")
@click.option("--last-name", help="Last name")
@click.option("--phone", help="Phone number")
@click.option("--dob", help="Date of birth (YYYY-MM-DD)")
@click.option("--last-visit", help="Date of last visit")
@optional_text_options
@click.pass_context
def update_patient(ctx, patient_id: str, dob: str | None, last_visit: str | None, **fields):
    """Update a patient.

    Updates only the fields that are provided.
    """
    repo = ctx.obj["repo"]
    resolve_patient_or_exit(ctx, repo, patient_id)

    updates = {key: value for key, value in fields.items() if value is not None}
    if dob is not None:
        updates["date_of_birth"] = parse_date_or_exit(ctx, dob, "date of birth")
    if last_visit is not None:
        updates["last_visit"] = parse_date_or_exit(ctx, last_visit, "last visit")

    if not updates:
        click.echo("Nothing to update.")
        return

    try:
        repo.patients.update(patient_id, **updates)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated patient {patient_id}")


@patient_group.command("delete")
@click.argument("patient_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_patient(ctx, patient_id: str, yes: bool):
    """Delete a patient.

    Treatments, appointments and payments of the patient are kept.
    """
    repo = ctx.obj["repo"]
    patient = resolve_patient_or_exit(ctx, repo, patient_id)

    if not yes:
        click.confirm(f"Delete patient '{patient.full_name}'?", abort=True)

    try:
        repo.patients.delete(patient_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted patient '{patient.full_name}'")


def register_commands(cli):
    """Register patient commands with main CLI."""
    cli.add_command(patient_group, name="patient")
