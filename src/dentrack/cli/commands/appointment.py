"""Appointment scheduling commands."""

import click
from dentrack.cli.error_handling import handle_domain_error
from dentrack.cli.parsing import parse_date_or_exit, parse_time_or_exit, resolve_patient_or_exit
from dentrack.domain.entities import AppointmentStatus
from dentrack.domain.errors import DomainError

STATUS_CHOICE = click.Choice([s.value for s in AppointmentStatus])


@click.group()
def appointment_group():
    """Manage appointments."""
    pass


@appointment_group.command("add")
@click.argument("patient_id")
@click.option("--date", "date_str", required=True, help="Appointment date (YYYY-MM-DD, 'tomorrow', ...)")
@click.option("--time", "time_str", required=True, help="Start time (e.g., 09:30 or 2pm)")
@click.option("--duration", type=click.IntRange(min=1), default=30, show_default=True, help="Minutes")
@click.option("--type", "appointment_type", default="Checkup", show_default=True, help="Appointment type")
@click.option("--chair", help="Chair or room")
@click.option("--notes", default="", help="Notes")
@click.pass_context
def add_appointment(
    ctx,
    patient_id: str,
    date_str: str,
    time_str: str,
    duration: int,
    appointment_type: str,
    chair: str | None,
    notes: str,
):
    """Book an appointment.

    The patient's current name is stored with the appointment.

    Examples:
        dentrack appointment add PATIENT_ID --date tomorrow --time 9:30
        dentrack appointment add PATIENT_ID --date 2024-05-02 --time 14:00 --duration 60 --type Cleaning
    """
    repo = ctx.obj["repo"]
    patient = resolve_patient_or_exit(ctx, repo, patient_id)

    try:
        appointment = repo.appointments.add(
            patient_id=patient.id,
            patient_name=patient.full_name,
            date=parse_date_or_exit(ctx, date_str),
            time=parse_time_or_exit(ctx, time_str),
            duration=duration,
            type=appointment_type,
            status=AppointmentStatus.SCHEDULED,
            chair=chair,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Booked {appointment.patient_name} on {appointment.date} at {appointment.time} "
        f"(ID: {appointment.id})"
    )


@appointment_group.command("list")
@click.option("--date", "date_str", help="Day to show (default: today)")
@click.option("--patient", "patient_id", help="All appointments of this patient instead")
@click.pass_context
def list_appointments(ctx, date_str: str | None, patient_id: str | None):
    """Show the schedule for a day, or a patient's appointments."""
    repo = ctx.obj["repo"]

    if patient_id:
        appointments = repo.appointments.get_by_patient(patient_id)
        title = f"Appointments for patient {patient_id}"
    else:
        day = parse_date_or_exit(ctx, date_str or "today")
        appointments = repo.appointments.day_schedule(day)
        title = f"Schedule for {day}"

    if not appointments:
        click.echo("No appointments found.")
        return

    click.echo(f"\n{title}:")
    click.echo("-" * 90)
    for a in appointments:
        chair = f" chair {a.chair}" if a.chair else ""
        click.echo(
            f"{a.date} {a.time}  {a.patient_name[:24]:<24} {a.type[:16]:<16} "
            f"{a.duration:>3} min{chair}  [{a.status.value}]  {a.id}"
        )

    if not patient_id:
        counts = repo.appointments.status_counts(day)
        click.echo("-" * 90)
        click.echo(
            f"Scheduled: {counts[AppointmentStatus.SCHEDULED]}  "
            f"Completed: {counts[AppointmentStatus.COMPLETED]}"
        )


@appointment_group.command("status")
@click.argument("appointment_id")
@click.argument("status", type=STATUS_CHOICE)
@click.pass_context
def set_status(ctx, appointment_id: str, status: str):
    """Change the status of an appointment."""
    repo = ctx.obj["repo"]
    if repo.appointments.get_by_id(appointment_id) is None:
        click.echo(f"Error: Appointment {appointment_id} not found", err=True)
        ctx.exit(1)

    try:
        repo.appointments.update(appointment_id, status=status)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Appointment {appointment_id} marked {status}")


@appointment_group.command("delete")
@click.argument("appointment_id")
@click.pass_context
def delete_appointment(ctx, appointment_id: str):
    """Delete an appointment."""
    repo = ctx.obj["repo"]
    try:
        repo.appointments.delete(appointment_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted appointment {appointment_id}")


def register_commands(cli):
    """Register appointment commands with main CLI."""
    cli.add_command(appointment_group, name="appointment")
