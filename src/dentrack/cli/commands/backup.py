"""Backup, restore and clear commands."""

from datetime import date
from pathlib import Path

import click
from dentrack.cli.error_handling import handle_domain_error
from dentrack.domain.backup import backup_filename, patients_filename
from dentrack.domain.errors import AccessDenied, DomainError


@click.group()
def backup_group():
    """Export, import and clear stored data."""
    pass


def _write_document(document: str, output: str | None, default_name: str) -> None:
    if output == "-":
        click.echo(document)
        return
    path = Path(output or default_name)
    path.write_text(document, encoding="utf-8")
    click.echo(f"Exported to {path}")


@backup_group.command("export")
@click.option("--output", "-o", help="Output file ('-' for stdout, default dental-backup-DATE.json)")
@click.pass_context
def export_all(ctx, output: str | None):
    """Export patients, treatments, appointments and payments.

    Procedure templates, treatment plans and settings are not included.
    """
    repo = ctx.obj["repo"]
    _write_document(repo.backup.export_all(), output, backup_filename(date.today()))


@backup_group.command("export-patients")
@click.option("--output", "-o", help="Output file ('-' for stdout, default dental-patients-DATE.json)")
@click.pass_context
def export_patients(ctx, output: str | None):
    """Export patients only."""
    repo = ctx.obj["repo"]
    _write_document(repo.backup.export_patients(), output, patients_filename(date.today()))


@backup_group.command("import")
@click.argument("backup_file", type=click.File("r", encoding="utf-8"))
@click.pass_context
def import_all(ctx, backup_file):
    """Restore from a full backup file.

    Every collection present in the file replaces the stored one.
    """
    repo = ctx.obj["repo"]
    try:
        repo.backup.import_all(backup_file.read())
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("Backup imported.")


@backup_group.command("import-patients")
@click.argument("patients_file", type=click.File("r", encoding="utf-8"))
@click.pass_context
def import_patients(ctx, patients_file):
    """Replace the patient list from a patients export."""
    repo = ctx.obj["repo"]
    try:
        repo.backup.import_patients(patients_file.read())
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("Patients imported.")


@backup_group.command("clear")
@click.option("--password", prompt=True, hide_input=True, help="Application password")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear_all(ctx, password: str, yes: bool):
    """Delete all stored data. This cannot be undone."""
    repo = ctx.obj["repo"]
    try:
        repo.access.require(password)
    except AccessDenied as e:
        handle_domain_error(ctx, e)

    if not yes:
        click.confirm("Delete ALL patients, treatments, appointments and payments?", abort=True)

    repo.backup.clear_all()
    click.echo("All data cleared.")


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
