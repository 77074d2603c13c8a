"""Main CLI entry point."""

import logging

import click
from dentrack.domain.repository import Repository
from dentrack.storage.factories import create_sqlite_store

# Import and register all commands at module level
from dentrack.cli.commands import (
    patient,
    treatment,
    appointment,
    payment,
    template,
    report,
    backup,
    settings,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides DENTRACK_DB_PATH environment variable)",
    envvar="DENTRACK_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Dentrack - Dental practice records.

    Keep patients, treatments, appointments and payments for a single
    practice in a local database, with backups and invoice totals.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Open the store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        ctx.obj["repo"] = Repository(store)
        ctx.call_on_close(store.disconnect)


# Register all commands
patient.register_commands(cli)
treatment.register_commands(cli)
appointment.register_commands(cli)
payment.register_commands(cli)
template.register_commands(cli)
report.register_commands(cli)
backup.register_commands(cli)
settings.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
