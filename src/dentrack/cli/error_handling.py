"""CLI error handling helpers."""

import click

from dentrack.domain.errors import DomainError, StorageQuotaExceeded


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, StorageQuotaExceeded):
        click.echo("Hint: run 'dentrack backup export' and then 'dentrack backup clear'.", err=True)
    ctx.exit(1)
