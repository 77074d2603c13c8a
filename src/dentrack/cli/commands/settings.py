"""Settings, password and storage commands."""

import click
from dentrack.cli.error_handling import handle_domain_error
from dentrack.cli.parsing import parse_amount_or_exit
from dentrack.domain.errors import DomainError


@click.group()
def settings_group():
    """Show or change preferences."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show current preferences."""
    repo = ctx.obj["repo"]
    prefs = repo.preferences.get()
    click.echo(f"Primary color: {prefs.primary_color}")
    click.echo(f"Show revenue:  {'yes' if prefs.show_revenue else 'no'}")
    click.echo(f"Tax rate:      {prefs.tax_rate}%")


@settings_group.command("set")
@click.option("--primary-color", help="Theme color as 'H S% L%' (e.g., '200 98% 39%')")
@click.option("--show-revenue/--hide-revenue", default=None, help="Show revenue on the dashboard")
@click.option("--tax-rate", help="Invoice tax rate in percent")
@click.pass_context
def set_settings(ctx, primary_color: str | None, show_revenue: bool | None, tax_rate: str | None):
    """Change preferences. Options not given keep their value."""
    repo = ctx.obj["repo"]

    changes = {}
    if primary_color is not None:
        changes["primary_color"] = primary_color
    if show_revenue is not None:
        changes["show_revenue"] = show_revenue
    if tax_rate is not None:
        changes["tax_rate"] = parse_amount_or_exit(ctx, tax_rate, "tax rate")

    if not changes:
        click.echo("Nothing to change.")
        return

    try:
        repo.preferences.set(**changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("Preferences saved.")


@click.group()
def password_group():
    """Manage the application password."""
    pass


@password_group.command("change")
@click.option("--old", "old_password", prompt="Current password", hide_input=True)
@click.option(
    "--new",
    "new_password",
    prompt="New password",
    hide_input=True,
    confirmation_prompt=True,
)
@click.pass_context
def change_password(ctx, old_password: str, new_password: str):
    """Change the application password."""
    repo = ctx.obj["repo"]
    if not new_password:
        click.echo("Error: New password must not be empty", err=True)
        ctx.exit(1)
    if not repo.access.change(old_password, new_password):
        click.echo("Error: Current password is incorrect", err=True)
        ctx.exit(1)
    click.echo("Password changed.")


@click.command("storage")
@click.pass_context
def storage_usage(ctx):
    """Show how much of the storage capacity is used."""
    repo = ctx.obj["repo"]
    usage = repo.storage_usage()
    for key, size in usage.items():
        click.echo(f"{key:<26} {size / 1024:>10.1f} KB")

    used = repo.store.size_in_bytes()
    capacity = repo.store.capacity_bytes
    click.echo("-" * 40)
    click.echo(f"{'Total':<26} {used / 1024:>10.1f} KB of {capacity / 1024 / 1024:.1f} MB")
    if repo.access.is_default():
        click.echo("Note: the password is still the default; change it with 'dentrack password change'.")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
    cli.add_command(password_group, name="password")
    cli.add_command(storage_usage)
