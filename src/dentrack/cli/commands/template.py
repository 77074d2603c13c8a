"""Procedure template and treatment plan commands."""

import click
from dentrack.cli.error_handling import handle_domain_error
from dentrack.cli.parsing import money, parse_amount_or_exit
from dentrack.domain.errors import DomainError
from dentrack.domain.stores import ProcedureTemplateStore, planned_procedure_from_template


@click.group()
def procedure_group():
    """Manage procedure templates."""
    pass


@procedure_group.command("add")
@click.argument("name")
@click.option("--cost", required=True, help="Default cost")
@click.option(
    "--category",
    type=click.Choice(ProcedureTemplateStore.CATEGORIES),
    default="General",
    show_default=True,
)
@click.option("--code", help="Procedure code")
@click.option("--duration", type=click.IntRange(min=1), help="Typical duration in minutes")
@click.option("--description", help="Description")
@click.pass_context
def add_procedure(
    ctx,
    name: str,
    cost: str,
    category: str,
    code: str | None,
    duration: int | None,
    description: str | None,
):
    """Create a procedure template.

    Examples:
        dentrack procedure add "Composite filling" --cost 120 --category Restorative --code D2391
    """
    repo = ctx.obj["repo"]
    try:
        template = repo.procedures.add(
            name=name,
            default_cost=parse_amount_or_exit(ctx, cost, "cost"),
            category=category,
            code=code,
            duration=duration,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created procedure '{template.name}' (ID: {template.id})")


@procedure_group.command("list")
@click.option("--category", help="Only this category")
@click.pass_context
def list_procedures(ctx, category: str | None):
    """List procedure templates."""
    repo = ctx.obj["repo"]
    templates = repo.procedures.get_by_category(category) if category else repo.procedures.get_all()

    if not templates:
        click.echo("No procedures found.")
        return

    for t in templates:
        code = f" [{t.code}]" if t.code else ""
        click.echo(f"{t.id}  {t.name}{code}  {t.category}  {money(t.default_cost)}")


@procedure_group.command("delete")
@click.argument("procedure_id")
@click.pass_context
def delete_procedure(ctx, procedure_id: str):
    """Delete a procedure template.

    Treatment plans keep their copies of the procedure's name and cost.
    """
    repo = ctx.obj["repo"]
    try:
        repo.procedures.delete(procedure_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted procedure {procedure_id}")


@click.group()
def plan_group():
    """Manage treatment plans."""
    pass


@plan_group.command("add")
@click.argument("name")
@click.option("--description", default="", help="Description")
@click.option(
    "--procedure",
    "procedure_ids",
    multiple=True,
    help="Procedure template ID (repeat for several; optionally ID:TOOTH)",
)
@click.option("--cost", "cost_override", help="Override the total cost")
@click.pass_context
def add_plan(ctx, name: str, description: str, procedure_ids: tuple[str, ...], cost_override: str | None):
    """Create a treatment plan from procedure templates.

    Each line copies the template's current name and cost.

    Examples:
        dentrack plan add "Full restoration" --procedure TEMPLATE_ID:14 --procedure TEMPLATE_ID:15
    """
    repo = ctx.obj["repo"]

    lines = []
    for ref in procedure_ids:
        template_id, _, tooth = ref.partition(":")
        template = repo.procedures.get_by_id(template_id)
        if template is None:
            click.echo(f"Error: Procedure template {template_id} not found", err=True)
            ctx.exit(1)
        lines.append(planned_procedure_from_template(template, tooth=tooth or None))

    values = {}
    if cost_override is not None:
        values["total_cost"] = parse_amount_or_exit(ctx, cost_override, "cost")

    try:
        plan = repo.treatment_plans.add(name=name, description=description, procedures=lines, **values)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created plan '{plan.name}' with {len(plan.procedures)} procedure(s), total {money(plan.total_cost)} (ID: {plan.id})")


@plan_group.command("list")
@click.pass_context
def list_plans(ctx):
    """List treatment plans."""
    repo = ctx.obj["repo"]
    plans = repo.treatment_plans.get_all()

    if not plans:
        click.echo("No treatment plans found.")
        return

    for plan in plans:
        click.echo(f"\n{plan.name} (ID: {plan.id})  total {money(plan.total_cost)}")
        if plan.description:
            click.echo(f"  {plan.description}")
        for line in plan.procedures:
            tooth = f" #{line.tooth}" if line.tooth else ""
            click.echo(f"  - {line.procedure_name}{tooth}  {money(line.cost)}")


@plan_group.command("delete")
@click.argument("plan_id")
@click.pass_context
def delete_plan(ctx, plan_id: str):
    """Delete a treatment plan."""
    repo = ctx.obj["repo"]
    try:
        repo.treatment_plans.delete(plan_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted plan {plan_id}")


def register_commands(cli):
    """Register procedure and plan commands with main CLI."""
    cli.add_command(procedure_group, name="procedure")
    cli.add_command(plan_group, name="plan")
