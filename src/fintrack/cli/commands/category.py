"""Category management commands."""

import click
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.category import CategoryService
from fintrack.domain.entities import TransactionType
from fintrack.domain.errors import DomainError

TYPE_CHOICES = [t.value for t in TransactionType]


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option("--type", "category_type", type=click.Choice(TYPE_CHOICES), required=True, help="Type partition")
@click.option("--color", help="Hex colour (a free palette colour is picked by default)")
@click.pass_context
def create_category(ctx, name: str, category_type: str, color: str | None):
    """Create a category.

    The same name may exist once as an income and once as an expense category.

    Examples:
        fintrack category create "Viagem" --type expense
        fintrack category create "Viagem" --type income --color "#10B981"
    """
    service = CategoryService(ctx.obj["db"])
    try:
        category_id = service.create_category(name=name, type=category_type, color=color)
        click.echo(f"Created {category_type} category '{name}' (ID: {category_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(TYPE_CHOICES), help="Only list one type")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories(TransactionType(category_type) if category_type else None)
    if not categories:
        click.echo("No categories found.")
        return

    for cat in categories:
        click.echo(f"ID: {cat.id:3d} | {cat.type.value:7s} | {cat.name:25s} | {cat.color}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
