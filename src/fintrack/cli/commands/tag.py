"""Tag management commands."""

import click
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.errors import DomainError
from fintrack.domain.tag import TagService


@click.group()
def tag_group():
    """Manage tags."""
    pass


@tag_group.command("create")
@click.argument("name")
@click.option("--color", help="Hex colour (random palette colour by default)")
@click.pass_context
def create_tag(ctx, name: str, color: str | None):
    """Create a tag."""
    service = TagService(ctx.obj["db"])
    try:
        tag_id = service.create_tag(name=name, color=color)
        click.echo(f"Created tag '{name}' (ID: {tag_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@tag_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide inactive tags")
@click.pass_context
def list_tags(ctx, active_only: bool):
    """List tags."""
    tags = TagService(ctx.obj["db"]).list_tags(active_only=active_only)
    if not tags:
        click.echo("No tags found.")
        return

    for tag in tags:
        status = "" if tag.is_active else " (inactive)"
        click.echo(f"ID: {tag.id:3d} | {tag.name:20s} | {tag.color}{status}")


def register_commands(cli):
    """Register tag commands with main CLI."""
    cli.add_command(tag_group, name="tag")
