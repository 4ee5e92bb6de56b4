"""List command implementation."""

import click

from squadkit import SquadError, setup_logging
from squadkit.data_loader import get_catalog
from squadkit.installer import AgentCategory

from .utils import exit_with_error


@click.command(name="list")
@click.pass_context
def list_agents(ctx):
    """List the agents available in the catalog."""
    setup_logging(ctx.obj.get("debug", False))
    try:
        run_list_agents()
    except SquadError as e:
        exit_with_error(e)


def _describe(catalog, agent) -> str:
    skills = len(agent.skills)
    lines = catalog.skill_line_count(agent.name)
    return f"{agent.description} ({skills} skills, {lines} lines)"


def run_list_agents() -> None:
    catalog = get_catalog()

    click.echo("Core (always installed):")
    for agent in catalog.core_agents():
        click.echo(f"  {agent.name:20s} {_describe(catalog, agent)}")

    for title, category in (
        ("Dev stacks", AgentCategory.DEV),
        ("Infrastructure", AgentCategory.OPS),
    ):
        click.echo("")
        click.echo(f"{title}:")
        for i, agent in enumerate(catalog.list_agents(category), 1):
            click.echo(f"  [{i}] {agent.name:18s} {_describe(catalog, agent)}")

    click.echo("")
    click.echo(f"Utility skills: {', '.join(sorted(catalog.utility_skills))}")
