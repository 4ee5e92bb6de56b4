"""Install command implementation."""

import logging
from dataclasses import replace
from pathlib import Path

import click

from squadkit import SquadError, ValidationError, setup_logging
from squadkit.data_loader import get_catalog
from squadkit.installer import (
    SelectionRequest,
    apply_plan,
    build_plan,
    parse_agent_list,
    parse_global_count,
    parse_integration_settings,
    preview_changes,
    read_install_state,
    render_plan,
    render_preview,
)
from squadkit.paths import TargetLayout
from squadkit.tui import maybe_prompt_integration, pick_agents_interactive, stdin_is_tty

from .utils import exit_with_error, print_install_summary, project_argument

_logging = logging.getLogger(__name__)


@click.command()
@project_argument
@click.option(
    "--agents", "-a", default=None,
    help="Comma-separated agents to add, e.g. dev-rails,devop-aws (skips the picker)",
)
@click.option(
    "--count", "-c", default=None,
    help="Instance count for the newly added agents (requires --agents)",
)
@click.option(
    "--fizzy", "fizzy_settings", default=None, metavar="URL,SLUG[,TOKEN[,BOARD]]",
    help="Configure Fizzy sync settings",
)
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def install(
    ctx,
    project: Path,
    agents: str | None,
    count: str | None,
    fizzy_settings: str | None,
    dry_run: bool,
    yes: bool,
):
    """Install the core team plus selected agents into PROJECT/.claude.

    Agents already installed in PROJECT stay installed; the selection is
    merged with them. Without --agents an interactive picker is shown.
    """
    setup_logging(ctx.obj.get("debug", False))
    try:
        run_install(project, agents, count, fizzy_settings, dry_run, yes)
    except SquadError as e:
        exit_with_error(e)


def run_install(
    project: Path,
    agents: str | None,
    count: str | None,
    fizzy_settings: str | None,
    dry_run: bool = False,
    yes: bool = False,
) -> None:
    catalog = get_catalog()
    layout = TargetLayout.for_project(project)

    # Everything the user typed is validated before the target is touched.
    global_count = parse_global_count(count)
    integration = parse_integration_settings(fizzy_settings) if fizzy_settings else None

    interactive = agents is None
    if interactive:
        if global_count is not None:
            raise ValidationError(
                "--count requires --agents; the picker asks for a count per agent"
            )
        if not stdin_is_tty():
            raise ValidationError(
                "no agents selected and stdin is not a terminal; "
                "pass --agents a,b to install non-interactively"
            )
    else:
        requested = parse_agent_list(agents, catalog)

    state = read_install_state(layout, catalog)

    if interactive:
        click.echo("")
        click.echo(f"Installing agents into {layout.root}")
        click.echo("")
        request = pick_agents_interactive(catalog, state)
        if integration is None:
            integration = maybe_prompt_integration(state.integration)
        request = replace(request, integration=integration)
    else:
        request = SelectionRequest(
            agents=requested,
            global_count=global_count,
            integration=integration,
        )

    plan = build_plan(state, request, catalog)
    _logging.debug(f"Resolved plan: agents={sorted(plan.agents)} counts={plan.counts}")

    if dry_run:
        click.echo(render_plan(plan, catalog))
        click.echo("")
        click.echo(render_preview(preview_changes(plan, layout, catalog), layout))
        click.echo("")
        click.echo("[DRY-RUN] No changes made.")
        return

    if interactive:
        click.echo("")
        click.echo(render_plan(plan, catalog))
        click.echo("")
        if not yes and not click.confirm(f"Install to {layout.root}?", default=True):
            click.echo("Aborted.")
            return

    result = apply_plan(plan, layout, catalog)
    print_install_summary(
        result, plan, layout, [a.name for a in catalog.core_agents()]
    )
    if result.created_fragments:
        _logging.debug(f"Created configs: {', '.join(result.created_fragments)}")
