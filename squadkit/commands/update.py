"""Update command implementation."""

from pathlib import Path

import click

from squadkit import SquadError, TargetNotInitialized, setup_logging
from squadkit.data_loader import get_catalog
from squadkit.installer import (
    STAGES,
    SelectionRequest,
    apply_plan,
    build_plan,
    preview_changes,
    read_install_state,
    render_preview,
)
from squadkit.paths import TargetLayout

from .utils import exit_with_error, print_install_summary, project_argument


@click.command()
@project_argument
@click.argument("category", required=False, type=click.Choice(STAGES))
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.pass_context
def update(ctx, project: Path, category: str | None, dry_run: bool):
    """Refresh an existing install in PROJECT from the catalog.

    Keeps the installed agents, their counts and the Fizzy settings. Pass a
    CATEGORY to refresh only that part of the install.
    """
    setup_logging(ctx.obj.get("debug", False))
    try:
        run_update(project, category, dry_run)
    except SquadError as e:
        exit_with_error(e)


def run_update(project: Path, category: str | None = None, dry_run: bool = False) -> None:
    catalog = get_catalog()
    layout = TargetLayout.for_project(project)
    if not layout.is_initialized():
        raise TargetNotInitialized(layout.config_file)

    stages = (category,) if category else None
    state = read_install_state(layout, catalog)
    plan = build_plan(state, SelectionRequest(), catalog)

    if category:
        click.echo(f"Refreshing {category} only")

    if dry_run:
        click.echo(render_preview(preview_changes(plan, layout, catalog, stages), layout))
        click.echo("")
        click.echo("[DRY-RUN] No changes made.")
        return

    result = apply_plan(plan, layout, catalog, stages)
    print_install_summary(
        result,
        plan,
        layout,
        [a.name for a in catalog.core_agents()],
        heading="squadkit updated successfully!",
    )
