"""Sync command implementation."""

from pathlib import Path

import click

from squadkit import SquadError, setup_logging
from squadkit.paths import TargetLayout
from squadkit.sync import run_sync

from .utils import exit_with_error, project_argument


@click.command()
@project_argument
@click.pass_context
def sync(ctx, project: Path):
    """Run the installed Fizzy sync script for PROJECT."""
    setup_logging(ctx.obj.get("debug", False))
    try:
        output = run_sync(TargetLayout.for_project(project))
    except SquadError as e:
        exit_with_error(e)
    if output:
        click.echo(output)
