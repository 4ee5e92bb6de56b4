"""Shared helpers for commands."""

import sys
from pathlib import Path

import click

from squadkit.errors import (
    InvalidSelection,
    SquadError,
    TargetNotInitialized,
    format_error,
    format_suggestion,
)
from squadkit.installer import InstallResult, ResolvedInstallPlan
from squadkit.paths import TargetLayout

RULE = "=" * 44


def exit_with_error(error: SquadError) -> None:
    """Print ``error`` to stderr and exit with its class's exit code."""
    if isinstance(error, TargetNotInitialized):
        click.echo(
            format_suggestion(str(error), "run 'squadkit install PROJECT' first"),
            err=True,
        )
    else:
        click.echo(format_error(str(error)), err=True)
    if isinstance(error, InvalidSelection) and error.valid:
        click.echo("", err=True)
        click.echo("Available agents:", err=True)
        for name in error.valid:
            click.echo(f"  {name}", err=True)
    sys.exit(error.exit_code)


def project_argument(func):
    return click.argument(
        "project", type=click.Path(file_okay=False, path_type=Path)
    )(func)


def print_install_summary(
    result: InstallResult,
    plan: ResolvedInstallPlan,
    layout: TargetLayout,
    core: list[str],
    heading: str = "squadkit installed successfully!",
) -> None:
    click.echo("")
    click.echo(RULE)
    click.echo(f"  {heading}")
    click.echo(RULE)
    click.echo("")
    click.echo(f"  Agents:           {result.agent_files}")
    click.echo(f"  Skills:           {result.skills}")
    click.echo(f"  Pipeline configs: {result.fragments}")
    click.echo(
        f"  Fizzy settings:   {'updated' if result.integration_changed else 'unchanged'}"
    )
    click.echo("")
    click.echo("Installed agents:")
    click.echo(f"  Core:  {' '.join(core)}")
    click.echo(f"  Stack: {' '.join(sorted(plan.agents)) or '(none)'}")
    if any(count != 1 for count in plan.counts.values()):
        click.echo("  Counts:")
        for name, count in sorted(plan.counts.items()):
            click.echo(f"    {name:20s} x{count}")
    click.echo("")
    click.echo(f"Target: {layout.root}")
