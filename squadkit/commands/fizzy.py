"""Fizzy command implementation."""

from pathlib import Path

import click

from squadkit import SquadError, TargetNotInitialized, ValidationError, setup_logging
from squadkit.data_loader import get_catalog
from squadkit.installer import apply_integration, parse_integration_settings
from squadkit.installer.state import read_integration
from squadkit.paths import TargetLayout
from squadkit.tui import prompt_integration_settings, stdin_is_tty

from .utils import exit_with_error, project_argument


@click.command()
@project_argument
@click.option(
    "--settings", "settings_text", default=None, metavar="URL,SLUG[,TOKEN[,BOARD]]",
    help="Settings to store; prompts for them when omitted",
)
@click.pass_context
def fizzy(ctx, project: Path, settings_text: str | None):
    """Configure Fizzy sync for an installed PROJECT."""
    setup_logging(ctx.obj.get("debug", False))
    try:
        run_fizzy(project, settings_text)
    except SquadError as e:
        exit_with_error(e)


def run_fizzy(project: Path, settings_text: str | None) -> None:
    catalog = get_catalog()
    layout = TargetLayout.for_project(project)
    if not layout.is_initialized():
        raise TargetNotInitialized(layout.config_file)

    if settings_text is not None:
        settings = parse_integration_settings(settings_text)
    else:
        if not stdin_is_tty():
            raise ValidationError(
                "stdin is not a terminal; pass --settings url,slug[,token[,board]]"
            )
        settings = prompt_integration_settings(read_integration(layout))
        if settings is None:
            raise ValidationError("Fizzy URL and account slug are required")

    changed = apply_integration(settings, layout, catalog)
    click.echo("")
    if changed:
        click.echo(f"Fizzy configured: {settings.url} ({settings.account_slug})")
    else:
        click.echo("Fizzy settings unchanged.")
    click.echo(f"  Config: {layout.config_file}")
