"""CLI command definitions for squadkit."""

import click

from squadkit import __version__
from squadkit.commands.fizzy import fizzy
from squadkit.commands.install import install
from squadkit.commands.list import list_agents as list_command
from squadkit.commands.sync import sync
from squadkit.commands.update import update


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.version_option(__version__, prog_name="squadkit")
@click.pass_context
def cli(ctx, debug):
    """Install agent teams and skills into a project's .claude directory."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(install)
cli.add_command(list_command, name="list")
cli.add_command(update)
cli.add_command(fizzy)
cli.add_command(sync)

__all__ = ["cli"]


if __name__ == "__main__":
    cli()
