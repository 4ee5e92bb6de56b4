"""Interactive agent picker."""

import sys
from typing import TYPE_CHECKING

import click

from ..installer import (
    DEFAULT_COUNT,
    AgentCategory,
    AgentDescriptor,
    InstallState,
    SelectionRequest,
    parse_index_choices,
    require_dev_choice,
)

if TYPE_CHECKING:
    from ..data_loader import Catalog


def stdin_is_tty() -> bool:
    return sys.stdin.isatty()


def format_agent_choice(index: int, agent: AgentDescriptor, installed: bool) -> str:
    """Format one picker line.

    Args:
        index: 1-based number the user types to pick this agent
        agent: Agent to describe
        installed: Whether the target already has the agent

    Returns:
        Label string, with "*" marking installed agents
    """
    marker = "*" if installed else " "
    return f"  [{index}] {marker} {agent.name:18s} {agent.description}"


def _show_group(agents: list[AgentDescriptor], state: InstallState) -> None:
    for i, agent in enumerate(agents, 1):
        click.echo(format_agent_choice(i, agent, agent.name in state.agents))
    click.echo("")


def _prompt_indices(message: str) -> str:
    return click.prompt(message, default="", show_default=False)


def prompt_counts(agents: list[str], state: InstallState) -> dict[str, int]:
    """Ask for an instance count per agent, defaulting to the persisted one.

    Args:
        agents: Names to prompt for, in prompt order
        state: Installed state supplying the defaults

    Returns:
        Dict of agent name to chosen count (always at least 1)
    """
    if not agents:
        return {}
    click.echo("")
    click.echo("Agent count (press Enter to keep default):")
    counts = {}
    for name in agents:
        counts[name] = click.prompt(
            f"  {name}",
            default=state.agents.get(name, DEFAULT_COUNT),
            type=click.IntRange(min=1),
        )
    return counts


def pick_agents_interactive(catalog: "Catalog", state: InstallState) -> SelectionRequest:
    """Walk the user through dev, infra and count choices.

    Two prompts pick agents by number, one group at a time:
    1. Dev stacks, at least one unless the target already has one
    2. Infrastructure, optional
    Counts are then asked for every agent that will be installed.

    Args:
        catalog: Catalog supplying the groups
        state: Installed state, used to mark installed agents and as defaults

    Returns:
        SelectionRequest with the newly chosen agents and a count for every
        agent that will be installed.

    Raises:
        RuntimeError: If not running in a TTY
        InvalidSelection: If no dev stack is chosen and none is installed
    """
    if not stdin_is_tty():
        raise RuntimeError("Interactive agent picker requires a TTY")

    click.echo("Core team (always installed):")
    for agent in catalog.core_agents():
        click.echo(f"  + {agent.name}")
    click.echo("")

    dev = catalog.list_agents(AgentCategory.DEV)
    click.echo("Select dev stack(s), at least one:")
    _show_group(dev, state)
    if state.agents:
        click.echo("  (* = already installed)")
        click.echo("")
    chosen = parse_index_choices(
        _prompt_indices("Enter numbers (comma-separated, e.g. 1,4)"),
        [a.name for a in dev],
    )
    require_dev_choice(chosen, state, catalog)

    ops = catalog.list_agents(AgentCategory.OPS)
    click.echo("")
    click.echo("Select infrastructure (optional, press Enter to skip):")
    _show_group(ops, state)
    chosen += parse_index_choices(
        _prompt_indices("Enter numbers (comma-separated, press Enter to skip)"),
        [a.name for a in ops],
    )

    union = sorted(state.existing_agents | set(chosen))
    return SelectionRequest(
        agents=frozenset(chosen),
        counts=prompt_counts(union, state),
    )


__all__ = [
    "stdin_is_tty",
    "format_agent_choice",
    "prompt_counts",
    "pick_agents_interactive",
]
