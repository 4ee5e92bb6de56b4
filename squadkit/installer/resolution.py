"""Agent/skill resolution and per-agent count negotiation.

Both functions are pure and never touch the filesystem.
"""

from typing import TYPE_CHECKING

from .models import DEFAULT_COUNT, InstallState, SelectionRequest

if TYPE_CHECKING:
    from squadkit.data_loader import Catalog


def resolve(
    state: InstallState,
    request: SelectionRequest,
    catalog: "Catalog",
) -> tuple[frozenset[str], frozenset[str]]:
    """Merge existing and requested agents and collect the skills they need.

    Args:
        state: What the target already has installed
        request: This invocation's selection
        catalog: Catalog supplying each agent's skills

    Returns:
        Tuple of (union of agents, skills required by utility set, every core
        agent and every agent in the union)
    """
    agents = state.existing_agents | request.agents

    skills = set(catalog.utility_skills)
    for agent in catalog.core_agents():
        skills |= agent.skills
    for name in agents:
        skills |= catalog.skills_of(name)

    return agents, frozenset(skills)


def negotiate_counts(
    agents: frozenset[str],
    existing_counts: dict[str, int],
    requested: frozenset[str],
    global_override: int | None = None,
    overrides: dict[str, int] | None = None,
) -> dict[str, int]:
    """Pick the instance count for every agent in ``agents``.

    Precedence, highest first:
    1. an explicit per-agent override from this invocation
    2. the global override, only for agents requested in this invocation
    3. the persisted count
    4. DEFAULT_COUNT

    An installed agent that is not re-requested keeps its count even when a
    global override is given.

    Args:
        agents: Union of installed and requested agents
        existing_counts: Persisted count per installed agent
        requested: Agents named in this invocation
        global_override: Count given with --count, if any
        overrides: Per-agent counts from the interactive picker

    Returns:
        Dict of agent name to instance count, covering every agent.
    """
    overrides = overrides or {}
    counts = {}
    for name in sorted(agents):
        if name in overrides:
            counts[name] = overrides[name]
        elif global_override is not None and name in requested:
            counts[name] = global_override
        else:
            counts[name] = existing_counts.get(name, DEFAULT_COUNT)
    return counts


__all__ = [
    "resolve",
    "negotiate_counts",
]
