"""Reconstruct what is already installed in a target directory."""

import logging
from typing import TYPE_CHECKING

from squadkit.config import ConfigError, load_json
from squadkit.paths import TargetLayout

from .models import (
    DEFAULT_COUNT,
    SLUG_PLACEHOLDER,
    URL_PLACEHOLDER,
    InstallState,
    PersistedIntegration,
)

if TYPE_CHECKING:
    from squadkit.data_loader import Catalog

_logging = logging.getLogger(__name__)

INTEGRATION_KEY = "fizzy"

# Template values that mean "never configured".
_PLACEHOLDERS = {
    "url": URL_PLACEHOLDER,
    "accountSlug": SLUG_PLACEHOLDER,
}


def parse_count(value) -> int | None:
    """Return ``value`` as a positive int, or None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        count = int(value.strip())
        return count if count > 0 else None
    return None


def read_fragment_count(path) -> int:
    """Persisted count of one fragment; unreadable or missing counts mean 1."""
    try:
        data = load_json(path)
    except ConfigError as e:
        _logging.warning(f"Ignoring unreadable agent config {path}: {e}")
        return DEFAULT_COUNT
    count = parse_count(data.get("count"))
    return count if count is not None else DEFAULT_COUNT


def _optional_str(section: dict, key: str) -> str | None:
    value = section.get(key)
    if not isinstance(value, str) or not value:
        return None
    if _PLACEHOLDERS.get(key) == value:
        return None
    return value


def read_integration(layout: TargetLayout) -> PersistedIntegration:
    """Read the stored Fizzy settings of a target.

    Args:
        layout: Target directory layout

    Returns:
        PersistedIntegration with template placeholders mapped to None. An
        absent or unreadable config.json yields an empty one.
    """
    if not layout.config_file.is_file():
        return PersistedIntegration()
    try:
        data = load_json(layout.config_file)
    except ConfigError as e:
        _logging.warning(f"Ignoring unreadable config {layout.config_file}: {e}")
        return PersistedIntegration()

    section = data.get(INTEGRATION_KEY)
    if not isinstance(section, dict):
        return PersistedIntegration()
    return PersistedIntegration(
        url=_optional_str(section, "url"),
        account_slug=_optional_str(section, "accountSlug"),
        token=_optional_str(section, "token"),
        board_id=_optional_str(section, "boardId"),
        sync=section.get("sync") is True,
    )


def read_install_state(layout: TargetLayout, catalog: "Catalog") -> InstallState:
    """Read the installed selectable agents, their counts and integration settings.

    An agent counts as installed when its fragment file exists, even if its
    persona file is missing. A missing target yields an empty state.

    Args:
        layout: Target directory layout
        catalog: Catalog deciding which fragments belong to selectable agents

    Returns:
        InstallState with selectable agents mapped to their persisted counts.
    """
    agents = {}
    if layout.fragments_dir.is_dir():
        for fragment in sorted(layout.fragments_dir.glob("*.json")):
            name = fragment.stem
            if catalog.is_selectable(name):
                agents[name] = read_fragment_count(fragment)
            elif not catalog.has_agent(name) and catalog.agent_for_fragment(name) is None:
                _logging.warning(f"Ignoring config for unknown agent '{name}'")

    state = InstallState(
        agents=agents,
        integration=read_integration(layout),
        initialized=layout.is_initialized(),
    )
    _logging.debug(f"Install state for {layout.root}: {state.agents}")
    return state


__all__ = [
    "INTEGRATION_KEY",
    "parse_count",
    "read_fragment_count",
    "read_integration",
    "read_install_state",
]
