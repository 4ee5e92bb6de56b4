"""Turn user input into a SelectionRequest."""

import logging
from typing import TYPE_CHECKING

from squadkit.errors import InvalidSelection, ValidationError

from .models import TOKEN_PLACEHOLDER, AgentCategory, IntegrationSettings, InstallState
from .state import parse_count

if TYPE_CHECKING:
    from squadkit.data_loader import Catalog

_logging = logging.getLogger(__name__)


def parse_agent_list(text: str, catalog: "Catalog") -> frozenset[str]:
    """Validate a comma-separated agent list from the command line.

    Blank entries are skipped. The whole list is rejected on the first
    unknown name.

    Raises:
        ValidationError: If no agent is named.
        InvalidSelection: If a name is unknown or names a core agent.
    """
    names = [token.strip() for token in text.split(",") if token.strip()]
    if not names:
        raise ValidationError("no agents given to --agents")

    for name in names:
        if catalog.is_selectable(name):
            continue
        if catalog.has_agent(name):
            raise InvalidSelection.core_agent(name, catalog.selectable_names())
        raise InvalidSelection.unknown_agent(name, catalog.selectable_names())
    return frozenset(names)


def parse_index_choices(text: str, options: list[str]) -> list[str]:
    """Map a comma-separated list of 1-based indices onto ``options``.

    Tokens that are not numbers or fall outside the range are ignored, so a
    stray typo in manual entry does not abort the whole picker.

    Args:
        text: Raw input, e.g. "1, 4"
        options: Agent names in display order

    Returns:
        Chosen names in entry order, without duplicates.
    """
    chosen = []
    for token in text.split(","):
        token = token.strip()
        if not token.isdigit():
            if token:
                _logging.debug(f"Ignoring non-numeric choice '{token}'")
            continue
        index = int(token)
        if not 1 <= index <= len(options):
            _logging.debug(f"Ignoring out-of-range choice {index}")
            continue
        name = options[index - 1]
        if name not in chosen:
            chosen.append(name)
    return chosen


def require_dev_choice(
    chosen: list[str], state: InstallState, catalog: "Catalog"
) -> None:
    """Require a dev-class agent unless one is already installed.

    Raises:
        InvalidSelection: If neither the choice nor the install has one.
    """
    dev = {a.name for a in catalog.list_agents(AgentCategory.DEV)}
    if dev & set(chosen) or dev & state.existing_agents:
        return
    raise InvalidSelection(
        "at least one dev stack is required",
        valid=sorted(dev),
    )


def parse_global_count(value: str | int | None) -> int | None:
    """Validate ``--count``.

    Raises:
        ValidationError: If the value is not a positive integer.
    """
    if value is None:
        return None
    count = parse_count(value)
    if count is None:
        raise ValidationError(f"count must be a positive integer, got '{value}'")
    return count


def parse_integration_settings(text: str) -> IntegrationSettings:
    """Parse ``url,slug[,token[,board]]``.

    A missing token becomes the ``${FIZZY_TOKEN}`` placeholder. A missing
    board leaves any stored board id untouched.

    Raises:
        ValidationError: If the URL or account slug is empty.
    """
    parts = [p.strip() for p in text.split(",")]
    parts += [""] * (4 - len(parts))
    url, slug, token, board = parts[:4]
    if not url or not slug:
        raise ValidationError("Fizzy URL and account slug are required")
    return IntegrationSettings(
        url=url,
        account_slug=slug,
        token=token or TOKEN_PLACEHOLDER,
        board_id=board or None,
    )


__all__ = [
    "parse_agent_list",
    "parse_index_choices",
    "require_dev_choice",
    "parse_global_count",
    "parse_integration_settings",
]
