"""Terminal prompts for the interactive installer.

- picker: dev / infra agent selection by index and per-agent counts
- integration: Fizzy sync settings

All prompts go through click so they work under CliRunner in tests.
"""

from .integration import maybe_prompt_integration, prompt_integration_settings
from .picker import (
    format_agent_choice,
    pick_agents_interactive,
    prompt_counts,
    stdin_is_tty,
)

__all__ = [
    "stdin_is_tty",
    "format_agent_choice",
    "pick_agents_interactive",
    "prompt_counts",
    "prompt_integration_settings",
    "maybe_prompt_integration",
]
