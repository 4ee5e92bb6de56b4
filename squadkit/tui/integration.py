"""Interactive prompts for issue-tracker sync settings."""

import click

from ..installer import TOKEN_PLACEHOLDER, IntegrationSettings, PersistedIntegration


def _prompt_with_existing(label: str, existing: str | None, example: str = "") -> str:
    if existing:
        return click.prompt(f"  {label}", default=existing).strip()
    suffix = f" ({example})" if example else ""
    return click.prompt(f"  {label}{suffix}", default="", show_default=False).strip()


def prompt_integration_settings(
    persisted: PersistedIntegration,
) -> IntegrationSettings | None:
    """Prompt for Fizzy settings, offering stored values as defaults.

    Template placeholders were already dropped when the state was read, so
    they are never offered back as defaults.

    Args:
        persisted: Settings already stored in the target

    Returns:
        IntegrationSettings, or None if the URL or account slug is left empty.
    """
    click.echo("")
    click.echo("  Fizzy setup (press Enter to keep existing value):")

    url = _prompt_with_existing("Fizzy URL", persisted.url, "e.g. https://fizzy.example.com")
    slug = _prompt_with_existing("Account slug", persisted.account_slug)
    token = click.prompt(
        "  API token (or ${FIZZY_TOKEN} for env var)",
        default=persisted.token or TOKEN_PLACEHOLDER,
    ).strip()
    board = _prompt_with_existing(
        "Board ID", persisted.board_id, "optional, press Enter to skip"
    )

    if not url or not slug:
        return None
    return IntegrationSettings(
        url=url,
        account_slug=slug,
        token=token or TOKEN_PLACEHOLDER,
        board_id=board or None,
    )


def maybe_prompt_integration(persisted: PersistedIntegration) -> IntegrationSettings | None:
    """Ask whether to configure sync at all, then prompt if so.

    Returns:
        IntegrationSettings, or None if the user declines or skips.
    """
    click.echo("")
    if not click.confirm("Configure Fizzy sync?", default=False):
        return None
    settings = prompt_integration_settings(persisted)
    if settings is None:
        click.echo("  Skipped (URL and slug are required).")
    return settings


__all__ = [
    "prompt_integration_settings",
    "maybe_prompt_integration",
]
