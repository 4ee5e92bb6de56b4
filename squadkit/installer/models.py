"""Data models for the installation engine."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

DEFAULT_COUNT = 1
TOKEN_PLACEHOLDER = "${FIZZY_TOKEN}"
URL_PLACEHOLDER = "https://your-fizzy.fly.dev"
SLUG_PLACEHOLDER = "your-account"


class AgentCategory(Enum):
    CORE = "core"
    DEV = "selectable-dev"
    OPS = "selectable-ops"

    @property
    def selectable(self) -> bool:
        return self is not AgentCategory.CORE


@dataclass(frozen=True)
class AgentDescriptor:
    name: str
    category: AgentCategory
    description: str
    persona_path: Path
    skills: frozenset[str] = frozenset()
    fragment: str | None = None


@dataclass(frozen=True)
class SkillDescriptor:
    name: str
    path: Path
    line_count: int = 0


@dataclass(frozen=True)
class IntegrationSettings:
    """Issue-tracker sync settings persisted under the config's ``fizzy`` key.

    ``board_id`` of None means "leave whatever is stored alone".
    """

    url: str
    account_slug: str
    token: str = TOKEN_PLACEHOLDER
    board_id: str | None = None
    sync: bool = True

    def to_fields(self) -> dict:
        fields = {
            "url": self.url,
            "accountSlug": self.account_slug,
            "token": self.token,
            "sync": self.sync,
        }
        if self.board_id is not None:
            fields["boardId"] = self.board_id
        return fields


@dataclass(frozen=True)
class PersistedIntegration:
    """Integration values read back from a target; None means not configured."""

    url: str | None = None
    account_slug: str | None = None
    token: str | None = None
    board_id: str | None = None
    sync: bool = False


@dataclass
class InstallState:
    agents: dict[str, int] = field(default_factory=dict)
    integration: PersistedIntegration = field(default_factory=PersistedIntegration)
    initialized: bool = False

    @property
    def existing_agents(self) -> frozenset[str]:
        return frozenset(self.agents)


@dataclass
class SelectionRequest:
    agents: frozenset[str] = frozenset()
    global_count: int | None = None
    counts: dict[str, int] = field(default_factory=dict)
    integration: IntegrationSettings | None = None


@dataclass
class ResolvedInstallPlan:
    agents: frozenset[str]
    skills: frozenset[str]
    counts: dict[str, int]
    requested: frozenset[str] = frozenset()
    integration: IntegrationSettings | None = None


@dataclass
class InstallResult:
    agent_files: int
    skills: int
    fragments: int
    integration_changed: bool
    created_fragments: list[str] = field(default_factory=list)


@dataclass
class FileChange:
    path: Path
    action: str


@dataclass
class ChangePreview:
    changes: list[FileChange] = field(default_factory=list)

    def by_action(self, action: str) -> list[FileChange]:
        return [c for c in self.changes if c.action == action]

    @property
    def has_changes(self) -> bool:
        return any(c.action != "unchanged" for c in self.changes)


__all__ = [
    "DEFAULT_COUNT",
    "TOKEN_PLACEHOLDER",
    "URL_PLACEHOLDER",
    "SLUG_PLACEHOLDER",
    "AgentCategory",
    "AgentDescriptor",
    "SkillDescriptor",
    "IntegrationSettings",
    "PersistedIntegration",
    "InstallState",
    "SelectionRequest",
    "ResolvedInstallPlan",
    "InstallResult",
    "FileChange",
    "ChangePreview",
]
