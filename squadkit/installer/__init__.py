"""Installer engine: state reading, selection, resolution and installation."""

from .installation import STAGES, apply_integration, apply_plan
from .models import (
    DEFAULT_COUNT,
    TOKEN_PLACEHOLDER,
    AgentCategory,
    AgentDescriptor,
    ChangePreview,
    FileChange,
    InstallResult,
    InstallState,
    IntegrationSettings,
    PersistedIntegration,
    ResolvedInstallPlan,
    SelectionRequest,
    SkillDescriptor,
)
from .planning import build_plan, preview_changes, render_plan, render_preview
from .resolution import negotiate_counts, resolve
from .selection import (
    parse_agent_list,
    parse_global_count,
    parse_index_choices,
    parse_integration_settings,
    require_dev_choice,
)
from .state import read_install_state

__all__ = [
    "STAGES",
    "DEFAULT_COUNT",
    "TOKEN_PLACEHOLDER",
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
    "read_install_state",
    "parse_agent_list",
    "parse_index_choices",
    "require_dev_choice",
    "parse_global_count",
    "parse_integration_settings",
    "resolve",
    "negotiate_counts",
    "build_plan",
    "render_plan",
    "preview_changes",
    "render_preview",
    "apply_plan",
    "apply_integration",
]
