"""Build, render and preview an installation plan."""

from typing import TYPE_CHECKING

from squadkit.paths import TargetLayout

from .installation import (
    ConfigWrites,
    config_action,
    persona_ops,
    plan_config_writes,
    select_stages,
    skill_ops,
    support_ops,
    would_change,
)
from .models import ChangePreview, FileChange, InstallState, ResolvedInstallPlan, SelectionRequest
from .resolution import negotiate_counts, resolve

if TYPE_CHECKING:
    from squadkit.data_loader import Catalog


def build_plan(
    state: InstallState, request: SelectionRequest, catalog: "Catalog"
) -> ResolvedInstallPlan:
    """Resolve agents, skills and counts for one invocation.

    Args:
        state: What the target already has installed
        request: This invocation's selection and overrides
        catalog: Catalog the names are resolved against

    Returns:
        ResolvedInstallPlan ready for apply_plan or preview_changes.
    """
    agents, skills = resolve(state, request, catalog)
    counts = negotiate_counts(
        agents,
        state.agents,
        request.agents,
        request.global_count,
        request.counts,
    )
    return ResolvedInstallPlan(
        agents=agents,
        skills=skills,
        counts=counts,
        requested=request.agents,
        integration=request.integration,
    )


def render_plan(plan: ResolvedInstallPlan, catalog: "Catalog") -> str:
    core = [a.name for a in catalog.core_agents()]
    lines = [
        "Summary:",
        f"  Agents: {len(core) + len(plan.agents)} "
        f"({len(core)} core + {len(plan.agents)} selected)",
    ]
    for name in sorted(plan.agents):
        marker = " (new)" if name in plan.requested else ""
        lines.append(f"    {name:20s} x{plan.counts[name]}{marker}")
    lines.append(f"  Skills: {len(plan.skills)} (deduped)")
    if plan.integration is not None:
        lines.append(
            f"  Fizzy:  {plan.integration.url} ({plan.integration.account_slug})"
        )
    return "\n".join(lines)


def preview_changes(
    plan: ResolvedInstallPlan,
    layout: TargetLayout,
    catalog: "Catalog",
    stages=None,
) -> ChangePreview:
    """Report what ``apply_plan`` would do to ``layout`` without writing.

    Args:
        plan: Resolved plan to preview
        layout: Target directory layout
        catalog: Catalog supplying the source files
        stages: Subset of STAGES to preview, or None for all of them

    Returns:
        ChangePreview with one FileChange per file touched. Files the skills
        replacement would delete are reported as "remove".

    Raises:
        ValidationError: If ``stages`` names an unknown stage.
        ConfigError: If the existing config.json does not parse.
    """
    stages = select_stages(stages)
    preview = ChangePreview()

    if "agents" in stages:
        for op in persona_ops(plan, layout, catalog):
            preview.changes.append(FileChange(op.dest, would_change(op)))

    if "skills" in stages:
        skill_files = skill_ops(plan, layout, catalog)
        for op in skill_files:
            preview.changes.append(FileChange(op.dest, would_change(op)))
        wanted = {op.dest for op in skill_files}
        if layout.skills_dir.is_dir():
            for existing in sorted(layout.skills_dir.rglob("*")):
                if existing.is_file() and existing not in wanted:
                    preview.changes.append(FileChange(existing, "remove"))

    for op in support_ops(layout, catalog, stages):
        preview.changes.append(FileChange(op.dest, would_change(op)))

    if "pipeline" in stages:
        writes = plan_config_writes(plan, layout, catalog)
    else:
        writes = ConfigWrites()
    for path, data in writes.files.items():
        preview.changes.append(FileChange(path, config_action(path, data)))
    for path in writes.unchanged:
        preview.changes.append(FileChange(path, "unchanged"))

    return preview


def render_preview(preview: ChangePreview, layout: TargetLayout) -> str:
    lines = []
    for action in ("create", "update", "remove"):
        for change in preview.by_action(action):
            rel = change.path.relative_to(layout.root.parent)
            lines.append(f"  [dry-run] Would {action}: {rel}")
    lines.append("")
    lines.append(
        f"  Create: {len(preview.by_action('create'))}  "
        f"Update: {len(preview.by_action('update'))}  "
        f"Remove: {len(preview.by_action('remove'))}  "
        f"Up to date: {len(preview.by_action('unchanged'))}"
    )
    return "\n".join(lines)


__all__ = [
    "build_plan",
    "render_plan",
    "preview_changes",
    "render_preview",
]
