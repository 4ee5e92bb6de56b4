"""Write a resolved plan into a target directory.

Stages run in a fixed order: personas, skills, support files, config. A run
interrupted part-way leaves later stages unapplied, and the next run repairs
them. The skills subtree is the only thing ever deleted.

A refresh can be limited to some of the STAGES. The existing config.json is
parsed before the first write, so a malformed one aborts the run untouched.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from squadkit.config import ConfigError, dump_json, load_json, upsert_fields, write_json_atomic
from squadkit.errors import InstallIOError, TargetNotInitialized, ValidationError
from squadkit.paths import TargetLayout

from .models import DEFAULT_COUNT, InstallResult, IntegrationSettings, ResolvedInstallPlan
from .state import INTEGRATION_KEY

if TYPE_CHECKING:
    from squadkit.data_loader import Catalog

_logging = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755
SYNC_SCRIPT = "fizzy-sync.sh"

# Install stages in the order they are applied. Hooks include settings.json,
# which registers them.
STAGES = ("agents", "skills", "hooks", "scripts", "templates", "pipeline")


@dataclass(frozen=True)
class CopyOp:
    src: Path
    dest: Path
    executable: bool = False


@dataclass
class ConfigWrites:
    """JSON files that need (re)writing, keyed by path, and what changed."""

    files: dict[Path, dict] = field(default_factory=dict)
    unchanged: list[Path] = field(default_factory=list)
    created_fragments: list[str] = field(default_factory=list)
    integration_changed: bool = False


def select_stages(stages=None) -> tuple[str, ...]:
    """Normalize a stage selection to STAGES order.

    Args:
        stages: Iterable of stage names, or None for every stage

    Returns:
        The selected stage names, ordered as they are applied.

    Raises:
        ValidationError: If a name is not one of STAGES.
    """
    if stages is None:
        return STAGES
    unknown = sorted(set(stages) - set(STAGES))
    if unknown:
        raise ValidationError(
            f"unknown install stage(s): {', '.join(unknown)}. "
            f"Valid stages: {', '.join(STAGES)}"
        )
    return tuple(stage for stage in STAGES if stage in stages)


def _tree_ops(src_dir: Path, dest_dir: Path, catalog: "Catalog", executable_sh: bool = False) -> list[CopyOp]:
    ops = []
    if not src_dir.is_dir():
        return ops
    for src in sorted(src_dir.rglob("*")):
        rel = src.relative_to(src_dir)
        if any(catalog.is_excluded_support(part) for part in rel.parts):
            continue
        if src.is_file():
            ops.append(CopyOp(src, dest_dir / rel, executable_sh and src.suffix == ".sh"))
    return ops


def persona_ops(plan: ResolvedInstallPlan, layout: TargetLayout, catalog: "Catalog") -> list[CopyOp]:
    """Persona copies for every core agent followed by the plan's agents."""
    names = [a.name for a in catalog.core_agents()] + sorted(plan.agents)
    return [
        CopyOp(catalog.get_agent(name).persona_path, layout.agents_dir / f"{name}.md")
        for name in names
    ]


def skill_ops(plan: ResolvedInstallPlan, layout: TargetLayout, catalog: "Catalog") -> list[CopyOp]:
    ops = []
    for name in sorted(plan.skills):
        skill = catalog.get_skill(name)
        ops.extend(_tree_ops(skill.path, layout.skills_dir / name, catalog))
    return ops


def support_ops(
    layout: TargetLayout, catalog: "Catalog", stages: tuple[str, ...] = STAGES
) -> list[CopyOp]:
    """Copies of hooks, scripts, templates and settings.json.

    Args:
        layout: Target directory layout
        catalog: Catalog supplying the source files
        stages: Only the hooks, scripts and templates stages are looked at

    Returns:
        CopyOps with the executable bit requested for ``.sh`` files. Excluded
        support names (test scripts, ``*-results`` directories) are skipped.
    """
    ops = []
    if "hooks" in stages:
        ops += _tree_ops(catalog.hooks_dir, layout.hooks_dir, catalog, executable_sh=True)
        if catalog.settings_file.is_file():
            ops.append(CopyOp(catalog.settings_file, layout.settings_file))
    if "scripts" in stages:
        ops += _tree_ops(catalog.scripts_dir, layout.scripts_dir, catalog, executable_sh=True)
    if "templates" in stages:
        ops += _tree_ops(catalog.templates_dir, layout.templates_dir, catalog)
    return ops


def _fragment_template(catalog: "Catalog", fragment: str) -> dict:
    template = catalog.fragment_template(fragment)
    if template.is_file():
        return load_json(template)
    return {"count": DEFAULT_COUNT}


def _load_fragment(path: Path) -> dict | None:
    """Load an agent fragment; None when it is absent or unreadable."""
    if not path.is_file():
        return None
    try:
        return load_json(path)
    except ConfigError as e:
        _logging.warning(f"Replacing unreadable agent config {path}: {e}")
        return None


def _stored_count_matches(data: dict, count: int) -> bool:
    stored = data.get("count")
    return type(stored) is int and stored == count


def plan_config_writes(
    plan: ResolvedInstallPlan, layout: TargetLayout, catalog: "Catalog"
) -> ConfigWrites:
    """Decide which JSON config files change, without touching the disk.

    ``pipeline/config.json`` is seeded from the catalog only when absent;
    an existing one only ever gets its ``fizzy`` fields upserted. Agent
    fragments that do not parse are replaced from the catalog template.

    Args:
        plan: Resolved plan whose counts and integration settings apply
        layout: Target directory layout
        catalog: Catalog supplying config and fragment templates

    Returns:
        ConfigWrites holding the full content of every file to rewrite.

    Raises:
        ConfigError: If the existing config.json or a catalog template
            does not parse.
    """
    writes = ConfigWrites()

    if layout.config_file.is_file():
        config = load_json(layout.config_file)
        config_dirty = False
    else:
        config = load_json(catalog.config_template)
        config_dirty = True
    if plan.integration is not None:
        if upsert_fields(config, INTEGRATION_KEY, plan.integration.to_fields()):
            writes.integration_changed = True
            config_dirty = True
    if config_dirty:
        writes.files[layout.config_file] = config
    else:
        writes.unchanged.append(layout.config_file)

    for agent in catalog.core_agents():
        if agent.fragment is None:
            continue
        path = layout.fragment_file(agent.fragment)
        if path.is_file():
            writes.unchanged.append(path)
        else:
            writes.files[path] = _fragment_template(catalog, agent.fragment)
            writes.created_fragments.append(agent.fragment)

    for name, count in sorted(plan.counts.items()):
        path = layout.fragment_file(name)
        data = _load_fragment(path)
        if data is None:
            if not path.is_file():
                writes.created_fragments.append(name)
            data = _fragment_template(catalog, name)
        elif _stored_count_matches(data, count):
            writes.unchanged.append(path)
            continue
        data["count"] = count
        writes.files[path] = data

    return writes


def _copy(op: CopyOp) -> None:
    try:
        op.dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(op.src, op.dest)
        if op.executable:
            op.dest.chmod(EXECUTABLE_MODE)
    except OSError as e:
        raise InstallIOError(op.dest, e) from e


def _ensure_skeleton(layout: TargetLayout) -> None:
    for directory in (
        layout.agents_dir,
        layout.fragments_dir,
        layout.hooks_dir,
        layout.scripts_dir,
        layout.skills_dir,
    ):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallIOError(directory, e) from e


def _replace_skills(ops: list[CopyOp], layout: TargetLayout) -> None:
    try:
        if layout.skills_dir.exists():
            shutil.rmtree(layout.skills_dir)
        layout.skills_dir.mkdir(parents=True)
    except OSError as e:
        raise InstallIOError(layout.skills_dir, e) from e
    for op in ops:
        _copy(op)


def apply_plan(
    plan: ResolvedInstallPlan,
    layout: TargetLayout,
    catalog: "Catalog",
    stages=None,
) -> InstallResult:
    """Install ``plan`` into ``layout``.

    Args:
        plan: Resolved plan from build_plan
        layout: Target directory layout
        catalog: Catalog supplying every copied file
        stages: Subset of STAGES to apply, or None for all of them. Selected
            stages still run in STAGES order.

    Returns:
        InstallResult with the installed totals.

    Raises:
        ValidationError: If ``stages`` names an unknown stage.
        ConfigError: If the existing config.json or a catalog template is
            malformed. Raised before anything is written.
        InstallIOError: If any write fails. Nothing is rolled back.
    """
    stages = select_stages(stages)
    if "pipeline" in stages:
        writes = plan_config_writes(plan, layout, catalog)
    else:
        writes = ConfigWrites()

    _ensure_skeleton(layout)

    if "agents" in stages:
        _logging.debug("Copying agents")
        for op in persona_ops(plan, layout, catalog):
            _copy(op)

    if "skills" in stages:
        _logging.debug("Replacing skills")
        _replace_skills(skill_ops(plan, layout, catalog), layout)

    _logging.debug("Copying support files")
    for op in support_ops(layout, catalog, stages):
        _copy(op)

    if "pipeline" in stages:
        _logging.debug("Writing pipeline config")
        for path, data in writes.files.items():
            write_json_atomic(path, data)

    return InstallResult(
        agent_files=len(list(layout.agents_dir.glob("*.md"))),
        skills=len(plan.skills),
        fragments=len(list(layout.fragments_dir.glob("*.json"))),
        integration_changed=writes.integration_changed,
        created_fragments=writes.created_fragments,
    )


def apply_integration(
    settings: IntegrationSettings, layout: TargetLayout, catalog: "Catalog"
) -> bool:
    """Upsert integration settings into an installed target's config.

    Also refreshes the installed sync script from the catalog.

    Args:
        settings: Settings to store; a None board id keeps the stored one
        layout: Target directory layout
        catalog: Catalog supplying the sync script

    Returns:
        True if the stored settings changed.

    Raises:
        TargetNotInitialized: If the target has no config file yet.
    """
    if not layout.is_initialized():
        raise TargetNotInitialized(layout.config_file)

    config = load_json(layout.config_file)
    changed = upsert_fields(config, INTEGRATION_KEY, settings.to_fields())
    if changed:
        write_json_atomic(layout.config_file, config)

    script = catalog.scripts_dir / SYNC_SCRIPT
    if script.is_file():
        _copy(CopyOp(script, layout.scripts_dir / SYNC_SCRIPT, executable=True))
    return changed


def would_change(op: CopyOp) -> str:
    """Classify a copy as create / update / unchanged against the target."""
    if not op.dest.is_file():
        return "create"
    if op.dest.read_bytes() != op.src.read_bytes():
        return "update"
    return "unchanged"


def config_action(path: Path, data: dict) -> str:
    if not path.is_file():
        return "create"
    if path.read_text(encoding="utf-8") == dump_json(data):
        return "unchanged"
    return "update"


__all__ = [
    "STAGES",
    "CopyOp",
    "ConfigWrites",
    "select_stages",
    "persona_ops",
    "skill_ops",
    "support_ops",
    "plan_config_writes",
    "apply_plan",
    "apply_integration",
    "would_change",
    "config_action",
]
