"""Catalog of agent personas and skills shipped with squadkit.

The catalog root holds:

- ``catalog.json``: agents per category (in display order), fragment names
  for core agents, the always-installed utility skills and support-file
  exclusion patterns
- ``agents/<name>.md``: persona with YAML front matter (name, description,
  skills)
- ``skills/<name>/``: skill payload, at least a ``SKILL.md``
- ``pipeline/config.json`` and ``pipeline/agents/<fragment>.json``: config
  templates
- ``hooks/``, ``scripts/``, ``templates/``, ``settings/settings.json``:
  support files copied verbatim

Caching Strategy:
- The default catalog is loaded once on first access and cached in a
  module-level variable
- Use clear_cache() to force a reload (tests, or a catalog swapped at runtime)
"""

import fnmatch
import logging
from pathlib import Path

import yaml

from squadkit.config import ConfigError, load_json
from squadkit.errors import AgentNotFoundError, format_field_error
from squadkit.installer.models import AgentCategory, AgentDescriptor, SkillDescriptor
from squadkit.paths import get_catalog_dir

_logging = logging.getLogger(__name__)

MANIFEST_FILE = "catalog.json"
SKILL_FILE = "SKILL.md"

_catalog_cache: "Catalog | None" = None


class Catalog:
    """Read-only registry of agents and skills rooted at a catalog directory."""

    def __init__(
        self,
        root: Path,
        agents: list[AgentDescriptor],
        skills: dict[str, SkillDescriptor],
        utility_skills: frozenset[str],
        support_exclude: tuple[str, ...] = (),
    ):
        self.root = root
        self._agents = {agent.name: agent for agent in agents}
        self._skills = skills
        self.utility_skills = utility_skills
        self.support_exclude = support_exclude

    def list_agents(self, category: AgentCategory | str) -> list[AgentDescriptor]:
        """Agents of ``category`` in catalog order."""
        category = AgentCategory(category)
        return [a for a in self._agents.values() if a.category is category]

    def get_agent(self, name: str) -> AgentDescriptor:
        try:
            return self._agents[name]
        except KeyError:
            raise AgentNotFoundError(name) from None

    def has_agent(self, name: str) -> bool:
        return name in self._agents

    def skills_of(self, name: str) -> frozenset[str]:
        return self.get_agent(name).skills

    def get_skill(self, name: str) -> SkillDescriptor:
        return self._skills[name]

    def core_agents(self) -> list[AgentDescriptor]:
        return self.list_agents(AgentCategory.CORE)

    def selectable_agents(self) -> list[AgentDescriptor]:
        return [a for a in self._agents.values() if a.category.selectable]

    def selectable_names(self) -> list[str]:
        return [a.name for a in self.selectable_agents()]

    def is_selectable(self, name: str) -> bool:
        agent = self._agents.get(name)
        return agent is not None and agent.category.selectable

    def agent_for_fragment(self, fragment: str) -> AgentDescriptor | None:
        for agent in self._agents.values():
            if agent.fragment == fragment:
                return agent
        return None

    def skill_line_count(self, name: str) -> int:
        return sum(self._skills[s].line_count for s in self.skills_of(name))

    def is_excluded_support(self, filename: str) -> bool:
        return any(fnmatch.fnmatch(filename, pattern) for pattern in self.support_exclude)

    @property
    def hooks_dir(self) -> Path:
        return self.root / "hooks"

    @property
    def scripts_dir(self) -> Path:
        return self.root / "scripts"

    @property
    def templates_dir(self) -> Path:
        return self.root / "templates"

    @property
    def settings_file(self) -> Path:
        return self.root / "settings" / "settings.json"

    @property
    def config_template(self) -> Path:
        return self.root / "pipeline" / "config.json"

    def fragment_template(self, fragment: str) -> Path:
        return self.root / "pipeline" / "agents" / f"{fragment}.json"


def _read_front_matter(path: Path) -> dict:
    """Parse the YAML block between the leading ``---`` markers of a persona."""
    try:
        lines = path.read_text(encoding="utf-8").split("\n")
    except OSError as e:
        raise ConfigError(f"Cannot read persona {path}: {e}")

    if not lines or lines[0].strip() != "---":
        raise ConfigError(f"Persona {path.name} is missing YAML front matter")

    for end, line in enumerate(lines[1:], 1):
        if line.strip() == "---":
            break
    else:
        raise ConfigError(f"Persona {path.name} has unclosed YAML front matter")

    try:
        data = yaml.safe_load("\n".join(lines[1:end])) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Persona {path.name} has invalid YAML front matter: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Persona {path.name} front matter must be a mapping")
    return data


def _parse_skill_list(value, entity: str) -> frozenset[str]:
    """Accept ``skills: a, b`` as well as a YAML list."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = value
    else:
        raise ConfigError(format_field_error(entity, "skills", "must be a list or string"))

    names = set()
    for item in items:
        if not isinstance(item, str):
            raise ConfigError(format_field_error(entity, "skills", "must contain strings"))
        if item.strip():
            names.add(item.strip())
    return frozenset(names)


def _require_name_list(data: dict, field: str, entity: str) -> list[str]:
    value = data.get(field, [])
    if not isinstance(value, list):
        raise ConfigError(format_field_error(entity, field, "must be an array"))
    for i, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"{entity} {field}[{i}] must be a non-empty string")
    return value


def _load_skills(skills_dir: Path) -> dict[str, SkillDescriptor]:
    skills = {}
    if not skills_dir.is_dir():
        return skills
    for skill_dir in sorted(skills_dir.iterdir()):
        skill_file = skill_dir / SKILL_FILE
        if not skill_file.is_file():
            continue
        line_count = len(skill_file.read_text(encoding="utf-8").splitlines())
        skills[skill_dir.name] = SkillDescriptor(
            name=skill_dir.name, path=skill_dir, line_count=line_count
        )
    return skills


def _load_agent(
    root: Path, name: str, category: AgentCategory, fragment: str | None
) -> AgentDescriptor:
    entity = f"Agent '{name}'"
    persona = root / "agents" / f"{name}.md"
    if not persona.is_file():
        raise ConfigError(f"{entity} has no persona file: {persona}")

    meta = _read_front_matter(persona)
    declared_name = meta.get("name", name)
    if declared_name != name:
        raise ConfigError(
            format_field_error(entity, "name", f"does not match file name ('{declared_name}')")
        )
    description = meta.get("description", "")
    if not isinstance(description, str):
        raise ConfigError(format_field_error(entity, "description", "must be a string"))

    return AgentDescriptor(
        name=name,
        category=category,
        description=description.strip(),
        persona_path=persona,
        skills=_parse_skill_list(meta.get("skills"), entity),
        fragment=fragment,
    )


def load_catalog(root: Path) -> Catalog:
    """Load and validate the catalog rooted at ``root``.

    Raises:
        ConfigError: If the manifest or any persona is malformed, a name is
            listed twice, or a declared skill has no payload directory.
    """
    manifest = load_json(root / MANIFEST_FILE)

    groups = manifest.get("agents")
    if not isinstance(groups, dict):
        raise ConfigError(format_field_error("Catalog", "agents", "must be an object"))

    fragments = manifest.get("fragments", {})
    if not isinstance(fragments, dict):
        raise ConfigError(format_field_error("Catalog", "fragments", "must be an object"))

    agents = []
    seen = set()
    for category in AgentCategory:
        for name in _require_name_list(groups, category.value, "Catalog agents"):
            if name in seen:
                raise ConfigError(f"Agent '{name}' is listed more than once")
            seen.add(name)
            fragment = name if category.selectable else fragments.get(name)
            agents.append(_load_agent(root, name, category, fragment))

    skills = _load_skills(root / "skills")
    utility = frozenset(_require_name_list(manifest, "utility_skills", "Catalog"))

    for skill in sorted(utility):
        if skill not in skills:
            raise ConfigError(f"Utility skill '{skill}' has no {SKILL_FILE} in catalog")
    for agent in agents:
        for skill in sorted(agent.skills):
            if skill not in skills:
                raise ConfigError(
                    f"Agent '{agent.name}' declares skill '{skill}' "
                    f"which has no {SKILL_FILE} in catalog"
                )

    exclude = tuple(_require_name_list(manifest, "support_exclude", "Catalog"))
    _logging.debug(f"Loaded catalog from {root}: {len(agents)} agents, {len(skills)} skills")
    return Catalog(root, agents, skills, utility, exclude)


def get_catalog() -> Catalog:
    """Return the default catalog, loading it on first use."""
    global _catalog_cache
    if _catalog_cache is None:
        _catalog_cache = load_catalog(get_catalog_dir())
    return _catalog_cache


def clear_cache() -> None:
    global _catalog_cache
    _catalog_cache = None


__all__ = [
    "Catalog",
    "MANIFEST_FILE",
    "SKILL_FILE",
    "load_catalog",
    "get_catalog",
    "clear_cache",
]
