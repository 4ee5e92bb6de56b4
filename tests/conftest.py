"""Pytest fixtures and utilities for squadkit tests."""

import json
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from squadkit.data_loader import clear_cache, load_catalog
from squadkit.paths import TargetLayout

# A small catalog with the same shape as the packaged one:
# two core agents (one without a pipeline fragment), two dev agents sharing a
# skill, one ops agent and one utility skill.
CORE = {
    "pipeline-agent": [],
    "lead-agent": ["s-core"],
}
DEV = {
    "dev-agent-a": ["s-a", "s-shared"],
    "dev-agent-b": ["s-b", "s-shared"],
}
OPS = {
    "ops-agent-x": ["s-x"],
}
UTILITY = ["util-one"]


def write_persona(root: Path, name: str, skills: list[str], description: str = "") -> Path:
    path = root / "agents" / f"{name}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["---", f"name: {name}", f"description: {description or name + ' persona'}"]
    if skills:
        lines.append(f"skills: {', '.join(skills)}")
    lines += ["---", "", f"# {name}", "", "Persona body.", ""]
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def write_skill(root: Path, name: str, lines: int = 3) -> Path:
    skill_dir = root / "skills" / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    body = "\n".join(f"line {i} of {name}" for i in range(lines)) + "\n"
    (skill_dir / "SKILL.md").write_text(body, encoding="utf-8")
    return skill_dir


def build_catalog(root: Path) -> Path:
    """Write the fake catalog to ``root`` and return it."""
    for group in (CORE, DEV, OPS):
        for name, skills in group.items():
            write_persona(root, name, skills)
    all_skills = {s for group in (CORE, DEV, OPS) for skills in group.values() for s in skills}
    for skill in sorted(all_skills | set(UTILITY)):
        write_skill(root, skill)
    (root / "skills" / "s-a" / "reference.md").write_text("extra\n", encoding="utf-8")

    manifest = {
        "agents": {
            "core": list(CORE),
            "selectable-dev": list(DEV),
            "selectable-ops": list(OPS),
        },
        "fragments": {"lead-agent": "lead"},
        "utility_skills": UTILITY,
        "support_exclude": ["test-setup.sh", "*-results"],
    }
    (root / "catalog.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")

    pipeline = root / "pipeline" / "agents"
    pipeline.mkdir(parents=True)
    (root / "pipeline" / "config.json").write_text(
        json.dumps(
            {
                "phases": [{"name": "build", "agent": "dev"}],
                "fizzy": {
                    "url": "https://your-fizzy.fly.dev",
                    "accountSlug": "your-account",
                    "token": "${FIZZY_TOKEN}",
                    "sync": False,
                },
            }
        ),
        encoding="utf-8",
    )
    (pipeline / "lead.json").write_text('{"role": "lead", "count": 1}', encoding="utf-8")
    (pipeline / "dev-agent-a.json").write_text(
        '{"role": "dev a", "count": 1}', encoding="utf-8"
    )

    hooks = root / "hooks"
    hooks.mkdir()
    (hooks / "guard.sh").write_text("#!/bin/bash\nexit 0\n", encoding="utf-8")
    scripts = root / "scripts"
    (scripts / "eval-results").mkdir(parents=True)
    (scripts / "fizzy-sync.sh").write_text("#!/bin/bash\necho synced\n", encoding="utf-8")
    (scripts / "kanban.sh").write_text("#!/bin/bash\necho board\n", encoding="utf-8")
    (scripts / "test-setup.sh").write_text("#!/bin/bash\n", encoding="utf-8")
    (scripts / "eval-results" / "run.log").write_text("old run\n", encoding="utf-8")
    (root / "templates").mkdir()
    (root / "templates" / "CLAUDE.md.template").write_text("# {{PROJECT}}\n", encoding="utf-8")
    (root / "settings").mkdir()
    (root / "settings" / "settings.json").write_text('{"hooks": {}}\n', encoding="utf-8")
    return root


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def catalog_dir(temp_dir: Path) -> Path:
    return build_catalog(temp_dir / "catalog")


@pytest.fixture
def catalog(catalog_dir: Path):
    return load_catalog(catalog_dir)


@pytest.fixture
def use_catalog(catalog_dir: Path, monkeypatch) -> Generator[Path, None, None]:
    """Point the default catalog at the fake one for CLI tests."""
    monkeypatch.setenv("SQUADKIT_CATALOG", str(catalog_dir))
    clear_cache()
    yield catalog_dir
    clear_cache()


@pytest.fixture
def project(temp_dir: Path) -> Path:
    path = temp_dir / "project"
    path.mkdir()
    return path


@pytest.fixture
def layout(project: Path) -> TargetLayout:
    return TargetLayout.for_project(project)


def snapshot(root: Path) -> dict[str, bytes]:
    """Relative path -> bytes for every file under ``root``."""
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def mock_tty() -> Generator[None, None, None]:
    """Make every interactive entry point believe stdin is a terminal."""
    with patch("squadkit.tui.picker.stdin_is_tty", return_value=True), patch(
        "squadkit.commands.install.stdin_is_tty", return_value=True
    ), patch("squadkit.commands.fizzy.stdin_is_tty", return_value=True):
        yield


@pytest.fixture
def mock_no_tty() -> Generator[None, None, None]:
    with patch("squadkit.tui.picker.stdin_is_tty", return_value=False), patch(
        "squadkit.commands.install.stdin_is_tty", return_value=False
    ), patch("squadkit.commands.fizzy.stdin_is_tty", return_value=False):
        yield
