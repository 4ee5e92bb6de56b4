"""Path helpers for the packaged catalog and installed targets."""

import os
from dataclasses import dataclass
from pathlib import Path

TARGET_DIRNAME = ".claude"


def get_packaged_catalog_dir() -> Path:
    """Return path to the catalog shipped inside the package."""
    return Path(__file__).parent / "data"


def get_catalog_dir() -> Path:
    """Return the catalog root.

    Priority:
    1. SQUADKIT_CATALOG environment variable (if set)
    2. The packaged catalog
    """
    if "SQUADKIT_CATALOG" in os.environ:
        return Path(os.environ["SQUADKIT_CATALOG"])
    return get_packaged_catalog_dir()


@dataclass(frozen=True)
class TargetLayout:
    """Locations inside ``<project>/.claude`` that the installer owns."""

    root: Path

    @classmethod
    def for_project(cls, project: Path | str) -> "TargetLayout":
        return cls(Path(project) / TARGET_DIRNAME)

    @property
    def agents_dir(self) -> Path:
        return self.root / "agents"

    @property
    def skills_dir(self) -> Path:
        return self.root / "skills"

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
        return self.root / "settings.json"

    @property
    def pipeline_dir(self) -> Path:
        return self.root / "pipeline"

    @property
    def fragments_dir(self) -> Path:
        return self.pipeline_dir / "agents"

    @property
    def config_file(self) -> Path:
        return self.pipeline_dir / "config.json"

    def fragment_file(self, fragment: str) -> Path:
        return self.fragments_dir / f"{fragment}.json"

    def is_initialized(self) -> bool:
        return self.config_file.is_file()
