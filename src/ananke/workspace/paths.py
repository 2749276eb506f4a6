"""Workspace root detection and the ``.ananke`` directory layout."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

WORKSPACE_DIR = ".ananke"


@dataclass(frozen=True)
class WorkspacePaths:
    root: Path
    ananke_dir: Path
    schema_file: Path
    index_file: Path
    epics_dir: Path
    tasks_dir: Path
    deps_dir: Path
    blocks_file: Path
    packs_dir: Path
    skill_file: Path

    @classmethod
    def for_root(cls, root: Path | str) -> WorkspacePaths:
        normalized = Path(root).expanduser().resolve()
        ananke_dir = normalized / WORKSPACE_DIR
        return cls(
            root=normalized,
            ananke_dir=ananke_dir,
            schema_file=ananke_dir / "schema.json",
            index_file=ananke_dir / "index.json",
            epics_dir=ananke_dir / "epics",
            tasks_dir=ananke_dir / "tasks",
            deps_dir=ananke_dir / "deps",
            blocks_file=ananke_dir / "deps" / "blocks.json",
            packs_dir=ananke_dir / "packs",
            skill_file=normalized / ".agents" / "skills" / "ananke" / "SKILL.md",
        )

    def epic_file(self, epic_id: str) -> Path:
        return self.epics_dir / f"{epic_id}.json"

    def task_file(self, task_id: str) -> Path:
        return self.tasks_dir / f"{task_id}.json"

    def relative(self, target: Path) -> str:
        """Render ``target`` relative to the workspace root ('.' for the root itself)."""
        try:
            rel = target.resolve().relative_to(self.root)
        except ValueError:
            return str(target)
        text = rel.as_posix()
        return text if text else "."


def detect_workspace_root(start: Path | None = None) -> Path:
    """Walk up from ``start`` to the nearest directory holding ``.git``.

    Falls back to ``start`` itself when no repository is found.
    """
    origin = (start or Path.cwd()).expanduser().resolve()
    for candidate in (origin, *origin.parents):
        if (candidate / ".git").exists():
            return candidate
    return origin
