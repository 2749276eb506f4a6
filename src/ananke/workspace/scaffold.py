"""Workspace scaffolding for ``ananke init``.

Three modes:

- create: fail if ``.ananke`` already exists
- update: fill in missing or empty files, always refresh SKILL.md
- reset: delete ``.ananke`` and start over
"""

from __future__ import annotations

import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import Any

from ananke.core.models import EPIC_STATUSES, MAX_PRIORITY, MIN_PRIORITY, TASK_STATUSES
from ananke.core.models import WorkspaceIndex, utc_timestamp
from ananke.core.result import EXIT_CODES, ConflictError
from ananke.core.templates import render_template
from ananke.workspace.ids import EPIC_ID_PATTERN, EPIC_PREFIX, TASK_ID_PATTERN, TASK_PREFIX
from ananke.workspace.paths import WorkspacePaths
from ananke.workspace.store import write_json

logger = logging.getLogger(__name__)

COMMAND_CATALOG: tuple[tuple[str, str], ...] = (
    ("init", "Initialize .ananke workspace scaffold"),
    ("epic create", "Create a new epic"),
    ("epic show", "Show one epic by id"),
    ("epic update", "Update an existing epic"),
    ("task create", "Create a new task"),
    ("task show", "Show one task by id"),
    ("task update", "Update an existing task"),
    ("task close", "Close a task with outcome summary"),
    ("dep add", "Add a blocks dependency edge"),
    ("dep rm", "Remove a blocks dependency edge"),
    ("ready", "List tasks ready to execute"),
    ("pack", "Generate a task context pack"),
)


class InitMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    RESET = "reset"


def _timestamp_property() -> dict[str, str]:
    return {"type": "string", "format": "date-time"}


def _string_list() -> dict[str, Any]:
    return {"type": "array", "items": {"type": "string", "minLength": 1}}


def build_schema() -> dict[str, Any]:
    """Canonical JSON Schema for every document in ``.ananke``."""
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "$id": "ananke.schema.json",
        "title": "Ananke Workspace Schema",
        "type": "object",
        "additionalProperties": False,
        "required": ["index", "epic", "task", "blocks"],
        "properties": {
            "index": {"$ref": "#/$defs/index"},
            "epic": {"$ref": "#/$defs/epic"},
            "task": {"$ref": "#/$defs/task"},
            "blocks": {"$ref": "#/$defs/blocks"},
        },
        "$defs": {
            "index": {
                "type": "object",
                "additionalProperties": False,
                "required": ["next_epic", "next_task", "updated_at"],
                "properties": {
                    "next_epic": {"type": "integer", "minimum": 1},
                    "next_task": {"type": "integer", "minimum": 1},
                    "updated_at": _timestamp_property(),
                },
            },
            "epic": {
                "type": "object",
                "additionalProperties": False,
                "required": [
                    "id",
                    "title",
                    "goal",
                    "status",
                    "constraints",
                    "decisions",
                    "created_at",
                    "updated_at",
                ],
                "properties": {
                    "id": {"type": "string", "pattern": EPIC_ID_PATTERN},
                    "title": {"type": "string", "minLength": 1},
                    "goal": {"type": "string", "minLength": 1},
                    "status": {"type": "string", "enum": list(EPIC_STATUSES)},
                    "constraints": _string_list(),
                    "decisions": _string_list(),
                    "context": {"type": "string"},
                    "digest": {"type": "string"},
                    "created_at": _timestamp_property(),
                    "updated_at": _timestamp_property(),
                },
            },
            "task": {
                "type": "object",
                "additionalProperties": False,
                "required": [
                    "id",
                    "epic_id",
                    "title",
                    "description",
                    "status",
                    "priority",
                    "created_at",
                    "updated_at",
                ],
                "properties": {
                    "id": {"type": "string", "pattern": TASK_ID_PATTERN},
                    "epic_id": {"type": "string", "pattern": EPIC_ID_PATTERN},
                    "title": {"type": "string", "minLength": 1},
                    "description": {"type": "string", "minLength": 1},
                    "status": {"type": "string", "enum": list(TASK_STATUSES)},
                    "priority": {
                        "type": "integer",
                        "minimum": MIN_PRIORITY,
                        "maximum": MAX_PRIORITY,
                    },
                    "notes": {"type": "string"},
                    "acceptance": _string_list(),
                    "outcome_summary": {"type": "string", "minLength": 1},
                    "created_at": _timestamp_property(),
                    "updated_at": _timestamp_property(),
                },
            },
            "blockEdge": {
                "type": "object",
                "additionalProperties": False,
                "required": ["from", "to"],
                "properties": {
                    "from": {"type": "string", "pattern": TASK_ID_PATTERN},
                    "to": {"type": "string", "pattern": TASK_ID_PATTERN},
                },
            },
            "blocks": {"type": "array", "items": {"$ref": "#/$defs/blockEdge"}},
        },
    }


def render_skill() -> str:
    return render_template(
        "skill.md.j2",
        {
            "commands": COMMAND_CATALOG,
            "epic_prefix": EPIC_PREFIX,
            "task_prefix": TASK_PREFIX,
            "exit_codes": sorted(EXIT_CODES.items(), key=lambda item: item[1]),
        },
    )


def _is_empty(path: Path) -> bool:
    return path.stat().st_size == 0


class Scaffolder:
    """Create the workspace tree and collect the paths it created."""

    def __init__(self, paths: WorkspacePaths, mode: InitMode) -> None:
        self.paths = paths
        self.mode = mode
        self.created: list[str] = []

    def run(self) -> list[str]:
        p = self.paths
        if p.ananke_dir.exists():
            if self.mode is InitMode.CREATE:
                raise ConflictError(".ananke already exists (use --update or --reset to continue)")
            if self.mode is InitMode.RESET:
                logger.debug("Removing %s for reset", p.ananke_dir)
                shutil.rmtree(p.ananke_dir)

        for directory in (
            p.ananke_dir,
            p.skill_file.parent.parent.parent,
            p.skill_file.parent.parent,
            p.skill_file.parent,
            p.epics_dir,
            p.tasks_dir,
            p.deps_dir,
            p.packs_dir,
        ):
            self._ensure_dir(directory)

        index = WorkspaceIndex(next_epic=1, next_task=1, updated_at=utc_timestamp())
        self._ensure_json(p.index_file, index.to_document())
        self._ensure_json(p.blocks_file, [])
        self._ensure_text(p.skill_file, render_skill(), refresh_on_update=True)
        self._ensure_json(p.schema_file, build_schema())
        return self.created

    def _record(self, path: Path) -> None:
        self.created.append(self.paths.relative(path))

    def _ensure_dir(self, directory: Path) -> None:
        if directory.exists():
            return
        directory.mkdir(parents=True, exist_ok=True)
        self._record(directory)

    def _should_write(self, path: Path) -> bool:
        if not path.exists():
            return True
        return self.mode is InitMode.UPDATE and _is_empty(path)

    def _ensure_json(self, path: Path, value: Any) -> None:
        if self._should_write(path):
            write_json(path, value)
            self._record(path)

    def _ensure_text(self, path: Path, content: str, *, refresh_on_update: bool) -> None:
        if self._should_write(path):
            path.write_text(content, encoding="utf-8")
            self._record(path)
        elif self.mode is InitMode.UPDATE and refresh_on_update:
            path.write_text(content, encoding="utf-8")


def initialize_workspace(paths: WorkspacePaths, mode: InitMode = InitMode.CREATE) -> list[str]:
    """Scaffold ``.ananke`` under ``paths.root`` and return created paths (relative)."""
    return Scaffolder(paths, mode).run()


__all__ = [
    "COMMAND_CATALOG",
    "InitMode",
    "build_schema",
    "initialize_workspace",
    "render_skill",
]
