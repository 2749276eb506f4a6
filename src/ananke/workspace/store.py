"""JSON document store for the ``.ananke`` workspace.

Each epic and task lives in its own file; the block edges live in a single
``deps/blocks.json`` list. Every read loads a whole file and every write
replaces a whole file. There is no locking: one CLI invocation owns the
workspace for its lifetime.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ananke.core.models import BLOCK_EDGES, BlockEdge, Epic, Task, WorkspaceIndex
from ananke.core.result import ConflictError, NotFoundError
from ananke.workspace.paths import WorkspacePaths

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

NOT_INITIALIZED_MESSAGE = "Workspace not initialized. Run `ananke init` first."


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def write_json(path: Path, value: Any) -> None:
    path.write_text(json.dumps(value, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


class WorkspaceStore:
    """Load and save workspace documents.

    Missing entities raise ``NotFoundError``; unreadable or malformed files
    raise ``ConflictError`` naming the offending document. Documents are
    validated strictly: required fields have no defaults on read and JSON
    values are never coerced (``"1"`` is not a priority).
    """

    def __init__(self, paths: WorkspacePaths) -> None:
        self.paths = paths

    # ------------------------------------------------------------------
    # workspace
    # ------------------------------------------------------------------

    def is_initialized(self) -> bool:
        p = self.paths
        required = (p.ananke_dir, p.index_file, p.epics_dir, p.tasks_dir, p.deps_dir, p.blocks_file)
        return all(path.exists() for path in required)

    def ensure_initialized(self) -> None:
        if not self.is_initialized():
            raise NotFoundError(NOT_INITIALIZED_MESSAGE, context={"root": str(self.paths.root)})

    def relative(self, path: Path) -> str:
        return self.paths.relative(path)

    # ------------------------------------------------------------------
    # index
    # ------------------------------------------------------------------

    def read_index(self) -> WorkspaceIndex:
        return self._load(self.paths.index_file, WorkspaceIndex, label=".ananke/index.json")

    def write_index(self, index: WorkspaceIndex) -> None:
        self._save(self.paths.index_file, index.to_document(), label=".ananke/index.json")

    # ------------------------------------------------------------------
    # epics
    # ------------------------------------------------------------------

    def epic_exists(self, epic_id: str) -> bool:
        return self.paths.epic_file(epic_id).exists()

    def read_epic(self, epic_id: str) -> Epic:
        path = self.paths.epic_file(epic_id)
        if not path.exists():
            raise NotFoundError(f"Epic not found: {epic_id}")
        epic = self._load(path, Epic, label=f"epic file {epic_id}")
        if epic.id != epic_id:
            raise ConflictError(
                f"Epic file id mismatch: expected {epic_id}", context={"found": epic.id}
            )
        return epic

    def write_epic(self, epic: Epic) -> Path:
        path = self.paths.epic_file(epic.id)
        self._save(path, epic.to_document(), label=f"epic file {epic.id}")
        return path

    def list_epics(self) -> list[Epic]:
        return [
            self._load(path, Epic, label=self.relative(path))
            for path in self._json_files(self.paths.epics_dir)
        ]

    # ------------------------------------------------------------------
    # tasks
    # ------------------------------------------------------------------

    def task_exists(self, task_id: str) -> bool:
        return self.paths.task_file(task_id).exists()

    def read_task(self, task_id: str) -> Task:
        path = self.paths.task_file(task_id)
        if not path.exists():
            raise NotFoundError(f"Task not found: {task_id}")
        task = self._load(path, Task, label=f"task file {task_id}")
        if task.id != task_id:
            raise ConflictError(
                f"Task file id mismatch: expected {task_id}", context={"found": task.id}
            )
        return task

    def write_task(self, task: Task) -> Path:
        path = self.paths.task_file(task.id)
        self._save(path, task.to_document(), label=f"task file {task.id}")
        return path

    def list_tasks(self) -> list[Task]:
        return [
            self._load(path, Task, label=self.relative(path))
            for path in self._json_files(self.paths.tasks_dir)
        ]

    # ------------------------------------------------------------------
    # block edges
    # ------------------------------------------------------------------

    def read_blocks(self) -> list[BlockEdge]:
        label = ".ananke/deps/blocks.json"
        raw = self._read_raw(self.paths.blocks_file, label)
        try:
            return BLOCK_EDGES.validate_python(raw, strict=True)
        except PydanticValidationError as exc:
            raise ConflictError(
                f"Invalid contents in {label}", context={"errors": exc.error_count()}
            ) from exc

    def write_blocks(self, edges: list[BlockEdge]) -> None:
        documents = [edge.to_document() for edge in edges]
        self._save(self.paths.blocks_file, documents, label=".ananke/deps/blocks.json")

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _json_files(directory: Path) -> list[Path]:
        return sorted(directory.glob("*.json"))

    @staticmethod
    def _read_raw(path: Path, label: str) -> Any:
        try:
            return read_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConflictError(f"Failed reading {label}", context={"path": str(path)}) from exc

    def _load(self, path: Path, model: type[M], *, label: str) -> M:
        raw = self._read_raw(path, label)
        try:
            return model.model_validate(raw, strict=True)
        except PydanticValidationError as exc:
            raise ConflictError(
                f"Invalid contents in {label}", context={"errors": exc.error_count()}
            ) from exc

    @staticmethod
    def _save(path: Path, value: Any, *, label: str) -> None:
        try:
            write_json(path, value)
        except OSError as exc:
            raise ConflictError(f"Failed writing {label}", context={"path": str(path)}) from exc
        logger.debug("Wrote %s", path)


__all__ = ["NOT_INITIALIZED_MESSAGE", "WorkspaceStore", "read_json", "write_json"]
