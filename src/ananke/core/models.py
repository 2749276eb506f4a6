"""Document models for the ananke workspace.

Every file under ``.ananke/`` is parsed into one of these pydantic models:

- Epic: a grouping of tasks with its own lifecycle status
- Task: an individual unit of work owned (by back-reference) by one epic
- BlockEdge: a directed "from blocks to" relationship between two tasks
- WorkspaceIndex: id allocation counters
- ReadyTask: the projection returned by the readiness evaluator

Descriptive fields that ananke does not know about are preserved on
round-trip (``extra="allow"``) so newer documents pass through untouched.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

EpicStatus = Literal["active", "paused", "done"]
TaskStatus = Literal["todo", "doing", "done"]

EPIC_STATUSES: tuple[EpicStatus, ...] = ("active", "paused", "done")
TASK_STATUSES: tuple[TaskStatus, ...] = ("todo", "doing", "done")

MIN_PRIORITY = 0
MAX_PRIORITY = 4


def utc_timestamp() -> str:
    """Return the current UTC time as a fixed-width ISO-8601 string.

    The format (``2026-01-31T12:00:00.000Z``) is stable in width so that
    timestamps compare correctly as plain strings.
    """
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class Epic(BaseModel):
    """A grouping of related tasks.

    Attributes:
        id: Epic identifier (e.g., 'EPC-001')
        title: Short title
        goal: What finishing the epic achieves
        status: active, paused or done; only done gates readiness
        constraints: Free-form constraints recorded for the epic
        decisions: Decisions taken while working on the epic
        context: Optional background text
        digest: Optional rolling summary
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    goal: str = Field(..., min_length=1)
    status: EpicStatus
    constraints: list[str]
    decisions: list[str]
    context: str | None = None
    digest: str | None = None
    created_at: str = Field(..., min_length=1)
    updated_at: str = Field(..., min_length=1)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class Task(BaseModel):
    """A single unit of work.

    ``priority`` runs from 0 (most urgent) to 4. ``updated_at`` is bumped on
    every effective change and is the tie-breaker for ready ordering.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    id: str = Field(..., min_length=1)
    epic_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    status: TaskStatus
    priority: int = Field(..., ge=MIN_PRIORITY, le=MAX_PRIORITY)
    notes: str | None = None
    acceptance: list[str] | None = None
    outcome_summary: str | None = Field(default=None, min_length=1)
    created_at: str = Field(..., min_length=1)
    updated_at: str = Field(..., min_length=1)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class BlockEdge(BaseModel):
    """``blocker`` must be done before ``blocked`` can be ready.

    Serialized as ``{"from": blocker, "to": blocked}``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    blocker: str = Field(..., min_length=1, alias="from")
    blocked: str = Field(..., min_length=1, alias="to")

    @classmethod
    def between(cls, blocker: str, blocked: str) -> BlockEdge:
        return cls(blocker=blocker, blocked=blocked)

    def to_document(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        return f"{self.blocker} -> {self.blocked}"


class WorkspaceIndex(BaseModel):
    """Id allocation counters stored in ``.ananke/index.json``."""

    model_config = ConfigDict(extra="allow")

    next_epic: int = Field(default=1, ge=1)
    next_task: int = Field(default=1, ge=1)
    updated_at: str = Field(..., min_length=1)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ReadyTask(BaseModel):
    """Projection of a task eligible for work."""

    model_config = ConfigDict(frozen=True)

    id: str
    epic_id: str
    title: str
    priority: int

    @classmethod
    def from_task(cls, task: Task) -> ReadyTask:
        return cls(id=task.id, epic_id=task.epic_id, title=task.title, priority=task.priority)


BLOCK_EDGES = TypeAdapter(list[BlockEdge])


__all__ = [
    "BLOCK_EDGES",
    "BlockEdge",
    "EPIC_STATUSES",
    "Epic",
    "EpicStatus",
    "MAX_PRIORITY",
    "MIN_PRIORITY",
    "ReadyTask",
    "TASK_STATUSES",
    "Task",
    "TaskStatus",
    "WorkspaceIndex",
    "utc_timestamp",
]
