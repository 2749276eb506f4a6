"""Field-level patches for epics and tasks.

Patches only touch fields that were supplied and actually differ from the
stored value. List fields are append-only and skip values already present.
``updated_at`` is bumped only when something changed, so a no-op update never
reorders the ready queue.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ananke.core.models import Epic, EpicStatus, Task, TaskStatus, utc_timestamp
from ananke.core.result import InvalidArgsError

M = TypeVar("M", Epic, Task)


@dataclass(frozen=True)
class TaskPatch:
    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: int | None = None
    notes: str | None = None
    outcome_summary: str | None = None
    add_acceptance: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        scalars = (
            self.title,
            self.description,
            self.status,
            self.priority,
            self.notes,
            self.outcome_summary,
        )
        return all(value is None for value in scalars) and not self.add_acceptance

    def validate(self) -> None:
        if self.status == "done" and self.outcome_summary is None:
            raise InvalidArgsError("--outcome-summary is required when --status is done")


@dataclass(frozen=True)
class EpicPatch:
    title: str | None = None
    goal: str | None = None
    status: EpicStatus | None = None
    context: str | None = None
    digest: str | None = None
    add_constraints: list[str] = field(default_factory=list)
    add_decisions: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        scalars = (self.title, self.goal, self.status, self.context, self.digest)
        return (
            all(value is None for value in scalars)
            and not self.add_constraints
            and not self.add_decisions
        )


@dataclass(frozen=True)
class PatchResult(Generic[M]):
    """The patched document plus what changed.

    ``added`` counts appended list entries keyed by field name.
    """

    document: M
    changed: bool
    added: dict[str, int] = field(default_factory=dict)


def append_unique(existing: Iterable[str], incoming: Iterable[str]) -> tuple[list[str], int]:
    """Append values not already present, preserving order."""
    values = list(existing)
    seen = set(values)
    added = 0
    for value in incoming:
        if value in seen:
            continue
        values.append(value)
        seen.add(value)
        added += 1
    return values, added


def _assign_scalars(updates: dict[str, Any], current: M) -> dict[str, Any]:
    return {
        name: value
        for name, value in updates.items()
        if value is not None and getattr(current, name) != value
    }


def apply_task_patch(task: Task, patch: TaskPatch, *, now: str | None = None) -> PatchResult[Task]:
    """Apply ``patch`` to ``task`` without mutating the original.

    Raises:
        InvalidArgsError: status ``done`` requested without an outcome summary
    """
    patch.validate()

    updates = _assign_scalars(
        {
            "title": patch.title,
            "description": patch.description,
            "status": patch.status,
            "priority": patch.priority,
            "notes": patch.notes,
            "outcome_summary": patch.outcome_summary,
        },
        task,
    )

    acceptance, acceptance_added = append_unique(task.acceptance or [], patch.add_acceptance)
    if acceptance_added:
        updates["acceptance"] = acceptance

    if not updates:
        return PatchResult(document=task, changed=False, added={"acceptance": 0})

    updates["updated_at"] = now or utc_timestamp()
    patched = task.model_copy(deep=True)
    for name, value in updates.items():
        setattr(patched, name, value)
    return PatchResult(document=patched, changed=True, added={"acceptance": acceptance_added})


def apply_epic_patch(epic: Epic, patch: EpicPatch, *, now: str | None = None) -> PatchResult[Epic]:
    """Apply ``patch`` to ``epic`` without mutating the original."""
    updates = _assign_scalars(
        {
            "title": patch.title,
            "goal": patch.goal,
            "status": patch.status,
            "context": patch.context,
            "digest": patch.digest,
        },
        epic,
    )

    constraints, constraints_added = append_unique(epic.constraints, patch.add_constraints)
    decisions, decisions_added = append_unique(epic.decisions, patch.add_decisions)
    if constraints_added:
        updates["constraints"] = constraints
    if decisions_added:
        updates["decisions"] = decisions

    added = {"constraints": constraints_added, "decisions": decisions_added}
    if not updates:
        return PatchResult(document=epic, changed=False, added=added)

    updates["updated_at"] = now or utc_timestamp()
    patched = epic.model_copy(deep=True)
    for name, value in updates.items():
        setattr(patched, name, value)
    return PatchResult(document=patched, changed=True, added=added)


__all__ = [
    "EpicPatch",
    "PatchResult",
    "TaskPatch",
    "append_unique",
    "apply_epic_patch",
    "apply_task_patch",
]
