"""Task context packs.

A pack bundles everything an agent needs to start on a task: the task, its
epic, the tasks around it in the blocking graph, and the most recently
closed tasks of the same epic with their outcome summaries. Packs carry no
generation timestamp, so the same workspace state always yields the same
pack.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Literal

from ananke.core.graph import blockers_of, dependents_of
from ananke.core.models import BlockEdge, Epic, Task
from ananke.core.result import IntegrityError
from ananke.core.templates import render_template

PackFormat = Literal["md", "json"]

EPIC_FIELDS = ("id", "title", "goal", "status", "constraints", "decisions", "context", "digest")


def _neighbour(task: Task) -> dict[str, Any]:
    return {"id": task.id, "title": task.title, "status": task.status}


def _lookup(tasks_by_id: dict[str, Task], task_id: str, edge: str) -> Task:
    found = tasks_by_id.get(task_id)
    if found is None:
        raise IntegrityError(
            f"Dependency references missing task: {edge}", context={"missing": task_id}
        )
    return found


def build_pack(
    task: Task,
    epics: Sequence[Epic],
    tasks: Sequence[Task],
    edges: Sequence[BlockEdge],
    *,
    recent: int = 5,
) -> dict[str, Any]:
    """Assemble the pack payload for ``task``.

    Raises:
        IntegrityError: the task's epic or one of its neighbours does not exist
    """
    epic = next((e for e in epics if e.id == task.epic_id), None)
    if epic is None:
        raise IntegrityError(
            f"Task references missing epic: {task.id} -> {task.epic_id}",
            context={"task": task.id, "epic": task.epic_id},
        )

    tasks_by_id = {t.id: t for t in tasks}
    blockers = [
        _lookup(tasks_by_id, blocker_id, f"{blocker_id} -> {task.id}")
        for blocker_id in sorted(set(blockers_of(edges, task.id)))
    ]
    dependents = [
        _lookup(tasks_by_id, dependent_id, f"{task.id} -> {dependent_id}")
        for dependent_id in sorted(set(dependents_of(edges, task.id)))
    ]

    closed = [t for t in tasks if t.epic_id == epic.id and t.id != task.id and t.status == "done"]
    # Newest first; id ascending breaks ties.
    closed.sort(key=lambda t: t.id)
    closed.sort(key=lambda t: t.updated_at, reverse=True)

    epic_doc = epic.model_dump(mode="json")
    return {
        "task": task.model_dump(mode="json"),
        "epic": {name: epic_doc.get(name) for name in EPIC_FIELDS},
        "blockers": [_neighbour(t) for t in blockers],
        "dependents": [_neighbour(t) for t in dependents],
        "recent": [
            {
                "id": t.id,
                "title": t.title,
                "updated_at": t.updated_at,
                "outcome_summary": t.outcome_summary,
            }
            for t in closed[: max(recent, 0)]
        ],
    }


def render_pack(pack: dict[str, Any], fmt: PackFormat) -> str:
    if fmt == "json":
        return json.dumps(pack, indent=2, ensure_ascii=False) + "\n"
    return render_template("pack.md.j2", pack)


__all__ = ["PackFormat", "build_pack", "render_pack"]
