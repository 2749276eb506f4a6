"""Ready-work computation.

A task is ready when all of the following hold:

- its status is ``todo``
- its epic exists and is not ``done`` (``paused`` epics do not gate tasks)
- every task blocking it exists and is ``done``, whichever epic it lives in

Dangling epic or blocker references fail the whole evaluation; there is no
partial result. Ready tasks are ordered by priority, then ``updated_at``
(string comparison), then id.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ananke.core.models import BlockEdge, Epic, ReadyTask, Task
from ananke.core.result import Err, IntegrityError, Ok, Result


def ready_sort_key(task: Task) -> tuple[int, str, str]:
    return (task.priority, task.updated_at, task.id)


def _blockers_by_task(edges: Iterable[BlockEdge]) -> dict[str, list[str]]:
    blockers: dict[str, list[str]] = {}
    for edge in edges:
        blockers.setdefault(edge.blocked, []).append(edge.blocker)
    return blockers


def is_task_ready(
    task: Task,
    epics_by_id: Mapping[str, Epic],
    tasks_by_id: Mapping[str, Task],
    blockers: Sequence[str],
) -> Result[bool, IntegrityError]:
    """Decide readiness for a single task.

    Args:
        task: Candidate task
        epics_by_id: Every epic in the workspace
        tasks_by_id: Every task in the workspace (not just candidates)
        blockers: Ids of tasks that block ``task``

    Returns:
        Ok(True/False), or Err(IntegrityError) for a dangling reference
    """
    if task.status != "todo":
        return Ok(False)

    epic = epics_by_id.get(task.epic_id)
    if epic is None:
        return Err(
            IntegrityError(
                f"Task references missing epic: {task.id} -> {task.epic_id}",
                context={"task": task.id, "epic": task.epic_id},
            )
        )
    if epic.status == "done":
        return Ok(False)

    for blocker_id in blockers:
        blocker = tasks_by_id.get(blocker_id)
        if blocker is None:
            return Err(
                IntegrityError(
                    f"Dependency references missing task: {blocker_id} -> {task.id}",
                    context={"from": blocker_id, "to": task.id},
                )
            )
        if blocker.status != "done":
            return Ok(False)

    return Ok(True)


def compute_ready(
    tasks: Sequence[Task],
    epics: Sequence[Epic],
    edges: Sequence[BlockEdge],
    *,
    epic_id: str | None = None,
    limit: int | None = None,
) -> Result[list[ReadyTask], IntegrityError]:
    """Return the ordered ready queue.

    Args:
        tasks: All tasks in the workspace
        epics: All epics in the workspace
        edges: The full block edge set
        epic_id: Restrict candidates to one epic (blockers are still looked up globally)
        limit: Truncate the ordered result to this many entries

    Returns:
        Ok(list of ReadyTask), or Err(IntegrityError) naming the dangling reference
    """
    tasks_by_id = {task.id: task for task in tasks}
    epics_by_id = {epic.id: epic for epic in epics}
    blockers = _blockers_by_task(edges)

    candidates = tasks if epic_id is None else [t for t in tasks if t.epic_id == epic_id]

    ready: list[Task] = []
    for task in candidates:
        match is_task_ready(task, epics_by_id, tasks_by_id, blockers.get(task.id, [])):
            case Err() as failure:
                return failure
            case Ok(True):
                ready.append(task)

    ready.sort(key=ready_sort_key)
    if limit is not None:
        ready = ready[: max(limit, 0)]
    return Ok([ReadyTask.from_task(task) for task in ready])


__all__ = ["compute_ready", "is_task_ready", "ready_sort_key"]
