"""Tests for core/readiness.py - the ready queue."""

from __future__ import annotations

from collections.abc import Callable

from ananke.core.models import BlockEdge, Epic, Task
from ananke.core.readiness import compute_ready, is_task_ready
from ananke.core.result import Err, IntegrityError, Ok

MakeEpic = Callable[..., Epic]
MakeTask = Callable[..., Task]


def ready_ids(result: object) -> list[str]:
    assert isinstance(result, Ok), result
    return [task.id for task in result.value]


class TestComputeReady:
    def test_only_todo_tasks_are_ready(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        tasks = [
            make_task("TSK-001"),
            make_task("TSK-002", status="doing"),
            make_task("TSK-003", status="done", outcome_summary="done"),
        ]
        assert ready_ids(compute_ready(tasks, [make_epic()], [])) == ["TSK-001"]

    def test_done_epic_gates_its_tasks(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        epics = [make_epic("EPC-001", status="done"), make_epic("EPC-002")]
        tasks = [make_task("TSK-001", "EPC-001"), make_task("TSK-002", "EPC-002")]
        assert ready_ids(compute_ready(tasks, epics, [])) == ["TSK-002"]

    def test_paused_epic_does_not_gate(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        epics = [make_epic("EPC-001", status="paused")]
        assert ready_ids(compute_ready([make_task("TSK-001")], epics, [])) == ["TSK-001"]

    def test_unfinished_blocker_gates(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        tasks = [make_task("TSK-001"), make_task("TSK-002")]
        blocks = [BlockEdge.between("TSK-001", "TSK-002")]
        assert ready_ids(compute_ready(tasks, [make_epic()], blocks)) == ["TSK-001"]

    def test_done_blocker_releases(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        tasks = [
            make_task("TSK-001", status="done", outcome_summary="shipped"),
            make_task("TSK-002"),
        ]
        blocks = [BlockEdge.between("TSK-001", "TSK-002")]
        assert ready_ids(compute_ready(tasks, [make_epic()], blocks)) == ["TSK-002"]

    def test_cross_epic_blocker_applies_under_epic_filter(
        self, make_epic: MakeEpic, make_task: MakeTask
    ) -> None:
        epics = [make_epic("EPC-001"), make_epic("EPC-002")]
        tasks = [make_task("TSK-001", "EPC-001"), make_task("TSK-002", "EPC-002")]
        blocks = [BlockEdge.between("TSK-001", "TSK-002")]
        assert ready_ids(compute_ready(tasks, epics, blocks, epic_id="EPC-002")) == []
        assert ready_ids(compute_ready(tasks, epics, blocks, epic_id="EPC-001")) == ["TSK-001"]

    def test_equal_priority_and_timestamp_break_on_id(
        self, make_epic: MakeEpic, make_task: MakeTask
    ) -> None:
        tasks = [
            make_task("TSK-004", priority=2, updated_at="2026-01-01T00:00:00.000Z"),
            make_task("TSK-003", priority=1, updated_at="2026-01-02T00:00:00.000Z"),
            make_task("TSK-002", priority=1, updated_at="2026-01-01T00:00:00.000Z"),
            make_task("TSK-001", priority=1, updated_at="2026-01-02T00:00:00.000Z"),
        ]
        result = compute_ready(tasks, [make_epic()], [])
        assert ready_ids(result) == ["TSK-002", "TSK-001", "TSK-003", "TSK-004"]

    def test_ordering_priority_then_updated_at(
        self, make_epic: MakeEpic, make_task: MakeTask
    ) -> None:
        tasks = [
            make_task("TSK-001", priority=2, updated_at="2026-01-01T00:00:00.000Z"),
            make_task("TSK-002", priority=1, updated_at="2026-01-03T00:00:00.000Z"),
            make_task("TSK-003", priority=1, updated_at="2026-01-02T00:00:00.000Z"),
            make_task("TSK-004", priority=0, updated_at="2026-01-04T00:00:00.000Z"),
        ]
        full = ready_ids(compute_ready(tasks, [make_epic()], []))
        # priority 0, priority 1 older, priority 1 newer, priority 2
        assert full == ["TSK-004", "TSK-003", "TSK-002", "TSK-001"]

        limited = ready_ids(compute_ready(tasks, [make_epic()], [], limit=2))
        assert limited == ["TSK-004", "TSK-003"]

    def test_limit_truncates(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        tasks = [make_task(f"TSK-00{n}", priority=n % 5) for n in range(1, 6)]
        full = ready_ids(compute_ready(tasks, [make_epic()], []))
        assert ready_ids(compute_ready(tasks, [make_epic()], [], limit=2)) == full[:2]
        assert ready_ids(compute_ready(tasks, [make_epic()], [], limit=0)) == []
        assert ready_ids(compute_ready(tasks, [make_epic()], [], limit=50)) == full

    def test_projection_fields(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        result = compute_ready([make_task("TSK-001", priority=3)], [make_epic()], [])
        assert isinstance(result, Ok)
        assert result.value[0].model_dump() == {
            "id": "TSK-001",
            "epic_id": "EPC-001",
            "title": "Task TSK-001",
            "priority": 3,
        }

    def test_missing_epic_fails_whole_evaluation(
        self, make_epic: MakeEpic, make_task: MakeTask
    ) -> None:
        tasks = [make_task("TSK-001"), make_task("TSK-002", "EPC-404")]
        result = compute_ready(tasks, [make_epic()], [])
        assert isinstance(result, Err)
        assert isinstance(result.error, IntegrityError)
        assert result.error.message == "Task references missing epic: TSK-002 -> EPC-404"

    def test_missing_blocker_fails(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        blocks = [BlockEdge.between("TSK-404", "TSK-001")]
        result = compute_ready([make_task("TSK-001")], [make_epic()], blocks)
        assert isinstance(result, Err)
        assert result.error.code == "CONFLICT"
        assert result.error.message == "Dependency references missing task: TSK-404 -> TSK-001"

    def test_missing_epic_of_non_todo_task_is_ignored(
        self, make_epic: MakeEpic, make_task: MakeTask
    ) -> None:
        tasks = [make_task("TSK-001", "EPC-404", status="doing")]
        assert ready_ids(compute_ready(tasks, [make_epic()], [])) == []


class TestIsTaskReady:
    def test_done_epic_short_circuits_blocker_lookup(
        self, make_epic: MakeEpic, make_task: MakeTask
    ) -> None:
        epic = make_epic(status="done")
        task = make_task("TSK-001")
        result = is_task_ready(task, {epic.id: epic}, {task.id: task}, ["TSK-404"])
        assert result == Ok(False)

    def test_ready(self, make_epic: MakeEpic, make_task: MakeTask) -> None:
        epic = make_epic()
        task = make_task("TSK-001")
        assert is_task_ready(task, {epic.id: epic}, {task.id: task}, []) == Ok(True)
