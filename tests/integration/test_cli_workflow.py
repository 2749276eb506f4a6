"""End-to-end CLI scenarios against a temporary workspace."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from conftest import AnankeCli


def create_epic(cli: AnankeCli, title: str = "Pack command", *extra: str) -> str:
    outcome = cli("epic", "create", "--title", title, "--goal", "Ship packs", *extra)
    assert outcome.exit_code == 0, outcome.result.output
    return str(outcome.data["epic"]["id"])


def create_task(cli: AnankeCli, epic_id: str, title: str, *extra: str) -> str:
    outcome = cli(
        "task", "create", "--epic", epic_id, "--title", title, "--description", "Work", *extra
    )
    assert outcome.exit_code == 0, outcome.result.output
    return str(outcome.data["task"]["id"])


def ready_ids(cli: AnankeCli, *extra: str) -> list[str]:
    outcome = cli("ready", *extra)
    assert outcome.exit_code == 0, outcome.result.output
    return [task["id"] for task in outcome.data["tasks"]]


def read_document(root: Path, *parts: str) -> Any:
    return json.loads(root.joinpath(".ananke", *parts).read_text(encoding="utf-8"))


class TestInit:
    def test_init_creates_workspace(self, cli: AnankeCli, workspace_root: Path) -> None:
        outcome = cli("init")
        assert outcome.exit_code == 0
        assert outcome.payload["message"] == "Initialized .ananke workspace"
        assert ".ananke/index.json" in outcome.data["created"]
        assert (workspace_root / ".agents" / "skills" / "ananke" / "SKILL.md").is_file()

    def test_init_twice_conflicts(self, initialized_cli: AnankeCli) -> None:
        outcome = initialized_cli("init")
        assert outcome.exit_code == 4
        assert outcome.error["code"] == "CONFLICT"

    def test_update_and_reset(self, initialized_cli: AnankeCli, workspace_root: Path) -> None:
        create_epic(initialized_cli)
        assert initialized_cli("init", "--update").exit_code == 0
        assert (workspace_root / ".ananke" / "epics" / "EPC-001.json").exists()

        assert initialized_cli("init", "--reset").exit_code == 0
        assert not (workspace_root / ".ananke" / "epics" / "EPC-001.json").exists()

    def test_update_with_reset_is_invalid(self, cli: AnankeCli) -> None:
        outcome = cli("init", "--update", "--reset")
        assert outcome.exit_code == 2
        assert outcome.error["code"] == "INVALID_ARGS"

    def test_commands_require_workspace(self, cli: AnankeCli) -> None:
        outcome = cli("ready")
        assert outcome.exit_code == 3
        assert outcome.error == {
            "code": "NOT_FOUND",
            "message": "Workspace not initialized. Run `ananke init` first.",
            "details": {"root": str(cli.root.resolve())},
        }


class TestEpics:
    def test_create_and_show(self, initialized_cli: AnankeCli, workspace_root: Path) -> None:
        outcome = initialized_cli(
            "epic", "create", "--title", "Packs", "--goal", "Ship", "--constraint", "no network"
        )
        assert outcome.payload["message"] == "Created epic EPC-001"
        assert outcome.data == {
            "epic": {"id": "EPC-001", "status": "active"},
            "path": ".ananke/epics/EPC-001.json",
        }
        assert read_document(workspace_root, "index.json")["next_epic"] == 2

        shown = initialized_cli("epic", "show", "EPC-001")
        assert shown.data["epic"]["constraints"] == ["no network"]
        assert shown.data["epic"]["decisions"] == []

    def test_update_reports_list_appends(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli, "Packs", "--constraint", "a")
        outcome = initialized_cli(
            "epic", "update", epic_id, "--add-constraint", "a", "--add-constraint", "b",
            "--add-decision", "json files",
        )
        assert outcome.payload["message"] == f"Updated epic {epic_id}"
        assert outcome.data["applied"] == {"constraints_added": 1, "decisions_added": 1}

    def test_update_without_changes(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli, "Packs")
        outcome = initialized_cli("epic", "update", epic_id, "--title", "Packs")
        assert outcome.exit_code == 0
        assert outcome.payload["message"] == f"No changes applied to epic {epic_id}"

    def test_update_without_arguments(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        outcome = initialized_cli("epic", "update", epic_id)
        assert outcome.exit_code == 2
        assert outcome.error["message"] == "No updates provided"

    def test_show_missing_and_malformed(self, initialized_cli: AnankeCli) -> None:
        missing = initialized_cli("epic", "show", "EPC-042")
        assert missing.exit_code == 3
        assert missing.error["message"] == "Epic not found: EPC-042"

        malformed = initialized_cli("epic", "show", "epic-1")
        assert malformed.exit_code == 2
        assert malformed.error["message"] == "Invalid epic id: epic-1"

    def test_empty_title_rejected(self, initialized_cli: AnankeCli) -> None:
        outcome = initialized_cli("epic", "create", "--title", " ", "--goal", "g")
        assert outcome.exit_code == 2


class TestTasks:
    def test_create_defaults(self, initialized_cli: AnankeCli, workspace_root: Path) -> None:
        epic_id = create_epic(initialized_cli)
        outcome = initialized_cli(
            "task", "create", "--epic", epic_id, "--title", "Parser", "--description", "Parse"
        )
        assert outcome.data["task"] == {
            "id": "TSK-001",
            "status": "todo",
            "priority": 2,
            "epic_id": epic_id,
        }
        document = read_document(workspace_root, "tasks", "TSK-001.json")
        assert "acceptance" not in document
        assert document["created_at"] == document["updated_at"]

    def test_default_priority_from_config(
        self, initialized_cli: AnankeCli, isolate_config: Path
    ) -> None:
        isolate_config.write_text("default_priority = 0\n", encoding="utf-8")
        epic_id = create_epic(initialized_cli)
        create_task(initialized_cli, epic_id, "Urgent")
        shown = initialized_cli("task", "show", "TSK-001")
        assert shown.data["task"]["priority"] == 0

    def test_priority_out_of_range(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        outcome = initialized_cli(
            "task", "create", "--epic", epic_id, "--title", "t", "--description", "d",
            "--priority", "5",
        )
        assert outcome.exit_code == 2
        assert outcome.error["code"] == "INVALID_ARGS"

    def test_missing_epic(self, initialized_cli: AnankeCli) -> None:
        outcome = initialized_cli(
            "task", "create", "--epic", "EPC-009", "--title", "t", "--description", "d"
        )
        assert outcome.exit_code == 3

    def test_done_epic_rejects_new_tasks(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        initialized_cli("epic", "update", epic_id, "--status", "done")
        outcome = initialized_cli(
            "task", "create", "--epic", epic_id, "--title", "t", "--description", "d"
        )
        assert outcome.exit_code == 4
        assert "--status active" in outcome.error["details"]["hint"]

    def test_done_requires_summary(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        task_id = create_task(initialized_cli, epic_id, "t")
        outcome = initialized_cli("task", "update", task_id, "--status", "done")
        assert outcome.exit_code == 2
        assert "--outcome-summary" in outcome.error["message"]

    def test_noop_update_keeps_timestamp(
        self, initialized_cli: AnankeCli, workspace_root: Path
    ) -> None:
        epic_id = create_epic(initialized_cli)
        task_id = create_task(initialized_cli, epic_id, "t", "--acceptance", "tests pass")
        before = read_document(workspace_root, "tasks", f"{task_id}.json")

        outcome = initialized_cli(
            "task", "update", task_id, "--priority", "2", "--add-acceptance", "tests pass"
        )
        assert outcome.payload["message"] == f"No changes applied to task {task_id}"
        assert outcome.data["applied"] == {"acceptance_added": 0}
        assert read_document(workspace_root, "tasks", f"{task_id}.json") == before

    def test_close(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        task_id = create_task(initialized_cli, epic_id, "t")
        outcome = initialized_cli("task", "close", task_id, "--summary", "Shipped it")
        assert outcome.payload["message"] == f"Closed task {task_id}"
        shown = initialized_cli("task", "show", task_id)
        assert shown.data["task"]["status"] == "done"
        assert shown.data["task"]["outcome_summary"] == "Shipped it"


class TestDependencies:
    def test_add_is_idempotent(self, initialized_cli: AnankeCli, workspace_root: Path) -> None:
        epic_id = create_epic(initialized_cli)
        first = create_task(initialized_cli, epic_id, "a")
        second = create_task(initialized_cli, epic_id, "b")

        added = initialized_cli("dep", "add", first, second)
        assert added.payload["message"] == f"Added dependency {first} -> {second}"
        assert added.data == {"edge": {"from": first, "to": second}, "applied": {"added": 1}}

        again = initialized_cli("dep", "add", first, second)
        assert again.exit_code == 0
        assert again.data["applied"] == {"added": 0}
        assert read_document(workspace_root, "deps", "blocks.json") == [
            {"from": first, "to": second}
        ]

    def test_cycle_is_rejected(self, initialized_cli: AnankeCli, workspace_root: Path) -> None:
        epic_id = create_epic(initialized_cli)
        a, b, c = (create_task(initialized_cli, epic_id, name) for name in "abc")
        initialized_cli("dep", "add", a, b)
        initialized_cli("dep", "add", b, c)

        outcome = initialized_cli("dep", "add", c, a)
        assert outcome.exit_code == 4
        assert outcome.error == {
            "code": "CONFLICT",
            "message": f"Dependency would introduce cycle: {c} -> {a}",
        }
        assert len(read_document(workspace_root, "deps", "blocks.json")) == 2

    def test_self_loop(self, initialized_cli: AnankeCli) -> None:
        outcome = initialized_cli("dep", "add", "TSK-001", "TSK-001")
        assert outcome.exit_code == 2
        assert outcome.error["message"] == "Cannot add dependency from task to itself"

    def test_add_requires_existing_tasks(self, initialized_cli: AnankeCli) -> None:
        outcome = initialized_cli("dep", "add", "TSK-001", "TSK-002")
        assert outcome.exit_code == 3

    def test_remove(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        a = create_task(initialized_cli, epic_id, "a")
        b = create_task(initialized_cli, epic_id, "b")
        initialized_cli("dep", "add", a, b)

        removed = initialized_cli("dep", "rm", a, b)
        assert removed.data["applied"] == {"removed": 1}
        missing = initialized_cli("dep", "rm", a, b)
        assert missing.payload["message"] == f"Dependency did not exist: {a} -> {b}"
        assert missing.data["applied"] == {"removed": 0}


class TestReady:
    def test_blocking_scenario(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        a = create_task(initialized_cli, epic_id, "a", "--priority", "1")
        b = create_task(initialized_cli, epic_id, "b", "--priority", "0")
        initialized_cli("dep", "add", a, b)

        assert ready_ids(initialized_cli) == [a]

        initialized_cli("task", "close", a, "--summary", "done")
        assert ready_ids(initialized_cli) == [b]

        assert initialized_cli("dep", "add", b, a).exit_code == 4

    def test_epic_filter_and_limit(self, initialized_cli: AnankeCli) -> None:
        first = create_epic(initialized_cli, "one")
        second = create_epic(initialized_cli, "two")
        create_task(initialized_cli, first, "a", "--priority", "3")
        create_task(initialized_cli, first, "b", "--priority", "1")
        create_task(initialized_cli, second, "c", "--priority", "0")

        assert ready_ids(initialized_cli) == ["TSK-003", "TSK-002", "TSK-001"]
        assert ready_ids(initialized_cli, "--epic", first) == ["TSK-002", "TSK-001"]
        assert ready_ids(initialized_cli, "--limit", "1") == ["TSK-003"]

    def test_paused_epic_still_ready_done_epic_not(self, initialized_cli: AnankeCli) -> None:
        paused = create_epic(initialized_cli, "paused")
        done = create_epic(initialized_cli, "done")
        create_task(initialized_cli, paused, "p")
        create_task(initialized_cli, done, "d")
        initialized_cli("epic", "update", paused, "--status", "paused")
        initialized_cli("epic", "update", done, "--status", "done")

        assert ready_ids(initialized_cli) == ["TSK-001"]

    def test_invalid_limits(self, initialized_cli: AnankeCli) -> None:
        for value in ("0", "21"):
            outcome = initialized_cli("ready", "--limit", value)
            assert outcome.exit_code == 2
            assert outcome.error["code"] == "INVALID_ARGS"

    def test_unknown_epic(self, initialized_cli: AnankeCli) -> None:
        assert initialized_cli("ready", "--epic", "EPC-404").exit_code == 3

    def test_dangling_blocker_fails(self, initialized_cli: AnankeCli, workspace_root: Path) -> None:
        epic_id = create_epic(initialized_cli)
        task_id = create_task(initialized_cli, epic_id, "a")
        blocks = workspace_root / ".ananke" / "deps" / "blocks.json"
        blocks.write_text(json.dumps([{"from": "TSK-404", "to": task_id}]), encoding="utf-8")

        outcome = initialized_cli("ready")
        assert outcome.exit_code == 4
        expected = f"Dependency references missing task: TSK-404 -> {task_id}"
        assert outcome.error["message"] == expected

    def test_human_output_renders_table(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        create_task(initialized_cli, epic_id, "Write parser")
        result = initialized_cli.human("ready")
        assert result.exit_code == 0
        assert "Computed ready tasks" in result.stdout
        assert "Write parser" in result.stdout


class TestPack:
    def test_writes_markdown_pack(self, initialized_cli: AnankeCli, workspace_root: Path) -> None:
        epic_id = create_epic(initialized_cli)
        task_id = create_task(initialized_cli, epic_id, "Parser", "--acceptance", "parses")
        outcome = initialized_cli("pack", task_id)
        assert outcome.exit_code == 0
        assert outcome.data == {
            "task_id": task_id,
            "format": "md",
            "path": f".ananke/packs/{task_id}.md",
        }
        text = (workspace_root / ".ananke" / "packs" / f"{task_id}.md").read_text(encoding="utf-8")
        assert text.startswith(f"# {task_id}: Parser")

    def test_json_pack_on_stdout(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        done = create_task(initialized_cli, epic_id, "Schema")
        task_id = create_task(initialized_cli, epic_id, "Parser")
        initialized_cli("task", "close", done, "--summary", "Schema written")

        outcome = initialized_cli("pack", task_id, "--format", "json", "--stdout")
        content = outcome.data["content"]
        assert content["task"]["id"] == task_id
        assert content["recent"][0]["outcome_summary"] == "Schema written"

    def test_human_stdout_prints_raw_pack(self, initialized_cli: AnankeCli) -> None:
        epic_id = create_epic(initialized_cli)
        task_id = create_task(initialized_cli, epic_id, "Parser")
        result = initialized_cli.human("pack", task_id, "--stdout")
        assert result.exit_code == 0
        assert result.stdout.startswith(f"# {task_id}: Parser\n")

    def test_missing_task(self, initialized_cli: AnankeCli) -> None:
        assert initialized_cli("pack", "TSK-009").exit_code == 3

    def test_recent_bounds(self, initialized_cli: AnankeCli) -> None:
        assert initialized_cli("pack", "TSK-001", "--recent", "0").exit_code == 2


def test_human_error_goes_to_stderr(cli: AnankeCli) -> None:
    result = cli.human("epic", "show", "EPC-001")
    assert result.exit_code == 3
    assert "NOT_FOUND" in result.output


def test_version(runner: Any) -> None:
    from ananke import __version__
    from ananke.main import app

    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_ready_rejects_task_without_status(
    initialized_cli: AnankeCli, workspace_root: Path
) -> None:
    epic_id = create_epic(initialized_cli)
    task_id = create_task(initialized_cli, epic_id, "a")
    path = workspace_root / ".ananke" / "tasks" / f"{task_id}.json"
    document = json.loads(path.read_text(encoding="utf-8"))
    del document["status"]
    path.write_text(json.dumps(document), encoding="utf-8")

    outcome = initialized_cli("ready")
    assert outcome.exit_code == 4
    assert outcome.error["code"] == "CONFLICT"
    assert outcome.error["message"] == f"Invalid contents in .ananke/tasks/{task_id}.json"


def test_ready_rejects_string_priority(initialized_cli: AnankeCli, workspace_root: Path) -> None:
    epic_id = create_epic(initialized_cli)
    task_id = create_task(initialized_cli, epic_id, "a")
    path = workspace_root / ".ananke" / "tasks" / f"{task_id}.json"
    document = json.loads(path.read_text(encoding="utf-8"))
    document["priority"] = "1"
    path.write_text(json.dumps(document), encoding="utf-8")

    assert initialized_cli("ready").exit_code == 4
