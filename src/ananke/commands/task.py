"""Task commands: create, show, update and close."""

from __future__ import annotations

from typing import Any

import typer

from ananke.commands._common import (
    TaskStatusChoice,
    get_state,
    open_store,
    require_range,
    require_text,
    require_texts,
)
from ananke.core.errors import command_handler
from ananke.core.models import MAX_PRIORITY, MIN_PRIORITY, Task, utc_timestamp
from ananke.core.mutations import TaskPatch, apply_task_patch
from ananke.core.output import CommandResult
from ananke.core.result import ConflictError, InvalidArgsError
from ananke.workspace.ids import format_task_id, parse_epic_id, parse_task_id

app = typer.Typer(help="Create, inspect, update and close tasks.", no_args_is_help=True)

PRIORITY_HELP = f"Priority {MIN_PRIORITY} (highest) to {MAX_PRIORITY} (lowest)."


def _summary(task: Task) -> dict[str, Any]:
    return {"id": task.id, "status": task.status, "priority": task.priority}


def _mutate(ctx: typer.Context, task_id: str, patch: TaskPatch, verb: str) -> CommandResult:
    patch.validate()
    store = open_store(ctx)
    result = apply_task_patch(store.read_task(task_id), patch)
    path = store.paths.task_file(task_id)
    if result.changed:
        path = store.write_task(result.document)
        get_state(ctx).logger.debug("%s task %s", verb, task_id)

    data = {
        "task": _summary(result.document),
        "path": store.relative(path),
        "applied": {"acceptance_added": result.added["acceptance"]},
    }
    message = (
        f"{verb} task {task_id}" if result.changed else f"No changes applied to task {task_id}"
    )
    return CommandResult(message, data)


@app.command("create")
@command_handler
def create(
    ctx: typer.Context,
    epic: str = typer.Option(..., "--epic", help="Owning epic id."),
    title: str = typer.Option(..., "--title", help="Task title."),
    description: str = typer.Option(..., "--description", help="What the task involves."),
    priority: int | None = typer.Option(None, "--priority", help=PRIORITY_HELP),
    acceptance: list[str] | None = typer.Option(
        None, "--acceptance", help="Acceptance criterion (repeatable)."
    ),
) -> CommandResult:
    """Create a new task."""
    epic_id = parse_epic_id(epic)
    require_text(title, "--title")
    require_text(description, "--description")
    require_range(priority, MIN_PRIORITY, MAX_PRIORITY, "--priority")
    criteria = require_texts(acceptance, "--acceptance")

    state = get_state(ctx)
    store = open_store(ctx)
    owner = store.read_epic(epic_id)
    if owner.status == "done":
        raise ConflictError(
            f"Cannot create task under done epic: {epic_id}",
            context={"hint": f"Reopen it with `ananke epic update {epic_id} --status active`"},
        )

    index = store.read_index()
    task_id = format_task_id(index.next_task)
    if store.task_exists(task_id):
        raise ConflictError(f"Task already exists: {task_id}")

    now = utc_timestamp()
    task = Task(
        id=task_id,
        epic_id=epic_id,
        title=title,
        description=description,
        status="todo",
        priority=priority if priority is not None else state.config.default_priority,
        acceptance=criteria or None,
        created_at=now,
        updated_at=now,
    )
    path = store.write_task(task)
    store.write_index(
        index.model_copy(update={"next_task": index.next_task + 1, "updated_at": now})
    )

    return CommandResult(
        f"Created task {task_id}",
        {"task": {**_summary(task), "epic_id": epic_id}, "path": store.relative(path)},
    )


@app.command("show")
@command_handler
def show(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., metavar="TASK_ID", help="Task id, e.g. TSK-001."),
) -> CommandResult:
    """Show one task by id."""
    parsed = parse_task_id(task_id)
    store = open_store(ctx)
    task = store.read_task(parsed)
    return CommandResult(
        f"Loaded task {parsed}",
        {"task": task.to_document(), "path": store.relative(store.paths.task_file(parsed))},
    )


@app.command("update")
@command_handler
def update(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., metavar="TASK_ID", help="Task id, e.g. TSK-001."),
    title: str | None = typer.Option(None, "--title"),
    description: str | None = typer.Option(None, "--description"),
    status: TaskStatusChoice | None = typer.Option(None, "--status", case_sensitive=False),
    priority: int | None = typer.Option(None, "--priority", help=PRIORITY_HELP),
    notes: str | None = typer.Option(None, "--notes"),
    outcome_summary: str | None = typer.Option(
        None, "--outcome-summary", help="Required when --status is done."
    ),
    add_acceptance: list[str] | None = typer.Option(
        None, "--add-acceptance", help="Append an acceptance criterion (repeatable)."
    ),
) -> CommandResult:
    """Update an existing task."""
    parsed = parse_task_id(task_id)
    patch = TaskPatch(
        title=require_text(title, "--title"),
        description=require_text(description, "--description"),
        status=status.value if status is not None else None,
        priority=require_range(priority, MIN_PRIORITY, MAX_PRIORITY, "--priority"),
        notes=require_text(notes, "--notes"),
        outcome_summary=require_text(outcome_summary, "--outcome-summary"),
        add_acceptance=require_texts(add_acceptance, "--add-acceptance"),
    )
    if patch.is_empty():
        raise InvalidArgsError("No updates provided")
    return _mutate(ctx, parsed, patch, "Updated")


@app.command("close")
@command_handler
def close(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., metavar="TASK_ID", help="Task id, e.g. TSK-001."),
    summary: str = typer.Option(..., "--summary", help="Outcome summary for the closed task."),
) -> CommandResult:
    """Close a task with outcome summary."""
    parsed = parse_task_id(task_id)
    patch = TaskPatch(status="done", outcome_summary=require_text(summary, "--summary"))
    return _mutate(ctx, parsed, patch, "Closed")
