"""List tasks that are ready to execute."""

from __future__ import annotations

import typer
from rich import box
from rich.table import Table
from rich.text import Text

from ananke.commands._common import get_state, open_store, require_range
from ananke.core.errors import command_handler
from ananke.core.models import ReadyTask
from ananke.core.output import CommandResult
from ananke.core.readiness import compute_ready
from ananke.core.result import Err, Ok
from ananke.workspace.ids import parse_epic_id


def _ready_table(tasks: list[ReadyTask]) -> Table:
    table = Table(title="Ready Tasks", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("Task", style="cyan", no_wrap=True)
    table.add_column("Epic", style="magenta", no_wrap=True)
    table.add_column("Priority", justify="right")
    table.add_column("Title", style="white")
    for task in tasks:
        table.add_row(task.id, task.epic_id, str(task.priority), task.title)
    return table


@command_handler
def ready(
    ctx: typer.Context,
    epic: str | None = typer.Option(None, "--epic", help="Only consider tasks of this epic."),
    limit: int | None = typer.Option(None, "--limit", help="Maximum number of tasks to list."),
) -> CommandResult:
    """List tasks ready to execute."""
    state = get_state(ctx)
    epic_id = parse_epic_id(epic) if epic is not None else None
    require_range(limit, 1, state.config.max_ready_limit, "--limit")

    store = open_store(ctx)
    if epic_id is not None:
        store.read_epic(epic_id)

    outcome = compute_ready(
        store.list_tasks(),
        store.list_epics(),
        store.read_blocks(),
        epic_id=epic_id,
        limit=limit,
    )
    match outcome:
        case Err(error):
            raise error
        case Ok(tasks):
            state.logger.debug("%d ready tasks", len(tasks))
            renderable = _ready_table(tasks) if tasks else Text("No ready tasks.", style="dim")
            return CommandResult(
                "Computed ready tasks",
                {"tasks": [task.model_dump() for task in tasks]},
                renderable=renderable,
            )
