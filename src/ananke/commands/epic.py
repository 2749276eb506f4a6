"""Epic commands: create, show and update."""

from __future__ import annotations

from typing import Any

import typer

from ananke.commands._common import EpicStatusChoice, open_store, require_text, require_texts
from ananke.core.errors import command_handler
from ananke.core.models import Epic, utc_timestamp
from ananke.core.mutations import EpicPatch, apply_epic_patch
from ananke.core.output import CommandResult
from ananke.core.result import ConflictError, InvalidArgsError
from ananke.workspace.ids import format_epic_id, parse_epic_id

app = typer.Typer(help="Create, inspect and update epics.", no_args_is_help=True)


def _summary(epic: Epic) -> dict[str, Any]:
    return {"id": epic.id, "status": epic.status}


@app.command("create")
@command_handler
def create(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", help="Epic title."),
    goal: str = typer.Option(..., "--goal", help="What finishing the epic achieves."),
    constraint: list[str] | None = typer.Option(
        None, "--constraint", help="Constraint to record (repeatable)."
    ),
    decision: list[str] | None = typer.Option(
        None, "--decision", help="Decision to record (repeatable)."
    ),
    context: str | None = typer.Option(None, "--context", help="Free-form background."),
) -> CommandResult:
    """Create a new epic."""
    require_text(title, "--title")
    require_text(goal, "--goal")
    require_text(context, "--context")
    constraints = require_texts(constraint, "--constraint")
    decisions = require_texts(decision, "--decision")

    store = open_store(ctx)
    index = store.read_index()
    epic_id = format_epic_id(index.next_epic)
    if store.epic_exists(epic_id):
        raise ConflictError(f"Epic already exists: {epic_id}")

    now = utc_timestamp()
    epic = Epic(
        id=epic_id,
        title=title,
        goal=goal,
        status="active",
        constraints=constraints,
        decisions=decisions,
        context=context,
        created_at=now,
        updated_at=now,
    )
    path = store.write_epic(epic)
    store.write_index(
        index.model_copy(update={"next_epic": index.next_epic + 1, "updated_at": now})
    )

    return CommandResult(
        f"Created epic {epic_id}", {"epic": _summary(epic), "path": store.relative(path)}
    )


@app.command("show")
@command_handler
def show(
    ctx: typer.Context,
    epic_id: str = typer.Argument(..., metavar="EPIC_ID", help="Epic id, e.g. EPC-001."),
) -> CommandResult:
    """Show one epic by id."""
    parsed = parse_epic_id(epic_id)
    store = open_store(ctx)
    epic = store.read_epic(parsed)
    return CommandResult(
        f"Loaded epic {parsed}",
        {"epic": epic.to_document(), "path": store.relative(store.paths.epic_file(parsed))},
    )


@app.command("update")
@command_handler
def update(
    ctx: typer.Context,
    epic_id: str = typer.Argument(..., metavar="EPIC_ID", help="Epic id, e.g. EPC-001."),
    title: str | None = typer.Option(None, "--title"),
    goal: str | None = typer.Option(None, "--goal"),
    status: EpicStatusChoice | None = typer.Option(None, "--status", case_sensitive=False),
    context: str | None = typer.Option(None, "--context"),
    digest: str | None = typer.Option(None, "--digest", help="Short running summary."),
    add_constraint: list[str] | None = typer.Option(
        None, "--add-constraint", help="Append a constraint (repeatable)."
    ),
    add_decision: list[str] | None = typer.Option(
        None, "--add-decision", help="Append a decision (repeatable)."
    ),
) -> CommandResult:
    """Update an existing epic."""
    parsed = parse_epic_id(epic_id)
    patch = EpicPatch(
        title=require_text(title, "--title"),
        goal=require_text(goal, "--goal"),
        status=status.value if status is not None else None,
        context=require_text(context, "--context"),
        digest=require_text(digest, "--digest"),
        add_constraints=require_texts(add_constraint, "--add-constraint"),
        add_decisions=require_texts(add_decision, "--add-decision"),
    )
    if patch.is_empty():
        raise InvalidArgsError("No updates provided")

    store = open_store(ctx)
    result = apply_epic_patch(store.read_epic(parsed), patch)
    path = store.paths.epic_file(parsed)
    if result.changed:
        path = store.write_epic(result.document)
        ctx.obj.logger.debug("Updated epic %s", parsed)

    data = {
        "epic": _summary(result.document),
        "path": store.relative(path),
        "applied": {
            "constraints_added": result.added["constraints"],
            "decisions_added": result.added["decisions"],
        },
    }
    message = f"Updated epic {parsed}" if result.changed else f"No changes applied to epic {parsed}"
    return CommandResult(message, data)
