"""Dependency commands: add and remove ``blocks`` edges."""

from __future__ import annotations

import typer

from ananke.commands._common import get_state, open_store
from ananke.core.errors import command_handler
from ananke.core.graph import EdgeMutation, EdgeOutcome, add_edge, remove_edge
from ananke.core.output import CommandResult
from ananke.core.result import Err, InvalidArgsError, Ok
from ananke.workspace.ids import parse_task_id

app = typer.Typer(help="Manage blocking dependencies between tasks.", no_args_is_help=True)

MESSAGES = {
    EdgeOutcome.ADDED: "Added dependency {edge}",
    EdgeOutcome.ALREADY_PRESENT: "Dependency already exists: {edge}",
    EdgeOutcome.REMOVED: "Removed dependency {edge}",
    EdgeOutcome.ABSENT: "Dependency did not exist: {edge}",
}


def _parse_pair(blocker: str, blocked: str) -> tuple[str, str]:
    return parse_task_id(blocker), parse_task_id(blocked)


def _result(mutation: EdgeMutation, key: str) -> CommandResult:
    return CommandResult(
        MESSAGES[mutation.outcome].format(edge=mutation.edge),
        {
            "edge": {"from": mutation.edge.blocker, "to": mutation.edge.blocked},
            "applied": {key: mutation.count},
        },
    )


@app.command("add")
@command_handler
def add(
    ctx: typer.Context,
    blocker: str = typer.Argument(..., metavar="FROM", help="Task that must finish first."),
    blocked: str = typer.Argument(..., metavar="TO", help="Task that waits on FROM."),
) -> CommandResult:
    """Add a blocks dependency edge."""
    blocker, blocked = _parse_pair(blocker, blocked)
    if blocker == blocked:
        raise InvalidArgsError("Cannot add dependency from task to itself")
    store = open_store(ctx)
    store.read_task(blocker)
    store.read_task(blocked)

    match add_edge(store.read_blocks(), blocker, blocked):
        case Err(error):
            raise error
        case Ok(mutation):
            if mutation.changed:
                store.write_blocks(mutation.edges)
                get_state(ctx).logger.debug("Stored %d block edges", len(mutation.edges))
            return _result(mutation, "added")


@app.command("rm")
@command_handler
def rm(
    ctx: typer.Context,
    blocker: str = typer.Argument(..., metavar="FROM"),
    blocked: str = typer.Argument(..., metavar="TO"),
) -> CommandResult:
    """Remove a blocks dependency edge."""
    blocker, blocked = _parse_pair(blocker, blocked)
    store = open_store(ctx)
    mutation = remove_edge(store.read_blocks(), blocker, blocked)
    if mutation.changed:
        store.write_blocks(mutation.edges)
    return _result(mutation, "removed")
