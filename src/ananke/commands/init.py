"""Workspace initialization."""

from __future__ import annotations

import typer

from ananke.commands._common import get_state
from ananke.core.errors import command_handler
from ananke.core.output import CommandResult
from ananke.core.result import InvalidArgsError
from ananke.workspace.scaffold import InitMode, initialize_workspace


@command_handler
def init(
    ctx: typer.Context,
    update: bool = typer.Option(
        False, "--update", help="Fill in missing files and refresh SKILL.md."
    ),
    reset: bool = typer.Option(False, "--reset", help="Delete .ananke and recreate it."),
) -> CommandResult:
    """Initialize .ananke workspace scaffold."""
    if update and reset:
        raise InvalidArgsError("--update and --reset cannot be used together")
    mode = InitMode.RESET if reset else InitMode.UPDATE if update else InitMode.CREATE

    state = get_state(ctx)
    state.logger.debug("Initializing workspace at %s (mode: %s)", state.paths.root, mode.value)
    created = initialize_workspace(state.paths, mode)
    return CommandResult("Initialized .ananke workspace", {"created": created})
