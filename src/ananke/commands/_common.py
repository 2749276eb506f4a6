"""Helpers shared by the command modules."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING

import typer

from ananke.core.result import InvalidArgsError
from ananke.workspace.store import WorkspaceStore

if TYPE_CHECKING:
    from ananke.main import AppState


class EpicStatusChoice(str, Enum):
    active = "active"
    paused = "paused"
    done = "done"


class TaskStatusChoice(str, Enum):
    todo = "todo"
    doing = "doing"
    done = "done"


class PackFormatChoice(str, Enum):
    md = "md"
    json = "json"


def get_state(ctx: typer.Context) -> AppState:
    return ctx.obj  # type: ignore[no-any-return]


def open_store(ctx: typer.Context) -> WorkspaceStore:
    """Return the workspace store, failing if the workspace is not initialized."""
    store = get_state(ctx).store()
    store.ensure_initialized()
    return store


def require_text(value: str | None, option: str) -> str | None:
    if value is not None and not value.strip():
        raise InvalidArgsError(f"{option}: value cannot be empty")
    return value


def require_texts(values: Iterable[str] | None, option: str) -> list[str]:
    return [require_text(value, option) or "" for value in values or []]


def require_range(value: int | None, low: int, high: int, option: str) -> int | None:
    if value is not None and not low <= value <= high:
        raise InvalidArgsError(f"{option}: expected {low}..{high}", context={"value": value})
    return value
