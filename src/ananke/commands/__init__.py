"""CLI command modules for ananke.

Each module is either a Typer sub-app or exposes plain command functions:
    - init: workspace scaffolding
    - epic: create, show and update epics
    - task: create, show, update and close tasks
    - dep: add and remove block edges
    - ready: list tasks ready to execute
    - pack: generate a task context pack
"""

from __future__ import annotations

from . import dep, epic, init, pack, ready, task

__all__ = ["dep", "epic", "init", "pack", "ready", "task"]
