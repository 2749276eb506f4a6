"""Generate a context pack for one task."""

from __future__ import annotations

import typer

from ananke.commands._common import PackFormatChoice, get_state, open_store, require_range
from ananke.core.errors import command_handler
from ananke.core.output import CommandResult
from ananke.core.pack import build_pack, render_pack
from ananke.workspace.ids import parse_task_id


@command_handler
def pack(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., metavar="TASK_ID", help="Task id, e.g. TSK-001."),
    fmt: PackFormatChoice | None = typer.Option(
        None, "--format", case_sensitive=False, help="Pack format (md or json)."
    ),
    recent: int | None = typer.Option(
        None, "--recent", help="Number of recently closed tasks to include (1..20)."
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Print the pack instead of writing it."),
) -> CommandResult:
    """Generate a task context pack."""
    state = get_state(ctx)
    parsed = parse_task_id(task_id)
    require_range(recent, 1, 20, "--recent")
    pack_format = fmt.value if fmt is not None else state.config.default_pack_format

    store = open_store(ctx)
    task = store.read_task(parsed)
    payload = build_pack(
        task,
        store.list_epics(),
        store.list_tasks(),
        store.read_blocks(),
        recent=recent if recent is not None else state.config.default_pack_recent,
    )
    content = render_pack(payload, pack_format)

    if stdout:
        data = {
            "task_id": parsed,
            "format": pack_format,
            "content": payload if pack_format == "json" else content,
        }
        return CommandResult(f"Generated context pack for {parsed}", data, raw=content)

    target = store.paths.packs_dir / f"{parsed}.{pack_format}"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    state.logger.debug("Wrote pack %s (%d bytes)", target, len(content))
    return CommandResult(
        f"Wrote context pack for {parsed}",
        {"task_id": parsed, "format": pack_format, "path": store.relative(target)},
    )
