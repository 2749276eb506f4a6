"""Rendering of command outcomes.

Every command produces one envelope:

    success: {"ok": true, "message": ..., "data": ...}
    failure: {"ok": false, "error": {"code": ..., "message": ..., "details": ...}}

With ``--json`` the envelope is written verbatim to stdout. Otherwise the
message is printed for humans, followed by the data (or a custom renderable).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from rich.console import RenderableType
from rich.markup import escape

from ananke.core import console as console_module


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Successful outcome of a command.

    Attributes:
        message: One-line human summary
        data: Structured payload (omitted from the envelope when None)
        renderable: Optional Rich renderable used instead of ``data`` for humans
        raw: Text printed as-is in human mode (e.g. a pack sent to stdout)
    """

    message: str
    data: dict[str, Any] | None = None
    renderable: RenderableType | None = field(default=None, compare=False)
    raw: str | None = None

    def envelope(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"ok": True, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


def failure_envelope(code: str, message: str, details: dict[str, Any] | None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"ok": False, "error": error}


def _write_json(payload: dict[str, Any]) -> None:
    console_module.get_console().out(
        json.dumps(payload, indent=2, ensure_ascii=False, default=str), highlight=False
    )


def render_success(result: CommandResult, *, json_output: bool) -> None:
    if json_output:
        _write_json(result.envelope())
        return

    out = console_module.get_console()
    if result.raw is not None:
        out.out(result.raw, end="", highlight=False)
        return
    out.print(escape(result.message))
    if result.renderable is not None:
        out.print(result.renderable)
    elif result.data is not None:
        out.print_json(data=result.data)


def render_failure(
    code: str, message: str, details: dict[str, Any] | None, *, json_output: bool
) -> None:
    if json_output:
        _write_json(failure_envelope(code, message, details))
        return

    err = console_module.get_console(stderr=True)
    err.print(f"[red]Error ({code}):[/red] {escape(message)}")
    if details:
        err.print_json(data=details, default=str)


__all__ = ["CommandResult", "failure_envelope", "render_failure", "render_success"]
