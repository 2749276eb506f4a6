"""
Centralized error formatting for CLI commands.

Maps exceptions to the stable error codes and exit statuses that make up the
failure envelope, and provides ``command_handler`` which wraps every typer
command so that failures are rendered consistently.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import typer

from ananke.core.output import CommandResult, render_failure, render_success
from ananke.core.result import AnankeError, exit_code_for

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True, slots=True)
class FormattedError:
    """A formatted error ready for display."""

    code: str
    message: str
    details: dict[str, Any]

    @property
    def exit_code(self) -> int:
        return exit_code_for(self.code)


def _error_code(exc: Exception) -> str:
    if isinstance(exc, AnankeError):
        return exc.code
    if isinstance(exc, OSError):
        return "CONFLICT"
    return "UNEXPECTED_ERROR"


def format_error(exc: Exception) -> FormattedError:
    """Format an exception into a structured error."""
    details: dict[str, Any] = {}
    message = str(exc)
    if isinstance(exc, AnankeError):
        details = exc.context.copy()
        message = exc.message

    if isinstance(exc, OSError):
        message = exc.strerror or message
        if exc.filename:
            details["path"] = str(exc.filename)

    return FormattedError(code=_error_code(exc), message=message, details=details)


def _json_output(ctx: typer.Context | None) -> bool:
    state = ctx.obj if ctx is not None else None
    return bool(getattr(state, "json_output", False))


def command_handler(func: F) -> F:
    """Decorate CLI entrypoints to render their result and map failures to exit codes.

    The wrapped function returns a ``CommandResult`` or raises; ``AnankeError``
    and ``OSError`` become a failure envelope plus ``typer.Exit``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        ctx = kwargs.get("ctx")
        if ctx is None:
            ctx = next((a for a in args if isinstance(a, typer.Context)), None)
        json_output = _json_output(ctx)

        try:
            result = func(*args, **kwargs)
        except (AnankeError, OSError) as exc:
            error = format_error(exc)
            logger.debug("Command failed with %s: %s", error.code, error.message)
            render_failure(error.code, error.message, error.details, json_output=json_output)
            raise typer.Exit(code=error.exit_code) from exc

        if isinstance(result, CommandResult):
            render_success(result, json_output=json_output)

    return wrapper  # type: ignore[return-value]


__all__ = ["FormattedError", "command_handler", "format_error"]
