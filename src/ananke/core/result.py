"""
Unified Result types and error hierarchy for ananke.

This module provides:
1. Result[T, E] type for explicit error handling
2. Domain-specific exception hierarchy with stable error codes
3. Exit status mapping for error codes

Usage:
    from ananke.core.result import Ok, Err, Result, ConflictError

    def link(...) -> Result[EdgeMutation, ConflictError]:
        if closes_cycle:
            return Err(CycleError("Dependency would introduce cycle: ..."))
        return Ok(mutation)

    match link(...):
        case Ok(mutation):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply a function to the contained value."""
        return Ok(fn(self.value))

    def and_then(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain operations that may fail."""
        return fn(self.value)


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raise the contained error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        """No-op for Err - returns self unchanged."""
        return self

    def and_then(self, fn: Callable[[Any], Result[U, E]]) -> Err[E]:
        """Short-circuit for Err - returns self unchanged."""
        return self


Result = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Domain-specific error hierarchy
# ---------------------------------------------------------------------------


class AnankeError(Exception):
    """Base exception for all ananke errors.

    Every subclass carries a stable ``code`` which the CLI layer maps to an
    exit status and reports in the JSON envelope.
    """

    code = "UNEXPECTED_ERROR"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class InvalidArgsError(AnankeError):
    """Raised for input validation failures.

    Examples:
    - Malformed epic or task id
    - Dependency from a task to itself
    - Update requested without any changes
    """

    code = "INVALID_ARGS"


class NotFoundError(AnankeError):
    """Raised when a workspace, epic or task does not exist."""

    code = "NOT_FOUND"


class ConflictError(AnankeError):
    """Raised when the request conflicts with stored state.

    Examples:
    - Workspace already initialized
    - Invalid or unreadable document on disk
    - Creating a task under a done epic
    """

    code = "CONFLICT"


class CycleError(ConflictError):
    """Raised when a new block edge would close a cycle."""


class IntegrityError(ConflictError):
    """Raised when a task or edge references an entity that does not exist."""


class NotImplementedYetError(AnankeError):
    """Reserved for commands that are scaffolded but not available.

    No shipped command raises it; the code stays part of the exit contract.
    """

    code = "NOT_IMPLEMENTED"


EXIT_CODES: dict[str, int] = {
    "INVALID_ARGS": 2,
    "NOT_FOUND": 3,
    "CONFLICT": 4,
    "NOT_IMPLEMENTED": 10,
}


def exit_code_for(code: str) -> int:
    """Map an error code to the process exit status."""
    return EXIT_CODES.get(code, 1)


__all__ = [
    # Result types
    "Ok",
    "Err",
    "Result",
    # Error hierarchy
    "AnankeError",
    "InvalidArgsError",
    "NotFoundError",
    "ConflictError",
    "CycleError",
    "IntegrityError",
    "NotImplementedYetError",
    # Exit codes
    "EXIT_CODES",
    "exit_code_for",
]
