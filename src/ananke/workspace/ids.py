"""Epic and task identifiers.

Ids are a prefix plus a counter taken from ``index.json``, zero-padded to
three digits: ``EPC-001``, ``TSK-042``, ``TSK-1000``.
"""

from __future__ import annotations

import re

from ananke.core.result import InvalidArgsError

EPIC_PREFIX = "EPC"
TASK_PREFIX = "TSK"

EPIC_ID_PATTERN = rf"^{EPIC_PREFIX}-[0-9]+$"
TASK_ID_PATTERN = rf"^{TASK_PREFIX}-[0-9]+$"

_EPIC_ID_RE = re.compile(EPIC_ID_PATTERN)
_TASK_ID_RE = re.compile(TASK_ID_PATTERN)


def is_epic_id(value: str) -> bool:
    return _EPIC_ID_RE.match(value) is not None


def is_task_id(value: str) -> bool:
    return _TASK_ID_RE.match(value) is not None


def format_epic_id(counter: int) -> str:
    return f"{EPIC_PREFIX}-{counter:03d}"


def format_task_id(counter: int) -> str:
    return f"{TASK_PREFIX}-{counter:03d}"


def parse_epic_id(value: str) -> str:
    if not is_epic_id(value):
        raise InvalidArgsError(f"Invalid epic id: {value}")
    return value


def parse_task_id(value: str) -> str:
    if not is_task_id(value):
        raise InvalidArgsError(f"Invalid task id: {value}")
    return value
