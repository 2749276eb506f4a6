"""Core shared infrastructure for ananke.

This package contains the engines and foundational utilities:
    - graph: block edge mutation with cycle rejection
    - readiness: ordered ready-work computation
    - mutations: field-level patches for epics and tasks
    - pack: task context packs
    - config: Application configuration management
    - console: Rich console output and logging
    - result: Result types and the error hierarchy
"""

from __future__ import annotations

from . import config, console

__all__ = ["config", "console"]
