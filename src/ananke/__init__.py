"""ananke - durable epic, task and dependency tracking for AI coding agents.

State lives in flat JSON files under ``.ananke/`` in the workspace root; every
CLI invocation loads what it needs, computes, and writes changes back.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
