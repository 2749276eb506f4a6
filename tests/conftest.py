from __future__ import annotations

import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
from rich.console import Console
from typer.testing import CliRunner

if TYPE_CHECKING:
    from click.testing import Result

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ananke.core.config import AppConfig  # noqa: E402
from ananke.core.models import BlockEdge, Epic, Task  # noqa: E402

STAMP = "2026-01-01T00:00:00.000Z"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config to a temp path so tests don't touch user state."""
    cfg_path = tmp_path / "config.toml"
    monkeypatch.setenv("ANANKE_CONFIG", str(cfg_path))
    for field in AppConfig.model_fields:
        monkeypatch.delenv(f"ANANKE_{field.upper()}", raising=False)
    return cfg_path


@pytest.fixture(autouse=True)
def capture_console(monkeypatch: Any) -> Console:
    """Use a wide recording Rich console during tests."""
    test_console = Console(record=True, width=200)
    import ananke.core.console as core_console
    import ananke.main as ananke_main

    monkeypatch.setattr(core_console, "console", test_console)
    monkeypatch.setattr(ananke_main, "console", test_console)
    return test_console


@dataclass
class CliOutcome:
    exit_code: int
    payload: dict[str, Any]
    result: Result

    @property
    def ok(self) -> bool:
        return bool(self.payload.get("ok"))

    @property
    def data(self) -> dict[str, Any]:
        return self.payload.get("data", {})

    @property
    def error(self) -> dict[str, Any]:
        return self.payload.get("error", {})


class AnankeCli:
    """Invoke the CLI against one workspace root with ``--json``."""

    def __init__(self, runner: CliRunner, root: Path) -> None:
        self.runner = runner
        self.root = root

    def __call__(self, *args: str) -> CliOutcome:
        from ananke.main import app

        result = self.runner.invoke(app, ["--json", "--root", str(self.root), *args])
        payload = json.loads(result.stdout) if result.stdout.strip() else {}
        return CliOutcome(exit_code=result.exit_code, payload=payload, result=result)

    def human(self, *args: str) -> Result:
        from ananke.main import app

        return self.runner.invoke(app, ["--root", str(self.root), *args])


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    return root


@pytest.fixture
def cli(runner: CliRunner, workspace_root: Path) -> AnankeCli:
    return AnankeCli(runner, workspace_root)


@pytest.fixture
def initialized_cli(cli: AnankeCli) -> AnankeCli:
    outcome = cli("init")
    assert outcome.exit_code == 0, outcome.result.output
    return cli


@pytest.fixture
def make_epic() -> Callable[..., Epic]:
    def _make(epic_id: str = "EPC-001", **overrides: Any) -> Epic:
        fields: dict[str, Any] = {
            "id": epic_id,
            "title": f"Epic {epic_id}",
            "goal": "Ship it",
            "status": "active",
            "constraints": [],
            "decisions": [],
            "created_at": STAMP,
            "updated_at": STAMP,
        }
        fields.update(overrides)
        return Epic(**fields)

    return _make


@pytest.fixture
def make_task() -> Callable[..., Task]:
    def _make(task_id: str, epic_id: str = "EPC-001", **overrides: Any) -> Task:
        fields: dict[str, Any] = {
            "id": task_id,
            "epic_id": epic_id,
            "title": f"Task {task_id}",
            "description": "Do the work",
            "status": "todo",
            "priority": 2,
            "created_at": STAMP,
            "updated_at": STAMP,
        }
        fields.update(overrides)
        return Task(**fields)

    return _make


def edge(blocker: str, blocked: str) -> BlockEdge:
    return BlockEdge.between(blocker, blocked)


@pytest.fixture
def make_edge() -> Callable[[str, str], BlockEdge]:
    return edge
