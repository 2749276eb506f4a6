from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter

import typer

from . import __version__
from .core.config import AppConfig, ConfigLoadResult, load_config
from .core.console import console, setup_logging
from .core.registry import discover_commands
from .workspace.paths import WorkspacePaths, detect_workspace_root
from .workspace.store import WorkspaceStore

app = typer.Typer(
    help="ananke - AI-native local execution layer for epics, tasks and ready work.",
    no_args_is_help=True,
)
logger = logging.getLogger(__name__)


@dataclass
class AppState:
    config: AppConfig
    config_meta: ConfigLoadResult
    logger: logging.Logger
    paths: WorkspacePaths
    json_output: bool = False

    def store(self) -> WorkspaceStore:
        return WorkspaceStore(self.paths)


def _resolve_root(root: Path | None, config: AppConfig) -> Path:
    if root is not None:
        return root.expanduser().resolve()
    if config.workspace_root is not None:
        return config.workspace_root.resolve()
    return detect_workspace_root(Path.cwd())


@app.callback()
def main(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False, "--json", help="Print machine-readable JSON envelopes."
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Workspace root (defaults to the nearest directory containing .git).",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to an ananke config file (TOML or JSON)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    loaded_config, meta = load_config(config_path=config)
    logger = setup_logging(level=loaded_config.log_level, verbose=verbose)

    paths = WorkspacePaths.for_root(_resolve_root(root, loaded_config))
    ctx.obj = AppState(
        config=loaded_config,
        config_meta=meta,
        logger=logger,
        paths=paths,
        json_output=json_output or loaded_config.json_output,
    )

    if meta.error:
        logger.warning("Ignoring invalid configuration %s: %s", meta.path, meta.error)
    else:
        logger.debug(
            "Loaded configuration from %s (file: %s, env overrides: %s); workspace %s",
            meta.path,
            meta.file_loaded,
            sorted(meta.env_overrides),
            paths.root,
        )


@app.command("version")
def show_version() -> None:
    """Print the ananke version."""
    console.print(__version__)


def _register_commands() -> None:
    commands_path = Path(__file__).resolve().parent / "commands"
    typer_modules, function_commands = discover_commands(commands_path)

    for name, module in typer_modules:
        app.add_typer(module.app, name=name)

    for spec in function_commands:
        app.command(spec.name)(spec.handler)


def _register_commands_with_timing() -> None:
    start = perf_counter()
    _register_commands()
    elapsed = perf_counter() - start
    logger.debug("Command registry initialized in %.3f seconds", elapsed)


_register_commands_with_timing()


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
