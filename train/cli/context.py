from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from train.core.config import ReleaserConfig, load_config
from train.core.errors import ErrorCode
from train.core.result import Err
from train.output.console import ConsoleProtocol, RichConsole

DEFAULT_CONFIG_FILE = "releaser.toml"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ReleaserConfig
    config_path: Path | None
    console: ConsoleProtocol


def build_context(config_path: Path | None = None) -> CLIContext:
    """Load releaser.toml (explicit path, else ./releaser.toml, else defaults)."""
    path = config_path if config_path is not None else Path.cwd() / DEFAULT_CONFIG_FILE
    if config_path is None and not path.exists():
        return CLIContext(config=ReleaserConfig(), config_path=None, console=RichConsole())

    loaded = load_config(path)
    if isinstance(loaded, Err):
        typer.echo(f"error: {loaded.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    return CLIContext(config=loaded.value, config_path=path, console=RichConsole())
