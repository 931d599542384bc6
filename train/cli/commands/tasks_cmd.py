"""List the release pipeline in execution order."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from train.cli.context import build_context
from train.cli.wiring import build_pipeline
from train.release.tasks import sort_tasks

_console = Console()


def tasks(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to releaser.toml"),
) -> None:
    """Show every task, largest order (first to run) on top."""
    ctx = build_context(config)
    _, registry = build_pipeline(ctx.config, ctx.console)

    table = Table(title="Release tasks", show_lines=False)
    table.add_column("order", justify="right")
    table.add_column("name", style="bold")
    table.add_column("short", style="cyan")
    table.add_column("phase")
    table.add_column("scope")
    table.add_column("description")
    for task in sort_tasks(registry):
        table.add_row(
            str(task.order),
            task.name,
            task.short_name,
            task.phase.replace("_", "-"),
            "train" if task.train_level else "project",
            task.description,
        )
    _console.print(table)
