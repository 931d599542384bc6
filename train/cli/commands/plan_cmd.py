"""Preview which projects a train release would touch."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from train.cli.commands._helpers import fail, resolve_projects, train_bom
from train.cli.context import build_context
from train.cli.wiring import wire
from train.core.result import Err
from train.release.meta import plan_train

_console = Console()


def plan(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to releaser.toml"),
    assignments: list[str] = typer.Option(
        [], "--set", "-s", help="Project version as NAME=VERSION (repeatable)"
    ),
    start_from: str | None = typer.Option(
        None, "--start-from", help="Skip every project before this one"
    ),
    bom: Path | None = typer.Option(None, "--bom", help="Release train BOM to read versions from"),
) -> None:
    ctx = build_context(config)
    projects = resolve_projects(
        ctx.config.fixed_versions,
        assignments,
        bom=train_bom(ctx.config, bom) if bom is not None else None,
        reader=wire(ctx.config, ctx.console).descriptors,
    )

    planned = plan_train(
        list(projects),
        projects_to_skip=ctx.config.meta_release.projects_to_skip,
        start_from=start_from,
    )
    if isinstance(planned, Err):
        raise fail(planned.error)

    table = Table(title="Release train plan")
    table.add_column("#", justify="right")
    table.add_column("project", style="bold")
    table.add_column("version")
    table.add_column("kind", style="cyan")
    table.add_column("action")
    for i, item in enumerate(planned.value, start=1):
        pv = projects[item.project_name]
        action = "release" if item.skip_reason is None else f"[dim]skip ({item.skip_reason})[/dim]"
        table.add_row(str(i), pv.project_name, pv.version, pv.kind.label, action)
    _console.print(table)

    train_project = ctx.config.meta_release.release_train_project_name
    if train_project in projects:
        _console.print(f"train-level tasks run once against [bold]{projects[train_project]}[/bold]")
    else:
        _console.print(
            f"[yellow]warning:[/yellow] release train project {train_project} has no version; "
            "train-level tasks will fail"
        )
