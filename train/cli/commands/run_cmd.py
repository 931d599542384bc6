"""Release one checked out project, or the whole train."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from train.cli.commands._helpers import (
    fail,
    pick_tasks,
    print_run_report,
    print_train_report,
    resolve_projects,
    train_bom,
)
from train.cli.context import build_context
from train.cli.wiring import build_pipeline
from train.core.result import Err
from train.release.meta import MetaReleaser
from train.release.model import Arguments, RuntimeOptions
from train.release.rollback import RollbackHandler
from train.release.scheduler import run_project

_console = Console()

_TASKS_HELP = "Comma separated task names or short names (see `train tasks`)"
_BOM_HELP = "Release train BOM, or the checkout holding it; versions are read from it first"


def run(
    name: str = typer.Option(..., "--name", "-n", help="Project name"),
    version: str = typer.Option(..., "--version", "-v", help="Version to release"),
    project_dir: Path = typer.Option(Path("."), "--project-dir", "-p", help="Project checkout"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to releaser.toml"),
    assignments: list[str] = typer.Option(
        [], "--set", "-s", help="Other train versions as NAME=VERSION (repeatable)"
    ),
    selection: str | None = typer.Option(None, "--tasks", "-t", help=_TASKS_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Skip deploy, push and post-release"),
) -> None:
    """Run the release pipeline for a single project."""
    ctx = build_context(config)
    projects = resolve_projects(ctx.config.fixed_versions, [*assignments, f"{name}={version}"])
    releaser, registry = build_pipeline(ctx.config, ctx.console)
    picked = pick_tasks(registry, selection)

    target = projects.require(name)
    if isinstance(target, Err):
        raise fail(target.error)

    args = Arguments(
        project=project_dir.expanduser().resolve(),
        projects=projects,
        version=target.value,
        options=RuntimeOptions.from_config(ctx.config, dry_run=dry_run),
    )
    report = run_project(
        picked,
        args,
        console=ctx.console,
        rollback=RollbackHandler(releaser, ctx.console).rollback,
    )
    print_run_report(_console, report)
    raise typer.Exit(code=int(report.exit_code))


def release(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to releaser.toml"),
    assignments: list[str] = typer.Option(
        [], "--set", "-s", help="Train versions as NAME=VERSION (repeatable)"
    ),
    bom: Path | None = typer.Option(None, "--bom", help=_BOM_HELP),
    start_from: str | None = typer.Option(
        None, "--start-from", help="Skip every project before this one"
    ),
    selection: str | None = typer.Option(None, "--tasks", "-t", help=_TASKS_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Skip deploy, push and post-release"),
) -> None:
    """Release every project of the train, in order."""
    ctx = build_context(config)
    releaser, registry = build_pipeline(ctx.config, ctx.console)
    projects = resolve_projects(
        ctx.config.fixed_versions,
        assignments,
        bom=train_bom(ctx.config, bom) if bom is not None else None,
        reader=releaser.collaborators.descriptors,
    )

    coordinator = MetaReleaser(
        releaser=releaser,
        tasks=pick_tasks(registry, selection),
        console=ctx.console,
        meta=ctx.config.meta_release,
        options=RuntimeOptions.from_config(ctx.config, dry_run=dry_run),
    )
    result = coordinator.release(projects, start_from=start_from)
    if isinstance(result, Err):
        raise fail(result.error)

    print_train_report(_console, result.value)
    raise typer.Exit(code=int(result.value.exit_code))
