from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from train.cli.wiring import parse_assignments
from train.core.config import ReleaserConfig
from train.core.errors import ErrorCode
from train.core.result import Err
from train.release.errors import ReleaseError
from train.release.meta import TrainReport
from train.release.model import Task
from train.release.projects import BomReader, Projects, resolve_from_train_bom
from train.release.scheduler import ProjectRunReport
from train.release.tasks import select_tasks

_STATUS_STYLE = {
    "success": "green",
    "unstable": "yellow",
    "aborted": "red bold",
    "failure": "red",
    "skipped": "dim",
    "not_attempted": "dim",
}


def fail(error: ReleaseError, code: ErrorCode = ErrorCode.USER_ERROR) -> typer.Exit:
    typer.echo(f"error: {error.pretty()}", err=True)
    return typer.Exit(code=int(code))


def train_bom(config: ReleaserConfig, option: Path) -> Path:
    """``--bom`` may name the descriptor itself or the release train checkout."""
    if option.is_dir():
        return option / config.pom.this_train_bom
    return option


def resolve_projects(
    fixed: Mapping[str, str],
    assignments: list[str],
    *,
    bom: Path | None = None,
    reader: BomReader | None = None,
) -> Projects:
    """Version set from [fixed_versions] plus ``--set NAME=VERSION`` options.

    With a ``bom`` the set is resolved from the release train BOM first and
    both sources only override the versions it declares.
    """
    extra = parse_assignments(assignments)
    if isinstance(extra, Err):
        raise fail(extra.error)

    versions = dict(fixed)
    versions.update(extra.value)

    if bom is not None and reader is not None:
        resolved = resolve_from_train_bom(bom, reader)
        if isinstance(resolved, Err):
            raise fail(resolved.error)
        overridden = resolved.value.apply_fixed_overrides(versions)
        if isinstance(overridden, Err):
            raise fail(overridden.error)
        return overridden.value

    if not versions:
        raise fail(
            ReleaseError(
                kind="invalid_input",
                message="no project versions",
                hint="Add a [fixed_versions] table to releaser.toml or pass --set NAME=VERSION",
            )
        )

    projects = Projects.from_versions(versions)
    if isinstance(projects, Err):
        raise fail(projects.error)
    return projects.value


def pick_tasks(registry: tuple[Task, ...], selection: str | None) -> tuple[Task, ...]:
    if selection is None:
        return registry
    picked = select_tasks(registry, selection.split(","))
    if isinstance(picked, Err):
        raise fail(picked.error)
    return picked.value


def _styled(status: str) -> str:
    style = _STATUS_STYLE.get(status)
    return f"[{style}]{status}[/{style}]" if style else status


def print_run_report(console: Console, report: ProjectRunReport) -> None:
    table = Table(title=f"{report.project_name} {report.version}: {_styled(report.status)}")
    table.add_column("task", style="bold")
    table.add_column("result")
    table.add_column("detail")
    for entry in report.entries:
        table.add_row(entry.task_name, _styled(entry.result.status), entry.result.cause or "")
    console.print(table)
    if report.rollback is not None:
        console.print(f"rollback: {report.rollback.state}")
        for error in report.rollback.errors:
            console.print(f"  - {error.pretty()}", markup=False)


def print_train_report(console: Console, report: TrainReport) -> None:
    table = Table(title=f"Release train: {_styled(report.status)}")
    table.add_column("project", style="bold")
    table.add_column("status")
    table.add_column("detail")
    for entry in report.entries:
        detail = entry.fault.pretty() if entry.fault is not None else entry.reason or ""
        table.add_row(entry.project_name, _styled(entry.status), detail)
    console.print(table)
    if report.train_run is not None:
        print_run_report(console, report.train_run)
    if report.train_fault is not None:
        console.print(f"train tasks: {report.train_fault.pretty()}", markup=False)
