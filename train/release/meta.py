"""Release a whole train, one project after another.

Projects run strictly in train order. An aborted project stops the train and
every project after it is reported ``not_attempted``; projects that already
completed are left as they are. Unstable projects are recorded and the train
moves on.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from train.core.config import MetaReleaseConfig
from train.core.errors import ErrorCode
from train.core.result import Err, Ok, Result
from train.output.console import ConsoleProtocol
from train.release.errors import ReleaseError
from train.release.model import (
    Arguments,
    Cancellation,
    RunStatus,
    RuntimeOptions,
    Task,
    exit_code_for,
)
from train.release.projects import Projects
from train.release.releaser import Releaser
from train.release.rollback import RollbackHandler
from train.release.scheduler import ProjectRunReport, Rollback, run_project
from train.release.tasks import project_tasks, train_tasks

TrainEntryStatus = Literal["success", "unstable", "aborted", "skipped", "not_attempted"]


@dataclass(frozen=True, slots=True)
class TrainEntry:
    project_name: str
    status: TrainEntryStatus
    report: ProjectRunReport | None = None
    reason: str | None = None
    fault: ReleaseError | None = None


@dataclass(frozen=True, slots=True)
class TrainReport:
    """Ordered outcome of a meta-release, one entry per train project.

    ``train_run`` holds the single run of the train-level tasks (templates,
    release notes, project page...) made against the release train project
    once every project went through. A ``cancelled`` train is aborted even
    when every project it reached completed.
    """

    entries: tuple[TrainEntry, ...]
    train_run: ProjectRunReport | None = None
    train_fault: ReleaseError | None = None
    cancelled: bool = False

    @property
    def status(self) -> RunStatus:
        statuses = [e.status for e in self.entries]
        if self.train_run is not None:
            statuses.append(self.train_run.status)
        if "aborted" in statuses or self.train_fault is not None or self.cancelled:
            return "aborted"
        if "unstable" in statuses:
            return "unstable"
        return "success"

    @property
    def exit_code(self) -> ErrorCode:
        return exit_code_for(self.status)

    def entry(self, project_name: str) -> TrainEntry | None:
        for e in self.entries:
            if e.project_name == project_name:
                return e
        return None

    def names_with(self, status: TrainEntryStatus) -> tuple[str, ...]:
        return tuple(e.project_name for e in self.entries if e.status == status)


@dataclass(frozen=True, slots=True)
class PlannedProject:
    project_name: str
    skip_reason: str | None = None


def plan_train(
    names: Sequence[str], *, projects_to_skip: Sequence[str] = (), start_from: str | None = None
) -> Result[tuple[PlannedProject, ...], ReleaseError]:
    """Decide, before anything runs, which train projects will be released."""
    if start_from is not None and start_from not in names:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"start-from project {start_from} is not part of the train",
                hint=f"Pick one of: {', '.join(names)}",
            )
        )

    skip_list = set(projects_to_skip)
    started = start_from is None
    planned: list[PlannedProject] = []
    for name in names:
        if not started and name == start_from:
            started = True
        if not started:
            planned.append(PlannedProject(name, "before start-from project"))
        elif name in skip_list:
            planned.append(PlannedProject(name, "on the skip list"))
        else:
            planned.append(PlannedProject(name))
    return Ok(tuple(planned))


class MetaReleaser:
    def __init__(
        self,
        *,
        releaser: Releaser,
        tasks: Sequence[Task],
        console: ConsoleProtocol,
        meta: MetaReleaseConfig | None = None,
        options: RuntimeOptions | None = None,
        rollback: Rollback | None = None,
    ) -> None:
        self.releaser = releaser
        self.tasks = tuple(tasks)
        self.console = console
        self.meta = meta if meta is not None else MetaReleaseConfig()
        self.options = options if options is not None else RuntimeOptions()
        if rollback is None:
            rollback = RollbackHandler(releaser, console).rollback
        self.rollback = rollback

    def release(
        self,
        projects: Projects,
        *,
        order: Sequence[str] | None = None,
        start_from: str | None = None,
        cancellation: Cancellation | None = None,
    ) -> Result[TrainReport, ReleaseError]:
        names = list(order) if order is not None else list(projects)
        plan = plan_train(
            names, projects_to_skip=self.meta.projects_to_skip, start_from=start_from
        )
        if isinstance(plan, Err):
            return plan

        entries: list[TrainEntry] = []
        stopped = False
        cancelled = False

        for planned in plan.value:
            name = planned.project_name
            if stopped:
                entries.append(TrainEntry(name, "not_attempted", reason="train stopped"))
                continue
            if planned.skip_reason is not None:
                self.console.info(f"skipping [{name}]: {planned.skip_reason}")
                entries.append(TrainEntry(name, "skipped", reason=planned.skip_reason))
                continue
            if cancellation is not None and cancellation.cancelled:
                self.console.warning(f"train cancelled before [{name}]: {cancellation.reason}")
                entries.append(TrainEntry(name, "not_attempted", reason=cancellation.reason))
                stopped = cancelled = True
                continue

            entry = self._release_project(name, projects, cancellation)
            entries.append(entry)
            if entry.status == "aborted":
                self.console.error(f"train stopped at [{name}]")
                stopped = True

        if stopped:
            return Ok(TrainReport(entries=tuple(entries), cancelled=cancelled))

        return Ok(self._run_train_level(projects, tuple(entries), cancellation))

    def _release_project(
        self, name: str, projects: Projects, cancellation: Cancellation | None
    ) -> TrainEntry:
        self.console.header(f"RELEASING {name}")
        version = projects.require(name)
        if isinstance(version, Err):
            return TrainEntry(name, "aborted", reason=version.error.message, fault=version.error)

        cloned = self._clone(name)
        if isinstance(cloned, Err):
            return TrainEntry(name, "aborted", reason=cloned.error.message, fault=cloned.error)

        args = Arguments(
            project=cloned.value, projects=projects, version=version.value, options=self.options
        )
        report = run_project(
            project_tasks(self.tasks),
            args,
            console=self.console,
            rollback=self.rollback,
            cancellation=cancellation,
        )
        return TrainEntry(name, report.status, report=report, fault=report.fault)

    def _run_train_level(
        self,
        projects: Projects,
        entries: tuple[TrainEntry, ...],
        cancellation: Cancellation | None,
    ) -> TrainReport:
        tasks = train_tasks(self.tasks)
        if not tasks:
            return TrainReport(entries=entries)

        name = self.meta.release_train_project_name
        self.console.header(f"RELEASE TRAIN TASKS FOR {name}")
        version = projects.require(name)
        if isinstance(version, Err):
            self.console.error(version.error.pretty())
            return TrainReport(entries=entries, train_fault=version.error)

        cloned = self._clone(name)
        if isinstance(cloned, Err):
            self.console.error(cloned.error.pretty())
            return TrainReport(entries=entries, train_fault=cloned.error)

        args = Arguments(
            project=cloned.value, projects=projects, version=version.value, options=self.options
        )
        report = run_project(
            tasks, args, console=self.console, rollback=self.rollback, cancellation=cancellation
        )
        return TrainReport(entries=entries, train_run=report)

    def _clone(self, name: str) -> Result[Path, ReleaseError]:
        try:
            return self.releaser.collaborators.vcs.clone_project(name)
        except Exception as e:  # noqa: BLE001
            return Err(
                ReleaseError(
                    kind="unexpected",
                    message=f"checkout of {name} raised {type(e).__name__}: {e}",
                )
            )
