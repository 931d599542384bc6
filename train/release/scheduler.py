"""Run one project's release pipeline.

pending -> running(task_i) -> running(task_i+1) | unstable | aborted -> done

A fault in a release-phase task stops the run and triggers exactly one
rollback. A fault in a post-release task, or a task reporting an
``ExecutionResult`` failure, only marks the run unstable.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from train.core.errors import ErrorCode
from train.core.result import Err, Result
from train.output.console import ConsoleProtocol
from train.release.errors import ReleaseError
from train.release.model import (
    Arguments,
    Cancellation,
    ExecutionResult,
    RunStatus,
    Task,
    TaskOutcome,
    exit_code_for,
    failure,
    skipped,
)
from train.release.rollback import RollbackReport
from train.release.tasks import sort_tasks

Rollback = Callable[[Arguments], RollbackReport]


@dataclass(frozen=True, slots=True)
class ProjectRunReport:
    project_name: str
    version: str
    entries: tuple[TaskOutcome, ...]
    status: RunStatus
    fault: ReleaseError | None = None
    rollback: RollbackReport | None = None
    cancelled: bool = False

    @property
    def failed_tasks(self) -> tuple[str, ...]:
        return tuple(e.task_name for e in self.entries if e.result.is_failure)

    @property
    def exit_code(self) -> ErrorCode:
        return exit_code_for(self.status)

    def result_of(self, task_name: str) -> ExecutionResult | None:
        for entry in self.entries:
            if entry.task_name == task_name:
                return entry.result
        return None


def run_project(
    tasks: Iterable[Task],
    args: Arguments,
    *,
    console: ConsoleProtocol,
    rollback: Rollback,
    cancellation: Cancellation | None = None,
) -> ProjectRunReport:
    entries: list[TaskOutcome] = []
    unstable = False

    def report(
        status: RunStatus,
        *,
        fault: ReleaseError | None = None,
        rolled_back: RollbackReport | None = None,
        cancelled: bool = False,
    ) -> ProjectRunReport:
        return ProjectRunReport(
            project_name=args.project_name,
            version=args.version.version,
            entries=tuple(entries),
            status=status,
            fault=fault,
            rollback=rolled_back,
            cancelled=cancelled,
        )

    for task in sort_tasks(tasks):
        if cancellation is not None and cancellation.cancelled:
            console.warning(f"run cancelled before [{task.name}]: {cancellation.reason}")
            return report("aborted", cancelled=True)

        reason = task.skip_reason(args)
        if reason is not None:
            console.info(f"skipping [{task.name}]: {reason}")
            entries.append(TaskOutcome(task.name, skipped(reason)))
            continue

        console.header(task.header)
        outcome = _execute(task, args)

        if isinstance(outcome, Err):
            fault = outcome.error
            entries.append(TaskOutcome(task.name, failure(fault.pretty())))
            if task.is_release_phase:
                console.error(f"[{task.name}] failed for {args.version}: {fault.pretty()}")
                return report("aborted", fault=fault, rolled_back=rollback(args))
            console.warning(f"[{task.name}] failed, continuing: {fault.pretty()}")
            unstable = True
            continue

        result = outcome.value
        entries.append(TaskOutcome(task.name, result))
        if result.is_failure:
            console.warning(f"[{task.name}] reported a failure: {result.cause}")
            unstable = True

    return report("unstable" if unstable else "success")


def _execute(task: Task, args: Arguments) -> Result[ExecutionResult, ReleaseError]:
    try:
        return task.run(args)
    except Exception as e:  # noqa: BLE001
        return Err(
            ReleaseError(
                kind="unexpected",
                message=f"{task.name} raised {type(e).__name__}: {e}",
            )
        )
