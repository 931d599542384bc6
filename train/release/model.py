from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from train.core.config import ReleaserConfig
from train.core.errors import ErrorCode
from train.core.result import Result
from train.release.errors import ReleaseError
from train.release.projects import ProjectVersion, Projects

# Faults in "release" tasks abort the project and trigger a rollback;
# faults in "post_release" tasks only make the run unstable.
TaskPhase = Literal["release", "post_release"]

ExecutionStatus = Literal["success", "failure", "skipped"]
RunStatus = Literal["success", "unstable", "aborted"]


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    status: ExecutionStatus
    cause: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_failure(self) -> bool:
        return self.status == "failure"

    @property
    def is_skipped(self) -> bool:
        return self.status == "skipped"


SUCCESS = ExecutionResult("success")


def failure(cause: str) -> ExecutionResult:
    return ExecutionResult("failure", cause)


def skipped(reason: str) -> ExecutionResult:
    return ExecutionResult("skipped", reason)


@dataclass(frozen=True, slots=True)
class RuntimeOptions:
    """Per-run switches derived from configuration."""

    release_branch: str = "master"
    update_documentation_repo: bool = True
    update_guides: bool = True
    dry_run: bool = False

    @classmethod
    def from_config(cls, config: ReleaserConfig, *, dry_run: bool = False) -> RuntimeOptions:
        return cls(
            release_branch=config.pom.branch,
            update_documentation_repo=config.git.update_documentation_repo,
            update_guides=config.git.update_guides,
            dry_run=dry_run,
        )


@dataclass(frozen=True, slots=True)
class Arguments:
    """Everything a task sees. Tasks return results; they never modify this."""

    project: Path
    projects: Projects
    version: ProjectVersion
    options: RuntimeOptions = field(default_factory=RuntimeOptions)

    @property
    def project_name(self) -> str:
        return self.version.project_name


TaskAction = Callable[[Arguments], Result[ExecutionResult, ReleaseError]]
SkipRule = Callable[[Arguments], str | None]


def never_skip(args: Arguments) -> str | None:
    del args
    return None


@dataclass(frozen=True, slots=True)
class Task:
    """One step of the release pipeline.

    Tasks run in descending ``order``. ``skip_rule`` returns a reason when the
    task does not apply to a run (e.g. no blog post for a snapshot).
    ``train_level`` tasks act on the whole train; a meta-release runs them once
    after the last project instead of once per project.
    """

    name: str
    short_name: str
    header: str
    description: str
    phase: TaskPhase
    order: int
    action: TaskAction = field(repr=False, compare=False)
    skip_rule: SkipRule = field(default=never_skip, repr=False, compare=False)
    train_level: bool = False

    @property
    def is_release_phase(self) -> bool:
        return self.phase == "release"

    def skip_reason(self, args: Arguments) -> str | None:
        return self.skip_rule(args)

    def run(self, args: Arguments) -> Result[ExecutionResult, ReleaseError]:
        return self.action(args)


@dataclass(frozen=True, slots=True)
class TaskOutcome:
    task_name: str
    result: ExecutionResult


class Cancellation:
    """Cooperative cancellation flag, checked by the scheduler between tasks."""

    def __init__(self) -> None:
        self._reason: str | None = None

    def cancel(self, reason: str = "cancelled") -> None:
        if self._reason is None:
            self._reason = reason

    @property
    def cancelled(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> str | None:
        return self._reason


def exit_code_for(status: RunStatus) -> ErrorCode:
    return {
        "success": ErrorCode.OK,
        "unstable": ErrorCode.UNSTABLE,
        "aborted": ErrorCode.ABORTED,
    }[status]
