from __future__ import annotations

from collections.abc import Callable

from train.core.result import Err, Ok, Result
from train.output.console import MockConsole
from train.release.errors import ReleaseError
from train.release.model import (
    SUCCESS,
    Arguments,
    Cancellation,
    ExecutionResult,
    Task,
    TaskPhase,
    failure,
)
from train.release.releaser import Releaser
from train.release.rollback import RollbackReport
from train.release.scheduler import run_project
from train.release.tasks import default_tasks
from train.test.release.fakes import FakeCollaborators, arguments, fault, pv

Action = Callable[[Arguments], Result[ExecutionResult, ReleaseError]]


class RecordingRollback:
    def __init__(self) -> None:
        self.calls: list[Arguments] = []

    def __call__(self, args: Arguments) -> RollbackReport:
        self.calls.append(args)
        return RollbackReport(state="reverted_only")


def _task(
    name: str,
    order: int,
    *,
    phase: TaskPhase = "release",
    action: Action | None = None,
    ran: list[str] | None = None,
) -> Task:
    def run(args: Arguments) -> Result[ExecutionResult, ReleaseError]:
        if ran is not None:
            ran.append(name)
        if action is not None:
            return action(args)
        return Ok(SUCCESS)

    return Task(
        name=name,
        short_name=name,
        header=f"RUNNING {name.upper()}",
        description=name,
        phase=phase,
        order=order,
        action=run,
    )


ARGS = arguments(pv("spring-cloud-sleuth", "3.0.0.RELEASE"))


def test_all_success() -> None:
    ran: list[str] = []
    console = MockConsole()
    rollback = RecordingRollback()

    report = run_project(
        [_task("b", 10, ran=ran), _task("a", 20, ran=ran)],
        ARGS,
        console=console,
        rollback=rollback,
    )

    assert ran == ["a", "b"]
    assert report.status == "success"
    assert [e.task_name for e in report.entries] == ["a", "b"]
    assert console.headers == ["RUNNING A", "RUNNING B"]
    assert rollback.calls == []
    assert int(report.exit_code) == 0


def test_soft_fault_in_post_release_continues_as_unstable() -> None:
    ran: list[str] = []
    console = MockConsole()
    rollback = RecordingRollback()
    tasks = [
        _task("release", 30, ran=ran),
        _task("docs", 20, phase="post_release", action=lambda a: fault("docs"), ran=ran),
        _task("blog", 10, phase="post_release", ran=ran),
    ]

    report = run_project(tasks, ARGS, console=console, rollback=rollback)

    assert ran == ["release", "docs", "blog"]
    assert report.status == "unstable"
    assert report.failed_tasks == ("docs",)
    assert report.fault is None
    assert rollback.calls == []
    assert console.has_warning()


def test_failure_result_in_release_phase_is_soft() -> None:
    ran: list[str] = []
    rollback = RecordingRollback()
    tasks = [
        _task("flaky", 20, action=lambda a: Ok(failure("tests were flaky")), ran=ran),
        _task("next", 10, ran=ran),
    ]

    report = run_project(tasks, ARGS, console=MockConsole(), rollback=rollback)

    assert ran == ["flaky", "next"]
    assert report.status == "unstable"
    flaky = report.result_of("flaky")
    assert flaky is not None and flaky.cause == "tests were flaky"
    assert rollback.calls == []


def test_hard_fault_stops_and_rolls_back_once() -> None:
    ran: list[str] = []
    console = MockConsole()
    rollback = RecordingRollback()
    tasks = [
        _task("build", 30, ran=ran),
        _task("deploy", 20, action=lambda a: fault("deploy", "401 from repo"), ran=ran),
        _task("push", 10, ran=ran),
        _task("docs", 5, phase="post_release", ran=ran),
    ]

    report = run_project(tasks, ARGS, console=console, rollback=rollback)

    assert ran == ["build", "deploy"]
    assert report.status == "aborted"
    assert report.fault is not None and report.fault.kind == "deploy"
    assert len(rollback.calls) == 1
    assert rollback.calls[0] is ARGS
    assert report.rollback == RollbackReport(state="reverted_only")
    assert report.result_of("push") is None
    assert console.has_error()
    assert int(report.exit_code) == 3


def test_exception_becomes_unexpected_fault_classified_by_phase() -> None:
    def explode(args: Arguments) -> Result[ExecutionResult, ReleaseError]:
        raise RuntimeError("kaboom")

    rollback = RecordingRollback()
    soft = run_project(
        [_task("notes", 10, phase="post_release", action=explode)],
        ARGS,
        console=MockConsole(),
        rollback=rollback,
    )
    assert soft.status == "unstable"
    assert rollback.calls == []

    hard = run_project(
        [_task("build", 10, action=explode)], ARGS, console=MockConsole(), rollback=rollback
    )
    assert hard.status == "aborted"
    assert hard.fault is not None
    assert hard.fault.kind == "unexpected"
    assert "kaboom" in hard.fault.message
    assert len(rollback.calls) == 1


def test_cancellation_checked_between_tasks() -> None:
    ran: list[str] = []
    cancellation = Cancellation()
    rollback = RecordingRollback()

    def cancel_after(args: Arguments) -> Result[ExecutionResult, ReleaseError]:
        cancellation.cancel("operator interrupt")
        return Ok(SUCCESS)

    tasks = [_task("first", 20, action=cancel_after, ran=ran), _task("second", 10, ran=ran)]
    report = run_project(
        tasks, ARGS, console=MockConsole(), rollback=rollback, cancellation=cancellation
    )

    assert ran == ["first"]
    assert report.status == "aborted"
    assert report.cancelled is True
    assert report.fault is None
    assert rollback.calls == []


def test_snapshot_pipeline_skips_announcements() -> None:
    fakes = FakeCollaborators()
    console = MockConsole()
    releaser = Releaser(fakes.as_collaborators(), console)
    args = arguments(pv("spring-cloud-release", "2021.0.0-SNAPSHOT"))

    report = run_project(
        default_tasks(releaser), args, console=console, rollback=RecordingRollback()
    )

    assert report.status == "success"
    for name in (
        "closeMilestone",
        "createTemplates",
        "createBlog",
        "createTweet",
        "createReleaseNotes",
        "updateProjectPage",
        "runUpdatedSamples",
        "generateTrainDocs",
        "updateAllSamples",
        "updateReleaseTrainWiki",
    ):
        result = report.result_of(name)
        assert result is not None and result.is_skipped, name
    for op in ("email", "blog", "tweet", "release_notes", "wiki", "close_milestone"):
        assert fakes.journal.count(op) == 0
    assert fakes.journal.operations[:4] == [
        "update_dependency_versions",
        "build",
        "commit_and_tag",
        "deploy",
    ]
    assert "UPDATE RELEASE TRAIN WIKI" not in console.headers


def test_release_pipeline_runs_everything_in_order() -> None:
    fakes = FakeCollaborators(on_disk_version="3.0.0-SNAPSHOT")
    releaser = Releaser(fakes.as_collaborators(), MockConsole())
    args = arguments(pv("spring-cloud-sleuth", "3.0.0"))

    report = run_project(
        default_tasks(releaser), args, console=MockConsole(), rollback=RecordingRollback()
    )

    assert report.status == "success"
    assert fakes.journal.operations == [
        "update_dependency_versions",
        "build",
        "commit_and_tag",
        "deploy",
        "push_current_branch",
        "publish_docs",
        "close_milestone",
        "email",
        "blog",
        "tweet",
        "release_notes",
        "create_issue",
        "current_branch",
        "read_version",
        "update_entry",
        "update_docs_repo",
        "update_project_page",
        "run_updated_samples",
        "generate_train_docs",
        "update_all_samples",
        "wiki",
    ]
    assert fakes.journal.calls[0] == (
        "update_dependency_versions",
        "spring-cloud-sleuth:3.0.0 assert_snapshots=True",
    )
    catalog_update = "main spring-cloud-sleuth:3.0.0-SNAPSHOT -> spring-cloud-sleuth:3.0.0"
    assert ("update_entry", catalog_update) in fakes.journal.calls
