from __future__ import annotations

from train.output.console import MockConsole
from train.release.model import RuntimeOptions
from train.release.releaser import Releaser
from train.release.rollback import RollbackHandler
from train.release.scheduler import run_project
from train.release.tasks import default_tasks
from train.test.release.fakes import FakeCollaborators, arguments, fault, projects, pv


def _handler(fakes: FakeCollaborators, console: MockConsole | None = None) -> RollbackHandler:
    console = console if console is not None else MockConsole()
    return RollbackHandler(Releaser(fakes.as_collaborators(), console), console)


def test_snapshot_target_needs_no_rollback() -> None:
    fakes = FakeCollaborators()
    report = _handler(fakes).rollback(arguments(pv("a", "1.0.0-SNAPSHOT")))
    assert report.state == "not_required"
    assert fakes.journal.calls == []


def test_release_over_snapshot_restores_snapshot_coordinates() -> None:
    fakes = FakeCollaborators(on_disk_version="2021.0.0-SNAPSHOT")
    train = projects(spring_cloud_release="2021.0.0.RELEASE", spring_cloud_sleuth="3.1.0")
    args = arguments(train["spring-cloud-release"], train)

    report = _handler(fakes).rollback(args)

    assert report.state == "rolled_back"
    assert report.clean
    assert report.original_version == pv("spring-cloud-release", "2021.0.0-SNAPSHOT")
    assert fakes.journal.operations == [
        "revert_changes",
        "read_version",
        "update_dependency_versions",
        "commit_after_bumping_versions",
    ]
    assert fakes.journal.calls[2] == (
        "update_dependency_versions",
        "spring-cloud-release:2021.0.0-SNAPSHOT assert_snapshots=False",
    )
    restored = fakes.descriptor_updates[0]
    assert restored["spring-cloud-release"].version == "2021.0.0-SNAPSHOT"
    assert restored["spring-cloud-sleuth"].version == "3.1.0"
    # the run's version set is left alone
    assert train["spring-cloud-release"].version == "2021.0.0.RELEASE"


def test_release_over_release_only_reverts() -> None:
    fakes = FakeCollaborators(on_disk_version="2020.0.3")
    report = _handler(fakes).rollback(arguments(pv("a", "2020.0.4")))
    assert report.state == "reverted_only"
    assert fakes.journal.operations == ["revert_changes", "read_version"]


def test_milestone_target_only_reverts() -> None:
    fakes = FakeCollaborators(on_disk_version="2021.0.0-SNAPSHOT")
    report = _handler(fakes).rollback(arguments(pv("a", "2021.0.0.M2")))
    assert report.state == "reverted_only"
    assert "commit_after_bumping_versions" not in fakes.journal.operations


def test_step_errors_are_collected_not_raised() -> None:
    console = MockConsole()
    fakes = FakeCollaborators(
        on_disk_version="1.0.0-SNAPSHOT",
        failures={"revert_changes": fault("vcs", "reset failed")},
    )
    report = _handler(fakes, console).rollback(arguments(pv("a", "1.0.0.RELEASE")))

    assert report.state == "rolled_back"
    assert [e.kind for e in report.errors] == ["vcs"]
    assert not report.clean
    assert console.find("reset failed")


def test_unreadable_original_version_stops_after_revert() -> None:
    fakes = FakeCollaborators(failures={"read_version": fault("descriptor_update", "no pom")})
    report = _handler(fakes).rollback(arguments(pv("a", "1.0.0.RELEASE")))
    assert report.state == "reverted_only"
    assert report.original_version is None
    assert fakes.journal.operations == ["revert_changes", "read_version"]


def test_failed_restoration_is_not_committed() -> None:
    fakes = FakeCollaborators(
        on_disk_version="1.0.0-SNAPSHOT",
        failures={"update_dependency_versions": fault("descriptor_update")},
    )
    report = _handler(fakes).rollback(arguments(pv("a", "1.0.0.RELEASE")))
    assert report.state == "reverted_only"
    assert "commit_after_bumping_versions" not in fakes.journal.operations
    assert len(report.errors) == 1


def test_failed_deploy_reverts_and_restores_snapshot() -> None:
    console = MockConsole()
    fakes = FakeCollaborators(
        on_disk_version="2021.0.0-SNAPSHOT",
        failures={"deploy": fault("deploy", "artifactory said no")},
    )
    releaser = Releaser(fakes.as_collaborators(), console)
    handler = RollbackHandler(releaser, console)
    args = arguments(pv("spring-cloud-release", "2021.0.0.RELEASE"), options=RuntimeOptions())

    report = run_project(default_tasks(releaser), args, console=console, rollback=handler.rollback)

    assert report.status == "aborted"
    assert report.fault is not None and report.fault.kind == "deploy"
    assert report.rollback is not None and report.rollback.state == "rolled_back"
    assert fakes.journal.operations == [
        "update_dependency_versions",
        "build",
        "commit_and_tag",
        "deploy",
        "revert_changes",
        "read_version",
        "update_dependency_versions",
        "commit_after_bumping_versions",
    ]
    assert fakes.journal.count("revert_changes") == 1


def test_raising_revert_is_collected_and_rollback_continues() -> None:
    console = MockConsole()
    fakes = FakeCollaborators(
        on_disk_version="2021.0.0-SNAPSHOT",
        raises={
            "deploy": RuntimeError("nexus down"),
            "revert_changes": RuntimeError("index.lock"),
        },
    )
    releaser = Releaser(fakes.as_collaborators(), console)
    handler = RollbackHandler(releaser, console)
    args = arguments(pv("spring-cloud-release", "2021.0.0.RELEASE"))

    report = run_project(default_tasks(releaser), args, console=console, rollback=handler.rollback)

    assert report.status == "aborted"
    assert report.fault is not None and report.fault.kind == "unexpected"
    assert "nexus down" in report.fault.message
    assert report.rollback is not None and report.rollback.state == "rolled_back"
    assert [e.kind for e in report.rollback.errors] == ["unexpected"]
    assert "index.lock" in report.rollback.errors[0].message
    operations = fakes.journal.operations
    assert operations[operations.index("revert_changes") :] == [
        "revert_changes",
        "read_version",
        "update_dependency_versions",
        "commit_after_bumping_versions",
    ]
    assert console.find("index.lock")


def test_raising_read_version_stops_after_revert() -> None:
    fakes = FakeCollaborators(raises={"read_version": OSError("pom.xml vanished")})
    report = _handler(fakes).rollback(arguments(pv("a", "1.0.0.RELEASE")))

    assert report.state == "reverted_only"
    assert report.original_version is None
    assert [e.kind for e in report.errors] == ["unexpected"]
    assert "OSError" in report.errors[0].message
    assert fakes.journal.operations == ["revert_changes", "read_version"]


def test_raising_commit_leaves_rollback_reverted_only() -> None:
    fakes = FakeCollaborators(
        on_disk_version="1.0.0-SNAPSHOT",
        raises={"commit_after_bumping_versions": RuntimeError("hook rejected")},
    )
    report = _handler(fakes).rollback(arguments(pv("a", "1.0.0.RELEASE")))

    assert report.state == "reverted_only"
    assert [e.kind for e in report.errors] == ["unexpected"]
