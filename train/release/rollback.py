"""Undo a failed release attempt for one project.

Every step is best-effort: a step error, or an exception raised by a
collaborator, is logged and kept on the report, but never replaces the fault
that triggered the rollback.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, TypeVar

from train.core.result import Err, Result
from train.output.console import ConsoleProtocol
from train.release.errors import ReleaseError
from train.release.model import Arguments
from train.release.projects import ProjectVersion, Projects
from train.release.releaser import Releaser

T = TypeVar("T")

RollbackState = Literal["not_required", "rolled_back", "reverted_only"]


@dataclass(frozen=True, slots=True)
class RollbackReport:
    """Outcome of a rollback.

    Attributes:
        state: ``rolled_back`` when snapshot coordinates were restored and
            committed, ``reverted_only`` when only the bump was reverted,
            ``not_required`` for snapshot targets.
        original_version: Version found on disk after the revert, if readable.
        restored: Version set used for the restoring descriptor update.
        errors: Step errors that were swallowed along the way.
    """

    state: RollbackState
    original_version: ProjectVersion | None = None
    restored: Projects | None = None
    errors: tuple[ReleaseError, ...] = ()

    @property
    def clean(self) -> bool:
        return not self.errors


class RollbackHandler:
    def __init__(self, releaser: Releaser, console: ConsoleProtocol) -> None:
        self.releaser = releaser
        self.console = console

    def rollback(self, args: Arguments) -> RollbackReport:
        target = args.version
        if target.is_snapshot:
            self.console.info("won't rollback a snapshot version")
            return RollbackReport(state="not_required")

        vcs = self.releaser.collaborators.vcs
        errors: list[ReleaseError] = []

        reverted = _guarded("revert_changes", lambda: vcs.revert_changes(args.project, target))
        if isinstance(reverted, Err):
            self._swallow(errors, "revert of the version bump failed", reverted.error)

        original = _guarded(
            "read_version",
            lambda: self.releaser.original_version(args.project, args.project_name),
        )
        if isinstance(original, Err):
            self._swallow(errors, "could not read the original version", original.error)
            return RollbackReport(state="reverted_only", errors=tuple(errors))

        original_version = original.value
        self.console.info(f"original project version is [{original_version.version}]")

        if not (target.is_general_availability and original_version.is_snapshot):
            self.console.success("reverted the commit, no snapshot versions to restore")
            return RollbackReport(
                state="reverted_only", original_version=original_version, errors=tuple(errors)
            )

        restored = args.projects.for_rollback(original_version)
        updated = _guarded(
            "update_dependency_versions",
            lambda: self.releaser.update_descriptors(
                args.project, restored, original_version, assert_snapshots=False
            ),
        )
        if isinstance(updated, Err):
            self._swallow(errors, "restoring snapshot versions failed", updated.error)
            return RollbackReport(
                state="reverted_only",
                original_version=original_version,
                restored=restored,
                errors=tuple(errors),
            )

        committed = _guarded(
            "commit_after_bumping_versions",
            lambda: vcs.commit_after_bumping_versions(args.project, original_version),
        )
        if isinstance(committed, Err):
            self._swallow(errors, "committing restored snapshot versions failed", committed.error)
            return RollbackReport(
                state="reverted_only",
                original_version=original_version,
                restored=restored,
                errors=tuple(errors),
            )

        self.console.success("reverted the commit and bumped snapshot versions")
        return RollbackReport(
            state="rolled_back",
            original_version=original_version,
            restored=restored,
            errors=tuple(errors),
        )

    def _swallow(self, errors: list[ReleaseError], what: str, error: ReleaseError) -> None:
        errors.append(error)
        self.console.warning(f"rollback: {what}: {error.pretty()}")


def _guarded(
    operation: str, step: Callable[[], Result[T, ReleaseError]]
) -> Result[T, ReleaseError]:
    try:
        return step()
    except Exception as e:  # noqa: BLE001
        return Err(
            ReleaseError(
                kind="unexpected",
                message=f"{operation} raised {type(e).__name__}: {e}",
            )
        )
