"""Collaborator contracts consumed by the release engine.

The engine performs no file, git or network I/O itself; every side effect
goes through one of these protocols. All operations return Results so the
scheduler can decide, from the phase of the calling task, whether an error
aborts the project or only makes the run unstable.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from train.core.result import Result
from train.release.errors import ReleaseError
from train.release.projects import ProjectVersion, Projects


class DescriptorHandler(Protocol):
    """Reads and rewrites build descriptors (POM / Gradle)."""

    def read_version(self, project: Path) -> Result[str, ReleaseError]:
        """Version currently declared by the project checked out at ``project``."""
        ...

    def read_bom_versions(self, bom: Path) -> Result[Mapping[str, str], ReleaseError]:
        """Every dependency-managed project version declared by a train BOM."""
        ...

    def update_dependency_versions(
        self,
        project: Path,
        projects: Projects,
        version: ProjectVersion,
        *,
        assert_snapshots: bool,
    ) -> Result[None, ReleaseError]:
        """Rewrite the project's version and its train dependency versions.

        ``assert_snapshots=False`` disables the snapshot consistency check; it
        is used when a rollback restores snapshot coordinates.
        """
        ...


class VersionControl(Protocol):
    def clone_project(self, project_name: str) -> Result[Path, ReleaseError]: ...

    def commit_and_tag(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]:
        """Commit the version bump; tag it unless ``version`` is a snapshot."""
        ...

    def commit_after_bumping_versions(
        self, project: Path, version: ProjectVersion
    ) -> Result[None, ReleaseError]: ...

    def revert_changes(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]:
        """Undo the bump commit/tag made for ``version``; no-op if none was made."""
        ...

    def push_current_branch(self, project: Path) -> Result[None, ReleaseError]: ...

    def current_branch(self, project: Path) -> Result[str, ReleaseError]: ...

    def close_milestone(self, version: ProjectVersion) -> Result[None, ReleaseError]: ...

    def create_issue(
        self, projects: Projects, version: ProjectVersion
    ) -> Result[None, ReleaseError]: ...


class ProjectBuilder(Protocol):
    def build(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]: ...

    def deploy(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]: ...

    def publish_docs(
        self, project: Path, version: ProjectVersion
    ) -> Result[None, ReleaseError]: ...


class TemplateGenerator(Protocol):
    """Renders announcement documents; each returns the written file."""

    def email(self, projects: Projects) -> Result[Path, ReleaseError]: ...

    def blog(self, projects: Projects) -> Result[Path, ReleaseError]: ...

    def tweet(self, projects: Projects) -> Result[Path, ReleaseError]: ...

    def release_notes(self, projects: Projects) -> Result[Path, ReleaseError]: ...

    def wiki(self, projects: Projects) -> Result[Path, ReleaseError]: ...


class ProjectCatalog(Protocol):
    def update_entry(
        self,
        project: Path,
        branch: str,
        original: ProjectVersion,
        release: ProjectVersion,
    ) -> Result[None, ReleaseError]: ...


class DocumentationPublisher(Protocol):
    def update_docs_repo(
        self, version: ProjectVersion, branch: str
    ) -> Result[Path, ReleaseError]: ...

    def update_project_page(self, projects: Projects) -> Result[Path, ReleaseError]: ...


class PostReleaseActions(Protocol):
    def run_updated_samples(self, projects: Projects) -> Result[None, ReleaseError]: ...

    def generate_train_docs(self, projects: Projects) -> Result[None, ReleaseError]: ...

    def update_all_samples(self, projects: Projects) -> Result[None, ReleaseError]: ...


@dataclass(frozen=True, slots=True)
class Collaborators:
    """Everything the engine talks to, wired once at startup."""

    descriptors: DescriptorHandler
    vcs: VersionControl
    builder: ProjectBuilder
    templates: TemplateGenerator
    catalog: ProjectCatalog
    docs: DocumentationPublisher
    post_release: PostReleaseActions
