from __future__ import annotations

from pathlib import Path

from train.core.config import ReleaserConfig
from train.core.result import Err, Ok, Result
from train.output.console import ConsoleProtocol
from train.release.builder import CommandBuilder
from train.release.errors import ReleaseError
from train.release.git_handler import GitProjectHandler
from train.release.model import Task
from train.release.ports import Collaborators
from train.release.projects import ProjectVersion, Projects
from train.release.releaser import Releaser
from train.release.tasks import default_tasks


class NotConfigured:
    """Collaborator slot the command line has no implementation for.

    Every call fails with a ``config`` error, so tasks that need it fail
    (hard in the release phase, soft afterwards) instead of silently passing.
    """

    def __init__(self, what: str) -> None:
        self.what = what

    def _missing(self, operation: str) -> Err[ReleaseError]:
        return Err(
            ReleaseError(
                kind="config",
                message=f"no {self.what} configured ({operation})",
                hint="Run only the tasks this command line supports, e.g. --tasks b,c,p",
            )
        )

    # DescriptorHandler
    def read_version(self, project: Path) -> Err[ReleaseError]:
        return self._missing("read_version")

    def read_bom_versions(self, bom: Path) -> Err[ReleaseError]:
        return self._missing("read_bom_versions")

    def update_dependency_versions(
        self,
        project: Path,
        projects: Projects,
        version: ProjectVersion,
        *,
        assert_snapshots: bool,
    ) -> Err[ReleaseError]:
        return self._missing("update_dependency_versions")

    # TemplateGenerator
    def email(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("email")

    def blog(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("blog")

    def tweet(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("tweet")

    def release_notes(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("release_notes")

    def wiki(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("wiki")

    # ProjectCatalog
    def update_entry(
        self,
        project: Path,
        branch: str,
        original: ProjectVersion,
        release: ProjectVersion,
    ) -> Err[ReleaseError]:
        return self._missing("update_entry")

    # DocumentationPublisher
    def update_docs_repo(self, version: ProjectVersion, branch: str) -> Err[ReleaseError]:
        return self._missing("update_docs_repo")

    def update_project_page(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("update_project_page")

    # PostReleaseActions
    def run_updated_samples(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("run_updated_samples")

    def generate_train_docs(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("generate_train_docs")

    def update_all_samples(self, projects: Projects) -> Err[ReleaseError]:
        return self._missing("update_all_samples")


def wire(config: ReleaserConfig, console: ConsoleProtocol) -> Collaborators:
    return Collaborators(
        descriptors=NotConfigured("descriptor handler"),
        vcs=GitProjectHandler(config, console),
        builder=CommandBuilder(config.build, console),
        templates=NotConfigured("template generator"),
        catalog=NotConfigured("project catalog"),
        docs=NotConfigured("documentation publisher"),
        post_release=NotConfigured("post release actions"),
    )


def build_pipeline(
    config: ReleaserConfig,
    console: ConsoleProtocol,
    collaborators: Collaborators | None = None,
) -> tuple[Releaser, tuple[Task, ...]]:
    wired = collaborators if collaborators is not None else wire(config, console)
    releaser = Releaser(wired, console)
    return releaser, default_tasks(releaser)


def parse_assignments(values: list[str]) -> Result[dict[str, str], ReleaseError]:
    """``["name=version", ...]`` -> mapping, in the given order."""
    out: dict[str, str] = {}
    for raw in values:
        name, sep, version = raw.partition("=")
        if not sep or not name.strip() or not version.strip():
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"expected NAME=VERSION, got {raw!r}",
                )
            )
        out[name.strip()] = version.strip()
    return Ok(out)
