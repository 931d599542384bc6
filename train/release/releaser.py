"""Release operations, one per task, each delegating to a single collaborator.

Every method takes the run's Arguments and returns
``Result[ExecutionResult, ReleaseError]``. Whether an Err aborts the project
is not decided here: the scheduler looks at the phase of the task that
called the method.
"""

from __future__ import annotations

from pathlib import Path

from train.core.result import Err, Ok, Result
from train.output.console import ConsoleProtocol
from train.release.errors import ReleaseError
from train.release.model import SUCCESS, Arguments, ExecutionResult
from train.release.ports import Collaborators
from train.release.projects import ProjectVersion, Projects

TaskResult = Result[ExecutionResult, ReleaseError]


class Releaser:
    def __init__(self, collaborators: Collaborators, console: ConsoleProtocol) -> None:
        self.collaborators = collaborators
        self.console = console

    # -- release phase --------------------------------------------------

    def update_project_from_bom(self, args: Arguments) -> TaskResult:
        updated = self.update_descriptors(
            args.project, args.projects, args.version, assert_snapshots=True
        )
        if isinstance(updated, Err):
            return updated
        self.console.success(f"project was updated to [{args.version}]")
        return Ok(SUCCESS)

    def build_project(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.builder.build(args.project, args.version),
            "project was built",
        )

    def commit_and_tag(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.vcs.commit_and_tag(args.project, args.version),
            "commit was made and tagged",
        )

    def deploy(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.builder.deploy(args.project, args.version),
            "artifacts were deployed",
        )

    def push_current_branch(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.vcs.push_current_branch(args.project),
            "current branch was pushed",
        )

    # -- post release ---------------------------------------------------

    def publish_docs(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.builder.publish_docs(args.project, args.version),
            "docs were published",
        )

    def close_milestone(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.vcs.close_milestone(args.version),
            f"milestone {args.version.version} was closed",
        )

    def create_email(self, args: Arguments) -> TaskResult:
        return self._written(self.collaborators.templates.email(args.projects), "email template")

    def create_blog(self, args: Arguments) -> TaskResult:
        return self._written(self.collaborators.templates.blog(args.projects), "blog template")

    def create_tweet(self, args: Arguments) -> TaskResult:
        return self._written(self.collaborators.templates.tweet(args.projects), "tweet template")

    def create_release_notes(self, args: Arguments) -> TaskResult:
        return self._written(
            self.collaborators.templates.release_notes(args.projects), "release notes"
        )

    def update_guides(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.vcs.create_issue(args.projects, args.version),
            "guides issue was created",
        )

    def update_catalog(self, args: Arguments) -> TaskResult:
        branch = self.collaborators.vcs.current_branch(args.project)
        if isinstance(branch, Err):
            return branch
        original = self.original_version(args.project, args.project_name)
        if isinstance(original, Err):
            return original
        return self._done(
            self.collaborators.catalog.update_entry(
                args.project, branch.value, original.value, args.version
            ),
            f"project catalog was updated for branch [{branch.value}]",
        )

    def update_documentation(self, args: Arguments) -> TaskResult:
        branch = args.options.release_branch
        return self._written(
            self.collaborators.docs.update_docs_repo(args.version, branch),
            f"documentation repository for branch [{branch}]",
        )

    def update_project_page(self, args: Arguments) -> TaskResult:
        return self._written(
            self.collaborators.docs.update_project_page(args.projects), "project page"
        )

    def run_updated_samples(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.post_release.run_updated_samples(args.projects),
            "samples were updated and run",
        )

    def generate_train_docs(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.post_release.generate_train_docs(args.projects),
            "release train documentation was generated",
        )

    def update_all_samples(self, args: Arguments) -> TaskResult:
        return self._done(
            self.collaborators.post_release.update_all_samples(args.projects),
            "all samples were updated",
        )

    def update_release_train_wiki(self, args: Arguments) -> TaskResult:
        return self._written(
            self.collaborators.templates.wiki(args.projects), "release train wiki page"
        )

    # -- shared with rollback ---------------------------------------------

    def update_descriptors(
        self,
        project: Path,
        projects: Projects,
        version: ProjectVersion,
        *,
        assert_snapshots: bool,
    ) -> Result[None, ReleaseError]:
        return self.collaborators.descriptors.update_dependency_versions(
            project, projects, version, assert_snapshots=assert_snapshots
        )

    def original_version(
        self, project: Path, project_name: str
    ) -> Result[ProjectVersion, ReleaseError]:
        """Version currently declared on disk by the checkout."""
        raw = self.collaborators.descriptors.read_version(project)
        if isinstance(raw, Err):
            return raw
        return ProjectVersion.parse(project_name, raw.value)

    def _done(self, result: Result[object, ReleaseError], message: str) -> TaskResult:
        if isinstance(result, Err):
            return result
        self.console.success(message)
        return Ok(SUCCESS)

    def _written(self, result: Result[Path, ReleaseError], what: str) -> TaskResult:
        if isinstance(result, Err):
            return result
        self.console.success(f"{what} written to [{result.value}]")
        return Ok(SUCCESS)
