"""git / gh backed VersionControl.

Local operations shell out to git inside the project checkout; milestones
and guide issues go through the GitHub CLI.
"""

from __future__ import annotations

import json
from pathlib import Path

from train.core.config import ReleaserConfig
from train.core.result import Err, Ok, Result
from train.core.structured import as_obj_list, as_str_dict, get_int, get_str
from train.output.console import ConsoleProtocol
from train.platform.process import ProcessError
from train.platform.process import run as run_process
from train.release.errors import ReleaseError
from train.release.projects import ProjectVersion, Projects

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_GH_TIMEOUT_SECONDS = 60.0

GUIDES_REPO = "spring-guides/getting-started-guides"


def bump_message(version: ProjectVersion) -> str:
    return f"Update SNAPSHOT to {version.version}"


def after_release_message(version: ProjectVersion) -> str:
    return f"Bumping versions to {version.version} after release"


def tag_name(version: ProjectVersion) -> str:
    return f"v{version.version}"


def org_slug(git_org_url: str) -> str:
    """``https://github.com/spring-cloud`` -> ``spring-cloud``."""
    return git_org_url.rstrip("/").rsplit("/", 1)[-1].removesuffix(".git")


def _vcs_error(what: str, error: ProcessError) -> Err[ReleaseError]:
    return Err(
        ReleaseError(
            kind="vcs",
            message=f"{what}: {error}",
            hint=error.stderr.strip() or error.stdout.strip() or None,
        )
    )


class GitProjectHandler:
    def __init__(self, config: ReleaserConfig, console: ConsoleProtocol) -> None:
        self.config = config
        self.console = console

    @property
    def clone_root(self) -> Path:
        dest = self.config.git.clone_destination_dir
        if dest:
            return Path(dest)
        return self.config.working_dir

    @property
    def org(self) -> str:
        return org_slug(self.config.meta_release.git_org_url)

    # -- VersionControl -----------------------------------------------------

    def clone_project(self, project_name: str) -> Result[Path, ReleaseError]:
        dest = self.clone_root / project_name
        if (dest / ".git").exists():
            self.console.info(f"reusing existing checkout [{dest}]")
            return Ok(dest)

        url = f"{self.config.meta_release.git_org_url.rstrip('/')}/{project_name}"
        self.clone_root.mkdir(parents=True, exist_ok=True)
        cloned = run_process(
            ["git", "clone", "--branch", self.config.pom.branch, url, str(dest)],
            cwd=self.clone_root,
            timeout=_GIT_NETWORK_TIMEOUT_SECONDS,
        )
        if isinstance(cloned, Err):
            return _vcs_error(f"clone of {url} failed", cloned.error)
        self.console.success(f"cloned [{url}] to [{dest}]")
        return Ok(dest)

    def commit_and_tag(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]:
        committed = self._commit(project, bump_message(version))
        if isinstance(committed, Err):
            return committed
        if version.is_snapshot:
            self.console.info("won't tag a snapshot version")
            return Ok(None)
        tagged = self._git(project, ["tag", tag_name(version)])
        if isinstance(tagged, Err):
            return _vcs_error(f"tagging {tag_name(version)} failed", tagged.error)
        return Ok(None)

    def commit_after_bumping_versions(
        self, project: Path, version: ProjectVersion
    ) -> Result[None, ReleaseError]:
        return self._commit(project, after_release_message(version))

    def revert_changes(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]:
        last = self._git(project, ["log", "-1", "--pretty=%s"])
        if isinstance(last, Err):
            return _vcs_error("reading the last commit failed", last.error)

        if last.value.strip() == bump_message(version):
            reset = self._git(project, ["reset", "--hard", "HEAD~1"])
        else:
            # nothing was committed yet, drop the working tree edits only
            reset = self._git(project, ["reset", "--hard", "HEAD"])
        if isinstance(reset, Err):
            return _vcs_error("reset failed", reset.error)

        tags = self._git(project, ["tag", "--list", tag_name(version)])
        if isinstance(tags, Ok) and tags.value.strip():
            deleted = self._git(project, ["tag", "-d", tag_name(version)])
            if isinstance(deleted, Err):
                return _vcs_error(f"deleting tag {tag_name(version)} failed", deleted.error)
        return Ok(None)

    def push_current_branch(self, project: Path) -> Result[None, ReleaseError]:
        pushed = self._git(project, ["push", "origin", "HEAD", "--tags"])
        if isinstance(pushed, Err):
            return _vcs_error("push failed", pushed.error)
        return Ok(None)

    def current_branch(self, project: Path) -> Result[str, ReleaseError]:
        result = self._git(project, ["rev-parse", "--abbrev-ref", "HEAD"])
        if isinstance(result, Err):
            return _vcs_error("reading the current branch failed", result.error)
        branch = result.value.strip()
        if branch == "HEAD":
            return Err(
                ReleaseError(
                    kind="vcs",
                    message=f"{project} is in detached HEAD state",
                    hint="Check out the release branch first",
                )
            )
        return Ok(branch)

    def close_milestone(self, version: ProjectVersion) -> Result[None, ReleaseError]:
        repo = f"{self.org}/{version.project_name}"
        listed = self._gh(
            [
                "api",
                f"repos/{repo}/milestones?state=open"
                f"&per_page={self.config.git.number_of_checked_milestones}",
            ]
        )
        if isinstance(listed, Err):
            return _vcs_error(f"listing milestones of {repo} failed", listed.error)

        try:
            milestones = json.loads(listed.value or "[]")
        except json.JSONDecodeError as e:
            return Err(ReleaseError(kind="vcs", message=f"invalid milestone list for {repo}: {e}"))

        number = _find_milestone(milestones, version.version)
        if number is None:
            return Err(
                ReleaseError(
                    kind="vcs",
                    message=f"no open milestone {version.version} in {repo}",
                    hint="Raise [git] number_of_checked_milestones if it exists",
                )
            )

        closed = self._gh(
            ["api", "-X", "PATCH", f"repos/{repo}/milestones/{number}", "-f", "state=closed"]
        )
        if isinstance(closed, Err):
            return _vcs_error(f"closing milestone {version.version} failed", closed.error)
        return Ok(None)

    def create_issue(
        self, projects: Projects, version: ProjectVersion
    ) -> Result[None, ReleaseError]:
        body = "\n".join(
            ["Please upgrade the guides to the new release train versions:", ""]
            + [f"- `{p.project_name}`: `{p.version}`" for p in projects.values()]
        )
        created = self._gh(
            [
                "issue",
                "create",
                "--repo",
                GUIDES_REPO,
                "--title",
                f"Upgrade to {version.version}",
                "--body",
                body,
            ]
        )
        if isinstance(created, Err):
            return _vcs_error(f"creating an issue in {GUIDES_REPO} failed", created.error)
        return Ok(None)

    # -- helpers --------------------------------------------------------------

    def _commit(self, project: Path, message: str) -> Result[None, ReleaseError]:
        added = self._git(project, ["add", "-A"])
        if isinstance(added, Err):
            return _vcs_error("staging changes failed", added.error)
        committed = self._git(project, ["commit", "-m", message])
        if isinstance(committed, Err):
            return _vcs_error(f"commit {message!r} failed", committed.error)
        return Ok(None)

    def _git(self, project: Path, args: list[str]) -> Result[str, ProcessError]:
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if args and args[0] in {"fetch", "pull", "push", "clone"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(project), *args], cwd=project, timeout=timeout)

    def _gh(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(["gh", *args], cwd=self.config.working_dir, timeout=_GH_TIMEOUT_SECONDS)


def _find_milestone(milestones: object, version: str) -> int | None:
    items = as_obj_list(milestones)
    if items is None:
        return None
    # milestones are titled either with the full version or its numeric base
    base = version.split(".RELEASE")[0]
    for item in items:
        entry = as_str_dict(item)
        if entry is None:
            continue
        if get_str(entry, "title") in (version, base):
            return get_int(entry, "number")
    return None
