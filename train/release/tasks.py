"""Task registry.

The registry is an explicit, ordered tuple built at startup. Order weights
are descending: the task with the largest ``order`` runs first, equal weights
keep registration order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from train.core.result import Err, Ok, Result
from train.release.errors import ReleaseError
from train.release.model import Arguments, SkipRule, Task
from train.release.releaser import Releaser

UPDATE_POMS_ORDER = 100
BUILD_ORDER = 90
COMMIT_ORDER = 80
DEPLOY_ORDER = 70
PUSH_ORDER = 60
PUBLISH_DOCS_ORDER = 50
CLOSE_MILESTONE_ORDER = 45
EMAIL_ORDER = 40
BLOG_ORDER = 38
TWEET_ORDER = 36
RELEASE_NOTES_ORDER = 34
UPDATE_GUIDES_ORDER = 30
UPDATE_CATALOG_ORDER = 25
UPDATE_DOCUMENTATION_ORDER = 20
UPDATE_PROJECT_PAGE_ORDER = 18
RUN_UPDATED_SAMPLES_ORDER = 15
GENERATE_TRAIN_DOCS_ORDER = 12
UPDATE_ALL_SAMPLES_ORDER = 10
UPDATE_WIKI_ORDER = 8


def skip_for_snapshot(args: Arguments) -> str | None:
    if args.version.is_snapshot:
        return f"won't run for a snapshot version ({args.version.version})"
    return None


def skip_unless_general_availability(args: Arguments) -> str | None:
    if not args.version.is_general_availability:
        return f"only runs for a release or service release ({args.version.version})"
    return None


def skip_in_dry_run(args: Arguments) -> str | None:
    if args.options.dry_run:
        return "dry run"
    return None


def _publishing(*rules: SkipRule) -> SkipRule:
    """Compose skip rules; post-release publishing never runs in a dry run."""

    def rule(args: Arguments) -> str | None:
        for r in (skip_in_dry_run, *rules):
            reason = r(args)
            if reason is not None:
                return reason
        return None

    return rule


def _guides_rule(args: Arguments) -> str | None:
    if not args.options.update_guides:
        return "guides update disabled"
    return skip_unless_general_availability(args)


def _documentation_rule(args: Arguments) -> str | None:
    if not args.options.update_documentation_repo:
        return "documentation repository update disabled"
    return None


def default_tasks(releaser: Releaser) -> tuple[Task, ...]:
    """The full release pipeline, in registration order."""
    r = releaser
    return (
        Task(
            name="updatePoms",
            short_name="u",
            header="UPDATING VERSIONS",
            description="Update the project's and its dependencies' versions from the train",
            phase="release",
            order=UPDATE_POMS_ORDER,
            action=r.update_project_from_bom,
        ),
        Task(
            name="build",
            short_name="b",
            header="BUILDING PROJECT",
            description="Build the project",
            phase="release",
            order=BUILD_ORDER,
            action=r.build_project,
        ),
        Task(
            name="commit",
            short_name="c",
            header="COMMITTING (ALL) AND TAGGING (NON-SNAPSHOTS)",
            description="Commit the version bump and tag non-snapshot versions",
            phase="release",
            order=COMMIT_ORDER,
            action=r.commit_and_tag,
        ),
        Task(
            name="deploy",
            short_name="d",
            header="DEPLOYING ARTIFACTS",
            description="Deploy the built artifacts",
            phase="release",
            order=DEPLOY_ORDER,
            action=r.deploy,
            skip_rule=skip_in_dry_run,
        ),
        Task(
            name="push",
            short_name="p",
            header="PUSHING CHANGES",
            description="Push the current branch and its tags",
            phase="release",
            order=PUSH_ORDER,
            action=r.push_current_branch,
            skip_rule=skip_in_dry_run,
        ),
        Task(
            name="publishDocs",
            short_name="pd",
            header="PUBLISHING DOCS",
            description="Publish the project documentation",
            phase="post_release",
            order=PUBLISH_DOCS_ORDER,
            action=r.publish_docs,
            skip_rule=_publishing(),
        ),
        Task(
            name="closeMilestone",
            short_name="m",
            header="CLOSING MILESTONE",
            description="Close the milestone for the released version",
            phase="post_release",
            order=CLOSE_MILESTONE_ORDER,
            action=r.close_milestone,
            skip_rule=_publishing(skip_for_snapshot),
        ),
        Task(
            name="createTemplates",
            short_name="e",
            header="CREATING EMAIL TEMPLATE",
            description="Create the release announcement email",
            phase="post_release",
            order=EMAIL_ORDER,
            action=r.create_email,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
        Task(
            name="createBlog",
            short_name="bl",
            header="CREATING BLOG TEMPLATE",
            description="Create the release blog post",
            phase="post_release",
            order=BLOG_ORDER,
            action=r.create_blog,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
        Task(
            name="createTweet",
            short_name="tw",
            header="CREATING TWEET TEMPLATE",
            description="Create the release tweet",
            phase="post_release",
            order=TWEET_ORDER,
            action=r.create_tweet,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
        Task(
            name="createReleaseNotes",
            short_name="rn",
            header="CREATING RELEASE NOTES",
            description="Create the release notes",
            phase="post_release",
            order=RELEASE_NOTES_ORDER,
            action=r.create_release_notes,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
        Task(
            name="updateGuides",
            short_name="ug",
            header="UPDATING GUIDES",
            description="Open issues asking to bump the guides to the new release",
            phase="post_release",
            order=UPDATE_GUIDES_ORDER,
            action=r.update_guides,
            skip_rule=_publishing(_guides_rule),
        ),
        Task(
            name="updateSagan",
            short_name="us",
            header="UPDATING PROJECT CATALOG",
            description="Update the project's entry in the project catalog",
            phase="post_release",
            order=UPDATE_CATALOG_ORDER,
            action=r.update_catalog,
            skip_rule=_publishing(),
        ),
        Task(
            name="updateDocumentation",
            short_name="ud",
            header="UPDATING DOCUMENTATION REPOSITORY",
            description="Update the documentation repository",
            phase="post_release",
            order=UPDATE_DOCUMENTATION_ORDER,
            action=r.update_documentation,
            skip_rule=_publishing(_documentation_rule),
            train_level=True,
        ),
        Task(
            name="updateProjectPage",
            short_name="upp",
            header="UPDATING PROJECT PAGE",
            description="Update the release train project page",
            phase="post_release",
            order=UPDATE_PROJECT_PAGE_ORDER,
            action=r.update_project_page,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
        Task(
            name="runUpdatedSamples",
            short_name="ru",
            header="UPDATING AND RUNNING SAMPLES",
            description="Bump the samples to the new versions and run them",
            phase="post_release",
            order=RUN_UPDATED_SAMPLES_ORDER,
            action=r.run_updated_samples,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
        Task(
            name="generateTrainDocs",
            short_name="gtd",
            header="GENERATING RELEASE TRAIN DOCUMENTATION",
            description="Generate the release train documentation",
            phase="post_release",
            order=GENERATE_TRAIN_DOCS_ORDER,
            action=r.generate_train_docs,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
        Task(
            name="updateAllSamples",
            short_name="uas",
            header="UPDATING ALL SAMPLES",
            description="Bump every test sample to the new versions",
            phase="post_release",
            order=UPDATE_ALL_SAMPLES_ORDER,
            action=r.update_all_samples,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
        Task(
            name="updateReleaseTrainWiki",
            short_name="uw",
            header="UPDATE RELEASE TRAIN WIKI",
            description="Update release train wiki page",
            phase="post_release",
            order=UPDATE_WIKI_ORDER,
            action=r.update_release_train_wiki,
            skip_rule=_publishing(skip_for_snapshot),
            train_level=True,
        ),
    )


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Largest order first; ``sorted`` is stable so ties keep registration order."""
    return sorted(tasks, key=lambda t: t.order, reverse=True)


def project_tasks(tasks: Sequence[Task]) -> tuple[Task, ...]:
    return tuple(t for t in tasks if not t.train_level)


def train_tasks(tasks: Sequence[Task]) -> tuple[Task, ...]:
    return tuple(t for t in tasks if t.train_level)


def select_tasks(
    tasks: Sequence[Task], names: Sequence[str]
) -> Result[tuple[Task, ...], ReleaseError]:
    """Pick tasks by name or short name, keeping registry order."""
    wanted = {n.strip() for n in names if n.strip()}
    known = {t.name for t in tasks} | {t.short_name for t in tasks}
    unknown = sorted(wanted - known)
    if unknown:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"unknown task(s): {', '.join(unknown)}",
                hint="Run `train tasks` to list the available tasks",
            )
        )
    return Ok(tuple(t for t in tasks if t.name in wanted or t.short_name in wanted))
