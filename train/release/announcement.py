"""Values shared by the announcement templates (email, blog, tweet)."""

from __future__ import annotations

from dataclasses import dataclass

from train.core.result import Err, Ok, Result
from train.release.errors import ReleaseError
from train.release.versions import (
    Milestone,
    Release,
    ReleaseCandidate,
    ServiceRelease,
    Snapshot,
    VersionKind,
    classify,
    is_general_availability,
)

MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2"
MILESTONE_REPOSITORY_LINK = "[Spring Milestone](https://repo.spring.io/milestone/) repository"
DEFAULT_BOM_PATH = "org/springframework/cloud/spring-cloud-dependencies"


@dataclass(frozen=True, slots=True)
class AnnouncementContext:
    release_version: str
    availability: str
    release_name: str
    release_link: str
    non_release: bool


def availability(kind: VersionKind) -> str:
    match kind:
        case Release():
            return "General Availability (RELEASE)"
        case ServiceRelease(number=n):
            return f"Service Release {n} (SR{n})"
        case ReleaseCandidate(number=n):
            return f"Release Candidate {n} (RC{n})"
        case Milestone(number=n):
            return f"Milestone {n} (M{n})"
        case Snapshot():
            return "Snapshot"


def release_name(version: str) -> str:
    """Train name, e.g. ``Dalston`` for ``Dalston.SR1``."""
    return version.split(".", 1)[0]


def release_link(version: str, *, non_release: bool, bom_path: str = DEFAULT_BOM_PATH) -> str:
    if non_release:
        return MILESTONE_REPOSITORY_LINK
    return f"[Maven Central]({MAVEN_CENTRAL_URL}/{bom_path}/{version}/)"


def announcement_context(
    version: str, *, bom_path: str = DEFAULT_BOM_PATH
) -> Result[AnnouncementContext, ReleaseError]:
    version = version.strip()
    kind = classify(version)
    if isinstance(kind, Err):
        return kind

    non_release = not is_general_availability(kind.value)
    return Ok(
        AnnouncementContext(
            release_version=version,
            availability=availability(kind.value),
            release_name=release_name(version),
            release_link=release_link(version, non_release=non_release, bom_path=bom_path),
            non_release=non_release,
        )
    )
