from __future__ import annotations

import pytest

from train.core.result import Err, Ok
from train.release.announcement import (
    MILESTONE_REPOSITORY_LINK,
    announcement_context,
    availability,
    release_link,
    release_name,
)
from train.release.versions import (
    RELEASE,
    SNAPSHOT,
    Milestone,
    ReleaseCandidate,
    ServiceRelease,
    VersionKind,
)


def test_service_release_context() -> None:
    result = announcement_context("2021.0.0.SR3")
    assert isinstance(result, Ok)
    ctx = result.value
    assert ctx.release_version == "2021.0.0.SR3"
    assert ctx.availability == "Service Release 3 (SR3)"
    assert ctx.release_name == "2021"
    assert not ctx.non_release
    assert ctx.release_link == (
        "[Maven Central](https://repo1.maven.org/maven2/"
        "org/springframework/cloud/spring-cloud-dependencies/2021.0.0.SR3/)"
    )


def test_milestone_links_to_milestone_repository() -> None:
    result = announcement_context("Hoxton.M2")
    assert isinstance(result, Ok)
    assert result.value.availability == "Milestone 2 (M2)"
    assert result.value.release_name == "Hoxton"
    assert result.value.non_release
    assert result.value.release_link == MILESTONE_REPOSITORY_LINK


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (RELEASE, "General Availability (RELEASE)"),
        (ServiceRelease(1), "Service Release 1 (SR1)"),
        (ReleaseCandidate(2), "Release Candidate 2 (RC2)"),
        (Milestone(5), "Milestone 5 (M5)"),
        (SNAPSHOT, "Snapshot"),
    ],
)
def test_availability(kind: VersionKind, expected: str) -> None:
    assert availability(kind) == expected


def test_snapshot_is_a_non_release() -> None:
    result = announcement_context("2022.0.0-SNAPSHOT")
    assert isinstance(result, Ok)
    assert result.value.non_release
    assert result.value.release_link == MILESTONE_REPOSITORY_LINK


def test_release_name_takes_text_before_first_dot() -> None:
    assert release_name("Dalston.SR1") == "Dalston"
    assert release_name("Edgware") == "Edgware"


def test_release_link_honours_bom_path() -> None:
    link = release_link("1.0.0", non_release=False, bom_path="com/example/bom")
    assert link == "[Maven Central](https://repo1.maven.org/maven2/com/example/bom/1.0.0/)"


def test_unrecognized_version_is_rejected() -> None:
    result = announcement_context("nonsense")
    assert isinstance(result, Err)
    assert result.error.kind == "unrecognized_version"
