from __future__ import annotations

import re
from dataclasses import dataclass

from train.core.result import Err, Ok, Result
from train.release.errors import ReleaseError

_SNAPSHOT_RE = re.compile(r"^(?P<base>.+?)[.-](?:BUILD-)?SNAPSHOT$")
_QUALIFIED_RE = re.compile(r"^(?P<base>.+?)[.-](?P<qualifier>M|RC|SR)(?P<n>[0-9]+)$")
_RELEASE_RE = re.compile(r"^(?P<base>.+?)[.-]RELEASE$")
_PLAIN_RE = re.compile(r"^[0-9]+(?:\.[0-9]+)*$")


@dataclass(frozen=True, slots=True)
class Snapshot:
    @property
    def label(self) -> str:
        return "SNAPSHOT"


@dataclass(frozen=True, slots=True)
class Milestone:
    number: int

    @property
    def label(self) -> str:
        return f"M{self.number}"


@dataclass(frozen=True, slots=True)
class ReleaseCandidate:
    number: int

    @property
    def label(self) -> str:
        return f"RC{self.number}"


@dataclass(frozen=True, slots=True)
class ServiceRelease:
    number: int

    @property
    def label(self) -> str:
        return f"SR{self.number}"


@dataclass(frozen=True, slots=True)
class Release:
    @property
    def label(self) -> str:
        return "RELEASE"


VersionKind = Snapshot | Milestone | ReleaseCandidate | ServiceRelease | Release

SNAPSHOT = Snapshot()
RELEASE = Release()


def classify(version: str) -> Result[VersionKind, ReleaseError]:
    """Derive the kind of a version purely from its suffix.

    ``-SNAPSHOT`` / ``.BUILD-SNAPSHOT`` is a snapshot, ``.M<n>``, ``.RC<n>`` and
    ``.SR<n>`` carry an ordinal, ``.RELEASE`` or a plain numeric version is a
    final release. Anything else is rejected rather than guessed.
    """
    v = version.strip()
    if _SNAPSHOT_RE.match(v):
        return Ok(SNAPSHOT)

    m = _QUALIFIED_RE.match(v)
    if m is not None:
        n = int(m.group("n"))
        match m.group("qualifier"):
            case "M":
                return Ok(Milestone(n))
            case "RC":
                return Ok(ReleaseCandidate(n))
            case "SR":
                return Ok(ServiceRelease(n))
            case other:
                raise AssertionError(f"unexpected qualifier: {other}")

    if _RELEASE_RE.match(v) or _PLAIN_RE.match(v):
        return Ok(RELEASE)

    return Err(
        ReleaseError(
            kind="unrecognized_version",
            message=f"unrecognized version format: {version!r}",
            hint="Expected -SNAPSHOT, .M<n>, .RC<n>, .SR<n>, .RELEASE or a plain numeric version",
        )
    )


def format_version(base: str, kind: VersionKind) -> str:
    """Build a representative version string of the given kind."""
    match kind:
        case Snapshot():
            return f"{base}-SNAPSHOT"
        case Release():
            return f"{base}.RELEASE"
        case Milestone() | ReleaseCandidate() | ServiceRelease():
            return f"{base}.{kind.label}"


def is_snapshot(kind: VersionKind) -> bool:
    return isinstance(kind, Snapshot)


def is_release(kind: VersionKind) -> bool:
    return isinstance(kind, Release)


def is_service_release(kind: VersionKind) -> bool:
    return isinstance(kind, ServiceRelease)


def is_milestone_or_candidate(kind: VersionKind) -> bool:
    return isinstance(kind, Milestone | ReleaseCandidate)


def is_general_availability(kind: VersionKind) -> bool:
    """Release or service release; the only kinds published to Maven Central."""
    return is_release(kind) or is_service_release(kind)
