"""Project versions and the train-wide version set."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Protocol

from train.core.result import Err, Ok, Result
from train.release.errors import ReleaseError
from train.release.versions import (
    VersionKind,
    classify,
    is_general_availability,
    is_milestone_or_candidate,
    is_release,
    is_service_release,
    is_snapshot,
)


@dataclass(frozen=True, slots=True)
class ProjectVersion:
    """A project pinned to a version.

    Equality and hashing use ``project_name`` and ``version`` only; ``kind``
    is always the classification of ``version``. Build instances with
    ``ProjectVersion.parse``.
    """

    project_name: str
    version: str
    kind: VersionKind = field(compare=False)

    def __post_init__(self) -> None:
        if self.version != self.version.strip():
            raise ValueError(f"version {self.version!r} has surrounding whitespace")
        derived = classify(self.version)
        if isinstance(derived, Err) or derived.value != self.kind:
            raise ValueError(f"kind {self.kind!r} does not match version {self.version!r}")

    @classmethod
    def parse(cls, project_name: str, version: str) -> Result[ProjectVersion, ReleaseError]:
        kind = classify(version)
        if isinstance(kind, Err):
            return Err(
                ReleaseError(
                    kind="unrecognized_version",
                    message=f"{project_name}: {kind.error.message}",
                    hint=kind.error.hint,
                )
            )
        return Ok(cls(project_name=project_name, version=version.strip(), kind=kind.value))

    @property
    def is_snapshot(self) -> bool:
        return is_snapshot(self.kind)

    @property
    def is_release(self) -> bool:
        return is_release(self.kind)

    @property
    def is_service_release(self) -> bool:
        return is_service_release(self.kind)

    @property
    def is_milestone_or_candidate(self) -> bool:
        return is_milestone_or_candidate(self.kind)

    @property
    def is_general_availability(self) -> bool:
        return is_general_availability(self.kind)

    def __str__(self) -> str:
        return f"{self.project_name}:{self.version}"


class Projects(Mapping[str, ProjectVersion]):
    """Immutable mapping of project name to version, in train order.

    Every derivation (overrides, rollback) returns a new set; an instance is
    never changed after construction, so it can be shared by every task of a
    run without copying.
    """

    __slots__ = ("_entries",)

    def __init__(self, versions: tuple[ProjectVersion, ...] | list[ProjectVersion] = ()) -> None:
        entries: dict[str, ProjectVersion] = {}
        for pv in versions:
            if pv.project_name in entries:
                raise ValueError(f"duplicate project in version set: {pv.project_name}")
            entries[pv.project_name] = pv
        self._entries: Mapping[str, ProjectVersion] = MappingProxyType(entries)

    @classmethod
    def from_versions(cls, versions: Mapping[str, str]) -> Result[Projects, ReleaseError]:
        """Classify a name -> version mapping into a version set."""
        parsed: list[ProjectVersion] = []
        for name, version in versions.items():
            pv = ProjectVersion.parse(name, version)
            if isinstance(pv, Err):
                return pv
            parsed.append(pv.value)
        return Ok(cls(parsed))

    def __getitem__(self, name: str) -> ProjectVersion:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        inner = ", ".join(str(pv) for pv in self._entries.values())
        return f"Projects([{inner}])"

    def require(self, name: str) -> Result[ProjectVersion, ReleaseError]:
        pv = self._entries.get(name)
        if pv is None:
            return Err(
                ReleaseError(
                    kind="missing_project",
                    message=f"project {name} has no entry in the version set",
                    hint="Add it to the release train BOM or to [fixed_versions]",
                )
            )
        return Ok(pv)

    def apply_fixed_overrides(self, overrides: Mapping[str, str]) -> Result[Projects, ReleaseError]:
        """Replace the versions of projects named in ``overrides``.

        Names that are not part of the set are ignored so that overrides can
        be staged before a project joins the BOM.
        """
        replaced: list[ProjectVersion] = []
        for name, current in self._entries.items():
            literal = overrides.get(name)
            if literal is None:
                replaced.append(current)
                continue
            pv = ProjectVersion.parse(name, literal)
            if isinstance(pv, Err):
                return pv
            replaced.append(pv.value)
        return Ok(Projects(replaced))

    def for_rollback(self, original: ProjectVersion) -> Projects:
        """Return a copy with ``original`` put back for its project.

        The entry keeps its position in the train; a project that is not in
        the set is appended.
        """
        name = original.project_name
        out = [original if pv.project_name == name else pv for pv in self._entries.values()]
        if original.project_name not in self._entries:
            out.append(original)
        return Projects(out)


class BomReader(Protocol):
    def read_bom_versions(self, bom: Path) -> Result[Mapping[str, str], ReleaseError]: ...


def resolve_from_train_bom(bom: Path, reader: BomReader) -> Result[Projects, ReleaseError]:
    """Read every dependency-managed version of the train BOM."""
    raw = reader.read_bom_versions(bom)
    if isinstance(raw, Err):
        return Err(
            ReleaseError(
                kind="bom_resolution",
                message=f"failed to read release train BOM {bom}: {raw.error.message}",
                hint=raw.error.hint,
            )
        )
    if not raw.value:
        return Err(
            ReleaseError(
                kind="bom_resolution",
                message=f"release train BOM {bom} declares no managed versions",
            )
        )

    versions: dict[str, str] = {}
    for name, version in raw.value.items():
        if not name.strip() or not version.strip():
            return Err(
                ReleaseError(
                    kind="bom_resolution",
                    message=f"release train BOM {bom} has an entry without coordinates",
                    hint=f"{name!r} = {version!r}",
                )
            )
        versions[name.strip()] = version

    projects = Projects.from_versions(versions)
    if isinstance(projects, Err):
        return Err(
            ReleaseError(
                kind="bom_resolution",
                message=f"release train BOM {bom}: {projects.error.message}",
                hint=projects.error.hint,
            )
        )
    return projects
