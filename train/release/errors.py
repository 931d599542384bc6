"""Error payload for the release engine.

Faults never travel as exceptions between layers: every fallible call returns
Err(ReleaseError). Whether a fault aborts a project run or only makes it
unstable is decided by the scheduler from the phase of the failing task,
not from the kind recorded here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "unrecognized_version",
    "bom_resolution",
    "missing_project",
    "descriptor_update",
    "vcs",
    "build",
    "deploy",
    "timeout",
    "publish",
    "template",
    "catalog",
    "docs",
    "samples",
    "invalid_input",
    "config",
    "cancelled",
    "unexpected",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
