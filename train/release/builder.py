from __future__ import annotations

import shlex
from pathlib import Path
from typing import Literal

from train.core.config import SYSTEM_PROPS_PLACEHOLDER, VERSION_PLACEHOLDER, BuildConfig
from train.core.result import Err, Ok, Result
from train.output.console import ConsoleProtocol
from train.platform.process import ProcessError
from train.platform.process import run as run_process
from train.release.errors import ReleaseError
from train.release.projects import ProjectVersion

_StepKind = Literal["build", "deploy", "publish"]

_STDERR_TAIL_LINES = 20


def expand_command(command: str, *, system_properties: str, version: str) -> list[str]:
    """Substitute placeholders, then split like a POSIX shell would."""
    expanded = command.replace(SYSTEM_PROPS_PLACEHOLDER, system_properties).replace(
        VERSION_PLACEHOLDER, version
    )
    return shlex.split(expanded)


def _tail(error: ProcessError) -> str | None:
    text = (error.stderr or error.stdout).strip()
    if not text:
        return None
    return "\n".join(text.splitlines()[-_STDERR_TAIL_LINES:])


class CommandBuilder:
    """ProjectBuilder running the configured build commands in the checkout."""

    def __init__(self, config: BuildConfig, console: ConsoleProtocol) -> None:
        self.config = config
        self.console = console

    def build(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]:
        return self._run(
            self.config.build_command,
            project,
            version,
            kind="build",
            timeout=self.config.timeout_seconds,
        )

    def deploy(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]:
        return self._run(
            self.config.deploy_command,
            project,
            version,
            kind="deploy",
            timeout=self.config.timeout_seconds,
        )

    def publish_docs(self, project: Path, version: ProjectVersion) -> Result[None, ReleaseError]:
        for command in self.config.publish_docs_commands:
            result = self._run(command, project, version, kind="publish", timeout=None)
            if isinstance(result, Err):
                return result
        return Ok(None)

    def _run(
        self,
        command: str,
        project: Path,
        version: ProjectVersion,
        *,
        kind: _StepKind,
        timeout: float | None,
    ) -> Result[None, ReleaseError]:
        try:
            cmd = expand_command(
                command,
                system_properties=self.config.system_properties,
                version=version.version,
            )
        except ValueError as e:
            return Err(
                ReleaseError(kind="invalid_input", message=f"cannot parse command {command!r}: {e}")
            )
        if not cmd:
            return Err(ReleaseError(kind="invalid_input", message=f"empty {kind} command"))

        self.console.info(f"running [{' '.join(cmd)}] in [{project}]")
        result = run_process(cmd, cwd=project, timeout=timeout)
        if isinstance(result, Ok):
            return Ok(None)

        error = result.error
        if error.timed_out:
            return Err(
                ReleaseError(
                    kind="timeout",
                    message=(
                        f"{kind} of {version} did not finish"
                        f" in {self.config.wait_time_minutes} minutes"
                    ),
                    hint="Raise [build] wait_time_minutes in releaser.toml",
                )
            )
        return Err(
            ReleaseError(kind=kind, message=f"{kind} of {version}: {error}", hint=_tail(error))
        )
