"""Typed configuration loading and access.

This module maps releaser.toml onto frozen dataclasses. The resulting
ReleaserConfig is an immutable value: it is built once and threaded
explicitly through the coordinator and the runtime options of each run.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_str_map,
    get_table,
)

__all__ = [
    "BuildConfig",
    "ConfigError",
    "GitConfig",
    "MetaReleaseConfig",
    "PomConfig",
    "ReleaserConfig",
    "load_config",
    "load_config_or_default",
    "DEFAULT_PROJECTS_TO_SKIP",
    "DEFAULT_WAIT_TIME_MINUTES",
]

DEFAULT_PROJECTS_TO_SKIP = ("spring-boot", "spring-cloud-stream", "spring-cloud-task")
DEFAULT_WAIT_TIME_MINUTES = 20

SYSTEM_PROPS_PLACEHOLDER = "{{systemProps}}"
VERSION_PLACEHOLDER = "{{version}}"

_DEFAULT_BUILD_COMMAND = f"./mvnw clean install -B -Pdocs {SYSTEM_PROPS_PLACEHOLDER}"
_DEFAULT_DEPLOY_COMMAND = f"./mvnw deploy -DskipTests -B -Pfast,deploy {SYSTEM_PROPS_PLACEHOLDER}"
_DEFAULT_PUBLISH_DOCS_COMMANDS = (
    "mkdir -p target",
    "wget https://raw.githubusercontent.com/spring-cloud/spring-cloud-build/master/docs/src/main/"
    "asciidoc/ghpages.sh -O target/gh-pages.sh",
    "chmod +x target/gh-pages.sh",
    f"./target/gh-pages.sh -v {VERSION_PLACEHOLDER} -c",
)


def _empty_str_map() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class MetaReleaseConfig:
    """Settings for releasing the whole train."""

    release_train_project_name: str = "spring-cloud-release"
    git_org_url: str = "https://github.com/spring-cloud"
    projects_to_skip: tuple[str, ...] = DEFAULT_PROJECTS_TO_SKIP


@dataclass(frozen=True, slots=True)
class GitConfig:
    clone_destination_dir: str | None = None
    update_documentation_repo: bool = True
    update_guides: bool = True
    number_of_checked_milestones: int = 10


@dataclass(frozen=True, slots=True)
class PomConfig:
    branch: str = "master"
    this_train_bom: str = "spring-cloud-dependencies/pom.xml"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Commands run by the subprocess-backed builder.

    ``{{systemProps}}`` is replaced by ``system_properties`` and
    ``{{version}}`` by the version being released.
    """

    build_command: str = _DEFAULT_BUILD_COMMAND
    deploy_command: str = _DEFAULT_DEPLOY_COMMAND
    publish_docs_commands: tuple[str, ...] = _DEFAULT_PUBLISH_DOCS_COMMANDS
    system_properties: str = ""
    wait_time_minutes: int = DEFAULT_WAIT_TIME_MINUTES

    @property
    def timeout_seconds(self) -> float:
        return self.wait_time_minutes * 60.0


@dataclass(frozen=True, slots=True)
class ReleaserConfig:
    """Main configuration container."""

    working_dir: Path = field(default_factory=Path.cwd)
    fixed_versions: Mapping[str, str] = field(default_factory=_empty_str_map)
    meta_release: MetaReleaseConfig = field(default_factory=MetaReleaseConfig)
    git: GitConfig = field(default_factory=GitConfig)
    pom: PomConfig = field(default_factory=PomConfig)
    build: BuildConfig = field(default_factory=BuildConfig)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, object], *, base_dir: Path | None = None
    ) -> ReleaserConfig:
        """Create a config from a parsed TOML mapping.

        A relative ``working_dir`` is resolved against ``base_dir``.
        """
        meta: StrDict = get_table(data, "meta_release") or {}
        git: StrDict = get_table(data, "git") or {}
        pom: StrDict = get_table(data, "pom") or {}
        build: StrDict = get_table(data, "build") or {}

        working_dir = Path(get_str(data, "working_dir") or ".")
        if not working_dir.is_absolute():
            working_dir = (base_dir or Path.cwd()) / working_dir

        wait_time = get_int(build, "wait_time_minutes")
        if wait_time is not None and wait_time <= 0:
            raise ValueError(f"build.wait_time_minutes must be positive, got {wait_time}")

        skip = get_str_list(meta, "projects_to_skip")
        docs_commands = get_str_list(build, "publish_docs_commands")
        defaults_meta = MetaReleaseConfig()
        defaults_git = GitConfig()
        defaults_pom = PomConfig()
        defaults_build = BuildConfig()

        return cls(
            working_dir=working_dir,
            fixed_versions=MappingProxyType(get_str_map(data, "fixed_versions") or {}),
            meta_release=MetaReleaseConfig(
                release_train_project_name=get_str(meta, "release_train_project_name")
                or defaults_meta.release_train_project_name,
                git_org_url=get_str(meta, "git_org_url") or defaults_meta.git_org_url,
                projects_to_skip=DEFAULT_PROJECTS_TO_SKIP if skip is None else skip,
            ),
            git=GitConfig(
                clone_destination_dir=get_str(git, "clone_destination_dir"),
                update_documentation_repo=_bool_or(git, "update_documentation_repo", True),
                update_guides=_bool_or(git, "update_guides", True),
                number_of_checked_milestones=get_int(git, "number_of_checked_milestones")
                or defaults_git.number_of_checked_milestones,
            ),
            pom=PomConfig(
                branch=get_str(pom, "branch") or defaults_pom.branch,
                this_train_bom=get_str(pom, "this_train_bom") or defaults_pom.this_train_bom,
            ),
            build=BuildConfig(
                build_command=get_str(build, "build_command") or defaults_build.build_command,
                deploy_command=get_str(build, "deploy_command") or defaults_build.deploy_command,
                publish_docs_commands=defaults_build.publish_docs_commands
                if docs_commands is None
                else docs_commands,
                system_properties=get_str(build, "system_properties") or "",
                wait_time_minutes=wait_time or DEFAULT_WAIT_TIME_MINUTES,
            ),
        )


def _bool_or(table: Mapping[str, object], key: str, default: bool) -> bool:
    value = get_bool(table, key)
    return default if value is None else value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaserConfig, ConfigError]:
    """Load and parse releaser.toml.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(ReleaserConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaserConfig.from_dict(result.value, base_dir=path.parent))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> ReleaserConfig:
    """Load config from file, or return the default config if it can't be read."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return ReleaserConfig()
