from __future__ import annotations

import io
from pathlib import Path
from types import ModuleType

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

import train.cli.commands.plan_cmd as plan_cmd
import train.cli.commands.run_cmd as run_cmd
import train.cli.commands.tasks_cmd as tasks_cmd
from train import __version__
from train.cli.app import app
from train.cli.commands._helpers import pick_tasks, resolve_projects, train_bom
from train.cli.context import CLIContext, build_context
from train.cli.wiring import NotConfigured, build_pipeline, parse_assignments, wire
from train.core.config import MetaReleaseConfig, ReleaserConfig
from train.core.errors import ErrorCode
from train.core.result import Err, Ok
from train.output.console import ConsoleProtocol, MockConsole
from train.release.builder import CommandBuilder
from train.release.git_handler import GitProjectHandler
from train.test.release.fakes import FakeCollaborators, fault, projects

runner = CliRunner()


def _ctx(tmp_path: Path, **fixed: str) -> CLIContext:
    return CLIContext(
        config=ReleaserConfig(
            working_dir=tmp_path,
            fixed_versions=fixed,
            meta_release=MetaReleaseConfig(projects_to_skip=("spring-cloud-task",)),
        ),
        config_path=None,
        console=MockConsole(),
    )


def _capture(monkeypatch: pytest.MonkeyPatch, module: ModuleType) -> io.StringIO:
    buffer = io.StringIO()
    monkeypatch.setattr(module, "_console", Console(file=buffer, width=200))
    return buffer


def _use_fakes(monkeypatch: pytest.MonkeyPatch, fakes: FakeCollaborators) -> None:
    def fake_pipeline(config: ReleaserConfig, console: ConsoleProtocol):
        return build_pipeline(config, console, fakes.as_collaborators())

    monkeypatch.setattr(run_cmd, "build_pipeline", fake_pipeline)


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_classify_service_release() -> None:
    result = runner.invoke(app, ["classify", "Dalston.SR3"])
    assert result.exit_code == 0
    assert "availability: Service Release 3 (SR3)" in result.output
    assert "release name: Dalston" in result.output


def test_classify_rejects_unknown_format() -> None:
    result = runner.invoke(app, ["classify", "1.0.0-beta"])
    assert result.exit_code == int(ErrorCode.USER_ERROR)


def test_tasks_lists_pipeline_in_execution_order(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr(tasks_cmd, "build_context", lambda config=None: _ctx(tmp_path))
    out = _capture(monkeypatch, tasks_cmd)

    tasks_cmd.tasks(config=None)

    text = out.getvalue()
    positions = [text.index(n) for n in ("updatePoms", "publishDocs", "updateReleaseTrainWiki")]
    assert positions == sorted(positions)
    assert "post-release" in text


def test_plan_marks_skipped_projects(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, **{"spring-cloud-release": "2020.0.0", "spring-cloud-task": "2.3.0"})
    monkeypatch.setattr(plan_cmd, "build_context", lambda config=None: ctx)
    out = _capture(monkeypatch, plan_cmd)

    plan_cmd.plan(
        config=None, assignments=["spring-cloud-sleuth=3.0.0"], start_from=None, bom=None
    )

    text = out.getvalue()
    assert "spring-cloud-sleuth" in text
    assert "skip (on the skip list)" in text
    assert "train-level tasks run once against" in text


def test_plan_with_unknown_start_from(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(plan_cmd, "build_context", lambda config=None: _ctx(tmp_path, a="1.0.0"))
    _capture(monkeypatch, plan_cmd)

    with pytest.raises(typer.Exit) as exc:
        plan_cmd.plan(config=None, assignments=[], start_from="zzz", bom=None)
    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_run_selected_tasks(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fakes = FakeCollaborators()
    monkeypatch.setattr(run_cmd, "build_context", lambda config=None: _ctx(tmp_path))
    _use_fakes(monkeypatch, fakes)
    _capture(monkeypatch, run_cmd)

    with pytest.raises(typer.Exit) as exc:
        run_cmd.run(
            name="spring-cloud-sleuth",
            version="3.0.0",
            project_dir=tmp_path,
            config=None,
            assignments=[],
            selection="b,c",
            dry_run=False,
        )

    assert exc.value.exit_code == int(ErrorCode.OK)
    assert fakes.journal.operations == ["build", "commit_and_tag"]


def test_run_failure_exits_aborted(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fakes = FakeCollaborators(failures={"build": fault("build", "compilation failed")})
    monkeypatch.setattr(run_cmd, "build_context", lambda config=None: _ctx(tmp_path))
    _use_fakes(monkeypatch, fakes)
    out = _capture(monkeypatch, run_cmd)

    with pytest.raises(typer.Exit) as exc:
        run_cmd.run(
            name="spring-cloud-sleuth",
            version="3.0.0",
            project_dir=tmp_path,
            config=None,
            assignments=[],
            selection="u,b,c",
            dry_run=False,
        )

    assert exc.value.exit_code == int(ErrorCode.ABORTED)
    assert fakes.journal.count("revert_changes") == 1
    assert "rollback:" in out.getvalue()


def test_release_whole_train(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fakes = FakeCollaborators(on_disk_version="1.0.0-SNAPSHOT")
    ctx = _ctx(tmp_path, **{"spring-cloud-sleuth": "3.0.0", "spring-cloud-release": "2020.0.0"})
    monkeypatch.setattr(run_cmd, "build_context", lambda config=None: ctx)
    _use_fakes(monkeypatch, fakes)
    out = _capture(monkeypatch, run_cmd)

    with pytest.raises(typer.Exit) as exc:
        run_cmd.release(
            config=None,
            assignments=[],
            start_from=None,
            bom=None,
            selection=None,
            dry_run=True,
        )

    assert exc.value.exit_code == int(ErrorCode.OK)
    assert fakes.journal.count("build") == 2
    assert fakes.journal.count("deploy") == 0
    assert "Release train" in out.getvalue()


def test_build_context_loads_explicit_file(tmp_path: Path) -> None:
    path = tmp_path / "releaser.toml"
    path.write_text(
        '[fixed_versions]\n"spring-cloud-sleuth" = "3.0.0"\n\n[pom]\nbranch = "2020.0.x"\n',
        encoding="utf-8",
    )
    ctx = build_context(path)
    assert ctx.config_path == path
    assert ctx.config.fixed_versions == {"spring-cloud-sleuth": "3.0.0"}
    assert ctx.config.pom.branch == "2020.0.x"


def test_build_context_with_broken_file_exits(tmp_path: Path) -> None:
    path = tmp_path / "releaser.toml"
    path.write_text("[pom\n", encoding="utf-8")
    with pytest.raises(typer.Exit) as exc:
        build_context(path)
    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)


def test_resolve_projects_merges_fixed_versions_and_assignments() -> None:
    result = resolve_projects({"a": "1.0.0", "b": "2.0.0"}, ["b=2.0.1", "c=3.0.0"])
    assert [str(pv) for pv in result.values()] == ["a:1.0.0", "b:2.0.1", "c:3.0.0"]


def test_resolve_projects_requires_versions() -> None:
    with pytest.raises(typer.Exit) as exc:
        resolve_projects({}, [])
    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_pick_unknown_task_exits() -> None:
    fakes = FakeCollaborators()
    _, registry = build_pipeline(ReleaserConfig(), MockConsole(), fakes.as_collaborators())
    with pytest.raises(typer.Exit):
        pick_tasks(registry, "b,nope")


def test_parse_assignments() -> None:
    assert parse_assignments([" a = 1.0.0 ", "b=2"]) == Ok({"a": "1.0.0", "b": "2"})
    bad = parse_assignments(["a"])
    assert isinstance(bad, Err)
    assert bad.error.kind == "invalid_input"


def test_unwired_collaborators_fail_with_config_errors(tmp_path: Path) -> None:
    collaborators = wire(ReleaserConfig(working_dir=tmp_path), MockConsole())
    assert isinstance(collaborators.vcs, GitProjectHandler)
    assert isinstance(collaborators.builder, CommandBuilder)
    assert isinstance(collaborators.templates, NotConfigured)

    result = collaborators.templates.blog(projects(a="1.0.0"))
    assert isinstance(result, Err)
    assert result.error.kind == "config"
    assert "template generator" in result.error.message


def test_resolve_projects_from_train_bom() -> None:
    reader = FakeCollaborators(bom_versions={"a": "1.0.0-SNAPSHOT", "b": "2.0.0-SNAPSHOT"})
    result = resolve_projects(
        {"a": "1.0.0"}, ["zzz=1.0.0"], bom=Path("/train/bom.xml"), reader=reader
    )
    assert [str(pv) for pv in result.values()] == ["a:1.0.0", "b:2.0.0-SNAPSHOT"]
    assert reader.journal.calls == [("read_bom_versions", "/train/bom.xml")]


def test_unreadable_train_bom_exits() -> None:
    reader = FakeCollaborators(failures={"read_bom_versions": fault("descriptor_update", "no")})
    with pytest.raises(typer.Exit) as exc:
        resolve_projects({"a": "1.0.0"}, [], bom=Path("/train/bom.xml"), reader=reader)
    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_train_bom_inside_checkout(tmp_path: Path) -> None:
    config = ReleaserConfig()
    assert train_bom(config, tmp_path) == tmp_path / "spring-cloud-dependencies/pom.xml"
    bom = tmp_path / "bom.xml"
    bom.write_text("<project/>", encoding="utf-8")
    assert train_bom(config, bom) == bom


def test_release_reads_versions_from_train_bom(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fakes = FakeCollaborators(
        on_disk_version="1.0.0-SNAPSHOT",
        bom_versions={"spring-cloud-sleuth": "3.0.0-SNAPSHOT", "spring-cloud-release": "2020.0.0"},
    )
    ctx = _ctx(tmp_path, **{"spring-cloud-sleuth": "3.0.0"})
    monkeypatch.setattr(run_cmd, "build_context", lambda config=None: ctx)
    _use_fakes(monkeypatch, fakes)
    _capture(monkeypatch, run_cmd)

    with pytest.raises(typer.Exit) as exc:
        run_cmd.release(
            config=None,
            assignments=[],
            start_from=None,
            bom=tmp_path,
            selection="b",
            dry_run=True,
        )

    assert exc.value.exit_code == int(ErrorCode.OK)
    assert fakes.journal.calls[0] == (
        "read_bom_versions",
        str(tmp_path / "spring-cloud-dependencies/pom.xml"),
    )
    assert ("build", "spring-cloud-sleuth:3.0.0") in fakes.journal.calls
    assert ("build", "spring-cloud-release:2020.0.0") in fakes.journal.calls
