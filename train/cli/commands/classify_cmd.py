"""Classify a version string and show its announcement wording."""

from __future__ import annotations

import typer

from train.core.errors import ErrorCode
from train.core.result import Err
from train.release.announcement import announcement_context
from train.release.versions import classify as classify_version


def classify(
    version: str = typer.Argument(..., help="Version, e.g. 2021.0.0-SNAPSHOT or Dalston.SR3"),
) -> None:
    kind = classify_version(version.strip())
    if isinstance(kind, Err):
        typer.echo(f"error: {kind.error.pretty()}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    context = announcement_context(version)
    if isinstance(context, Err):
        typer.echo(f"error: {context.error.pretty()}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx = context.value
    typer.echo(f"kind: {kind.value.label}")
    typer.echo(f"availability: {ctx.availability}")
    typer.echo(f"release name: {ctx.release_name}")
    typer.echo(f"release link: {ctx.release_link}")
