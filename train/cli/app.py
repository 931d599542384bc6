from __future__ import annotations

import typer

from train import __version__
from train.cli.commands.classify_cmd import classify
from train.cli.commands.plan_cmd import plan
from train.cli.commands.run_cmd import release, run
from train.cli.commands.tasks_cmd import tasks

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
    help="Release train orchestration.",
)


app.command()(tasks)
app.command()(classify)
app.command()(plan)
app.command()(run)
app.command()(release)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
