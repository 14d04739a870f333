from __future__ import annotations

import os
from pathlib import Path

import typer

from trackpub import __version__
from trackpub.cli.commands.publish_cmd import promote, publish
from trackpub.cli.commands.tracks_cmd import tracks
from trackpub.cli.context import CONFIG_ENV, STATE_ENV
from trackpub.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(publish)
app.command()(promote)
app.command()(tracks)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to trackpub.toml (default: ./trackpub.toml)",
    ),
    state: Path | None = typer.Option(
        None,
        "--state",
        help="State file (overrides [app].state)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if config is not None:
        path = config.expanduser()
        if path.exists() and not path.is_file():
            typer.echo(f"error: --config '{path}' is not a file", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        os.environ[CONFIG_ENV] = str(path)

    if state is not None:
        os.environ[STATE_ENV] = str(state.expanduser())


def main() -> None:
    app()
