from __future__ import annotations

import typer

from trackpub.cli.commands._helpers import exit_on_publish_error, print_track
from trackpub.cli.context import build_context
from trackpub.core.result import Err


def tracks(
    name: str | None = typer.Argument(None, help="Only show this track"),
) -> None:
    """Show the releases on each track."""
    ctx = build_context()
    backend = ctx.backend

    # Read-only edit; never committed.
    edit = backend.insert_edit()
    if isinstance(edit, Err):
        exit_on_publish_error(edit.error, ctx.console)

    if name is not None:
        track = backend.get_track(edit.value, name)
        if isinstance(track, Err):
            exit_on_publish_error(track.error, ctx.console)
        print_track(track.value, ctx.console)
        return

    listed = backend.list_tracks(edit.value)
    if isinstance(listed, Err):
        exit_on_publish_error(listed.error, ctx.console)
    for track in listed.value:
        print_track(track, ctx.console)
