from __future__ import annotations

from pathlib import Path

import typer

from trackpub.cli.commands._helpers import (
    build_change_set,
    exit_on_publish_error,
    exit_with,
    print_track,
)
from trackpub.cli.context import build_context
from trackpub.core.errors import ErrorCode
from trackpub.core.result import Err
from trackpub.output.console import Style
from trackpub.publish.artifact import locate_artifact
from trackpub.publish.model import ResolutionStrategy
from trackpub.publish.workflow import promote_track, publish_artifact


def _parse_resolution(raw: str) -> ResolutionStrategy:
    try:
        return ResolutionStrategy(raw)
    except ValueError:
        choices = ", ".join(s.value for s in ResolutionStrategy)
        exit_with(
            f"invalid --resolution {raw!r} (expected one of {choices})",
            code=ErrorCode.USER_ERROR,
        )


def publish(
    artifact: Path = typer.Argument(..., help="Bundle, APK or build output directory"),
    track: str | None = typer.Option(None, "--track", help="Target track (default from config)"),
    status: str | None = typer.Option(
        None, "--status", help="Release status: draft|inProgress|halted|completed"
    ),
    fraction: float | None = typer.Option(
        None, "--fraction", help="User fraction for a staged rollout (0 < f <= 1)"
    ),
    priority: int | None = typer.Option(None, "--priority", help="In-app update priority (0-5)"),
    notes: list[str] = typer.Option([], "--notes", help="Release notes (locale=text)"),
    notes_file: list[str] = typer.Option(
        [], "--notes-file", help="Release notes file (locale=path)"
    ),
    name: str | None = typer.Option(None, "--name", help="Release name"),
    tag_file: Path | None = typer.Option(
        None, "--tag-file", help="Tag build file used to derive the release name"
    ),
    retain: list[int] = typer.Option(
        [], "--retain", help="Version code to keep in the release (repeatable)"
    ),
    resolution: str | None = typer.Option(
        None, "--resolution", help="Version conflict handling: auto|auto_offset|fail|ignore"
    ),
    no_commit: bool = typer.Option(
        False, "--no-commit", help="Save the edit for the next run instead of committing"
    ),
) -> None:
    """Upload an artifact and put it on a track."""
    ctx = build_context()
    strategy = _parse_resolution(resolution or ctx.config.publish.resolution)
    base = build_change_set(
        console=ctx.console,
        status=status,
        fraction=fraction,
        priority=priority if priority is not None else ctx.config.publish.update_priority,
        notes=notes,
        notes_file=notes_file,
        name=name,
        tag_file=tag_file,
        retain=retain,
    )

    located = locate_artifact(artifact)
    if isinstance(located, Err):
        exit_on_publish_error(located.error, ctx.console)

    result = publish_artifact(
        backend=ctx.backend,
        artifact=located.value.path,
        track_name=track or ctx.config.publish.track,
        base=base,
        strategy=strategy,
        commit=not no_commit,
        console=ctx.console,
        defaults=ctx.merge_defaults,
    )
    if isinstance(result, Err):
        exit_on_publish_error(result.error, ctx.console)

    outcome = result.value
    if outcome.version_code is None:
        ctx.console.print("nothing published", Style.DIM)
        return
    if outcome.track is not None:
        print_track(outcome.track, ctx.console)
    if outcome.committed:
        ctx.console.success(f"published version code {outcome.version_code}")
    else:
        ctx.console.success(
            f"uploaded version code {outcome.version_code}; edit {outcome.edit_id} saved"
        )


def promote(
    from_track: str = typer.Option(..., "--from", help="Track to promote from"),
    to_track: str = typer.Option(..., "--to", help="Track to promote to"),
    version_code: int | None = typer.Option(
        None, "--version-code", help="Replace the promoted version codes with this one"
    ),
    status: str | None = typer.Option(
        None, "--status", help="Release status: draft|inProgress|halted|completed"
    ),
    fraction: float | None = typer.Option(
        None, "--fraction", help="User fraction for a staged rollout (0 < f <= 1)"
    ),
    priority: int | None = typer.Option(None, "--priority", help="In-app update priority (0-5)"),
    notes: list[str] = typer.Option([], "--notes", help="Release notes (locale=text)"),
    notes_file: list[str] = typer.Option(
        [], "--notes-file", help="Release notes file (locale=path)"
    ),
    name: str | None = typer.Option(None, "--name", help="Release name"),
    tag_file: Path | None = typer.Option(
        None, "--tag-file", help="Tag build file used to derive the release name"
    ),
    retain: list[int] = typer.Option(
        [], "--retain", help="Version code to keep in the release (repeatable)"
    ),
) -> None:
    """Promote the releases of one track to another."""
    ctx = build_context()
    if version_code is not None and version_code <= 0:
        exit_with(f"--version-code must be positive: {version_code}", code=ErrorCode.USER_ERROR)

    base = build_change_set(
        console=ctx.console,
        status=status,
        fraction=fraction,
        priority=priority,
        notes=notes,
        notes_file=notes_file,
        name=name,
        tag_file=tag_file,
        retain=retain,
    )
    result = promote_track(
        backend=ctx.backend,
        from_track=from_track,
        to_track=to_track,
        base=base,
        version_code=version_code,
        console=ctx.console,
        defaults=ctx.merge_defaults,
    )
    if isinstance(result, Err):
        exit_on_publish_error(result.error, ctx.console)

    print_track(result.value.track, ctx.console)
    ctx.console.success(f"promoted {from_track} to {to_track}")
