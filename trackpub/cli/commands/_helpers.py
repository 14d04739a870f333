"""Shared helpers for CLI commands."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

import typer

from trackpub.core.errors import ErrorCode
from trackpub.core.result import Err
from trackpub.output.console import ConsoleProtocol, Style
from trackpub.publish.errors import AnyPublishError, PublishError, PublisherError
from trackpub.publish.model import BaseConfig, ReleaseStatus, Track, change_set_problems
from trackpub.publish.notes import load_release_notes
from trackpub.publish.tag_file import read_tag_file


def exit_with(message: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))


def publish_error_code(error: AnyPublishError) -> ErrorCode:
    match error:
        case PublishError(kind="invalid_input" | "invalid_artifact"):
            return ErrorCode.USER_ERROR
        case PublishError():
            return ErrorCode.PUBLISH_ERROR
        case PublisherError(kind="transport"):
            return ErrorCode.NETWORK_ERROR
        case PublisherError(kind="state_failed"):
            return ErrorCode.IO_ERROR
        case PublisherError(kind="invalid_artifact" | "track_not_found"):
            return ErrorCode.USER_ERROR
        case PublisherError():
            return ErrorCode.PUBLISH_ERROR


def exit_on_publish_error(error: AnyPublishError, console: ConsoleProtocol) -> NoReturn:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(publish_error_code(error)))


def parse_pairs(items: Sequence[str], *, flag: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for item in items:
        if "=" not in item:
            exit_with(f"invalid {flag} (expected locale=value): {item}", code=ErrorCode.USER_ERROR)
        k, v = item.split("=", 1)
        k = k.strip()
        if not k or not v.strip():
            exit_with(f"invalid {flag} (expected locale=value): {item}", code=ErrorCode.USER_ERROR)
        out[k] = v
    return out


def parse_status(raw: str | None) -> ReleaseStatus | None:
    if raw is None:
        return None
    try:
        return ReleaseStatus(raw)
    except ValueError:
        choices = ", ".join(s.value for s in ReleaseStatus)
        exit_with(f"invalid --status {raw!r} (expected one of {choices})", code=ErrorCode.USER_ERROR)


def build_change_set(
    *,
    console: ConsoleProtocol,
    status: str | None,
    fraction: float | None,
    priority: int | None,
    notes: Sequence[str],
    notes_file: Sequence[str],
    name: str | None,
    tag_file: Path | None,
    retain: Sequence[int],
) -> BaseConfig:
    """Assemble and validate the change-set given on the command line.

    An explicit ``--name`` wins over the name derived from ``--tag-file``.
    """
    if name is None and tag_file is not None:
        tag = read_tag_file(tag_file)
        if isinstance(tag, Err):
            exit_on_publish_error(tag.error, console)
        name = tag.value.release_name

    files = {locale: Path(p) for locale, p in parse_pairs(notes_file, flag="--notes-file").items()}
    loaded = load_release_notes(inline=parse_pairs(notes, flag="--notes"), files=files)
    if isinstance(loaded, Err):
        exit_on_publish_error(loaded.error, console)

    base = BaseConfig(
        release_status=parse_status(status),
        user_fraction=fraction,
        update_priority=priority,
        release_notes=loaded.value,
        retainable_artifacts=tuple(retain),
        release_name=name,
    )
    problems = change_set_problems(base)
    if problems:
        exit_with("; ".join(problems), code=ErrorCode.USER_ERROR)
    return base


def print_track(track: Track, console: ConsoleProtocol) -> None:
    console.header(track.name)
    if not track.releases:
        console.print("  (no releases)", Style.DIM)
        return
    for release in track.releases:
        codes = ", ".join(str(c) for c in release.version_codes) or "-"
        status = str(release.status) if release.status is not None else "unset"
        line = f"  {status}: {codes}"
        if release.user_fraction is not None:
            line += f" at {release.user_fraction:.0%}"
        if release.name:
            line += f" '{release.name}'"
        if release.update_priority is not None:
            line += f" priority={release.update_priority}"
        console.print(line)
        for locale, text in release.release_notes.items():
            first_line = text.splitlines()[0] if text else ""
            console.print(f"    {locale}: {first_line}", Style.DIM)
