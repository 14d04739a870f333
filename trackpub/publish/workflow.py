"""Edit-scoped publish and promote flows.

Each flow opens (or resumes) an edit, runs the engine inside it and then
commits the edit, or saves it for a later run when ``commit`` is False.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from trackpub.core.result import Err, Ok, Result
from trackpub.output.console import ConsoleProtocol, Style
from trackpub.publish.edits import EditManager
from trackpub.publish.errors import AnyPublishError
from trackpub.publish.model import (
    DEFAULT_MERGE_DEFAULTS,
    BaseConfig,
    MergeDefaults,
    ResolutionStrategy,
    Track,
)
from trackpub.publish.publisher import PublishBackend
from trackpub.publish.tracks import TrackManager


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    edit_id: str
    version_code: int | None
    track: Track | None
    committed: bool


@dataclass(frozen=True, slots=True)
class PromoteOutcome:
    edit_id: str
    track: Track


@dataclass(frozen=True, slots=True)
class _OpenEdit:
    edit_id: str
    resumed: bool


def _open_edit(
    backend: PublishBackend, console: ConsoleProtocol
) -> Result[_OpenEdit, AnyPublishError]:
    pending = backend.pending_edit()
    if pending is not None:
        console.print(f"resuming edit {pending} saved by a previous run", Style.DIM)
        return Ok(_OpenEdit(edit_id=pending, resumed=True))

    inserted = backend.insert_edit()
    if isinstance(inserted, Err):
        return inserted
    return Ok(_OpenEdit(edit_id=inserted.value, resumed=False))


def _edit_manager(
    backend: PublishBackend,
    edit_id: str,
    console: ConsoleProtocol,
    defaults: MergeDefaults,
) -> EditManager:
    tracks = TrackManager(publisher=backend, edit_id=edit_id, console=console, defaults=defaults)
    return EditManager(publisher=backend, tracks=tracks, edit_id=edit_id, console=console)


def _finish_edit(
    backend: PublishBackend, edit_id: str, *, commit: bool
) -> Result[None, AnyPublishError]:
    if commit:
        return backend.commit_edit(edit_id)
    return backend.save_edit(edit_id)


def publish_artifact(
    *,
    backend: PublishBackend,
    artifact: Path,
    track_name: str,
    base: BaseConfig,
    strategy: ResolutionStrategy,
    commit: bool,
    console: ConsoleProtocol,
    defaults: MergeDefaults = DEFAULT_MERGE_DEFAULTS,
) -> Result[PublishOutcome, AnyPublishError]:
    """Upload ``artifact`` and put it on ``track_name``.

    An upload ignored under ``ResolutionStrategy.IGNORE`` ends the flow with
    ``version_code=None``; the edit is left untouched.
    """
    console.print("Step 1/4: opening edit", Style.INFO)
    opened = _open_edit(backend, console)
    if isinstance(opened, Err):
        return opened
    edit_id = opened.value.edit_id
    edits = _edit_manager(backend, edit_id, console, defaults)

    console.print(f"Step 2/4: uploading {artifact.name} to edit {edit_id}", Style.INFO)
    uploaded = edits.upload_artifact(artifact, strategy)
    if isinstance(uploaded, Err):
        return uploaded
    version_code = uploaded.value
    if version_code is None:
        return Ok(PublishOutcome(edit_id=edit_id, version_code=None, track=None, committed=False))

    console.print(f"Step 3/4: pushing version code {version_code} to {track_name}", Style.INFO)
    published = edits.publish_artifacts(
        version_codes=[version_code],
        did_previous_build_skip_commit=opened.value.resumed,
        track_name=track_name,
        release_status=base.release_status,
        release_name=base.release_name,
        release_notes=base.release_notes,
        user_fraction=base.user_fraction,
        update_priority=base.update_priority,
        retainable_artifacts=base.retainable_artifacts,
    )
    if isinstance(published, Err):
        return published

    console.print(
        f"Step 4/4: {'committing' if commit else 'saving'} edit {edit_id}", Style.INFO
    )
    finished = _finish_edit(backend, edit_id, commit=commit)
    if isinstance(finished, Err):
        return finished

    return Ok(
        PublishOutcome(
            edit_id=edit_id,
            version_code=version_code,
            track=published.value,
            committed=commit,
        )
    )


def promote_track(
    *,
    backend: PublishBackend,
    from_track: str,
    to_track: str,
    base: BaseConfig,
    version_code: int | None,
    console: ConsoleProtocol,
    defaults: MergeDefaults = DEFAULT_MERGE_DEFAULTS,
) -> Result[PromoteOutcome, AnyPublishError]:
    """Promote the releases of ``from_track`` to ``to_track`` and commit."""
    opened = _open_edit(backend, console)
    if isinstance(opened, Err):
        return opened
    edit_id = opened.value.edit_id
    edits = _edit_manager(backend, edit_id, console, defaults)

    promoted = edits.promote_release(
        promote_track_name=to_track,
        from_track_name=from_track,
        release_status=base.release_status,
        release_name=base.release_name,
        release_notes=base.release_notes,
        user_fraction=base.user_fraction,
        update_priority=base.update_priority,
        retainable_artifacts=base.retainable_artifacts,
        version_code=version_code,
    )
    if isinstance(promoted, Err):
        return promoted

    finished = _finish_edit(backend, edit_id, commit=True)
    if isinstance(finished, Err):
        return finished
    return Ok(PromoteOutcome(edit_id=edit_id, track=promoted.value))

