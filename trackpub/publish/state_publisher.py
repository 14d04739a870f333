"""Publisher backed by a local JSON state file.

The file mirrors what the distribution service stores for one app: committed
tracks, the version codes uploaded so far and, optionally, an edit that a
previous run saved without committing. Track payloads use the service's JSON
field names so a state file can be diffed against an exported track listing.

    {
      "schema": 1,
      "appId": "com.example.app",
      "tracks": [{"track": "internal", "releases": [{"versionCodes": ["42"],
                  "status": "completed", "releaseNotes": [{"language": "en-US",
                  "text": "Bug fixes"}]}]}],
      "artifacts": ["42"],
      "pendingEdit": {"id": "...", "tracks": [...], "artifacts": [...]}
    }
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from trackpub.core.result import Err, Ok, Result
from trackpub.core.structured import (
    StrDict,
    as_int,
    as_str_dict,
    get_float,
    get_int,
    get_list,
    get_str,
    get_table,
    get_text,
)
from trackpub.platform.files import atomic_write_json
from trackpub.publish.artifact import read_version_code
from trackpub.publish.errors import PublisherError
from trackpub.publish.model import Release, ReleaseStatus, Track, UploadedArtifact

STATE_SCHEMA = 1

STANDARD_TRACKS = ("internal", "alpha", "beta", "production")


@dataclass(slots=True)
class _EditState:
    tracks: dict[str, Track] = field(default_factory=dict)
    artifacts: set[int] = field(default_factory=set)


@dataclass(frozen=True, slots=True)
class _StoredState:
    committed: _EditState
    pending_id: str | None
    pending: _EditState | None


def _state_error(path: Path, message: str) -> Err[PublisherError]:
    return Err(PublisherError(kind="state_failed", message=message, hint=str(path)))


def release_to_json(release: Release) -> StrDict:
    payload: StrDict = {"versionCodes": [str(code) for code in release.version_codes]}
    if release.status is not None:
        payload["status"] = release.status.value
    if release.name is not None:
        payload["name"] = release.name
    if release.user_fraction is not None:
        payload["userFraction"] = release.user_fraction
    if release.update_priority is not None:
        payload["inAppUpdatePriority"] = release.update_priority
    if release.release_notes:
        payload["releaseNotes"] = [
            {"language": locale, "text": text} for locale, text in release.release_notes.items()
        ]
    return payload


def track_to_json(track: Track) -> StrDict:
    return {"track": track.name, "releases": [release_to_json(r) for r in track.releases]}


def _release_from_json(data: StrDict) -> Release | None:
    codes: list[int] = []
    for item in get_list(data, "versionCodes") or []:
        code = as_int(item)
        if code is None:
            return None
        codes.append(code)

    status: ReleaseStatus | None = None
    raw_status = get_str(data, "status")
    if raw_status is not None:
        try:
            status = ReleaseStatus(raw_status)
        except ValueError:
            return None

    notes: dict[str, str] = {}
    for item in get_list(data, "releaseNotes") or []:
        entry = as_str_dict(item)
        if entry is None:
            continue
        language = get_str(entry, "language")
        text = get_text(entry, "text")
        if language is not None and text is not None:
            notes[language] = text

    return Release(
        version_codes=tuple(codes),
        status=status,
        user_fraction=get_float(data, "userFraction"),
        release_notes=notes,
        update_priority=get_int(data, "inAppUpdatePriority"),
        name=get_text(data, "name"),
    )


def _edit_from_json(data: StrDict) -> _EditState | None:
    state = _EditState()
    for item in get_list(data, "tracks") or []:
        entry = as_str_dict(item)
        name = get_str(entry, "track") if entry is not None else None
        if entry is None or name is None:
            return None
        releases: list[Release] = []
        for raw in get_list(entry, "releases") or []:
            raw_release = as_str_dict(raw)
            release = _release_from_json(raw_release) if raw_release is not None else None
            if release is None:
                return None
            releases.append(release)
        state.tracks[name] = Track(name=name, releases=tuple(releases))

    for item in get_list(data, "artifacts") or []:
        code = as_int(item)
        if code is None:
            return None
        state.artifacts.add(code)
    return state


def _edit_to_json(state: _EditState) -> StrDict:
    return {
        "tracks": [track_to_json(state.tracks[name]) for name in sorted(state.tracks)],
        "artifacts": [str(code) for code in sorted(state.artifacts)],
    }


class StateFilePublisher:
    """``PublishBackend`` that keeps the distribution state in a JSON file.

    Edits live in memory until committed; ``save_edit`` parks one in the file
    so the next run can resume it.
    """

    def __init__(self, *, path: Path, app_id: str) -> None:
        self._path = path
        self._app_id = app_id
        self._edits: dict[str, _EditState] = {}

    @property
    def app_id(self) -> str:
        return self._app_id

    @property
    def path(self) -> Path:
        return self._path

    # Edit lifecycle

    def insert_edit(self) -> Result[str, PublisherError]:
        stored = self._load()
        if isinstance(stored, Err):
            return stored
        committed = stored.value.committed
        edit_id = uuid.uuid4().hex
        self._edits[edit_id] = _EditState(
            tracks=dict(committed.tracks),
            artifacts=set(committed.artifacts),
        )
        return Ok(edit_id)

    def pending_edit(self) -> str | None:
        stored = self._load()
        if isinstance(stored, Err):
            # Reported by the insert_edit call that follows.
            return None
        pending_id = stored.value.pending_id
        pending = stored.value.pending
        if pending_id is None or pending is None:
            return None
        self._edits.setdefault(pending_id, pending)
        return pending_id

    def commit_edit(self, edit_id: str) -> Result[None, PublisherError]:
        edit = self._edit(edit_id)
        if isinstance(edit, Err):
            return edit
        written = self._write(committed=edit.value, pending_id=None, pending=None)
        if isinstance(written, Err):
            return written
        del self._edits[edit_id]
        return Ok(None)

    def save_edit(self, edit_id: str) -> Result[None, PublisherError]:
        edit = self._edit(edit_id)
        if isinstance(edit, Err):
            return edit
        stored = self._load()
        if isinstance(stored, Err):
            return stored
        return self._write(committed=stored.value.committed, pending_id=edit_id, pending=edit.value)

    # Publisher

    def get_track(self, edit_id: str, track_name: str) -> Result[Track, PublisherError]:
        edit = self._edit(edit_id)
        if isinstance(edit, Err):
            return edit
        track = edit.value.tracks.get(track_name)
        if track is not None:
            return Ok(track)
        if track_name in STANDARD_TRACKS:
            return Ok(Track(name=track_name))
        return Err(
            PublisherError(
                kind="track_not_found",
                message=f"track '{track_name}' does not exist for app {self._app_id}",
                hint=f"Known tracks: {', '.join(self._known_tracks(edit.value))}",
            )
        )

    def list_tracks(self, edit_id: str) -> Result[list[Track], PublisherError]:
        edit = self._edit(edit_id)
        if isinstance(edit, Err):
            return edit
        return Ok(
            [
                edit.value.tracks.get(name, Track(name=name))
                for name in self._known_tracks(edit.value)
            ]
        )

    def update_track(self, edit_id: str, track: Track) -> Result[None, PublisherError]:
        edit = self._edit(edit_id)
        if isinstance(edit, Err):
            return edit
        edit.value.tracks[track.name] = track
        return Ok(None)

    def upload_binary(self, edit_id: str, file: Path) -> Result[UploadedArtifact, PublisherError]:
        edit = self._edit(edit_id)
        if isinstance(edit, Err):
            return edit

        code = read_version_code(file)
        if isinstance(code, Err):
            return Err(
                PublisherError(
                    kind="invalid_artifact",
                    message=code.error.message,
                    hint=code.error.hint,
                )
            )

        version_code = code.value
        if version_code in edit.value.artifacts:
            return Err(
                PublisherError(
                    kind="conflict",
                    reason="apkUpgradeVersionConflict",
                    message=f"version code {version_code} has already been used",
                )
            )
        edit.value.artifacts.add(version_code)
        return Ok(UploadedArtifact(version_code=version_code))

    # Internals

    def _known_tracks(self, edit: _EditState) -> list[str]:
        extra = sorted(name for name in edit.tracks if name not in STANDARD_TRACKS)
        return [*STANDARD_TRACKS, *extra]

    def _edit(self, edit_id: str) -> Result[_EditState, PublisherError]:
        edit = self._edits.get(edit_id)
        if edit is None:
            return Err(
                PublisherError(kind="edit_not_found", message=f"edit {edit_id} is not open")
            )
        return Ok(edit)

    def _load(self) -> Result[_StoredState, PublisherError]:
        if not self._path.exists():
            return Ok(_StoredState(committed=_EditState(), pending_id=None, pending=None))

        try:
            obj: object = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            return _state_error(self._path, f"failed to read state file: {e}")
        except json.JSONDecodeError as e:
            return _state_error(self._path, f"invalid JSON in state file: {e}")

        data = as_str_dict(obj)
        if data is None:
            return _state_error(self._path, "state file root must be a JSON object")

        schema = get_int(data, "schema")
        if schema != STATE_SCHEMA:
            return _state_error(self._path, f"unsupported state schema: {schema}")

        app_id = get_str(data, "appId")
        if app_id is not None and app_id != self._app_id:
            return _state_error(
                self._path, f"state file belongs to {app_id}, not {self._app_id}"
            )

        committed = _edit_from_json(data)
        if committed is None:
            return _state_error(self._path, "malformed tracks or artifacts in state file")

        pending_data = get_table(data, "pendingEdit")
        if pending_data is None:
            return Ok(_StoredState(committed=committed, pending_id=None, pending=None))

        pending_id = get_str(pending_data, "id")
        pending = _edit_from_json(pending_data)
        if pending_id is None or pending is None:
            return _state_error(self._path, "malformed pendingEdit in state file")
        return Ok(_StoredState(committed=committed, pending_id=pending_id, pending=pending))

    def _write(
        self,
        *,
        committed: _EditState,
        pending_id: str | None,
        pending: _EditState | None,
    ) -> Result[None, PublisherError]:
        payload: StrDict = {"schema": STATE_SCHEMA, "appId": self._app_id}
        payload.update(_edit_to_json(committed))
        if pending_id is not None and pending is not None:
            payload["pendingEdit"] = {"id": pending_id, **_edit_to_json(pending)}

        try:
            atomic_write_json(self._path, payload)
        except OSError as e:
            return _state_error(self._path, f"failed to write state file: {e}")
        return Ok(None)
