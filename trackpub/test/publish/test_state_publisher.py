from __future__ import annotations

import json
from pathlib import Path

from trackpub.core.result import Err, Ok
from trackpub.publish.artifact import METADATA_FILE
from trackpub.publish.edits import is_version_conflict
from trackpub.publish.model import Release, ReleaseStatus, Track
from trackpub.publish.state_publisher import StateFilePublisher

APP_ID = "com.example.app"


def _artifact(directory: Path, version_code: int) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    artifact = directory / "app-release.aab"
    artifact.write_bytes(b"bundle")
    (directory / METADATA_FILE).write_text(
        json.dumps({"elements": [{"outputFile": artifact.name, "versionCode": version_code}]}),
        encoding="utf-8",
    )
    return artifact


def _open(publisher: StateFilePublisher) -> str:
    edit = publisher.insert_edit()
    assert isinstance(edit, Ok)
    return edit.value


def test_missing_state_file_starts_empty(tmp_path: Path) -> None:
    publisher = StateFilePublisher(path=tmp_path / "state.json", app_id=APP_ID)
    edit_id = _open(publisher)

    track = publisher.get_track(edit_id, "production")

    assert track == Ok(Track(name="production"))
    assert publisher.pending_edit() is None


def test_unknown_track(tmp_path: Path) -> None:
    publisher = StateFilePublisher(path=tmp_path / "state.json", app_id=APP_ID)
    edit_id = _open(publisher)

    result = publisher.get_track(edit_id, "qa")

    assert isinstance(result, Err)
    assert result.error.kind == "track_not_found"
    assert result.error.hint is not None and "internal" in result.error.hint


def test_commit_persists_tracks_in_wire_format(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    publisher = StateFilePublisher(path=path, app_id=APP_ID)
    edit_id = _open(publisher)
    release = Release(
        version_codes=(42,),
        status=ReleaseStatus.IN_PROGRESS,
        user_fraction=0.1,
        release_notes={"en-US": "Bug fixes"},
        name="v1",
    )
    publisher.update_track(edit_id, Track(name="beta", releases=(release,)))

    assert publisher.commit_edit(edit_id) == Ok(None)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["appId"] == APP_ID
    assert data["tracks"] == [
        {
            "track": "beta",
            "releases": [
                {
                    "versionCodes": ["42"],
                    "status": "inProgress",
                    "name": "v1",
                    "userFraction": 0.1,
                    "releaseNotes": [{"language": "en-US", "text": "Bug fixes"}],
                }
            ],
        }
    ]

    reloaded = StateFilePublisher(path=path, app_id=APP_ID)
    assert reloaded.get_track(_open(reloaded), "beta") == Ok(Track(name="beta", releases=(release,)))


def test_uncommitted_edit_is_discarded(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    publisher = StateFilePublisher(path=path, app_id=APP_ID)
    edit_id = _open(publisher)
    publisher.update_track(edit_id, Track(name="alpha", releases=(Release(version_codes=(1,)),)))

    assert not path.exists()
    other = _open(publisher)
    assert publisher.get_track(other, "alpha") == Ok(Track(name="alpha"))


def test_upload_records_version_code(tmp_path: Path) -> None:
    publisher = StateFilePublisher(path=tmp_path / "state.json", app_id=APP_ID)
    edit_id = _open(publisher)

    uploaded = publisher.upload_binary(edit_id, _artifact(tmp_path / "out", 42))

    assert isinstance(uploaded, Ok)
    assert uploaded.value.version_code == 42


def test_reused_version_code_is_a_conflict(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    artifact = _artifact(tmp_path / "out", 42)
    publisher = StateFilePublisher(path=path, app_id=APP_ID)
    edit_id = _open(publisher)
    publisher.upload_binary(edit_id, artifact)
    publisher.commit_edit(edit_id)

    second = _open(publisher)
    result = publisher.upload_binary(second, artifact)

    assert isinstance(result, Err)
    assert result.error.reason == "apkUpgradeVersionConflict"
    assert is_version_conflict(result.error)


def test_upload_without_metadata(tmp_path: Path) -> None:
    publisher = StateFilePublisher(path=tmp_path / "state.json", app_id=APP_ID)
    edit_id = _open(publisher)
    artifact = tmp_path / "app.aab"
    artifact.write_bytes(b"bundle")

    result = publisher.upload_binary(edit_id, artifact)

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_artifact"


def test_saved_edit_is_resumed(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    publisher = StateFilePublisher(path=path, app_id=APP_ID)
    edit_id = _open(publisher)
    publisher.update_track(edit_id, Track(name="internal", releases=(Release(version_codes=(5,)),)))
    assert publisher.save_edit(edit_id) == Ok(None)

    resumed = StateFilePublisher(path=path, app_id=APP_ID)
    assert resumed.pending_edit() == edit_id
    track = resumed.get_track(edit_id, "internal")
    assert isinstance(track, Ok)
    assert track.value.version_codes == (5,)

    # Committed state is unchanged until the resumed edit is committed.
    fresh = _open(resumed)
    assert resumed.get_track(fresh, "internal") == Ok(Track(name="internal"))

    assert resumed.commit_edit(edit_id) == Ok(None)
    assert resumed.pending_edit() is None
    assert "pendingEdit" not in json.loads(path.read_text(encoding="utf-8"))


def test_unknown_edit(tmp_path: Path) -> None:
    publisher = StateFilePublisher(path=tmp_path / "state.json", app_id=APP_ID)

    result = publisher.get_track("missing", "internal")

    assert isinstance(result, Err)
    assert result.error.kind == "edit_not_found"


def test_state_for_other_app_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"schema": 1, "appId": "org.other"}), encoding="utf-8")

    result = StateFilePublisher(path=path, app_id=APP_ID).insert_edit()

    assert isinstance(result, Err)
    assert result.error.kind == "state_failed"
    assert "org.other" in result.error.message


def test_malformed_state(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[]", encoding="utf-8")

    result = StateFilePublisher(path=path, app_id=APP_ID).insert_edit()

    assert isinstance(result, Err)
    assert result.error.hint == str(path)


def test_unsupported_schema(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"schema": 99}), encoding="utf-8")

    result = StateFilePublisher(path=path, app_id=APP_ID).insert_edit()

    assert isinstance(result, Err)
    assert "schema" in result.error.message


def test_notes_and_name_round_trip_verbatim(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    publisher = StateFilePublisher(path=path, app_id=APP_ID)
    edit_id = _open(publisher)
    release = Release(
        version_codes=(42,),
        status=ReleaseStatus.COMPLETED,
        release_notes={"en-US": "  - Bug fixes\n  - Faster sync\n"},
        name=" v1 ",
    )
    publisher.update_track(edit_id, Track(name="internal", releases=(release,)))
    publisher.commit_edit(edit_id)

    reloaded = StateFilePublisher(path=path, app_id=APP_ID)
    track = reloaded.get_track(_open(reloaded), "internal")

    assert track == Ok(Track(name="internal", releases=(release,)))
