from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

from trackpub.core.result import Err, Ok, Result
from trackpub.output.console import ConsoleProtocol
from trackpub.publish.errors import AnyPublishError, PublishError, PublisherError
from trackpub.publish.model import (
    BaseConfig,
    PromoteConfig,
    ReleaseStatus,
    ResolutionStrategy,
    Track,
    UpdateConfig,
)
from trackpub.publish.publisher import Publisher
from trackpub.publish.tracks import TrackManager

__all__ = ["EditManager", "is_version_conflict"]

_CONFLICT_REASONS = frozenset(
    {
        "apkNotificationMessageKeyUpgradeVersionConflict",
        "apkUpgradeVersionConflict",
        "apkNoUpgradePath",
    }
)


def is_version_conflict(error: PublisherError) -> bool:
    """True when the service refused an upload because of its version code."""
    if error.reason in _CONFLICT_REASONS:
        return True
    if not error.has("forbidden"):
        return False
    # Bundle: "...specifies a version code that has already been used."
    # APK: "Cannot update a published APK."
    message = error.message.lower()
    return "version code" in message or "cannot update" in message


class EditManager:
    """Upload, publish and promote operations within one edit."""

    def __init__(
        self,
        *,
        publisher: Publisher,
        tracks: TrackManager,
        edit_id: str,
        console: ConsoleProtocol,
    ) -> None:
        self._publisher = publisher
        self._tracks = tracks
        self._edit_id = edit_id
        self._console = console

    def upload_artifact(
        self, file: Path, strategy: ResolutionStrategy
    ) -> Result[int | None, AnyPublishError]:
        """Upload ``file`` into the edit.

        Returns:
            Ok(version_code), Ok(None) when a version conflict is ignored, or
            Err. Errors other than version conflicts are returned unchanged.
        """
        uploaded = self._publisher.upload_binary(self._edit_id, file)
        if isinstance(uploaded, Ok):
            return Ok(uploaded.value.version_code)

        error = uploaded.error
        if not is_version_conflict(error):
            return uploaded
        return self._resolve_conflict(error, strategy, file)

    def publish_artifacts(
        self,
        *,
        version_codes: Sequence[int],
        did_previous_build_skip_commit: bool,
        track_name: str,
        release_status: ReleaseStatus | None = None,
        release_name: str | None = None,
        release_notes: Mapping[str, str] | None = None,
        user_fraction: float | None = None,
        update_priority: int | None = None,
        retainable_artifacts: Sequence[int] = (),
    ) -> Result[Track | None, AnyPublishError]:
        """Put ``version_codes`` on ``track_name``. Ok(None) when there is nothing to publish."""
        if not version_codes:
            return Ok(None)

        base = BaseConfig(
            release_status=release_status,
            user_fraction=user_fraction,
            update_priority=update_priority,
            release_notes=dict(release_notes or {}),
            retainable_artifacts=tuple(retainable_artifacts),
            release_name=release_name,
        )
        return self._tracks.update(
            UpdateConfig(
                track_name=track_name,
                version_codes=tuple(version_codes),
                did_previous_build_skip_commit=did_previous_build_skip_commit,
                base=base,
            )
        )

    def promote_release(
        self,
        *,
        promote_track_name: str,
        from_track_name: str,
        release_status: ReleaseStatus | None = None,
        release_name: str | None = None,
        release_notes: Mapping[str, str] | None = None,
        user_fraction: float | None = None,
        update_priority: int | None = None,
        retainable_artifacts: Sequence[int] = (),
        version_code: int | None = None,
    ) -> Result[Track, AnyPublishError]:
        base = BaseConfig(
            release_status=release_status,
            user_fraction=user_fraction,
            update_priority=update_priority,
            release_notes=dict(release_notes or {}),
            retainable_artifacts=tuple(retainable_artifacts),
            release_name=release_name,
        )
        return self._tracks.promote(
            PromoteConfig(
                promote_track_name=promote_track_name,
                from_track_name=from_track_name,
                version_code=version_code,
                base=base,
            )
        )

    def _resolve_conflict(
        self, error: PublisherError, strategy: ResolutionStrategy, file: Path
    ) -> Result[int | None, AnyPublishError]:
        app_id = self._publisher.app_id
        match strategy:
            case ResolutionStrategy.AUTO | ResolutionStrategy.AUTO_OFFSET:
                return Err(
                    PublishError(
                        kind="upload_conflict",
                        message=(
                            f"concurrent uploads for app {app_id} (version code already used) "
                            f"while uploading {file}"
                        ),
                        hint=(
                            "Upload artifacts one at a time so they don't conflict. If this "
                            "persists, delete the drafts in the artifact library."
                        ),
                    )
                )
            case ResolutionStrategy.FAIL:
                return Err(
                    PublishError(
                        kind="upload_conflict",
                        message=(
                            f"version code of {file} is too low or has already been used "
                            f"for app {app_id}"
                        ),
                        hint=error.message,
                    )
                )
            case ResolutionStrategy.IGNORE:
                self._console.warning(f"Ignoring artifact ({file}): {error.message}")
                return Ok(None)
