"""Track reconciliation inside one open edit.

Every call fetches the track once, computes the next release list in memory
and writes it back once. Nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import replace

from trackpub.core.result import Err, Ok, Result
from trackpub.output.console import ConsoleProtocol, Style
from trackpub.publish.errors import AnyPublishError, PublishError
from trackpub.publish.merge import carry_forward_notes, merge_release, resolve_status
from trackpub.publish.model import (
    DEFAULT_MERGE_DEFAULTS,
    MergeDefaults,
    PromoteConfig,
    Release,
    ReleaseStatus,
    Track,
    UpdateConfig,
    is_rollout,
)
from trackpub.publish.publisher import Publisher

__all__ = ["TrackManager"]


class TrackManager:
    def __init__(
        self,
        *,
        publisher: Publisher,
        edit_id: str,
        console: ConsoleProtocol,
        defaults: MergeDefaults = DEFAULT_MERGE_DEFAULTS,
    ) -> None:
        self._publisher = publisher
        self._edit_id = edit_id
        self._console = console
        self._defaults = defaults

    def update(self, config: UpdateConfig) -> Result[Track, AnyPublishError]:
        """Fold ``config.version_codes`` into ``config.track_name`` and write it back.

        Returns the track as written.
        """
        fetched = self._publisher.get_track(self._edit_id, config.track_name)
        if isinstance(fetched, Err):
            return fetched
        track = fetched.value

        target = resolve_status(config.base, None, self._defaults)
        if config.did_previous_build_skip_commit:
            releases = self._releases_for_skipped_commit(track, config)
        elif is_rollout(target):
            releases = self._releases_for_rollout(track, config)
        else:
            releases = (self._fresh_release(track, config),)

        updated = replace(track, name=config.track_name, releases=releases)
        self._console.print(
            f"track {updated.name}: {len(updated.releases)} release(s), "
            f"version codes {', '.join(str(c) for c in config.version_codes)} as {target}",
            Style.DIM,
        )
        written = self._publisher.update_track(self._edit_id, updated)
        if isinstance(written, Err):
            return written
        return Ok(updated)

    def promote(self, config: PromoteConfig) -> Result[Track, AnyPublishError]:
        """Copy the releases of ``from_track_name`` onto ``promote_track_name``.

        When several releases end up with the same status only the one with the
        highest version code is kept; this is how an inProgress release turns
        into the single completed one.
        """
        fetched = self._publisher.get_track(self._edit_id, config.from_track_name)
        if isinstance(fetched, Err):
            return fetched
        track = fetched.value

        if not track.version_codes:
            return Err(
                PublishError(
                    kind="nothing_to_promote",
                    message=f"track '{config.from_track_name}' has no releases",
                    hint="Did you mean to run publish?",
                )
            )

        codes = [config.version_code] if config.version_code is not None else None
        merged = [
            merge_release(release, config.base, codes, self._defaults)
            for release in track.releases
        ]
        merged.sort(key=_max_code_or_lowest, reverse=True)

        kept: list[Release] = []
        seen: set[ReleaseStatus | None] = set()
        for release in merged:
            if release.status in seen:
                continue
            seen.add(release.status)
            kept.append(release)

        self._console.print(
            f"promoting release from track '{track.name}' to '{config.promote_track_name}'",
            Style.DIM,
        )
        promoted = Track(name=config.promote_track_name, releases=tuple(kept))
        written = self._publisher.update_track(self._edit_id, promoted)
        if isinstance(written, Err):
            return written
        return Ok(promoted)

    def _releases_for_skipped_commit(
        self, track: Track, config: UpdateConfig
    ) -> tuple[Release, ...]:
        if not track.releases:
            return (merge_release(Release(), config.base, config.version_codes, self._defaults),)

        target = resolve_status(config.base, None, self._defaults)
        for index, release in enumerate(track.releases):
            if release.status != target:
                continue
            accumulated = merge_release(
                release,
                config.base,
                release.version_codes + config.version_codes,
                self._defaults,
            )
            return track.releases[:index] + (accumulated,) + track.releases[index + 1 :]

        keep = track.releases
        if is_rollout(target):
            keep = tuple(r for r in keep if not is_rollout(r.status))
        return keep + (self._fresh_release(track, config),)

    def _releases_for_rollout(self, track: Track, config: UpdateConfig) -> tuple[Release, ...]:
        keep = tuple(r for r in track.releases if not is_rollout(r.status))
        return keep + (self._fresh_release(track, config),)

    def _fresh_release(self, track: Track, config: UpdateConfig) -> Release:
        release = merge_release(Release(), config.base, config.version_codes, self._defaults)
        return carry_forward_notes(release, track.releases)


def _max_code_or_lowest(release: Release) -> int:
    code = release.max_version_code
    return code if code is not None else -1
