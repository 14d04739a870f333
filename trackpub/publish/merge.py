"""Release merge algorithm.

``merge_release`` folds a change-set into an existing release and returns a
new value. The steps run in a fixed order because later steps read what
earlier ones produced: the user fraction is decided from the already updated
status.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace

from trackpub.publish.model import (
    DEFAULT_MERGE_DEFAULTS,
    BaseConfig,
    MergeDefaults,
    Release,
    ReleaseStatus,
    is_rollout,
)

__all__ = [
    "merge_release",
    "resolve_status",
    "carry_forward_notes",
]


def resolve_status(
    change: BaseConfig,
    current: ReleaseStatus | None = None,
    defaults: MergeDefaults = DEFAULT_MERGE_DEFAULTS,
) -> ReleaseStatus:
    """Status a release ends up with after ``change`` is applied.

    Track branch selection calls this with ``current=None`` so the status it
    searches for is exactly the one a fresh merge would produce.
    """
    if change.release_status is not None:
        return change.release_status
    # A fraction only makes sense on an active rollout.
    if change.user_fraction is not None:
        return ReleaseStatus.IN_PROGRESS
    if current is not None:
        return current
    return defaults.status


def _merge_version_codes(
    existing: tuple[int, ...],
    version_codes: Sequence[int] | None,
    retainable: Iterable[int],
) -> tuple[int, ...]:
    base = tuple(version_codes) if version_codes is not None else existing
    return base + tuple(retainable)


def _merge_notes(existing: Mapping[str, str], new: Mapping[str, str]) -> dict[str, str]:
    merged = dict(new)
    for locale, text in existing.items():
        merged.setdefault(locale, text)
    return merged


def _merge_user_fraction(
    existing: float | None,
    requested: float | None,
    status: ReleaseStatus,
    defaults: MergeDefaults,
) -> float | None:
    if not is_rollout(status):
        return None
    if requested is not None:
        return requested
    if existing is None:
        return defaults.user_fraction
    return existing


def merge_release(
    existing: Release,
    change: BaseConfig,
    version_codes: Sequence[int] | None = None,
    defaults: MergeDefaults = DEFAULT_MERGE_DEFAULTS,
) -> Release:
    """Apply ``change`` to ``existing``.

    Args:
        existing: Release as fetched from the track (or ``Release()`` for a new one).
        change: Requested values. ``None`` fields leave the release untouched,
            except the user fraction which is cleared for non-rollout statuses.
        version_codes: Replaces the release's version codes when given.
        defaults: Fallback status and rollout fraction.

    Returns:
        A new Release; ``existing`` is not modified.
    """
    codes = _merge_version_codes(existing.version_codes, version_codes, change.retainable_artifacts)
    status = resolve_status(change, existing.status, defaults)
    name = change.release_name if change.release_name is not None else existing.name
    notes = _merge_notes(existing.release_notes, change.release_notes)
    fraction = _merge_user_fraction(existing.user_fraction, change.user_fraction, status, defaults)
    priority = (
        change.update_priority if change.update_priority is not None else existing.update_priority
    )

    return Release(
        version_codes=codes,
        status=status,
        user_fraction=fraction,
        release_notes=notes,
        update_priority=priority,
        name=name,
    )


def carry_forward_notes(release: Release, previous: Sequence[Release]) -> Release:
    """Give a release without notes the notes of the newest previous release.

    "Newest" is the release holding the highest version code; releases with no
    version codes rank lowest.
    """
    if release.release_notes or not previous:
        return release

    newest = max(previous, key=lambda r: r.max_version_code or 1)
    if not newest.release_notes:
        return release

    return replace(release, release_notes=dict(newest.release_notes))
