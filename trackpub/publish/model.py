from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from trackpub.core.config import MAX_UPDATE_PRIORITY


class ReleaseStatus(Enum):
    """Release status, valued by the name the distribution service publishes."""

    DRAFT = "draft"
    IN_PROGRESS = "inProgress"
    HALTED = "halted"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


class ResolutionStrategy(Enum):
    """What to do when an upload collides with an existing version code."""

    AUTO = "auto"
    AUTO_OFFSET = "auto_offset"
    FAIL = "fail"
    IGNORE = "ignore"

    def __str__(self) -> str:
        return self.value


ROLLOUT_STATUSES = frozenset({ReleaseStatus.IN_PROGRESS, ReleaseStatus.HALTED})


def is_rollout(status: ReleaseStatus | None) -> bool:
    return status in ROLLOUT_STATUSES


def _empty_notes() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class Release:
    """One publishable unit inside a track.

    ``status`` is None for a release that was never assigned one.
    ``user_fraction`` is only meaningful for rollout statuses.
    """

    version_codes: tuple[int, ...] = ()
    status: ReleaseStatus | None = None
    user_fraction: float | None = None
    release_notes: Mapping[str, str] = field(default_factory=_empty_notes)
    update_priority: int | None = None
    name: str | None = None

    @property
    def max_version_code(self) -> int | None:
        return max(self.version_codes) if self.version_codes else None


@dataclass(frozen=True, slots=True)
class Track:
    name: str
    releases: tuple[Release, ...] = ()

    @property
    def version_codes(self) -> tuple[int, ...]:
        return tuple(code for release in self.releases for code in release.version_codes)


@dataclass(frozen=True, slots=True)
class MergeDefaults:
    """Values the merge falls back to when neither the release nor the change-set has one."""

    status: ReleaseStatus = ReleaseStatus.COMPLETED
    user_fraction: float = 0.1


DEFAULT_MERGE_DEFAULTS = MergeDefaults()


@dataclass(frozen=True, slots=True)
class BaseConfig:
    """Change-set shared by update and promote.

    ``retainable_artifacts`` are version codes already on the service that must
    stay in the release next to the new ones.
    """

    release_status: ReleaseStatus | None = None
    user_fraction: float | None = None
    update_priority: int | None = None
    release_notes: Mapping[str, str] = field(default_factory=_empty_notes)
    retainable_artifacts: tuple[int, ...] = ()
    release_name: str | None = None


@dataclass(frozen=True, slots=True)
class UpdateConfig:
    track_name: str
    version_codes: tuple[int, ...]
    did_previous_build_skip_commit: bool
    base: BaseConfig


@dataclass(frozen=True, slots=True)
class PromoteConfig:
    promote_track_name: str
    from_track_name: str
    version_code: int | None
    base: BaseConfig


@dataclass(frozen=True, slots=True)
class UploadedArtifact:
    version_code: int


def change_set_problems(base: BaseConfig) -> list[str]:
    """Human-readable reasons ``base`` would be rejected by the service."""
    problems: list[str] = []
    if base.user_fraction is not None and not 0 < base.user_fraction <= 1:
        problems.append(f"user fraction must be in (0, 1]: {base.user_fraction}")
    if base.update_priority is not None and not 0 <= base.update_priority <= MAX_UPDATE_PRIORITY:
        problems.append(f"update priority must be 0..{MAX_UPDATE_PRIORITY}: {base.update_priority}")
    bad_codes = [code for code in base.retainable_artifacts if code <= 0]
    if bad_codes:
        problems.append(f"version codes must be positive: {', '.join(map(str, bad_codes))}")
    return problems
