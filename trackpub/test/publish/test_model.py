from __future__ import annotations

from trackpub.core.config import RESOLUTION_NAMES
from trackpub.publish.model import (
    BaseConfig,
    Release,
    ReleaseStatus,
    ResolutionStrategy,
    Track,
    change_set_problems,
    is_rollout,
)


def test_rollout_statuses() -> None:
    assert is_rollout(ReleaseStatus.IN_PROGRESS)
    assert is_rollout(ReleaseStatus.HALTED)
    assert not is_rollout(ReleaseStatus.COMPLETED)
    assert not is_rollout(ReleaseStatus.DRAFT)
    assert not is_rollout(None)


def test_status_wire_names() -> None:
    assert ReleaseStatus("inProgress") is ReleaseStatus.IN_PROGRESS
    assert str(ReleaseStatus.HALTED) == "halted"


def test_max_version_code() -> None:
    assert Release(version_codes=(3, 9, 4)).max_version_code == 9
    assert Release().max_version_code is None


def test_track_version_codes_flatten_releases() -> None:
    track = Track(
        name="beta",
        releases=(Release(version_codes=(1, 2)), Release(version_codes=(3,))),
    )
    assert track.version_codes == (1, 2, 3)


def test_change_set_problems() -> None:
    assert change_set_problems(BaseConfig()) == []
    problems = change_set_problems(
        BaseConfig(user_fraction=1.5, update_priority=6, retainable_artifacts=(0, 4))
    )
    assert len(problems) == 3
    assert "user fraction" in problems[0]
    assert "update priority" in problems[1]
    assert "0" in problems[2]


def test_config_resolution_names_match_strategies() -> None:
    assert RESOLUTION_NAMES == tuple(s.value for s in ResolutionStrategy)


def test_priority_bound_is_inclusive() -> None:
    assert change_set_problems(BaseConfig(update_priority=5)) == []
    assert change_set_problems(BaseConfig(update_priority=0)) == []
    assert len(change_set_problems(BaseConfig(update_priority=-1))) == 1
