from __future__ import annotations

from pathlib import Path

from trackpub.core.config import (
    DEFAULT_RESOLUTION,
    DEFAULT_TRACK,
    DEFAULT_USER_FRACTION,
    Config,
    load_config,
    load_config_or_default,
)
from trackpub.core.result import Err, Ok


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "trackpub.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    result = load_config_or_default(tmp_path / "trackpub.toml")
    assert result == Ok(Config())


def test_load_config_reports_missing_file(tmp_path: Path) -> None:
    result = load_config(tmp_path / "trackpub.toml")
    assert isinstance(result, Err)
    assert "not found" in result.error.message


def test_defaults() -> None:
    config = Config()
    assert config.publish.track == DEFAULT_TRACK
    assert config.publish.resolution == DEFAULT_RESOLUTION
    assert config.publish.update_priority is None
    assert config.rollout.user_fraction == DEFAULT_USER_FRACTION


def test_full_config(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[app]
id = "org.example.player"
state = "state/play.json"

[publish]
track = "beta"
resolution = "fail"
update_priority = 3

[rollout]
user_fraction = 0.25
""",
    )
    result = load_config(path)
    assert isinstance(result, Ok)
    config = result.value
    assert config.app.id == "org.example.player"
    assert config.app.state == "state/play.json"
    assert config.publish.track == "beta"
    assert config.publish.resolution == "fail"
    assert config.publish.update_priority == 3
    assert config.rollout.user_fraction == 0.25


def test_integer_fraction_is_accepted(tmp_path: Path) -> None:
    path = _write(tmp_path, "[rollout]\nuser_fraction = 1\n")
    result = load_config(path)
    assert isinstance(result, Ok)
    assert result.value.rollout.user_fraction == 1.0


def test_invalid_toml(tmp_path: Path) -> None:
    path = _write(tmp_path, "[publish\n")
    result = load_config_or_default(path)
    assert isinstance(result, Err)
    assert "Invalid TOML" in result.error.message
    assert result.error.path == path


def test_rejects_unknown_resolution(tmp_path: Path) -> None:
    path = _write(tmp_path, '[publish]\nresolution = "retry"\n')
    result = load_config(path)
    assert isinstance(result, Err)
    assert "publish.resolution" in result.error.message


def test_rejects_priority_out_of_range(tmp_path: Path) -> None:
    path = _write(tmp_path, "[publish]\nupdate_priority = 6\n")
    result = load_config(path)
    assert isinstance(result, Err)
    assert "update_priority" in result.error.message


def test_rejects_fraction_out_of_range(tmp_path: Path) -> None:
    path = _write(tmp_path, "[rollout]\nuser_fraction = 0\n")
    result = load_config(path)
    assert isinstance(result, Err)
    assert "user_fraction" in result.error.message
