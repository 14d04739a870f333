from __future__ import annotations

from pathlib import Path

import pytest
import typer

from trackpub.cli.context import CONFIG_ENV, STATE_ENV, build_context
from trackpub.core.errors import ErrorCode


def test_defaults_without_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "trackpub.toml"))
    monkeypatch.delenv(STATE_ENV, raising=False)

    ctx = build_context()

    assert ctx.config.publish.track == "internal"
    assert ctx.backend.path == tmp_path.resolve() / ".trackpub" / "state.json"
    assert ctx.merge_defaults.user_fraction == 0.1


def test_state_path_is_relative_to_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "conf" / "trackpub.toml"
    config.parent.mkdir()
    config.write_text(
        '[app]\nid = "org.example"\nstate = "play.json"\n[rollout]\nuser_fraction = 0.5\n',
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_ENV, str(config))
    monkeypatch.delenv(STATE_ENV, raising=False)

    ctx = build_context()

    assert ctx.backend.app_id == "org.example"
    assert ctx.backend.path == config.parent.resolve() / "play.json"
    assert ctx.merge_defaults.user_fraction == 0.5


def test_state_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "trackpub.toml"))
    monkeypatch.setenv(STATE_ENV, str(tmp_path / "elsewhere.json"))

    assert build_context().backend.path == tmp_path / "elsewhere.json"


def test_broken_config_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "trackpub.toml"
    config.write_text("[publish\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV, str(config))

    with pytest.raises(typer.Exit) as exc:
        build_context()

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
