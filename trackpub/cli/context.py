from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from trackpub.core.config import CONFIG_FILE_NAME, Config, load_config_or_default
from trackpub.core.errors import ErrorCode
from trackpub.core.result import Err
from trackpub.output.console import ConsoleProtocol, RichConsole
from trackpub.publish.model import MergeDefaults
from trackpub.publish.state_publisher import StateFilePublisher

CONFIG_ENV = "TRACKPUB_CONFIG"
STATE_ENV = "TRACKPUB_STATE"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    config_path: Path
    backend: StateFilePublisher
    console: ConsoleProtocol

    @property
    def merge_defaults(self) -> MergeDefaults:
        return MergeDefaults(user_fraction=self.config.rollout.user_fraction)


def _resolve_state_path(config: Config, config_path: Path) -> Path:
    override = os.environ.get(STATE_ENV)
    if override:
        return Path(override).expanduser()
    state = Path(config.app.state).expanduser()
    if state.is_absolute():
        return state
    # Relative state paths are anchored at the config file.
    return config_path.resolve().parent / state


def build_context() -> CLIContext:
    config_path = Path(os.environ.get(CONFIG_ENV) or CONFIG_FILE_NAME).expanduser()
    loaded = load_config_or_default(config_path)
    if isinstance(loaded, Err):
        typer.echo(f"error: {loaded.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config = loaded.value
    backend = StateFilePublisher(
        path=_resolve_state_path(config, config_path),
        app_id=config.app.id,
    )
    return CLIContext(
        config=config,
        config_path=config_path,
        backend=backend,
        console=RichConsole(),
    )
