"""Typed configuration loading.

``trackpub.toml`` is optional. Every value has a default so a bare checkout can
publish to the ``internal`` track straight away:

    [app]
    id = "com.example.app"
    state = ".trackpub/state.json"

    [publish]
    track = "internal"
    resolution = "ignore"
    update_priority = 0

    [rollout]
    user_fraction = 0.1
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "AppConfig",
    "Config",
    "ConfigError",
    "PublishConfig",
    "RolloutConfig",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILE_NAME",
    "DEFAULT_TRACK",
    "DEFAULT_RESOLUTION",
    "DEFAULT_USER_FRACTION",
]

CONFIG_FILE_NAME = "trackpub.toml"

DEFAULT_APP_ID = "com.example.app"
DEFAULT_STATE_PATH = ".trackpub/state.json"
DEFAULT_TRACK = "internal"
DEFAULT_RESOLUTION = "ignore"
DEFAULT_USER_FRACTION = 0.1

# Values of trackpub.publish.model.ResolutionStrategy; core cannot import publish.
RESOLUTION_NAMES = ("auto", "auto_offset", "fail", "ignore")
MAX_UPDATE_PRIORITY = 5


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class AppConfig:
    id: str = DEFAULT_APP_ID
    state: str = DEFAULT_STATE_PATH


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Defaults applied to ``trackpub publish`` when a flag is omitted."""

    track: str = DEFAULT_TRACK
    resolution: str = DEFAULT_RESOLUTION
    update_priority: int | None = None


@dataclass(frozen=True, slots=True)
class RolloutConfig:
    # Fraction given to a fresh rollout release when none was requested.
    user_fraction: float = DEFAULT_USER_FRACTION


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    app: AppConfig = field(default_factory=AppConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    rollout: RolloutConfig = field(default_factory=RolloutConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            ValueError: when a value is present but out of range.
        """
        app: StrDict = get_table(data, "app") or {}
        publish: StrDict = get_table(data, "publish") or {}
        rollout: StrDict = get_table(data, "rollout") or {}

        resolution = get_str(publish, "resolution") or DEFAULT_RESOLUTION
        if resolution not in RESOLUTION_NAMES:
            raise ValueError(
                f"publish.resolution must be one of {', '.join(RESOLUTION_NAMES)}: {resolution!r}"
            )

        priority = get_int(publish, "update_priority")
        if priority is not None and not 0 <= priority <= MAX_UPDATE_PRIORITY:
            raise ValueError(f"publish.update_priority must be 0..{MAX_UPDATE_PRIORITY}")

        fraction = get_float(rollout, "user_fraction")
        if fraction is None:
            fraction = DEFAULT_USER_FRACTION
        if not 0 < fraction <= 1:
            raise ValueError(f"rollout.user_fraction must be in (0, 1]: {fraction}")

        return cls(
            app=AppConfig(
                id=get_str(app, "id") or DEFAULT_APP_ID,
                state=get_str(app, "state") or DEFAULT_STATE_PATH,
            ),
            publish=PublishConfig(
                track=get_str(publish, "track") or DEFAULT_TRACK,
                resolution=resolution,
                update_priority=priority,
            ),
            rollout=RolloutConfig(user_fraction=fraction),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate ``trackpub.toml``.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like ``load_config`` but a missing file yields the defaults.

    A file that exists and is broken is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
