"""Result type used by every service instead of raised exceptions.

A service returns ``Ok(value)`` on success or ``Err(error)`` on failure and the
caller narrows with ``isinstance``:

    track = publisher.get_track(edit_id, "internal")
    if isinstance(track, Err):
        return track
    releases = track.value.releases
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
