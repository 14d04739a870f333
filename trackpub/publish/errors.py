from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PublishErrorKind = Literal[
    "invalid_input",
    "invalid_artifact",
    "nothing_to_promote",
    "upload_conflict",
]

PublisherErrorKind = Literal[
    "conflict",
    "forbidden",
    "track_not_found",
    "edit_not_found",
    "invalid_artifact",
    "state_failed",
    "transport",
]


@dataclass(frozen=True, slots=True)
class PublishError:
    """Error raised by the reconciliation engine or the publish workflow."""

    kind: PublishErrorKind
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PublisherError:
    """Error reported by a publisher backend.

    ``reason`` is the vendor token (for example ``apkUpgradeVersionConflict``)
    used to classify upload conflicts. Unclassified errors are handed back to
    the caller untouched.
    """

    kind: PublisherErrorKind
    message: str
    reason: str | None = None
    hint: str | None = None

    def has(self, reason: str) -> bool:
        return self.reason == reason


type AnyPublishError = PublishError | PublisherError
