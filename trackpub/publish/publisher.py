"""Contracts the reconciliation engine needs from a distribution backend.

The engine reads and writes tracks and uploads binaries through ``Publisher``;
the publish workflow additionally opens and commits edits through
``EditLifecycle``. Serialization to the vendor wire format lives entirely in
the implementations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from trackpub.core.result import Result
from trackpub.publish.errors import PublisherError
from trackpub.publish.model import Track, UploadedArtifact

__all__ = ["EditLifecycle", "Publisher", "PublishBackend"]


class Publisher(Protocol):
    @property
    def app_id(self) -> str: ...

    def get_track(self, edit_id: str, track_name: str) -> Result[Track, PublisherError]:
        """Current state of ``track_name`` inside the edit.

        Fails with ``track_not_found`` for a track the service does not know.
        """
        ...

    def update_track(self, edit_id: str, track: Track) -> Result[None, PublisherError]:
        """Replace the track's releases inside the edit."""
        ...

    def upload_binary(self, edit_id: str, file: Path) -> Result[UploadedArtifact, PublisherError]:
        """Upload ``file`` and return the version code the service assigned.

        Version code collisions come back as ``PublisherError`` with a
        ``reason`` token.
        """
        ...


class EditLifecycle(Protocol):
    def insert_edit(self) -> Result[str, PublisherError]: ...

    def pending_edit(self) -> str | None:
        """Id of an edit saved by a previous run without committing, if any."""
        ...

    def commit_edit(self, edit_id: str) -> Result[None, PublisherError]: ...

    def save_edit(self, edit_id: str) -> Result[None, PublisherError]:
        """Keep the edit open for a later run instead of committing it."""
        ...


class PublishBackend(Publisher, EditLifecycle, Protocol):
    """A publisher that also manages its own edits."""
