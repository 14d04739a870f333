"""Publishing bounded context.

- model: tracks, releases and change-sets
- merge: the release merge algorithm
- tracks: track reconciliation (update / promote) inside one edit
- edits: upload conflict handling on top of the track manager
- publisher: contracts for distribution backends
- state_publisher: JSON state file backend
- workflow: edit-scoped publish and promote flows
- artifact, tag_file, notes: inputs read from the build and the command line
- errors: error values for the engine and for backends
"""

from __future__ import annotations
