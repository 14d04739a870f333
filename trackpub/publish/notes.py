from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from trackpub.core.result import Err, Ok, Result
from trackpub.publish.errors import PublishError

# The service rejects "What's new" texts above this length.
MAX_NOTES_LENGTH = 500


def load_release_notes(
    *,
    inline: Mapping[str, str],
    files: Mapping[str, Path],
) -> Result[dict[str, str], PublishError]:
    """Build the locale -> text map for a release.

    Text read from ``files`` wins over ``inline`` for the same locale. Empty
    texts are dropped so they never erase notes carried over from an earlier
    release.
    """
    notes: dict[str, str] = {}
    for locale, text in inline.items():
        if text.strip():
            notes[locale] = text.strip()

    for locale, path in files.items():
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            return Err(
                PublishError(
                    kind="invalid_input",
                    message=f"failed to read release notes for {locale}: {e}",
                    hint=str(path),
                )
            )
        if text.strip():
            notes[locale] = text.strip()

    too_long = sorted(locale for locale, text in notes.items() if len(text) > MAX_NOTES_LENGTH)
    if too_long:
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"release notes longer than {MAX_NOTES_LENGTH} characters: "
                + ", ".join(too_long),
            )
        )

    return Ok(notes)
