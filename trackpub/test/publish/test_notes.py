from __future__ import annotations

from pathlib import Path

from trackpub.core.result import Err, Ok
from trackpub.publish.notes import MAX_NOTES_LENGTH, load_release_notes


def test_inline_notes_are_stripped_and_empty_dropped() -> None:
    result = load_release_notes(inline={"en-US": " Bug fixes \n", "fr-FR": "  "}, files={})
    assert result == Ok({"en-US": "Bug fixes"})


def test_files_override_inline(tmp_path: Path) -> None:
    notes = tmp_path / "en-US.txt"
    notes.write_text("From file\n", encoding="utf-8")

    result = load_release_notes(inline={"en-US": "inline"}, files={"en-US": notes})

    assert result == Ok({"en-US": "From file"})


def test_unreadable_file(tmp_path: Path) -> None:
    result = load_release_notes(inline={}, files={"en-US": tmp_path / "missing.txt"})

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
    assert "en-US" in result.error.message


def test_too_long() -> None:
    result = load_release_notes(inline={"de-DE": "x" * (MAX_NOTES_LENGTH + 1)}, files={})

    assert isinstance(result, Err)
    assert "de-DE" in result.error.message
