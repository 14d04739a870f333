"""Tag build file written by the build for the tagged commit.

    {"name": "v1.4-release", "commitSha": "...", "buildVariant": "release",
     "buildVersion": "1.4", "buildNumber": 12, "message": "..."}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from trackpub.core.result import Err, Ok, Result
from trackpub.core.structured import as_str_dict, get_int, get_str
from trackpub.publish.errors import PublishError


@dataclass(frozen=True, slots=True)
class BuildTag:
    name: str
    commit_sha: str
    build_variant: str
    build_version: str
    build_number: int
    message: str | None = None

    @property
    def release_name(self) -> str:
        """Display name used for the release, e.g. ``v1.4-release(1.4.12)``."""
        return f"{self.name}({self.build_version}.{self.build_number})"


def _invalid(path: Path, message: str) -> Err[PublishError]:
    return Err(PublishError(kind="invalid_input", message=message, hint=str(path)))


def read_tag_file(path: Path) -> Result[BuildTag, PublishError]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return _invalid(path, f"failed to read tag file: {e}")

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return _invalid(path, f"invalid JSON in tag file: {e}")

    data = as_str_dict(obj)
    if data is None:
        return _invalid(path, "tag file root must be a JSON object")

    name = get_str(data, "name")
    if name is None:
        return _invalid(path, "name not found in tag file")
    commit_sha = get_str(data, "commitSha")
    if commit_sha is None:
        return _invalid(path, "commitSha not found in tag file")
    build_variant = get_str(data, "buildVariant")
    if build_variant is None:
        return _invalid(path, "buildVariant not found in tag file")
    build_version = get_str(data, "buildVersion")
    if build_version is None:
        return _invalid(path, "buildVersion not found in tag file")
    build_number = get_int(data, "buildNumber")
    if build_number is None:
        return _invalid(path, "buildNumber not found in tag file")

    return Ok(
        BuildTag(
            name=name,
            commit_sha=commit_sha,
            build_variant=build_variant,
            build_version=build_version,
            build_number=build_number,
            message=get_str(data, "message"),
        )
    )
