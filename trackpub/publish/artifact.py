"""Locating build artifacts and reading their version codes.

The build writes ``output-metadata.json`` next to its outputs:

    {"applicationId": "com.example.app",
     "elements": [{"outputFile": "app-release.aab", "versionCode": 42}]}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from trackpub.core.result import Err, Ok, Result
from trackpub.core.structured import as_str_dict, get_int, get_list, get_str
from trackpub.publish.errors import PublishError

ARTIFACT_SUFFIXES = (".aab", ".apk")
METADATA_FILE = "output-metadata.json"


@dataclass(frozen=True, slots=True)
class Artifact:
    path: Path


def locate_artifact(path: Path) -> Result[Artifact, PublishError]:
    """Resolve ``path`` (a file, or a build output directory) to one artifact.

    A directory must contain exactly one bundle, or else exactly one APK.
    """
    if path.is_file():
        if path.suffix not in ARTIFACT_SUFFIXES:
            return Err(
                PublishError(
                    kind="invalid_artifact",
                    message=f"{path} is not a bundle or APK",
                    hint="Expected a .aab or .apk file.",
                )
            )
        return Ok(Artifact(path=path))

    if not path.is_dir():
        return Err(PublishError(kind="invalid_artifact", message=f"artifact not found: {path}"))

    for suffix in ARTIFACT_SUFFIXES:
        found = sorted(path.glob(f"*{suffix}"))
        if len(found) > 1:
            names = ", ".join(p.name for p in found)
            return Err(
                PublishError(
                    kind="invalid_artifact",
                    message=f"several {suffix} files in {path}: {names}",
                    hint="Pass the file to publish explicitly.",
                )
            )
        if found:
            return Ok(Artifact(path=found[0]))

    return Err(
        PublishError(
            kind="invalid_artifact",
            message=f"no .aab or .apk file in {path}",
        )
    )


def read_version_code(artifact: Path) -> Result[int, PublishError]:
    """Version code of ``artifact`` according to the sibling output metadata."""
    metadata = artifact.parent / METADATA_FILE
    try:
        obj: object = json.loads(metadata.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(
            PublishError(
                kind="invalid_artifact",
                message=f"failed to read {METADATA_FILE}: {e}",
                hint=str(metadata),
            )
        )
    except json.JSONDecodeError as e:
        return Err(
            PublishError(
                kind="invalid_artifact",
                message=f"invalid JSON in {METADATA_FILE}: {e}",
                hint=str(metadata),
            )
        )

    data = as_str_dict(obj)
    elements = get_list(data, "elements") if data is not None else None
    if not elements:
        return Err(
            PublishError(
                kind="invalid_artifact",
                message=f"{METADATA_FILE} lists no elements",
                hint=str(metadata),
            )
        )

    fallback: int | None = None
    for item in elements:
        element = as_str_dict(item)
        if element is None:
            continue
        code = get_int(element, "versionCode")
        if code is None or code <= 0:
            continue
        if get_str(element, "outputFile") == artifact.name:
            return Ok(code)
        if fallback is None:
            fallback = code

    if fallback is None:
        return Err(
            PublishError(
                kind="invalid_artifact",
                message=f"no version code for {artifact.name} in {METADATA_FILE}",
                hint=str(metadata),
            )
        )
    return Ok(fallback)
