"""Package manifest handling.

Reads and rewrites the project's JSON manifest (``package.json`` by default)
and merges feature-declared dependency maps into it.  The manifest is always
rewritten pretty-printed with a trailing newline, preserving key order and
every field the merge does not touch.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .config import ComposerConfig
from .errors import ManifestError
from .utils import dump_json, read_text, write_text


def strip_marker_lines(text: str, markers: Iterable[str]) -> str:
    """Remove every line of *text* that is exactly one of *markers*.

    Leading and trailing whitespace on the line is ignored.  All other lines,
    including their line endings, are kept verbatim.
    """
    wanted = {m.strip() for m in markers}
    return "".join(
        line for line in text.splitlines(keepends=True) if line.strip() not in wanted
    )


def parse_manifest_text(path: Path, text: str) -> dict[str, Any]:
    """Parse manifest *text* read from *path*, requiring a top-level object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ManifestError(path, "top-level value is not an object")
    return data


def read_manifest(path: Path) -> dict[str, Any]:
    """Read and parse the manifest at *path*.

    Raises:
        ManifestError: If the file is missing or not a JSON object.
    """
    try:
        text = read_text(path)
    except FileNotFoundError as exc:
        raise ManifestError(path, "file not found") from exc
    return parse_manifest_text(path, text)


def merge_dependency_maps(
    manifest: dict[str, Any],
    dependencies: Mapping[str, str],
    dev_dependencies: Mapping[str, str],
) -> dict[str, Any]:
    """Return a copy of *manifest* with both dependency maps shallow-merged in.

    ``dependencies`` is always (re)written; ``devDependencies`` only when
    there is something to add, so manifests without dev dependencies do not
    grow an empty section.
    """
    merged = dict(manifest)
    merged["dependencies"] = {**(manifest.get("dependencies") or {}), **dependencies}
    if dev_dependencies:
        merged["devDependencies"] = {
            **(manifest.get("devDependencies") or {}),
            **dev_dependencies,
        }
    return merged


def _merge_manifest_sync(
    path: Path,
    dependencies: Mapping[str, str],
    dev_dependencies: Mapping[str, str],
) -> dict[str, Any]:
    merged = merge_dependency_maps(read_manifest(path), dependencies, dev_dependencies)
    write_text(path, dump_json(merged))
    return merged


async def merge_manifest(
    target_dir: str | Path,
    dependencies: Mapping[str, str],
    dev_dependencies: Mapping[str, str],
    config: ComposerConfig,
) -> dict[str, Any]:
    """Merge dependency maps into the manifest under *target_dir*.

    Args:
        target_dir: Root of the materialised project.
        dependencies: Runtime dependencies, ``name -> version``.
        dev_dependencies: Build/dev dependencies, ``name -> version``.
        config: Active configuration (supplies the manifest file name).

    Returns:
        The manifest as written.

    Raises:
        ManifestError: If the manifest is missing or unparsable.  The base
            copy step guarantees its presence, so this is always fatal.
    """
    path = Path(target_dir) / config.manifest_name
    return await asyncio.to_thread(_merge_manifest_sync, path, dependencies, dev_dependencies)
