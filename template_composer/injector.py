"""Marker injection.

Locates a named insertion marker inside a target file and inserts a
feature-supplied fragment above it.  The marker line is re-emitted after the
fragment so it stays a stable anchor: several features targeting the same
marker stack their code in selection order.

Manifest files get a JSON-aware path for scripts-style markers, because a
comment line is not legal JSON.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path

from .config import ComposerConfig
from .errors import InjectionContractError
from .manifest import parse_manifest_text, strip_marker_lines
from .utils import dump_json, line_ending, read_text, write_text

MARKER_PATTERN = r"^\s*(?://|#)\s*INJECT:[A-Z_]+\s*$"
MARKER_RE = re.compile(MARKER_PATTERN)
_IDENTIFIER_RE = re.compile(r"INJECT:([A-Z_]+)")


def is_marker_line(line: str) -> bool:
    """Return ``True`` if *line* is an injection marker."""
    return MARKER_RE.match(line) is not None


def marker_identifier(marker: str) -> str:
    """Return the ``IDENTIFIER`` part of ``// INJECT:IDENTIFIER``, or ``""``."""
    match = _IDENTIFIER_RE.search(marker)
    return match.group(1) if match else ""


def is_scripts_marker(marker: str, config: ComposerConfig) -> bool:
    """Return ``True`` if *marker* denotes a manifest scripts injection."""
    return marker_identifier(marker).endswith(config.scripts_marker_suffix)


def insert_before_marker(content: str, marker: str, code: str) -> str | None:
    """Insert *code* above the first occurrence of *marker* in *content*.

    The marker is re-emitted on the following line with the indentation it
    originally had, separated by the line ending *content* already uses.
    Returns ``None`` when *marker* does not occur.
    """
    index = content.find(marker)
    if index < 0:
        return None
    line_start = content.rfind("\n", 0, index) + 1
    prefix = content[line_start:index]
    indent = prefix if not prefix.strip() else ""
    eol = line_ending(content)
    return f"{content[:index]}{code}{eol}{indent}{marker}{content[index + len(marker):]}"


def parse_object_interior(code: str) -> dict:
    """Parse a fragment such as ``"build": "tsc"`` as the interior of a JSON object.

    Raises:
        ValueError: If the fragment does not form a valid object interior.
    """
    try:
        value = json.loads("{" + code + "}")
    except json.JSONDecodeError as exc:
        raise ValueError(exc.msg) from exc
    if not isinstance(value, dict):
        raise ValueError("fragment does not form a JSON object")
    return value


def _merge_scripts(
    path: Path, raw: str, marker: str, code: str, feature: str
) -> None:
    manifest = parse_manifest_text(path, strip_marker_lines(raw, [marker]))
    try:
        scripts_to_add = parse_object_interior(code)
    except ValueError as exc:
        raise InjectionContractError(marker, code, str(exc), feature=feature, path=path) from exc
    manifest["scripts"] = {**(manifest.get("scripts") or {}), **scripts_to_add}
    write_text(path, dump_json(manifest))


def inject_sync(
    path: Path,
    marker: str,
    code: str,
    config: ComposerConfig,
    *,
    feature: str = "",
) -> bool:
    """Blocking implementation of :func:`inject`."""
    try:
        raw = read_text(path)
    except FileNotFoundError:
        # The file itself is feature-gated; create it with the marker as anchor.
        write_text(path, f"{marker}\n{code}\n")
        return True

    if config.is_manifest(path) and is_scripts_marker(marker, config):
        _merge_scripts(path, raw, marker, code, feature)
        return True

    updated = insert_before_marker(raw, marker, code)
    if updated is None:
        return False
    write_text(path, updated)
    return True


async def inject(
    path: str | Path,
    marker: str,
    code: str,
    config: ComposerConfig,
    *,
    feature: str = "",
) -> bool:
    """Inject *code* at *marker* inside *path*.

    Args:
        path: Target file.  Created (with parents) if it does not exist.
        marker: The exact marker string, e.g. ``// INJECT:ROUTES``.
        code: Fragment to insert.  For scripts markers in the manifest this is
            the interior of a JSON object literal.
        config: Active configuration.
        feature: Key of the feature requesting the injection, for error reports.

    Returns:
        ``True`` if the injection was applied, ``False`` if the marker was not
        found (the file is left untouched).

    Raises:
        InjectionContractError: If a scripts fragment is not valid JSON.
        ManifestError: If the manifest itself cannot be parsed.
        OSError: For any I/O failure other than a missing file.
    """
    return await asyncio.to_thread(inject_sync, Path(path), marker, code, config, feature=feature)
