"""Residual marker cleanup.

After every feature has been applied, marker lines that served as injection
anchors are removed from the project.  Only markers that were actually
applied during this run are eligible; reserved files (``.env.example`` by
default) keep theirs so a later run can inject into them again.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .config import ComposerConfig
from .manifest import strip_marker_lines
from .utils import dump_json, iter_files, read_text, write_text


@dataclass
class CleanupReport:
    """Outcome of a cleanup pass."""

    cleaned: list[Path] = field(default_factory=list)
    unparsed_manifests: list[Path] = field(default_factory=list)


def clean_text(content: str, markers: Iterable[str], *, as_json: bool = False) -> tuple[str, bool]:
    """Strip marker lines from *content*.

    With *as_json*, a stripped result that parses is re-serialised so the
    manifest stays canonical; otherwise the textually stripped content is
    kept.

    Returns:
        ``(new_content, reparsed)``; *reparsed* is ``False`` only when
        *as_json* was requested and parsing failed.
    """
    stripped = strip_marker_lines(content, markers)
    if not as_json:
        return stripped, True
    try:
        return dump_json(json.loads(stripped)), True
    except json.JSONDecodeError:
        return stripped, False


def _cleanup_sync(root: Path, markers: list[str], config: ComposerConfig) -> CleanupReport:
    report = CleanupReport()
    wanted = {m.strip() for m in markers}
    for path in iter_files(root, config.cleanup_ignore_dirs):
        if not config.is_cleanup_candidate(path) or config.is_reserved(path):
            continue
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError):
            continue
        if not any(line.strip() in wanted for line in content.splitlines()):
            continue
        cleaned, reparsed = clean_text(content, markers, as_json=config.is_manifest(path))
        write_text(path, cleaned)
        report.cleaned.append(path)
        if not reparsed:
            report.unparsed_manifests.append(path)
    return report


async def cleanup(
    target_dir: str | Path,
    applied_markers: Iterable[str],
    config: ComposerConfig,
) -> CleanupReport:
    """Remove applied marker lines from every eligible file under *target_dir*.

    Args:
        target_dir: Root of the materialised project.
        applied_markers: Markers matched by at least one injection this run.
        config: Supplies the eligible suffixes, ignored directories and
            reserved file names.

    Returns:
        A :class:`CleanupReport` listing rewritten files and any manifest that
        no longer parsed after stripping (those are written textually).
    """
    markers = list(applied_markers)
    if not markers:
        return CleanupReport()
    return await asyncio.to_thread(_cleanup_sync, Path(target_dir), markers, config)
