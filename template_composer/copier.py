"""Tree copying and module file selection.

``copy_tree`` mirrors the base template into the target with coarse
substring-based exclusion.  ``select_module_files`` copies the files a
feature declares by glob pattern, re-rooting them under the target's source
subtree.
"""

from __future__ import annotations

import asyncio
import glob
import os
import re
import shutil
from collections.abc import Iterable
from pathlib import Path

_BRACE_RE = re.compile(r"\{([^{}]*,[^{}]*)\}")


def _copy_tree_sync(src: Path, dest: Path, excludes: tuple[str, ...], copied: list[Path]) -> None:
    dest.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        if any(pattern in str(entry) for pattern in excludes):
            continue
        target = dest / entry.name
        if entry.is_dir():
            _copy_tree_sync(entry, target, excludes, copied)
        else:
            shutil.copy2(entry, target)
            copied.append(target)


async def copy_tree(
    src: str | Path,
    dest: str | Path,
    exclude: Iterable[str] | None = None,
) -> list[Path]:
    """Recursively mirror *src* into *dest*.

    Existing content in *dest* is merged with, not replaced; files with the
    same relative path are overwritten.  A path is skipped (with everything
    beneath it) when any entry of *exclude* is a substring of its full source
    path.

    Returns:
        The destination paths of every copied file.
    """
    copied: list[Path] = []
    await asyncio.to_thread(
        _copy_tree_sync, Path(src), Path(dest), tuple(exclude or ()), copied
    )
    return copied


# ---------------------------------------------------------------------------
# Module file selection
# ---------------------------------------------------------------------------


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` groups in a glob pattern.

    ``"src/*.{ts,js}"`` becomes ``["src/*.ts", "src/*.js"]``.  Groups nest
    and combine.  Only groups with a comma are expanded: ``{a}`` stays a
    literal, and a pattern without such a group is returned unchanged.
    """
    match = _BRACE_RE.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end():]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        for candidate in expand_braces(head + option + tail):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def match_module_paths(module_root: Path, patterns: Iterable[str]) -> list[Path]:
    """Return the union of every existing path under *module_root* matching *patterns*."""
    matches: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        for expanded in expand_braces(pattern):
            full = os.path.join(glob.escape(str(module_root)), expanded)
            for hit in sorted(glob.glob(full, recursive=True)):
                path = Path(hit)
                # Before 3.12, "missing/**" yields "missing/" itself.
                if not path.exists():
                    continue
                if path not in seen:
                    seen.add(path)
                    matches.append(path)
    return matches


def _select_module_files_sync(
    module_root: Path, target_root: Path, patterns: list[str], subdir: str
) -> list[Path]:
    written: list[Path] = []
    for match in match_module_paths(module_root, patterns):
        dest = target_root / subdir / match.relative_to(module_root)
        if match.is_dir():
            dest.mkdir(parents=True, exist_ok=True)
        else:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(match, dest)
        written.append(dest)
    return written


async def select_module_files(
    module_root: str | Path,
    target_root: str | Path,
    patterns: Iterable[str],
    subdir: str = "src",
) -> list[Path]:
    """Copy files matching *patterns* from *module_root* into the target.

    Each pattern (``*``, ``**`` and ``{a,b}`` groups) is resolved relative to
    *module_root*; every match keeps its relative path but is re-rooted under
    ``target_root / subdir``.  Matched directories are created empty, matched
    files are copied.  Matches are unioned across patterns and copying is
    overwrite-safe, so duplicates are harmless.

    Returns:
        Destination paths of every created directory and copied file.
    """
    return await asyncio.to_thread(
        _select_module_files_sync, Path(module_root), Path(target_root), list(patterns), subdir
    )
