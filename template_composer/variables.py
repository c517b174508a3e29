"""Template variable substitution.

Replaces ``{{NAME}}`` placeholders with concrete values.  Only the names
supplied are touched; any other placeholder is left for the project author.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from pathlib import Path

from .utils import iter_files, read_text, write_text


def placeholder(name: str) -> str:
    """Return the placeholder token for *name*, e.g. ``{{PROJECT_NAME}}``."""
    return "{{" + name + "}}"


def render_variables(content: str, variables: Mapping[str, str]) -> str:
    """Replace every known placeholder in *content*."""
    for key, value in variables.items():
        content = content.replace(placeholder(key), str(value))
    return content


def substitute_sync(path: Path, variables: Mapping[str, str]) -> bool:
    """Blocking implementation of :func:`substitute`."""
    if not path.is_file():
        return False
    try:
        content = read_text(path)
    except (OSError, UnicodeDecodeError):
        # Binary or unreadable files are left as they are.
        return False
    rendered = render_variables(content, variables)
    if rendered == content:
        return False
    write_text(path, rendered)
    return True


async def substitute(path: str | Path, variables: Mapping[str, str]) -> bool:
    """Substitute *variables* inside one file.

    Directories, binary files and unreadable files are skipped silently.
    The file is only rewritten when at least one placeholder was replaced.

    Returns:
        ``True`` if the file was rewritten.
    """
    return await asyncio.to_thread(substitute_sync, Path(path), variables)


async def substitute_tree(
    root: str | Path,
    variables: Mapping[str, str],
    ignore_dirs: Iterable[str] = (),
) -> list[Path]:
    """Substitute *variables* in every file under *root*.

    Directories named in *ignore_dirs* (dependency caches, build output) are
    pruned.

    Returns:
        The files that were rewritten.
    """
    files = await asyncio.to_thread(lambda: list(iter_files(Path(root), tuple(ignore_dirs))))
    changed: list[Path] = []
    for path in files:
        if await substitute(path, variables):
            changed.append(path)
    return changed
