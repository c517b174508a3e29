"""Source/target path resolution.

Guards against self-destructive runs (scaffolding into the template tree)
and against silently overwriting an existing project.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from .errors import InvalidProjectNameError, TargetNotEmptyError, TemplateRootError

CURRENT_DIR_SENTINEL = "."

_PACKAGE_NAME_RE = re.compile(r"^(@[a-z0-9-~][a-z0-9-._~]*/)?[a-z0-9-~][a-z0-9-._~]*$")


def ensure_outside_template_root(
    cwd: str | Path, template_root: str | Path, *other_roots: str | Path
) -> None:
    """Fail if *cwd* is *template_root* (or any of *other_roots*) or nested inside one.

    Raises:
        TemplateRootError: If the run would write into the engine's own tree.
    """
    here = Path(cwd).resolve()
    for candidate in (template_root, *other_roots):
        root = Path(candidate).resolve()
        if here.is_relative_to(root):
            raise TemplateRootError(here, root)


def validate_project_name(name: str) -> str:
    """Validate *name* as an npm package name or the current-directory sentinel.

    Returns:
        The name, stripped of surrounding whitespace.

    Raises:
        InvalidProjectNameError: If the name is empty or malformed.
    """
    stripped = name.strip() if name else ""
    if not stripped:
        raise InvalidProjectNameError(name, "project name cannot be empty")
    if stripped == CURRENT_DIR_SENTINEL:
        return stripped
    if not _PACKAGE_NAME_RE.match(stripped):
        raise InvalidProjectNameError(
            name,
            "must be lowercase, alphanumeric, hyphens, underscores, dots",
        )
    return stripped


def resolve_target(cwd: str | Path, project_name: str) -> tuple[Path, str]:
    """Resolve the target directory and effective project name.

    ``"."`` selects *cwd* itself and takes the project name from its
    basename; any other name becomes a new subdirectory of *cwd*.
    """
    name = validate_project_name(project_name)
    base = Path(cwd).resolve()
    if name == CURRENT_DIR_SENTINEL:
        return base, base.name
    return base / name, name


def _prepare_target_dir_sync(target_dir: Path) -> None:
    if not target_dir.exists():
        target_dir.mkdir(parents=True)
    elif not target_dir.is_dir() or any(target_dir.iterdir()):
        raise TargetNotEmptyError(target_dir)


async def prepare_target_dir(target_dir: str | Path) -> Path:
    """Ensure *target_dir* exists and is empty, creating it if needed.

    Applies to both new project names and the current-directory sentinel,
    and runs before anything is written.

    Raises:
        TargetNotEmptyError: If the directory exists and has any entries.
    """
    path = Path(target_dir)
    await asyncio.to_thread(_prepare_target_dir_sync, path)
    return path
