"""Template composer configuration.

A single, immutable configuration value built once at process start and
threaded through every component call.  Settings use a frozen Pydantic v2
model so they are validated at construction time and can never drift while a
composition run owns the target tree.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_ENGINE_ROOT = Path(__file__).parent
_DEFAULT_TEMPLATE_ROOT = _ENGINE_ROOT / "templates"


class ComposerConfig(BaseModel):
    """Global composition engine configuration.

    Holds the template root, the names of the well-known files and
    directories beneath it, and the file-selection policies used by variable
    substitution and marker cleanup.
    """

    model_config = ConfigDict(frozen=True)

    template_root: Path = Field(default=_DEFAULT_TEMPLATE_ROOT)
    engine_root: Path = Field(
        default=_ENGINE_ROOT,
        description="Installed engine package; runs from inside it are refused",
    )
    base_dir_name: str = Field(default="base")
    modules_dir_name: str = Field(default="modules")
    registry_file_name: str = Field(default="features-config.json")

    module_subdir: str = Field(
        default="src", description="Target subtree that module files are re-rooted under"
    )
    manifest_name: str = Field(default="package.json")
    scripts_marker_suffix: str = Field(
        default="_SCRIPTS",
        description="Marker identifiers ending with this suffix merge into the manifest scripts",
    )

    copy_excludes: tuple[str, ...] = Field(default=())
    substitution_ignore_dirs: tuple[str, ...] = Field(default=("node_modules", "dist", "build"))
    cleanup_ignore_dirs: tuple[str, ...] = Field(default=("node_modules",))
    cleanup_suffixes: tuple[str, ...] = Field(default=(".ts", ".js", ".json"))
    reserved_files: tuple[str, ...] = Field(
        default=(".env.example",),
        description="File names whose markers survive cleanup for future runs",
    )

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def base_template_dir(self) -> Path:
        """The always-copied project skeleton."""
        return self.template_root / self.base_dir_name

    @property
    def modules_dir(self) -> Path:
        """Library of per-feature module files."""
        return self.template_root / self.modules_dir_name

    @property
    def registry_path(self) -> Path:
        """Path to the feature registry JSON document."""
        return self.template_root / self.registry_file_name

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, **overrides: Any) -> "ComposerConfig":
        """Build a ``ComposerConfig`` from environment variables.

        Recognised variables (all optional):
            COMPOSER_TEMPLATE_ROOT, COMPOSER_MODULE_SUBDIR,
            COMPOSER_MANIFEST_NAME, COMPOSER_COPY_EXCLUDES (comma separated).

        Keyword *overrides* win over the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("COMPOSER_TEMPLATE_ROOT"):
            kwargs["template_root"] = Path(os.environ["COMPOSER_TEMPLATE_ROOT"])
        if os.environ.get("COMPOSER_MODULE_SUBDIR"):
            kwargs["module_subdir"] = os.environ["COMPOSER_MODULE_SUBDIR"]
        if os.environ.get("COMPOSER_MANIFEST_NAME"):
            kwargs["manifest_name"] = os.environ["COMPOSER_MANIFEST_NAME"]
        if os.environ.get("COMPOSER_COPY_EXCLUDES"):
            kwargs["copy_excludes"] = tuple(
                part.strip()
                for part in os.environ["COMPOSER_COPY_EXCLUDES"].split(",")
                if part.strip()
            )
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # Policy helpers
    # ------------------------------------------------------------------

    def is_manifest(self, path: Path) -> bool:
        """Return ``True`` if *path* names the package manifest."""
        return path.name == self.manifest_name

    def is_reserved(self, path: Path) -> bool:
        """Return ``True`` if *path* must keep its markers across runs."""
        return any(path.name.endswith(name) for name in self.reserved_files)

    def is_cleanup_candidate(self, path: Path) -> bool:
        """Return ``True`` if *path* is a text-like file that may carry markers."""
        return path.suffix in self.cleanup_suffixes or ".env" in path.name
