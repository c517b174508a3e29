"""Exception hierarchy for the template composition engine.

Every fatal condition raised by the engine derives from :class:`ComposeError`
so the CLI can report it uniformly.  Expected absences (an injection target
that lacks its marker, for instance) are *not* exceptions; components signal
them through their return values instead.
"""

from __future__ import annotations

from pathlib import Path


class ComposeError(Exception):
    """Base class for every error raised by the composition engine."""


# ---------------------------------------------------------------------------
# Fatal / configuration
# ---------------------------------------------------------------------------


class ConfigurationError(ComposeError):
    """Raised when the run cannot start because of how it was configured."""


class TemplateRootError(ConfigurationError):
    """Raised when the invocation directory is the template root or inside it."""

    def __init__(self, cwd: Path, template_root: Path) -> None:
        self.cwd = cwd
        self.template_root = template_root
        super().__init__(
            f"Cannot scaffold inside the template engine: {cwd} "
            f"is within {template_root}"
        )


class TargetNotEmptyError(ConfigurationError):
    """Raised when the target directory already contains files."""

    def __init__(self, target_dir: Path) -> None:
        self.target_dir = target_dir
        super().__init__(
            f'Directory "{target_dir}" is not empty. Please use an empty '
            f"directory or choose a different name."
        )


class InvalidProjectNameError(ConfigurationError):
    """Raised when a project name is empty or not a valid package name."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Invalid project name {name!r}: {reason}")


class RegistryError(ConfigurationError):
    """Raised when the feature registry is missing, malformed, or queried for an unknown key."""


# ---------------------------------------------------------------------------
# Fatal / data contract
# ---------------------------------------------------------------------------


class InjectionContractError(ComposeError):
    """Raised when a scripts injection fragment is not a valid object interior."""

    def __init__(
        self,
        marker: str,
        code: str,
        reason: str,
        *,
        feature: str = "",
        path: Path | None = None,
    ) -> None:
        self.marker = marker
        self.code = code
        self.reason = reason
        self.feature = feature
        self.path = path
        where = f" (feature {feature!r})" if feature else ""
        super().__init__(
            f"Failed to parse injection code for {path.name if path else 'manifest'}"
            f"{where}: {reason}. Code: {code}"
        )


class ManifestError(ComposeError):
    """Raised when the package manifest is missing or cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Error updating {path.name}: {reason}")
