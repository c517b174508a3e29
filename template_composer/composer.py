"""Composition driver.

Runs one composition in a fixed order against a target tree it owns
exclusively:

1. copy the base template,
2. substitute template variables,
3. for each selected feature: copy its module files, collect its
   dependencies, apply its injections,
4. merge the collected dependencies into the manifest,
5. strip the markers that were applied.

Steps are awaited one after another; nothing touches the target tree
concurrently.  A failed run is not rolled back, so the target may be left
partially materialised.

Usage::

    config = ComposerConfig()
    composer = Composer(config)
    result = await composer.scaffold(Path.cwd(), "my-api", FeatureSelection(features=["workers"]))
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field
from rich.console import Console

from .cleanup import cleanup
from .config import ComposerConfig
from .copier import copy_tree, select_module_files
from .injector import inject
from .manifest import merge_manifest
from .paths import ensure_outside_template_root, prepare_target_dir, resolve_target
from .registry import FeatureDescriptor, FeatureRegistry, FeatureSelection
from .utils import console as default_console
from .utils import print_step, print_success, print_warning
from .variables import substitute_tree


class SkippedInjection(BaseModel):
    """An injection whose marker was not present in its target file."""

    feature: str
    target_file: str
    marker: str


class CompositionResult(BaseModel):
    """Everything a composition run produced."""

    target_dir: Path
    project_name: str
    features: list[str] = Field(default_factory=list)
    copied_files: list[Path] = Field(default_factory=list)
    substituted_files: list[Path] = Field(default_factory=list)
    module_files: list[Path] = Field(default_factory=list)
    applied_markers: list[str] = Field(default_factory=list)
    skipped_injections: list[SkippedInjection] = Field(default_factory=list)
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict)
    cleaned_files: list[Path] = Field(default_factory=list)


class Composer:
    """Drives a composition run from a registry and a feature selection.

    Attributes:
        config: Immutable engine configuration.
        console: Rich console that receives progress output.
    """

    def __init__(
        self,
        config: ComposerConfig,
        registry: FeatureRegistry | None = None,
        console: Console | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.console = console or default_console

    # -- Public API --------------------------------------------------------

    async def load_registry(self) -> FeatureRegistry:
        """Load the registry from the configured template root once per composer."""
        if self.registry is None:
            self.registry = await FeatureRegistry.load(self.config.registry_path)
        return self.registry

    async def scaffold(
        self,
        cwd: str | Path,
        project_name: str,
        selection: FeatureSelection,
        variables: Mapping[str, str] | None = None,
    ) -> CompositionResult:
        """Validate the invocation, prepare the target directory and compose.

        Every check (template root, project name, registry, feature keys,
        empty target) runs before anything is written.

        Raises:
            TemplateRootError: If *cwd* is inside the template root or the
                engine package.
            InvalidProjectNameError: If *project_name* is malformed.
            RegistryError: If the registry or a selected key is invalid.
            TargetNotEmptyError: If the target directory has any entries.
        """
        ensure_outside_template_root(cwd, self.config.template_root, self.config.engine_root)
        target_dir, name = resolve_target(cwd, project_name)
        registry = await self.load_registry()
        registry.resolve(selection.features)
        await prepare_target_dir(target_dir)
        return await self.compose(target_dir, name, selection, variables)

    async def compose(
        self,
        target_dir: str | Path,
        project_name: str,
        selection: FeatureSelection,
        variables: Mapping[str, str] | None = None,
    ) -> CompositionResult:
        """Materialise the project into *target_dir*.

        Args:
            target_dir: Destination tree, owned by this run until it returns.
            project_name: Value for the ``{{PROJECT_NAME}}`` placeholder.
            selection: Ordered feature keys to apply.
            variables: Extra placeholder values; ``PROJECT_NAME`` always wins.

        Returns:
            A :class:`CompositionResult` describing what was written.
        """
        registry = await self.load_registry()
        features = registry.resolve(selection.features)
        root = Path(target_dir)
        result = CompositionResult(target_dir=root, project_name=project_name)

        print_step("Copying base template...", out=self.console)
        result.copied_files = await copy_tree(
            self.config.base_template_dir, root, self.config.copy_excludes
        )

        print_step("Processing template variables...", out=self.console)
        values = {**(variables or {}), "PROJECT_NAME": project_name}
        result.substituted_files = await substitute_tree(
            root, values, self.config.substitution_ignore_dirs
        )

        applied: dict[str, None] = {}
        if features:
            print_step("Adding selected features...", out=self.console)
        for feature in features:
            self.console.print(f"  [green]+[/green] {feature.name}")
            await self._apply_feature(root, feature, result, applied)
        result.applied_markers = list(applied)

        if result.dependencies or result.dev_dependencies:
            print_step(f"Updating {self.config.manifest_name} with dependencies...", out=self.console)
            await merge_manifest(root, result.dependencies, result.dev_dependencies, self.config)

        if applied:
            print_step("Cleaning up injection markers...", out=self.console)
            report = await cleanup(root, result.applied_markers, self.config)
            result.cleaned_files = report.cleaned
            for path in report.unparsed_manifests:
                print_warning(
                    f"  {path.relative_to(root)} is not valid JSON after marker removal; "
                    f"written as plain text",
                    out=self.console,
                )

        print_success("Scaffolding complete!", out=self.console)
        return result

    # -- Per-feature steps -------------------------------------------------

    async def _apply_feature(
        self,
        root: Path,
        feature: FeatureDescriptor,
        result: CompositionResult,
        applied: dict[str, None],
    ) -> None:
        if feature.files:
            result.module_files.extend(
                await select_module_files(
                    self.config.modules_dir, root, feature.files, self.config.module_subdir
                )
            )

        result.dependencies.update(feature.dependencies)
        result.dev_dependencies.update(feature.dev_dependencies)

        for injection in feature.injections:
            injected = await inject(
                root / injection.target_file,
                injection.marker,
                injection.code,
                self.config,
                feature=feature.key,
            )
            if injected:
                applied.setdefault(injection.marker, None)
                continue
            result.skipped_injections.append(
                SkippedInjection(
                    feature=feature.key,
                    target_file=injection.target_file,
                    marker=injection.marker,
                )
            )
            print_warning(
                f"    marker {injection.marker.strip()} not found in "
                f"{injection.target_file}; skipped",
                out=self.console,
            )

        result.features.append(feature.name)
