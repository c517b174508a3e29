"""Template composer -- composes projects from a base template and feature modules.

The engine copies a base skeleton, substitutes ``{{VARIABLES}}``, copies the
module files of each selected feature, injects feature fragments at
``// INJECT:NAME`` markers, merges dependencies into the package manifest and
finally strips the markers it used.

Quick usage::

    from template_composer import Composer, ComposerConfig, FeatureSelection

    composer = Composer(ComposerConfig())
    result = await composer.scaffold(
        Path.cwd(), "my-api", FeatureSelection(features=["requestContext"])
    )
"""

from template_composer.composer import Composer, CompositionResult, SkippedInjection
from template_composer.config import ComposerConfig
from template_composer.errors import (
    ComposeError,
    ConfigurationError,
    InjectionContractError,
    InvalidProjectNameError,
    ManifestError,
    RegistryError,
    TargetNotEmptyError,
    TemplateRootError,
)
from template_composer.registry import (
    FeatureDescriptor,
    FeatureRegistry,
    FeatureSelection,
    Injection,
)

__all__ = [
    "ComposeError",
    "Composer",
    "ComposerConfig",
    "CompositionResult",
    "ConfigurationError",
    "FeatureDescriptor",
    "FeatureRegistry",
    "FeatureSelection",
    "Injection",
    "InjectionContractError",
    "InvalidProjectNameError",
    "ManifestError",
    "RegistryError",
    "SkippedInjection",
    "TargetNotEmptyError",
    "TemplateRootError",
]
