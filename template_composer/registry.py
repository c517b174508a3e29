"""Feature registry data model.

The registry is a JSON document mapping feature keys to descriptors::

    {
      "requestContext": {
        "name": "Request Context",
        "description": "Per-request async context",
        "files": ["app/server/middlewares/requestContext.ts"],
        "dependencies": {},
        "devDependencies": {},
        "injections": [
          {"file": "src/app/server/index.ts",
           "marker": "// INJECT:REQUEST_CONTEXT_MIDDLEWARE",
           "code": "app.use(requestContextMiddleware);"}
        ]
      }
    }

It is loaded once per run and never mutated afterwards.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import RegistryError
from .injector import is_marker_line
from .utils import load_json

Installer = Literal["npm", "yarn", "pnpm"]


class Injection(BaseModel):
    """A fragment to insert at a marker inside one target file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    target_file: str = Field(
        ...,
        validation_alias=AliasChoices("file", "targetFile", "target_file"),
        description="Path relative to the project root",
    )
    marker: str
    code: str

    @field_validator("marker")
    @classmethod
    def _marker_grammar(cls, value: str) -> str:
        if not is_marker_line(value):
            raise ValueError(
                f"marker {value!r} must look like '// INJECT:NAME' or '# INJECT:NAME'"
            )
        return value


class FeatureDescriptor(BaseModel):
    """A named, independently selectable bundle of files, dependencies and injections."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str = Field(default="")
    name: str
    description: str = Field(default="")
    files: tuple[str, ...] = Field(default=())
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("devDependencies", "dev_dependencies"),
    )
    injections: tuple[Injection, ...] = Field(default=())


class FeatureSelection(BaseModel):
    """The caller's choice of features plus install preferences.

    Feature order is significant: it is the order injections stack in and
    the order dependency maps are merged in.  Duplicate keys are dropped,
    keeping the first occurrence.
    """

    features: list[str] = Field(default_factory=list)
    install_dependencies: bool = Field(default=False)
    installer: Installer = Field(default="pnpm")

    @field_validator("features")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @property
    def install_command(self) -> str:
        """Shell command that installs dependencies with the chosen installer."""
        return "yarn" if self.installer == "yarn" else f"{self.installer} install"

    @property
    def dev_command(self) -> str:
        """Shell command that starts the development server."""
        return "npm run dev" if self.installer == "npm" else f"{self.installer} dev"


class FeatureRegistry:
    """Read-only mapping from feature key to :class:`FeatureDescriptor`."""

    def __init__(self, features: Iterable[FeatureDescriptor]) -> None:
        self._features: dict[str, FeatureDescriptor] = {}
        for feature in features:
            if feature.key in self._features:
                raise RegistryError(f"Duplicate feature key: {feature.key!r}")
            self._features[feature.key] = feature

    # -- Construction ------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Any) -> "FeatureRegistry":
        """Build a registry from the parsed JSON document."""
        if not isinstance(data, dict):
            raise RegistryError("Feature registry must be a JSON object keyed by feature")
        features = []
        for key, raw in data.items():
            if not isinstance(raw, dict):
                raise RegistryError(f"Feature {key!r} must be a JSON object")
            try:
                features.append(FeatureDescriptor.model_validate({**raw, "key": key}))
            except ValidationError as exc:
                raise RegistryError(f"Feature {key!r} is malformed:\n{exc}") from exc
        return cls(features)

    @classmethod
    def load_sync(cls, path: str | Path) -> "FeatureRegistry":
        """Read and validate the registry at *path*."""
        registry_path = Path(path)
        try:
            data = load_json(registry_path)
        except FileNotFoundError as exc:
            raise RegistryError(f"Feature registry not found: {registry_path}") from exc
        except json.JSONDecodeError as exc:
            raise RegistryError(f"Feature registry {registry_path} is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    async def load(cls, path: str | Path) -> "FeatureRegistry":
        """Async wrapper around :meth:`load_sync`."""
        return await asyncio.to_thread(cls.load_sync, path)

    # -- Queries -----------------------------------------------------------

    def get(self, key: str) -> FeatureDescriptor:
        """Return the descriptor for *key*.

        Raises:
            RegistryError: If *key* is not registered.
        """
        try:
            return self._features[key]
        except KeyError:
            known = ", ".join(self._features) or "none"
            raise RegistryError(f"Unknown feature {key!r} (known: {known})") from None

    def resolve(self, keys: Iterable[str]) -> list[FeatureDescriptor]:
        """Return descriptors for *keys* in the given order."""
        return [self.get(key) for key in keys]

    def keys(self) -> list[str]:
        return list(self._features)

    def __contains__(self, key: object) -> bool:
        return key in self._features

    def __iter__(self) -> Iterator[FeatureDescriptor]:
        return iter(self._features.values())

    def __len__(self) -> int:
        return len(self._features)
