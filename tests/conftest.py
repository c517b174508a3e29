"""Shared pytest fixtures for the template composer test suite.

Provides reusable fixtures for:
- A temporary template root (base skeleton, module library, registry)
- A configuration bound to that root
- A quiet, recording Rich console
- A ready-to-use Composer
"""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from template_composer.composer import Composer
from template_composer.config import ComposerConfig


# ---------------------------------------------------------------------------
# Template payload
# ---------------------------------------------------------------------------

BASE_FILES: dict[str, str] = {
    "package.json": json.dumps(
        {
            "name": "{{PROJECT_NAME}}",
            "version": "1.0.0",
            "scripts": {"dev": "tsx watch src/index.ts"},
            "dependencies": {"express": "^4.21.1"},
        },
        indent=2,
    )
    + "\n",
    "README.md": "# {{PROJECT_NAME}}\n\nOwned by {{AUTHOR}}.\n",
    "src/index.ts": textwrap.dedent(
        """\
        import express from "express";
        // INJECT:IMPORTS

        const app = express();

        // INJECT:MIDDLEWARE

        app.listen(3000);
        """
    ),
    "src/routes/index.ts": textwrap.dedent(
        """\
        export const routes = [
          // INJECT:ROUTES
        ];
        """
    ),
    "config/settings.py": "DEBUG = True\n# INJECT:SETTINGS\n",
}

MODULE_FILES: dict[str, str] = {
    "auth/index.ts": "export const auth = true;\n",
    "auth/guards/jwt.ts": "export const jwt = true;\n",
    "auth/guards/jwt.js": "exports.jwt = true;\n",
    "auth/notes.md": "not selected\n",
    "cache/index.ts": "export const cache = true;\n",
}

REGISTRY: dict[str, Any] = {
    "auth": {
        "name": "Authentication",
        "description": "JWT guards",
        "files": ["auth/*.ts", "auth/guards/*.{ts,js}"],
        "dependencies": {"jsonwebtoken": "^9.0.0", "shared-lib": "1.0.0"},
        "devDependencies": {"@types/jsonwebtoken": "^9.0.0"},
        "injections": [
            {
                "file": "src/index.ts",
                "marker": "// INJECT:IMPORTS",
                "code": 'import { auth } from "./auth";',
            },
            {
                "file": "src/index.ts",
                "marker": "// INJECT:MIDDLEWARE",
                "code": "app.use(auth);",
            },
            {
                "file": ".env.example",
                "marker": "# INJECT:ENV",
                "code": "JWT_SECRET=change-me",
            },
        ],
    },
    "cache": {
        "name": "Cache",
        "description": "Redis cache",
        "files": ["cache/**"],
        "dependencies": {"ioredis": "^5.4.1", "shared-lib": "2.0.0"},
        "devDependencies": {},
        "injections": [
            {
                "file": "src/index.ts",
                "marker": "// INJECT:MIDDLEWARE",
                "code": "app.use(cache);",
            },
            {
                "file": "package.json",
                "marker": "// INJECT:CACHE_SCRIPTS",
                "code": '"cache:flush": "node scripts/flush.js"',
            },
            {
                "file": ".env.example",
                "marker": "# INJECT:ENV",
                "code": "REDIS_URL=redis://localhost:6379",
            },
        ],
    },
    "ghost": {
        "name": "Ghost",
        "description": "Targets a marker the base does not have",
        "injections": [
            {
                "file": "src/index.ts",
                "marker": "// INJECT:NOWHERE",
                "code": "console.log('never');",
            },
        ],
    },
}


def write_tree(root: Path, files: dict[str, str]) -> None:
    """Materialise ``{relative_path: content}`` under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def read_tree(root: Path) -> dict[str, bytes]:
    """Return ``{relative_posix_path: bytes}`` for every file under *root*."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """A complete template root: ``base/``, ``modules/`` and the registry."""
    root = tmp_path / "templates"
    write_tree(root / "base", BASE_FILES)
    write_tree(root / "modules", MODULE_FILES)
    (root / "features-config.json").write_text(json.dumps(REGISTRY, indent=2), encoding="utf-8")
    return root


@pytest.fixture
def config(template_root: Path) -> ComposerConfig:
    """Configuration bound to the temporary template root."""
    return ComposerConfig(template_root=template_root)


@pytest.fixture
def quiet_console() -> Console:
    """A Rich console that records output instead of printing it."""
    return Console(file=io.StringIO(), record=True, width=120)


@pytest.fixture
def composer(config: ComposerConfig, quiet_console: Console) -> Composer:
    """A Composer wired to the temporary template root and quiet console."""
    return Composer(config, console=quiet_console)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An invocation directory outside the template root."""
    cwd = tmp_path / "workspace"
    cwd.mkdir()
    return cwd
