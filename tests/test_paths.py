"""Unit tests for path resolution (template_composer.paths).

Tests cover:
- ensure_outside_template_root (root itself, nested, sibling with shared prefix)
- validate_project_name (npm grammar, sentinel, empty)
- resolve_target (new directory vs current-directory sentinel)
- prepare_target_dir (create, accept empty, reject non-empty)
"""

from __future__ import annotations

from pathlib import Path

import pytest

from template_composer.errors import (
    InvalidProjectNameError,
    TargetNotEmptyError,
    TemplateRootError,
)
from template_composer.paths import (
    CURRENT_DIR_SENTINEL,
    ensure_outside_template_root,
    prepare_target_dir,
    resolve_target,
    validate_project_name,
)

pytestmark = pytest.mark.unit


class TestEnsureOutsideTemplateRoot:
    def test_template_root_itself_rejected(self, template_root: Path):
        with pytest.raises(TemplateRootError):
            ensure_outside_template_root(template_root, template_root)

    def test_nested_directory_rejected(self, template_root: Path):
        with pytest.raises(TemplateRootError) as exc_info:
            ensure_outside_template_root(template_root / "base" / "src", template_root)
        assert exc_info.value.template_root == template_root.resolve()

    def test_sibling_directory_accepted(self, template_root: Path, workspace: Path):
        ensure_outside_template_root(workspace, template_root)

    def test_any_additional_root_rejected(self, template_root: Path, tmp_path: Path):
        engine = tmp_path / "engine"
        (engine / "pkg").mkdir(parents=True)
        with pytest.raises(TemplateRootError) as exc_info:
            ensure_outside_template_root(engine / "pkg", template_root, engine)
        assert exc_info.value.template_root == engine.resolve()

    def test_outside_every_root_accepted(self, template_root: Path, workspace: Path, tmp_path: Path):
        engine = tmp_path / "engine"
        engine.mkdir()
        ensure_outside_template_root(workspace, template_root, engine)

    def test_shared_string_prefix_is_not_nesting(self, tmp_path: Path):
        root = tmp_path / "tmpl"
        other = tmp_path / "tmpl2"
        root.mkdir()
        other.mkdir()
        ensure_outside_template_root(other, root)


class TestValidateProjectName:
    @pytest.mark.parametrize("name", ["my-api", "api_v2", "a.b", "@scope/pkg", "x"])
    def test_valid_names(self, name: str):
        assert validate_project_name(name) == name

    def test_sentinel_accepted(self):
        assert validate_project_name(".") == CURRENT_DIR_SENTINEL

    def test_surrounding_whitespace_stripped(self):
        assert validate_project_name("  my-api ") == "my-api"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_rejected(self, name: str):
        with pytest.raises(InvalidProjectNameError, match="cannot be empty"):
            validate_project_name(name)

    @pytest.mark.parametrize("name", ["MyApi", "my api", "../escape", "@scope/", "name!"])
    def test_malformed_rejected(self, name: str):
        with pytest.raises(InvalidProjectNameError):
            validate_project_name(name)


class TestResolveTarget:
    def test_new_project_becomes_subdirectory(self, workspace: Path):
        target, name = resolve_target(workspace, "my-api")
        assert target == workspace.resolve() / "my-api"
        assert name == "my-api"

    def test_sentinel_uses_current_directory(self, workspace: Path):
        target, name = resolve_target(workspace, ".")
        assert target == workspace.resolve()
        assert name == "workspace"


class TestPrepareTargetDir:
    async def test_creates_missing_directory(self, tmp_path: Path):
        target = tmp_path / "a" / "b"
        result = await prepare_target_dir(target)
        assert result == target
        assert target.is_dir()

    async def test_accepts_existing_empty_directory(self, tmp_path: Path):
        target = tmp_path / "empty"
        target.mkdir()
        await prepare_target_dir(target)
        assert list(target.iterdir()) == []

    async def test_rejects_non_empty_directory(self, tmp_path: Path):
        target = tmp_path / "busy"
        target.mkdir()
        (target / "keep.txt").write_text("data", encoding="utf-8")
        with pytest.raises(TargetNotEmptyError) as exc_info:
            await prepare_target_dir(target)
        assert exc_info.value.target_dir == target
        assert (target / "keep.txt").read_text(encoding="utf-8") == "data"

    async def test_rejects_directory_with_only_hidden_entries(self, tmp_path: Path):
        target = tmp_path / "hidden"
        target.mkdir()
        (target / ".git").mkdir()
        with pytest.raises(TargetNotEmptyError):
            await prepare_target_dir(target)

    async def test_rejects_existing_file(self, tmp_path: Path):
        target = tmp_path / "file"
        target.write_text("x", encoding="utf-8")
        with pytest.raises(TargetNotEmptyError):
            await prepare_target_dir(target)
