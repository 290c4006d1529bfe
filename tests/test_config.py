"""
Tests for the configuration store -- project config and user default.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from agvault.config import (
    add_to_exclude,
    clear_legacy_vault,
    config_path,
    ensure_path_included,
    find_project_root,
    is_initialized,
    load_config,
    load_global_default,
    require_config,
    save_config,
    save_global_default,
)
from agvault.errors import ConfigErrorKind, InvalidConfigError, NotInitializedError
from agvault.models import DEFAULT_EXCLUDE, DEFAULT_INCLUDE, ProjectConfig


def _write_raw(root: Path, text: str) -> Path:
    path = config_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestLoadConfig:
    """Loading and validating .agvault/config.json."""

    def test_missing_file_is_none(self, tmp_path: Path):
        assert load_config(tmp_path) is None
        assert is_initialized(tmp_path) is False

    def test_fills_defaults(self, tmp_path: Path):
        _write_raw(tmp_path, json.dumps({"repoUrl": "git@github.com:me/vault.git"}))
        config = load_config(tmp_path)

        assert config.repo_url == "git@github.com:me/vault.git"
        assert config.include == DEFAULT_INCLUDE
        assert config.exclude == DEFAULT_EXCLUDE
        assert config.branch == "main"

    def test_null_fields_use_defaults(self, tmp_path: Path):
        _write_raw(tmp_path, json.dumps({"repoUrl": "x", "branch": None, "include": None}))
        config = load_config(tmp_path)
        assert config.branch == "main"
        assert config.include == DEFAULT_INCLUDE

    def test_invalid_json_is_distinct_from_uninitialized(self, tmp_path: Path):
        _write_raw(tmp_path, '{"repoUrl": "x",')

        with pytest.raises(InvalidConfigError) as info:
            load_config(tmp_path)
        assert info.value.kind == ConfigErrorKind.INVALID_JSON
        assert "Invalid JSON" in str(info.value)

        with pytest.raises(InvalidConfigError):
            is_initialized(tmp_path)

    def test_undecodable_bytes(self, tmp_path: Path):
        path = tmp_path / ".agvault" / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b'{"repoUrl": "\xff\xfe"}')

        with pytest.raises(InvalidConfigError) as info:
            load_config(tmp_path)
        assert info.value.kind == ConfigErrorKind.INVALID_JSON

    def test_non_object_json(self, tmp_path: Path):
        _write_raw(tmp_path, "[1, 2]")
        with pytest.raises(InvalidConfigError) as info:
            load_config(tmp_path)
        assert info.value.kind == ConfigErrorKind.INVALID_JSON

    def test_wrong_field_type(self, tmp_path: Path):
        _write_raw(tmp_path, json.dumps({"repoUrl": "x", "include": "**/*.md"}))
        with pytest.raises(InvalidConfigError) as info:
            load_config(tmp_path)
        assert info.value.kind == ConfigErrorKind.INVALID_FIELD
        assert "include" in str(info.value)

    def test_blank_repo_url_is_uninitialized(self, tmp_path: Path):
        _write_raw(tmp_path, json.dumps({"repoUrl": "   ", "include": ["*.md"]}))
        assert load_config(tmp_path) is not None
        assert is_initialized(tmp_path) is False
        with pytest.raises(NotInitializedError, match="agvault init"):
            require_config(tmp_path)


class TestSaveConfig:
    """Persisting the project config."""

    def test_roundtrip_uses_camel_case(self, tmp_path: Path):
        config = ProjectConfig(repo_url="https://github.com/me/vault", branch="notes")
        path = save_config(tmp_path, config)

        data = json.loads(path.read_text())
        assert data["repoUrl"] == "https://github.com/me/vault"
        assert data["branch"] == "notes"
        assert "repo_url" not in data

        loaded = load_config(tmp_path)
        assert loaded == config

    def test_add_to_exclude_is_idempotent(self, tmp_path: Path):
        save_config(tmp_path, ProjectConfig(repo_url="x"))
        add_to_exclude(tmp_path, "docs\\notes.md")
        add_to_exclude(tmp_path, "docs/notes.md")

        config = load_config(tmp_path)
        assert config.exclude.count("docs/notes.md") == 1

    def test_ensure_included_drops_exclude_entry(self, tmp_path: Path):
        save_config(
            tmp_path,
            ProjectConfig(repo_url="x", include=["**/*.md"], exclude=["notes.md"]),
        )
        ensure_path_included(tmp_path, "notes.md")

        config = load_config(tmp_path)
        assert "notes.md" not in config.exclude
        assert config.include == ["**/*.md"]

    def test_ensure_included_appends_unmatched(self, tmp_path: Path):
        save_config(tmp_path, ProjectConfig(repo_url="x", include=["**/*.md"], exclude=[]))
        ensure_path_included(tmp_path, ".vscode/settings.json")

        assert load_config(tmp_path).include == ["**/*.md", ".vscode/settings.json"]

    def test_mutators_require_init(self, tmp_path: Path):
        with pytest.raises(NotInitializedError):
            add_to_exclude(tmp_path, "a.md")


class TestProjectRoot:
    """Walking up to the initialized project."""

    def test_finds_ancestor(self, tmp_path: Path):
        save_config(tmp_path, ProjectConfig(repo_url="x"))
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path.resolve()

    def test_falls_back_to_start(self, tmp_path: Path):
        nested = tmp_path / "plain"
        nested.mkdir()
        assert find_project_root(nested) == nested.resolve()


class TestGlobalDefault:
    """The per-user default vault URL."""

    def test_missing(self):
        assert load_global_default() is None

    def test_roundtrip(self, tmp_path: Path):
        path = save_global_default("  https://github.com/me/vault.git ")
        assert path.parent == tmp_path / "user-agvault"
        assert json.loads(path.read_text()) == {
            "defaultRepoUrl": "https://github.com/me/vault.git"
        }
        assert load_global_default().default_repo_url == "https://github.com/me/vault.git"

    def test_blank_or_broken_is_none(self, tmp_path: Path):
        home = tmp_path / "user-agvault"
        home.mkdir()
        (home / "default.json").write_text('{"defaultRepoUrl": ""}')
        assert load_global_default() is None

        (home / "default.json").write_text("not json")
        assert load_global_default() is None


class TestLegacyVault:
    """Removing the old persistent clone."""

    def test_clear_legacy_vault(self, tmp_path: Path):
        legacy = tmp_path / ".agvault" / "repo" / "vault"
        legacy.mkdir(parents=True)
        (legacy / "a.md").write_text("x")

        assert clear_legacy_vault(tmp_path) is True
        assert not (tmp_path / ".agvault" / "repo").exists()
        assert clear_legacy_vault(tmp_path) is False
