"""Shared test fixtures for agvault."""

from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Optional

import pytest

_real_which = shutil.which


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Hermetic git identity, temp root, user default dir, and no gh."""
    gitconfig = tmp_path / "gitconfig"
    gitconfig.write_text("[init]\n\tdefaultBranch = master\n")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "agvault tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tests@agvault.local")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "agvault tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tests@agvault.local")

    user_home = tmp_path / "user-agvault"
    monkeypatch.setenv("AGVAULT_HOME", str(user_home))

    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))

    monkeypatch.setattr(
        shutil, "which", lambda cmd, *a, **kw: None if cmd == "gh" else _real_which(cmd, *a, **kw)
    )
    return temp_root


@pytest.fixture
def session_temp_root(isolated_env: Path) -> Path:
    """Directory where ephemeral vault sessions are created during a test."""
    return isolated_env


@pytest.fixture
def remote(tmp_path: Path) -> str:
    """An empty bare repository acting as the vault remote."""
    path = tmp_path / "remote.git"
    subprocess.run(
        ["git", "init", "--bare", str(path)],
        check=True, capture_output=True,
    )
    return str(path)


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating an initialized project directory."""

    def _make(
        name: str,
        repo_url: str,
        include: Optional[list[str]] = None,
        exclude: Optional[list[str]] = None,
        files: Optional[dict[str, str]] = None,
    ) -> Path:
        root = tmp_path / "projects" / name
        root.mkdir(parents=True)
        config: dict = {"repoUrl": repo_url}
        if include is not None:
            config["include"] = include
        if exclude is not None:
            config["exclude"] = exclude
        (root / ".agvault").mkdir()
        (root / ".agvault" / "config.json").write_text(json.dumps(config, indent=2))
        for rel, content in (files or {}).items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _make


def remote_commit_count(remote_path: str, branch: str = "main") -> int:
    """Number of commits on branch in a bare remote."""
    result = subprocess.run(
        ["git", "--git-dir", remote_path, "rev-list", "--count", branch],
        check=True, capture_output=True, text=True,
    )
    return int(result.stdout.strip())


@pytest.fixture
def commit_count() -> Callable[..., int]:
    """Count commits on a branch of a bare remote."""
    return remote_commit_count
