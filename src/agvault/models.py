"""
Data models for agvault configuration and sync results.

The on-disk JSON uses camelCase keys (repoUrl, defaultRepoUrl); the
models expose snake_case attributes and dump by alias.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BRANCH = "main"

# Common agentic/docs files and folders
DEFAULT_INCLUDE: list[str] = [
    "**/*.md",
    "**/*.mdc",
    ".cursor/**",
    ".cursorrules",
    "docs/**",
    "*.md",
]

DEFAULT_EXCLUDE: list[str] = [
    "node_modules/**",
    ".git/**",
    "dist/**",
    "build/**",
    ".agvault/**",
]


class ProjectConfig(BaseModel):
    """Per-project vault configuration (.agvault/config.json).

    Attributes:
        repo_url: Remote vault repository (HTTPS, SSH or local path).
        include: Glob patterns selecting files to store.
        exclude: Glob patterns removed from the include set.
        branch: Vault branch to clone and push.
    """

    model_config = ConfigDict(populate_by_name=True)

    repo_url: str = Field(default="", alias="repoUrl")
    include: list[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    branch: str = DEFAULT_BRANCH

    @property
    def initialized(self) -> bool:
        """True when a repo URL is configured, whatever else is present."""
        return bool(self.repo_url.strip())


class GlobalDefault(BaseModel):
    """Per-user default vault (~/.agvault/default.json)."""

    model_config = ConfigDict(populate_by_name=True)

    default_repo_url: str = Field(default="", alias="defaultRepoUrl")


@dataclass(frozen=True)
class VaultFile:
    """A local file selected for the vault.

    relative_path always uses forward slashes.
    """

    absolute_path: Path
    relative_path: str


class Phase(str, Enum):
    """Progress points reported while a vault operation runs."""

    CLONING = "cloning"
    BOOTSTRAPPING = "bootstrapping"
    COPYING = "copying"
    PRUNING = "pruning"
    COMMITTING = "committing"
    PUSHING = "pushing"
    CREATING_REMOTE = "creating-remote"
    LISTING = "listing"
    PURGING = "purging"
    SYNC_PULLING = "sync-pulling"
    SYNC_STORING = "sync-storing"


PhaseObserver = Callable[[Phase], None]


class SyncResult(BaseModel):
    """Counts reported by a sync run."""

    pulled: int = 0
    stored: int = 0


def notify(observer: Optional[PhaseObserver], phase: Phase) -> None:
    """Report a phase to an optional observer."""
    if observer is not None:
        observer(phase)
