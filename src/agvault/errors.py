"""Exception hierarchy for agvault.

Everything the CLI knows how to report derives from AgvaultError.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

NOT_INITIALIZED_MESSAGE = "Not initialized. Run 'agvault init' first."


class AgvaultError(Exception):
    """Base class for expected, user-facing failures."""


class NotInitializedError(AgvaultError):
    """Raised when the project has no usable repoUrl."""

    def __init__(self, message: str = NOT_INITIALIZED_MESSAGE):
        super().__init__(message)


class ConfigErrorKind(str, Enum):
    """Why a config file could not be used."""

    INVALID_JSON = "invalid-json"
    INVALID_FIELD = "invalid-field"


class InvalidConfigError(AgvaultError):
    """Raised when a config file exists but cannot be parsed or validated.

    Kept distinct from NotInitializedError so callers never treat a
    broken file as absent and overwrite it.
    """

    def __init__(self, path: Path, kind: ConfigErrorKind, detail: str):
        self.path = path
        self.kind = kind
        self.detail = detail
        label = "Invalid JSON" if kind == ConfigErrorKind.INVALID_JSON else "Invalid field"
        super().__init__(f"{label} in {path}: {detail}")


class GitCommandError(AgvaultError):
    """Raised when a git invocation exits non-zero or git is missing."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stderr: str = "",
        stdout: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        self.stdout = stdout.strip()
        detail = self.stderr or self.stdout or f"exit status {returncode}"
        super().__init__(f"{' '.join(self.command)} failed: {detail}")


class RemoteCreationError(AgvaultError):
    """Raised when the vault remote is missing and could not be created."""

    def __init__(self, repo_url: str, hint: Optional[str] = None):
        self.repo_url = repo_url
        message = f"Remote repository not found: {repo_url}."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
