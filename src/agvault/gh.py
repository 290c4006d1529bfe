"""
GitHub CLI integration -- optional convenience for creating vault repos.

Everything here degrades quietly when `gh` is not installed or not
logged in: callers get False / an error result and fall back to telling
the user how to create the repository by hand.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("agvault.gh")

REPO_DESCRIPTION = "agvault-vault"

_HTTPS_RE = re.compile(
    r"github\.com/([\w][\w.-]*)/([^\s/#]+?)(?:\.git)?/?$", re.IGNORECASE
)
_SSH_RE = re.compile(
    r"github\.com:([\w][\w.-]*)/([^\s/#]+?)(?:\.git)?/?$", re.IGNORECASE
)
_ALREADY_EXISTS_RE = re.compile(r"already exists", re.IGNORECASE)


@dataclass
class RepoCreateResult:
    """Outcome of creating a repository by name."""

    ok: bool
    url: str = ""
    error: str = ""


def is_gh_available() -> bool:
    """Check if the GitHub CLI is on PATH."""
    return shutil.which("gh") is not None


def parse_github_repo_url(repo_url: str) -> Optional[str]:
    """Extract 'owner/repo' from an HTTPS or SSH GitHub URL.

    Args:
        repo_url: e.g. https://github.com/me/vault.git or git@github.com:me/vault

    Returns:
        'owner/repo', or None for non-GitHub URLs.
    """
    trimmed = repo_url.strip()
    match = _HTTPS_RE.search(trimmed) or _SSH_RE.search(trimmed)
    if not match:
        return None
    return f"{match.group(1)}/{match.group(2)}"


def _gh(*args: str, capture: bool = True) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["gh", *args],
        capture_output=capture,
        text=True,
        check=False,
    )


def ensure_gh_git_auth() -> bool:
    """Register gh as git's credential helper so clone/push don't prompt.

    Returns:
        True if gh accepted the setup.
    """
    try:
        result = _gh("auth", "setup-git")
    except OSError as exc:
        logger.debug("gh auth setup-git unavailable: %s", exc)
        return False
    if result.returncode != 0:
        logger.debug("gh auth setup-git failed: %s", (result.stderr or "").strip())
        return False
    return True


def _view_url(name: str) -> Optional[str]:
    result = _gh("repo", "view", name, "--json", "url", "-q", ".url")
    if result.returncode != 0:
        return None
    url = (result.stdout or "").strip()
    if not url:
        return None
    return url if url.endswith(".git") else f"{url}.git"


def create_github_repo(repo: str) -> bool:
    """Create a private repository 'owner/repo' (or 'repo').

    An existing repository counts as success so a retried push can go
    ahead.

    Returns:
        True if the repository exists afterwards.
    """
    if not is_gh_available():
        return False
    try:
        result = _gh("repo", "create", repo, "--private", "--description", REPO_DESCRIPTION)
    except OSError as exc:
        logger.warning("gh repo create failed to start: %s", exc)
        return False
    output = (result.stderr or "").strip() or (result.stdout or "").strip()
    if result.returncode == 0 or _ALREADY_EXISTS_RE.search(output):
        logger.info("Vault repository ready on GitHub: %s", repo)
        return True
    logger.warning("gh repo create %s failed: %s", repo, output)
    return False


def create_github_repo_by_name(name: str) -> RepoCreateResult:
    """Create a private repo by name and return its clone URL.

    Used by init when the user leaves the URL empty.
    """
    if not is_gh_available():
        return RepoCreateResult(ok=False, error="GitHub CLI (gh) not found.")
    trimmed = name.strip()
    if not trimmed:
        return RepoCreateResult(ok=False, error="Repo name is required.")

    try:
        create = _gh("repo", "create", trimmed, "--private", "--description", REPO_DESCRIPTION)
        output = (create.stderr or "").strip() or (create.stdout or "").strip()
        if create.returncode != 0 and not _ALREADY_EXISTS_RE.search(output):
            return RepoCreateResult(ok=False, error=output or "gh repo create failed.")
        url = _view_url(trimmed)
    except OSError as exc:
        return RepoCreateResult(ok=False, error=str(exc))

    if not url:
        return RepoCreateResult(ok=False, error="Could not get repo URL after create.")
    return RepoCreateResult(ok=True, url=url)


def manual_creation_hint(repo_url: str) -> str:
    """Explain how to create the vault repository by hand."""
    repo = parse_github_repo_url(repo_url)
    if repo:
        name = repo.split("/", 1)[1]
        create = (
            f"Create the repo at https://github.com/new?name={name} (private), "
            "then run the command again."
        )
        if is_gh_available():
            return f"Run `gh auth login` and try again, or {create}"
        return (
            "Install GitHub CLI (gh) and run `gh auth login` to create it "
            f"automatically, or {create}"
        )
    return (
        f"Create a private repository at {repo_url.strip()}, "
        "then run the command again."
    )
