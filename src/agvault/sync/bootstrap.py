"""
Remote bootstrap -- a starting vault when the remote has nothing yet.

When clone fails the session builds a one-commit repository locally
(vault/.gitkeep) with origin pointing at the configured URL. Nothing
touches the network until the caller pushes. If that push reports a
missing repository, the GitHub CLI gets one chance to create it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..errors import GitCommandError, RemoteCreationError
from ..gh import create_github_repo, is_gh_available, manual_creation_hint, parse_github_repo_url
from ..git import Git
from ..models import Phase, PhaseObserver, notify
from .workspace import content_root

logger = logging.getLogger("agvault.sync.bootstrap")

PLACEHOLDER = ".gitkeep"
INITIAL_COMMIT_MESSAGE = "agvault: initial vault"

# Lower-cased fragments of git errors that mean "nothing there yet".
REPO_NOT_FOUND_MARKERS = (
    "repository not found",
    "could not read from remote",
    "does not appear to be a git repository",
    "remote repository is empty",
    "failed to connect",
)


def is_repo_not_found_error(message: str) -> bool:
    """Check whether a git error says the remote does not exist yet."""
    lower = message.lower()
    return any(marker in lower for marker in REPO_NOT_FOUND_MARKERS)


def write_placeholder(directory: Path) -> Path:
    """Create directory with an empty placeholder so git can commit it."""
    directory.mkdir(parents=True, exist_ok=True)
    placeholder = directory / PLACEHOLDER
    placeholder.write_text("", encoding="utf-8")
    return placeholder


def bootstrap_repo(path: Path, repo_url: str, branch: str) -> Git:
    """Initialise an empty vault repository in path.

    git init, vault/.gitkeep, initial commit, origin remote, and the
    configured branch name. Does not contact the remote.

    Returns:
        A Git client bound to path.
    """
    git = Git(path)
    git.init()
    write_placeholder(content_root(path))
    git.add_all()
    git.commit(INITIAL_COMMIT_MESSAGE)
    git.add_remote("origin", repo_url)
    git.rename_branch(branch)
    logger.info("Bootstrapped empty vault for %s (%s)", repo_url, branch)
    return git


def push_or_create(
    git: Git,
    repo_url: str,
    branch: str,
    on_phase: Optional[PhaseObserver] = None,
) -> None:
    """Push branch to origin, creating the remote repository if missing.

    Raises:
        GitCommandError: For push failures other than a missing remote.
        RemoteCreationError: If the remote is missing and could not be
            created, or the push after creating it still fails. The
            message names repo_url.
    """
    notify(on_phase, Phase.PUSHING)
    try:
        git.push("origin", branch)
        return
    except GitCommandError as exc:
        if not is_repo_not_found_error(str(exc)):
            raise
        push_error = exc
        logger.info("Remote %s not found: %s", repo_url, exc.stderr)

    repo = parse_github_repo_url(repo_url)
    if repo and is_gh_available():
        notify(on_phase, Phase.CREATING_REMOTE)
        if create_github_repo(repo):
            notify(on_phase, Phase.PUSHING)
            try:
                git.push("origin", branch)
                return
            except GitCommandError as exc:
                logger.warning("Push after creating %s failed: %s", repo, exc.stderr)
                push_error = exc

    raise RemoteCreationError(repo_url, manual_creation_hint(repo_url)) from push_error
