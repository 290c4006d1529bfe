"""
Ephemeral vault sessions -- clone, use, delete.

Every operation gets its own temp-directory clone of the vault. The
directory is removed in a finally block, so vault content never stays
on disk after a command, whether the operation returned or raised.
(A killed process can still leave one behind.)
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, TypeVar

from ..config import require_config
from ..errors import GitCommandError
from ..gh import ensure_gh_git_auth, is_gh_available, parse_github_repo_url
from ..git import Git
from ..models import DEFAULT_BRANCH, Phase, PhaseObserver, ProjectConfig, notify
from .bootstrap import bootstrap_repo

logger = logging.getLogger("agvault.sync.session")

TEMP_PREFIX = "agvault-"

T = TypeVar("T")


@dataclass
class VaultSession:
    """A live temp clone handed to an operation.

    Attributes:
        path: Temp directory holding the clone.
        git: Git client bound to path.
        config: Project config the session was opened with.
        project_root: Project the operation works for.
        branch: Branch cloned and pushed; the configured branch, or
            the default when the config leaves it blank.
        bootstrapped: True if the remote could not be cloned and an
            empty vault was initialised instead.
    """

    path: Path
    git: Git
    config: ProjectConfig
    project_root: Path
    branch: str = DEFAULT_BRANCH
    bootstrapped: bool = False
    on_phase: Optional[PhaseObserver] = None

    def report(self, phase: Phase) -> None:
        notify(self.on_phase, phase)


def _reset_dir(path: Path) -> None:
    """Empty path after a failed clone, recreating it if git removed it."""
    shutil.rmtree(path, ignore_errors=True)
    path.mkdir(parents=True, exist_ok=True)


@contextmanager
def vault_session(
    project_root: Path,
    on_phase: Optional[PhaseObserver] = None,
) -> Iterator[VaultSession]:
    """Open an ephemeral clone of the project's vault.

    Clones the configured branch into a fresh temp directory. If the clone
    fails for any reason (typically: the repository or branch does not
    exist yet) an empty vault is bootstrapped in its place. The temp
    directory is deleted on exit.

    Args:
        project_root: Initialized project root.
        on_phase: Optional observer for progress phases.

    Yields:
        VaultSession bound to the temp clone.

    Raises:
        NotInitializedError: If the project has no repoUrl.
        InvalidConfigError: If the project config is broken.
    """
    project_root = Path(project_root)
    config = require_config(project_root)
    branch = config.branch.strip() or DEFAULT_BRANCH

    if parse_github_repo_url(config.repo_url) and is_gh_available():
        ensure_gh_git_auth()

    temp_dir = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
    logger.debug("Opened vault session in %s", temp_dir)
    try:
        notify(on_phase, Phase.CLONING)
        bootstrapped = False
        try:
            git = Git.clone(config.repo_url, temp_dir, branch=branch, cwd=project_root)
        except GitCommandError as exc:
            logger.info("Clone of %s failed, bootstrapping: %s", config.repo_url, exc.stderr)
            _reset_dir(temp_dir)
            notify(on_phase, Phase.BOOTSTRAPPING)
            git = bootstrap_repo(temp_dir, config.repo_url, branch)
            bootstrapped = True

        yield VaultSession(
            path=temp_dir,
            git=git,
            config=config,
            project_root=project_root,
            branch=branch,
            bootstrapped=bootstrapped,
            on_phase=on_phase,
        )
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)
        logger.debug("Removed vault session %s", temp_dir)


def with_temp_vault(
    project_root: Path,
    operation: Callable[[Path, Git, Callable[[Phase], None]], T],
    on_phase: Optional[PhaseObserver] = None,
) -> T:
    """Run operation(path, git, report) inside an ephemeral vault session.

    The operation's return value is passed through; its exceptions
    propagate after the temp directory is gone.
    """
    with vault_session(project_root, on_phase=on_phase) as session:
        return operation(session.path, session.git, session.report)
