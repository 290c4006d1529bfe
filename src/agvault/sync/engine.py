"""
Vault engine -- the reconciliation operations behind every command.

    pull   clone -> copy workspace into project                  -> delete
    store  collect -> clone -> copy in -> prune -> commit/push    -> delete
    sync   pull, then store, each in its own session (not atomic)
    purge  clone -> empty vault/ -> commit/push                   -> delete
    remove exclude paths -> store
    add    include path -> store

Every commit/push is skipped when the clone has no changes, so running
store twice in a row pushes once.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..collector import collect_files
from ..config import add_to_exclude, clear_legacy_vault, ensure_path_included, require_config
from ..models import Phase, PhaseObserver, ProjectConfig, SyncResult, VaultFile, notify
from .bootstrap import push_or_create
from .session import VaultSession, vault_session
from .transfer import (
    clear_content_root,
    copy_from_vault,
    copy_to_vault,
    list_vault_files,
    list_workspace_files,
    prune_workspace,
)

logger = logging.getLogger("agvault.sync.engine")

STORE_MESSAGE = "agvault: store"
SYNC_MESSAGE = "agvault: sync"
REMOVE_MESSAGE = "agvault: remove"
PURGE_MESSAGE = "agvault: purge all projects"


class VaultEngine:
    """Runs vault operations for one project.

    Each public method opens its own ephemeral session; no clone is
    shared between calls.
    """

    def __init__(self, project_root: Path, on_phase: Optional[PhaseObserver] = None):
        """Initialize the engine.

        Args:
            project_root: Directory holding .agvault/config.json.
            on_phase: Optional observer for progress phases.
        """
        self.project_root = Path(project_root)
        self.on_phase = on_phase

    @property
    def config(self) -> ProjectConfig:
        """Current project config (re-read on every access)."""
        return require_config(self.project_root)

    def collect(self) -> list[VaultFile]:
        """Files the next store would upload."""
        return collect_files(self.project_root, self.config)

    def _commit_and_push(self, session: VaultSession, message: str) -> bool:
        """Commit and push the clone if anything changed.

        Returns:
            True if a commit was pushed.
        """
        if not session.git.has_changes():
            logger.info("Vault already up to date, nothing to push")
            return False
        session.report(Phase.COMMITTING)
        session.git.add_all()
        session.git.commit(message)
        push_or_create(
            session.git,
            session.config.repo_url,
            session.branch,
            on_phase=self.on_phase,
        )
        logger.info("Pushed vault commit: %s", message)
        return True

    def _store(self, message: str) -> tuple[int, bool]:
        files = self.collect()
        with vault_session(self.project_root, on_phase=self.on_phase) as session:
            session.report(Phase.COPYING)
            copy_to_vault(files, session.path, self.project_root)
            session.report(Phase.PRUNING)
            prune_workspace(
                session.path,
                self.project_root,
                {vf.relative_path for vf in files},
            )
            committed = self._commit_and_push(session, message)
        return len(files), committed

    def pull(self, paths: Optional[Sequence[str]] = None) -> int:
        """Copy this project's stored files into the project root.

        Never commits or pushes.

        Args:
            paths: Optional subset of paths to pull.

        Returns:
            Number of files written.
        """
        with vault_session(self.project_root, on_phase=self.on_phase) as session:
            session.report(Phase.COPYING)
            return copy_from_vault(session.path, self.project_root, paths)

    def store(self) -> int:
        """Upload collected files and drop workspace files no longer collected.

        Returns:
            Number of collected files, whether or not anything was pushed.

        Raises:
            RemoteCreationError: If the remote is missing and could not
                be created.
        """
        count, _ = self._store(STORE_MESSAGE)
        return count

    def sync(self) -> SyncResult:
        """Pull, then store, in two independent sessions.

        Returns:
            SyncResult; stored is 0 when the store phase had nothing
            to commit.
        """
        notify(self.on_phase, Phase.SYNC_PULLING)
        pulled = self.pull()
        notify(self.on_phase, Phase.SYNC_STORING)
        count, committed = self._store(SYNC_MESSAGE)
        return SyncResult(pulled=pulled, stored=count if committed else 0)

    def purge(self) -> None:
        """Delete every workspace from the vault and push. Irreversible."""
        with vault_session(self.project_root, on_phase=self.on_phase) as session:
            session.report(Phase.PURGING)
            clear_content_root(session.path)
            self._commit_and_push(session, PURGE_MESSAGE)

    def list_files(self) -> list[str]:
        """Sorted paths stored for this project."""
        with vault_session(self.project_root, on_phase=self.on_phase) as session:
            session.report(Phase.LISTING)
            return list_workspace_files(session.path, self.project_root)

    def list_all(self) -> list[str]:
        """Sorted 'workspace/path' entries for every project in the vault."""
        with vault_session(self.project_root, on_phase=self.on_phase) as session:
            session.report(Phase.LISTING)
            return list_vault_files(session.path)

    def remove(self, paths: Sequence[str]) -> int:
        """Exclude paths and delete them from the vault workspace.

        The exclude entries are saved before the vault is touched.

        Returns:
            Number of paths removed.
        """
        for p in paths:
            add_to_exclude(self.project_root, p)
        self._store(REMOVE_MESSAGE)
        return len(paths)

    def add(self, path: str) -> int:
        """Include path and store.

        Returns:
            Number of collected files after the store.
        """
        ensure_path_included(self.project_root, path)
        return self.store()

    def reinit(self) -> None:
        """Drop any legacy local clone and check the remote can be opened."""
        require_config(self.project_root)
        clear_legacy_vault(self.project_root)
        with vault_session(self.project_root, on_phase=self.on_phase) as session:
            logger.info(
                "Vault reachable (%s)",
                "bootstrapped" if session.bootstrapped else "cloned",
            )
