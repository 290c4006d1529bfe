"""
Copy-in and copy-out between a project and its vault workspace.

Copy-in overwrites and then prunes, because glob results shrink between
runs (renames, new exclude patterns) and the vault must not keep stale
files. Copy-out only ever writes into the project.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..models import VaultFile
from ..tree import list_files, plan_copy_out, plan_prune, scan_tree
from .bootstrap import PLACEHOLDER, write_placeholder
from .workspace import (
    content_root,
    project_path_for,
    vault_path_for,
    workspace_name,
    workspace_root,
)

logger = logging.getLogger("agvault.sync.transfer")


def copy_to_vault(files: Iterable[VaultFile], vault_path: Path, project_root: Path) -> int:
    """Copy collected files into the project's workspace, overwriting.

    Returns:
        Number of files copied.
    """
    count = 0
    for vf in files:
        dest = vault_path_for(vault_path, project_root, vf.relative_path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(vf.absolute_path, dest)
        count += 1
    logger.debug("Copied %d file(s) into vault", count)
    return count


def prune_workspace(vault_path: Path, project_root: Path, allowed: set[str]) -> list[str]:
    """Delete workspace files not in allowed, then the emptied directories.

    Returns:
        Relative paths of the deleted files.
    """
    root = workspace_root(vault_path, project_root)
    plan = plan_prune(scan_tree(root), allowed)
    for rel in plan.files:
        (root / rel).unlink(missing_ok=True)
    for rel in plan.dirs:
        target = root / rel if rel else root
        if target.is_dir() and not any(target.iterdir()):
            target.rmdir()
    if plan.files:
        logger.info("Pruned %d stale file(s) from vault workspace", len(plan.files))
    return plan.files


def copy_from_vault(
    vault_path: Path,
    project_root: Path,
    requested: Optional[Sequence[str]] = None,
) -> int:
    """Write workspace files into the project root.

    Args:
        vault_path: Vault clone.
        project_root: Destination project.
        requested: Optional subset of paths (see tree.match_requested).

    Returns:
        Number of files written.
    """
    root = workspace_root(vault_path, project_root)
    selected = plan_copy_out(scan_tree(root), workspace_name(project_root), requested)
    for rel in selected:
        dest = project_path_for(project_root, rel)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(root.joinpath(*rel.split("/")), dest)
    logger.debug("Copied %d file(s) out of vault", len(selected))
    return len(selected)


def list_workspace_files(vault_path: Path, project_root: Path) -> list[str]:
    """Sorted relative paths stored for this project."""
    return sorted(list_files(scan_tree(workspace_root(vault_path, project_root))))


def list_vault_files(vault_path: Path) -> list[str]:
    """Sorted 'workspace/path' entries across every workspace.

    The placeholder at the top of the content root is bookkeeping and is
    left out.
    """
    files = list_files(scan_tree(content_root(vault_path)))
    return sorted(f for f in files if f != PLACEHOLDER)


def clear_content_root(vault_path: Path) -> None:
    """Remove every workspace, leaving only the placeholder."""
    root = content_root(vault_path)
    if root.exists():
        for entry in root.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
    write_placeholder(root)
