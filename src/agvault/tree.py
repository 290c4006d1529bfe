"""
Directory tree planning for prune, list, and copy-out.

scan_tree() is the only function here that touches the filesystem.
Everything else works on TreeEntry values so the planning rules can be
exercised with hand-built trees.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Sequence


@dataclass(frozen=True)
class TreeEntry:
    """A file or directory node. Children are kept in name order."""

    name: str
    is_dir: bool
    children: tuple["TreeEntry", ...] = field(default_factory=tuple)


@dataclass
class PrunePlan:
    """Deletions needed to bring a workspace in line with an allowed set.

    Attributes:
        files: Relative paths of files to delete.
        dirs: Relative paths of directories left empty afterwards,
            deepest first. The scanned root itself appears as "".
    """

    files: list[str] = field(default_factory=list)
    dirs: list[str] = field(default_factory=list)


def scan_tree(path: Path) -> Optional[TreeEntry]:
    """Read a directory into a TreeEntry. Returns None if path is not a directory."""
    path = Path(path)
    if not path.is_dir():
        return None

    children = []
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            sub = scan_tree(Path(entry.path))
            if sub is not None:
                children.append(sub)
        else:
            children.append(TreeEntry(name=entry.name, is_dir=False))
    return TreeEntry(name=path.name, is_dir=True, children=tuple(children))


def _join(prefix: str, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


def iter_files(entry: TreeEntry, prefix: str = "") -> Iterator[str]:
    """Yield relative file paths under entry in traversal order."""
    for child in entry.children:
        rel = _join(prefix, child.name)
        if child.is_dir:
            yield from iter_files(child, rel)
        else:
            yield rel


def list_files(entry: Optional[TreeEntry]) -> list[str]:
    """Flat list of relative file paths under entry."""
    if entry is None:
        return []
    return list(iter_files(entry))


def plan_prune(entry: Optional[TreeEntry], allowed: set[str]) -> PrunePlan:
    """Plan removal of every file not in allowed, then the empty directories.

    A directory is removed when nothing remains under it after the file
    deletions. Directories that were already empty are removed too.
    """
    plan = PrunePlan()
    if entry is None:
        return plan

    def visit(node: TreeEntry, prefix: str) -> bool:
        """Return True if node is empty once the plan is applied."""
        empty = True
        for child in node.children:
            rel = _join(prefix, child.name)
            if child.is_dir:
                if not visit(child, rel):
                    empty = False
            elif rel in allowed:
                empty = False
            else:
                plan.files.append(rel)
        if empty:
            plan.dirs.append(prefix)
        return empty

    visit(entry, "")
    return plan


def match_requested(rel: str, workspace: str, requested: Sequence[str]) -> bool:
    """Check a stored file against caller-supplied paths.

    A requested path matches on the exact relative path, the
    workspace-qualified path, a '/'-bounded suffix, or the bare filename.
    """
    name = rel.rsplit("/", 1)[-1]
    qualified = _join(workspace, rel)
    for raw in requested:
        p = raw.strip().replace("\\", "/")
        if p in (rel, qualified, name) or rel.endswith("/" + p):
            return True
    return False


def plan_copy_out(
    entry: Optional[TreeEntry],
    workspace: str,
    requested: Optional[Sequence[str]] = None,
) -> list[str]:
    """Relative paths to copy out of a workspace, in traversal order.

    With no requested paths every file is copied. When several stored
    files share a basename, a bare-filename request selects all of them.
    """
    files = list_files(entry)
    if not requested:
        return files
    return [rel for rel in files if match_requested(rel, workspace, requested)]
