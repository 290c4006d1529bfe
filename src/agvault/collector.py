"""
File collector -- expands include/exclude globs against a project root.

Patterns are '/'-separated and matched one path segment at a time with
fnmatch. A '**' segment matches zero or more segments, so '**/*.md'
selects README.md as well as docs/guide/intro.md. Wildcards match
dotfiles; there is no special case for leading dots.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import stat
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from .models import ProjectConfig, VaultFile

logger = logging.getLogger("agvault.collector")


def _segments(path: str) -> list[str]:
    return [s for s in path.replace("\\", "/").split("/") if s not in ("", ".")]


def _match_segments(parts: Sequence[str], pattern: Sequence[str]) -> bool:
    if not pattern:
        return not parts
    head = pattern[0]
    if head == "**":
        rest = pattern[1:]
        return any(_match_segments(parts[i:], rest) for i in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatch.fnmatchcase(parts[0], head) and _match_segments(parts[1:], pattern[1:])


def glob_match(rel_path: str, pattern: str) -> bool:
    """Check whether a project-relative path matches a glob pattern.

    Args:
        rel_path: Path relative to the project root ('/' or os separators).
        pattern: Glob pattern such as 'docs/**' or '**/*.md'.

    Returns:
        True if the whole path matches.
    """
    return _match_segments(_segments(rel_path), _segments(pattern))


def matches_any(rel_path: str, patterns: Iterable[str]) -> bool:
    """True if rel_path matches at least one of the patterns."""
    return any(glob_match(rel_path, p) for p in patterns)


def _dir_excluded(rel_dir: str, exclude: Sequence[str]) -> bool:
    """True if an exclude pattern of the form 'prefix/**' covers rel_dir."""
    parts = _segments(rel_dir)
    for pattern in exclude:
        segs = _segments(pattern)
        if len(segs) >= 2 and segs[-1] == "**" and _match_segments(parts, segs[:-1]):
            return True
    return False


def _is_regular_file(path: Path) -> bool:
    try:
        return stat.S_ISREG(os.lstat(path).st_mode)
    except OSError:
        return False


def walk_regular_files(root: Path, exclude: Sequence[str] = ()) -> Iterator[str]:
    """Yield project-relative paths of regular files under root.

    Traversal is top-down with sorted entries. Directories wholly covered
    by an exclude pattern are not descended; symlinks are skipped.
    """
    root = Path(root)
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir
        dirnames[:] = sorted(
            d for d in dirnames
            if not _dir_excluded(f"{rel_dir}/{d}" if rel_dir else d, exclude)
        )
        for name in sorted(filenames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if _is_regular_file(Path(dirpath) / name):
                yield rel


def collect_files(root: Path, config: ProjectConfig) -> list[VaultFile]:
    """Collect the files a project stores in its vault workspace.

    A file is collected when it matches any include pattern and no exclude
    pattern. Output follows include-list order: all matches of the first
    pattern, then new matches of the second, and so on. Files that vanish
    or cannot be stat'ed are treated as absent.

    Args:
        root: Project root directory.
        config: Project configuration supplying the patterns.

    Returns:
        List of VaultFile entries, deduplicated by absolute path.
    """
    root = Path(root)
    candidates = list(walk_regular_files(root, config.exclude))
    seen: set[Path] = set()
    results: list[VaultFile] = []

    for pattern in config.include:
        segs = _segments(pattern)
        for rel in candidates:
            absolute = root / rel
            if absolute in seen:
                continue
            if not _match_segments(rel.split("/"), segs):
                continue
            if matches_any(rel, config.exclude):
                continue
            seen.add(absolute)
            results.append(VaultFile(absolute_path=absolute, relative_path=rel))

    logger.debug("Collected %d file(s) from %s", len(results), root)
    return results
