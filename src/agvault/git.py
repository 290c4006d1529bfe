"""
Thin git client -- every call is a `git` subprocess bound to one directory.

Commands run with captured output and check=False; a non-zero exit is
turned into GitCommandError carrying stderr, which the push path inspects
to recognise a missing remote.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from .errors import GitCommandError

logger = logging.getLogger("agvault.git")


class Git:
    """Runs git commands inside a working tree.

    Args:
        cwd: Directory the commands run in.
        env: Extra environment variables layered over os.environ.
    """

    def __init__(self, cwd: Path, env: Optional[dict[str, str]] = None):
        self.cwd = Path(cwd)
        self.env = env or {}

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        """Run `git <args>` in cwd.

        Raises:
            GitCommandError: If git exits non-zero (when check is set) or
                the git executable cannot be found.
        """
        cmd = ["git", *args]
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0", **self.env}
        logger.debug("git %s (cwd=%s)", " ".join(args), self.cwd)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                cwd=str(self.cwd),
                env=env,
            )
        except FileNotFoundError as exc:
            raise GitCommandError(cmd, 127, "git not found in PATH") from exc

        if check and result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, result.stderr, result.stdout)
        return result

    @classmethod
    def clone(
        cls,
        url: str,
        dest: Path,
        branch: Optional[str] = None,
        env: Optional[dict[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> "Git":
        """Clone url into dest and return a client bound to the clone.

        cwd is where the clone command runs, which matters for relative
        local URLs. Defaults to the parent of dest.
        """
        dest = Path(dest)
        args = ["clone"]
        if branch:
            args += ["--branch", branch]
        args += [url, str(dest)]
        cls(Path(cwd) if cwd else dest.parent, env).run(*args)
        return cls(dest, env)

    def init(self) -> None:
        self.run("init")

    def add_all(self) -> None:
        self.run("add", "-A")

    def commit(self, message: str) -> None:
        self.run("commit", "-m", message)

    def rename_branch(self, name: str) -> None:
        self.run("branch", "-M", name)

    def add_remote(self, name: str, url: str) -> None:
        self.run("remote", "add", name, url)

    def push(self, remote: str, branch: str) -> None:
        self.run("push", "-u", remote, branch)

    def status(self) -> list[str]:
        """Porcelain status lines (modified, untracked, deleted entries)."""
        result = self.run("status", "--porcelain", "--untracked-files=all")
        return [line for line in result.stdout.splitlines() if line.strip()]

    def has_changes(self) -> bool:
        return bool(self.status())

    def rev_count(self, ref: str = "HEAD") -> int:
        """Number of commits reachable from ref."""
        result = self.run("rev-list", "--count", ref)
        return int(result.stdout.strip() or 0)
