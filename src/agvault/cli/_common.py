"""Shared utilities for all CLI command modules.

Provides the per-invocation AppContext (output settings plus project
root), the Rich-backed Output helpers, phase labels for spinners, and
the common error exit.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, NoReturn, Optional, Sequence

import click
from rich.console import Console
from rich.markup import escape
from rich.status import Status
from rich.table import Table

from ..config import is_initialized
from ..errors import InvalidConfigError, NotInitializedError
from ..models import Phase

logger = logging.getLogger("agvault.cli")

PHASE_LABELS: dict[Phase, str] = {
    Phase.CLONING: "Cloning vault…",
    Phase.BOOTSTRAPPING: "Preparing new vault…",
    Phase.COPYING: "Copying files…",
    Phase.PRUNING: "Removing stale files…",
    Phase.COMMITTING: "Committing…",
    Phase.PUSHING: "Pushing…",
    Phase.CREATING_REMOTE: "Creating remote repository…",
    Phase.LISTING: "Listing vault…",
    Phase.PURGING: "Purging vault…",
    Phase.SYNC_PULLING: "Syncing: pulling…",
    Phase.SYNC_STORING: "Syncing: storing…",
}

INVALID_CONFIG_HINT = (
    "Fix .agvault/config.json and try again. "
    "Do not run 'agvault init' or the config will be overwritten."
)


class Spinner:
    """Progress handle for one long operation. Inert when status is None."""

    def __init__(self, status: Optional[Status] = None):
        self._status = status

    def update(self, text: str) -> None:
        if self._status is not None:
            self._status.update(text)

    def phase(self, phase: Phase) -> None:
        """PhaseObserver that shows the label for phase."""
        self.update(PHASE_LABELS.get(phase, phase.value))


class Output:
    """Console output for one invocation.

    When quiet, only errors and machine-readable (--json) output are
    written.
    """

    def __init__(
        self,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def _print(self, style: str, msg: str) -> None:
        if not self.quiet:
            self.console.print(f"[{style}]{escape(msg)}[/]", soft_wrap=True)

    def success(self, msg: str) -> None:
        self._print("green", msg)

    def dim(self, msg: str) -> None:
        self._print("dim", msg)

    def warn(self, msg: str) -> None:
        self._print("yellow", msg)

    def error(self, msg: str) -> None:
        self.err_console.print(f"[bold red]{escape(msg)}[/]", soft_wrap=True)

    def hint(self, msg: str) -> None:
        """Follow-up line for an error, also on stderr."""
        self.err_console.print(f"[dim]{escape(msg)}[/]", soft_wrap=True)

    def json(self, data: Any) -> None:
        """Emit a JSON payload regardless of quiet."""
        click.echo(json.dumps(data))

    def table(self, head: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        if self.quiet:
            return
        table = Table(*head, show_lines=False)
        for row in rows:
            table.add_row(*(escape(str(cell)) for cell in row))
        self.console.print(table)

    @contextmanager
    def progress(self, text: str, enabled: bool = True) -> Iterator[Spinner]:
        """Show a spinner while the block runs.

        Yields a Spinner whose phase() method can be passed as an
        on_phase observer. Disabled when quiet.
        """
        if self.quiet or not enabled:
            yield Spinner()
            return
        with self.console.status(text) as status:
            yield Spinner(status)


@dataclass
class AppContext:
    """Everything a command needs, built once per invocation."""

    project_root: Path
    output: Output = field(default_factory=Output)

    def require_initialized(self) -> None:
        """Raise NotInitializedError unless the project has a repoUrl."""
        if not is_initialized(self.project_root):
            raise NotInitializedError()


def fail(out: Output, exc: BaseException) -> NoReturn:
    """Report an expected error and exit with status 1."""
    logger.debug("Command failed", exc_info=exc)
    out.error(str(exc))
    if isinstance(exc, InvalidConfigError):
        out.hint(INVALID_CONFIG_HINT)
    raise SystemExit(1)


def normalize_path_arg(value: str) -> str:
    """Project-relative path argument with forward slashes."""
    return value.strip().replace("\\", "/")
