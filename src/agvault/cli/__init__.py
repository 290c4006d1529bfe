"""
agvault CLI: keep project docs and rules in a private git vault.

The main Click group is defined here and each command module registers
its commands via a register function.

Entry point: agvault.cli:main
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ..config import find_project_root
from ._common import AppContext, Output


@click.group()
@click.version_option(version=__version__, prog_name="agvault")
@click.option("-q", "--quiet", is_flag=True, help="Suppress success and info messages (errors only).")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.option(
    "-C", "--directory", default=None, type=click.Path(file_okay=False),
    help="Run as if started in this directory.",
)
@click.pass_context
def main(ctx: click.Context, quiet: bool, verbose: bool, directory: Optional[str]):
    """agvault: a private git vault for project docs, rules and notes.

    Files are cloned to a temp directory only while a command runs.

    Examples:

        agvault init

        agvault sync

        agvault pull --file README.md

        agvault list --local
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    start = Path(directory).expanduser() if directory else None
    ctx.obj = AppContext(project_root=find_project_root(start), output=Output(quiet=quiet))


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .setup import register_setup_commands
from .vault_cmd import register_vault_commands

register_setup_commands(main)
register_vault_commands(main)
