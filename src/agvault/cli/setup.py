"""Setup commands: init, reinit."""

from __future__ import annotations

import click

from ..errors import AgvaultError
from ..sync import VaultEngine
from ._common import AppContext, fail


def register_setup_commands(main: click.Group) -> None:
    """Register init and reinit."""

    @main.command("init")
    @click.pass_obj
    def init(app: AppContext):
        """Initialize the vault for this project.

        Asks for the vault repo URL (or reuses your default vault) and
        optional extra include/exclude patterns.
        """
        from ..init import run_init

        try:
            run_init(app.project_root, app.output)
        except (AgvaultError, OSError) as exc:
            fail(app.output, exc)

    @main.command("reinit")
    @click.pass_obj
    def reinit(app: AppContext):
        """Repair vault state after a partial init.

        Removes any legacy local clone and checks that the vault remote
        can be cloned (or bootstrapped).
        """
        out = app.output
        try:
            app.require_initialized()
            with out.progress("Verifying vault…") as spinner:
                VaultEngine(app.project_root, on_phase=spinner.phase).reinit()
            out.success("Vault reinitialized.")
        except (AgvaultError, OSError) as exc:
            fail(out, exc)
