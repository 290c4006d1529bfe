"""Vault commands: sync, pull, store, clean, list, remove, add."""

from __future__ import annotations

from typing import Optional

import click

from ..config import clear_legacy_vault, is_initialized
from ..errors import AgvaultError, NotInitializedError
from ..sync import VaultEngine
from ._common import AppContext, fail, normalize_path_arg


def _choose(prompt: str, choices: list[str]) -> str:
    """Ask the user to pick one entry from a list."""
    for i, choice in enumerate(choices, 1):
        click.echo(f"  {i}. {choice}")
    index = click.prompt(prompt, type=click.IntRange(1, len(choices)), default=1)
    return choices[index - 1]


def register_vault_commands(main: click.Group) -> None:
    """Register the vault transfer commands."""

    @main.command("sync")
    @click.option("--json", "json_out", is_flag=True, help="Output result as JSON {pulled, stored}.")
    @click.pass_obj
    def sync(app: AppContext, json_out: bool):
        """Pull the vault into the project, then store local files.

        Pull and store each use their own temp clone; the vault is never
        kept on disk.
        """
        out = app.output
        try:
            app.require_initialized()
            with out.progress("Syncing…", enabled=not json_out) as spinner:
                result = VaultEngine(app.project_root, on_phase=spinner.phase).sync()
        except (AgvaultError, OSError) as exc:
            fail(out, exc)

        if json_out:
            out.json(result.model_dump())
        else:
            out.success(
                f"Synced: pulled {result.pulled} file(s), stored {result.stored} file(s)."
            )

    @main.command("pull")
    @click.option(
        "--file", "-f", "files", multiple=True,
        help="Pull only this file (repeatable; path relative to the vault workspace).",
    )
    @click.option(
        "--init-if-missing/--no-init-if-missing", default=True,
        help="Run init interactively if the project is not initialized.",
    )
    @click.pass_obj
    def pull(app: AppContext, files: tuple[str, ...], init_if_missing: bool):
        """Copy this project's files from the vault into the project root.

        Examples:

            agvault pull

            agvault pull -f README.md -f docs/notes.md
        """
        out = app.output
        try:
            if not is_initialized(app.project_root):
                if not init_if_missing:
                    raise NotInitializedError()
                from ..init import run_init

                out.dim("Not initialized. Running init...")
                run_init(app.project_root, out)
                if not is_initialized(app.project_root):
                    out.error("Init did not complete. Run 'agvault init' then 'agvault pull'.")
                    raise SystemExit(1)

            requested = [normalize_path_arg(f) for f in files] or None
            with out.progress("Cloning vault…") as spinner:
                count = VaultEngine(app.project_root, on_phase=spinner.phase).pull(requested)
        except (AgvaultError, OSError) as exc:
            fail(out, exc)

        out.success(f"Pulled {count} file(s) from vault.")

    @main.command("store")
    @click.pass_obj
    def store(app: AppContext):
        """Store the configured files in the vault and push."""
        out = app.output
        try:
            app.require_initialized()
            with out.progress("Cloning vault…") as spinner:
                count = VaultEngine(app.project_root, on_phase=spinner.phase).store()
        except (AgvaultError, OSError) as exc:
            fail(out, exc)

        out.success(f"Stored {count} file(s) in vault.")

    @main.command("clean")
    @click.option("--purge", is_flag=True, help="Delete ALL projects from the vault (remote); commits and pushes.")
    @click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
    @click.pass_obj
    def clean(app: AppContext, purge: bool, yes: bool):
        """Remove a legacy local vault clone, or purge the remote vault."""
        out = app.output
        try:
            app.require_initialized()
            if purge:
                if not yes and not click.confirm(
                    "This will delete ALL projects from the vault (remote). "
                    "This cannot be undone. Continue?",
                    default=False,
                ):
                    out.dim("Cancelled.")
                    return
                with out.progress("Cloning vault…") as spinner:
                    VaultEngine(app.project_root, on_phase=spinner.phase).purge()
                out.success("Vault purged (all projects removed from remote).")
                return

            if not yes and not click.confirm(
                "Remove legacy .agvault/repo if present? "
                "(Vault is normally temp-only; nothing to clear.)",
                default=False,
            ):
                out.dim("Cancelled.")
                return
            if clear_legacy_vault(app.project_root):
                out.success("Cleaned.")
            else:
                out.dim("Nothing to clean.")
        except (AgvaultError, OSError) as exc:
            fail(out, exc)

    @main.command("list")
    @click.option("--local", "-l", is_flag=True, help="List files the include patterns would collect locally.")
    @click.option("--all", "-a", "all_projects", is_flag=True, help="List every project's files in the vault.")
    @click.option("--json", "json_out", is_flag=True, help="Output as a JSON array of paths.")
    @click.pass_obj
    def list_cmd(app: AppContext, local: bool, all_projects: bool, json_out: bool):
        """List files stored in the vault for this project."""
        out = app.output
        try:
            app.require_initialized()
            if local:
                paths = [vf.relative_path for vf in VaultEngine(app.project_root).collect()]
                empty_msg = "No files match include patterns."
            else:
                with out.progress("Listing vault…", enabled=not json_out) as spinner:
                    engine = VaultEngine(app.project_root, on_phase=spinner.phase)
                    paths = engine.list_all() if all_projects else engine.list_files()
                empty_msg = (
                    "Vault is empty." if all_projects else "No files in vault for this project."
                )
        except (AgvaultError, OSError) as exc:
            fail(out, exc)

        if json_out:
            out.json(paths)
        elif not paths:
            out.dim(empty_msg)
        else:
            out.table(["Path"], [[p] for p in paths])

    @main.command("remove")
    @click.argument("path", required=False)
    @click.pass_obj
    def remove(app: AppContext, path: Optional[str]):
        """Remove a file from the vault and add it to exclude.

        Without PATH, choose from the files stored for this project.
        """
        out = app.output
        try:
            app.require_initialized()
            engine = VaultEngine(app.project_root)
            if path and path.strip():
                paths = [normalize_path_arg(path)]
            else:
                with out.progress("Listing vault…") as spinner:
                    engine.on_phase = spinner.phase
                    stored = engine.list_files()
                if not stored:
                    out.dim("No files in vault for this project to remove.")
                    return
                paths = [_choose("Choose a file to remove from the vault", stored)]

            with out.progress("Removing from vault…") as spinner:
                engine.on_phase = spinner.phase
                count = engine.remove(paths)
            out.success(f"Removed {count} file(s) from vault and added to exclude.")
        except (AgvaultError, OSError) as exc:
            fail(out, exc)

    @main.command("add")
    @click.argument("path", required=False)
    @click.pass_obj
    def add(app: AppContext, path: Optional[str]):
        """Include a file and store it in the vault.

        Without PATH, choose from collected files not yet in the vault.
        """
        out = app.output
        try:
            app.require_initialized()
            engine = VaultEngine(app.project_root)
            if path and path.strip():
                selected = normalize_path_arg(path)
            else:
                collected = [vf.relative_path for vf in engine.collect()]
                with out.progress("Listing vault…") as spinner:
                    engine.on_phase = spinner.phase
                    stored = set(engine.list_files())
                candidates = [p for p in collected if p not in stored]
                if not candidates:
                    out.dim("All included files are already in the vault.")
                    return
                selected = _choose("Choose a file to add to the vault", candidates)

            with out.progress("Storing in vault…") as spinner:
                engine.on_phase = spinner.phase
                engine.add(selected)
            out.success(f"Added and stored {selected} in vault.")
        except (AgvaultError, OSError) as exc:
            fail(out, exc)
