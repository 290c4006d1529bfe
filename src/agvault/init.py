"""
Interactive init -- write .agvault/config.json for a project.

Order of preference for the vault URL:
  1. Keep the existing config (optionally adding patterns).
  2. The per-user default vault from a previous init.
  3. A URL typed by the user.
  4. A new private repo created with the GitHub CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from .cli._common import Output
from .config import (
    config_path,
    load_config,
    load_global_default,
    save_config,
    save_global_default,
)
from .errors import InvalidConfigError
from .gh import create_github_repo_by_name, is_gh_available, parse_github_repo_url
from .models import DEFAULT_BRANCH, DEFAULT_EXCLUDE, DEFAULT_INCLUDE, ProjectConfig

logger = logging.getLogger("agvault.init")


def split_patterns(raw: str) -> list[str]:
    """Split a comma-separated pattern answer, dropping blanks."""
    return [p.strip() for p in raw.split(",") if p.strip()]


def merge_patterns(base: list[str], extra: list[str]) -> list[str]:
    """Append extra patterns to base, keeping order and skipping repeats."""
    merged = list(base)
    for pattern in extra:
        if pattern not in merged:
            merged.append(pattern)
    return merged


def _prompt_extra_patterns(
    include: list[str], exclude: list[str]
) -> tuple[list[str], list[str]]:
    include_extra = click.prompt(
        "Extra include patterns (comma-separated globs, e.g. notes/**/*.md)",
        default="",
        show_default=False,
    )
    exclude_extra = click.prompt(
        "Extra exclude patterns (comma-separated globs)",
        default="",
        show_default=False,
    )
    return (
        merge_patterns(include, split_patterns(include_extra)),
        merge_patterns(exclude, split_patterns(exclude_extra)),
    )


def _create_repo(out: Output) -> Optional[str]:
    """Offer to create a private repo with gh. Returns its URL or None."""
    if not click.confirm(
        "Create a new private repo with GitHub CLI? (requires gh and gh auth login)",
        default=True,
    ):
        out.warn(
            "No repo URL provided. Run agvault init again when ready, or leave "
            "the URL empty to create a new repo with GitHub CLI."
        )
        return None

    name = click.prompt("Repo name (e.g. my-agvault, or owner/repo-name)", default="agvault")
    if not is_gh_available():
        out.warn(
            "GitHub CLI (gh) not found. Install it from https://cli.github.com/ "
            "and run gh auth login, then run agvault init again."
        )
        return None

    result = create_github_repo_by_name(name)
    if not result.ok:
        out.warn(f"Could not create repo: {result.error}")
        out.dim("Run gh auth login and try again, or provide a repo URL next time.")
        return None

    out.success(f"Created private repo: {result.url}")
    return result.url


def run_init(project_root: Path, out: Output) -> bool:
    """Interactively initialize (or update) a project's vault config.

    Args:
        project_root: Project directory to initialize.
        out: Output settings for this invocation.

    Returns:
        True if a config was written.
    """
    try:
        existing = load_config(project_root)
    except InvalidConfigError as exc:
        out.error(str(exc))
        if not click.confirm(
            "Config file is invalid (check JSON). Overwrite with new config?",
            default=False,
        ):
            out.dim("Fix .agvault/config.json and try again.")
            return False
        existing = None

    if existing is not None and existing.initialized:
        if not click.confirm(
            "Config already exists. Re-enter repo and patterns?", default=False
        ):
            include, exclude = existing.include, existing.exclude
            if click.confirm("Add or exclude more files/folders?", default=False):
                include, exclude = _prompt_extra_patterns(include, exclude)
            updated = existing.model_copy(update={"include": include, "exclude": exclude})
            path = save_config(project_root, updated)
            out.success("Config updated.")
            out.dim(f"Config: {path}")
            return True

    include = list(existing.include) if existing else list(DEFAULT_INCLUDE)
    exclude = list(existing.exclude) if existing else list(DEFAULT_EXCLUDE)
    branch = existing.branch if existing else DEFAULT_BRANCH

    default = load_global_default()
    if default is not None:
        repo_url = default.default_repo_url
        out.dim(f"Using default vault: {parse_github_repo_url(repo_url) or repo_url}")
    else:
        repo_url = click.prompt(
            "GitHub vault repo URL (HTTPS or SSH). Leave empty to create a new repo",
            default=existing.repo_url if existing else "",
            show_default=False,
        ).strip()
        if not repo_url:
            repo_url = _create_repo(out) or ""
            if not repo_url:
                return False

    if click.confirm(
        "Add or exclude more files/folders besides the predefined ones?", default=False
    ):
        include, exclude = _prompt_extra_patterns(include, exclude)

    config = ProjectConfig(repo_url=repo_url, include=include, exclude=exclude, branch=branch)
    save_config(project_root, config)
    save_global_default(repo_url)
    logger.info("Initialized vault for %s -> %s", project_root, repo_url)
    out.success("Vault initialized.")
    out.dim(f"Config: {config_path(project_root)}")
    return True
