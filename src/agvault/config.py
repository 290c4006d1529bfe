"""
Configuration store -- per-project config and the per-user default vault.

    <project>/.agvault/config.json   repoUrl, include, exclude, branch
    ~/.agvault/default.json          defaultRepoUrl

A missing project config means "not initialized". A config that exists
but does not parse raises InvalidConfigError instead, so nothing ever
overwrites a file the user only needs to fix.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from . import AGVAULT_HOME
from .collector import matches_any
from .errors import ConfigErrorKind, InvalidConfigError, NotInitializedError
from .models import GlobalDefault, ProjectConfig

logger = logging.getLogger("agvault.config")

CONFIG_DIR = ".agvault"
CONFIG_FILE = "config.json"
# Persistent clone location used by early versions; now temp-only.
LEGACY_VAULT_DIR = ".agvault/repo"
GLOBAL_FILE = "default.json"


def config_path(root: Path) -> Path:
    """Path of the project config file under root."""
    return Path(root) / CONFIG_DIR / CONFIG_FILE


def find_project_root(start: Optional[Path] = None) -> Path:
    """Resolve the project root for a working directory.

    Walks up from start until a directory containing .agvault/config.json
    is found. Falls back to start itself so init can run there.

    Args:
        start: Directory to start from. Defaults to the current directory.

    Returns:
        Absolute project root path.
    """
    origin = Path(start or Path.cwd()).resolve()
    for candidate in (origin, *origin.parents):
        if config_path(candidate).exists():
            return candidate
    return origin


def load_config(root: Path) -> Optional[ProjectConfig]:
    """Load the project config, filling in defaults for missing keys.

    Returns:
        The config, or None if the file does not exist.

    Raises:
        InvalidConfigError: If the file is not valid UTF-8 JSON or a field
            has the wrong shape.
    """
    path = config_path(root)
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidConfigError(path, ConfigErrorKind.INVALID_JSON, str(exc)) from exc

    if not isinstance(data, dict):
        raise InvalidConfigError(
            path, ConfigErrorKind.INVALID_JSON, "top-level value must be an object"
        )

    # null fields fall back to defaults like missing ones
    data = {k: v for k, v in data.items() if v is not None}
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(p) for p in err["loc"]) for err in exc.errors()
        )
        raise InvalidConfigError(path, ConfigErrorKind.INVALID_FIELD, fields) from exc


def save_config(root: Path, config: ProjectConfig) -> Path:
    """Write the project config as indented JSON.

    Returns:
        Path of the written file.
    """
    path = config_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(config.model_dump(by_alias=True), indent=2) + "\n",
        encoding="utf-8",
    )
    logger.debug("Saved config to %s", path)
    return path


def is_initialized(root: Path) -> bool:
    """True if the project has a config with a non-empty repoUrl."""
    config = load_config(root)
    return config is not None and config.initialized


def require_config(root: Path) -> ProjectConfig:
    """Load the config of an initialized project.

    Raises:
        NotInitializedError: If there is no config or no repoUrl.
        InvalidConfigError: If the config file is broken.
    """
    config = load_config(root)
    if config is None or not config.initialized:
        raise NotInitializedError()
    return config


def add_to_exclude(root: Path, rel_path: str) -> ProjectConfig:
    """Append a path to the exclude list unless it is already there."""
    config = require_config(root)
    rel_path = rel_path.strip().replace("\\", "/")
    if rel_path not in config.exclude:
        config.exclude.append(rel_path)
        save_config(root, config)
        logger.info("Excluded %s", rel_path)
    return config


def ensure_path_included(root: Path, rel_path: str) -> ProjectConfig:
    """Make sure a path is collected on the next store.

    Drops an exact exclude entry for the path and appends it to the
    include list when no existing include pattern already matches it.
    """
    config = require_config(root)
    rel_path = rel_path.strip().replace("\\", "/")
    changed = False
    if rel_path in config.exclude:
        config.exclude.remove(rel_path)
        changed = True
    if not matches_any(rel_path, config.include):
        config.include.append(rel_path)
        changed = True
    if changed:
        save_config(root, config)
        logger.info("Included %s", rel_path)
    return config


def clear_legacy_vault(root: Path) -> bool:
    """Delete a persistent .agvault/repo clone left by old versions.

    Returns:
        True if something was removed.
    """
    legacy = Path(root) / LEGACY_VAULT_DIR
    if not legacy.exists():
        return False
    shutil.rmtree(legacy)
    logger.info("Removed legacy vault at %s", legacy)
    return True


def global_home() -> Path:
    """Directory holding the per-user default (AGVAULT_HOME or ~/.agvault)."""
    return Path(os.environ.get("AGVAULT_HOME", AGVAULT_HOME)).expanduser()


def global_default_path() -> Path:
    return global_home() / GLOBAL_FILE


def load_global_default() -> Optional[GlobalDefault]:
    """Load the default vault URL used by init in new projects.

    Returns:
        The default, or None if missing, blank, or unreadable.
    """
    path = global_default_path()
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        default = GlobalDefault.model_validate(data)
    except (json.JSONDecodeError, ValidationError, OSError) as exc:
        logger.warning("Ignoring unreadable global default %s: %s", path, exc)
        return None
    url = default.default_repo_url.strip()
    if not url:
        return None
    return GlobalDefault(default_repo_url=url)


def save_global_default(repo_url: str) -> Path:
    """Remember repo_url as the default vault for future projects."""
    path = global_default_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    default = GlobalDefault(default_repo_url=repo_url.strip())
    path.write_text(
        json.dumps(default.model_dump(by_alias=True), indent=2) + "\n",
        encoding="utf-8",
    )
    return path
