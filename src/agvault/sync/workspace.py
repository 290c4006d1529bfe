"""
Workspace mapping -- where a project's files live inside the vault.

    <clone>/vault/<workspace>/<relative path>

The workspace is the base name of the project root, so one vault
repository can hold many projects side by side.
"""

from __future__ import annotations

from pathlib import Path

CONTENT_DIR = "vault"
DEFAULT_WORKSPACE = "default"


def workspace_name(project_root: Path) -> str:
    """Workspace for a project: its directory name, or 'default'."""
    return Path(project_root).name or DEFAULT_WORKSPACE


def content_root(vault_path: Path) -> Path:
    """Directory holding every workspace inside a vault clone."""
    return Path(vault_path) / CONTENT_DIR


def workspace_root(vault_path: Path, project_root: Path) -> Path:
    """This project's partition inside a vault clone."""
    return content_root(vault_path) / workspace_name(project_root)


def vault_path_for(vault_path: Path, project_root: Path, rel_path: str) -> Path:
    """Vault location of a project-relative path."""
    return workspace_root(vault_path, project_root).joinpath(*rel_path.split("/"))


def project_path_for(project_root: Path, rel_path: str) -> Path:
    """Project location of a workspace-relative path."""
    return Path(project_root).joinpath(*rel_path.split("/"))
