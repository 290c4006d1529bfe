"""
Vault sync -- ephemeral clones of a private git repository.

No clone outlives the command that made it. Projects share one vault,
each in its own workspace directory.
"""

from .engine import VaultEngine
from .session import VaultSession, vault_session, with_temp_vault

__all__ = ["VaultEngine", "VaultSession", "vault_session", "with_temp_vault"]
