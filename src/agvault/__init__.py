"""
agvault: a private git vault for the files your projects don't commit.

Docs, agent rules, notes. Stored in one private repo, namespaced per
project, cloned to a temp directory only for as long as a command runs.
"""

__version__ = "0.1.0"

# Fallback for the per-user directory; the AGVAULT_HOME environment
# variable overrides it at call time.
AGVAULT_HOME = "~/.agvault"
