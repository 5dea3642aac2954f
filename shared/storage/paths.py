"""
Shared storage path utilities.

Canonical filesystem locations for persisted runtime state.

Design goals:
- Single source of truth for storage paths
- OS-safe, repo-relative resolution
- Zero side effects beyond directory creation
"""

from __future__ import annotations

import os
from pathlib import Path

# ----------------------------------------------------------------------
# BASE DIRECTORIES
# ----------------------------------------------------------------------

# Repo root is assumed to be the current working directory
# when the bot is launched (consistent with core.app)
BASE_DIR = Path.cwd()

STORAGE_DIR = BASE_DIR / "shared" / "storage"
STATE_DIR = STORAGE_DIR / "state"

DEFAULT_LEDGER_NAME = "ledger.json"


# ----------------------------------------------------------------------
# STATE PATH HELPERS
# ----------------------------------------------------------------------

def get_state_path(name: str) -> Path:
    """
    Return a path inside the shared state directory.

    Example:
        get_state_path("ledger.json")

    This function DOES NOT write files.
    It only guarantees directory existence.
    """

    path = STATE_DIR / name
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def resolve_ledger_path(configured: str | None = None) -> Path:
    """
    Resolve the ledger file location.

    Precedence: LUNCHPOLL_LEDGER_PATH env var, configured value,
    then shared/storage/state/ledger.json.
    """

    override = os.getenv("LUNCHPOLL_LEDGER_PATH") or configured
    if override:
        path = Path(override)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
    return get_state_path(DEFAULT_LEDGER_NAME)
