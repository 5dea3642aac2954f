import json
import time
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from shared.logging.logger import get_logger
from shared.scoreboards.ledger import LedgerSnapshot
from shared.storage.state_publisher import StatePublisher

_log = get_logger("shared.state_store")

SCHEMA_VERSION = "v1"


class LedgerStore:
    """
    Write-through JSON persistence for the score ledger.

    - load() is best-effort: a missing or corrupt file yields an empty ledger
    - save() never raises: failures are logged and the next save reconciles
    - snapshots carry a generation; an older one never overwrites a newer one
    """

    def __init__(
        self,
        path: Path | str,
        *,
        publisher: Optional[StatePublisher] = None,
    ):
        self._path = Path(path)
        self._publisher = publisher or StatePublisher()
        self._write_lock = Lock()
        self._written_generation = -1

    @property
    def path(self) -> Path:
        return self._path

    # ======================================================================
    # LOAD
    # ======================================================================

    def load(self) -> LedgerSnapshot:
        if not self._path.exists():
            _log.info(f"No ledger at {self._path}; starting empty")
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except Exception as e:
            _log.warning(f"Failed to load ledger state, starting empty: {e}")
            return {}

        if not isinstance(raw, dict):
            _log.warning("Ledger state is not a mapping; starting empty")
            return {}

        # Bare chat -> member mappings predate the wrapped document
        chats = raw.get("chats", raw) if "schema_version" in raw else raw
        if not isinstance(chats, dict):
            _log.warning("Ledger state has no chat mapping; starting empty")
            return {}
        return chats

    # ======================================================================
    # SAVE
    # ======================================================================

    def save(self, snapshot: LedgerSnapshot, *, generation: int = 0) -> bool:
        """
        Persist a snapshot. Returns True when the file was written.
        """
        document: Dict[str, Any] = {
            "schema_version": SCHEMA_VERSION,
            "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "chats": snapshot,
        }

        with self._write_lock:
            if generation and generation <= self._written_generation:
                _log.debug(
                    f"Skipping stale ledger snapshot (generation={generation}, "
                    f"written={self._written_generation})"
                )
                return False
            try:
                self._publisher.publish(self._path, document)
            except Exception as e:
                _log.error(f"Failed to persist ledger state: {e}")
                return False
            self._written_generation = max(self._written_generation, generation)
            return True
