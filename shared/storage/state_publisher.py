"""
State file publisher.

Centralizes atomic writes of JSON state snapshots, with optional
mirroring into a second directory (e.g. a synced backup folder).
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from shared.logging.logger import get_logger

log = get_logger("shared.state_publisher")


class StatePublisher:
    """
    Atomic snapshot writer with optional mirroring.

    Unlike a best-effort exporter, publish() raises on failure of the
    primary write so callers can decide how to report it.
    """

    ENV_KEYS = ("LUNCHPOLL_STATE_MIRROR_ROOT",)

    def __init__(self, mirror_root: Path | str | None = None):
        env_root = self._get_env_mirror_root()
        self._mirror_root = (
            Path(mirror_root)
            if mirror_root
            else (Path(env_root) if env_root else None)
        )

        if self._mirror_root:
            self._mirror_root.mkdir(parents=True, exist_ok=True)
            log.info(f"State mirror root: {self._mirror_root}")

    # ------------------------------------------------------------------
    # Environment helpers
    # ------------------------------------------------------------------

    def _get_env_mirror_root(self) -> Optional[str]:
        for key in self.ENV_KEYS:
            val = os.getenv(key)
            if val:
                return val
        return None

    # ------------------------------------------------------------------
    # Atomic writer
    # ------------------------------------------------------------------

    def _write_atomic(self, path: Path, payload: Any) -> None:
        serialized = json.dumps(payload, indent=2, ensure_ascii=False)
        path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            "w", dir=path.parent, delete=False, encoding="utf-8"
        ) as tmp:
            tmp.write(serialized)
            tmp.flush()
            os.fsync(tmp.fileno())
            temp_path = Path(tmp.name)

        temp_path.replace(path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def publish(self, target: Path | str, payload: Any) -> None:
        """
        Write snapshot to target and optionally mirror it to
        <mirror_root>/<target name>.
        """
        path = Path(target)
        self._write_atomic(path, payload)

        if not self._mirror_root:
            return

        mirror = self._mirror_root / path.name
        try:
            self._write_atomic(mirror, payload)
        except OSError as e:
            log.warning(f"Failed to mirror snapshot {path.name}: {e}")
