"""
Application context.

Explicitly owned state handle passed to every handler. One lock guards
the (RoundTracker, ScoreLedger) pair; no I/O or await happens under it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Optional

from core.rounds import RoundTracker
from shared.logging.logger import get_logger
from shared.scoreboards.ledger import LedgerSnapshot, ScoreLedger
from shared.scoreboards.registry import RankingRegistry, build_default_registry
from shared.storage.state_store import LedgerStore

log = get_logger("core.context")


@dataclass(frozen=True)
class PendingSnapshot:
    """Ledger snapshot captured under the lock, written after release."""

    generation: int
    snapshot: LedgerSnapshot


@dataclass
class AppContext:
    tracker: RoundTracker = field(default_factory=RoundTracker)
    ledger: ScoreLedger = field(default_factory=ScoreLedger)
    rankings: RankingRegistry = field(default_factory=build_default_registry)
    store: Optional[LedgerStore] = None
    lock: Lock = field(default_factory=Lock, repr=False)
    _generation: int = field(default=0, repr=False)

    @classmethod
    def from_store(cls, store: LedgerStore) -> "AppContext":
        ledger = ScoreLedger.from_snapshot(store.load())
        log.info(f"Ledger loaded from {store.path} ({len(ledger.chats())} chat(s))")
        return cls(ledger=ledger, store=store)

    # ------------------------------------------------------------------
    # Persistence hand-off
    # ------------------------------------------------------------------

    def capture(self) -> PendingSnapshot:
        """Snapshot the ledger. Caller MUST hold self.lock."""
        self._generation += 1
        return PendingSnapshot(generation=self._generation, snapshot=self.ledger.snapshot())

    def flush(self, pending: Optional[PendingSnapshot]) -> None:
        """Write a captured snapshot. Caller MUST NOT hold self.lock."""
        if pending is None or self.store is None:
            return
        self.store.save(pending.snapshot, generation=pending.generation)
