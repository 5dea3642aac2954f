"""
Ranking metric registry.

Responsibilities:
- Declare the rankings members can ask for
- Map each ranking to a pure ScoreRecord -> int projection
- Provide deterministic, read-only accessors for command surfaces
"""
from __future__ import annotations

from dataclasses import dataclass
from operator import attrgetter
from typing import Dict, List, Optional

from shared.scoreboards.ledger import COUNTER_FIELDS, ScoreProjection


@dataclass(frozen=True)
class RankingMetric:
    """Descriptor for one ranking: command key, title and projection."""

    key: str
    title: str
    description: str
    projection: ScoreProjection


class RankingRegistry:
    """
    In-memory registry of ranking metrics.

    Registration order is preserved for help output.
    """

    def __init__(self) -> None:
        self._metrics: Dict[str, RankingMetric] = {}

    def register(self, metric: RankingMetric) -> None:
        """
        Register a ranking metric.
        Existing registrations are replaced to keep the registry authoritative.
        """
        self._metrics[metric.key] = metric

    def get(self, key: str) -> Optional[RankingMetric]:
        return self._metrics.get((key or "").strip().lower())

    def metrics(self) -> List[RankingMetric]:
        return list(self._metrics.values())


def counter_metric(key: str, counter: str, title: str, description: str) -> RankingMetric:
    if counter not in COUNTER_FIELDS:
        raise KeyError(f"Unknown counter: {counter}")
    return RankingMetric(
        key=key,
        title=title,
        description=description,
        projection=attrgetter(counter),
    )


def build_default_registry() -> RankingRegistry:
    registry = RankingRegistry()
    for metric in (
        counter_metric("polls", "polls_started", "Polls started", "Who started the most lunch polls"),
        counter_metric("calls", "calls_made", "Calls made", "Who placed the most phone calls"),
        counter_metric("xl", "oversized_dishes", "XL dishes ordered", "Who ordered the most XL dishes"),
        counter_metric("fastest", "fastest_votes", "Fastest voters", "Who voted first the most"),
        counter_metric("slowest", "slowest_votes", "Slowest voters", "Who voted last the most"),
        counter_metric("retracts", "retracted_votes", "Retracted votes", "Who cleared their vote the most"),
        counter_metric("late", "out_of_time_votes", "Out of time votes", "Who voted after the call the most"),
        counter_metric("tuppers", "items_brought", "Brought their own lunch", "Who brought their own lunch the most"),
    ):
        registry.register(metric)
    return registry


__all__ = [
    "RankingMetric",
    "RankingRegistry",
    "build_default_registry",
    "counter_metric",
]
