"""
Round orchestrator.

Member-facing operations (start round, nominate caller, show order,
call made, rankings). Composes the round tracker, the order aggregator
and the score ledger under the context lock; menu fetch, poll creation
and persistence happen outside it.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from core import messages
from core.context import AppContext, PendingSnapshot
from core.orders import aggregate
from core.rounds import NoActiveRound
from services.menu.provider import MenuProvider, MenuUnavailable
from shared.chat.events import CommandInvoked, CreatePoll, Member
from shared.logging.logger import get_logger
from shared.scoreboards.ledger import ScoreProjection

log = get_logger("core.orchestrator")

REPLY_KINDS = (
    "ok",
    "menu_unavailable",
    "poll_failed",
    "no_active_round",
    "no_votes",
    "no_last_voter",
    "already_called",
    "unknown_ranking",
)

PollFactory = Callable[[CreatePoll], Awaitable[str]]


@dataclass(frozen=True)
class Reply:
    kind: str
    text: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.kind not in REPLY_KINDS:
            raise ValueError(f"Unknown reply kind: {self.kind}")

    @property
    def ok(self) -> bool:
        return self.kind == "ok"


def fit_options(options: List[str], limit: Optional[int]) -> List[str]:
    """Trim dishes so the list fits a transport limit, keeping the marker last."""
    if not limit or len(options) <= limit:
        return list(options)
    return list(options[: limit - 1]) + [options[-1]]


class RoundOrchestrator:
    def __init__(
        self,
        ctx: AppContext,
        menu: MenuProvider,
        *,
        entrants_question: str = "Entrants",
        seconds_question: str = "Seconds",
        max_poll_options: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self._ctx = ctx
        self._menu = menu
        self.entrants_question = entrants_question
        self.seconds_question = seconds_question
        self.max_poll_options = max_poll_options
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _finish(self, pending: Optional[PendingSnapshot], reply: Reply) -> Reply:
        self._ctx.flush(pending)
        return reply

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_member(self, chat_id: str, member: Member) -> None:
        """Create the member's record if missing and refresh the name."""
        ctx = self._ctx
        with ctx.lock:
            ctx.ledger.ensure_member(chat_id, member)
            pending = ctx.capture()
        ctx.flush(pending)

    # ------------------------------------------------------------------
    # Start round
    # ------------------------------------------------------------------

    async def start_round(
        self,
        chat_id: str,
        member: Member,
        create_poll: PollFactory,
    ) -> Reply:
        self.register_member(chat_id, member)

        try:
            entrants, seconds = await self._menu.fetch_today_menu()
        except MenuUnavailable as e:
            log.warning(f"[{chat_id}] Round not started, menu unavailable: {e}")
            return Reply("menu_unavailable", messages.MENU_UNAVAILABLE)

        for side, options in (("entrants", entrants), ("seconds", seconds)):
            if self.max_poll_options and len(options) > self.max_poll_options:
                log.warning(
                    f"[{chat_id}] {side} menu has {len(options)} options; "
                    f"keeping {self.max_poll_options}"
                )
        entrants = fit_options(entrants, self.max_poll_options)
        seconds = fit_options(seconds, self.max_poll_options)

        try:
            entrants_poll_id = await create_poll(
                CreatePoll(chat_id=chat_id, question=self.entrants_question, options=entrants)
            )
            seconds_poll_id = await create_poll(
                CreatePoll(chat_id=chat_id, question=self.seconds_question, options=seconds)
            )
        except Exception as e:
            log.error(f"[{chat_id}] Failed to create polls: {e}")
            return Reply("poll_failed", messages.POLL_FAILED)

        ctx = self._ctx
        with ctx.lock:
            ctx.tracker.start_round(
                chat_id,
                entrants,
                seconds,
                entrants_poll_id,
                seconds_poll_id,
                started_by=member,
            )
            ctx.ledger.increment(chat_id, member, "polls_started")
            pending = ctx.capture()

        return self._finish(
            pending,
            Reply(
                "ok",
                messages.round_started(member.display_name),
                data={
                    "entrants_poll_id": str(entrants_poll_id),
                    "seconds_poll_id": str(seconds_poll_id),
                },
            ),
        )

    # ------------------------------------------------------------------
    # Nominate caller
    # ------------------------------------------------------------------

    def nominate_caller(self, chat_id: str, member: Member) -> Reply:
        ctx = self._ctx
        with ctx.lock:
            ctx.ledger.ensure_member(chat_id, member)
            pending = ctx.capture()
            state = ctx.tracker.get_round(chat_id)
            voters = state.voters() if state is not None else []

        if state is None:
            return self._finish(pending, Reply("no_active_round", messages.NOTHING_TO_SHOW))
        if not voters:
            return self._finish(pending, Reply("no_votes", messages.NO_VOTES_YET))

        chosen = self._rng.choice(voters)
        log.info(f"[{chat_id}] Caller nominated: {chosen.member_id}")
        return self._finish(
            pending,
            Reply(
                "ok",
                messages.caller_nominated(chosen.display_name),
                data={"member": chosen},
            ),
        )

    # ------------------------------------------------------------------
    # Show order
    # ------------------------------------------------------------------

    def show_order(self, chat_id: str, member: Member) -> Reply:
        ctx = self._ctx
        with ctx.lock:
            ctx.ledger.ensure_member(chat_id, member)
            try:
                state = ctx.tracker.require_round(chat_id)
            except NoActiveRound:
                pending = ctx.capture()
                state = None
            else:
                summary = aggregate(state)
                for oversized in summary.oversized_members:
                    if oversized.member_id in state.oversized_credited:
                        continue
                    ctx.ledger.increment(chat_id, oversized, "oversized_dishes")
                    state.oversized_credited.add(oversized.member_id)
                pending = ctx.capture()

        if state is None:
            return self._finish(pending, Reply("no_active_round", messages.NOTHING_TO_SHOW))

        return self._finish(
            pending,
            Reply(
                "ok",
                messages.order(summary.entrants, summary.seconds),
                data={"summary": summary},
            ),
        )

    # ------------------------------------------------------------------
    # Call made
    # ------------------------------------------------------------------

    def call_made(self, chat_id: str, member: Member) -> Reply:
        ctx = self._ctx
        with ctx.lock:
            ctx.ledger.ensure_member(chat_id, member)
            state = ctx.tracker.get_round(chat_id)
            last_voter: Optional[Member] = None

            if state is None:
                kind = "no_active_round"
            elif state.call_made:
                kind = "already_called"
            elif state.last_voting_member is None:
                kind = "no_last_voter"
            else:
                last_voter = ctx.tracker.mark_call_made(chat_id)
                ctx.ledger.increment(chat_id, member, "calls_made")
                if last_voter is not None:
                    ctx.ledger.increment(chat_id, last_voter, "slowest_votes")
                kind = "ok"
            pending = ctx.capture()

        if kind == "no_active_round":
            return self._finish(pending, Reply(kind, messages.NOTHING_TO_SHOW))
        if kind == "already_called":
            return self._finish(pending, Reply(kind, messages.ALREADY_CALLED))
        if kind == "no_last_voter":
            return self._finish(pending, Reply(kind, messages.NO_LAST_VOTER))

        log.info(
            f"[{chat_id}] Call made by {member.member_id}; "
            f"last voter {last_voter.member_id}"
        )
        return self._finish(
            pending,
            Reply(
                "ok",
                messages.call_made(member.display_name, last_voter.display_name),
                data={"last_voter": last_voter},
            ),
        )

    # ------------------------------------------------------------------
    # Brought own lunch
    # ------------------------------------------------------------------

    def brought_lunch(self, chat_id: str, member: Member) -> Reply:
        ctx = self._ctx
        with ctx.lock:
            ctx.ledger.increment(chat_id, member, "items_brought")
            pending = ctx.capture()
        return self._finish(pending, Reply("ok", messages.brought_lunch(member.display_name)))

    # ------------------------------------------------------------------
    # Rankings
    # ------------------------------------------------------------------

    def show_ranking(self, chat_id: str, projection: ScoreProjection, title: str) -> Reply:
        """Render all members of the chat sorted ascending by a projection."""
        ctx = self._ctx
        with ctx.lock:
            rows = [
                (record.display_name, value)
                for _, record, value in ctx.ledger.ranking(chat_id, projection)
            ]
        return Reply("ok", messages.ranking(title, rows), data={"rows": rows})

    def rank(self, chat_id: str, member: Member, metric_key: str) -> Reply:
        self.register_member(chat_id, member)
        metric = self._ctx.rankings.get(metric_key)
        if metric is None:
            known = [m.key for m in self._ctx.rankings.metrics()]
            return Reply("unknown_ranking", messages.unknown_ranking(metric_key, known))
        return self.show_ranking(chat_id, metric.projection, metric.title)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def handle(self, event: CommandInvoked) -> Reply:
        """
        Dispatch a synchronous member command.

        Starting a round needs the transport's poll factory and goes
        through start_round() directly.
        """
        kind = event.command_kind
        chat_id, member = event.chat_id, event.member

        if kind == "alive":
            self.register_member(chat_id, member)
            return Reply("ok", messages.alive())
        if kind == "rank":
            return self.rank(chat_id, member, event.argument or "")

        handlers = {
            "nominate_caller": self.nominate_caller,
            "show_order": self.show_order,
            "call_made": self.call_made,
            "brought_lunch": self.brought_lunch,
        }
        handler = handlers.get(kind)
        if handler is None:
            raise ValueError(f"Unsupported command kind: {kind}")
        return handler(chat_id, member)
