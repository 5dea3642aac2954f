"""
Vote event processor.

Applies complete-selection vote events to the round ledger and the
score ledger in one critical section per event.
"""
from __future__ import annotations

from typing import Optional

from core import messages
from core.context import AppContext
from shared.chat.events import SendText, VoteChanged
from shared.logging.logger import get_logger

log = get_logger("core.votes")


class VoteEventProcessor:
    def __init__(self, ctx: AppContext):
        self._ctx = ctx

    def apply_vote(self, event: VoteChanged) -> Optional[SendText]:
        """
        Fold one vote event into the round.

        Returns a notification only for the first vote a member casts after
        the call. Every late vote is still counted.
        """
        ctx = self._ctx
        member = event.member
        selected = tuple(event.selected_option_indices)
        notification: Optional[SendText] = None

        with ctx.lock:
            found = ctx.tracker.find_by_poll(event.poll_id)
            if found is None:
                log.debug(f"Vote for unknown poll {event.poll_id} dropped")
                return None

            state, side = found
            chat_id = state.chat_id

            if state.call_made:
                ctx.ledger.increment(chat_id, member, "out_of_time_votes")
                if member.member_id not in state.late_notified:
                    state.late_notified.add(member.member_id)
                    notification = SendText(
                        chat_id=chat_id,
                        text=messages.too_late(member.display_name),
                    )
                log.info(
                    f"[{chat_id}] Out of time vote from {member.member_id} dropped"
                )
            else:
                if not selected:
                    ctx.ledger.increment(chat_id, member, "retracted_votes")

                if not state.first_vote_recorded:
                    ctx.ledger.increment(chat_id, member, "fastest_votes")
                    state.first_vote_recorded = True
                    log.info(f"[{chat_id}] First vote by {member.member_id}")

                state.last_voting_member = member
                state.selection_for(member).replace(side, selected)
                # Lazy registration for members who never ran a command
                ctx.ledger.ensure_member(chat_id, member)

            pending = ctx.capture()

        ctx.flush(pending)
        return notification
