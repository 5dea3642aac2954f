"""Discord poll helper tests."""

from __future__ import annotations

from services.discord.polls import MAX_POLL_ANSWERS, PollSelectionFolder, build_poll
from shared.chat.events import CreatePoll


def _folder(*poll_ids: str) -> PollSelectionFolder:
    folder = PollSelectionFolder()
    folder.open_round("c", poll_ids)
    return folder


def test_folder_turns_deltas_into_full_selections() -> None:
    folder = _folder("p")

    assert folder.apply("p", "u1", 1, added=True) == (0,)
    assert folder.apply("p", "u1", 3, added=True) == (0, 2)
    assert folder.apply("p", "u2", 2, added=True) == (1,)
    assert folder.apply("p", "u1", 1, added=False) == (2,)
    assert folder.apply("p", "u1", 3, added=False) == ()


def test_folder_ignores_invalid_answer_ids() -> None:
    folder = _folder("p")
    folder.apply("p", "u1", 2, added=True)

    assert folder.apply("p", "u1", 0, added=True) == (1,)


def test_folder_keeps_no_state_for_unregistered_polls() -> None:
    folder = _folder("e1", "s1")

    assert folder.apply("elsewhere", "u1", 1, added=True) is None
    assert not folder.tracks("elsewhere")
    assert folder._answers == {"e1": {}, "s1": {}}


def test_open_round_forgets_previous_polls_of_chat() -> None:
    folder = _folder("e1", "s1")
    folder.apply("e1", "u1", 1, added=True)

    folder.open_round("c", ("e2", "s2"))

    assert not folder.tracks("e1")
    assert folder.apply("e1", "u1", 2, added=True) is None
    assert folder.apply("e2", "u1", 2, added=True) == (1,)


def test_build_poll_respects_discord_limits() -> None:
    options = [f"Dish number {i} with a very long and descriptive name indeed" for i in range(12)]
    poll = build_poll(
        CreatePoll(chat_id="c", question="Entrants", options=options),
        duration_hours=4,
    )

    assert poll.multiple is True
    assert len(poll.answers) == MAX_POLL_ANSWERS
    assert all(len(answer.text) <= 55 for answer in poll.answers)
