"""User-facing texts returned by the orchestrator and vote processor."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from runtime.version import as_string

MENU_UNAVAILABLE = "Sorry, today's menu could not be retrieved. Try again in a bit."
POLL_FAILED = "Sorry, the polls could not be created. Try again in a bit."
NOTHING_TO_SHOW = "Nothing to show yet. Start a round first."
NO_VOTES_YET = "No votes yet."
NO_LAST_VOTER = "Nobody has voted yet, so there is no call to make."
ALREADY_CALLED = "The call was already made for this round."
NOTHING = "nothing"
NOBODY_YET = "nobody yet"

ENTRANTS_TITLE = "Entrants"
SECONDS_TITLE = "Seconds"


def alive() -> str:
    return f"Still here and hungry. {as_string()}"


def round_started(display_name: str) -> str:
    return f"{display_name} started today's lunch polls. Vote away!"


def caller_nominated(display_name: str) -> str:
    return f"Today's call goes to... {display_name}!"


def call_made(caller: str, last_voter: str) -> str:
    return f"{caller} made the call. {last_voter} was the last to vote."


def too_late(display_name: str) -> str:
    return f"Too late, {display_name}: the call was already made."


def brought_lunch(display_name: str) -> str:
    return f"Noted, {display_name} brought their own lunch today."


def unknown_ranking(key: str, known: Iterable[str]) -> str:
    return f"Unknown ranking '{key}'. Try one of: {', '.join(known)}"


def order_section(title: str, tally: Dict[str, int]) -> str:
    lines = [f"{title}:"]
    if not tally:
        lines.append(f"  {NOTHING}")
    for dish, count in tally.items():
        lines.append(f"  {count} x {dish}")
    return "\n".join(lines)


def order(entrants: Dict[str, int], seconds: Dict[str, int]) -> str:
    return "\n".join(
        [
            order_section(ENTRANTS_TITLE, entrants),
            order_section(SECONDS_TITLE, seconds),
        ]
    )


def ranking(title: str, rows: List[Tuple[str, int]]) -> str:
    lines = [f"{title}:"]
    if not rows:
        lines.append(NOBODY_YET)
    for position, (name, value) in enumerate(rows, start=1):
        lines.append(f"{position}. {name}: {value}")
    return "\n".join(lines)


def help_text(commands: Iterable[Tuple[str, str]]) -> str:
    lines = ["Commands:"]
    for name, description in commands:
        lines.append(f"/{name} - {description}")
    return "\n".join(lines)
