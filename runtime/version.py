"""Version identifiers reported by /alive and the boot log line."""

from __future__ import annotations

PROJECT_NAME = "LunchPoll"
VERSION = "0.4.0"
BUILD = "2026.10"

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "BUILD",
    "as_string",
]


def as_string() -> str:
    """Return e.g. 'LunchPoll v0.4.0 (build 2026.10)'."""

    return f"{PROJECT_NAME} v{VERSION} (build {BUILD})"
