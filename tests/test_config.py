"""System config loader tests."""

from __future__ import annotations

from shared.config.system import load_system_config


def test_defaults_when_empty(monkeypatch) -> None:
    monkeypatch.delenv("LUNCHPOLL_MENU_URL", raising=False)
    config = load_system_config({})

    assert config.menu.url == ""
    assert config.menu.oversized_label == "XL"
    assert config.polls.duration_hours == 4
    assert config.storage.ledger_path is None


def test_values_and_fallbacks(monkeypatch) -> None:
    monkeypatch.delenv("LUNCHPOLL_MENU_URL", raising=False)
    config = load_system_config(
        {
            "menu": {"url": "https://menu.example", "timeout_seconds": "abc", "oversized_label": "  "},
            "polls": {"entrants_question": "Starters?", "duration_hours": -2},
            "storage": {"ledger_path": "/tmp/ledger.json"},
        }
    )

    assert config.menu.url == "https://menu.example"
    assert config.menu.timeout_seconds == 10
    assert config.menu.oversized_label == "XL"
    assert config.polls.entrants_question == "Starters?"
    assert config.polls.duration_hours == 4
    assert config.storage.ledger_path == "/tmp/ledger.json"


def test_env_overrides_menu_url(monkeypatch) -> None:
    monkeypatch.setenv("LUNCHPOLL_MENU_URL", "https://env.example")
    assert load_system_config({"menu": {"url": "https://file.example"}}).menu.url == "https://env.example"
