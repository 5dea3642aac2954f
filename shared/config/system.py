from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from shared.logging.logger import get_logger

log = get_logger("shared.config.system")

_CONFIG_PATH = Path(__file__).parent / "system.json"


@dataclass
class MenuConfig:
    url: str = ""
    timeout_seconds: float = 10
    entrants_heading: str = "Entrantes"
    seconds_heading: str = "Segundos"
    oversized_label: str = "XL"


@dataclass
class PollConfig:
    entrants_question: str = "Entrants"
    seconds_question: str = "Seconds"
    duration_hours: int = 4


@dataclass
class StorageConfig:
    ledger_path: Optional[str] = None


@dataclass
class SystemConfig:
    menu: MenuConfig = field(default_factory=MenuConfig)
    polls: PollConfig = field(default_factory=PollConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def _load_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        log.warning(f"system.json not found at {path}; using defaults")
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except Exception as e:  # pragma: no cover - defensive
        log.warning(f"Failed to load system.json ({e}); using defaults")
        return {}


def _str(raw: Dict[str, Any], key: str, default: str) -> str:
    value = raw.get(key, default)
    if not isinstance(value, str) or not value.strip():
        if key in raw:
            log.warning(f"{key} must be a non-empty string; defaulting to {default!r}")
        return default
    return value.strip()


def _positive(raw: Dict[str, Any], key: str, default, cast):
    value = raw.get(key, default)
    try:
        parsed = cast(value)
    except Exception:
        log.warning(f"{key} must be numeric; defaulting to {default}")
        return default
    if parsed <= 0:
        log.warning(f"{key} must be positive; defaulting to {default}")
        return default
    return parsed


def _load_menu(raw: Optional[Dict[str, Any]]) -> MenuConfig:
    if not isinstance(raw, dict):
        raw = {}

    defaults = MenuConfig()
    url = os.getenv("LUNCHPOLL_MENU_URL") or raw.get("url") or defaults.url
    return MenuConfig(
        url=str(url),
        timeout_seconds=_positive(raw, "timeout_seconds", defaults.timeout_seconds, float),
        entrants_heading=_str(raw, "entrants_heading", defaults.entrants_heading),
        seconds_heading=_str(raw, "seconds_heading", defaults.seconds_heading),
        oversized_label=_str(raw, "oversized_label", defaults.oversized_label),
    )


def _load_polls(raw: Optional[Dict[str, Any]]) -> PollConfig:
    if not isinstance(raw, dict):
        return PollConfig()

    defaults = PollConfig()
    return PollConfig(
        entrants_question=_str(raw, "entrants_question", defaults.entrants_question),
        seconds_question=_str(raw, "seconds_question", defaults.seconds_question),
        duration_hours=_positive(raw, "duration_hours", defaults.duration_hours, int),
    )


def _load_storage(raw: Optional[Dict[str, Any]]) -> StorageConfig:
    if not isinstance(raw, dict):
        return StorageConfig()

    path = raw.get("ledger_path")
    return StorageConfig(ledger_path=str(path) if path else None)


def load_system_config(raw: Optional[Dict[str, Any]] = None) -> SystemConfig:
    raw = raw if raw is not None else _load_json(_CONFIG_PATH)
    if not isinstance(raw, dict):
        raw = {}

    return SystemConfig(
        menu=_load_menu(raw.get("menu")),
        polls=_load_polls(raw.get("polls")),
        storage=_load_storage(raw.get("storage")),
    )
