"""Ledger persistence tests."""

from __future__ import annotations

import json

from shared.storage.state_store import LedgerStore


class _FailingPublisher:
    def publish(self, target, payload):
        raise OSError("disk full")


def test_missing_file_loads_empty(tmp_path) -> None:
    assert LedgerStore(tmp_path / "nope.json").load() == {}


def test_corrupt_file_loads_empty(tmp_path) -> None:
    path = tmp_path / "ledger.json"
    path.write_text("{not json", encoding="utf-8")
    assert LedgerStore(path).load() == {}


def test_save_then_load_is_lossless(tmp_path) -> None:
    store = LedgerStore(tmp_path / "ledger.json")
    snapshot = {"c": {"1": {"display_name": "Álvaro", "calls_made": 2, "items_brought": 5}}}

    assert store.save(snapshot, generation=1) is True
    assert store.load() == snapshot

    document = json.loads((tmp_path / "ledger.json").read_text(encoding="utf-8"))
    assert document["schema_version"] == "v1"


def test_bare_mapping_is_accepted(tmp_path) -> None:
    path = tmp_path / "ledger.json"
    path.write_text(json.dumps({"c": {"1": {"display_name": "A"}}}), encoding="utf-8")
    assert LedgerStore(path).load() == {"c": {"1": {"display_name": "A"}}}


def test_stale_generation_never_overwrites_newer(tmp_path) -> None:
    store = LedgerStore(tmp_path / "ledger.json")
    store.save({"c": {"1": {"display_name": "new"}}}, generation=5)

    assert store.save({"c": {"1": {"display_name": "old"}}}, generation=4) is False
    assert store.load()["c"]["1"]["display_name"] == "new"


def test_write_failure_is_absorbed(tmp_path) -> None:
    store = LedgerStore(tmp_path / "ledger.json", publisher=_FailingPublisher())

    assert store.save({"c": {}}, generation=1) is False
    assert not (tmp_path / "ledger.json").exists()
