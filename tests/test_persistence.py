"""Tests for session storage and the bounded ledgers."""

from __future__ import annotations

import logging

from canteen.models import SubmissionRecord
from canteen.persistence import FAILED_LEDGER_KEY, SUCCESS_LEDGER_KEY, SessionStorage, SubmissionLedger


def _record(idx: int) -> SubmissionRecord:
    return SubmissionRecord(timestamp=f"2026-10-19T17:{idx:02d}:00+00:00", type="order", success=True)


def test_storage_round_trips_values(storage):
    assert storage.get_item("order") is None
    storage.set_item("order", "first")
    storage.set_item("order", "second")
    assert storage.get_item("order") == "second"
    storage.remove_item("order")
    assert storage.get_item("order") is None


def test_storage_json_helpers(storage):
    storage.set_json("lastOrder", {"name": "Asha", "items": [1, 2]})
    assert storage.get_json("lastOrder") == {"name": "Asha", "items": [1, 2]}
    assert storage.get_json("missing", default=[]) == []


def test_storage_is_private_to_each_instance():
    first, second = SessionStorage(), SessionStorage()
    first.set_item("order", "x")
    assert second.get_item("order") is None
    first.close()
    second.close()


def test_file_backed_storage(tmp_path):
    db_path = tmp_path / "nested" / "session.db"
    store = SessionStorage(str(db_path))
    store.set_item("order", "x")
    store.clear()
    assert store.get_item("order") is None
    assert db_path.exists()
    store.close()


def test_append_bounded_evicts_oldest_first(ledger):
    for idx in range(11):
        ledger.append_bounded(SUCCESS_LEDGER_KEY, _record(idx), capacity=10)

    records = ledger.read_all(SUCCESS_LEDGER_KEY)
    assert records == [_record(idx) for idx in range(1, 11)]


def test_replace_all_overwrites(ledger):
    ledger.replace_all(FAILED_LEDGER_KEY, [_record(1), _record(2)])
    ledger.replace_all(FAILED_LEDGER_KEY, [_record(3)])
    assert ledger.read_all(FAILED_LEDGER_KEY) == [_record(3)]


def test_corrupt_ledger_reads_as_empty(storage, ledger, caplog):
    storage.set_item(FAILED_LEDGER_KEY, "{not json")
    with caplog.at_level(logging.WARNING):
        assert ledger.read_all(FAILED_LEDGER_KEY) == []
    assert "Failed to read ledger" in caplog.text


def test_wrong_shape_ledger_reads_as_empty(storage, ledger):
    storage.set_item(SUCCESS_LEDGER_KEY, '{"timestamp": "x"}')
    assert ledger.read_all(SUCCESS_LEDGER_KEY) == []
    storage.set_item(SUCCESS_LEDGER_KEY, '[{"type": "order"}]')
    assert ledger.read_all(SUCCESS_LEDGER_KEY) == []


def test_append_recovers_from_corrupt_ledger(storage, ledger):
    storage.set_item(SUCCESS_LEDGER_KEY, "garbage")
    ledger.append_bounded(SUCCESS_LEDGER_KEY, _record(1), capacity=10)
    assert ledger.read_all(SUCCESS_LEDGER_KEY) == [_record(1)]


def test_closed_storage_is_logged_not_raised(caplog):
    store = SessionStorage()
    ledger = SubmissionLedger(store)
    store.close()
    with caplog.at_level(logging.WARNING):
        assert ledger.read_all(SUCCESS_LEDGER_KEY) == []
        ledger.append_bounded(SUCCESS_LEDGER_KEY, _record(1), capacity=10)
    assert "Failed to write ledger" in caplog.text


def test_legacy_failure_entry_without_type():
    record = SubmissionRecord.from_dict(
        {"timestamp": "2026-10-19T17:00:00+00:00", "data": {"feedback": "hi"}, "attempts": 3}
    )
    assert record.type == "feedback"
    assert record.success is False
    assert record.attempts == 3


def test_non_object_entries_read_as_empty(storage, ledger, caplog):
    storage.set_item(SUCCESS_LEDGER_KEY, '["garbage"]')
    storage.set_item(FAILED_LEDGER_KEY, "[1, 2]")
    with caplog.at_level(logging.WARNING):
        assert ledger.read_all(SUCCESS_LEDGER_KEY) == []
        assert ledger.read_all(FAILED_LEDGER_KEY) == []
    assert "non-object entry" in caplog.text

    ledger.append_bounded(FAILED_LEDGER_KEY, _record(1), capacity=5)
    assert ledger.read_all(FAILED_LEDGER_KEY) == [_record(1)]
