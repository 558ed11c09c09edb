import json

import pytest

from expense_widget.errors import PersistenceError, ValidationError
from expense_widget.ledger import Ledger, generate_id
from expense_widget.storage import JsonFileStore, MemoryStore

from conftest import StepClock


def test_add_expense(ledger, store):
    exp = ledger.add("Coffee", 4.50, "USD", "Food")
    assert len(ledger) == 1
    assert exp.name == "Coffee"
    assert exp.amount == 4.5
    assert exp.currency == "USD"
    assert exp.category == "Food"
    assert exp.date == "2024-03-15"
    assert exp.timestamp == 1710495000000
    assert exp.id in ledger
    # persisted immediately
    stored = json.loads(store.get(ledger.key))
    assert stored[0]["id"] == exp.id


def test_add_strips_name_and_accepts_numeric_string(ledger):
    exp = ledger.add("  Lunch  ", "12.25", "EUR", "Food")
    assert exp.name == "Lunch"
    assert exp.amount == 12.25


def test_many_adds_have_unique_ids(ledger):
    for i in range(200):
        ledger.add(f"Item {i}", i + 1, "USD", "Other")
    ids = [e.id for e in ledger.records()]
    assert len(ledger) == 200
    assert len(set(ids)) == 200


@pytest.mark.parametrize(
    "name, amount, currency, category, field",
    [
        ("", 5, "USD", "Food", "name"),
        ("   ", 5, "USD", "Food", "name"),
        ("Tea", 0, "USD", "Food", "amount"),
        ("Tea", -3, "USD", "Food", "amount"),
        ("Tea", float("nan"), "USD", "Food", "amount"),
        ("Tea", float("inf"), "USD", "Food", "amount"),
        ("Tea", "abc", "USD", "Food", "amount"),
        ("Tea", True, "USD", "Food", "amount"),
        ("Tea", None, "USD", "Food", "amount"),
        ("Tea", 5, "BTC", "Food", "currency"),
        ("Tea", 5, "", "Food", "currency"),
        ("Tea", 5, "USD", "", "category"),
        ("Tea", 5, "USD", "Groceries", "category"),
    ],
)
def test_add_rejects_invalid_input(ledger, store, name, amount, currency, category, field):
    with pytest.raises(ValidationError) as info:
        ledger.add(name, amount, currency, category)
    assert info.value.field == field
    assert len(ledger) == 0
    assert store.get(ledger.key) is None


def test_custom_categories_and_unrestricted_categories(store):
    custom = Ledger(store, categories=["Rent"], clock=StepClock())
    custom.add("March rent", 900, "GBP", "Rent")
    with pytest.raises(ValidationError):
        custom.add("Pizza", 10, "GBP", "Food")

    free = Ledger(MemoryStore(), categories=None, clock=StepClock())
    assert free.add("Pizza", 10, "GBP", "Anything goes").category == "Anything goes"


def test_remove_is_idempotent(ledger):
    exp = ledger.add("Book", 15.0, "USD", "Education")
    assert ledger.remove(exp.id) is True
    assert ledger.remove(exp.id) is False
    assert len(ledger) == 0


def test_remove_unknown_id_is_noop(ledger):
    ledger.add("Book", 15.0, "USD", "Education")
    assert ledger.remove("does-not-exist") is False
    assert len(ledger) == 1


def test_clear_returns_count_and_persists(ledger, store):
    ledger.add("A", 1, "USD", "Other")
    ledger.add("B", 2, "EUR", "Other")
    assert ledger.clear() == 2
    assert len(ledger) == 0
    assert json.loads(store.get(ledger.key)) == []
    assert ledger.clear() == 0


def test_save_then_load_round_trip(store):
    first = Ledger(store, clock=StepClock())
    a = first.add("Coffee", 4.5, "USD", "Food")
    b = first.add("Train", 30, "CHF", "Transportation")
    first.save()

    second = Ledger(store)
    assert [(e.id, e.amount, e.currency) for e in second.records()] == [
        (a.id, 4.5, "USD"),
        (b.id, 30.0, "CHF"),
    ]


def test_round_trip_through_json_file(tmp_path):
    path = tmp_path / "data" / "expenses.json"
    first = Ledger(JsonFileStore(str(path)), clock=StepClock())
    exp = first.add("Sushi", 2400, "JPY", "Food")

    second = Ledger(JsonFileStore(str(path)))
    assert second.get(exp.id) == exp


def test_load_missing_key_gives_empty_ledger():
    assert len(Ledger(MemoryStore())) == 0


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        '{"id": "x"}',
        '["just a string"]',
        '[{"id": "a", "amount": "lots"}]',
        '[{"id": "a", "timestamp": Infinity}]',
        "[" * 100000 + "]" * 100000,
        "",
    ],
)
def test_load_malformed_data_gives_empty_ledger(raw):
    ledger = Ledger(MemoryStore({"expenseTrackerData": raw}))
    assert ledger.records() == []


def test_load_replaces_in_memory_state(ledger, store):
    ledger.add("Coffee", 4.5, "USD", "Food")
    store.set(ledger.key, "corrupt")
    ledger.load()
    assert len(ledger) == 0


def test_load_defaults_missing_currency_to_usd():
    legacy = [{"id": "old1", "name": "Taxi", "amount": 20, "category": "Transportation",
               "date": "2023-01-02", "timestamp": 1672617600000}]
    ledger = Ledger(MemoryStore({"expenseTrackerData": json.dumps(legacy)}))
    assert ledger.get("old1").currency == "USD"


class BrokenStore(MemoryStore):
    def get(self, key):
        raise PersistenceError("disk unavailable")

    def set(self, key, value):
        raise PersistenceError("disk unavailable")


def test_unreadable_store_loads_empty():
    ledger = Ledger(BrokenStore())
    assert len(ledger) == 0


def test_save_failure_is_raised_but_state_is_kept():
    ledger = Ledger(BrokenStore(), clock=StepClock())
    with pytest.raises(PersistenceError):
        ledger.add("Coffee", 4.5, "USD", "Food")
    # the expense is still usable for the rest of the session
    assert len(ledger) == 1
    assert ledger.records()[0].name == "Coffee"


class ReadFailsStore(MemoryStore):
    """Holds data but cannot read it back."""

    def get(self, key):
        raise PersistenceError("network down")


def test_failed_load_never_overwrites_stored_data():
    store = ReadFailsStore({"expenseTrackerData": '[{"id": "keep"}]'})
    ledger = Ledger(store)
    assert len(ledger) == 0
    assert ledger.flush() is False
    assert store._data["expenseTrackerData"] == '[{"id": "keep"}]'


class FlakyStore(MemoryStore):
    """Rejects the first write, accepts the rest."""

    def __init__(self):
        super().__init__()
        self.failures = 1

    def set(self, key, value):
        if self.failures:
            self.failures -= 1
            raise PersistenceError("temporarily unavailable")
        super().set(key, value)


def test_flush_retries_a_failed_save():
    store = FlakyStore()
    ledger = Ledger(store, clock=StepClock())
    with pytest.raises(PersistenceError):
        ledger.add("Coffee", 4.5, "USD", "Food")
    assert ledger.dirty
    assert ledger.flush() is True
    assert not ledger.dirty
    assert json.loads(store.get(ledger.key))[0]["name"] == "Coffee"
    # nothing left to retry
    assert ledger.flush() is False


def test_full_store_raises_persistence_error():
    ledger = Ledger(MemoryStore(quota_bytes=200), clock=StepClock())
    ledger.add("Coffee", 4.5, "USD", "Food")
    with pytest.raises(PersistenceError):
        for i in range(10):
            ledger.add(f"Item {i}", 1, "USD", "Other")
    assert len(ledger) >= 2


def test_records_returns_a_copy(ledger):
    ledger.add("Coffee", 4.5, "USD", "Food")
    snapshot = ledger.records()
    snapshot.clear()
    assert len(ledger) == 1


def test_generate_id_starts_with_base36_time():
    new_id = generate_id(1710495000000)
    assert int(new_id[:-10], 36) == 1710495000000
    assert new_id.isalnum() and new_id == new_id.lower()
    assert generate_id(1710495000000) != new_id
