"""
ledger.py - the in-memory expense ledger and its persistence

Responsibilities:
 - keep an ordered in-memory list of Expense records
 - validate and create new records (add), delete them (remove, clear)
 - persist the full list to a KeyValueStore after every mutation (save)
 - restore the list at startup, treating missing or corrupt data as empty (load)

The UI owns one Ledger per session and passes it to its handlers; nothing in
this module holds global state.
"""

from datetime import datetime
from typing import Callable, Iterable, Iterator, List, Optional
import json
import secrets
import string

from expense_widget.config import STORAGE_KEY
from expense_widget.errors import PersistenceError
from expense_widget.log import get_logger
from expense_widget.models import (
    DEFAULT_CATEGORIES,
    Expense,
    clean_amount,
    clean_category,
    clean_currency,
    clean_name,
)
from expense_widget.storage import KeyValueStore

logger = get_logger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value <= 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_BASE36[rem])
    return "".join(reversed(out))


def generate_id(timestamp_ms: int) -> str:
    """Base-36 millisecond time followed by 10 random base-36 characters."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(10))
    return _to_base36(timestamp_ms) + suffix


class Ledger:
    """
    Ordered collection of expenses bound to one key of a store.

    `categories` is the allowed category set for add(); pass None to accept
    any non-empty category. `clock` returns the current datetime and exists so
    tests can pin dates and timestamps.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = STORAGE_KEY,
        categories: Optional[Iterable[str]] = DEFAULT_CATEGORIES,
        clock: Optional[Callable[[], datetime]] = None,
        autoload: bool = True,
    ):
        self.store = store
        self.key = key
        self.categories = tuple(categories) if categories is not None else None
        self._clock = clock or datetime.now
        # in-memory list of Expense objects, insertion order
        self._expenses: List[Expense] = []
        # True while memory holds changes the store has not accepted yet
        self.dirty = False
        if autoload:
            self.load()

    # -----------------------
    # Read accessors
    # -----------------------
    def records(self) -> List[Expense]:
        """Return a copy of all records in insertion order."""
        return list(self._expenses)

    def get(self, expense_id: str) -> Optional[Expense]:
        for e in self._expenses:
            if e.id == expense_id:
                return e
        return None

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(list(self._expenses))

    def __contains__(self, expense_id: object) -> bool:
        return any(e.id == expense_id for e in self._expenses)

    # -----------------------
    # Mutations
    # -----------------------
    def _new_id(self, timestamp_ms: int) -> str:
        existing = {e.id for e in self._expenses}
        new_id = generate_id(timestamp_ms)
        while new_id in existing:
            new_id = generate_id(timestamp_ms)
        return new_id

    def add(self, name: str, amount: float, currency: str, category: str) -> Expense:
        """
        Validate the fields, append a new Expense and persist.

        Raises ValidationError before touching state when a field is invalid.
        If the save fails the expense stays in memory and PersistenceError is
        raised so the caller can warn the user.
        """
        clean = dict(
            name=clean_name(name),
            amount=clean_amount(amount),
            currency=clean_currency(currency),
            category=clean_category(category, self.categories),
        )
        now = self._clock()
        timestamp = int(now.timestamp() * 1000)
        exp = Expense(
            id=self._new_id(timestamp),
            date=now.date().isoformat(),
            timestamp=timestamp,
            **clean,
        )
        self._expenses.append(exp)
        logger.info("Added expense id=%s (%s %.2f %s)", exp.id, exp.category, exp.amount, exp.currency)
        self.save()
        return exp

    def remove(self, expense_id: str) -> bool:
        """Remove expense by id. Returns True if removed, False if not found."""
        before = len(self._expenses)
        self._expenses = [e for e in self._expenses if e.id != expense_id]
        removed = len(self._expenses) < before
        if removed:
            logger.info("Deleted expense id=%s. Remaining expenses=%d.", expense_id, len(self._expenses))
        else:
            logger.info("Expense id=%s not found", expense_id)
        self.save()
        return removed

    def clear(self) -> int:
        """Remove every expense and persist. Returns how many were removed."""
        count = len(self._expenses)
        self._expenses = []
        logger.info("Cleared %d expenses", count)
        self.save()
        return count

    # -----------------------
    # Persistence
    # -----------------------
    def save(self):
        """
        Write the full list to the store as a JSON array.

        Raises PersistenceError (after logging) when the store is full or
        unavailable; in-memory state is left as it is.
        """
        payload = json.dumps([e.to_dict() for e in self._expenses], ensure_ascii=False)
        try:
            self.store.set(self.key, payload)
        except PersistenceError:
            logger.exception("Failed to save %d expenses", len(self._expenses))
            self.dirty = True
            raise
        self.dirty = False

    def flush(self) -> bool:
        """
        Retry the last failed save. Returns True when a write was attempted.

        Nothing is written when the store already matches memory, so a ledger
        that fell back to empty after a failed load never overwrites stored data.
        """
        if not self.dirty:
            return False
        self.save()
        return True

    def load(self):
        """
        Replace in-memory state with the stored list.

        A missing key yields an empty ledger. Unreadable stores and malformed
        data also yield an empty ledger; the problem is logged, never raised.
        """
        try:
            raw = self.store.get(self.key)
        except PersistenceError:
            logger.exception("Error loading expenses from storage")
            self._expenses = []
            return

        if raw is None:
            self._expenses = []
            return

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            expenses = [Expense.from_dict(d) for d in data]
        except (TypeError, ValueError, OverflowError, RecursionError) as exc:
            logger.warning("Discarding malformed stored expenses (%s)", exc)
            self._expenses = []
            return

        self._expenses = expenses
        logger.info("Loaded %d expenses", len(self._expenses))
