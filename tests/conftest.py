from datetime import datetime, timedelta, timezone

import pytest

from expense_widget.ledger import Ledger
from expense_widget.storage import MemoryStore


class StepClock:
    """Returns a fixed start time, advancing by one second on every call."""

    def __init__(self, start=datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ledger(store):
    return Ledger(store, clock=StepClock())
