"""
models.py - Data model definitions

This file defines the Expense dataclass used across the ledger, aggregator and UI.
Expenses are serialized to/from simple dicts so the whole ledger can be persisted
as one JSON array under a single storage key.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional
import math

from expense_widget.errors import ValidationError

# currencies accepted by the add form; amounts are never converted between them
CURRENCIES = ("USD", "INR", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "CNY", "SGD")

# records saved before the currency field existed are read as USD
DEFAULT_CURRENCY = "USD"

# default categories shown in the add form
DEFAULT_CATEGORIES = (
    "Food",
    "Transportation",
    "Entertainment",
    "Shopping",
    "Bills",
    "Healthcare",
    "Education",
    "Travel",
    "Other",
)


@dataclass(frozen=True)
class Expense:
    """
    Represents a single expense entry.

    Fields:
      - id: string unique within the ledger, generated at creation
      - name: what the money was spent on
      - amount: positive magnitude, in `currency`
      - currency: one of CURRENCIES
      - category: free text, usually one of DEFAULT_CATEGORIES
      - date: ISO date string "YYYY-MM-DD" of creation
      - timestamp: epoch milliseconds of creation, used only for ordering

    Records are never edited; the ledger only creates and deletes them.
    """
    id: str
    name: str
    amount: float
    currency: str = DEFAULT_CURRENCY
    category: str = "Other"
    date: str = ""
    timestamp: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with exactly the persisted fields."""
        return {
            "id": self.id,
            "name": self.name,
            "amount": self.amount,
            "currency": self.currency,
            "category": self.category,
            "date": self.date,
            "timestamp": self.timestamp,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Expense":
        """
        Construct an Expense from a stored dict (inverse of to_dict).

        This is the one place where older data is normalized: a missing or empty
        currency becomes DEFAULT_CURRENCY. Other missing keys fall back to empty
        values; amounts are not re-validated.
        """
        if not isinstance(d, dict):
            raise TypeError(f"expense entry must be an object, got {type(d).__name__}")
        return Expense(
            id=str(d.get("id", "") or ""),
            name=str(d.get("name", "") or ""),
            amount=float(d.get("amount", 0.0) or 0.0),
            currency=str(d.get("currency") or DEFAULT_CURRENCY),
            category=str(d.get("category", "") or ""),
            date=str(d.get("date", "") or ""),
            timestamp=int(d.get("timestamp", 0) or 0),
        )


# -----------------------
# Field validation used by Ledger.add
# -----------------------
def clean_name(name: Any) -> str:
    text = name.strip() if isinstance(name, str) else ""
    if not text:
        raise ValidationError("Name is required.", field="name")
    return text


def clean_amount(amount: Any) -> float:
    """Accept ints, floats and numeric strings (form input); reject bools, NaN, inf and <= 0."""
    if isinstance(amount, bool):
        raise ValidationError("Amount must be a number.", field="amount")
    try:
        value = float(amount.strip() if isinstance(amount, str) else amount)
    except (TypeError, ValueError):
        raise ValidationError("Amount must be a number.", field="amount")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Amount must be greater than 0.", field="amount")
    return value


def clean_currency(currency: Any) -> str:
    if currency not in CURRENCIES:
        raise ValidationError(f"Unsupported currency: {currency!r}.", field="currency")
    return currency


def clean_category(category: Any, allowed: Optional[Iterable[str]] = DEFAULT_CATEGORIES) -> str:
    """Category must be non-empty; when `allowed` is given it must also be one of them."""
    text = category.strip() if isinstance(category, str) else ""
    if not text:
        raise ValidationError("Category is required.", field="category")
    if allowed is not None and text not in allowed:
        raise ValidationError(f"Unknown category: {text!r}.", field="category")
    return text
