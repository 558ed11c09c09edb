"""
aggregator.py - summaries and orderings derived from ledger contents

Everything here is a pure function of the records passed in. Amounts in
different currencies are never added together: totals are always keyed by
currency. Sums use math.fsum so the result does not depend on record order.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union
import math

from expense_widget.models import Expense


@dataclass(frozen=True)
class CurrencySummary:
    """Summary for one selected currency."""
    currency: str
    total: float
    matched_count: int
    total_count: int

    def as_dict(self) -> Dict[str, object]:
        return {
            "total": self.total,
            "matchedCount": self.matched_count,
            "totalCount": self.total_count,
        }


@dataclass(frozen=True)
class OverallSummary:
    """Summary across all currencies, one total per currency."""
    per_currency_totals: Dict[str, float] = field(default_factory=dict)
    total_count: int = 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "perCurrencyTotals": dict(self.per_currency_totals),
            "totalCount": self.total_count,
        }


Summary = Union[CurrencySummary, OverallSummary]


def totals_by_currency(records: Iterable[Expense]) -> Dict[str, float]:
    """Sum amounts per currency. Empty input gives an empty dict."""
    amounts: Dict[str, List[float]] = defaultdict(list)
    for e in records:
        amounts[e.currency].append(e.amount)
    return {currency: math.fsum(values) for currency, values in amounts.items()}


def filter_by_currency(records: Iterable[Expense], currency: str) -> List[Expense]:
    """Records in `currency`, keeping their relative order."""
    return [e for e in records if e.currency == currency]


def summarize(records: Iterable[Expense], selected_currency: Optional[str] = None) -> Summary:
    """
    Build the summary the display consumes.

    With `selected_currency`, returns the total and count of that currency's
    records alongside the overall record count. Without it, returns the
    per-currency totals and the overall count.
    """
    records = list(records)
    if selected_currency:
        matched = filter_by_currency(records, selected_currency)
        return CurrencySummary(
            currency=selected_currency,
            total=math.fsum(e.amount for e in matched),
            matched_count=len(matched),
            total_count=len(records),
        )
    return OverallSummary(per_currency_totals=totals_by_currency(records), total_count=len(records))


def sorted_by_recency(records: Iterable[Expense]) -> List[Expense]:
    """Newest first by timestamp; records with equal timestamps keep insertion order."""
    # sorted() is stable, and negating the key keeps ties in their original order
    return sorted(records, key=lambda e: -e.timestamp)


def totals_by_category(records: Iterable[Expense], currency: str) -> Dict[str, float]:
    """Per-category totals for a single currency (used by the category chart)."""
    amounts: Dict[str, List[float]] = defaultdict(list)
    for e in filter_by_currency(records, currency):
        amounts[e.category].append(e.amount)
    return {category: math.fsum(values) for category, values in amounts.items()}
