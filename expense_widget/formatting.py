"""
formatting.py - display formatting for amounts, dates and summaries

Amounts are shown as "<symbol><amount>" with thousands separators. JPY has no
minor unit so it is shown without decimals; every other currency uses two.
"""

from typing import Dict, List
import datetime

from expense_widget.aggregator import CurrencySummary, OverallSummary, Summary
from expense_widget.models import DEFAULT_CURRENCY

# currency -> (format string with {amount} placeholder, decimals)
CURRENCY_FORMATS: Dict[str, tuple] = {
    "USD": ("${amount}", 2),
    "INR": ("₹{amount}", 2),
    "EUR": ("€{amount}", 2),
    "GBP": ("£{amount}", 2),
    "JPY": ("¥{amount}", 0),
    "CAD": ("CA${amount}", 2),
    "AUD": ("A${amount}", 2),
    "CHF": ("CHF {amount}", 2),
    "CNY": ("CN¥{amount}", 2),
    "SGD": ("S${amount}", 2),
}


def format_currency(amount: float, currency: str = DEFAULT_CURRENCY) -> str:
    """Format `amount` for `currency`, e.g. 1234.5 USD -> "$1,234.50", 1200 JPY -> "¥1,200"."""
    template, decimals = CURRENCY_FORMATS.get(currency, (currency + " {amount}", 2))
    sign = "-" if amount < 0 else ""
    return sign + template.format(amount=f"{abs(amount):,.{decimals}f}")


def format_display_date(iso_date: str) -> str:
    """ISO "YYYY-MM-DD" -> "MM/DD/YYYY". Unparsable values are returned unchanged."""
    try:
        d = datetime.date.fromisoformat(iso_date)
    except (TypeError, ValueError):
        return iso_date
    return d.strftime("%m/%d/%Y")


def format_summary(summary: Summary) -> List[str]:
    """
    Headline lines for the summary card.

    - selected currency: ["€10.00 (1 of 2 expenses)"]
    - all currencies: one line per currency, or ["$0.00"] when there is nothing yet
    """
    if isinstance(summary, CurrencySummary):
        return [
            f"{format_currency(summary.total, summary.currency)} "
            f"({summary.matched_count} of {summary.total_count} expenses)"
        ]
    if isinstance(summary, OverallSummary) and summary.per_currency_totals:
        return [format_currency(amount, currency) for currency, amount in summary.per_currency_totals.items()]
    return [format_currency(0, DEFAULT_CURRENCY)]
