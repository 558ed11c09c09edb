import pytest

from expense_widget.aggregator import summarize
from expense_widget.formatting import format_currency, format_display_date, format_summary
from expense_widget.models import Expense


@pytest.mark.parametrize(
    "amount, currency, expected",
    [
        (19.5, "USD", "$19.50"),
        (1234.5, "USD", "$1,234.50"),
        (1200, "JPY", "¥1,200"),
        (1200.6, "JPY", "¥1,201"),
        (10, "EUR", "€10.00"),
        (99.99, "INR", "₹99.99"),
        (5, "CHF", "CHF 5.00"),
        (0, "USD", "$0.00"),
    ],
)
def test_format_currency(amount, currency, expected):
    assert format_currency(amount, currency) == expected


def test_format_display_date():
    assert format_display_date("2024-03-05") == "03/05/2024"
    assert format_display_date("") == ""
    assert format_display_date("yesterday") == "yesterday"


def _exp(id, amount, currency):
    return Expense(id=id, name=id, amount=amount, currency=currency, category="Food",
                   date="2024-03-15", timestamp=0)


def test_format_summary_for_selected_currency():
    records = [_exp("a", 4.5, "USD"), _exp("b", 10, "EUR")]
    assert format_summary(summarize(records, "EUR")) == ["€10.00 (1 of 2 expenses)"]


def test_format_summary_all_currencies():
    records = [_exp("a", 4.5, "USD"), _exp("b", 1500, "JPY")]
    assert format_summary(summarize(records)) == ["$4.50", "¥1,500"]


def test_format_summary_empty():
    assert format_summary(summarize([])) == ["$0.00"]
