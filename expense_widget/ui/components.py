"""
components.py - reusable Streamlit components / forms / displays

This module contains pure-UI helpers used by the dashboard:
 - display_expense_form(on_submit, categories)
 - display_summary / display_expense_table / display_category_chart
 - display_downloads / display_clear_all

Components never mutate the ledger themselves; they call the callbacks the
dashboard passes in and report ValidationError / PersistenceError to the user.
Confirmation for destructive actions (delete, clear) happens here, not in the
ledger.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence
import streamlit as st
import pandas as pd
import altair as alt

from expense_widget.aggregator import Summary
from expense_widget.errors import PersistenceError, ValidationError
from expense_widget.export import export_filename, to_csv, to_xlsx_bytes
from expense_widget.formatting import format_currency, format_display_date, format_summary
from expense_widget.models import CURRENCIES, Expense

ALL_CURRENCIES = "All currencies"


@dataclass
class ExpenseInput:
    """Lightweight container passed to the on_submit callback."""
    name: str
    amount: float
    currency: str
    category: str


def _save_warning(exc: PersistenceError):
    st.warning(f"Error saving data, your changes are kept for this session only. ({exc})")


def display_expense_form(on_submit: Callable[[ExpenseInput], None], categories: Sequence[str]):
    """
    Display the 'Add Expense' form.

    Parameters:
      - on_submit: callback invoked with ExpenseInput; may raise ValidationError
        or PersistenceError, both reported here
      - categories: options for the category dropdown
    """
    st.header("Add Expense")
    with st.form(key="expense_form", clear_on_submit=True):
        name = st.text_input("Expense name")
        amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
        currency = st.selectbox("Currency", options=list(CURRENCIES))
        category = st.selectbox("Category", options=list(categories))
        submit_button = st.form_submit_button("Add Expense")

    if not submit_button:
        return
    try:
        on_submit(ExpenseInput(name=name, amount=amount, currency=currency, category=category))
    except ValidationError as exc:
        st.error(f"Please fill in all fields with valid data. {exc}")
        return
    except PersistenceError as exc:
        _save_warning(exc)
        return
    st.success("Expense added.")


def select_currency_filter() -> str:
    """Sidebar select; returns "" for all currencies or a currency code."""
    choice = st.sidebar.selectbox("Show totals for", options=[ALL_CURRENCIES] + list(CURRENCIES))
    return "" if choice == ALL_CURRENCIES else choice


def display_summary(summary: Summary):
    """Show the headline total(s) and the number of recorded expenses."""
    col_total, col_count = st.columns(2)
    with col_total:
        st.markdown("**Total Spent**")
        for line in format_summary(summary):
            st.write(line)
    with col_count:
        st.metric("Total Expenses", summary.total_count)


def expense_label(e: Expense) -> str:
    """Select-box label; the id keeps identical same-day entries apart."""
    return f"#{e.id} | {format_display_date(e.date)} | {e.name} | {format_currency(e.amount, e.currency)}"


def display_expense_table(expenses: List[Expense], on_delete: Callable[[str], bool]):
    """
    Render expenses (already sorted by the caller) with a delete control per row.

    Input:
      - expenses: records in display order
      - on_delete: callback(id) -> bool, called only after the user confirms
    """
    st.header("Expenses")
    if not expenses:
        st.write("No expenses recorded yet. Add your first expense above!")
        return

    df = pd.DataFrame(
        [
            {
                "Date": format_display_date(e.date),
                "Name": e.name,
                "Category": e.category,
                "Amount": format_currency(e.amount, e.currency),
            }
            for e in expenses
        ],
        columns=["Date", "Name", "Category", "Amount"],
    )
    st.dataframe(df, use_container_width=True, hide_index=True)

    st.markdown("---")
    options = {expense_label(e): e.id for e in expenses}
    sel_label = st.selectbox("Select expense to delete", options=list(options.keys()))
    delete_confirm = st.checkbox("I confirm I want to delete this expense")
    if st.button("Delete expense") and delete_confirm:
        try:
            removed = on_delete(options[sel_label])
        except PersistenceError as exc:
            _save_warning(exc)
            return
        if removed:
            st.success("Expense deleted.")
            st.rerun()
        else:
            st.error("Selected expense not found.")


def display_category_chart(totals: Dict[str, float], currency: str):
    """Bar chart of per-category totals within one currency."""
    if not totals:
        st.info(f"No {currency} expenses to chart.")
        return
    df = pd.DataFrame(sorted(totals.items()), columns=["category", "amount"])
    chart = (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("category:N", sort="-y", title="Category"),
            y=alt.Y("amount:Q", title=f"Total ({currency})"),
            tooltip=["category", alt.Tooltip("amount:Q", format=",.2f")],
        )
    )
    st.markdown(f"**Spending by category ({currency})**")
    st.altair_chart(chart, use_container_width=True)


def display_downloads(expenses: List[Expense]):
    """CSV and XLSX download buttons; nothing is shown when there is nothing to export."""
    if not expenses:
        return
    col_csv, col_xlsx = st.columns(2)
    with col_csv:
        st.download_button(
            label="Export CSV",
            data=to_csv(expenses),
            file_name=export_filename("csv"),
            mime="text/csv",
        )
    with col_xlsx:
        st.download_button(
            label="Download as XLSX",
            data=to_xlsx_bytes(expenses),
            file_name=export_filename("xlsx"),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )


def display_clear_all(count: int, on_clear: Callable[[], int]):
    """Clear-all control guarded by a confirmation checkbox."""
    st.header("Clear All Expenses")
    if count == 0:
        st.write("No expenses to clear.")
        return
    confirm = st.checkbox(f"Delete all {count} expense(s)? This action cannot be undone.")
    if st.button("Clear All Expenses") and confirm:
        try:
            removed = on_clear()
        except PersistenceError as exc:
            _save_warning(exc)
            return
        st.success(f"All {removed} expenses have been cleared.")
        st.rerun()
