"""
dashboard.py - Streamlit UI entrypoint and orchestration

This module wires the UI components (expense_widget.ui.components) with the
ledger (expense_widget.ledger) and the aggregator. The main() function builds
the sidebar menu and routes actions to components and ledger methods.

Design notes:
 - One Ledger per browser session, kept in st.session_state and passed to the
   callbacks below; there is no module-level ledger.
 - All persistence and validation live in the ledger; all summaries and
   ordering come from the aggregator.
"""

import streamlit as st

from expense_widget import aggregator
from expense_widget.config import Settings
from expense_widget.errors import PersistenceError
from expense_widget.ledger import Ledger
from expense_widget.log import get_logger, set_level
from expense_widget.models import DEFAULT_CATEGORIES
from expense_widget.storage import build_store
from expense_widget.ui import components

logger = get_logger(__name__)

_LEDGER_KEY = "ledger"
_BACKEND_KEY = "storage_backend"


def get_session_ledger() -> Ledger:
    """Create the session's Ledger on first access, loading stored expenses."""
    if _LEDGER_KEY not in st.session_state:
        settings = Settings.from_env()
        set_level(settings.log_level)
        store, backend_name, backend_msg = build_store(settings)
        logger.info("Session storage backend: %s", backend_name)
        st.session_state[_LEDGER_KEY] = Ledger(store, key=settings.storage_key)
        st.session_state[_BACKEND_KEY] = (backend_name, backend_msg)
    return st.session_state[_LEDGER_KEY]


def main():
    """
    Streamlit page: sidebar menu controls which view is shown.
    Actions:
      - Expenses: add form, summary for the selected currency, sorted list with delete
      - Export: CSV / XLSX downloads of all expenses
      - Clear All Expenses: reset data (with confirmation checkbox)
    """
    st.title("Expense Tracker")
    ledger = get_session_ledger()

    backend_name, backend_msg = st.session_state[_BACKEND_KEY]
    if backend_name == "google_sheets":
        st.sidebar.success(backend_msg)
    else:
        st.sidebar.warning(backend_msg)
        st.sidebar.caption(
            "For indefinite cloud persistence, set GOOGLE_SHEET_ID and "
            "GOOGLE_SERVICE_ACCOUNT_JSON in Streamlit app Secrets."
        )

    menu = ["Expenses", "Export", "Clear All Expenses"]
    choice = st.sidebar.selectbox("Select an option", menu)
    selected_currency = components.select_currency_filter()

    if choice == "Expenses":
        def on_submit(exp_input: components.ExpenseInput):
            ledger.add(exp_input.name, exp_input.amount, exp_input.currency, exp_input.category)

        components.display_expense_form(on_submit, ledger.categories or DEFAULT_CATEGORIES)

        records = ledger.records()
        components.display_summary(aggregator.summarize(records, selected_currency or None))
        components.display_expense_table(aggregator.sorted_by_recency(records), ledger.remove)
        if selected_currency:
            components.display_category_chart(
                aggregator.totals_by_category(records, selected_currency),
                selected_currency,
            )

    elif choice == "Export":
        st.header("Export")
        records = ledger.records()
        if not records:
            st.write("No expenses to export.")
        components.display_downloads(records)

    elif choice == "Clear All Expenses":
        components.display_clear_all(len(ledger), ledger.clear)

    # Streamlit has no unload hook; retry a save that failed earlier in the session.
    try:
        ledger.flush()
    except PersistenceError:
        st.sidebar.error("Error saving data. Recent changes may be lost when this session ends.")


if __name__ == "__main__":
    main()
