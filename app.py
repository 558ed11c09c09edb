"""
app.py - minimal entrypoint for Streamlit app

Keep this file tiny so streamlit can import it without side-effects.
Run the app with:
    streamlit run app.py

This module simply delegates to expense_widget.ui.dashboard.main().

"""
import streamlit as _st
from streamlit.errors import StreamlitAPIException

from expense_widget.config import secrets_to_env

# If running on Streamlit Cloud, transfer secrets to env vars so Settings.from_env() can read them
try:
    secrets_to_env(_st.secrets)
except (FileNotFoundError, StreamlitAPIException):
    # no secrets.toml locally; plain environment variables are used instead
    pass

from expense_widget.ui import dashboard


def main():
    dashboard.main()


if __name__ == "__main__":
    main()
