"""
config.py - runtime settings read from environment variables

On Streamlit Cloud, app.py copies the app secrets into os.environ before
Settings.from_env() runs, so the same variables work locally and deployed.

Variables:
 - EXPENSE_DATA_FILE: path of the local JSON store (default data/expenses_data.json)
 - EXPENSE_STORAGE_KEY: key the expense array is stored under
 - EXPENSE_LOG_LEVEL: logging level name (default INFO)
 - EXPENSE_STORE_QUOTA_BYTES: optional size limit for the local store
 - GOOGLE_SHEET_ID / GOOGLE_SERVICE_ACCOUNT_JSON / GOOGLE_SERVICE_ACCOUNT_FILE:
   enable the Google Sheets store
"""

from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping, Optional
import json
import os

STORAGE_KEY = "expenseTrackerData"

SECRET_KEYS = (
    "EXPENSE_DATA_FILE",
    "EXPENSE_STORAGE_KEY",
    "EXPENSE_LOG_LEVEL",
    "EXPENSE_STORE_QUOTA_BYTES",
    "GOOGLE_SHEET_ID",
    "GOOGLE_SERVICE_ACCOUNT_JSON",
    "GOOGLE_SERVICE_ACCOUNT_FILE",
)

DEFAULT_DATA_FILE = os.path.join(os.path.dirname(__file__), "..", "data", "expenses_data.json")


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_int(name: str) -> Optional[int]:
    raw = _env(name)
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass
class Settings:
    data_file: str = DEFAULT_DATA_FILE
    storage_key: str = STORAGE_KEY
    log_level: str = "INFO"
    store_quota_bytes: Optional[int] = None
    google_sheet_id: str = ""
    google_service_account_json: str = ""
    google_service_account_file: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment, using defaults for unset values."""
        return cls(
            data_file=_env("EXPENSE_DATA_FILE", DEFAULT_DATA_FILE),
            storage_key=_env("EXPENSE_STORAGE_KEY", STORAGE_KEY),
            log_level=_env("EXPENSE_LOG_LEVEL", "INFO").upper(),
            store_quota_bytes=_env_int("EXPENSE_STORE_QUOTA_BYTES"),
            google_sheet_id=_env("GOOGLE_SHEET_ID"),
            google_service_account_json=_env("GOOGLE_SERVICE_ACCOUNT_JSON"),
            google_service_account_file=_env("GOOGLE_SERVICE_ACCOUNT_FILE"),
        )

    @property
    def google_sheets_configured(self) -> bool:
        return bool(self.google_sheet_id)


def secrets_to_env(secrets: Mapping[str, Any], environ: Optional[MutableMapping[str, str]] = None) -> int:
    """
    Copy app secrets into the environment so Settings.from_env() sees them.

    Variables already set in the environment win. A table-style
    [gcp_service_account] secret becomes GOOGLE_SERVICE_ACCOUNT_JSON.
    Returns how many variables were set.
    """
    environ = os.environ if environ is None else environ
    copied = 0
    for key in SECRET_KEYS:
        if key in secrets and secrets[key] and key not in environ:
            environ[key] = str(secrets[key])
            copied += 1
    if "GOOGLE_SERVICE_ACCOUNT_JSON" not in environ and "gcp_service_account" in secrets:
        account = secrets["gcp_service_account"]
        if account:
            environ["GOOGLE_SERVICE_ACCOUNT_JSON"] = json.dumps(dict(account))
            copied += 1
    return copied
