"""
storage.py - key-value persistence backends

The ledger stores its whole record array as one string under one key, so a
backend only needs get/set/delete of strings:
 - MemoryStore: in-process dict (tests, throwaway sessions)
 - JsonFileStore: local JSON file holding {key: value}, written atomically
 - GoogleSheetsStore: a "storage" worksheet with key/value rows (durable on
   Streamlit Cloud, where the local disk is wiped on redeploy)

Every backend reports failures as PersistenceError; a value that does not fit
raises StoreFullError.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
import ast
import json
import os
import shutil
import tempfile

from expense_widget.config import Settings
from expense_widget.errors import PersistenceError, StoreFullError
from expense_widget.log import get_logger

# Optional Google Sheets backend imports are lazy/optional; we try to use them
try:
    import gspread
    from google.oauth2.service_account import Credentials
except ImportError:
    gspread = None
    Credentials = None

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Minimal string key-value store, modelled on the browser's localStorage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key`; absent keys are ignored."""


def _check_quota(key: str, value: str, quota_bytes: Optional[int]):
    if quota_bytes is None:
        return
    size = len(key.encode("utf-8")) + len(value.encode("utf-8"))
    if size > quota_bytes:
        raise StoreFullError(f"Value for {key!r} needs {size} bytes, quota is {quota_bytes}.")


class MemoryStore(KeyValueStore):
    """Dict-backed store. `quota_bytes` limits the size of a single entry."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Local JSON file store.

    File layout: a single JSON object mapping keys to string values. Writes go
    to a temp file in the same directory which is then moved over the target,
    so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: str, quota_bytes: Optional[int] = None):
        self.path = os.path.abspath(path)
        self.quota_bytes = quota_bytes

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError, RecursionError) as exc:
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not contain a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]):
        dirn = os.path.dirname(self.path)
        try:
            os.makedirs(dirn, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix="tmp_expenses_", dir=dirn, text=True)
        except OSError as exc:
            raise PersistenceError(f"Cannot write to {dirn}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            shutil.move(tmp_path, self.path)
        except OSError as exc:
            logger.exception("Failed to save data file")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        try:
            data = self._read_all()
        except PersistenceError:
            # an unreadable file is replaced rather than blocking every save
            logger.warning("Overwriting unreadable data file %s", self.path)
            data = {}
        data[key] = value
        logger.info("Saving data to %s (key=%s, %d bytes)", self.path, key, len(value))
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class GoogleSheetsStore(KeyValueStore):
    """
    Google Sheets persistence backend.

    Data layout:
      - worksheet "storage": header row ["key", "value"], then one row per key

    Construction never raises: when the sheet id, dependencies or credentials
    are missing, `available` is False and `reason` says why.
    """

    SHEET_NAME = "storage"
    HEADERS = ["key", "value"]
    SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
    # Google Sheets refuses cells longer than this
    CELL_LIMIT = 50000

    def __init__(
        self,
        sheet_id: str = "",
        service_account_json: str = "",
        service_account_file: str = "",
        worksheet: Any = None,
    ):
        self.available = False
        self.reason = ""
        self.sheet_id = (sheet_id or "").strip()
        self._service_account_json = (service_account_json or "").strip()
        self._service_account_file = (service_account_file or "").strip()
        self._ws = worksheet

        if self._ws is not None:
            # pre-built worksheet (tests, or a caller that manages auth itself)
            self._ensure_headers()
            self.available = True
            return
        if not self.sheet_id:
            self.reason = "GOOGLE_SHEET_ID is not set"
            return
        if gspread is None or Credentials is None:
            self.reason = "Google Sheets dependencies are unavailable"
            return

        try:
            client = gspread.authorize(self._build_credentials())
            spreadsheet = client.open_by_key(self.sheet_id)
            try:
                self._ws = spreadsheet.worksheet(self.SHEET_NAME)
            except gspread.exceptions.WorksheetNotFound:
                self._ws = spreadsheet.add_worksheet(title=self.SHEET_NAME, rows=20, cols=len(self.HEADERS))
            self._ensure_headers()
            self.available = True
        except Exception as exc:
            self.available = False
            self.reason = f"Google Sheets init failed ({exc.__class__.__name__})"
            logger.warning("Google Sheets backend unavailable: %s", self.reason)

    def _build_credentials(self):
        if self._service_account_json:
            try:
                info = json.loads(self._service_account_json)
            except ValueError:
                # tolerate Python-dict style strings often used by mistake in env vars
                info = ast.literal_eval(self._service_account_json)
            if not isinstance(info, dict):
                raise ValueError("GOOGLE_SERVICE_ACCOUNT_JSON must decode to an object")
            return Credentials.from_service_account_info(info, scopes=self.SCOPES)

        if self._service_account_file:
            return Credentials.from_service_account_file(self._service_account_file, scopes=self.SCOPES)

        # Fallback to application default credentials if available.
        import google.auth
        creds, _ = google.auth.default(scopes=self.SCOPES)
        return creds

    def _ensure_headers(self):
        first = self._ws.row_values(1) or []
        if [x.strip() for x in first] != self.HEADERS:
            self._ws.update(range_name="A1", values=[self.HEADERS], value_input_option="RAW")

    def _require(self):
        if not self.available:
            raise PersistenceError(f"Google Sheets store unavailable: {self.reason}")

    def _find_row(self, key: str) -> Tuple[Optional[int], Optional[str]]:
        """Return (1-based row number, value) for `key`, or (None, None)."""
        for idx, row in enumerate(self._ws.get_all_values() or []):
            if idx == 0 or not row:
                continue
            if str(row[0]).strip() == key:
                value = row[1] if len(row) > 1 else ""
                return idx + 1, value
        return None, None

    def get(self, key: str) -> Optional[str]:
        self._require()
        try:
            _, value = self._find_row(key)
        except Exception as exc:
            logger.exception("Failed to read %s from Google Sheets", key)
            raise PersistenceError(f"Google Sheets read failed ({exc.__class__.__name__})") from exc
        return value

    def set(self, key: str, value: str) -> None:
        self._require()
        if len(value) > self.CELL_LIMIT:
            raise StoreFullError(
                f"Value for {key!r} has {len(value)} characters, a sheet cell holds {self.CELL_LIMIT}."
            )
        try:
            row_num, _ = self._find_row(key)
            if row_num is None:
                # Use RAW to store user content as plain values (not spreadsheet formulas).
                self._ws.append_row([key, value], value_input_option="RAW")
            else:
                self._ws.update(range_name=f"A{row_num}", values=[[key, value]], value_input_option="RAW")
        except Exception as exc:
            logger.exception("Failed to save %s to Google Sheets", key)
            raise PersistenceError(f"Google Sheets write failed ({exc.__class__.__name__})") from exc
        logger.info("Saved %s to Google Sheets (%d characters)", key, len(value))

    def delete(self, key: str) -> None:
        self._require()
        try:
            row_num, _ = self._find_row(key)
            if row_num is not None:
                self._ws.delete_rows(row_num)
        except Exception as exc:
            logger.exception("Failed to delete %s from Google Sheets", key)
            raise PersistenceError(f"Google Sheets delete failed ({exc.__class__.__name__})") from exc


def build_store(settings: Settings) -> Tuple[KeyValueStore, str, str]:
    """
    Pick the backend for this session.

    Returns (store, backend_name, message) so the UI can show where data lives.
    Google Sheets wins when configured and reachable; otherwise the local file.
    """
    if settings.google_sheets_configured:
        sheets = GoogleSheetsStore(
            sheet_id=settings.google_sheet_id,
            service_account_json=settings.google_service_account_json,
            service_account_file=settings.google_service_account_file,
        )
        if sheets.available:
            return sheets, "google_sheets", "Persistent storage active (Google Sheets)."
        reason = sheets.reason
    else:
        reason = "Google Sheets not configured"
    store = JsonFileStore(settings.data_file, quota_bytes=settings.store_quota_bytes)
    return store, "local_json", f"Using local file storage: {reason}."
