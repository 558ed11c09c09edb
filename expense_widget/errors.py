"""
errors.py - exception types raised by the ledger and the storage backends

The UI catches these to decide how to react:
 - ValidationError: bad form input, re-prompt the user
 - PersistenceError: data could not be written, warn the user but keep going
"""

from typing import Optional


class ExpenseWidgetError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(ExpenseWidgetError, ValueError):
    """Raised by Ledger.add when a field is missing or outside its allowed values."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PersistenceError(ExpenseWidgetError, IOError):
    """Raised when a store cannot be read from or written to."""


class StoreFullError(PersistenceError):
    """Raised when a value does not fit in the store (quota or cell limit)."""
