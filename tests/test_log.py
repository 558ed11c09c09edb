import logging

from expense_widget.ledger import Ledger
from expense_widget.log import get_logger, set_level
from expense_widget.storage import MemoryStore


def test_get_logger_uses_package_namespace():
    assert get_logger("expense_widget.ledger").name == "expense_widget.ledger"
    assert get_logger("dashboard").name == "expense_widget.dashboard"
    assert len(logging.getLogger("expense_widget").handlers) == 1


def test_malformed_data_is_logged_not_raised(caplog):
    with caplog.at_level(logging.WARNING, logger="expense_widget"):
        ledger = Ledger(MemoryStore({"expenseTrackerData": "{oops"}))
    assert len(ledger) == 0
    assert "Discarding malformed stored expenses" in caplog.text


def test_set_level_is_the_only_level_source(monkeypatch):
    package_logger = logging.getLogger("expense_widget")
    monkeypatch.setenv("EXPENSE_LOG_LEVEL", "ERROR")
    try:
        set_level("debug")
        assert package_logger.level == logging.DEBUG
        get_logger("ledger")
        # configuring again does not read the environment
        assert package_logger.level == logging.DEBUG
        set_level("chatty")
        assert package_logger.level == logging.INFO
        set_level("")
        assert package_logger.level == logging.INFO
    finally:
        set_level("INFO")
