"""
Tests for the logging helpers.
"""

import pytest

from mezanino.infra import logger
from mezanino.usecases.sincronizador import InventorySynchronizer
from conftest import FakeStore


@pytest.fixture(autouse=True)
def logging_on(monkeypatch):
    monkeypatch.setattr(logger, "ENABLE_LOGGING", True)


def test_remote_failure_is_logged_not_raised():
    store = FakeStore()
    store.fail.add("insert")
    sync = InventorySynchronizer(store)
    sync.add({"category": "INK", "material": "Tinta Logada"})
    remote = logger.get_log_summary("remote", lines=20)
    assert "REMOTE_FAILED: add" in remote
    assert "connection refused" in remote
    assert "SYNC_ADD" in logger.get_log_summary("sync", lines=20)


def test_file_and_system_events():
    logger.log_file_operation("import", "tintas.xlsx", rows_processed=3)
    logger.log_system_event("test_event", {"k": "v"}, level="warning")
    assert "FILE_IMPORT" in logger.get_log_summary("files", lines=5)
    assert "SYSTEM_EVENT: test_event" in logger.get_log_summary("system", lines=5)


def test_unknown_log_type():
    assert logger.get_log_summary("nope") == "Log nope não encontrado."


def test_disabled_logging(monkeypatch):
    monkeypatch.setattr(logger, "ENABLE_LOGGING", False)
    assert logger.get_log_summary("sync") is None
