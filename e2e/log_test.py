"""
Unit tests for structured logging and TestLogger
"""

import json
import logging
from unittest.mock import MagicMock

import pytest

from e2e.config import Settings
from e2e.log import (
    ERROR_LOG_FILE,
    TEST_LOG_FILE,
    TestLogger,
    configure_logging,
    create_test_logger,
    outcome_status,
)


@pytest.fixture
def log_settings(tmp_path):
    return Settings(_env_file=None, LOG_DIR=tmp_path / "logs", LOG_LEVEL="DEBUG")


@pytest.fixture
def configured(log_settings):
    """Configure logging into a temporary directory and detach the handlers afterwards"""
    configure_logging(log_settings)
    yield log_settings
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_e2e_handler", False):
            root.removeHandler(handler)
            handler.close()


def read_events(path):
    for handler in logging.getLogger().handlers:
        handler.flush()
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def test_configure_logging_creates_log_files(configured):
    assert (configured.LOG_DIR / TEST_LOG_FILE).exists()
    assert (configured.LOG_DIR / ERROR_LOG_FILE).exists()


def test_configure_logging_replaces_its_handlers(configured):
    configure_logging(configured)

    marked = [h for h in logging.getLogger().handlers if getattr(h, "_e2e_handler", False)]
    assert len(marked) == 3


def test_events_are_json_with_service(configured):
    test_logger = TestLogger(test_name="test_example")
    test_logger.info("page_loaded", url="https://example.com")

    events = read_events(configured.LOG_DIR / TEST_LOG_FILE)
    event = next(e for e in events if e["event"] == "page_loaded")

    assert event["service"] == "playwright-tests"
    assert event["test_name"] == "test_example"
    assert event["url"] == "https://example.com"
    assert event["level"] == "info"
    assert "timestamp" in event


def test_errors_go_to_error_log(configured):
    test_logger = TestLogger()
    test_logger.info("not_an_error")
    test_logger.error("upload_failed", error=ValueError("boom"))

    events = read_events(configured.LOG_DIR / ERROR_LOG_FILE)

    assert [e["event"] for e in events] == ["upload_failed"]
    assert events[0]["error"] == "boom"
    assert events[0]["error_type"] == "ValueError"


def test_start_and_end_markers(configured):
    test_logger = TestLogger()
    test_logger.start_test("test_upload")
    test_logger.end_test("test_upload", "passed")

    events = read_events(configured.LOG_DIR / TEST_LOG_FILE)
    markers = [e for e in events if e["event"] in ("test_started", "test_finished")]

    assert markers[0]["test_name"] == "test_upload"
    assert markers[1]["status"] == "PASSED"


def test_create_test_logger(log_settings):
    test_logger = create_test_logger(log_settings, test_name="t")
    try:
        assert isinstance(test_logger, TestLogger)
        assert (log_settings.LOG_DIR / TEST_LOG_FILE).exists()
    finally:
        root = logging.getLogger()
        for handler in list(root.handlers):
            if getattr(handler, "_e2e_handler", False):
                root.removeHandler(handler)
                handler.close()


class TestTestLoggerDelegation:
    """TestLogger forwards to the wrapped structlog logger"""

    @pytest.fixture
    def wrapped(self):
        base = MagicMock()
        bound = MagicMock()
        base.bind.return_value = bound
        return base, bound

    def test_binds_service_and_context(self, wrapped):
        base, _ = wrapped
        TestLogger(base, run_id="r1")
        base.bind.assert_called_once_with(service="playwright-tests", run_id="r1")

    def test_warn_is_warning(self, wrapped):
        base, bound = wrapped
        TestLogger(base).warn("slow_page", seconds=3)
        bound.warning.assert_called_once_with("slow_page", seconds=3)

    def test_error_with_string(self, wrapped):
        base, bound = wrapped
        TestLogger(base).error("cleanup_failed", error="permission denied", path="/tmp/x")
        bound.error.assert_called_once_with("cleanup_failed", error="permission denied", path="/tmp/x")

    def test_error_without_error(self, wrapped):
        base, bound = wrapped
        TestLogger(base).error("something_broke")
        bound.error.assert_called_once_with("something_broke")

    def test_debug(self, wrapped):
        base, bound = wrapped
        TestLogger(base).debug("detail", n=1)
        bound.debug.assert_called_once_with("detail", n=1)


class TestOutcomeStatus:
    """End-marker status derived from pytest reports"""

    @staticmethod
    def report(failed=False, skipped=False):
        return MagicMock(failed=failed, skipped=skipped)

    def test_passed(self):
        assert outcome_status(self.report(), self.report()) == "PASSED"

    def test_failed_call(self):
        assert outcome_status(self.report(), self.report(failed=True)) == "FAILED"

    def test_failed_setup_is_failed_not_skipped(self):
        assert outcome_status(self.report(failed=True), None) == "FAILED"

    def test_skipped(self):
        assert outcome_status(self.report(skipped=True), None) == "SKIPPED"
        assert outcome_status(self.report(), self.report(skipped=True)) == "SKIPPED"
