"""
Structured logging for test runs.

configure_logging() wires structlog onto stdlib logging with three sinks: the
console, logs/test-execution.log and logs/error.log (errors only). Both files
rotate at LOG_MAX_BYTES.

TestLogger is the instance handed to fixtures and page objects. It is built
explicitly and passed around; there is no process-wide logger object.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

import structlog

from e2e.config import Settings

SERVICE_NAME = "playwright-tests"
TEST_LOG_FILE = "test-execution.log"
ERROR_LOG_FILE = "error.log"

_HANDLER_MARKER = "_e2e_handler"


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog and the stdlib handlers it renders into.

    Calling this again replaces the handlers installed by a previous call.
    """
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter("%(message)s")

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    execution_file = RotatingFileHandler(
        settings.LOG_DIR / TEST_LOG_FILE,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    execution_file.setLevel(level)

    error_file = RotatingFileHandler(
        settings.LOG_DIR / ERROR_LOG_FILE,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    error_file.setLevel(logging.ERROR)

    for handler in (console, execution_file, error_file):
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARKER, True)
        root.addHandler(handler)
    root.setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class TestLogger:
    """
    Structured logger with test start/end markers.

    Wraps a structlog logger bound to the service name; every call takes an
    event name plus keyword context, e.g.

        test_logger.info("page_title_retrieved", title=title)
    """

    __test__ = False

    def __init__(self, logger: Optional[Any] = None, **context: Any):
        base = logger if logger is not None else structlog.get_logger("e2e")
        self._logger = base.bind(service=SERVICE_NAME, **context)

    def bind(self, **context: Any) -> "TestLogger":
        """New TestLogger carrying extra context on every event."""
        return TestLogger(self._logger, **context)

    def debug(self, event: str, **kw: Any) -> None:
        self._logger.debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._logger.info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._logger.warning(event, **kw)

    warn = warning

    def error(self, event: str, error: Any = None, **kw: Any) -> None:
        if isinstance(error, BaseException):
            kw["error_type"] = type(error).__name__
        if error is not None:
            kw["error"] = str(error)
        self._logger.error(event, **kw)

    def start_test(self, test_name: str) -> None:
        self._logger.info("test_started", test_name=test_name, marker="=" * 10)

    def end_test(self, test_name: str, status: str) -> None:
        """Log the end marker; status is PASSED, FAILED or SKIPPED."""
        self._logger.info("test_finished", test_name=test_name, status=status.upper(), marker="=" * 10)


def create_test_logger(settings: Settings, **context: Any) -> TestLogger:
    """Configure logging from settings and return a TestLogger."""
    configure_logging(settings)
    return TestLogger(**context)


def outcome_status(setup_report: Optional[Any] = None, call_report: Optional[Any] = None) -> str:
    """
    End-marker status from pytest's setup and call reports.

    A failed setup counts as FAILED even though the test body never ran.
    """
    if setup_report is not None and setup_report.failed:
        return "FAILED"
    if call_report is None or call_report.skipped:
        return "SKIPPED"
    if call_report.failed:
        return "FAILED"
    return "PASSED"
