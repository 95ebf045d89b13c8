"""Shared pytest fixtures for the UI suite.

Tests marked ``browser`` drive a real Chromium through pytest-playwright's
``page`` fixture and only run with ``--run-browser`` (or E2E_RUN_BROWSER=true,
or RUN_BROWSER_TESTS=true in the settings). Everything else runs offline.
"""
import os

import pytest

from e2e.config import Settings
from e2e.executor import BrowserError, PlaywrightExecutor
from e2e.log import TestLogger, create_test_logger, outcome_status
from e2e.pages import MainPage, UploadPage
from e2e.test_data import TestDataManager

TRUTHY = ("1", "true", "yes", "on")


def pytest_addoption(parser):
    parser.addoption(
        "--run-browser",
        action="store_true",
        default=False,
        help="Run tests marked 'browser' against the live site",
    )


def browser_tests_enabled(config) -> bool:
    if config.getoption("--run-browser"):
        return True
    if os.environ.get("E2E_RUN_BROWSER", "").lower() in TRUTHY:
        return True
    return Settings().RUN_BROWSER_TESTS


def pytest_collection_modifyitems(config, items):
    if browser_tests_enabled(config):
        return

    skip_browser = pytest.mark.skip(reason="browser test: pass --run-browser or set E2E_RUN_BROWSER=true")
    for item in items:
        if item.get_closest_marker("browser") is not None:
            item.add_marker(skip_browser)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


@pytest.fixture(scope="session")
def suite_settings() -> Settings:
    """Settings for this test session."""
    return Settings()


@pytest.fixture
def test_logger(request, suite_settings) -> TestLogger:
    """Structured logger bound to the current test."""
    return create_test_logger(suite_settings, test_name=request.node.name)


@pytest.fixture(autouse=True)
def _log_browser_test(request):
    """Write start/end markers for browser tests and screenshot failures."""
    if request.node.get_closest_marker("browser") is None:
        yield
        return

    test_logger = request.getfixturevalue("test_logger")
    test_logger.start_test(request.node.name)
    yield

    status = outcome_status(
        getattr(request.node, "rep_setup", None),
        getattr(request.node, "rep_call", None),
    )

    ran_body = getattr(request.node, "rep_call", None) is not None
    if status == "FAILED" and ran_body and "executor" in request.fixturenames:
        try:
            request.getfixturevalue("executor").take_screenshot(f"{request.node.name}_failed")
        except BrowserError as e:
            test_logger.warning("failure_screenshot_failed", error=str(e))

    test_logger.end_test(request.node.name, status)


@pytest.fixture
def test_data_manager(suite_settings, test_logger):
    """Initialized TestDataManager; generated files (and an isolated run's directory) are removed afterwards."""
    manager = TestDataManager(
        suite_settings.TEST_DATA_ROOT,
        logger=test_logger,
        isolate_run=suite_settings.TEST_DATA_ISOLATE_RUNS,
    )
    manager.initialize()
    yield manager
    manager.cleanup_test_data()
    manager.remove_run_directory()


@pytest.fixture
def executor(page, suite_settings) -> PlaywrightExecutor:
    """PlaywrightExecutor over the pytest-playwright page."""
    page.set_default_timeout(suite_settings.DEFAULT_TIMEOUT_MS)
    return PlaywrightExecutor(
        page,
        screenshot_dir=suite_settings.SCREENSHOT_DIR,
        retry_attempts=suite_settings.RETRY_ATTEMPTS,
        default_timeout_ms=suite_settings.DEFAULT_TIMEOUT_MS,
    )


@pytest.fixture
def main_page(executor, suite_settings, test_logger) -> MainPage:
    return MainPage(executor, suite_settings.base_url, logger=test_logger)


@pytest.fixture
def upload_page(executor, suite_settings, test_data_manager, test_logger) -> UploadPage:
    return UploadPage(
        executor,
        files_root=test_data_manager.upload_dir,
        base_url=suite_settings.base_url,
        logger=test_logger,
    )
