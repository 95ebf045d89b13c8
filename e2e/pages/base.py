"""
BasePage - helpers shared by all page objects.
"""

from pathlib import Path
from typing import Any, Callable, Optional, Union

import structlog

from e2e.executor import BrowserError, ElementNotFoundError, PlaywrightExecutor


class BasePage:
    """Common waiting, reading and capture helpers over a PlaywrightExecutor."""

    def __init__(self, executor: PlaywrightExecutor, base_url: str, logger: Optional[Any] = None):
        self.executor = executor
        self.base_url = base_url.rstrip("/")
        self.logger = logger or structlog.get_logger(type(self).__module__)

    def url(self, path: str = "/") -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def load_site(self) -> None:
        self.executor.navigate(self.url("/"))
        self.executor.wait_for_load_state("domcontentloaded")

    def wait_for_element_with_retry(self, selector: str, timeout_ms: int = 30000, retries: int = 3) -> None:
        """
        Wait for an element to be visible, retrying with a 1s pause between attempts.

        Raises:
            ElementNotFoundError: The last error once all attempts have failed
        """
        last_error: Optional[ElementNotFoundError] = None

        for attempt in range(retries):
            try:
                self.executor.wait_for_visible(selector, timeout_ms)
                return
            except ElementNotFoundError as e:
                last_error = e
                self.logger.warning(
                    "wait_for_element_attempt_failed",
                    selector=selector,
                    attempt=attempt + 1,
                    retries=retries,
                )
                if attempt < retries - 1:
                    self.executor.pause(1000)

        if last_error is None:
            raise ElementNotFoundError(f"Element {selector} was not waited for (retries={retries})")
        raise last_error

    def take_screenshot(self, name: str) -> str:
        return self.executor.take_screenshot(name, full_page=True)

    def wait_for_network_idle(self, timeout_ms: int = 30000) -> None:
        self.executor.wait_for_load_state("networkidle", timeout_ms)

    def is_element_enabled(self, selector: str) -> bool:
        try:
            return self.executor.is_enabled(selector, timeout_ms=5000)
        except BrowserError:
            return False

    def get_element_text(self, selector: str) -> str:
        """Visible text of an element, or '' if it does not show up within 5s."""
        try:
            self.executor.wait_for_visible(selector, timeout_ms=5000)
            return self.executor.text_content(selector, timeout_ms=5000)
        except BrowserError:
            return ""

    def scroll_to_element(self, selector: str) -> None:
        self.executor.scroll_into_view(selector)
        self.executor.pause(500)

    def handle_download(self, trigger: Callable[[], None], downloads_dir: Union[str, Path]) -> Path:
        return self.executor.download(trigger, downloads_dir)

    def wait_for_text(self, text: str, timeout_ms: int = 30000) -> None:
        self.executor.wait_for_text(text, timeout_ms)

    def element_exists(self, selector: str) -> bool:
        return self.executor.count(selector) > 0

    def get_elements_count(self, selector: str) -> int:
        return self.executor.count(selector)

    def wait_for_url_contains(self, text: str, timeout_ms: int = 30000) -> None:
        self.executor.wait_for_url(f"**/*{text}*", timeout_ms)

    def capture_failure(self, action: str, error: Exception) -> None:
        """Log a failed page action and keep a screenshot of the page."""
        self.logger.error(
            f"{action}_failed",
            error=str(error),
            error_type=type(error).__name__,
        )
        try:
            self.take_screenshot(f"{action}_failed")
        except BrowserError as e:
            self.logger.warning("failure_screenshot_failed", action=action, error=str(e))
