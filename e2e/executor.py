"""
PlaywrightExecutor - Browser automation wrapper for E2E testing

This module wraps a Playwright sync Page to provide a small, logged API for
the page objects. Playwright errors are translated into the BrowserError
family at this seam so page objects and tests only deal with one taxonomy.
"""

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Sequence, Union

import structlog
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page, sync_playwright
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

# Configure structured logging
logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_MS = 30000


class BrowserError(Exception):
    """Base exception for browser automation errors"""
    pass


class ElementNotFoundError(BrowserError):
    """Raised when an element cannot be found"""
    pass


class NavigationError(BrowserError):
    """Raised when navigation fails"""
    pass


class PlaywrightExecutor:
    """
    Wrapper for a Playwright sync Page.

    The executor either borrows a page (e.g. the pytest-playwright `page`
    fixture) or owns the whole Playwright stack when built by
    create_executor(), in which case close() shuts the browser down.
    """

    def __init__(
        self,
        page: Page,
        screenshot_dir: Union[str, Path] = "screenshots",
        retry_attempts: int = 3,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        on_close: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the PlaywrightExecutor.

        Args:
            page: Playwright page to drive
            screenshot_dir: Directory to save screenshots
            retry_attempts: Number of attempts for navigation
            default_timeout_ms: Timeout used when a call does not pass one
            on_close: Teardown hook for resources the executor owns
        """
        self.page = page
        self.screenshot_dir = Path(screenshot_dir)
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        self.retry_attempts = retry_attempts
        self.default_timeout_ms = default_timeout_ms
        self._on_close = on_close

        logger.info(
            "playwright_executor_initialized",
            screenshot_dir=str(self.screenshot_dir),
            retry_attempts=retry_attempts,
            default_timeout_ms=default_timeout_ms,
        )

    @property
    def current_url(self) -> str:
        return self.page.url

    def _timeout(self, timeout_ms: Optional[int]) -> int:
        return self.default_timeout_ms if timeout_ms is None else timeout_ms

    def _locator(self, selector: str) -> Locator:
        return self.page.locator(selector).first

    @contextmanager
    def _action(self, action: str, selector: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except PlaywrightTimeoutError as e:
            logger.error(f"{action}_timed_out", selector=selector, error=str(e))
            raise ElementNotFoundError(f"{action} timed out for {selector}: {e}") from e
        except PlaywrightError as e:
            logger.error(f"{action}_failed", selector=selector, error=str(e))
            raise BrowserError(f"{action} failed for {selector}: {e}") from e

    def navigate(self, url: str, wait_until: str = "domcontentloaded", timeout_ms: Optional[int] = None) -> bool:
        """
        Navigate to a URL.

        Args:
            url: Absolute URL, or a path resolved against the context base URL
            wait_until: Load state to wait for
            timeout_ms: Navigation timeout

        Returns:
            True if navigation succeeded

        Raises:
            NavigationError: If navigation fails after all retry attempts
        """
        logger.info("navigating_to_url", url=url)

        for attempt in range(self.retry_attempts):
            try:
                self.page.goto(url, wait_until=wait_until, timeout=self._timeout(timeout_ms))
                logger.info("navigation_successful", url=url, attempt=attempt + 1)
                return True

            except PlaywrightError as e:
                logger.warning(
                    "navigation_attempt_failed",
                    url=url,
                    attempt=attempt + 1,
                    error=str(e)
                )
                if attempt == self.retry_attempts - 1:
                    raise NavigationError(
                        f"Failed to navigate to {url} after {self.retry_attempts} attempts: {e}"
                    ) from e
                time.sleep(1)

        return False

    def click(self, selector: str, element_description: Optional[str] = None, timeout_ms: Optional[int] = None) -> bool:
        """
        Click an element by selector.

        Raises:
            ElementNotFoundError: If the element does not become clickable in time
            BrowserError: If the click fails
        """
        desc = element_description or selector
        logger.info("clicking_element", selector=selector, description=desc)

        with self._action("click", selector):
            self._locator(selector).click(timeout=self._timeout(timeout_ms))

        logger.info("click_successful", selector=selector)
        return True

    def fill_input(self, selector: str, value: str, element_description: Optional[str] = None) -> bool:
        desc = element_description or selector
        logger.info("filling_input", selector=selector, description=desc)

        with self._action("fill", selector):
            self._locator(selector).fill(value, timeout=self.default_timeout_ms)

        logger.info("fill_successful", selector=selector)
        return True

    def wait_for_visible(self, selector: str, timeout_ms: Optional[int] = None) -> bool:
        """
        Wait for an element to become visible.

        Raises:
            ElementNotFoundError: If the element is not visible within the timeout
        """
        timeout = self._timeout(timeout_ms)
        logger.info("waiting_for_element", selector=selector, timeout_ms=timeout)

        with self._action("wait_for_visible", selector):
            self._locator(selector).wait_for(state="visible", timeout=timeout)

        logger.info("element_visible", selector=selector)
        return True

    def assert_visible(self, selector: str, timeout_ms: int = 5000) -> bool:
        """Alias of wait_for_visible with a short default timeout."""
        return self.wait_for_visible(selector, timeout_ms)

    def set_input_files(self, selector: str, files: Union[str, Path, Sequence[Union[str, Path]]]) -> bool:
        """
        Attach files to a file input. An empty sequence clears the input.
        """
        if isinstance(files, (str, Path)):
            paths: Any = str(files)
        else:
            paths = [str(f) for f in files]
        logger.info("setting_input_files", selector=selector, files=paths)

        with self._action("set_input_files", selector):
            self._locator(selector).set_input_files(paths)

        return True

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        with self._action("evaluate"):
            return self.page.evaluate(expression, arg)

    def evaluate_handle(self, expression: str, arg: Any = None) -> Any:
        with self._action("evaluate_handle"):
            return self.page.evaluate_handle(expression, arg)

    def dispatch_event(self, selector: str, event_type: str, event_init: Optional[dict] = None) -> None:
        logger.info("dispatching_event", selector=selector, event_type=event_type)
        with self._action("dispatch_event", selector):
            self._locator(selector).dispatch_event(event_type, event_init)

    def wait_for_load_state(self, state: str = "load", timeout_ms: Optional[int] = None) -> None:
        with self._action("wait_for_load_state", state):
            self.page.wait_for_load_state(state, timeout=self._timeout(timeout_ms))

    def wait_for_url(self, url_pattern: str, timeout_ms: Optional[int] = None) -> None:
        with self._action("wait_for_url", url_pattern):
            self.page.wait_for_url(url_pattern, timeout=self._timeout(timeout_ms))

    def wait_for_text(self, text: str, timeout_ms: Optional[int] = None) -> None:
        selector = f'text="{text}"'
        with self._action("wait_for_text", selector):
            self.page.wait_for_selector(selector, timeout=self._timeout(timeout_ms))

    def title(self) -> str:
        with self._action("title"):
            return self.page.title()

    def text_content(self, selector: str, timeout_ms: Optional[int] = None) -> str:
        with self._action("text_content", selector):
            return self._locator(selector).text_content(timeout=self._timeout(timeout_ms)) or ""

    def all_text_contents(self, selector: str) -> List[str]:
        with self._action("all_text_contents", selector):
            return self.page.locator(selector).all_text_contents()

    def is_visible(self, selector: str) -> bool:
        with self._action("is_visible", selector):
            return self._locator(selector).is_visible()

    def is_enabled(self, selector: str, timeout_ms: Optional[int] = None) -> bool:
        with self._action("is_enabled", selector):
            return self._locator(selector).is_enabled(timeout=self._timeout(timeout_ms))

    def count(self, selector: str) -> int:
        with self._action("count", selector):
            return self.page.locator(selector).count()

    def scroll_into_view(self, selector: str) -> None:
        with self._action("scroll_into_view", selector):
            self._locator(selector).scroll_into_view_if_needed()

    def download(self, trigger: Callable[[], None], target_dir: Union[str, Path]) -> Path:
        """
        Run trigger() and save the download it starts into target_dir.

        Returns:
            Path of the saved file
        """
        target = Path(target_dir)
        target.mkdir(parents=True, exist_ok=True)

        with self._action("download"):
            with self.page.expect_download() as download_info:
                trigger()
            download = download_info.value
            file_path = target / download.suggested_filename
            download.save_as(str(file_path))

        logger.info("download_saved", path=str(file_path))
        return file_path

    def go_back(self) -> None:
        with self._action("go_back"):
            self.page.go_back()

    def reload(self) -> None:
        with self._action("reload"):
            self.page.reload()

    def pause(self, milliseconds: int) -> None:
        self.page.wait_for_timeout(milliseconds)

    def take_screenshot(self, filename: str, full_page: bool = True) -> str:
        """
        Take a screenshot of the current page.

        Args:
            filename: Filename for the screenshot (without extension)
            full_page: Whether to capture the full page or just viewport

        Returns:
            Path to the saved screenshot file

        Raises:
            BrowserError: If screenshot fails
        """
        timestamp = int(time.time() * 1000)
        screenshot_path = self.screenshot_dir / f"{Path(filename).stem}_{timestamp}.png"

        logger.info(
            "taking_screenshot",
            filename=filename,
            full_page=full_page,
            path=str(screenshot_path)
        )

        with self._action("screenshot"):
            self.page.screenshot(path=str(screenshot_path), full_page=full_page)

        logger.info("screenshot_saved", path=str(screenshot_path))
        return str(screenshot_path)

    def get_page_text(self) -> str:
        """
        Get the text content of the current page for debugging.

        Raises:
            BrowserError: If getting page text fails
        """
        logger.info("getting_page_text", url=self.current_url)

        with self._action("get_page_text", "body"):
            page_text = self.page.inner_text("body")

        logger.info("page_text_retrieved", length=len(page_text))
        return page_text

    def close(self) -> None:
        """Close the browser and clean up resources."""
        logger.info("closing_browser")
        if self._on_close is not None:
            self._on_close()
            self._on_close = None


def create_executor(
    screenshot_dir: Union[str, Path] = "screenshots",
    base_url: Optional[str] = None,
    headless: bool = True,
    retry_attempts: int = 3,
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> PlaywrightExecutor:
    """
    Launch Chromium and return an executor that owns it.

    Args:
        screenshot_dir: Directory to save screenshots
        base_url: Base URL relative navigations resolve against
        headless: Run the browser without a window
        retry_attempts: Number of attempts for navigation
        default_timeout_ms: Default timeout for page operations

    Returns:
        PlaywrightExecutor instance; call close() to stop the browser
    """
    playwright = sync_playwright().start()
    browser = playwright.chromium.launch(headless=headless)
    context = browser.new_context(base_url=base_url) if base_url else browser.new_context()
    page = context.new_page()
    page.set_default_timeout(default_timeout_ms)

    def shutdown() -> None:
        context.close()
        browser.close()
        playwright.stop()

    return PlaywrightExecutor(
        page,
        screenshot_dir=screenshot_dir,
        retry_attempts=retry_attempts,
        default_timeout_ms=default_timeout_ms,
        on_close=shutdown,
    )
