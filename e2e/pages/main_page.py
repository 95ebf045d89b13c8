"""
MainPage - landing page of the demo site and its example links.
"""

from typing import Any, Dict, List, Optional

from e2e.config import DEFAULT_SITE_URL
from e2e.executor import BrowserError, PlaywrightExecutor
from e2e.pages.base import BasePage

PAGE_HEADING = "h1, h2"
NAVIGATION_LINKS = "ul li a"
FOOTER = "#page-footer"
FILE_UPLOAD_LINK = 'a[href="/upload"]'

# Lower-cased page name -> href of the link on the main page
TEST_PAGE_LINKS: Dict[str, str] = {
    "file upload": "/upload",
    "upload": "/upload",
    "checkboxes": "/checkboxes",
    "context menu": "/context_menu",
    "drag and drop": "/drag_and_drop",
    "dropdown": "/dropdown",
    "dynamic content": "/dynamic_content",
    "dynamic controls": "/dynamic_controls",
    "dynamic loading": "/dynamic_loading",
    "entry ad": "/entry_ad",
    "exit intent": "/exit_intent",
    "file download": "/download",
    "forgot password": "/forgot_password",
    "hovers": "/hovers",
    "infinite scroll": "/infinite_scroll",
    "inputs": "/inputs",
    "javascript alerts": "/javascript_alerts",
    "javascript error": "/javascript_error",
    "key presses": "/key_presses",
    "large dom": "/large",
    "multiple windows": "/windows",
    "nested frames": "/nested_frames",
    "notification messages": "/notification_message",
    "redirect": "/redirect",
    "secure download": "/download_secure",
    "shadow dom": "/shadowdom",
    "slow resources": "/slow",
    "tables": "/tables",
    "status codes": "/status_codes",
    "typos": "/typos",
    "wysiwyg editor": "/tinymce",
}


class UnknownPageError(BrowserError):
    """Raised when a test page name has no link on the main page"""
    pass


def link_selector(href: str) -> str:
    return f'a[href="{href}"]'


def link_text_selector(link_text: str) -> str:
    return f'a:has-text("{link_text}")'


class MainPage(BasePage):
    """Page object for the main page of the demo site."""

    def __init__(self, executor: PlaywrightExecutor, base_url: str = DEFAULT_SITE_URL, logger: Optional[Any] = None):
        super().__init__(executor, base_url, logger=logger)

    def navigate(self) -> None:
        """
        Open the main page and wait for its heading.

        If the configured base URL fails, the public site URL is tried once.
        """
        try:
            self.executor.navigate(self.url("/"), wait_until="domcontentloaded")
            self.wait_for_element_with_retry(PAGE_HEADING)
        except BrowserError as e:
            self.logger.warning("main_page_navigation_failed_retrying_fallback", error=str(e))
            self.executor.navigate(f"{DEFAULT_SITE_URL}/", wait_until="domcontentloaded")
            self.wait_for_element_with_retry(PAGE_HEADING)

    def get_page_title(self) -> str:
        return self.executor.title()

    def get_page_heading(self) -> str:
        return self.get_element_text(PAGE_HEADING)

    def click_file_upload(self) -> None:
        self.logger.info("clicking_file_upload_link")
        try:
            self.executor.click(FILE_UPLOAD_LINK, "File Upload link")
            self.wait_for_network_idle()
        except BrowserError as e:
            self.capture_failure("click_file_upload", e)
            raise

    def click_navigation_link(self, link_text: str) -> None:
        self.executor.click(link_text_selector(link_text), f"{link_text} link")
        self.wait_for_network_idle()

    def is_link_visible(self, link_text: str) -> bool:
        return self.executor.is_visible(link_text_selector(link_text))

    def get_all_navigation_links(self) -> List[str]:
        links = self.executor.all_text_contents(NAVIGATION_LINKS)
        return [link.strip() for link in links if link.strip()]

    def verify_main_page_elements(self) -> bool:
        """True if the heading, at least one link and the File Upload link are visible."""
        try:
            if not self.executor.is_visible(PAGE_HEADING):
                return False
            if self.executor.count(NAVIGATION_LINKS) == 0:
                return False
            return self.executor.is_visible(FILE_UPLOAD_LINK)
        except BrowserError:
            return False

    def navigate_to_test_page(self, page_name: str) -> None:
        """
        Click the main-page link for a named example page.

        Raises:
            UnknownPageError: If the name is not in TEST_PAGE_LINKS
        """
        href = TEST_PAGE_LINKS.get(page_name.lower())
        if href is None:
            raise UnknownPageError(
                f"Unknown page: {page_name}. Available pages: {', '.join(TEST_PAGE_LINKS)}"
            )

        self.logger.info("navigating_to_test_page", page_name=page_name, href=href)
        self.executor.click(link_selector(href), f"{page_name} link")
        self.wait_for_network_idle()

    def get_footer_text(self) -> str:
        return self.get_element_text(FOOTER)

    def is_page_loaded(self) -> bool:
        try:
            self.wait_for_element_with_retry(PAGE_HEADING, timeout_ms=10000)
            self.wait_for_element_with_retry(NAVIGATION_LINKS, timeout_ms=10000)
            return True
        except BrowserError:
            return False

    def wait_for_link(self, link_text: str, timeout_ms: int = 30000) -> None:
        self.executor.wait_for_visible(link_text_selector(link_text), timeout_ms)

    def get_navigation_links_count(self) -> int:
        return self.executor.count(NAVIGATION_LINKS)
