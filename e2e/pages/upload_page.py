"""
UploadPage - the demo site's file uploader.

Relative file paths are resolved against the files_root given at
construction (normally the test-data root), never the working directory.
"""

from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from e2e.config import DEFAULT_SITE_URL
from e2e.executor import BrowserError, PlaywrightExecutor
from e2e.pages.base import BasePage

FILE_INPUT = "#file-upload"
UPLOAD_BUTTON = "#file-submit"
UPLOADED_FILES = "#uploaded-files"
PAGE_TITLE = "h3"
DRAG_DROP_AREA = "#drag-drop-upload"
UPLOAD_SUCCESS_MESSAGE = 'h3:has-text("File Uploaded!")'
ERROR_MESSAGE = ".error-message, .alert-danger"

UPLOAD_SUCCESS_TEXT = "File Uploaded!"

_ADD_FILE_TO_TRANSFER = """({ dataTransfer, filePath }) => {
    const file = new File([''], filePath);
    dataTransfer.items.add(file);
}"""


class UploadPage(BasePage):
    """Page object for /upload."""

    def __init__(
        self,
        executor: PlaywrightExecutor,
        files_root: Union[str, Path],
        base_url: str = DEFAULT_SITE_URL,
        logger: Optional[Any] = None,
    ):
        super().__init__(executor, base_url, logger=logger)
        self.files_root = Path(files_root)

    def resolve(self, file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        return path if path.is_absolute() else self.files_root / path

    def navigate(self) -> None:
        self.executor.navigate(self.url("/upload"))
        self.wait_for_network_idle()
        self.wait_for_element_with_retry(FILE_INPUT)

    def upload_file(self, file_path: Union[str, Path]) -> None:
        """
        Attach one file and submit the form.

        Raises:
            ElementNotFoundError: If the success message does not appear
            BrowserError: If any browser step fails
        """
        absolute_path = self.resolve(file_path)
        self.logger.info("upload_file_started", path=str(absolute_path))

        try:
            self.executor.set_input_files(FILE_INPUT, absolute_path)
            self.executor.click(UPLOAD_BUTTON, "Upload button")
            self.wait_for_upload_complete()
        except BrowserError as e:
            self.capture_failure("upload_file", e)
            raise

        self.logger.info("upload_file_completed", path=str(absolute_path))

    def upload_multiple_files(self, file_paths: Sequence[Union[str, Path]]) -> None:
        absolute_paths: List[Path] = [self.resolve(p) for p in file_paths]
        self.logger.info("upload_multiple_files_started", count=len(absolute_paths))

        try:
            self.executor.set_input_files(FILE_INPUT, absolute_paths)
            self.executor.click(UPLOAD_BUTTON, "Upload button")
            self.wait_for_upload_complete()
        except BrowserError as e:
            self.capture_failure("upload_multiple_files", e)
            raise

    def wait_for_upload_complete(self) -> None:
        self.executor.wait_for_load_state("networkidle")
        self.executor.wait_for_visible(UPLOAD_SUCCESS_MESSAGE, timeout_ms=10000)

    def get_uploaded_file_name(self) -> str:
        self.executor.wait_for_visible(UPLOADED_FILES, timeout_ms=5000)
        return self.get_element_text(UPLOADED_FILES).strip()

    def is_upload_successful(self) -> bool:
        try:
            self.executor.wait_for_visible(UPLOAD_SUCCESS_MESSAGE, timeout_ms=5000)
        except BrowserError:
            return False
        return self.get_element_text(UPLOAD_SUCCESS_MESSAGE).strip() == UPLOAD_SUCCESS_TEXT

    def get_page_title(self) -> str:
        return self.get_element_text(PAGE_TITLE).strip()

    def clear_file_input(self) -> None:
        self.executor.set_input_files(FILE_INPUT, [])

    def is_upload_button_enabled(self) -> bool:
        return self.executor.is_enabled(UPLOAD_BUTTON)

    def get_upload_button_text(self) -> str:
        # The submit control is an <input>, whose label lives in its value attribute
        text = self.get_element_text(UPLOAD_BUTTON)
        return text or self.executor.evaluate(
            "(selector) => document.querySelector(selector)?.value ?? ''", UPLOAD_BUTTON
        )

    def is_file_input_visible(self) -> bool:
        return self.executor.is_visible(FILE_INPUT)

    def upload_file_with_drag_and_drop(self, file_path: Union[str, Path]) -> None:
        """
        Simulate dropping a file onto the drag-and-drop area.

        The dropped File carries only the name; the browser never reads the
        file from disk.
        """
        absolute_path = self.resolve(file_path)
        self.logger.info("drag_and_drop_upload_started", path=str(absolute_path))

        try:
            data_transfer = self.executor.evaluate_handle("() => new DataTransfer()")
            self.executor.evaluate(
                _ADD_FILE_TO_TRANSFER,
                {"dataTransfer": data_transfer, "filePath": str(absolute_path)},
            )
            self.executor.dispatch_event(DRAG_DROP_AREA, "drop", {"dataTransfer": data_transfer})
            self.wait_for_upload_complete()
        except BrowserError as e:
            self.capture_failure("drag_and_drop_upload", e)
            raise

    def get_error_message(self) -> Optional[str]:
        if self.executor.is_visible(ERROR_MESSAGE):
            return self.get_element_text(ERROR_MESSAGE)
        return None

    def verify_page_elements(self) -> bool:
        """True if the file input, upload button and title are all visible."""
        for selector in (FILE_INPUT, UPLOAD_BUTTON, PAGE_TITLE):
            if not self.executor.is_visible(selector):
                return False
        return True
