"""
File upload tests against the live site.
"""

import pytest

pytestmark = pytest.mark.browser

UPLOAD_FILE_TYPES = ["test-file.txt", "test-document.pdf", "test-data.csv", "test-data.json"]


@pytest.fixture
def on_upload_page(main_page, upload_page):
    """Reach the upload page through the main page link"""
    main_page.navigate()
    main_page.click_file_upload()
    return upload_page


def assert_uploaded(upload_page, file_name):
    assert upload_page.is_upload_successful(), f"Failed to upload {file_name}"
    assert file_name in upload_page.get_uploaded_file_name()


class TestUploadFromMainPage:
    """Upload flow starting on the main page"""

    @pytest.mark.smoke
    @pytest.mark.regression
    def test_navigation_from_main_page(self, main_page, upload_page):
        main_page.navigate()
        assert "The Internet" in main_page.get_page_title()
        assert main_page.is_link_visible("File Upload")

        main_page.click_file_upload()

        assert upload_page.get_page_title() == "File Uploader"

    @pytest.mark.smoke
    @pytest.mark.regression
    @pytest.mark.critical
    def test_upload_after_navigation(self, on_upload_page, test_data_manager):
        on_upload_page.upload_file(test_data_manager.get_test_file_path("test-file.txt"))
        assert_uploaded(on_upload_page, "test-file.txt")


class TestUploadCore:
    """Core upload behaviour"""

    @pytest.mark.smoke
    @pytest.mark.regression
    @pytest.mark.critical
    def test_upload_text_file(self, on_upload_page):
        on_upload_page.upload_file("test-file.txt")
        assert_uploaded(on_upload_page, "test-file.txt")

    @pytest.mark.regression
    @pytest.mark.sanity
    def test_upload_pdf_file(self, on_upload_page):
        on_upload_page.upload_file("test-document.pdf")
        assert_uploaded(on_upload_page, "test-document.pdf")

    @pytest.mark.sanity
    @pytest.mark.ui
    def test_page_title(self, on_upload_page):
        assert on_upload_page.get_page_title() == "File Uploader"

    @pytest.mark.sanity
    @pytest.mark.ui
    @pytest.mark.regression
    def test_page_elements_present(self, on_upload_page):
        assert on_upload_page.verify_page_elements()
        assert on_upload_page.is_file_input_visible()

    @pytest.mark.sanity
    @pytest.mark.ui
    def test_upload_button_enabled_by_default(self, on_upload_page):
        assert on_upload_page.is_upload_button_enabled()


class TestUploadNavigation:
    """Browser history around an upload"""

    @pytest.mark.regression
    @pytest.mark.navigation
    def test_back_to_main_page_after_upload(self, on_upload_page, main_page, executor):
        on_upload_page.upload_file("test-file.txt")

        executor.go_back()
        executor.go_back()

        assert main_page.is_page_loaded()
        assert "The Internet" in main_page.get_page_title()

    @pytest.mark.regression
    @pytest.mark.stability
    def test_refresh_keeps_upload_page_working(self, on_upload_page, executor):
        on_upload_page.upload_file("test-file.txt")
        assert on_upload_page.is_upload_successful()

        executor.go_back()
        executor.reload()

        assert on_upload_page.get_page_title() == "File Uploader"


class TestUploadAdvanced:
    """Repeated uploads and input handling"""

    @pytest.mark.regression
    @pytest.mark.performance
    def test_consecutive_uploads(self, on_upload_page, main_page):
        for attempt in range(3):
            if attempt > 0:
                main_page.navigate()
                main_page.click_file_upload()

            on_upload_page.upload_file("test-file.txt")
            assert on_upload_page.is_upload_successful(), f"Upload {attempt + 1} failed"

    @pytest.mark.regression
    @pytest.mark.ui
    def test_clearing_input_keeps_button_enabled(self, on_upload_page, main_page):
        on_upload_page.upload_file("test-file.txt")

        main_page.navigate()
        main_page.click_file_upload()
        on_upload_page.clear_file_input()

        assert on_upload_page.is_upload_button_enabled()

    @pytest.mark.regression
    @pytest.mark.comprehensive
    def test_upload_different_file_types(self, on_upload_page):
        for index, file_name in enumerate(UPLOAD_FILE_TYPES):
            if index > 0:
                on_upload_page.navigate()

            on_upload_page.upload_file(file_name)
            assert_uploaded(on_upload_page, file_name)

    @pytest.mark.regression
    @pytest.mark.comprehensive
    def test_generated_file_upload(self, on_upload_page, test_data_manager):
        file_name = test_data_manager.store.generate_unique_file_name("txt")
        test_data_manager.create_test_file(file_name, "generated for this run")

        on_upload_page.upload_file(file_name)

        assert_uploaded(on_upload_page, file_name)
