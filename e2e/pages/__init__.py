"""
Page Objects Package

Page objects for the demo site, built on PlaywrightExecutor:
- base: shared waiting/reading/capture helpers
- main_page: landing page and its example links
- upload_page: file uploader
"""

from e2e.pages.base import BasePage
from e2e.pages.main_page import MainPage, UnknownPageError
from e2e.pages.upload_page import UploadPage

__all__ = [
    "BasePage",
    "MainPage",
    "UnknownPageError",
    "UploadPage",
]
