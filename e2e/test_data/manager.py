"""
TestDataManager - Lifecycle of the fixtures used by the UI suite.

This module provides the manager that:
- Lays out the test-data directories (upload, register, downloads)
- Materialises the canonical upload fixtures tests rely on
- Validates file formats and sizes against the upload policy
- Generates, saves and loads synthetic user records
- Removes generated files on teardown

The manager has two states. initialize() moves it from UNINITIALIZED to
READY; cleanup_test_data() moves it back, after which it may be initialized
again.

Parallel workers that share one test-data root can race in
cleanup_test_data(): one worker may delete a reserved-prefix file another is
about to upload. Nothing here locks the directory. Pass isolate_run=True to
root each manager at its own <root>/run-<run_id> directory instead; an
isolated run removes that directory with remove_run_directory().
"""

import json
import random
import secrets
import shutil
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import structlog
from pydantic import ValidationError
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from e2e.test_data.exceptions import FixtureError
from e2e.test_data.policy import (
    DEFAULT_UPLOAD_POLICY,
    FileUploadPolicy,
    FormatClass,
    classify_file_format,
    is_file_size_valid,
    is_invalid_file_format,
    is_valid_file_format,
)
from e2e.test_data.store import FileFixtureStore, FixtureCategory
from e2e.test_data.users import DEFAULT_CREDENTIALS, Credentials, UserRecord, generate_random_user

CREDENTIALS_FILE = "credentials.json"
RESERVED_PREFIXES = ("test-", "user-")
CLEANED_CATEGORIES = (FixtureCategory.UPLOAD, FixtureCategory.REGISTER)

PDF_LINES = [
    "Test Document for Automated Testing",
    "This is a sample PDF file used for file upload tests.",
    "Created for Playwright automation testing.",
    "File size: Small (~2KB)",
    "Test data for web automation framework",
]
PDF_FALLBACK_TEXT = "This is a test file with .pdf extension for basic upload testing."


class ManagerState(str, Enum):
    """Lifecycle state of a TestDataManager."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def write_reportlab_pdf(path: Path) -> None:
    """Render the sample upload document with reportlab."""
    pdf = canvas.Canvas(str(path), pagesize=letter)
    _, height = letter
    for index, line in enumerate(PDF_LINES):
        pdf.drawString(100, height - 100 - index * 30, line)
    pdf.save()


def _new_run_id() -> str:
    return f"{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"


class TestDataManager:
    """
    Owns the fixture store and upload policy for a test run.

    All paths derive from the root given at construction.
    """

    __test__ = False

    def __init__(
        self,
        root: Union[str, Path],
        policy: FileUploadPolicy = DEFAULT_UPLOAD_POLICY,
        logger: Optional[Any] = None,
        run_id: Optional[str] = None,
        isolate_run: bool = False,
        pdf_writer: Callable[[Path], None] = write_reportlab_pdf,
    ):
        """
        Initialize the TestDataManager.

        Args:
            root: Test-data root directory
            policy: Upload policy used by the validators
            logger: Structured logger shared with the fixture store
            run_id: Identifier of this run (generated when omitted)
            isolate_run: Root this manager at <root>/run-<run_id>
            pdf_writer: Callable that renders the canonical PDF at a path
        """
        self.run_id = run_id or _new_run_id()
        self.isolate_run = isolate_run
        base = Path(root)
        self.test_data_path = (base / f"run-{self.run_id}" if isolate_run else base).resolve()
        self.policy = policy
        self.logger = logger or structlog.get_logger(__name__)
        self.pdf_writer = pdf_writer
        self.store = FileFixtureStore(self.test_data_path, logger=self.logger)
        self.state = ManagerState.UNINITIALIZED

        self.logger.debug(
            "test_data_manager_created",
            test_data_path=str(self.test_data_path),
            run_id=self.run_id,
            isolate_run=isolate_run,
        )

    @property
    def upload_dir(self) -> Path:
        return self.store.directory(FixtureCategory.UPLOAD)

    @property
    def register_dir(self) -> Path:
        return self.store.directory(FixtureCategory.REGISTER)

    @property
    def downloads_dir(self) -> Path:
        return self.store.directory(FixtureCategory.DOWNLOADS)

    def initialize(self) -> None:
        """
        Create the directory layout and canonical fixture files.

        Existing canonical files are left untouched, except the JSON fixture
        whose embedded timestamp is refreshed on every call.

        Raises:
            FixtureIOError: If the directories or a fixture cannot be written
        """
        self.store.ensure_directories()
        self.create_test_files()
        self.state = ManagerState.READY

        self.logger.info(
            "test_data_manager_initialized",
            test_data_path=str(self.test_data_path),
            run_id=self.run_id,
        )

    def create_test_files(self) -> None:
        """Materialise the canonical upload fixtures."""
        files = self.policy.canonical_files

        self._create_if_missing(files["small"], "This is a small test file for upload testing.")
        self._create_if_missing(files["medium"], "This is a medium test file.\n" * 100)
        self._create_if_missing(
            files["large"],
            "This is a large test file for testing file size limits.\n" * 1000,
        )
        self._create_if_missing(
            files["main"],
            "This is the main test file for upload testing.\n"
            "It contains multiple lines of text.\n"
            "Used for standard upload tests.",
        )
        self._create_if_missing(
            files["csv"],
            "Name,Age,City,Email\n"
            "John Doe,25,New York,john@example.com\n"
            "Jane Smith,30,Los Angeles,jane@example.com\n"
            "Bob Johnson,35,Chicago,bob@example.com",
        )

        self.store.create_json_file(
            files["json"],
            {
                "users": [
                    {"id": 1, "name": "John Doe", "email": "john@example.com"},
                    {"id": 2, "name": "Jane Smith", "email": "jane@example.com"},
                ],
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

        pdf_path = self.get_test_file_path(files["pdf"])
        if not pdf_path.exists():
            self._create_pdf(pdf_path)

    def _create_if_missing(self, file_name: str, content: str) -> Path:
        path = self.get_test_file_path(file_name)
        if path.exists():
            self.logger.debug("canonical_file_exists", path=str(path))
            return path
        return self.store.create_test_file(file_name, content)

    def _create_pdf(self, path: Path) -> None:
        try:
            self.pdf_writer(path)
            self.store.track(path)
            self.logger.info("pdf_file_created", path=str(path))
        except Exception as e:
            self.logger.warning("pdf_generation_failed_using_fallback", path=str(path), error=str(e))
            self.store.create_test_file(path.name, PDF_FALLBACK_TEXT)

    def get_test_file_path(self, file_name: str, category: FixtureCategory = FixtureCategory.UPLOAD) -> Path:
        """Path of a fixture file. Does not check that the file exists."""
        return self.store.path_for(category, file_name)

    def get_file_upload_policy(self) -> FileUploadPolicy:
        return self.policy

    def is_valid_file_format(self, file_name: str) -> bool:
        return is_valid_file_format(file_name, self.policy)

    def is_invalid_file_format(self, file_name: str) -> bool:
        return is_invalid_file_format(file_name, self.policy)

    def classify_file_format(self, file_name: str) -> FormatClass:
        return classify_file_format(file_name, self.policy)

    def get_file_size_in_mb(self, file_path: Union[str, Path]) -> float:
        return self.store.get_file_size_in_mb(file_path)

    def is_file_size_valid(self, file_path: Union[str, Path]) -> bool:
        return is_file_size_valid(file_path, self.store, self.policy, logger=self.logger)

    def create_file_with_size(self, file_name: str, size_in_mb: float) -> Path:
        return self.store.create_file_with_size(file_name, size_in_mb)

    def create_test_file(self, file_name: str, content: str = "Test content") -> Path:
        return self.store.create_test_file(file_name, content)

    def get_random_valid_file(self) -> Path:
        """Path of a randomly chosen canonical file with an accepted format."""
        candidates = [
            name for name in self.policy.canonical_files.values()
            if self.is_valid_file_format(name)
        ]
        return self.get_test_file_path(random.choice(candidates))

    def generate_random_user(self) -> UserRecord:
        user = generate_random_user()
        self.logger.debug("random_user_generated", email=user.email)
        return user

    def save_user_data(self, user: UserRecord, filename: Optional[str] = None) -> Path:
        """
        Persist a user record as its own JSON file in the register directory.

        Args:
            user: Record to save
            filename: Target file name (defaults to user-<ms>-<hex>.json)

        Returns:
            Path of the written file
        """
        if filename is None:
            filename = f"user-{int(time.time() * 1000)}-{secrets.token_hex(4)}.json"

        path = self.store.create_test_file(filename, user.to_json(), category=FixtureCategory.REGISTER)
        self.logger.info("user_data_saved", path=str(path), email=user.email)
        return path

    def get_all_users(self) -> List[UserRecord]:
        """
        Load every saved user record from the register directory.

        Files that cannot be read or parsed are skipped with a warning.
        """
        if not self.register_dir.is_dir():
            return []

        users: List[UserRecord] = []
        for path in sorted(self.register_dir.glob("*.json")):
            if path.name == CREDENTIALS_FILE:
                continue
            try:
                users.append(UserRecord.model_validate_json(path.read_bytes()))
            except (OSError, ValidationError) as e:
                self.logger.warning("user_file_skipped", path=str(path), error=str(e))

        return users

    def get_user_credentials(self) -> Credentials:
        """
        Load the stored login credentials, creating the defaults on first access.

        Raises:
            FixtureError: If the credentials file exists but is unreadable
        """
        path = self.get_test_file_path(CREDENTIALS_FILE, FixtureCategory.REGISTER)
        if not path.exists():
            self.store.create_json_file(
                CREDENTIALS_FILE,
                DEFAULT_CREDENTIALS.model_dump(),
                category=FixtureCategory.REGISTER,
            )
            self.logger.info("default_credentials_created", path=str(path))

        try:
            return Credentials.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            self.logger.error("credentials_load_failed", path=str(path), error=str(e))
            raise FixtureError(f"Failed to load credentials from {path}: {e}") from e

    def cleanup_test_data(self) -> List[str]:
        """
        Delete generated files from the upload and register directories.

        Only files whose names start with a reserved prefix (test-, user-)
        are removed. Failures are logged and never raised.

        Returns:
            Names of the files removed
        """
        removed: List[str] = []

        for category in CLEANED_CATEGORIES:
            directory = self.store.directory(category)
            try:
                entries = sorted(directory.iterdir()) if directory.is_dir() else []
            except OSError as e:
                self.logger.warning("cleanup_listing_failed", path=str(directory), error=str(e))
                continue

            for path in entries:
                if not path.name.startswith(RESERVED_PREFIXES) or not path.is_file():
                    continue
                if self.store.delete_file(path):
                    removed.append(path.name)

        self.state = ManagerState.UNINITIALIZED
        self.logger.info("test_data_cleaned", removed=len(removed), run_id=self.run_id)
        return removed

    def remove_run_directory(self) -> bool:
        """
        Delete this run's own directory tree (isolated runs only).

        Best effort: failures are logged, never raised. A shared root is
        never touched.

        Returns:
            True if the run directory is gone afterwards
        """
        if not self.isolate_run:
            return False

        shutil.rmtree(self.test_data_path, ignore_errors=True)
        if self.test_data_path.exists():
            self.logger.warning("run_directory_remove_failed", path=str(self.test_data_path))
            return False

        self.state = ManagerState.UNINITIALIZED
        self.logger.info("run_directory_removed", path=str(self.test_data_path), run_id=self.run_id)
        return True

    def get_test_data_summary(self) -> Dict[str, Any]:
        """Read-only snapshot of the test-data directory for diagnostics."""
        file_counts: Dict[str, int] = {}
        for category in FixtureCategory:
            directory = self.store.directory(category)
            file_counts[category.value] = (
                sum(1 for p in directory.iterdir() if p.is_file()) if directory.is_dir() else 0
            )

        upload_files = (
            sorted(p.name for p in self.upload_dir.iterdir() if p.is_file())
            if self.upload_dir.is_dir() else []
        )

        return {
            "test_data_path": str(self.test_data_path),
            "run_id": self.run_id,
            "state": self.state.value,
            "upload_files": len(upload_files),
            "file_counts": file_counts,
            "available_test_files": upload_files,
            "file_upload_config": self.policy.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.get_test_data_summary(), indent=2)
