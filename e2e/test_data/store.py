"""
FileFixtureStore - On-disk pool of files used as upload inputs.

The store owns a test-data root with one sub-directory per fixture category:

    <root>/upload/     files handed to the upload page
    <root>/register/   persisted user records and credentials
    <root>/downloads/  files saved from the browser

Every file the store writes is tracked as a ManagedFile so that cleanup()
can remove exactly what this run created. Deletion is best effort: a file
that is already gone counts as deleted and other OS errors are logged, never
raised.
"""

import json
import os
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import structlog

from e2e.test_data.exceptions import FixtureError, FixtureIOError, FixtureNotFoundError

BYTES_PER_MB = 1024 * 1024

# Filler is written in slices of this size
_FILL_CHUNK_BYTES = BYTES_PER_MB


class FixtureCategory(str, Enum):
    """Sub-directories of the test-data root."""
    UPLOAD = "upload"
    REGISTER = "register"
    DOWNLOADS = "downloads"


@dataclass(frozen=True)
class FixturePath:
    """A file name scoped to a fixture category."""
    category: FixtureCategory
    filename: str

    def resolve(self, root: Path) -> Path:
        """
        Join the fixture path onto a root without touching the filesystem.

        Raises:
            FixtureError: If the file name would escape its category directory
        """
        name = self.filename
        if not name or name in (".", "..") or "/" in name or "\\" in name or os.sep in name:
            raise FixtureError(f"Invalid fixture file name: {name!r}")
        return root / FixtureCategory(self.category).value / name


@dataclass(frozen=True)
class ManagedFile:
    """A file written by the store and owned by it until cleanup."""
    path: Path
    created_by_run: bool = True


class FileFixtureStore:
    """
    Creates, tracks and deletes fixture files under a test-data root.

    The root is always passed in explicitly; nothing here depends on the
    process working directory.
    """

    def __init__(self, root: Union[str, Path], logger: Optional[Any] = None):
        """
        Initialize the FileFixtureStore.

        Args:
            root: Test-data root directory
            logger: Structured logger (defaults to this module's structlog logger)
        """
        self.root = Path(root).resolve()
        self.logger = logger or structlog.get_logger(__name__)
        self._managed: Dict[Path, ManagedFile] = {}

    @property
    def managed_files(self) -> List[ManagedFile]:
        """Snapshot of files currently owned by the store."""
        return list(self._managed.values())

    def directory(self, category: FixtureCategory) -> Path:
        return self.root / FixtureCategory(category).value

    def path_for(self, category: FixtureCategory, file_name: str) -> Path:
        """Pure join of a category and file name onto the root."""
        return FixturePath(FixtureCategory(category), file_name).resolve(self.root)

    def ensure_directories(self) -> None:
        """
        Create the category directories under the root.

        Raises:
            FixtureIOError: If a directory cannot be created
        """
        for category in FixtureCategory:
            directory = self.directory(category)
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.logger.error("fixture_directory_create_failed", path=str(directory), error=str(e))
                raise FixtureIOError(f"Failed to create fixture directory {directory}: {e}") from e

        self.logger.debug("fixture_directories_ready", root=str(self.root))

    def track(self, path: Union[str, Path], created_by_run: bool = True) -> ManagedFile:
        """Record a file as owned by the store."""
        managed = ManagedFile(path=Path(path).resolve(), created_by_run=created_by_run)
        self._managed[managed.path] = managed
        return managed

    def _discard_partial(self, path: Path) -> None:
        """Remove whatever a failed write left behind."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning("partial_fixture_remove_failed", path=str(path), error=str(e))
            return
        self._managed.pop(path.resolve(), None)

    def _write(self, path: Path, data: Union[str, bytes]) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(data, bytes):
                path.write_bytes(data)
            else:
                path.write_text(data, encoding="utf-8")
        except OSError as e:
            self.logger.error("fixture_write_failed", path=str(path), error=str(e))
            self._discard_partial(path)
            raise FixtureIOError(f"Failed to write fixture file {path}: {e}") from e

        self.track(path)
        return path

    def create_test_file(
        self,
        file_name: str,
        content: str = "Test content",
        category: FixtureCategory = FixtureCategory.UPLOAD,
    ) -> Path:
        """
        Write a text file, overwriting any existing file of the same name.

        Returns:
            Absolute path of the written file

        Raises:
            FixtureIOError: If the write fails
        """
        path = self._write(self.path_for(category, file_name), content)
        self.logger.info("test_file_created", path=str(path), size_bytes=len(content.encode("utf-8")))
        return path

    def create_file_with_size(
        self,
        file_name: str,
        size_in_mb: float,
        category: FixtureCategory = FixtureCategory.UPLOAD,
    ) -> Path:
        """
        Write a file of exactly size_in_mb * 1024 * 1024 bytes of filler.

        Used to exercise upload size limits. Write failures (for example a full
        disk) are not retried.

        Raises:
            FixtureIOError: If the write fails
        """
        if size_in_mb < 0:
            raise FixtureError(f"File size must not be negative: {size_in_mb}")

        path = self.path_for(category, file_name)
        size_in_bytes = int(size_in_mb * BYTES_PER_MB)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                remaining = size_in_bytes
                while remaining > 0:
                    chunk = min(remaining, _FILL_CHUNK_BYTES)
                    f.write(b"A" * chunk)
                    remaining -= chunk
        except OSError as e:
            self.logger.error(
                "sized_file_create_failed",
                path=str(path),
                size_in_mb=size_in_mb,
                error=str(e),
            )
            self._discard_partial(path)
            raise FixtureIOError(f"Failed to create file with size {size_in_mb}MB: {e}") from e

        self.track(path)
        self.logger.info("sized_file_created", path=str(path), size_bytes=size_in_bytes)
        return path

    def create_binary_file(
        self,
        file_name: str,
        size_in_bytes: int = 1024,
        category: FixtureCategory = FixtureCategory.UPLOAD,
    ) -> Path:
        """Write a file of random bytes (stands in for images or PDFs)."""
        path = self._write(self.path_for(category, file_name), secrets.token_bytes(size_in_bytes))
        self.logger.info("binary_file_created", path=str(path), size_bytes=size_in_bytes)
        return path

    def create_csv_file(
        self,
        file_name: str,
        rows: Sequence[Sequence[Any]],
        category: FixtureCategory = FixtureCategory.UPLOAD,
    ) -> Path:
        content = "\n".join(",".join(str(cell) for cell in row) for row in rows)
        path = self._write(self.path_for(category, file_name), content)
        self.logger.info("csv_file_created", path=str(path), rows=len(rows))
        return path

    def create_json_file(
        self,
        file_name: str,
        data: Any,
        category: FixtureCategory = FixtureCategory.UPLOAD,
    ) -> Path:
        path = self._write(self.path_for(category, file_name), json.dumps(data, indent=2))
        self.logger.info("json_file_created", path=str(path))
        return path

    @staticmethod
    def generate_unique_file_name(extension: str = "txt") -> str:
        """Build a collision-resistant name: test-file-<ms>-<hex8>.<ext>"""
        timestamp = int(time.time() * 1000)
        return f"test-file-{timestamp}-{secrets.token_hex(4)}.{extension}"

    def create_multiple_files(self, count: int, extension: str = "txt") -> List[Path]:
        return [
            self.create_test_file(self.generate_unique_file_name(extension), f"Test file {i + 1} content")
            for i in range(count)
        ]

    def file_exists(self, file_path: Union[str, Path]) -> bool:
        return Path(file_path).is_file()

    def get_file_size(self, file_path: Union[str, Path]) -> int:
        """
        Size of a file in bytes.

        Raises:
            FixtureNotFoundError: If the file does not exist
        """
        path = Path(file_path)
        try:
            return path.stat().st_size
        except FileNotFoundError as e:
            raise FixtureNotFoundError(f"File not found: {path}") from e

    def get_file_size_in_mb(self, file_path: Union[str, Path]) -> float:
        """
        Size of a file in MB (1 MB = 1024 * 1024 bytes).

        Raises:
            FixtureNotFoundError: If the file does not exist
        """
        return self.get_file_size(file_path) / BYTES_PER_MB

    def delete_file(self, file_path: Union[str, Path]) -> bool:
        """
        Delete a file and stop tracking it.

        A missing file counts as deleted. Other filesystem errors are logged
        and reported by returning False.

        Returns:
            True if the file is gone afterwards
        """
        path = Path(file_path).resolve()
        try:
            path.unlink()
            self.logger.debug("fixture_file_deleted", path=str(path))
        except FileNotFoundError:
            self.logger.debug("fixture_file_already_absent", path=str(path))
        except OSError as e:
            self.logger.warning("fixture_file_delete_failed", path=str(path), error=str(e))
            return False

        self._managed.pop(path, None)
        return True

    def delete_files(self, paths: Iterable[Union[str, Path]]) -> int:
        return sum(1 for path in list(paths) if self.delete_file(path))

    def cleanup(self) -> int:
        """
        Delete every tracked file.

        Safe to call repeatedly; never raises.

        Returns:
            Number of tracked files that are now gone
        """
        tracked = [managed.path for managed in self._managed.values() if managed.created_by_run]
        removed = self.delete_files(tracked)

        self.logger.info("fixture_store_cleaned", removed=removed, tracked=len(tracked))
        return removed
