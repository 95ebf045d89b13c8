"""
Test Data Package

Fixture management for the UI suite:
- store: on-disk fixture files and their cleanup
- policy: upload format/size policy and validators
- users: user record schemas and synthetic users
- manager: lifecycle manager tying the pieces together
"""

from e2e.test_data.exceptions import (
    FixtureError,
    FixtureIOError,
    FixtureNotFoundError,
    PolicyMismatchError,
)
from e2e.test_data.manager import ManagerState, TestDataManager
from e2e.test_data.policy import (
    DEFAULT_UPLOAD_POLICY,
    FileUploadPolicy,
    FormatClass,
    classify_file_format,
    is_file_size_valid,
    is_invalid_file_format,
    is_valid_file_format,
)
from e2e.test_data.store import FileFixtureStore, FixtureCategory, FixturePath, ManagedFile
from e2e.test_data.users import Credentials, UserRecord, generate_random_user

__all__ = [
    "FixtureError",
    "FixtureIOError",
    "FixtureNotFoundError",
    "PolicyMismatchError",
    "ManagerState",
    "TestDataManager",
    "DEFAULT_UPLOAD_POLICY",
    "FileUploadPolicy",
    "FormatClass",
    "classify_file_format",
    "is_file_size_valid",
    "is_invalid_file_format",
    "is_valid_file_format",
    "FileFixtureStore",
    "FixtureCategory",
    "FixturePath",
    "ManagedFile",
    "Credentials",
    "UserRecord",
    "generate_random_user",
]
