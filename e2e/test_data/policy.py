"""
File upload policy and format/size validation.

The policy is a static description of which file extensions the upload page
is expected to accept or reject, and how large an upload may be. The
validators are plain functions over a policy so that page objects and tests
can share them without holding a manager instance.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

import structlog

from e2e.test_data.exceptions import PolicyMismatchError

if TYPE_CHECKING:
    from e2e.test_data.store import FileFixtureStore

_logger = structlog.get_logger(__name__)


class FormatClass(str, Enum):
    """Classification of a file extension under an upload policy."""
    VALID = "valid"
    INVALID = "invalid"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class FileUploadPolicy:
    """Accepted/rejected formats and size limit for upload tests."""
    valid_formats: FrozenSet[str]
    invalid_formats: FrozenSet[str]
    max_file_size_mb: float
    canonical_files: Mapping[str, str] = field(default_factory=dict)
    special_characters: Tuple[str, ...] = ()

    def __post_init__(self):
        # Normalise to immutable containers with lower-cased extensions
        object.__setattr__(self, "valid_formats", frozenset(f.lower() for f in self.valid_formats))
        object.__setattr__(self, "invalid_formats", frozenset(f.lower() for f in self.invalid_formats))
        object.__setattr__(self, "canonical_files", MappingProxyType(dict(self.canonical_files)))
        object.__setattr__(self, "special_characters", tuple(self.special_characters))

    def to_dict(self) -> Dict[str, Any]:
        """Plain, JSON-serialisable view of the policy."""
        return {
            "valid_formats": sorted(self.valid_formats),
            "invalid_formats": sorted(self.invalid_formats),
            "max_file_size_mb": self.max_file_size_mb,
            "canonical_files": dict(self.canonical_files),
            "special_characters": list(self.special_characters),
        }


DEFAULT_UPLOAD_POLICY = FileUploadPolicy(
    valid_formats=frozenset({"txt", "pdf", "png", "jpg", "jpeg", "csv", "json", "xml", "doc", "docx"}),
    invalid_formats=frozenset({"exe", "bat", "sh", "cmd", "msi"}),
    max_file_size_mb=5,
    canonical_files={
        "small": "test-small.txt",
        "medium": "test-medium.txt",
        "large": "test-large.txt",
        "main": "test-file.txt",
        "csv": "test-data.csv",
        "json": "test-data.json",
        "pdf": "test-document.pdf",
        "invalid": "test.exe",
    },
    special_characters=("@", "#", "$", "%", "&", "(", ")", "-", "_", "+", "="),
)


def extension_of(file_name: Union[str, Path]) -> str:
    """
    Return the lower-cased extension of a file name without the dot.

    Only the substring after the last '.' counts, so "archive.tar.gz" yields
    "gz". Names without a dot (or dot-files such as ".env") yield "".
    """
    name = Path(file_name).name
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        return ""
    return extension.lower()


def is_valid_file_format(file_name: Union[str, Path], policy: FileUploadPolicy = DEFAULT_UPLOAD_POLICY) -> bool:
    """True if the extension is one the upload page should accept."""
    return extension_of(file_name) in policy.valid_formats


def is_invalid_file_format(file_name: Union[str, Path], policy: FileUploadPolicy = DEFAULT_UPLOAD_POLICY) -> bool:
    """True if the extension is one the upload page should reject."""
    return extension_of(file_name) in policy.invalid_formats


def classify_file_format(file_name: Union[str, Path], policy: FileUploadPolicy = DEFAULT_UPLOAD_POLICY) -> FormatClass:
    """
    Classify a file name against the policy.

    Extensions listed in neither set (e.g. ".gif") are reported as
    UNCLASSIFIED rather than folded into valid or invalid.
    """
    if is_valid_file_format(file_name, policy):
        return FormatClass.VALID
    if is_invalid_file_format(file_name, policy):
        return FormatClass.INVALID
    return FormatClass.UNCLASSIFIED


def require_classified_format(file_name: Union[str, Path], policy: FileUploadPolicy = DEFAULT_UPLOAD_POLICY) -> FormatClass:
    """
    Classify a file name, raising if the policy says nothing about it.

    Raises:
        PolicyMismatchError: If the extension is in neither format set
    """
    format_class = classify_file_format(file_name, policy)
    if format_class is FormatClass.UNCLASSIFIED:
        raise PolicyMismatchError(
            f"Extension '{extension_of(file_name)}' of {file_name} is neither valid nor invalid under the upload policy"
        )
    return format_class


def is_file_size_valid(
    file_path: Union[str, Path],
    store: "FileFixtureStore",
    policy: FileUploadPolicy = DEFAULT_UPLOAD_POLICY,
    logger: Optional[Any] = None,
) -> bool:
    """
    Check that a file is within the policy's size limit.

    Any error while looking up the size makes the check fail (returns False).
    The failure is logged to the given logger, or this module's logger.
    """
    try:
        size_in_mb = store.get_file_size_in_mb(file_path)
    except Exception as e:
        (logger or _logger).error("file_size_check_failed", path=str(file_path), error=str(e))
        return False

    return size_in_mb <= policy.max_file_size_mb
