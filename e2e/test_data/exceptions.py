"""
Errors raised by the test-data layer.
"""


class FixtureError(Exception):
    """Base exception for test-data fixture errors"""
    pass


class FixtureNotFoundError(FixtureError):
    """Raised when a fixture file is missing"""
    pass


class FixtureIOError(FixtureError):
    """Raised when a fixture file or directory cannot be written or deleted"""
    pass


class PolicyMismatchError(FixtureError):
    """Raised when a file extension is neither accepted nor rejected by the upload policy"""
    pass
