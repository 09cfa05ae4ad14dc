"""
Error taxonomy for the smart routes connectivity service
"""
from typing import Optional


class SmartRoutesError(Exception):
    """Base exception for connectivity errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


class DataIntegrityError(SmartRoutesError):
    """Raised when cities or routes are malformed (duplicate id, unknown endpoint)."""
    pass


class RepositoryError(SmartRoutesError):
    """Base class for route repository failures."""
    pass


class RepositoryReadError(RepositoryError):
    """Raised when the route network cannot be loaded."""
    pass


class RepositoryWriteError(RepositoryError):
    """Raised when a route batch could not be committed. Nothing was written."""
    pass


class StaleSnapshotError(RepositoryWriteError):
    """Raised when a batch was planned against an outdated network revision."""

    def __init__(self, expected_revision: int, actual_revision: int):
        super().__init__(
            f"Network revision changed from {expected_revision} to {actual_revision}",
            {"expected_revision": expected_revision, "actual_revision": actual_revision},
        )
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision


class ConnectivityInvariantError(SmartRoutesError):
    """Raised when the network is still disconnected after a successful augmentation."""
    pass
