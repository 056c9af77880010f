"""
Custom exceptions for the crypto filter engine.

This module defines exceptions that represent failures of the durable
key-value store backing the filter preferences, as distinct from invalid
input (which pydantic reports with its own ValidationError).
"""

from typing import Optional


class PersistenceError(Exception):
    """
    Raised when a key-value backend cannot read, write or remove a key.

    The persistence adapter catches this and degrades to defaults or no-ops;
    it never reaches UI or API consumers.

    Examples:
        - Storage directory is not writable
        - Stored file cannot be read (permissions, disk failure)
        - Key resolves outside the storage root

    Attributes:
        key: Storage key the operation targeted
        operation: One of "get", "set", "remove"
    """

    def __init__(self, key: str, operation: str, cause: Optional[BaseException] = None):
        self.key = key
        self.operation = operation
        self.cause = cause
        message = f"Storage {operation} failed for key {key!r}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
