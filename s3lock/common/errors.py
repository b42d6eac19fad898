"""Exception taxonomy for s3lock."""

from typing import Optional


class S3LockError(Exception):
    """Base exception for all s3lock errors."""
    pass


class LockNotAcquired(S3LockError):
    """Raised when a lock could not be acquired."""

    def __init__(self, message: str = "Failed to acquire lock", bucket: str = None, key: str = None):
        super().__init__(message)
        self.bucket = bucket
        self.key = key


class AlreadyInitialized(LockNotAcquired):
    """Raised when a lock object is seeded twice."""
    pass


class ReleaseInvalidated(S3LockError):
    """Raised when a release is rejected because the holder lost ownership.

    The critical section may have run concurrently with another holder.
    """

    def __init__(self, message: str, bucket: str = None, key: str = None, etag: str = None):
        super().__init__(message)
        self.bucket = bucket
        self.key = key
        self.etag = etag


class StoreError(S3LockError):
    """Object store failure that is not lock contention."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.bucket = bucket
        self.key = key


class ObjectNotFound(StoreError):
    """Raised when reading a lock object that does not exist."""
    pass


class PreconditionFailed(StoreError):
    """Conditional write rejected by the store."""
    pass
