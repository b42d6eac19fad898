"""Lock handle returned by a successful acquire."""

import logging
import time
from typing import Optional, Union

from s3lock.common import s3
from s3lock.common.errors import PreconditionFailed, ReleaseInvalidated
from s3lock.common.models import Precondition
from s3lock.locking import bodies

logger = logging.getLogger(__name__)

# Acquisition modes
EXISTENCE = "existence"
CAS = "cas"


class LockHandle:
    """Capability to release a lock, bound to the ETag written at acquire time.

    Release is a conditional write on that ETag, so it fails if any other
    write reached the object in between. A handle can be released once.
    """

    def __init__(
        self,
        bucket: str,
        key: str,
        etag: str,
        body: bytes,
        mode: str,
        s3_client=None,
    ):
        self.bucket = bucket
        self.key = key
        self.etag = etag
        self.body = body
        self.mode = mode
        self.acquired_at = time.time()
        self._s3_client = s3_client
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self, new_body: Optional[Union[bytes, str]] = None) -> str:
        """Overwrite the lock object with new_body if we still own it.

        Defaults to the unlocked marker. Returns the new ETag.
        Raises ReleaseInvalidated if ownership was lost or the handle was
        already released.
        """
        if self._released:
            raise ReleaseInvalidated(
                f"Lock handle for s3://{self.bucket}/{self.key} was already released",
                bucket=self.bucket, key=self.key, etag=self.etag,
            )

        if new_body is None:
            new_body = bodies.unlocked_body()

        try:
            new_etag = s3.put_object(
                self.bucket,
                self.key,
                bodies.encode_body(new_body),
                precondition=Precondition.version_equals(self.etag),
                s3_client=self._s3_client,
            )
        except PreconditionFailed as exc:
            self._released = True
            logger.warning(
                "Release rejected for s3://%s/%s: ownership lost (etag=%s, held %.1fs)",
                self.bucket, self.key, self.etag, time.time() - self.acquired_at,
            )
            raise ReleaseInvalidated(
                f"Lock s3://{self.bucket}/{self.key} was modified while held; "
                "the critical section may have run concurrently",
                bucket=self.bucket, key=self.key, etag=self.etag,
            ) from exc

        self._released = True
        logger.info("Lock released: s3://%s/%s (%s)", self.bucket, self.key, self.mode)
        return new_etag

    def __enter__(self) -> "LockHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._released:
            self.release()

    def __repr__(self) -> str:
        return (
            f"LockHandle(bucket={self.bucket!r}, key={self.key!r}, "
            f"etag={self.etag!r}, mode={self.mode!r}, released={self._released})"
        )
