"""Seed a lock object with its unlocked body before CAS locking."""

import logging
from typing import Optional, Union

from s3lock.common import s3
from s3lock.common.errors import AlreadyInitialized, PreconditionFailed
from s3lock.common.models import Precondition
from s3lock.locking import bodies

logger = logging.getLogger(__name__)


def initialize_lock_object(
    bucket: str,
    key: str,
    initial_body: Optional[Union[bytes, str]] = None,
    s3_client=None,
) -> str:
    """Create the lock object if absent. Returns its ETag.

    Raises AlreadyInitialized, leaving the object untouched, if it exists.
    """
    if initial_body is None:
        initial_body = bodies.unlocked_body()
    try:
        etag = s3.put_object(
            bucket,
            key,
            bodies.encode_body(initial_body),
            precondition=Precondition.must_not_exist(),
            s3_client=s3_client,
        )
    except PreconditionFailed as exc:
        raise AlreadyInitialized(
            f"Lock object s3://{bucket}/{key} already exists", bucket=bucket, key=key,
        ) from exc
    logger.info("Initialized lock object s3://%s/%s", bucket, key)
    return etag
