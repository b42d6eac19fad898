"""Existence lock: create the lock object only if it is absent."""

import logging
from typing import Optional

from s3lock.common import s3
from s3lock.common.errors import LockNotAcquired, PreconditionFailed
from s3lock.common.models import Precondition
from s3lock.locking import bodies
from s3lock.locking.handle import EXISTENCE, LockHandle

logger = logging.getLogger(__name__)


def acquire_existence_lock(
    bucket: str,
    key: str,
    generate_body: Optional[bodies.BodyGenerator] = None,
    s3_client=None,
) -> LockHandle:
    """Acquire a lock by writing bucket/key with If-None-Match: *.

    Single attempt. Raises LockNotAcquired if the object already exists;
    any other store error propagates.
    """
    generate_body = generate_body or bodies.default_generate_body
    body = bodies.encode_body(generate_body())

    logger.info("Existence lock: writing to s3://%s/%s", bucket, key)
    try:
        etag = s3.put_object(
            bucket,
            key,
            body,
            precondition=Precondition.must_not_exist(),
            s3_client=s3_client,
        )
    except PreconditionFailed as exc:
        logger.info("Existence lock not acquired: s3://%s/%s already exists", bucket, key)
        raise LockNotAcquired(
            f"Lock s3://{bucket}/{key} is already held", bucket=bucket, key=key,
        ) from exc

    logger.info("Existence lock acquired: s3://%s/%s", bucket, key)
    return LockHandle(bucket, key, etag, body, mode=EXISTENCE, s3_client=s3_client)
