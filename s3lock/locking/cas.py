"""Compare-and-swap lock: read, test the body, overwrite with If-Match.

Each attempt reads the object and its ETag, evaluates the predicate over
the body and, if it passes, writes a new body conditioned on that ETag.
Losing the race between read and write surfaces as a rejected write; the
store decides the winner.
"""

import logging
import threading
import time
from typing import Optional

from s3lock.common import config, s3
from s3lock.common.errors import LockNotAcquired, PreconditionFailed
from s3lock.common.models import Precondition
from s3lock.locking import bodies
from s3lock.locking.handle import CAS, LockHandle

logger = logging.getLogger(__name__)


def _wait(delay: float, cancel: Optional[threading.Event], bucket: str, key: str) -> None:
    if cancel is None:
        time.sleep(delay)
        return
    if cancel.wait(delay):
        raise LockNotAcquired(
            f"Acquire of s3://{bucket}/{key} cancelled", bucket=bucket, key=key,
        )


def acquire_cas_lock(
    bucket: str,
    key: str,
    predicate: Optional[bodies.BodyPredicate] = None,
    generate_body: Optional[bodies.BodyGenerator] = None,
    max_attempts: Optional[int] = None,
    delay: Optional[float] = None,
    max_conflicts: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
    s3_client=None,
) -> LockHandle:
    """Acquire a lock by conditionally overwriting an existing object.

    Args:
        predicate: called with the current body; True means the lock is free.
            Defaults to checking the JSON ``locked`` field.
        generate_body: produces the body written on acquire.
        max_attempts: attempt budget (default S3LOCK_MAX_ATTEMPTS or 5).
        delay: seconds between attempts (default S3LOCK_RETRY_DELAY or 5.0).
        max_conflicts: if given (>= 1), rejected writes draw on this separate budget
            and max_attempts only counts reads whose predicate failed.
            Otherwise both share max_attempts.
        cancel: event that aborts the wait between attempts.

    Raises LockNotAcquired when the budget is exhausted or the wait is
    cancelled. ObjectNotFound and other store errors propagate immediately.
    """
    predicate = predicate or bodies.default_predicate
    generate_body = generate_body or bodies.default_generate_body
    if max_attempts is None:
        max_attempts = config.get_max_attempts()
    if delay is None:
        delay = config.get_retry_delay()
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if delay < 0:
        raise ValueError(f"delay must be >= 0, got {delay}")
    if max_conflicts is not None and max_conflicts < 1:
        raise ValueError(f"max_conflicts must be >= 1, got {max_conflicts}")

    attempts_left = max_attempts
    conflicts_left = max_conflicts
    reads = 0

    while True:
        reads += 1
        logger.info("Compare and swap lock: reading s3://%s/%s (attempt %d)", bucket, key, reads)
        current = s3.get_object(bucket, key, s3_client=s3_client)

        if not predicate(current.body):
            attempts_left -= 1
            logger.info(
                "Compare and swap lock: s3://%s/%s not free, %d attempt(s) left",
                bucket, key, attempts_left,
            )
            if attempts_left <= 0:
                break
            _wait(delay, cancel, bucket, key)
            continue

        body = bodies.encode_body(generate_body())
        try:
            etag = s3.put_object(
                bucket,
                key,
                body,
                precondition=Precondition.version_equals(current.etag),
                s3_client=s3_client,
            )
        except PreconditionFailed:
            # another client wrote between our read and write
            if conflicts_left is None:
                attempts_left -= 1
                exhausted = attempts_left <= 0
            else:
                conflicts_left -= 1
                exhausted = conflicts_left <= 0
            logger.info("Compare and swap lock: lost race on s3://%s/%s", bucket, key)
            if exhausted:
                break
            _wait(delay, cancel, bucket, key)
            continue

        logger.info("Compare and swap lock acquired: s3://%s/%s", bucket, key)
        return LockHandle(bucket, key, etag, body, mode=CAS, s3_client=s3_client)

    raise LockNotAcquired(
        f"Lock s3://{bucket}/{key} not acquired after {reads} attempt(s)",
        bucket=bucket, key=key,
    )
