"""Lambda entrypoint exercising existence and compare-and-swap locks end to end."""

import json
import logging
import time
from typing import Any, Dict

from s3lock.common import config
from s3lock.common.errors import LockNotAcquired
from s3lock.locking.cas import acquire_cas_lock
from s3lock.locking.existence import acquire_existence_lock
from s3lock.locking.initialize import initialize_lock_object

logger = logging.getLogger(__name__)


class ScenarioFailed(Exception):
    """A demo step observed behaviour the lock must never exhibit."""
    pass


def _expect_not_acquired(acquire, *args, **kwargs) -> None:
    try:
        handle = acquire(*args, **kwargs)
    except LockNotAcquired as exc:
        logger.info("Expected contention: %s", exc)
        return
    handle.release()
    raise ScenarioFailed("Acquired a lock that is already held")


def existence_scenario(bucket: str, key: str, s3_client=None) -> None:
    """Acquire, fail a second acquire, release."""
    logger.info("Starting existence example on s3://%s/%s", bucket, key)
    lock = acquire_existence_lock(bucket, key, s3_client=s3_client)
    _expect_not_acquired(acquire_existence_lock, bucket, key, s3_client=s3_client)
    lock.release(json.dumps({"locked": False}))


def _test_conditional(body: bytes) -> bool:
    lock_body = json.loads(body.decode("utf-8"))
    return bool(not lock_body.get("locked") and lock_body.get("testConditional"))


def cas_scenario(bucket: str, key: str, delay: float = 0.1, s3_client=None) -> None:
    """Seed, acquire, contend, release, re-acquire, then flip the condition."""
    logger.info("Starting compare and swap example on s3://%s/%s", bucket, key)
    initialize_lock_object(bucket, key, s3_client=s3_client)
    common = {
        "predicate": _test_conditional,
        "max_attempts": 2,
        "delay": delay,
        "s3_client": s3_client,
    }

    lock = acquire_cas_lock(
        bucket, key,
        predicate=lambda body: True,
        generate_body=lambda: json.dumps({"locked": True, "testConditional": True}),
        max_attempts=2, delay=delay, s3_client=s3_client,
    )
    _expect_not_acquired(acquire_cas_lock, bucket, key, **common)
    lock.release(json.dumps({"locked": False, "testConditional": True}))

    lock = acquire_cas_lock(bucket, key, **common)
    # flipping testConditional makes every later acquire fail
    lock.release(json.dumps({"locked": False, "testConditional": False}))
    _expect_not_acquired(acquire_cas_lock, bucket, key, **common)


def handler(event: Dict[str, Any], context: Any = None, s3_client=None) -> dict:
    """Lambda entrypoint. Optional event keys: bucket, key_prefix, delay."""
    bucket = event.get("bucket") or config.get_demo_bucket()
    if not bucket:
        logger.error("No bucket in event and S3LOCK_DEMO_BUCKET unset")
        return {"status": "error", "message": "Missing bucket"}

    run_id = str(int(time.time() * 1000))
    prefix = event.get("key_prefix", "s3lock-demo")

    try:
        delay = float(event.get("delay", 0.1))
        existence_scenario(bucket, f"{prefix}/{run_id}/existence", s3_client=s3_client)
        cas_scenario(bucket, f"{prefix}/{run_id}/cas", delay=delay, s3_client=s3_client)
    except Exception as e:
        logger.exception("Lock demo failed for run_id=%s", run_id)
        return {"status": "error", "message": str(e)}

    return {"status": "ok", "run_id": run_id}
