"""S3 operations for lock objects: reads and conditional writes."""

import functools
import logging
import random
import time
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from s3lock.common import config
from s3lock.common.errors import ObjectNotFound, PreconditionFailed, StoreError
from s3lock.common.models import Precondition, StoredObject

logger = logging.getLogger(__name__)

# Retry configuration
MAX_RETRIES = 4
BASE_DELAY = 0.5  # seconds
MAX_DELAY = 16.0  # seconds

_THROTTLE_CODES = frozenset({
    "SlowDown",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
})

_PRECONDITION_CODES = frozenset({
    "PreconditionFailed",
    "ConditionalRequestConflict",
})

_NOT_FOUND_CODES = frozenset({
    "NoSuchKey",
    "NotFound",
    "404",
})


def retry_on_throttle(func):
    """Retry S3 operations on throttling with exponential backoff + jitter."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        last_exc = None
        for attempt in range(MAX_RETRIES + 1):
            try:
                return func(*args, **kwargs)
            except StoreError as exc:
                if exc.code not in _THROTTLE_CODES:
                    raise
                last_exc = exc
                if attempt < MAX_RETRIES:
                    delay = min(BASE_DELAY * (2 ** attempt), MAX_DELAY)
                    jitter = random.uniform(0, delay * 0.5)
                    sleep_time = delay + jitter
                    logger.warning(
                        "S3 throttled (%s), retry %d/%d in %.1fs",
                        exc.code, attempt + 1, MAX_RETRIES, sleep_time,
                    )
                    time.sleep(sleep_time)
        raise last_exc
    return wrapper


def _get_client(s3_client=None):
    """Get an S3 client."""
    if s3_client is None:
        endpoint_url = config.get_endpoint_url()
        if endpoint_url:
            s3_client = boto3.client("s3", endpoint_url=endpoint_url)
        else:
            s3_client = boto3.client("s3")
    return s3_client


def _translate_error(exc: ClientError, bucket: str, key: str) -> StoreError:
    """Classify a ClientError into the s3lock error taxonomy."""
    error = exc.response.get("Error", {})
    code = str(error.get("Code", ""))
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    message = error.get("Message") or str(exc)

    if code in _PRECONDITION_CODES or status == 412:
        return PreconditionFailed(message, code=code, bucket=bucket, key=key)
    if code in _NOT_FOUND_CODES:
        return ObjectNotFound(
            f"s3://{bucket}/{key} does not exist", code=code, bucket=bucket, key=key,
        )
    return StoreError(message, code=code, bucket=bucket, key=key)


@retry_on_throttle
def get_object(
    bucket: str,
    key: str,
    s3_client=None,
) -> StoredObject:
    """Read an object's body and ETag.

    Raises ObjectNotFound if the key does not exist, StoreError otherwise.
    """
    client = _get_client(s3_client)
    try:
        response = client.get_object(Bucket=bucket, Key=key)
    except ClientError as exc:
        raise _translate_error(exc, bucket, key) from exc
    body = response["Body"].read()
    return StoredObject(body=body, etag=response["ETag"])


@retry_on_throttle
def put_object(
    bucket: str,
    key: str,
    body: bytes,
    precondition: Optional[Precondition] = None,
    s3_client=None,
) -> str:
    """Write an object, optionally conditioned on its current state.

    Returns the ETag assigned by the store. Raises PreconditionFailed when
    the store rejects the condition, StoreError on any other failure.
    """
    client = _get_client(s3_client)
    if isinstance(body, str):
        body = body.encode("utf-8")
    params = {"Bucket": bucket, "Key": key, "Body": body}
    if precondition is not None:
        params.update(precondition.to_request_params())
    try:
        response = client.put_object(**params)
    except ClientError as exc:
        raise _translate_error(exc, bucket, key) from exc
    return response["ETag"]
