"""Default lock body encoding: a JSON object with a boolean ``locked`` field."""

import logging
import uuid
from typing import Callable, Union

from s3lock.common.models import LockBody

logger = logging.getLogger(__name__)

BodyPredicate = Callable[[bytes], bool]
BodyGenerator = Callable[[], Union[bytes, str]]


def default_predicate(body: bytes) -> bool:
    """True when the body decodes to an unlocked marker.

    An empty or unparseable body counts as locked.
    """
    try:
        return not LockBody.from_bytes(body).locked
    except ValueError:
        logger.warning("Unparseable lock body, treating as locked: %r", body[:64])
        return False


def default_generate_body() -> bytes:
    """Locked marker with a fresh owner id, so every acquire write differs."""
    return LockBody(locked=True, owner=uuid.uuid4().hex).to_bytes()


def unlocked_body() -> bytes:
    return LockBody(locked=False).to_bytes()


def encode_body(body: Union[bytes, str]) -> bytes:
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    raise TypeError(f"Lock body must be bytes or str, got {type(body).__name__}")
