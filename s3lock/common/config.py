"""Environment-driven settings for s3lock."""

import os
from typing import Optional

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY = 5.0  # seconds


def _read_env(name: str, cast, default):
    raw = os.environ.get(name, "")
    if raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


def get_max_attempts() -> int:
    """CAS attempt budget used when the caller passes none."""
    value = _read_env("S3LOCK_MAX_ATTEMPTS", int, DEFAULT_MAX_ATTEMPTS)
    if value < 1:
        raise ValueError(f"S3LOCK_MAX_ATTEMPTS must be >= 1, got {value}")
    return value


def get_retry_delay() -> float:
    """Seconds to wait between CAS attempts."""
    value = _read_env("S3LOCK_RETRY_DELAY", float, DEFAULT_RETRY_DELAY)
    if value < 0:
        raise ValueError(f"S3LOCK_RETRY_DELAY must be >= 0, got {value}")
    return value


def get_endpoint_url() -> Optional[str]:
    return os.environ.get("S3LOCK_ENDPOINT_URL") or None


def get_demo_bucket() -> str:
    return os.environ.get("S3LOCK_DEMO_BUCKET", "")
