"""Unit tests for s3lock/locking/existence.py."""

import json

import pytest
from unittest.mock import MagicMock

from conftest import client_error
from s3lock.common.errors import LockNotAcquired, StoreError
from s3lock.locking.existence import acquire_existence_lock
from s3lock.locking.handle import EXISTENCE, LockHandle


class TestAcquireExistenceLock:
    def test_acquires_on_absent_key(self, fake_s3):
        handle = acquire_existence_lock("locks", "job-1", s3_client=fake_s3)

        assert isinstance(handle, LockHandle)
        assert handle.mode == EXISTENCE
        assert handle.etag == fake_s3.etag("locks", "job-1")
        assert json.loads(fake_s3.body("locks", "job-1"))["locked"] is True

    def test_second_acquire_fails(self, fake_s3):
        acquire_existence_lock("locks", "job-1", s3_client=fake_s3)

        with pytest.raises(LockNotAcquired) as exc_info:
            acquire_existence_lock("locks", "job-1", s3_client=fake_s3)
        assert exc_info.value.key == "job-1"

    def test_failed_acquire_leaves_body(self, fake_s3):
        acquire_existence_lock("locks", "job-1", generate_body=lambda: b"first", s3_client=fake_s3)

        with pytest.raises(LockNotAcquired):
            acquire_existence_lock("locks", "job-1", generate_body=lambda: b"second", s3_client=fake_s3)
        assert fake_s3.body("locks", "job-1") == b"first"

    def test_custom_body_generator(self, fake_s3):
        handle = acquire_existence_lock(
            "locks", "job-1", generate_body=lambda: '{"holder": "me"}', s3_client=fake_s3,
        )
        assert handle.body == b'{"holder": "me"}'
        assert fake_s3.body("locks", "job-1") == b'{"holder": "me"}'

    def test_single_write_no_retry(self, fake_s3):
        acquire_existence_lock("locks", "job-1", s3_client=fake_s3)
        with pytest.raises(LockNotAcquired):
            acquire_existence_lock("locks", "job-1", s3_client=fake_s3)
        assert fake_s3.put_calls == 2
        assert fake_s3.get_calls == 0

    def test_store_errors_propagate(self):
        client = MagicMock()
        client.put_object.side_effect = client_error("AccessDenied", 403)

        with pytest.raises(StoreError) as exc_info:
            acquire_existence_lock("locks", "job-1", s3_client=client)
        assert not isinstance(exc_info.value, LockNotAcquired)
        assert exc_info.value.code == "AccessDenied"
