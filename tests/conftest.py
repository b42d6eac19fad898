"""Shared fixtures: an in-memory S3 client honouring conditional writes."""

import io
import threading
import uuid

import pytest
from botocore.exceptions import ClientError


def client_error(code: str, status: int, operation: str = "PutObject") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} (simulated)"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeS3Client:
    """Thread-safe stand-in for boto3's S3 client (get_object/put_object only).

    Every successful write gets a fresh ETag, like a store whose version tag
    changes uniquely per write.
    """

    def __init__(self):
        self._objects = {}
        self._mutex = threading.Lock()
        self.get_calls = 0
        self.put_calls = 0

    def get_object(self, Bucket, Key):
        with self._mutex:
            self.get_calls += 1
            current = self._objects.get((Bucket, Key))
            if current is None:
                raise client_error("NoSuchKey", 404, "GetObject")
            body, etag = current
            return {"Body": io.BytesIO(body), "ETag": etag}

    def put_object(self, Bucket, Key, Body, IfMatch=None, IfNoneMatch=None):
        if isinstance(Body, str):
            Body = Body.encode("utf-8")
        with self._mutex:
            self.put_calls += 1
            current = self._objects.get((Bucket, Key))
            if IfNoneMatch == "*" and current is not None:
                raise client_error("PreconditionFailed", 412)
            if IfMatch is not None:
                if current is None:
                    raise client_error("NoSuchKey", 404)
                if current[1] != IfMatch:
                    raise client_error("PreconditionFailed", 412)
            etag = f'"{uuid.uuid4().hex}"'
            self._objects[(Bucket, Key)] = (Body, etag)
            return {"ETag": etag}

    def body(self, bucket, key):
        return self._objects[(bucket, key)][0]

    def etag(self, bucket, key):
        return self._objects[(bucket, key)][1]


@pytest.fixture
def aws_env(monkeypatch):
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.delenv("S3LOCK_MAX_ATTEMPTS", raising=False)
    monkeypatch.delenv("S3LOCK_RETRY_DELAY", raising=False)
    monkeypatch.delenv("S3LOCK_ENDPOINT_URL", raising=False)


@pytest.fixture
def fake_s3(aws_env):
    return FakeS3Client()
