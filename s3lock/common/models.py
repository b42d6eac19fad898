"""Data models for s3lock."""

import json
from dataclasses import dataclass, asdict
from typing import Optional

# Precondition kinds
VERSION_EQUALS = "version_equals"
MUST_NOT_EXIST = "must_not_exist"


@dataclass(frozen=True)
class Precondition:
    """Condition evaluated atomically by the store at write time."""

    kind: str
    etag: Optional[str] = None

    @classmethod
    def version_equals(cls, etag: str) -> "Precondition":
        if not etag:
            raise ValueError("version_equals requires a non-empty etag")
        return cls(kind=VERSION_EQUALS, etag=etag)

    @classmethod
    def must_not_exist(cls) -> "Precondition":
        return cls(kind=MUST_NOT_EXIST)

    def to_request_params(self) -> dict:
        """Map to the S3 PutObject conditional header parameters."""
        if self.kind == VERSION_EQUALS:
            return {"IfMatch": self.etag}
        if self.kind == MUST_NOT_EXIST:
            return {"IfNoneMatch": "*"}
        raise ValueError(f"Unknown precondition kind: {self.kind}")


@dataclass(frozen=True)
class StoredObject:
    """Body and version tag of an object as read from the store."""

    body: bytes
    etag: str

    def text(self) -> str:
        return self.body.decode("utf-8")


@dataclass
class LockBody:
    """Default JSON encoding of a lock object's body."""

    locked: bool
    owner: Optional[str] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "LockBody":
        return cls(locked=bool(data.get("locked", False)), owner=data.get("owner"))

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_bytes(cls, body: bytes) -> "LockBody":
        """Parse a JSON body. Raises ValueError if it is not a JSON object."""
        data = json.loads(body.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Lock body must be a JSON object")
        return cls.from_dict(data)
