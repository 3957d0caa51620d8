"""Upload gatekeeper: role, size, extension and content-signature checks before storage.

Checks run in a fixed order and stop at the first failure; storage is only
touched once every check has passed. The client's file name is never used
for the stored key.
"""

import logging
import uuid
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import BinaryIO, TypeVar

from sqlalchemy.orm import Session

from app.core.errors import InternalError, ValidationError
from app.services.authorization import authorize
from app.services.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIB = 1024 * 1024
GIB = 1024 * MIB


@dataclass(frozen=True)
class BucketPolicy:
    """What a bucket accepts and who may write to it."""

    bucket: str
    operation: str
    max_bytes: int
    extension: str
    format_label: str
    signature: bytes
    signature_offset: int
    content_type: str
    public: bool


PACKAGES_POLICY = BucketPolicy(
    bucket="packages",
    operation="upload.packages",
    max_bytes=GIB,
    extension="exe",
    format_label="EXE",
    # DOS/PE executable header "MZ"
    signature=b"\x4d\x5a",
    signature_offset=0,
    content_type="application/octet-stream",
    public=False,
)

WORKFLOWS_POLICY = BucketPolicy(
    bucket="workflows",
    operation="upload.workflows",
    max_bytes=200 * MIB,
    extension="mp4",
    format_label="MP4",
    # ISO base media "ftyp" box type after the 4-byte box size
    signature=b"\x66\x74\x79\x70",
    signature_offset=4,
    content_type="video/mp4",
    public=True,
)

BUCKET_POLICIES: dict[str, BucketPolicy] = {
    p.bucket: p for p in (PACKAGES_POLICY, WORKFLOWS_POLICY)
}


@dataclass(frozen=True)
class UploadResult:
    path: str
    size: int
    public_url: str | None
    uploaded_by: str


def get_policy(bucket: str) -> BucketPolicy:
    policy = BUCKET_POLICIES.get(bucket)
    if policy is None:
        allowed = ", ".join(sorted(BUCKET_POLICIES))
        raise ValidationError(f"Unknown bucket '{bucket}'; expected one of: {allowed}")
    return policy


def size_limit_message(policy: BucketPolicy) -> str:
    return f"File size must not exceed {policy.max_bytes // MIB} MB ({policy.max_bytes} bytes)."


def check_size(policy: BucketPolicy, size: int) -> None:
    if size <= 0:
        raise ValidationError("Uploaded file is empty.")
    if size > policy.max_bytes:
        raise ValidationError(size_limit_message(policy))


def normalize_extension(declared: str) -> str:
    return declared.strip().lstrip(".").lower()


def check_extension(policy: BucketPolicy, declared_extension: str) -> None:
    if normalize_extension(declared_extension) != policy.extension:
        raise ValidationError(
            f"The {policy.bucket} bucket only accepts .{policy.extension} files."
        )


def has_signature(policy: BucketPolicy, payload: bytes) -> bool:
    start = policy.signature_offset
    end = start + len(policy.signature)
    return len(payload) >= end and payload[start:end] == policy.signature


def check_signature(policy: BucketPolicy, payload: bytes) -> None:
    if not has_signature(policy, payload):
        raise ValidationError(f"File content is not a valid {policy.format_label} file.")


def read_capped(stream: BinaryIO, policy: BucketPolicy) -> bytes:
    """
    Read at most one byte past the bucket ceiling. A result longer than
    ``max_bytes`` fails ``check_size``; the rest of the body is never buffered.
    """
    return stream.read(policy.max_bytes + 1)


def call_with_timeout(fn: Callable[..., T], timeout: float, *args: object, **kwargs: object) -> T:
    """Run a collaborator call with a hard deadline; a timeout is an internal error, never retried."""
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fn, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except FuturesTimeoutError as e:
        logger.error("Storage call %s timed out after %ss", getattr(fn, "__name__", fn), timeout)
        raise InternalError() from e
    finally:
        executor.shutdown(wait=False)


def ingest(
    db: Session,
    user_id: str,
    bucket: str,
    declared_extension: str,
    payload: bytes,
    storage: ObjectStorage,
    timeout: float,
) -> UploadResult:
    """
    Validate and store an upload for an already-authenticated account.

    Order: bucket role, size ceiling, declared extension, content signature,
    then storage under a fresh random key. Nothing is rolled back on a
    storage failure because nothing was written before it.
    """
    policy = get_policy(bucket)
    authorize(db, user_id, policy.operation)
    size = len(payload)
    check_size(policy, size)
    check_extension(policy, declared_extension)
    check_signature(policy, payload)

    key = f"{uuid.uuid4()}.{policy.extension}"
    try:
        path = call_with_timeout(
            storage.put, timeout, policy.bucket, key, payload, content_type=policy.content_type
        )
        public_url = (
            call_with_timeout(storage.public_url, timeout, policy.bucket, path)
            if policy.public
            else None
        )
    except StorageError as e:
        logger.error("Storage rejected upload: bucket=%s key=%s error=%s", policy.bucket, key, e)
        raise InternalError() from e

    logger.info(
        "Upload stored: bucket=%s key=%s size=%s user_id=%s", policy.bucket, path, size, user_id
    )
    return UploadResult(path=path, size=size, public_url=public_url, uploaded_by=user_id)
