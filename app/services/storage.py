"""Object storage collaborator: put/delete/public_url keyed by bucket and key."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the object store cannot complete an operation."""


class ObjectStorage:
    def put(self, bucket: str, key: str, data: bytes, *, content_type: str | None = None) -> str:
        """Store ``data`` and return its path within the bucket. Never overwrites."""
        raise NotImplementedError

    def delete(self, bucket: str, key: str) -> None:
        """Remove an object; a missing object is not an error."""
        raise NotImplementedError

    def public_url(self, bucket: str, key: str) -> str:
        raise NotImplementedError


def _safe_part(value: str) -> str:
    part = value.strip().replace("\\", "/").lstrip("/")
    if not part or part in (".", "..") or "/" in part:
        raise StorageError(f"Invalid storage key component: {value!r}")
    return part


@dataclass(frozen=True)
class LocalObjectStorage(ObjectStorage):
    root: Path
    public_base_url: str

    def _path(self, bucket: str, key: str) -> Path:
        return self.root / _safe_part(bucket) / _safe_part(key)

    def put(self, bucket: str, key: str, data: bytes, *, content_type: str | None = None) -> str:
        p = self._path(bucket, key)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with p.open("xb") as fh:
                fh.write(data)
        except FileExistsError as e:
            raise StorageError(f"Object already exists: {bucket}/{key}") from e
        except OSError as e:
            raise StorageError(f"Could not write {bucket}/{key}: {e}") from e
        return key

    def delete(self, bucket: str, key: str) -> None:
        try:
            self._path(bucket, key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not delete {bucket}/{key}: {e}") from e

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/{_safe_part(bucket)}/{_safe_part(key)}"


def storage_from_settings(settings: Settings) -> ObjectStorage:
    return LocalObjectStorage(
        root=Path(settings.STORAGE_ROOT),
        public_base_url=settings.STORAGE_PUBLIC_BASE_URL,
    )
