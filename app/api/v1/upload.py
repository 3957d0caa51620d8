"""Upload endpoint: authenticate, then hand the payload to the upload gatekeeper."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.errors import ValidationError
from app.schemas.auth import CurrentUser
from app.schemas.upload import UploadResponse
from app.services.storage import ObjectStorage, storage_from_settings
from app.services.uploads import get_policy, ingest, read_capped

logger = logging.getLogger(__name__)
router = APIRouter()


def get_storage() -> ObjectStorage:
    """Dependency: the configured object store (overridden in tests)."""
    return storage_from_settings(get_settings())


@router.post("", response_model=UploadResponse)
def upload_file(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
    file: Annotated[UploadFile | None, File()] = None,
    bucket: Annotated[str | None, Form()] = None,
    declared_extension: Annotated[str | None, Form(alias="declaredExtension")] = None,
) -> UploadResponse:
    """
    Store an installer (``packages``, admin or user) or a video (``workflows``,
    any account).

    Send ``multipart/form-data`` with ``file``, ``bucket`` and
    ``declaredExtension``. The file is checked for size, extension and
    binary signature before anything is written; the stored name is random.
    """
    if file is None or not bucket or not declared_extension:
        raise ValidationError("Multipart request must include 'file', 'bucket' and 'declaredExtension'.")
    policy = get_policy(bucket.strip())
    payload = read_capped(file.file, policy)
    result = ingest(
        db,
        current_user.id,
        policy.bucket,
        declared_extension,
        payload,
        storage,
        timeout=settings.STORAGE_TIMEOUT_SEC,
    )
    return UploadResponse(
        path=result.path,
        public_url=result.public_url,
        size=result.size,
        uploaded_by=result.uploaded_by,
    )
