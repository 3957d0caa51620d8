"""Installer package records (admin or user role)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require
from app.api.v1.upload import get_storage
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import InternalError, NotFoundError, ValidationError
from app.models import Package
from app.schemas.auth import CurrentUser
from app.schemas.common import DataResponse, SuccessResponse
from app.schemas.package import PackageCreate, PackageRead, PackageUpdate
from app.services.storage import ObjectStorage, StorageError
from app.services.uploads import PACKAGES_POLICY, call_with_timeout, size_limit_message

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_package(db: Session, package_id: str) -> Package:
    package = db.query(Package).filter(Package.id == package_id).first()
    if package is None:
        raise NotFoundError("Package not found")
    return package


@router.get("", response_model=DataResponse[list[PackageRead]])
def list_packages(
    _user: Annotated[CurrentUser, Depends(require("packages.list"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[list[PackageRead]]:
    """All packages, newest first, with the uploader's name."""
    packages = db.query(Package).order_by(Package.created_at.desc()).all()
    return DataResponse(data=[PackageRead.model_validate(p) for p in packages])


@router.post("", response_model=DataResponse[PackageRead], status_code=201)
def create_package(
    body: PackageCreate,
    current_user: Annotated[CurrentUser, Depends(require("packages.create"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[PackageRead]:
    """Record an uploaded package. ``file_path`` comes from a prior POST /upload."""
    if body.file_size > PACKAGES_POLICY.max_bytes:
        raise ValidationError(size_limit_message(PACKAGES_POLICY))
    package = Package(**body.model_dump(), uploaded_by=current_user.id)
    db.add(package)
    db.commit()
    db.refresh(package)
    logger.info("Package created: package_id=%s by user_id=%s", package.id, current_user.id)
    return DataResponse(data=PackageRead.model_validate(package))


@router.put("/{package_id}", response_model=DataResponse[PackageRead])
def update_package(
    package_id: str,
    body: PackageUpdate,
    _user: Annotated[CurrentUser, Depends(require("packages.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[PackageRead]:
    package = _get_package(db, package_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if field == "name" and value is None:
            continue
        setattr(package, field, value)
    db.commit()
    db.refresh(package)
    return DataResponse(data=PackageRead.model_validate(package))


@router.delete("/{package_id}", response_model=SuccessResponse)
def delete_package(
    package_id: str,
    current_user: Annotated[CurrentUser, Depends(require("packages.delete"))],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
) -> SuccessResponse:
    """Remove the stored installer, then the record."""
    package = _get_package(db, package_id)
    if package.file_path:
        try:
            call_with_timeout(
                storage.delete, settings.STORAGE_TIMEOUT_SEC, PACKAGES_POLICY.bucket, package.file_path
            )
        except StorageError as e:
            logger.error("Could not delete package object %s: %s", package.file_path, e)
            raise InternalError() from e
    db.delete(package)
    db.commit()
    logger.info("Package deleted: package_id=%s by user_id=%s", package_id, current_user.id)
    return SuccessResponse()
