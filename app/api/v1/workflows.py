"""Workflow guides (any authenticated account)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require
from app.api.v1.upload import get_storage
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import InternalError, NotFoundError, ValidationError
from app.models import Workflow
from app.schemas.auth import CurrentUser
from app.schemas.common import DataResponse, SuccessResponse
from app.schemas.workflow import WorkflowCreate, WorkflowRead, WorkflowUpdate
from app.services.storage import ObjectStorage, StorageError
from app.services.uploads import WORKFLOWS_POLICY, call_with_timeout, size_limit_message

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_workflow(db: Session, workflow_id: str) -> Workflow:
    workflow = db.query(Workflow).filter(Workflow.id == workflow_id).first()
    if workflow is None:
        raise NotFoundError("Workflow not found")
    return workflow


def _check_video_size(size: int | None) -> None:
    if size is not None and size > WORKFLOWS_POLICY.max_bytes:
        raise ValidationError(size_limit_message(WORKFLOWS_POLICY))


@router.get("", response_model=DataResponse[list[WorkflowRead]])
def list_workflows(
    _user: Annotated[CurrentUser, Depends(require("workflows.list"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[list[WorkflowRead]]:
    workflows = db.query(Workflow).order_by(Workflow.created_at.desc()).all()
    return DataResponse(data=[WorkflowRead.model_validate(w) for w in workflows])


@router.post("", response_model=DataResponse[WorkflowRead], status_code=201)
def create_workflow(
    body: WorkflowCreate,
    current_user: Annotated[CurrentUser, Depends(require("workflows.create"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[WorkflowRead]:
    _check_video_size(body.video_size)
    workflow = Workflow(**body.model_dump(), uploaded_by=current_user.id)
    db.add(workflow)
    db.commit()
    db.refresh(workflow)
    logger.info("Workflow created: workflow_id=%s by user_id=%s", workflow.id, current_user.id)
    return DataResponse(data=WorkflowRead.model_validate(workflow))


@router.put("/{workflow_id}", response_model=DataResponse[WorkflowRead])
def update_workflow(
    workflow_id: str,
    body: WorkflowUpdate,
    _user: Annotated[CurrentUser, Depends(require("workflows.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[WorkflowRead]:
    """Partial update. Video path and size only change when ``video_path`` is sent."""
    workflow = _get_workflow(db, workflow_id)
    changes = body.model_dump(exclude_unset=True)
    if "video_path" in changes:
        _check_video_size(changes.get("video_size"))
        workflow.video_path = changes["video_path"]
        workflow.video_size = changes.get("video_size")
    for field in ("title", "description", "markdown_content", "is_public"):
        if field not in changes:
            continue
        if field in ("title", "is_public") and changes[field] is None:
            continue
        setattr(workflow, field, changes[field])
    db.commit()
    db.refresh(workflow)
    return DataResponse(data=WorkflowRead.model_validate(workflow))


@router.delete("/{workflow_id}", response_model=SuccessResponse)
def delete_workflow(
    workflow_id: str,
    current_user: Annotated[CurrentUser, Depends(require("workflows.delete"))],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
) -> SuccessResponse:
    """Remove the stored video (if any), then the record."""
    workflow = _get_workflow(db, workflow_id)
    if workflow.video_path:
        try:
            call_with_timeout(
                storage.delete, settings.STORAGE_TIMEOUT_SEC, WORKFLOWS_POLICY.bucket, workflow.video_path
            )
        except StorageError as e:
            logger.error("Could not delete workflow video %s: %s", workflow.video_path, e)
            raise InternalError() from e
    db.delete(workflow)
    db.commit()
    logger.info("Workflow deleted: workflow_id=%s by user_id=%s", workflow_id, current_user.id)
    return SuccessResponse()
