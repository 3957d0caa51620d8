"""Unauthenticated read-only endpoints. Filtering happens in the query, never after it."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models import Workflow
from app.schemas.common import DataResponse
from app.schemas.workflow import PublicWorkflowRead

router = APIRouter()


@router.get("/workflows", response_model=DataResponse[list[PublicWorkflowRead]])
def list_public_workflows(
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[list[PublicWorkflowRead]]:
    """Workflows flagged public, newest first, limited to their public fields."""
    rows = (
        db.query(
            Workflow.id,
            Workflow.title,
            Workflow.description,
            Workflow.video_path,
            Workflow.markdown_content,
            Workflow.created_at,
        )
        .filter(Workflow.is_public.is_(True))
        .order_by(Workflow.created_at.desc())
        .all()
    )
    return DataResponse(data=[PublicWorkflowRead.model_validate(r) for r in rows])
