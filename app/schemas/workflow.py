"""Request/response schemas for workflow guides."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.package import Uploader


class WorkflowCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    video_path: str | None = Field(default=None, max_length=1024)
    video_size: int | None = Field(default=None, ge=0)
    markdown_content: str | None = None
    is_public: bool = False


class WorkflowUpdate(BaseModel):
    """Partial update; video fields change together when ``video_path`` is sent."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    video_path: str | None = Field(default=None, max_length=1024)
    video_size: int | None = Field(default=None, ge=0)
    markdown_content: str | None = None
    is_public: bool | None = None


class WorkflowRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None = None
    video_path: str | None = None
    video_size: int | None = None
    markdown_content: str | None = None
    is_public: bool
    uploaded_by: str | None = None
    uploader: Uploader | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PublicWorkflowRead(BaseModel):
    """The only workflow fields served without a session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None = None
    video_path: str | None = None
    markdown_content: str | None = None
    created_at: datetime | None = None
