"""Request/response schemas for menu entries."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MenuRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    path: str | None = None
    icon: str | None = None
    parent_id: str | None = None
    sort_order: int = 0
    is_visible: bool = True


class MenuDetail(MenuRead):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MenuCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    path: str | None = Field(default=None, max_length=1024)
    icon: str | None = Field(default=None, max_length=255)
    parent_id: str | None = None
    sort_order: int = 0
    is_visible: bool = True


class MenuUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    path: str | None = Field(default=None, max_length=1024)
    icon: str | None = Field(default=None, max_length=255)
    parent_id: str | None = None
    sort_order: int | None = None
    is_visible: bool | None = None
