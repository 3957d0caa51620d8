"""Request/response schemas for installer packages."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Uploader(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    display_name: str | None = None


class PackageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    version: str | None = Field(default=None, max_length=64)
    file_path: str = Field(..., min_length=1, max_length=1024)
    file_size: int = Field(..., ge=0)


class PackageUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    version: str | None = Field(default=None, max_length=64)


class PackageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    version: str | None = None
    file_path: str
    file_size: int
    uploaded_by: str | None = None
    uploader: Uploader | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
