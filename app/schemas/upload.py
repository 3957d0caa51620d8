"""Response schema for the upload endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Stored object location; ``publicUrl`` only for publicly served buckets."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    path: str = Field(..., description="Object key within the bucket.")
    public_url: str | None = Field(default=None, alias="publicUrl")
    size: int = Field(..., ge=0, description="Stored size in bytes.")
    uploaded_by: str = Field(..., alias="uploadedBy")
