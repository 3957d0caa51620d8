"""Response envelopes shared by every endpoint: {data}, {success} and {error}."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Successful read or write that returns a payload."""

    data: T


class SuccessResponse(BaseModel):
    """Successful operation with nothing to return."""

    success: bool = Field(default=True)


class ErrorResponse(BaseModel):
    """Failure envelope produced by the exception handlers."""

    success: bool = Field(default=False)
    error: str
