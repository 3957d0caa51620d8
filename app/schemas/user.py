"""Request/response schemas for account management."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.core.security import CREDENTIAL_MAX_LEN, USERNAME_MAX_LEN, USERNAME_MIN_LEN
from app.models import AppRole


class UserCreate(BaseModel):
    """New account. ``password`` is a transport digest like the one sent to /login."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=CREDENTIAL_MAX_LEN)
    display_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    is_active: bool = True
    roles: list[AppRole] = Field(default_factory=list)


class UserUpdate(BaseModel):
    """Partial update. When ``roles`` is present it replaces every assignment."""

    username: str | None = Field(default=None, min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str | None = Field(default=None, min_length=1, max_length=CREDENTIAL_MAX_LEN)
    display_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    is_active: bool | None = None
    roles: list[AppRole] | None = None


class UserRead(BaseModel):
    """Account as listed to administrators (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    display_name: str | None = None
    email: str | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    roles: list[str] = Field(default_factory=list)
