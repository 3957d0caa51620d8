"""Request/response schemas for login and session endpoints."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.core.security import CREDENTIAL_MAX_LEN, USERNAME_MAX_LEN, USERNAME_MIN_LEN
from app.schemas.menu import MenuRead


class LoginRequest(BaseModel):
    """Credentials for login. The password arrives as a transport digest, never plaintext."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Username"
    )
    password_digest: str = Field(
        ...,
        min_length=1,
        max_length=CREDENTIAL_MAX_LEN,
        validation_alias=AliasChoices("passwordDigest", "password"),
        description="Hex SHA-256 of the password, or a 'plain:' fallback marker",
    )


class SessionUser(BaseModel):
    """The authenticated account as the UI sees it: identity, roles and visible menus."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    display_name: str | None = Field(default=None, alias="displayName")
    roles: list[str] = Field(default_factory=list)
    menus: list[MenuRead] = Field(default_factory=list)


class LoginResponse(BaseModel):
    """Issued session plus the user payload."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user: SessionUser
    session_token: str = Field(..., alias="sessionToken")
    expires_at: str = Field(..., alias="expiresAt")


class CurrentUser(BaseModel):
    """Authenticated account (id, username) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    display_name: str | None = None
