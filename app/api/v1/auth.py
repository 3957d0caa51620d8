"""Session login/logout and the gateway dependencies (get_current_user, require)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import AuthenticationError, ValidationError
from app.core.security import (
    InvalidCredentialFormat,
    normalize_submitted_digest,
    verify_credential,
)
from app.models import User
from app.models.base import as_utc
from app.schemas.auth import CurrentUser, LoginRequest, LoginResponse, SessionUser
from app.schemas.common import SuccessResponse
from app.schemas.menu import MenuRead
from app.services.authorization import authorize
from app.services.roles import ALL_ROLES, menus_for, roles_of
from app.services.sessions import issue_session, revoke_session, validate_session

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

BAD_CREDENTIALS = "Invalid username or password."


def build_session_user(db: Session, user: User) -> SessionUser:
    """Identity plus current roles and the union of their menus."""
    held = roles_of(db, user.id)
    ordered = [r for r in ALL_ROLES if r in held]
    return SessionUser(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        roles=[r.value for r in ordered],
        menus=[MenuRead.model_validate(m) for m in menus_for(db, ordered)],
    )


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """
    Authenticate with username and password digest; returns a session token.
    Include the token in the Authorization header as: Bearer <sessionToken>
    """
    try:
        digest = normalize_submitted_digest(body.password_digest)
    except InvalidCredentialFormat as e:
        raise ValidationError(str(e)) from e

    username = body.username.strip()
    user = db.query(User).filter(User.username == username).first()
    if user is None or not verify_credential(digest, user.password_hash):
        logger.info("Login failed: username=%s", username)
        raise AuthenticationError(BAD_CREDENTIALS)
    if not user.is_active:
        logger.info("Login refused for disabled account: user_id=%s", user.id)
        raise AuthenticationError("Account is disabled")

    session = issue_session(db, user.id, ttl_hours=settings.SESSION_TTL_HOURS)
    logger.info("Login succeeded: user_id=%s", user.id)
    return LoginResponse(
        user=build_session_user(db, user),
        session_token=session.token,
        expires_at=as_utc(session.expires_at).isoformat(),
    )


def get_session_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Dependency: the bearer token from the Authorization header. Raises 401 if missing."""
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError("Unauthorized")
    return credentials.credentials.strip()


def get_current_user(
    token: Annotated[str, Depends(get_session_token)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require a live session for an active account. Raises 401 with the reason."""
    user = validate_session(db, token)
    return CurrentUser.model_validate(user)


def require(operation: str) -> Callable[..., CurrentUser]:
    """Dependency factory: authenticate, then check the operation's roles. Raises 403 on a role miss."""

    def _dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
        db: Annotated[Session, Depends(get_db)],
    ) -> CurrentUser:
        authorize(db, current_user.id, operation)
        return current_user

    _dependency.__name__ = f"require_{operation.replace('.', '_')}"
    return _dependency


@router.post("/logout", response_model=SuccessResponse)
def logout(
    token: Annotated[str, Depends(get_session_token)],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Revoke the presented session. Succeeds even if it is already gone."""
    revoke_session(db, token)
    return SuccessResponse()


@router.get("/me", response_model=SessionUser)
def read_current_session(
    current_user: Annotated[CurrentUser, Depends(require("session.me"))],
    db: Annotated[Session, Depends(get_db)],
) -> SessionUser:
    """Return the current account with roles and menus recomputed now."""
    user = db.query(User).filter(User.id == current_user.id).one()
    return build_session_user(db, user)
