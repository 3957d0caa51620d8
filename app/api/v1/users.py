"""Account management (admin only): list, create, update, delete with role replace-all."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.v1.auth import require
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.security import InvalidCredentialFormat, hash_credential, normalize_submitted_digest
from app.models import User
from app.schemas.auth import CurrentUser
from app.schemas.common import DataResponse, SuccessResponse
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.services.roles import ALL_ROLES, replace_user_roles, roles_of

logger = logging.getLogger(__name__)
router = APIRouter()

USERNAME_TAKEN = "Username already exists"


def _hash_submitted(credential: str) -> str:
    try:
        return hash_credential(normalize_submitted_digest(credential))
    except InvalidCredentialFormat as e:
        raise ValidationError(str(e)) from e


def _to_read(db: Session, user: User) -> UserRead:
    held = roles_of(db, user.id)
    out = UserRead.model_validate(user)
    out.roles = [r.value for r in ALL_ROLES if r in held]
    return out


def _get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def _commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(USERNAME_TAKEN) from e


@router.get("", response_model=DataResponse[list[UserRead]])
def list_users(
    _admin: Annotated[CurrentUser, Depends(require("users.list"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[list[UserRead]]:
    """List all accounts, newest first, with their roles."""
    users = db.query(User).order_by(User.created_at.desc(), User.username).all()
    return DataResponse(data=[_to_read(db, u) for u in users])


@router.post("", response_model=DataResponse[UserRead], status_code=201)
def create_user(
    body: UserCreate,
    admin: Annotated[CurrentUser, Depends(require("users.create"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[UserRead]:
    """Create an account and its role assignments in one transaction."""
    username = body.username.strip()
    if not username:
        raise ValidationError("Username and password are required")
    if db.query(User.id).filter(User.username == username).first() is not None:
        raise ConflictError(USERNAME_TAKEN)

    user = User(
        username=username,
        password_hash=_hash_submitted(body.password),
        display_name=body.display_name,
        email=body.email,
        is_active=body.is_active,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(USERNAME_TAKEN) from e
    replace_user_roles(db, user.id, body.roles)
    _commit_or_conflict(db)
    db.refresh(user)
    logger.info("User created: user_id=%s by admin_id=%s", user.id, admin.id)
    return DataResponse(data=_to_read(db, user))


@router.put("/{user_id}", response_model=DataResponse[UserRead])
def update_user(
    user_id: str,
    body: UserUpdate,
    admin: Annotated[CurrentUser, Depends(require("users.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[UserRead]:
    """
    Update supplied fields. A new password is re-hashed; ``roles`` replaces all
    assignments. Deactivation takes effect on the account's next request.
    """
    user = _get_user(db, user_id)
    changes = {
        k: v
        for k, v in body.model_dump(exclude_unset=True, exclude={"password", "roles"}).items()
        if v is not None or k in ("display_name", "email")
    }
    if "username" in changes:
        changes["username"] = changes["username"].strip()
        if not changes["username"]:
            raise ValidationError("Username must not be empty")
        taken = (
            db.query(User.id)
            .filter(User.username == changes["username"], User.id != user.id)
            .first()
        )
        if taken is not None:
            raise ConflictError(USERNAME_TAKEN)
    for field, value in changes.items():
        setattr(user, field, value)
    if body.password:
        user.password_hash = _hash_submitted(body.password)
    if body.roles is not None:
        replace_user_roles(db, user.id, body.roles)
    _commit_or_conflict(db)
    db.refresh(user)
    logger.info(
        "User updated: user_id=%s fields=%s roles_replaced=%s by admin_id=%s",
        user.id,
        sorted(changes),
        body.roles is not None,
        admin.id,
    )
    return DataResponse(data=_to_read(db, user))


@router.delete("/{user_id}", response_model=SuccessResponse)
def delete_user(
    user_id: str,
    admin: Annotated[CurrentUser, Depends(require("users.delete"))],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Hard-delete an account with its sessions and roles. The seed administrator is refused."""
    if user_id == settings.SEED_ADMIN_ID:
        logger.warning("Refused deletion of seed administrator by admin_id=%s", admin.id)
        raise ValidationError("The default administrator cannot be deleted")
    user = _get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("User deleted: user_id=%s by admin_id=%s", user_id, admin.id)
    return SuccessResponse()
