"""Session store: issue, validate, revoke and purge persisted bearer sessions.

All state lives in the ``sessions`` table; nothing is cached in process, so
any number of API workers can validate the same token.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError, InternalError
from app.core.security import generate_session_token
from app.models import User, UserSession
from app.models.base import as_utc

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Reasons reported to the client with a 401.
REASON_NO_SESSION = "Invalid session"
REASON_EXPIRED = "Session expired"
REASON_DISABLED = "Account is disabled"
REASON_UNVERIFIABLE = "Session could not be verified"

# A concurrent login for the same account surfaces as a unique violation on
# sessions.user_id; the loser retries its delete-then-insert.
ISSUE_ATTEMPTS = 3


def issue_session(
    db: Session,
    user_id: str,
    ttl_hours: int,
    now: datetime | None = None,
) -> UserSession:
    """
    Create the only live session for ``user_id``.

    Prior sessions for the account are deleted and the new one inserted in a
    single transaction.
    """
    for attempt in range(1, ISSUE_ATTEMPTS + 1):
        issued_at = now or datetime.now(timezone.utc)
        try:
            (
                db.query(UserSession)
                .filter(UserSession.user_id == user_id)
                .delete(synchronize_session=False)
            )
            row = UserSession(
                token=generate_session_token(),
                user_id=user_id,
                created_at=issued_at,
                expires_at=issued_at + timedelta(hours=ttl_hours),
            )
            db.add(row)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(
                "Concurrent session issue for user_id=%s (attempt %s); retrying",
                user_id,
                attempt,
            )
            continue
        logger.info("Session issued: user_id=%s expires_at=%s", user_id, row.expires_at.isoformat())
        return row
    logger.error("Could not issue session for user_id=%s after %s attempts", user_id, ISSUE_ATTEMPTS)
    raise InternalError()


def validate_session(db: Session, token: str, now: datetime | None = None) -> User:
    """
    Resolve a bearer token to its active account.

    Raises AuthenticationError with the specific reason when the token is
    unknown, expired (the row is deleted) or its account is disabled. The
    active flag is read on every call. Store failures fail closed.
    """
    current = now or datetime.now(timezone.utc)
    try:
        row = db.query(UserSession).filter(UserSession.token == token).first()
        if row is None:
            raise AuthenticationError(REASON_NO_SESSION)
        if as_utc(row.expires_at) < current:
            owner_id = row.user_id
            db.delete(row)
            db.commit()
            logger.info("Expired session removed: user_id=%s", owner_id)
            raise AuthenticationError(REASON_EXPIRED)
        user = db.query(User).filter(User.id == row.user_id).first()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Session lookup failed: %s", e)
        raise AuthenticationError(REASON_UNVERIFIABLE) from e
    if user is None or not user.is_active:
        raise AuthenticationError(REASON_DISABLED)
    return user


def revoke_session(db: Session, token: str) -> bool:
    """Delete the session for ``token``. Returns whether a row was removed; absence is fine."""
    deleted = (
        db.query(UserSession)
        .filter(UserSession.token == token)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.info("Session revoked")
    return bool(deleted)


def purge_expired_sessions(
    db: Session,
    settings: "Settings",
    now: datetime | None = None,
) -> int:
    """
    Delete every session past its expiry. Housekeeping only: validation
    already removes expired rows lazily. Idempotent: safe to run repeatedly.
    """
    if not settings.SESSION_CLEANUP_ENABLED:
        logger.info("Session cleanup is disabled (SESSION_CLEANUP_ENABLED=false); skipping.")
        return 0

    cutoff = now or datetime.now(timezone.utc)
    deleted_count = (
        db.query(UserSession)
        .filter(UserSession.expires_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()

    if deleted_count > 0:
        logger.info(
            "Session cleanup: cutoff=%s, sessions_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count


def session_store_available(db: Session) -> bool:
    """Whether the sessions table answers a read; the health route reports it."""
    try:
        db.query(UserSession.id).limit(1).all()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Session store unreachable: %s", e)
        return False
    return True
