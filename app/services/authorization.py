"""Static operation -> role table and the check the gateway runs against it."""

import logging

from sqlalchemy.orm import Session

from app.core.errors import AuthorizationError
from app.models import AppRole
from app.services.roles import has_any_role, has_role

logger = logging.getLogger(__name__)

ADMIN_ONLY = frozenset({AppRole.ADMIN})
ADMIN_OR_USER = frozenset({AppRole.ADMIN, AppRole.USER})
# Empty set: any active, authenticated account.
AUTHENTICATED = frozenset()

OPERATION_ROLES: dict[str, frozenset[AppRole]] = {
    "session.me": AUTHENTICATED,
    "users.list": ADMIN_ONLY,
    "users.create": ADMIN_ONLY,
    "users.update": ADMIN_ONLY,
    "users.delete": ADMIN_ONLY,
    "roles.list": ADMIN_ONLY,
    "roles.update_menus": ADMIN_ONLY,
    "menus.list": ADMIN_ONLY,
    "menus.create": ADMIN_ONLY,
    "menus.update": ADMIN_ONLY,
    "menus.delete": ADMIN_ONLY,
    "packages.list": ADMIN_OR_USER,
    "packages.create": ADMIN_OR_USER,
    "packages.update": ADMIN_OR_USER,
    "packages.delete": ADMIN_OR_USER,
    "workflows.list": AUTHENTICATED,
    "workflows.create": AUTHENTICATED,
    "workflows.update": AUTHENTICATED,
    "workflows.delete": AUTHENTICATED,
    "upload.packages": ADMIN_OR_USER,
    "upload.workflows": AUTHENTICATED,
}

INSUFFICIENT_PERMISSION = "Insufficient permission"


def required_roles(operation: str) -> frozenset[AppRole]:
    """Roles for ``operation``. Unknown operations raise KeyError: nothing is allowed by omission."""
    return OPERATION_ROLES[operation]


def authorize(db: Session, user_id: str, operation: str) -> None:
    """Raise AuthorizationError unless ``user_id`` holds a role the operation needs."""
    needed = required_roles(operation)
    if not needed:
        return
    if len(needed) == 1:
        (only,) = needed
        allowed = has_role(db, user_id, only)
    else:
        allowed = has_any_role(db, user_id, needed)
    if not allowed:
        logger.info("Authorization denied: user_id=%s operation=%s", user_id, operation)
        raise AuthorizationError(INSUFFICIENT_PERMISSION)
