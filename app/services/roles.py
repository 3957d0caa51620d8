"""Role resolution: account roles, role checks and role-to-menu grants.

Every check goes back to the database, so a role revoked by an administrator
stops working on the caller's next request rather than at their next login.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.models import AppRole, Menu, RoleMenu, UserRole

logger = logging.getLogger(__name__)

ALL_ROLES: tuple[AppRole, ...] = (AppRole.ADMIN, AppRole.USER, AppRole.VIEWER)


def parse_role(value: str) -> AppRole:
    """Map a wire value to AppRole; unknown names are a validation error."""
    try:
        return AppRole(value)
    except ValueError:
        allowed = ", ".join(r.value for r in ALL_ROLES)
        raise ValidationError(f"Unknown role '{value}'; expected one of: {allowed}") from None


def _dedupe_roles(roles: Iterable[AppRole | str]) -> list[AppRole]:
    seen: list[AppRole] = []
    for r in roles:
        role = r if isinstance(r, AppRole) else parse_role(r)
        if role not in seen:
            seen.append(role)
    return seen


def roles_of(db: Session, user_id: str) -> set[AppRole]:
    rows = db.query(UserRole.role).filter(UserRole.user_id == user_id).all()
    return {AppRole(r.role) for r in rows}


def has_role(db: Session, user_id: str, role: AppRole) -> bool:
    return (
        db.query(UserRole.id)
        .filter(UserRole.user_id == user_id, UserRole.role == role)
        .first()
        is not None
    )


def has_any_role(db: Session, user_id: str, roles: Iterable[AppRole]) -> bool:
    wanted = list(roles)
    if not wanted:
        return False
    return (
        db.query(UserRole.id)
        .filter(UserRole.user_id == user_id, UserRole.role.in_(wanted))
        .first()
        is not None
    )


def menus_for(db: Session, roles: Iterable[AppRole]) -> list[Menu]:
    """
    Union of the menus granted to ``roles``.

    Each menu appears once (first grant wins) and the result is ordered by
    ``sort_order``; ties keep the order the grants were found in. An empty
    role set yields an empty list.
    """
    wanted = list(roles)
    if not wanted:
        return []
    rows = (
        db.query(RoleMenu, Menu)
        .join(Menu, RoleMenu.menu_id == Menu.id)
        .filter(RoleMenu.role.in_(wanted))
        .order_by(Menu.sort_order, Menu.name, Menu.id)
        .all()
    )
    by_id: dict[str, Menu] = {}
    for _grant, menu in rows:
        if menu.id not in by_id:
            by_id[menu.id] = menu
    return sorted(by_id.values(), key=lambda m: m.sort_order)


def replace_user_roles(db: Session, user_id: str, roles: Iterable[AppRole | str]) -> list[AppRole]:
    """
    Replace all role assignments of an account (delete, then bulk insert).

    Does not commit: the caller owns the transaction so the account write and
    its roles land together.
    """
    new_roles = _dedupe_roles(roles)
    db.query(UserRole).filter(UserRole.user_id == user_id).delete(synchronize_session=False)
    if new_roles:
        db.add_all([UserRole(user_id=user_id, role=role) for role in new_roles])
    db.flush()
    return new_roles


def replace_role_menus(db: Session, role: AppRole | str, menu_ids: Iterable[str]) -> list[str]:
    """
    Replace the full grant set of one role and commit.

    Duplicate ids collapse; unknown ids raise NotFoundError before anything is
    deleted. Concurrent replacements of the same role are last-writer-wins.
    """
    target = role if isinstance(role, AppRole) else parse_role(role)
    ids: list[str] = []
    for menu_id in menu_ids:
        if menu_id not in ids:
            ids.append(menu_id)
    if ids:
        found = {m.id for m in db.query(Menu.id).filter(Menu.id.in_(ids)).all()}
        missing = [i for i in ids if i not in found]
        if missing:
            raise NotFoundError(f"Menu not found: {', '.join(missing)}")

    db.query(RoleMenu).filter(RoleMenu.role == target).delete(synchronize_session=False)
    if ids:
        db.add_all([RoleMenu(role=target, menu_id=menu_id) for menu_id in ids])
    db.commit()
    logger.info("Menu grants replaced: role=%s menus=%s", target.value, len(ids))
    return ids


def roles_overview(db: Session) -> list[tuple[AppRole, list[Menu]]]:
    """Every role with the menus granted to it alone."""
    return [(role, menus_for(db, [role])) for role in ALL_ROLES]
