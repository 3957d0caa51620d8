"""ORM models for role assignments and role-to-menu grants."""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.models.base import Base, new_uuid, utcnow


class AppRole(str, enum.Enum):
    """Closed set of permission tiers."""

    ADMIN = "admin"
    USER = "user"
    VIEWER = "viewer"


# Stored as plain strings; the enum is enforced at the application edge.
ROLE_TYPE = Enum(
    AppRole,
    name="app_role",
    values_callable=lambda e: [m.value for m in e],
    native_enum=False,
    validate_strings=True,
)


class UserRole(Base):
    """(account, role) pair. Replaced wholesale when the account is updated."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = Column(ROLE_TYPE, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="role_assignments")


class RoleMenu(Base):
    """(role, menu) grant. Replaced wholesale per role."""

    __tablename__ = "role_menus"
    __table_args__ = (UniqueConstraint("role", "menu_id", name="uq_role_menus_role_menu"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    role = Column(ROLE_TYPE, nullable=False, index=True)
    menu_id = Column(
        String(36), ForeignKey("menus.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    menu = relationship("Menu", back_populates="grants")
