"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.menu import Menu
from app.models.package import Package
from app.models.role import AppRole, RoleMenu, UserRole
from app.models.session import UserSession
from app.models.user import User
from app.models.workflow import Workflow

__all__ = [
    "AppRole",
    "Base",
    "Menu",
    "Package",
    "RoleMenu",
    "User",
    "UserRole",
    "UserSession",
    "Workflow",
]
