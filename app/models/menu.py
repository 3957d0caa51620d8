"""ORM model for navigation menu entries."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.models.base import Base, new_uuid, utcnow


class Menu(Base):
    """Navigation node; ``parent_id`` makes a tree. Grants reference it, not own it."""

    __tablename__ = "menus"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(255), nullable=False)
    path = Column(String(1024), nullable=True)
    icon = Column(String(255), nullable=True)
    parent_id = Column(String(36), ForeignKey("menus.id", ondelete="SET NULL"), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    grants = relationship(
        "RoleMenu",
        back_populates="menu",
        cascade="all, delete-orphan",
    )
