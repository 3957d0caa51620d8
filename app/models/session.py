"""ORM model for persisted login sessions."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from app.models.base import Base, new_uuid, utcnow


class UserSession(Base):
    """
    Opaque bearer token owned by one account.

    ``user_id`` is unique: the table itself refuses a second live session
    for the same account.
    """

    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=new_uuid)
    token = Column(String(128), nullable=False, unique=True, index=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="sessions")
