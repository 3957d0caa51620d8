"""ORM model for workflow guides (video + markdown)."""

from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base, new_uuid, utcnow


class Workflow(Base):
    """Workflow guide; only rows with ``is_public`` are served without a session."""

    __tablename__ = "workflows"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    video_path = Column(String(1024), nullable=True)
    video_size = Column(BigInteger, nullable=True)
    markdown_content = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False, index=True)
    uploaded_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    uploader = relationship("User", lazy="joined")
