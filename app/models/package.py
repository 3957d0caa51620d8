"""ORM model for uploaded installer packages."""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base, new_uuid, utcnow


class Package(Base):
    __tablename__ = "packages"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    version = Column(String(64), nullable=True)
    file_path = Column(String(1024), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    uploaded_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    uploader = relationship("User", lazy="joined")
