# filestore/models/file.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, event
from sqlalchemy.orm import relationship

from filestore.core.errors import ValidationError
from filestore.models.database import Base
from filestore.models.user import new_id

REQUIRED_FIELDS = ("owner_id", "file_path", "file_size", "content_type")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileRecord(Base):
    __tablename__ = "files"

    id = Column(String(32), primary_key=True, index=True, default=new_id)
    file_path = Column(String, nullable=False)       # Relative to the upload dir / S3 key
    file_size = Column(Integer, nullable=False)      # Size in bytes
    content_type = Column(String(100), nullable=False)
    comment = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    owner_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)

    # Many files → one owner (User)
    owner = relationship("User", back_populates="files")


@event.listens_for(FileRecord, "before_insert")
def _validate_and_stamp(mapper, connection, target: FileRecord):
    missing = [name for name in REQUIRED_FIELDS if getattr(target, name) is None]
    if missing:
        raise ValidationError(f"FileRecord validation failed: {', '.join(missing)} required.")

    now = utcnow()
    target.created_at = now
    target.updated_at = now


@event.listens_for(FileRecord, "before_update")
def _touch(mapper, connection, target: FileRecord):
    target.updated_at = utcnow()
