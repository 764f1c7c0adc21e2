import uuid

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

from filestore.models.database import Base


def new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, index=True, default=new_id)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # werkzeug hash, never the plain text
    is_admin = Column(Boolean, nullable=False, default=False)

    # One user → many files
    files = relationship("FileRecord", back_populates="owner", cascade="all, delete-orphan")
