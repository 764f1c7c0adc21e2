"""Request/response schemas.

Python code stays snake_case, API JSON is camelCase via the alias generator.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for request schemas. Accepts camelCase or snake_case."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class CamelORMModel(BaseModel):
    """Base for response schemas. Reads from SQLAlchemy, outputs camelCase."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class FileOut(CamelORMModel):
    id: str
    owner_id: str
    file_path: str
    file_size: int
    content_type: str
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        # SQLite hands timestamps back without their offset; they are stored in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class UserOut(CamelORMModel):
    id: str
    username: str
    is_admin: bool


class FileUpdate(CamelModel):
    comment: Optional[str] = None


class Credentials(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class FileResponse(MessageResponse):
    results: FileOut


class FileListResponse(MessageResponse):
    results: list[FileOut]


class UserResponse(MessageResponse):
    results: UserOut


class UserListResponse(MessageResponse):
    results: list[UserOut]


class TokenResponse(UserResponse):
    token: str
