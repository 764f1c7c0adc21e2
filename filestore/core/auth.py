# filestore/core/auth.py
import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from filestore.core.config import Settings, get_settings
from filestore.core.errors import Forbidden, Unauthorized
from filestore.core.security import decode_token
from filestore.models.database import get_db
from filestore.models.user import User

logger = logging.getLogger(__name__)

# The token travels as a bare "authorization: <token>" header; "Bearer <token>" works too.
token_header = APIKeyHeader(name="authorization", auto_error=False)


def get_current_user(
    token: Annotated[Optional[str], Depends(token_header)],
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Resolve the requesting user from the authorization header or raise Unauthorized."""
    if not token:
        raise Unauthorized()

    scheme, _, credentials = token.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        token = credentials.strip()

    payload = decode_token(token, settings)
    if not payload or not payload.get("sub"):
        logger.info("rejected invalid token")
        raise Unauthorized()

    user = db.query(User).filter(User.id == payload["sub"]).first()
    if not user:
        logger.info("rejected token for unknown user %s", payload["sub"])
        raise Unauthorized()
    return user


def check_access(requester: User, owner_id: str) -> None:
    """Owner-or-admin rule: raise Forbidden unless requester owns ``owner_id`` or is an admin."""
    if requester.is_admin or requester.id == owner_id:
        return
    raise Forbidden()


def require_owner_or_admin(
    user_id: str,
    user: User = Depends(get_current_user),
) -> User:
    check_access(user, user_id)
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise Forbidden()
    return user
