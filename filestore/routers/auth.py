import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from filestore.core.config import Settings, get_settings
from filestore.core.errors import Unauthorized, ValidationError
from filestore.core.security import grant_user_token, hash_password, verify_password
from filestore.models.database import get_db
from filestore.models.user import User
from filestore.schemas import Credentials, TokenResponse, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def require_credentials(payload: Optional[Credentials]) -> Credentials:
    if payload is None or not payload.username or not payload.password:
        raise ValidationError("Username and password required in request.")
    return payload


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: Optional[Credentials] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    creds = require_credentials(payload)

    # Check if user exists
    existing_user = db.query(User).filter(User.username == creds.username).first()
    if existing_user:
        raise ValidationError("Username already exists.")

    # Save user; admins are only made through the CLI
    new_user = User(username=creds.username, password=hash_password(creds.password), is_admin=False)
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    logger.info("created user %s (%s)", new_user.username, new_user.id)
    return TokenResponse(
        message="User created.",
        results=UserOut.model_validate(new_user),
        token=grant_user_token(new_user, settings),
    )


@router.post("/login", response_model=TokenResponse)
def login(
    payload: Optional[Credentials] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    creds = require_credentials(payload)

    user = db.query(User).filter(User.username == creds.username).first()
    if not user or not verify_password(creds.password, user.password):
        logger.info("failed login for %s", creds.username)
        raise Unauthorized()

    return TokenResponse(
        message="Login successful.",
        results=UserOut.model_validate(user),
        token=grant_user_token(user, settings),
    )
