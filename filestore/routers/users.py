import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from filestore.core.auth import require_admin, require_owner_or_admin
from filestore.core.errors import NotFound
from filestore.models.database import get_db
from filestore.models.user import User
from filestore.schemas import MessageResponse, UserListResponse, UserOut, UserResponse
from filestore.services.storage import FileStorage, get_storage, remove_stored_file

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound(f"User not found. (ID: {user_id})")
    return user


@router.get("/users", response_model=UserListResponse)
def list_users(
    requester: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    users = db.query(User).order_by(User.username).all()
    return UserListResponse(
        message="Users retrieved.",
        results=[UserOut.model_validate(u) for u in users],
    )


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    requester: User = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    user = get_user_or_404(db, user_id)
    return UserResponse(message="User retrieved.", results=UserOut.model_validate(user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    requester: User = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    """Delete a user together with their file records and stored files."""
    user = get_user_or_404(db, user_id)
    paths = [f.file_path for f in user.files]

    db.delete(user)  # file records go with it (delete-orphan cascade)
    db.commit()

    for path in paths:
        remove_stored_file(storage, path)

    logger.info("admin %s deleted user %s and %d files", requester.id, user_id, len(paths))
    return MessageResponse(message="User deleted.")
