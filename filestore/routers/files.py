import logging
from typing import BinaryIO, Iterator, Optional, Union

import pydantic
from fastapi import APIRouter, Depends, Form, Request, UploadFile, File as FastAPIFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile as StarletteUploadFile

from filestore.core.auth import require_admin, require_owner_or_admin
from filestore.core.config import Settings, get_settings
from filestore.core.errors import NotFound, ValidationError
from filestore.models.database import get_db
from filestore.models.file import FileRecord
from filestore.models.user import User
from filestore.routers.users import get_user_or_404
from filestore.schemas import (
    FileListResponse,
    FileOut,
    FileResponse,
    FileUpdate,
    MessageResponse,
)
from filestore.services.storage import (
    FileStorage,
    get_storage,
    remove_stored_file,
    stored_filename,
    upload_path,
)
from filestore.services.uploads import validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])

CHUNK_SIZE = 64 * 1024


# --- helper: fetch a file owned by user_id or fail with 404 ---
def get_file_or_404(db: Session, user_id: str, file_id: str) -> FileRecord:
    file = (
        db.query(FileRecord)
        .filter(FileRecord.id == file_id, FileRecord.owner_id == user_id)
        .first()
    )
    if not file:
        raise NotFound(f"File not found. (ID: {file_id})")
    return file


def iter_chunks(stream: BinaryIO) -> Iterator[bytes]:
    try:
        while chunk := stream.read(CHUNK_SIZE):
            yield chunk
    finally:
        stream.close()


# --- all files (admin only) ---
@router.get("/files", response_model=FileListResponse)
def list_all_files(
    requester: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    files = db.query(FileRecord).order_by(FileRecord.created_at).all()
    return FileListResponse(
        message="Files retrieved.",
        results=[FileOut.model_validate(f) for f in files],
    )


# --- one user's files ---
@router.get("/users/{user_id}/files", response_model=FileListResponse)
def list_user_files(
    user_id: str,
    requester: User = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    files = (
        db.query(FileRecord)
        .filter(FileRecord.owner_id == user_id)
        .order_by(FileRecord.created_at)
        .all()
    )
    return FileListResponse(
        message="Files retrieved.",
        results=[FileOut.model_validate(f) for f in files],
    )


# --- upload a new file ---
@router.post(
    "/users/{user_id}/files",
    response_model=FileResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    user_id: str,
    file: Union[UploadFile, str, None] = FastAPIFile(None),
    comment: Optional[str] = Form(None),
    requester: User = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    # a plain text "file" field counts as no file at all
    if not isinstance(file, StarletteUploadFile):
        file = None

    content_type = validate_upload(
        file.filename if file else None,
        file.content_type if file else None,
        comment,
        settings.allowed_content_types,
    )
    owner = get_user_or_404(db, user_id)

    content = await file.read()
    path = upload_path(owner.id, file.filename)
    storage.save(path, content, content_type)

    record = FileRecord(
        owner_id=owner.id,
        file_path=path,
        file_size=len(content),
        content_type=content_type,
        comment=comment,
    )
    db.add(record)
    try:
        db.commit()
    except Exception:
        db.rollback()
        remove_stored_file(storage, path)
        raise
    db.refresh(record)

    logger.info("user %s uploaded %s (%d bytes) for %s", requester.id, path, len(content), owner.id)
    return FileResponse(
        message="File uploaded successfully.",
        results=FileOut.model_validate(record),
    )


# --- file metadata ---
@router.get("/users/{user_id}/files/{file_id}", response_model=FileResponse)
def get_file(
    user_id: str,
    file_id: str,
    requester: User = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    file = get_file_or_404(db, user_id, file_id)
    return FileResponse(message="File retrieved.", results=FileOut.model_validate(file))


# --- download a file ---
@router.get("/users/{user_id}/files/{file_id}/download")
def download_file(
    user_id: str,
    file_id: str,
    requester: User = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    file = get_file_or_404(db, user_id, file_id)
    try:
        stream = storage.open(file.file_path)
    except FileNotFoundError:
        raise NotFound(f"File content missing. (ID: {file_id})")

    filename = stored_filename(file.file_path)
    return StreamingResponse(
        iter_chunks(stream),
        media_type=file.content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# --- update the comment ---
@router.put("/users/{user_id}/files/{file_id}", response_model=FileResponse)
async def update_file(
    user_id: str,
    file_id: str,
    request: Request,
    requester: User = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    file = get_file_or_404(db, user_id, file_id)

    # Body is read here, after auth, so a bad body never masks a 401/403
    body = await request.body()
    try:
        payload = FileUpdate.model_validate_json(body) if body else None
    except pydantic.ValidationError:
        raise ValidationError("Invalid request.")
    if payload is None or payload.comment is None:
        raise ValidationError("Comment field required in request.")

    file.comment = payload.comment
    db.commit()
    db.refresh(file)

    return FileResponse(message="File updated.", results=FileOut.model_validate(file))


# --- delete a file ---
@router.delete("/users/{user_id}/files/{file_id}", response_model=MessageResponse)
def delete_file(
    user_id: str,
    file_id: str,
    requester: User = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    file = get_file_or_404(db, user_id, file_id)
    path = file.file_path

    db.delete(file)
    db.commit()

    # Delete from storage once the record is gone
    remove_stored_file(storage, path)

    logger.info("user %s deleted %s", requester.id, path)
    return MessageResponse(message="File deleted.")
