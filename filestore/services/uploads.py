"""Upload validation: required multipart fields and the content-type allow-list."""
import mimetypes
from pathlib import PurePath
from typing import Iterable, Optional

from filestore.core.errors import ValidationError

MISSING_FIELDS_MESSAGE = "Comment and file field required in request."

# Declared types that say nothing about the payload
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}


def file_extension(filename: str) -> str:
    """'scan.PDF' -> '.pdf'"""
    return PurePath(filename).suffix.lower()


def validate_upload(
    filename: Optional[str],
    declared_type: Optional[str],
    comment: Optional[str],
    allowed_types: Iterable[str],
) -> str:
    """Check an incoming upload and return the content type to record for it.

    Raises:
        ValidationError: when the file or comment field is missing, when the
            extension maps to a type outside ``allowed_types``, or when the
            declared type contradicts the extension.
    """
    if not filename or comment is None:
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    ext = file_extension(filename)
    if not ext:
        raise ValidationError("File type not allowed.")
    guessed, _ = mimetypes.guess_type(f"upload{ext}", strict=False)
    if guessed is None or guessed not in set(allowed_types):
        raise ValidationError(f"File type {ext} not allowed.")

    declared = (declared_type or "").split(";")[0].strip().lower()
    if declared not in GENERIC_CONTENT_TYPES and declared != guessed:
        raise ValidationError(f"File type {ext} not allowed.")

    return guessed
