import pytest

from filestore.core.errors import ValidationError
from filestore.models.file import FileRecord
from filestore.services.storage import upload_path


def test_missing_required_field_raises_validation_error(db, user1):
    file = FileRecord(
        owner_id=user1.id,
        # content_type intentionally left out
        file_path="/path/to/file",
        file_size=5000000,
        comment="Comments are optional.",
    )
    db.add(file)
    with pytest.raises(ValidationError) as exc_info:
        db.commit()
    db.rollback()

    assert "content_type" in exc_info.value.message
    assert db.query(FileRecord).count() == 0


def test_save_sets_matching_timestamps(db, user1):
    file = FileRecord(
        owner_id=user1.id,
        content_type="application/pdf",
        file_path=upload_path(user1.id, "test.pdf"),
        file_size=5000000,
    )
    db.add(file)
    db.commit()
    db.refresh(file)

    assert file.id
    assert file.comment is None
    assert file.created_at is not None
    assert file.created_at == file.updated_at


def test_update_advances_updated_at(db, user1):
    file = FileRecord(
        owner_id=user1.id,
        content_type="image/png",
        file_path=upload_path(user1.id, "test.png"),
        file_size=12,
        comment="before",
    )
    db.add(file)
    db.commit()
    db.refresh(file)
    created_at = file.created_at

    file.comment = "after"
    db.commit()
    db.refresh(file)

    assert file.comment == "after"
    assert file.created_at == created_at
    assert file.updated_at > created_at


def test_deleting_owner_removes_their_records(db, user1, user2):
    for owner in (user1, user2):
        db.add(FileRecord(owner_id=owner.id, content_type="image/png", file_path=upload_path(owner.id, "a.png"), file_size=1))
    db.commit()

    db.delete(user1)
    db.commit()

    assert [f.owner_id for f in db.query(FileRecord).all()] == [user2.id]
