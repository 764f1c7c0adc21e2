"""Shared fixtures: throwaway SQLite database, temp upload dir, users and tokens."""
import os
import shutil
import tempfile

TEST_DIR = tempfile.mkdtemp(prefix="filestore-tests-")
TEST_DB = os.path.join(TEST_DIR, "test_filestore.db")

# Must be set before filestore builds its settings and engine
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB}"
os.environ["UPLOAD_DIR"] = os.path.join(TEST_DIR, "uploads")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["JWT_SECRET"] = "test-secret"

import boto3  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from moto import mock_aws  # noqa: E402

from filestore.core.config import get_settings  # noqa: E402
from filestore.core.security import grant_user_token, hash_password  # noqa: E402
from filestore.main import app  # noqa: E402
from filestore.models.database import Base, SessionLocal, engine  # noqa: E402
from filestore.models.user import User  # noqa: E402
from filestore.services.storage import LocalStorage, S3Storage, get_storage  # noqa: E402

from tests.utils import TEST_BUCKET_NAME  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_dir():
    yield
    engine.dispose()
    shutil.rmtree(TEST_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "uploads")


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def s3_storage(aws_credentials):
    """S3Storage against a moto bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield S3Storage(TEST_BUCKET_NAME, client=client)


def make_user(db, username: str, is_admin: bool = False) -> User:
    user = User(username=username, password=hash_password("123"), is_admin=is_admin)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    return make_user(db, "admin", is_admin=True)


@pytest.fixture
def user1(db):
    return make_user(db, "user1")


@pytest.fixture
def user2(db):
    return make_user(db, "user2")


@pytest.fixture
def admin_token(admin, settings):
    return grant_user_token(admin, settings)


@pytest.fixture
def user1_token(user1, settings):
    return grant_user_token(user1, settings)


@pytest.fixture
def user2_token(user2, settings):
    return grant_user_token(user2, settings)
