import io
from pathlib import Path

import pytest
from botocore.exceptions import ClientError
from fastapi import UploadFile
from fastapi.testclient import TestClient

from starterblog.core.config import Settings
from starterblog.core.storage import LocalStorage, R2Storage
from starterblog.db.init_db import create_all_tables
from starterblog.db.session import Database
from starterblog.main import create_app

PASSWORD = "secret1"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        UPLOAD_DIRECTORY=str(tmp_path / "uploads"),
        SECRET_KEY="test-secret-key",
        ENVIRONMENT="test",
    )


@pytest.fixture
def upload_dir(test_settings: Settings) -> Path:
    return Path(test_settings.UPLOAD_DIRECTORY)


@pytest.fixture
def client(test_settings: Settings):
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client


class FakeS3Client:
    """Just enough of the boto3 S3 client for R2Storage."""

    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[(Bucket, Key)] = Body

    def head_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        return {}

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def r2_client(tmp_path: Path, s3_client: FakeS3Client):
    """App configured for R2 storage, backed by an in-memory bucket."""
    r2_settings = Settings(
        DATABASE_URL="sqlite://",
        UPLOAD_DIRECTORY=str(tmp_path / "uploads"),
        SECRET_KEY="test-secret-key",
        ENVIRONMENT="test",
        STORAGE_BACKEND="r2",
        R2_BUCKET_NAME="blog",
        R2_PUBLIC_URL="https://cdn.example.com",
    )
    storage = R2Storage(r2_settings, client=s3_client)
    with TestClient(create_app(r2_settings, storage=storage)) as test_client:
        yield test_client


@pytest.fixture
def database():
    database = Database("sqlite://")
    create_all_tables(database.engine)
    yield database
    database.dispose()


@pytest.fixture
def db(database: Database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(str(tmp_path / "files"))


def make_upload(filename: str = "photo.png", size: int = 1024) -> UploadFile:
    return UploadFile(file=io.BytesIO(b"x" * size), filename=filename, size=size)


def register(client: TestClient, name: str, email: str, password: str = PASSWORD):
    return client.post(
        "/api/users/register",
        json={"name": name, "email": email, "password": password, "confirm_password": password},
    )


def login(client: TestClient, email: str, password: str = PASSWORD):
    return client.post("/api/users/login", json={"email": email, "password": password})


def auth_headers(client: TestClient, name: str, email: str):
    """Register and log in a user, returning (headers, user_id)."""
    assert register(client, name, email).status_code == 201
    body = login(client, email).json()
    return {"Authorization": f"Bearer {body['token']}"}, body["id"]


def thumbnail_file(name: str = "cover.jpg", size: int = 100_000):
    return {"thumbnail": (name, io.BytesIO(b"\xff" * size), "image/jpeg")}


def post_form(title: str = "T", category: str = "Art", description: str = "twelve chars minimum"):
    return {"title": title, "category": category, "description": description}
