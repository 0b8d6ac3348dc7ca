"""
Shared fixtures for the document vault tests.

The app is configured through environment variables before it is imported:
a throwaway SQLite database and a known shared credential. Object storage is
replaced by ``FakeStorage`` through FastAPI dependency overrides.
"""
import os
import tempfile
from datetime import datetime
from typing import Dict, List, Tuple

_TMP_DIR = tempfile.mkdtemp(prefix="document-vault-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["APP_USERNAME"] = "admin"
os.environ["APP_PASSWORD"] = "s3cret"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["DOWNLOAD_MODE"] = "proxy"

import pytest
from fastapi.testclient import TestClient

from app.db.base import Base
from app.db.sessions import SessionLocal, engine
from app.main import app
from app.models.document import Document, ResourceKind
from app.services.storage_service import StorageError, StoredObject, get_storage_service
from app.utils.file_processor import FileProcessor

USERNAME = "admin"
PASSWORD = "s3cret"


class FakeStorage:
    """In-memory stand-in for the S3 storage adapter."""

    def __init__(self):
        self.objects: Dict[Tuple[str, str], bytes] = {}
        self.deleted: List[Tuple[str, str]] = []
        self.fail_upload = False
        self.fail_delete = False
        self.fixed_key = None
        self._counter = 0

    def upload(self, data, filename, content_type, kind, timestamp_ms=None):
        if self.fail_upload:
            raise StorageError("storage unavailable")
        self._counter += 1
        key = self.fixed_key or f"test/{self._counter}-{FileProcessor.sanitize_stem(filename)}"
        kind = ResourceKind(kind).value
        self.objects[(kind, key)] = data
        return StoredObject(storage_key=key, url=f"https://storage.test/{kind}/{key}")

    def delete(self, storage_key, kind):
        if self.fail_delete:
            raise StorageError("storage unavailable")
        kind = ResourceKind(kind).value
        self.deleted.append((storage_key, kind))
        self.objects.pop((kind, storage_key), None)


@pytest.fixture(autouse=True)
def reset_db():
    import app.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage_service] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client):
    r = client.post(
        "/login",
        data={"username": USERNAME, "password": PASSWORD},
        follow_redirects=False,
    )
    assert r.status_code == 303
    assert r.headers["location"] == "/"
    return client


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_document(db_session):
    """Insert a record directly, bypassing upload."""
    counter = {"n": 0}

    def _make(
        original_name: str,
        custom_name: str = None,
        uploaded_at: datetime = None,
        resource_kind: str = "raw",
        mime_type: str = None,
    ) -> Document:
        counter["n"] += 1
        doc = Document(
            storage_key=f"test/seed-{counter['n']}",
            url=f"https://storage.test/{resource_kind}/test/seed-{counter['n']}",
            original_name=original_name,
            custom_name=custom_name or original_name,
            resource_kind=resource_kind,
            file_size=42,
            mime_type=mime_type,
        )
        if uploaded_at is not None:
            doc.uploaded_at = uploaded_at
        db_session.add(doc)
        db_session.commit()
        db_session.refresh(doc)
        return doc

    return _make


def count_documents() -> int:
    db = SessionLocal()
    try:
        return db.query(Document).count()
    finally:
        db.close()
