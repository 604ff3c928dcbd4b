"""Pytest fixtures for registry and API tests.

Provides:
- In-memory SQLite session per test
- A recording blob store spy
- A controllable clock
- FastAPI test client with dependency overrides and a bearer token
"""

import datetime
import os
from typing import Dict, List, Optional, Tuple

# Set environment variables BEFORE any docket imports so Settings() picks them up
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-for-docket-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BLOB_BACKEND", "local")
os.environ.setdefault("UPLOAD_DIR", os.path.join(os.path.dirname(__file__), ".uploads"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from docket.core.dependencies import get_db, get_storage
from docket.core.errors import StorageError
from docket.core.security import create_access_token
from docket.db.init_db import init_db
from docket.db.session import build_engine
from docket.main import app
from docket.storage.base import BlobStore


class RecordingBlobStore(BlobStore):
    """In-memory blob store that records every put and can be told to fail."""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.put_calls: List[Tuple[str, Optional[float]]] = []
        self.fail_with: Optional[Exception] = None

    def put(self, key, data, content_type=None, timeout=None):
        self.put_calls.append((key, timeout))
        if self.fail_with is not None:
            raise self.fail_with
        self.blobs[key] = data

    def get(self, key):
        if key not in self.blobs:
            raise StorageError("Blob missing from storage", ref=key)
        return self.blobs[key]

    def exists(self, key):
        return key in self.blobs

    def delete(self, key):
        return self.blobs.pop(key, None) is not None


class FakeClock:
    def __init__(self, start: datetime.datetime):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs) -> datetime.datetime:
        self.now = self.now + datetime.timedelta(**kwargs)
        return self.now


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blob_store():
    return RecordingBlobStore()


@pytest.fixture
def clock():
    return FakeClock(datetime.datetime(2024, 3, 1, 12, 0, 0))


@pytest.fixture
def client(db, blob_store):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: blob_store
    # no context manager: startup would create tables on the default engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    token = create_access_token("user-1")
    return {"Authorization": f"Bearer {token}"}
