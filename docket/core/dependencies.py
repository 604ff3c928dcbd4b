# docket/core/dependencies.py
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from docket.core.errors import AuthError
from docket.core.security import Identity, current_user
from docket.db.session import SessionLocal
from docket.storage import BlobStore, get_blob_store

bearer = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_storage() -> BlobStore:
    return get_blob_store()


def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Identity:
    token = credentials.credentials if credentials else None
    identity = current_user(token)
    if identity is None:
        raise AuthError("Authentication required")
    return identity
