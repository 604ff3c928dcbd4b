# docket/storage/__init__.py
from functools import lru_cache

from docket.core.config import settings
from docket.storage.base import BlobStore
from docket.storage.local import LocalBlobStore
from docket.storage.s3 import S3BlobStore


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    if settings.BLOB_BACKEND == "s3":
        return S3BlobStore(
            bucket=settings.S3_BUCKET,
            endpoint_url=settings.S3_ENDPOINT,
            access_key=settings.S3_ACCESS_KEY,
            secret_key=settings.S3_SECRET_KEY,
            region=settings.S3_REGION,
            timeout=settings.STORAGE_TIMEOUT_SECONDS,
        )
    if settings.BLOB_BACKEND == "local":
        return LocalBlobStore(settings.UPLOAD_DIR)
    raise RuntimeError(f"Unknown BLOB_BACKEND: {settings.BLOB_BACKEND}")


__all__ = ["BlobStore", "LocalBlobStore", "S3BlobStore", "get_blob_store"]
