# docket/storage/local.py
import logging
import os
from pathlib import Path
from typing import Optional

from docket.core.errors import StorageError
from docket.storage.base import BlobStore

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Blob store backed by a directory on local disk."""

    def __init__(self, root: str):
        self.root = Path(root).resolve()
        # ensure dir exists
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError(f"Invalid storage key: {key}", field="file_path", ref=key)
        return path

    def put(self, key: str, data: bytes, content_type: Optional[str] = None,
            timeout: Optional[float] = None) -> None:
        # local disk writes are not interruptible, timeout is accepted for the port
        path = self._path_for(key)
        tmp_path = path.with_name(path.name + ".part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Local blob write failed for {key}: {e}")
            if tmp_path.exists():
                tmp_path.unlink()
            raise StorageError(f"Failed to write blob: {e}", ref=key) from e

    def get(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise StorageError("Blob missing from storage", ref=key) from e
        except OSError as e:
            raise StorageError(f"Failed to read blob: {e}", ref=key) from e

    def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete blob: {e}", ref=key) from e
