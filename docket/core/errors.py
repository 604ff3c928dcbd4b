# docket/core/errors.py
"""
Error taxonomy shared by the registries.

Every error carries a ``kind`` plus the offending ``field`` or ``ref`` (id or
storage key) so the HTTP layer can render a specific message.
"""

from typing import Any, Dict, Optional


class DocketError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None, ref: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.ref = ref

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind,
            "message": self.message,
            "field": self.field,
            "ref": self.ref,
        }


class ValidationError(DocketError):
    """Malformed or missing input. Fix the input, never retry as-is."""
    kind = "validation_error"
    status_code = 422


class ConflictError(ValidationError):
    """Uniqueness violation on case_number or file_path."""
    kind = "conflict"
    status_code = 409


class NotFoundError(DocketError):
    kind = "not_found"
    status_code = 404


class AuthError(DocketError):
    kind = "auth_error"
    status_code = 401


class StorageError(DocketError):
    """
    Blob store failure. No metadata was committed, so the whole upload
    may be retried.
    """
    kind = "storage_error"
    status_code = 502


class StorageTimeoutError(StorageError):
    kind = "storage_timeout"
    status_code = 504


class PartialUploadError(DocketError):
    """
    The blob was written but the metadata commit failed.

    The blob at ``file_path`` is orphaned. Retrying the upload would write a
    second blob; callers should either discard the orphan or hand ``pending``
    to ``DocumentService.commit_orphaned_blob``.
    """
    kind = "partial_upload"
    status_code = 500

    def __init__(self, message: str, file_path: str, pending: Dict[str, Any]):
        super().__init__(message, field="file_path", ref=file_path)
        self.file_path = file_path
        self.pending = pending

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["pending"] = self.pending
        return data
