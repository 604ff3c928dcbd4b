# docket/services/document_service.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, noload

from docket.core.config import settings
from docket.core.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    PartialUploadError,
    StorageError,
    ValidationError,
)
from docket.db.session import set_statement_timeout
from docket.models.case import Case
from docket.models.document import Document, DocumentStatus
from docket.storage.base import BlobStore
from docket.utils.clock import utcnow
from docket.utils.filenames import build_storage_key

logger = logging.getLogger(__name__)


def parse_document_status(value: Optional[str]) -> DocumentStatus:
    try:
        return DocumentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in DocumentStatus)
        raise ValidationError(
            f"Unknown document status '{value}'. Allowed: {allowed}", field="status"
        ) from None


class DocumentService:
    """
    Document registry.

    Uploads are two writes against two stores: the blob first, then the
    metadata row. They are not atomic. A failed blob write leaves nothing
    behind (StorageError); a failed metadata write after a good blob write
    leaves an orphaned blob (PartialUploadError).
    """

    def __init__(self, db: Session, blob_store: BlobStore, clock=utcnow):
        self.db = db
        self.blob_store = blob_store
        self.clock = clock

    def _require_case(self, case_id: str) -> Case:
        c = self.db.query(Case).filter(Case.id == case_id).first()
        if c is None:
            raise NotFoundError(f"Case {case_id} not found", field="case_id", ref=case_id)
        return c

    def get_document(self, document_id: str) -> Document:
        doc = (
            self.db.query(Document)
            .options(joinedload(Document.case))
            .filter(Document.id == document_id)
            .first()
        )
        if doc is None:
            raise NotFoundError(f"Document {document_id} not found", field="document_id", ref=document_id)
        return doc

    def list_for_case(self, case_id: str) -> List[Document]:
        self._require_case(case_id)
        return (
            self.db.query(Document)
            .filter(Document.case_id == case_id)
            .order_by(Document.created_at.desc(), Document.id.desc())
            .all()
        )

    def list_all(self, with_case_summary: bool = True) -> List[Document]:
        query = self.db.query(Document)
        query = query.options(joinedload(Document.case) if with_case_summary else noload(Document.case))
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    def _validate_upload(self, title, data, filename, mime_type):
        if not title or not title.strip():
            raise ValidationError("Document title must not be empty", field="title")
        if not data:
            raise ValidationError("Empty file", field="file")
        if len(data) > settings.MAX_UPLOAD_SIZE_BYTES:
            raise ValidationError(
                f"File too large: {len(data)} bytes (max {settings.MAX_UPLOAD_SIZE_BYTES})",
                field="file",
            )
        if not filename or not filename.strip():
            raise ValidationError("File name must not be empty", field="file_name")
        if settings.ALLOWED_UPLOAD_TYPES and mime_type not in settings.ALLOWED_UPLOAD_TYPES:
            raise ValidationError(f"Unsupported file type: {mime_type}", field="mime_type")

    def upload(
        self,
        case_id: str,
        title: str,
        data: bytes,
        filename: str,
        mime_type: Optional[str],
        uploader_id: Optional[str],
        description: Optional[str] = None,
        status: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Document:
        """
        Store a file for a case and record its metadata.

        Args:
            case_id: case the document belongs to
            title: display title
            data: file bytes
            filename: original client file name, sanitized into the storage key
            mime_type: MIME type reported by the client
            uploader_id: authenticated identity performing the upload
            description: optional free text
            status: initial status, defaults to the first DocumentStatus
            timeout: bound in seconds for each of the two writes; when omitted the
                blob write uses STORAGE_TIMEOUT_SECONDS and the metadata write
                DB_STATEMENT_TIMEOUT_MS

        Returns:
            The persisted Document with its case loaded

        Raises:
            AuthError, NotFoundError, ValidationError, ConflictError: before
                anything is written
            StorageError: blob write failed, nothing was persisted
            PartialUploadError: blob written, metadata commit failed
        """
        if not uploader_id:
            raise AuthError("You must be signed in to upload documents")
        case = self._require_case(case_id)
        self._validate_upload(title, data, filename, mime_type)
        initial = parse_document_status(status) if status is not None else list(DocumentStatus)[0]

        now = self.clock()
        key = build_storage_key(case.id, now, filename)
        taken = self.db.query(Document.id).filter(Document.file_path == key).first()
        if taken:
            raise ConflictError(f"Storage key {key} already in use", field="file_path", ref=key)

        # Phase 1: blob. Failure here leaves no metadata behind.
        self.blob_store.put(
            key, data, content_type=mime_type, timeout=timeout or settings.STORAGE_TIMEOUT_SECONDS
        )
        logger.info(f"Blob written: {key} ({len(data)} bytes)")

        # Phase 2: metadata.
        pending = {
            "case_id": case.id,
            "title": title.strip(),
            "description": description or None,
            "status": initial.value,
            "file_path": key,
            "file_size": len(data),
            "mime_type": mime_type or None,
            "uploaded_by": uploader_id,
        }
        doc = self._commit_metadata(pending, now, timeout)
        logger.info(f"Document {doc.id} committed for case {case.id}")
        return doc

    def _commit_metadata(self, pending: dict, created_at, timeout: Optional[float]) -> Document:
        doc = Document(created_at=created_at, **pending)
        try:
            set_statement_timeout(self.db, int(timeout * 1000) if timeout else None)
            self.db.add(doc)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Metadata commit failed, orphaned blob at {pending['file_path']}: {e}")
            raise PartialUploadError(
                "File stored but document record could not be saved",
                file_path=pending["file_path"],
                pending=pending,
            ) from e
        self.db.refresh(doc)
        return doc

    def commit_orphaned_blob(self, pending: dict, uploader_id: Optional[str],
                             timeout: Optional[float] = None) -> Document:
        """
        Repair path for PartialUploadError: record metadata for a blob that
        is already in the store instead of uploading it again.
        """
        if not uploader_id:
            raise AuthError("You must be signed in to upload documents")
        case = self._require_case(pending["case_id"])
        if not pending.get("title") or not pending["title"].strip():
            raise ValidationError("Document title must not be empty", field="title")
        key = pending["file_path"]
        if not key.startswith(f"{case.id}/"):
            raise ValidationError("Storage key does not belong to this case", field="file_path", ref=key)
        if self.db.query(Document.id).filter(Document.file_path == key).first():
            raise ConflictError(f"Storage key {key} already recorded", field="file_path", ref=key)
        if not self.blob_store.exists(key):
            raise StorageError("Blob missing from storage", field="file_path", ref=key)

        status = pending.get("status")
        record = {
            "case_id": case.id,
            "title": pending["title"].strip(),
            "description": pending.get("description"),
            "status": parse_document_status(status).value if status else list(DocumentStatus)[0].value,
            "file_path": key,
            "file_size": pending.get("file_size"),
            "mime_type": pending.get("mime_type"),
            "uploaded_by": uploader_id,
        }
        doc = self._commit_metadata(record, self.clock(), timeout)
        logger.info(f"Recovered orphaned blob {key} as document {doc.id}")
        return doc

    def discard_orphaned_blob(self, file_path: str) -> bool:
        if self.db.query(Document.id).filter(Document.file_path == file_path).first():
            raise ConflictError(
                "Blob is referenced by a document", field="file_path", ref=file_path
            )
        removed = self.blob_store.delete(file_path)
        logger.info(f"Discarded orphaned blob {file_path} (removed={removed})")
        return removed

    def open_document(self, document_id: str) -> Tuple[Document, bytes]:
        doc = self.get_document(document_id)
        if not doc.file_path:
            raise NotFoundError("Document has no stored file", field="file_path", ref=document_id)
        return doc, self.blob_store.get(doc.file_path)

    def update_status(self, document_id: str, new_status: str) -> Document:
        status = parse_document_status(new_status)
        set_statement_timeout(self.db)
        doc = self.get_document(document_id)
        doc.status = status.value
        self.db.commit()
        self.db.refresh(doc)
        logger.info(f"Document {document_id} status -> {status.value}")
        return doc
