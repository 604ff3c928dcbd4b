"""Tests for the document registry and its upload workflow."""

import re

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from docket.core.config import settings
from docket.core.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    PartialUploadError,
    StorageError,
    StorageTimeoutError,
    ValidationError,
)
from docket.services.case_service import CaseService
from docket.services import document_service
from docket.services.document_service import DocumentService
from docket.utils.clock import epoch_millis

PDF = b"%PDF-1.4 test document"


@pytest.fixture
def case(db, clock):
    return CaseService(db, clock=clock).create_case(title="Smith v. Jones", case_number="CV-1")


@pytest.fixture
def service(db, blob_store, clock):
    return DocumentService(db, blob_store, clock=clock)


def upload(service, case_id, **overrides):
    kwargs = dict(
        case_id=case_id,
        title="Complaint",
        data=PDF,
        filename="complaint.pdf",
        mime_type="application/pdf",
        uploader_id="user-1",
    )
    kwargs.update(overrides)
    return service.upload(**kwargs)


def fail_commit(monkeypatch, db):
    def boom():
        raise OperationalError("INSERT INTO documents", {}, Exception("database is locked"))
    monkeypatch.setattr(db, "commit", boom)


class TestUpload:

    def test_upload_writes_blob_then_metadata(self, service, blob_store, case):
        doc = upload(service, case.id)

        assert doc.id
        assert doc.case_id == case.id
        assert doc.status == "draft"
        assert doc.file_size == len(PDF)
        assert doc.mime_type == "application/pdf"
        assert doc.uploaded_by == "user-1"
        assert blob_store.blobs[doc.file_path] == PDF
        assert doc.case.case_number == "CV-1"

    def test_storage_key_sanitizes_file_name(self, service, case, clock):
        doc = upload(service, case.id, filename="report (final)!.pdf")

        assert doc.file_path == f"{case.id}/{epoch_millis(clock())}-report__final__.pdf"
        assert re.fullmatch(rf"{case.id}/\d+-report__final__\.pdf", doc.file_path)

    def test_same_file_name_twice_gets_distinct_keys(self, service, case, clock):
        first = upload(service, case.id)
        clock.advance(milliseconds=1)
        second = upload(service, case.id)
        assert first.file_path != second.file_path

    def test_key_collision_rejected_before_blob_write(self, service, blob_store, case):
        upload(service, case.id)
        with pytest.raises(ConflictError):
            upload(service, case.id)
        assert len(blob_store.put_calls) == 1

    def test_explicit_status(self, service, case):
        assert upload(service, case.id, status="final").status == "final"

    def test_unknown_status_rejected_without_write(self, service, blob_store, case):
        with pytest.raises(ValidationError):
            upload(service, case.id, status="shredded")
        assert blob_store.put_calls == []

    def test_missing_case_performs_no_blob_write(self, service, blob_store):
        with pytest.raises(NotFoundError):
            upload(service, "no-such-case")
        assert blob_store.put_calls == []

    @pytest.mark.parametrize("overrides, field", [
        ({"title": ""}, "title"),
        ({"title": "  "}, "title"),
        ({"data": b""}, "file"),
        ({"filename": ""}, "file_name"),
    ])
    def test_invalid_input(self, service, blob_store, case, overrides, field):
        with pytest.raises(ValidationError) as exc:
            upload(service, case.id, **overrides)
        assert exc.value.field == field
        assert blob_store.put_calls == []

    @pytest.mark.parametrize("uploader", [None, ""])
    def test_requires_identity(self, service, blob_store, case, uploader):
        with pytest.raises(AuthError):
            upload(service, case.id, uploader_id=uploader)
        assert blob_store.put_calls == []

    def test_file_too_large(self, service, case, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_BYTES", 4)
        with pytest.raises(ValidationError):
            upload(service, case.id)

    def test_disallowed_mime_type(self, service, case, monkeypatch):
        monkeypatch.setattr(settings, "ALLOWED_UPLOAD_TYPES", ["application/pdf"])
        with pytest.raises(ValidationError) as exc:
            upload(service, case.id, mime_type="application/x-msdownload")
        assert exc.value.field == "mime_type"

    def test_timeout_passed_to_blob_store(self, service, blob_store, case):
        upload(service, case.id, timeout=2.5)
        assert blob_store.put_calls[0][1] == 2.5

    def test_default_timeout_from_settings(self, service, blob_store, case):
        upload(service, case.id)
        assert blob_store.put_calls[0][1] == settings.STORAGE_TIMEOUT_SECONDS

    def test_metadata_statement_timeout(self, service, case, monkeypatch):
        bounds = []
        monkeypatch.setattr(document_service, "set_statement_timeout",
                            lambda db, timeout_ms=None: bounds.append(timeout_ms))
        upload(service, case.id, timeout=2.5)
        upload(service, case.id, filename="other.pdf")
        # None falls back to DB_STATEMENT_TIMEOUT_MS
        assert bounds == [2500, None]


class TestUploadFailures:

    def test_blob_failure_leaves_no_record(self, service, blob_store, case):
        blob_store.fail_with = StorageError("bucket unavailable")
        with pytest.raises(StorageError):
            upload(service, case.id)
        assert service.list_for_case(case.id) == []

    def test_blob_timeout_surfaces_as_storage_error(self, service, blob_store, case):
        blob_store.fail_with = StorageTimeoutError("timed out")
        with pytest.raises(StorageError):
            upload(service, case.id)
        assert service.list_for_case(case.id) == []

    def test_metadata_failure_is_partial_upload(self, db, service, blob_store, case, monkeypatch):
        fail_commit(monkeypatch, db)
        with pytest.raises(PartialUploadError) as exc:
            upload(service, case.id)

        err = exc.value
        assert err.file_path in blob_store.blobs
        assert err.pending["case_id"] == case.id
        assert err.pending["file_size"] == len(PDF)
        assert not isinstance(err, StorageError)

    def test_recover_orphaned_blob(self, db, service, blob_store, case, monkeypatch):
        with monkeypatch.context() as m:
            fail_commit(m, db)
            with pytest.raises(PartialUploadError) as exc:
                upload(service, case.id)

        doc = service.commit_orphaned_blob(exc.value.pending, uploader_id="user-1")
        assert doc.file_path == exc.value.file_path
        assert len(blob_store.put_calls) == 1
        assert [d.id for d in service.list_for_case(case.id)] == [doc.id]

    def test_recover_requires_blob_present(self, service, case):
        pending = {"case_id": case.id, "title": "Lost", "file_path": f"{case.id}/1-lost.pdf",
                   "file_size": 3}
        with pytest.raises(StorageError):
            service.commit_orphaned_blob(pending, uploader_id="user-1")

    def test_recover_rejects_key_from_other_case(self, service, blob_store, case):
        blob_store.blobs["other-case/1-x.pdf"] = PDF
        pending = {"case_id": case.id, "title": "X", "file_path": "other-case/1-x.pdf",
                   "file_size": len(PDF)}
        with pytest.raises(ValidationError):
            service.commit_orphaned_blob(pending, uploader_id="user-1")

    def test_discard_orphaned_blob(self, service, blob_store, case):
        blob_store.blobs[f"{case.id}/1-orphan.pdf"] = PDF
        assert service.discard_orphaned_blob(f"{case.id}/1-orphan.pdf") is True
        assert blob_store.blobs == {}

    def test_discard_refuses_referenced_blob(self, service, blob_store, case):
        doc = upload(service, case.id)
        with pytest.raises(ConflictError):
            service.discard_orphaned_blob(doc.file_path)
        assert doc.file_path in blob_store.blobs


class TestListing:

    def test_list_for_case_newest_first(self, service, case, clock):
        t1 = upload(service, case.id, title="t1")
        clock.advance(minutes=5)
        t2 = upload(service, case.id, title="t2")
        clock.advance(minutes=5)
        t3 = upload(service, case.id, title="t3")

        assert [d.id for d in service.list_for_case(case.id)] == [t3.id, t2.id, t1.id]

    def test_list_for_case_only_its_documents(self, db, service, case, clock):
        other = CaseService(db, clock=clock).create_case(title="Other", case_number="CV-2")
        mine = upload(service, case.id)
        clock.advance(seconds=1)
        upload(service, other.id)
        assert [d.id for d in service.list_for_case(case.id)] == [mine.id]

    def test_list_for_missing_case(self, service):
        with pytest.raises(NotFoundError):
            service.list_for_case("nope")

    def test_list_all_joins_case_summary(self, db, service, case, clock):
        other = CaseService(db, clock=clock).create_case(title="Other", case_number="CV-2")
        upload(service, case.id)
        clock.advance(seconds=1)
        upload(service, other.id)

        docs = service.list_all()
        assert [(d.case.title, d.case.case_number) for d in docs] == [
            ("Other", "CV-2"), ("Smith v. Jones", "CV-1"),
        ]


    def test_list_all_without_summary_issues_one_query(self, db, engine, service, case, clock):
        for i in range(3):
            upload(service, case.id, filename=f"doc-{i}.pdf")
        db.expunge_all()

        statements = []
        listener = lambda conn, cursor, statement, *args: statements.append(statement)
        event.listen(engine, "before_cursor_execute", listener)
        try:
            docs = service.list_all(with_case_summary=False)
            assert [d.case for d in docs] == [None, None, None]
        finally:
            event.remove(engine, "before_cursor_execute", listener)
        assert len(statements) == 1


class TestStatusAndRead:

    def test_update_status_any_to_any(self, service, case):
        doc = upload(service, case.id)
        for status in ["archived", "draft", "review", "final"]:
            assert service.update_status(doc.id, status).status == status

    @pytest.mark.parametrize("bad", ["deleted", "Draft", "", None])
    def test_update_status_rejects_unknown(self, service, case, bad):
        doc = upload(service, case.id)
        with pytest.raises(ValidationError):
            service.update_status(doc.id, bad)

    def test_update_status_bounds_statement(self, service, case, monkeypatch):
        doc = upload(service, case.id)
        bounds = []
        monkeypatch.setattr(document_service, "set_statement_timeout",
                            lambda db, timeout_ms=None: bounds.append(timeout_ms))
        service.update_status(doc.id, "final")
        assert bounds == [None]

    def test_update_status_missing_document(self, service):
        with pytest.raises(NotFoundError):
            service.update_status("nope", "final")

    def test_open_document_returns_bytes(self, service, case):
        doc = upload(service, case.id)
        opened, data = service.open_document(doc.id)
        assert opened.id == doc.id
        assert data == PDF

    def test_get_missing_document(self, service):
        with pytest.raises(NotFoundError):
            service.get_document("nope")
