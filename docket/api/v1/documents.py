# docket/api/v1/documents.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from docket.core.dependencies import get_db, get_storage, require_user
from docket.schemas.case import StatusUpdate
from docket.schemas.document import DocumentFields, DocumentOut, OrphanedBlobCommit
from docket.services.document_service import DocumentService

router = APIRouter()


@router.get("", response_model=List[DocumentOut])
def list_documents(
    with_case_summary: bool = Query(True),
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    _=Depends(require_user),
):
    docs = DocumentService(db, storage).list_all(with_case_summary=with_case_summary)
    if with_case_summary:
        return docs
    return [DocumentOut(**DocumentFields.model_validate(d).model_dump()) for d in docs]


@router.post("/upload", response_model=DocumentOut, status_code=201)
async def upload_document(
    case_id: str = Form(...),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    user=Depends(require_user),
):
    data = await file.read()
    svc = DocumentService(db, storage)
    # blob and metadata writes block; keep them off the event loop
    return await run_in_threadpool(
        svc.upload,
        case_id=case_id,
        title=title,
        data=data,
        filename=file.filename,
        mime_type=file.content_type,
        uploader_id=user.id,
        description=description,
        status=status,
    )


@router.post("/recover", response_model=DocumentOut, status_code=201)
def recover_partial_upload(
    payload: OrphanedBlobCommit,
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    user=Depends(require_user),
):
    """
    Record metadata for a blob stored by an upload whose commit failed
    """
    svc = DocumentService(db, storage)
    return svc.commit_orphaned_blob(payload.model_dump(), uploader_id=user.id)


@router.delete("/orphans")
def discard_orphaned_blob(
    file_path: str = Query(...),
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    _=Depends(require_user),
):
    removed = DocumentService(db, storage).discard_orphaned_blob(file_path)
    return {"file_path": file_path, "removed": removed}


@router.get("/{document_id}", response_model=DocumentOut)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    _=Depends(require_user),
):
    return DocumentService(db, storage).get_document(document_id)


@router.get("/{document_id}/download")
def download_document(
    document_id: str,
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    _=Depends(require_user),
):
    doc, data = DocumentService(db, storage).open_document(document_id)
    filename = doc.file_path.rsplit("/", 1)[-1]
    return Response(
        content=data,
        media_type=doc.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.patch("/{document_id}/status", response_model=DocumentOut)
def update_document_status(
    document_id: str,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    _=Depends(require_user),
):
    return DocumentService(db, storage).update_status(document_id, payload.status)
