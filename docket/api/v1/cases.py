# docket/api/v1/cases.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from docket.core.dependencies import get_db, get_storage, require_user
from docket.schemas.case import CaseCreate, CaseDetailOut, CaseOut, StatusUpdate
from docket.schemas.document import DocumentOut
from docket.services.case_service import CaseService
from docket.services.document_service import DocumentService

router = APIRouter()


@router.post("", response_model=CaseOut, status_code=201)
def create_case(payload: CaseCreate, db: Session = Depends(get_db), _=Depends(require_user)):
    svc = CaseService(db)
    return svc.create_case(
        title=payload.title,
        case_number=payload.case_number,
        description=payload.description,
        status=payload.status,
    )


@router.get("/list-cases", response_model=List[CaseOut])
def list_cases(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    _=Depends(require_user),
):
    """
    List cases, newest first
    """
    return CaseService(db).list_cases(skip=skip, limit=limit)


@router.get("/{case_id}", response_model=CaseDetailOut)
def get_case(case_id: str, db: Session = Depends(get_db), _=Depends(require_user)):
    return CaseService(db).get_case(case_id)


@router.get("/{case_id}/documents", response_model=List[DocumentOut])
def list_case_documents(
    case_id: str,
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
    _=Depends(require_user),
):
    """
    List documents for a case, newest first
    """
    return DocumentService(db, storage).list_for_case(case_id)


@router.patch("/{case_id}/status", response_model=CaseOut)
def update_case_status(
    case_id: str,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_user),
):
    return CaseService(db).update_status(case_id, payload.status)
