# docket/schemas/case.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class CaseCreate(BaseModel):
    title: str
    case_number: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class StatusUpdate(BaseModel):
    status: str


class CaseOut(BaseModel):
    id: str
    case_number: str
    title: str
    description: Optional[str]
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class CaseDocumentOut(BaseModel):
    id: str
    title: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class CaseDetailOut(CaseOut):
    documents: List[CaseDocumentOut] = []
