# docket/schemas/document.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CaseSummary(BaseModel):
    title: str
    case_number: str

    class Config:
        from_attributes = True


class DocumentFields(BaseModel):
    """Document columns without the parent case."""
    id: str
    case_id: str
    title: str
    description: Optional[str]
    status: str
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    uploaded_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class DocumentOut(DocumentFields):
    case: Optional[CaseSummary] = None


class OrphanedBlobCommit(BaseModel):
    """Metadata for a blob left behind by a partial upload."""
    case_id: str
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    file_path: str
    file_size: int
    mime_type: Optional[str] = None
