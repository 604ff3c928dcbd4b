# docket/models/__init__.py
from docket.models.case import Case, CaseStatus
from docket.models.document import Document, DocumentStatus

__all__ = ["Case", "CaseStatus", "Document", "DocumentStatus"]
