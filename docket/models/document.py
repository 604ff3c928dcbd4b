# docket/models/document.py
import enum
import uuid

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from docket.db.base import Base
from docket.utils.clock import utcnow


class DocumentStatus(str, enum.Enum):
    """Document lifecycle status. The first member is the upload default."""
    DRAFT = "draft"
    REVIEW = "review"
    FINAL = "final"
    ARCHIVED = "archived"


class Document(Base):
    __tablename__ = "documents"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    case_id = Column(
        String(36), ForeignKey("cases.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default=DocumentStatus.DRAFT.value)
    file_path = Column(String(1024), unique=True, nullable=True)
    file_size = Column(BigInteger, nullable=True)
    mime_type = Column(String(255), nullable=True)
    uploaded_by = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    case = relationship("Case", back_populates="documents")
