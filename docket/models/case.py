# docket/models/case.py
import enum
import uuid

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from docket.db.base import Base
from docket.utils.clock import utcnow


class CaseStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING = "pending"
    CLOSED = "closed"


class Case(Base):
    __tablename__ = "cases"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    case_number = Column(String(50), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default=CaseStatus.PENDING.value, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    documents = relationship(
        "Document",
        back_populates="case",
        passive_deletes="all",
        order_by="Document.created_at.desc()",
    )
