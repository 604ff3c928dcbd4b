# docket/services/stats_service.py
import datetime
from typing import Optional

from sqlalchemy.orm import Session

from docket.core.config import settings
from docket.models.case import Case, CaseStatus
from docket.models.document import Document
from docket.schemas.stats import StatsOut
from docket.utils.clock import utcnow


class StatsService:
    """
    Summary counts over cases and documents, recomputed on every call.

    The two collections are read separately and not synchronized with each
    other. All document counts come from the single document read, so
    recent_documents never exceeds total_documents.
    """

    def __init__(self, db: Session, window_days: Optional[int] = None, clock=utcnow):
        self.db = db
        self.window = datetime.timedelta(days=window_days or settings.RECENT_WINDOW_DAYS)
        self.clock = clock

    def snapshot(self, now: Optional[datetime.datetime] = None) -> StatsOut:
        now = now or self.clock()
        cases = self.db.query(Case.id, Case.status).all()
        documents = self.db.query(Document.id, Document.created_at).all()

        cutoff = now - self.window
        return StatsOut(
            total_cases=len(cases),
            active_cases=sum(1 for c in cases if c.status == CaseStatus.ACTIVE.value),
            total_documents=len(documents),
            recent_documents=sum(1 for d in documents if d.created_at > cutoff),
        )
