# docket/services/case_service.py
import datetime
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from docket.core.errors import ConflictError, NotFoundError, ValidationError
from docket.db.session import set_statement_timeout
from docket.models.case import Case, CaseStatus
from docket.utils.clock import utcnow

logger = logging.getLogger(__name__)

CASE_NO_ATTEMPTS = 3


def parse_case_status(value: Optional[str]) -> CaseStatus:
    try:
        return CaseStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in CaseStatus)
        raise ValidationError(
            f"Unknown case status '{value}'. Allowed: {allowed}", field="status"
        ) from None


class CaseService:
    """Case registry: owns case records, independent of documents."""

    def __init__(self, db: Session, clock=utcnow):
        self.db = db
        self.clock = clock

    def _generate_case_no(self, now: datetime.datetime) -> str:
        prefix = f"CASE-{now.strftime('%Y%m%d')}-"
        rows = self.db.query(Case.case_number).filter(Case.case_number.like(f"{prefix}%")).all()
        # manual numbers in the same range may leave gaps, so count is not enough
        suffixes = [int(n[len(prefix):]) for (n,) in rows if n[len(prefix):].isdigit()]
        return f"{prefix}{max(suffixes, default=0) + 1}"

    def create_case(
        self,
        title: str,
        case_number: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Case:
        if not title or not title.strip():
            raise ValidationError("Case title must not be empty", field="title")
        initial = parse_case_status(status) if status is not None else CaseStatus.PENDING
        now = self.clock()

        if case_number is not None:
            if not case_number.strip():
                raise ValidationError("Case number must not be empty", field="case_number")
            return self._insert_case(title, case_number.strip(), description, initial, now)

        for _ in range(CASE_NO_ATTEMPTS):
            try:
                return self._insert_case(
                    title, self._generate_case_no(now), description, initial, now
                )
            except ConflictError as e:
                logger.warning(f"Generated case number collided, retrying: {e.message}")
        raise ConflictError("Could not allocate a case number", field="case_number")

    def _insert_case(self, title, case_number, description, initial, now) -> Case:
        exists = self.db.query(Case.id).filter(Case.case_number == case_number).first()
        if exists:
            raise ConflictError(
                f"Case number {case_number} already exists", field="case_number", ref=case_number
            )

        c = Case(
            title=title.strip(),
            case_number=case_number,
            description=description,
            status=initial.value,
            created_at=now,
        )
        set_statement_timeout(self.db)
        self.db.add(c)
        try:
            self.db.commit()
        except IntegrityError as e:
            # a concurrent writer took the number between the check and the insert
            self.db.rollback()
            raise ConflictError(
                f"Case number {case_number} already exists", field="case_number", ref=case_number
            ) from e
        self.db.refresh(c)
        logger.info(f"Created case {c.id} ({c.case_number})")
        return c

    def get_case(self, case_id: str) -> Case:
        c = self.db.query(Case).filter(Case.id == case_id).first()
        if c is None:
            raise NotFoundError(f"Case {case_id} not found", field="case_id", ref=case_id)
        return c

    def list_cases(self, skip: int = 0, limit: Optional[int] = None) -> List[Case]:
        query = self.db.query(Case).order_by(Case.created_at.desc(), Case.id.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def update_status(self, case_id: str, new_status: str) -> Case:
        # any recognized status may follow any other
        status = parse_case_status(new_status)
        set_statement_timeout(self.db)
        c = self.get_case(case_id)
        c.status = status.value
        self.db.commit()
        self.db.refresh(c)
        logger.info(f"Case {case_id} status -> {status.value}")
        return c
