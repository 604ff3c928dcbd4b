# docket/api/v1/stats.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docket.core.dependencies import get_db, require_user
from docket.schemas.stats import StatsOut
from docket.services.stats_service import StatsService

router = APIRouter()


@router.get("", response_model=StatsOut)
def get_stats(db: Session = Depends(get_db), _=Depends(require_user)):
    return StatsService(db).snapshot()
