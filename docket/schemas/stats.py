# docket/schemas/stats.py
from pydantic import BaseModel


class StatsOut(BaseModel):
    total_cases: int
    active_cases: int
    total_documents: int
    recent_documents: int
