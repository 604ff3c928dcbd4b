# docket/api/api_router.py
from fastapi import APIRouter

from docket.api.v1 import cases, documents, stats

api_router = APIRouter()
api_router.include_router(cases.router, prefix="/v1/cases", tags=["cases"])
api_router.include_router(documents.router, prefix="/v1/documents", tags=["documents"])
api_router.include_router(stats.router, prefix="/v1/stats", tags=["stats"])
