# docket/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docket.api.api_router import api_router
from docket.core.errors import DocketError
from docket.core.logging import configure_logging
from docket.db.init_db import init_db

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Docket Case Registry", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.exception_handler(DocketError)
async def docket_error_handler(request: Request, exc: DocketError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message} (ref={exc.ref})")
    else:
        logger.info(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.get("/health", tags=["health"])
def health_check():
    return {"status": "healthy", "service": "docket", "version": "0.1.0"}


@app.on_event("startup")
def on_startup():
    logging.info("Starting up: initializing DB...")
    init_db()
    logging.info("Startup complete")
