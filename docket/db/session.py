# docket/db/session.py
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker

from docket.core.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **kwargs):
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(url, connect_args=connect_args, **kwargs)
    if engine.dialect.name == "sqlite":
        # SQLite ignores ON DELETE RESTRICT unless asked per connection
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


engine = build_engine(settings.DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def set_statement_timeout(db: Session, timeout_ms: Optional[int] = None) -> None:
    """
    Bound every statement in the session's current transaction.
    PostgreSQL only; other dialects have no per-transaction equivalent.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    ms = int(timeout_ms if timeout_ms is not None else settings.DB_STATEMENT_TIMEOUT_MS)
    db.execute(text(f"SET LOCAL statement_timeout = {ms}"))
