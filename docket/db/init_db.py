# docket/db/init_db.py
import logging

from docket.db.base import Base
from docket.db.session import engine

logger = logging.getLogger(__name__)


def init_db(bind=None):
    # Create all tables if not exist
    from docket import models  # noqa: F401  registers the mappers
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created/verified")
