import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings
from .errors import StoreConflict, TimeTrackerError

settings = get_settings()
logger = logging.getLogger(__name__)

engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, action: str):
    """Commit everything written inside the block, or nothing at all."""
    try:
        yield db
        db.commit()
    except TimeTrackerError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store write failed while trying to %s", action)
        raise StoreConflict(f"Could not {action}; no changes were saved") from exc
