import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from tasktrack.config.settings import settings
from tasktrack.utils.errors import InternalFailureError

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=settings.get_connect_args()
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Required wherever a DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """Commit everything written inside the block as one transaction.

    Any exception rolls the session back so nothing written inside the block
    becomes visible. Persistence errors are surfaced as InternalFailureError;
    every other exception propagates unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction rolled back: {e}")
        raise InternalFailureError("Failed to persist changes") from e
    except Exception:
        db.rollback()
        raise
