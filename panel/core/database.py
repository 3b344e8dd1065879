"""PostgreSQL connection, session management and transaction boundaries."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from panel.core.config import settings
from panel.core.exceptions import ConflictError, StoreError

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run the enclosed reads and writes as one unit: commit on success, roll back on any error.

    Unique-constraint violations become ConflictError; other SQLAlchemy errors become
    StoreError. Domain errors raised inside the block propagate unchanged after rollback.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Transaction rolled back on integrity error: %s", e.orig)
        raise ConflictError("Username or email already exists.") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Transaction failed in the store")
        raise StoreError(f"Store failure: {e.__class__.__name__}") from e
    except BaseException:
        db.rollback()
        raise
