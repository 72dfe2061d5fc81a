import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from config import DATABASE_URL
from services.errors import PersistenceError

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)


def init_db(bind=None) -> None:
    """Create the trips and items tables if they do not exist yet."""
    # Register the table models on SQLModel.metadata
    import models.trips  # noqa: F401
    import models.trip_items  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Run a block of writes all-or-nothing.

    Commits when the block finishes; on any failure the session is rolled
    back, and store-level failures surface as PersistenceError.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Store transaction failed: %s", e)
        raise PersistenceError("Database error") from e
    except Exception:
        session.rollback()
        raise
