import logging
from fastapi import HTTPException
from sqlmodel import SQLModel, Session, create_engine

from stoper.config import get_settings
from stoper.error import StoperError

logger = logging.getLogger(__name__)


def _make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = _make_engine(get_settings().database_url)


def create_db_and_tables() -> None:
    SQLModel.metadata.create_all(engine)


def get_session():
    session = Session(engine)
    try:
        yield session
    except (HTTPException, StoperError):
        # business / auth errors: the gateway already rolled back what it touched
        raise
    except Exception as e:
        session.rollback()
        logger.exception("rollback: %s", type(e).__name__)
        raise
    finally:
        session.close()
