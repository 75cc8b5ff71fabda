# backend/database.py
import logging
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from errors import ConfigurationError
from models import Base

logger = logging.getLogger(__name__)


class Datastore:
    """
    Owns the SQLAlchemy engine and session factory for one process.
    Built at application startup and disposed at shutdown.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url

        # For SQLite
        if database_url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # Share one connection so every session sees the same in-memory database
                self.engine = create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
            else:
                self.engine = create_engine(database_url, connect_args=connect_args)
        else:
            # For PostgreSQL and other servers
            self.engine = create_engine(database_url, pool_pre_ping=True)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self):
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self):
        self.engine.dispose()
        logger.info("Datastore connections closed")


def create_datastore(database_url: str) -> Optional[Datastore]:
    if not database_url:
        logger.warning("DATABASE_URL is empty. Datastore-backed routes are disabled.")
        return None
    datastore = Datastore(database_url)
    datastore.create_all()
    return datastore


def get_optional_db(request: Request) -> Iterator[Optional[Session]]:
    datastore = getattr(request.app.state, "datastore", None)
    if datastore is None:
        yield None
        return
    db = datastore.session()
    try:
        yield db
    finally:
        db.close()


def get_db(request: Request) -> Iterator[Session]:
    datastore = getattr(request.app.state, "datastore", None)
    if datastore is None:
        raise ConfigurationError("Database not configured")
    db = datastore.session()
    try:
        yield db
    finally:
        db.close()
