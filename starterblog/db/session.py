from datetime import datetime, timezone
from typing import Generator
import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger("app")

# Base class for all SQLAlchemy models
Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _engine_options(database_url: str) -> dict:
    if not database_url.startswith("sqlite"):
        return {
            "pool_pre_ping": True,  # Check connection before using from pool
            "pool_recycle": 3600,   # Recycle connections after 1 hour
        }
    options = {"connect_args": {"check_same_thread": False}}
    # In-memory databases only live as long as their single connection
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


class Database:
    """Owns the engine and session factory for the lifetime of the app."""

    def __init__(self, database_url: str):
        if not database_url:
            logger.error("DATABASE_URL is not set or empty!")
            raise ValueError("DATABASE_URL environment variable is required")

        self.engine: Engine = create_engine(database_url, **_engine_options(database_url))
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info("Database engine created successfully")

    def check_connection(self) -> None:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


# Database session dependency for FastAPI
def get_db(request: Request) -> Generator:
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
