from typing import Any

from loguru import logger
from sqlmodel import SQLModel, create_engine

from src.core.config import DATABASE_ECHO, DATABASE_URL


def normalize_database_url(url: str) -> str:
    """Point PostgreSQL URLs at the psycopg (v3) driver.

    SQLAlchemy rejects the bare ``postgres://`` scheme and would pick psycopg2
    for ``postgresql://``. Other backends pass through untouched.
    """
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def engine_options(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # Request handlers run in a threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


database_url = normalize_database_url(DATABASE_URL)
logger.info(f"Initializing database engine at {database_url.rsplit('@', 1)[-1]}")
engine = create_engine(database_url, echo=DATABASE_ECHO, **engine_options(database_url))


def create_db_and_tables() -> None:
    """Create the session, history, share code and commentary tables."""
    # Registers the table classes on the metadata
    import src.models  # noqa: F401, PLC0415

    logger.info("Creating database tables from SQLModel metadata...")
    SQLModel.metadata.create_all(engine)
    logger.success("Database tables created successfully")
