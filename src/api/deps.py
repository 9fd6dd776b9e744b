from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header
from loguru import logger
from sqlmodel import Session

from src.core.db import engine


def get_session() -> Generator[Session, None, None]:
    """Provide a database session for dependency injection."""
    logger.debug("Creating database session")
    with Session(engine) as session:
        yield session
    logger.debug("Database session closed")


def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str | None:
    """Caller identity, as established by the fronting auth layer."""
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


SessionDep = Annotated[Session, Depends(get_session)]
UserIdDep = Annotated[str | None, Depends(get_user_id)]
