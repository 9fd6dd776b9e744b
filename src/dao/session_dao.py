"""Data Access Object for stored session operations."""

from sqlmodel import Session, col, select

from src.models import GameSession, Scope


def get_session_by_id(session: Session, session_id: str) -> GameSession | None:
    """Get a stored session by ID."""
    return session.get(GameSession, session_id)


def list_sessions(session: Session, scope: Scope, owner_id: str) -> list[GameSession]:
    """Get all sessions on a board, newest first."""
    statement = (
        select(GameSession)
        .where(GameSession.scope == scope, GameSession.owner_id == owner_id)
        .order_by(col(GameSession.date).desc(), col(GameSession.id).desc())
    )
    return list(session.exec(statement).all())


def create_session(session: Session, game_session: GameSession) -> GameSession:
    """Create a new stored session together with its results."""
    session.add(game_session)
    session.flush()
    return game_session


def delete_session(session: Session, game_session: GameSession) -> None:
    """Delete a session; its results are removed by cascade."""
    session.delete(game_session)
    session.flush()
