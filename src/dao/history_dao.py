"""Data Access Object for scoreboard history entries."""

from sqlmodel import Session, col, select

from src.models import HistoryEntry, Scope


def get_board_history(session: Session, scope: Scope, owner_id: str) -> list[HistoryEntry]:
    """Get every history entry on a board in insertion order."""
    statement = (
        select(HistoryEntry)
        .where(HistoryEntry.scope == scope, HistoryEntry.owner_id == owner_id)
        .order_by(col(HistoryEntry.id))
    )
    return list(session.exec(statement).all())


def get_session_history(
    session: Session, session_id: str, scope: Scope, owner_id: str
) -> list[HistoryEntry]:
    """Get the history entries contributed by one session."""
    return list(
        session.exec(
            select(HistoryEntry).where(
                HistoryEntry.session_id == session_id,
                HistoryEntry.scope == scope,
                HistoryEntry.owner_id == owner_id,
            )
        ).all()
    )


def delete_session_history(
    session: Session, session_id: str, scope: Scope, owner_id: str
) -> int:
    """Retract every player's entry for a session. Returns the number removed."""
    entries = get_session_history(session, session_id, scope, owner_id)
    for entry in entries:
        session.delete(entry)
    session.flush()
    return len(entries)


def create_history_entries(
    session: Session, entries: list[HistoryEntry]
) -> list[HistoryEntry]:
    """Add history entries."""
    session.add_all(entries)
    session.flush()
    return entries
