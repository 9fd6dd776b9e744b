"""Storing and retracting sessions together with their scoreboard history.

A session and the history entries it contributes are always written and
removed in the same transaction, so each player holds at most one entry per
session on a board.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
import time

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.core.constants import DEFAULT_SESSION_NAME
from src.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.dao.history_dao import create_history_entries, delete_session_history
from src.dao.session_dao import create_session, get_session_by_id, list_sessions
from src.dao.session_dao import delete_session as delete_session_row
from src.models import GameSession, HistoryEntry, SessionResult
from src.schemas.sessions import SessionCreate, SessionRead, SessionResultRead
from src.schemas.settlement import PlayerResult, SessionConfig, Transfer
from src.services.access_service import Board
from src.services.settlement_service import normalize_entry, settle, upsert_player


@dataclass
class SessionSaveResult:
    """Outcome of saving a session."""

    session: GameSession
    players: list[PlayerResult]
    transfers: list[Transfer]


def new_session_id() -> str:
    """Time-derived session ID (milliseconds since the epoch)."""
    return str(time.time_ns() // 1_000_000)


def allocate_session_id(session: Session) -> str:
    """A time-derived ID not used by any stored session.

    Two saves in the same millisecond get consecutive IDs instead of the
    second one overwriting the first.
    """
    session_id = new_session_id()
    while get_session_by_id(session, session_id) is not None:
        session_id = str(int(session_id) + 1)
    return session_id


def _as_utc(value: datetime) -> datetime:
    # Naive input is taken to be UTC already
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def build_results(payload: SessionCreate) -> list[PlayerResult]:
    """Normalize and adjust the players of a session payload.

    A name that appears twice keeps its last entry, like re-adding a player
    to the working session.
    """
    players: list[PlayerResult] = []
    for entry in payload.players:
        result = normalize_entry(entry.name, entry.entries, entry.final_chips, payload.config)
        players = upsert_player(players, result)
    return players


def _check_board(game_session: GameSession, board: Board) -> None:
    if game_session.scope != board.scope or game_session.owner_id != board.owner_id:
        raise ConflictError(
            message=f"Session {game_session.id} belongs to another board",
            details={"session_id": game_session.id},
        )


def save_session(session: Session, payload: SessionCreate, board: Board) -> SessionSaveResult:
    """Save a session and replace its history entries on the board.

    Re-saving with an existing ID overwrites the session and swaps its history
    entries for the new ones; it never adds a second entry for a player.
    """
    if not payload.players:
        raise ValidationError(message="A session needs at least one player")

    players = build_results(payload)
    session_id = payload.id or allocate_session_id(session)
    date = _as_utc(payload.date or datetime.now(UTC))
    name = payload.name.strip() or DEFAULT_SESSION_NAME
    results = [SessionResult(name=p.name, pnl_cny=p.adjusted_pnl_cny) for p in players]

    try:
        game_session = get_session_by_id(session, session_id)
        if game_session is None:
            game_session = create_session(
                session,
                GameSession(
                    id=session_id,
                    scope=board.scope,
                    owner_id=board.owner_id,
                    date=date,
                    name=name,
                    chips_per_entry=payload.config.chips_per_entry,
                    cny_per_entry=payload.config.cny_per_entry,
                    results=results,
                ),
            )
        else:
            _check_board(game_session, board)
            logger.info(f"Overwriting existing session {session_id}")
            game_session.date = date
            game_session.name = name
            game_session.chips_per_entry = payload.config.chips_per_entry
            game_session.cny_per_entry = payload.config.cny_per_entry
            game_session.results.clear()
            game_session.results.extend(results)
            session.add(game_session)

        removed = delete_session_history(session, session_id, board.scope, board.owner_id)
        create_history_entries(
            session,
            [
                HistoryEntry(
                    scope=board.scope,
                    owner_id=board.owner_id,
                    player_name=p.name,
                    session_id=session_id,
                    date=date,
                    pnl=p.adjusted_pnl_cny,
                )
                for p in players
            ],
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to save session {session_id}: {e!s}")
        raise

    session.refresh(game_session)
    logger.success(
        f"Saved session {session_id} ({len(players)} players, "
        + f"{removed} previous history entries replaced)"
    )
    return SessionSaveResult(session=game_session, players=players, transfers=settle(players))


def delete_session(session: Session, session_id: str, board: Board) -> None:
    """Delete a session and retract its history entry from every player."""
    game_session = get_session_by_id(session, session_id)
    if game_session is None or (
        game_session.scope != board.scope or game_session.owner_id != board.owner_id
    ):
        raise NotFoundError(
            message=f"Session {session_id} not found",
            details={"session_id": session_id},
        )

    try:
        removed = delete_session_history(session, session_id, board.scope, board.owner_id)
        delete_session_row(session, game_session)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to delete session {session_id}: {e!s}")
        raise

    logger.success(f"Deleted session {session_id}, retracted {removed} history entries")


def get_sessions(session: Session, board: Board) -> list[GameSession]:
    """List the sessions on a board, newest first."""
    sessions = list_sessions(session, board.scope, board.owner_id)
    logger.debug(f"Found {len(sessions)} sessions on {board.scope.value} board")
    return sessions


def to_session_read(game_session: GameSession) -> SessionRead:
    return SessionRead(
        id=game_session.id,
        scope=game_session.scope,
        date=game_session.date,
        name=game_session.name,
        config=SessionConfig(
            chips_per_entry=game_session.chips_per_entry,
            cny_per_entry=game_session.cny_per_entry,
        ),
        results=[
            SessionResultRead(name=r.name, pnl_cny=r.pnl_cny)
            for r in sorted(game_session.results, key=lambda r: r.id or 0)
        ],
    )
