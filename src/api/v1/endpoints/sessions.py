"""
Sessions API endpoints.

Saving a session also records each player's result on the board's
scoreboard; deleting it retracts those results again.
"""

from fastapi import APIRouter, status
from loguru import logger

from src.api.deps import SessionDep, UserIdDep
from src.models import Scope
from src.schemas.errors import ErrorResponse
from src.schemas.sessions import SessionCreate, SessionRead, SessionSaveResponse
from src.services.access_service import resolve_board
from src.services.session_service import (
    delete_session,
    get_sessions,
    save_session,
    to_session_read,
)

router = APIRouter()


@router.get("/", response_model=list[SessionRead])
def read_sessions(
    session: SessionDep, user_id: UserIdDep, scope: Scope = Scope.PUBLIC
) -> list[SessionRead]:
    """List the sessions of a board, newest first."""
    board = resolve_board(scope, user_id)
    return [to_session_read(s) for s in get_sessions(session, board)]


@router.post(
    "/",
    response_model=SessionSaveResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_session(
    payload: SessionCreate,
    session: SessionDep,
    user_id: UserIdDep,
    scope: Scope = Scope.PRIVATE,
) -> SessionSaveResponse:
    """Save a session (or overwrite it when `id` is given)."""
    board = resolve_board(scope, user_id, for_write=True)
    logger.info(f"Saving session for {len(payload.players)} player(s) on {scope.value} board")
    result = save_session(session, payload, board)
    return SessionSaveResponse(
        session=to_session_read(result.session),
        players=result.players,
        transfers=result.transfers,
    )


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def remove_session(
    session_id: str,
    session: SessionDep,
    user_id: UserIdDep,
    scope: Scope = Scope.PRIVATE,
) -> None:
    """Delete a session and retract it from the scoreboard."""
    board = resolve_board(scope, user_id, for_write=True)
    logger.info(f"Deleting session {session_id} from {scope.value} board")
    delete_session(session, session_id, board)
