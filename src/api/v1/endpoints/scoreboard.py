from fastapi import APIRouter
from loguru import logger

from src.api.deps import SessionDep, UserIdDep
from src.core.exceptions import PermissionDeniedError
from src.models import Scope
from src.schemas.errors import ErrorResponse
from src.schemas.scoreboard import (
    CommentaryResponse,
    ScoreboardResponse,
    SharedBoardRead,
    ShareCodeRequest,
)
from src.services.access_service import is_signed_in, resolve_board
from src.services.commentary_service import get_commentary, refresh_commentary
from src.services.scoreboard_service import (
    build_scoreboard,
    build_shared_scoreboard,
    get_share_code,
    set_share_code,
)

router = APIRouter()


@router.get("/", response_model=ScoreboardResponse)
def read_scoreboard(
    session: SessionDep,
    user_id: UserIdDep,
    scope: Scope = Scope.PUBLIC,
    sort_by: str = "score",
    descending: bool = True,
) -> ScoreboardResponse:
    """Recompute and return a board's scoreboard."""
    board = resolve_board(scope, user_id)
    players = build_scoreboard(session, board, sort_by, descending=descending)
    return ScoreboardResponse(scope=scope, sort_by=sort_by, players=players)


@router.get(
    "/shared/{access_code}",
    response_model=ScoreboardResponse,
    responses={404: {"model": ErrorResponse}},
)
def read_shared_scoreboard(
    access_code: str,
    session: SessionDep,
    sort_by: str = "score",
    descending: bool = True,
) -> ScoreboardResponse:
    """Read another player's private scoreboard through their share code."""
    logger.info("Shared scoreboard requested")
    players = build_shared_scoreboard(session, access_code, sort_by, descending=descending)
    return ScoreboardResponse(scope=Scope.PRIVATE, sort_by=sort_by, players=players)


def _require_owner(user_id: str | None) -> str:
    if not is_signed_in(user_id) or user_id is None:
        raise PermissionDeniedError(message="Sign in to share your board")
    return user_id


@router.get("/share", response_model=SharedBoardRead, responses={404: {"model": ErrorResponse}})
def read_share_code(session: SessionDep, user_id: UserIdDep) -> SharedBoardRead:
    """Return the caller's current share code."""
    board = get_share_code(session, _require_owner(user_id))
    return SharedBoardRead.model_validate(board, from_attributes=True)


@router.put("/share", response_model=SharedBoardRead, responses={409: {"model": ErrorResponse}})
def update_share_code(
    payload: ShareCodeRequest, session: SessionDep, user_id: UserIdDep
) -> SharedBoardRead:
    """Expose the caller's private board under an access code."""
    board = set_share_code(
        session, _require_owner(user_id), payload.access_code, payload.display_name
    )
    return SharedBoardRead.model_validate(board, from_attributes=True)


@router.get("/commentary", response_model=CommentaryResponse)
def read_commentary(
    session: SessionDep, user_id: UserIdDep, scope: Scope = Scope.PUBLIC
) -> CommentaryResponse:
    """Cached style commentary for a board."""
    board = resolve_board(scope, user_id)
    return CommentaryResponse(scope=scope, commentary=get_commentary(session, board))


@router.post(
    "/commentary",
    response_model=CommentaryResponse,
    responses={429: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def generate_commentary(
    session: SessionDep, user_id: UserIdDep, scope: Scope = Scope.PUBLIC
) -> CommentaryResponse:
    """Regenerate style commentary for a board's current scoreboard."""
    board = resolve_board(scope, user_id, for_write=True)
    logger.info(f"Generating commentary for {scope.value} board")
    return CommentaryResponse(scope=scope, commentary=refresh_commentary(session, board))
