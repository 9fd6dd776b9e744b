"""Build scoreboards from stored history and manage share codes.

Every read recomputes the whole board from its history entries; no derived
statistic is stored.
"""

from collections.abc import Iterable

from loguru import logger
from sqlmodel import Session

from src.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.dao.board_dao import (
    get_shared_board_by_code,
    get_shared_board_by_owner,
    save_shared_board,
)
from src.dao.history_dao import get_board_history
from src.models import HistoryEntry, Scope, SharedBoard
from src.schemas.stats import HistoryPoint, PlayerStats
from src.services.access_service import Board
from src.services.player_stats_service import (
    calculate_composite_scores,
    calculate_metrics,
)

SORTABLE_FIELDS = frozenset(PlayerStats.model_fields)


def group_history(rows: Iterable[HistoryEntry]) -> dict[str, list[HistoryPoint]]:
    """Group history rows by exact player name, keeping storage order."""
    grouped: dict[str, list[HistoryPoint]] = {}
    for row in rows:
        grouped.setdefault(row.player_name, []).append(
            HistoryPoint(session_id=row.session_id, date=row.date, pnl=row.pnl)
        )
    return grouped


def compute_scoreboard(rows: Iterable[HistoryEntry]) -> list[PlayerStats]:
    """Metrics for every player, then scores relative to the whole pool."""
    grouped = group_history(rows)
    stats = [calculate_metrics(name, history) for name, history in grouped.items()]
    return calculate_composite_scores(stats)


def sort_scoreboard(
    stats: list[PlayerStats], sort_by: str = "score", *, descending: bool = True
) -> list[PlayerStats]:
    """Order a scoreboard by any PlayerStats field."""
    if sort_by not in SORTABLE_FIELDS:
        raise ValidationError(
            message=f"Cannot sort scoreboard by {sort_by!r}",
            details={"sort_by": sort_by, "allowed": sorted(SORTABLE_FIELDS)},
        )
    return sorted(stats, key=lambda s: getattr(s, sort_by), reverse=descending)


def build_scoreboard(
    session: Session,
    board: Board,
    sort_by: str = "score",
    *,
    descending: bool = True,
) -> list[PlayerStats]:
    """Recompute the scoreboard of a board from all of its history."""
    rows = get_board_history(session, board.scope, board.owner_id)
    stats = compute_scoreboard(rows)
    logger.info(
        f"Built {board.scope.value} scoreboard: {len(stats)} players "
        + f"from {len(rows)} history entries"
    )
    return sort_scoreboard(stats, sort_by, descending=descending)


def resolve_share_code(session: Session, access_code: str) -> Board:
    """Find the private board exposed under an access code."""
    shared = get_shared_board_by_code(session, access_code)
    if shared is None:
        raise NotFoundError(
            message="No board is shared under this code",
            details={"access_code": access_code},
        )
    return Board(scope=Scope.PRIVATE, owner_id=shared.owner_id)


def build_shared_scoreboard(
    session: Session,
    access_code: str,
    sort_by: str = "score",
    *,
    descending: bool = True,
) -> list[PlayerStats]:
    """Scoreboard of another identity's private board, read through a share code."""
    board = resolve_share_code(session, access_code)
    return build_scoreboard(session, board, sort_by, descending=descending)


def set_share_code(
    session: Session, owner_id: str, access_code: str, display_name: str = ""
) -> SharedBoard:
    """Create or change the access code for an owner's private board."""
    taken = get_shared_board_by_code(session, access_code)
    if taken is not None and taken.owner_id != owner_id:
        raise ConflictError(
            message="Access code is already in use",
            details={"access_code": access_code},
        )

    board = get_shared_board_by_owner(session, owner_id)
    if board is None:
        board = SharedBoard(owner_id=owner_id, access_code=access_code)
    board.access_code = access_code
    board.display_name = display_name
    save_shared_board(session, board)
    session.commit()
    session.refresh(board)
    logger.success(f"Share code updated for {owner_id}")
    return board


def get_share_code(session: Session, owner_id: str) -> SharedBoard:
    board = get_shared_board_by_owner(session, owner_id)
    if board is None:
        raise NotFoundError(message="Board is not shared", details={"owner_id": owner_id})
    return board
