"""Data Access Object for share codes and cached commentary."""

from sqlmodel import Session, col, select

from src.models import PlayerCommentary, Scope, SharedBoard


def get_shared_board_by_owner(session: Session, owner_id: str) -> SharedBoard | None:
    return session.get(SharedBoard, owner_id)


def get_shared_board_by_code(session: Session, access_code: str) -> SharedBoard | None:
    """Find the board exposed under an access code."""
    return session.exec(
        select(SharedBoard).where(SharedBoard.access_code == access_code)
    ).first()


def save_shared_board(session: Session, board: SharedBoard) -> SharedBoard:
    session.add(board)
    session.flush()
    return board


def get_commentary(session: Session, scope: Scope, owner_id: str) -> list[PlayerCommentary]:
    """Get cached commentary for a board."""
    return list(
        session.exec(
            select(PlayerCommentary)
            .where(PlayerCommentary.scope == scope, PlayerCommentary.owner_id == owner_id)
            .order_by(col(PlayerCommentary.player_name))
        ).all()
    )


def get_player_commentary(
    session: Session, scope: Scope, owner_id: str, player_name: str
) -> PlayerCommentary | None:
    return session.exec(
        select(PlayerCommentary).where(
            PlayerCommentary.scope == scope,
            PlayerCommentary.owner_id == owner_id,
            PlayerCommentary.player_name == player_name,
        )
    ).first()


def save_commentary(session: Session, commentary: PlayerCommentary) -> PlayerCommentary:
    session.add(commentary)
    return commentary
