"""Resolve which board (scope + owner) a caller may read or write."""

from dataclasses import dataclass

from loguru import logger

from src.core.config import ADMIN_USER_IDS
from src.core.exceptions import PermissionDeniedError
from src.models import Scope

ANONYMOUS_USER = "anonymous"


@dataclass(frozen=True)
class Board:
    """Address of a sessions + scoreboard pool."""

    scope: Scope
    owner_id: str = ""


PUBLIC_BOARD = Board(scope=Scope.PUBLIC)


def is_signed_in(user_id: str | None) -> bool:
    return bool(user_id) and user_id != ANONYMOUS_USER


def is_admin(user_id: str | None) -> bool:
    return is_signed_in(user_id) and user_id in ADMIN_USER_IDS


def resolve_board(scope: Scope, user_id: str | None, *, for_write: bool = False) -> Board:
    """Return the board a caller addresses, or raise if they may not use it.

    Public boards are readable by everyone and writable by admins only.
    Private boards belong to, and are only reachable by, a signed-in identity.
    """
    if scope == Scope.PUBLIC:
        if for_write and not is_admin(user_id):
            logger.warning(f"Rejected public write from user {user_id!r}")
            raise PermissionDeniedError(
                message="Only administrators can modify the public board",
                details={"scope": scope.value},
            )
        return PUBLIC_BOARD

    if not is_signed_in(user_id) or user_id is None:
        raise PermissionDeniedError(
            message="Sign in to use a private board",
            details={"scope": scope.value},
        )
    return Board(scope=Scope.PRIVATE, owner_id=user_id)
