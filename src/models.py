"""SQLModel data models for the chip ledger service."""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, Relationship, SQLModel, UniqueConstraint  # type: ignore


class UTCTimestamp(TypeDecorator[datetime]):
    """Timezone-aware UTC timestamp on every backend.

    Naive values are taken to be UTC already. SQLite drops the offset on
    storage, so results are tagged with UTC again on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:  # type: ignore[override]
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:  # type: ignore[override]
        return self.process_bind_param(value, dialect)


class Scope(str, Enum):
    """Visibility scope of a board (sessions + scoreboard history)."""

    PUBLIC = "public"
    PRIVATE = "private"


class GameSession(SQLModel, table=True):
    """A finalized poker session. Only adjusted results are kept."""

    id: str = Field(primary_key=True, description="Millisecond timestamp string")
    scope: Scope = Field(index=True)
    # Empty for the public pool, the owning identity otherwise
    owner_id: str = Field(default="", index=True)
    date: datetime = Field(sa_type=UTCTimestamp, index=True)
    name: str
    chips_per_entry: float
    cny_per_entry: float

    results: list["SessionResult"] = Relationship(  # type: ignore
        back_populates="game_session",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class SessionResult(SQLModel, table=True):
    """One player's adjusted result inside a stored session."""

    id: int | None = Field(default=None, primary_key=True)
    session_id: str = Field(foreign_key="gamesession.id", index=True)
    name: str
    pnl_cny: float

    game_session: GameSession = Relationship(back_populates="results")  # type: ignore


class HistoryEntry(SQLModel, table=True):
    """One player's adjusted result from one session, on one board."""

    __table_args__ = (
        UniqueConstraint(
            "scope", "owner_id", "player_name", "session_id", name="uq_history_entry"
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    scope: Scope = Field(index=True)
    owner_id: str = Field(default="", index=True)
    player_name: str = Field(index=True)
    session_id: str = Field(index=True)
    date: datetime = Field(sa_type=UTCTimestamp)
    pnl: float


class SharedBoard(SQLModel, table=True):
    """Access code that exposes an identity's private board read-only."""

    owner_id: str = Field(primary_key=True)
    access_code: str = Field(index=True, unique=True)
    display_name: str = ""


class PlayerCommentary(SQLModel, table=True):
    """Cached style commentary for a player on a board."""

    __table_args__ = (
        UniqueConstraint(
            "scope", "owner_id", "player_name", name="uq_player_commentary"
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    scope: Scope = Field(index=True)
    owner_id: str = Field(default="", index=True)
    player_name: str
    text: str
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), sa_type=UTCTimestamp
    )
