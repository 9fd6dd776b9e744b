"""Pytest configuration and shared fixtures."""

from collections.abc import Generator
from datetime import datetime

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from src.models import HistoryEntry, Scope
from src.schemas.sessions import SessionCreate
from src.schemas.settlement import PlayerEntryInput, SessionConfig
from src.schemas.stats import HistoryPoint
from src.services.access_service import PUBLIC_BOARD, Board


@pytest.fixture
def test_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(test_engine) -> Generator[Session, None, None]:
    """Create a database session for testing."""
    with Session(test_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def config() -> SessionConfig:
    """3000 chips per 300 CNY buy-in, i.e. 0.1 CNY per chip."""
    return SessionConfig(chips_per_entry=3000, cny_per_entry=300)


@pytest.fixture
def public_board() -> Board:
    return PUBLIC_BOARD


@pytest.fixture
def private_board() -> Board:
    return Board(scope=Scope.PRIVATE, owner_id="user-1")


@pytest.fixture
def canonical_history() -> list[HistoryPoint]:
    """Results +100, -50, -50, +200 on ascending dates."""
    return [
        HistoryPoint(session_id="1", date=datetime(2025, 1, 1), pnl=100.0),
        HistoryPoint(session_id="2", date=datetime(2025, 1, 8), pnl=-50.0),
        HistoryPoint(session_id="3", date=datetime(2025, 1, 15), pnl=-50.0),
        HistoryPoint(session_id="4", date=datetime(2025, 1, 22), pnl=200.0),
    ]


@pytest.fixture
def balanced_payload(config) -> SessionCreate:
    """Session where Alice wins 150, Bob loses 100 and Carol loses 50."""
    return SessionCreate(
        id="1735689600000",
        name="Friday game",
        date=datetime(2025, 1, 1, 20, 0),
        config=config,
        players=[
            PlayerEntryInput(name="Alice", entries=1, final_chips=4500),
            PlayerEntryInput(name="Bob", entries=2, final_chips=5000),
            PlayerEntryInput(name="Carol", entries=1, final_chips=2500),
        ],
    )


@pytest.fixture
def make_history_rows():
    """Factory for history rows; the i-th result of each player is session i."""

    def _make(board: Board, results: dict[str, list[float]]) -> list[HistoryEntry]:
        rows = []
        for name, pnls in results.items():
            for index, pnl in enumerate(pnls):
                rows.append(
                    HistoryEntry(
                        scope=board.scope,
                        owner_id=board.owner_id,
                        player_name=name,
                        session_id=str(index),
                        date=datetime(2025, 1, index + 1),
                        pnl=pnl,
                    )
                )
        return rows

    return _make
