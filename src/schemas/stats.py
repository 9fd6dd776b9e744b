"""Pydantic schemas for the statistics path."""

from datetime import datetime
import math

from pydantic import BaseModel, field_serializer


class HistoryPoint(BaseModel):
    """A player's adjusted result from one session."""

    session_id: str
    date: datetime
    pnl: float


class PlayerStats(BaseModel):
    """Derived per-player statistics. Recomputed on every read."""

    name: str
    total_sessions: int = 0
    total_pnl: float = 0.0
    avg_pnl: float = 0.0
    win_rate: float = 0.0
    volatility: float = 0.0
    sharpe: float = 0.0
    max_losing_streak: int = 0
    profit_factor: float = 0.0
    max_drawdown: float = 0.0
    score: float = 0.0

    @field_serializer("sharpe", "profit_factor")
    def _finite_or_none(self, value: float) -> float | None:
        # JSON has no infinity; a player who never lost gets null
        return value if math.isfinite(value) else None
