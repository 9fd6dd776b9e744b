"""Service for calculating player statistics and the composite ranking score."""

from collections.abc import Sequence
import math

from loguru import logger

from src.core.constants import (
    BALANCE_TOLERANCE,
    INVERTED_DIMENSIONS,
    PROFIT_FACTOR_CAP,
    SCORE_FLOOR,
    SCORE_SPAN,
    SCORE_WEIGHTS,
    SHARPE_CAP_NEGATIVE,
    SHARPE_CAP_POSITIVE,
    TIED_DIMENSION_VALUE,
)
from src.schemas.stats import HistoryPoint, PlayerStats


def _max_losing_streak(pnls: Sequence[float]) -> int:
    """Longest run of consecutive losses, in the order given."""
    streak = 0
    longest = 0
    for pnl in pnls:
        streak = streak + 1 if pnl < -BALANCE_TOLERANCE else 0
        longest = max(longest, streak)
    return longest


def _profit_factor(pnls: Sequence[float]) -> float:
    gross_profit = sum(p for p in pnls if p > 0)
    gross_loss = abs(sum(p for p in pnls if p < 0))
    if gross_loss == 0:
        return math.inf if gross_profit > 0 else 0.0
    return gross_profit / gross_loss


def _max_drawdown(history: Sequence[HistoryPoint]) -> float:
    """Largest drop of the cumulative P&L curve below its running peak.

    The curve starts at zero, so the peak is never below zero.
    """
    cumulative = 0.0
    peak = 0.0
    max_drawdown = 0.0
    for point in sorted(history, key=lambda h: h.date):
        cumulative += point.pnl
        peak = max(peak, cumulative)
        max_drawdown = max(max_drawdown, peak - cumulative)
    return max_drawdown


def calculate_metrics(name: str, history: Sequence[HistoryPoint]) -> PlayerStats:
    """Calculate a player's statistics from their session history.

    This calculates:
    - total_pnl / avg_pnl: sum and mean of per-session results
    - win_rate: percentage of sessions won by more than one cent
    - volatility: population standard deviation of results
    - sharpe: avg_pnl / volatility (0 when volatility is 0)
    - max_losing_streak: consecutive losses in the order given
    - profit_factor: gross profit / gross loss (inf if never lost)
    - max_drawdown: worst peak-to-trough drop of the date-ordered curve

    Args:
        name: Player name the history belongs to
        history: The player's results, in any order

    Returns:
        PlayerStats with score left at 0; see calculate_composite_scores
    """
    pnls = [h.pnl for h in history]
    n = len(pnls)
    if not n:
        return PlayerStats(name=name)

    total_pnl = sum(pnls)
    avg_pnl = total_pnl / n
    variance = sum((p - avg_pnl) ** 2 for p in pnls) / n
    volatility = math.sqrt(variance)
    wins = sum(1 for p in pnls if p > BALANCE_TOLERANCE)

    stats = PlayerStats(
        name=name,
        total_sessions=n,
        total_pnl=total_pnl,
        avg_pnl=avg_pnl,
        win_rate=wins / n * 100,
        volatility=volatility,
        sharpe=avg_pnl / volatility if volatility > 0 else 0.0,
        max_losing_streak=_max_losing_streak(pnls),
        profit_factor=_profit_factor(pnls),
        max_drawdown=_max_drawdown(history),
    )
    logger.debug(
        f"Metrics for {name}: sessions={n}, total={total_pnl:.2f}, "
        + f"sharpe={stats.sharpe:.3f}, drawdown={stats.max_drawdown:.2f}"
    )
    return stats


def _dimension_values(stats: PlayerStats) -> dict[str, float]:
    """Values fed to the normalizer, with infinities replaced by caps."""
    sharpe = stats.sharpe
    if not math.isfinite(sharpe):
        sharpe = SHARPE_CAP_POSITIVE if stats.avg_pnl > 0 else SHARPE_CAP_NEGATIVE

    profit_factor = stats.profit_factor
    if not math.isfinite(profit_factor):
        profit_factor = PROFIT_FACTOR_CAP

    return {
        "sharpe": sharpe,
        "profit_factor": profit_factor,
        "avg_pnl": stats.avg_pnl,
        "win_rate": stats.win_rate,
        "max_drawdown": stats.max_drawdown,
        "total_sessions": float(stats.total_sessions),
    }


def _normalize(value: float, low: float, high: float, *, invert: bool = False) -> float:
    if high == low:
        return TIED_DIMENSION_VALUE
    norm = (value - low) / (high - low)
    return 1 - norm if invert else norm


def calculate_composite_scores(stats: Sequence[PlayerStats]) -> list[PlayerStats]:
    """Score every player in [50, 99] relative to the rest of the population.

    Each weighted dimension is min-max normalized across the population, so a
    player's score moves whenever someone joins or leaves the board.
    """
    if not stats:
        return []

    values = [_dimension_values(s) for s in stats]
    ranges = {
        dim: (min(v[dim] for v in values), max(v[dim] for v in values))
        for dim in SCORE_WEIGHTS
    }

    scored: list[PlayerStats] = []
    for player, player_values in zip(stats, values, strict=True):
        raw = sum(
            weight
            * _normalize(
                player_values[dim],
                *ranges[dim],
                invert=dim in INVERTED_DIMENSIONS,
            )
            for dim, weight in SCORE_WEIGHTS.items()
        )
        # Float summation of the weights can overshoot 1.0 by an ulp
        raw = min(max(raw, 0.0), 1.0)
        scored.append(player.model_copy(update={"score": SCORE_FLOOR + raw * SCORE_SPAN}))

    logger.debug(f"Scored {len(scored)} players")
    return scored
