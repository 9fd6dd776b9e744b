"""Numeric constants shared by the settlement and scoring code."""

# Amounts closer than this to zero are treated as settled (one cent)
BALANCE_TOLERANCE = 0.01

# Surrogates used when a metric is infinite, so one player cannot
# collapse the normalization range of everyone else
SHARPE_CAP_POSITIVE = 10.0
SHARPE_CAP_NEGATIVE = -1.0
PROFIT_FACTOR_CAP = 20.0

# Composite score weights, must sum to 1.0
SCORE_WEIGHTS: dict[str, float] = {
    "sharpe": 0.25,
    "profit_factor": 0.20,
    "avg_pnl": 0.15,
    "win_rate": 0.15,
    "max_drawdown": 0.15,
    "total_sessions": 0.10,
}

# Dimensions where a lower value is better
INVERTED_DIMENSIONS = frozenset({"max_drawdown"})

# Final score = SCORE_FLOOR + raw * SCORE_SPAN, i.e. within [50, 99]
SCORE_FLOOR = 50.0
SCORE_SPAN = 49.0

# Value of a dimension when every player ties on it
TIED_DIMENSION_VALUE = 0.5

DEFAULT_SESSION_NAME = "Untitled session"
