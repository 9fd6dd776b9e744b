"""Pydantic schemas for the settlement path (entries, results, transfers)."""

from pydantic import BaseModel, ConfigDict, Field

from src.core.config import DEFAULT_CHIPS_PER_ENTRY, DEFAULT_CNY_PER_ENTRY


class SessionConfig(BaseModel):
    """Chip/currency terms of a session."""

    model_config = ConfigDict(frozen=True)

    chips_per_entry: float = Field(
        default=DEFAULT_CHIPS_PER_ENTRY, gt=0, allow_inf_nan=False
    )
    cny_per_entry: float = Field(default=DEFAULT_CNY_PER_ENTRY, gt=0, allow_inf_nan=False)

    @property
    def cny_per_chip(self) -> float:
        """Exchange rate applied to chip P&L."""
        return self.cny_per_entry / self.chips_per_entry


class PlayerEntryInput(BaseModel):
    """Raw per-player input as typed into the session form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    entries: float = Field(ge=0, allow_inf_nan=False)
    final_chips: float = Field(ge=0, allow_inf_nan=False)


class PlayerResult(BaseModel):
    """One player's outcome within a working session."""

    id: int | str
    name: str
    entries: float
    total_buy_in_chips: int
    final_chips: int
    pnl_chips: int
    pnl_cny: float
    adjusted_pnl_cny: float


class PlayerBalance(BaseModel):
    """Net amount a player is owed (positive) or owes (negative)."""

    name: str
    pnl: float = Field(allow_inf_nan=False)


class Transfer(BaseModel):
    """A single payment from a losing player to a winning player."""

    model_config = ConfigDict(populate_by_name=True)

    from_player: str = Field(alias="from")
    to_player: str = Field(alias="to")
    amount: float


class SettlementPreviewRequest(BaseModel):
    config: SessionConfig = Field(default_factory=SessionConfig)
    players: list[PlayerEntryInput] = Field(default_factory=list)


class SettlementPreviewResponse(BaseModel):
    players: list[PlayerResult]
    transfers: list[Transfer]
    raw_total_cny: float
    adjusted_total_cny: float


class TransfersRequest(BaseModel):
    balances: list[PlayerBalance]
