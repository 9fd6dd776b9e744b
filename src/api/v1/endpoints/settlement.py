"""
Settlement API endpoints.

Stateless calculations for the working session: nothing is stored, the
caller sends the full player list on every change.
"""

from fastapi import APIRouter
from loguru import logger

from src.schemas.settlement import (
    SettlementPreviewRequest,
    SettlementPreviewResponse,
    Transfer,
    TransfersRequest,
)
from src.services.settlement_service import (
    calculate_transfers,
    normalize_entry,
    settle,
    upsert_player,
)

router = APIRouter()


@router.post("/preview", response_model=SettlementPreviewResponse)
def preview_settlement(payload: SettlementPreviewRequest) -> SettlementPreviewResponse:
    """Compute adjusted results and transfers for a working session."""
    logger.info(f"Settlement preview for {len(payload.players)} player(s)")
    players = []
    for entry in payload.players:
        result = normalize_entry(entry.name, entry.entries, entry.final_chips, payload.config)
        players = upsert_player(players, result)

    return SettlementPreviewResponse(
        players=players,
        transfers=settle(players),
        raw_total_cny=sum(p.pnl_cny for p in players),
        adjusted_total_cny=sum(p.adjusted_pnl_cny for p in players),
    )


@router.post("/transfers", response_model=list[Transfer])
def plan_transfers(payload: TransfersRequest) -> list[Transfer]:
    """Plan payments for already-balanced amounts."""
    logger.info(f"Planning transfers for {len(payload.balances)} balance(s)")
    return calculate_transfers(payload.balances)
