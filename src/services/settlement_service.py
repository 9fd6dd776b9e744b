"""Session settlement: chip P&L, zero-sum correction and payment planning.

Everything here is pure: inputs are never mutated and every call returns new
objects, so the working session can be recomputed in full on each change.
"""

from collections.abc import Sequence
from uuid import uuid4

from loguru import logger

from src.core.constants import BALANCE_TOLERANCE
from src.schemas.settlement import PlayerBalance, PlayerResult, SessionConfig, Transfer


def normalize_entry(
    name: str,
    entries: float,
    final_chips: float,
    config: SessionConfig,
    player_id: int | str | None = None,
) -> PlayerResult:
    """Turn a player's buy-ins and final stack into a PlayerResult.

    Chip figures are rounded to whole chips; the currency P&L is computed from
    the unrounded chip difference so fractional buy-ins stay exact.
    """
    buy_in_chips = entries * config.chips_per_entry
    pnl_chips = final_chips - buy_in_chips
    pnl_cny = pnl_chips * config.cny_per_chip

    return PlayerResult(
        id=player_id if player_id is not None else uuid4().hex,
        name=name,
        entries=entries,
        total_buy_in_chips=round(buy_in_chips),
        final_chips=round(final_chips),
        pnl_chips=round(pnl_chips),
        pnl_cny=pnl_cny,
        adjusted_pnl_cny=pnl_cny,
    )


def adjust_discrepancy(players: Sequence[PlayerResult]) -> list[PlayerResult]:
    """Force the adjusted P&L of a session to sum to zero.

    A surplus (chips created from nothing) is clawed back from winners in
    proportion to their winnings; a shortfall (chips vanished) is refunded to
    losers in proportion to their losses. Nobody else is touched.
    """
    total_pnl = sum(p.pnl_cny for p in players)
    adjusted = [p.model_copy(update={"adjusted_pnl_cny": p.pnl_cny}) for p in players]

    if abs(total_pnl) < BALANCE_TOLERANCE:
        return adjusted

    magnitude = abs(total_pnl)
    if total_pnl > 0:
        selected = [p for p in adjusted if p.pnl_cny > 0]
        side = "winners"
    else:
        selected = [p for p in adjusted if p.pnl_cny < 0]
        side = "losers"

    selected_total = sum(abs(p.pnl_cny) for p in selected)
    if not selected_total:
        logger.warning(
            f"Session is off by {total_pnl:.2f} but has no {side} to absorb it; "
            + "leaving results unadjusted"
        )
        return adjusted

    # Surplus lowers winners, shortfall raises losers: both move toward zero
    direction = -1.0 if total_pnl > 0 else 1.0
    for player in selected:
        share = abs(player.pnl_cny) / selected_total
        player.adjusted_pnl_cny += direction * magnitude * share

    logger.debug(
        f"Spread discrepancy of {total_pnl:.2f} across {len(selected)} {side}"
    )
    return adjusted


def upsert_player(
    players: Sequence[PlayerResult], player: PlayerResult
) -> list[PlayerResult]:
    """Add a player to the working session, replacing one with the same name."""
    updated = list(players)
    for index, existing in enumerate(updated):
        if existing.name == player.name:
            updated[index] = player
            break
    else:
        updated.append(player)
    return adjust_discrepancy(updated)


def remove_player(
    players: Sequence[PlayerResult], player_id: int | str
) -> list[PlayerResult]:
    """Drop a player from the working session by id."""
    return adjust_discrepancy([p for p in players if p.id != player_id])


def calculate_transfers(balances: Sequence[PlayerBalance]) -> list[Transfer]:
    """Plan payments that settle every balance, largest amounts first.

    Greedy: the biggest remaining loser pays the biggest remaining winner as
    much as either side can take. An empty list means nothing is owed.
    """
    # Work on copies; the caller's balances stay as they were
    winners = sorted(
        (b.model_copy() for b in balances if b.pnl > 0),
        key=lambda b: b.pnl,
        reverse=True,
    )
    losers = sorted((b.model_copy() for b in balances if b.pnl < 0), key=lambda b: b.pnl)
    transfers: list[Transfer] = []

    wi = li = 0
    while wi < len(winners) and li < len(losers):
        winner, loser = winners[wi], losers[li]
        amount = min(winner.pnl, abs(loser.pnl))
        transfers.append(
            Transfer(from_player=loser.name, to_player=winner.name, amount=amount)
        )
        winner.pnl -= amount
        loser.pnl += amount
        if winner.pnl < BALANCE_TOLERANCE:
            wi += 1
        if abs(loser.pnl) < BALANCE_TOLERANCE:
            li += 1

    leftover = sum(b.pnl for b in winners[wi:]) + sum(b.pnl for b in losers[li:])
    if abs(leftover) >= BALANCE_TOLERANCE:
        logger.warning(
            f"Balances do not sum to zero; {leftover:.2f} left unsettled after "
            + f"{len(transfers)} transfers"
        )

    return transfers


def settle(players: Sequence[PlayerResult]) -> list[Transfer]:
    """Plan the payments for a working session from its adjusted P&L."""
    return calculate_transfers(
        [PlayerBalance(name=p.name, pnl=p.adjusted_pnl_cny) for p in players]
    )
