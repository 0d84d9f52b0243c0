"""Greedy, priority-ordered assignment of roster players to lineup slots."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence

from lineuprx.config.slots import FILL_ORDER, Slot, current_slot, slot_accepts, slot_capacity
from lineuprx.ingest.projections import points_or_zero
from lineuprx.models import RosterPlayer


logger = logging.getLogger(__name__)

OptimalLineup = Dict[Slot, List[RosterPlayer]]


def sort_by_projection(
    roster: Sequence[RosterPlayer],
    projections: Mapping[str, float],
) -> List[RosterPlayer]:
    """Highest projection first; ties keep roster order."""

    return sorted(roster, key=lambda player: points_or_zero(player, projections), reverse=True)


def assign_optimal_lineup(
    roster: Sequence[RosterPlayer],
    projections: Mapping[str, float],
    requirements: Mapping[Slot, int],
) -> OptimalLineup:
    """Fill lineup slots to maximize projected points.

    Standard positions are locked first (QB, RB, WR, TE, K, DEF), then the
    flex families in the order SUPER_FLEX, FLEX, WRRB_FLEX, REC_FLEX. Each
    slot takes the highest projected eligible players left in the pool.
    Whatever remains is placed on BENCH. Players with no projection are still
    eligible and sort last.
    """

    pool = sort_by_projection(roster, projections)
    lineup: OptimalLineup = {}

    for slot in FILL_ORDER:
        count = requirements.get(slot, 0)
        if count <= 0:
            continue
        chosen: List[RosterPlayer] = []
        for player in pool:
            if len(chosen) >= count:
                break
            if slot_accepts(slot, player.position):
                chosen.append(player)
        if len(chosen) < count:
            logger.debug("Slot %s filled %s of %s", slot.value, len(chosen), count)
        lineup[slot] = chosen
        chosen_ids = {player.player_id for player in chosen}
        pool = [player for player in pool if player.player_id not in chosen_ids]

    lineup[Slot.BENCH] = pool
    return lineup


def align_with_current_lineup(
    lineup: Mapping[Slot, Sequence[RosterPlayer]],
    roster: Sequence[RosterPlayer],
    requirements: Mapping[Slot, int],
) -> OptimalLineup:
    """Swap equally valid placements so current starters keep their slots.

    If a starter the optimizer keeps was put in slot A while still sitting in
    slot B, and slot B went to someone who can legally play A, the two trade
    places. If slot B was left with room instead, the starter simply stays in
    B. The set of starters and the point total are unchanged; the move chains
    just get shorter.
    """

    aligned: OptimalLineup = {slot: list(players) for slot, players in lineup.items()}
    held = {player.player_id: current_slot(player) for player in roster}

    def placed_slot(player: RosterPlayer) -> Slot:
        for slot, players in aligned.items():
            if any(p.player_id == player.player_id for p in players):
                return slot
        return Slot.BENCH

    swapped = True
    while swapped:
        swapped = False
        for player in roster:
            here = held.get(player.player_id)
            assigned = placed_slot(player)
            if here in (None, Slot.BENCH) or assigned is Slot.BENCH or assigned is here:
                continue
            if here not in aligned or not slot_accepts(here, player.position):
                continue
            partner = next(
                (
                    other
                    for other in aligned[here]
                    if held.get(other.player_id) is not here and slot_accepts(assigned, other.position)
                ),
                None,
            )
            if partner is None:
                if len(aligned[here]) < slot_capacity(requirements, here):
                    aligned[assigned] = [p for p in aligned[assigned] if p.player_id != player.player_id]
                    aligned[here].append(player)
                    logger.debug("Kept %s at %s; %s left open", player.name, here.value, assigned.value)
                    swapped = True
                continue
            aligned[here] = [player if p.player_id == partner.player_id else p for p in aligned[here]]
            aligned[assigned] = [partner if p.player_id == player.player_id else p for p in aligned[assigned]]
            logger.debug("Kept %s at %s; %s moves to %s", player.name, here.value, partner.name, assigned.value)
            swapped = True
    return aligned


def optimal_slot_lookup(lineup: Mapping[Slot, Sequence[RosterPlayer]]) -> Dict[str, Slot]:
    """Map player id to the slot the optimizer assigned them."""

    lookup: Dict[str, Slot] = {}
    for slot, players in lineup.items():
        for player in players:
            lookup[player.player_id] = slot
    return lookup


def starters_of(lineup: Mapping[Slot, Sequence[RosterPlayer]]) -> List[RosterPlayer]:
    return [player for slot, players in lineup.items() if slot is not Slot.BENCH for player in players]


def lineup_points(lineup: Mapping[Slot, Sequence[RosterPlayer]], projections: Mapping[str, float]) -> float:
    return sum(points_or_zero(player, projections) for player in starters_of(lineup))
