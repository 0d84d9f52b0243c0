"""Turn the optimal lineup into ordered, executable move chains.

Starting a bench player usually means displacing whoever holds that player's
target slot, and the displaced starter may in turn need a slot that is also
occupied. Each bench player the optimizer wants to start is traced through
the current slot occupancy until a slot with room (or a starter headed to the
bench) is found. Traces that touch the same slots are merged into a single
chain whose steps can be executed top to bottom without double-booking a slot:
benches first, then repositions, then starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from lineuprx.config.slots import Slot, current_slot, slot_capacity
from lineuprx.ingest.projections import points_or_zero, projection_for
from lineuprx.models import RosterPlayer
from lineuprx.optimizer.assigner import optimal_slot_lookup, sort_by_projection


logger = logging.getLogger(__name__)

STEP_BENCH = "bench"
STEP_REPOSITION = "reposition"
STEP_START = "start"


@dataclass(frozen=True)
class MoveStep:
    player: RosterPlayer
    from_slot: Slot
    to_slot: Slot
    projection: Optional[float]
    reason: str
    kind: str


@dataclass(frozen=True)
class MoveChain:
    steps: Tuple[MoveStep, ...]
    net_improvement: float
    benched_players: Tuple[RosterPlayer, ...]
    started_players: Tuple[RosterPlayer, ...]
    primary_player: Optional[RosterPlayer]
    primary_slot: Optional[Slot]

    @property
    def repositioned_players(self) -> Tuple[RosterPlayer, ...]:
        return tuple(step.player for step in self.steps if step.kind == STEP_REPOSITION)


@dataclass(frozen=True)
class LineupChange:
    player_out: Optional[RosterPlayer]
    player_in: RosterPlayer
    position: Slot
    projected_points_out: float
    projected_points_in: float
    improvement: float
    chain: MoveChain

    @property
    def reason(self) -> str:
        return f"Projected +{self.improvement:.1f} pts"


@dataclass(frozen=True)
class _Move:
    player: RosterPlayer
    from_slot: Slot
    to_slot: Slot


@dataclass(frozen=True)
class _Path:
    candidate: RosterPlayer
    target: Slot
    moves: Tuple[_Move, ...]

    def slots(self) -> Set[Slot]:
        touched = {self.target}
        for move in self.moves:
            touched.add(move.from_slot)
            touched.add(move.to_slot)
        touched.discard(Slot.BENCH)
        return touched


Occupancy = Dict[Slot, List[RosterPlayer]]


def current_occupancy(roster: Sequence[RosterPlayer]) -> Occupancy:
    """Group current starters by normalized slot (RB1/RB2 both land in RB)."""

    occupancy: Occupancy = {}
    for player in roster:
        slot = current_slot(player)
        if slot is None:
            logger.debug("Starter %s holds an unsupported slot %r", player.name, player.lineup_slot)
            continue
        if slot is Slot.BENCH:
            continue
        occupancy.setdefault(slot, []).append(player)
    return occupancy


def trace_displacement(
    target: Slot,
    occupancy: Mapping[Slot, Sequence[RosterPlayer]],
    optimal_slots: Mapping[str, Slot],
    requirements: Mapping[Slot, int],
) -> Optional[List[_Move]]:
    """Walk from ``target`` through occupied slots until one has room.

    Returns the occupant moves needed to open ``target``, or ``None`` when the
    trace is blocked (every occupant already sits in its optimal slot) or
    revisits a slot.
    """

    moves: List[_Move] = []
    visited: Set[Slot] = set()
    slot = target
    while True:
        if slot in visited:
            logger.warning("Displacement cycle at %s while opening %s; skipping", slot.value, target.value)
            return None
        visited.add(slot)

        occupants = list(occupancy.get(slot, ()))
        if len(occupants) < slot_capacity(requirements, slot):
            return moves

        movable = [p for p in occupants if optimal_slots.get(p.player_id, Slot.BENCH) is not slot]
        if not movable:
            logger.debug("Slot %s is held by optimal starters; cannot open %s", slot.value, target.value)
            return None
        bench_bound = [p for p in movable if optimal_slots.get(p.player_id, Slot.BENCH) is Slot.BENCH]
        occupant = (bench_bound or movable)[0]
        destination = optimal_slots.get(occupant.player_id, Slot.BENCH)
        moves.append(_Move(occupant, slot, destination))
        if destination is Slot.BENCH:
            return moves
        slot = destination


def _apply_path(occupancy: Occupancy, path: _Path) -> None:
    for move in path.moves:
        occupancy[move.from_slot] = [p for p in occupancy.get(move.from_slot, []) if p.player_id != move.player.player_id]
        if move.to_slot is not Slot.BENCH:
            occupancy.setdefault(move.to_slot, []).append(move.player)
    occupancy.setdefault(path.target, []).append(path.candidate)


def _group_paths(paths: Sequence[_Path]) -> List[List[_Path]]:
    """Merge paths that share a starting slot; keep first-seen order."""

    groups: List[Tuple[Set[Slot], List[_Path]]] = []
    for path in paths:
        touched = path.slots()
        overlapping = [group for group in groups if group[0] & touched]
        if not overlapping:
            groups.append((set(touched), [path]))
            continue
        keeper = overlapping[0]
        keeper[0].update(touched)
        keeper[1].append(path)
        for other in overlapping[1:]:
            keeper[0].update(other[0])
            keeper[1].extend(other[1])
            groups.remove(other)
    return [sorted(members, key=paths.index) for _, members in groups]


def _order_repositions(
    repositions: Sequence[_Move],
    counts: Dict[Slot, int],
    requirements: Mapping[Slot, int],
) -> List[_Move]:
    """Emit each reposition once its destination has room.

    Among moves that are ready, one leaving SUPER_FLEX goes first. Moves that
    can never get room (starters waiting on each other) are dropped.
    """

    pending = list(repositions)
    ordered: List[_Move] = []
    while pending:
        ready = [m for m in pending if counts.get(m.to_slot, 0) < slot_capacity(requirements, m.to_slot)]
        if not ready:
            logger.warning(
                "No executable order for %s repositions; dropping %s",
                len(pending),
                ", ".join(m.player.name for m in pending),
            )
            break
        pick = next((m for m in ready if m.from_slot is Slot.SUPER_FLEX), ready[0])
        ordered.append(pick)
        pending.remove(pick)
        counts[pick.from_slot] = counts.get(pick.from_slot, 0) - 1
        counts[pick.to_slot] = counts.get(pick.to_slot, 0) + 1
    return ordered


def _scores(slot: Slot, requirements: Mapping[Slot, int]) -> bool:
    """Whether a player sitting in ``slot`` counts toward lineup points."""

    return slot is not Slot.BENCH and slot_capacity(requirements, slot) > 0


def _move_delta(move: _Move, projections: Mapping[str, float], requirements: Mapping[Slot, int]) -> float:
    points = points_or_zero(move.player, projections)
    return (points if _scores(move.to_slot, requirements) else 0.0) - (
        points if _scores(move.from_slot, requirements) else 0.0
    )


def _step(move: _Move, kind: str, projections: Mapping[str, float], requirements: Mapping[Slot, int]) -> MoveStep:
    unused = not _scores(move.from_slot, requirements)
    if kind == STEP_BENCH:
        if unused:
            reason = f"Bench from unused {move.from_slot.value} slot"
        else:
            reason = f"Bench to free up {move.from_slot.value}"
    elif kind == STEP_START:
        reason = f"Start in {move.to_slot.value}"
    elif unused:
        reason = f"Move to {move.to_slot.value} from unused {move.from_slot.value} slot"
    else:
        reason = f"Move to {move.to_slot.value} to open {move.from_slot.value}"
    return MoveStep(
        player=move.player,
        from_slot=move.from_slot,
        to_slot=move.to_slot,
        projection=projection_for(move.player, projections),
        reason=reason,
        kind=kind,
    )


def _assemble_chain(
    bench_moves: Sequence[_Move],
    repositions: Sequence[_Move],
    starts: Sequence[_Move],
    counts: Dict[Slot, int],
    projections: Mapping[str, float],
    requirements: Mapping[Slot, int],
) -> Optional[MoveChain]:
    for move in bench_moves:
        counts[move.from_slot] = counts.get(move.from_slot, 0) - 1
    ordered_repositions = _order_repositions(repositions, counts, requirements)

    moves = list(bench_moves) + ordered_repositions + list(starts)
    if not moves:
        return None
    steps = (
        [_step(move, STEP_BENCH, projections, requirements) for move in bench_moves]
        + [_step(move, STEP_REPOSITION, projections, requirements) for move in ordered_repositions]
        + [_step(move, STEP_START, projections, requirements) for move in starts]
    )

    # Players who begin scoring: new starters plus anyone leaving a slot the lineup does not count.
    entering = list(starts) + [
        move
        for move in ordered_repositions
        if _scores(move.to_slot, requirements) and not _scores(move.from_slot, requirements)
    ]
    primary = max(entering, key=lambda move: points_or_zero(move.player, projections)) if entering else None
    return MoveChain(
        steps=tuple(steps),
        net_improvement=sum(_move_delta(move, projections, requirements) for move in moves),
        benched_players=tuple(move.player for move in bench_moves),
        started_players=tuple(move.player for move in starts),
        primary_player=primary.player if primary is not None else None,
        primary_slot=primary.to_slot if primary is not None else None,
    )


def _build_chain(
    group: Sequence[_Path],
    initial_counts: Mapping[Slot, int],
    projections: Mapping[str, float],
    requirements: Mapping[Slot, int],
) -> Optional[MoveChain]:
    bench_moves: List[_Move] = []
    repositions: List[_Move] = []
    starts: List[_Move] = []
    for path in group:
        path_repositions: List[_Move] = []
        for move in path.moves:
            if move.to_slot is Slot.BENCH:
                bench_moves.append(move)
            else:
                path_repositions.append(move)
        # Deepest displacement first: each move fills the slot the next one vacated.
        repositions.extend(reversed(path_repositions))
        starts.append(_Move(path.candidate, Slot.BENCH, path.target))
    return _assemble_chain(bench_moves, repositions, starts, dict(initial_counts), projections, requirements)


def _settle_leftovers(
    occupancy: Occupancy,
    optimal_slots: Mapping[str, Slot],
    projections: Mapping[str, float],
    requirements: Mapping[Slot, int],
) -> Optional[MoveChain]:
    """Moves for starters no displacement trace reached.

    Covers starters parked in slots the league does not use (a K slot in a
    league without kickers) and starters left over capacity. Runs against the
    occupancy after every traced chain, so it is emitted last.
    """

    bench_moves: List[_Move] = []
    repositions: List[_Move] = []
    for slot, players in occupancy.items():
        for player in players:
            destination = optimal_slots.get(player.player_id, Slot.BENCH)
            if destination is slot:
                continue
            move = _Move(player, slot, destination)
            if destination is Slot.BENCH:
                bench_moves.append(move)
            else:
                repositions.append(move)
    counts = {slot: len(players) for slot, players in occupancy.items()}
    return _assemble_chain(bench_moves, repositions, [], counts, projections, requirements)


def build_move_chains(
    roster: Sequence[RosterPlayer],
    optimal_lineup: Mapping[Slot, Sequence[RosterPlayer]],
    projections: Mapping[str, float],
    requirements: Mapping[Slot, int],
) -> List[MoveChain]:
    """Compare the current lineup with the optimal one and plan the moves.

    Chains are meant to be executed in the order returned. Bench players whose
    displacement trace is blocked or cyclic are left out of the chains even
    though the optimal lineup still starts them.
    """

    optimal_slots = optimal_slot_lookup(optimal_lineup)
    occupancy = current_occupancy(roster)
    initial_counts = {slot: len(players) for slot, players in occupancy.items()}

    bench_candidates = [
        player
        for player in roster
        if current_slot(player) is Slot.BENCH and optimal_slots.get(player.player_id, Slot.BENCH) is not Slot.BENCH
    ]

    paths: List[_Path] = []
    for candidate in sort_by_projection(bench_candidates, projections):
        target = optimal_slots[candidate.player_id]
        moves = trace_displacement(target, occupancy, optimal_slots, requirements)
        if moves is None:
            logger.info("No executable move chain to start %s at %s", candidate.name, target.value)
            continue
        path = _Path(candidate, target, tuple(moves))
        _apply_path(occupancy, path)
        paths.append(path)

    chains = [
        chain
        for chain in (_build_chain(group, initial_counts, projections, requirements) for group in _group_paths(paths))
        if chain is not None
    ]
    leftovers = _settle_leftovers(occupancy, optimal_slots, projections, requirements)
    if leftovers is not None:
        logger.debug("Settling %s leftover starter moves", len(leftovers.steps))
        chains.append(leftovers)
    logger.debug("Built %s move chains from %s bench candidates", len(chains), len(bench_candidates))
    return chains


def changes_from_chains(chains: Iterable[MoveChain], projections: Mapping[str, float]) -> List[LineupChange]:
    """One net lineup change per chain, anchored on its best new starter.

    Chains that only clear players out of the lineup have no incoming player
    and produce no change.
    """

    changes: List[LineupChange] = []
    for chain in chains:
        if chain.primary_player is None or chain.primary_slot is None:
            continue
        player_out = chain.benched_players[0] if chain.benched_players else None
        changes.append(
            LineupChange(
                player_out=player_out,
                player_in=chain.primary_player,
                position=chain.primary_slot,
                projected_points_out=points_or_zero(player_out, projections) if player_out is not None else 0.0,
                projected_points_in=points_or_zero(chain.primary_player, projections),
                improvement=chain.net_improvement,
                chain=chain,
            )
        )
    return changes


def identify_lineup_changes(
    roster: Sequence[RosterPlayer],
    optimal_lineup: Mapping[Slot, Sequence[RosterPlayer]],
    projections: Mapping[str, float],
    requirements: Mapping[Slot, int],
) -> List[LineupChange]:
    return changes_from_chains(build_move_chains(roster, optimal_lineup, projections, requirements), projections)
