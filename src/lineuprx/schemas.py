from __future__ import annotations

from typing import Dict, List, Mapping

from pydantic import BaseModel

from lineuprx.config.slots import Slot
from lineuprx.ingest.projections import projection_for
from lineuprx.models import RosterPlayer
from lineuprx.optimizer.chains import LineupChange, MoveChain, MoveStep
from lineuprx.optimizer.service import OptimizationResult
from lineuprx.optimizer.waivers import WaiverRecommendation


class LineupPlayerResponse(BaseModel):
    player_id: str
    name: str
    position: str
    team: str
    projection: float | None

    @classmethod
    def from_player(cls, player: RosterPlayer, projections: Mapping[str, float]) -> "LineupPlayerResponse":
        return cls(
            player_id=player.player_id,
            name=player.name,
            position=player.position,
            team=player.team,
            projection=projection_for(player, projections),
        )


class MoveStepResponse(BaseModel):
    player_id: str
    name: str
    from_slot: str
    to_slot: str
    projection: float | None
    reason: str
    kind: str

    @classmethod
    def from_step(cls, step: MoveStep) -> "MoveStepResponse":
        return cls(
            player_id=step.player.player_id,
            name=step.player.name,
            from_slot=step.from_slot.value,
            to_slot=step.to_slot.value,
            projection=step.projection,
            reason=step.reason,
            kind=step.kind,
        )


class MoveChainResponse(BaseModel):
    steps: List[MoveStepResponse]
    net_improvement: float
    benched_player_ids: List[str]
    started_player_ids: List[str]
    primary_player_id: str | None
    primary_slot: str | None

    @classmethod
    def from_chain(cls, chain: MoveChain) -> "MoveChainResponse":
        return cls(
            steps=[MoveStepResponse.from_step(step) for step in chain.steps],
            net_improvement=round(chain.net_improvement, 2),
            benched_player_ids=[player.player_id for player in chain.benched_players],
            started_player_ids=[player.player_id for player in chain.started_players],
            primary_player_id=chain.primary_player.player_id if chain.primary_player is not None else None,
            primary_slot=chain.primary_slot.value if chain.primary_slot is not None else None,
        )


class LineupChangeResponse(BaseModel):
    player_out_id: str | None
    player_out_name: str | None
    player_in_id: str
    player_in_name: str
    position: str
    projected_points_out: float
    projected_points_in: float
    improvement: float
    reason: str
    chain: MoveChainResponse

    @classmethod
    def from_change(cls, change: LineupChange) -> "LineupChangeResponse":
        out = change.player_out
        return cls(
            player_out_id=out.player_id if out is not None else None,
            player_out_name=out.name if out is not None else None,
            player_in_id=change.player_in.player_id,
            player_in_name=change.player_in.name,
            position=change.position.value,
            projected_points_out=round(change.projected_points_out, 2),
            projected_points_in=round(change.projected_points_in, 2),
            improvement=round(change.improvement, 2),
            reason=change.reason,
            chain=MoveChainResponse.from_chain(change.chain),
        )


class OptimizationResponse(BaseModel):
    lineup: Dict[str, List[LineupPlayerResponse]]
    bench: List[LineupPlayerResponse]
    projected_points: float
    current_points: float
    improvement: float
    changes: List[LineupChangeResponse]
    move_chains: List[MoveChainResponse]

    @classmethod
    def from_result(cls, result: OptimizationResult) -> "OptimizationResponse":
        projections = result.player_projections
        lineup = {
            slot.value: [LineupPlayerResponse.from_player(player, projections) for player in players]
            for slot, players in result.optimal_lineup.items()
            if slot is not Slot.BENCH
        }
        return cls(
            lineup=lineup,
            bench=[LineupPlayerResponse.from_player(player, projections) for player in result.benched_players],
            projected_points=round(result.projected_points, 2),
            current_points=round(result.current_points, 2),
            improvement=round(result.improvement, 2),
            changes=[LineupChangeResponse.from_change(change) for change in result.changes],
            move_chains=[MoveChainResponse.from_chain(chain) for chain in result.move_chains],
        )


class WaiverRecommendationResponse(BaseModel):
    add_player_key: str
    add_name: str
    add_position: str
    add_team: str
    add_projection: float
    drop_player_id: str
    drop_name: str
    drop_projection: float
    projected_impact: float
    reason: str

    @classmethod
    def from_recommendation(cls, rec: WaiverRecommendation) -> "WaiverRecommendationResponse":
        return cls(
            add_player_key=rec.player_to_add.player_key,
            add_name=rec.player_to_add.name,
            add_position=rec.player_to_add.position,
            add_team=rec.player_to_add.team,
            add_projection=round(rec.player_to_add.projected_points, 2),
            drop_player_id=rec.player_to_drop.player_id,
            drop_name=rec.player_to_drop.name,
            drop_projection=round(rec.projected_points_drop, 2),
            projected_impact=round(rec.projected_impact, 2),
            reason=rec.reason,
        )
