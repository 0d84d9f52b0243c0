"""Lineup optimization service: projections in, optimal lineup and moves out."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from lineuprx.config.settings import EngineSettings
from lineuprx.config.slots import Slot, current_slot, resolve_requirements, slot_capacity, validate_requirements
from lineuprx.errors import NoTeamData, WaiverPoolUnavailable
from lineuprx.ingest.projections import ScoringFormat, build_projection_table, points_or_zero
from lineuprx.models import AvailablePlayer, RosterPlayer, TeamSnapshot
from lineuprx.optimizer.assigner import (
    OptimalLineup,
    align_with_current_lineup,
    assign_optimal_lineup,
    lineup_points,
)
from lineuprx.optimizer.chains import LineupChange, MoveChain, build_move_chains, changes_from_chains
from lineuprx.optimizer.waivers import (
    WAIVER_POSITIONS,
    WaiverRecommendation,
    rank_recommendations,
    recommend_for_position,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptimizationResult:
    optimal_lineup: OptimalLineup
    benched_players: Tuple[RosterPlayer, ...]
    projected_points: float
    current_points: float
    improvement: float
    changes: Tuple[LineupChange, ...]
    move_chains: Tuple[MoveChain, ...]
    player_projections: Dict[str, float]
    requirements: Dict[Slot, int]


def current_lineup_points(
    roster: Sequence[RosterPlayer],
    projections: Mapping[str, float],
    requirements: Mapping[Slot, int],
) -> float:
    """Projected points of whoever starts right now.

    Starters in slots the league does not use, or that the engine does not
    model, score nothing.
    """

    total = 0.0
    for player in roster:
        slot = current_slot(player)
        if slot is None or slot is Slot.BENCH or slot_capacity(requirements, slot) <= 0:
            continue
        total += points_or_zero(player, projections)
    return total


def optimize_roster(
    roster: Sequence[RosterPlayer],
    projections: Mapping[str, float],
    requirements: Mapping[Slot, int],
) -> OptimizationResult:
    """Run assignment and move-chain planning on an in-memory roster."""

    optimal = assign_optimal_lineup(roster, projections, requirements)
    optimal = align_with_current_lineup(optimal, roster, requirements)
    chains = build_move_chains(roster, optimal, projections, requirements)
    changes = changes_from_chains(chains, projections)

    projected = lineup_points(optimal, projections)
    current = current_lineup_points(roster, projections, requirements)
    bench_ids = {player.player_id for player in optimal.get(Slot.BENCH, [])}
    benched = tuple(player for player in roster if player.player_id in bench_ids)

    return OptimizationResult(
        optimal_lineup=optimal,
        benched_players=benched,
        projected_points=projected,
        current_points=current,
        improvement=projected - current,
        changes=tuple(changes),
        move_chains=tuple(chains),
        player_projections=dict(projections),
        requirements=dict(requirements),
    )


class LineupOptimizer:
    """Stateless optimizer bound to its projection source and waiver pool.

    ``projection_source`` must provide ``await fetch_projections(week, year)``
    and ``waiver_pool`` ``await fetch_top_available(position, week, year, limit)``.
    """

    def __init__(self, projection_source, waiver_pool=None, *, settings: EngineSettings | None = None):
        self.projection_source = projection_source
        self.waiver_pool = waiver_pool
        self.settings = settings or EngineSettings.from_env()

    def _scoring_format(self, scoring_format: ScoringFormat | str | None) -> ScoringFormat:
        return ScoringFormat.parse(scoring_format if scoring_format is not None else self.settings.scoring_format)

    async def _fetch_projections(self, week: int, year: str | int):
        logger.info("Fetching projections for week %s %s", week, year)
        try:
            projections = await self.projection_source.fetch_projections(week, year)
        except Exception as exc:
            logger.warning("Projection fetch for week %s %s failed: %s", week, year, exc)
            raise
        logger.info("Fetched %s player projections", len(projections))
        return projections

    async def optimize_lineup(
        self,
        team: Optional[TeamSnapshot],
        week: int,
        year: str | int,
        scoring_format: ScoringFormat | str | None = None,
        *,
        requirements: Optional[Mapping[Slot | str, int]] = None,
    ) -> OptimizationResult:
        """Optimize a team's lineup for one week."""

        if team is None or not team.roster:
            raise NoTeamData()

        fmt = self._scoring_format(scoring_format)
        logger.info(
            "Optimizing lineup for %s (%s roster players, week %s %s, %s)",
            team.team_name or "team",
            len(team.roster),
            week,
            year,
            fmt.value,
        )
        start = time.perf_counter()

        raw_projections = await self._fetch_projections(week, year)

        if requirements is not None:
            slot_requirements = validate_requirements(requirements)
        else:
            slot_requirements = resolve_requirements(team.roster_positions, team.roster)
        logger.info(
            "Lineup requirements: %s",
            ", ".join(f"{slot.value}:{count}" for slot, count in slot_requirements.items() if slot is not Slot.BENCH),
        )

        table = build_projection_table(team.roster, raw_projections, fmt)
        result = optimize_roster(team.roster, table, slot_requirements)

        logger.info(
            "Optimization complete in %.3fs: %s changes, projected %.2f vs current %.2f",
            time.perf_counter() - start,
            len(result.changes),
            result.projected_points,
            result.current_points,
        )
        return result

    async def get_waiver_recommendations(
        self,
        team: Optional[TeamSnapshot],
        week: int,
        year: str | int,
        *,
        limit: Optional[int] = None,
        scoring_format: ScoringFormat | str | None = None,
    ) -> List[WaiverRecommendation]:
        """Suggest free-agent adds whose projection clearly beats a rostered player."""

        if team is None or not team.roster:
            raise NoTeamData()
        if self.waiver_pool is None:
            raise WaiverPoolUnavailable()

        fmt = self._scoring_format(scoring_format)
        limit = self.settings.waiver_limit if limit is None else limit
        raw_projections = await self._fetch_projections(week, year)
        table = build_projection_table(team.roster, raw_projections, fmt)

        by_position: Dict[str, List[WaiverRecommendation]] = {}
        for position in WAIVER_POSITIONS:
            available: Sequence[AvailablePlayer] = await self.waiver_pool.fetch_top_available(
                position, week, year, self.settings.waiver_candidates
            )
            by_position[position] = recommend_for_position(
                team.roster,
                position,
                available,
                table,
                threshold=self.settings.waiver_threshold,
            )

        recommendations = rank_recommendations(by_position, limit)
        logger.info("Found %s waiver recommendations", len(recommendations))
        return recommendations
