"""Waiver-wire add/drop recommendations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from lineuprx.models import AvailablePlayer, RosterPlayer, normalize_position
from lineuprx.ingest.projections import projection_for


logger = logging.getLogger(__name__)

WAIVER_POSITIONS: Tuple[str, ...] = ("QB", "RB", "WR", "TE")
SIGNIFICANT_GAIN = 3.0


@dataclass(frozen=True)
class WaiverRecommendation:
    player_to_add: AvailablePlayer
    player_to_drop: RosterPlayer
    projected_impact: float
    projected_points_drop: float
    reason: str


class StaticWaiverPool:
    """In-memory waiver pool, ranked the way the league's free-agent list is."""

    def __init__(self, players: Iterable[AvailablePlayer]):
        self._players = list(players)

    async def fetch_top_available(
        self,
        position: str,
        week: int,
        year: str | int,
        limit: int = 10,
    ) -> List[AvailablePlayer]:
        wanted = normalize_position(position)
        candidates = [p for p in self._players if p.position == wanted and p.projected_points > 0]
        candidates.sort(key=lambda p: p.projected_points, reverse=True)
        return candidates[:limit]


def worst_projected_player(
    roster: Sequence[RosterPlayer],
    position: str,
    projections: Mapping[str, float],
) -> Optional[Tuple[RosterPlayer, float]]:
    """Lowest projected roster player at a position; unprojected players are ignored."""

    worst: Optional[Tuple[RosterPlayer, float]] = None
    for player in roster:
        if player.position != position:
            continue
        points = projection_for(player, projections)
        if points is None:
            continue
        if worst is None or points < worst[1]:
            worst = (player, points)
    return worst


def recommend_for_position(
    roster: Sequence[RosterPlayer],
    position: str,
    available: Sequence[AvailablePlayer],
    projections: Mapping[str, float],
    *,
    threshold: float = SIGNIFICANT_GAIN,
) -> List[WaiverRecommendation]:
    worst = worst_projected_player(roster, position, projections)
    if worst is None:
        logger.debug("No projected roster players at %s; skipping waiver comparison", position)
        return []
    drop, drop_points = worst

    recommendations: List[WaiverRecommendation] = []
    for candidate in available:
        impact = candidate.projected_points - drop_points
        if impact <= threshold:
            continue
        logger.debug(
            "Recommending add %s (%s) at %.1f pts over %s",
            candidate.name,
            candidate.player_key,
            candidate.projected_points,
            drop.name,
        )
        recommendations.append(
            WaiverRecommendation(
                player_to_add=candidate,
                player_to_drop=drop,
                projected_impact=impact,
                projected_points_drop=drop_points,
                reason=f"Projected +{impact:.1f} pts over {drop.name}",
            )
        )
    return recommendations


def rank_recommendations(
    by_position: Mapping[str, Sequence[WaiverRecommendation]],
    limit: Optional[int] = None,
) -> List[WaiverRecommendation]:
    """Flatten per-position recommendations, biggest impact first."""

    merged: List[WaiverRecommendation] = []
    for position in by_position:
        merged.extend(by_position[position])
    merged.sort(key=lambda rec: rec.projected_impact, reverse=True)
    if limit is not None:
        merged = merged[: max(0, limit)]
    return merged


def recommend_waivers(
    roster: Sequence[RosterPlayer],
    available_by_position: Mapping[str, Sequence[AvailablePlayer]],
    projections: Mapping[str, float],
    *,
    threshold: float = SIGNIFICANT_GAIN,
    limit: Optional[int] = None,
) -> List[WaiverRecommendation]:
    by_position: Dict[str, List[WaiverRecommendation]] = {}
    for position in WAIVER_POSITIONS:
        by_position[position] = recommend_for_position(
            roster,
            position,
            available_by_position.get(position, ()),
            projections,
            threshold=threshold,
        )
    return rank_recommendations(by_position, limit)
