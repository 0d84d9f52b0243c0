"""Fantasy football lineup optimization: slot assignment, move chains, and waiver picks."""

from lineuprx.errors import (
    InvalidLineupRequirements,
    NoTeamData,
    OptimizerError,
    ProjectionUnavailable,
    WaiverPoolUnavailable,
)
from lineuprx.models import AvailablePlayer, RosterPlayer, TeamSnapshot
from lineuprx.optimizer import LineupOptimizer, OptimizationResult

__all__ = [
    "AvailablePlayer",
    "InvalidLineupRequirements",
    "LineupOptimizer",
    "NoTeamData",
    "OptimizationResult",
    "OptimizerError",
    "ProjectionUnavailable",
    "RosterPlayer",
    "TeamSnapshot",
    "WaiverPoolUnavailable",
]
