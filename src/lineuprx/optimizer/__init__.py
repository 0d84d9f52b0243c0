"""Lineup assignment, move-chain planning, and waiver recommendations."""

from .assigner import align_with_current_lineup, assign_optimal_lineup
from .chains import LineupChange, MoveChain, MoveStep, build_move_chains, identify_lineup_changes
from .service import LineupOptimizer, OptimizationResult, optimize_roster
from .waivers import StaticWaiverPool, WaiverRecommendation, recommend_waivers

__all__ = [
    "LineupChange",
    "LineupOptimizer",
    "MoveChain",
    "MoveStep",
    "OptimizationResult",
    "StaticWaiverPool",
    "WaiverRecommendation",
    "align_with_current_lineup",
    "assign_optimal_lineup",
    "build_move_chains",
    "identify_lineup_changes",
    "optimize_roster",
    "recommend_waivers",
]
