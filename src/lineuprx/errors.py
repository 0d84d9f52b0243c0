"""Exceptions raised by the lineup optimization engine."""

from __future__ import annotations


class OptimizerError(Exception):
    """Base class for engine failures surfaced to callers."""


class NoTeamData(OptimizerError):
    def __init__(self, message: str = "No team data available"):
        super().__init__(message)
        self.message = message


class ProjectionUnavailable(OptimizerError):
    """Projection fetch failed; callers decide whether to retry."""

    def __init__(self, message: str = "No projections available", *, week: int | None = None, year: str | None = None):
        super().__init__(message)
        self.message = message
        self.week = week
        self.year = year


class InvalidLineupRequirements(OptimizerError):
    def __init__(self, requirements: dict, message: str = "Invalid lineup requirements"):
        super().__init__(f"{message}: {requirements!r}")
        self.requirements = requirements
        self.message = message


class WaiverPoolUnavailable(OptimizerError):
    def __init__(self, message: str = "No waiver pool configured"):
        super().__init__(message)
        self.message = message
