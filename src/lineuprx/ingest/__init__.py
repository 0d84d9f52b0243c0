"""Input adapters that normalize raw projection data."""

from .projections import (
    ProjectionRecord,
    ScoringFormat,
    SleeperProjectionSource,
    build_projection_table,
    parse_projection_payload,
    points_or_zero,
    projection_for,
)

__all__ = [
    "ProjectionRecord",
    "ScoringFormat",
    "SleeperProjectionSource",
    "build_projection_table",
    "parse_projection_payload",
    "points_or_zero",
    "projection_for",
]
