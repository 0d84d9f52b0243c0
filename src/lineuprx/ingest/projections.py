"""Weekly projection records, scoring-format mapping, and the Sleeper source."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.config import ConfigDict

from lineuprx.config.settings import EngineSettings
from lineuprx.errors import ProjectionUnavailable
from lineuprx.models import RosterPlayer


logger = logging.getLogger(__name__)


class ScoringFormat(str, Enum):
    PPR = "ppr"
    HALF_PPR = "half_ppr"
    STANDARD = "std"

    @property
    def field_name(self) -> str:
        return _FORMAT_FIELDS[self]

    @classmethod
    def parse(cls, value: "str | ScoringFormat | None") -> "ScoringFormat":
        """Resolve a user-facing format string; unknown values fall back to PPR."""

        if isinstance(value, ScoringFormat):
            return value
        key = (value or "").strip().lower()
        if key in _FORMAT_ALIASES:
            return _FORMAT_ALIASES[key]
        logger.debug("Unrecognized scoring format %r; defaulting to PPR", value)
        return cls.PPR


_FORMAT_FIELDS = {
    ScoringFormat.PPR: "pts_ppr",
    ScoringFormat.HALF_PPR: "pts_half_ppr",
    ScoringFormat.STANDARD: "pts_std",
}

_FORMAT_ALIASES = {
    "ppr": ScoringFormat.PPR,
    "half_ppr": ScoringFormat.HALF_PPR,
    "half": ScoringFormat.HALF_PPR,
    "std": ScoringFormat.STANDARD,
    "standard": ScoringFormat.STANDARD,
}


class ProjectionRecord(BaseModel):
    """One player's weekly projection as published by the projection source."""

    pts_ppr: Optional[float] = None
    pts_half_ppr: Optional[float] = None
    pts_std: Optional[float] = None

    pass_yd: Optional[float] = None
    pass_td: Optional[float] = None
    pass_int: Optional[float] = None
    rush_yd: Optional[float] = None
    rush_td: Optional[float] = None
    rec: Optional[float] = None
    rec_yd: Optional[float] = None
    rec_td: Optional[float] = None
    fum_lost: Optional[float] = None
    gp: Optional[float] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    def points(self, scoring_format: ScoringFormat | str) -> Optional[float]:
        fmt = ScoringFormat.parse(scoring_format)
        return getattr(self, fmt.field_name)


_PROJECTION_PAYLOAD = TypeAdapter(Dict[str, ProjectionRecord])


def parse_projection_payload(payload: object) -> Dict[str, ProjectionRecord]:
    """Validate a decoded ``{player_key: {...}}`` projections document."""

    if not isinstance(payload, Mapping):
        raise ProjectionUnavailable(f"Unexpected projections payload type {type(payload).__name__}")
    try:
        return _PROJECTION_PAYLOAD.validate_python(dict(payload))
    except ValidationError as exc:
        raise ProjectionUnavailable(f"Failed to decode projections: {exc.error_count()} invalid fields") from exc


def projection_for(player: RosterPlayer, table: Mapping[str, float]) -> Optional[float]:
    """Projected points for a player, or ``None`` when no projection exists."""

    if not player.projection_key:
        return None
    return table.get(player.projection_key)


def points_or_zero(player: RosterPlayer, table: Mapping[str, float]) -> float:
    value = projection_for(player, table)
    return 0.0 if value is None else float(value)


def build_projection_table(
    roster: Sequence[RosterPlayer],
    projections: Mapping[str, ProjectionRecord],
    scoring_format: ScoringFormat | str = ScoringFormat.PPR,
) -> Dict[str, float]:
    """Map each roster player's projection key to points in the chosen format.

    Players without a key, without a record, or without a value for the
    format are left out rather than zero-filled.
    """

    fmt = ScoringFormat.parse(scoring_format)
    table: Dict[str, float] = {}
    for player in roster:
        key = player.projection_key
        if not key:
            continue
        record = projections.get(key)
        if record is None:
            continue
        points = record.points(fmt)
        if points is None:
            continue
        table[key] = float(points)
    logger.info(
        "Got %s projections for %s roster players (format=%s)",
        len(table),
        len(roster),
        fmt.value,
    )
    return table


class SleeperProjectionSource:
    """Fetch weekly projections from the Sleeper API.

    Endpoint: ``GET {base_url}/projections/nfl/{season_type}/{year}/{week}``,
    returning a mapping of Sleeper player id to projection fields.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        season_type: str = "regular",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        settings: EngineSettings | None = None,
    ):
        settings = settings or EngineSettings.from_env()
        self.base_url = (base_url or settings.projections_url).rstrip("/")
        self.season_type = season_type
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self._client = client

    def url_for(self, week: int, year: str | int) -> str:
        return f"{self.base_url}/projections/nfl/{self.season_type}/{year}/{week}"

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url)

    async def fetch_projections(self, week: int, year: str | int) -> Dict[str, ProjectionRecord]:
        url = self.url_for(week, year)
        logger.debug("Fetching projections from %s", url)
        try:
            response = await self._get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Projection request for week %s %s failed with HTTP %s", week, year, exc.response.status_code)
            raise ProjectionUnavailable(
                f"HTTP error: {exc.response.status_code}", week=week, year=str(year)
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Projection request for week %s %s failed: %s", week, year, exc)
            raise ProjectionUnavailable(f"Projection request failed: {exc}", week=week, year=str(year)) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProjectionUnavailable("Failed to decode projections", week=week, year=str(year)) from exc

        projections = parse_projection_payload(payload)
        logger.info("Fetched %s player projections for week %s %s", len(projections), week, year)
        return projections
