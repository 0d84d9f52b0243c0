"""Environment-driven engine settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


logger = logging.getLogger(__name__)

_SCORING_FORMAT_ENV = "LINEUPRX_SCORING_FORMAT"
_WAIVER_THRESHOLD_ENV = "LINEUPRX_WAIVER_THRESHOLD"
_WAIVER_CANDIDATES_ENV = "LINEUPRX_WAIVER_CANDIDATES"
_WAIVER_LIMIT_ENV = "LINEUPRX_WAIVER_LIMIT"
_PROJECTIONS_URL_ENV = "LINEUPRX_PROJECTIONS_URL"
_HTTP_TIMEOUT_ENV = "LINEUPRX_HTTP_TIMEOUT"

DEFAULT_SCORING_FORMAT = "ppr"
DEFAULT_WAIVER_THRESHOLD = 3.0
DEFAULT_WAIVER_CANDIDATES = 10
DEFAULT_WAIVER_LIMIT = 5
DEFAULT_PROJECTIONS_URL = "https://api.sleeper.app/v1"
DEFAULT_HTTP_TIMEOUT = 15.0


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


@dataclass(frozen=True)
class EngineSettings:
    scoring_format: str = DEFAULT_SCORING_FORMAT
    waiver_threshold: float = DEFAULT_WAIVER_THRESHOLD
    waiver_candidates: int = DEFAULT_WAIVER_CANDIDATES
    waiver_limit: int = DEFAULT_WAIVER_LIMIT
    projections_url: str = DEFAULT_PROJECTIONS_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            scoring_format=os.getenv(_SCORING_FORMAT_ENV, DEFAULT_SCORING_FORMAT).strip().lower() or DEFAULT_SCORING_FORMAT,
            waiver_threshold=_env_float(_WAIVER_THRESHOLD_ENV, DEFAULT_WAIVER_THRESHOLD, clamp_min=0.0),
            waiver_candidates=_env_int(_WAIVER_CANDIDATES_ENV, DEFAULT_WAIVER_CANDIDATES, min_value=1),
            waiver_limit=_env_int(_WAIVER_LIMIT_ENV, DEFAULT_WAIVER_LIMIT, min_value=1),
            projections_url=os.getenv(_PROJECTIONS_URL_ENV, DEFAULT_PROJECTIONS_URL).rstrip("/"),
            http_timeout=_env_float(_HTTP_TIMEOUT_ENV, DEFAULT_HTTP_TIMEOUT, clamp_min=0.1),
        )
