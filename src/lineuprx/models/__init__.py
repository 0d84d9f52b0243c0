"""Player and team models."""

from .player import AvailablePlayer, RosterPlayer, TeamSnapshot, normalize_position

__all__ = ["AvailablePlayer", "RosterPlayer", "TeamSnapshot", "normalize_position"]
