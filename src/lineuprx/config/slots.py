"""Lineup slot rules and slot-requirement resolution."""

from __future__ import annotations

import logging
import re
import sys
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from lineuprx.errors import InvalidLineupRequirements
from lineuprx.models import RosterPlayer


logger = logging.getLogger(__name__)

# Bench capacity; large enough to absorb every leftover roster player.
UNLIMITED = sys.maxsize


class Slot(str, Enum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"
    DEF = "DEF"
    SUPER_FLEX = "SUPER_FLEX"
    FLEX = "FLEX"
    WRRB_FLEX = "WRRB_FLEX"
    REC_FLEX = "REC_FLEX"
    BENCH = "BENCH"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SlotRules:
    slot: Slot
    eligible_positions: FrozenSet[str]
    is_flex: bool = False

    def accepts(self, position: str) -> bool:
        return position.upper() in self.eligible_positions


_SLOT_RULES: Dict[Slot, SlotRules] = {
    Slot.QB: SlotRules(Slot.QB, frozenset({"QB"})),
    Slot.RB: SlotRules(Slot.RB, frozenset({"RB"})),
    Slot.WR: SlotRules(Slot.WR, frozenset({"WR"})),
    Slot.TE: SlotRules(Slot.TE, frozenset({"TE"})),
    Slot.K: SlotRules(Slot.K, frozenset({"K"})),
    Slot.DEF: SlotRules(Slot.DEF, frozenset({"DEF"})),
    Slot.SUPER_FLEX: SlotRules(Slot.SUPER_FLEX, frozenset({"QB", "RB", "WR", "TE"}), is_flex=True),
    Slot.FLEX: SlotRules(Slot.FLEX, frozenset({"RB", "WR", "TE"}), is_flex=True),
    Slot.WRRB_FLEX: SlotRules(Slot.WRRB_FLEX, frozenset({"WR", "RB"}), is_flex=True),
    Slot.REC_FLEX: SlotRules(Slot.REC_FLEX, frozenset({"WR", "TE"}), is_flex=True),
    Slot.BENCH: SlotRules(Slot.BENCH, frozenset({"QB", "RB", "WR", "TE", "K", "DEF"})),
}

STANDARD_SLOT_ORDER: Tuple[Slot, ...] = (Slot.QB, Slot.RB, Slot.WR, Slot.TE, Slot.K, Slot.DEF)

# Most permissive flex first so narrower flex types are not starved.
FLEX_SLOT_ORDER: Tuple[Slot, ...] = (Slot.SUPER_FLEX, Slot.FLEX, Slot.WRRB_FLEX, Slot.REC_FLEX)

FILL_ORDER: Tuple[Slot, ...] = STANDARD_SLOT_ORDER + FLEX_SLOT_ORDER

BENCH_LABELS: FrozenSet[str] = frozenset({"BENCH", "BN", "IR", "TAXI", "RESERVE", "COVID"})

_SLOT_ALIASES: Dict[str, Slot] = {
    "DST": Slot.DEF,
    "D/ST": Slot.DEF,
    "D": Slot.DEF,
    "DEFENSE": Slot.DEF,
    "RB/WR/TE": Slot.FLEX,
    "W/R/T": Slot.FLEX,
    "OP": Slot.SUPER_FLEX,
    "SUPERFLEX": Slot.SUPER_FLEX,
    "Q/W/R/T": Slot.SUPER_FLEX,
    "RB/WR": Slot.WRRB_FLEX,
    "WR/RB": Slot.WRRB_FLEX,
    "W/R": Slot.WRRB_FLEX,
    "WR/TE": Slot.REC_FLEX,
    "W/T": Slot.REC_FLEX,
    **{label: Slot.BENCH for label in BENCH_LABELS},
}

_TRAILING_DIGITS = re.compile(r"\d+$")

DEFAULT_REQUIREMENTS: Mapping[Slot, int] = {
    Slot.QB: 1,
    Slot.RB: 2,
    Slot.WR: 2,
    Slot.TE: 1,
    Slot.FLEX: 1,
    Slot.K: 1,
    Slot.DEF: 1,
    Slot.BENCH: UNLIMITED,
}


def get_slot_rules(slot: Slot | str) -> SlotRules:
    """Fetch rules for a slot, raising KeyError for unknown labels."""

    resolved = normalize_slot(slot)
    if resolved is None:
        raise KeyError(f"No slot rules configured for {slot!r}")
    return _SLOT_RULES[resolved]


def iter_slot_rules() -> Iterable[SlotRules]:
    return _SLOT_RULES.values()


def slot_accepts(slot: Slot, position: str) -> bool:
    return _SLOT_RULES[slot].accepts(position)


def normalize_slot(label: Optional[str]) -> Optional[Slot]:
    """Map a raw lineup label ("RB2", "D/ST", "BN", None) to a Slot.

    Missing labels mean the player is not starting. Labels the engine does
    not model (IDP, head coach) come back as ``None``.
    """

    if label is None:
        return Slot.BENCH
    if isinstance(label, Slot):
        return label
    text = str(label).strip().upper()
    if not text:
        return Slot.BENCH
    if text in _SLOT_ALIASES:
        return _SLOT_ALIASES[text]
    stripped = _TRAILING_DIGITS.sub("", text)
    if stripped in _SLOT_ALIASES:
        return _SLOT_ALIASES[stripped]
    try:
        return Slot(stripped)
    except ValueError:
        return None


def is_bench_label(label: Optional[str]) -> bool:
    return normalize_slot(label) is Slot.BENCH


def current_slot(player: RosterPlayer) -> Optional[Slot]:
    """Slot a player occupies in the current lineup (BENCH when not starting)."""

    if not player.is_starter:
        return Slot.BENCH
    if player.lineup_slot is None or not player.lineup_slot.strip():
        return normalize_slot(player.position)
    return normalize_slot(player.lineup_slot)


def slot_capacity(requirements: Mapping[Slot, int], slot: Slot) -> int:
    if slot is Slot.BENCH:
        return UNLIMITED
    return max(0, requirements.get(slot, 0))


def _with_bench(counts: Mapping[Slot, int]) -> Dict[Slot, int]:
    requirements = {slot: count for slot, count in counts.items() if slot is not Slot.BENCH}
    requirements[Slot.BENCH] = UNLIMITED
    return requirements


def _count_labels(labels: Iterable[str]) -> Counter:
    counts: Counter = Counter()
    for label in labels:
        slot = normalize_slot(label)
        if slot is None:
            logger.debug("Ignoring unsupported roster slot %r", label)
            continue
        counts[slot] += 1
    return counts


def resolve_requirements(
    roster_positions: Optional[Sequence[str]] = None,
    roster: Sequence[RosterPlayer] = (),
) -> Dict[Slot, int]:
    """Build the slot requirement map for a league.

    League roster positions win; otherwise the shape is inferred from the
    current starters; otherwise the default NFL shape is used.
    """

    if roster_positions:
        counts = _count_labels(roster_positions)
        counts.pop(Slot.BENCH, None)
        if counts:
            logger.debug("Slot requirements from league settings: %s", dict(counts))
            return _with_bench(counts)

    inferred: Counter = Counter()
    for player in roster:
        if not player.is_starter:
            continue
        slot = current_slot(player)
        if slot is None or slot is Slot.BENCH:
            continue
        inferred[slot] += 1
    if inferred:
        logger.debug("Slot requirements inferred from current starters: %s", dict(inferred))
        return _with_bench(inferred)

    logger.debug("Falling back to default slot requirements")
    return dict(DEFAULT_REQUIREMENTS)


def validate_requirements(requirements: Mapping[Slot | str, int]) -> Dict[Slot, int]:
    """Normalize a caller-supplied requirement map, rejecting negative counts."""

    validated: Dict[Slot, int] = {}
    for label, count in requirements.items():
        slot = normalize_slot(label)
        if slot is None:
            logger.debug("Ignoring unsupported slot requirement %r", label)
            continue
        if slot is Slot.BENCH:
            continue
        try:
            value = int(count)
        except (TypeError, ValueError):
            raise InvalidLineupRequirements(dict(requirements), f"count for {label!r} is not an integer") from None
        if value < 0:
            raise InvalidLineupRequirements(dict(requirements), f"negative count for {label!r}")
        validated[slot] = validated.get(slot, 0) + value
    return _with_bench(validated)
