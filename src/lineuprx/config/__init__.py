"""Configuration helpers for lineup slots and engine settings."""

from .settings import EngineSettings
from .slots import (
    DEFAULT_REQUIREMENTS,
    FILL_ORDER,
    FLEX_SLOT_ORDER,
    STANDARD_SLOT_ORDER,
    UNLIMITED,
    Slot,
    SlotRules,
    current_slot,
    get_slot_rules,
    is_bench_label,
    iter_slot_rules,
    normalize_slot,
    resolve_requirements,
    slot_accepts,
    slot_capacity,
    validate_requirements,
)

__all__ = [
    "DEFAULT_REQUIREMENTS",
    "EngineSettings",
    "FILL_ORDER",
    "FLEX_SLOT_ORDER",
    "STANDARD_SLOT_ORDER",
    "Slot",
    "SlotRules",
    "UNLIMITED",
    "current_slot",
    "get_slot_rules",
    "is_bench_label",
    "iter_slot_rules",
    "normalize_slot",
    "resolve_requirements",
    "slot_accepts",
    "slot_capacity",
    "validate_requirements",
]
