"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - ItemId wraps a UUID: never pass a bare UUID into domain logic
    - PrivacyLevel members are ordered from least to most strict
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ItemId = NewType("ItemId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class PrivacyLevel(str, Enum):
    """Caller-declared obfuscation tier. Declaration order = strictness order."""
    EXACT = "EXACT"
    APPROXIMATE = "APPROXIMATE"
    AREA_ONLY = "AREA_ONLY"
    HIDDEN = "HIDDEN"


class ValidationReason(str, Enum):
    """Why an incoming location was rejected before reaching the store."""
    OUT_OF_RANGE = "out_of_range"
    STALE = "stale"
    FUTURE_TIMESTAMP = "future_timestamp"
