"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ProjectPhase is a closed enumeration with a declared total order (PHASE_ORDER)
    - DELIVERY is the only terminal phase: no transition leaves it
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders, stored as plain strings
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

LicenseCode = NewType("LicenseCode", str)
ProjectId = NewType("ProjectId", str)


# ─── Enums ───────────────────────────────────────────────────────

class ProjectPhase(str, Enum):
    """Project lifecycle phases — maps to DB `current_phase` column."""
    DISCOVERY = "DISCOVERY"
    DESIGN = "DESIGN"
    REVISIONS = "REVISIONS"
    DELIVERY = "DELIVERY"


PHASE_ORDER: tuple[ProjectPhase, ...] = (
    ProjectPhase.DISCOVERY,
    ProjectPhase.DESIGN,
    ProjectPhase.REVISIONS,
    ProjectPhase.DELIVERY,
)
INITIAL_PHASE = PHASE_ORDER[0]
TERMINAL_PHASE = PHASE_ORDER[-1]


class UpdateOutcome(str, Enum):
    """Result of a conditional (compare-and-set) write."""
    COMMITTED = "committed"
    PREDICATE_FAILED = "predicate_failed"
    NOT_FOUND = "not_found"
