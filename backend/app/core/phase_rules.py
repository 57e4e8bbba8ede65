"""Phase Transition Rules — validates and builds one-step phase advances.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Advances move exactly one step forward in PHASE_ORDER, never skip, never regress
    - TERMINAL_PHASE has no successor (next_phase returns None)
    - The advance predicate pins the exact phase value that was read

Design Decisions:
    - Pure functions over method dispatch: testable without mocks (ADR: functional core)
    - Unknown stored phase raises CorruptRecordError instead of falling through
      as "already final" — a corrupt row must not look like a finished project
"""

from datetime import datetime

from app.core.domain_types import (
    PHASE_ORDER, INITIAL_PHASE, TERMINAL_PHASE, ProjectPhase,
)
from app.core.errors import CorruptRecordError, ErrorContext
from app.core.repository_protocols import Mutation


def parse_phase(value: object, project_id: str | None = None) -> ProjectPhase:
    """Parse a stored phase value. Raises CorruptRecordError if unknown."""
    if isinstance(value, ProjectPhase):
        return value
    try:
        return ProjectPhase(value)
    except ValueError:
        raise CorruptRecordError(
            "current_phase", value, ErrorContext(resource_id=project_id),
        )


def is_terminal(phase: ProjectPhase) -> bool:
    return phase == TERMINAL_PHASE


def next_phase(phase: ProjectPhase) -> ProjectPhase | None:
    """Successor in PHASE_ORDER, or None at the terminal phase."""
    idx = PHASE_ORDER.index(phase)
    if idx == len(PHASE_ORDER) - 1:
        return None
    return PHASE_ORDER[idx + 1]


def advance_predicate(current: ProjectPhase) -> dict:
    return {"current_phase": current.value}


def advance_mutation(target: ProjectPhase, now: datetime) -> Mutation:
    """Set the new phase and append its history entry in one write."""
    return Mutation(
        set_fields={"current_phase": target.value, "updated_at": now},
        append={"phase_history": {"phase": target.value, "entered_at": now}},
    )


def check_history_consistent(
    current: ProjectPhase, history: list[ProjectPhase],
) -> str | None:
    """Return a description of the violation, or None when consistent.

    History must be a prefix of PHASE_ORDER[1:] and end at current.
    """
    expected = list(PHASE_ORDER[1:len(history) + 1])
    if history != expected:
        return f"history {[p.value for p in history]} is not a forward walk"
    last = history[-1] if history else INITIAL_PHASE
    if last != current:
        return f"current phase {current.value} != last history entry {last.value}"
    return None
