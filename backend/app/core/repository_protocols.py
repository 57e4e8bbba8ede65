"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - conditional_update is atomic per key: predicate check and mutation commit together
    - First committer wins; the loser observes PREDICATE_FAILED, never a silent overwrite
    - Nothing is written unless the outcome is COMMITTED

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Field-equality predicates (not callables): translate directly to an
      UPDATE ... WHERE clause, so SQL stores need no read-modify-write
    - Documents are plain dicts with snake_case keys, like the ORM columns
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from app.core.domain_types import UpdateOutcome


@dataclass(frozen=True)
class Mutation:
    """Changes applied by a committed conditional update.

    set_fields: field -> new value.
    append: list field -> item appended to the end of that list.
    """
    set_fields: Mapping[str, Any] = field(default_factory=dict)
    append: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)


class HealthCheckable(Protocol):
    """Readiness contract for store backends."""
    async def health_check(self) -> bool: ...


class RecordStore(HealthCheckable, Protocol):
    """Durable key -> document storage with compare-and-set writes."""

    async def get(self, key: str) -> dict | None: ...

    async def create(self, key: str, document: Mapping[str, Any]) -> bool:
        """Create-if-absent. Returns False when the key already exists."""
        ...

    async def conditional_update(
        self, key: str, expected: Mapping[str, Any], mutation: Mutation,
    ) -> UpdateOutcome: ...

    async def list_documents(
        self, order_by: str, descending: bool = False,
    ) -> list[dict]: ...
