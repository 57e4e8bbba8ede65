"""Phase Progression Engine — advances projects one phase at a time.

Invariants:
    - advance() moves at most one step along PHASE_ORDER per committed write
    - The write is guarded on the exact phase value read, so two callers that read
      the same phase produce at most one transition (loser: ConcurrencyError)
    - current_phase and its phase_history entry are committed together
    - At TERMINAL_PHASE, advance() returns the project unchanged (no write, no error)
    - Engine holds no mutable state; one instance may serve concurrent callers

Design Decisions:
    - ConcurrencyError is transient (unlike a used license): the order is monotone,
      so re-running advance() on fresh state can never skip or regress
    - advance_with_retry() is the bounded caller-side retry used by the HTTP route
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from app.core.domain_types import ProjectId, UpdateOutcome
from app.core.errors import (
    ConcurrencyError, ErrorContext, InvalidInputError, ProjectNotFoundError,
)
from app.core.phase_rules import (
    advance_mutation, advance_predicate, next_phase,
)
from app.core.records import PhaseEntry, Project, new_project_document
from app.core.repository_protocols import RecordStore
from app.infrastructure.clock import utc_now

logger = logging.getLogger(__name__)


class PhaseProgressionEngine:
    """Owns project creation, lookup and phase advancement."""

    def __init__(
        self, store: RecordStore, clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._clock = clock

    async def create_project(
        self, name: str, client_email: str | None = None,
    ) -> Project:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError(
                "Project name must be a non-empty string", field="name",
            )
        project_id = ProjectId(str(uuid.uuid4()))
        doc = new_project_document(
            project_id, name.strip(), client_email, self._clock(),
        )
        if not await self._store.create(project_id, doc):
            raise ConcurrencyError(
                "Project id collision", ErrorContext(resource_id=project_id),
            )
        logger.info("Project created", extra={"project_id": project_id})
        return Project.from_document(doc)

    async def get_project(self, project_id: str) -> Project:
        doc = await self._store.get(project_id)
        if doc is None:
            raise ProjectNotFoundError(project_id)
        return Project.from_document(doc)

    async def list_projects(self) -> list[Project]:
        """All projects, newest first."""
        documents = await self._store.list_documents("created_at", descending=True)
        return [Project.from_document(doc) for doc in documents]

    async def advance(self, project_id: str) -> Project:
        """Advance one phase, or return the project unchanged at DELIVERY."""
        project = await self.get_project(project_id)
        current = project.current_phase
        if project.is_complete:
            logger.info(
                "Advance is a no-op at terminal phase",
                extra={"project_id": project_id, "phase_from": current.value},
            )
            return project

        target = next_phase(current)
        now = self._clock()
        outcome = await self._store.conditional_update(
            project_id, advance_predicate(current), advance_mutation(target, now),
        )
        if outcome == UpdateOutcome.PREDICATE_FAILED:
            raise ConcurrencyError(
                f"Project phase changed concurrently (was {current.value})",
                ErrorContext(resource_id=project_id),
            )
        if outcome == UpdateOutcome.NOT_FOUND:
            raise ProjectNotFoundError(project_id)

        logger.info(
            "Project phase advanced",
            extra={
                "project_id": project_id,
                "phase_from": current.value,
                "phase_to": target.value,
            },
        )
        return replace(
            project,
            current_phase=target,
            phase_history=project.phase_history + (PhaseEntry(target, now),),
            updated_at=now,
        )

    async def advance_with_retry(
        self, project_id: str, max_attempts: int = 3,
    ) -> Project:
        """advance() with bounded retry on ConcurrencyError (fresh read each time)."""
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        for attempt in range(1, max_attempts + 1):
            try:
                return await self.advance(project_id)
            except ConcurrencyError as e:
                e.context.attempt = attempt
                if attempt == max_attempts:
                    logger.warning(
                        "Advance gave up after concurrent modifications",
                        extra={"project_id": project_id, "attempt": attempt},
                    )
                    raise
                logger.info(
                    "Advance conflict, retrying",
                    extra={"project_id": project_id, "attempt": attempt},
                )
        raise AssertionError("unreachable")
