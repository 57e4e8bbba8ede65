"""SQL Record Store — RecordStore implementations over SQLAlchemy async sessions.

Invariants:
    - conditional_update is ONE guarded UPDATE (key + expected fields in the WHERE clause);
      row count 1 means committed, 0 means predicate failed or key missing
    - List appends are inserted in the same transaction as the guarded UPDATE
    - create() never overwrites: duplicate key -> False
    - SQLAlchemy errors surface as StoreUnavailableError (via DatabaseSessionManager)

Design Decisions:
    - Guarded UPDATE over SELECT ... FOR UPDATE: one round trip, works on SQLite too
    - NOT_FOUND is decided by a key probe only after the guarded UPDATE matched nothing;
      it never changes what was (not) written
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import UpdateOutcome
from app.core.repository_protocols import Mutation
from app.infrastructure.database import DatabaseSessionManager
from app.models.project import Project, PhaseHistoryEntry
from app.models.signup_code import SignupCode
from app.models.universal_license import UniversalLicense

logger = logging.getLogger(__name__)


class SqlRecordStore:
    """Base store: one ORM model, one primary-key column."""

    model: type = None
    key_column: str = "id"

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    @property
    def _key(self):
        return getattr(self.model, self.key_column)

    async def get(self, key: str) -> dict | None:
        async with self._db.session() as session:
            row = await session.get(self.model, key)
            return self._to_document(row) if row is not None else None

    async def create(self, key: str, document: Mapping[str, Any]) -> bool:
        async with self._db.session() as session:
            session.add(self._from_document(key, document))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(
                    f"{self.model.__tablename__}: create skipped, key exists",
                )
                return False
        return True

    async def conditional_update(
        self, key: str, expected: Mapping[str, Any], mutation: Mutation,
    ) -> UpdateOutcome:
        unknown = set(mutation.append) - self.appendable_fields()
        if unknown:
            raise ValueError(f"cannot append to {sorted(unknown)}")

        async with self._db.session() as session:
            stmt = (
                update(self.model)
                .where(self._key == key, *self._predicate(expected))
                .values(**dict(mutation.set_fields))
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                await session.rollback()
                exists = await session.scalar(
                    select(self._key).where(self._key == key),
                )
                return (
                    UpdateOutcome.PREDICATE_FAILED if exists is not None
                    else UpdateOutcome.NOT_FOUND
                )
            for field_name, item in mutation.append.items():
                await self._append(session, key, field_name, item)
            await session.commit()
        return UpdateOutcome.COMMITTED

    async def list_documents(
        self, order_by: str, descending: bool = False,
    ) -> list[dict]:
        column = getattr(self.model, order_by)
        async with self._db.session() as session:
            result = await session.execute(
                select(self.model).order_by(
                    column.desc() if descending else column.asc(),
                ),
            )
            return [self._to_document(row) for row in result.scalars().all()]

    async def health_check(self) -> bool:
        return await self._db.health_check()

    # ─── hooks ───────────────────────────────────────────────────

    def _predicate(self, expected: Mapping[str, Any]) -> list:
        clauses = []
        for name, value in expected.items():
            column = getattr(self.model, name)
            clauses.append(column.is_(None) if value is None else column == value)
        return clauses

    def appendable_fields(self) -> set[str]:
        return set()

    async def _append(
        self, session: AsyncSession, key: str, field_name: str,
        item: Mapping[str, Any],
    ) -> None:
        raise NotImplementedError

    def _to_document(self, row) -> dict:
        return {
            column.key: getattr(row, column.key)
            for column in self.model.__table__.columns
        }

    def _from_document(self, key: str, document: Mapping[str, Any]):
        values = dict(document)
        values[self.key_column] = key
        return self.model(**values)


class SqlSignupCodeStore(SqlRecordStore):
    model = SignupCode
    key_column = "code"


class SqlUniversalLicenseStore(SqlRecordStore):
    model = UniversalLicense
    key_column = "key"

    def _to_document(self, row) -> dict:
        doc = super()._to_document(row)
        doc["authorized_emails"] = list(doc["authorized_emails"] or [])
        return doc


class SqlProjectStore(SqlRecordStore):
    """Projects with phase_history kept in a child table."""
    model = Project
    key_column = "id"

    def appendable_fields(self) -> set[str]:
        return {"phase_history"}

    async def _append(
        self, session: AsyncSession, key: str, field_name: str,
        item: Mapping[str, Any],
    ) -> None:
        # The guarded UPDATE already holds the project row, so the count is stable
        position = await session.scalar(
            select(func.count(PhaseHistoryEntry.id))
            .where(PhaseHistoryEntry.project_id == key),
        )
        session.add(PhaseHistoryEntry(
            project_id=key,
            position=position,
            phase=item["phase"],
            entered_at=item["entered_at"],
        ))

    def _to_document(self, row: Project) -> dict:
        doc = super()._to_document(row)
        doc["phase_history"] = [
            {"phase": entry.phase, "entered_at": entry.entered_at}
            for entry in row.phase_history
        ]
        return doc

    def _from_document(self, key: str, document: Mapping[str, Any]) -> Project:
        values = dict(document)
        history = values.pop("phase_history", None) or []
        values["id"] = key
        project = Project(**values)
        project.phase_history = [
            PhaseHistoryEntry(
                position=i, phase=entry["phase"], entered_at=entry["entered_at"],
            )
            for i, entry in enumerate(history)
        ]
        return project
