"""Project ORM — persists projects and their append-only phase history.

Invariants:
    - current_phase holds a ProjectPhase value, default DISCOVERY
    - phase_history rows are only inserted, in the same transaction as the
      guarded UPDATE of current_phase
    - position is 0-based and dense per project

Design Decisions:
    - current_phase denormalized on the project row: it is the compare-and-set
      column, so the guard never needs a JOIN
    - cascade delete for phase_history: project owns its history
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.domain_types import INITIAL_PHASE
from app.db.base import Base


class Project(Base):
    """Client project moving through the fixed phase order."""
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    client_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    current_phase: Mapped[str] = mapped_column(
        String(20), nullable=False, default=INITIAL_PHASE.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    phase_history: Mapped[list["PhaseHistoryEntry"]] = relationship(
        "PhaseHistoryEntry", back_populates="project",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="PhaseHistoryEntry.position",
    )


class PhaseHistoryEntry(Base):
    """One committed phase transition."""
    __tablename__ = "phase_history"
    __table_args__ = (
        UniqueConstraint("project_id", "position", name="uq_phase_history_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    phase: Mapped[str] = mapped_column(String(20), nullable=False)
    entered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    project: Mapped["Project"] = relationship(
        "Project", back_populates="phase_history",
    )
