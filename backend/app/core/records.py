"""Record Views — typed, immutable views over store documents.

Invariants:
    - Views are built from documents, never written back directly
    - Project.from_document rejects phases outside ProjectPhase (CorruptRecordError)
    - phase_history keeps store order (oldest first)

Design Decisions:
    - Frozen dataclasses over ORM objects: core stays independent of the store backend
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.core.domain_types import INITIAL_PHASE, ProjectPhase
from app.core.phase_rules import is_terminal, parse_phase


@dataclass(frozen=True)
class SignupCode:
    code: str
    used: bool = False
    used_at: datetime | None = None
    email: str | None = None
    payment_id: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict) -> "SignupCode":
        return cls(
            code=doc["code"],
            used=bool(doc.get("used")),
            used_at=doc.get("used_at"),
            email=doc.get("email") or None,
            payment_id=doc.get("payment_id") or None,
            created_at=doc.get("created_at"),
        )


@dataclass(frozen=True)
class PhaseEntry:
    phase: ProjectPhase
    entered_at: datetime


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    current_phase: ProjectPhase = INITIAL_PHASE
    phase_history: tuple[PhaseEntry, ...] = field(default_factory=tuple)
    client_email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return is_terminal(self.current_phase)

    @classmethod
    def from_document(cls, doc: dict) -> "Project":
        project_id = doc["id"]
        history = tuple(
            PhaseEntry(
                phase=parse_phase(entry["phase"], project_id),
                entered_at=entry["entered_at"],
            )
            for entry in doc.get("phase_history") or []
        )
        return cls(
            id=project_id,
            name=doc.get("name") or "",
            current_phase=parse_phase(doc.get("current_phase"), project_id),
            phase_history=history,
            client_email=doc.get("client_email"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )


def new_project_document(
    project_id: str, name: str, client_email: str | None, now: datetime,
) -> dict:
    return {
        "id": project_id,
        "name": name,
        "client_email": client_email,
        "current_phase": INITIAL_PHASE.value,
        "phase_history": [],
        "created_at": now,
        "updated_at": now,
    }
