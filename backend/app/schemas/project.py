"""Project Schemas — project creation and phase views.

Invariants:
    - ProjectCreate.name: 1-200 chars, stripped, non-empty
    - phaseHistory is returned oldest first
    - ProjectList.projects is returned newest first
"""

from datetime import datetime

from pydantic import Field, field_validator

from app.core.domain_types import ProjectPhase
from app.core.records import Project
from app.schemas.common import CamelModel


class ProjectCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    client_email: str | None = Field(None, max_length=320)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class PhaseEntryView(CamelModel):
    phase: ProjectPhase
    entered_at: datetime


class ProjectResponse(CamelModel):
    id: str
    name: str
    client_email: str | None = None
    current_phase: ProjectPhase
    phase_history: list[PhaseEntryView]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, project: Project) -> "ProjectResponse":
        return cls(
            id=project.id,
            name=project.name,
            client_email=project.client_email,
            current_phase=project.current_phase,
            phase_history=[
                PhaseEntryView(phase=e.phase, entered_at=e.entered_at)
                for e in project.phase_history
            ],
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class ProjectList(CamelModel):
    projects: list[ProjectResponse]
