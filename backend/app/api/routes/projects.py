"""Project Routes — creation, lookup and phase advancement.

Invariants:
    - POST /projects creates at DISCOVERY with empty phaseHistory
    - GET /projects lists newest first
    - POST /projects/{id}/phase/next advances one phase with bounded retry;
      409 only when every attempt lost a race, 200 unchanged at DELIVERY

Design Decisions:
    - Retry budget read from settings (phase_advance_max_attempts)
"""

import logging

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_phase_engine
from app.config import Settings, get_settings
from app.schemas.project import ProjectCreate, ProjectList, ProjectResponse
from app.services.phase_progression import PhaseProgressionEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


@router.post(
    "", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
)
async def create_project(
    body: ProjectCreate,
    engine: PhaseProgressionEngine = Depends(get_phase_engine),
):
    project = await engine.create_project(body.name, body.client_email)
    return ProjectResponse.from_record(project)


@router.get("", response_model=ProjectList)
async def list_projects(
    engine: PhaseProgressionEngine = Depends(get_phase_engine),
):
    """All projects, newest first."""
    projects = await engine.list_projects()
    return ProjectList(projects=[ProjectResponse.from_record(p) for p in projects])


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    engine: PhaseProgressionEngine = Depends(get_phase_engine),
):
    project = await engine.get_project(project_id)
    return ProjectResponse.from_record(project)


@router.post("/{project_id}/phase/next", response_model=ProjectResponse)
async def advance_phase(
    project_id: str,
    engine: PhaseProgressionEngine = Depends(get_phase_engine),
    settings: Settings = Depends(get_settings),
):
    """Move the project to its next phase (no-op at DELIVERY)."""
    project = await engine.advance_with_retry(
        project_id, max_attempts=settings.phase_advance_max_attempts,
    )
    return ProjectResponse.from_record(project)
