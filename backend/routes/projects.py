"""
Migration Projects Routes
Handles project CRUD

Features:
- List projects (optionally for one user)
- Create/update projects with validated language pairing
- Delete a project together with its files and their analyses
"""
from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from models import MigrationType, ProjectStatus
from services.notifier import ChangeNotifier, EventType
from services.storage import MigrationStorage
from routes.deps import get_notifier, get_storage
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/projects", tags=["projects"])


# ============================================
# REQUEST/RESPONSE MODELS
# ============================================

class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    migration_type: MigrationType
    source_language: str = Field(..., min_length=1, max_length=100)
    source_version: Optional[str] = None
    target_language: str = Field(..., min_length=1, max_length=100)
    target_version: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PENDING
    user_id: Optional[int] = None


class UpdateProjectRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    migration_type: Optional[MigrationType] = None
    source_language: Optional[str] = Field(None, min_length=1, max_length=100)
    source_version: Optional[str] = None
    target_language: Optional[str] = Field(None, min_length=1, max_length=100)
    target_version: Optional[str] = None
    status: Optional[ProjectStatus] = None
    total_files: Optional[int] = Field(None, ge=0)
    completed_files: Optional[int] = Field(None, ge=0)
    failed_files: Optional[int] = Field(None, ge=0)
    user_id: Optional[int] = None

    @field_validator(
        "name", "migration_type", "source_language", "target_language", "status",
        "total_files", "completed_files", "failed_files",
        mode="before",
    )
    @classmethod
    def reject_null(cls, value):
        # Required columns may be omitted but not cleared
        if value is None:
            raise ValueError("may not be null")
        return value


# ============================================
# ROUTES
# ============================================

@router.get("")
async def list_projects(
    user_id: Optional[int] = None,
    storage: MigrationStorage = Depends(get_storage)
):
    """List migration projects, optionally only those owned by ``user_id``"""
    try:
        return storage.list_projects(user_id=user_id)
    except Exception as e:
        logger.error(f"Failed to list projects: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch projects")


@router.get("/{project_id}")
async def get_project(project_id: int, storage: MigrationStorage = Depends(get_storage)):
    """Get a single project"""
    try:
        project = storage.get_project(project_id)
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        return project

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch project")


@router.post("", status_code=201)
async def create_project(
    request: CreateProjectRequest,
    storage: MigrationStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier)
):
    """
    Create a migration project

    Returns:
        The stored project with its generated id
    """
    try:
        project = storage.create_project(request.model_dump(mode="json"))
        logger.info(f"Created project {project['id']}: {project['name']}")

        await notifier.broadcast(EventType.PROJECT_CREATED, project)
        return project

    except Exception as e:
        logger.error(f"Failed to create project: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create project")


@router.put("/{project_id}")
async def update_project(
    project_id: int,
    request: UpdateProjectRequest,
    storage: MigrationStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier)
):
    """Partially update a project; only fields present in the body change"""
    try:
        changes = request.model_dump(mode="json", exclude_unset=True)
        project = storage.update_project(project_id, changes)
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")

        await notifier.broadcast(EventType.PROJECT_UPDATED, project)
        return project

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update project")


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: int,
    storage: MigrationStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier)
):
    """Delete a project and everything it owns"""
    try:
        if not storage.delete_project(project_id):
            raise HTTPException(status_code=404, detail="Project not found")

        logger.info(f"Deleted project {project_id}")
        await notifier.broadcast(EventType.PROJECT_DELETED, {"id": project_id})
        return Response(status_code=204)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete project")
