"""
Migration Files Routes
Handles source files attached to migration projects
"""
from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional
from models import FileStatus
from services.file_classifier import enhance_file_metadata, organize_files_by_directory
from services.notifier import ChangeNotifier, EventType
from services.storage import MigrationStorage
from routes.deps import get_notifier, get_storage
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/files", tags=["files"])


# ============================================
# REQUEST/RESPONSE MODELS
# ============================================

class CreateFileRequest(BaseModel):
    project_id: int
    file_name: str = Field(..., min_length=1, max_length=255)
    file_path: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    source_code: str
    target_code: Optional[str] = None
    status: FileStatus = FileStatus.PENDING
    processing_time: Optional[int] = Field(None, ge=0)
    migration_errors: Optional[Any] = None


class UpdateFileRequest(BaseModel):
    file_name: Optional[str] = Field(None, min_length=1, max_length=255)
    file_path: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    source_code: Optional[str] = None
    target_code: Optional[str] = None
    status: Optional[FileStatus] = None
    processing_time: Optional[int] = Field(None, ge=0)
    migration_errors: Optional[Any] = None

    @field_validator("file_name", "source_code", "status", mode="before")
    @classmethod
    def reject_null(cls, value):
        # Required columns may be omitted but not cleared
        if value is None:
            raise ValueError("may not be null")
        return value


# ============================================
# ROUTES
# ============================================

@router.get("/single/{file_id}")
async def get_file(file_id: int, storage: MigrationStorage = Depends(get_storage)):
    """Get a single file"""
    try:
        file = storage.get_file(file_id)
        if not file:
            raise HTTPException(status_code=404, detail="File not found")
        return file

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get file {file_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch file")


@router.get("/{project_id}/tree")
async def get_file_tree(project_id: int, storage: MigrationStorage = Depends(get_storage)):
    """Project files grouped by directory"""
    try:
        files = storage.get_files_by_project(project_id)
        return {
            "project_id": project_id,
            "file_count": len(files),
            "directories": organize_files_by_directory(files),
        }
    except Exception as e:
        logger.error(f"Failed to build file tree for project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch files")


@router.get("/{project_id}")
async def list_project_files(project_id: int, storage: MigrationStorage = Depends(get_storage)):
    """List a project's files (empty list for unknown projects)"""
    try:
        return storage.get_files_by_project(project_id)
    except Exception as e:
        logger.error(f"Failed to list files for project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch files")


@router.post("", status_code=201)
async def create_file(
    request: CreateFileRequest,
    storage: MigrationStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier)
):
    """
    Attach a source file to a project

    file_type and file_size are derived from the name and source when omitted.
    """
    try:
        if not storage.get_project(request.project_id):
            raise HTTPException(status_code=404, detail="Project not found")

        data = enhance_file_metadata(request.model_dump(mode="json"))
        file = storage.create_file(data)
        logger.info(f"Created file {file['id']} ({file['file_name']}) in project {file['project_id']}")

        await notifier.broadcast(EventType.FILE_CREATED, file)
        return file

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create file: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create file")


@router.put("/{file_id}")
async def update_file(
    file_id: int,
    request: UpdateFileRequest,
    storage: MigrationStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier)
):
    """Partially update a file"""
    try:
        changes = request.model_dump(mode="json", exclude_unset=True)
        file = storage.update_file(file_id, changes)
        if not file:
            raise HTTPException(status_code=404, detail="File not found")

        await notifier.broadcast(EventType.FILE_UPDATED, file)
        return file

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update file {file_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update file")


@router.delete("/{file_id}", status_code=204)
async def delete_file(
    file_id: int,
    storage: MigrationStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier)
):
    """Delete a file and its analysis"""
    try:
        if not storage.delete_file(file_id):
            raise HTTPException(status_code=404, detail="File not found")

        await notifier.broadcast(EventType.FILE_DELETED, {"id": file_id})
        return Response(status_code=204)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete file {file_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete file")
