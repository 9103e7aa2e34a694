"""
Code Migration Routes
Translation of single files and whole projects through the AI service

Failure handling differs on purpose:
- /migrate and /generate-tests answer 500 when the AI service fails
- /migrate-project always answers 200 with per-file errors in its results
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
from models import MigrationType, SUPPORTED_LANGUAGES
from services.errors import AIServiceError, NotFoundError
from services.migration_pipeline import ProjectFileInput
from services.migration_service import MigrationService
from routes.deps import get_migration_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["migration"])


# ============================================
# REQUEST MODELS
# ============================================

class MigrateRequest(BaseModel):
    source_code: str
    source_language: str = Field(..., min_length=1)
    target_language: str = Field(..., min_length=1)
    project_name: Optional[str] = None
    source_version: Optional[str] = None
    target_version: Optional[str] = None
    file_name: Optional[str] = None
    migration_type: Optional[str] = None
    file_id: Optional[int] = None


class ProjectFile(BaseModel):
    file_name: str = Field(..., min_length=1)
    file_path: str
    content: str


class MigrateProjectRequest(BaseModel):
    project_files: List[ProjectFile]
    source_language: str = Field(..., min_length=1)
    target_language: str = Field(..., min_length=1)
    project_name: Optional[str] = None
    source_version: Optional[str] = None
    target_version: Optional[str] = None
    preserve_structure: bool = True
    project_id: Optional[int] = None


class GenerateTestsRequest(BaseModel):
    source_code: str
    target_code: str
    source_language: str = Field(..., min_length=1)
    target_language: str = Field(..., min_length=1)
    file_id: Optional[int] = None


# ============================================
# ROUTES
# ============================================

@router.get("/migration-options")
async def get_migration_options():
    """Languages/frameworks and migration categories offered to users"""
    return {
        "languages": SUPPORTED_LANGUAGES,
        "migration_types": [migration_type.value for migration_type in MigrationType],
    }


@router.post("/migrate")
async def migrate_code(
    request: MigrateRequest,
    service: MigrationService = Depends(get_migration_service)
):
    """
    Translate a single snippet and analyze the result

    When file_id is given the translation and analysis are stored against that file.

    Returns:
        {"migrated_code": str, "analysis": {...}}
    """
    try:
        return await service.migrate_file(
            request.source_code,
            request.source_language,
            request.target_language,
            source_version=request.source_version,
            target_version=request.target_version,
            file_id=request.file_id,
            file_name=request.file_name,
        )

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AIServiceError as e:
        raise HTTPException(status_code=500, detail=f"AI service error: {e.message}")
    except Exception as e:
        logger.error(f"Migration failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to migrate code")


@router.post("/migrate-project")
async def migrate_project(
    request: MigrateProjectRequest,
    service: MigrationService = Depends(get_migration_service)
):
    """
    Migrate every file of a project, in order

    Returns:
        {"results": [...], "summary": {...}, "project_analysis": {...}}
    """
    try:
        logger.info(
            f"Project migration requested: {request.project_name or 'unnamed'} "
            f"({len(request.project_files)} files)"
        )
        files = [
            ProjectFileInput(file_name=f.file_name, file_path=f.file_path, content=f.content)
            for f in request.project_files
        ]
        return await service.migrate_project(
            files,
            request.source_language,
            request.target_language,
            source_version=request.source_version,
            target_version=request.target_version,
            project_id=request.project_id,
        )

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Project migration failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to migrate project: {str(e)}")


@router.post("/generate-tests")
async def generate_tests(
    request: GenerateTestsRequest,
    service: MigrationService = Depends(get_migration_service)
):
    """Generate unit tests checking the migrated code against the original"""
    try:
        return await service.generate_tests(
            request.source_code,
            request.target_code,
            request.source_language,
            request.target_language,
            file_id=request.file_id,
        )

    except AIServiceError as e:
        raise HTTPException(status_code=500, detail=f"AI service error: {e.message}")
    except Exception as e:
        logger.error(f"Test generation failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate tests")
