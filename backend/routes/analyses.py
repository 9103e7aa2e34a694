"""
Migration Analyses Routes
Handles the per-file analysis that accompanies a translation
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional
from services.notifier import ChangeNotifier, EventType
from services.storage import MigrationStorage
from routes.deps import get_notifier, get_storage
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/analysis", tags=["analyses"])


# ============================================
# REQUEST/RESPONSE MODELS
# ============================================

class KeyChange(BaseModel):
    category: str
    description: str
    severity: Optional[Literal["info", "warning", "critical"]] = None


class PerformanceMetric(BaseModel):
    name: str
    score: float = Field(..., ge=0, le=100)
    description: Optional[str] = None


class BusinessLogicScore(BaseModel):
    category: str
    score: float = Field(..., ge=0, le=100)
    details: Optional[str] = None


class CreateAnalysisRequest(BaseModel):
    file_id: int
    key_changes: List[KeyChange]
    performance_metrics: Optional[Dict[str, PerformanceMetric]] = None
    business_logic_preservation: Optional[Dict[str, BusinessLogicScore]] = None
    generated_tests: Optional[str] = None
    compatibility_score: Optional[int] = Field(None, ge=0, le=100)
    security_issues: Optional[List[str]] = None
    optimization_suggestions: Optional[List[str]] = None
    migration_complexity: Optional[Literal["low", "medium", "high"]] = None


# ============================================
# ROUTES
# ============================================

@router.get("/{file_id}")
async def get_file_analysis(file_id: int, storage: MigrationStorage = Depends(get_storage)):
    """Get the analysis attached to a file"""
    try:
        analysis = storage.get_analysis_by_file(file_id)
        if not analysis:
            raise HTTPException(status_code=404, detail="Analysis not found")
        return analysis

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get analysis for file {file_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch analysis")


@router.post("", status_code=201)
async def create_analysis(
    request: CreateAnalysisRequest,
    storage: MigrationStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier)
):
    """
    Attach an analysis to a file

    A file holds at most one analysis; a second one is rejected with 400.
    """
    try:
        if not storage.get_file(request.file_id):
            raise HTTPException(status_code=404, detail="File not found")
        if storage.get_analysis_by_file(request.file_id):
            raise HTTPException(
                status_code=400,
                detail=f"File {request.file_id} already has an analysis"
            )

        analysis = storage.create_analysis(request.model_dump(mode="json"))
        await notifier.broadcast(EventType.ANALYSIS_CREATED, analysis)
        return analysis

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create analysis: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create analysis")
