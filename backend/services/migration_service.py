"""
Migration service - orchestrates translation, analysis, persistence and events

Failure policy differs by entry point:
- migrate_file reports external-service failures to the caller (AIServiceError)
- migrate_project records them per file and always returns a full result
"""
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from models import FileStatus, ProjectStatus
from services.analysis_metrics import (
    ProcessingTimer,
    calculate_compatibility_score,
    determine_migration_complexity,
    normalize_analysis_payload,
)
from services.errors import AIServiceError, NotFoundError
from services.file_classifier import enhance_file_metadata
from services.migration_pipeline import FileOutcome, MigrationPipeline, ProjectFileInput
from services.notifier import EventType
from services.project_analyzer import ProjectAnalyzer

logger = logging.getLogger(__name__)


class MigrationService:
    """Entry point used by the migration routes"""

    def __init__(self, storage, ai_service, notifier, sample_size: int = 3):
        self.storage = storage
        self.ai_service = ai_service
        self.notifier = notifier
        self.pipeline = MigrationPipeline(ai_service)
        self.analyzer = ProjectAnalyzer(ai_service, sample_size=sample_size)

    # ============================================
    # SINGLE FILE
    # ============================================

    async def migrate_file(
        self,
        source_code: str,
        source_language: str,
        target_language: str,
        source_version: Optional[str] = None,
        target_version: Optional[str] = None,
        file_id: Optional[int] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Translate one snippet and analyze the result

        When ``file_id`` is given the file record receives the translated code
        and the analysis is stored against it.

        Returns:
            {"migrated_code": str, "analysis": dict}

        Raises:
            NotFoundError: ``file_id`` does not exist
            AIServiceError: translation or analysis call failed
        """
        if file_id is not None and self.storage.get_file(file_id) is None:
            raise NotFoundError("File", file_id)

        timer = ProcessingTimer()
        try:
            migrated_code = await self.ai_service.translate(
                source_code,
                source_language,
                target_language,
                source_version=source_version,
                target_version=target_version,
                file_name=file_name,
            )
            raw_analysis = await self.ai_service.analyze_migration(
                source_code, migrated_code, source_language, target_language
            )
        except AIServiceError as e:
            logger.error(f"Migration failed for file {file_id}: {e.message}")
            if file_id is not None:
                await self._mark_file_failed(file_id, e.message, timer.elapsed_ms())
            raise

        analysis = normalize_analysis_payload(raw_analysis)
        analysis["compatibility_score"] = calculate_compatibility_score(analysis["key_changes"])
        analysis["migration_complexity"] = determine_migration_complexity(
            source_code, analysis["key_changes"]
        )

        if file_id is not None:
            self.storage.update_file(file_id, {
                "target_code": migrated_code,
                "status": FileStatus.COMPLETED.value,
                "processing_time": timer.elapsed_ms(),
                "migration_errors": None,
            })
            self._save_analysis(file_id, analysis)
            await self.notifier.broadcast(EventType.MIGRATION_COMPLETED, {
                "file_id": file_id,
                "status": FileStatus.COMPLETED.value,
            })

        return {"migrated_code": migrated_code, "analysis": analysis}

    def _save_analysis(self, file_id: int, analysis: Dict[str, Any]) -> Dict[str, Any]:
        """Create the file's analysis, or replace it when one exists"""
        existing = self.storage.get_analysis_by_file(file_id)
        if existing:
            return self.storage.update_analysis(existing["id"], analysis)
        return self.storage.create_analysis({"file_id": file_id, **analysis})

    async def _mark_file_failed(self, file_id: int, message: str, elapsed_ms: int):
        updated = self.storage.update_file(file_id, {
            "status": FileStatus.FAILED.value,
            "processing_time": elapsed_ms,
            "migration_errors": {"message": message},
        })
        if updated:
            await self.notifier.broadcast(EventType.FILE_UPDATED, updated)

    # ============================================
    # WHOLE PROJECT
    # ============================================

    async def migrate_project(
        self,
        files: List[ProjectFileInput],
        source_language: str,
        target_language: str,
        source_version: Optional[str] = None,
        target_version: Optional[str] = None,
        project_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Migrate a list of files and build the project report

        When ``project_id`` is given, every file is stored under that project
        with its outcome and the project's status and counters are kept up to date.

        Returns:
            {"results": [...], "summary": {...}, "project_analysis": {...}}

        Raises:
            NotFoundError: ``project_id`` does not exist
        """
        if project_id is not None:
            if self.storage.get_project(project_id) is None:
                raise NotFoundError("Project", project_id)
            project = self.storage.update_project(project_id, {
                "status": ProjectStatus.IN_PROGRESS.value,
                "started_at": datetime.utcnow(),
                "completed_at": None,
                "total_files": len(files),
                "completed_files": 0,
                "failed_files": 0,
            })
            await self.notifier.broadcast(EventType.PROJECT_UPDATED, project)

        counters = {"completed_files": 0, "failed_files": 0}

        async def record_outcome(index: int, outcome: FileOutcome):
            if project_id is None:
                return
            await self._persist_outcome(project_id, files[index], outcome, counters)

        batch = await self.pipeline.migrate_project(
            files,
            source_language,
            target_language,
            source_version=source_version,
            target_version=target_version,
            on_outcome=record_outcome,
        )

        project_analysis = await self.analyzer.summarize_project(
            files, batch.results, source_language, target_language
        )

        if project_id is not None:
            final_status = ProjectStatus.FAILED if batch.summary.failed else ProjectStatus.COMPLETED
            self.storage.update_project(project_id, {
                "status": final_status.value,
                "completed_at": datetime.utcnow(),
            })
            await self.notifier.broadcast(EventType.MIGRATION_COMPLETED, {
                "project_id": project_id,
                "status": final_status.value,
                "summary": asdict(batch.summary),
            })

        return {
            "results": [outcome.to_dict() for outcome in batch.results],
            "summary": asdict(batch.summary),
            "project_analysis": project_analysis,
        }

    async def _persist_outcome(
        self,
        project_id: int,
        file: ProjectFileInput,
        outcome: FileOutcome,
        counters: Dict[str, int],
    ):
        """Store one batch outcome as a file record and bump project counters"""
        if outcome.failed:
            status = FileStatus.FAILED.value
            counters["failed_files"] += 1
        else:
            # Skipped files pass through unchanged and count as completed
            status = FileStatus.COMPLETED.value
            counters["completed_files"] += 1

        record = self.storage.create_file(enhance_file_metadata({
            "project_id": project_id,
            "file_name": file.file_name,
            "file_path": file.file_path,
            "source_code": file.content,
            "target_code": outcome.target_code,
            "status": status,
            "processing_time": outcome.processing_time,
            "migration_errors": {"message": outcome.error} if outcome.failed else None,
        }))
        self.storage.update_project(project_id, dict(counters))
        await self.notifier.broadcast(EventType.FILE_CREATED, record)

    # ============================================
    # TEST GENERATION
    # ============================================

    async def generate_tests(
        self,
        source_code: str,
        target_code: str,
        source_language: str,
        target_language: str,
        file_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Generate unit tests for migrated code

        When ``file_id`` has an analysis, its generated_tests field is replaced.

        Raises:
            AIServiceError: the external call failed
        """
        generated_tests = await self.ai_service.generate_tests(
            source_code, target_code, source_language, target_language
        )

        if file_id is not None:
            analysis = self.storage.get_analysis_by_file(file_id)
            if analysis:
                self.storage.update_analysis(analysis["id"], {"generated_tests": generated_tests})
                await self.notifier.broadcast(EventType.TESTS_GENERATED, {
                    "file_id": file_id,
                    "generated_tests": generated_tests,
                })
            else:
                logger.info(f"No analysis for file {file_id}; generated tests not stored")

        return {"generated_tests": generated_tests}
