"""
Batch migration pipeline - translates a project's files one at a time

Files are processed strictly sequentially in input order. Each file ends up
with exactly one outcome: migrated, skipped (not code) or failed (error text
recorded). A failure never aborts the batch and nothing is retried.
"""
from dataclasses import dataclass, field, asdict
import inspect
from typing import Any, Callable, Dict, List, Optional
import logging

from services.analysis_metrics import ProcessingTimer
from services.file_classifier import should_translate

logger = logging.getLogger(__name__)

SKIP_REASON = "File type doesn't require migration"


@dataclass
class ProjectFileInput:
    """A file submitted for batch migration"""
    file_name: str
    file_path: str
    content: str


@dataclass
class FileOutcome:
    """Per-file result of a batch migration attempt"""
    file_name: str
    file_path: str
    migrated: bool
    target_code: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[str] = None
    processing_time: Optional[int] = None  # milliseconds

    @property
    def skipped(self) -> bool:
        return not self.migrated and not self.error

    @property
    def failed(self) -> bool:
        return not self.migrated and bool(self.error)

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class MigrationSummary:
    """Counters over a batch; migrated + skipped + failed == total"""
    total: int = 0
    migrated: int = 0
    skipped: int = 0
    failed: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: List[FileOutcome]) -> "MigrationSummary":
        return cls(
            total=len(outcomes),
            migrated=sum(1 for o in outcomes if o.migrated),
            skipped=sum(1 for o in outcomes if o.skipped),
            failed=sum(1 for o in outcomes if o.failed),
        )

    def to_stats(self) -> Dict[str, int]:
        """Statistics block embedded in project reports"""
        return {
            "total_files": self.total,
            "migrated_files": self.migrated,
            "skipped_files": self.skipped,
            "failed_files": self.failed,
        }


@dataclass
class BatchMigrationResult:
    results: List[FileOutcome] = field(default_factory=list)
    summary: MigrationSummary = field(default_factory=MigrationSummary)


class MigrationPipeline:
    """Classify each file, translate the eligible ones, collect outcomes"""

    def __init__(self, ai_service, classifier: Callable[[str], bool] = should_translate):
        """
        Args:
            ai_service: Object exposing an async ``translate`` (MigrationAIService)
            classifier: Decides whether a file name is sent for translation
        """
        self.ai_service = ai_service
        self.classifier = classifier

    async def migrate_file(
        self,
        file: ProjectFileInput,
        source_language: str,
        target_language: str,
        source_version: Optional[str] = None,
        target_version: Optional[str] = None,
    ) -> FileOutcome:
        """Produce the outcome for one file; never raises for translation failures"""
        if not self.classifier(file.file_name):
            logger.info(f"Skipping {file.file_name}: not a code file")
            return FileOutcome(
                file_name=file.file_name,
                file_path=file.file_path,
                migrated=False,
                target_code=file.content,
                reason=SKIP_REASON,
            )

        timer = ProcessingTimer()
        try:
            target_code = await self.ai_service.translate(
                file.content,
                source_language,
                target_language,
                source_version=source_version,
                target_version=target_version,
                file_path=file.file_path,
                file_name=file.file_name,
            )
        except Exception as e:
            logger.error(f"Error migrating file {file.file_name}: {e}")
            return FileOutcome(
                file_name=file.file_name,
                file_path=file.file_path,
                migrated=False,
                error=str(e) or "Unknown error",
                processing_time=timer.elapsed_ms(),
            )

        return FileOutcome(
            file_name=file.file_name,
            file_path=file.file_path,
            migrated=True,
            target_code=target_code,
            processing_time=timer.elapsed_ms(),
        )

    async def migrate_project(
        self,
        files: List[ProjectFileInput],
        source_language: str,
        target_language: str,
        source_version: Optional[str] = None,
        target_version: Optional[str] = None,
        on_outcome: Optional[Callable[[int, FileOutcome], Any]] = None,
    ) -> BatchMigrationResult:
        """
        Migrate every file in order

        Args:
            files: Files to migrate
            source_language: Source language/framework
            target_language: Target language/framework
            source_version: Optional source version
            target_version: Optional target version
            on_outcome: Optional callback ``(index, outcome)`` run after each file;
                coroutine results are awaited before the next file starts

        Returns:
            One outcome per input file, in input order, plus summary counters
        """
        logger.info(
            f"Batch migration of {len(files)} files: {source_language} -> {target_language}"
        )
        outcomes: List[FileOutcome] = []

        for index, file in enumerate(files):
            outcome = await self.migrate_file(
                file,
                source_language,
                target_language,
                source_version=source_version,
                target_version=target_version,
            )
            outcomes.append(outcome)
            if on_outcome is not None:
                result = on_outcome(index, outcome)
                if inspect.isawaitable(result):
                    await result

        summary = MigrationSummary.from_outcomes(outcomes)
        logger.info(
            f"Batch migration done: {summary.migrated} migrated, "
            f"{summary.skipped} skipped, {summary.failed} failed"
        )
        return BatchMigrationResult(results=outcomes, summary=summary)
