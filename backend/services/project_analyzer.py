"""
Project-level migration report built from batch outcomes

The numeric statistics always come from the real outcomes. The qualitative
sections come from the external service and degrade to sentinel values when
the reply is unusable or the call fails; the batch result is never blocked.
"""
import posixpath
from typing import Any, Dict, List
import logging

from services.ai_service import parse_json_object
from services.file_classifier import should_translate
from services.migration_pipeline import FileOutcome, MigrationSummary, ProjectFileInput

logger = logging.getLogger(__name__)

UNKNOWN_COMPLEXITY = "Unknown"


class ProjectAnalyzer:
    """Builds the project report that accompanies a batch migration"""

    def __init__(self, ai_service, sample_size: int = 3):
        self.ai_service = ai_service
        self.sample_size = sample_size

    def select_sample(self, files: List[ProjectFileInput]) -> List[Dict[str, str]]:
        """First ``sample_size`` translatable files, in input order"""
        eligible = [f for f in files if should_translate(f.file_name)]
        return [
            {"file_name": f.file_name, "content": f.content}
            for f in eligible[:self.sample_size]
        ]

    def build_project_info(
        self,
        files: List[ProjectFileInput],
        summary: MigrationSummary,
        source_language: str,
        target_language: str,
    ) -> Dict[str, Any]:
        file_types = sorted({
            posixpath.splitext(f.file_name)[1] or "no-extension" for f in files
        })
        return {
            "source_language": source_language,
            "target_language": target_language,
            "file_count": len(files),
            "file_types": file_types,
            "migration_stats": summary.to_stats(),
        }

    async def summarize_project(
        self,
        files: List[ProjectFileInput],
        outcomes: List[FileOutcome],
        source_language: str,
        target_language: str,
    ) -> Dict[str, Any]:
        """
        Build the project report

        Args:
            files: Files that were submitted
            outcomes: Per-file outcomes from the pipeline
            source_language: Source language/framework
            target_language: Target language/framework

        Returns:
            Report dict; always contains ``migration_stats``
        """
        summary = MigrationSummary.from_outcomes(outcomes)
        stats = summary.to_stats()

        try:
            response_text = await self.ai_service.summarize_project(
                self.build_project_info(files, summary, source_language, target_language),
                self.select_sample(files),
                source_language,
                target_language,
            )
        except Exception as e:
            logger.error(f"Error generating project analysis: {e}")
            return {
                "project_overview": "Error generating analysis",
                "migration_complexity": UNKNOWN_COMPLEXITY,
                "error": str(e) or "Unknown error",
                "migration_stats": stats,
            }

        analysis = parse_json_object(response_text)
        if analysis is None:
            logger.warning("Project analysis reply was not valid JSON, using fallback report")
            return {
                "project_overview": "Analysis could not be generated",
                "migration_complexity": UNKNOWN_COMPLEXITY,
                "migration_stats": stats,
            }

        report = dict(analysis)
        report.setdefault("migration_complexity", UNKNOWN_COMPLEXITY)
        report["migration_stats"] = stats
        return report
