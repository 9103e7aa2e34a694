"""Tests for the project-level migration report."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

from services.errors import AIServiceError
from services.migration_pipeline import FileOutcome, ProjectFileInput
from services.project_analyzer import UNKNOWN_COMPLEXITY, ProjectAnalyzer


FILES = [
    ProjectFileInput("logo.png", "assets/logo.png", "<binary>"),
    ProjectFileInput("app.py", "app.py", "print('a')"),
    ProjectFileInput("util.py", "lib/util.py", "def f(): pass"),
    ProjectFileInput("Makefile", "Makefile", "all:"),
    ProjectFileInput("extra.py", "extra.py", "x = 1"),
]

OUTCOMES = [
    FileOutcome("logo.png", "assets/logo.png", migrated=False, target_code="<binary>", reason="skip"),
    FileOutcome("app.py", "app.py", migrated=True, target_code="console.log('a')"),
    FileOutcome("util.py", "lib/util.py", migrated=False, error="timeout"),
    FileOutcome("Makefile", "Makefile", migrated=True, target_code="all:"),
    FileOutcome("extra.py", "extra.py", migrated=True, target_code="let x = 1"),
]

EXPECTED_STATS = {"total_files": 5, "migrated_files": 3, "skipped_files": 1, "failed_files": 1}


def _analyzer(reply=None, error=None, sample_size=3):
    ai = MagicMock()
    ai.summarize_project = AsyncMock(return_value=reply, side_effect=error)
    return ProjectAnalyzer(ai, sample_size=sample_size), ai


def _summarize(analyzer):
    return asyncio.run(analyzer.summarize_project(FILES, OUTCOMES, "Python", "Node.js"))


# ── Tests: report ─────────────────────────────────────────────────────────


class TestSummarizeProject:

    def test_structured_reply_is_merged_with_real_stats(self):
        reply = json.dumps({
            "project_overview": "CLI tool",
            "migration_complexity": "Moderate",
            "key_challenges": ["packaging"],
            "migration_stats": {"total_files": 999},
        })
        analyzer, _ = _analyzer(reply)
        report = _summarize(analyzer)

        assert report["project_overview"] == "CLI tool"
        assert report["migration_complexity"] == "Moderate"
        assert report["key_challenges"] == ["packaging"]
        assert report["migration_stats"] == EXPECTED_STATS

    def test_unparseable_reply_degrades_to_unknown(self):
        analyzer, _ = _analyzer("Sure! Here is your analysis: it is fine.")
        report = _summarize(analyzer)

        assert report["migration_complexity"] == UNKNOWN_COMPLEXITY
        assert report["project_overview"] == "Analysis could not be generated"
        assert report["migration_stats"] == EXPECTED_STATS

    def test_json_array_reply_degrades_to_unknown(self):
        analyzer, _ = _analyzer("[1, 2, 3]")
        assert _summarize(analyzer)["migration_complexity"] == UNKNOWN_COMPLEXITY

    def test_service_failure_becomes_error_report(self):
        analyzer, _ = _analyzer(error=AIServiceError("service unavailable"))
        report = _summarize(analyzer)

        assert report["project_overview"] == "Error generating analysis"
        assert report["error"] == "service unavailable"
        assert report["migration_complexity"] == UNKNOWN_COMPLEXITY
        assert report["migration_stats"] == EXPECTED_STATS

    def test_missing_complexity_defaults_to_unknown(self):
        analyzer, _ = _analyzer(json.dumps({"project_overview": "web app"}))
        assert _summarize(analyzer)["migration_complexity"] == UNKNOWN_COMPLEXITY


# ── Tests: request contents ───────────────────────────────────────────────


class TestReportRequest:

    def test_sample_is_first_three_code_files(self):
        analyzer, ai = _analyzer("{}")
        _summarize(analyzer)

        project_info, sample, source, target = ai.summarize_project.await_args.args
        assert [s["file_name"] for s in sample] == ["app.py", "util.py", "Makefile"]
        assert sample[0] == {"file_name": "app.py", "content": "print('a')"}
        assert (source, target) == ("Python", "Node.js")
        assert project_info["file_count"] == 5
        assert project_info["file_types"] == [".png", ".py", "no-extension"]
        assert project_info["migration_stats"] == EXPECTED_STATS

    def test_sample_size_is_configurable(self):
        analyzer, _ = _analyzer("{}", sample_size=1)
        assert [s["file_name"] for s in analyzer.select_sample(FILES)] == ["app.py"]
