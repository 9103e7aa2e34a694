"""
Business Logic Services for Code Migration

This package provides:
- File classification (translate vs pass through)
- AI-powered translation, analysis and test generation
- Batch migration pipeline and project reports
- Storage backends (database and in-memory)
- Change-event fan-out
"""

# Core services
from .migration_service import MigrationService
from .migration_pipeline import MigrationPipeline, ProjectFileInput, FileOutcome, MigrationSummary
from .project_analyzer import ProjectAnalyzer

# AI Services
from .ai_service import MigrationAIService

# Storage
from .storage import MigrationStorage, DatabaseStorage, MemoryStorage, create_storage

# Events
from .notifier import ChangeNotifier, EventType

# Errors
from .errors import MigrationServiceError, AIServiceError, NotFoundError

__all__ = [
    # Core
    "MigrationService",
    "MigrationPipeline",
    "ProjectFileInput",
    "FileOutcome",
    "MigrationSummary",
    "ProjectAnalyzer",

    # AI
    "MigrationAIService",

    # Storage
    "MigrationStorage",
    "DatabaseStorage",
    "MemoryStorage",
    "create_storage",

    # Events
    "ChangeNotifier",
    "EventType",

    # Errors
    "MigrationServiceError",
    "AIServiceError",
    "NotFoundError",
]
