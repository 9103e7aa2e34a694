"""
Database models
"""
from .user import User
from .project import MigrationProject, MigrationType, ProjectStatus, SUPPORTED_LANGUAGES
from .migration_file import MigrationFile, FileStatus
from .analysis import MigrationAnalysis

__all__ = [
    "User",
    "MigrationProject",
    "MigrationType",
    "ProjectStatus",
    "SUPPORTED_LANGUAGES",
    "MigrationFile",
    "FileStatus",
    "MigrationAnalysis",
]
