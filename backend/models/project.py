"""
Migration project model - a source/target language pairing that owns files
"""
from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum
from database import Base


class MigrationType(str, Enum):
    """Migration categories offered to users"""
    VERSION_UPGRADE = "Language Version Upgrade"
    FRAMEWORK_TRANSITION = "Framework Transition"
    API_ADAPTATION = "API Adaptation"
    ARCHITECTURAL_SHIFT = "Architectural Shift"
    FULL_REWRITE = "Full Rewrite"


# Languages and frameworks offered in the project form
SUPPORTED_LANGUAGES = [
    "JavaScript", "TypeScript", "Python", "Java", "C#", "PHP", "Ruby", "Go",
    "Rust", "Swift", "Kotlin", "C++", "C", "Scala", "Haskell", "Perl", "R",
    "Dart", "Lua", "Elixir",
    "Node.js", "React", "Angular", "Vue.js", "Django", "Flask", "Spring",
    "Express", "Ruby on Rails", "Laravel", "ASP.NET",
]


class ProjectStatus(str, Enum):
    """Project lifecycle states"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


class MigrationProject(Base):
    __tablename__ = "migration_projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    migration_type = Column(String(50), nullable=False)

    # Language pairing
    source_language = Column(String(100), nullable=False)
    source_version = Column(String(50))
    target_language = Column(String(100), nullable=False)
    target_version = Column(String(50))

    # Status
    status = Column(String(50), default=ProjectStatus.PENDING.value, nullable=False)

    # Counters
    total_files = Column(Integer, default=0)
    completed_files = Column(Integer, default=0)
    failed_files = Column(Integer, default=0)

    # Timestamps
    started_at = Column(DateTime)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Owner (placeholder, no authentication)
    user_id = Column(Integer, ForeignKey("users.id"))

    # Relationships
    user = relationship("User", back_populates="projects")
    files = relationship("MigrationFile", back_populates="project")

    def __repr__(self):
        return f"<MigrationProject {self.name} ({self.source_language} -> {self.target_language})>"
