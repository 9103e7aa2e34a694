"""
Migration file model - one source file attached to a project
"""
from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum
from database import Base


class FileStatus(str, Enum):
    """File lifecycle states"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class MigrationFile(Base):
    __tablename__ = "migration_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("migration_projects.id"), nullable=False, index=True)

    # File identity
    file_name = Column(String(500), nullable=False)
    file_path = Column(String(1024))
    file_type = Column(String(50))  # extension without the dot, or "unknown"
    file_size = Column(Integer)  # bytes

    # Content
    source_code = Column(Text, nullable=False)
    target_code = Column(Text)

    # Status
    status = Column(String(50), default=FileStatus.PENDING.value, nullable=False)
    processing_time = Column(Integer)  # milliseconds
    migration_errors = Column(JSON)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    project = relationship("MigrationProject", back_populates="files")
    analysis = relationship("MigrationAnalysis", back_populates="file", uselist=False)

    def __repr__(self):
        return f"<MigrationFile {self.file_name} - {self.status}>"
