"""
Migration analysis model - translation quality report for one file
"""
from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from database import Base


class MigrationAnalysis(Base):
    __tablename__ = "migration_analyses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(Integer, ForeignKey("migration_files.id"), nullable=False, unique=True)

    # Findings
    key_changes = Column(JSON, nullable=False)  # [{category, description, severity}]
    performance_metrics = Column(JSON)  # {name: {name, score, description}}
    business_logic_preservation = Column(JSON)  # {name: {category, score, details}}
    generated_tests = Column(Text)

    # Scores
    compatibility_score = Column(Integer)  # 0-100
    security_issues = Column(JSON)
    optimization_suggestions = Column(JSON)
    migration_complexity = Column(String(20))  # low, medium, high

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    file = relationship("MigrationFile", back_populates="analysis")

    def __repr__(self):
        return f"<MigrationAnalysis file={self.file_id} complexity={self.migration_complexity}>"
