"""
Storage layer - CRUD for users, projects, files and analyses

Two implementations share the MigrationStorage interface:
- DatabaseStorage: SQLAlchemy sessions (SQLite or PostgreSQL)
- MemoryStorage: per-process dicts, used for demo mode and tests

All methods take and return plain dict records keyed by column name. Updates
are partial and last write wins; nothing is versioned or locked.
"""
import copy
import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from models import User, MigrationProject, MigrationFile, MigrationAnalysis, MigrationType

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

USER_FIELDS = ("username", "password")
PROJECT_FIELDS = (
    "name", "description", "migration_type",
    "source_language", "source_version", "target_language", "target_version",
    "status", "total_files", "completed_files", "failed_files",
    "started_at", "completed_at", "user_id",
)
FILE_FIELDS = (
    "project_id", "file_name", "file_path", "file_type", "file_size",
    "source_code", "target_code", "status", "processing_time", "migration_errors",
)
ANALYSIS_FIELDS = (
    "file_id", "key_changes", "performance_metrics", "business_logic_preservation",
    "generated_tests", "compatibility_score", "security_issues",
    "optimization_suggestions", "migration_complexity",
)

PROJECT_DEFAULTS = {"status": "pending", "total_files": 0, "completed_files": 0, "failed_files": 0}
FILE_DEFAULTS = {"status": "pending"}
ANALYSIS_DEFAULTS = {"key_changes": []}

DEMO_USERNAME = "demo"

DEMO_PROJECTS = [
    {
        "name": "API Migration",
        "migration_type": MigrationType.FRAMEWORK_TRANSITION.value,
        "source_language": "Python",
        "source_version": "3.8",
        "target_language": "Node.js",
        "target_version": "16.x",
    },
    {
        "name": "Auth Service",
        "migration_type": MigrationType.VERSION_UPGRADE.value,
        "source_language": "Java",
        "source_version": "8",
        "target_language": "Java",
        "target_version": "17",
    },
    {
        "name": "Payment Module",
        "migration_type": MigrationType.FRAMEWORK_TRANSITION.value,
        "source_language": "Angular",
        "source_version": "11",
        "target_language": "React",
        "target_version": "18",
    },
]


def _pick(data: Dict[str, Any], fields) -> Record:
    return {key: data[key] for key in fields if key in data}


class MigrationStorage(ABC):
    """Persistence interface consumed by routes and the migration service"""

    name = "abstract"

    # User operations
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[Record]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[Record]: ...

    @abstractmethod
    def create_user(self, data: Dict[str, Any]) -> Record: ...

    # Project operations
    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Record]: ...

    @abstractmethod
    def list_projects(self, user_id: Optional[int] = None) -> List[Record]: ...

    @abstractmethod
    def create_project(self, data: Dict[str, Any]) -> Record: ...

    @abstractmethod
    def update_project(self, project_id: int, changes: Dict[str, Any]) -> Optional[Record]: ...

    @abstractmethod
    def delete_project(self, project_id: int) -> bool:
        """Delete a project with its files and their analyses; False if nothing was deleted"""

    # File operations
    @abstractmethod
    def get_file(self, file_id: int) -> Optional[Record]: ...

    @abstractmethod
    def get_files_by_project(self, project_id: int) -> List[Record]: ...

    @abstractmethod
    def create_file(self, data: Dict[str, Any]) -> Record: ...

    @abstractmethod
    def update_file(self, file_id: int, changes: Dict[str, Any]) -> Optional[Record]: ...

    @abstractmethod
    def delete_file(self, file_id: int) -> bool:
        """Delete a file and its analysis; False if nothing was deleted"""

    # Analysis operations
    @abstractmethod
    def get_analysis(self, analysis_id: int) -> Optional[Record]: ...

    @abstractmethod
    def get_analysis_by_file(self, file_id: int) -> Optional[Record]: ...

    @abstractmethod
    def create_analysis(self, data: Dict[str, Any]) -> Record: ...

    @abstractmethod
    def update_analysis(self, analysis_id: int, changes: Dict[str, Any]) -> Optional[Record]: ...


# ============================================
# IN-MEMORY STORAGE
# ============================================

class SequentialIdGenerator:
    """Independent 1, 2, 3... counters per entity kind"""

    def __init__(self, start: int = 1):
        self._start = start
        self._counters: Dict[str, Any] = {}

    def __call__(self, kind: str) -> int:
        counter = self._counters.setdefault(kind, itertools.count(self._start))
        return next(counter)


class MemoryStorage(MigrationStorage):
    """Dict-backed storage owned by whoever constructs it"""

    name = "memory"

    def __init__(
        self,
        id_generator: Optional[Callable[[str], int]] = None,
        seed_demo: bool = False,
    ):
        self._next_id = id_generator or SequentialIdGenerator()
        self._users: Dict[int, Record] = {}
        self._projects: Dict[int, Record] = {}
        self._files: Dict[int, Record] = {}
        self._analyses: Dict[int, Record] = {}

        if seed_demo:
            owner = self.create_user({"username": DEMO_USERNAME, "password": "demo"})
            for project in DEMO_PROJECTS:
                self.create_project({**project, "user_id": owner["id"]})
            logger.info(f"Seeded {len(DEMO_PROJECTS)} demo projects")

    @staticmethod
    def _now() -> datetime:
        return datetime.utcnow()

    def _insert(self, table: Dict[int, Record], kind: str, record: Record, timestamps: bool = True) -> Record:
        record["id"] = self._next_id(kind)
        now = self._now()
        record["created_at"] = now
        if timestamps:
            record["updated_at"] = now
        table[record["id"]] = record
        return copy.deepcopy(record)

    def _update(self, table: Dict[int, Record], record_id: int, changes: Record) -> Optional[Record]:
        record = table.get(record_id)
        if record is None:
            return None
        record.update(copy.deepcopy(changes))
        record["updated_at"] = self._now()
        return copy.deepcopy(record)

    @staticmethod
    def _get(table: Dict[int, Record], record_id: int) -> Optional[Record]:
        record = table.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    # User operations
    def get_user(self, user_id: int) -> Optional[Record]:
        return self._get(self._users, user_id)

    def get_user_by_username(self, username: str) -> Optional[Record]:
        for user in self._users.values():
            if user["username"] == username:
                return copy.deepcopy(user)
        return None

    def create_user(self, data: Dict[str, Any]) -> Record:
        return self._insert(self._users, "user", _pick(data, USER_FIELDS), timestamps=False)

    # Project operations
    def get_project(self, project_id: int) -> Optional[Record]:
        return self._get(self._projects, project_id)

    def list_projects(self, user_id: Optional[int] = None) -> List[Record]:
        projects = [copy.deepcopy(p) for p in self._projects.values()]
        if user_id is not None:
            projects = [p for p in projects if p.get("user_id") == user_id]
        return projects

    def create_project(self, data: Dict[str, Any]) -> Record:
        record = {field: None for field in PROJECT_FIELDS}
        record.update(copy.deepcopy(PROJECT_DEFAULTS))
        record.update(copy.deepcopy(_pick(data, PROJECT_FIELDS)))
        return self._insert(self._projects, "project", record)

    def update_project(self, project_id: int, changes: Dict[str, Any]) -> Optional[Record]:
        return self._update(self._projects, project_id, _pick(changes, PROJECT_FIELDS))

    def delete_project(self, project_id: int) -> bool:
        deleted = self._projects.pop(project_id, None) is not None

        file_ids = [f["id"] for f in self._files.values() if f["project_id"] == project_id]
        for file_id in file_ids:
            self.delete_file(file_id)

        return deleted

    # File operations
    def get_file(self, file_id: int) -> Optional[Record]:
        return self._get(self._files, file_id)

    def get_files_by_project(self, project_id: int) -> List[Record]:
        return [copy.deepcopy(f) for f in self._files.values() if f["project_id"] == project_id]

    def create_file(self, data: Dict[str, Any]) -> Record:
        record = {field: None for field in FILE_FIELDS}
        record.update(copy.deepcopy(FILE_DEFAULTS))
        record.update(copy.deepcopy(_pick(data, FILE_FIELDS)))
        return self._insert(self._files, "file", record)

    def update_file(self, file_id: int, changes: Dict[str, Any]) -> Optional[Record]:
        return self._update(self._files, file_id, _pick(changes, FILE_FIELDS))

    def delete_file(self, file_id: int) -> bool:
        deleted = self._files.pop(file_id, None) is not None

        analysis_ids = [a["id"] for a in self._analyses.values() if a["file_id"] == file_id]
        for analysis_id in analysis_ids:
            del self._analyses[analysis_id]

        return deleted

    # Analysis operations
    def get_analysis(self, analysis_id: int) -> Optional[Record]:
        return self._get(self._analyses, analysis_id)

    def get_analysis_by_file(self, file_id: int) -> Optional[Record]:
        for analysis in self._analyses.values():
            if analysis["file_id"] == file_id:
                return copy.deepcopy(analysis)
        return None

    def create_analysis(self, data: Dict[str, Any]) -> Record:
        record = {field: None for field in ANALYSIS_FIELDS}
        record.update(copy.deepcopy(ANALYSIS_DEFAULTS))
        record.update(copy.deepcopy(_pick(data, ANALYSIS_FIELDS)))
        return self._insert(self._analyses, "analysis", record)

    def update_analysis(self, analysis_id: int, changes: Dict[str, Any]) -> Optional[Record]:
        return self._update(self._analyses, analysis_id, _pick(changes, ANALYSIS_FIELDS))


# ============================================
# DATABASE STORAGE
# ============================================

def _to_dict(obj) -> Record:
    """Column values of an ORM instance"""
    return {column.name: getattr(obj, column.name) for column in obj.__table__.columns}


class DatabaseStorage(MigrationStorage):
    """SQLAlchemy-backed storage; one short session per operation"""

    name = "database"

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def _get(self, model, record_id: int) -> Optional[Record]:
        db = self.session_factory()
        try:
            obj = db.get(model, record_id)
            return _to_dict(obj) if obj else None
        finally:
            db.close()

    def _create(self, model, values: Record) -> Record:
        db = self.session_factory()
        try:
            obj = model(**values)
            db.add(obj)
            db.commit()
            db.refresh(obj)
            return _to_dict(obj)
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()

    def _update(self, model, record_id: int, changes: Record) -> Optional[Record]:
        db = self.session_factory()
        try:
            obj = db.get(model, record_id)
            if not obj:
                return None
            for key, value in changes.items():
                setattr(obj, key, value)
            db.commit()
            db.refresh(obj)
            return _to_dict(obj)
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()

    # User operations
    def get_user(self, user_id: int) -> Optional[Record]:
        return self._get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[Record]:
        db = self.session_factory()
        try:
            user = db.query(User).filter(User.username == username).first()
            return _to_dict(user) if user else None
        finally:
            db.close()

    def create_user(self, data: Dict[str, Any]) -> Record:
        return self._create(User, _pick(data, USER_FIELDS))

    # Project operations
    def get_project(self, project_id: int) -> Optional[Record]:
        return self._get(MigrationProject, project_id)

    def list_projects(self, user_id: Optional[int] = None) -> List[Record]:
        db = self.session_factory()
        try:
            query = db.query(MigrationProject)
            if user_id is not None:
                query = query.filter(MigrationProject.user_id == user_id)
            return [_to_dict(p) for p in query.order_by(MigrationProject.id).all()]
        finally:
            db.close()

    def create_project(self, data: Dict[str, Any]) -> Record:
        values = copy.deepcopy(PROJECT_DEFAULTS)
        values.update(_pick(data, PROJECT_FIELDS))
        return self._create(MigrationProject, values)

    def update_project(self, project_id: int, changes: Dict[str, Any]) -> Optional[Record]:
        return self._update(MigrationProject, project_id, _pick(changes, PROJECT_FIELDS))

    def delete_project(self, project_id: int) -> bool:
        db = self.session_factory()
        try:
            file_ids = [
                row.id for row in
                db.query(MigrationFile.id).filter(MigrationFile.project_id == project_id).all()
            ]

            # Analyses, then files, then the project
            if file_ids:
                db.query(MigrationAnalysis)\
                  .filter(MigrationAnalysis.file_id.in_(file_ids))\
                  .delete(synchronize_session=False)
            db.query(MigrationFile)\
              .filter(MigrationFile.project_id == project_id)\
              .delete(synchronize_session=False)
            deleted = db.query(MigrationProject)\
                        .filter(MigrationProject.id == project_id)\
                        .delete(synchronize_session=False)

            db.commit()
            return deleted > 0

        except SQLAlchemyError as e:
            logger.error(f"Error deleting migration project {project_id}: {e}")
            db.rollback()
            return False
        finally:
            db.close()

    # File operations
    def get_file(self, file_id: int) -> Optional[Record]:
        return self._get(MigrationFile, file_id)

    def get_files_by_project(self, project_id: int) -> List[Record]:
        db = self.session_factory()
        try:
            files = db.query(MigrationFile)\
                      .filter(MigrationFile.project_id == project_id)\
                      .order_by(MigrationFile.id)\
                      .all()
            return [_to_dict(f) for f in files]
        finally:
            db.close()

    def create_file(self, data: Dict[str, Any]) -> Record:
        values = copy.deepcopy(FILE_DEFAULTS)
        values.update(_pick(data, FILE_FIELDS))
        return self._create(MigrationFile, values)

    def update_file(self, file_id: int, changes: Dict[str, Any]) -> Optional[Record]:
        return self._update(MigrationFile, file_id, _pick(changes, FILE_FIELDS))

    def delete_file(self, file_id: int) -> bool:
        db = self.session_factory()
        try:
            db.query(MigrationAnalysis)\
              .filter(MigrationAnalysis.file_id == file_id)\
              .delete(synchronize_session=False)
            deleted = db.query(MigrationFile)\
                        .filter(MigrationFile.id == file_id)\
                        .delete(synchronize_session=False)
            db.commit()
            return deleted > 0

        except SQLAlchemyError as e:
            logger.error(f"Error deleting migration file {file_id}: {e}")
            db.rollback()
            return False
        finally:
            db.close()

    # Analysis operations
    def get_analysis(self, analysis_id: int) -> Optional[Record]:
        return self._get(MigrationAnalysis, analysis_id)

    def get_analysis_by_file(self, file_id: int) -> Optional[Record]:
        db = self.session_factory()
        try:
            analysis = db.query(MigrationAnalysis)\
                         .filter(MigrationAnalysis.file_id == file_id)\
                         .first()
            return _to_dict(analysis) if analysis else None
        finally:
            db.close()

    def create_analysis(self, data: Dict[str, Any]) -> Record:
        values = copy.deepcopy(ANALYSIS_DEFAULTS)
        values.update(_pick(data, ANALYSIS_FIELDS))
        return self._create(MigrationAnalysis, values)

    def update_analysis(self, analysis_id: int, changes: Dict[str, Any]) -> Optional[Record]:
        return self._update(MigrationAnalysis, analysis_id, _pick(changes, ANALYSIS_FIELDS))


def create_storage(settings) -> MigrationStorage:
    """Build the storage backend selected in settings"""
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStorage(seed_demo=settings.seed_demo_projects)

    from database import build_engine, build_session_factory, init_db

    engine = build_engine(settings.database_url)
    init_db(engine)
    logger.info("Database tables created/verified")
    return DatabaseStorage(build_session_factory(engine))
