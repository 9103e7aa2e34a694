"""Tests for the storage backends (in-memory and SQLite-backed)."""

from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from config import Settings
from services.storage import (
    ANALYSIS_DEFAULTS,
    DEMO_PROJECTS,
    DEMO_USERNAME,
    DatabaseStorage,
    MemoryStorage,
    SequentialIdGenerator,
    create_storage,
)
from conftest import make_file, make_project


def _analysis(storage, file_id, **overrides):
    data = {
        "file_id": file_id,
        "key_changes": [{"category": "syntax", "description": "d", "severity": "info"}],
    }
    data.update(overrides)
    return storage.create_analysis(data)


# ── Tests: Projects ───────────────────────────────────────────────────────


class TestProjects:

    def test_create_applies_defaults(self, storage):
        project = make_project(storage)

        assert isinstance(project["id"], int)
        assert project["status"] == "pending"
        assert project["total_files"] == 0
        assert project["completed_files"] == 0
        assert project["failed_files"] == 0
        assert project["created_at"] is not None
        assert storage.get_project(project["id"]) == project

    def test_unknown_fields_are_ignored(self, storage):
        project = make_project(storage, bogus="x")
        assert "bogus" not in project

    def test_update_is_partial(self, storage):
        project = make_project(storage)
        updated = storage.update_project(project["id"], {"status": "in-progress", "total_files": 4})

        assert updated["status"] == "in-progress"
        assert updated["total_files"] == 4
        assert updated["name"] == project["name"]
        assert updated["target_language"] == "Node.js"

    def test_update_missing_returns_none(self, storage):
        assert storage.update_project(12345, {"name": "x"}) is None
        assert storage.get_project(12345) is None

    def test_list_filters_by_user(self, storage):
        owner = storage.create_user({"username": "ada", "password": "pw"})
        mine = make_project(storage, name="Mine", user_id=owner["id"])
        make_project(storage, name="Other")

        assert [p["id"] for p in storage.list_projects(user_id=owner["id"])] == [mine["id"]]
        assert len(storage.list_projects()) == 2


# ── Tests: Files & Analyses ───────────────────────────────────────────────


class TestFilesAndAnalyses:

    def test_files_by_project(self, storage):
        p1 = make_project(storage)
        p2 = make_project(storage, name="Second")
        a = make_file(storage, p1["id"], file_name="a.py")
        b = make_file(storage, p1["id"], file_name="b.py")
        make_file(storage, p2["id"], file_name="c.py")

        assert [f["id"] for f in storage.get_files_by_project(p1["id"])] == [a["id"], b["id"]]
        assert storage.get_files_by_project(999) == []
        assert a["status"] == "pending"

    def test_json_payloads_round_trip(self, storage):
        project = make_project(storage)
        file = make_file(storage, project["id"])
        storage.update_file(file["id"], {"status": "failed", "migration_errors": {"message": "boom"}})

        assert storage.get_file(file["id"])["migration_errors"] == {"message": "boom"}

    def test_analysis_lookup_and_update(self, storage):
        project = make_project(storage)
        file = make_file(storage, project["id"])
        analysis = _analysis(storage, file["id"], performance_metrics={
            "speed": {"name": "speed", "score": 80.0, "description": None}
        })

        assert storage.get_analysis_by_file(file["id"])["id"] == analysis["id"]
        assert storage.get_analysis_by_file(999) is None

        updated = storage.update_analysis(analysis["id"], {"generated_tests": "test()"})
        assert updated["generated_tests"] == "test()"
        assert updated["performance_metrics"]["speed"]["score"] == 80.0

    def test_delete_file_removes_its_analysis(self, storage):
        project = make_project(storage)
        file = make_file(storage, project["id"])
        analysis = _analysis(storage, file["id"])

        assert storage.delete_file(file["id"]) is True
        assert storage.get_file(file["id"]) is None
        assert storage.get_analysis(analysis["id"]) is None
        assert storage.delete_file(file["id"]) is False


# ── Tests: Cascading delete ───────────────────────────────────────────────


class TestDeleteProject:

    def test_removes_files_and_analyses(self, storage):
        project = make_project(storage)
        keep = make_project(storage, name="Keep")
        files = [make_file(storage, project["id"], file_name=n) for n in ("a.py", "b.py")]
        analyses = [_analysis(storage, f["id"]) for f in files]
        kept_file = make_file(storage, keep["id"])

        assert storage.delete_project(project["id"]) is True

        assert storage.get_project(project["id"]) is None
        assert storage.get_files_by_project(project["id"]) == []
        assert all(storage.get_file(f["id"]) is None for f in files)
        assert all(storage.get_analysis_by_file(f["id"]) is None for f in files)
        assert all(storage.get_analysis(a["id"]) is None for a in analyses)
        assert storage.get_file(kept_file["id"]) is not None

    def test_missing_project_reports_false(self, storage):
        assert storage.delete_project(4242) is False

    def test_database_error_is_logged_and_reported_false(self):
        session = MagicMock()
        session.query.side_effect = OperationalError("DELETE", {}, Exception("disk I/O error"))
        storage = DatabaseStorage(lambda: session)

        assert storage.delete_project(1) is False
        session.rollback.assert_called_once()
        session.close.assert_called_once()


# ── Tests: Memory backend specifics ───────────────────────────────────────


class TestMemoryStorage:

    def test_injected_id_generator(self):
        ids = iter([100, 200, 300])
        storage = MemoryStorage(id_generator=lambda kind: next(ids))

        project = make_project(storage)
        file = make_file(storage, project["id"])
        assert (project["id"], file["id"]) == (100, 200)

    def test_sequential_ids_are_per_kind(self):
        generator = SequentialIdGenerator()
        assert [generator("project"), generator("project"), generator("file")] == [1, 2, 1]

    def test_instances_are_isolated(self):
        first, second = MemoryStorage(), MemoryStorage()
        make_project(first)
        assert second.list_projects() == []

    def test_returned_records_are_copies(self):
        storage = MemoryStorage()
        project = make_project(storage)
        project["name"] = "changed"
        assert storage.get_project(project["id"])["name"] == "API Migration"

    def test_seed_demo(self):
        storage = MemoryStorage(seed_demo=True)
        assert [p["name"] for p in storage.list_projects()] == [p["name"] for p in DEMO_PROJECTS]

    def test_seeded_projects_belong_to_the_demo_user(self):
        storage = MemoryStorage(seed_demo=True)
        owner = storage.get_user_by_username(DEMO_USERNAME)

        assert owner is not None
        assert {p["user_id"] for p in storage.list_projects()} == {owner["id"]}

    def test_defaults_are_copied_per_record(self):
        storage = MemoryStorage()
        project = make_project(storage)
        first = storage.create_analysis({"file_id": make_file(storage, project["id"])["id"]})
        second = storage.create_analysis({"file_id": make_file(storage, project["id"])["id"]})

        stored = [storage._analyses[first["id"]], storage._analyses[second["id"]]]
        stored[0]["key_changes"].append({"category": "c", "description": "d", "severity": "info"})

        assert stored[1]["key_changes"] == []
        assert ANALYSIS_DEFAULTS["key_changes"] == []


class TestCreateStorage:

    def test_memory_backend(self):
        storage = create_storage(Settings(storage_backend="memory", seed_demo_projects=True))
        assert storage.name == "memory"
        assert len(storage.list_projects()) == 3

    def test_database_backend(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'migrations.db'}"
        storage = create_storage(Settings(storage_backend="database", database_url=url))
        assert storage.name == "database"
        assert storage.list_projects() == []
