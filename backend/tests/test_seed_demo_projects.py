"""Tests for the demo project seed script."""

from scripts.seed_demo_projects import DEMO_USERNAME, seed_demo_projects
from services.storage import DEMO_PROJECTS


class TestSeedDemoProjects:

    def test_creates_user_and_projects(self, storage):
        assert seed_demo_projects(storage) == len(DEMO_PROJECTS)

        user = storage.get_user_by_username(DEMO_USERNAME)
        projects = storage.list_projects(user_id=user["id"])
        assert sorted(p["name"] for p in projects) == ["API Migration", "Auth Service", "Payment Module"]

    def test_is_idempotent(self, storage):
        seed_demo_projects(storage)
        assert seed_demo_projects(storage) == 0
        assert len(storage.list_projects()) == len(DEMO_PROJECTS)

    def test_dry_run_changes_nothing(self, storage):
        assert seed_demo_projects(storage, dry_run=True) == len(DEMO_PROJECTS)
        assert storage.list_projects() == []
        assert storage.get_user_by_username(DEMO_USERNAME) is None
