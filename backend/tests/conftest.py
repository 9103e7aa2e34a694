"""Shared fixtures: storage backends, a scripted AI service and event listeners."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from config import Settings
from database import build_session_factory, init_db
from main import create_app
from services.notifier import ChangeNotifier
from services.storage import DatabaseStorage, MemoryStorage


ANALYSIS_REPLY = {
    "keyChanges": [
        {"category": "syntax", "description": "print statement became console.log", "severity": "info"},
        {"category": "async", "description": "callbacks replaced by promises", "severity": "warning"},
    ],
    "performanceMetrics": {"runtime": {"score": 85, "description": "comparable"}},
    "businessLogicPreservation": {"validation": 95},
    "generatedTests": "test('adds', () => expect(add(1, 2)).toBe(3));",
}

PROJECT_REPORT = {
    "project_overview": "Small utility library",
    "migration_complexity": "Simple",
    "key_challenges": ["dynamic typing"],
    "recommended_changes": [],
    "dependencies": ["jest"],
    "testing_strategy": "Port the unit tests first",
}


def make_ai_service():
    """AI service double with awaitable methods and canned replies."""
    ai = MagicMock()
    ai.enabled = True
    ai.translate = AsyncMock(side_effect=lambda code, *args, **kwargs: f"// migrated\n{code}")
    ai.analyze_migration = AsyncMock(return_value=dict(ANALYSIS_REPLY))
    ai.generate_tests = AsyncMock(return_value="describe('add', () => {});")
    ai.summarize_project = AsyncMock(return_value=json.dumps(PROJECT_REPORT))
    return ai


class FakeListener:
    """Stands in for a WebSocket: records every message sent to it."""

    def __init__(self, fail=False):
        self.fail = fail
        self.messages = []

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("connection closed")
        self.messages.append(message)

    def types(self):
        return [m["type"] for m in self.messages]


def make_project(storage, **overrides):
    data = {
        "name": "API Migration",
        "migration_type": "Framework Transition",
        "source_language": "Python",
        "source_version": "3.8",
        "target_language": "Node.js",
        "target_version": "16.x",
    }
    data.update(overrides)
    return storage.create_project(data)


def make_file(storage, project_id, **overrides):
    data = {
        "project_id": project_id,
        "file_name": "app.py",
        "file_path": "src/app.py",
        "source_code": "print('hello')",
    }
    data.update(overrides)
    return storage.create_file(data)


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def database_storage():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield DatabaseStorage(build_session_factory(engine))
    engine.dispose()


@pytest.fixture(params=["memory", "database"])
def storage(request):
    """Each storage test runs against both backends."""
    return request.getfixturevalue(f"{request.param}_storage")


@pytest.fixture
def ai_service():
    return make_ai_service()


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def listener(notifier):
    fake = FakeListener()
    notifier.register(fake)
    return fake


@pytest.fixture
def settings():
    return Settings(openai_api_key="", storage_backend="memory", summary_sample_size=3)


@pytest.fixture
def app(settings, memory_storage, ai_service, notifier):
    return create_app(
        settings=settings,
        storage=memory_storage,
        ai_service=ai_service,
        notifier=notifier,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
