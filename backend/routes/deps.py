"""
Request dependencies
Resolves the per-process services attached to app.state by main.create_app
"""
from fastapi import Request

from services.migration_service import MigrationService
from services.notifier import ChangeNotifier
from services.storage import MigrationStorage


def get_storage(request: Request) -> MigrationStorage:
    """
    Storage backend for this process

    Usage in routes:
        @router.get("/items")
        async def list_items(storage: MigrationStorage = Depends(get_storage)):
            ...
    """
    return request.app.state.storage


def get_notifier(request: Request) -> ChangeNotifier:
    return request.app.state.notifier


def get_migration_service(request: Request) -> MigrationService:
    return request.app.state.migration_service
