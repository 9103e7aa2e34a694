"""
Service-level exceptions shared by routes and services
"""
from typing import Optional


class MigrationServiceError(Exception):
    """Base class for migration service failures"""


class AIServiceError(MigrationServiceError):
    """The external text-generation service failed or is not configured"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class NotFoundError(MigrationServiceError):
    """A requested record does not exist"""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id
