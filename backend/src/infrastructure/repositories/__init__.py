"""Repository adapters (SQLAlchemy and in-memory)"""

from .application_repository import InMemoryApplicationRepository, SqlApplicationRepository
from .editing_repository import InMemoryEditingRepository, SqlEditingRepository

__all__ = [
    "InMemoryApplicationRepository",
    "SqlApplicationRepository",
    "InMemoryEditingRepository",
    "SqlEditingRepository",
]
