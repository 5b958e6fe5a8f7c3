"""Application Repository Port - Domain interface for applicant record storage.

One record per applicant email. save() overwrites the stored record
(last write wins); callers load, transition and save within one operation.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import ApplicationRecord


class ApplicationRepositoryPort(ABC):
    """Port interface for persisting ApplicationRecord aggregates."""

    @abstractmethod
    def load(self, email: str) -> Optional[ApplicationRecord]:
        """Return the record for email, or None if no application exists."""
        pass

    @abstractmethod
    def save(self, record: ApplicationRecord) -> None:
        """Insert or replace the record keyed by record.email."""
        pass

    @abstractmethod
    def delete(self, email: str) -> bool:
        """Delete the record. Returns False if it didn't exist."""
        pass

    @abstractmethod
    def list_all(self) -> List[ApplicationRecord]:
        """Return every record, newest first (by created_at)."""
        pass
