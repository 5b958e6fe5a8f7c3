"""Editing Repository Port - Domain interface for editing request storage."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import EditingRecord


class EditingRepositoryPort(ABC):
    """One EditingRecord per email, last write wins."""

    @abstractmethod
    def load(self, email: str) -> Optional[EditingRecord]:
        pass

    @abstractmethod
    def save(self, record: EditingRecord) -> None:
        pass

    @abstractmethod
    def delete(self, email: str) -> bool:
        pass

    @abstractmethod
    def list_all(self) -> List[EditingRecord]:
        """Return every editing request, newest first."""
        pass
