"""Application repository adapters"""

from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.applications.models import ApplicationRecord
from domain.applications.ports import ApplicationRepositoryPort
from models.application import Application


class SqlApplicationRepository(ApplicationRepositoryPort):
    """Stores each ApplicationRecord as one JSON row keyed by email.

    Every save/delete commits immediately; one portal operation is one
    transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def load(self, email: str) -> Optional[ApplicationRecord]:
        row = self.db.get(Application, email)
        if row is None:
            return None
        return ApplicationRecord.model_validate(row.payload)

    def save(self, record: ApplicationRecord) -> None:
        row = self.db.get(Application, record.email)
        if row is None:
            row = Application(email=record.email)
            self.db.add(row)

        row.status = record.status.value
        row.upload_count = record.upload_count
        row.payload = record.model_dump(mode="json")
        row.created_at = record.created_at
        row.updated_at = record.updated_at
        self.db.commit()

    def delete(self, email: str) -> bool:
        row = self.db.get(Application, email)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def list_all(self) -> List[ApplicationRecord]:
        query = select(Application).order_by(Application.created_at.desc())
        rows = self.db.execute(query).scalars().all()
        return [ApplicationRecord.model_validate(row.payload) for row in rows]


class InMemoryApplicationRepository(ApplicationRepositoryPort):
    """Dict-backed repository for tests and local runs without a database."""

    def __init__(self):
        self._records: Dict[str, dict] = {}

    def load(self, email: str) -> Optional[ApplicationRecord]:
        payload = self._records.get(email)
        return ApplicationRecord.model_validate(payload) if payload is not None else None

    def save(self, record: ApplicationRecord) -> None:
        self._records[record.email] = record.model_dump(mode="json")

    def delete(self, email: str) -> bool:
        return self._records.pop(email, None) is not None

    def list_all(self) -> List[ApplicationRecord]:
        records = [ApplicationRecord.model_validate(p) for p in self._records.values()]
        return sorted(records, key=lambda r: r.created_at, reverse=True)
