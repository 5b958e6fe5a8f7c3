"""Editing request repository adapters"""

from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.editing.models import EditingRecord
from domain.editing.ports import EditingRepositoryPort
from models.editing_request import EditingRequest


class SqlEditingRepository(EditingRepositoryPort):

    def __init__(self, db: Session):
        self.db = db

    def load(self, email: str) -> Optional[EditingRecord]:
        row = self.db.get(EditingRequest, email)
        if row is None:
            return None
        return EditingRecord.model_validate(row.payload)

    def save(self, record: EditingRecord) -> None:
        row = self.db.get(EditingRequest, record.email)
        if row is None:
            row = EditingRequest(email=record.email)
            self.db.add(row)

        row.status = record.status.value
        row.payment_status = record.payment_status.value
        row.payload = record.model_dump(mode="json")
        row.created_at = record.created_at
        row.updated_at = record.updated_at
        self.db.commit()

    def delete(self, email: str) -> bool:
        row = self.db.get(EditingRequest, email)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def list_all(self) -> List[EditingRecord]:
        query = select(EditingRequest).order_by(EditingRequest.created_at.desc())
        rows = self.db.execute(query).scalars().all()
        return [EditingRecord.model_validate(row.payload) for row in rows]


class InMemoryEditingRepository(EditingRepositoryPort):

    def __init__(self):
        self._records: Dict[str, dict] = {}

    def load(self, email: str) -> Optional[EditingRecord]:
        payload = self._records.get(email)
        return EditingRecord.model_validate(payload) if payload is not None else None

    def save(self, record: EditingRecord) -> None:
        self._records[record.email] = record.model_dump(mode="json")

    def delete(self, email: str) -> bool:
        return self._records.pop(email, None) is not None

    def list_all(self) -> List[EditingRecord]:
        records = [EditingRecord.model_validate(p) for p in self._records.values()]
        return sorted(records, key=lambda r: r.created_at, reverse=True)
