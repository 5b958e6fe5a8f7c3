"""Base SQLAlchemy declarative base for the portal tables"""

from sqlalchemy import Column, DateTime, JSON, Text, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base


class PortableJSONB(TypeDecorator):
    """JSON type that works with both PostgreSQL (JSONB) and SQLite (JSON).

    Record payloads are stored as JSONB on PostgreSQL and as plain JSON on
    SQLite (unit tests).
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


Base = declarative_base()


class RecordRowMixin:
    """Columns shared by tables that hold one JSON aggregate per email.

    status/created_at/updated_at are denormalized from the payload so admin
    listings can filter and sort without decoding every record.
    """
    email = Column(Text, primary_key=True)
    status = Column(Text, nullable=False, index=True)
    payload = Column(PortableJSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)
